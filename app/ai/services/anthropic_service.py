from typing import NamedTuple

import anthropic
import structlog

from app.core.config import settings

logger = structlog.get_logger(__name__)


class Completion(NamedTuple):
    text: str
    tokens_used: int | None
    model: str


def _client() -> anthropic.Anthropic:
    return anthropic.Anthropic(
        api_key=settings.ANTHROPIC_API_KEY,
        timeout=settings.ANTHROPIC_TIMEOUT_SECONDS,
        max_retries=settings.ANTHROPIC_MAX_RETRIES,
    )


def call_anthropic(
    system_prompt: str,
    messages: list[dict[str, str]],
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> Completion:
    """Send a single Messages API request and flatten the text blocks.

    Unpacks as ``(text, tokens_used, model)``. Provider errors
    (``anthropic.APIError`` and subclasses) propagate to the caller.
    """
    max_tokens = max_tokens or settings.ANTHROPIC_MAX_TOKENS
    if temperature is None:
        temperature = settings.ANTHROPIC_TEMPERATURE

    response = _client().messages.create(
        model=settings.ANTHROPIC_MODEL,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system_prompt,
        messages=messages,  # type: ignore[arg-type]
    )

    parts = [block.text for block in response.content if block.type == "text"]
    usage = response.usage
    tokens_used = usage.input_tokens + usage.output_tokens if usage else None

    logger.info(
        "anthropic_completion",
        model=response.model,
        tokens_used=tokens_used,
        stop_reason=response.stop_reason,
    )
    if response.stop_reason == "max_tokens":
        logger.warning("anthropic_completion_truncated", max_tokens=max_tokens)

    return Completion("".join(parts), tokens_used, response.model)
