import json

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    BACKEND_CORS_ORIGINS: str = (
        '["http://localhost:5173","http://localhost:3000","http://localhost:3001"]'
    )

    API_V1_PREFIX: str = "/api/v1"
    AI_PREFIX: str = "/api/ai"
    PROJECT_NAME: str = "LMS Forum API"
    DEBUG: bool = False

    # Forum paging
    FORUM_DEFAULT_PAGE_SIZE: int = 10
    REPLIES_DEFAULT_PAGE_SIZE: int = 20
    FORUM_MAX_PAGE_SIZE: int = 100
    POPULAR_TAGS_LIMIT: int = 50
    STATS_TOP_TAGS_LIMIT: int = 10

    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-sonnet-4-20250514"
    ANTHROPIC_MAX_TOKENS: int = 4096
    ANTHROPIC_TEMPERATURE: float = 0.7
    ANTHROPIC_TIMEOUT_SECONDS: float = 60.0
    ANTHROPIC_MAX_RETRIES: int = 2

    QUIZ_MAX_QUESTIONS: int = 20
    QUIZ_RATE_LIMIT: str = "10/minute"
    RATE_LIMIT_ENABLED: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
                return parsed
            except json.JSONDecodeError:
                return ["http://localhost:5173", "http://localhost:3000"]
        return self.BACKEND_CORS_ORIGINS


settings = Settings()
