"""Base repository pattern implementation.

This module provides a generic repository that the forum repositories
build on. Repositories flush but leave committing to the caller, so a
service decides where one unit of work ends.
"""

from typing import Generic, TypeVar, cast
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Generic repository with common CRUD operations.

    Example:
        ```python
        class DiscussionRepository(BaseRepository[Discussion]):
            resource_name = "Discussion"

            def __init__(self, db: Session):
                super().__init__(db, Discussion)
        ```
    """

    resource_name = "Resource"

    def __init__(self, db: Session, model: type[ModelType]):
        """Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy session.
            model: The model class this repository operates on.
        """
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> ModelType | None:
        """Get a single entity by ID.

        Args:
            entity_id: The UUID of the entity.

        Returns:
            The entity if found, None otherwise.
        """
        result = self.db.query(self.model).filter(self.model.id == entity_id).first()  # type: ignore[attr-defined]
        return cast(ModelType | None, result)

    def get_or_404(self, entity_id: UUID) -> ModelType:
        """Get a single entity by ID or raise NotFoundError."""
        instance = self.get_by_id(entity_id)
        if instance is None:
            raise NotFoundError(f"{self.resource_name} not found", resource=self.resource_name)
        return instance

    def count(self) -> int:
        result: int = self.db.query(self.model).count()
        return result

    def add(self, instance: ModelType) -> ModelType:
        """Stage a new entity and flush so store-assigned values are populated."""
        self.db.add(instance)
        self.db.flush()
        return instance

    def delete(self, instance: ModelType) -> None:
        self.db.delete(instance)
        self.db.flush()

    def exists(self, entity_id: UUID) -> bool:
        return self.get_by_id(entity_id) is not None
