"""Base repository pattern implementation.

This module provides a generic repository pattern that can be used
as a base for domain-specific repositories.
"""

from typing import Generic, TypeVar, cast

from sqlalchemy.orm import Session

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Generic repository with common persistence operations.

    Example:
        ```python
        class SystemSettingRepository(BaseRepository[SystemSetting]):
            def __init__(self, db: Session):
                super().__init__(db, SystemSetting)

            def find_by_key(self, key: str) -> SystemSetting | None:
                return self.db.query(self.model).filter(self.model.key == key).first()
        ```
    """

    def __init__(self, db: Session, model: type[ModelType]):
        """Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy session.
            model: The model class this repository operates on.
        """
        self.db = db
        self.model = model

    def get_all(self, *order_by: object) -> list[ModelType]:
        """Get all entities, optionally ordered.

        Args:
            *order_by: Column expressions passed to ``order_by``.

        Returns:
            List of entities.
        """
        query = self.db.query(self.model)
        if order_by:
            query = query.order_by(*order_by)
        return cast(list[ModelType], query.all())

    def create(self, **kwargs: object) -> ModelType:
        """Create a new entity.

        Args:
            **kwargs: Entity attributes.

        Returns:
            The created entity.
        """
        instance = self.model(**kwargs)  # type: ignore[call-arg]
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance

    def update(self, instance: ModelType, **kwargs: object) -> ModelType:
        """Update an existing entity.

        Args:
            instance: The entity to update.
            **kwargs: Attributes to update.

        Returns:
            The updated entity.
        """
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        self.db.commit()
        self.db.refresh(instance)
        return instance
