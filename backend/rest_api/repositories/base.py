"""
Base Repository implementation.
Provides common data access patterns shared by every repository.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from shared.config.constants import Limits


ModelT = TypeVar("ModelT")


@dataclass
class RepositoryFilters:
    """Base filters for repository queries."""

    # Pagination
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    def __post_init__(self):
        """Validate and normalize filters."""
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Repositories never commit: the calling service owns the unit of work
    (see shared.infrastructure.db.transaction).

    Subclasses must implement:
    - model: Return the SQLAlchemy model class
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    def _base_query(self) -> Select:
        """Base query; override to add eager loading or default ordering."""
        return select(self.model)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        """Apply entity-specific filters to query."""
        return query

    def find_all(self, filters: RepositoryFilters | None = None) -> Sequence[ModelT]:
        """Find all entities matching filters, paginated."""
        filters = filters or RepositoryFilters()
        query = self._apply_filters(self._base_query(), filters)
        query = query.offset(filters.offset).limit(filters.limit)
        return self._db.execute(query).scalars().unique().all()

    def find_by_id(self, entity_id: str) -> ModelT | None:
        """Find entity by ID."""
        return self._db.get(self.model, entity_id)

    def count(self, *criteria: Any) -> int:
        """Count entities matching the given WHERE criteria."""
        query = select(func.count()).select_from(self.model)
        if criteria:
            query = query.where(*criteria)
        return self._db.scalar(query) or 0

    def exists(self, entity_id: str) -> bool:
        """Check if entity exists."""
        return self.count(self.model.id == entity_id) > 0

    def create(self, **values: Any) -> ModelT:
        """Add a new entity and flush so its ID is available."""
        entity = self.model(**values)
        self._db.add(entity)
        self._db.flush()
        return entity

    def update(self, entity: ModelT, **values: Any) -> ModelT:
        """Set attributes on an entity and flush."""
        for key, value in values.items():
            setattr(entity, key, value)
        self._db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self._db.delete(entity)
        self._db.flush()
