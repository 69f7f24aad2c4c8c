# classbook/repositories/base_repository.py
"""
Generic data access shared by every classbook table.

Repositories flush but never commit; the calling service owns the
transaction so a webhook's enrollment update, bookings and payment land
together or not at all. Every SQLAlchemy failure is re-raised as
``RepositoryException``.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from classbook.core.exceptions import RepositoryException

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    CRUD over one mapped model.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        """Name of the bound database dialect, e.g. ``postgresql`` or ``sqlite``."""
        return self.db.get_bind().dialect.name

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        try:
            query = self._build_query().filter(self.model.id == id)
            if load_relationships:
                query = self._apply_eager_loading(query)
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}") from e

    def create(self, **kwargs: Any) -> T:
        """Add a row and flush so its id and defaults are populated."""
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            self.logger.error("Integrity error creating %s: %s", self.model.__name__, exc)
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}") from e

    def flush(self) -> None:
        self.db.flush()

    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """Set the given attributes on an existing row. Returns None if the row is missing."""
        try:
            entity = self.get_by_id(id, load_relationships=False)
            if entity is None:
                return None
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            self.logger.error(f"Integrity error updating {self.model.__name__} {id}: {exc}")
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to update {self.model.__name__}: {str(e)}") from e

    def delete(self, id: str) -> bool:
        try:
            entity = self.get_by_id(id, load_relationships=False)
            if entity is None:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}") from e

    def exists(self, **kwargs: Any) -> bool:
        return self.find_one_by(**kwargs) is not None

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        try:
            return self._build_query().filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding {self.model.__name__} by {kwargs}: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}") from e

    # Helpers for subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        """Relationships ``get_by_id`` loads up front; subclasses override."""
        return query

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[Any]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}") from e

    def _execute_scalar(self, query: Query) -> Any:
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            self.logger.error(f"Scalar query error: {str(e)}")
            raise RepositoryException(f"Scalar query failed: {str(e)}") from e


class AppendOnlyRepository(BaseRepository[T]):
    """Repository for ledgers whose rows are written once and never changed."""

    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        raise RepositoryException(f"{self.model.__name__} records are append-only")

    def delete(self, id: str) -> bool:
        raise RepositoryException(f"{self.model.__name__} records are append-only")
