"""
Base repository providing common row-level operations.
"""

from typing import Generic, TypeVar, List, Optional, Type
from sqlalchemy.orm import Session

from .specifications import Specification

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Generic base repository over one SQLAlchemy model.

    Works with live ORM rows; subclasses decide what they hand out to
    services. Only flushes, the session owner commits.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize the repository.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def add(self, obj: T) -> T:
        """Insert a new row and flush so defaults are populated."""
        self.db.add(obj)
        self.db.flush()
        return obj

    def find_rows(self, spec: Optional[Specification] = None) -> List[T]:
        """
        Retrieve rows matching a specification.

        Args:
            spec: Specification to filter by (None returns every row)

        Returns:
            List of model instances in insertion order
        """
        query = self.db.query(self.model).populate_existing()
        if spec is not None:
            query = query.filter(spec.to_sql_filter())
        return query.order_by(self.model.created_at, self.model.id).all()

    def remove(self, obj: T) -> None:
        self.db.delete(obj)
        self.db.flush()

    def count(self, spec: Optional[Specification] = None) -> int:
        query = self.db.query(self.model)
        if spec is not None:
            query = query.filter(spec.to_sql_filter())
        return query.count()
