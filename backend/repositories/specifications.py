"""
Specification Pattern Implementation

Query criteria as small composable objects. Each specification can be
checked against an in-memory candidate (is_satisfied_by) and rendered as a
SQLAlchemy filter (to_sql_filter), so the same rule selects rows in the
database and filters collections that were already loaded.

Specifications compose with & (AND), | (OR) and ~ (NOT); combine() folds a
list of them with an explicit combinator.
"""

from abc import ABC, abstractmethod
from functools import reduce
from typing import Generic, Iterable, List, TypeVar

from sqlalchemy import and_, or_, not_, true


T = TypeVar('T')

AND = "AND"
OR = "OR"


class Specification(ABC, Generic[T]):
    """
    Abstract base class for specifications.

    A specification encapsulates a single query criterion.
    """

    @abstractmethod
    def is_satisfied_by(self, candidate: T) -> bool:
        """
        Check if a candidate object satisfies this specification.

        Args:
            candidate: Object to check

        Returns:
            True if candidate satisfies specification
        """

    @abstractmethod
    def to_sql_filter(self):
        """
        Convert specification to SQLAlchemy filter expression.

        Must agree with is_satisfied_by for every row, NULLs included.
        """

    def __and__(self, other: "Specification[T]") -> "AndSpecification[T]":
        return AndSpecification(self, other)

    def __or__(self, other: "Specification[T]") -> "OrSpecification[T]":
        return OrSpecification(self, other)

    def __invert__(self) -> "NotSpecification[T]":
        return NotSpecification(self)


class MatchAllSpecification(Specification[T]):
    """Specification every candidate satisfies."""

    def is_satisfied_by(self, candidate: T) -> bool:
        return True

    def to_sql_filter(self):
        return true()


class AndSpecification(Specification[T]):
    """Specification that combines two specifications with AND."""

    def __init__(self, left: Specification[T], right: Specification[T]):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: T) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)

    def to_sql_filter(self):
        return and_(self.left.to_sql_filter(), self.right.to_sql_filter())


class OrSpecification(Specification[T]):
    """Specification that combines two specifications with OR."""

    def __init__(self, left: Specification[T], right: Specification[T]):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: T) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)

    def to_sql_filter(self):
        return or_(self.left.to_sql_filter(), self.right.to_sql_filter())


class NotSpecification(Specification[T]):
    """
    Specification that negates another specification.

    Leaf specifications render NULL-safe SQL, so NOT never turns an unknown
    into a silent miss.
    """

    def __init__(self, spec: Specification[T]):
        self.spec = spec

    def is_satisfied_by(self, candidate: T) -> bool:
        return not self.spec.is_satisfied_by(candidate)

    def to_sql_filter(self):
        return not_(self.spec.to_sql_filter())


def combine(specs: Iterable[Specification[T]], combinator: str = AND) -> Specification[T]:
    """
    Fold specifications into one.

    Args:
        specs: Specifications to combine
        combinator: "AND" (default) or "OR"

    Returns:
        Combined specification; an empty input matches everything

    Raises:
        ValueError: If combinator is not AND/OR
    """
    specs = list(specs)
    if combinator not in (AND, OR):
        raise ValueError(f"Unknown combinator: {combinator}")
    if not specs:
        return MatchAllSpecification()
    if combinator == AND:
        return reduce(lambda left, right: left & right, specs)
    return reduce(lambda left, right: left | right, specs)


def filter_by_spec(candidates: Iterable[T], spec: Specification[T]) -> List[T]:
    """Return the candidates satisfying spec, preserving order."""
    return [candidate for candidate in candidates if spec.is_satisfied_by(candidate)]
