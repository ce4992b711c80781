"""
Name Validator Service

Identifier-syntax checks for DTO names and enum member names. Pure
functions, no database access; uniqueness checks live in the services that
own the names.
"""
import re
import logging

from constants import NameRules
from exceptions import InvalidNameError

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(NameRules.PATTERN)


class NameValidator:
    """Validator for DTO and enum member identifiers"""

    @staticmethod
    def is_valid(name: object) -> bool:
        """
        Check a name against ^[a-zA-Z0-9._-]{1,249}$.

        Args:
            name: Candidate name

        Returns:
            True if the name is a string matching the identifier syntax
        """
        return isinstance(name, str) and _NAME_RE.fullmatch(name) is not None

    @staticmethod
    def validate_dto_name(name: str) -> None:
        """
        Raises:
            InvalidNameError: If the DTO name breaks the identifier syntax
        """
        if not NameValidator.is_valid(name):
            logger.debug(f"Rejected DTO name {name!r}")
            raise InvalidNameError(name, kind="moduleDto")

    @staticmethod
    def validate_enum_member_name(name: str) -> None:
        """
        Raises:
            InvalidNameError: If the enum member name breaks the identifier syntax
        """
        if not NameValidator.is_valid(name):
            logger.debug(f"Rejected enum member name {name!r}")
            raise InvalidNameError(name, kind="Enum member")


def validate_name(name: str) -> None:
    """Shorthand for NameValidator.validate_dto_name."""
    NameValidator.validate_dto_name(name)
