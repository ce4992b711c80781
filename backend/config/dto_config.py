"""
DTO Service Configuration

Reads the feature flag and tuning knobs for the DTO metadata services from
environment variables and freezes them into a DtoSettings value. Services
receive the value through their constructor and never consult os.environ
themselves, so tests can build any combination of flags directly.
"""
import os
import logging
from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional

from constants import EnvKeys, Defaults
from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_TRUTHY = ('true', '1', 'yes')


@dataclass(frozen=True)
class DtoSettings:
    """
    Immutable configuration for the DTO services.

    Attributes:
        custom_actions_enabled: Capability flag; when off, creating
            operations are silent no-ops
        max_edit_attempts: Optimistic-retry bound for edits and default DTO refreshes
        entitled_workspace_ids: Workspaces allowed to use custom actions
            (None means every workspace)
        default_plan: Subscription plan reported in analytics events
    """

    custom_actions_enabled: bool = False
    max_edit_attempts: int = Defaults.MAX_EDIT_ATTEMPTS
    entitled_workspace_ids: Optional[FrozenSet[str]] = None
    default_plan: str = Defaults.SUBSCRIPTION_PLAN


def _parse_flag(value: Optional[str]) -> bool:
    return (value or 'false').strip().lower() in _TRUTHY


def _parse_workspaces(value: Optional[str]) -> Optional[FrozenSet[str]]:
    if value is None or value.strip() == '':
        return None
    return frozenset(part.strip() for part in value.split(',') if part.strip())


def load_settings(environ: Optional[Mapping[str, str]] = None) -> DtoSettings:
    """
    Build DtoSettings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        DtoSettings instance

    Raises:
        ConfigurationError: If DTO_MAX_EDIT_ATTEMPTS is not a positive integer
    """
    env = os.environ if environ is None else environ

    raw_attempts = env.get(EnvKeys.MAX_EDIT_ATTEMPTS)
    max_attempts = Defaults.MAX_EDIT_ATTEMPTS
    if raw_attempts is not None:
        try:
            max_attempts = int(raw_attempts)
        except ValueError:
            raise ConfigurationError(
                f"{EnvKeys.MAX_EDIT_ATTEMPTS} must be an integer, got {raw_attempts!r}",
                key=EnvKeys.MAX_EDIT_ATTEMPTS
            )
        if max_attempts < 1:
            raise ConfigurationError(
                f"{EnvKeys.MAX_EDIT_ATTEMPTS} must be at least 1",
                key=EnvKeys.MAX_EDIT_ATTEMPTS
            )

    settings = DtoSettings(
        custom_actions_enabled=_parse_flag(env.get(EnvKeys.CUSTOM_ACTIONS_ENABLED)),
        max_edit_attempts=max_attempts,
        entitled_workspace_ids=_parse_workspaces(env.get(EnvKeys.ENTITLED_WORKSPACES)),
        default_plan=env.get(EnvKeys.DEFAULT_PLAN) or Defaults.SUBSCRIPTION_PLAN,
    )

    if settings.custom_actions_enabled:
        logger.info("Custom actions ENABLED")
    else:
        logger.info("Custom actions DISABLED (default DTO sync is a no-op)")

    return settings
