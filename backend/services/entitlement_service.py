"""
Entitlement Service

Config-driven implementation of the billing gate for custom actions. A host
backed by a real billing system injects its own IEntitlementGate instead.
"""
import logging
from typing import FrozenSet, Optional

from config.dto_config import DtoSettings
from exceptions import EntitlementError
from services.interfaces import IEntitlementGate

logger = logging.getLogger(__name__)


class StaticEntitlementGate(IEntitlementGate):
    """Entitlement gate backed by an allow-list of workspaces"""

    def __init__(
        self,
        entitled_workspace_ids: Optional[FrozenSet[str]] = None,
        plan: Optional[str] = None
    ):
        """
        Args:
            entitled_workspace_ids: Allowed workspaces (None allows every workspace)
            plan: Plan name reported for every workspace
        """
        self.entitled_workspace_ids = entitled_workspace_ids
        self.plan = plan

    @classmethod
    def from_settings(cls, settings: DtoSettings) -> "StaticEntitlementGate":
        return cls(settings.entitled_workspace_ids, settings.default_plan)

    def check_custom_actions_entitlement(self, workspace_id: Optional[str]) -> None:
        if self.entitled_workspace_ids is None:
            return
        if workspace_id not in self.entitled_workspace_ids:
            logger.warning(f"Workspace {workspace_id} is not entitled to custom actions")
            raise EntitlementError(workspace_id)

    def get_subscription_plan(self, workspace_id: Optional[str]) -> Optional[str]:
        return self.plan
