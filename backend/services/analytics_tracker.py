"""
Analytics Tracker

Best-effort side channel for DTO events. The tracker looks up the
requester's plan, attaches it to the event and hands it to the sink; any
failure along the way is logged and dropped so a broken analytics backend
never rolls back a DTO mutation.
"""
import logging
from typing import Any, Dict, Optional

from constants import EventType
from dtos.internal.schema_descriptors import Requester
from services.interfaces import IAnalyticsSink, IEntitlementGate
from utils.logging_utils import StructuredLogger

logger = StructuredLogger(__name__)


class LoggingAnalyticsSink(IAnalyticsSink):
    """Sink that writes events to the log"""

    def __init__(self, level: int = logging.INFO):
        self.level = level
        self._logger = logging.getLogger(f"{__name__}.events")

    def track(self, event: str, properties: Dict[str, Any]) -> None:
        self._logger.log(self.level, f"analytics event {event}", extra={"event_properties": properties})


class AnalyticsTracker:
    """Tracks DTO events with the requester's subscription plan"""

    def __init__(self, sink: IAnalyticsSink, entitlement_gate: IEntitlementGate):
        self.sink = sink
        self.entitlement_gate = entitlement_gate

    def track(
        self,
        event: EventType,
        requester: Optional[Requester],
        properties: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Send an event, never raising.

        Args:
            event: Event name
            requester: Caller whose workspace plan is attached
            properties: Event payload
        """
        payload = dict(properties or {})
        try:
            workspace_id = requester.workspace_id if requester else None
            payload["planType"] = self.entitlement_gate.get_subscription_plan(workspace_id)
            self.sink.track(EventType(event).value, payload)
        except Exception as e:
            logger.warning("Analytics tracking failed", extra={
                "event": str(event),
                "error": str(e),
                "error_type": type(e).__name__,
            })
