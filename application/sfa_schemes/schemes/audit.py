import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sfa_schemes.core.constants import OverrideAction
from sfa_schemes.dto.calculation import OverrideAuditEvent, OverrideBenefit, SchemeBenefit, SchemeOverride

# Logging
from sfa_schemes.logging.config import LoggingConfig
from sfa_schemes.logging.utils import get_app_logger, init_audit_logger
logger = get_app_logger("sfa_schemes.schemes.audit")
audit_logger = init_audit_logger(LoggingConfig.OVERRIDE_AUDIT_STREAM_NAME)

AuditSink = Callable[[OverrideAuditEvent], None]


class OverrideAuditLog:
    """Append-only stream of override events.

    Each event is written to the audit logger and handed to every subscribed
    sink. A failing sink is logged and never blocks the calculation.
    """

    def __init__(self):
        self._events: Dict[Optional[str], List[OverrideAuditEvent]] = {}
        self._sinks: List[AuditSink] = []
        self._lock = threading.Lock()

    def subscribe(self, sink: AuditSink) -> None:
        self._sinks.append(sink)

    def record(self, action: OverrideAction, scheme_id: str, actor: str, occurred_at: datetime,
               session_id: Optional[str] = None, order_id: Optional[str] = None, reason: Optional[str] = None,
               original_benefit: Optional[SchemeBenefit] = None,
               override_benefit: Optional[OverrideBenefit] = None) -> OverrideAuditEvent:
        event = OverrideAuditEvent(
            event_id=str(uuid.uuid4()),
            action=action,
            scheme_id=scheme_id,
            actor=actor,
            occurred_at=occurred_at,
            session_id=session_id,
            order_id=order_id,
            reason=reason,
            original_benefit=original_benefit,
            override_benefit=override_benefit,
        )
        with self._lock:
            self._events.setdefault(session_id, []).append(event)

        audit_logger.info("scheme_override", extra={
            "event_id": event.event_id,
            "action": event.action.value,
            "scheme_id": event.scheme_id,
            "session_id": event.session_id or "",
            "order_id": event.order_id or "",
            "actor": event.actor,
            "reason": event.reason or "",
            "occurred_at": event.occurred_at.isoformat(),
            "original_benefit": original_benefit.model_dump(mode="json") if original_benefit else None,
            "override_benefit": override_benefit.model_dump(mode="json") if override_benefit else None,
        })

        for sink in self._sinks:
            try:
                sink(event)
            except Exception as e:
                logger.error(f"override_audit_sink_failed | event_id={event.event_id} scheme_id={scheme_id} error={e}", exc_info=True)
        return event

    def record_override(self, action: OverrideAction, override: SchemeOverride, actor: str, occurred_at: datetime,
                        session_id: Optional[str] = None, order_id: Optional[str] = None) -> OverrideAuditEvent:
        return self.record(
            action, override.scheme_id, actor, occurred_at,
            session_id=session_id, order_id=order_id, reason=override.reason,
            original_benefit=override.original_benefit, override_benefit=override.override_benefit,
        )

    def events(self, session_id: Optional[str] = None) -> List[OverrideAuditEvent]:
        """Events of one session in emission order, or of every session when session_id is None"""
        with self._lock:
            if session_id is not None:
                return list(self._events.get(session_id, ()))
            events = [event for bucket in self._events.values() for event in bucket]
        return sorted(events, key=lambda event: event.occurred_at)

    def discard(self, session_id: str) -> int:
        """Drop the in-memory events of an evicted session; sinks keep their copy."""
        with self._lock:
            return len(self._events.pop(session_id, ()))
