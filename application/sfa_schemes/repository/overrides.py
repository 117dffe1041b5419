from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from sfa_schemes.connections.database import get_db_session
from sfa_schemes.core.constants import SchemeErrorCode
from sfa_schemes.core.exceptions import ValidationError
from sfa_schemes.dto.calculation import OrderSchemeSnapshot, OverrideAuditEvent
from sfa_schemes.models.schemes import OrderSchemeSnapshotRecord, SchemeOverrideLog

from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.overrides_repository")


class SchemeOverrideRepository:
    """Persists override audit events and submitted order snapshots"""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    def record_event(self, event: OverrideAuditEvent) -> None:
        try:
            with get_db_session(session_factory=self.session_factory) as db:
                db.add(SchemeOverrideLog(
                    event_id=event.event_id,
                    action=event.action.value,
                    session_id=event.session_id,
                    order_id=event.order_id,
                    scheme_id=event.scheme_id,
                    actor=event.actor,
                    reason=event.reason,
                    original_benefit=event.original_benefit.model_dump(mode="json") if event.original_benefit else None,
                    override_benefit=event.override_benefit.model_dump(mode="json") if event.override_benefit else None,
                    occurred_at=event.occurred_at,
                ))
            logger.info(f"record_event_result | event_id={event.event_id} action={event.action.value} scheme_id={event.scheme_id}")
        except Exception as e:
            logger.error(f"record_event_error | event_id={event.event_id} scheme_id={event.scheme_id} error={e}", exc_info=True)
            raise

    def list_events(self, session_id: Optional[str] = None, order_id: Optional[str] = None) -> List[OverrideAuditEvent]:
        with get_db_session(read_only=True, session_factory=self.session_factory) as db:
            query = select(SchemeOverrideLog).order_by(SchemeOverrideLog.id)
            if session_id:
                query = query.where(SchemeOverrideLog.session_id == session_id)
            if order_id:
                query = query.where(SchemeOverrideLog.order_id == order_id)
            rows = db.execute(query).scalars().all()
            return [
                OverrideAuditEvent(
                    event_id=row.event_id,
                    action=row.action,
                    scheme_id=row.scheme_id,
                    actor=row.actor,
                    occurred_at=row.occurred_at,
                    session_id=row.session_id,
                    order_id=row.order_id,
                    reason=row.reason,
                    original_benefit=row.original_benefit,
                    override_benefit=row.override_benefit,
                )
                for row in rows
            ]

    def attach_order(self, session_id: str, order_id: str) -> int:
        """Stamp the order id on every event logged for the session before submission."""
        with get_db_session(session_factory=self.session_factory) as db:
            rows = db.execute(
                select(SchemeOverrideLog).where(
                    SchemeOverrideLog.session_id == session_id,
                    SchemeOverrideLog.order_id.is_(None),
                )
            ).scalars().all()
            for row in rows:
                row.order_id = order_id
        logger.info(f"attach_order_result | session_id={session_id} order_id={order_id} count={len(rows)}")
        return len(rows)

    def save_snapshot(self, snapshot: OrderSchemeSnapshot) -> None:
        """
        Raises:
            ValidationError: an order snapshot already exists for this order id
        """
        try:
            with get_db_session(session_factory=self.session_factory) as db:
                db.add(OrderSchemeSnapshotRecord(
                    order_id=snapshot.order_id,
                    session_id=snapshot.session_id,
                    submitted_by=snapshot.submitted_by,
                    submitted_at=snapshot.submitted_at,
                    total_discount=snapshot.total_discount,
                    result=snapshot.result.model_dump(mode="json"),
                ))
        except IntegrityError:
            logger.warning(f"save_snapshot_duplicate | order_id={snapshot.order_id}")
            raise ValidationError(SchemeErrorCode.SNAPSHOT_EXISTS, f"Order '{snapshot.order_id}' already has a scheme snapshot", field="order_id")
        logger.info(f"save_snapshot_result | order_id={snapshot.order_id} total_discount={snapshot.total_discount}")

    def get_snapshot(self, order_id: str) -> Optional[OrderSchemeSnapshot]:
        with get_db_session(read_only=True, session_factory=self.session_factory) as db:
            row = db.execute(
                select(OrderSchemeSnapshotRecord).where(OrderSchemeSnapshotRecord.order_id == order_id)
            ).scalar_one_or_none()
            if row is None:
                return None
            return OrderSchemeSnapshot(
                order_id=row.order_id,
                session_id=row.session_id,
                submitted_by=row.submitted_by,
                submitted_at=row.submitted_at,
                result=row.result,
            )
