import threading
import time
import uuid
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from sfa_schemes.core.constants import OverrideAction, SchemeErrorCode
from sfa_schemes.core.exceptions import SessionClosedError, SessionNotFoundError
from sfa_schemes.dto.calculation import CalculationResult, OrderSchemeSnapshot, OverrideBenefit
from sfa_schemes.dto.cart import CartLine, CustomerContext
from sfa_schemes.schemes.audit import OverrideAuditLog
from sfa_schemes.schemes.engine import SchemeEngine
from sfa_schemes.schemes.overrides import OverrideLedger, add_override, rebase_overrides, remove_override
from sfa_schemes.schemes.snapshot import scheme_now

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()

# Logging
from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.schemes.session")


class SchemeCalculationSession:
    """Scheme state for one order being built.

    Cart and customer changes take a fresh scheme snapshot and recompute in
    full. Override changes re-aggregate against the pinned snapshot. After
    submit the session is closed and every mutation raises SessionClosedError.
    """

    def __init__(self, engine: SchemeEngine, cart: Sequence[CartLine], customer: CustomerContext,
                 audit_log: Optional[OverrideAuditLog] = None, session_id: Optional[str] = None,
                 as_of: Optional[date] = None, actor: str = "system"):
        self.session_id = session_id or str(uuid.uuid4())
        self.engine = engine
        self.audit_log = audit_log or OverrideAuditLog()
        self.as_of = as_of
        self.cart = tuple(cart)
        self.customer = customer
        self.ledger = OverrideLedger()
        self.snapshot = None
        self.evaluation = None
        self.result: Optional[CalculationResult] = None
        self.submitted: Optional[OrderSchemeSnapshot] = None
        self._lock = threading.RLock()
        self._recalculate(actor)

    @property
    def is_submitted(self) -> bool:
        return self.submitted is not None

    def _ensure_open(self):
        if self.submitted is not None:
            raise SessionClosedError(
                SchemeErrorCode.SESSION_SUBMITTED,
                f"Session '{self.session_id}' was submitted as order '{self.submitted.order_id}'",
                field="session_id",
            )

    def _recalculate(self, actor: str):
        self.snapshot = self.engine.take_snapshot(self.as_of)
        self.evaluation = self.engine.evaluate(self.snapshot, self.cart, self.customer)

        self.ledger, stale = rebase_overrides(self.ledger, self.evaluation)
        if stale:
            now = scheme_now()
            for override in stale:
                logger.info(f"override_invalidated | session_id={self.session_id} scheme_id={override.scheme_id}")
                self.audit_log.record_override(OverrideAction.INVALIDATED, override, actor, now, session_id=self.session_id)

        self._reaggregate()

    def _reaggregate(self):
        self.result = self.engine.aggregate(self.evaluation, self.ledger)

    def update_cart(self, cart: Sequence[CartLine], actor: str = "system") -> CalculationResult:
        with self._lock:
            self._ensure_open()
            self.cart = tuple(cart)
            self._recalculate(actor)
            return self.result

    def update_customer(self, customer: CustomerContext, actor: str = "system") -> CalculationResult:
        with self._lock:
            self._ensure_open()
            self.customer = customer
            self._recalculate(actor)
            return self.result

    def add_override(self, scheme_id: str, benefit: OverrideBenefit, reason: str, actor: str) -> CalculationResult:
        with self._lock:
            self._ensure_open()
            now = scheme_now()
            self.ledger, override = add_override(self.ledger, self.evaluation, scheme_id, benefit, reason, actor, now)
            self.audit_log.record_override(OverrideAction.ADDED, override, actor, now, session_id=self.session_id)
            self._reaggregate()
            logger.info(f"override_added | session_id={self.session_id} scheme_id={scheme_id} actor={actor} total_discount={self.result.total_discount}")
            return self.result

    def remove_override(self, scheme_id: str, actor: str) -> CalculationResult:
        with self._lock:
            self._ensure_open()
            self.ledger, removed = remove_override(self.ledger, scheme_id)
            if removed is not None:
                self.audit_log.record_override(OverrideAction.REMOVED, removed, actor, scheme_now(), session_id=self.session_id)
                self._reaggregate()
                logger.info(f"override_removed | session_id={self.session_id} scheme_id={scheme_id} actor={actor}")
            return self.result

    def clear_overrides(self, actor: str) -> CalculationResult:
        with self._lock:
            self._ensure_open()
            now = scheme_now()
            for override in self.ledger.entries:
                self.audit_log.record_override(OverrideAction.REMOVED, override, actor, now, session_id=self.session_id)
            self.ledger = self.ledger.cleared()
            self._reaggregate()
            return self.result

    def submit(self, order_id: str, actor: str,
               persist: Optional[Callable[[OrderSchemeSnapshot], None]] = None) -> OrderSchemeSnapshot:
        """Freeze the current result against order_id; the session is closed afterwards.

        persist runs before the session closes. If it raises, the session
        stays open and no submitted event is emitted, so the caller can retry.
        """
        with self._lock:
            self._ensure_open()
            now = scheme_now()
            snapshot = OrderSchemeSnapshot(
                order_id=order_id,
                session_id=self.session_id,
                submitted_by=actor,
                submitted_at=now,
                result=self.result.model_copy(deep=True),
            )
            if persist is not None:
                persist(snapshot)

            self.submitted = snapshot
            for override in self.ledger.entries:
                self.audit_log.record_override(OverrideAction.SUBMITTED, override, actor, now,
                                               session_id=self.session_id, order_id=order_id)
            logger.info(f"session_submitted | session_id={self.session_id} order_id={order_id} total_discount={self.result.total_discount} overrides={len(self.ledger)}")
            return self.submitted


class SessionStore:
    """In-process registry of calculation sessions sharing one audit log.

    Sessions idle longer than idle_ttl seconds, and submitted sessions not
    read for submitted_ttl seconds, are evicted together with their
    in-memory audit events. Durable audit lives in the subscribed sinks.
    """

    def __init__(self, audit_log: Optional[OverrideAuditLog] = None, idle_ttl: Optional[float] = None,
                 submitted_ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.audit_log = audit_log or OverrideAuditLog()
        self.idle_ttl = configs.SESSION_IDLE_TTL_SECONDS if idle_ttl is None else idle_ttl
        self.submitted_ttl = configs.SUBMITTED_SESSION_TTL_SECONDS if submitted_ttl is None else submitted_ttl
        self._clock = clock
        self._sessions: Dict[str, SchemeCalculationSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def evict_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                session_id for session_id, session in self._sessions.items()
                if now - self._last_seen[session_id] > (self.submitted_ttl if session.is_submitted else self.idle_ttl)
            ]
            for session_id in expired:
                del self._sessions[session_id]
                del self._last_seen[session_id]
        for session_id in expired:
            self.audit_log.discard(session_id)
        if expired:
            logger.info(f"sessions_evicted | count={len(expired)}")
        return len(expired)

    def create(self, engine: SchemeEngine, cart: Sequence[CartLine], customer: CustomerContext,
               as_of: Optional[date] = None, actor: str = "system") -> SchemeCalculationSession:
        self.evict_expired()
        session = SchemeCalculationSession(engine, cart, customer, audit_log=self.audit_log, as_of=as_of, actor=actor)
        with self._lock:
            self._sessions[session.session_id] = session
            self._last_seen[session.session_id] = self._clock()
        logger.info(f"session_created | session_id={session.session_id} lines={len(session.cart)} applied={len(session.result.applied_schemes)}")
        return session

    def get(self, session_id: str) -> SchemeCalculationSession:
        self.evict_expired()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = self._clock()
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def events(self, session_id: str) -> List:
        self.get(session_id)
        return self.audit_log.events(session_id)
