from typing import Optional

from sfa_schemes.dto.api import (
    AuditEventsResponse, CalculateRequest, CartUpdateRequest, OverrideRequest, SessionResponse, SubmitRequest,
)
from sfa_schemes.dto.calculation import CalculationResult, OrderSchemeSnapshot
from sfa_schemes.middlewares.request_context import request_context
from sfa_schemes.repository.overrides import SchemeOverrideRepository
from sfa_schemes.schemes.engine import SchemeEngine
from sfa_schemes.schemes.session import SchemeCalculationSession, SessionStore

# Logging
from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.scheme_functions")


def _session_response(session: SchemeCalculationSession) -> SessionResponse:
    return SessionResponse(session_id=session.session_id, submitted=session.is_submitted, result=session.result)


def _open_session(store: SessionStore, session_id: str) -> SchemeCalculationSession:
    request_context.session_id = session_id
    return store.get(session_id)


def calculate_schemes_core(request: CalculateRequest, engine: SchemeEngine) -> CalculationResult:
    result = engine.calculate(request.items, request.customer_type, request.customer_category,
                              request.as_of, customer=request.to_customer())
    logger.info(f"calculate_schemes | lines={len(request.items)} applied={len(result.applied_schemes)} total_discount={result.total_discount}")
    return result


def create_session_core(request: CalculateRequest, engine: SchemeEngine, store: SessionStore, actor: str) -> SessionResponse:
    session = store.create(engine, request.items, request.to_customer(), as_of=request.as_of, actor=actor)
    request_context.session_id = session.session_id
    return _session_response(session)


def update_cart_core(session_id: str, request: CartUpdateRequest, store: SessionStore, actor: str) -> SessionResponse:
    session = _open_session(store, session_id)
    session.update_cart(request.items, actor)
    return _session_response(session)


def add_override_core(session_id: str, request: OverrideRequest, store: SessionStore, actor: str) -> SessionResponse:
    session = _open_session(store, session_id)
    session.add_override(request.scheme_id, request.to_benefit(), request.reason, actor)
    return _session_response(session)


def remove_override_core(session_id: str, scheme_id: str, store: SessionStore, actor: str) -> SessionResponse:
    session = _open_session(store, session_id)
    session.remove_override(scheme_id, actor)
    return _session_response(session)


def clear_overrides_core(session_id: str, store: SessionStore, actor: str) -> SessionResponse:
    session = _open_session(store, session_id)
    session.clear_overrides(actor)
    return _session_response(session)


def submit_session_core(session_id: str, request: SubmitRequest, store: SessionStore,
                        repository: Optional[SchemeOverrideRepository], actor: str) -> OrderSchemeSnapshot:
    session = _open_session(store, session_id)
    request_context.order_id = request.order_id
    persist = repository.save_snapshot if repository is not None else None
    snapshot = session.submit(request.order_id, actor, persist=persist)
    if repository is not None:
        repository.attach_order(session_id, request.order_id)
    return snapshot


def get_session_audit_core(session_id: str, store: SessionStore) -> AuditEventsResponse:
    request_context.session_id = session_id
    return AuditEventsResponse(session_id=session_id, events=store.events(session_id))
