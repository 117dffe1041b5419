from typing import Optional
from fastapi import APIRouter, Depends

# Core functions
from sfa_schemes.core.scheme_functions import (
    add_override_core, clear_overrides_core, create_session_core, get_session_audit_core,
    remove_override_core, submit_session_core, update_cart_core,
)

# DTOs
from sfa_schemes.dto.api import AuditEventsResponse, CalculateRequest, CartUpdateRequest, OverrideRequest, SessionResponse, SubmitRequest
from sfa_schemes.dto.calculation import OrderSchemeSnapshot

from sfa_schemes.repository.overrides import SchemeOverrideRepository
from sfa_schemes.routes.schemes.dependencies import get_actor, get_override_repository, get_scheme_engine, get_session_store
from sfa_schemes.schemes.engine import SchemeEngine
from sfa_schemes.schemes.session import SessionStore

sessions_router = APIRouter(prefix="/sessions", tags=["schemes-sessions"])


@sessions_router.post("", response_model=SessionResponse)
def create_session(request: CalculateRequest, engine: SchemeEngine = Depends(get_scheme_engine),
                   store: SessionStore = Depends(get_session_store), actor: str = Depends(get_actor)):
    """ Open a calculation session for an order being built """
    return create_session_core(request, engine, store, actor)


@sessions_router.put("/{session_id}/cart", response_model=SessionResponse)
def update_cart(session_id: str, request: CartUpdateRequest, store: SessionStore = Depends(get_session_store),
                actor: str = Depends(get_actor)):
    return update_cart_core(session_id, request, store, actor)


@sessions_router.post("/{session_id}/overrides", response_model=SessionResponse)
def add_override(session_id: str, request: OverrideRequest, store: SessionStore = Depends(get_session_store),
                 actor: str = Depends(get_actor)):
    """ Replace a computed scheme benefit; a reason is mandatory """
    return add_override_core(session_id, request, store, actor)


@sessions_router.delete("/{session_id}/overrides/{scheme_id}", response_model=SessionResponse)
def remove_override(session_id: str, scheme_id: str, store: SessionStore = Depends(get_session_store),
                    actor: str = Depends(get_actor)):
    return remove_override_core(session_id, scheme_id, store, actor)


@sessions_router.delete("/{session_id}/overrides", response_model=SessionResponse)
def clear_overrides(session_id: str, store: SessionStore = Depends(get_session_store), actor: str = Depends(get_actor)):
    return clear_overrides_core(session_id, store, actor)


@sessions_router.post("/{session_id}/submit", response_model=OrderSchemeSnapshot)
def submit_session(session_id: str, request: SubmitRequest, store: SessionStore = Depends(get_session_store),
                   repository: Optional[SchemeOverrideRepository] = Depends(get_override_repository),
                   actor: str = Depends(get_actor)):
    """ Freeze the session's result against an order id """
    return submit_session_core(session_id, request, store, repository, actor)


@sessions_router.get("/{session_id}/audit", response_model=AuditEventsResponse)
def get_session_audit(session_id: str, store: SessionStore = Depends(get_session_store)):
    return get_session_audit_core(session_id, store)
