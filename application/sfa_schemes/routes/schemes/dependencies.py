from functools import lru_cache
from typing import Optional
from fastapi import Header

from sfa_schemes.middlewares.request_context import request_context
from sfa_schemes.repository.overrides import SchemeOverrideRepository
from sfa_schemes.schemes.engine import SchemeEngine
from sfa_schemes.schemes.session import SessionStore

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()


@lru_cache
def get_scheme_engine() -> SchemeEngine:
    return SchemeEngine()


@lru_cache
def get_override_repository() -> Optional[SchemeOverrideRepository]:
    if not configs.PERSIST_OVERRIDE_AUDIT:
        return None
    return SchemeOverrideRepository()


@lru_cache
def get_session_store() -> SessionStore:
    store = SessionStore()
    repository = get_override_repository()
    if repository is not None:
        store.audit_log.subscribe(repository.record_event)
    return store


def get_actor(x_actor_id: str = Header("system")) -> str:
    request_context.actor_id = x_actor_id
    return x_actor_id
