"""
Per-request context (request id, actor, calculation session, order) held in a
ContextVar so log filters can stamp it on every record.
"""
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional
import uuid


@dataclass
class RequestContext:
    request_id: Optional[str] = None
    actor_id: Optional[str] = None
    session_id: Optional[str] = None
    order_id: Optional[str] = None
    module_name: Optional[str] = None
    request_method: Optional[str] = None
    request_path: Optional[str] = None


_request_context_var: ContextVar[RequestContext] = ContextVar("sfa_request_context", default=RequestContext())


class _RequestContextProxy:
    """Attribute access forwarded to the context of the running request"""

    def __getattr__(self, name):
        return getattr(_request_context_var.get(), name)

    def __setattr__(self, name, value):
        setattr(_request_context_var.get(), name, value)


request_context = _RequestContextProxy()


def set_request_context(ctx: RequestContext):
    _request_context_var.set(ctx)


def clear_request_context():
    _request_context_var.set(RequestContext())


def bind_request(method: str, path: str, request_id: Optional[str] = None, actor_id: Optional[str] = None) -> RequestContext:
    """Start a fresh context for an incoming request and return it."""
    ctx = RequestContext(
        request_id=request_id or str(uuid.uuid4()),
        actor_id=actor_id or None,
        request_method=method,
        request_path=path,
    )
    set_request_context(ctx)
    return ctx
