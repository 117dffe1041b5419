"""
Request logging middleware: seeds the request context read by the log
filters and writes one access line per request.
"""
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from sfa_schemes.logging.utils import get_app_logger
from sfa_schemes.middlewares.request_context import bind_request, clear_request_context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.logger = get_app_logger('sfa_schemes.requests')
        self.exclude_paths = exclude_paths or ['/health', '/docs', '/redoc', '/openapi.json']

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ctx = bind_request(
            request.method,
            request.url.path,
            request_id=request.headers.get('x-request-id'),
            actor_id=request.headers.get('x-actor-id'),
        )
        should_log = not any(request.url.path.startswith(p) for p in self.exclude_paths)
        start_time = time.time()
        try:
            response = await call_next(request)
            if should_log:
                duration = (time.time() - start_time) * 1000
                self.logger.info(f"request_completed | method={request.method} path={request.url.path} status_code={response.status_code} session_id={ctx.session_id or ''} duration_ms={duration:.0f}")
            response.headers['x-request-id'] = ctx.request_id
            return response
        except Exception as exc:
            duration = (time.time() - start_time) * 1000
            self.logger.error(
                f"request_failed | method={request.method} path={request.url.path} exception_type={exc.__class__.__name__} duration_ms={duration:.0f}",
                exc_info=True,
            )
            raise
        finally:
            clear_request_context()
