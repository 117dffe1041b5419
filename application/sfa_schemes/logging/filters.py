"""
Logging filters that stamp request and calculation context onto records
"""
import logging
import uuid
from sfa_schemes.middlewares.request_context import request_context


class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = getattr(request_context, 'request_id', None) or str(uuid.uuid4())
        record.request_method = getattr(request_context, 'request_method', '') or ''
        record.request_path = getattr(request_context, 'request_path', '') or ''
        record.actor_id = getattr(request_context, 'actor_id', '') or ''
        return True


class BusinessContextFilter(logging.Filter):
    def filter(self, record):
        # values passed through `extra` win over the ambient request context
        record.session_id = getattr(record, 'session_id', '') or getattr(request_context, 'session_id', '') or ''
        record.order_id = getattr(record, 'order_id', '') or getattr(request_context, 'order_id', '') or ''
        return True
