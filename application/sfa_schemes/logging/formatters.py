"""
JSON formatters for scheme engine logs
"""
import json
import logging
from datetime import datetime

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()

APPLICATION_ENVIRONMENT = configs.APPLICATION_ENVIRONMENT
SERVICE_NAME = configs.APP_NAME

class BaseJSONFormatter(logging.Formatter):
    """Basic JSON formatter"""

    def __init__(self):
        super().__init__()
        self.application_environment = APPLICATION_ENVIRONMENT

    def base_entry(self, record) -> dict:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line_number': record.lineno,
            'environment': self.application_environment,
            'service': SERVICE_NAME,
        }
        if record.exc_info:
            log_entry['exception'] = str(record.exc_info[1])
        return log_entry

    def format(self, record):
        log_entry = self.base_entry(record)
        log_entry['message'] = record.getMessage()
        self.add_extra_fields(log_entry, record)
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def add_extra_fields(self, log_entry, record):
        pass


class AppLogsJSONFormatter(BaseJSONFormatter):
    def add_extra_fields(self, log_entry, record):
        log_entry['request_id'] = getattr(record, 'request_id', '')
        log_entry['actor_id'] = getattr(record, 'actor_id', '')
        log_entry['session_id'] = getattr(record, 'session_id', '')
        log_entry['order_id'] = getattr(record, 'order_id', '')


class AuditLogsJSONFormatter(BaseJSONFormatter):
    def format(self, record):
        """Audit entries carry their payload in extras, not in the message"""
        log_entry = self.base_entry(record)
        self.add_extra_fields(log_entry, record)
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def add_extra_fields(self, log_entry, record):
        log_entry['request_id'] = getattr(record, 'request_id', '')
        log_entry['event_id'] = getattr(record, 'event_id', '')
        log_entry['action'] = getattr(record, 'action', '')
        log_entry['scheme_id'] = getattr(record, 'scheme_id', '')
        log_entry['session_id'] = getattr(record, 'session_id', '')
        log_entry['order_id'] = getattr(record, 'order_id', '')
        log_entry['actor'] = getattr(record, 'actor', '')
        log_entry['reason'] = getattr(record, 'reason', '')
        log_entry['occurred_at'] = getattr(record, 'occurred_at', '')

        original = getattr(record, 'original_benefit', None)
        override = getattr(record, 'override_benefit', None)
        log_entry['original_benefit'] = json.dumps(original, ensure_ascii=False, default=str) if original else ''
        log_entry['override_benefit'] = json.dumps(override, ensure_ascii=False, default=str) if override else ''
