"""
Logging utilities for the scheme engine
"""
import logging
import atexit

from sfa_schemes.logging.config import LoggingConfig
from sfa_schemes.logging.handlers import get_app_handler, get_audit_handler, get_local_file_handler
from sfa_schemes.logging.filters import RequestContextFilter, BusinessContextFilter


def get_app_logger(name: str = 'sfa_schemes'):
    logger = logging.getLogger(name)
    if not logger.handlers:
        # central handler, or a local file per module
        handler = get_app_handler() if LoggingConfig.FIREHOSE_ENABLED else get_local_file_handler(name.replace('.', '_'))
        handler.addFilter(RequestContextFilter())
        handler.addFilter(BusinessContextFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def init_audit_logger(stream_name: str | None = None):
    stream_name = stream_name or LoggingConfig.AUDIT_LOGS_STREAM_NAME or 'default'
    logger_name = f"sfa_schemes.audit.{stream_name.replace('-', '_')}"
    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        handler = get_audit_handler(stream_name)
        handler.addFilter(RequestContextFilter())
        handler.addFilter(BusinessContextFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def _flush_all():
    for logger in list(logging.Logger.manager.loggerDict.values()):
        if isinstance(logger, logging.Logger) and logger.name.startswith('sfa_schemes'):
            for handler in logger.handlers:
                handler.flush()


def initialize_logging():
    is_valid, message = LoggingConfig.is_valid_config()
    if not is_valid:
        print(f"Warning: {message}")
    atexit.register(_flush_all)
    print("Logging system initialized (sfa-scheme-engine)")
