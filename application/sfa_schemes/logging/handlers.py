"""
Logging handlers for the scheme engine.
Buffered Kinesis Firehose delivery with a local JSON file fallback.
"""
import logging
import os
import time
from logging.handlers import MemoryHandler

import boto3
from botocore.config import Config

from sfa_schemes.logging.config import LoggingConfig
from sfa_schemes.logging.formatters import AppLogsJSONFormatter, AuditLogsJSONFormatter

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()

LOG_DEBUG_PRINTS = configs.LOG_DEBUG_PRINTS

def dbg(msg: str) -> None:
    """Debug print, enabled with LOG_DEBUG_PRINTS=true"""
    if LOG_DEBUG_PRINTS:
        print(msg)

class FireHoseHandler(logging.Handler):
    """Kinesis Firehose sink with exponential backoff"""

    def __init__(self, stream_name: str):
        super().__init__()
        self.stream_name = stream_name
        self.client = boto3.client(
            "firehose",
            region_name=LoggingConfig.FIREHOSE_REGION_NAME,
            aws_access_key_id=LoggingConfig.FIREHOSE_ACCESS_KEY_ID,
            aws_secret_access_key=LoggingConfig.FIREHOSE_SECRET_ACCESS_KEY,
            config=Config(connect_timeout=10, read_timeout=30, retries={"max_attempts": 2}),
        )
        self.retry_count = LoggingConfig.FIREHOSE_RETRY_COUNT
        self.retry_delay = LoggingConfig.FIREHOSE_RETRY_DELAY

    def bulk_insert(self, actions) -> bool:
        if not actions:
            return True

        for attempt in range(self.retry_count):
            try:
                response = self.client.put_record_batch(DeliveryStreamName=self.stream_name, Records=actions)
                failed = response.get("FailedPutCount", 0)
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} total={len(actions)} failed={failed}")
                if failed == 0:
                    return True
            except Exception as e:
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} error={e}")
            if attempt < self.retry_count - 1:
                time.sleep(self.retry_delay * (2 ** attempt))
        return False


class BufferedFirehoseHandler(MemoryHandler):
    """Flushes to Firehose on capacity or buffer age, whichever comes first"""

    def __init__(self, stream_name: str, capacity: int, formatter: logging.Formatter):
        target = FireHoseHandler(stream_name)
        super().__init__(capacity=capacity, target=target)
        self.stream_name = stream_name
        self.buffer_timeout = LoggingConfig.LOG_BUFFER_TIMEOUT
        self.last_flush = time.time()
        self.setFormatter(formatter)
        target.setFormatter(formatter)

    def emit(self, record):
        super().emit(record)
        if time.time() - self.last_flush >= self.buffer_timeout or len(self.buffer) >= self.capacity:
            self.flush()

    def flush(self):
        self.acquire()
        try:
            if self.target and self.buffer:
                actions = [{"Data": self.format(record)} for record in self.buffer]
                ok = self.target.bulk_insert(actions)
                dbg(f"[Buffer:{self.stream_name}] flushed count={len(actions)} ok={ok}")
                self.buffer.clear()
                self.last_flush = time.time()
        finally:
            self.release()


_handlers = {}

def get_local_file_handler(name: str = 'app'):
    os.makedirs(LoggingConfig.LOG_DIR, exist_ok=True)
    handler = logging.FileHandler(os.path.join(LoggingConfig.LOG_DIR, f'{name}.log'))
    formatter = AuditLogsJSONFormatter() if name.startswith('audit') else AppLogsJSONFormatter()
    handler.setFormatter(formatter)
    return handler


def get_app_handler():
    if not LoggingConfig.FIREHOSE_ENABLED:
        return get_local_file_handler('app')
    if 'app' not in _handlers:
        stream = LoggingConfig.APP_LOGS_STREAM_NAME or 'sfa-scheme-engine-app-logs'
        _handlers['app'] = BufferedFirehoseHandler(stream, LoggingConfig.APP_LOGS_CAPACITY, AppLogsJSONFormatter())
    return _handlers['app']


def get_audit_handler(stream_name: str = ''):
    if not LoggingConfig.FIREHOSE_ENABLED:
        return get_local_file_handler('audit_logs_backup')
    stream = stream_name or LoggingConfig.AUDIT_LOGS_STREAM_NAME or 'sfa-scheme-engine-audit-logs'
    key = f'audit:{stream}'
    if key not in _handlers:
        _handlers[key] = BufferedFirehoseHandler(stream, LoggingConfig.AUDIT_LOGS_CAPACITY, AuditLogsJSONFormatter())
    return _handlers[key]
