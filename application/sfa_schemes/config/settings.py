import os
from dotenv import load_dotenv
load_dotenv()

class SchemeEngineConfigs:
    def __init__(self):

        # Database settings
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sfa_schemes.db")
        self.DATABASE_READ_URL = os.getenv("DATABASE_READ_URL", self.DATABASE_URL)

        # Environment settings
        self.APPLICATION_ENVIRONMENT = os.getenv("APPLICATION_ENVIRONMENT", "UAT")
        self.APP_NAME = os.getenv('APP_NAME', 'sfa-scheme-engine')
        self.APP_VERSION = os.getenv('APP_VERSION', '1.0.0')

        # Sentry settings
        self.SENTRY_ENABLED = os.getenv("SENTRY_ENABLED", "false").lower() == "true"
        self.SENTRY_DSN = os.getenv("SENTRY_DSN", "")
        self.ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
        self.SENTRY_RELEASE = os.getenv("SENTRY_RELEASE", "sfa-scheme-engine@1.0.0")
        self.SENTRY_TRACES_SAMPLE_RATE = os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")
        self.SENTRY_PROFILES_SAMPLE_RATE = os.getenv("SENTRY_PROFILES_SAMPLE_RATE", "0.1")

        # Scheme engine settings
        self.SCHEME_MONEY_PRECISION = os.getenv("SCHEME_MONEY_PRECISION", "0.01")
        self.SCHEME_TIMEZONE = os.getenv("SCHEME_TIMEZONE", "Asia/Kolkata")
        self.OVERRIDE_AUDIT_STREAM_NAME = os.getenv("OVERRIDE_AUDIT_STREAM_NAME", "sfa-scheme-override-audit")
        self.PERSIST_OVERRIDE_AUDIT = os.getenv("PERSIST_OVERRIDE_AUDIT", "true").lower() == "true"
        self.SESSION_IDLE_TTL_SECONDS = float(os.getenv("SESSION_IDLE_TTL_SECONDS", "14400"))
        self.SUBMITTED_SESSION_TTL_SECONDS = float(os.getenv("SUBMITTED_SESSION_TTL_SECONDS", "900"))

        # Logging Core settings
        self.FIREHOSE_ENABLED = os.getenv("FIREHOSE_ENABLED", "false").lower() == "true"
        self.LOG_DEBUG_PRINTS = os.getenv("LOG_DEBUG_PRINTS", "false").lower() == "true"
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")

        # Logging Stream Names
        self.APP_LOGS_STREAM_NAME = os.getenv("APP_LOGS_STREAM_NAME", "")
        self.AUDIT_LOGS_STREAM_NAME = os.getenv("AUDIT_LOGS_STREAM_NAME", "")
        self.LOG_BUFFER_TIMEOUT = int(os.getenv("LOG_BUFFER_TIMEOUT", "600"))

        # Logging Buffer Sizes
        self.APP_LOGS_CAPACITY = int(os.getenv("APP_LOGS_CAPACITY", "50"))
        self.AUDIT_LOGS_CAPACITY = int(os.getenv("AUDIT_LOGS_CAPACITY", "50"))

        # Firehose settings
        self.FIREHOSE_REGION_NAME = os.getenv("FIREHOSE_REGION_NAME", "ap-south-1")
        self.FIREHOSE_ACCESS_KEY_ID = os.getenv("FIREHOSE_ACCESS_KEY_ID", "")
        self.FIREHOSE_SECRET_ACCESS_KEY = os.getenv("FIREHOSE_SECRET_ACCESS_KEY", "")
        self.FIREHOSE_RETRY_COUNT = int(os.getenv("FIREHOSE_RETRY_COUNT", "3"))
        self.FIREHOSE_RETRY_DELAY = int(os.getenv("FIREHOSE_RETRY_DELAY", "1"))
