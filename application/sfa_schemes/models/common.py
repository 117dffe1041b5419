from sqlalchemy import Column, TIMESTAMP
from sqlalchemy.sql import func
from sfa_schemes.connections.database import Base
from datetime import datetime
from zoneinfo import ZoneInfo

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()

SCHEME_TZ = ZoneInfo(configs.SCHEME_TIMEZONE)

def get_local_now():
    """Get current datetime in the scheme timezone"""
    return datetime.now(SCHEME_TZ)

class CommonModel(Base):
    """Base model with common fields for all models"""
    __abstract__ = True

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=get_local_now,
        server_default=func.now()
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=get_local_now,
        server_default=func.now(),
        onupdate=get_local_now
    )
