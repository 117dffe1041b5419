"""
Scheme master and override audit models
"""

from sqlalchemy import Column, Integer, String, Text, Date, Numeric, JSON, TIMESTAMP, Index
from sfa_schemes.models.common import CommonModel


class Scheme(CommonModel):
    """
    Scheme master row, authored by the scheme admin and read by the engine.

    Attributes:
        type: slab, buy_x_get_y, combo, bill_wise, value_wise, display
        applicability: all_outlets, distributor, retailer, segment, zone
        config: variant payload matching type
        eligible_skus: product ids or SKUs the scheme is limited to, empty for the whole cart
    """
    __tablename__ = "schemes"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    code = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)
    applicability = Column(String(50), nullable=False, default="all_outlets")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    min_order_value = Column(Numeric(12, 2), nullable=False, default=0)
    max_benefit = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending", index=True)
    config = Column(JSON, nullable=True)
    eligible_skus = Column(JSON, nullable=True)
    target_segments = Column(JSON, nullable=True)
    target_zones = Column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_schemes_status_window", "status", "start_date", "end_date"),
    )

    def to_definition(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "type": self.type,
            "applicability": self.applicability,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "min_order_value": self.min_order_value,
            "max_benefit": self.max_benefit,
            "status": self.status,
            "config": self.config,
            "eligible_skus": self.eligible_skus or [],
            "target_segments": self.target_segments or [],
            "target_zones": self.target_zones or [],
        }

    def __repr__(self):
        return f"<Scheme(id={self.id}, type={self.type}, status={self.status})>"


class SchemeOverrideLog(CommonModel):
    """Append-only override audit rows; original and override benefits are stored side by side"""
    __tablename__ = "scheme_override_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(64), nullable=False, unique=True)
    action = Column(String(20), nullable=False)
    session_id = Column(String(64), nullable=True, index=True)
    order_id = Column(String(100), nullable=True, index=True)
    scheme_id = Column(String(64), nullable=False, index=True)
    actor = Column(String(100), nullable=False)
    reason = Column(Text, nullable=True)
    original_benefit = Column(JSON, nullable=True)
    override_benefit = Column(JSON, nullable=True)
    occurred_at = Column(TIMESTAMP(timezone=True), nullable=False)

    def __repr__(self):
        return f"<SchemeOverrideLog(scheme_id={self.scheme_id}, action={self.action}, actor={self.actor})>"


class OrderSchemeSnapshotRecord(CommonModel):
    """Scheme result frozen against a submitted order"""
    __tablename__ = "order_scheme_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(100), nullable=False, unique=True)
    session_id = Column(String(64), nullable=False)
    submitted_by = Column(String(100), nullable=False)
    submitted_at = Column(TIMESTAMP(timezone=True), nullable=False)
    total_discount = Column(Numeric(12, 2), nullable=False)
    result = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<OrderSchemeSnapshotRecord(order_id={self.order_id}, total_discount={self.total_discount})>"
