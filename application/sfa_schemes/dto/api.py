from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from sfa_schemes.core.constants import CustomerType
from sfa_schemes.dto.calculation import CalculationResult, OverrideAuditEvent, OverrideBenefit
from sfa_schemes.dto.cart import CartLine, CustomerContext


class CalculateRequest(BaseModel):
    items: List[CartLine] = Field(default_factory=list)
    customer_type: CustomerType
    customer_category: Optional[str] = None
    customer_id: Optional[str] = None
    zone: Optional[str] = None
    as_of: Optional[date] = Field(None, description="Evaluation date, defaults to today in the scheme timezone")

    def to_customer(self) -> CustomerContext:
        return CustomerContext(
            customer_type=self.customer_type,
            customer_category=self.customer_category,
            customer_id=self.customer_id,
            zone=self.zone,
        )


class CartUpdateRequest(BaseModel):
    items: List[CartLine] = Field(default_factory=list)


class OverrideRequest(BaseModel):
    scheme_id: str
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    free_quantity: int = Field(0, ge=0)
    free_product_id: Optional[str] = None
    # empty reason is rejected by the override ledger with OVERRIDE_REASON_REQUIRED
    reason: str = ""

    def to_benefit(self) -> OverrideBenefit:
        return OverrideBenefit(
            discount_amount=self.discount_amount,
            free_quantity=self.free_quantity,
            free_product_id=self.free_product_id,
        )


class SubmitRequest(BaseModel):
    order_id: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    session_id: str
    submitted: bool = False
    result: CalculationResult


class AuditEventsResponse(BaseModel):
    session_id: str
    events: List[OverrideAuditEvent]
