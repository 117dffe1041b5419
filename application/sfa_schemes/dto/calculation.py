from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from sfa_schemes.core.constants import OverrideAction, SchemeType


class FreeGoodsLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(..., ge=0)
    product_name: Optional[str] = None


class SchemeBenefit(BaseModel):
    """Discount and/or free goods produced by one scheme"""
    model_config = ConfigDict(frozen=True)

    discount_amount: Decimal = Decimal("0")
    free_goods: Tuple[FreeGoodsLine, ...] = ()

    @property
    def free_quantity(self) -> int:
        return sum(line.quantity for line in self.free_goods)

    @property
    def is_empty(self) -> bool:
        return self.discount_amount <= 0 and self.free_quantity <= 0


class AppliedScheme(BaseModel):
    """A triggered scheme with its computed (never overridden) benefit"""
    model_config = ConfigDict(frozen=True)

    scheme_id: str
    scheme_name: str
    scheme_code: Optional[str] = None
    scheme_type: SchemeType
    benefit: SchemeBenefit
    applied_to_products: Tuple[str, ...] = ()
    description: str = Field("", description="Human-readable match explanation, display/audit only")


class OverrideBenefit(BaseModel):
    model_config = ConfigDict(frozen=True)

    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    free_quantity: int = Field(0, ge=0)
    free_product_id: Optional[str] = Field(None, description="Target product for free_quantity; defaults to the computed free-goods product")


class SchemeOverride(BaseModel):
    """Manual replacement of a computed benefit.

    original_benefit is the benefit computed for the current cart; it is
    re-stamped whenever the cart or customer changes.
    """
    model_config = ConfigDict(frozen=True)

    scheme_id: str
    original_benefit: SchemeBenefit
    override_benefit: OverrideBenefit
    reason: str = Field(..., min_length=1)
    actor: str
    created_at: datetime


class ConfigurationIssue(BaseModel):
    """Operator diagnostic for a scheme skipped as misconfigured"""
    model_config = ConfigDict(frozen=True)

    scheme_id: str
    errors: List[Dict[str, str]]


class CalculationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    applied_schemes: Tuple[AppliedScheme, ...] = ()
    effective_benefits: Dict[str, SchemeBenefit] = Field(default_factory=dict, description="Override value if present, else computed value")
    overrides: Dict[str, SchemeOverride] = Field(default_factory=dict)
    total_discount: Decimal = Decimal("0")
    computed_total_discount: Decimal = Decimal("0")
    total_free_goods: Tuple[FreeGoodsLine, ...] = ()
    subtotal: Decimal = Decimal("0")
    discounted_total: Decimal = Decimal("0")
    as_of: date
    snapshot_id: str
    diagnostics: Tuple[ConfigurationIssue, ...] = ()

    def get_applied(self, scheme_id: str) -> Optional[AppliedScheme]:
        for applied in self.applied_schemes:
            if applied.scheme_id == scheme_id:
                return applied
        return None

    def is_applied(self, scheme_id: str) -> bool:
        return self.get_applied(scheme_id) is not None

    def is_overridden(self, scheme_id: str) -> bool:
        return scheme_id in self.overrides

    def effective_benefit(self, scheme_id: str) -> Optional[SchemeBenefit]:
        return self.effective_benefits.get(scheme_id)


class OverrideAuditEvent(BaseModel):
    """One entry of the append-only override audit stream"""
    model_config = ConfigDict(frozen=True)

    event_id: str
    action: OverrideAction
    scheme_id: str
    actor: str
    occurred_at: datetime
    session_id: Optional[str] = None
    order_id: Optional[str] = None
    reason: Optional[str] = None
    original_benefit: Optional[SchemeBenefit] = None
    override_benefit: Optional[OverrideBenefit] = None


class OrderSchemeSnapshot(BaseModel):
    """Frozen engine output recorded against a submitted order"""
    model_config = ConfigDict(frozen=True)

    order_id: str
    session_id: str
    submitted_by: str
    submitted_at: datetime
    result: CalculationResult

    @property
    def total_discount(self) -> Decimal:
        return self.result.total_discount
