from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, computed_field

from sfa_schemes.core.constants import CustomerType


class CartLine(BaseModel):
    """One cart line, an immutable snapshot for a single calculation pass"""
    model_config = ConfigDict(frozen=True)

    product_id: str = Field(..., min_length=1)
    sku: str
    product_name: Optional[str] = Field(None, description="Display name, used on free-goods lines")
    category: Optional[str] = None
    quantity: int = Field(..., gt=0, description="Ordered units")
    unit_price: Decimal = Field(..., ge=0)

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CustomerContext(BaseModel):
    """Who the order is for; drives scheme applicability"""
    model_config = ConfigDict(frozen=True)

    customer_type: CustomerType
    customer_category: Optional[str] = Field(None, description="Outlet segment / category")
    customer_id: Optional[str] = None
    zone: Optional[str] = Field(None, description="Assigned sales zone")
