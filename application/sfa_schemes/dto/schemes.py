from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Tuple, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from sfa_schemes.core.constants import Applicability, RewardType, SchemeStatus, SchemeType, SlabBasis


class Tier(BaseModel):
    """Inclusive [min_value, max_value] band on quantity or value"""
    model_config = ConfigDict(frozen=True)

    min_value: Decimal = Field(..., ge=0, validation_alias=AliasChoices("min_value", "min_qty", "min_qty_or_value"))
    max_value: Decimal = Field(..., ge=0, validation_alias=AliasChoices("max_value", "max_qty", "max_qty_or_value"))
    benefit_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    benefit_amount: Decimal = Field(default=Decimal("0"), ge=0)

    def contains(self, metric: Decimal) -> bool:
        return self.min_value <= metric <= self.max_value

    @property
    def percent_wins(self) -> bool:
        # percent is authoritative whenever it is set, even if an amount is too
        return self.benefit_percent > 0


class SlabConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["slab"] = "slab"
    basis: SlabBasis = Field(SlabBasis.QUANTITY, description="Controlling metric: cart quantity or cart value")
    tiers: Tuple[Tier, ...]


class ValueWiseConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["value_wise"] = "value_wise"
    tiers: Tuple[Tier, ...]


class BuyXGetYConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["buy_x_get_y"] = "buy_x_get_y"
    buy_product_id: str
    buy_quantity: int = Field(..., ge=1)
    get_product_id: str
    get_quantity: int = Field(..., ge=1, description="Free units per trigger")
    max_free_quantity: int = Field(0, ge=0, description="Cap on free units per order, 0 = uncapped")


class ComboItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    required_quantity: int = Field(..., ge=1)


class ComboConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["combo"] = "combo"
    combo_name: str
    items: Tuple[ComboItem, ...]
    combo_price: Optional[Decimal] = Field(None, ge=0, description="Fixed bundle price")
    combo_discount: Optional[Decimal] = Field(None, ge=0, le=100, description="Percent off bundle subtotal")


class BillWiseConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bill_wise"] = "bill_wise"
    min_bill_amount: Decimal = Field(..., ge=0)
    reward_type: RewardType
    reward_value: Decimal = Field(..., ge=0)
    reward_product_id: Optional[str] = Field(None, description="Free product for reward_type=product")


class DisplayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["display"] = "display"
    display_requirements: Optional[str] = None


SchemeConfig = Annotated[
    Union[SlabConfig, ValueWiseConfig, BuyXGetYConfig, ComboConfig, BillWiseConfig, DisplayConfig],
    Field(discriminator="kind"),
]


class SchemeDefinition(BaseModel):
    """Read-only snapshot of one scheme as authored in the scheme master"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    type: SchemeType
    applicability: Applicability = Applicability.ALL_OUTLETS
    start_date: date
    end_date: date
    min_order_value: Decimal = Field(Decimal("0"), ge=0)
    max_benefit: Decimal = Field(Decimal("0"), ge=0, description="Benefit cap, 0 = uncapped")
    status: SchemeStatus
    config: Optional[SchemeConfig] = None
    eligible_skus: Tuple[str, ...] = Field(default=(), description="Restricts the scheme to these products; empty = whole cart")
    target_segments: Tuple[str, ...] = ()
    target_zones: Tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _tag_config_from_type(cls, data: Any) -> Any:
        # untagged payloads are tagged with the declared type; an explicit tag is left alone
        if isinstance(data, dict):
            config = data.get("config")
            if isinstance(config, dict) and "kind" not in config and data.get("type"):
                scheme_type = data["type"]
                data = {**data, "config": {**config, "kind": getattr(scheme_type, "value", scheme_type)}}
        return data
