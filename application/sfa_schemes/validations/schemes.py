from decimal import Decimal
from typing import Dict, List, Sequence

from sfa_schemes.core.constants import MONEY_PRECISION, RewardType, SchemeErrorCode, SchemeType, SlabBasis
from sfa_schemes.core.exceptions import ConfigurationError
from sfa_schemes.dto.schemes import (
    BillWiseConfig, ComboConfig, SchemeDefinition, SlabConfig, Tier, ValueWiseConfig,
)

QUANTITY_STEP = Decimal("1")


class SchemeConfigValidator:
    """Checks the data-model invariants of one scheme definition.

    Collects every violation rather than stopping at the first one, so the
    operator diagnostic lists all of them.
    """

    def __init__(self, scheme: SchemeDefinition):
        self.scheme = scheme
        self.errors: List[Dict[str, str]] = []

    def _error(self, code: str, field: str, message: str):
        self.errors.append({"code": code, "field": field, "message": message})

    def validate_validity_window(self):
        if self.scheme.start_date > self.scheme.end_date:
            self._error(SchemeErrorCode.INVALID_VALIDITY_WINDOW, "end_date", "end_date is before start_date")

    def validate_payload(self) -> bool:
        config = self.scheme.config
        if config is None:
            self._error(SchemeErrorCode.MISSING_CONFIG, "config", f"No configuration payload for {self.scheme.type.value} scheme")
            return False
        if config.kind != self.scheme.type.value:
            self._error(SchemeErrorCode.CONFIG_TYPE_MISMATCH, "config.kind", f"Payload '{config.kind}' does not match scheme type '{self.scheme.type.value}'")
            return False
        return True

    def validate_tiers(self, tiers: Sequence[Tier], step: Decimal):
        if not tiers:
            self._error(SchemeErrorCode.EMPTY_TIERS, "config.tiers", "At least one tier is required")
            return

        for tier in tiers:
            if tier.min_value > tier.max_value:
                self._error(SchemeErrorCode.INVALID_TIER_RANGE, "config.tiers", f"Tier [{tier.min_value}, {tier.max_value}] has min above max")
                return

        ordered = sorted(tiers, key=lambda t: t.min_value)
        for previous, current in zip(ordered, ordered[1:]):
            if current.min_value <= previous.max_value:
                self._error(SchemeErrorCode.OVERLAPPING_TIERS, "config.tiers", f"Tier [{current.min_value}, {current.max_value}] overlaps [{previous.min_value}, {previous.max_value}]")
            elif current.min_value != previous.max_value + step:
                self._error(SchemeErrorCode.NON_CONTIGUOUS_TIERS, "config.tiers", f"Gap between {previous.max_value} and {current.min_value}")

    def validate_combo(self, config: ComboConfig):
        if not config.items:
            self._error(SchemeErrorCode.COMBO_EMPTY, "config.items", "Combo lists no products")
        if (config.combo_price is None) == (config.combo_discount is None):
            self._error(SchemeErrorCode.COMBO_PRICING_AMBIGUOUS, "config.combo_price", "Exactly one of combo_price or combo_discount must be set")

    def validate_bill_wise(self, config: BillWiseConfig):
        if config.reward_type == RewardType.PRODUCT and not config.reward_product_id:
            self._error(SchemeErrorCode.REWARD_PRODUCT_MISSING, "config.reward_product_id", "Product reward needs reward_product_id")

    def validate_all(self) -> List[Dict[str, str]]:
        self.validate_validity_window()
        if not self.validate_payload():
            return self.errors

        config = self.scheme.config
        if isinstance(config, SlabConfig):
            self.validate_tiers(config.tiers, QUANTITY_STEP if config.basis == SlabBasis.QUANTITY else MONEY_PRECISION)
        elif isinstance(config, ValueWiseConfig):
            self.validate_tiers(config.tiers, MONEY_PRECISION)
        elif isinstance(config, ComboConfig):
            self.validate_combo(config)
        elif isinstance(config, BillWiseConfig):
            self.validate_bill_wise(config)
        return self.errors

    def ensure_valid(self) -> None:
        """Raise ConfigurationError when any invariant is violated."""
        errors = self.validate_all()
        if errors:
            raise ConfigurationError(self.scheme.id, errors)


def validate_scheme(scheme: SchemeDefinition) -> None:
    if scheme.type == SchemeType.DISPLAY:
        return
    SchemeConfigValidator(scheme).ensure_valid()
