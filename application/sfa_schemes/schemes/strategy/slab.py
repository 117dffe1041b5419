from decimal import Decimal
from typing import Optional, Sequence

from sfa_schemes.core.constants import SlabBasis
from sfa_schemes.dto.calculation import AppliedScheme
from sfa_schemes.dto.cart import CartLine
from sfa_schemes.dto.schemes import SchemeDefinition, Tier
from sfa_schemes.schemes.strategy.base import BaseSchemeStrategy, cart_quantity, cart_subtotal, quantize_money
from sfa_schemes.schemes.strategy.tiers import describe_tier, find_tier, tier_discount


class SlabStrategy(BaseSchemeStrategy):
    """Tiered discount on cart quantity or cart value.

    The percent of a matched tier is always taken on the subtotal of the
    lines the scheme covers, whichever metric selected the tier. A value
    metric is rounded to money precision before tier lookup.
    """

    def metric(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> Decimal:
        if scheme.config.basis == SlabBasis.VALUE:
            return quantize_money(cart_subtotal(lines))
        return Decimal(cart_quantity(lines))

    def tiers(self, scheme: SchemeDefinition) -> Sequence[Tier]:
        return scheme.config.tiers

    def evaluate(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> Optional[AppliedScheme]:
        metric = self.metric(lines, scheme)
        tier = find_tier(self.tiers(scheme), metric)
        if tier is None:
            return None

        discount = tier_discount(tier, cart_subtotal(lines))
        description = f"{scheme.name}: {metric} in [{tier.min_value}, {tier.max_value}], {describe_tier(tier)}"
        return self.build_applied(scheme, lines, discount=discount, description=description)
