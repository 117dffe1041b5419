from decimal import Decimal
from typing import Optional, Sequence

from sfa_schemes.core.constants import HUNDRED, ZERO
from sfa_schemes.dto.schemes import Tier


def find_tier(tiers: Sequence[Tier], metric: Decimal) -> Optional[Tier]:
    """Return the tier whose inclusive band holds metric, or None when it falls outside every band"""
    for tier in sorted(tiers, key=lambda t: t.min_value):
        if tier.contains(metric):
            return tier
    return None


def tier_discount(tier: Tier, basis: Decimal) -> Decimal:
    if tier.percent_wins:
        return basis * tier.benefit_percent / HUNDRED
    if tier.benefit_amount > 0:
        return tier.benefit_amount
    return ZERO


def describe_tier(tier: Tier) -> str:
    if tier.percent_wins:
        return f"{tier.benefit_percent}% off"
    return f"flat {tier.benefit_amount} off"
