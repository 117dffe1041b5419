from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from sfa_schemes.core.constants import ZERO
from sfa_schemes.dto.calculation import (
    AppliedScheme, CalculationResult, ConfigurationIssue, FreeGoodsLine, SchemeBenefit, SchemeOverride,
)
from sfa_schemes.schemes.strategy.base import quantize_money


@dataclass(frozen=True)
class SchemeEvaluation:
    """Computed (pre-override) output of one pass over a pinned snapshot"""
    snapshot_id: str
    as_of: date
    subtotal: Decimal
    applied_schemes: Tuple[AppliedScheme, ...] = ()
    diagnostics: Tuple[ConfigurationIssue, ...] = ()

    def get_applied(self, scheme_id: str) -> Optional[AppliedScheme]:
        return next((a for a in self.applied_schemes if a.scheme_id == scheme_id), None)


def effective_benefit(applied: AppliedScheme, override: Optional[SchemeOverride] = None) -> SchemeBenefit:
    """The override's value when one exists, else the computed benefit."""
    if override is None:
        return applied.benefit

    value = override.override_benefit
    free_goods: Tuple[FreeGoodsLine, ...] = ()
    if value.free_quantity > 0:
        product_id = value.free_product_id or next((line.product_id for line in applied.benefit.free_goods), None)
        if product_id is not None:
            name = next((line.product_name for line in applied.benefit.free_goods if line.product_id == product_id), None)
            free_goods = (FreeGoodsLine(product_id=product_id, quantity=value.free_quantity, product_name=name),)
    return SchemeBenefit(discount_amount=quantize_money(value.discount_amount), free_goods=free_goods)


def merge_free_goods(benefits: Iterable[SchemeBenefit]) -> Tuple[FreeGoodsLine, ...]:
    merged: Dict[str, FreeGoodsLine] = OrderedDict()
    for benefit in benefits:
        for line in benefit.free_goods:
            current = merged.get(line.product_id)
            if current is None:
                merged[line.product_id] = line
            else:
                merged[line.product_id] = FreeGoodsLine(
                    product_id=line.product_id,
                    quantity=current.quantity + line.quantity,
                    product_name=current.product_name or line.product_name,
                )
    return tuple(merged[product_id] for product_id in sorted(merged))


def aggregate(evaluation: SchemeEvaluation, overrides: Dict[str, SchemeOverride]) -> CalculationResult:
    """Stack every applied scheme additively; each was computed on the full cart.

    The total discount is capped at the cart subtotal so the order total
    never goes negative.
    """
    subtotal = evaluation.subtotal
    effective: Dict[str, SchemeBenefit] = {}
    for applied in evaluation.applied_schemes:
        effective[applied.scheme_id] = effective_benefit(applied, overrides.get(applied.scheme_id))

    computed_total = sum((applied.benefit.discount_amount for applied in evaluation.applied_schemes), ZERO)
    total_discount = sum((benefit.discount_amount for benefit in effective.values()), ZERO)
    total_discount = min(total_discount, subtotal)
    computed_total = min(computed_total, subtotal)

    return CalculationResult(
        applied_schemes=evaluation.applied_schemes,
        effective_benefits=effective,
        overrides={scheme_id: o for scheme_id, o in overrides.items() if scheme_id in effective},
        total_discount=quantize_money(total_discount),
        computed_total_discount=quantize_money(computed_total),
        total_free_goods=merge_free_goods(effective.values()),
        subtotal=quantize_money(subtotal),
        discounted_total=quantize_money(subtotal - total_discount),
        as_of=evaluation.as_of,
        snapshot_id=evaluation.snapshot_id,
        diagnostics=evaluation.diagnostics,
    )
