from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence, Tuple

from sfa_schemes.core.constants import MONEY_PRECISION, ZERO
from sfa_schemes.dto.calculation import AppliedScheme, FreeGoodsLine, SchemeBenefit
from sfa_schemes.dto.cart import CartLine
from sfa_schemes.dto.schemes import SchemeDefinition


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def cart_subtotal(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.line_total for line in lines), ZERO)


def cart_quantity(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)


def product_quantity(lines: Iterable[CartLine], product_id: str) -> int:
    return sum(line.quantity for line in lines if line.product_id == product_id)


def product_name(lines: Iterable[CartLine], product_id: str) -> Optional[str]:
    for line in lines:
        if line.product_id == product_id and line.product_name:
            return line.product_name
    return None


class BaseSchemeStrategy(ABC):
    """Maps (filtered cart, scheme) to an AppliedScheme, or None when it does not trigger."""

    @abstractmethod
    def evaluate(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> Optional[AppliedScheme]:
        pass

    def build_applied(self, scheme: SchemeDefinition, lines: Sequence[CartLine], discount: Decimal = ZERO,
                      free_goods: Tuple[FreeGoodsLine, ...] = (), description: str = "") -> Optional[AppliedScheme]:
        discount = quantize_money(max(discount, ZERO))
        if scheme.max_benefit > 0:
            discount = min(discount, scheme.max_benefit)

        benefit = SchemeBenefit(discount_amount=discount, free_goods=tuple(line for line in free_goods if line.quantity > 0))
        if benefit.is_empty:
            return None

        return AppliedScheme(
            scheme_id=scheme.id,
            scheme_name=scheme.name,
            scheme_code=scheme.code,
            scheme_type=scheme.type,
            benefit=benefit,
            applied_to_products=tuple(dict.fromkeys(line.product_id for line in lines)),
            description=description,
        )
