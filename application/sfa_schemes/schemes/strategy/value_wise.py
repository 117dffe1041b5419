from decimal import Decimal
from typing import Sequence

from sfa_schemes.dto.cart import CartLine
from sfa_schemes.dto.schemes import SchemeDefinition
from sfa_schemes.schemes.strategy.base import cart_subtotal, quantize_money
from sfa_schemes.schemes.strategy.slab import SlabStrategy


class ValueWiseStrategy(SlabStrategy):
    """Slab matching where the controlling metric is always the cart subtotal"""

    def metric(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> Decimal:
        return quantize_money(cart_subtotal(lines))
