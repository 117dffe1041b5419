from typing import Optional, Sequence

from sfa_schemes.core.constants import HUNDRED
from sfa_schemes.dto.calculation import AppliedScheme
from sfa_schemes.dto.cart import CartLine
from sfa_schemes.dto.schemes import SchemeDefinition
from sfa_schemes.schemes.strategy.base import BaseSchemeStrategy, cart_subtotal, product_quantity


class ComboStrategy(BaseSchemeStrategy):
    """Bundle benefit, granted only when every combo product meets its required quantity.

    The basis is the summed line totals of the combo products.
    """

    def has_all_items(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> bool:
        return all(product_quantity(lines, item.product_id) >= item.required_quantity
                   for item in scheme.config.items)

    def evaluate(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> Optional[AppliedScheme]:
        config = scheme.config
        if not self.has_all_items(lines, scheme):
            return None

        combo_products = {item.product_id for item in config.items}
        combo_lines = [line for line in lines if line.product_id in combo_products]
        basis = cart_subtotal(combo_lines)

        if config.combo_price is not None:
            discount = basis - config.combo_price
            if discount <= 0:
                return None
            detail = f"bundle priced at {config.combo_price}"
        else:
            discount = basis * config.combo_discount / HUNDRED
            detail = f"{config.combo_discount}% off the bundle"

        return self.build_applied(scheme, combo_lines, discount=discount,
                                  description=f"{config.combo_name}: {detail}")
