from typing import Optional, Sequence

from sfa_schemes.dto.calculation import AppliedScheme, FreeGoodsLine
from sfa_schemes.dto.cart import CartLine
from sfa_schemes.dto.schemes import SchemeDefinition
from sfa_schemes.schemes.strategy.base import BaseSchemeStrategy, product_name, product_quantity


class BuyXGetYStrategy(BaseSchemeStrategy):
    def evaluate(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> Optional[AppliedScheme]:
        config = scheme.config
        buy_lines = [line for line in lines if line.product_id == config.buy_product_id]
        eligible_quantity = product_quantity(buy_lines, config.buy_product_id)

        trigger_count = eligible_quantity // config.buy_quantity
        free_units = trigger_count * config.get_quantity
        if config.max_free_quantity > 0:
            free_units = min(free_units, config.max_free_quantity)
        if free_units <= 0:
            return None

        # the free product need not be in the cart
        free_line = FreeGoodsLine(
            product_id=config.get_product_id,
            quantity=free_units,
            product_name=product_name(lines, config.get_product_id),
        )
        description = (
            f"{scheme.name}: buy {config.buy_quantity} of {config.buy_product_id}, "
            f"get {config.get_quantity} of {config.get_product_id} free ({free_units} units)"
        )
        return self.build_applied(scheme, buy_lines, free_goods=(free_line,), description=description)
