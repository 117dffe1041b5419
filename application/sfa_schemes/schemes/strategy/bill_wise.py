from typing import Optional, Sequence

from sfa_schemes.core.constants import HUNDRED, RewardType
from sfa_schemes.dto.calculation import AppliedScheme, FreeGoodsLine
from sfa_schemes.dto.cart import CartLine
from sfa_schemes.dto.schemes import SchemeDefinition
from sfa_schemes.schemes.strategy.base import BaseSchemeStrategy, cart_subtotal, product_name


class BillWiseStrategy(BaseSchemeStrategy):
    def evaluate(self, lines: Sequence[CartLine], scheme: SchemeDefinition) -> Optional[AppliedScheme]:
        config = scheme.config
        subtotal = cart_subtotal(lines)
        if subtotal < config.min_bill_amount:
            return None

        if config.reward_type == RewardType.DISCOUNT:
            return self.build_applied(
                scheme, lines, discount=subtotal * config.reward_value / HUNDRED,
                description=f"{scheme.name}: bill of {subtotal} over {config.min_bill_amount}, {config.reward_value}% off",
            )

        if config.reward_type == RewardType.CASH:
            return self.build_applied(
                scheme, lines, discount=config.reward_value,
                description=f"{scheme.name}: bill of {subtotal} over {config.min_bill_amount}, {config.reward_value} off",
            )

        free_line = FreeGoodsLine(
            product_id=config.reward_product_id,
            quantity=int(config.reward_value),
            product_name=product_name(lines, config.reward_product_id),
        )
        return self.build_applied(
            scheme, lines, free_goods=(free_line,),
            description=f"{scheme.name}: bill of {subtotal} over {config.min_bill_amount}, {free_line.quantity} x {free_line.product_id} free",
        )
