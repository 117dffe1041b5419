from datetime import date
from typing import List, Optional, Protocol, Sequence

from sfa_schemes.core.constants import Applicability, CustomerType, SchemeStatus, SchemeType
from sfa_schemes.dto.cart import CartLine, CustomerContext
from sfa_schemes.dto.schemes import SchemeDefinition

# Logging
from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.schemes.applicability")


class MembershipLookup(Protocol):
    """Resolves whether a customer belongs to a scheme's segment or zone."""

    def in_segment(self, scheme: SchemeDefinition, customer: CustomerContext) -> bool:
        ...

    def in_zone(self, scheme: SchemeDefinition, customer: CustomerContext) -> bool:
        ...


class SchemeTargetMembership:
    """Matches the customer's category and zone against the scheme's own target lists"""

    def in_segment(self, scheme: SchemeDefinition, customer: CustomerContext) -> bool:
        return bool(customer.customer_category) and customer.customer_category in scheme.target_segments

    def in_zone(self, scheme: SchemeDefinition, customer: CustomerContext) -> bool:
        return bool(customer.zone) and customer.zone in scheme.target_zones


def eligible_lines(lines: Sequence[CartLine], scheme: SchemeDefinition) -> List[CartLine]:
    """Lines a scheme covers: all of them, or those whose product id or sku is listed."""
    if not scheme.eligible_skus:
        return list(lines)
    skus = set(scheme.eligible_skus)
    return [line for line in lines if line.product_id in skus or line.sku in skus]


class ApplicabilityFilter:
    def __init__(self, membership_lookup: Optional[MembershipLookup] = None):
        self.membership_lookup = membership_lookup or SchemeTargetMembership()

    def is_active(self, scheme: SchemeDefinition, as_of: date) -> bool:
        return scheme.status == SchemeStatus.ACTIVE and scheme.start_date <= as_of <= scheme.end_date

    def matches_customer(self, scheme: SchemeDefinition, customer: CustomerContext) -> bool:
        applicability = scheme.applicability
        if applicability == Applicability.ALL_OUTLETS:
            return True
        if applicability == Applicability.DISTRIBUTOR:
            return customer.customer_type == CustomerType.DISTRIBUTOR
        if applicability == Applicability.RETAILER:
            return customer.customer_type == CustomerType.RETAILER
        if applicability == Applicability.SEGMENT:
            return self.membership_lookup.in_segment(scheme, customer)
        if applicability == Applicability.ZONE:
            return self.membership_lookup.in_zone(scheme, customer)
        return False

    def is_applicable(self, scheme: SchemeDefinition, customer: CustomerContext, as_of: date) -> bool:
        # display schemes are informational only
        if scheme.type == SchemeType.DISPLAY:
            return False
        return self.is_active(scheme, as_of) and self.matches_customer(scheme, customer)

    def filter(self, schemes: Sequence[SchemeDefinition], customer: CustomerContext, as_of: date) -> List[SchemeDefinition]:
        applicable = [scheme for scheme in schemes if self.is_applicable(scheme, customer, as_of)]
        logger.info(f"applicability_filtered | total={len(schemes)} applicable={len(applicable)} customer_type={customer.customer_type.value} as_of={as_of}")
        return applicable
