from datetime import date
from typing import Dict, List, Optional, Sequence

from sfa_schemes.core.constants import CustomerType, SchemeType
from sfa_schemes.core.exceptions import ConfigurationError
from sfa_schemes.dto.calculation import AppliedScheme, CalculationResult, ConfigurationIssue
from sfa_schemes.dto.cart import CartLine, CustomerContext
from sfa_schemes.dto.schemes import SchemeDefinition

# Repository
from sfa_schemes.repository.schemes import SchemesRepository

# Validations
from sfa_schemes.validations.schemes import validate_scheme

# Engine parts
from sfa_schemes.schemes.aggregator import SchemeEvaluation, aggregate
from sfa_schemes.schemes.applicability import ApplicabilityFilter, MembershipLookup, eligible_lines
from sfa_schemes.schemes.overrides import OverrideLedger
from sfa_schemes.schemes.snapshot import SchemeSnapshot, scheme_today

# Strategies
from sfa_schemes.schemes.strategy.base import BaseSchemeStrategy, cart_subtotal
from sfa_schemes.schemes.strategy.bill_wise import BillWiseStrategy
from sfa_schemes.schemes.strategy.buy_x_get_y import BuyXGetYStrategy
from sfa_schemes.schemes.strategy.combo import ComboStrategy
from sfa_schemes.schemes.strategy.slab import SlabStrategy
from sfa_schemes.schemes.strategy.value_wise import ValueWiseStrategy

# Logging
from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.schemes.engine")

SCHEME_STRATEGIES: Dict[SchemeType, BaseSchemeStrategy] = {
    SchemeType.SLAB: SlabStrategy(),
    SchemeType.BUY_X_GET_Y: BuyXGetYStrategy(),
    SchemeType.COMBO: ComboStrategy(),
    SchemeType.BILL_WISE: BillWiseStrategy(),
    SchemeType.VALUE_WISE: ValueWiseStrategy(),
}

# display schemes are informational and never evaluated
INFORMATIONAL_TYPES = {SchemeType.DISPLAY}

_missing = set(SchemeType) - INFORMATIONAL_TYPES - set(SCHEME_STRATEGIES)
if _missing:
    raise RuntimeError(f"No evaluation strategy registered for scheme types: {sorted(t.value for t in _missing)}")


class SchemeEngine:
    """Computes which schemes apply to a cart and what they are worth.

    Every scheme is evaluated independently against the full, unmodified
    cart. A misconfigured scheme is skipped and reported in the result's
    diagnostics; calculation never fails because of scheme or cart data.
    """

    def __init__(self, repository=None, membership_lookup: Optional[MembershipLookup] = None):
        """
        Args:
            repository: scheme source exposing get_schemes(as_of); defaults to the database
            membership_lookup: resolves Segment/Zone applicability
        """
        self.repository = repository or SchemesRepository()
        self.applicability = ApplicabilityFilter(membership_lookup)

    def take_snapshot(self, as_of: Optional[date] = None) -> SchemeSnapshot:
        as_of = as_of or scheme_today()
        return SchemeSnapshot.capture(self.repository.get_schemes(as_of), as_of)

    def evaluate_scheme(self, scheme: SchemeDefinition, cart: Sequence[CartLine], subtotal) -> Optional[AppliedScheme]:
        validate_scheme(scheme)

        if subtotal < scheme.min_order_value:
            return None

        lines = eligible_lines(cart, scheme)
        if not lines:
            return None

        strategy = SCHEME_STRATEGIES[scheme.type]
        return strategy.evaluate(lines, scheme)

    def evaluate(self, snapshot: SchemeSnapshot, cart: Sequence[CartLine], customer: CustomerContext,
                 as_of: Optional[date] = None) -> SchemeEvaluation:
        as_of = as_of or snapshot.as_of
        cart = tuple(cart)
        subtotal = cart_subtotal(cart)

        applied: List[AppliedScheme] = []
        diagnostics: List[ConfigurationIssue] = list(snapshot.issues)
        for scheme in self.applicability.filter(snapshot.schemes, customer, as_of):
            try:
                result = self.evaluate_scheme(scheme, cart, subtotal)
            except ConfigurationError as e:
                logger.warning(f"scheme_skipped_misconfigured | scheme_id={e.scheme_id} codes={','.join(err['code'] for err in e.errors)}")
                diagnostics.append(ConfigurationIssue(scheme_id=e.scheme_id, errors=e.errors))
                continue
            if result is not None:
                applied.append(result)

        logger.info(f"schemes_evaluated | snapshot_id={snapshot.snapshot_id} lines={len(cart)} subtotal={subtotal} applied={len(applied)} skipped={len(diagnostics)}")
        return SchemeEvaluation(
            snapshot_id=snapshot.snapshot_id,
            as_of=as_of,
            subtotal=subtotal,
            applied_schemes=tuple(applied),
            diagnostics=tuple(diagnostics),
        )

    def aggregate(self, evaluation: SchemeEvaluation, ledger: Optional[OverrideLedger] = None) -> CalculationResult:
        ledger = ledger or OverrideLedger()
        return aggregate(evaluation, ledger.as_dict())

    def calculate(self, cart: Sequence[CartLine], customer_type: CustomerType, customer_category: Optional[str] = None,
                  as_of: Optional[date] = None, *, customer: Optional[CustomerContext] = None,
                  ledger: Optional[OverrideLedger] = None, snapshot: Optional[SchemeSnapshot] = None) -> CalculationResult:
        """Primary entry point: one full, deterministic calculation pass.

        Args:
            cart: cart lines
            customer_type: distributor or retailer
            customer_category: outlet segment, used for Segment schemes
            as_of: evaluation date, defaults to today in the scheme timezone
            customer: full customer context, takes precedence over customer_type/customer_category
            ledger: overrides to apply on top of the computed benefits
            snapshot: pinned scheme snapshot to evaluate against instead of reading the repository

        Returns:
            CalculationResult with applied schemes, effective totals and diagnostics
        """
        customer = customer or CustomerContext(customer_type=customer_type, customer_category=customer_category)
        snapshot = snapshot or self.take_snapshot(as_of)
        evaluation = self.evaluate(snapshot, cart, customer, as_of)
        return self.aggregate(evaluation, ledger)
