import os
import tempfile
from datetime import date
from decimal import Decimal

# environment must be in place before any sfa_schemes settings are read
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="sfa_schemes_logs_"))
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DATABASE_READ_URL"] = "sqlite://"
os.environ["PERSIST_OVERRIDE_AUDIT"] = "false"
os.environ["SENTRY_ENABLED"] = "false"
os.environ["FIREHOSE_ENABLED"] = "false"

import pytest

from sfa_schemes.core.constants import CustomerType
from sfa_schemes.dto.cart import CartLine, CustomerContext
from sfa_schemes.dto.schemes import SchemeDefinition
from sfa_schemes.repository.schemes import InMemorySchemeRepository
from sfa_schemes.schemes.engine import SchemeEngine

AS_OF = date(2026, 6, 15)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def make_line():
    def _make(product_id="P1", quantity=1, unit_price="100", sku=None, **kwargs):
        return CartLine(
            product_id=product_id,
            sku=sku or f"SKU-{product_id}",
            quantity=quantity,
            unit_price=Decimal(str(unit_price)),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_scheme():
    def _make(scheme_id, scheme_type, config=None, **overrides):
        data = {
            "id": scheme_id,
            "name": f"Scheme {scheme_id}",
            "code": scheme_id.upper(),
            "type": scheme_type,
            "applicability": "all_outlets",
            "start_date": "2026-01-01",
            "end_date": "2026-12-31",
            "status": "active",
            "config": config,
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def definition(make_scheme):
    def _definition(scheme_id, scheme_type, config=None, **overrides):
        return SchemeDefinition.model_validate(make_scheme(scheme_id, scheme_type, config, **overrides))
    return _definition


@pytest.fixture
def retailer():
    return CustomerContext(customer_type=CustomerType.RETAILER, customer_category="gold", zone="north")


@pytest.fixture
def distributor():
    return CustomerContext(customer_type=CustomerType.DISTRIBUTOR)


@pytest.fixture
def stacking_schemes(make_scheme):
    """Slab 4% and bill-wise 3%: 200 + 150 on a 5,000 cart"""
    return [
        make_scheme("slab-4", "slab", {"basis": "quantity", "tiers": [
            {"min_qty": 1, "max_qty": 100, "benefit_percent": 4},
        ]}),
        make_scheme("bill-3", "bill_wise", {"min_bill_amount": 1000, "reward_type": "discount", "reward_value": 3}),
    ]


@pytest.fixture
def engine_for():
    def _engine(definitions):
        repository = InMemorySchemeRepository(definitions)
        return SchemeEngine(repository=repository), repository
    return _engine
