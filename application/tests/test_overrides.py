from datetime import datetime
from decimal import Decimal

import pytest

from sfa_schemes.core.constants import SchemeErrorCode
from sfa_schemes.core.exceptions import ValidationError
from sfa_schemes.dto.calculation import OverrideBenefit
from sfa_schemes.schemes.overrides import OverrideLedger, add_override, remove_override

NOW = datetime(2026, 6, 15, 11, 30)


@pytest.fixture
def evaluated(engine_for, stacking_schemes, make_scheme, make_line, retailer, as_of):
    schemes = stacking_schemes + [
        make_scheme("bxgy", "buy_x_get_y", {"buy_product_id": "P1", "buy_quantity": 10, "get_product_id": "FREE", "get_quantity": 1}),
    ]
    engine, _ = engine_for(schemes)
    snapshot = engine.take_snapshot(as_of)
    evaluation = engine.evaluate(snapshot, [make_line(quantity=50, unit_price="100")], retailer)
    return engine, evaluation


class TestAddOverride:
    @pytest.mark.parametrize("reason", ["", "   "])
    def test_reason_is_required(self, evaluated, reason):
        _, evaluation = evaluated

        with pytest.raises(ValidationError, match="reason is required") as exc:
            add_override(OverrideLedger(), evaluation, "slab-4", OverrideBenefit(discount_amount=Decimal("100")), reason, "rep-1", NOW)

        assert exc.value.error_code == SchemeErrorCode.OVERRIDE_REASON_REQUIRED

    def test_scheme_must_be_applied(self, evaluated):
        _, evaluation = evaluated

        with pytest.raises(ValidationError) as exc:
            add_override(OverrideLedger(), evaluation, "unknown", OverrideBenefit(), "manager approval", "rep-1", NOW)

        assert exc.value.error_code == SchemeErrorCode.SCHEME_NOT_APPLIED
        assert exc.value.field == "scheme_id"

    def test_free_quantity_needs_a_product(self, evaluated):
        _, evaluation = evaluated

        with pytest.raises(ValidationError) as exc:
            add_override(OverrideLedger(), evaluation, "slab-4", OverrideBenefit(free_quantity=2), "goodwill", "rep-1", NOW)
        assert exc.value.error_code == SchemeErrorCode.INVALID_OVERRIDE_BENEFIT

        ledger, _ = add_override(OverrideLedger(), evaluation, "slab-4", OverrideBenefit(free_quantity=2, free_product_id="GIFT"), "goodwill", "rep-1", NOW)
        assert "slab-4" in ledger

    def test_effective_total_prefers_override_and_keeps_original(self, evaluated):
        engine, evaluation = evaluated

        ledger, override = add_override(OverrideLedger(), evaluation, "slab-4", OverrideBenefit(discount_amount=Decimal("120")), "price match", "rep-1", NOW)
        result = engine.aggregate(evaluation, ledger)

        assert override.original_benefit.discount_amount == Decimal("200.00")
        assert result.effective_benefit("slab-4").discount_amount == Decimal("120.00")
        assert result.get_applied("slab-4").benefit.discount_amount == Decimal("200.00")
        assert result.overrides["slab-4"].reason == "price match"
        assert result.total_discount == Decimal("270.00")
        assert result.computed_total_discount == Decimal("350.00")

    def test_adding_the_same_override_twice_is_idempotent(self, evaluated):
        engine, evaluation = evaluated
        benefit = OverrideBenefit(discount_amount=Decimal("120"))

        once, _ = add_override(OverrideLedger(), evaluation, "slab-4", benefit, "price match", "rep-1", NOW)
        twice, _ = add_override(once, evaluation, "slab-4", benefit, "price match", "rep-1", NOW)

        assert len(twice) == 1
        assert engine.aggregate(evaluation, twice).total_discount == engine.aggregate(evaluation, once).total_discount

    def test_transitions_do_not_mutate_the_ledger(self, evaluated):
        _, evaluation = evaluated
        empty = OverrideLedger()

        ledger, _ = add_override(empty, evaluation, "slab-4", OverrideBenefit(), "zeroed", "rep-1", NOW)

        assert len(empty) == 0
        assert len(ledger) == 1

    def test_free_goods_override_replaces_quantity(self, evaluated):
        engine, evaluation = evaluated

        ledger, _ = add_override(OverrideLedger(), evaluation, "bxgy", OverrideBenefit(free_quantity=8), "distributor push", "rep-1", NOW)
        result = engine.aggregate(evaluation, ledger)

        assert [(line.product_id, line.quantity) for line in result.total_free_goods] == [("FREE", 8)]


class TestRemoveOverride:
    def test_removal_restores_computed_value(self, evaluated):
        engine, evaluation = evaluated
        computed = engine.aggregate(evaluation)

        ledger, _ = add_override(OverrideLedger(), evaluation, "bill-3", OverrideBenefit(discount_amount=Decimal("0")), "not eligible", "rep-1", NOW)
        ledger, removed = remove_override(ledger, "bill-3")
        restored = engine.aggregate(evaluation, ledger)

        assert removed.scheme_id == "bill-3"
        assert restored.total_discount == computed.total_discount
        assert restored.effective_benefits == computed.effective_benefits
        assert restored.overrides == {}

    def test_removing_missing_override_is_a_no_op(self):
        ledger = OverrideLedger()

        same, removed = remove_override(ledger, "slab-4")

        assert same is ledger
        assert removed is None
