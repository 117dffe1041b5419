from decimal import Decimal

import pytest

from sfa_schemes.core.constants import OverrideAction, SchemeErrorCode
from sfa_schemes.core.exceptions import SessionClosedError, SessionNotFoundError, ValidationError
from sfa_schemes.core.scheme_functions import submit_session_core
from sfa_schemes.dto.api import SubmitRequest
from sfa_schemes.dto.calculation import OverrideBenefit
from sfa_schemes.schemes.session import SessionStore


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def session(engine_for, stacking_schemes, store, make_line, retailer, as_of):
    engine, repository = engine_for(stacking_schemes)
    session = store.create(engine, [make_line(quantity=50, unit_price="100")], retailer, as_of=as_of, actor="rep-1")
    session.repository = repository
    return session


def actions(store, session):
    return [event.action for event in store.events(session.session_id)]


class TestSessionLifecycle:
    def test_created_session_holds_computed_result(self, session):
        assert session.result.total_discount == Decimal("350.00")
        assert not session.is_submitted

    def test_override_changes_reuse_the_pinned_snapshot(self, session):
        session.repository.replace([])

        result = session.add_override("bill-3", OverrideBenefit(discount_amount=Decimal("100")), "manager approval", "rep-1")

        assert result.total_discount == Decimal("300.00")
        assert result.snapshot_id == session.snapshot.snapshot_id

    def test_cart_change_takes_a_new_snapshot(self, session, make_line):
        first_snapshot = session.snapshot.snapshot_id

        result = session.update_cart([make_line(quantity=20, unit_price="100")], "rep-1")

        assert result.snapshot_id != first_snapshot
        assert result.total_discount == Decimal("140.00")

    def test_submit_freezes_result(self, session, make_line):
        session.add_override("slab-4", OverrideBenefit(discount_amount=Decimal("250")), "price match", "rep-1")

        snapshot = session.submit("SO-1001", "rep-1")

        assert snapshot.order_id == "SO-1001"
        assert snapshot.total_discount == Decimal("400.00")
        assert snapshot.result.overrides["slab-4"].override_benefit.discount_amount == Decimal("250")

        with pytest.raises(SessionClosedError) as exc:
            session.add_override("bill-3", OverrideBenefit(), "late change", "rep-1")
        assert exc.value.error_code == SchemeErrorCode.SESSION_SUBMITTED

        for mutate in (
            lambda: session.update_cart([make_line(quantity=1)], "rep-1"),
            lambda: session.remove_override("slab-4", "rep-1"),
            lambda: session.clear_overrides("rep-1"),
            lambda: session.submit("SO-1002", "rep-1"),
        ):
            with pytest.raises(SessionClosedError):
                mutate()

        assert session.submitted.total_discount == Decimal("400.00")

    def test_unknown_session(self, store):
        with pytest.raises(SessionNotFoundError):
            store.get("missing")


class TestStaleOverrides:
    def test_override_dropped_when_scheme_stops_applying(self, store, session, make_line):
        session.add_override("bill-3", OverrideBenefit(discount_amount=Decimal("100")), "manager approval", "rep-1")

        result = session.update_cart([make_line(quantity=5, unit_price="100")], "rep-2")

        assert not result.is_applied("bill-3")
        assert "bill-3" not in result.overrides
        assert "bill-3" not in session.ledger
        invalidated = [e for e in store.events(session.session_id) if e.action == OverrideAction.INVALIDATED]
        assert [(e.scheme_id, e.actor) for e in invalidated] == [("bill-3", "rep-2")]

    def test_customer_change_recomputes_applicability(self, store, session, make_scheme, stacking_schemes, distributor):
        retailer_only = make_scheme("bill-3", "bill_wise", {"min_bill_amount": 1000, "reward_type": "discount", "reward_value": 3},
                                    applicability="retailer")
        session.repository.replace([stacking_schemes[0], retailer_only])
        session.update_cart(session.cart, "rep-1")
        session.add_override("bill-3", OverrideBenefit(discount_amount=Decimal("100")), "manager approval", "rep-1")

        result = session.update_customer(distributor, "rep-1")

        assert result.total_discount == Decimal("200.00")
        assert "bill-3" not in result.overrides
        assert actions(store, session) == [OverrideAction.ADDED, OverrideAction.INVALIDATED]

    def test_override_kept_while_scheme_still_applies(self, session, make_line):
        session.add_override("slab-4", OverrideBenefit(discount_amount=Decimal("10")), "capped", "rep-1")

        result = session.update_cart([make_line(quantity=60, unit_price="100")], "rep-1")

        assert result.effective_benefit("slab-4").discount_amount == Decimal("10.00")
        assert result.effective_benefit("bill-3").discount_amount == Decimal("180.00")
        assert result.overrides["slab-4"].original_benefit == result.get_applied("slab-4").benefit
        assert result.overrides["slab-4"].original_benefit.discount_amount == Decimal("240.00")

    def test_free_quantity_override_dropped_when_reward_stops_granting_goods(self, store, engine_for, make_scheme, make_line, retailer, as_of):
        product_reward = {"min_bill_amount": 1000, "reward_type": "product", "reward_value": 2, "reward_product_id": "GIFT"}
        engine, repository = engine_for([make_scheme("gift", "bill_wise", product_reward)])
        session = store.create(engine, [make_line(quantity=50, unit_price="100")], retailer, as_of=as_of)
        session.add_override("gift", OverrideBenefit(free_quantity=5), "festival stock", "rep-1")

        repository.replace([make_scheme("gift", "bill_wise", {"min_bill_amount": 1000, "reward_type": "cash", "reward_value": 150})])
        result = session.update_cart(session.cart, "rep-1")

        assert "gift" not in result.overrides
        assert result.effective_benefit("gift").discount_amount == Decimal("150.00")
        assert result.total_free_goods == ()
        assert actions(store, session) == [OverrideAction.ADDED, OverrideAction.INVALIDATED]


class TestAuditTrail:
    def test_events_follow_every_override_transition(self, store, session):
        session.add_override("slab-4", OverrideBenefit(discount_amount=Decimal("150")), "price match", "rep-1")
        session.remove_override("slab-4", "rep-1")
        session.add_override("slab-4", OverrideBenefit(discount_amount=Decimal("150")), "price match", "rep-1")
        session.add_override("bill-3", OverrideBenefit(discount_amount=Decimal("50")), "price match", "rep-1")
        session.clear_overrides("rep-1")
        session.add_override("bill-3", OverrideBenefit(discount_amount=Decimal("50")), "price match", "rep-1")
        session.submit("SO-2001", "lead-9")

        assert actions(store, session) == [
            OverrideAction.ADDED, OverrideAction.REMOVED, OverrideAction.ADDED, OverrideAction.ADDED,
            OverrideAction.REMOVED, OverrideAction.REMOVED, OverrideAction.ADDED, OverrideAction.SUBMITTED,
        ]
        submitted = store.events(session.session_id)[-1]
        assert submitted.order_id == "SO-2001"
        assert submitted.actor == "lead-9"
        assert submitted.original_benefit.discount_amount == Decimal("150.00")
        assert submitted.override_benefit.discount_amount == Decimal("50")

    def test_removing_without_override_records_nothing(self, store, session):
        session.remove_override("slab-4", "rep-1")

        assert store.events(session.session_id) == []

    def test_failing_sink_does_not_block_override(self, store, session):
        received = []

        def broken_sink(event):
            raise RuntimeError("audit store down")

        store.audit_log.subscribe(broken_sink)
        store.audit_log.subscribe(received.append)

        result = session.add_override("slab-4", OverrideBenefit(discount_amount=Decimal("1")), "test", "rep-1")

        assert result.effective_benefit("slab-4").discount_amount == Decimal("1.00")
        assert [event.scheme_id for event in received] == ["slab-4"]


class FailingSnapshotRepository:
    def __init__(self, failures=1):
        self.failures = failures
        self.saved = []
        self.attached = []

    def save_snapshot(self, snapshot):
        if self.failures:
            self.failures -= 1
            raise ValidationError(SchemeErrorCode.SNAPSHOT_EXISTS, f"Order '{snapshot.order_id}' already has a scheme snapshot", field="order_id")
        self.saved.append(snapshot)

    def attach_order(self, session_id, order_id):
        self.attached.append((session_id, order_id))
        return 0


class TestSubmitPersistence:
    def test_failed_persist_leaves_session_open(self, store, session):
        session.add_override("slab-4", OverrideBenefit(discount_amount=Decimal("150")), "price match", "rep-1")
        repository = FailingSnapshotRepository()

        with pytest.raises(ValidationError) as exc:
            submit_session_core(session.session_id, SubmitRequest(order_id="SO-1"), store, repository, "rep-1")

        assert exc.value.error_code == SchemeErrorCode.SNAPSHOT_EXISTS
        assert not session.is_submitted
        assert OverrideAction.SUBMITTED not in actions(store, session)
        assert repository.attached == []

        snapshot = submit_session_core(session.session_id, SubmitRequest(order_id="SO-2"), store, repository, "rep-1")

        assert snapshot.order_id == "SO-2"
        assert session.submitted.order_id == "SO-2"
        assert [saved.order_id for saved in repository.saved] == ["SO-2"]
        assert repository.attached == [(session.session_id, "SO-2")]
        assert actions(store, session) == [OverrideAction.ADDED, OverrideAction.SUBMITTED]


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestSessionEviction:
    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def timed_store(self, clock):
        return SessionStore(idle_ttl=60, submitted_ttl=10, clock=clock)

    def test_submitted_session_is_evicted_with_its_events(self, timed_store, clock, engine_for, stacking_schemes, make_line, retailer, as_of):
        engine, _ = engine_for(stacking_schemes)
        session = timed_store.create(engine, [make_line(quantity=50, unit_price="100")], retailer, as_of=as_of)
        session.add_override("slab-4", OverrideBenefit(discount_amount=Decimal("150")), "price match", "rep-1")

        clock.now = 30
        timed_store.get(session.session_id).submit("SO-1", "rep-1")
        assert len(timed_store.events(session.session_id)) == 2

        clock.now = 45
        with pytest.raises(SessionNotFoundError):
            timed_store.get(session.session_id)
        assert timed_store.audit_log.events(session.session_id) == []

    def test_idle_session_is_evicted(self, timed_store, clock, engine_for, stacking_schemes, make_line, retailer, as_of):
        engine, _ = engine_for(stacking_schemes)
        idle = timed_store.create(engine, [make_line(quantity=50, unit_price="100")], retailer, as_of=as_of)

        clock.now = 50
        active = timed_store.create(engine, [make_line(quantity=5, unit_price="100")], retailer, as_of=as_of)

        clock.now = 61
        assert timed_store.evict_expired() == 1
        assert len(timed_store) == 1
        assert timed_store.get(active.session_id) is active
        with pytest.raises(SessionNotFoundError):
            timed_store.get(idle.session_id)
