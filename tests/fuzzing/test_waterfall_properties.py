"""
Property-based tests for the debt waterfall and the priority gate.

Properties checked over generated candidate sets:
- Conservation: applied plus remaining equals the cash offered.
- No overpayment of any debt.
- Tier ordering: a debt receives cash only if every debt ahead of it in
  payment order was paid in full.
- Determinism: shuffling the candidates does not change the plan.
- Gate agreement: the waterfall never pays a debt the gate would block
  without first clearing its blockers.
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from estate_engines.waterfall import DebtWaterfallEngine, WaterfallCandidate
from estate_kernel.domain.values import Money

ENGINE = DebtWaterfallEngine()

amounts = st.decimals(
    min_value=Decimal("0.00"),
    max_value=Decimal("100000.00"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


def kes(amount) -> Money:
    return Money.of(amount, "KES")


@composite
def candidate_sets(draw, max_size=12):
    size = draw(st.integers(min_value=0, max_value=max_size))
    candidates = []
    for i in range(size):
        priority = draw(st.integers(min_value=1, max_value=5))
        candidates.append(
            WaterfallCandidate(
                debt_id=UUID(int=i + 1),
                priority=priority,
                tier=f"tier_{priority}",
                incurred_date=date(2015, 1, 1) + timedelta(days=draw(st.integers(0, 3650))),
                outstanding=kes(draw(amounts)),
            )
        )
    return candidates


fuzz_settings = settings(max_examples=200, deadline=None, suppress_health_check=[HealthCheck.too_slow])


class TestWaterfallProperties:

    @fuzz_settings
    @given(candidates=candidate_sets(), cash=amounts)
    def test_conservation(self, candidates, cash):
        plan = ENGINE.allocate(available_cash=kes(cash), candidates=candidates)
        assert plan.total_applied + plan.remaining_cash == kes(cash)
        assert not plan.remaining_cash.is_negative

    @fuzz_settings
    @given(candidates=candidate_sets(), cash=amounts)
    def test_no_overpayment(self, candidates, cash):
        outstanding = {c.debt_id: c.outstanding for c in candidates}
        plan = ENGINE.allocate(available_cash=kes(cash), candidates=candidates)
        for allocation in plan.allocations:
            assert allocation.amount_applied.is_positive
            assert allocation.amount_applied <= outstanding[allocation.debt_id]
            assert allocation.fully_paid == (allocation.amount_applied == outstanding[allocation.debt_id])

    @fuzz_settings
    @given(candidates=candidate_sets(), cash=amounts)
    def test_tier_ordering(self, candidates, cash):
        plan = ENGINE.allocate(available_cash=kes(cash), candidates=candidates)
        paid = {a.debt_id: a for a in plan.allocations}
        payable = [c for c in ENGINE.order(candidates) if c.outstanding.is_positive]

        for position, current in enumerate(payable):
            if current.debt_id not in paid:
                continue
            for ahead in payable[:position]:
                assert ahead.debt_id in paid
                assert paid[ahead.debt_id].fully_paid

    @fuzz_settings
    @given(candidates=candidate_sets(), cash=amounts)
    def test_cash_left_only_when_everything_paid(self, candidates, cash):
        plan = ENGINE.allocate(available_cash=kes(cash), candidates=candidates)
        if plan.remaining_cash.is_positive:
            owed = [c for c in candidates if c.outstanding.is_positive]
            assert len(plan.allocations) == len(owed)
            assert all(a.fully_paid for a in plan.allocations)

    @fuzz_settings
    @given(candidates=candidate_sets(), cash=amounts, data=st.data())
    def test_input_order_irrelevant(self, candidates, cash, data):
        shuffled = data.draw(st.permutations(candidates))
        first = ENGINE.allocate(available_cash=kes(cash), candidates=candidates)
        second = ENGINE.allocate(available_cash=kes(cash), candidates=shuffled)
        assert first == second


class TestPriorityGateProperties:

    @fuzz_settings
    @given(candidates=candidate_sets(max_size=8))
    def test_blockers_are_strictly_higher_and_unpaid(self, candidates):
        for target in candidates:
            for blocker in ENGINE.priority_blockers(target, candidates):
                assert blocker.priority < target.priority
                assert blocker.outstanding.is_positive
                assert blocker.debt_id != target.debt_id

    @fuzz_settings
    @given(candidates=candidate_sets(max_size=8))
    def test_same_tier_never_blocks(self, candidates):
        for target in candidates:
            blocking_tiers = {b.priority for b in ENGINE.priority_blockers(target, candidates)}
            assert target.priority not in blocking_tiers

    @fuzz_settings
    @given(candidates=candidate_sets(max_size=8), cash=amounts)
    def test_waterfall_clears_blockers_before_paying(self, candidates, cash):
        plan = ENGINE.allocate(available_cash=kes(cash), candidates=candidates)
        paid = {a.debt_id: a for a in plan.allocations}
        for target in candidates:
            if target.debt_id not in paid:
                continue
            for blocker in ENGINE.priority_blockers(target, candidates):
                assert paid[blocker.debt_id].fully_paid
