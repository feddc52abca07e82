"""
Module: estate_engines.waterfall
Responsibility:
    Allocate available cash to estate debts in statutory priority order, and
    decide whether a manual payment would skip that order (the priority
    gate).  Both payment paths of the debt ledger go through this engine so
    that they always agree on eligibility.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Knows nothing about debt statuses or tiers as enums; the debt ledger
    hands it ``WaterfallCandidate`` records with an integer priority rank.

Invariants enforced:
    - Tier ordering: a candidate is paid only after every candidate ahead of
      it in (priority, incurred_date, debt_id) order is paid in full.
    - Conservation: total_applied + remaining_cash == available_cash.
    - No overpayment: amount_applied never exceeds a candidate's outstanding.
    - Determinism: identical inputs produce identical plans regardless of
      input ordering.

Failure modes:
    - InvalidAmountError if available_cash is negative.
    - CurrencyMismatchError if a candidate's currency differs from the cash.

Usage:
    engine = DebtWaterfallEngine()
    plan = engine.allocate(available_cash=Money.of("3000", "KES"), candidates=cands)
    blockers = engine.priority_blockers(target=cand, candidates=cands)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from estate_engines.tracer import traced_engine
from estate_kernel.domain.values import Money, sum_money
from estate_kernel.exceptions import InvalidAmountError
from estate_kernel.logging_config import get_logger

logger = get_logger("engines.waterfall")


@dataclass(frozen=True)
class WaterfallCandidate:
    """
    One payable debt as seen by the waterfall.

    ``priority`` is the tier rank: lower ranks are paid first.  ``tier`` is
    the tier's display name, carried through for error context.
    """

    debt_id: UUID
    priority: int
    tier: str
    incurred_date: date
    outstanding: Money

    @property
    def sort_key(self) -> tuple[int, date, UUID]:
        return (self.priority, self.incurred_date, self.debt_id)


@dataclass(frozen=True)
class WaterfallAllocation:
    """Cash applied to a single debt."""

    debt_id: UUID
    tier: str
    amount_applied: Money
    fully_paid: bool


@dataclass(frozen=True)
class WaterfallResult:
    """
    A complete payment plan.

    Guarantees:
        - ``total_applied + remaining_cash == available_cash``.
        - ``allocations`` are in payment order; at most the last one is partial.
    """

    available_cash: Money
    allocations: tuple[WaterfallAllocation, ...]
    remaining_cash: Money

    @property
    def total_applied(self) -> Money:
        return sum_money((a.amount_applied for a in self.allocations), self.available_cash.currency)

    @property
    def paid_debt_ids(self) -> tuple[UUID, ...]:
        return tuple(a.debt_id for a in self.allocations)


class DebtWaterfallEngine:
    """
    Statutory debt-priority waterfall.

    Contract:
        Pure functions over candidate snapshots.  The caller decides which
        debts are payable; the engine only orders and allocates.
    Non-goals:
        - Does not mutate debts or deduct cash; the ledger applies the plan.
        - Does not pro-rate within a tier; same-tier debts are paid oldest
          first.
    """

    @staticmethod
    def order(candidates: Sequence[WaterfallCandidate]) -> list[WaterfallCandidate]:
        """Candidates in payment order: tier rank, incurred date, then id."""
        return sorted(candidates, key=lambda c: c.sort_key)

    @traced_engine("debt_waterfall", "1.0", fingerprint_fields=("available_cash", "candidates"))
    def allocate(
        self,
        *,
        available_cash: Money,
        candidates: Sequence[WaterfallCandidate],
    ) -> WaterfallResult:
        """
        Walk candidates in payment order, paying each in full while cash
        suffices, paying the first uncovered candidate partially, and leaving
        every later candidate untouched.
        """
        if available_cash.is_negative:
            raise InvalidAmountError(
                "available_cash", str(available_cash.amount), "must not be negative"
            )

        remaining = available_cash
        allocations: list[WaterfallAllocation] = []
        for candidate in self.order(candidates):
            if remaining.is_zero:
                break
            if not candidate.outstanding.is_positive:
                continue
            applied = candidate.outstanding.min(remaining)
            fully_paid = applied == candidate.outstanding
            allocations.append(
                WaterfallAllocation(
                    debt_id=candidate.debt_id,
                    tier=candidate.tier,
                    amount_applied=applied,
                    fully_paid=fully_paid,
                )
            )
            remaining = remaining - applied
            if not fully_paid:
                break

        result = WaterfallResult(
            available_cash=available_cash,
            allocations=tuple(allocations),
            remaining_cash=remaining,
        )
        logger.info(
            "waterfall_allocated",
            extra={
                "available_cash": str(available_cash.amount),
                "currency": available_cash.currency.code,
                "candidate_count": len(candidates),
                "allocation_count": len(allocations),
                "remaining_cash": str(remaining.amount),
            },
        )
        return result

    @staticmethod
    def priority_blockers(
        target: WaterfallCandidate,
        candidates: Sequence[WaterfallCandidate],
    ) -> tuple[WaterfallCandidate, ...]:
        """
        Candidates of strictly higher priority than ``target`` that still have
        an outstanding balance, in payment order.  Empty means a manual
        payment on ``target`` keeps to the statutory queue.
        """
        blockers = [
            c for c in candidates
            if c.debt_id != target.debt_id
            and c.priority < target.priority
            and c.outstanding.is_positive
        ]
        return tuple(sorted(blockers, key=lambda c: c.sort_key))
