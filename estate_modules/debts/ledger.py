"""
Debt Ledger (``estate_modules.debts.ledger``).

Responsibility
--------------
Holds the estate's debts, exposes the payable set (RECORDED and
PARTIALLY_PAID) to the waterfall engine, and applies payments, disputes,
dispute resolutions, write-offs and statute-bar markings.

Architecture position
---------------------
**Modules layer**.  All ordering decisions are delegated to
``estate_engines.waterfall.DebtWaterfallEngine`` so that the manual
payment path and the waterfall path share one definition of priority.
Cash is not held here; the aggregate checks and debits its cash pool.

Invariants enforced
-------------------
* Manual payments pass the priority gate: no payable debt of a strictly
  higher tier may remain outstanding.
* Payments are capped at the outstanding balance.
* DISPUTED and terminal debts are never paid.
* Secured-tier debts reference the asset they are secured on.

Failure modes
-------------
* ``HigherPriorityDebtUnpaidError`` -- priority gate rejection.
* ``InvalidDebtTransitionError`` -- action not allowed in current status.
* ``InvalidAmountError`` / ``ValidationError`` -- malformed input.
* ``DebtNotFoundError`` -- unknown debt id.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from uuid import UUID

from estate_config.schema import LimitationPeriods
from estate_engines.waterfall import DebtWaterfallEngine, WaterfallCandidate, WaterfallResult
from estate_kernel.domain.values import Currency, Money, sum_money
from estate_kernel.exceptions import (
    DebtNotFoundError,
    HigherPriorityDebtUnpaidError,
    InvalidAmountError,
    InvalidDebtTransitionError,
    ValidationError,
)
from estate_kernel.logging_config import get_logger
from estate_modules.base import EntityLedger, advance
from estate_modules.debts.models import (
    Debt,
    DebtPayment,
    DebtStatus,
    DebtType,
    LiabilityTier,
    PaymentMethod,
)
from estate_modules.debts.workflows import DEBT_WORKFLOW

logger = get_logger("modules.debts.ledger")


def _years_after(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


class DebtLedger(EntityLedger[Debt]):
    not_found_error = DebtNotFoundError

    def __init__(
        self,
        entities: dict[UUID, Debt] | None = None,
        engine: DebtWaterfallEngine | None = None,
    ):
        super().__init__(entities)
        self._engine = engine or DebtWaterfallEngine()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def add(
        self,
        *,
        debt_id: UUID,
        estate_id: UUID,
        debt_type: DebtType,
        creditor_name: str,
        amount: Money,
        tier: LiabilityTier,
        incurred_date: date,
        now: datetime,
        secured_asset_id: UUID | None = None,
        description: str | None = None,
    ) -> Debt:
        if not creditor_name or not creditor_name.strip():
            raise ValidationError("Creditor name is required", field="creditor_name")
        if not amount.is_positive:
            raise InvalidAmountError("amount", str(amount.amount), "must be positive")
        if tier == LiabilityTier.SECURED_DEBTS and secured_asset_id is None:
            raise ValidationError(
                "Secured debts must reference the asset they are secured on",
                field="secured_asset_id",
            )

        zero = Money.zero(amount.currency)
        debt = Debt(
            id=debt_id,
            estate_id=estate_id,
            debt_type=debt_type,
            creditor_name=creditor_name.strip(),
            amount=amount,
            tier=tier,
            incurred_date=incurred_date,
            status=DebtStatus.RECORDED,
            amount_paid=zero,
            written_off_amount=zero,
            created_at=now,
            secured_asset_id=secured_asset_id,
            description=description,
        )
        logger.info("debt_recorded", extra={
            "debt_id": str(debt_id),
            "tier": tier.value,
            "amount": str(amount.amount),
            "currency": amount.currency.code,
        })
        return self._put(debt_id, debt)

    # ------------------------------------------------------------------
    # Payable set and priority
    # ------------------------------------------------------------------

    def payable(self) -> list[Debt]:
        return [d for d in self if d.is_payable]

    @staticmethod
    def _candidate(debt: Debt) -> WaterfallCandidate:
        return WaterfallCandidate(
            debt_id=debt.id,
            priority=debt.tier.rank,
            tier=debt.tier.value,
            incurred_date=debt.incurred_date,
            outstanding=debt.outstanding,
        )

    def candidates(self) -> list[WaterfallCandidate]:
        return [self._candidate(d) for d in self.payable()]

    def priority_blockers(self, debt_id: UUID) -> list[Debt]:
        debt = self.get(debt_id)
        blockers = self._engine.priority_blockers(self._candidate(debt), self.candidates())
        return [self.get(b.debt_id) for b in blockers]

    def authorize_payment(self, debt_id: UUID, amount: Money) -> Money:
        """
        Validate a manual payment and return the amount that would be applied.

        Raises before any state changes if the debt is not payable, the
        amount is not positive, or the priority gate blocks the payment.
        """
        debt = self.get(debt_id)
        if not amount.is_positive:
            raise InvalidAmountError("amount", str(amount.amount), "must be positive")
        if not debt.is_payable:
            raise InvalidDebtTransitionError(str(debt_id), debt.status.value, "pay")

        blockers = self.priority_blockers(debt_id)
        if blockers:
            logger.warning("priority_gate_rejected", extra={
                "debt_id": str(debt_id),
                "tier": debt.tier.value,
                "blocking_debt_ids": [str(b.id) for b in blockers],
            })
            raise HigherPriorityDebtUnpaidError(
                debt_id=str(debt_id),
                tier=debt.tier.value,
                blocking_debt_ids=[str(b.id) for b in blockers],
                blocking_tiers=[b.tier.value for b in blockers],
            )
        return amount.min(debt.outstanding)

    def apply_payment(
        self,
        debt_id: UUID,
        amount: Money,
        method: PaymentMethod,
        reference: str | None,
        paid_by: UUID,
        now: datetime,
    ) -> Debt:
        """Record a payment already cleared by the gate or the waterfall plan."""
        debt = self.get(debt_id)
        if amount > debt.outstanding:
            raise InvalidAmountError(
                "amount", str(amount.amount), f"exceeds outstanding {debt.outstanding.amount}"
            )
        action = "pay_full" if amount == debt.outstanding else "pay_partial"
        status = advance(DEBT_WORKFLOW, DebtStatus, debt.status, action, debt_id, InvalidDebtTransitionError)
        payment = DebtPayment(
            amount=amount,
            method=method,
            reference=reference,
            paid_by=paid_by,
            paid_at=now,
        )
        updated = replace(
            debt,
            status=status,
            amount_paid=debt.amount_paid + amount,
            payments=debt.payments + (payment,),
        )
        logger.info("debt_payment_applied", extra={
            "debt_id": str(debt_id),
            "amount": str(amount.amount),
            "method": method.value,
            "status": status.value,
            "outstanding": str(updated.outstanding.amount),
        })
        return self._put(debt_id, updated)

    def plan_waterfall(self, available_cash: Money) -> WaterfallResult:
        return self._engine.allocate(available_cash=available_cash, candidates=self.candidates())

    # ------------------------------------------------------------------
    # Disputes and write-offs
    # ------------------------------------------------------------------

    def dispute(self, debt_id: UUID, reason: str, evidence_doc_id: str | None) -> Debt:
        if not reason or not reason.strip():
            raise ValidationError("Dispute reason is required", field="reason")
        debt = self.get(debt_id)
        status = advance(DEBT_WORKFLOW, DebtStatus, debt.status, "dispute", debt_id, InvalidDebtTransitionError)
        return self._put(debt_id, replace(
            debt,
            status=status,
            dispute_reason=reason,
            dispute_evidence_doc_id=evidence_doc_id,
        ))

    def resolve_dispute(
        self,
        debt_id: UUID,
        resolution: str,
        negotiated_amount: Money | None = None,
    ) -> Debt:
        if not resolution or not resolution.strip():
            raise ValidationError("Resolution is required", field="resolution")
        debt = self.get(debt_id)
        status = advance(DEBT_WORKFLOW, DebtStatus, debt.status, "resolve", debt_id, InvalidDebtTransitionError)
        amount = debt.amount
        if negotiated_amount is not None:
            settled = debt.amount_paid + debt.written_off_amount
            if negotiated_amount <= settled:
                raise InvalidAmountError(
                    "negotiated_amount",
                    str(negotiated_amount.amount),
                    f"must exceed amount already settled {settled.amount}",
                )
            amount = negotiated_amount
        return self._put(debt_id, replace(
            debt,
            status=status,
            amount=amount,
            resolution=resolution,
        ))

    def write_off(
        self,
        debt_id: UUID,
        reason: str,
        amount: Money | None = None,
    ) -> tuple[Debt, Money]:
        """Write off ``amount`` (default: everything outstanding)."""
        if not reason or not reason.strip():
            raise ValidationError("Write-off reason is required", field="reason")
        debt = self.get(debt_id)
        outstanding = debt.outstanding
        written = outstanding if amount is None else amount
        if not written.is_positive:
            raise InvalidAmountError("amount", str(written.amount), "must be positive")
        if written > outstanding:
            raise InvalidAmountError(
                "amount", str(written.amount), f"exceeds outstanding {outstanding.amount}"
            )
        action = "write_off" if written == outstanding else "write_off_partial"
        status = advance(DEBT_WORKFLOW, DebtStatus, debt.status, action, debt_id, InvalidDebtTransitionError)
        updated = replace(
            debt,
            status=status,
            written_off_amount=debt.written_off_amount + written,
            write_off_reason=reason,
        )
        logger.info("debt_written_off", extra={
            "debt_id": str(debt_id),
            "amount": str(written.amount),
            "status": status.value,
        })
        return self._put(debt_id, updated), written

    # ------------------------------------------------------------------
    # Limitation
    # ------------------------------------------------------------------

    def statute_barred_as_of(self, as_of: date, limitation: LimitationPeriods) -> list[Debt]:
        """Payable debts whose limitation period has run by ``as_of``."""
        barred = []
        for debt in self.payable():
            years = limitation.secured_years if debt.is_secured else limitation.unsecured_years
            if _years_after(debt.last_activity_date, years) <= as_of:
                barred.append(debt)
        return barred

    def mark_statute_barred(self, debt_id: UUID) -> Debt:
        debt = self.get(debt_id)
        status = advance(DEBT_WORKFLOW, DebtStatus, debt.status, "statute_bar", debt_id, InvalidDebtTransitionError)
        return self._put(debt_id, replace(debt, status=status))

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def outstanding_liabilities(self, currency: Currency) -> Money:
        """Outstanding balance across the payable set."""
        return sum_money((d.outstanding for d in self.payable()), currency)

    def disputed(self) -> list[Debt]:
        return [d for d in self if d.status == DebtStatus.DISPUTED]
