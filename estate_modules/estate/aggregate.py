"""
Estate Aggregate (``estate_modules.estate.aggregate``).

Responsibility
--------------
The consistency boundary for one estate.  Owns the lifecycle state
machine, the estate cash pool and every settlement sub-ledger (assets,
debts, liquidations, tax, gifts, claims).  Every mutating command runs
inside a command guard that:

1. refuses the command while the estate is FROZEN or CLOSED,
2. captures the header record, the ledgers and the pending event list,
3. restores all of them if the command raises, and
4. on success re-checks solvency and bumps the aggregate version.

Architecture position
---------------------
**Modules layer**.  Pure in-memory domain logic with an injected
``Clock`` and ``SettlementPolicy``.  Persistence and event delivery
belong to ``estate_services``; the aggregate only accumulates pending
``DomainEvent`` objects which the service drains with
``pull_pending_events()`` after a successful save.

Invariants enforced
-------------------
* No ledger mutation while FROZEN, except ``unfreeze``.
* CLOSED is terminal.
* All money entering the estate is in the estate currency.
* Cash on hand is never negative: debt payments, tax payments and the
  waterfall draw only what the pool holds.
* A failed command leaves no trace: state and pending events are exactly
  as before the call.

Failure modes
-------------
* ``EstateFrozenError`` / ``EstateClosedError`` -- command guard rejection.
* ``InsufficientFundsError`` -- debt or tax payment larger than the cash pool.
* ``EstateNotReadyError`` -- close attempted with readiness blockers.
* Any ledger error propagates unchanged after the restore.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from estate_config.schema import SettlementPolicy
from estate_engines.waterfall import DebtWaterfallEngine, WaterfallResult
from estate_kernel.domain.clock import Clock
from estate_kernel.domain.events import DomainEvent, EventKind, money_payload
from estate_kernel.domain.values import Currency, Money, SharePercentage
from estate_kernel.exceptions import (
    CurrencyMismatchError,
    EstateClosedError,
    EstateFrozenError,
    EstateNotReadyError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidAssetTransitionError,
    InvalidEstateTransitionError,
    UnfreezeReasonTooShortError,
    ValidationError,
)
from estate_kernel.logging_config import get_logger
from estate_modules.assets.ledger import AssetLedger
from estate_modules.assets.models import (
    Asset,
    AssetDetails,
    AssetType,
    EncumbranceType,
    VerificationStatus,
)
from estate_modules.base import advance
from estate_modules.claims.ledger import ClaimLedger
from estate_modules.claims.models import DependantClaim, SettlementMethod
from estate_modules.debts.ledger import DebtLedger
from estate_modules.debts.models import (
    Debt,
    DebtStatus,
    DebtType,
    LiabilityTier,
    PaymentMethod,
)
from estate_modules.estate.models import (
    Estate,
    EstateStatus,
    EstateSummary,
    ReadinessBlocker,
    ReadinessBlockerDetail,
    ReadinessReport,
)
from estate_modules.estate.workflows import ESTATE_WORKFLOW
from estate_modules.gifts.ledger import GiftLedger
from estate_modules.gifts.models import Gift, RecoveredValueNote
from estate_modules.liquidation.ledger import LiquidationLedger
from estate_modules.liquidation.models import Liquidation, LiquidationType
from estate_modules.tax.ledger import TaxLedger
from estate_modules.tax.models import TaxRecord

logger = get_logger("modules.estate.aggregate")


class EstateAggregate:
    """One estate and all of its settlement ledgers."""

    def __init__(
        self,
        estate: Estate,
        policy: SettlementPolicy,
        clock: Clock,
        *,
        assets: AssetLedger | None = None,
        debts: DebtLedger | None = None,
        liquidations: LiquidationLedger | None = None,
        tax: TaxLedger | None = None,
        gifts: GiftLedger | None = None,
        claims: ClaimLedger | None = None,
        version: int = 0,
        event_sequence: int = 0,
    ):
        self.estate = estate
        self.policy = policy
        self._clock = clock
        self.assets = assets if assets is not None else AssetLedger()
        self.debts = debts if debts is not None else DebtLedger(engine=DebtWaterfallEngine())
        self.liquidations = liquidations if liquidations is not None else LiquidationLedger()
        self.tax = tax if tax is not None else TaxLedger(estate.currency)
        self.gifts = gifts if gifts is not None else GiftLedger(policy.inflation.build_adjuster())
        self.claims = claims if claims is not None else ClaimLedger()
        self.version = version
        self.event_sequence = event_sequence
        self._pending: list[DomainEvent] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        deceased_name: str,
        date_of_death: date,
        currency: Currency,
        created_by: UUID,
        policy: SettlementPolicy,
        clock: Clock,
        valuation_date: date | None = None,
        estate_id: UUID | None = None,
    ) -> EstateAggregate:
        """Open a new estate in DRAFT."""
        if not deceased_name or not deceased_name.strip():
            raise ValidationError("Deceased name is required", field="deceased_name")
        if date_of_death > clock.today():
            raise ValidationError(
                f"Date of death {date_of_death} is in the future",
                field="date_of_death",
            )
        valuation = valuation_date or date_of_death
        if valuation < date_of_death:
            raise ValidationError(
                f"Valuation date {valuation} precedes date of death {date_of_death}",
                field="valuation_date",
            )

        estate = Estate(
            id=estate_id or uuid4(),
            deceased_name=deceased_name.strip(),
            date_of_death=date_of_death,
            valuation_date=valuation,
            currency=currency,
            status=EstateStatus(ESTATE_WORKFLOW.initial_state),
            cash_on_hand=Money.zero(currency),
            created_by=created_by,
            created_at=clock.now(),
        )
        aggregate = cls(estate, policy, clock, version=1)
        aggregate._emit(
            EventKind.ESTATE_CREATED,
            created_by,
            deceased_name=estate.deceased_name,
            date_of_death=date_of_death.isoformat(),
            valuation_date=valuation.isoformat(),
            currency=currency.code,
            policy=policy.label,
        )
        logger.info("estate_created", extra={
            "estate_id": str(estate.id),
            "currency": currency.code,
            "policy": policy.label,
        })
        return aggregate

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def id(self) -> UUID:
        return self.estate.id

    @property
    def status(self) -> EstateStatus:
        return self.estate.status

    @property
    def currency(self) -> Currency:
        return self.estate.currency

    @property
    def cash_on_hand(self) -> Money:
        return self.estate.cash_on_hand

    @property
    def clock(self) -> Clock:
        return self._clock

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _emit(self, kind: EventKind, actor_id: UUID | None, **payload: Any) -> DomainEvent:
        self.event_sequence += 1
        event = DomainEvent(
            kind=kind,
            estate_id=self.estate.id,
            sequence=self.event_sequence,
            occurred_at=self._clock.now(),
            actor_id=actor_id,
            payload=payload,
        )
        self._pending.append(event)
        return event

    @property
    def pending_events(self) -> tuple[DomainEvent, ...]:
        return tuple(self._pending)

    def pull_pending_events(self) -> tuple[DomainEvent, ...]:
        """Drain the events produced since the last pull."""
        events = tuple(self._pending)
        self._pending.clear()
        return events

    # ------------------------------------------------------------------
    # Command guard
    # ------------------------------------------------------------------

    def _require_open(self, operation: str) -> None:
        if self.estate.status == EstateStatus.FROZEN:
            raise EstateFrozenError(str(self.estate.id), operation, self.estate.freeze_reason)
        if self.estate.status == EstateStatus.CLOSED:
            raise EstateClosedError(str(self.estate.id), operation)

    def _capture(self) -> dict[str, Any]:
        return {
            "estate": self.estate,
            "assets": self.assets.snapshot(),
            "debts": self.debts.snapshot(),
            "liquidations": self.liquidations.snapshot(),
            "tax": self.tax.snapshot(),
            "gifts": self.gifts.snapshot(),
            "claims": self.claims.snapshot(),
            "pending": len(self._pending),
            "event_sequence": self.event_sequence,
        }

    def _restore(self, saved: dict[str, Any]) -> None:
        self.estate = saved["estate"]
        self.assets.restore(saved["assets"])
        self.debts.restore(saved["debts"])
        self.liquidations.restore(saved["liquidations"])
        self.tax.restore(saved["tax"])
        self.gifts.restore(saved["gifts"])
        self.claims.restore(saved["claims"])
        del self._pending[saved["pending"]:]
        self.event_sequence = saved["event_sequence"]

    @contextmanager
    def _command(
        self,
        operation: str,
        actor_id: UUID,
        *,
        guard_open: bool = True,
    ) -> Iterator[None]:
        if guard_open:
            self._require_open(operation)
        saved = self._capture()
        try:
            yield
            self._check_solvency(actor_id)
        except Exception as exc:
            self._restore(saved)
            logger.warning("estate_command_rolled_back", extra={
                "estate_id": str(self.estate.id),
                "operation": operation,
                "error": type(exc).__name__,
            })
            raise
        self.version += 1

    def _check_solvency(self, actor_id: UUID) -> None:
        net = self.compute_net_value()
        if net.is_negative and not self.estate.insolvency_flagged:
            self.estate = replace(self.estate, insolvency_flagged=True)
            self._emit(
                EventKind.ESTATE_INSOLVENCY_DETECTED,
                actor_id,
                net_value=money_payload(net),
            )
            logger.warning("estate_insolvency_detected", extra={
                "estate_id": str(self.estate.id),
                "net_value": str(net.amount),
            })
        elif not net.is_negative and self.estate.insolvency_flagged:
            self.estate = replace(self.estate, insolvency_flagged=False)

    def _require_currency(self, money: Money, operation: str) -> None:
        if money.currency != self.estate.currency:
            raise CurrencyMismatchError(operation, money.currency.code, self.estate.currency.code)

    def _transition(self, action: str) -> EstateStatus:
        return advance(
            ESTATE_WORKFLOW,
            EstateStatus,
            self.estate.status,
            action,
            self.estate.id,
            InvalidEstateTransitionError,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self, activated_by: UUID) -> Estate:
        with self._command("activate", activated_by):
            self.estate = replace(self.estate, status=self._transition("activate"))
            self._emit(EventKind.ESTATE_ACTIVATED, activated_by)
        logger.info("estate_activated", extra={"estate_id": str(self.estate.id)})
        return self.estate

    def freeze(self, reason: str, frozen_by: UUID) -> Estate:
        with self._command("freeze", frozen_by):
            if not reason or not reason.strip():
                raise ValidationError("Freeze reason is required", field="reason")
            self.estate = replace(
                self.estate,
                status=self._transition("freeze"),
                freeze_reason=reason,
                frozen_by=frozen_by,
                frozen_at=self._clock.now(),
            )
            self._emit(EventKind.ESTATE_FROZEN, frozen_by, reason=reason)
        logger.warning("estate_frozen", extra={
            "estate_id": str(self.estate.id),
            "reason": reason,
        })
        return self.estate

    def unfreeze(self, reason: str, resolution_reference: str, unfrozen_by: UUID) -> Estate:
        with self._command("unfreeze", unfrozen_by, guard_open=False):
            if self.estate.status == EstateStatus.CLOSED:
                raise EstateClosedError(str(self.estate.id), "unfreeze")
            status = self._transition("unfreeze")
            minimum = self.policy.unfreeze_reason_min_length
            length = len((reason or "").strip())
            if length < minimum:
                raise UnfreezeReasonTooShortError(length, minimum)
            if not resolution_reference or not resolution_reference.strip():
                raise ValidationError(
                    "Resolution reference is required",
                    field="resolution_reference",
                )
            self.estate = replace(
                self.estate,
                status=status,
                freeze_reason=None,
                frozen_by=None,
                frozen_at=None,
            )
            self._emit(
                EventKind.ESTATE_UNFROZEN,
                unfrozen_by,
                reason=reason,
                resolution_reference=resolution_reference,
            )
        logger.info("estate_unfrozen", extra={
            "estate_id": str(self.estate.id),
            "resolution_reference": resolution_reference,
        })
        return self.estate

    def close(self, closure_notes: str, closed_by: UUID) -> Estate:
        with self._command("close", closed_by):
            status = self._transition("close")
            report = self.check_distribution_readiness()
            if not report.ready:
                raise EstateNotReadyError(str(self.estate.id), report.blocker_names)
            self.estate = replace(
                self.estate,
                status=status,
                closure_notes=closure_notes,
                closed_by=closed_by,
                closed_at=self._clock.now(),
            )
            self._emit(EventKind.ESTATE_CLOSED, closed_by, closure_notes=closure_notes)
        logger.info("estate_closed", extra={"estate_id": str(self.estate.id)})
        return self.estate

    def record_cash_receipt(
        self,
        amount: Money,
        source: str,
        received_by: UUID,
        reference: str | None = None,
    ) -> Money:
        """Credit the cash pool, e.g. bank balances collected in."""
        with self._command("record_cash_receipt", received_by):
            self._require_currency(amount, "record_cash_receipt")
            if not amount.is_positive:
                raise InvalidAmountError("amount", str(amount.amount), "must be positive")
            if not source or not source.strip():
                raise ValidationError("Cash source is required", field="source")
            self.estate = replace(self.estate, cash_on_hand=self.estate.cash_on_hand + amount)
            self._emit(
                EventKind.ESTATE_CASH_RECEIVED,
                received_by,
                amount=money_payload(amount),
                source=source,
                reference=reference,
            )
        return self.estate.cash_on_hand

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def add_asset(
        self,
        *,
        name: str,
        asset_type: AssetType,
        details: AssetDetails,
        value: Money,
        added_by: UUID,
        description: str | None = None,
        asset_id: UUID | None = None,
    ) -> Asset:
        with self._command("add_asset", added_by):
            self._require_currency(value, "add_asset")
            asset = self.assets.add(
                asset_id=asset_id or uuid4(),
                estate_id=self.estate.id,
                name=name,
                asset_type=asset_type,
                details=details,
                value=value,
                now=self._clock.now(),
                description=description,
            )
            self._emit(
                EventKind.ASSET_ADDED,
                added_by,
                asset_id=str(asset.id),
                asset_type=asset_type.value,
                value=money_payload(value),
            )
        return asset

    def submit_asset_for_verification(self, asset_id: UUID, submitted_by: UUID) -> Asset:
        with self._command("submit_asset_for_verification", submitted_by):
            asset = self.assets.submit_for_verification(asset_id)
            self._emit(EventKind.ASSET_SUBMITTED_FOR_VERIFICATION, submitted_by, asset_id=str(asset_id))
        return asset

    def verify_asset(self, asset_id: UUID, notes: str | None, verified_by: UUID) -> Asset:
        with self._command("verify_asset", verified_by):
            asset = self.assets.verify(asset_id, notes)
            self._emit(EventKind.ASSET_VERIFIED, verified_by, asset_id=str(asset_id), notes=notes)
        return asset

    def reject_asset(self, asset_id: UUID, reason: str, rejected_by: UUID) -> Asset:
        with self._command("reject_asset", rejected_by):
            asset = self.assets.reject(asset_id, reason)
            self._emit(EventKind.ASSET_REJECTED, rejected_by, asset_id=str(asset_id), reason=reason)
        return asset

    def dispute_asset(self, asset_id: UUID, reason: str, disputed_by: UUID) -> Asset:
        with self._command("dispute_asset", disputed_by):
            asset = self.assets.dispute(asset_id, reason)
            self._emit(EventKind.ASSET_DISPUTED, disputed_by, asset_id=str(asset_id), reason=reason)
        return asset

    def add_co_owner(
        self,
        asset_id: UUID,
        holder_id: UUID,
        share_percentage: SharePercentage,
        added_by: UUID,
    ) -> Asset:
        with self._command("add_co_owner", added_by):
            asset = self.assets.add_co_owner(asset_id, holder_id, share_percentage, self._clock.now())
            self._emit(
                EventKind.ASSET_CO_OWNER_ADDED,
                added_by,
                asset_id=str(asset_id),
                holder_id=str(holder_id),
                share_percentage=str(share_percentage.value),
            )
        return asset

    def add_encumbrance(
        self,
        asset_id: UUID,
        encumbrance_type: EncumbranceType,
        amount: Money,
        description: str,
        added_by: UUID,
    ) -> Asset:
        with self._command("add_encumbrance", added_by):
            self._require_currency(amount, "add_encumbrance")
            asset = self.assets.add_encumbrance(
                asset_id, encumbrance_type, amount, description, self._clock.now()
            )
            self._emit(
                EventKind.ASSET_ENCUMBERED,
                added_by,
                asset_id=str(asset_id),
                encumbrance_type=encumbrance_type.value,
                amount=money_payload(amount),
            )
        return asset

    def update_asset_value(self, asset_id: UUID, value: Money, updated_by: UUID) -> Asset:
        with self._command("update_asset_value", updated_by):
            self._require_currency(value, "update_asset_value")
            previous = self.assets.get(asset_id).value
            asset = self.assets.update_value(asset_id, value)
            self._emit(
                EventKind.ASSET_VALUE_UPDATED,
                updated_by,
                asset_id=str(asset_id),
                previous_value=money_payload(previous),
                value=money_payload(value),
            )
        return asset

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------

    def add_debt(
        self,
        *,
        debt_type: DebtType,
        creditor_name: str,
        amount: Money,
        incurred_date: date,
        added_by: UUID,
        tier: LiabilityTier | None = None,
        secured_asset_id: UUID | None = None,
        description: str | None = None,
        debt_id: UUID | None = None,
    ) -> Debt:
        with self._command("add_debt", added_by):
            self._require_currency(amount, "add_debt")
            resolved_tier = tier or LiabilityTier(self.policy.default_tier_for(debt_type.value))
            if secured_asset_id is not None:
                self.assets.get(secured_asset_id)
            debt = self.debts.add(
                debt_id=debt_id or uuid4(),
                estate_id=self.estate.id,
                debt_type=debt_type,
                creditor_name=creditor_name,
                amount=amount,
                tier=resolved_tier,
                incurred_date=incurred_date,
                now=self._clock.now(),
                secured_asset_id=secured_asset_id,
                description=description,
            )
            self._emit(
                EventKind.DEBT_RECORDED,
                added_by,
                debt_id=str(debt.id),
                tier=resolved_tier.value,
                amount=money_payload(amount),
                debt_type=debt_type.value,
                creditor_name=debt.creditor_name,
            )
        return debt

    def _debit_cash(self, amount: Money) -> None:
        available = self.estate.cash_on_hand
        if amount > available:
            raise InsufficientFundsError(
                requested=str(amount.amount),
                available=str(available.amount),
                currency=available.currency.code,
            )
        self.estate = replace(self.estate, cash_on_hand=available - amount)

    def _emit_payment(self, debt: Debt, amount: Money, actor_id: UUID) -> None:
        self._emit(
            EventKind.DEBT_PAYMENT_APPLIED,
            actor_id,
            debt_id=str(debt.id),
            amount=money_payload(amount),
            outstanding=money_payload(debt.outstanding),
        )
        if debt.status == DebtStatus.PAID:
            self._emit(EventKind.DEBT_SETTLED, actor_id, debt_id=str(debt.id))

    def pay_debt(
        self,
        debt_id: UUID,
        amount: Money,
        method: PaymentMethod,
        paid_by: UUID,
        reference: str | None = None,
    ) -> Debt:
        """Manual payment through the priority gate, capped at the outstanding balance."""
        with self._command("pay_debt", paid_by):
            self._require_currency(amount, "pay_debt")
            applied = self.debts.authorize_payment(debt_id, amount)
            self._debit_cash(applied)
            debt = self.debts.apply_payment(
                debt_id, applied, method, reference, paid_by, self._clock.now()
            )
            self._emit_payment(debt, applied, paid_by)
        return debt

    def dispute_debt(
        self,
        debt_id: UUID,
        reason: str,
        disputed_by: UUID,
        evidence_doc_id: str | None = None,
    ) -> Debt:
        with self._command("dispute_debt", disputed_by):
            debt = self.debts.dispute(debt_id, reason, evidence_doc_id)
            self._emit(
                EventKind.DEBT_DISPUTED,
                disputed_by,
                debt_id=str(debt_id),
                reason=reason,
                evidence_doc_id=evidence_doc_id,
            )
        return debt

    def resolve_debt_dispute(
        self,
        debt_id: UUID,
        resolution: str,
        resolved_by: UUID,
        negotiated_amount: Money | None = None,
    ) -> Debt:
        with self._command("resolve_debt_dispute", resolved_by):
            if negotiated_amount is not None:
                self._require_currency(negotiated_amount, "resolve_debt_dispute")
            debt = self.debts.resolve_dispute(debt_id, resolution, negotiated_amount)
            self._emit(
                EventKind.DEBT_DISPUTE_RESOLVED,
                resolved_by,
                debt_id=str(debt_id),
                resolution=resolution,
                amount=money_payload(debt.amount),
            )
        return debt

    def write_off_debt(
        self,
        debt_id: UUID,
        reason: str,
        authorized_by: UUID,
        amount: Money | None = None,
    ) -> Debt:
        with self._command("write_off_debt", authorized_by):
            if amount is not None:
                self._require_currency(amount, "write_off_debt")
            debt, written = self.debts.write_off(debt_id, reason, amount)
            self._emit(
                EventKind.DEBT_WRITTEN_OFF,
                authorized_by,
                debt_id=str(debt_id),
                amount=money_payload(written),
                reason=reason,
                status=debt.status.value,
            )
        return debt

    def execute_waterfall(
        self,
        authorized_by: UUID,
        available_cash: Money | None = None,
    ) -> WaterfallResult:
        """Pay payable debts in statutory order out of the cash pool."""
        with self._command("execute_waterfall", authorized_by):
            pool = self.estate.cash_on_hand
            cash = pool if available_cash is None else available_cash
            self._require_currency(cash, "execute_waterfall")
            if cash > pool:
                raise InsufficientFundsError(
                    requested=str(cash.amount),
                    available=str(pool.amount),
                    currency=pool.currency.code,
                )
            plan = self.debts.plan_waterfall(cash)
            now = self._clock.now()
            for allocation in plan.allocations:
                debt = self.debts.apply_payment(
                    allocation.debt_id,
                    allocation.amount_applied,
                    PaymentMethod.WATERFALL,
                    None,
                    authorized_by,
                    now,
                )
                self._emit_payment(debt, allocation.amount_applied, authorized_by)
            self._debit_cash(plan.total_applied)
            self._emit(
                EventKind.WATERFALL_EXECUTED,
                authorized_by,
                available_cash=money_payload(cash),
                allocations=[
                    {
                        "debt_id": str(a.debt_id),
                        "tier": a.tier,
                        "amount_applied": str(a.amount_applied.amount),
                        "fully_paid": a.fully_paid,
                    }
                    for a in plan.allocations
                ],
                remaining_cash=money_payload(plan.remaining_cash),
            )
        logger.info("waterfall_executed", extra={
            "estate_id": str(self.estate.id),
            "available_cash": str(cash.amount),
            "debts_paid": len(plan.allocations),
            "remaining_cash": str(plan.remaining_cash.amount),
        })
        return plan

    def mark_statute_barred_debts(self, as_of: date, marked_by: UUID) -> list[Debt]:
        with self._command("mark_statute_barred_debts", marked_by):
            barred = []
            for debt in self.debts.statute_barred_as_of(as_of, self.policy.limitation):
                marked = self.debts.mark_statute_barred(debt.id)
                barred.append(marked)
                self._emit(
                    EventKind.DEBT_STATUTE_BARRED,
                    marked_by,
                    debt_id=str(debt.id),
                    as_of=as_of.isoformat(),
                    outstanding=money_payload(marked.outstanding),
                )
        if barred:
            logger.info("debts_statute_barred", extra={
                "estate_id": str(self.estate.id),
                "count": len(barred),
                "as_of": as_of.isoformat(),
            })
        return barred

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    def initiate_liquidation(
        self,
        *,
        asset_id: UUID,
        liquidation_type: LiquidationType,
        reason: str,
        initiated_by: UUID,
        target_amount: Money | None = None,
        liquidation_id: UUID | None = None,
    ) -> Liquidation:
        with self._command("initiate_liquidation", initiated_by):
            asset = self.assets.get(asset_id)
            if asset.status == VerificationStatus.REJECTED:
                raise InvalidAssetTransitionError(str(asset_id), asset.status.value, "liquidate")
            if target_amount is not None:
                self._require_currency(target_amount, "initiate_liquidation")
            liquidation = self.liquidations.initiate(
                liquidation_id=liquidation_id or uuid4(),
                estate_id=self.estate.id,
                asset_id=asset_id,
                liquidation_type=liquidation_type,
                reason=reason,
                initiated_by=initiated_by,
                now=self._clock.now(),
                target_amount=target_amount,
            )
            self._emit(
                EventKind.LIQUIDATION_INITIATED,
                initiated_by,
                liquidation_id=str(liquidation.id),
                asset_id=str(asset_id),
                liquidation_type=liquidation_type.value,
            )
        return liquidation

    def submit_liquidation(self, liquidation_id: UUID, submitted_by: UUID) -> Liquidation:
        with self._command("submit_liquidation", submitted_by):
            liquidation = self.liquidations.submit_for_approval(liquidation_id)
            self._emit(EventKind.LIQUIDATION_SUBMITTED, submitted_by, liquidation_id=str(liquidation_id))
        return liquidation

    def approve_liquidation(
        self,
        liquidation_id: UUID,
        notes: str,
        approved_by: UUID,
        court_order_reference: str | None = None,
    ) -> Liquidation:
        with self._command("approve_liquidation", approved_by):
            liquidation = self.liquidations.approve(
                liquidation_id, notes, approved_by, court_order_reference
            )
            self._emit(
                EventKind.LIQUIDATION_APPROVED,
                approved_by,
                liquidation_id=str(liquidation_id),
                court_order_reference=court_order_reference,
            )
        return liquidation

    def record_liquidation_sale(
        self,
        liquidation_id: UUID,
        price: Money,
        buyer_reference: str,
        sale_date: date,
        recorded_by: UUID,
    ) -> Liquidation:
        with self._command("record_liquidation_sale", recorded_by):
            self._require_currency(price, "record_liquidation_sale")
            liquidation = self.liquidations.record_sale(
                liquidation_id, price, buyer_reference, sale_date
            )
            self._emit(
                EventKind.LIQUIDATION_SALE_RECORDED,
                recorded_by,
                liquidation_id=str(liquidation_id),
                price=money_payload(price),
                sale_date=sale_date.isoformat(),
            )
        return liquidation

    def receive_liquidation_proceeds(
        self,
        liquidation_id: UUID,
        amount: Money,
        received_by: UUID,
    ) -> Liquidation:
        """Record proceeds and credit them to the cash pool."""
        with self._command("receive_liquidation_proceeds", received_by):
            self._require_currency(amount, "receive_liquidation_proceeds")
            liquidation = self.liquidations.receive_proceeds(liquidation_id, amount)
            self.estate = replace(self.estate, cash_on_hand=self.estate.cash_on_hand + amount)
            self._emit(
                EventKind.LIQUIDATION_PROCEEDS_RECEIVED,
                received_by,
                liquidation_id=str(liquidation_id),
                asset_id=str(liquidation.asset_id),
                amount=money_payload(amount),
            )
        logger.info("liquidation_proceeds_received", extra={
            "estate_id": str(self.estate.id),
            "liquidation_id": str(liquidation_id),
            "amount": str(amount.amount),
            "cash_on_hand": str(self.estate.cash_on_hand.amount),
        })
        return liquidation

    def cancel_liquidation(self, liquidation_id: UUID, reason: str, cancelled_by: UUID) -> Liquidation:
        with self._command("cancel_liquidation", cancelled_by):
            liquidation = self.liquidations.cancel(liquidation_id, reason)
            self._emit(
                EventKind.LIQUIDATION_CANCELLED,
                cancelled_by,
                liquidation_id=str(liquidation_id),
                reason=reason,
            )
        return liquidation

    # ------------------------------------------------------------------
    # Tax
    # ------------------------------------------------------------------

    def record_tax_assessment(
        self,
        *,
        reference: str,
        assessment_date: date,
        assessed_by: UUID,
        income_tax: Money | None = None,
        capital_gains_tax: Money | None = None,
        stamp_duty: Money | None = None,
        other_levies: Money | None = None,
    ) -> TaxRecord:
        with self._command("record_tax_assessment", assessed_by):
            for head in (income_tax, capital_gains_tax, stamp_duty, other_levies):
                if head is not None:
                    self._require_currency(head, "record_tax_assessment")
            record = self.tax.record_assessment(
                reference=reference,
                assessment_date=assessment_date,
                assessed_by=assessed_by,
                now=self._clock.now(),
                income_tax=income_tax,
                capital_gains_tax=capital_gains_tax,
                stamp_duty=stamp_duty,
                other_levies=other_levies,
            )
            self._emit(
                EventKind.TAX_ASSESSMENT_RECORDED,
                assessed_by,
                reference=reference,
                total_assessed=money_payload(record.total_assessed),
            )
        return record

    def record_tax_payment(
        self,
        *,
        amount: Money,
        payment_date: date,
        reference: str,
        paid_by: UUID,
    ) -> TaxRecord:
        with self._command("record_tax_payment", paid_by):
            self._require_currency(amount, "record_tax_payment")
            was_cleared = self.tax.is_cleared()
            record = self.tax.record_payment(
                amount=amount,
                payment_date=payment_date,
                reference=reference,
                paid_by=paid_by,
                now=self._clock.now(),
            )
            self._debit_cash(amount)
            self._emit(
                EventKind.TAX_PAYMENT_RECORDED,
                paid_by,
                amount=money_payload(amount),
                reference=reference,
            )
            self._emit_if_cleared(was_cleared, paid_by)
        return record

    def upload_clearance_certificate(self, reference: str, uploaded_by: UUID) -> TaxRecord:
        with self._command("upload_clearance_certificate", uploaded_by):
            was_cleared = self.tax.is_cleared()
            record = self.tax.upload_clearance_certificate(
                reference=reference,
                uploaded_by=uploaded_by,
                now=self._clock.now(),
            )
            self._emit(
                EventKind.TAX_CLEARANCE_CERTIFICATE_UPLOADED,
                uploaded_by,
                reference=reference,
            )
            self._emit_if_cleared(was_cleared, uploaded_by)
        return record

    def _emit_if_cleared(self, was_cleared: bool, actor_id: UUID) -> None:
        if not was_cleared and self.tax.is_cleared():
            self._emit(EventKind.TAX_CLEARED, actor_id)
            logger.info("tax_cleared", extra={"estate_id": str(self.estate.id)})

    def is_tax_cleared(self) -> bool:
        return self.tax.is_cleared()

    # ------------------------------------------------------------------
    # Gifts
    # ------------------------------------------------------------------

    def record_gift(
        self,
        *,
        recipient_id: UUID,
        original_value: Money,
        gift_date: date,
        recorded_by: UUID,
        description: str | None = None,
        gift_id: UUID | None = None,
    ) -> Gift:
        with self._command("record_gift", recorded_by):
            self._require_currency(original_value, "record_gift")
            gift = self.gifts.record(
                gift_id=gift_id or uuid4(),
                estate_id=self.estate.id,
                recipient_id=recipient_id,
                original_value=original_value,
                gift_date=gift_date,
                valuation_date=self.estate.valuation_date,
                now=self._clock.now(),
                description=description,
            )
            self._emit(
                EventKind.GIFT_RECORDED,
                recorded_by,
                gift_id=str(gift.id),
                recipient_id=str(recipient_id),
                original_value=money_payload(original_value),
            )
            self._emit(
                EventKind.GIFT_HOTCHPOT_APPLIED,
                recorded_by,
                gift_id=str(gift.id),
                original_value=money_payload(original_value),
                hotchpot_value=money_payload(gift.hotchpot_value),
                adjuster_version=gift.adjuster_version,
            )
        return gift

    def contest_gift(self, gift_id: UUID, reason: str, contested_by: UUID) -> Gift:
        with self._command("contest_gift", contested_by):
            gift = self.gifts.contest(gift_id, reason)
            self._emit(EventKind.GIFT_CONTESTED, contested_by, gift_id=str(gift_id), reason=reason)
        return gift

    def resolve_gift_dispute(self, gift_id: UUID, resolution: str, resolved_by: UUID) -> Gift:
        with self._command("resolve_gift_dispute", resolved_by):
            gift = self.gifts.resolve(gift_id, resolution)
            self._emit(
                EventKind.GIFT_DISPUTE_RESOLVED,
                resolved_by,
                gift_id=str(gift_id),
                resolution=resolution,
            )
        return gift

    def reclaim_gift(self, gift_id: UUID, reason: str, reclaimed_by: UUID) -> RecoveredValueNote:
        with self._command("reclaim_gift", reclaimed_by):
            _, note = self.gifts.reclaim(gift_id, reason, self._clock.now())
            self._emit(
                EventKind.GIFT_RECLAIMED,
                reclaimed_by,
                gift_id=str(gift_id),
                recovered_value=money_payload(note.amount),
                reason=reason,
            )
        return note

    # ------------------------------------------------------------------
    # Dependant claims
    # ------------------------------------------------------------------

    def file_claim(
        self,
        *,
        dependant_id: UUID,
        relationship: str,
        basis: str,
        filed_by: UUID,
        requested_amount: Money | None = None,
        claim_id: UUID | None = None,
    ) -> DependantClaim:
        with self._command("file_claim", filed_by):
            if requested_amount is not None:
                self._require_currency(requested_amount, "file_claim")
            claim = self.claims.file(
                claim_id=claim_id or uuid4(),
                estate_id=self.estate.id,
                dependant_id=dependant_id,
                relationship=relationship,
                basis=basis,
                filed_by=filed_by,
                now=self._clock.now(),
                requested_amount=requested_amount,
            )
            self._emit(
                EventKind.CLAIM_FILED,
                filed_by,
                claim_id=str(claim.id),
                dependant_id=str(dependant_id),
                relationship=relationship,
            )
        return claim

    def add_claim_evidence(
        self,
        claim_id: UUID,
        document_id: str,
        description: str,
        added_by: UUID,
    ) -> DependantClaim:
        with self._command("add_claim_evidence", added_by):
            claim = self.claims.add_evidence(
                claim_id, document_id, description, added_by, self._clock.now()
            )
            self._emit(
                EventKind.CLAIM_EVIDENCE_ADDED,
                added_by,
                claim_id=str(claim_id),
                document_id=document_id,
            )
        return claim

    def verify_claim(self, claim_id: UUID, notes: str, verified_by: UUID) -> DependantClaim:
        with self._command("verify_claim", verified_by):
            claim = self.claims.verify(claim_id, notes)
            self._emit(EventKind.CLAIM_VERIFIED, verified_by, claim_id=str(claim_id))
        return claim

    def reject_claim(self, claim_id: UUID, reason: str, rejected_by: UUID) -> DependantClaim:
        with self._command("reject_claim", rejected_by):
            claim = self.claims.reject(claim_id, reason)
            self._emit(EventKind.CLAIM_REJECTED, rejected_by, claim_id=str(claim_id), reason=reason)
        return claim

    def settle_claim(
        self,
        claim_id: UUID,
        allocation: Money,
        method: SettlementMethod,
        settled_by: UUID,
    ) -> DependantClaim:
        with self._command("settle_claim", settled_by):
            self._require_currency(allocation, "settle_claim")
            claim = self.claims.settle(
                claim_id,
                allocation,
                method,
                self.compute_distributable_pool(),
                self._clock.now(),
            )
            self._emit(
                EventKind.CLAIM_SETTLED,
                settled_by,
                claim_id=str(claim_id),
                allocation=money_payload(allocation),
                method=method.value,
            )
        return claim

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def gross_asset_value(self) -> Money:
        """Valued assets not yet converted into cash."""
        excluded = self.liquidations.liquidated_asset_ids()
        total = Money.zero(self.currency)
        for asset in self.assets.valued(excluded):
            total = total + asset.value
        return total

    def compute_net_value(self) -> Money:
        """
        Assets + cash + hotchpot + recovered notes, less payable debts and
        unpaid assessed tax.
        """
        currency = self.currency
        return (
            self.gross_asset_value()
            + self.estate.cash_on_hand
            + self.gifts.hotchpot_total(currency)
            + self.gifts.recovered_total(currency)
            - self.debts.outstanding_liabilities(currency)
            - self.tax.record.unpaid_liability
        )

    def compute_distributable_pool(self) -> Money:
        """Net value not yet committed to settled dependant claims."""
        return self.compute_net_value() - self.claims.settled_total(self.currency)

    def is_solvent(self) -> bool:
        return not self.compute_net_value().is_negative

    def check_distribution_readiness(self) -> ReadinessReport:
        blockers: list[ReadinessBlockerDetail] = []
        if self.estate.status == EstateStatus.FROZEN:
            blockers.append(ReadinessBlockerDetail(ReadinessBlocker.ESTATE_FROZEN))
        checks = (
            (ReadinessBlocker.DISPUTED_ASSET, self.assets.disputed()),
            (ReadinessBlocker.UNVERIFIED_ASSET, self.assets.unverified(self.liquidations.liquidated_asset_ids())),
            (ReadinessBlocker.REJECTED_ASSET, self.assets.rejected()),
            (ReadinessBlocker.DISPUTED_DEBT, self.debts.disputed()),
            (ReadinessBlocker.CONTESTED_GIFT, self.gifts.contested()),
        )
        for blocker, entities in checks:
            if entities:
                blockers.append(ReadinessBlockerDetail(blocker, tuple(e.id for e in entities)))
        if not self.tax.is_cleared():
            blockers.append(ReadinessBlockerDetail(ReadinessBlocker.TAX_NOT_CLEARED))
        pending = self.claims.pending()
        if pending:
            blockers.append(ReadinessBlockerDetail(
                ReadinessBlocker.PENDING_CLAIM, tuple(c.id for c in pending)
            ))
        return ReadinessReport(blockers=tuple(blockers))

    def summary(self) -> EstateSummary:
        net = self.compute_net_value()
        return EstateSummary(
            estate_id=self.estate.id,
            status=self.estate.status,
            currency=self.currency,
            cash_on_hand=self.estate.cash_on_hand,
            net_value=net,
            distributable_pool=net - self.claims.settled_total(self.currency),
            outstanding_liabilities=self.debts.outstanding_liabilities(self.currency),
            asset_count=len(self.assets),
            debt_count=len(self.debts),
            liquidation_count=len(self.liquidations),
            gift_count=len(self.gifts),
            claim_count=len(self.claims),
            tax_cleared=self.tax.is_cleared(),
            readiness=self.check_distribution_readiness(),
            version=self.version,
            policy=self.policy.label,
        )
