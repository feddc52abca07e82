"""
estate_services.settlement_service -- Command unit of work for estates.

Responsibility:
    Executes one typed command against one estate: load the aggregate and
    its version, run the command in memory, save with a compare-and-swap,
    then hand the command's events to the event sink.  Domain errors are
    returned as ``CommandResult.failure``; they never cross this boundary
    as exceptions.

Architecture position:
    Services -- the outermost layer of the engine.  Constructed with an
    ``EstateRepository``, the ``SettlementPolicy`` and a ``Clock``; no
    module-level state.

Invariants enforced:
    - One command, one version increment, one save.
    - Events reach the sink only after the save succeeded.
    - Every log record emitted while a command runs carries the
      correlation id, estate id, actor id and command name.

Failure modes:
    - ``EstateKernelError`` subclasses -> ``CommandResult`` with
      ``ok == False`` and a ``CommandError`` (kind, code, message, context).
    - Unexpected exceptions are logged with traceback and re-raised; the
      repository transaction has already rolled back.

Usage:
    service = EstateSettlementService(repository, policy, clock, sink)
    result = service.execute(CreateEstate(...), actor_id)
    estate_id = result.view.estate_id
    result = service.execute(AddDebt(estate_id=estate_id, ...), actor_id)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import UUID, uuid4

from estate_config.schema import SettlementPolicy
from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.results import CommandError, CommandResult
from estate_kernel.domain.values import Currency, SharePercentage
from estate_kernel.exceptions import EstateKernelError, InvalidAmountError, ValidationError
from estate_kernel.logging_config import LogContext, get_logger
from estate_modules.estate.aggregate import EstateAggregate
from estate_modules.estate.models import EstateSummary, ReadinessReport
from estate_services import commands as cmd
from estate_services.outbox import EventSink, InMemoryEventSink
from estate_services.repository import EstateRepository

logger = get_logger("services.settlement")

Handler = Callable[[EstateAggregate, Any, UUID], Any]


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _share(value) -> SharePercentage:
    try:
        return SharePercentage.of(value)
    except ValueError as exc:
        raise InvalidAmountError("share_percentage", str(value), str(exc)) from exc


def _add_asset(agg: EstateAggregate, c: cmd.AddAsset, actor: UUID) -> Any:
    return agg.add_asset(
        name=c.asset_name,
        asset_type=c.asset_type,
        details=c.details,
        value=c.value,
        added_by=actor,
        description=c.description,
        asset_id=c.asset_id,
    )


def _add_debt(agg: EstateAggregate, c: cmd.AddDebt, actor: UUID) -> Any:
    return agg.add_debt(
        debt_type=c.debt_type,
        creditor_name=c.creditor_name,
        amount=c.amount,
        incurred_date=c.incurred_date,
        added_by=actor,
        tier=c.tier,
        secured_asset_id=c.secured_asset_id,
        description=c.description,
        debt_id=c.debt_id,
    )


def _initiate_liquidation(agg: EstateAggregate, c: cmd.InitiateLiquidation, actor: UUID) -> Any:
    return agg.initiate_liquidation(
        asset_id=c.asset_id,
        liquidation_type=c.liquidation_type,
        reason=c.reason,
        initiated_by=actor,
        target_amount=c.target_amount,
        liquidation_id=c.liquidation_id,
    )


def _record_tax_assessment(agg: EstateAggregate, c: cmd.RecordTaxAssessment, actor: UUID) -> Any:
    return agg.record_tax_assessment(
        reference=c.reference,
        assessment_date=c.assessment_date,
        assessed_by=actor,
        income_tax=c.income_tax,
        capital_gains_tax=c.capital_gains_tax,
        stamp_duty=c.stamp_duty,
        other_levies=c.other_levies,
    )


def _record_gift(agg: EstateAggregate, c: cmd.RecordGift, actor: UUID) -> Any:
    return agg.record_gift(
        recipient_id=c.recipient_id,
        original_value=c.original_value,
        gift_date=c.gift_date,
        recorded_by=actor,
        description=c.description,
        gift_id=c.gift_id,
    )


def _file_claim(agg: EstateAggregate, c: cmd.FileClaim, actor: UUID) -> Any:
    return agg.file_claim(
        dependant_id=c.dependant_id,
        relationship=c.relationship,
        basis=c.basis,
        filed_by=actor,
        requested_amount=c.requested_amount,
        claim_id=c.claim_id,
    )


_HANDLERS: dict[type, Handler] = {
    cmd.ActivateEstate: lambda a, c, actor: a.activate(actor),
    cmd.FreezeEstate: lambda a, c, actor: a.freeze(c.reason, actor),
    cmd.UnfreezeEstate: lambda a, c, actor: a.unfreeze(c.reason, c.resolution_reference, actor),
    cmd.CloseEstate: lambda a, c, actor: a.close(c.closure_notes, actor),
    cmd.RecordCashReceipt: lambda a, c, actor: a.record_cash_receipt(
        c.amount, c.source, actor, c.reference
    ),
    cmd.AddAsset: _add_asset,
    cmd.SubmitAssetForVerification: lambda a, c, actor: a.submit_asset_for_verification(
        c.asset_id, actor
    ),
    cmd.VerifyAsset: lambda a, c, actor: a.verify_asset(c.asset_id, c.notes, actor),
    cmd.RejectAsset: lambda a, c, actor: a.reject_asset(c.asset_id, c.reason, actor),
    cmd.DisputeAsset: lambda a, c, actor: a.dispute_asset(c.asset_id, c.reason, actor),
    cmd.AddCoOwner: lambda a, c, actor: a.add_co_owner(
        c.asset_id, c.holder_id, _share(c.share_percentage), actor
    ),
    cmd.AddEncumbrance: lambda a, c, actor: a.add_encumbrance(
        c.asset_id, c.encumbrance_type, c.amount, c.description, actor
    ),
    cmd.UpdateAssetValue: lambda a, c, actor: a.update_asset_value(c.asset_id, c.value, actor),
    cmd.AddDebt: _add_debt,
    cmd.PayDebt: lambda a, c, actor: a.pay_debt(c.debt_id, c.amount, c.method, actor, c.reference),
    cmd.DisputeDebt: lambda a, c, actor: a.dispute_debt(
        c.debt_id, c.reason, actor, c.evidence_doc_id
    ),
    cmd.ResolveDebtDispute: lambda a, c, actor: a.resolve_debt_dispute(
        c.debt_id, c.resolution, actor, c.negotiated_amount
    ),
    cmd.WriteOffDebt: lambda a, c, actor: a.write_off_debt(c.debt_id, c.reason, actor, c.amount),
    cmd.ExecuteWaterfall: lambda a, c, actor: a.execute_waterfall(actor, c.available_cash),
    cmd.MarkStatuteBarredDebts: lambda a, c, actor: a.mark_statute_barred_debts(c.as_of, actor),
    cmd.InitiateLiquidation: _initiate_liquidation,
    cmd.SubmitLiquidation: lambda a, c, actor: a.submit_liquidation(c.liquidation_id, actor),
    cmd.ApproveLiquidation: lambda a, c, actor: a.approve_liquidation(
        c.liquidation_id, c.notes, actor, c.court_order_reference
    ),
    cmd.RecordLiquidationSale: lambda a, c, actor: a.record_liquidation_sale(
        c.liquidation_id, c.price, c.buyer_reference, c.sale_date, actor
    ),
    cmd.ReceiveLiquidationProceeds: lambda a, c, actor: a.receive_liquidation_proceeds(
        c.liquidation_id, c.amount, actor
    ),
    cmd.CancelLiquidation: lambda a, c, actor: a.cancel_liquidation(
        c.liquidation_id, c.reason, actor
    ),
    cmd.RecordTaxAssessment: _record_tax_assessment,
    cmd.RecordTaxPayment: lambda a, c, actor: a.record_tax_payment(
        amount=c.amount, payment_date=c.payment_date, reference=c.reference, paid_by=actor
    ),
    cmd.UploadClearanceCertificate: lambda a, c, actor: a.upload_clearance_certificate(
        c.reference, actor
    ),
    cmd.RecordGift: _record_gift,
    cmd.ContestGift: lambda a, c, actor: a.contest_gift(c.gift_id, c.reason, actor),
    cmd.ResolveGiftDispute: lambda a, c, actor: a.resolve_gift_dispute(
        c.gift_id, c.resolution, actor
    ),
    cmd.ReclaimGift: lambda a, c, actor: a.reclaim_gift(c.gift_id, c.reason, actor),
    cmd.FileClaim: _file_claim,
    cmd.AddClaimEvidence: lambda a, c, actor: a.add_claim_evidence(
        c.claim_id, c.document_id, c.description, actor
    ),
    cmd.VerifyClaim: lambda a, c, actor: a.verify_claim(c.claim_id, c.notes, actor),
    cmd.RejectClaim: lambda a, c, actor: a.reject_claim(c.claim_id, c.reason, actor),
    cmd.SettleClaim: lambda a, c, actor: a.settle_claim(
        c.claim_id, c.allocation, c.method, actor
    ),
}


def registered_commands() -> frozenset[type]:
    return frozenset(_HANDLERS) | {cmd.CreateEstate}


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class EstateSettlementService:
    """Runs estate commands as load / execute / compare-and-swap save."""

    def __init__(
        self,
        repository: EstateRepository,
        policy: SettlementPolicy,
        clock: Clock | None = None,
        sink: EventSink | None = None,
    ):
        self._repository = repository
        self._policy = policy
        self._clock = clock or SystemClock()
        self._sink = sink if sink is not None else InMemoryEventSink()

    @property
    def sink(self) -> EventSink:
        return self._sink

    def execute(
        self,
        command: cmd.CreateEstate | cmd.EstateCommand,
        actor_id: UUID,
        correlation_id: str | None = None,
    ) -> CommandResult:
        """
        Execute ``command`` on behalf of ``actor_id``.

        Returns:
            CommandResult: success with the ``EstateSummary`` view, the
            events produced and the new version, or failure with a
            ``CommandError``.

        Raises:
            Exception: only for unexpected (non-domain) failures.
        """
        estate_id = getattr(command, "estate_id", None)
        with LogContext.bind(
            correlation_id=correlation_id or str(uuid4()),
            estate_id=str(estate_id) if estate_id else None,
            actor_id=str(actor_id),
            command=command.name,
        ):
            logger.info("estate_command_started")
            try:
                if isinstance(command, cmd.CreateEstate):
                    aggregate, events = self._create(command, actor_id)
                else:
                    aggregate, events = self._apply(command, actor_id)
            except EstateKernelError as exc:
                logger.warning("estate_command_rejected", extra={
                    "error_code": exc.code,
                    "error_kind": exc.kind,
                    "error_message": str(exc),
                })
                return CommandResult.failure(command.name, CommandError.from_exception(exc))
            except Exception:
                logger.exception("estate_command_failed")
                raise

            self._sink.publish(events)
            summary = aggregate.summary()
            logger.info("estate_command_succeeded", extra={
                "version": aggregate.version,
                "events": len(events),
                "status": aggregate.status.value,
            })
            return CommandResult.success(command.name, summary, events, aggregate.version)

    def _create(self, command: cmd.CreateEstate, actor_id: UUID):
        try:
            currency = Currency(command.currency)
        except ValueError as exc:
            raise ValidationError(str(exc), field="currency") from exc
        aggregate = EstateAggregate.create(
            deceased_name=command.deceased_name,
            date_of_death=command.date_of_death,
            currency=currency,
            created_by=actor_id,
            policy=self._policy,
            clock=self._clock,
            valuation_date=command.valuation_date,
            estate_id=command.estate_id,
        )
        events = aggregate.pull_pending_events()
        self._repository.add(aggregate, events)
        return aggregate, events

    def _apply(self, command: cmd.EstateCommand, actor_id: UUID):
        handler = _HANDLERS.get(type(command))
        if handler is None:
            raise TypeError(f"No handler registered for {type(command).__name__}")
        aggregate, version = self._repository.load(command.estate_id)
        handler(aggregate, command, actor_id)
        events = aggregate.pull_pending_events()
        self._repository.save(aggregate, version, events)
        return aggregate, events

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_summary(self, estate_id: UUID) -> EstateSummary:
        aggregate, _ = self._repository.load(estate_id)
        return aggregate.summary()

    def check_distribution_readiness(self, estate_id: UUID) -> ReadinessReport:
        aggregate, _ = self._repository.load(estate_id)
        return aggregate.check_distribution_readiness()

    def load(self, estate_id: UUID) -> EstateAggregate:
        aggregate, _ = self._repository.load(estate_id)
        return aggregate
