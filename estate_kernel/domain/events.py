"""
Domain events (``estate_kernel.domain.events``).

Responsibility
--------------
A single tagged-union event type. Every state change in the aggregate is
described by one ``DomainEvent`` whose ``kind`` names what happened and
whose ``payload`` carries the kind-specific fields.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects. The aggregate appends events
to an in-memory pending list while a command runs; the settlement service
writes them to the outbox in the same transaction as the snapshot and
publishes them only after commit.

Invariants enforced
-------------------
* ``sequence`` is strictly increasing per estate (ordered delivery).
* The payload holds only JSON-compatible scalars, lists and dicts.
* Each kind declares the payload fields it must carry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from estate_kernel.domain.values import Money


class EventKind(Enum):
    """Every event the aggregate can emit."""
    # Estate lifecycle
    ESTATE_CREATED = "EstateCreated"
    ESTATE_ACTIVATED = "EstateActivated"
    ESTATE_FROZEN = "EstateFrozen"
    ESTATE_UNFROZEN = "EstateUnfrozen"
    ESTATE_CLOSED = "EstateClosed"
    ESTATE_INSOLVENCY_DETECTED = "EstateInsolvencyDetected"
    ESTATE_CASH_RECEIVED = "EstateCashReceived"
    # Assets
    ASSET_ADDED = "AssetAdded"
    ASSET_SUBMITTED_FOR_VERIFICATION = "AssetSubmittedForVerification"
    ASSET_VERIFIED = "AssetVerified"
    ASSET_REJECTED = "AssetRejected"
    ASSET_DISPUTED = "AssetDisputed"
    ASSET_CO_OWNER_ADDED = "AssetCoOwnerAdded"
    ASSET_ENCUMBERED = "AssetEncumbered"
    ASSET_VALUE_UPDATED = "AssetValueUpdated"
    # Debts
    DEBT_RECORDED = "DebtRecorded"
    DEBT_PAYMENT_APPLIED = "DebtPaymentApplied"
    DEBT_SETTLED = "DebtSettled"
    DEBT_DISPUTED = "DebtDisputed"
    DEBT_DISPUTE_RESOLVED = "DebtDisputeResolved"
    DEBT_WRITTEN_OFF = "DebtWrittenOff"
    DEBT_STATUTE_BARRED = "DebtStatuteBarred"
    WATERFALL_EXECUTED = "WaterfallExecuted"
    # Liquidations
    LIQUIDATION_INITIATED = "LiquidationInitiated"
    LIQUIDATION_SUBMITTED = "LiquidationSubmitted"
    LIQUIDATION_APPROVED = "LiquidationApproved"
    LIQUIDATION_SALE_RECORDED = "LiquidationSaleRecorded"
    LIQUIDATION_PROCEEDS_RECEIVED = "LiquidationProceedsReceived"
    LIQUIDATION_CANCELLED = "LiquidationCancelled"
    # Tax
    TAX_ASSESSMENT_RECORDED = "TaxAssessmentRecorded"
    TAX_PAYMENT_RECORDED = "TaxPaymentRecorded"
    TAX_CLEARANCE_CERTIFICATE_UPLOADED = "TaxClearanceCertificateUploaded"
    TAX_CLEARED = "TaxCleared"
    # Gifts
    GIFT_RECORDED = "GiftRecorded"
    GIFT_HOTCHPOT_APPLIED = "GiftHotchpotApplied"
    GIFT_CONTESTED = "GiftContested"
    GIFT_DISPUTE_RESOLVED = "GiftDisputeResolved"
    GIFT_RECLAIMED = "GiftReclaimed"
    # Dependant claims
    CLAIM_FILED = "ClaimFiled"
    CLAIM_EVIDENCE_ADDED = "ClaimEvidenceAdded"
    CLAIM_VERIFIED = "ClaimVerified"
    CLAIM_REJECTED = "ClaimRejected"
    CLAIM_SETTLED = "ClaimSettled"


# Payload fields each kind must carry. Extra fields are permitted.
REQUIRED_PAYLOAD_FIELDS: dict[EventKind, tuple[str, ...]] = {
    EventKind.ESTATE_CREATED: ("deceased_name", "date_of_death", "currency"),
    EventKind.ESTATE_FROZEN: ("reason",),
    EventKind.ESTATE_UNFROZEN: ("reason", "resolution_reference"),
    EventKind.ESTATE_CLOSED: ("closure_notes",),
    EventKind.ESTATE_INSOLVENCY_DETECTED: ("net_value",),
    EventKind.ESTATE_CASH_RECEIVED: ("amount", "source"),
    EventKind.ASSET_ADDED: ("asset_id", "asset_type", "value"),
    EventKind.ASSET_CO_OWNER_ADDED: ("asset_id", "holder_id", "share_percentage"),
    EventKind.DEBT_RECORDED: ("debt_id", "tier", "amount"),
    EventKind.DEBT_PAYMENT_APPLIED: ("debt_id", "amount", "outstanding"),
    EventKind.DEBT_DISPUTED: ("debt_id", "reason"),
    EventKind.DEBT_WRITTEN_OFF: ("debt_id", "amount", "reason"),
    EventKind.WATERFALL_EXECUTED: ("available_cash", "allocations", "remaining_cash"),
    EventKind.LIQUIDATION_INITIATED: ("liquidation_id", "asset_id"),
    EventKind.LIQUIDATION_PROCEEDS_RECEIVED: ("liquidation_id", "asset_id", "amount"),
    EventKind.TAX_PAYMENT_RECORDED: ("amount", "reference"),
    EventKind.GIFT_RECORDED: ("gift_id", "original_value"),
    EventKind.GIFT_HOTCHPOT_APPLIED: ("gift_id", "original_value", "hotchpot_value"),
    EventKind.GIFT_RECLAIMED: ("gift_id", "recovered_value"),
    EventKind.CLAIM_FILED: ("claim_id", "dependant_id"),
    EventKind.CLAIM_SETTLED: ("claim_id", "allocation"),
}


def money_payload(money: Money) -> dict[str, str]:
    """JSON-compatible rendering of a Money value for event payloads."""
    return {"amount": str(money.amount), "currency": money.currency.code}


@dataclass(frozen=True)
class DomainEvent:
    """
    One thing that happened to an estate.

    Contract: frozen; constructed only by the aggregate.
    Guarantees: required payload fields for ``kind`` are present.
    """
    kind: EventKind
    estate_id: UUID
    sequence: int
    occurred_at: datetime
    actor_id: UUID | None
    payload: dict[str, Any] = field(default_factory=dict)
    event_id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        missing = [
            name for name in REQUIRED_PAYLOAD_FIELDS.get(self.kind, ())
            if name not in self.payload
        ]
        if missing:
            raise ValueError(
                f"Event {self.kind.value} missing payload fields: {', '.join(missing)}"
            )
        if self.sequence < 1:
            raise ValueError(f"Event sequence must be positive, got {self.sequence}")

    @property
    def name(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "kind": self.kind.value,
            "estate_id": str(self.estate_id),
            "sequence": self.sequence,
            "occurred_at": self.occurred_at.isoformat(),
            "actor_id": str(self.actor_id) if self.actor_id else None,
            "payload": self.payload,
        }
