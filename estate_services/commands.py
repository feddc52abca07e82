"""
estate_services.commands -- Typed command dataclasses.

Responsibility:
    One frozen dataclass per mutating estate operation.  Commands are the
    only input accepted by ``EstateSettlementService.execute``; the
    ``name`` class attribute is the snake_case operation name used in
    logs and in ``CommandResult.command``.

Architecture position:
    Services -- plain data, no behaviour.  Money fields carry domain
    ``Money`` values; the aggregate rejects amounts in a currency other
    than the estate's.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import ClassVar
from uuid import UUID

from estate_kernel.domain.values import Money
from estate_modules.assets.models import AssetDetails, AssetType, EncumbranceType
from estate_modules.claims.models import SettlementMethod
from estate_modules.debts.models import DebtType, LiabilityTier, PaymentMethod
from estate_modules.liquidation.models import LiquidationType


@dataclass(frozen=True)
class EstateCommand:
    """Base for commands addressed to an existing estate."""

    name: ClassVar[str] = "estate_command"

    estate_id: UUID


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateEstate:
    name: ClassVar[str] = "create_estate"

    deceased_name: str
    date_of_death: date
    currency: str
    valuation_date: date | None = None
    estate_id: UUID | None = None


@dataclass(frozen=True)
class ActivateEstate(EstateCommand):
    name: ClassVar[str] = "activate_estate"


@dataclass(frozen=True)
class FreezeEstate(EstateCommand):
    name: ClassVar[str] = "freeze_estate"

    reason: str


@dataclass(frozen=True)
class UnfreezeEstate(EstateCommand):
    name: ClassVar[str] = "unfreeze_estate"

    reason: str
    resolution_reference: str


@dataclass(frozen=True)
class CloseEstate(EstateCommand):
    name: ClassVar[str] = "close_estate"

    closure_notes: str


@dataclass(frozen=True)
class RecordCashReceipt(EstateCommand):
    name: ClassVar[str] = "record_cash_receipt"

    amount: Money
    source: str
    reference: str | None = None


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AddAsset(EstateCommand):
    name: ClassVar[str] = "add_asset"

    asset_name: str
    asset_type: AssetType
    details: AssetDetails
    value: Money
    description: str | None = None
    asset_id: UUID | None = None


@dataclass(frozen=True)
class SubmitAssetForVerification(EstateCommand):
    name: ClassVar[str] = "submit_asset_for_verification"

    asset_id: UUID


@dataclass(frozen=True)
class VerifyAsset(EstateCommand):
    name: ClassVar[str] = "verify_asset"

    asset_id: UUID
    notes: str | None = None


@dataclass(frozen=True)
class RejectAsset(EstateCommand):
    name: ClassVar[str] = "reject_asset"

    asset_id: UUID
    reason: str


@dataclass(frozen=True)
class DisputeAsset(EstateCommand):
    name: ClassVar[str] = "dispute_asset"

    asset_id: UUID
    reason: str


@dataclass(frozen=True)
class AddCoOwner(EstateCommand):
    name: ClassVar[str] = "add_co_owner"

    asset_id: UUID
    holder_id: UUID
    share_percentage: Decimal


@dataclass(frozen=True)
class AddEncumbrance(EstateCommand):
    name: ClassVar[str] = "add_encumbrance"

    asset_id: UUID
    encumbrance_type: EncumbranceType
    amount: Money
    description: str


@dataclass(frozen=True)
class UpdateAssetValue(EstateCommand):
    name: ClassVar[str] = "update_asset_value"

    asset_id: UUID
    value: Money


# ---------------------------------------------------------------------------
# Debts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AddDebt(EstateCommand):
    name: ClassVar[str] = "add_debt"

    debt_type: DebtType
    creditor_name: str
    amount: Money
    incurred_date: date
    tier: LiabilityTier | None = None
    secured_asset_id: UUID | None = None
    description: str | None = None
    debt_id: UUID | None = None


@dataclass(frozen=True)
class PayDebt(EstateCommand):
    name: ClassVar[str] = "pay_debt"

    debt_id: UUID
    amount: Money
    method: PaymentMethod
    reference: str | None = None


@dataclass(frozen=True)
class DisputeDebt(EstateCommand):
    name: ClassVar[str] = "dispute_debt"

    debt_id: UUID
    reason: str
    evidence_doc_id: str | None = None


@dataclass(frozen=True)
class ResolveDebtDispute(EstateCommand):
    name: ClassVar[str] = "resolve_debt_dispute"

    debt_id: UUID
    resolution: str
    negotiated_amount: Money | None = None


@dataclass(frozen=True)
class WriteOffDebt(EstateCommand):
    name: ClassVar[str] = "write_off_debt"

    debt_id: UUID
    reason: str
    amount: Money | None = None


@dataclass(frozen=True)
class ExecuteWaterfall(EstateCommand):
    name: ClassVar[str] = "execute_waterfall"

    available_cash: Money | None = None


@dataclass(frozen=True)
class MarkStatuteBarredDebts(EstateCommand):
    name: ClassVar[str] = "mark_statute_barred_debts"

    as_of: date


# ---------------------------------------------------------------------------
# Liquidation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InitiateLiquidation(EstateCommand):
    name: ClassVar[str] = "initiate_liquidation"

    asset_id: UUID
    liquidation_type: LiquidationType
    reason: str
    target_amount: Money | None = None
    liquidation_id: UUID | None = None


@dataclass(frozen=True)
class SubmitLiquidation(EstateCommand):
    name: ClassVar[str] = "submit_liquidation"

    liquidation_id: UUID


@dataclass(frozen=True)
class ApproveLiquidation(EstateCommand):
    name: ClassVar[str] = "approve_liquidation"

    liquidation_id: UUID
    notes: str
    court_order_reference: str | None = None


@dataclass(frozen=True)
class RecordLiquidationSale(EstateCommand):
    name: ClassVar[str] = "record_liquidation_sale"

    liquidation_id: UUID
    price: Money
    buyer_reference: str
    sale_date: date


@dataclass(frozen=True)
class ReceiveLiquidationProceeds(EstateCommand):
    name: ClassVar[str] = "receive_liquidation_proceeds"

    liquidation_id: UUID
    amount: Money


@dataclass(frozen=True)
class CancelLiquidation(EstateCommand):
    name: ClassVar[str] = "cancel_liquidation"

    liquidation_id: UUID
    reason: str


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RecordTaxAssessment(EstateCommand):
    name: ClassVar[str] = "record_tax_assessment"

    reference: str
    assessment_date: date
    income_tax: Money | None = None
    capital_gains_tax: Money | None = None
    stamp_duty: Money | None = None
    other_levies: Money | None = None


@dataclass(frozen=True)
class RecordTaxPayment(EstateCommand):
    name: ClassVar[str] = "record_tax_payment"

    amount: Money
    payment_date: date
    reference: str


@dataclass(frozen=True)
class UploadClearanceCertificate(EstateCommand):
    name: ClassVar[str] = "upload_clearance_certificate"

    reference: str


# ---------------------------------------------------------------------------
# Gifts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RecordGift(EstateCommand):
    name: ClassVar[str] = "record_gift"

    recipient_id: UUID
    original_value: Money
    gift_date: date
    description: str | None = None
    gift_id: UUID | None = None


@dataclass(frozen=True)
class ContestGift(EstateCommand):
    name: ClassVar[str] = "contest_gift"

    gift_id: UUID
    reason: str


@dataclass(frozen=True)
class ResolveGiftDispute(EstateCommand):
    name: ClassVar[str] = "resolve_gift_dispute"

    gift_id: UUID
    resolution: str


@dataclass(frozen=True)
class ReclaimGift(EstateCommand):
    name: ClassVar[str] = "reclaim_gift"

    gift_id: UUID
    reason: str


# ---------------------------------------------------------------------------
# Dependant claims
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileClaim(EstateCommand):
    name: ClassVar[str] = "file_claim"

    dependant_id: UUID
    relationship: str
    basis: str
    requested_amount: Money | None = None
    claim_id: UUID | None = None


@dataclass(frozen=True)
class AddClaimEvidence(EstateCommand):
    name: ClassVar[str] = "add_claim_evidence"

    claim_id: UUID
    document_id: str
    description: str


@dataclass(frozen=True)
class VerifyClaim(EstateCommand):
    name: ClassVar[str] = "verify_claim"

    claim_id: UUID
    notes: str


@dataclass(frozen=True)
class RejectClaim(EstateCommand):
    name: ClassVar[str] = "reject_claim"

    claim_id: UUID
    reason: str


@dataclass(frozen=True)
class SettleClaim(EstateCommand):
    name: ClassVar[str] = "settle_claim"

    claim_id: UUID
    allocation: Money
    method: SettlementMethod
