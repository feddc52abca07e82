"""
estate_services.serialization -- Aggregate snapshot <-> JSON document.

Responsibility:
    Converts an ``EstateAggregate`` into a JSON-compatible dict for the
    ``EstateRecordModel.snapshot`` column and rebuilds it again.  Every
    entity has an explicit dump/load pair; nothing is pickled.

Architecture position:
    Services -- used by both repositories so the in-memory store exercises
    the same round trip as the database.

Invariants enforced:
    - Money is stored as ``{"amount": "<decimal string>", "currency": code}``;
      amounts never pass through float.
    - ``SNAPSHOT_FORMAT`` is written into every document; loading a
      document with another format raises ``ValueError``.
    - The policy checksum is stored for audit; the policy itself is
      injected on load.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from estate_config.schema import SettlementPolicy
from estate_engines.waterfall import DebtWaterfallEngine
from estate_kernel.domain.clock import Clock
from estate_kernel.domain.values import Currency, Money, SharePercentage
from estate_modules.assets.ledger import AssetLedger
from estate_modules.assets.models import (
    Asset,
    AssetType,
    BusinessDetails,
    CoOwner,
    Encumbrance,
    EncumbranceType,
    FinancialDetails,
    LandDetails,
    OtherDetails,
    VehicleDetails,
    VerificationStatus,
)
from estate_modules.claims.ledger import ClaimLedger
from estate_modules.claims.models import (
    ClaimEvidence,
    ClaimStatus,
    DependantClaim,
    SettlementMethod,
)
from estate_modules.debts.ledger import DebtLedger
from estate_modules.debts.models import (
    Debt,
    DebtPayment,
    DebtStatus,
    DebtType,
    LiabilityTier,
    PaymentMethod,
)
from estate_modules.estate.aggregate import EstateAggregate
from estate_modules.estate.models import Estate, EstateStatus
from estate_modules.gifts.ledger import GiftLedger
from estate_modules.gifts.models import Gift, GiftStatus, RecoveredValueNote
from estate_modules.liquidation.ledger import LiquidationLedger
from estate_modules.liquidation.models import (
    Liquidation,
    LiquidationStatus,
    LiquidationType,
    SaleDetails,
)
from estate_modules.tax.ledger import TaxLedger
from estate_modules.tax.models import (
    ClearanceCertificate,
    TaxAssessment,
    TaxPayment,
    TaxRecord,
)

SNAPSHOT_FORMAT = 1


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def _money(value: Money | None) -> dict[str, str] | None:
    if value is None:
        return None
    return {"amount": str(value.amount), "currency": value.currency.code}


def _load_money(data: dict[str, str] | None) -> Money | None:
    if data is None:
        return None
    return Money.of(Decimal(data["amount"]), data["currency"])


def _uuid(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def _load_uuid(value: str | None) -> UUID | None:
    return UUID(value) if value is not None else None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value is not None else None


def _load_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value is not None else None


def _decimal(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def _load_decimal(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


def dump_details(details: Any) -> dict[str, Any]:
    match details:
        case LandDetails():
            return {
                "title_number": details.title_number,
                "county": details.county,
                "acreage": _decimal(details.acreage),
                "land_category": details.land_category,
            }
        case VehicleDetails():
            return {
                "registration_number": details.registration_number,
                "make": details.make,
                "model": details.model,
                "year": details.year,
            }
        case BusinessDetails():
            return {
                "business_name": details.business_name,
                "registration_number": details.registration_number,
                "ownership_percentage": _decimal(details.ownership_percentage),
            }
        case FinancialDetails():
            return {
                "institution_name": details.institution_name,
                "account_number": details.account_number,
                "account_type": details.account_type,
            }
        case OtherDetails():
            return {"category": details.category, "notes": details.notes}
    raise ValueError(f"Unknown asset details type: {type(details).__name__}")


def load_details(asset_type: AssetType, data: dict[str, Any]) -> Any:
    match asset_type:
        case AssetType.LAND:
            return LandDetails(
                title_number=data["title_number"],
                county=data["county"],
                acreage=_load_decimal(data.get("acreage")),
                land_category=data.get("land_category"),
            )
        case AssetType.VEHICLE:
            return VehicleDetails(
                registration_number=data["registration_number"],
                make=data["make"],
                model=data["model"],
                year=data.get("year"),
            )
        case AssetType.BUSINESS:
            return BusinessDetails(
                business_name=data["business_name"],
                registration_number=data.get("registration_number"),
                ownership_percentage=_load_decimal(data.get("ownership_percentage")),
            )
        case AssetType.FINANCIAL:
            return FinancialDetails(
                institution_name=data["institution_name"],
                account_number=data["account_number"],
                account_type=data.get("account_type"),
            )
        case AssetType.OTHER:
            return OtherDetails(category=data["category"], notes=data.get("notes"))
    raise ValueError(f"Unknown asset type: {asset_type}")


def dump_asset(asset: Asset) -> dict[str, Any]:
    return {
        "id": str(asset.id),
        "name": asset.name,
        "asset_type": asset.asset_type.value,
        "details": dump_details(asset.details),
        "value": _money(asset.value),
        "status": asset.status.value,
        "created_at": _iso(asset.created_at),
        "co_owners": [
            {
                "holder_id": str(c.holder_id),
                "share": str(c.share.value),
                "added_at": _iso(c.added_at),
            }
            for c in asset.co_owners
        ],
        "encumbrances": [
            {
                "encumbrance_type": e.encumbrance_type.value,
                "amount": _money(e.amount),
                "description": e.description,
                "recorded_at": _iso(e.recorded_at),
            }
            for e in asset.encumbrances
        ],
        "description": asset.description,
        "verification_notes": asset.verification_notes,
        "rejection_reason": asset.rejection_reason,
        "dispute_reason": asset.dispute_reason,
    }


def load_asset(data: dict[str, Any], estate_id: UUID) -> Asset:
    asset_type = AssetType(data["asset_type"])
    return Asset(
        id=UUID(data["id"]),
        estate_id=estate_id,
        name=data["name"],
        asset_type=asset_type,
        details=load_details(asset_type, data["details"]),
        value=_load_money(data["value"]),
        status=VerificationStatus(data["status"]),
        created_at=_load_datetime(data["created_at"]),
        co_owners=tuple(
            CoOwner(
                holder_id=UUID(c["holder_id"]),
                share=SharePercentage.of(c["share"]),
                added_at=_load_datetime(c["added_at"]),
            )
            for c in data["co_owners"]
        ),
        encumbrances=tuple(
            Encumbrance(
                encumbrance_type=EncumbranceType(e["encumbrance_type"]),
                amount=_load_money(e["amount"]),
                description=e["description"],
                recorded_at=_load_datetime(e["recorded_at"]),
            )
            for e in data["encumbrances"]
        ),
        description=data.get("description"),
        verification_notes=data.get("verification_notes"),
        rejection_reason=data.get("rejection_reason"),
        dispute_reason=data.get("dispute_reason"),
    )


# ---------------------------------------------------------------------------
# Debts
# ---------------------------------------------------------------------------


def dump_debt(debt: Debt) -> dict[str, Any]:
    return {
        "id": str(debt.id),
        "debt_type": debt.debt_type.value,
        "creditor_name": debt.creditor_name,
        "amount": _money(debt.amount),
        "tier": debt.tier.value,
        "incurred_date": _iso(debt.incurred_date),
        "status": debt.status.value,
        "amount_paid": _money(debt.amount_paid),
        "written_off_amount": _money(debt.written_off_amount),
        "created_at": _iso(debt.created_at),
        "payments": [
            {
                "amount": _money(p.amount),
                "method": p.method.value,
                "reference": p.reference,
                "paid_by": str(p.paid_by),
                "paid_at": _iso(p.paid_at),
            }
            for p in debt.payments
        ],
        "secured_asset_id": _uuid(debt.secured_asset_id),
        "description": debt.description,
        "dispute_reason": debt.dispute_reason,
        "dispute_evidence_doc_id": debt.dispute_evidence_doc_id,
        "resolution": debt.resolution,
        "write_off_reason": debt.write_off_reason,
    }


def load_debt(data: dict[str, Any], estate_id: UUID) -> Debt:
    return Debt(
        id=UUID(data["id"]),
        estate_id=estate_id,
        debt_type=DebtType(data["debt_type"]),
        creditor_name=data["creditor_name"],
        amount=_load_money(data["amount"]),
        tier=LiabilityTier(data["tier"]),
        incurred_date=_load_date(data["incurred_date"]),
        status=DebtStatus(data["status"]),
        amount_paid=_load_money(data["amount_paid"]),
        written_off_amount=_load_money(data["written_off_amount"]),
        created_at=_load_datetime(data["created_at"]),
        payments=tuple(
            DebtPayment(
                amount=_load_money(p["amount"]),
                method=PaymentMethod(p["method"]),
                reference=p.get("reference"),
                paid_by=UUID(p["paid_by"]),
                paid_at=_load_datetime(p["paid_at"]),
            )
            for p in data["payments"]
        ),
        secured_asset_id=_load_uuid(data.get("secured_asset_id")),
        description=data.get("description"),
        dispute_reason=data.get("dispute_reason"),
        dispute_evidence_doc_id=data.get("dispute_evidence_doc_id"),
        resolution=data.get("resolution"),
        write_off_reason=data.get("write_off_reason"),
    )


# ---------------------------------------------------------------------------
# Liquidations
# ---------------------------------------------------------------------------


def dump_liquidation(liq: Liquidation) -> dict[str, Any]:
    sale = None
    if liq.sale is not None:
        sale = {
            "price": _money(liq.sale.price),
            "buyer_reference": liq.sale.buyer_reference,
            "sale_date": _iso(liq.sale.sale_date),
        }
    return {
        "id": str(liq.id),
        "asset_id": str(liq.asset_id),
        "liquidation_type": liq.liquidation_type.value,
        "reason": liq.reason,
        "status": liq.status.value,
        "initiated_by": str(liq.initiated_by),
        "initiated_at": _iso(liq.initiated_at),
        "target_amount": _money(liq.target_amount),
        "approval_notes": liq.approval_notes,
        "court_order_reference": liq.court_order_reference,
        "approved_by": _uuid(liq.approved_by),
        "sale": sale,
        "proceeds": _money(liq.proceeds),
        "cancellation_reason": liq.cancellation_reason,
    }


def load_liquidation(data: dict[str, Any], estate_id: UUID) -> Liquidation:
    sale = data.get("sale")
    return Liquidation(
        id=UUID(data["id"]),
        estate_id=estate_id,
        asset_id=UUID(data["asset_id"]),
        liquidation_type=LiquidationType(data["liquidation_type"]),
        reason=data["reason"],
        status=LiquidationStatus(data["status"]),
        initiated_by=UUID(data["initiated_by"]),
        initiated_at=_load_datetime(data["initiated_at"]),
        target_amount=_load_money(data.get("target_amount")),
        approval_notes=data.get("approval_notes"),
        court_order_reference=data.get("court_order_reference"),
        approved_by=_load_uuid(data.get("approved_by")),
        sale=SaleDetails(
            price=_load_money(sale["price"]),
            buyer_reference=sale["buyer_reference"],
            sale_date=_load_date(sale["sale_date"]),
        ) if sale else None,
        proceeds=_load_money(data.get("proceeds")),
        cancellation_reason=data.get("cancellation_reason"),
    )


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------


def dump_tax(record: TaxRecord) -> dict[str, Any]:
    assessment = None
    if record.assessment is not None:
        a = record.assessment
        assessment = {
            "reference": a.reference,
            "assessment_date": _iso(a.assessment_date),
            "assessed_by": str(a.assessed_by),
            "recorded_at": _iso(a.recorded_at),
            "income_tax": _money(a.income_tax),
            "capital_gains_tax": _money(a.capital_gains_tax),
            "stamp_duty": _money(a.stamp_duty),
            "other_levies": _money(a.other_levies),
        }
    certificate = None
    if record.certificate is not None:
        certificate = {
            "reference": record.certificate.reference,
            "uploaded_by": str(record.certificate.uploaded_by),
            "uploaded_at": _iso(record.certificate.uploaded_at),
        }
    return {
        "assessment": assessment,
        "payments": [
            {
                "amount": _money(p.amount),
                "payment_date": _iso(p.payment_date),
                "reference": p.reference,
                "paid_by": str(p.paid_by),
                "recorded_at": _iso(p.recorded_at),
            }
            for p in record.payments
        ],
        "certificate": certificate,
    }


def load_tax(data: dict[str, Any], currency: Currency) -> TaxRecord:
    a = data.get("assessment")
    c = data.get("certificate")
    return TaxRecord(
        currency=currency,
        assessment=TaxAssessment(
            reference=a["reference"],
            assessment_date=_load_date(a["assessment_date"]),
            assessed_by=UUID(a["assessed_by"]),
            recorded_at=_load_datetime(a["recorded_at"]),
            income_tax=_load_money(a.get("income_tax")),
            capital_gains_tax=_load_money(a.get("capital_gains_tax")),
            stamp_duty=_load_money(a.get("stamp_duty")),
            other_levies=_load_money(a.get("other_levies")),
        ) if a else None,
        payments=tuple(
            TaxPayment(
                amount=_load_money(p["amount"]),
                payment_date=_load_date(p["payment_date"]),
                reference=p["reference"],
                paid_by=UUID(p["paid_by"]),
                recorded_at=_load_datetime(p["recorded_at"]),
            )
            for p in data["payments"]
        ),
        certificate=ClearanceCertificate(
            reference=c["reference"],
            uploaded_by=UUID(c["uploaded_by"]),
            uploaded_at=_load_datetime(c["uploaded_at"]),
        ) if c else None,
    )


# ---------------------------------------------------------------------------
# Gifts
# ---------------------------------------------------------------------------


def dump_gift(gift: Gift) -> dict[str, Any]:
    return {
        "id": str(gift.id),
        "recipient_id": str(gift.recipient_id),
        "gift_date": _iso(gift.gift_date),
        "original_value": _money(gift.original_value),
        "hotchpot_value": _money(gift.hotchpot_value),
        "adjuster_version": gift.adjuster_version,
        "status": gift.status.value,
        "recorded_at": _iso(gift.recorded_at),
        "description": gift.description,
        "contest_reason": gift.contest_reason,
        "resolution": gift.resolution,
        "reclaim_reason": gift.reclaim_reason,
    }


def load_gift(data: dict[str, Any], estate_id: UUID) -> Gift:
    return Gift(
        id=UUID(data["id"]),
        estate_id=estate_id,
        recipient_id=UUID(data["recipient_id"]),
        gift_date=_load_date(data["gift_date"]),
        original_value=_load_money(data["original_value"]),
        hotchpot_value=_load_money(data["hotchpot_value"]),
        adjuster_version=data["adjuster_version"],
        status=GiftStatus(data["status"]),
        recorded_at=_load_datetime(data["recorded_at"]),
        description=data.get("description"),
        contest_reason=data.get("contest_reason"),
        resolution=data.get("resolution"),
        reclaim_reason=data.get("reclaim_reason"),
    )


def dump_recovered(note: RecoveredValueNote) -> dict[str, Any]:
    return {
        "gift_id": str(note.gift_id),
        "amount": _money(note.amount),
        "reason": note.reason,
        "recorded_at": _iso(note.recorded_at),
    }


def load_recovered(data: dict[str, Any]) -> RecoveredValueNote:
    return RecoveredValueNote(
        gift_id=UUID(data["gift_id"]),
        amount=_load_money(data["amount"]),
        reason=data["reason"],
        recorded_at=_load_datetime(data["recorded_at"]),
    )


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------


def dump_claim(claim: DependantClaim) -> dict[str, Any]:
    return {
        "id": str(claim.id),
        "dependant_id": str(claim.dependant_id),
        "relationship": claim.relationship,
        "basis": claim.basis,
        "status": claim.status.value,
        "filed_by": str(claim.filed_by),
        "filed_at": _iso(claim.filed_at),
        "requested_amount": _money(claim.requested_amount),
        "evidence": [
            {
                "document_id": e.document_id,
                "description": e.description,
                "added_by": str(e.added_by),
                "added_at": _iso(e.added_at),
            }
            for e in claim.evidence
        ],
        "verification_notes": claim.verification_notes,
        "rejection_reason": claim.rejection_reason,
        "settlement_allocation": _money(claim.settlement_allocation),
        "settlement_method": claim.settlement_method.value if claim.settlement_method else None,
        "settled_at": _iso(claim.settled_at),
    }


def load_claim(data: dict[str, Any], estate_id: UUID) -> DependantClaim:
    method = data.get("settlement_method")
    return DependantClaim(
        id=UUID(data["id"]),
        estate_id=estate_id,
        dependant_id=UUID(data["dependant_id"]),
        relationship=data["relationship"],
        basis=data["basis"],
        status=ClaimStatus(data["status"]),
        filed_by=UUID(data["filed_by"]),
        filed_at=_load_datetime(data["filed_at"]),
        requested_amount=_load_money(data.get("requested_amount")),
        evidence=tuple(
            ClaimEvidence(
                document_id=e["document_id"],
                description=e["description"],
                added_by=UUID(e["added_by"]),
                added_at=_load_datetime(e["added_at"]),
            )
            for e in data["evidence"]
        ),
        verification_notes=data.get("verification_notes"),
        rejection_reason=data.get("rejection_reason"),
        settlement_allocation=_load_money(data.get("settlement_allocation")),
        settlement_method=SettlementMethod(method) if method else None,
        settled_at=_load_datetime(data.get("settled_at")),
    )


# ---------------------------------------------------------------------------
# Estate
# ---------------------------------------------------------------------------


def dump_estate(estate: Estate) -> dict[str, Any]:
    return {
        "id": str(estate.id),
        "deceased_name": estate.deceased_name,
        "date_of_death": _iso(estate.date_of_death),
        "valuation_date": _iso(estate.valuation_date),
        "currency": estate.currency.code,
        "status": estate.status.value,
        "cash_on_hand": _money(estate.cash_on_hand),
        "created_by": str(estate.created_by),
        "created_at": _iso(estate.created_at),
        "freeze_reason": estate.freeze_reason,
        "frozen_by": _uuid(estate.frozen_by),
        "frozen_at": _iso(estate.frozen_at),
        "closure_notes": estate.closure_notes,
        "closed_by": _uuid(estate.closed_by),
        "closed_at": _iso(estate.closed_at),
        "insolvency_flagged": estate.insolvency_flagged,
    }


def load_estate(data: dict[str, Any]) -> Estate:
    return Estate(
        id=UUID(data["id"]),
        deceased_name=data["deceased_name"],
        date_of_death=_load_date(data["date_of_death"]),
        valuation_date=_load_date(data["valuation_date"]),
        currency=Currency(data["currency"]),
        status=EstateStatus(data["status"]),
        cash_on_hand=_load_money(data["cash_on_hand"]),
        created_by=UUID(data["created_by"]),
        created_at=_load_datetime(data["created_at"]),
        freeze_reason=data.get("freeze_reason"),
        frozen_by=_load_uuid(data.get("frozen_by")),
        frozen_at=_load_datetime(data.get("frozen_at")),
        closure_notes=data.get("closure_notes"),
        closed_by=_load_uuid(data.get("closed_by")),
        closed_at=_load_datetime(data.get("closed_at")),
        insolvency_flagged=data.get("insolvency_flagged", False),
    )


def dump_aggregate(aggregate: EstateAggregate) -> dict[str, Any]:
    """Full JSON-compatible snapshot of one estate."""
    return {
        "format": SNAPSHOT_FORMAT,
        "policy": aggregate.policy.label,
        "policy_checksum": aggregate.policy.checksum,
        "event_sequence": aggregate.event_sequence,
        "estate": dump_estate(aggregate.estate),
        "assets": [dump_asset(a) for a in aggregate.assets],
        "debts": [dump_debt(d) for d in aggregate.debts],
        "liquidations": [dump_liquidation(liq) for liq in aggregate.liquidations],
        "tax": dump_tax(aggregate.tax.record),
        "gifts": [dump_gift(g) for g in aggregate.gifts],
        "recovered": [dump_recovered(n) for n in aggregate.gifts.recovered],
        "claims": [dump_claim(c) for c in aggregate.claims],
    }


def load_aggregate(
    data: dict[str, Any],
    *,
    version: int,
    policy: SettlementPolicy,
    clock: Clock,
) -> EstateAggregate:
    """Rebuild an aggregate from ``dump_aggregate`` output."""
    if data.get("format") != SNAPSHOT_FORMAT:
        raise ValueError(f"Unsupported estate snapshot format: {data.get('format')!r}")

    estate = load_estate(data["estate"])
    estate_id = estate.id

    assets = AssetLedger({a.id: a for a in (load_asset(d, estate_id) for d in data["assets"])})
    debts = DebtLedger(
        {d.id: d for d in (load_debt(x, estate_id) for x in data["debts"])},
        engine=DebtWaterfallEngine(),
    )
    liquidations = LiquidationLedger(
        {liq.id: liq for liq in (load_liquidation(x, estate_id) for x in data["liquidations"])}
    )
    tax = TaxLedger(estate.currency, load_tax(data["tax"], estate.currency))
    gifts = GiftLedger(
        policy.inflation.build_adjuster(),
        {g.id: g for g in (load_gift(x, estate_id) for x in data["gifts"])},
        tuple(load_recovered(n) for n in data["recovered"]),
    )
    claims = ClaimLedger(
        {c.id: c for c in (load_claim(x, estate_id) for x in data["claims"])}
    )
    return EstateAggregate(
        estate,
        policy,
        clock,
        assets=assets,
        debts=debts,
        liquidations=liquidations,
        tax=tax,
        gifts=gifts,
        claims=claims,
        version=version,
        event_sequence=data["event_sequence"],
    )
