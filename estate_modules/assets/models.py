"""
Asset Domain Models (``estate_modules.assets.models``).

Responsibility
--------------
Frozen value objects for the estate's assets: the asset record with its
verification status, co-owners and encumbrances, plus the type-specific
detail payloads.

Asset types form a tagged union: ``Asset.asset_type`` is the tag and
``Asset.details`` is the payload whose class must match the tag (see
``DETAILS_BY_TYPE``).  Behaviour dispatches on the tag; there is no asset
subclass hierarchy.

Invariants enforced
-------------------
* Detail payloads reject blank identifying fields at construction.
* All monetary fields are ``Money``; shares are ``SharePercentage``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from estate_kernel.domain.values import Money, SharePercentage
from estate_kernel.exceptions import MissingFieldError


class AssetType(Enum):
    LAND = "land"
    VEHICLE = "vehicle"
    BUSINESS = "business"
    FINANCIAL = "financial"
    OTHER = "other"


class VerificationStatus(Enum):
    """Asset verification states.  Must align with ``workflows.ASSET_VERIFICATION_WORKFLOW``."""
    UNVERIFIED = "unverified"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    REJECTED = "rejected"
    DISPUTED = "disputed"


VALUED_STATUSES = frozenset({
    VerificationStatus.VERIFIED,
    VerificationStatus.PENDING_VERIFICATION,
})


class EncumbranceType(Enum):
    MORTGAGE = "mortgage"
    CHARGE = "charge"
    LIEN = "lien"
    COURT_ORDER = "court_order"
    FAMILY_CLAIM = "family_claim"
    OTHER = "other"


def _require(value: str | None, field: str) -> None:
    if value is None or not str(value).strip():
        raise MissingFieldError(field)


@dataclass(frozen=True)
class LandDetails:
    title_number: str
    county: str
    acreage: Decimal | None = None
    land_category: str | None = None

    def __post_init__(self) -> None:
        _require(self.title_number, "details.title_number")
        _require(self.county, "details.county")


@dataclass(frozen=True)
class VehicleDetails:
    registration_number: str
    make: str
    model: str
    year: int | None = None

    def __post_init__(self) -> None:
        _require(self.registration_number, "details.registration_number")


@dataclass(frozen=True)
class BusinessDetails:
    business_name: str
    registration_number: str | None = None
    ownership_percentage: Decimal | None = None

    def __post_init__(self) -> None:
        _require(self.business_name, "details.business_name")


@dataclass(frozen=True)
class FinancialDetails:
    institution_name: str
    account_number: str
    account_type: str | None = None

    def __post_init__(self) -> None:
        _require(self.institution_name, "details.institution_name")
        _require(self.account_number, "details.account_number")


@dataclass(frozen=True)
class OtherDetails:
    category: str
    notes: str | None = None


AssetDetails = LandDetails | VehicleDetails | BusinessDetails | FinancialDetails | OtherDetails

DETAILS_BY_TYPE: dict[AssetType, type] = {
    AssetType.LAND: LandDetails,
    AssetType.VEHICLE: VehicleDetails,
    AssetType.BUSINESS: BusinessDetails,
    AssetType.FINANCIAL: FinancialDetails,
    AssetType.OTHER: OtherDetails,
}


@dataclass(frozen=True)
class CoOwner:
    holder_id: UUID
    share: SharePercentage
    added_at: datetime


@dataclass(frozen=True)
class Encumbrance:
    encumbrance_type: EncumbranceType
    amount: Money
    description: str
    recorded_at: datetime


@dataclass(frozen=True)
class Asset:
    """An estate asset and its verification state."""

    id: UUID
    estate_id: UUID
    name: str
    asset_type: AssetType
    details: AssetDetails
    value: Money
    status: VerificationStatus
    created_at: datetime
    co_owners: tuple[CoOwner, ...] = ()
    encumbrances: tuple[Encumbrance, ...] = ()
    description: str | None = None
    verification_notes: str | None = None
    rejection_reason: str | None = None
    dispute_reason: str | None = None

    @property
    def co_owned_share(self) -> Decimal:
        return sum((c.share.value for c in self.co_owners), Decimal("0"))

    @property
    def counts_toward_value(self) -> bool:
        return self.status in VALUED_STATUSES

    @property
    def encumbered_amount(self) -> Money:
        total = Money.zero(self.value.currency)
        for e in self.encumbrances:
            total = total + e.amount
        return total
