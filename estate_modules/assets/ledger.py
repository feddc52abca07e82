"""
Asset Ledger (``estate_modules.assets.ledger``).

Responsibility
--------------
Holds the estate's asset records, drives their verification workflow,
maintains co-ownership shares and encumbrances, and reports the gross
value contributed by VERIFIED and PENDING_VERIFICATION assets.

Invariants enforced
-------------------
* The details payload class matches the asset type tag.
* Co-owner shares are each positive and never sum above 100 (exactly 100
  is accepted).
* Status changes follow ``ASSET_VERIFICATION_WORKFLOW``; REJECTED is
  terminal.

Failure modes
-------------
* ``AssetDetailsMismatchError``, ``CoOwnershipExceededError``,
  ``InvalidAmountError`` -- rejected input.
* ``InvalidAssetTransitionError`` -- action not allowed in current status.
* ``AssetNotFoundError`` -- unknown asset id.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from estate_kernel.domain.values import Money, SharePercentage
from estate_kernel.exceptions import (
    AssetDetailsMismatchError,
    AssetNotFoundError,
    CoOwnershipExceededError,
    InvalidAmountError,
    InvalidAssetTransitionError,
    ValidationError,
)
from estate_kernel.logging_config import get_logger
from estate_modules.assets.models import (
    DETAILS_BY_TYPE,
    Asset,
    AssetDetails,
    AssetType,
    CoOwner,
    Encumbrance,
    EncumbranceType,
    VerificationStatus,
)
from estate_modules.assets.workflows import ASSET_VERIFICATION_WORKFLOW
from estate_modules.base import EntityLedger, advance

logger = get_logger("modules.assets.ledger")

_FULL_OWNERSHIP = Decimal("100")


class AssetLedger(EntityLedger[Asset]):
    not_found_error = AssetNotFoundError

    def add(
        self,
        *,
        asset_id: UUID,
        estate_id: UUID,
        name: str,
        asset_type: AssetType,
        details: AssetDetails,
        value: Money,
        now: datetime,
        description: str | None = None,
    ) -> Asset:
        if not name or not name.strip():
            raise ValidationError("Asset name is required", field="name")
        expected = DETAILS_BY_TYPE[asset_type]
        if not isinstance(details, expected):
            raise AssetDetailsMismatchError(asset_type.value, type(details).__name__)
        if value.is_negative:
            raise InvalidAmountError("value", str(value.amount), "must not be negative")

        asset = Asset(
            id=asset_id,
            estate_id=estate_id,
            name=name.strip(),
            asset_type=asset_type,
            details=details,
            value=value,
            status=VerificationStatus.UNVERIFIED,
            created_at=now,
            description=description,
        )
        logger.info("asset_added", extra={
            "asset_id": str(asset_id),
            "asset_type": asset_type.value,
            "value": str(value.amount),
        })
        return self._put(asset_id, asset)

    def _move(self, asset_id: UUID, action: str, **changes) -> Asset:
        asset = self.get(asset_id)
        status = advance(
            ASSET_VERIFICATION_WORKFLOW,
            VerificationStatus,
            asset.status,
            action,
            asset_id,
            InvalidAssetTransitionError,
        )
        updated = replace(asset, status=status, **changes)
        logger.info("asset_status_changed", extra={
            "asset_id": str(asset_id),
            "action": action,
            "from_status": asset.status.value,
            "to_status": status.value,
        })
        return self._put(asset_id, updated)

    def submit_for_verification(self, asset_id: UUID) -> Asset:
        return self._move(asset_id, "submit")

    def verify(self, asset_id: UUID, notes: str | None = None) -> Asset:
        return self._move(asset_id, "verify", verification_notes=notes, dispute_reason=None)

    def reject(self, asset_id: UUID, reason: str) -> Asset:
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason is required", field="reason")
        return self._move(asset_id, "reject", rejection_reason=reason)

    def dispute(self, asset_id: UUID, reason: str) -> Asset:
        if not reason or not reason.strip():
            raise ValidationError("Dispute reason is required", field="reason")
        return self._move(asset_id, "dispute", dispute_reason=reason)

    def add_co_owner(
        self,
        asset_id: UUID,
        holder_id: UUID,
        share: SharePercentage,
        now: datetime,
    ) -> Asset:
        asset = self.get(asset_id)
        if asset.status == VerificationStatus.REJECTED:
            raise InvalidAssetTransitionError(str(asset_id), asset.status.value, "add_co_owner")
        if not share.is_positive:
            raise InvalidAmountError("share_percentage", str(share.value), "must be positive")
        current = asset.co_owned_share
        if current + share.value > _FULL_OWNERSHIP:
            raise CoOwnershipExceededError(str(asset_id), str(current), str(share.value))
        if any(c.holder_id == holder_id for c in asset.co_owners):
            raise ValidationError(
                f"Holder {holder_id} is already a co-owner of asset {asset_id}",
                field="holder_id",
            )

        updated = replace(
            asset,
            co_owners=asset.co_owners + (CoOwner(holder_id=holder_id, share=share, added_at=now),),
        )
        logger.info("asset_co_owner_added", extra={
            "asset_id": str(asset_id),
            "holder_id": str(holder_id),
            "share": str(share.value),
            "total_share": str(updated.co_owned_share),
        })
        return self._put(asset_id, updated)

    def add_encumbrance(
        self,
        asset_id: UUID,
        encumbrance_type: EncumbranceType,
        amount: Money,
        description: str,
        now: datetime,
    ) -> Asset:
        asset = self.get(asset_id)
        if asset.status == VerificationStatus.REJECTED:
            raise InvalidAssetTransitionError(str(asset_id), asset.status.value, "add_encumbrance")
        if not amount.is_positive:
            raise InvalidAmountError("amount", str(amount.amount), "must be positive")
        encumbrance = Encumbrance(
            encumbrance_type=encumbrance_type,
            amount=amount,
            description=description,
            recorded_at=now,
        )
        return self._put(asset_id, replace(asset, encumbrances=asset.encumbrances + (encumbrance,)))

    def update_value(self, asset_id: UUID, value: Money) -> Asset:
        asset = self.get(asset_id)
        if asset.status == VerificationStatus.REJECTED:
            raise InvalidAssetTransitionError(str(asset_id), asset.status.value, "update_value")
        if value.is_negative:
            raise InvalidAmountError("value", str(value.amount), "must not be negative")
        return self._put(asset_id, replace(asset, value=value))

    def valued(self, excluded: frozenset[UUID] = frozenset()) -> list[Asset]:
        """Assets contributing to gross value, minus ``excluded`` ids."""
        return [a for a in self if a.counts_toward_value and a.id not in excluded]

    def disputed(self) -> list[Asset]:
        return [a for a in self if a.status == VerificationStatus.DISPUTED]

    def unverified(self, excluded: frozenset[UUID] = frozenset()) -> list[Asset]:
        """Assets never submitted for verification, minus ``excluded`` ids."""
        return [
            a for a in self
            if a.status == VerificationStatus.UNVERIFIED and a.id not in excluded
        ]

    def rejected(self) -> list[Asset]:
        return [a for a in self if a.status == VerificationStatus.REJECTED]
