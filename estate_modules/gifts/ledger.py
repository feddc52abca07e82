"""
Gift Hotchpot Ledger (``estate_modules.gifts.ledger``).

Responsibility
--------------
Records lifetime gifts and values each one for hotchpot at the estate's
valuation date using the injected inflation adjuster.  The adjuster's
version is stored on the gift so the value can be reproduced later.

Failure modes
-------------
* ``InvalidAmountError`` -- non-positive original value.
* ``ValidationError`` -- gift dated after the valuation date.
* ``InvalidGiftTransitionError`` -- action not allowed in current status.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from uuid import UUID

from estate_engines.inflation import InflationAdjuster
from estate_kernel.domain.values import Currency, Money, sum_money
from estate_kernel.exceptions import (
    GiftNotFoundError,
    InvalidAmountError,
    InvalidGiftTransitionError,
    ValidationError,
)
from estate_kernel.logging_config import get_logger
from estate_modules.base import EntityLedger, advance
from estate_modules.gifts.models import Gift, GiftStatus, RecoveredValueNote
from estate_modules.gifts.workflows import GIFT_WORKFLOW

logger = get_logger("modules.gifts.ledger")


class GiftLedger(EntityLedger[Gift]):
    not_found_error = GiftNotFoundError

    def __init__(
        self,
        adjuster: InflationAdjuster,
        entities: dict[UUID, Gift] | None = None,
        recovered: tuple[RecoveredValueNote, ...] = (),
    ):
        super().__init__(entities)
        self._adjuster = adjuster
        self.recovered: tuple[RecoveredValueNote, ...] = recovered

    def record(
        self,
        *,
        gift_id: UUID,
        estate_id: UUID,
        recipient_id: UUID,
        original_value: Money,
        gift_date: date,
        valuation_date: date,
        now: datetime,
        description: str | None = None,
    ) -> Gift:
        if not original_value.is_positive:
            raise InvalidAmountError("original_value", str(original_value.amount), "must be positive")
        if gift_date > valuation_date:
            raise ValidationError(
                f"Gift dated {gift_date} is after the valuation date {valuation_date}",
                field="gift_date",
            )
        hotchpot = self._adjuster.adjust(
            value=original_value,
            from_date=gift_date,
            to_date=valuation_date,
        )
        gift = Gift(
            id=gift_id,
            estate_id=estate_id,
            recipient_id=recipient_id,
            gift_date=gift_date,
            original_value=original_value,
            hotchpot_value=hotchpot,
            adjuster_version=self._adjuster.version,
            status=GiftStatus.RECORDED,
            recorded_at=now,
            description=description,
        )
        logger.info("gift_recorded", extra={
            "gift_id": str(gift_id),
            "original_value": str(original_value.amount),
            "hotchpot_value": str(hotchpot.amount),
            "adjuster_version": self._adjuster.version,
        })
        return self._put(gift_id, gift)

    def _move(self, gift_id: UUID, action: str, **changes) -> Gift:
        gift = self.get(gift_id)
        status = advance(GIFT_WORKFLOW, GiftStatus, gift.status, action, gift_id, InvalidGiftTransitionError)
        return self._put(gift_id, replace(gift, status=status, **changes))

    def contest(self, gift_id: UUID, reason: str) -> Gift:
        if not reason or not reason.strip():
            raise ValidationError("Contest reason is required", field="reason")
        return self._move(gift_id, "contest", contest_reason=reason)

    def resolve(self, gift_id: UUID, resolution: str) -> Gift:
        if not resolution or not resolution.strip():
            raise ValidationError("Resolution is required", field="resolution")
        return self._move(gift_id, "resolve", resolution=resolution)

    def reclaim(self, gift_id: UUID, reason: str, now: datetime) -> tuple[Gift, RecoveredValueNote]:
        if not reason or not reason.strip():
            raise ValidationError("Reclaim reason is required", field="reason")
        gift = self._move(gift_id, "reclaim", reclaim_reason=reason)
        note = RecoveredValueNote(
            gift_id=gift_id,
            amount=gift.original_value,
            reason=reason,
            recorded_at=now,
        )
        self.recovered = self.recovered + (note,)
        logger.info("gift_reclaimed", extra={
            "gift_id": str(gift_id),
            "recovered_value": str(note.amount.amount),
        })
        return gift, note

    def hotchpot_total(self, currency: Currency) -> Money:
        return sum_money((g.hotchpot_value for g in self if g.contributes_hotchpot), currency)

    def recovered_total(self, currency: Currency) -> Money:
        return sum_money((n.amount for n in self.recovered), currency)

    def contested(self) -> list[Gift]:
        return [g for g in self if g.status == GiftStatus.CONTESTED]

    def snapshot(self):
        return super().snapshot(), self.recovered

    def restore(self, state) -> None:
        entities, recovered = state
        super().restore(entities)
        self.recovered = recovered
