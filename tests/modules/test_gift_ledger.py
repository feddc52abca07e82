"""
Tests for the gift hotchpot ledger.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from estate_engines.inflation import AnnualRateInflationAdjuster, NoInflationAdjuster
from estate_kernel.domain.values import Currency, Money
from estate_kernel.exceptions import (
    InvalidAmountError,
    InvalidGiftTransitionError,
    ValidationError,
)
from estate_modules.gifts import GiftLedger, GiftStatus

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
ESTATE_ID = UUID("00000000-0000-0000-0000-00000000e001")
VALUATION_DATE = date(2024, 3, 15)
KES = Currency("KES")


def kes(amount) -> Money:
    return Money.of(amount, "KES")


class TestGiftLedger:

    def setup_method(self):
        self.ledger = GiftLedger(AnnualRateInflationAdjuster(Decimal("0.06"), version="six-pct"))

    def _record(self, value=1000, gift_date=date(2023, 3, 15)):
        return self.ledger.record(
            gift_id=uuid4(),
            estate_id=ESTATE_ID,
            recipient_id=uuid4(),
            original_value=kes(value),
            gift_date=gift_date,
            valuation_date=VALUATION_DATE,
            now=NOW,
        )

    def test_hotchpot_value_adjusted(self):
        gift = self._record()
        assert gift.hotchpot_value == kes("1060.00")
        assert gift.adjuster_version == "six-pct"
        assert gift.status == GiftStatus.RECORDED

    def test_hotchpot_total_sums_contributing_gifts(self):
        self._record()
        self._record(value=500, gift_date=VALUATION_DATE)
        assert self.ledger.hotchpot_total(KES) == kes("1560.00")

    def test_gift_after_valuation_date_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self._record(gift_date=date(2024, 4, 1))
        assert exc_info.value.field == "gift_date"

    def test_non_positive_value_rejected(self):
        with pytest.raises(InvalidAmountError):
            self._record(value=0)

    def test_contested_gift_excluded_from_hotchpot(self):
        gift = self._record()
        self.ledger.contest(gift.id, "recipient denies receipt")
        assert self.ledger.hotchpot_total(KES).is_zero
        assert [g.id for g in self.ledger.contested()] == [gift.id]

    def test_resolved_gift_counts_again(self):
        gift = self._record()
        self.ledger.contest(gift.id, "recipient denies receipt")
        self.ledger.resolve(gift.id, "bank records confirm transfer")
        assert self.ledger.hotchpot_total(KES) == kes("1060.00")
        assert self.ledger.contested() == []

    def test_resolve_requires_contest(self):
        gift = self._record()
        with pytest.raises(InvalidGiftTransitionError):
            self.ledger.resolve(gift.id, "nothing to resolve")

    def test_reclaim_moves_original_value_to_recovered(self):
        gift = self._record()
        reclaimed, note = self.ledger.reclaim(gift.id, "court ordered return", NOW)
        assert reclaimed.status == GiftStatus.RECLAIMED
        assert note.amount == kes(1000)
        assert self.ledger.hotchpot_total(KES).is_zero
        assert self.ledger.recovered_total(KES) == kes(1000)

    def test_reclaimed_is_terminal(self):
        gift = self._record()
        self.ledger.reclaim(gift.id, "court ordered return", NOW)
        with pytest.raises(InvalidGiftTransitionError):
            self.ledger.reclaim(gift.id, "again", NOW)

    def test_restore_rolls_back_recovered_notes(self):
        gift = self._record()
        saved = self.ledger.snapshot()
        self.ledger.reclaim(gift.id, "court ordered return", NOW)
        self.ledger.restore(saved)
        assert self.ledger.recovered == ()
        assert self.ledger.get(gift.id).status == GiftStatus.RECORDED

    def test_no_inflation_adjuster(self):
        ledger = GiftLedger(NoInflationAdjuster())
        gift = ledger.record(
            gift_id=uuid4(),
            estate_id=ESTATE_ID,
            recipient_id=uuid4(),
            original_value=kes(700),
            gift_date=date(2010, 1, 1),
            valuation_date=VALUATION_DATE,
            now=NOW,
        )
        assert gift.hotchpot_value == kes(700)
        assert gift.adjuster_version == "none"
