"""
Tests for the tax compliance gate.
"""

from datetime import date, datetime, timezone
from uuid import UUID

import pytest

from estate_kernel.domain.values import Currency, Money
from estate_kernel.exceptions import CurrencyMismatchError, InvalidAmountError, ValidationError
from estate_modules.tax import TaxLedger, TaxStatus

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
ACTOR = UUID("00000000-0000-0000-0000-0000000000a1")


def kes(amount) -> Money:
    return Money.of(amount, "KES")


class TestTaxLedger:

    def setup_method(self):
        self.ledger = TaxLedger(Currency("KES"))

    def _assess(self, **heads):
        return self.ledger.record_assessment(
            reference="KRA-ASSESS-1",
            assessment_date=date(2024, 5, 1),
            assessed_by=ACTOR,
            now=NOW,
            **heads,
        )

    def _pay(self, amount, reference="KRA-PAY-1"):
        return self.ledger.record_payment(
            amount=kes(amount),
            payment_date=date(2024, 5, 20),
            reference=reference,
            paid_by=ACTOR,
            now=NOW,
        )

    def _certificate(self):
        return self.ledger.upload_clearance_certificate(reference="TCC-778", uploaded_by=ACTOR, now=NOW)

    def test_initially_pending_and_not_cleared(self):
        assert self.ledger.record.status == TaxStatus.PENDING
        assert not self.ledger.is_cleared()

    def test_assessment_totals_heads(self):
        record = self._assess(income_tax=kes(300), stamp_duty=kes(200))
        assert record.total_assessed == kes(500)
        assert record.status == TaxStatus.ASSESSED

    def test_assessment_needs_a_head(self):
        with pytest.raises(ValidationError):
            self._assess()

    def test_negative_head_rejected(self):
        with pytest.raises(InvalidAmountError):
            self._assess(income_tax=kes(-5))

    def test_partial_payment_status(self):
        self._assess(income_tax=kes(500))
        record = self._pay(200)
        assert record.status == TaxStatus.PARTIALLY_PAID
        assert record.unpaid_liability == kes(300)

    def test_paid_without_certificate_not_cleared(self):
        self._assess(income_tax=kes(500))
        record = self._pay(500)
        assert record.status == TaxStatus.PAID
        assert not self.ledger.is_cleared()

    def test_certificate_without_full_payment_not_cleared(self):
        self._assess(income_tax=kes(500))
        self._pay(100)
        self._certificate()
        assert not self.ledger.is_cleared()

    def test_paid_and_certified_is_cleared(self):
        self._assess(capital_gains_tax=kes(500))
        self._pay(300)
        self._pay(200, reference="KRA-PAY-2")
        record = self._certificate()
        assert record.status == TaxStatus.CLEARED
        assert self.ledger.is_cleared()

    def test_nil_assessment_cleared_by_certificate(self):
        self._certificate()
        assert self.ledger.is_cleared()

    def test_overpayment_leaves_no_liability(self):
        self._assess(income_tax=kes(100))
        record = self._pay(150)
        assert record.unpaid_liability.is_zero

    def test_payment_must_be_positive(self):
        with pytest.raises(InvalidAmountError):
            self._pay(0)

    def test_payment_in_other_currency_rejected(self):
        with pytest.raises(CurrencyMismatchError):
            self.ledger.record_payment(
                amount=Money.of(10, "USD"),
                payment_date=date(2024, 5, 20),
                reference="X",
                paid_by=ACTOR,
                now=NOW,
            )
        assert self.ledger.record.payments == ()

    def test_new_assessment_replaces_previous(self):
        self._assess(income_tax=kes(500))
        record = self._assess(stamp_duty=kes(50))
        assert record.total_assessed == kes(50)
