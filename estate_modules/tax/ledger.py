"""
Tax Compliance Gate (``estate_modules.tax.ledger``).

Responsibility
--------------
Accumulates the estate's assessed tax by head and the payments made
against it, holds the clearance certificate reference, and answers
``is_cleared()`` for the distribution-readiness check and closure.

Tax payments are recorded against the assessment only; they do not draw
on the estate cash pool used by the debt waterfall.

Invariants enforced
-------------------
* An assessment carries at least one head; a new assessment replaces the
  previous one.
* Payments are positive and in the estate currency.
* Uploading a certificate does not by itself clear the estate.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from uuid import UUID

from estate_kernel.domain.values import Currency, Money
from estate_kernel.exceptions import CurrencyMismatchError, InvalidAmountError, ValidationError
from estate_kernel.logging_config import get_logger
from estate_modules.tax.models import (
    ClearanceCertificate,
    TaxAssessment,
    TaxPayment,
    TaxRecord,
)

logger = get_logger("modules.tax.ledger")


class TaxLedger:
    def __init__(self, currency: Currency, record: TaxRecord | None = None):
        self.record = record or TaxRecord(currency=currency)

    def record_assessment(
        self,
        *,
        reference: str,
        assessment_date: date,
        assessed_by: UUID,
        now: datetime,
        income_tax: Money | None = None,
        capital_gains_tax: Money | None = None,
        stamp_duty: Money | None = None,
        other_levies: Money | None = None,
    ) -> TaxRecord:
        if not reference or not reference.strip():
            raise ValidationError("Assessment reference is required", field="reference")
        assessment = TaxAssessment(
            reference=reference,
            assessment_date=assessment_date,
            assessed_by=assessed_by,
            recorded_at=now,
            income_tax=income_tax,
            capital_gains_tax=capital_gains_tax,
            stamp_duty=stamp_duty,
            other_levies=other_levies,
        )
        if not assessment.heads:
            raise ValidationError("Assessment must include at least one tax head", field="heads")
        for head, amount in assessment.heads.items():
            if amount.is_negative:
                raise InvalidAmountError(head, str(amount.amount), "must not be negative")

        self.record = replace(self.record, assessment=assessment)
        logger.info("tax_assessment_recorded", extra={
            "reference": reference,
            "heads": sorted(assessment.heads),
            "total_assessed": str(self.record.total_assessed.amount),
        })
        return self.record

    def record_payment(
        self,
        *,
        amount: Money,
        payment_date: date,
        reference: str,
        paid_by: UUID,
        now: datetime,
    ) -> TaxRecord:
        if amount.currency != self.record.currency:
            raise CurrencyMismatchError("pay tax", self.record.currency.code, amount.currency.code)
        if not amount.is_positive:
            raise InvalidAmountError("amount", str(amount.amount), "must be positive")
        if not reference or not reference.strip():
            raise ValidationError("Payment reference is required", field="reference")
        payment = TaxPayment(
            amount=amount,
            payment_date=payment_date,
            reference=reference,
            paid_by=paid_by,
            recorded_at=now,
        )
        self.record = replace(self.record, payments=self.record.payments + (payment,))
        logger.info("tax_payment_recorded", extra={
            "amount": str(amount.amount),
            "reference": reference,
            "total_paid": str(self.record.total_paid.amount),
        })
        return self.record

    def upload_clearance_certificate(
        self,
        *,
        reference: str,
        uploaded_by: UUID,
        now: datetime,
    ) -> TaxRecord:
        if not reference or not reference.strip():
            raise ValidationError("Certificate reference is required", field="reference")
        certificate = ClearanceCertificate(
            reference=reference,
            uploaded_by=uploaded_by,
            uploaded_at=now,
        )
        self.record = replace(self.record, certificate=certificate)
        return self.record

    def is_cleared(self) -> bool:
        return self.record.is_cleared

    def snapshot(self) -> TaxRecord:
        return self.record

    def restore(self, record: TaxRecord) -> None:
        self.record = record
