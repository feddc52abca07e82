"""
Tax Compliance Models (``estate_modules.tax.models``).

One ``TaxRecord`` per estate: the current assessment (by head), the
payments made against it and the clearance certificate reference.

``cleared`` = total paid >= total assessed AND a certificate is present.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from estate_kernel.domain.values import Currency, Money, sum_money


class TaxStatus(Enum):
    PENDING = "pending"
    ASSESSED = "assessed"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    CLEARED = "cleared"


@dataclass(frozen=True)
class TaxAssessment:
    reference: str
    assessment_date: date
    assessed_by: UUID
    recorded_at: datetime
    income_tax: Money | None = None
    capital_gains_tax: Money | None = None
    stamp_duty: Money | None = None
    other_levies: Money | None = None

    @property
    def heads(self) -> dict[str, Money]:
        named = {
            "income_tax": self.income_tax,
            "capital_gains_tax": self.capital_gains_tax,
            "stamp_duty": self.stamp_duty,
            "other_levies": self.other_levies,
        }
        return {k: v for k, v in named.items() if v is not None}


@dataclass(frozen=True)
class TaxPayment:
    amount: Money
    payment_date: date
    reference: str
    paid_by: UUID
    recorded_at: datetime


@dataclass(frozen=True)
class ClearanceCertificate:
    reference: str
    uploaded_by: UUID
    uploaded_at: datetime


@dataclass(frozen=True)
class TaxRecord:
    currency: Currency
    assessment: TaxAssessment | None = None
    payments: tuple[TaxPayment, ...] = ()
    certificate: ClearanceCertificate | None = None

    @property
    def total_assessed(self) -> Money:
        if self.assessment is None:
            return Money.zero(self.currency)
        return sum_money(self.assessment.heads.values(), self.currency)

    @property
    def total_paid(self) -> Money:
        return sum_money((p.amount for p in self.payments), self.currency)

    @property
    def unpaid_liability(self) -> Money:
        """Assessed tax not yet paid; never negative."""
        unpaid = self.total_assessed - self.total_paid
        return unpaid if unpaid.is_positive else Money.zero(self.currency)

    @property
    def is_cleared(self) -> bool:
        return self.total_paid >= self.total_assessed and self.certificate is not None

    @property
    def status(self) -> TaxStatus:
        if self.is_cleared:
            return TaxStatus.CLEARED
        if self.assessment is None:
            return TaxStatus.PENDING
        if self.total_paid >= self.total_assessed:
            return TaxStatus.PAID
        if self.total_paid.is_positive:
            return TaxStatus.PARTIALLY_PAID
        return TaxStatus.ASSESSED
