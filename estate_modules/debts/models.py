"""
Debt Domain Models (``estate_modules.debts.models``).

Responsibility
--------------
Frozen value objects for estate liabilities: the debt record with its
statutory tier, payment history and dispute / write-off annotations.

Invariants enforced
-------------------
* ``amount_paid + written_off_amount <= amount`` (never overpaid).
* Tier order is the declaration order of ``LiabilityTier``; lower rank is
  paid first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from estate_kernel.domain.values import Money


class DebtType(Enum):
    MORTGAGE = "mortgage"
    PERSONAL_LOAN = "personal_loan"
    CREDIT_CARD = "credit_card"
    BUSINESS_DEBT = "business_debt"
    TAX_OBLIGATION = "tax_obligation"
    FUNERAL_EXPENSE = "funeral_expense"
    MEDICAL_BILL = "medical_bill"
    OTHER = "other"


class LiabilityTier(Enum):
    """Statutory payment order, highest priority first."""
    FUNERAL_EXPENSES = "funeral_expenses"
    TESTAMENTARY_EXPENSES = "testamentary_expenses"
    SECURED_DEBTS = "secured_debts"
    TAXES_RATES_WAGES = "taxes_rates_wages"
    UNSECURED_GENERAL = "unsecured_general"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER: tuple[LiabilityTier, ...] = tuple(LiabilityTier)


class DebtStatus(Enum):
    """Debt states.  Must align with ``workflows.DEBT_WORKFLOW.states``."""
    RECORDED = "recorded"
    DISPUTED = "disputed"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    WRITTEN_OFF = "written_off"
    STATUTE_BARRED = "statute_barred"


PAYABLE_STATUSES = frozenset({DebtStatus.RECORDED, DebtStatus.PARTIALLY_PAID})


class PaymentMethod(Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    MOBILE_MONEY = "mobile_money"
    CHEQUE = "cheque"
    WATERFALL = "waterfall"


@dataclass(frozen=True)
class DebtPayment:
    amount: Money
    method: PaymentMethod
    reference: str | None
    paid_by: UUID
    paid_at: datetime


@dataclass(frozen=True)
class Debt:
    """A liability of the estate."""

    id: UUID
    estate_id: UUID
    debt_type: DebtType
    creditor_name: str
    amount: Money
    tier: LiabilityTier
    incurred_date: date
    status: DebtStatus
    amount_paid: Money
    written_off_amount: Money
    created_at: datetime
    payments: tuple[DebtPayment, ...] = ()
    secured_asset_id: UUID | None = None
    description: str | None = None
    dispute_reason: str | None = None
    dispute_evidence_doc_id: str | None = None
    resolution: str | None = None
    write_off_reason: str | None = None

    def __post_init__(self) -> None:
        if self.amount_paid + self.written_off_amount > self.amount:
            raise ValueError(
                f"Debt {self.id}: paid {self.amount_paid} plus written off "
                f"{self.written_off_amount} exceeds amount {self.amount}"
            )

    @property
    def outstanding(self) -> Money:
        return self.amount - self.amount_paid - self.written_off_amount

    @property
    def is_payable(self) -> bool:
        return self.status in PAYABLE_STATUSES

    @property
    def is_secured(self) -> bool:
        return self.secured_asset_id is not None or self.tier == LiabilityTier.SECURED_DEBTS

    @property
    def last_activity_date(self) -> date:
        """Incurred date, or the latest payment date if any."""
        if self.payments:
            return max(p.paid_at.date() for p in self.payments)
        return self.incurred_date
