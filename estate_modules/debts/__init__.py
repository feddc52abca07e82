"""
Debt Ledger (``estate_modules.debts``).

Estate liabilities in statutory tiers, paid manually through the
priority gate or in bulk through the waterfall.
"""

from estate_modules.debts.models import (
    Debt,
    DebtPayment,
    DebtStatus,
    DebtType,
    LiabilityTier,
    PaymentMethod,
)
from estate_modules.debts.workflows import DEBT_WORKFLOW
from estate_modules.debts.ledger import DebtLedger

__all__ = [
    "Debt",
    "DebtPayment",
    "DebtStatus",
    "DebtType",
    "LiabilityTier",
    "PaymentMethod",
    "DEBT_WORKFLOW",
    "DebtLedger",
]
