"""Tax compliance gate (``estate_modules.tax``)."""

from estate_modules.tax.models import (
    ClearanceCertificate,
    TaxAssessment,
    TaxPayment,
    TaxRecord,
    TaxStatus,
)
from estate_modules.tax.ledger import TaxLedger

__all__ = [
    "ClearanceCertificate",
    "TaxAssessment",
    "TaxPayment",
    "TaxRecord",
    "TaxStatus",
    "TaxLedger",
]
