"""Dependant claim ledger (``estate_modules.claims``)."""

from estate_modules.claims.models import (
    ClaimEvidence,
    ClaimStatus,
    DependantClaim,
    SettlementMethod,
)
from estate_modules.claims.workflows import CLAIM_WORKFLOW
from estate_modules.claims.ledger import ClaimLedger

__all__ = [
    "ClaimEvidence",
    "ClaimStatus",
    "DependantClaim",
    "SettlementMethod",
    "CLAIM_WORKFLOW",
    "ClaimLedger",
]
