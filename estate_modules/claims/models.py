"""
Dependant Claim Models (``estate_modules.claims.models``).

Claims by dependants for reasonable provision out of the estate.  SETTLED
and REJECTED are terminal; a settled claim's allocation never changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from estate_kernel.domain.values import Money


class ClaimStatus(Enum):
    """Must align with ``workflows.CLAIM_WORKFLOW.states``."""
    FILED = "filed"
    EVIDENCE_SUBMITTED = "evidence_submitted"
    VERIFIED = "verified"
    REJECTED = "rejected"
    SETTLED = "settled"


PENDING_STATUSES = frozenset({ClaimStatus.FILED, ClaimStatus.EVIDENCE_SUBMITTED})


class SettlementMethod(Enum):
    LUMP_SUM = "lump_sum"
    PERIODIC_PAYMENTS = "periodic_payments"
    ASSET_TRANSFER = "asset_transfer"
    LIFE_INTEREST = "life_interest"


@dataclass(frozen=True)
class ClaimEvidence:
    document_id: str
    description: str
    added_by: UUID
    added_at: datetime


@dataclass(frozen=True)
class DependantClaim:
    id: UUID
    estate_id: UUID
    dependant_id: UUID
    relationship: str
    basis: str
    status: ClaimStatus
    filed_by: UUID
    filed_at: datetime
    requested_amount: Money | None = None
    evidence: tuple[ClaimEvidence, ...] = ()
    verification_notes: str | None = None
    rejection_reason: str | None = None
    settlement_allocation: Money | None = None
    settlement_method: SettlementMethod | None = None
    settled_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.status == ClaimStatus.SETTLED and self.settlement_allocation is None:
            raise ValueError(f"Settled claim {self.id} requires a settlement allocation")
