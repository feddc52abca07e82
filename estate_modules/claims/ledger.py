"""
Dependant Claim Ledger (``estate_modules.claims.ledger``).

Responsibility
--------------
Claim intake, evidence, verification, rejection and settlement.  Settling
requires the allocation to fit within the distributable pool, which the
aggregate computes and passes in.

Failure modes
-------------
* ``InsufficientDistributablePoolError`` -- allocation exceeds the pool.
* ``InvalidClaimTransitionError`` -- action not allowed in current status.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from uuid import UUID

from estate_kernel.domain.values import Currency, Money, sum_money
from estate_kernel.exceptions import (
    ClaimNotFoundError,
    InsufficientDistributablePoolError,
    InvalidAmountError,
    InvalidClaimTransitionError,
    ValidationError,
)
from estate_kernel.logging_config import get_logger
from estate_modules.base import EntityLedger, advance
from estate_modules.claims.models import (
    PENDING_STATUSES,
    ClaimEvidence,
    ClaimStatus,
    DependantClaim,
    SettlementMethod,
)
from estate_modules.claims.workflows import CLAIM_WORKFLOW

logger = get_logger("modules.claims.ledger")


class ClaimLedger(EntityLedger[DependantClaim]):
    not_found_error = ClaimNotFoundError

    def file(
        self,
        *,
        claim_id: UUID,
        estate_id: UUID,
        dependant_id: UUID,
        relationship: str,
        basis: str,
        filed_by: UUID,
        now: datetime,
        requested_amount: Money | None = None,
    ) -> DependantClaim:
        if not basis or not basis.strip():
            raise ValidationError("Claim basis is required", field="basis")
        if not relationship or not relationship.strip():
            raise ValidationError("Relationship to the deceased is required", field="relationship")
        if requested_amount is not None and not requested_amount.is_positive:
            raise InvalidAmountError("requested_amount", str(requested_amount.amount), "must be positive")
        claim = DependantClaim(
            id=claim_id,
            estate_id=estate_id,
            dependant_id=dependant_id,
            relationship=relationship,
            basis=basis,
            status=ClaimStatus.FILED,
            filed_by=filed_by,
            filed_at=now,
            requested_amount=requested_amount,
        )
        logger.info("claim_filed", extra={
            "claim_id": str(claim_id),
            "dependant_id": str(dependant_id),
            "relationship": relationship,
        })
        return self._put(claim_id, claim)

    def _move(self, claim_id: UUID, action: str, **changes) -> DependantClaim:
        claim = self.get(claim_id)
        status = advance(CLAIM_WORKFLOW, ClaimStatus, claim.status, action, claim_id, InvalidClaimTransitionError)
        return self._put(claim_id, replace(claim, status=status, **changes))

    def add_evidence(
        self,
        claim_id: UUID,
        document_id: str,
        description: str,
        added_by: UUID,
        now: datetime,
    ) -> DependantClaim:
        if not document_id or not document_id.strip():
            raise ValidationError("Evidence document id is required", field="document_id")
        claim = self.get(claim_id)
        evidence = ClaimEvidence(
            document_id=document_id,
            description=description,
            added_by=added_by,
            added_at=now,
        )
        return self._move(claim_id, "add_evidence", evidence=claim.evidence + (evidence,))

    def verify(self, claim_id: UUID, notes: str) -> DependantClaim:
        return self._move(claim_id, "verify", verification_notes=notes)

    def reject(self, claim_id: UUID, reason: str) -> DependantClaim:
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason is required", field="reason")
        return self._move(claim_id, "reject", rejection_reason=reason)

    def settle(
        self,
        claim_id: UUID,
        allocation: Money,
        method: SettlementMethod,
        distributable_pool: Money,
        now: datetime,
    ) -> DependantClaim:
        claim = self.get(claim_id)
        if CLAIM_WORKFLOW.find_transition(claim.status.value, "settle") is None:
            raise InvalidClaimTransitionError(str(claim_id), claim.status.value, "settle")
        if not allocation.is_positive:
            raise InvalidAmountError("allocation", str(allocation.amount), "must be positive")
        if allocation > distributable_pool:
            raise InsufficientDistributablePoolError(
                claim_id=str(claim_id),
                allocation=str(allocation.amount),
                pool=str(distributable_pool.amount),
                currency=allocation.currency.code,
            )
        settled = self._move(
            claim_id,
            "settle",
            settlement_allocation=allocation,
            settlement_method=method,
            settled_at=now,
        )
        logger.info("claim_settled", extra={
            "claim_id": str(claim_id),
            "allocation": str(allocation.amount),
            "method": method.value,
        })
        return settled

    def settled_total(self, currency: Currency) -> Money:
        return sum_money(
            (c.settlement_allocation for c in self if c.status == ClaimStatus.SETTLED),
            currency,
        )

    def pending(self) -> list[DependantClaim]:
        return [c for c in self if c.status in PENDING_STATUSES]
