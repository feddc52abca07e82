"""
Estate Domain Models (``estate_modules.estate.models``).

Responsibility
--------------
The estate header record (lifecycle status, cash pool, freeze and closure
annotations), the distribution-readiness report and the read-only summary
returned to callers as a command view.

Invariants enforced
-------------------
* CLOSED is terminal.
* A FROZEN estate always carries its freeze reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from estate_kernel.domain.values import Currency, Money


class EstateStatus(Enum):
    """Must align with ``workflows.ESTATE_WORKFLOW.states``."""
    DRAFT = "draft"
    ACTIVE = "active"
    FROZEN = "frozen"
    CLOSED = "closed"


class ReadinessBlocker(Enum):
    ESTATE_FROZEN = "estate_frozen"
    DISPUTED_ASSET = "disputed_asset"
    UNVERIFIED_ASSET = "unverified_asset"
    REJECTED_ASSET = "rejected_asset"
    DISPUTED_DEBT = "disputed_debt"
    CONTESTED_GIFT = "contested_gift"
    TAX_NOT_CLEARED = "tax_not_cleared"
    PENDING_CLAIM = "pending_claim"


@dataclass(frozen=True)
class Estate:
    id: UUID
    deceased_name: str
    date_of_death: date
    valuation_date: date
    currency: Currency
    status: EstateStatus
    cash_on_hand: Money
    created_by: UUID
    created_at: datetime
    freeze_reason: str | None = None
    frozen_by: UUID | None = None
    frozen_at: datetime | None = None
    closure_notes: str | None = None
    closed_by: UUID | None = None
    closed_at: datetime | None = None
    insolvency_flagged: bool = False

    def __post_init__(self) -> None:
        if self.status == EstateStatus.FROZEN and not self.freeze_reason:
            raise ValueError(f"Frozen estate {self.id} requires a freeze reason")


@dataclass(frozen=True)
class ReadinessBlockerDetail:
    blocker: ReadinessBlocker
    entity_ids: tuple[UUID, ...] = ()

    def __str__(self) -> str:
        return self.blocker.value


@dataclass(frozen=True)
class ReadinessReport:
    """Outcome of the distribution-readiness check."""

    blockers: tuple[ReadinessBlockerDetail, ...] = ()

    @property
    def ready(self) -> bool:
        return not self.blockers

    @property
    def blocker_names(self) -> list[str]:
        return [b.blocker.value for b in self.blockers]

    def has(self, blocker: ReadinessBlocker) -> bool:
        return any(b.blocker == blocker for b in self.blockers)


@dataclass(frozen=True)
class EstateSummary:
    """Read-only projection of an estate, returned as the command view."""

    estate_id: UUID
    status: EstateStatus
    currency: Currency
    cash_on_hand: Money
    net_value: Money
    distributable_pool: Money
    outstanding_liabilities: Money
    asset_count: int
    debt_count: int
    liquidation_count: int
    gift_count: int
    claim_count: int
    tax_cleared: bool
    readiness: ReadinessReport
    version: int
    policy: str

    @property
    def is_solvent(self) -> bool:
        return not self.net_value.is_negative
