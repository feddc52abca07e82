"""
Gift Hotchpot Models (``estate_modules.gifts.models``).

Lifetime (inter vivos) gifts are brought back into account when the estate
is divided.  Only RECORDED and RESOLVED gifts contribute their hotchpot
value; CONTESTED gifts are excluded until resolved.  A RECLAIMED gift
contributes its original value instead, through a ``RecoveredValueNote``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from estate_kernel.domain.values import Money


class GiftStatus(Enum):
    """Must align with ``workflows.GIFT_WORKFLOW.states``."""
    RECORDED = "recorded"
    CONTESTED = "contested"
    RESOLVED = "resolved"
    RECLAIMED = "reclaimed"


CONTRIBUTING_STATUSES = frozenset({GiftStatus.RECORDED, GiftStatus.RESOLVED})


@dataclass(frozen=True)
class Gift:
    id: UUID
    estate_id: UUID
    recipient_id: UUID
    gift_date: date
    original_value: Money
    hotchpot_value: Money
    adjuster_version: str
    status: GiftStatus
    recorded_at: datetime
    description: str | None = None
    contest_reason: str | None = None
    resolution: str | None = None
    reclaim_reason: str | None = None

    @property
    def contributes_hotchpot(self) -> bool:
        return self.status in CONTRIBUTING_STATUSES


@dataclass(frozen=True)
class RecoveredValueNote:
    """Value returned to the estate by a reclaimed gift."""
    gift_id: UUID
    amount: Money
    reason: str
    recorded_at: datetime
