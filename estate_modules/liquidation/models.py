"""
Liquidation Domain Models (``estate_modules.liquidation.models``).

A liquidation converts one asset into cash for the estate.  Sale details
exist only from SOLD onward; proceeds exist only at PROCEEDS_RECEIVED.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from estate_kernel.domain.values import Money


class LiquidationType(Enum):
    PRIVATE_TREATY = "private_treaty"
    PUBLIC_AUCTION = "public_auction"
    SALE_TO_BENEFICIARY = "sale_to_beneficiary"
    MARKET_SALE = "market_sale"


class LiquidationStatus(Enum):
    """Must align with ``workflows.LIQUIDATION_WORKFLOW.states``."""
    INITIATED = "initiated"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    SOLD = "sold"
    PROCEEDS_RECEIVED = "proceeds_received"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({LiquidationStatus.PROCEEDS_RECEIVED, LiquidationStatus.CANCELLED})


@dataclass(frozen=True)
class SaleDetails:
    price: Money
    buyer_reference: str
    sale_date: date


@dataclass(frozen=True)
class Liquidation:
    id: UUID
    estate_id: UUID
    asset_id: UUID
    liquidation_type: LiquidationType
    reason: str
    status: LiquidationStatus
    initiated_by: UUID
    initiated_at: datetime
    target_amount: Money | None = None
    approval_notes: str | None = None
    court_order_reference: str | None = None
    approved_by: UUID | None = None
    sale: SaleDetails | None = None
    proceeds: Money | None = None
    cancellation_reason: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status not in TERMINAL_STATUSES
