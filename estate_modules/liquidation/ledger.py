"""
Liquidation Ledger (``estate_modules.liquidation.ledger``).

Responsibility
--------------
Drives each asset liquidation through its linear workflow.  Every step
requires the exact preceding state; anything else raises
``InvalidLiquidationTransitionError``.  The ledger does not touch the cash
pool: the aggregate credits proceeds when ``receive_proceeds`` succeeds.

Invariants enforced
-------------------
* At most one non-terminal liquidation per asset, and none once the asset
  has been liquidated.
* ``0 < proceeds <= sale price``.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from uuid import UUID

from estate_kernel.domain.values import Money
from estate_kernel.exceptions import (
    ActiveLiquidationExistsError,
    InvalidAmountError,
    InvalidLiquidationTransitionError,
    LiquidationNotFoundError,
    ValidationError,
)
from estate_kernel.logging_config import get_logger
from estate_modules.base import EntityLedger, advance
from estate_modules.liquidation.models import (
    Liquidation,
    LiquidationStatus,
    LiquidationType,
    SaleDetails,
)
from estate_modules.liquidation.workflows import LIQUIDATION_WORKFLOW

logger = get_logger("modules.liquidation.ledger")


class LiquidationLedger(EntityLedger[Liquidation]):
    not_found_error = LiquidationNotFoundError

    def for_asset(self, asset_id: UUID) -> list[Liquidation]:
        return [liq for liq in self if liq.asset_id == asset_id]

    def liquidated_asset_ids(self) -> frozenset[UUID]:
        """Assets whose value has already been converted into cash."""
        return frozenset(
            liq.asset_id for liq in self
            if liq.status == LiquidationStatus.PROCEEDS_RECEIVED
        )

    def initiate(
        self,
        *,
        liquidation_id: UUID,
        estate_id: UUID,
        asset_id: UUID,
        liquidation_type: LiquidationType,
        reason: str,
        initiated_by: UUID,
        now: datetime,
        target_amount: Money | None = None,
    ) -> Liquidation:
        if not reason or not reason.strip():
            raise ValidationError("Liquidation reason is required", field="reason")
        if target_amount is not None and not target_amount.is_positive:
            raise InvalidAmountError("target_amount", str(target_amount.amount), "must be positive")
        for existing in self.for_asset(asset_id):
            if existing.is_active or existing.status == LiquidationStatus.PROCEEDS_RECEIVED:
                raise ActiveLiquidationExistsError(
                    str(asset_id), str(existing.id), existing.status.value
                )

        liquidation = Liquidation(
            id=liquidation_id,
            estate_id=estate_id,
            asset_id=asset_id,
            liquidation_type=liquidation_type,
            reason=reason,
            status=LiquidationStatus.INITIATED,
            initiated_by=initiated_by,
            initiated_at=now,
            target_amount=target_amount,
        )
        logger.info("liquidation_initiated", extra={
            "liquidation_id": str(liquidation_id),
            "asset_id": str(asset_id),
            "liquidation_type": liquidation_type.value,
        })
        return self._put(liquidation_id, liquidation)

    def _move(self, liquidation_id: UUID, action: str, **changes) -> Liquidation:
        liquidation = self.get(liquidation_id)
        status = advance(
            LIQUIDATION_WORKFLOW,
            LiquidationStatus,
            liquidation.status,
            action,
            liquidation_id,
            InvalidLiquidationTransitionError,
        )
        logger.info("liquidation_status_changed", extra={
            "liquidation_id": str(liquidation_id),
            "action": action,
            "from_status": liquidation.status.value,
            "to_status": status.value,
        })
        return self._put(liquidation_id, replace(liquidation, status=status, **changes))

    def submit_for_approval(self, liquidation_id: UUID) -> Liquidation:
        return self._move(liquidation_id, "submit")

    def approve(
        self,
        liquidation_id: UUID,
        notes: str,
        approved_by: UUID,
        court_order_reference: str | None = None,
    ) -> Liquidation:
        return self._move(
            liquidation_id,
            "approve",
            approval_notes=notes,
            approved_by=approved_by,
            court_order_reference=court_order_reference,
        )

    def record_sale(
        self,
        liquidation_id: UUID,
        price: Money,
        buyer_reference: str,
        sale_date: date,
    ) -> Liquidation:
        # Out-of-order calls report the transition error before field errors.
        current = self.get(liquidation_id)
        if LIQUIDATION_WORKFLOW.find_transition(current.status.value, "record_sale") is None:
            raise InvalidLiquidationTransitionError(
                str(liquidation_id), current.status.value, "record_sale"
            )
        if not price.is_positive:
            raise InvalidAmountError("price", str(price.amount), "must be positive")
        if not buyer_reference or not buyer_reference.strip():
            raise ValidationError("Buyer reference is required", field="buyer_reference")
        return self._move(
            liquidation_id,
            "record_sale",
            sale=SaleDetails(price=price, buyer_reference=buyer_reference, sale_date=sale_date),
        )

    def receive_proceeds(self, liquidation_id: UUID, amount: Money) -> Liquidation:
        current = self.get(liquidation_id)
        if LIQUIDATION_WORKFLOW.find_transition(current.status.value, "receive_proceeds") is None:
            raise InvalidLiquidationTransitionError(
                str(liquidation_id), current.status.value, "receive_proceeds"
            )
        if not amount.is_positive:
            raise InvalidAmountError("amount", str(amount.amount), "must be positive")
        if amount > current.sale.price:
            raise InvalidAmountError(
                "amount", str(amount.amount), f"exceeds sale price {current.sale.price.amount}"
            )
        return self._move(liquidation_id, "receive_proceeds", proceeds=amount)

    def cancel(self, liquidation_id: UUID, reason: str) -> Liquidation:
        if not reason or not reason.strip():
            raise ValidationError("Cancellation reason is required", field="reason")
        return self._move(liquidation_id, "cancel", cancellation_reason=reason)
