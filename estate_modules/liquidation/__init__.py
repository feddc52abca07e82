"""Asset liquidation workflow (``estate_modules.liquidation``)."""

from estate_modules.liquidation.models import (
    Liquidation,
    LiquidationStatus,
    LiquidationType,
    SaleDetails,
)
from estate_modules.liquidation.workflows import LIQUIDATION_WORKFLOW
from estate_modules.liquidation.ledger import LiquidationLedger

__all__ = [
    "Liquidation",
    "LiquidationStatus",
    "LiquidationType",
    "SaleDetails",
    "LIQUIDATION_WORKFLOW",
    "LiquidationLedger",
]
