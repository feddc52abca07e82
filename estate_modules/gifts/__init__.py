"""Gift hotchpot ledger (``estate_modules.gifts``)."""

from estate_modules.gifts.models import Gift, GiftStatus, RecoveredValueNote
from estate_modules.gifts.workflows import GIFT_WORKFLOW
from estate_modules.gifts.ledger import GiftLedger

__all__ = [
    "Gift",
    "GiftStatus",
    "RecoveredValueNote",
    "GIFT_WORKFLOW",
    "GiftLedger",
]
