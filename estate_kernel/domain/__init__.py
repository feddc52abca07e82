"""
Pure domain layer.

Immutable value objects and deterministic helpers with NO dependencies on
the ORM, the database or wall-clock time (time arrives through Clock).
"""

from estate_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from estate_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from estate_kernel.domain.events import DomainEvent, EventKind, money_payload
from estate_kernel.domain.results import (
    CommandError,
    CommandResult,
    CommandStatus,
)
from estate_kernel.domain.values import Currency, Money, SharePercentage, sum_money
from estate_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "CommandError",
    "CommandResult",
    "CommandStatus",
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "DeterministicClock",
    "DomainEvent",
    "EventKind",
    "Guard",
    "Money",
    "SharePercentage",
    "SystemClock",
    "Transition",
    "Workflow",
    "money_payload",
    "sum_money",
]
