"""
Module: estate_engines
Responsibility:
    Pure calculation engines used by the estate aggregate: the debt-priority
    waterfall (with its priority gate) and the inflation adjusters that value
    lifetime gifts for hotchpot.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import estate_kernel (domain values, exceptions, logging) only.
    MUST NOT import estate_modules or estate_services.

Invariants enforced:
    - Engines never read the clock; dates arrive as parameters.
    - Decimal-only arithmetic through Money.
    - Every invocation is traced via ``@traced_engine``.
"""

from estate_engines.inflation import (
    AnnualRateInflationAdjuster,
    InflationAdjuster,
    NoInflationAdjuster,
    PriceIndexInflationAdjuster,
)
from estate_engines.waterfall import (
    DebtWaterfallEngine,
    WaterfallAllocation,
    WaterfallCandidate,
    WaterfallResult,
)

__all__ = [
    "AnnualRateInflationAdjuster",
    "DebtWaterfallEngine",
    "InflationAdjuster",
    "NoInflationAdjuster",
    "PriceIndexInflationAdjuster",
    "WaterfallAllocation",
    "WaterfallCandidate",
    "WaterfallResult",
]
