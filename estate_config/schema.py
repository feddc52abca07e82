"""
SettlementPolicy schema.

The versioned, human-authored statutory configuration injected into every
estate aggregate: which tier each debt type falls into by default, the
limitation periods after which debts become statute-barred, the minimum
unfreeze justification length and the inflation method used for hotchpot.

Historical computations stay reproducible because the aggregate records
the policy name, version and checksum it ran under, and every gift records
the adjuster version that valued it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from estate_engines.inflation import (
    AnnualRateInflationAdjuster,
    InflationAdjuster,
    NoInflationAdjuster,
    PriceIndexInflationAdjuster,
)

TIER_NAMES: tuple[str, ...] = (
    "funeral_expenses",
    "testamentary_expenses",
    "secured_debts",
    "taxes_rates_wages",
    "unsecured_general",
)

INFLATION_METHODS: tuple[str, ...] = ("none", "annual_rate", "price_index")


@dataclass(frozen=True)
class LimitationPeriods:
    """Years after which an unpaid debt is statute-barred."""

    unsecured_years: int = 6
    secured_years: int = 12

    def __post_init__(self) -> None:
        if self.unsecured_years <= 0 or self.secured_years <= 0:
            raise ValueError("Limitation periods must be positive")


@dataclass(frozen=True)
class InflationSettings:
    """How gift values are brought forward to the valuation date."""

    method: str = "none"
    version: str = "none"
    annual_rate: Decimal | None = None
    price_index: dict[int, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.method not in INFLATION_METHODS:
            raise ValueError(f"Unknown inflation method: {self.method}")
        if self.method == "annual_rate" and self.annual_rate is None:
            raise ValueError("annual_rate method requires annual_rate")
        if self.method == "price_index" and not self.price_index:
            raise ValueError("price_index method requires a price_index table")

    def build_adjuster(self) -> InflationAdjuster:
        match self.method:
            case "annual_rate":
                return AnnualRateInflationAdjuster(self.annual_rate, version=self.version)
            case "price_index":
                return PriceIndexInflationAdjuster(self.price_index, version=self.version)
            case _:
                return NoInflationAdjuster()


@dataclass(frozen=True)
class SettlementPolicy:
    """Statutory settlement configuration for one jurisdiction."""

    name: str
    version: int
    jurisdiction: str
    effective_from: date
    unfreeze_reason_min_length: int = 15
    debt_type_tiers: dict[str, str] = field(default_factory=dict)
    limitation: LimitationPeriods = field(default_factory=LimitationPeriods)
    inflation: InflationSettings = field(default_factory=InflationSettings)
    checksum: str = ""

    def __post_init__(self) -> None:
        if self.version < 1:
            raise ValueError(f"Policy version must be >= 1, got {self.version}")
        if self.unfreeze_reason_min_length < 1:
            raise ValueError("unfreeze_reason_min_length must be positive")
        for debt_type, tier in self.debt_type_tiers.items():
            if tier not in TIER_NAMES:
                raise ValueError(f"Debt type {debt_type} maps to unknown tier {tier}")

    def default_tier_for(self, debt_type: str) -> str:
        """Tier name for a debt type; unmapped types are ordinary unsecured."""
        return self.debt_type_tiers.get(debt_type, "unsecured_general")

    @property
    def label(self) -> str:
        return f"{self.name}@v{self.version}"
