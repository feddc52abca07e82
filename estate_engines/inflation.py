"""
Module: estate_engines.inflation
Responsibility:
    Inflation adjusters used to bring a lifetime gift's original value to its
    hotchpot value at the estate valuation date.  The aggregate never
    computes inflation itself; it receives one adjuster from configuration.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Each adjuster carries a ``version`` string, recorded on every gift it
      values, so historical hotchpot values stay reproducible after rates
      change.
    - Results are rounded to the currency's minor unit (ROUND_HALF_UP).
    - A valuation date on or before the gift date returns the original value.

Failure modes:
    - ValueError on a negative rate or a non-positive index.
    - ValidationError if a price index lacks a year that is needed.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Protocol, runtime_checkable

from estate_engines.tracer import traced_engine
from estate_kernel.domain.values import Money
from estate_kernel.exceptions import ValidationError

_DAYS_PER_YEAR = Decimal("365")


@runtime_checkable
class InflationAdjuster(Protocol):
    """Given (value, from_date, to_date) returns the adjusted value."""

    version: str

    def adjust(self, *, value: Money, from_date: date, to_date: date) -> Money:
        ...


class NoInflationAdjuster:
    """Hotchpot value equals original value."""

    version = "none"

    def adjust(self, *, value: Money, from_date: date, to_date: date) -> Money:
        return value


def _whole_years_between(start: date, end: date) -> int:
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return max(years, 0)


def _add_years(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        # 29 February on a non-leap target year
        return d.replace(year=d.year + years, day=28)


class AnnualRateInflationAdjuster:
    """
    Compound a fixed annual rate over whole years, then pro-rate the rate
    simply over the remaining days (365-day year).
    """

    def __init__(self, annual_rate: Decimal, version: str):
        if not isinstance(annual_rate, Decimal):
            annual_rate = Decimal(str(annual_rate))
        if annual_rate < 0:
            raise ValueError(f"Annual inflation rate cannot be negative: {annual_rate}")
        self.annual_rate = annual_rate
        self.version = version

    def factor(self, from_date: date, to_date: date) -> Decimal:
        if to_date <= from_date:
            return Decimal("1")
        years = _whole_years_between(from_date, to_date)
        anniversary = _add_years(from_date, years)
        remainder_days = Decimal((to_date - anniversary).days)
        one_plus = Decimal("1") + self.annual_rate
        return (one_plus ** years) * (
            Decimal("1") + self.annual_rate * remainder_days / _DAYS_PER_YEAR
        )

    @traced_engine("inflation_annual_rate", "1.0", fingerprint_fields=("value", "from_date", "to_date"))
    def adjust(self, *, value: Money, from_date: date, to_date: date) -> Money:
        return (value * self.factor(from_date, to_date)).round()


class PriceIndexInflationAdjuster:
    """
    Scale by the ratio of a yearly price index (e.g. CPI) between the
    valuation year and the gift year.
    """

    def __init__(self, index: Mapping[int, Decimal], version: str):
        if not index:
            raise ValueError("Price index table cannot be empty")
        table: dict[int, Decimal] = {}
        for year, level in index.items():
            level = level if isinstance(level, Decimal) else Decimal(str(level))
            if level <= 0:
                raise ValueError(f"Price index for {year} must be positive: {level}")
            table[int(year)] = level
        self.index = table
        self.version = version

    def _level(self, year: int, field: str) -> Decimal:
        try:
            return self.index[year]
        except KeyError:
            raise ValidationError(
                f"Price index {self.version} has no entry for {year}",
                field=field,
            ) from None

    @traced_engine("inflation_price_index", "1.0", fingerprint_fields=("value", "from_date", "to_date"))
    def adjust(self, *, value: Money, from_date: date, to_date: date) -> Money:
        if to_date <= from_date:
            return value
        ratio = self._level(to_date.year, "valuation_date") / self._level(
            from_date.year, "gift_date"
        )
        return (value * ratio).round()
