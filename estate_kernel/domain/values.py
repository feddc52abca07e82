"""
Values -- Immutable, self-validating value objects for estate amounts.

Responsibility:
    Provides Currency, Money and SharePercentage. Every amount that flows
    through the ledgers, the waterfall and the net-value computation is a
    Money; raw Decimals never cross a ledger boundary.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every ledger and engine. Depends only on
    estate_kernel.domain.currency.

Invariants enforced:
    - Amounts are Decimal, never float.
    - Currency codes are validated against CurrencyRegistry at construction.
    - Arithmetic and comparison never mix currencies (no conversion).
    - Share percentages lie in the closed interval [0, 100].

Failure modes:
    - ValueError on invalid amounts, currencies or percentages.
    - CurrencyMismatchError when arithmetic mixes currencies.
    - TypeError when a float is supplied as an amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from estate_kernel.domain.currency import CurrencyRegistry
from estate_kernel.exceptions import CurrencyMismatchError


@dataclass(frozen=True, slots=True)
class Currency:
    """ISO 4217 currency code, normalized to upper case."""

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency. All estate balances, debt
        amounts, proceeds, hotchpot values and tax heads are Money.

    Guarantees:
        - Immutable and hashable.
        - amount is always a Decimal.
        - Arithmetic and ordering are defined only within one currency.

    Non-goals:
        - Does NOT convert between currencies.
        - Does NOT auto-round; callers call .round() explicitly.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.amount, float):
            raise TypeError("Money amount must not be a float")
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e
        if not self.amount.is_finite():
            raise ValueError(f"Invalid amount: {self.amount}")

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """Build Money from a Decimal, string or int amount."""
        if isinstance(amount, (str, int)) and not isinstance(amount, bool):
            try:
                amount = Decimal(str(amount))
            except InvalidOperation as e:
                raise ValueError(f"Invalid amount: {amount!r}") from e
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    @property
    def is_negative(self) -> bool:
        return self.amount < Decimal("0")

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's minor unit."""
        places = self.currency.decimal_places
        quantize_str = "0." + "0" * places if places > 0 else "1"
        return Money(
            amount=self.amount.quantize(Decimal(quantize_str), rounding=rounding),
            currency=self.currency,
        )

    def min(self, other: Money) -> Money:
        """Return the smaller of two amounts in the same currency."""
        return self if self <= other else other

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                operation=operation,
                left=self.currency.code,
                right=other.currency.code,
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, (int, str)) and not isinstance(factor, bool):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


def sum_money(amounts, currency: Currency | str) -> Money:
    """Sum an iterable of Money, starting from zero in ``currency``."""
    total = Money.zero(currency)
    for amount in amounts:
        total = total + amount
    return total


_HUNDRED = Decimal("100")


@dataclass(frozen=True, slots=True)
class SharePercentage:
    """Co-ownership share expressed as a percentage in [0, 100]."""

    value: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.value, float):
            raise TypeError("SharePercentage must not be a float")
        if not isinstance(self.value, Decimal):
            try:
                object.__setattr__(self, "value", Decimal(str(self.value)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid percentage: {self.value}") from e
        if not self.value.is_finite() or self.value < 0 or self.value > _HUNDRED:
            raise ValueError(f"Percentage must be between 0 and 100: {self.value}")

    @classmethod
    def of(cls, value: Decimal | str | int) -> SharePercentage:
        return cls(value)

    @property
    def is_positive(self) -> bool:
        return self.value > 0

    def __str__(self) -> str:
        return f"{self.value}%"
