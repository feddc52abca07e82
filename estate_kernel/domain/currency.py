"""Currency -- ISO 4217 registry for estate accounts."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Minor-unit precision and display name for one ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest representable amount, usable with Decimal.quantize()."""
        if self.decimal_places == 0:
            return Decimal("1")
        return Decimal("0." + "0" * (self.decimal_places - 1) + "1")


class CurrencyRegistry:
    """Currencies in which an estate may keep its books."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        # East African Community
        "KES": CurrencyInfo("KES", 2, "Kenyan Shilling"),
        "UGX": CurrencyInfo("UGX", 0, "Ugandan Shilling"),
        "TZS": CurrencyInfo("TZS", 2, "Tanzanian Shilling"),
        "RWF": CurrencyInfo("RWF", 0, "Rwandan Franc"),
        "BIF": CurrencyInfo("BIF", 0, "Burundian Franc"),
        "SSP": CurrencyInfo("SSP", 2, "South Sudanese Pound"),
        "CDF": CurrencyInfo("CDF", 2, "Congolese Franc"),
        "SOS": CurrencyInfo("SOS", 2, "Somali Shilling"),
        "ETB": CurrencyInfo("ETB", 2, "Ethiopian Birr"),
        # Other common-law succession jurisdictions
        "ZAR": CurrencyInfo("ZAR", 2, "South African Rand"),
        "NGN": CurrencyInfo("NGN", 2, "Nigerian Naira"),
        "GHS": CurrencyInfo("GHS", 2, "Ghanaian Cedi"),
        "ZMW": CurrencyInfo("ZMW", 2, "Zambian Kwacha"),
        "MWK": CurrencyInfo("MWK", 2, "Malawian Kwacha"),
        "BWP": CurrencyInfo("BWP", 2, "Botswana Pula"),
        "INR": CurrencyInfo("INR", 2, "Indian Rupee"),
        # Reserve currencies held by diaspora estates
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        "CHF": CurrencyInfo("CHF", 2, "Swiss Franc"),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen"),
        "AED": CurrencyInfo("AED", 2, "UAE Dirham"),
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
    }

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def is_valid(cls, code: str) -> bool:
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def validate(cls, code: str) -> str:
        """Normalize a currency code, raising ValueError when unknown."""
        if not code or not isinstance(code, str):
            raise ValueError(f"Invalid currency code: {code!r}")
        normalized = code.upper().strip()
        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Unsupported ISO 4217 currency code: {code!r}")
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
