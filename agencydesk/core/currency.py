"""
Currency conversion and formatting.

All conversions go through USD: every rate in an ExchangeRateSnapshot is the
amount of that currency worth one US dollar. Conversion degrades to a no-op
when rates are unavailable so dashboards keep rendering without a rate fetch.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from babel import Locale
from babel.numbers import parse_pattern
from pydantic import BaseModel, ConfigDict, Field

from agencydesk.core.exceptions import InvalidCurrencyCode


class Currency(str, Enum):
    """Supported currency codes"""
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"
    SAR = "SAR"
    AED = "AED"
    EGP = "EGP"


ANCHOR_CURRENCY = Currency.USD


@dataclass(frozen=True)
class CurrencyInfo:
    code: Currency
    symbol: str
    name: str
    name_ar: str
    locale: str
    numbering_system: str = "latn"


CURRENCIES: Dict[Currency, CurrencyInfo] = {
    Currency.TRY: CurrencyInfo(Currency.TRY, "₺", "Turkish Lira", "ليرة تركية", "tr_TR"),
    Currency.USD: CurrencyInfo(Currency.USD, "$", "US Dollar", "دولار أمريكي", "en_US"),
    Currency.EUR: CurrencyInfo(Currency.EUR, "€", "Euro", "يورو", "de_DE"),
    Currency.SAR: CurrencyInfo(Currency.SAR, "﷼", "Saudi Riyal", "ريال سعودي", "ar_SA", "arab"),
    Currency.AED: CurrencyInfo(Currency.AED, "د.إ", "UAE Dirham", "درهم إماراتي", "ar_AE", "arab"),
    Currency.EGP: CurrencyInfo(Currency.EGP, "E£", "Egyptian Pound", "جنيه مصري", "ar_EG", "arab"),
}

# Babel localizes separators but always emits ASCII digits
ARABIC_INDIC_DIGITS = str.maketrans("0123456789", "\u0660\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669")


class ExchangeRateSnapshot(BaseModel):
    """Rates relative to USD, immutable for the lifetime of a cache window."""
    model_config = ConfigDict(frozen=True)

    base: str = ANCHOR_CURRENCY.value
    date: str
    rates: Dict[str, float]
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def rate(self, code: Union[Currency, str]) -> float:
        return _rate(self.rates, code)


RateSource = Union[ExchangeRateSnapshot, Mapping[str, float]]


def parse_currency(code: Union[Currency, str]) -> Currency:
    """
    Resolve a currency code to the Currency enum.

    Raises:
        InvalidCurrencyCode: if the code has no registered display metadata
    """
    if isinstance(code, Currency):
        return code
    try:
        return Currency(str(code).upper())
    except ValueError:
        raise InvalidCurrencyCode(code) from None


def get_currency_info(code: Union[Currency, str]) -> CurrencyInfo:
    return CURRENCIES[parse_currency(code)]


def round_money(value: float) -> float:
    """Round to cents, half away from zero, on the scaled value."""
    scaled = Decimal(repr(value * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return float(scaled / 100)


def _code(code: Union[Currency, str]) -> str:
    return code.value if isinstance(code, Currency) else str(code).upper()


def _rate(rates: Mapping[str, float], code: Union[Currency, str]) -> float:
    key = _code(code)
    # Missing or zero rates count as parity with USD
    return rates.get(key) or 1


def convert_amount(
    amount: float,
    from_currency: Union[Currency, str],
    to_currency: Union[Currency, str],
    rates: Optional[RateSource] = None
) -> float:
    """
    Convert an amount between currencies.

    Args:
        amount: Amount denominated in from_currency
        from_currency: Source currency
        to_currency: Target currency
        rates: Snapshot (or plain code -> rate mapping) relative to USD

    Returns:
        The converted amount rounded to 2 decimals. The amount is returned
        untouched when both currencies match or no rates are available.
    """
    if _code(from_currency) == _code(to_currency):
        return amount
    if isinstance(rates, ExchangeRateSnapshot):
        rates = rates.rates
    if not rates:
        return amount

    converted = (amount / _rate(rates, from_currency)) * _rate(rates, to_currency)
    return round_money(converted)


def format_currency(amount: float, currency: Union[Currency, str]) -> str:
    """
    Format an amount with the currency's locale, using 0 to 2 fraction digits.

    Raises:
        InvalidCurrencyCode: for unknown currency codes
    """
    info = get_currency_info(currency)
    locale = Locale.parse(info.locale)
    pattern = parse_pattern(locale.currency_formats["standard"].pattern)
    pattern.frac_prec = (0, 2)
    # Babel rounds half to even; round to cents first so display matches round_money
    formatted = pattern.apply(
        round_money(amount),
        locale,
        currency=info.code.value,
        currency_digits=False,
        numbering_system=info.numbering_system,
    )
    if info.numbering_system == "arab":
        formatted = formatted.translate(ARABIC_INDIC_DIGITS)
    return formatted
