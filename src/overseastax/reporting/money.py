from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

MoneyLike = str | Decimal

TAX_BASE_CURRENCY = "CNY"
SUPPORTED_CURRENCIES = ("USD", "HKD", "CNY")
CURRENCY_SYMBOLS = {"CNY": "¥", "USD": "$", "HKD": "HK$"}

ZERO = Decimal("0")

_MONEY_Q = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str

    def __post_init__(self) -> None:
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency {self.currency!r}")


def cny(amount: Decimal) -> Money:
    return Money(amount, TAX_BASE_CURRENCY)


def quantize_money(value: Decimal, places: MoneyLike = _MONEY_Q) -> Decimal:
    """Round for presentation only; engine figures stay unrounded."""
    quant = Decimal(places)
    return value.quantize(quant, rounding=ROUND_HALF_UP)


def abs_decimal(value: Decimal) -> Decimal:
    """Return the absolute value using Decimal.copy_abs for stability."""
    return value.copy_abs()


def format_amount(amount: Decimal, currency: str, places: int = 2) -> str:
    """'$100.00', 'HK$-3.50', '¥718.84'."""
    q = Decimal(1).scaleb(-places)
    return f"{CURRENCY_SYMBOLS[currency]}{quantize_money(amount, q)}"


def format_money(money: Money, places: int = 2) -> str:
    return format_amount(money.amount, money.currency, places)


# Flat rate shared by property transfer, dividend and interest income.
TAX_RATE = Decimal("0.2")
