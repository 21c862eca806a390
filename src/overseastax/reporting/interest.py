from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from overseastax.model import InterestRecord

from .fx import DEFAULT_RATES, RateTable, to_cny
from .money import SUPPORTED_CURRENCIES, TAX_RATE, ZERO, Money, cny


@dataclass(frozen=True)
class InterestCurrencySummary:
    currency: str
    total_interest: Decimal
    total_interest_cny: Decimal


@dataclass(frozen=True)
class InterestTax:
    total_interest: Money
    tax_amount: Money
    by_currency: list[InterestCurrencySummary] = field(default_factory=list)
    details: list[InterestRecord] = field(default_factory=list)


def compute_interest_tax(
    interests: Iterable[InterestRecord],
    year: int,
    *,
    table: RateTable = DEFAULT_RATES,
) -> InterestTax:
    details = list(interests)
    sums: dict[str, Decimal] = {}
    for i in details:
        sums[i.currency] = sums.get(i.currency, ZERO) + i.amount

    by_currency = [
        InterestCurrencySummary(ccy, sums[ccy], to_cny(sums[ccy], ccy, year, table))
        for ccy in SUPPORTED_CURRENCIES
        if ccy in sums
    ]
    total = sum((s.total_interest_cny for s in by_currency), ZERO)
    return InterestTax(
        total_interest=cny(total),
        tax_amount=cny(total * TAX_RATE),
        by_currency=by_currency,
        details=details,
    )
