from __future__ import annotations

import csv
import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Iterable

from overseastax.conv import parse_date, to_dec_strict

from .money import SUPPORTED_CURRENCIES, TAX_BASE_CURRENCY, Money

_HUNDRED = Decimal("100")

SAFE_SOURCE = "State Administration of Foreign Exchange (SAFE)"


class MissingRateError(LookupError):
    """No reference rate is registered for the requested tax year."""

    def __init__(self, year: int, supported_years: Iterable[int]):
        self.year = year
        self.supported_years = list(supported_years)
        supported = ", ".join(str(y) for y in self.supported_years) or "none"
        super().__init__(
            f"No reference exchange rate for {year}; supported years: {supported}"
        )


@dataclass(frozen=True)
class ReferenceRate:
    """Statutory year-end rate: CNY per 100 units of each foreign currency."""

    year: int
    date: dt.date
    usd: Decimal
    hkd: Decimal
    source: str = SAFE_SOURCE

    def per_hundred(self, currency: str) -> Decimal:
        if currency == "USD":
            return self.usd
        if currency == "HKD":
            return self.hkd
        if currency == TAX_BASE_CURRENCY:
            return _HUNDRED
        raise ValueError(f"Unsupported currency {currency!r}")


class RateTable:
    """Year-indexed reference rates used for every conversion in a tax year.

    CSV schema (one row per year):
      year,date,USD,HKD,source    # USD/HKD = CNY per 100 units
    """

    def __init__(self, rates: Iterable[ReferenceRate] = ()):
        self._rates: dict[int, ReferenceRate] = {}
        for r in rates:
            self._add(r)

    def _add(self, rate: ReferenceRate) -> None:
        if rate.usd <= 0 or rate.hkd <= 0:
            raise ValueError(f"Encountered non-positive reference rate for {rate.year}")
        self._rates[rate.year] = rate

    @classmethod
    def from_csv(cls, path: str | Path, *, base: RateTable | None = None) -> RateTable:
        """Load rates from CSV; rows override same-year entries of `base`."""
        inst = cls(base.entries() if base is not None else ())
        with open(path, encoding="utf-8", newline="") as fp:
            reader = csv.DictReader(fp)
            fields = set(reader.fieldnames or [])
            required = {"year", "date", "USD", "HKD"}
            if not required.issubset(fields):
                missing = required - fields
                raise ValueError(f"Rate table missing columns: {sorted(missing)}")

            for row in reader:
                year = int(row["year"])
                inst._add(
                    ReferenceRate(
                        year=year,
                        date=parse_date(row["date"]),
                        usd=to_dec_strict(row["USD"]),
                        hkd=to_dec_strict(row["HKD"]),
                        source=(row.get("source") or "").strip() or SAFE_SOURCE,
                    )
                )
        return inst

    def with_entry(self, rate: ReferenceRate) -> RateTable:
        return RateTable([*self.entries(), rate])

    def entries(self) -> list[ReferenceRate]:
        return [self._rates[y] for y in sorted(self._rates)]

    def get(self, year: int) -> ReferenceRate | None:
        return self._rates.get(year)

    def require(self, year: int) -> ReferenceRate:
        rate = self._rates.get(year)
        if rate is None:
            raise MissingRateError(year, self.supported_years())
        return rate

    def supported_years(self) -> list[int]:
        return sorted(self._rates, reverse=True)

    def __contains__(self, year: object) -> bool:
        return year in self._rates


# Central parity on the last business day of each year.
DEFAULT_RATES = RateTable(
    [
        ReferenceRate(2024, dt.date(2024, 12, 31), Decimal("718.84"), Decimal("92.604")),
        ReferenceRate(2023, dt.date(2023, 12, 29), Decimal("708.27"), Decimal("90.622")),
        ReferenceRate(2022, dt.date(2022, 12, 30), Decimal("696.46"), Decimal("89.327")),
        ReferenceRate(2021, dt.date(2021, 12, 31), Decimal("637.57"), Decimal("81.76")),
        ReferenceRate(2020, dt.date(2020, 12, 31), Decimal("652.49"), Decimal("84.164")),
    ]
)


def _check_currency(currency: str) -> None:
    if currency not in SUPPORTED_CURRENCIES:
        raise ValueError(f"Unsupported currency {currency!r}")


def convert(
    amount: Decimal,
    from_ccy: str,
    to_ccy: str,
    year: int,
    table: RateTable = DEFAULT_RATES,
) -> Decimal:
    """Convert through CNY using the year's reference rate. No rounding."""
    _check_currency(from_ccy)
    _check_currency(to_ccy)
    if from_ccy == to_ccy:
        return amount

    rate = table.require(year)
    in_cny = amount
    if from_ccy != TAX_BASE_CURRENCY:
        in_cny = amount * rate.per_hundred(from_ccy) / _HUNDRED
    if to_ccy == TAX_BASE_CURRENCY:
        return in_cny
    return in_cny * _HUNDRED / rate.per_hundred(to_ccy)


def to_cny(
    amount: Decimal, currency: str, year: int, table: RateTable = DEFAULT_RATES
) -> Decimal:
    return convert(amount, currency, TAX_BASE_CURRENCY, year, table)


def convert_money(
    money: Money, to_ccy: str, year: int, table: RateTable = DEFAULT_RATES
) -> Money:
    return Money(convert(money.amount, money.currency, to_ccy, year, table), to_ccy)


def rate_description(year: int, table: RateTable = DEFAULT_RATES) -> str:
    rate = table.get(year)
    if rate is None:
        return f"No exchange rate data for {year}"
    usd = (rate.usd / _HUNDRED).quantize(Decimal("0.0001"))
    hkd = (rate.hkd / _HUNDRED).quantize(Decimal("0.0001"))
    return (
        f"{year} reference rate ({rate.date.isoformat()}): "
        f"1 USD = {usd} CNY, 1 HKD = {hkd} CNY\n"
        f"Source: {rate.source}"
    )
