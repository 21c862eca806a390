from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from overseastax.model import DividendRecord

from .events import DiagnosticRecorder
from .fifo_domain import DataConsistencyWarning
from .fx import DEFAULT_RATES, RateTable, to_cny
from .money import SUPPORTED_CURRENCIES, TAX_RATE, ZERO, Money, cny


@dataclass(frozen=True)
class DividendCurrencySummary:
    currency: str
    total_dividend: Decimal
    withholding_tax: Decimal
    total_dividend_cny: Decimal
    withholding_tax_cny: Decimal


@dataclass(frozen=True)
class DividendTax:
    total_dividend: Money
    foreign_tax_paid: Money
    tax_credit: Money
    gross_tax: Money
    net_tax_due: Money
    by_currency: list[DividendCurrencySummary] = field(default_factory=list)
    details: list[DividendRecord] = field(default_factory=list)


def reconcile_net(
    record: DividendRecord, recorder: Optional[DiagnosticRecorder] = None
) -> DividendRecord:
    """Return the record with net = gross - withholding, noting mismatches."""
    expected = record.gross_amount - record.withholding_tax
    if record.net_amount == expected:
        return record
    if recorder is not None:
        recorder.record(
            DataConsistencyWarning(
                kind="dividend_net_mismatch",
                symbol=record.symbol,
                date=record.date,
                currency=record.currency,
                message=(
                    f"Dividend {record.symbol} on {record.date}: net {record.net_amount} "
                    f"!= gross {record.gross_amount} - withholding "
                    f"{record.withholding_tax}; using {expected}."
                ),
            )
        )
    return dataclasses.replace(record, net_amount=expected)


def compute_dividend_tax(
    dividends: Iterable[DividendRecord],
    year: int,
    *,
    table: RateTable = DEFAULT_RATES,
    recorder: Optional[DiagnosticRecorder] = None,
) -> DividendTax:
    """Tax gross dividends at the flat rate, credited by foreign withholding.

    The credit is capped at the domestic tax on the same income.
    """
    details = [reconcile_net(d, recorder) for d in dividends]

    gross_by_ccy: dict[str, Decimal] = {}
    tax_by_ccy: dict[str, Decimal] = {}
    for d in details:
        gross_by_ccy[d.currency] = gross_by_ccy.get(d.currency, ZERO) + d.gross_amount
        tax_by_ccy[d.currency] = tax_by_ccy.get(d.currency, ZERO) + d.withholding_tax

    by_currency = []
    for ccy in SUPPORTED_CURRENCIES:
        if ccy not in gross_by_ccy:
            continue
        by_currency.append(
            DividendCurrencySummary(
                currency=ccy,
                total_dividend=gross_by_ccy[ccy],
                withholding_tax=tax_by_ccy[ccy],
                total_dividend_cny=to_cny(gross_by_ccy[ccy], ccy, year, table),
                withholding_tax_cny=to_cny(tax_by_ccy[ccy], ccy, year, table),
            )
        )

    total = sum((s.total_dividend_cny for s in by_currency), ZERO)
    foreign_paid = sum((s.withholding_tax_cny for s in by_currency), ZERO)
    gross_tax = total * TAX_RATE
    credit = min(foreign_paid, gross_tax)
    net_due = max(ZERO, gross_tax - credit)

    return DividendTax(
        total_dividend=cny(total),
        foreign_tax_paid=cny(foreign_paid),
        tax_credit=cny(credit),
        gross_tax=cny(gross_tax),
        net_tax_due=cny(net_due),
        by_currency=by_currency,
        details=details,
    )
