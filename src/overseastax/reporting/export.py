from __future__ import annotations

import csv
import datetime as dt
import io
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .calculator import TaxResult
from .fx import RateTable, convert
from .money import TAX_BASE_CURRENCY, TAX_RATE, format_amount, quantize_money

CSV_HEADERS = (
    "Year",
    "Capital Gain",
    "Capital Gains Tax",
    "Dividend Income",
    "Dividend Tax",
    "Foreign Tax Credit",
    "Interest Income",
    "Interest Tax",
    "Total Tax Due",
    "Net Tax Payable",
)

_RULE = "=" * 56
_THIN = "-" * 56


@dataclass(frozen=True)
class DisplayRow:
    year: int
    capital_gain: str
    capital_gain_tax: str
    dividend: str
    dividend_tax: str
    foreign_tax_credit: str
    interest: str
    interest_tax: str
    total_tax: str
    net_payable: str


def headline_figures(result: TaxResult) -> list[Decimal]:
    """CNY figures in CSV column order (year excluded)."""
    return [
        result.capital_gains.total_gain.amount,
        result.capital_gains.tax_amount.amount,
        result.dividend_tax.total_dividend.amount,
        result.dividend_tax.gross_tax.amount,
        result.dividend_tax.tax_credit.amount,
        result.interest_tax.total_interest.amount,
        result.interest_tax.tax_amount.amount,
        result.summary.total_tax_due.amount,
        result.summary.net_tax_payable.amount,
    ]


def to_display(result: TaxResult, amount: Decimal, currency: str) -> Decimal:
    # figures convert at the rate bound to the result
    table = RateTable([result.exchange_rate])
    return convert(amount, TAX_BASE_CURRENCY, currency, result.year, table)


def format_result_for_display(
    result: TaxResult, currency: str = TAX_BASE_CURRENCY
) -> DisplayRow:
    cells = [
        format_amount(to_display(result, v, currency), currency)
        for v in headline_figures(result)
    ]
    return DisplayRow(result.year, *cells)


def export_csv(results: Iterable[TaxResult], currency: str = TAX_BASE_CURRENCY) -> str:
    """One row per year, amounts converted to `currency` and rounded to cents."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(
        [CSV_HEADERS[0]] + [f"{h} ({currency})" for h in CSV_HEADERS[1:]]
    )
    for r in results:
        amounts = [quantize_money(to_display(r, v, currency)) for v in headline_figures(r)]
        writer.writerow([r.year, *(str(a) for a in amounts)])
    return buf.getvalue()


def generate_text_report(
    result: TaxResult,
    currency: str = TAX_BASE_CURRENCY,
    generated_at: dt.datetime | None = None,
) -> str:
    def fmt(amount: Decimal) -> str:
        return format_amount(to_display(result, amount, currency), currency)

    cg = result.capital_gains
    div = result.dividend_tax
    intr = result.interest_tax
    rate = result.exchange_rate
    pct = f"{TAX_RATE:.0%}"
    generated_at = generated_at or dt.datetime.now()

    lines = [
        _RULE,
        f"  {result.year} Foreign Securities Income Tax Report",
        _RULE,
        "",
        f"Generated: {generated_at:%Y-%m-%d %H:%M:%S}",
        f"Display currency: {currency}",
        "",
        f"Reference rate ({rate.date.isoformat()})",
        f"  Source: {rate.source}",
        f"  1 USD = {(rate.usd / 100).quantize(Decimal('0.0001'))} CNY",
        f"  1 HKD = {(rate.hkd / 100).quantize(Decimal('0.0001'))} CNY",
        "",
        _THIN,
        "1. Capital gains (property transfer income)",
        _THIN,
        f"  Matched lots: {len(cg.details)}",
        f"  Net gain/loss: {fmt(cg.total_gain.amount)}",
        f"  Taxable gain: {fmt(cg.taxable_gain.amount)}",
        f"  Tax due ({pct}): {fmt(cg.tax_amount.amount)}",
    ]
    for s in cg.by_currency:
        lines.append(
            f"    {s.currency}: {format_amount(s.total_gain, s.currency)}"
            f" -> {fmt(s.total_gain_cny)}"
        )
    if cg.has_estimated_cost:
        lines.append(
            "  * Includes positions carried over from a prior year; their cost "
            "is estimated from the period-start market value."
        )
    if cg.has_zero_cost:
        lines.append(
            "  * Includes sold quantity with no matching purchase, taxed at zero "
            "cost."
        )
    lines += [
        "",
        _THIN,
        "2. Dividend income",
        _THIN,
        f"  Dividend records: {len(div.details)}",
        f"  Gross dividends: {fmt(div.total_dividend.amount)}",
        f"  Tax due ({pct}): {fmt(div.gross_tax.amount)}",
        f"  Foreign tax withheld: {fmt(div.foreign_tax_paid.amount)}",
        f"  Foreign tax credit: {fmt(div.tax_credit.amount)}",
        f"  Net tax due: {fmt(div.net_tax_due.amount)}",
    ]
    for s in div.by_currency:
        lines.append(
            f"    {s.currency}: gross {format_amount(s.total_dividend, s.currency)},"
            f" withheld {format_amount(s.withholding_tax, s.currency)}"
        )
    lines += [
        "",
        _THIN,
        "3. Interest income",
        _THIN,
        f"  Interest total: {fmt(intr.total_interest.amount)}",
        f"  Tax due ({pct}): {fmt(intr.tax_amount.amount)}",
        "",
        _RULE,
        "  Summary",
        _RULE,
        f"  Total tax due: {fmt(result.summary.total_tax_due.amount)}",
        f"  Total tax credit: {fmt(result.summary.total_tax_credit.amount)}",
        "  " + "-" * 32,
        f"  Net tax payable: {fmt(result.summary.net_tax_payable.amount)}",
    ]
    ar = result.annual_return
    if ar is not None:
        lines += [
            "",
            _THIN,
            "Annual return (mark-to-market, not a tax base)",
            _THIN,
            f"  Start market value: {fmt(ar.start_market_value.amount)}",
            f"  End market value: {fmt(ar.end_market_value.amount)}",
            f"  Net cash flow: {fmt(ar.net_cash_flow.amount)}",
            f"  Return: {fmt(ar.total_return.amount)}",
            f"  Return incl. dividends: {fmt(ar.total_with_dividend.amount)}",
        ]
    if result.diagnostics:
        lines += ["", f"Data warnings: {len(result.diagnostics)}"]
        lines += [f"  - {w.message}" for w in result.diagnostics]
    lines += [
        "",
        "* For reference only; this is not tax advice. The tax authority's",
        "  assessment is final.",
    ]
    return "\n".join(lines)
