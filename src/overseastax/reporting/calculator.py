from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional

from overseastax.model import ParsedBill

from .capital_gains import CapitalGainsTax, compute_capital_gains
from .dividends import DividendTax, compute_dividend_tax
from .events import DiagnosticRecorder
from .fifo_domain import DataConsistencyWarning
from .fx import DEFAULT_RATES, MissingRateError, RateTable, ReferenceRate
from .gap_policy import GapPolicy
from .interest import InterestTax, compute_interest_tax
from .summary import AnnualReturn, TaxSummary, compute_annual_return, compute_summary


@dataclass(frozen=True)
class TaxResult:
    year: int
    exchange_rate: ReferenceRate
    capital_gains: CapitalGainsTax
    dividend_tax: DividendTax
    interest_tax: InterestTax
    summary: TaxSummary
    annual_return: AnnualReturn | None = None
    diagnostics: tuple[DataConsistencyWarning, ...] = ()


@dataclass
class TaxComputation:
    results: list[TaxResult] = field(default_factory=list)
    # years that had bills but no reference rate
    skipped_years: list[int] = field(default_factory=list)

    def __iter__(self):
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


def group_bills_by_year(
    bills: Iterable[ParsedBill], target_year: Optional[int] = None
) -> dict[int, list[ParsedBill]]:
    by_year: dict[int, list[ParsedBill]] = defaultdict(list)
    for bill in bills:
        if target_year is not None and bill.year != target_year:
            continue
        by_year[bill.year].append(bill)
    return by_year


def compute_year(
    year: int,
    bills: Iterable[ParsedBill],
    *,
    table: RateTable = DEFAULT_RATES,
    gap_policy: Optional[GapPolicy] = None,
) -> TaxResult:
    """Merge the year's annual statements and run every engine on them.

    Raises MissingRateError when the year has no reference rate.
    """
    rate = table.require(year)

    transactions, dividends, interests, holdings = [], [], [], []
    for bill in bills:
        if not bill.is_annual:
            continue
        transactions.extend(bill.transactions)
        dividends.extend(bill.dividends)
        interests.extend(bill.interests)
        holdings.extend(bill.holdings)

    recorder = DiagnosticRecorder()
    capital_gains = compute_capital_gains(
        transactions,
        year,
        holdings,
        table=table,
        recorder=recorder,
        gap_policy=gap_policy,
    )
    dividend_tax = compute_dividend_tax(dividends, year, table=table, recorder=recorder)
    interest_tax = compute_interest_tax(interests, year, table=table)
    summary = compute_summary(capital_gains, dividend_tax, interest_tax)
    annual_return = compute_annual_return(
        holdings, transactions, dividend_tax.details, year, table=table
    )

    return TaxResult(
        year=year,
        exchange_rate=rate,
        capital_gains=capital_gains,
        dividend_tax=dividend_tax,
        interest_tax=interest_tax,
        summary=summary,
        annual_return=annual_return,
        diagnostics=tuple(recorder.warnings),
    )


def compute_tax(
    bills: Iterable[ParsedBill],
    target_year: Optional[int] = None,
    *,
    table: RateTable = DEFAULT_RATES,
    gap_policy: Optional[GapPolicy] = None,
) -> TaxComputation:
    """Compute one TaxResult per year, newest first.

    Years without a reference rate are reported in `skipped_years` and
    produce no partial result.
    """
    out = TaxComputation()
    for year, year_bills in group_bills_by_year(bills, target_year).items():
        try:
            result = compute_year(year, year_bills, table=table, gap_policy=gap_policy)
        except MissingRateError:
            out.skipped_years.append(year)
            continue
        out.results.append(result)

    out.results.sort(key=lambda r: r.year, reverse=True)
    out.skipped_years.sort(reverse=True)
    return out
