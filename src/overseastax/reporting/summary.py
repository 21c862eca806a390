from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from overseastax.model import DividendRecord, Holding, Transaction

from .capital_gains import CapitalGainsTax
from .dividends import DividendTax
from .fx import DEFAULT_RATES, RateTable, to_cny
from .interest import InterestTax
from .money import SUPPORTED_CURRENCIES, ZERO, Money, cny


@dataclass(frozen=True)
class TaxSummary:
    total_tax_due: Money
    total_tax_credit: Money
    net_tax_payable: Money


@dataclass(frozen=True)
class CurrencyReturn:
    currency: str
    start_value: Decimal
    end_value: Decimal
    cash_flow: Decimal
    total_return: Decimal


@dataclass(frozen=True)
class AnnualReturn:
    """Mark-to-market performance for the year.

    Includes unrealized gains and is never a tax base.
    """

    start_market_value: Money
    end_market_value: Money
    net_cash_flow: Money
    total_return: Money
    dividend_income: Money
    total_with_dividend: Money
    by_currency: list[CurrencyReturn] = field(default_factory=list)


def compute_summary(
    capital_gains: CapitalGainsTax,
    dividend_tax: DividendTax,
    interest_tax: InterestTax,
) -> TaxSummary:
    cg = capital_gains.tax_amount.amount
    it = interest_tax.tax_amount.amount
    return TaxSummary(
        total_tax_due=cny(cg + dividend_tax.gross_tax.amount + it),
        total_tax_credit=cny(dividend_tax.tax_credit.amount),
        net_tax_payable=cny(cg + dividend_tax.net_tax_due.amount + it),
    )


def compute_annual_return(
    holdings: Iterable[Holding],
    transactions: Iterable[Transaction],
    dividends: Iterable[DividendRecord],
    year: int,
    *,
    table: RateTable = DEFAULT_RATES,
) -> AnnualReturn | None:
    """return = end value - start value + net cash flow, per currency.

    Cash flow is the sum of signed change amounts (buys negative). Returns
    None when there is neither holding nor trade data to value.
    """
    holdings = list(holdings)
    transactions = list(transactions)
    if not holdings and not transactions:
        return None

    by_currency: list[CurrencyReturn] = []
    start_cny = end_cny = flow_cny = ZERO
    for ccy in SUPPORTED_CURRENCIES:
        start = _sum(
            h.market_value for h in holdings if h.period == "start" and h.currency == ccy
        )
        end = _sum(
            h.market_value for h in holdings if h.period == "end" and h.currency == ccy
        )
        flow = _sum(t.change_amount for t in transactions if t.currency == ccy)
        if start == 0 and end == 0 and flow == 0:
            continue
        by_currency.append(CurrencyReturn(ccy, start, end, flow, end - start + flow))
        start_cny += to_cny(start, ccy, year, table)
        end_cny += to_cny(end, ccy, year, table)
        flow_cny += to_cny(flow, ccy, year, table)

    total_return = end_cny - start_cny + flow_cny
    dividend_income = _sum(
        to_cny(d.gross_amount, d.currency, year, table) for d in dividends
    )
    return AnnualReturn(
        start_market_value=cny(start_cny),
        end_market_value=cny(end_cny),
        net_cash_flow=cny(flow_cny),
        total_return=cny(total_return),
        dividend_income=cny(dividend_income),
        total_with_dividend=cny(total_return + dividend_income),
        by_currency=by_currency,
    )


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)
