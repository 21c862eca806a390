"""Builders for normalized statement records.

The engine consumes typed records produced by a statement parser; tests build
them directly with sensible defaults so each case only spells out what it
exercises.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from overseastax.conv import parse_datetime
from overseastax.model import (
    DividendRecord,
    DividendSummaryRecord,
    Holding,
    InterestRecord,
    ParsedBill,
    Transaction,
)


def D(value) -> Decimal:
    return Decimal(str(value))


def tx(
    when: str,
    direction: str,
    qty,
    amount,
    *,
    fee=0,
    symbol: str = "AAPL",
    market: str = "US",
    currency: str = "USD",
    category: str = "equity",
    price=None,
    change=None,
) -> Transaction:
    """Trade fill; `amount` is the unsigned trade amount, signed by direction."""
    amount = D(amount)
    fee = D(fee)
    qty = D(qty)
    signed = -amount if direction == "buy" else amount
    return Transaction(
        trade_time=parse_datetime(when),
        symbol=symbol,
        market=market,
        category=category,
        direction=direction,  # type: ignore[arg-type]
        currency=currency,
        quantity=qty,
        price=D(price) if price is not None else (amount / qty if qty else D(0)),
        trade_amount=signed,
        total_fee=fee,
        change_amount=D(change) if change is not None else signed - fee,
    )


def holding(
    period: str,
    qty,
    market_value,
    *,
    year: int = 2024,
    symbol: str = "AAPL",
    market: str = "US",
    currency: str = "USD",
    category: str = "equity",
    multiplier=1,
) -> Holding:
    date = dt.date(year, 1, 1) if period == "start" else dt.date(year, 12, 31)
    qty = D(qty)
    mv = D(market_value)
    return Holding(
        period=period,  # type: ignore[arg-type]
        date=date,
        symbol=symbol,
        market=market,
        currency=currency,
        category=category,
        quantity=qty,
        price=mv / qty / D(multiplier) if qty else D(0),
        multiplier=D(multiplier),
        market_value=mv,
    )


def dividend(
    gross,
    withholding=0,
    *,
    net=None,
    date: dt.date = dt.date(2024, 3, 1),
    symbol: str = "AAPL",
    currency: str = "USD",
) -> DividendRecord:
    gross = D(gross)
    withholding = D(withholding)
    return DividendRecord(
        date=date,
        symbol=symbol,
        currency=currency,
        quantity=D(100),
        per_share=gross / D(100),
        gross_amount=gross,
        withholding_tax=withholding,
        net_amount=D(net) if net is not None else gross - withholding,
    )


def interest(amount, *, currency: str = "USD", source: str = "Money Fund") -> InterestRecord:
    return InterestRecord(
        date=dt.date(2024, 12, 31), currency=currency, amount=D(amount), source=source
    )


def bill(year: int, file_type: str = "annual", **records) -> ParsedBill:
    return ParsedBill(
        year=year,
        file_name=f"{year}_{file_type}.xlsx",
        file_type=file_type,  # type: ignore[arg-type]
        **records,
    )


def income_summary(year: int, dividend_total, interest_total=0, currency="USD"):
    return DividendSummaryRecord(
        year=year,
        account_name="Margin",
        currency=currency,
        total_dividend=D(dividend_total),
        total_interest=D(interest_total),
    )
