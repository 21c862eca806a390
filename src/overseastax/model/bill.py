from __future__ import annotations

import datetime as dt
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Literal, Mapping, Sequence

from overseastax.conv import parse_date, parse_datetime, to_dec, to_dec_strict

Direction = Literal["buy", "sell"]
Period = Literal["start", "end"]
FileType = Literal["annual", "dividend_summary"]

CATEGORY_EQUITY = "equity"
CATEGORY_OPTION = "option"

ANNUAL = "annual"
DIVIDEND_SUMMARY = "dividend_summary"

SUPPORTED_CURRENCIES = ("USD", "HKD", "CNY")


@dataclass(frozen=True)
class Transaction:
    """A single trade fill as normalized by the statement parser.

    trade_amount already embeds any contract multiplier. total_fee is the
    positive fee total; change_amount is the signed net cash change (buys
    negative, sells positive).
    """

    trade_time: dt.datetime
    symbol: str
    market: str
    category: str
    direction: Direction
    currency: str
    quantity: Decimal  # unsigned magnitude
    price: Decimal
    trade_amount: Decimal
    total_fee: Decimal
    change_amount: Decimal

    @property
    def is_buy(self) -> bool:
        return self.direction == "buy"

    @property
    def is_sell(self) -> bool:
        return self.direction == "sell"


@dataclass(frozen=True)
class Holding:
    period: Period
    date: dt.date
    symbol: str
    market: str
    currency: str
    category: str
    quantity: Decimal
    price: Decimal
    multiplier: Decimal
    market_value: Decimal  # total value, multiplier applied


@dataclass(frozen=True)
class DividendRecord:
    date: dt.date
    symbol: str
    currency: str
    quantity: Decimal
    per_share: Decimal
    gross_amount: Decimal
    withholding_tax: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class InterestRecord:
    date: dt.date
    currency: str
    amount: Decimal
    source: str = ""


@dataclass(frozen=True)
class DividendSummaryRecord:
    """Broker-provided yearly income totals; used for cross-checking only."""

    year: int
    account_name: str
    currency: str
    total_dividend: Decimal
    total_interest: Decimal
    total_other: Decimal = Decimal("0")


@dataclass
class ParsedBill:
    year: int
    file_name: str
    file_type: FileType = ANNUAL
    holdings: list[Holding] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    dividends: list[DividendRecord] = field(default_factory=list)
    interests: list[InterestRecord] = field(default_factory=list)
    dividend_summaries: list[DividendSummaryRecord] = field(default_factory=list)

    @property
    def is_annual(self) -> bool:
        return self.file_type == ANNUAL


@dataclass(frozen=True)
class LoadIssue:
    location: str
    message: str


@dataclass
class LoadReport:
    """Non-fatal diagnostics collected while loading bills."""

    issues: list[LoadIssue] = field(default_factory=list)

    def warn(self, location: str, msg: str) -> None:
        self.issues.append(LoadIssue(location, msg))

    def log_with(self, log: logging.Logger) -> None:
        for i in self.issues:
            log.warning("%s: %s", i.location, i.message)


def _text(raw: Any, default: str = "") -> str:
    return str(raw or default).strip()


def _symbol(raw: Any) -> str:
    sym = _text(raw)
    if not sym:
        raise ValueError("Missing symbol")
    return sym


def _currency(raw: Any) -> str:
    ccy = str(raw or "").strip().upper()
    if ccy not in SUPPORTED_CURRENCIES:
        raise ValueError(f"Unsupported currency {raw!r}")
    return ccy


def _direction(raw: Any) -> Direction:
    d = str(raw or "").strip().lower()
    if d in {"buy", "b"}:
        return "buy"
    if d in {"sell", "s"}:
        return "sell"
    raise ValueError(f"Unknown trade direction {raw!r}")


def _period(raw: Any) -> Period:
    p = str(raw or "").strip().lower()
    if p not in {"start", "end"}:
        raise ValueError(f"Unknown holding period {raw!r}")
    return p  # type: ignore[return-value]


def _transaction(row: Mapping[str, Any]) -> Transaction:
    return Transaction(
        trade_time=parse_datetime(row["trade_time"]),
        symbol=_symbol(row.get("symbol")),
        market=_text(row.get("market")),
        category=_text(row.get("category"), CATEGORY_EQUITY),
        direction=_direction(row["direction"]),
        currency=_currency(row["currency"]),
        quantity=to_dec_strict(row["quantity"]).copy_abs(),
        price=to_dec(row.get("price")),
        trade_amount=to_dec_strict(row["trade_amount"]),
        total_fee=to_dec(row.get("total_fee")),
        change_amount=to_dec(row.get("change_amount")),
    )


def _holding(row: Mapping[str, Any]) -> Holding:
    return Holding(
        period=_period(row["period"]),
        date=parse_date(row["date"]),
        symbol=_symbol(row.get("symbol")),
        market=_text(row.get("market")),
        currency=_currency(row["currency"]),
        category=_text(row.get("category"), CATEGORY_EQUITY),
        quantity=to_dec_strict(row["quantity"]),
        price=to_dec(row.get("price")),
        multiplier=to_dec(row.get("multiplier"), default=Decimal("1")),
        market_value=to_dec_strict(row["market_value"]),
    )


def _dividend(row: Mapping[str, Any]) -> DividendRecord:
    gross = to_dec_strict(row["gross_amount"])
    withholding = to_dec(row.get("withholding_tax"))
    return DividendRecord(
        date=parse_date(row["date"]),
        symbol=_text(row.get("symbol")),
        currency=_currency(row["currency"]),
        quantity=to_dec(row.get("quantity")),
        per_share=to_dec(row.get("per_share")),
        gross_amount=gross,
        withholding_tax=withholding,
        net_amount=to_dec(row.get("net_amount"), default=gross - withholding),
    )


def _interest(row: Mapping[str, Any]) -> InterestRecord:
    return InterestRecord(
        date=parse_date(row["date"]),
        currency=_currency(row["currency"]),
        amount=to_dec_strict(row["amount"]),
        source=_text(row.get("source")),
    )


def _dividend_summary(row: Mapping[str, Any], year: int) -> DividendSummaryRecord:
    return DividendSummaryRecord(
        year=int(row.get("year") or year),
        account_name=_text(row.get("account_name")),
        currency=_currency(row["currency"]),
        total_dividend=to_dec(row.get("total_dividend")),
        total_interest=to_dec(row.get("total_interest")),
        total_other=to_dec(row.get("total_other")),
    )


def _collect(
    rows: Sequence[Mapping[str, Any]],
    build,
    where: str,
    report: LoadReport,
) -> list:
    out = []
    for idx, row in enumerate(rows):
        try:
            out.append(build(row))
        except (KeyError, ValueError) as exc:
            report.warn(f"{where}[{idx}]", f"row skipped: {exc}")
    return out


def parse_bill(doc: Mapping[str, Any], report: LoadReport | None = None) -> ParsedBill:
    """Build a ParsedBill from its normalized mapping form.

    Rows that cannot be coerced are skipped and noted in the report; a missing
    or invalid year or file type is fatal.
    """
    report = report if report is not None else LoadReport()
    if "year" not in doc:
        raise ValueError("bill is missing 'year'")
    year = int(doc["year"])
    file_name = str(doc.get("file_name", ""))
    file_type = str(doc.get("file_type", ANNUAL))
    if file_type not in {ANNUAL, DIVIDEND_SUMMARY}:
        raise ValueError(f"Unknown bill file type {file_type!r}")

    where = file_name or f"bill {year}"
    return ParsedBill(
        year=year,
        file_name=file_name,
        file_type=file_type,  # type: ignore[arg-type]
        holdings=_collect(doc.get("holdings", []), _holding, f"{where}:holdings", report),
        transactions=_collect(
            doc.get("transactions", []), _transaction, f"{where}:transactions", report
        ),
        dividends=_collect(
            doc.get("dividends", []), _dividend, f"{where}:dividends", report
        ),
        interests=_collect(
            doc.get("interests", []), _interest, f"{where}:interests", report
        ),
        dividend_summaries=_collect(
            doc.get("dividend_summaries", []),
            lambda r: _dividend_summary(r, year),
            f"{where}:dividend_summaries",
            report,
        ),
    )


def load_bills(path: str | Path) -> tuple[list[ParsedBill], LoadReport]:
    """Read a normalized bills JSON document: {"bills": [...]} or a bare list."""
    with open(path, encoding="utf-8") as fp:
        doc = json.load(fp)
    items = doc.get("bills", []) if isinstance(doc, dict) else doc
    if not isinstance(items, list):
        raise ValueError(f"{path}: expected a list of bills")

    report = LoadReport()
    bills = [parse_bill(item, report) for item in items]
    return bills, report
