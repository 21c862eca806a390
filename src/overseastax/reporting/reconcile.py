from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from overseastax.model import ParsedBill

from .calculator import TaxResult
from .money import ZERO

_DEFAULT_TOLERANCE = Decimal("0.05")


@dataclass(frozen=True)
class ReconcileDiff:
    year: int
    currency: str
    field: str  # "dividend" | "interest"
    mine: Decimal
    statement: Decimal

    @property
    def difference(self) -> Decimal:
        return self.mine - self.statement

    def is_ok(self, tolerance: Decimal = _DEFAULT_TOLERANCE) -> bool:
        return self.difference.copy_abs() <= tolerance


def reconcile_with_income_summary(
    result: TaxResult, bills: Iterable[ParsedBill]
) -> list[ReconcileDiff]:
    """Compare the year's dividend and interest totals with the broker's summary.

    Only currencies present in a supplementary summary of the same year are
    compared, in original currency. Returns an empty list when no summary
    exists.
    """
    stated_div: dict[str, Decimal] = {}
    stated_int: dict[str, Decimal] = {}
    for bill in bills:
        if bill.is_annual:
            continue
        for rec in bill.dividend_summaries:
            if rec.year != result.year:
                continue
            ccy = rec.currency
            stated_div[ccy] = stated_div.get(ccy, ZERO) + rec.total_dividend
            stated_int[ccy] = stated_int.get(ccy, ZERO) + rec.total_interest

    mine_div = {s.currency: s.total_dividend for s in result.dividend_tax.by_currency}
    mine_int = {s.currency: s.total_interest for s in result.interest_tax.by_currency}

    diffs: list[ReconcileDiff] = []
    for ccy in sorted(stated_div):
        diffs.append(
            ReconcileDiff(
                result.year, ccy, "dividend", mine_div.get(ccy, ZERO), stated_div[ccy]
            )
        )
        diffs.append(
            ReconcileDiff(
                result.year, ccy, "interest", mine_int.get(ccy, ZERO), stated_int[ccy]
            )
        )
    return diffs
