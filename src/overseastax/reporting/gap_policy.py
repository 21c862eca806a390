from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from overseastax.model import Transaction

from .fifo_domain import DataConsistencyWarning, Lot, MatchLeg


class GapPolicy(Protocol):
    def resolve(
        self, sell: Transaction, qty_remaining: Decimal
    ) -> tuple[list[MatchLeg], DataConsistencyWarning | None]:  # pragma: no cover - protocol
        ...


def _unmatched_warning(sell: Transaction, qty: Decimal, note: str) -> DataConsistencyWarning:
    return DataConsistencyWarning(
        kind="unmatched_sell",
        symbol=sell.symbol,
        date=sell.trade_time.date(),
        currency=sell.currency,
        message=(
            f"Unmatched SELL for {sell.symbol} ({sell.market}) on "
            f"{sell.trade_time.date()}; remaining qty={qty}. {note}"
        ),
        quantity=qty,
    )


class StrictGapPolicy:
    """Record the gap and leave the unmatched quantity out of realized gains."""

    def resolve(
        self, sell: Transaction, qty_remaining: Decimal
    ) -> tuple[list[MatchLeg], DataConsistencyWarning]:
        return [], _unmatched_warning(
            sell, qty_remaining, "Excluded from realized gains."
        )


class ZeroCostPolicy:
    """Match the unmatched quantity against a zero-cost lot so it is taxed in full."""

    def resolve(
        self, sell: Transaction, qty_remaining: Decimal
    ) -> tuple[list[MatchLeg], DataConsistencyWarning]:
        lot = Lot(
            trade_time=sell.trade_time,
            qty=qty_remaining,
            amount=Decimal("0"),
            fee=Decimal("0"),
            price=Decimal("0"),
            origin="gap",
        )
        lot.remaining = Decimal("0")
        return [MatchLeg(lot=lot, qty=qty_remaining)], _unmatched_warning(
            sell, qty_remaining, "Matched at zero cost."
        )
