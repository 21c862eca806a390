from __future__ import annotations

from typing import Hashable, Optional

from overseastax.model import Transaction

from .events import DiagnosticRecorder
from .fifo_domain import Lot, MatchLeg
from .gap_policy import GapPolicy, StrictGapPolicy
from .positions import PositionBook


def lot_from_buy(trade: Transaction) -> Lot:
    if not trade.is_buy:
        raise ValueError("a lot requires a buy transaction")
    return Lot(
        trade_time=trade.trade_time,
        qty=trade.quantity,
        amount=trade.trade_amount.copy_abs(),
        fee=trade.total_fee,
        price=trade.price,
    )


class FifoMatcher:
    """Feed buys and sells in time order; each sell consumes the oldest lots."""

    def __init__(
        self,
        *,
        positions: Optional[PositionBook] = None,
        gap_policy: Optional[GapPolicy] = None,
        recorder: Optional[DiagnosticRecorder] = None,
    ) -> None:
        self.positions = positions or PositionBook()
        self.recorder = recorder if recorder is not None else DiagnosticRecorder()
        self._gap_policy = gap_policy or StrictGapPolicy()

    def add_lot(self, key: Hashable, lot: Lot) -> None:
        self.positions.append_buy(key, lot)

    def match_sell(self, key: Hashable, trade: Transaction) -> list[MatchLeg]:
        if not trade.is_sell:
            raise ValueError("match_sell requires a sell transaction")
        legs, qty_remaining = self.positions.consume_fifo(key, trade.quantity)

        if qty_remaining > 0:
            extra, warning = self._gap_policy.resolve(trade, qty_remaining)
            legs.extend(extra)
            if warning is not None:
                self.recorder.record(warning)
        return legs
