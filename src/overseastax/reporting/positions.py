from __future__ import annotations

from collections import defaultdict, deque
from decimal import Decimal
from typing import Hashable

from .fifo_domain import Lot, MatchLeg


class PositionBook:
    """Maintain FIFO lots per grouping key without matching policy concerns."""

    def __init__(self) -> None:
        self._positions: dict[Hashable, deque[Lot]] = defaultdict(deque)

    def append_buy(self, key: Hashable, lot: Lot) -> None:
        if lot.qty <= 0:
            raise ValueError("buy lot quantity must be positive")
        self._positions[key].append(lot)

    def consume_fifo(self, key: Hashable, qty: Decimal) -> tuple[list[MatchLeg], Decimal]:
        """Take `qty` from the oldest lots; returns legs and the unmatched rest."""
        if qty <= 0:
            raise ValueError("qty to consume must be positive")

        legs: list[MatchLeg] = []
        qty_remaining = qty

        lots = self._positions[key]
        while qty_remaining > 0 and lots:
            lot = lots[0]
            take = min(qty_remaining, lot.remaining)
            legs.append(MatchLeg(lot=lot, qty=take))

            lot.remaining -= take
            qty_remaining -= take

            if lot.remaining <= 0:
                if lot.remaining < 0:
                    raise ValueError("lot quantity cannot become negative")
                lots.popleft()

        return legs, qty_remaining
