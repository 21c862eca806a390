from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, NamedTuple

WarningKind = Literal["unmatched_sell", "dividend_net_mismatch"]
# "holding": synthesized from a period-start position; "gap": zero-cost filler
LotOrigin = Literal["trade", "holding", "gap"]


class GroupKey(NamedTuple):
    """Gains are matched within one key and only netted after conversion."""

    symbol: str
    market: str
    currency: str
    category: str


@dataclass
class Lot:
    trade_time: dt.datetime
    qty: Decimal  # original lot quantity
    amount: Decimal  # total buy amount, multiplier applied
    fee: Decimal
    price: Decimal
    origin: LotOrigin = "trade"
    remaining: Decimal | None = None

    def __post_init__(self) -> None:
        if self.remaining is None:
            self.remaining = self.qty

    @property
    def is_estimated(self) -> bool:
        return self.origin == "holding"

    @property
    def is_zero_cost(self) -> bool:
        return self.origin == "gap"


@dataclass(frozen=True)
class MatchLeg:
    lot: Lot
    qty: Decimal


@dataclass(frozen=True)
class CapitalGainDetail:
    symbol: str
    market: str
    category: str
    currency: str
    buy_date: dt.date | None
    sell_date: dt.date
    quantity: Decimal
    buy_price: Decimal
    sell_price: Decimal
    buy_amount: Decimal
    sell_amount: Decimal
    fees: Decimal
    gain: Decimal  # original currency
    gain_cny: Decimal
    is_estimated_cost: bool = False  # cost from a period-start holding
    is_zero_cost: bool = False  # unmatched quantity taxed at zero cost


@dataclass(frozen=True)
class DataConsistencyWarning:
    """Advisory condition; the engine carries on with a best-effort figure."""

    kind: WarningKind
    symbol: str
    date: dt.date
    currency: str
    message: str
    quantity: Decimal | None = None
