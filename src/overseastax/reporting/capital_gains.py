from __future__ import annotations

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from overseastax.model import Holding, Transaction

from .events import DiagnosticRecorder
from .fifo import FifoMatcher, lot_from_buy
from .fifo_domain import CapitalGainDetail, GroupKey, Lot, MatchLeg
from .fx import DEFAULT_RATES, RateTable, to_cny
from .gap_policy import GapPolicy
from .money import SUPPORTED_CURRENCIES, TAX_RATE, ZERO, Money, cny
from .trade_math import match_gain, prorate, sell_amount_share


@dataclass(frozen=True)
class CurrencyGain:
    currency: str
    total_gain: Decimal
    total_gain_cny: Decimal


@dataclass(frozen=True)
class CapitalGainsTax:
    total_gain: Money
    taxable_gain: Money
    tax_amount: Money
    by_currency: list[CurrencyGain] = field(default_factory=list)
    details: list[CapitalGainDetail] = field(default_factory=list)

    @property
    def has_estimated_cost(self) -> bool:
        return any(d.is_estimated_cost for d in self.details)

    @property
    def has_zero_cost(self) -> bool:
        return any(d.is_zero_cost for d in self.details)


def group_key(item: Transaction | Holding) -> GroupKey:
    return GroupKey(item.symbol, item.market, item.currency, item.category)


def opening_lot(
    holdings: Iterable[Holding], key: GroupKey, year: int
) -> Lot | None:
    """One synthetic buy lot at the first instant of the year.

    Several period-start rows for the same key (e.g. two sub-accounts) are
    pooled into that single lot.
    """
    qty = ZERO
    value = ZERO
    price = ZERO
    for h in holdings:
        if h.period != "start" or group_key(h) != key:
            continue
        qty += h.quantity
        value += h.market_value
        price = h.price
    if qty <= 0:
        return None
    return Lot(
        trade_time=dt.datetime(year, 1, 1),
        qty=qty,
        amount=value,
        fee=ZERO,
        price=price,
        origin="holding",
    )


def build_details(
    key: GroupKey,
    sell: Transaction,
    legs: Sequence[MatchLeg],
    year: int,
    table: RateTable = DEFAULT_RATES,
) -> list[CapitalGainDetail]:
    details = []
    for leg in legs:
        lot, q = leg.lot, leg.qty
        buy_amount = prorate(lot.amount, q, lot.qty)
        sell_amount = sell_amount_share(sell.trade_amount, q, sell.quantity)
        fees = prorate(lot.fee, q, lot.qty) + prorate(sell.total_fee, q, sell.quantity)
        gain = match_gain(sell_amount, buy_amount, fees)
        details.append(
            CapitalGainDetail(
                symbol=key.symbol,
                market=key.market,
                category=key.category,
                currency=key.currency,
                buy_date=None if lot.origin == "gap" else lot.trade_time.date(),
                sell_date=sell.trade_time.date(),
                quantity=q,
                buy_price=lot.price,
                sell_price=sell.price,
                buy_amount=buy_amount,
                sell_amount=sell_amount,
                fees=fees,
                gain=gain,
                gain_cny=to_cny(gain, key.currency, year, table),
                is_estimated_cost=lot.is_estimated,
                is_zero_cost=lot.is_zero_cost,
            )
        )
    return details


def compute_capital_gains(
    transactions: Iterable[Transaction],
    year: int,
    holdings: Iterable[Holding] = (),
    *,
    table: RateTable = DEFAULT_RATES,
    recorder: Optional[DiagnosticRecorder] = None,
    gap_policy: Optional[GapPolicy] = None,
) -> CapitalGainsTax:
    """FIFO-match the year's sells and tax the net realized gain in CNY.

    Losses offset gains across instruments within the year; a net loss gives
    a taxable gain of zero.
    """
    holdings = list(holdings)
    groups: dict[GroupKey, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        if tx.quantity == 0:
            continue
        groups[group_key(tx)].append(tx)

    matcher = FifoMatcher(gap_policy=gap_policy, recorder=recorder)
    details: list[CapitalGainDetail] = []

    for key, trades in groups.items():
        sells = sorted((t for t in trades if t.is_sell), key=lambda t: t.trade_time)
        if not sells:
            continue

        lots = [lot_from_buy(t) for t in trades if t.is_buy]
        opening = opening_lot(holdings, key, year)
        if opening is not None:
            lots.insert(0, opening)
        # stable: the opening lot stays ahead of a fill stamped at midnight Jan 1
        lots.sort(key=lambda lot: lot.trade_time)
        for lot in lots:
            matcher.add_lot(key, lot)

        for sell in sells:
            legs = matcher.match_sell(key, sell)
            details.extend(build_details(key, sell, legs, year, table))

    per_ccy: dict[str, list[Decimal]] = {}
    for d in details:
        acc = per_ccy.setdefault(d.currency, [ZERO, ZERO])
        acc[0] += d.gain
        acc[1] += d.gain_cny
    by_currency = [
        CurrencyGain(ccy, per_ccy[ccy][0], per_ccy[ccy][1])
        for ccy in SUPPORTED_CURRENCIES
        if ccy in per_ccy
    ]

    total = sum((d.gain_cny for d in details), ZERO)
    taxable = max(ZERO, total)
    return CapitalGainsTax(
        total_gain=cny(total),
        taxable_gain=cny(taxable),
        tax_amount=cny(taxable * TAX_RATE),
        by_currency=by_currency,
        details=details,
    )
