from __future__ import annotations

from decimal import Decimal

from .money import ZERO, abs_decimal


def prorate(total: Decimal, take: Decimal, lot_qty: Decimal) -> Decimal:
    """Share of a lot-level amount attributable to `take` units, unrounded."""
    if lot_qty == 0:
        return ZERO
    return total * take / lot_qty


def sell_amount_share(trade_amount: Decimal, take: Decimal, sell_qty: Decimal) -> Decimal:
    """Sell proceeds for `take` units; statement sign is ignored."""
    return prorate(abs_decimal(trade_amount), take, sell_qty)


def match_gain(sell_amount: Decimal, buy_amount: Decimal, fees: Decimal) -> Decimal:
    return sell_amount - buy_amount - fees
