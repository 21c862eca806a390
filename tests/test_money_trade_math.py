from decimal import Decimal

import pytest

from overseastax.reporting.money import (
    Money,
    abs_decimal,
    format_amount,
    format_money,
    quantize_money,
)
from overseastax.reporting.trade_math import match_gain, prorate, sell_amount_share


def test_quantize_money_half_up():
    assert quantize_money(Decimal("2.345")) == Decimal("2.35")
    assert quantize_money(Decimal("123.4567"), "0.0001") == Decimal("123.4567")


def test_format_money_symbols():
    assert format_money(Money(Decimal("100"), "USD")) == "$100.00"
    assert format_money(Money(Decimal("100"), "HKD")) == "HK$100.00"
    assert format_money(Money(Decimal("100"), "CNY")) == "¥100.00"
    assert format_amount(Decimal("-3.5"), "USD") == "$-3.50"


def test_money_rejects_unknown_currency():
    with pytest.raises(ValueError):
        Money(Decimal("1"), "EUR")


def test_abs_decimal_uses_copy_abs():
    value = Decimal("-10.5")
    assert abs_decimal(value) == Decimal("10.5")
    assert value == Decimal("-10.5")


def test_prorate_keeps_full_precision():
    assert prorate(Decimal("100"), Decimal("1"), Decimal("3")) == Decimal("100") / 3
    assert prorate(Decimal("100"), Decimal("1"), Decimal("0")) == Decimal("0")


def test_sell_amount_share_ignores_sign():
    assert sell_amount_share(Decimal("-1200"), Decimal("5"), Decimal("10")) == Decimal("600")


def test_match_gain():
    assert match_gain(Decimal("1200"), Decimal("1000"), Decimal("10")) == Decimal("190")
