from decimal import Decimal

from fixtures import dividend, holding, interest, tx
from overseastax.reporting.capital_gains import compute_capital_gains
from overseastax.reporting.dividends import compute_dividend_tax
from overseastax.reporting.interest import compute_interest_tax
from overseastax.reporting.summary import compute_annual_return, compute_summary


def test_summary_arithmetic():
    cg = compute_capital_gains(
        [
            tx("2024-01-01 10:00:00", "buy", 10, 1000, currency="CNY"),
            tx("2024-02-01 10:00:00", "sell", 10, 2000, currency="CNY"),
        ],
        2024,
    )
    div = compute_dividend_tax([dividend("100", "10", currency="CNY")], 2024)
    intr = compute_interest_tax([interest("50", currency="CNY")], 2024)

    summary = compute_summary(cg, div, intr)
    assert summary.total_tax_due.amount == Decimal("200") + Decimal("20") + Decimal("10")
    assert summary.total_tax_credit.amount == Decimal("10")
    assert summary.net_tax_payable.amount == Decimal("220")
    assert summary.net_tax_payable.amount == (
        cg.tax_amount.amount + div.net_tax_due.amount + intr.tax_amount.amount
    )
    assert summary.net_tax_payable.currency == "CNY"


def test_annual_return_mark_to_market():
    holdings = [
        holding("start", 100, "15000"),
        holding("end", 50, "9000"),
        holding("end", 1000, "2000", currency="HKD", market="HK", symbol="0700"),
    ]
    trades = [
        tx("2024-03-01 10:00:00", "sell", 50, 8000, fee=10),
        tx("2024-04-01 10:00:00", "buy", 1000, 1800, currency="HKD", market="HK"),
    ]
    result = compute_annual_return(holdings, trades, [dividend("10")], 2024)

    usd, hkd = result.by_currency
    assert usd.start_value == Decimal("15000")
    assert usd.end_value == Decimal("9000")
    assert usd.cash_flow == Decimal("7990")
    assert usd.total_return == Decimal("1990")
    assert hkd.cash_flow == Decimal("-1800")
    assert hkd.total_return == Decimal("200")

    expected = (
        Decimal("1990") * Decimal("718.84") / 100
        + Decimal("200") * Decimal("92.604") / 100
    )
    assert abs(result.total_return.amount - expected) < Decimal("1e-20")
    assert result.dividend_income.amount == Decimal("10") * Decimal("718.84") / 100
    assert result.total_with_dividend.amount == (
        result.total_return.amount + result.dividend_income.amount
    )


def test_annual_return_is_optional_without_data():
    assert compute_annual_return([], [], [dividend("10")], 2024) is None


def test_annual_return_skips_idle_currencies():
    result = compute_annual_return([holding("start", 1, 100)], [], [], 2024)
    assert [c.currency for c in result.by_currency] == ["USD"]
    assert result.total_return.amount == Decimal("-718.84")
