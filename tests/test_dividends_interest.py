from decimal import Decimal

from fixtures import dividend, interest
from overseastax.reporting.dividends import compute_dividend_tax, reconcile_net
from overseastax.reporting.events import DiagnosticRecorder
from overseastax.reporting.interest import compute_interest_tax


def test_dividend_with_withholding_gets_credit():
    result = compute_dividend_tax([dividend("24", "2.4")], 2024)

    gross_cny = Decimal("24") * Decimal("718.84") / 100
    withheld_cny = Decimal("2.4") * Decimal("718.84") / 100
    assert result.total_dividend.amount == gross_cny
    assert result.foreign_tax_paid.amount == withheld_cny
    assert result.gross_tax.amount == gross_cny * Decimal("0.2")
    assert result.tax_credit.amount == withheld_cny
    assert result.net_tax_due.amount == gross_cny * Decimal("0.2") - withheld_cny


def test_credit_is_capped_at_domestic_tax():
    # 30% withheld abroad exceeds the 20% domestic rate
    result = compute_dividend_tax([dividend("100", "30", currency="CNY")], 2024)
    assert result.gross_tax.amount == Decimal("20")
    assert result.tax_credit.amount == Decimal("20")
    assert result.tax_credit.amount <= result.gross_tax.amount
    assert result.net_tax_due.amount == 0


def test_cny_dividend_without_withholding():
    result = compute_dividend_tax([dividend("1000", currency="CNY")], 2024)
    assert result.total_dividend.amount == Decimal("1000")
    assert result.gross_tax.amount == Decimal("200")
    assert result.net_tax_due.amount == Decimal("200")


def test_dividend_breakdown_per_currency():
    rows = [
        dividend("77", "7.7"),
        dividend("1.6", "0.16"),
        dividend("103.74", "10.38"),
        dividend("50", "5", currency="HKD", symbol="0700"),
    ]
    result = compute_dividend_tax(rows, 2024)

    usd, hkd = result.by_currency
    assert usd.currency == "USD"
    assert usd.total_dividend == Decimal("182.34")
    assert usd.withholding_tax == Decimal("18.24")
    assert usd.total_dividend_cny == Decimal("182.34") * Decimal("718.84") / 100
    assert hkd.total_dividend == Decimal("50")
    assert result.total_dividend.amount == usd.total_dividend_cny + hkd.total_dividend_cny


def test_net_amount_is_recomputed_and_flagged():
    recorder = DiagnosticRecorder()
    result = compute_dividend_tax(
        [dividend("24", "2.4", net="20"), dividend("10", "1", net="9.005")],
        2024,
        recorder=recorder,
    )
    assert [d.net_amount for d in result.details] == [Decimal("21.6"), Decimal("9")]
    assert [w.kind for w in recorder.warnings] == ["dividend_net_mismatch"] * 2
    assert "21.6" in recorder.warnings[0].message
    assert "using 9" in recorder.warnings[1].message


def test_reconcile_net_keeps_consistent_record():
    record = dividend("24", "2.4")
    assert reconcile_net(record) is record


def test_empty_dividends():
    result = compute_dividend_tax([], 2024)
    assert result.total_dividend.amount == 0
    assert result.net_tax_due.amount == 0
    assert result.details == []


def test_interest_converted_and_taxed():
    result = compute_interest_tax([interest("100")], 2024)
    assert result.total_interest.amount == Decimal("718.84")
    assert result.tax_amount.amount == Decimal("143.768")
    assert result.by_currency[0].total_interest == Decimal("100")
    assert len(result.details) == 1


def test_interest_sums_currencies_after_conversion():
    result = compute_interest_tax(
        [interest("1000", currency="CNY"), interest("100", currency="HKD")], 2024
    )
    assert result.total_interest.amount == Decimal("92.604") + Decimal("1000")
    assert [s.currency for s in result.by_currency] == ["HKD", "CNY"]
