import datetime as dt

from fixtures import bill, dividend, holding, tx
from overseastax.reporting.calculator import compute_tax
from overseastax.reporting.export import (
    CSV_HEADERS,
    export_csv,
    format_result_for_display,
    generate_text_report,
)
from overseastax.reporting.gap_policy import ZeroCostPolicy


def _result(**records):
    records.setdefault(
        "transactions",
        [
            tx("2024-01-02 10:00:00", "buy", 10, 1000, fee=5),
            tx("2024-06-01 10:00:00", "sell", 10, 1200, fee=5),
        ],
    )
    records.setdefault("dividends", [dividend("24", "2.4")])
    (result,) = compute_tax([bill(2024, **records)]).results
    return result


def test_csv_in_cny():
    lines = export_csv([_result()]).splitlines()
    assert lines[0].split(",") == ["Year"] + [f"{h} (CNY)" for h in CSV_HEADERS[1:]]
    assert lines[1].split(",") == [
        "2024",
        "1365.80",
        "273.16",
        "172.52",
        "34.50",
        "17.25",
        "0.00",
        "0.00",
        "307.66",
        "290.41",
    ]


def test_csv_converted_to_usd():
    lines = export_csv([_result()], "USD").splitlines()
    assert lines[0].startswith("Year,Capital Gain (USD),")
    assert lines[1] == "2024,190.00,38.00,24.00,4.80,2.40,0.00,0.00,42.80,40.40"


def test_csv_one_row_per_year():
    bills = [
        bill(2023, dividends=[dividend("10")]),
        bill(2024, dividends=[dividend("10")]),
    ]
    text = export_csv(compute_tax(bills).results)
    assert [line.split(",")[0] for line in text.splitlines()] == ["Year", "2024", "2023"]


def test_display_row_formats_symbols():
    row = format_result_for_display(_result(), "USD")
    assert row.year == 2024
    assert row.capital_gain == "$190.00"
    assert row.net_payable == "$40.40"
    assert format_result_for_display(_result()).capital_gain == "¥1365.80"


def test_text_report_sections():
    report = generate_text_report(_result(), generated_at=dt.datetime(2025, 3, 1, 9, 0))
    assert "2024 Foreign Securities Income Tax Report" in report
    assert "Generated: 2025-03-01 09:00:00" in report
    assert "1 USD = 7.1884 CNY" in report
    assert "Tax due (20%): ¥273.16" in report
    assert "USD: $190.00 -> ¥1365.80" in report
    assert "Net tax payable: ¥290.41" in report
    assert "carried over from a prior year" not in report
    assert "not tax advice" in report


def test_text_report_discloses_estimated_cost_and_warnings():
    result = _result(
        holdings=[holding("start", 10, 1500), holding("end", 0, 0)],
        transactions=[
            tx("2024-03-01 10:00:00", "sell", 10, 1800),
            tx("2024-04-01 10:00:00", "sell", 5, 500, symbol="TSLA"),
        ],
        dividends=[],
    )
    report = generate_text_report(result, "USD")
    assert "carried over from a prior year" in report
    assert "Annual return (mark-to-market, not a tax base)" in report
    assert "Data warnings: 1" in report
    assert "Unmatched SELL for TSLA" in report


def test_text_report_discloses_zero_cost_rows_separately():
    sell = tx("2024-04-01 10:00:00", "sell", 4, 400, currency="CNY")
    bills = [bill(2024, transactions=[sell])]
    (result,) = compute_tax(bills, gap_policy=ZeroCostPolicy()).results
    report = generate_text_report(result)
    assert "taxed at zero cost" in report
    assert "carried over from a prior year" not in report
