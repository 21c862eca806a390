import json

import pytest

from overseastax.cmd.cli import build_argparser, main


def _trade(when, direction, qty, amount, fee="0"):
    signed = -float(amount) if direction == "buy" else float(amount)
    return {
        "trade_time": when,
        "symbol": "AAPL",
        "market": "US",
        "direction": direction,
        "currency": "USD",
        "quantity": qty,
        "trade_amount": str(signed),
        "total_fee": fee,
        "change_amount": str(signed - float(fee)),
    }


def _write_bills(path, year=2024):
    doc = {
        "bills": [
            {
                "year": year,
                "file_name": f"{year}_annual.xlsx",
                "transactions": [
                    _trade(f"{year}-01-02 10:00:00", "buy", "10", "1000", "5"),
                    _trade(f"{year}-06-01 10:00:00", "sell", "10", "1200", "5"),
                ],
            }
        ]
    }
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


def test_csv_output(tmp_path):
    src = _write_bills(tmp_path / "bills.json")
    out = tmp_path / "reports" / "tax.csv"
    assert main([str(src), "--currency", "usd", "--csv", str(out)]) == 0
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Year,Capital Gain (USD)")
    assert lines[1].startswith("2024,190.00,38.00,")


def test_report_to_stdout(tmp_path, capsys):
    src = _write_bills(tmp_path / "bills.json")
    assert main([str(src)]) == 0
    assert "2024 Foreign Securities Income Tax Report" in capsys.readouterr().out


def test_year_without_rate_exits_nonzero(tmp_path, caplog):
    src = _write_bills(tmp_path / "bills.json", year=2019)
    assert main([str(src), "--csv", str(tmp_path / "tax.csv")]) == 1
    assert not (tmp_path / "tax.csv").exists()
    assert "No reference exchange rate for 2019" in caplog.text


def test_custom_rates_enable_new_year(tmp_path):
    src = _write_bills(tmp_path / "bills.json", year=2025)
    rates = tmp_path / "rates.csv"
    rates.write_text("year,date,USD,HKD,source\n2025,2025-12-31,700,90,SAFE\n")
    out = tmp_path / "tax.csv"
    assert main([str(src), "--rates", str(rates), "--csv", str(out)]) == 0
    assert out.read_text(encoding="utf-8").splitlines()[1].startswith("2025,1330.00,")


def test_argparser_rejects_unknown_currency():
    with pytest.raises(SystemExit):
        build_argparser().parse_args(["x.json", "--currency", "EUR"])
