from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from .calculator import TaxResult
from .export import CSV_HEADERS, headline_figures, to_display
from .money import CURRENCY_SYMBOLS, TAX_BASE_CURRENCY


class ReportSink(Protocol):
    def write(self, results: Sequence[TaxResult]) -> Path:  # returns written file path
        ...


def money_fmt_for_currency(ccy: str) -> str:
    sym = CURRENCY_SYMBOLS.get(ccy)
    if sym:
        return f'"{sym}"#,##0.00'
    return f'"{ccy}" #,##0.00'


@dataclass
class ExcelReportSink:
    out_path: Path
    currency: str = TAX_BASE_CURRENCY
    locale: str = "EN"  # "EN" (default) or "ZH"

    def _labels(self):
        if (self.locale or "EN").upper() == "ZH":
            return {
                "sheet": {
                    "summary": "税务汇总",
                    "gains": "资本利得明细",
                    "dividends": "股息",
                    "interest": "利息",
                },
                "summary": [
                    "年度",
                    "资本利得",
                    "资本利得税",
                    "股息收入",
                    "股息税",
                    "可抵免税额",
                    "利息收入",
                    "利息税",
                    "应纳税总额",
                    "实际应缴",
                ],
                "gains": [
                    "年度",
                    "代码",
                    "市场",
                    "品类",
                    "币种",
                    "买入日期",
                    "卖出日期",
                    "数量",
                    "买入金额",
                    "卖出金额",
                    "费用",
                    "盈亏（原币）",
                    "盈亏（CNY）",
                    "估算成本",
                    "零成本",
                ],
                "dividends": [
                    "年度",
                    "日期",
                    "代码",
                    "币种",
                    "税前金额",
                    "预扣税",
                    "税后金额",
                ],
                "interest": ["年度", "日期", "币种", "金额", "来源"],
                "yes": "是",
                "no": "",
            }
        return {
            "sheet": {
                "summary": "Tax Summary",
                "gains": "Capital Gains",
                "dividends": "Dividends",
                "interest": "Interest",
            },
            "summary": list(CSV_HEADERS),
            "gains": [
                "Year",
                "Symbol",
                "Market",
                "Category",
                "Currency",
                "Buy Date",
                "Sell Date",
                "Quantity",
                "Buy Amount",
                "Sell Amount",
                "Fees",
                "Gain (Trade Currency)",
                "Gain (CNY)",
                "Estimated Cost",
                "Zero Cost",
            ],
            "dividends": [
                "Year",
                "Date",
                "Symbol",
                "Currency",
                "Gross",
                "Withholding Tax",
                "Net",
            ],
            "interest": ["Year", "Date", "Currency", "Amount", "Source"],
            "yes": "yes",
            "no": "",
        }

    def write(self, results: Sequence[TaxResult]) -> Path:
        out_path = Path(self.out_path)
        wb = Workbook()
        wb.remove(wb.active)

        labels = self._labels()
        date_fmt = "YYYY-MM-DD"
        qty_fmt = "0.########"
        display_fmt = money_fmt_for_currency(self.currency)
        cny_fmt = money_fmt_for_currency(TAX_BASE_CURRENCY)

        ws = wb.create_sheet(title=labels["sheet"]["summary"])
        header = labels["summary"]
        ws.append([header[0]] + [f"{h} ({self.currency})" for h in header[1:]])
        for r in results:
            ws.append(
                [r.year]
                + [float(to_display(r, v, self.currency)) for v in headline_figures(r)]
            )
            for c in range(2, len(header) + 1):
                ws.cell(row=ws.max_row, column=c).number_format = display_fmt

        ws = wb.create_sheet(title=labels["sheet"]["gains"])
        ws.append(labels["gains"])
        for r in results:
            for d in r.capital_gains.details:
                ws.append(
                    [
                        r.year,
                        d.symbol,
                        d.market,
                        d.category,
                        d.currency,
                        d.buy_date,
                        d.sell_date,
                        float(d.quantity),
                        float(d.buy_amount),
                        float(d.sell_amount),
                        float(d.fees),
                        float(d.gain),
                        float(d.gain_cny),
                        labels["yes"] if d.is_estimated_cost else labels["no"],
                        labels["yes"] if d.is_zero_cost else labels["no"],
                    ]
                )
                row = ws.max_row
                ws.cell(row=row, column=6).number_format = date_fmt
                ws.cell(row=row, column=7).number_format = date_fmt
                ws.cell(row=row, column=8).number_format = qty_fmt
                tcy_fmt = money_fmt_for_currency(d.currency)
                for c in range(9, 13):
                    ws.cell(row=row, column=c).number_format = tcy_fmt
                ws.cell(row=row, column=13).number_format = cny_fmt

        if any(r.dividend_tax.details for r in results):
            ws = wb.create_sheet(title=labels["sheet"]["dividends"])
            ws.append(labels["dividends"])
            for r in results:
                for dv in r.dividend_tax.details:
                    ws.append(
                        [
                            r.year,
                            dv.date,
                            dv.symbol,
                            dv.currency,
                            float(dv.gross_amount),
                            float(dv.withholding_tax),
                            float(dv.net_amount),
                        ]
                    )
                    row = ws.max_row
                    ws.cell(row=row, column=2).number_format = date_fmt
                    for c in (5, 6, 7):
                        ws.cell(row=row, column=c).number_format = (
                            money_fmt_for_currency(dv.currency)
                        )

        if any(r.interest_tax.details for r in results):
            ws = wb.create_sheet(title=labels["sheet"]["interest"])
            ws.append(labels["interest"])
            for r in results:
                for it in r.interest_tax.details:
                    ws.append(
                        [r.year, it.date, it.currency, float(it.amount), it.source]
                    )
                    row = ws.max_row
                    ws.cell(row=row, column=2).number_format = date_fmt
                    ws.cell(row=row, column=4).number_format = money_fmt_for_currency(
                        it.currency
                    )

        for sheet in wb.worksheets:
            _autosize(sheet)

        out_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(out_path)
        return out_path


def _autosize(sheet, max_width: int = 40, min_width: int = 10) -> None:
    for col in range(1, sheet.max_column + 1):
        max_len = 0
        for row in range(1, sheet.max_row + 1):
            v = sheet.cell(row=row, column=col).value
            if v is None:
                continue
            s = v.strftime("%Y-%m-%d") if hasattr(v, "strftime") else str(v)
            max_len = max(max_len, len(s))
        width = min(max_width, max(min_width, max_len + 2))
        sheet.column_dimensions[get_column_letter(col)].width = width
