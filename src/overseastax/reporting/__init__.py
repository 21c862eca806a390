from .calculator import TaxComputation, TaxResult, compute_tax, compute_year
from .capital_gains import CapitalGainsTax, compute_capital_gains
from .dividends import DividendTax, compute_dividend_tax
from .events import DiagnosticRecorder
from .export import (
    export_csv,
    format_result_for_display,
    generate_text_report,
)
from .fifo import FifoMatcher
from .fifo_domain import CapitalGainDetail, DataConsistencyWarning, Lot
from .fx import DEFAULT_RATES, MissingRateError, RateTable, ReferenceRate, convert
from .gap_policy import StrictGapPolicy, ZeroCostPolicy
from .interest import InterestTax, compute_interest_tax
from .money import Money
from .reconcile import reconcile_with_income_summary
from .report_sink import ExcelReportSink, ReportSink
from .summary import AnnualReturn, TaxSummary, compute_annual_return, compute_summary

__all__ = [
    "Money",
    "RateTable",
    "ReferenceRate",
    "DEFAULT_RATES",
    "MissingRateError",
    "convert",
    "Lot",
    "FifoMatcher",
    "StrictGapPolicy",
    "ZeroCostPolicy",
    "DiagnosticRecorder",
    "DataConsistencyWarning",
    "CapitalGainDetail",
    "CapitalGainsTax",
    "compute_capital_gains",
    "DividendTax",
    "compute_dividend_tax",
    "InterestTax",
    "compute_interest_tax",
    "TaxSummary",
    "AnnualReturn",
    "compute_summary",
    "compute_annual_return",
    "TaxResult",
    "TaxComputation",
    "compute_tax",
    "compute_year",
    "reconcile_with_income_summary",
    "export_csv",
    "format_result_for_display",
    "generate_text_report",
    "ReportSink",
    "ExcelReportSink",
]
