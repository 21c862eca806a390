from .bill import (
    DividendRecord,
    DividendSummaryRecord,
    Holding,
    InterestRecord,
    LoadReport,
    ParsedBill,
    Transaction,
    load_bills,
    parse_bill,
)

__all__ = [
    "Transaction",
    "Holding",
    "DividendRecord",
    "InterestRecord",
    "DividendSummaryRecord",
    "ParsedBill",
    "LoadReport",
    "load_bills",
    "parse_bill",
]
