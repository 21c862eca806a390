"""
Compute flat-rate personal income tax on foreign securities trading from
normalized brokerage statement data.

This module acts as the CLI orchestrator, delegating responsibilities to:
- Input model: overseastax.model
- Reference rates: overseastax.reporting.fx
- Tax engines: overseastax.reporting.calculator
- Reconciliation: overseastax.reporting.reconcile
- Output writing: overseastax.reporting.export / report_sink

Usage
-----
    # Every year found in the input
    overseastax bills_2023.json bills_2024.json

    # One year, figures shown in USD, written to CSV and XLSX
    overseastax --year 2024 --currency USD \
        --csv ./tax.csv --xlsx ./tax.xlsx bills_2024.json

Rate CSV schema (CNY per 100 units):
    year,date,USD,HKD,source
    2025,2025-12-31,710.00,91.20,SAFE
"""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import ROUND_HALF_UP, getcontext
from pathlib import Path

from overseastax.logging import configure_logging
from overseastax.model import load_bills
from overseastax.reporting import (
    DEFAULT_RATES,
    ExcelReportSink,
    RateTable,
    StrictGapPolicy,
    ZeroCostPolicy,
    compute_tax,
    export_csv,
    generate_text_report,
    reconcile_with_income_summary,
)
from overseastax.reporting.money import SUPPORTED_CURRENCIES

getcontext().prec = 28
getcontext().rounding = ROUND_HALF_UP


def process_files(args: argparse.Namespace) -> int:
    logger = logging.getLogger(__name__)

    inputs = args.input if isinstance(args.input, list) else [args.input]
    logger.info("Reading %d file(s): %s", len(inputs), ", ".join(inputs))

    bills = []
    for p in inputs:
        loaded, report = load_bills(p)
        report.log_with(logger)
        logger.debug("Parsed %s: %d bill(s)", p, len(loaded))
        bills.extend(loaded)

    table = DEFAULT_RATES
    if args.rates:
        table = RateTable.from_csv(args.rates, base=DEFAULT_RATES)
        logger.info("Loaded reference rates for %s", table.supported_years())

    policy = ZeroCostPolicy() if args.zero_cost_unmatched else StrictGapPolicy()
    computation = compute_tax(bills, args.year, table=table, gap_policy=policy)

    for year in computation.skipped_years:
        logger.warning(
            "No reference exchange rate for %d; year skipped (supported: %s)",
            year,
            ", ".join(str(y) for y in table.supported_years()),
        )
    if not computation.results:
        logger.error("Nothing to report.")
        return 1

    for result in computation.results:
        logger.info(
            "%d: %d matched lot(s), net tax payable %s CNY",
            result.year,
            len(result.capital_gains.details),
            result.summary.net_tax_payable.amount,
        )
        for w in result.diagnostics:
            logger.warning("%d: %s", result.year, w.message)

        for d in reconcile_with_income_summary(result, bills):
            if d.is_ok():
                continue
            logger.warning(
                "Reconciliation %d %s %s: mine %s, statement %s (diff %s)",
                d.year,
                d.currency,
                d.field,
                d.mine,
                d.statement,
                d.difference,
            )

    wrote = False
    if args.csv:
        out = Path(args.csv)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(export_csv(computation.results, args.currency), encoding="utf-8")
        logger.info("Wrote CSV to %s", out)
        wrote = True
    if args.report:
        out = Path(args.report)
        out.parent.mkdir(parents=True, exist_ok=True)
        text = "\n\n".join(
            generate_text_report(r, args.currency) for r in computation.results
        )
        out.write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote report to %s", out)
        wrote = True
    if args.xlsx:
        sink = ExcelReportSink(
            out_path=Path(args.xlsx), currency=args.currency, locale=args.locale
        )
        out = sink.write(computation.results)
        logger.info("Wrote workbook to %s", out)
        wrote = True

    if not wrote:
        for r in computation.results:
            sys.stdout.write(generate_text_report(r, args.currency) + "\n\n")
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Flat-rate income tax on foreign securities trading (CNY base)"
    )
    p.add_argument(
        "input",
        type=str,
        nargs="+",
        help="One or more normalized bill JSON files",
    )
    p.add_argument(
        "--year", type=int, default=None, help="Only compute this tax year (YYYY)"
    )
    p.add_argument(
        "--currency",
        type=str.upper,
        default="CNY",
        choices=list(SUPPORTED_CURRENCIES),
        help="Display currency for exported figures",
    )
    p.add_argument("--csv", type=str, default=None, help="Write yearly totals as CSV")
    p.add_argument(
        "--report", type=str, default=None, help="Write the text report to a file"
    )
    p.add_argument("--xlsx", type=str, default=None, help="Write an XLSX workbook")
    p.add_argument(
        "--locale",
        type=str.upper,
        default="EN",
        choices=["EN", "ZH"],
        help="Locale for workbook headers and sheet names",
    )
    p.add_argument(
        "--rates",
        type=str,
        default=None,
        help=(
            "Reference rate CSV 'year,date,USD,HKD,source' (CNY per 100 units); "
            "rows add to or override the built-in table"
        ),
    )
    p.add_argument(
        "--zero-cost-unmatched",
        action="store_true",
        help=(
            "Tax sell quantity with no matching buy lot at zero cost instead of "
            "leaving it out of realized gains"
        ),
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity: -v (INFO), -vv (DEBUG)",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_argparser()
    args = parser.parse_args(argv)

    verbosity_map = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
    }
    level = verbosity_map.get(min(args.verbose, 2), logging.WARNING)
    configure_logging(level=level)

    return process_files(args)


if __name__ == "__main__":
    raise SystemExit(main())
