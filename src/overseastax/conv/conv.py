from __future__ import annotations

import datetime as dt
import logging
import re
from decimal import Decimal, InvalidOperation

NUM_CLEAN_RE = re.compile(r"[,\s]")  # remove thousands separators, spaces
COMPACT_DATE_RE = re.compile(r"^\d{8}$")


logger = logging.getLogger(__name__)


def to_dec(
    s: str | float | int | Decimal | None, default: Decimal = Decimal("0")
) -> Decimal:
    """Convert statement numbers to Decimal safely, coercing placeholders to default.

    Handles:
    - None, "" -> default
    - "-", "--" -> default (empty statement cells)
    - "N/A" -> default (with warning)
    - "1,234.56" -> Decimal("1234.56")
    """
    if s is None:
        return default
    if isinstance(s, Decimal):
        return s
    if isinstance(s, bool):
        raise ValueError(f"Boolean is not a number: {s!r}")
    if isinstance(s, (int, float)):
        return Decimal(str(s))

    s_stripped = s.strip()
    if not s_stripped:
        return default

    if s_stripped in {"-", "--"}:
        return default

    if s_stripped in {"...", "N/A", "n/a"}:
        logger.warning(
            'Encountered unavailable value "%s"; treating as %s.',
            s_stripped,
            default,
        )
        return default

    try:
        s_clean = NUM_CLEAN_RE.sub("", s_stripped)
        return Decimal(s_clean)
    except InvalidOperation:
        logger.error("Failed to parse number from: %r; using %s", s, default)
        return default


def to_dec_strict(s: str | float | int | Decimal | None) -> Decimal:
    """Convert statement numbers to Decimal.

    Raises ValueError on invalid/missing data.
    Use this for fields where 0 is not safe (quantities, trade amounts).
    """
    if s is None:
        raise ValueError("Value is None")
    if isinstance(s, Decimal):
        return s
    if isinstance(s, bool):
        raise ValueError(f"Boolean is not a number: {s!r}")
    if isinstance(s, (int, float)):
        return Decimal(str(s))

    s_stripped = s.strip()
    if not s_stripped:
        raise ValueError("Value is empty string")

    if s_stripped in {"-", "--", "...", "N/A", "n/a"}:
        raise ValueError(f"Value is a placeholder: {s_stripped!r}")

    try:
        s_clean = NUM_CLEAN_RE.sub("", s_stripped)
        return Decimal(s_clean)
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal format: {s!r}") from e


def parse_date(d: str | dt.date) -> dt.date:
    """Parse date-like strings.
    Handles 'YYYYMMDD', 'YYYY-MM-DD' and 'YYYY-MM-DD HH:MM:SS'.
    """
    if isinstance(d, dt.datetime):
        return d.date()
    if isinstance(d, dt.date):
        return d
    d = d.strip()
    if COMPACT_DATE_RE.match(d):
        return dt.date(int(d[:4]), int(d[4:6]), int(d[6:8]))
    if " " in d:
        d = d.split(" ")[0]
    elif "T" in d:
        d = d.split("T")[0]
    return dt.date.fromisoformat(d)


def parse_datetime(s: str | dt.datetime | dt.date) -> dt.datetime:
    """Parse a trade timestamp; bare dates map to midnight."""
    if isinstance(s, dt.datetime):
        return s
    if isinstance(s, dt.date):
        return dt.datetime.combine(s, dt.time())
    s = s.strip()
    if COMPACT_DATE_RE.match(s):
        return dt.datetime.combine(parse_date(s), dt.time())
    return dt.datetime.fromisoformat(s)
