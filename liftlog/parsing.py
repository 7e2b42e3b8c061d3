"""
Lift Log Analytics — Numeric parsing of free-text cells

Spreadsheet cells are whatever the lifter typed: "100kg", "1,5", "6-7.5", "".
Every parser here fails soft: anything that isn't a number reads as 0.0 so a
single malformed cell never aborts aggregation. `_to_float` is the only place
that decides what "not a number" means; the public parsers normalize its
None to 0.0 at the boundary.
"""
import re

_NOT_NUMERIC = re.compile(r"[^0-9.,-]")
# Leading decimal, the way a spreadsheet reads "1.5.2" as 1.5
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)")


def _strip(text) -> str:
    if text is None:
        return ""
    return _NOT_NUMERIC.sub("", str(text))


def _clean(text) -> str:
    # Only the first comma is a decimal separator
    return _strip(text).replace(",", ".", 1)


def _to_float(cleaned: str) -> float | None:
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def parse_number(text) -> float:
    """Parse a cell as a decimal number; 0.0 when empty or not numeric."""
    value = _to_float(_clean(text))
    return value if value is not None else 0.0


def parse_optional(text) -> float | None:
    """Like parse_number, but None instead of 0.0 when there is no number."""
    return _to_float(_clean(text))


def parse_rpe(text) -> float:
    """
    Parse an RPE cell, taking the upper bound of a range.

    "6-7.5" → 7.5, "6,5-7,5" → 7.5, "8" → 8.0, "@9" → 9.0. The range is split
    before commas are normalised, so each bound keeps its own decimal. A
    single leading minus is not a range ("-3" has one non-empty part) and
    falls through to parse_number.
    """
    parts = [p for p in _strip(text).split("-") if p]
    if len(parts) >= 2:
        value = _to_float(_clean(parts[-1]))
        return value if value is not None else 0.0
    return parse_number(text)
