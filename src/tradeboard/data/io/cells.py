from __future__ import annotations

"""Typed cell parsing shared by the tabular parser, the normalizer and the sorter.

One function decides what a raw text cell *is*:

- empty / whitespace  -> NULL
- integer / decimal / scientific notation -> NUMBER (int or float)
- anything else -> STRING (trimmed)
"""

import enum
import math
import re
from dataclasses import dataclass
from typing import Any

NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
INT_RE = re.compile(r"^[+-]?\d+$")

# "1,5" / "-0,25" (comma as decimal separator, no thousands grouping)
COMMA_DECIMAL_RE = re.compile(r"^[+-]?\d+,\d+$")

INF_TOKENS = {"inf", "+inf", "infinity", "+infinity"}


class CellKind(str, enum.Enum):
    NUMBER = "number"
    STRING = "string"
    NULL = "null"


@dataclass(frozen=True)
class Cell:
    kind: CellKind
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.kind is CellKind.NULL


NULL = Cell(CellKind.NULL, None)


def parse_cell(raw: Any) -> Cell:
    """Classify a raw cell.

    Non-string input is accepted too (archive JSON rows already carry numbers):
    bools are strings ("True"), NaN is NULL, other ints/floats are NUMBER.
    """
    if raw is None:
        return NULL
    if isinstance(raw, bool):
        return Cell(CellKind.STRING, str(raw))
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and math.isnan(raw):
            return NULL
        return Cell(CellKind.NUMBER, raw)

    s = str(raw).strip()
    if s == "":
        return NULL
    if NUMBER_RE.match(s):
        if INT_RE.match(s):
            return Cell(CellKind.NUMBER, int(s))
        return Cell(CellKind.NUMBER, float(s))
    return Cell(CellKind.STRING, s)


def to_number(raw: Any, *, allow_inf: bool = False) -> float | int | None:
    """Coerce a cell to a number, tolerating comma decimals ("1,5" -> 1.5).

    Non-finite results are dropped to None, except ``+inf`` when
    ``allow_inf`` is set (profit factor with zero losing trades).
    """
    if isinstance(raw, str):
        s = raw.strip()
        if allow_inf and s.lower() in INF_TOKENS:
            return math.inf
        if COMMA_DECIMAL_RE.match(s):
            raw = s.replace(",", ".")
    cell = parse_cell(raw)
    if cell.kind is not CellKind.NUMBER:
        return None
    v = cell.value
    if isinstance(v, float) and not math.isfinite(v):
        if allow_inf and v > 0:
            return math.inf
        return None
    return v


def to_int(raw: Any) -> int | None:
    v = to_number(raw)
    if v is None:
        return None
    return int(v)  # truncates toward zero


def to_text(raw: Any) -> str:
    """Identity columns: keep as trimmed text ("" for missing)."""
    if raw is None:
        return ""
    if isinstance(raw, float):
        if math.isnan(raw):
            return ""
        if raw.is_integer():
            return str(int(raw))
    return str(raw).strip()
