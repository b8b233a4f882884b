# rack_LayoutPlanner/core/normalize.py
from __future__ import annotations
from dataclasses import dataclass, fields
import re

# semantic field -> header keywords, tried in order; first header containing any keyword wins
COLUMN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "room":            ("Room", "Location", "Rack Name"),
    "device":          ("Device", "Model", "Equipment"),
    "height":          ("Rack Size", "Size (U)", "U Height", "Height"),
    "quantity":        ("Total No. of Device", "Quantity", "Qty", "Count", "No. of Devices"),
    "ps_count":        ("Total No. of PS", "PSU Count", "Power Supplies"),
    "max_power":       ("Max Power (Watt)", "Max Power", "Power (W)"),
    "typical_power":   ("Typical Power", "Typical Load"),
    "total_max_power": ("Total Max Power Consumption", "Total Power"),
    "connection_type": ("Connection Type", "Plug Type", "Socket"),
    "psu_rating":      ("PSU Rating", "PSU W", "Power Supply Rating"),
}

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

@dataclass(frozen=True)
class ColumnMap:
    room: int | None = None
    device: int | None = None
    height: int | None = None
    quantity: int | None = None
    ps_count: int | None = None
    max_power: int | None = None
    typical_power: int | None = None
    total_max_power: int | None = None
    connection_type: int | None = None
    psu_rating: int | None = None

    def resolved(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

# ---------- cells ----------
def split_row(line: str, delimiter: str = ",") -> list[str]:
    """
    Split one line on ``delimiter``. A double quote toggles the quoted state and
    is dropped; delimiters inside quotes stay in the cell. Cells are stripped.
    """
    cells: list[str] = []
    buf: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            cells.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
    cells.append("".join(buf).strip())
    return cells

def clean_cell(value: str | None) -> str:
    if value is None:
        return ""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value.strip()

def cell_at(row: list[str], idx: int | None) -> str | None:
    """Cell at ``idx`` or None when the column is absent or the row is short."""
    if idx is None or idx >= len(row):
        return None
    return row[idx]

# ---------- numbers ----------
def parse_int(value: str | None) -> int | None:
    """Leading integer of ``value`` ("2U" -> 2, "2.5" -> 2); None if there is none."""
    if value is None:
        return None
    m = _INT_PREFIX.match(value)
    return int(m.group(1)) if m else None

def parse_float(value: str | None) -> float | None:
    """Leading decimal number of ``value`` ("500 W" -> 500.0); None if there is none."""
    if value is None:
        return None
    m = _FLOAT_PREFIX.match(value)
    return float(m.group(1)) if m else None

def non_negative_float(value: str | None) -> float | None:
    """Like parse_float, but a negative number counts as absent."""
    x = parse_float(value)
    return x if x is not None and x >= 0 else None

def positive_int_or(value: str | None, fallback: int) -> int:
    n = parse_int(value)
    return n if n is not None and n > 0 else fallback

def positive_float_or(value: str | None, fallback: float) -> float:
    x = parse_float(value)
    return x if x is not None and x > 0 else fallback

# ---------- headers ----------
def merge_keywords(extra: dict | None) -> dict[str, tuple[str, ...]]:
    """Built-in table with extra keywords appended per known field; unknown fields are ignored."""
    if extra is not None and not isinstance(extra, dict):
        raise ValueError(f"extra_keywords must be a mapping of field -> keywords, got {extra!r}")
    table = dict(COLUMN_KEYWORDS)
    for name, kws in (extra or {}).items():
        if name not in table or isinstance(kws, (str, bytes)) or kws is None:
            continue
        added = tuple(str(k) for k in kws if str(k).strip())
        table[name] = table[name] + tuple(k for k in added if k not in table[name])
    return table

def find_column(headers: list[str], keywords: tuple[str, ...]) -> int | None:
    lowered = [k.lower() for k in keywords]
    for idx, h in enumerate(headers):
        h_low = h.lower()
        if any(k in h_low for k in lowered):
            return idx
    return None

def resolve_columns(headers: list[str],
                    table: dict[str, tuple[str, ...]] | None = None) -> ColumnMap:
    table = table or COLUMN_KEYWORDS
    return ColumnMap(**{name: find_column(headers, kws) for name, kws in table.items()})
