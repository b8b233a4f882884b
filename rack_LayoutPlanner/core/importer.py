# rack_LayoutPlanner/core/importer.py
from __future__ import annotations
from dataclasses import dataclass, field
import logging
import re

from .model import (EquipmentRecord, RoomLayout, DEFAULT_ROOM, UNKNOWN_DEVICE,
                    DEFAULT_CONNECTION_TYPE)
from .normalize import (COLUMN_KEYWORDS, ColumnMap, split_row, clean_cell, cell_at,
                        non_negative_float, positive_int_or, positive_float_or,
                        merge_keywords, resolve_columns)

_LOG = logging.getLogger(__name__)
_WS = re.compile(r"\s+")

@dataclass
class ImportCfg:
    delimiter: str = ","
    default_room: str = DEFAULT_ROOM
    unknown_device_name: str = UNKNOWN_DEVICE
    default_connection_type: str = DEFAULT_CONNECTION_TYPE
    typical_power_ratio: float = 0.6          # typical = ratio * max when no typical column value
    max_quantity_per_row: int = 1000
    max_records: int = 100_000
    keywords: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(COLUMN_KEYWORDS))

    def __post_init__(self):
        if not self.delimiter or len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
        if self.max_quantity_per_row < 1 or self.max_records < 1:
            raise ValueError("max_quantity_per_row and max_records must be >= 1")

def prepare_import(global_cfg: dict | None) -> ImportCfg:
    """Build an ImportCfg from the ``import`` section of the config; missing keys keep defaults."""
    imp = (global_cfg or {}).get("import", {}) or {}
    base = ImportCfg()
    try:
        return ImportCfg(
            delimiter=str(imp.get("delimiter", base.delimiter)),
            default_room=str(imp.get("default_room", base.default_room)),
            unknown_device_name=str(imp.get("unknown_device_name", base.unknown_device_name)),
            default_connection_type=str(imp.get("default_connection_type", base.default_connection_type)),
            typical_power_ratio=float(imp.get("typical_power_ratio", base.typical_power_ratio)),
            max_quantity_per_row=int(imp.get("max_quantity_per_row", base.max_quantity_per_row)),
            max_records=int(imp.get("max_records", base.max_records)),
            keywords=merge_keywords(imp.get("extra_keywords")),
        )
    except TypeError as e:
        raise ValueError(f"invalid import config: {e}") from e

@dataclass
class _RowState:
    last_room: str
    emitted: int = 0
    truncated: bool = False

@dataclass(frozen=True)
class _RowValues:
    room: str
    name: str
    quantity: int
    ps_per_unit: int
    max_power_w: float
    typical_power_w: float
    connection_type: str
    height_units: int

def make_record_id(room: str, name: str, line_no: int, replica: int) -> str:
    return _WS.sub("-", f"{room}-{name}-{line_no}-{replica}")

def _room_for_row(row: list[str], cols: ColumnMap, state: _RowState, cfg: ImportCfg) -> str:
    if cols.room is None:
        return cfg.default_room
    val = clean_cell(cell_at(row, cols.room))
    if val:
        state.last_room = val
        return val
    return state.last_room      # fill down

def _max_power(row: list[str], cols: ColumnMap, quantity: int, ps_per_unit: int) -> float:
    per_device = positive_float_or(cell_at(row, cols.max_power), 0.0)
    if per_device > 0:
        return per_device
    total = positive_float_or(cell_at(row, cols.total_max_power), 0.0)
    if total > 0:
        return total / quantity
    rating = non_negative_float(cell_at(row, cols.psu_rating))
    if rating is not None:
        return rating * ps_per_unit
    return 0.0

def _row_values(row: list[str], cols: ColumnMap, state: _RowState, cfg: ImportCfg) -> _RowValues:
    room = _room_for_row(row, cols, state, cfg)
    name = clean_cell(cell_at(row, cols.device)) or cfg.unknown_device_name

    quantity = positive_int_or(cell_at(row, cols.quantity), 1)
    ps_total = positive_int_or(cell_at(row, cols.ps_count), quantity)
    ps_per_unit = ps_total // quantity
    if ps_per_unit < 1:
        _LOG.debug("%s: %d power supplies for %d units, using 1 per unit", name, ps_total, quantity)
        ps_per_unit = 1

    max_w = _max_power(row, cols, quantity, ps_per_unit)
    typical_w = non_negative_float(cell_at(row, cols.typical_power))
    if typical_w is None:
        typical_w = max_w * cfg.typical_power_ratio

    return _RowValues(
        room=room,
        name=name,
        quantity=quantity,
        ps_per_unit=ps_per_unit,
        max_power_w=max_w,
        typical_power_w=typical_w,
        connection_type=clean_cell(cell_at(row, cols.connection_type)) or cfg.default_connection_type,
        height_units=positive_int_or(cell_at(row, cols.height), 1),
    )

def _replicate(vals: _RowValues, line_no: int, state: _RowState, cfg: ImportCfg) -> list[EquipmentRecord]:
    count = vals.quantity
    if count > cfg.max_quantity_per_row:
        _LOG.warning("line %d (%s): quantity %d capped at %d", line_no, vals.name, count,
                     cfg.max_quantity_per_row)
        count = cfg.max_quantity_per_row
    room_left = cfg.max_records - state.emitted
    if count > room_left:
        if not state.truncated:
            _LOG.warning("record limit %d reached at line %d; remaining rows dropped",
                         cfg.max_records, line_no)
        state.truncated = True
        count = room_left

    records = [
        EquipmentRecord(
            id=make_record_id(vals.room, vals.name, line_no, k),
            name=vals.name,
            room=vals.room,
            power_supply_count=vals.ps_per_unit,
            typical_power_w=vals.typical_power_w,
            max_power_w=vals.max_power_w,
            connection_type=vals.connection_type,
            height_units=vals.height_units,
        )
        for k in range(count)
    ]
    state.emitted += len(records)
    return records

def parse_equipment(text: str, cfg: ImportCfg | None = None) -> list[RoomLayout]:
    """
    Parse delimited equipment text into unplaced RoomLayouts.

    - header row is matched against the keyword table once
    - rows with fewer than 2 cells (and under half the header width) are skipped
    - empty room cells inherit the last non-empty room above them
    - a row with quantity N yields N records that differ only in ``id``
    Rooms come back in first-seen order. Fewer than two lines -> [].
    """
    cfg = cfg or ImportCfg()
    lines = text.strip().split("\n")
    if len(lines) < 2:
        return []

    headers = [clean_cell(h) for h in split_row(lines[0], cfg.delimiter)]
    cols = resolve_columns(headers, cfg.keywords)
    _LOG.debug("resolved columns: %s", cols.resolved())
    if cols.room is None:
        _LOG.info("no room column found; all devices go to '%s'", cfg.default_room)

    state = _RowState(last_room=cfg.default_room)
    by_room: dict[str, list[EquipmentRecord]] = {}

    for line_no in range(1, len(lines)):
        if state.truncated:
            break
        row = split_row(lines[line_no], cfg.delimiter)
        if len(row) < len(headers) * 0.5 and len(row) < 2:
            continue
        vals = _row_values(row, cols, state, cfg)
        records = _replicate(vals, line_no, state, cfg)
        if records:
            by_room.setdefault(vals.room, []).extend(records)

    rooms = [RoomLayout(room_id=room, devices=devices) for room, devices in by_room.items()]
    _LOG.info("imported %d device(s) across %d room(s)", state.emitted, len(rooms))
    return rooms
