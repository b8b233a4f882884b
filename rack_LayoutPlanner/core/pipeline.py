# rack_LayoutPlanner/core/pipeline.py
from __future__ import annotations

from .allocator import allocate_rooms
from .importer import parse_equipment, prepare_import, ImportCfg
from .model import RoomLayout, DEFAULT_RACK_UNITS

def rack_capacity(cfg: dict | None) -> int:
    raw = ((cfg or {}).get("rack", {}) or {}).get("capacity")
    if raw is None:
        return DEFAULT_RACK_UNITS
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"rack.capacity must be a whole number of U, got {raw!r}") from None

def run_pipeline(text: str, cfg: dict | None = None,
                 import_cfg: ImportCfg | None = None) -> list[RoomLayout]:
    """Import ``text`` and stack every room into a rack. Each call is independent."""
    icfg = import_cfg or prepare_import(cfg)
    rooms = parse_equipment(text, icfg)
    return allocate_rooms(rooms, rack_capacity(cfg))
