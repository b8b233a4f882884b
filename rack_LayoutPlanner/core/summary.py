# rack_LayoutPlanner/core/summary.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence
import math
import pandas as pd

from .model import RoomLayout, DEFAULT_RACK_UNITS

SUMMARY_COLUMNS = [
    "room", "devices", "placed", "unplaced", "used_U", "free_U",
    "typical_W", "max_W", "load_VA", "ups_VA", "ups_size_VA",
]
PDU_COLUMNS = ["pdu_safe_W", "pdu_overloaded"]
UNPLACED_COLUMNS = ["room", "id", "name", "height_U", "max_W"]
# common UPS ratings; larger loads round up to the next 10 kVA
STANDARD_UPS_SIZES_VA = (1000, 1500, 2000, 2200, 3000, 5000, 6000, 8000,
                         10000, 15000, 20000, 30000, 40000, 50000)

@dataclass
class PowerCfg:
    power_factor: float = 0.9
    ups_headroom: float = 1.25          # recommended UPS = load VA * headroom
    safety_margin_pct: float = 80.0     # usable share of a PDU's rating
    pdu_capacity_w: float | None = None

    def __post_init__(self):
        if self.power_factor <= 0 or self.power_factor > 1:
            raise ValueError(f"power_factor must be in (0, 1], got {self.power_factor}")

    def pdu_safe_w(self) -> float | None:
        if self.pdu_capacity_w is None:
            return None
        return self.pdu_capacity_w * self.power_factor * (self.safety_margin_pct / 100.0)

def prepare_power(global_cfg: dict | None) -> PowerCfg:
    pw = (global_cfg or {}).get("power", {}) or {}
    base = PowerCfg()
    cap = pw.get("pdu_capacity_w")
    try:
        return PowerCfg(
            power_factor=float(pw.get("power_factor", base.power_factor)),
            ups_headroom=float(pw.get("ups_headroom", base.ups_headroom)),
            safety_margin_pct=float(pw.get("safety_margin_pct", base.safety_margin_pct)),
            pdu_capacity_w=float(cap) if cap is not None else None,
        )
    except TypeError as e:
        raise ValueError(f"invalid power config: {e}") from e

def recommended_ups_size(required_va: float) -> int:
    for size in STANDARD_UPS_SIZES_VA:
        if size >= required_va:
            return size
    return int(math.ceil(required_va / 10000) * 10000)

def _room_row(room: RoomLayout, pcfg: PowerCfg) -> dict:
    capacity = room.rack_capacity or DEFAULT_RACK_UNITS
    max_w = room.total_power_w
    load_va = max_w / pcfg.power_factor
    row = {
        "room": room.room_id,
        "devices": len(room.devices),
        "placed": len(room.placed),
        "unplaced": len(room.unplaced),
        "used_U": room.used_units,
        "free_U": capacity - room.used_units,
        "typical_W": round(room.total_typical_power_w, 2),
        "max_W": round(max_w, 2),
        "load_VA": round(load_va, 2),
        "ups_VA": round(load_va * pcfg.ups_headroom, 2),
        "ups_size_VA": recommended_ups_size(load_va * pcfg.ups_headroom),
    }
    safe = pcfg.pdu_safe_w()
    if safe is not None:
        row["pdu_safe_W"] = round(safe, 2)
        row["pdu_overloaded"] = max_w > safe
    return row

def build_room_summary(rooms: Sequence[RoomLayout], pcfg: PowerCfg | None = None) -> pd.DataFrame:
    """One row per room plus a TOTAL row. Power figures count unplaced devices too."""
    pcfg = pcfg or PowerCfg()
    cols = SUMMARY_COLUMNS + (PDU_COLUMNS if pcfg.pdu_capacity_w is not None else [])
    rows = [_room_row(r, pcfg) for r in rooms]
    if not rows:
        return pd.DataFrame(columns=cols)

    df = pd.DataFrame(rows, columns=cols)
    total = {c: "" for c in cols}
    total["room"] = "TOTAL"
    for c in ("devices", "placed", "unplaced", "used_U", "free_U"):
        total[c] = int(df[c].sum())
    for c in ("typical_W", "max_W", "load_VA", "ups_VA"):
        total[c] = round(float(df[c].sum()), 2)
    total["ups_size_VA"] = recommended_ups_size(total["ups_VA"])
    return pd.DataFrame(rows + [total], columns=cols)

def build_unplaced_table(rooms: Sequence[RoomLayout]) -> pd.DataFrame:
    rows = [
        {"room": r.room_id, "id": d.id, "name": d.name, "height_U": d.height_units, "max_W": d.max_power_w}
        for r in rooms for d in r.unplaced
    ]
    return pd.DataFrame(rows, columns=UNPLACED_COLUMNS)
