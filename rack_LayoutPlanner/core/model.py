# rack_LayoutPlanner/core/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Literal

ConnectionKind = Literal["C13", "C19", "UK"]

DEFAULT_ROOM = "Default Room"
UNKNOWN_DEVICE = "Unknown Device"
DEFAULT_CONNECTION_TYPE: ConnectionKind = "C13"
DEFAULT_RACK_UNITS = 48

@dataclass(frozen=True)
class PowerLink:
    pdu_id: str               # externally configured PDU
    outlet_index: int         # 0-based socket on that PDU

@dataclass
class EquipmentRecord:
    id: str                   # room-name-line-replica, whitespace collapsed to '-'
    name: str
    room: str
    power_supply_count: int   # inlets on ONE physical unit (>= 1)
    typical_power_w: float
    max_power_w: float
    connection_type: str      # usually one of ConnectionKind, kept verbatim otherwise
    height_units: int = 1
    rack_position: int | None = None    # topmost occupied U, None while unplaced
    power_connections: dict[int, PowerLink | None] = field(default_factory=dict)

    @property
    def is_placed(self) -> bool:
        return self.rack_position is not None

    @property
    def bottom_unit(self) -> int | None:
        if self.rack_position is None:
            return None
        return self.rack_position - self.height_units + 1

    @property
    def occupied_units(self) -> range:
        if self.rack_position is None:
            return range(0)
        return range(self.rack_position - self.height_units + 1, self.rack_position + 1)

@dataclass
class RoomLayout:
    room_id: str
    devices: list[EquipmentRecord] = field(default_factory=list)  # import order
    rack_capacity: int | None = None                              # set by the allocator

    @property
    def total_power_w(self) -> float:
        """Sum of per-unit max power, unplaced devices included."""
        return sum(d.max_power_w for d in self.devices)

    @property
    def total_typical_power_w(self) -> float:
        return sum(d.typical_power_w for d in self.devices)

    @property
    def placed(self) -> list[EquipmentRecord]:
        return [d for d in self.devices if d.is_placed]

    @property
    def unplaced(self) -> list[EquipmentRecord]:
        return [d for d in self.devices if not d.is_placed]

    @property
    def used_units(self) -> int:
        return sum(d.height_units for d in self.devices if d.is_placed)
