# rack_LayoutPlanner/core/allocator.py
from __future__ import annotations
import logging
from typing import Iterable

from .model import RoomLayout, DEFAULT_RACK_UNITS

_LOG = logging.getLogger(__name__)

def allocate_room(room: RoomLayout, capacity: int = DEFAULT_RACK_UNITS) -> RoomLayout:
    """
    Stack the room's devices top-down (U=capacity first) in their given order.

    A device that would reach below U1 stays unplaced and the cursor does not
    move, so a later, shorter device can still take the space. No backtracking.
    """
    if capacity < 1:
        raise ValueError(f"rack capacity must be >= 1 U, got {capacity}")

    cursor = capacity
    for dev in room.devices:
        if cursor - dev.height_units + 1 >= 1:
            dev.rack_position = cursor
            dev.power_connections = {slot: None for slot in range(dev.power_supply_count)}
            cursor -= dev.height_units
        else:
            dev.rack_position = None
            dev.power_connections = {}
            _LOG.info("%s: %s (%dU) could not be auto-placed, %dU left",
                      room.room_id, dev.name, dev.height_units, cursor)

    room.rack_capacity = capacity
    _LOG.debug("%s: %d/%d placed, %dU used, %.1f W max",
               room.room_id, len(room.placed), len(room.devices), room.used_units, room.total_power_w)
    return room

def allocate_rooms(rooms: Iterable[RoomLayout], capacity: int = DEFAULT_RACK_UNITS) -> list[RoomLayout]:
    return [allocate_room(r, capacity) for r in rooms]
