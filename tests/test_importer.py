from dataclasses import replace
import logging
import unittest

from rack_LayoutPlanner.core.importer import ImportCfg, parse_equipment, prepare_import
from rack_LayoutPlanner.core.normalize import (
    clean_cell, parse_float, parse_int, positive_int_or, resolve_columns, split_row,
)

SHEET = "\n".join([
    "Room,Device,Rack Size (U),Total No. of Device,Total No. of PS,Max Power (Watt),Typical Power (Watt),Connection Type",
    "Room A,Server X,2,3,6,500,,C13",
    ",Switch,1,1,,200,150,C19",
    'Room B,"Storage, Gen2",4,2,1,,,',
    "",
    ",Patch Panel",
])


def _rooms_by_id(rooms):
    return {r.room_id: r for r in rooms}


class CellParsingTests(unittest.TestCase):
    def test_quoted_delimiters_stay_in_cell(self):
        self.assertEqual(["a", "b,c", "d"], split_row('a,"b,c", d '))

    def test_other_delimiter(self):
        self.assertEqual(["x", "y z", ""], split_row("x; y z ;", ";"))

    def test_clean_cell_strips_stray_quotes(self):
        self.assertEqual("x", clean_cell('"x'))
        self.assertEqual("y", clean_cell('y"'))
        self.assertEqual("", clean_cell(None))

    def test_lenient_numbers(self):
        self.assertEqual(2, parse_int("2U"))
        self.assertEqual(2, parse_int("2.5"))
        self.assertIsNone(parse_int("abc"))
        self.assertIsNone(parse_int(""))
        self.assertEqual(500.0, parse_float("500 W"))
        self.assertEqual(0.5, parse_float(".5"))
        self.assertIsNone(parse_float("n/a"))

    def test_positive_or_fallback(self):
        self.assertEqual(1, positive_int_or("0", 1))
        self.assertEqual(1, positive_int_or("-3", 1))
        self.assertEqual(1, positive_int_or(None, 1))
        self.assertEqual(4, positive_int_or(" 4 ", 1))


class ColumnResolutionTests(unittest.TestCase):
    def test_keywords_match_case_insensitive_substrings(self):
        cols = resolve_columns(["location", "MODEL NAME", "U Height", "Qty"])
        self.assertEqual(0, cols.room)
        self.assertEqual(1, cols.device)
        self.assertEqual(2, cols.height)
        self.assertEqual(3, cols.quantity)
        self.assertIsNone(cols.ps_count)
        self.assertIsNone(cols.max_power)

    def test_first_matching_header_wins(self):
        cols = resolve_columns(["Device", "Total No. of Device"])
        self.assertEqual(0, cols.device)
        self.assertEqual(1, cols.quantity)


class ImporterTests(unittest.TestCase):
    def test_header_only_or_empty_input(self):
        self.assertEqual([], parse_equipment(""))
        self.assertEqual([], parse_equipment("Room,Device,Qty"))
        self.assertEqual([], parse_equipment("Room,Device,Qty\n\n"))

    def test_rooms_in_first_seen_order(self):
        rooms = parse_equipment(SHEET)
        self.assertEqual(["Room A", "Room B"], [r.room_id for r in rooms])
        self.assertEqual(4, len(rooms[0].devices))
        self.assertEqual(3, len(rooms[1].devices))

    def test_replicas_differ_only_in_id(self):
        servers = [d for d in parse_equipment(SHEET)[0].devices if d.name == "Server X"]
        self.assertEqual(3, len(servers))
        self.assertEqual(["Room-A-Server-X-1-0", "Room-A-Server-X-1-1", "Room-A-Server-X-1-2"],
                         [d.id for d in servers])
        base = replace(servers[0], id="")
        for d in servers[1:]:
            self.assertEqual(base, replace(d, id=""))

    def test_ids_unique_across_import(self):
        text = "Room,Device,Qty\nA,X,2\nA,X,2\nB,X,1"
        ids = [d.id for r in parse_equipment(text) for d in r.devices]
        self.assertEqual(5, len(ids))
        self.assertEqual(len(ids), len(set(ids)))

    def test_derived_fields(self):
        rooms = _rooms_by_id(parse_equipment(SHEET))
        server, _, _, switch = rooms["Room A"].devices
        self.assertEqual(2, server.power_supply_count)
        self.assertEqual(2, server.height_units)
        self.assertEqual(500.0, server.max_power_w)
        self.assertAlmostEqual(300.0, server.typical_power_w)
        self.assertEqual("C13", server.connection_type)
        self.assertIsNone(server.rack_position)
        self.assertEqual({}, server.power_connections)

        self.assertEqual("Room A", switch.room)
        self.assertEqual(1, switch.power_supply_count)
        self.assertEqual(150.0, switch.typical_power_w)
        self.assertEqual("C19", switch.connection_type)

    def test_power_supplies_below_quantity_clamp_to_one(self):
        storage = _rooms_by_id(parse_equipment(SHEET))["Room B"].devices[0]
        self.assertEqual("Storage, Gen2", storage.name)
        self.assertEqual(1, storage.power_supply_count)
        self.assertEqual(0.0, storage.max_power_w)
        self.assertEqual("C13", storage.connection_type)

    def test_short_row_is_kept_and_blank_line_skipped(self):
        room_b = _rooms_by_id(parse_equipment(SHEET))["Room B"]
        panel = room_b.devices[-1]
        self.assertEqual("Patch Panel", panel.name)
        self.assertEqual("Room-B-Patch-Panel-5-0", panel.id)
        self.assertEqual(1, panel.height_units)

    def test_single_cell_row_skipped(self):
        text = "Device,Qty,Room,Rack Size (U),Max Power,Socket\nLonely\nX,1"
        devices = parse_equipment(text)[0].devices
        self.assertEqual(["X"], [d.name for d in devices])

    def test_fill_down_starts_from_default_room(self):
        rooms = parse_equipment("Room,Device\n,Alpha\nLab,Beta\n,Gamma")
        by_room = {r.room_id: [d.name for d in r.devices] for r in rooms}
        self.assertEqual({"Default Room": ["Alpha"], "Lab": ["Beta", "Gamma"]}, by_room)

    def test_no_room_column_uses_default_room(self):
        rooms = parse_equipment("Device,Qty\nA,1\nB,2")
        self.assertEqual(["Default Room"], [r.room_id for r in rooms])
        self.assertEqual(3, len(rooms[0].devices))

    def test_missing_device_name(self):
        d = parse_equipment("Room,Device,Qty\nR1,,1")[0].devices[0]
        self.assertEqual("Unknown Device", d.name)

    def test_invalid_quantity_and_height_fall_back(self):
        text = "Device,Qty,Height\nA,0,0\nB,abc,2U\nC,-2,"
        devices = parse_equipment(text)[0].devices
        self.assertEqual(["A", "B", "C"], [d.name for d in devices])
        self.assertEqual([1, 2, 1], [d.height_units for d in devices])


class PowerDerivationTests(unittest.TestCase):
    def test_per_device_max_beats_total(self):
        text = "Device,Max Power,Total Power,Qty\nX,400,1000,2\nY,,1000,2\nZ,0,900,3"
        devices = parse_equipment(text)[0].devices
        self.assertEqual([400.0, 400.0, 500.0, 500.0, 300.0, 300.0, 300.0],
                         [d.max_power_w for d in devices])

    def test_psu_rating_times_supplies_per_unit(self):
        text = "Device,Qty,Total No. of PS,PSU Rating\nZ,2,4,750\nW,1,,0"
        z1, z2, w = parse_equipment(text)[0].devices
        self.assertEqual(2, z1.power_supply_count)
        self.assertEqual(1500.0, z1.max_power_w)
        self.assertEqual(0.0, w.max_power_w)
        self.assertEqual(0.0, w.typical_power_w)

    def test_nothing_matches_gives_zero(self):
        d = parse_equipment("Device,Qty\nX,1")[0].devices[0]
        self.assertEqual(0.0, d.max_power_w)
        self.assertEqual(0.0, d.typical_power_w)

    def test_unparseable_typical_defaults_to_sixty_percent(self):
        d = parse_equipment("Device,Max Power,Typical Load\nX,500,abc")[0].devices[0]
        self.assertAlmostEqual(300.0, d.typical_power_w)

    def test_explicit_typical_zero_is_kept(self):
        d = parse_equipment("Device,Max Power,Typical Load\nX,500,0")[0].devices[0]
        self.assertEqual(0.0, d.typical_power_w)


    def test_negative_psu_rating_counts_as_absent(self):
        d = parse_equipment("Device,PSU Rating\nX,-500")[0].devices[0]
        self.assertEqual(0.0, d.max_power_w)
        self.assertEqual(0.0, d.typical_power_w)

    def test_negative_typical_falls_back_to_ratio(self):
        d = parse_equipment("Device,Max Power,Typical Power\nX,500,-200")[0].devices[0]
        self.assertAlmostEqual(300.0, d.typical_power_w)

    def test_power_supplies_per_unit_round_down(self):
        devices = parse_equipment("Device,Qty,Total No. of PS\nX,3,7\nY,4,11")[0].devices
        self.assertEqual([2, 2, 2, 2, 2, 2, 2], [d.power_supply_count for d in devices])

class ImportLimitsAndConfigTests(unittest.TestCase):
    def test_quantity_cap(self):
        with self.assertLogs("rack_LayoutPlanner.core.importer", level=logging.WARNING):
            devices = parse_equipment("Device,Qty,Total Power\nX,50,5000",
                                      ImportCfg(max_quantity_per_row=5))[0].devices
        self.assertEqual(5, len(devices))
        # per-unit figures still use the declared quantity
        self.assertEqual(100.0, devices[0].max_power_w)

    def test_record_cap_drops_remaining_rows(self):
        with self.assertLogs("rack_LayoutPlanner.core.importer", level=logging.WARNING):
            rooms = parse_equipment("Room,Device,Qty\nR1,A,2\nR1,B,2\nR2,C,1", ImportCfg(max_records=3))
        self.assertEqual(["R1"], [r.room_id for r in rooms])
        self.assertEqual(["A", "A", "B"], [d.name for d in rooms[0].devices])

    def test_prepare_import_from_config(self):
        cfg = prepare_import({"import": {"delimiter": ";", "default_room": "Hall 1",
                                         "extra_keywords": {"device": ["Hostname"], "bogus": ["x"]}}})
        self.assertEqual(";", cfg.delimiter)
        self.assertIn("Hostname", cfg.keywords["device"])
        self.assertNotIn("bogus", cfg.keywords)

        rooms = parse_equipment("Hostname;Qty\nsrv1;2", cfg)
        self.assertEqual("Hall 1", rooms[0].room_id)
        self.assertEqual(["srv1", "srv1"], [d.name for d in rooms[0].devices])

    def test_prepare_import_defaults(self):
        self.assertEqual(ImportCfg(), prepare_import({}))
        self.assertEqual(ImportCfg(), prepare_import(None))

    def test_bad_delimiter_rejected(self):
        with self.assertRaises(ValueError):
            ImportCfg(delimiter="")
        with self.assertRaises(ValueError):
            ImportCfg(max_records=0)

    def test_same_input_same_ids(self):
        first = [(d.id, d.room) for r in parse_equipment(SHEET) for d in r.devices]
        second = [(d.id, d.room) for r in parse_equipment(SHEET) for d in r.devices]
        self.assertEqual(first, second)


class ConfigValueTests(unittest.TestCase):
    def test_extra_keywords_must_be_a_mapping(self):
        with self.assertRaises(ValueError):
            prepare_import({"import": {"extra_keywords": ["Hostname"]}})

    def test_null_numbers_raise_value_error(self):
        with self.assertRaises(ValueError):
            prepare_import({"import": {"max_records": None}})
