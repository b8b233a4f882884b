# rack_LayoutPlanner/loaders/csv_loader.py
from __future__ import annotations
from dataclasses import replace
from pathlib import Path
import logging

from ..core.importer import prepare_import
from ..core.model import RoomLayout
from ..core.pipeline import run_pipeline
from ..utils.detect import EquipmentFile, input_kind

_LOG = logging.getLogger(__name__)

def infer_layout_name(path: Path) -> str:
    """Label used for one equipment list in logs and summaries."""
    return Path(path).stem

def read_text(path: Path) -> str:
    # utf-8-sig drops the BOM that spreadsheet exports like to add
    return Path(path).read_text(encoding="utf-8-sig", errors="replace")

def load(path: Path, cfg: dict | None) -> list[RoomLayout]:
    """
    Accepts: a .csv/.txt (configured delimiter) or .tsv (tab) equipment list.
    Returns: allocated RoomLayouts in first-seen room order.
    """
    icfg = prepare_import(cfg)
    source = EquipmentFile(Path(path), input_kind(Path(path)) or "csv")
    icfg = replace(icfg, delimiter=source.delimiter(icfg.delimiter))
    rooms = run_pipeline(read_text(path), cfg, import_cfg=icfg)
    _LOG.info("%s: %d room(s)", infer_layout_name(path), len(rooms))
    return rooms
