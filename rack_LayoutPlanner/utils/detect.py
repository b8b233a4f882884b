# rack_LayoutPlanner/utils/detect.py
from __future__ import annotations
from pathlib import Path
from dataclasses import dataclass
from typing import Literal

InputKind = Literal["csv", "tsv"]

# spreadsheet "Save as" variants we can read; .txt exports are comma separated
INPUT_SUFFIXES: dict[str, InputKind] = {".csv": "csv", ".txt": "csv", ".tsv": "tsv"}

@dataclass(frozen=True)
class EquipmentFile:
    path: Path
    kind: InputKind

    def delimiter(self, default: str = ",") -> str:
        return "\t" if self.kind == "tsv" else default

def input_kind(p: Path) -> InputKind | None:
    return INPUT_SUFFIXES.get(p.suffix.lower())

def discover_inputs(root: Path, recurse: bool = True) -> list[EquipmentFile]:
    """Equipment lists at ``root`` (a file or a folder), sorted by path."""
    if root.is_file():
        candidates = [root]
    else:
        candidates = [p for p in (root.rglob("*") if recurse else root.glob("*")) if p.is_file()]
    found: list[EquipmentFile] = []
    for p in candidates:
        kind = input_kind(p)
        if kind is not None:
            found.append(EquipmentFile(p.resolve(), kind))
    return sorted(found, key=lambda f: str(f.path))
