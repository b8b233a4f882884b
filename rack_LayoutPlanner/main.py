# rack_LayoutPlanner/main.py
from __future__ import annotations
from pathlib import Path
import logging
import sys
import yaml

from .loaders import csv_loader
from .utils.detect import discover_inputs
from .core.summary import build_room_summary, build_unplaced_table, prepare_power

def load_config(cfg_path: Path) -> dict:
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def main(argv: list[str] | None = None):
    argv = sys.argv[1:] if argv is None else argv

    # ---------- config ----------
    here = Path(__file__).resolve().parent
    cfg_path = Path(argv[0]) if argv else here / "config.yaml"
    cfg = load_config(cfg_path)

    log_cfg = cfg.get("logging", {}) or {}
    logging.basicConfig(level=str(log_cfg.get("level", "WARNING")).upper(),
                        format="%(levelname)s %(name)s: %(message)s")
    verbose = bool(log_cfg.get("verbose", True))

    in_path = Path((cfg.get("input", {}) or {}).get("path", ".")).resolve()
    recurse = bool((cfg.get("input", {}) or {}).get("recurse", True))
    pcfg = prepare_power(cfg)
    if verbose:
        print(f"[cfg] {cfg_path}")
        print(f"[cfg] input={in_path} (recurse={recurse})")

    # ---------- discover ----------
    detected = discover_inputs(in_path, recurse=recurse)
    if not detected:
        print(f"[INFO] No CSV/TSV equipment lists found under: {in_path}")
        sys.exit(0)
    if verbose:
        kinds: dict[str, int] = {}
        for d in detected:
            kinds[d.kind] = kinds.get(d.kind, 0) + 1
        print(f"[detector] found {len(detected)} inputs → {kinds}")

    # ---------- import + allocate, one equipment list at a time ----------
    loaded = 0
    for item in detected:
        name = csv_loader.infer_layout_name(item.path)
        if verbose:
            print(f"  [load] {item.kind:4} {item.path.name}")
        try:
            rooms = csv_loader.load(item.path, cfg)
        except (OSError, ValueError) as e:
            print(f"[WARN] loader failed for {item.path.name}: {e}")
            continue
        if not rooms:
            if verbose:
                print(f"[{name}] no equipment rows; skipping.")
            continue
        loaded += 1

        print(f"\n[summary] {name}")
        print(build_room_summary(rooms, pcfg).to_string(index=False))
        unplaced = build_unplaced_table(rooms)
        if not unplaced.empty:
            print(f"\n[unplaced] {name}: {len(unplaced)} device(s) could not be auto-placed")
            print(unplaced.to_string(index=False))

    if verbose:
        print(f"\n[summary] finished {loaded} of {len(detected)} input(s)")

if __name__ == "__main__":
    main()
