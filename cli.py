"""Minimal CLI for generating and exporting StadiumGen stadiums.

Usage examples:
  python3 cli.py generate --out builds/stadium.glb --summary
  python3 cli.py generate --params saves/night_game.json --roof-type overall --snapshot builds/overall.png
  python3 cli.py generate --set standNumRows=30 --set scoreboardStandName="South Stand" --json saves/tall.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from config import check_config, config, configure_logging
from stadium.generator import generate_stadium
from stadium.io import export_scene_to_glb, load_params_from_json, save_params_to_json
from stadium.params import ConfigurationError, StadiumParams
from stadium.scene import StadiumScene
from stadium.viewport import save_snapshot

logger = logging.getLogger("stadiumgen.cli")


def _parse_assignment(text: str) -> tuple[str, Any]:
    """KEY=VALUE with the value read as JSON when possible ("30" -> 30, "true" -> True)."""
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{text}'")
    key, raw = text.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


def _build_params(args) -> StadiumParams:
    base = StadiumParams.from_flat({
        "stadiumType": config.DEFAULT_STADIUM_TYPE,
        "roofType": config.DEFAULT_ROOF_TYPE,
    })
    if args.params:
        base = load_params_from_json(str(args.params))

    overrides: Dict[str, Any] = dict(args.set or [])
    shortcuts = {
        "pitchLength": args.pitch_length,
        "pitchWidth": args.pitch_width,
        "stadiumType": args.stadium_type,
        "roofType": args.roof_type,
        "standNumRows": args.rows,
        "numLightsPerTower": args.lights_per_tower,
    }
    overrides.update({key: value for key, value in shortcuts.items() if value is not None})
    return base.with_updates(**overrides).validate() if overrides else base.validate()


def _export(scene: StadiumScene, params: StadiumParams, output: Path | None, json_path: Path | None,
            snapshot: Path | None, optimize: bool, summary: bool):
    if output:
        export_scene_to_glb(scene, str(output), optimize=optimize)

    if json_path:
        save_params_to_json(params, str(json_path))

    if snapshot:
        save_snapshot(scene, str(snapshot), window_size=(config.SNAPSHOT_WIDTH, config.SNAPSHOT_HEIGHT))

    if summary:
        low, high = scene.bounds()
        meshes = sum(1 for _ in scene.iter_mesh_nodes())
        print(f"Stands: {len(scene.stands)} | Meshes: {meshes} | Emitters: {len(scene.emitters)}"
              f" | Bounds: min{low.round(3)} max{high.round(3)}")
        for stand in scene.stands:
            roof = f" roof_coverage={stand.roof.coverage:.2f}" if stand.roof is not None else ""
            print(f"  {stand.name}: length={stand.stand_length:.2f}"
                  f" depth={stand.total_profile_depth:.2f}"
                  f" height={stand.total_profile_height_at_back:.2f}{roof}")
        print(f"Resources: {scene.resources.summary()}")


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="StadiumGen CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a stadium and export to GLB/JSON/PNG")
    gen.add_argument("--params", type=Path, default=None, help="JSON parameter file to start from")
    gen.add_argument("--set", action="append", type=_parse_assignment, metavar="KEY=VALUE",
                     help="Override a flat parameter (repeatable)")
    gen.add_argument("--pitch-length", type=float, default=None, help="Field length in meters")
    gen.add_argument("--pitch-width", type=float, default=None, help="Field width in meters")
    gen.add_argument("--stadium-type", choices=["football", "cricket"], default=None)
    gen.add_argument("--roof-type", choices=["none", "overall", "individual"], default=None)
    gen.add_argument("--rows", type=int, default=None, help="Rows per stand")
    gen.add_argument("--lights-per-tower", type=int, default=None)
    gen.add_argument("--out", type=Path, default=None, help="GLB output path")
    gen.add_argument("--json", type=Path, default=None, help="Parameter JSON output path")
    gen.add_argument("--snapshot", type=Path, default=None, help="PNG snapshot output path")
    gen.add_argument("--optimize", action="store_true", help="Merge meshes by color before export")
    gen.add_argument("--summary", action="store_true", help="Print stand metrics and resource counts")

    sub.add_parser("config", help="Print the active configuration")

    args = parser.parse_args(argv)
    configure_logging()
    check_config()

    if args.command == "config":
        print(config.get_summary())
        return 0

    try:
        params = _build_params(args)
        scene = generate_stadium(StadiumScene(), params)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2

    _export(scene, params, args.out, args.json, args.snapshot, args.optimize, args.summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
