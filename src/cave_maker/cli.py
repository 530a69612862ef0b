"""Command-line entry point for cave generation."""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path
from typing import Dict, Any, Iterable

import yaml

from cave_maker.generate import generate_cave, render_png


def load_config(path: str | None) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        msg = f"Config must be a mapping, got {type(data).__name__}"
        raise TypeError(msg)
    return data


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser("cave_maker")
    parser.add_argument("--width", type=int, default=100)
    parser.add_argument("--height", type=int, default=100)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--out", type=str, default="out/cave.png")
    parser.add_argument("--generations", type=int, default=None, help="Automaton steps per attempt")
    parser.add_argument("--wall-probability", type=float, default=None)
    parser.add_argument("--cell-size", type=int, default=None, help="Pixels per cell in the PNG")
    parser.add_argument("--no-cull", action="store_true", help="Keep every cavern instead of only the largest")
    parser.add_argument("--frames", action="store_true", help="Write one PNG per tick under the run directory")
    parser.add_argument("--log", action="store_true", help="Write a JSONL run log")
    args = parser.parse_args(list(argv) if argv is not None else None)

    config = load_config(args.config)
    if args.generations is not None:
        config["generations"] = args.generations
    if args.wall_probability is not None:
        config["wall_probability"] = args.wall_probability
    if args.no_cull:
        config["cull"] = False

    out_path = Path(args.out)
    if args.frames or args.log:
        config.setdefault("output_dir", str(out_path.parent))

    t0 = time.time()
    world = generate_cave(
        width=args.width,
        height=args.height,
        seed=args.seed,
        config=config,
        log=args.log,
        generate_frames=args.frames,
    )
    image = render_png(world, cell_size=args.cell_size)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(out_path)

    metadata = {
        "seed": args.seed,
        "width": args.width,
        "height": args.height,
        "config": config,
        "params": world["params"],
        "stats": world["stats"],
        "caverns": world["caverns"],
    }
    with open(out_path.with_suffix(".json"), "w", encoding="utf-8") as fh:
        json.dump(metadata, fh, indent=2)

    elapsed = time.time() - t0
    print(f"Wrote {out_path} and {out_path.with_suffix('.json')} in {elapsed:.2f}s")


if __name__ == "__main__":
    main()
