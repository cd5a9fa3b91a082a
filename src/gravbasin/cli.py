# src/gravbasin/cli.py
from __future__ import annotations

import argparse
import sys
from typing import Sequence

from gravbasin import __version__, render
from gravbasin.attractors import AttractorSet
from gravbasin.config import PERTURBATION_MODES, RenderConfig, load_config
from gravbasin.errors import GravbasinError
from gravbasin.plot import output_path, save_basin_image

__all__ = ["main", "build_parser"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gravbasin",
        description="Render basin-of-attraction fractals for four gravitating attractors.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_render = sub.add_parser("render", help="Render a basin map to a PNG file")
    p_render.add_argument("--config", help="TOML render configuration")
    p_render.add_argument("--width", type=int)
    p_render.add_argument("--height", type=int)
    p_render.add_argument("--zoom", type=float)
    p_render.add_argument("--seed", type=int)
    p_render.add_argument("--steps", type=int, help="Integration step budget per pixel")
    p_render.add_argument("--no-jit", action="store_true", help="Run kernels in pure Python")
    p_render.add_argument("--workers", type=int, help="Thread pool size")
    p_render.add_argument("--out", help="Output directory")
    p_render.add_argument("--prefix", help="Output file prefix")
    p_render.add_argument("--no-progress", action="store_true")
    p_render.set_defaults(func=_cmd_render)

    p_attr = sub.add_parser("attractors", help="Print the (perturbed) attractor set")
    p_attr.add_argument("--seed", type=int)
    p_attr.add_argument("--perturbation", type=float, default=0.2)
    p_attr.add_argument("--mode", choices=PERTURBATION_MODES, default="forward")
    p_attr.set_defaults(func=_cmd_attractors)
    return parser


def _cmd_render(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else RenderConfig()
    config = config.replace(
        width=args.width,
        height=args.height,
        zoom=args.zoom,
        seed=args.seed,
        jit=False if args.no_jit else None,
        max_workers=args.workers,
        output_dir=args.out,
        prefix=args.prefix,
        sim_steps=args.steps,
    )
    result = render(config, progress=not args.no_progress)
    path = save_basin_image(result, output_path(config.output_dir, config.prefix))

    print("Attractors:")
    print(result.attractors.describe())
    for label, count in result.counts().items():
        print(f"  {label.name.lower():<12} {count}")
    print(f"Rendered {config.width}x{config.height} in {result.meta['elapsed_s']:.2f}s")
    print(f"Wrote {path}")
    return 0


def _cmd_attractors(args: argparse.Namespace) -> int:
    attractors = AttractorSet.build(seed=args.seed, amount=args.perturbation, mode=args.mode)
    print(attractors.describe())
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except (GravbasinError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
