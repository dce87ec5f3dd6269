#!/usr/bin/env python3
"""
spurilo: distance, climb and elevation profile of GPX tracks.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Optional

from spurilo.analyze.summary import TrackSummary
from spurilo.analyze.track import analyze_track
from spurilo.config import SpuriloConfig, load_config
from spurilo.errors import ConfigurationError, InvalidGpxError, RenderError, StructuralError
from spurilo.util.logging import log, warn
from spurilo.visualize.plot import draw_profile

TSV_HEADER = "file\tname\tstart_time\tlocation\tdistance_m\tuphill_m\tdownhill_m\tsimplified_uphill_m\tsimplified_downhill_m"


def print_report(path: Path, summary: TrackSummary, *, tsv: bool, verbose: bool = False) -> None:
    start = summary.start_time.isoformat() if summary.start_time else ""
    if tsv:
        print(
            f"{path}\t"
            f"{summary.name or ''}\t"
            f"{start}\t"
            f"{summary.location or ''}\t"
            f"{summary.distance:.2f}\t"
            f"{summary.uphill:.2f}\t"
            f"{summary.downhill:.2f}\t"
            f"{summary.simplified_uphill:.2f}\t"
            f"{summary.simplified_downhill:.2f}"
        )
        return

    print(f"\n{summary.name or path.name}")
    if summary.description:
        print(summary.description)
    print()
    if summary.start_time:
        print(f"  {'Date & Time':<15} {start}")
    if summary.location:
        print(f"  {'Location':<15} {summary.location}")
    print(f"  {'Distance':<15} {int(summary.distance)}m")
    print(f"  {'Uphill':<15} {int(summary.uphill)}m")
    print(f"  {'Downhill':<15} {int(summary.downhill)}m")
    if verbose:
        print(f"  {'Simpl. uphill':<15} {int(summary.simplified_uphill)}m")
        print(f"  {'Simpl. downhill':<15} {int(summary.simplified_downhill)}m")
        print(f"  {'Profile points':<15} {len(summary.profile)} -> {len(summary.simplified_profile)}"
              f" (epsilon {summary.epsilon:.3f})")


def apply_cli_overrides(cfg: SpuriloConfig, args: argparse.Namespace) -> SpuriloConfig:
    """CLI flags win over every config layer. Invalid values raise ConfigurationError."""
    flt = cfg.filter
    if args.distance_threshold is not None:
        flt = dataclasses.replace(flt, distance_threshold_m=args.distance_threshold)
    if args.elevation_threshold is not None:
        flt = dataclasses.replace(flt, elevation_threshold_m=args.elevation_threshold)
    if args.distance_method is not None:
        flt = dataclasses.replace(flt, distance_method=args.distance_method)

    simp = cfg.simplify
    if args.epsilon is not None:
        simp = dataclasses.replace(simp, epsilon=args.epsilon)
    if args.base_distance is not None:
        simp = dataclasses.replace(simp, base_distance=args.base_distance)
    if args.fast_simplify:
        simp = dataclasses.replace(simp, preserve_topology=False)

    geo = cfg.geocode
    if args.no_geocode:
        geo = dataclasses.replace(geo, enabled=False)

    return dataclasses.replace(cfg, filter=flt, simplify=simp, geocode=geo)


def image_path_for(gpx_path: Path, cfg: SpuriloConfig, explicit: Optional[str]) -> Path:
    if explicit:
        return Path(explicit).expanduser()
    out_dir = cfg.render.output if cfg.render.output else gpx_path.parent
    return out_dir / f"{gpx_path.stem}-profile.png"


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="spurilo: analyze GPX file(s).")
    ap.add_argument("gpx", nargs="+", help="One or more GPX files.")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output (good for piping).")
    ap.add_argument("--draw", action="store_true",
                    help="Write the elevation profile as an image.")
    ap.add_argument("--output", default=None,
                    help="Image path (single GPX only). Default: <gpx stem>-profile.png")
    ap.add_argument("--raw-profile", action="store_true",
                    help="Draw the raw profile instead of the simplified one.")
    ap.add_argument("--no-geocode", action="store_true",
                    help="Do not look up the start location.")
    ap.add_argument("--distance-threshold", type=float, default=None,
                    help="Minimum move (m) for a waypoint to count (default 3).")
    ap.add_argument("--elevation-threshold", type=float, default=None,
                    help="Minimum elevation change (m) for a waypoint to count (default 3).")
    ap.add_argument("--distance-method", choices=("geodesic", "haversine"), default=None)
    ap.add_argument("--epsilon", type=float, default=None,
                    help="Fixed simplification epsilon (m^2). Default: derived from the track.")
    ap.add_argument("--base-distance", type=float, default=None,
                    help="Base distance (m) of the derived epsilon (default 5).")
    ap.add_argument("--fast-simplify", action="store_true",
                    help="Skip the self-intersection check while simplifying.")
    ap.add_argument("--verbose", action="store_true", help="More logging.")

    args = ap.parse_args(argv)

    try:
        cfg = apply_cli_overrides(load_config(), args)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.output and len(args.gpx) > 1:
        print("error: --output needs a single GPX file", file=sys.stderr)
        return 2

    if args.verbose:
        for key, origin in sorted(cfg.source.items()):
            if origin != "default":
                log(f"config {key} <- {origin}")

    if args.tsv:
        print(TSV_HEADER)

    rc = 0
    for raw in args.gpx:
        path = Path(raw).expanduser()
        if not path.is_file():
            print(f"Skipping (not a file): {path}", file=sys.stderr)
            rc = 1
            continue

        if args.verbose:
            log(f"Analyzing {path}")
        try:
            summary = analyze_track(path, cfg)
        except (InvalidGpxError, StructuralError, OSError) as e:
            print(f"error: {path}: {e}", file=sys.stderr)
            rc = 1
            continue

        print_report(path, summary, tsv=args.tsv, verbose=args.verbose)

        if args.draw:
            profile = summary.profile if args.raw_profile else summary.simplified_profile
            out = image_path_for(path, cfg, args.output)
            try:
                draw_profile(profile, summary.distance, out, cfg.render)
            except RenderError as e:
                warn(str(e))
            else:
                if args.verbose:
                    log(f"Wrote {out}")

    return rc


if __name__ == "__main__":
    raise SystemExit(main())
