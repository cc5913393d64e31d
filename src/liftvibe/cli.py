from __future__ import annotations

import argparse
import csv as _csv
import logging
import math
import sys
from pathlib import Path

from liftvibe import __version__
from liftvibe.loader import LOAD_STATS_KEY, load_csv
from liftvibe.models import Axis, FilterConfig, TargetAxes
from liftvibe.pipeline import DEFAULT_SAMPLE_RATE, AnalysisOptions, analyze
from liftvibe.reporting import write_reports

VERBOSE_FLAGS = {"-v", "--verbose"}


def _add_analysis_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sample-rate",
        type=float,
        default=DEFAULT_SAMPLE_RATE,
        help=f"Sample rate of the recording in Hz (default: {DEFAULT_SAMPLE_RATE:g}).",
    )
    parser.add_argument(
        "--axis",
        default="az",
        choices=["ax", "ay", "az"],
        help="Acceleration axis for stats and spectrum (default: az).",
    )
    parser.add_argument("--window-start", type=float, default=0.0, help="Window start (s).")
    parser.add_argument("--window-size", type=float, default=4.0, help="Window length (s).")
    parser.add_argument(
        "--display-points", type=int, default=8000, help="Maximum rows in the display series."
    )
    parser.add_argument("--filter", action="store_true", help="Enable the filter stage.")
    parser.add_argument(
        "--highpass", type=float, default=0.0, help="High-pass cutoff in Hz (0 disables)."
    )
    parser.add_argument(
        "--lowpass", type=float, default=80.0, help="Low-pass cutoff in Hz (0 disables)."
    )
    parser.add_argument(
        "--weighting",
        action="store_true",
        help="Apply ISO 2631-1 Wk (z) / Wd (x, y) weighting on top of the cutoffs.",
    )
    parser.add_argument(
        "--z-only", action="store_true", help="Filter az only; ax/ay pass through."
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze elevator ride vibration recordings (Gals).",
        epilog=(
            "Examples:\n"
            "  liftvibe ride.csv\n"
            "  liftvibe analyze ride.csv --filter --highpass 0.5 --lowpass 10 --weighting\n"
            "  liftvibe analyze a.csv b.csv --summary-csv summary.csv\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"liftvibe {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    sub = parser.add_subparsers(dest="command")

    # analyze (default command)
    analyze_cmd = sub.add_parser("analyze", help="Generate report.md/report.json from CSVs.")
    analyze_cmd.add_argument("csv", nargs="+", type=Path, help="One or more CSV files.")
    analyze_cmd.add_argument("--output", type=Path, default=None, help="Output directory.")
    analyze_cmd.add_argument(
        "--summary-csv", type=Path, default=None, help="Write summary CSV (batch)."
    )
    _add_analysis_args(analyze_cmd)
    return parser


def build_options(args: argparse.Namespace) -> AnalysisOptions:
    lowpass = args.lowpass if args.lowpass > 0 else math.inf
    return AnalysisOptions(
        sample_rate=args.sample_rate,
        axis=Axis.parse(args.axis),
        window_start=args.window_start,
        window_size=args.window_size,
        display_points=args.display_points,
        filter=FilterConfig(
            enabled=args.filter,
            highpass_hz=args.highpass,
            lowpass_hz=lowpass,
            standard_weighting=args.weighting,
            target_axes=TargetAxes.Z_ONLY if args.z_only else TargetAxes.ALL,
        ),
    )


def _cmd_analyze(args: argparse.Namespace) -> None:
    options = build_options(args)
    summaries: list[dict[str, object]] = []

    for csv_path in args.csv:
        raw = load_csv(csv_path, options.sample_rate)
        load_stats = dict(raw.attrs.get(LOAD_STATS_KEY, {}))
        analysis = analyze(raw, options)

        if args.output is not None:
            output_dir = args.output / f"{csv_path.stem}_liftvibe"
        elif len(args.csv) > 1:
            output_dir = csv_path.parent / f"{csv_path.stem}_liftvibe"
        else:
            output_dir = csv_path.parent

        md_path, json_path, _ = write_reports(
            output_dir=output_dir,
            input_csv=csv_path,
            analysis=analysis,
            load_stats=load_stats,
        )

        g = analysis.global_stats
        w = analysis.window
        unit = options.axis.unit
        print(f"\n== {csv_path.name} ==")
        print(f"Wrote: {md_path} and {json_path}")
        print(
            f"Global ({options.axis.value}): "
            f"max_pkpk={g.pk_pk:.3f} {unit}, max_0pk={g.zero_pk:.3f} {unit}, "
            f"a95={g.a95:.3f} {unit}, rms={g.rms:.3f} {unit}"
        )
        if w.dominant is not None:
            print(f"Window dominant: {w.dominant.frequency:.2f} Hz (magnitude {w.dominant.magnitude:.4f})")
        else:
            print("Window too short for a spectrum. Use a longer --window-size.")

        summaries.append(
            {
                "input_csv": str(csv_path),
                "output_dir": str(output_dir),
                "samples": len(analysis.processed),
                "duration_seconds": analysis.duration,
                "axis": options.axis.value,
                "max_pkpk": g.pk_pk,
                "max_0pk": g.zero_pk,
                "a95": g.a95,
                "rms": g.rms,
                "dominant_hz": w.dominant.frequency if w.dominant else 0.0,
            }
        )

    if args.summary_csv is not None:
        out = args.summary_csv
        out.parent.mkdir(parents=True, exist_ok=True)
        fieldnames = sorted({k for row in summaries for k in row.keys()})
        with out.open("w", newline="", encoding="utf-8") as f:
            writer = _csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(summaries)
        print(f"\nWrote summary CSV: {out}")


def main(argv: list[str] | None = None) -> int:
    argv = list(argv) if argv is not None else sys.argv[1:]
    # Verbosity is a top-level flag wherever it appears.
    verbose = [a for a in argv if a in VERBOSE_FLAGS]
    argv = [a for a in argv if a not in VERBOSE_FLAGS]
    # `liftvibe file.csv ...` == `liftvibe analyze file.csv ...`
    if argv and argv[0] not in {"analyze", "--version", "-h", "--help"}:
        argv = ["analyze", *argv]
    argv = [*verbose, *argv]

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command != "analyze":
        parser.print_help()
        return 0
    try:
        _cmd_analyze(args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
