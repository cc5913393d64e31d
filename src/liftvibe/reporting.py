from __future__ import annotations

import json
from pathlib import Path

from liftvibe import __version__
from liftvibe.models import WindowStats
from liftvibe.pipeline import RideAnalysis
from liftvibe.spectrum import top_bins

SCHEMA_VERSION = "liftvibe.report.v1"
REPORT_TOP_BINS = 5


def _fmt_point_time(stats: WindowStats) -> str:
    if stats.max_pkpk_pair is None:
        return "-"
    a, b = stats.max_pkpk_pair
    return f"{a.time:.3f}-{b.time:.3f} s"


def build_payload(
    analysis: RideAnalysis,
    *,
    input_name: str | None = None,
    load_stats: dict[str, object] | None = None,
) -> dict[str, object]:
    opts = analysis.options
    window = analysis.window
    return {
        "schema_version": SCHEMA_VERSION,
        "tool_version": __version__,
        "input": {"csv": input_name, "units": "Gal"},
        "data_quality": dict(load_stats or {}),
        "sample_rate_hz": opts.sample_rate,
        "duration_seconds": analysis.duration,
        "samples": len(analysis.processed),
        "display_samples": len(analysis.display),
        "filter": opts.filter.to_json(),
        "axis": opts.axis.value,
        "global_stats": analysis.global_stats.to_json(),
        "velocity_stats": analysis.velocity_stats.to_json(),
        "displacement_stats": analysis.displacement_stats.to_json(),
        "window": {
            "start_seconds": window.start,
            "size_seconds": window.size,
            "samples": window.samples,
            "stats": window.stats.to_json(),
            "dominant": (
                {"frequency_hz": window.dominant.frequency, "magnitude": window.dominant.magnitude}
                if window.dominant
                else None
            ),
            "top_bins": [
                {"frequency_hz": p.frequency, "magnitude": p.magnitude}
                for p in top_bins(window.spectrum, REPORT_TOP_BINS)
            ],
        },
        "advisory_input": window.advisory.to_json(),
    }


def write_reports(
    *,
    output_dir: Path,
    input_csv: Path,
    analysis: RideAnalysis,
    load_stats: dict[str, object] | None = None,
) -> tuple[Path, Path, dict[str, object]]:
    output_dir.mkdir(parents=True, exist_ok=True)
    md_path = output_dir / "report.md"
    json_path = output_dir / "report.json"

    payload = build_payload(analysis, input_name=str(input_csv), load_stats=load_stats)
    opts = analysis.options
    g = analysis.global_stats
    w = analysis.window
    unit = opts.axis.unit
    load_stats = load_stats or {}

    md_lines: list[str] = [
        "# Elevator Ride Quality Report",
        "",
        f"- Tool version: **{__version__}**",
        f"- Input: **{input_csv.name}**",
        f"- Sample rate: **{opts.sample_rate:.2f} Hz**",
        f"- Recording duration: **{analysis.duration:.2f} s**",
        f"- Analysis axis: **{opts.axis.value}** ({unit})",
        f"- Filter: **{'on' if opts.filter.enabled else 'off'}**",
        "",
        "## Data Quality",
        "",
        f"- Raw rows: **{int(load_stats.get('raw_rows', 0))}**",
        f"- Dropped rows (non-numeric): **{int(load_stats.get('rows_dropped_non_numeric', 0))}**",
        f"- Final rows: **{int(load_stats.get('final_rows', len(analysis.processed)))}**",
        "",
        "## GB/T 24474 / ISO 18738 Metrics (full recording)",
        "",
        "| Metric | Value |",
        "| --- | ---: |",
        f"| Max Pk-Pk ({unit}) | {g.pk_pk:.3f} |",
        f"| Max 0-Pk ({unit}) | {g.zero_pk:.3f} |",
        f"| A95 Pk-Pk ({unit}) | {g.a95:.3f} |",
        f"| RMS ({unit}) | {g.rms:.3f} |",
        f"| Max Pk-Pk location | {_fmt_point_time(g)} |",
        "",
        "## Integrated Motion (z)",
        "",
        "| Series | Pk-Pk | Max abs | RMS |",
        "| --- | ---: | ---: | ---: |",
        f"| Velocity (m/s) | {analysis.velocity_stats.pk_pk:.4f} | "
        f"{analysis.velocity_stats.zero_pk:.4f} | {analysis.velocity_stats.rms:.4f} |",
        f"| Displacement (m) | {analysis.displacement_stats.pk_pk:.4f} | "
        f"{analysis.displacement_stats.zero_pk:.4f} | {analysis.displacement_stats.rms:.4f} |",
        "",
        f"## Window Analysis ({w.start:.2f} s + {w.size:.2f} s, {w.samples} samples)",
        "",
        "| Metric | Value |",
        "| --- | ---: |",
        f"| RMS ({unit}) | {w.stats.rms:.3f} |",
        f"| Peak ({unit}) | {w.stats.peak_val:.3f} |",
        f"| Max Pk-Pk ({unit}) | {w.stats.pk_pk:.3f} |",
        f"| A95 Pk-Pk ({unit}) | {w.stats.a95:.3f} |",
        "",
        "## Dominant Frequencies (1-200 Hz)",
        "",
    ]

    bins = top_bins(w.spectrum, REPORT_TOP_BINS)
    if bins:
        md_lines.extend(["| Frequency (Hz) | Magnitude |", "| ---: | ---: |"])
        for p in bins:
            md_lines.append(f"| {p.frequency:.2f} | {p.magnitude:.4f} |")
    else:
        md_lines.append("Window too short for a spectrum. Use a longer window.")

    md_lines.append("")
    md_lines.append("_Generated by liftvibe_")

    md_path.write_text("\n".join(md_lines), encoding="utf-8")
    json_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return md_path, json_path, payload
