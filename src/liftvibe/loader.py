from __future__ import annotations

import io
import logging
import re
from pathlib import Path

import numpy as np
import pandas as pd

from liftvibe.models import ACCEL_COLUMNS, RAW_COLUMNS, TIME_COLUMN

logger = logging.getLogger(__name__)

LOAD_STATS_KEY = "liftvibe_load_stats"

_ALIASES: dict[str, set[str]] = {
    "ax": {"ax", "accel_x", "acc_x", "x", "x_accel", "acceleration_x"},
    "ay": {"ay", "accel_y", "acc_y", "y", "y_accel", "acceleration_y"},
    "az": {"az", "accel_z", "acc_z", "z", "z_accel", "acceleration_z"},
}


class LoadError(ValueError):
    pass


def _normalize_col(name: str) -> str:
    s = str(name).strip().lower()
    s = re.sub(r"[^a-z0-9]+", "_", s)
    return re.sub(r"_+", "_", s).strip("_")


def _infer_column_map(columns: list[str]) -> dict[str, str]:
    normalized_to_original = {_normalize_col(c): c for c in columns}
    out: dict[str, str] = {}
    for canonical, aliases in _ALIASES.items():
        if canonical in normalized_to_original:
            out[canonical] = normalized_to_original[canonical]
            continue
        hit = next((a for a in sorted(aliases) if a in normalized_to_original), None)
        if hit is None:
            # Unit suffixes, e.g. "az_gal" or "accel_z_cm_s2".
            hit = next(
                (
                    n
                    for n in normalized_to_original
                    for a in sorted(aliases)
                    if len(a) > 1 and n.startswith(f"{a}_")
                ),
                None,
            )
        if hit is not None:
            out[canonical] = normalized_to_original[hit]
    return out


def frame_from_csv(source: Path | io.StringIO | io.BytesIO, sample_rate: float) -> pd.DataFrame:
    """
    Parse accelerometer CSV data (ax, ay, az in Gals) into a raw sample frame.

    Rows with non-numeric acceleration values are dropped. Time is rebuilt from
    the row position, `time = i / sample_rate`, so the frame index always maps
    onto the sampling grid.
    """

    if sample_rate <= 0:
        raise LoadError(f"Sample rate must be > 0 Hz, got {sample_rate}")
    try:
        df = pd.read_csv(source, sep=None, engine="python")
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise LoadError(f"Could not parse CSV: {e}") from e

    column_map = _infer_column_map(list(df.columns))
    missing = [c for c in ACCEL_COLUMNS if c not in column_map]
    if missing:
        raise LoadError(
            "CSV must contain 'ax', 'ay', and 'az' columns. "
            f"Missing: {', '.join(missing)}. Found columns: {', '.join(map(str, df.columns))}"
        )

    raw_rows = int(len(df))
    df = df[[column_map[c] for c in ACCEL_COLUMNS]]
    df = df.rename(columns={column_map[c]: c for c in ACCEL_COLUMNS})
    for col in ACCEL_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df = df.dropna(subset=list(ACCEL_COLUMNS)).reset_index(drop=True)

    dropped = raw_rows - int(len(df))
    if dropped:
        logger.warning("Dropped %d non-numeric row(s) from CSV input", dropped)

    df.insert(0, TIME_COLUMN, np.arange(len(df), dtype=float) / sample_rate)
    df = df[list(RAW_COLUMNS)].astype(float)
    df.attrs[LOAD_STATS_KEY] = {
        "raw_rows": raw_rows,
        "rows_dropped_non_numeric": dropped,
        "final_rows": int(len(df)),
        "sample_rate_hz": float(sample_rate),
        "detected_columns": {c: str(column_map[c]) for c in ACCEL_COLUMNS},
    }
    return df


def load_csv(path: Path, sample_rate: float) -> pd.DataFrame:
    if not path.exists():
        raise LoadError(f"CSV not found: {path}")
    return frame_from_csv(path, sample_rate)
