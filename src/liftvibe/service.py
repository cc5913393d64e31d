from __future__ import annotations

import io
import math

from fastapi import FastAPI, File, HTTPException, UploadFile

from liftvibe import __version__
from liftvibe.loader import LOAD_STATS_KEY, frame_from_csv
from liftvibe.models import Axis, FilterConfig, TargetAxes
from liftvibe.pipeline import DEFAULT_SAMPLE_RATE, AnalysisOptions, analyze
from liftvibe.reporting import build_payload

app = FastAPI(title="liftvibe", version=__version__)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/analyze")
async def analyze_endpoint(
    file: UploadFile = File(...),
    sample_rate: float = DEFAULT_SAMPLE_RATE,
    axis: str = "az",
    window_start: float = 0.0,
    window_size: float = 4.0,
    display_points: int = 8000,
    filter_enabled: bool = False,
    highpass: float = 0.0,
    lowpass: float = 80.0,
    weighting: bool = False,
    target_axes: str = "all",
) -> dict:
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV uploads are supported.")

    content = await file.read()
    try:
        options = AnalysisOptions(
            sample_rate=sample_rate,
            axis=Axis.parse(axis),
            window_start=window_start,
            window_size=window_size,
            display_points=display_points,
            filter=FilterConfig.from_mapping(
                {
                    "enabled": filter_enabled,
                    "highpass_hz": highpass,
                    "lowpass_hz": lowpass if lowpass > 0 else math.inf,
                    "standard_weighting": weighting,
                    "target_axes": target_axes,
                }
            ),
        )
        raw = frame_from_csv(io.BytesIO(content), sample_rate)
        analysis = analyze(raw, options)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return build_payload(
        analysis,
        input_name=file.filename,
        load_stats=raw.attrs.get(LOAD_STATS_KEY, {}),
    )
