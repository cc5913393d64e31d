from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

GALS_PER_MPS2 = 100.0  # 1 Gal = 1 cm/s^2

TIME_COLUMN = "time"
ACCEL_COLUMNS: tuple[str, str, str] = ("ax", "ay", "az")
RAW_COLUMNS: tuple[str, ...] = (TIME_COLUMN, *ACCEL_COLUMNS)
PROCESSED_COLUMNS: tuple[str, ...] = (*RAW_COLUMNS, "vz", "sz")


class ConfigurationError(ValueError):
    pass


class Axis(str, Enum):
    AX = "ax"
    AY = "ay"
    AZ = "az"
    VZ = "vz"
    SZ = "sz"

    @property
    def is_acceleration(self) -> bool:
        return self in (Axis.AX, Axis.AY, Axis.AZ)

    @property
    def unit(self) -> str:
        if self.is_acceleration:
            return "Gal"
        return "m/s" if self is Axis.VZ else "m"

    @classmethod
    def parse(cls, value: str | Axis) -> Axis:
        if isinstance(value, Axis):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise ConfigurationError(f"Unknown axis {value!r}. Expected one of: {choices}") from None


class TargetAxes(str, Enum):
    ALL = "all"
    Z_ONLY = "z"

    @property
    def columns(self) -> tuple[str, ...]:
        return ACCEL_COLUMNS if self is TargetAxes.ALL else ("az",)


@dataclass(frozen=True)
class FilterConfig:
    """
    Filter settings for one pipeline run.

    A disabled config is a true no-op. `lowpass_hz` may be `inf` (or any value
    at/above Nyquist) to skip the low-pass stage; `highpass_hz <= 0` skips the
    high-pass stage.
    """

    enabled: bool = False
    highpass_hz: float = 0.0
    lowpass_hz: float = 80.0
    standard_weighting: bool = False
    target_axes: TargetAxes = TargetAxes.ALL

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> FilterConfig:
        target = values.get("target_axes", TargetAxes.ALL)
        if not isinstance(target, TargetAxes):
            try:
                target = TargetAxes(str(target).strip().lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown target axes {target!r}. Expected 'all' or 'z'."
                ) from None
        return cls(
            enabled=bool(values.get("enabled", False)),
            highpass_hz=float(values.get("highpass_hz", 0.0)),
            lowpass_hz=float(values.get("lowpass_hz", 80.0)),
            standard_weighting=bool(values.get("standard_weighting", False)),
            target_axes=target,
        )

    def to_json(self) -> dict[str, object]:
        return {
            "enabled": self.enabled,
            "highpass_hz": self.highpass_hz,
            "lowpass_hz": self.lowpass_hz if math.isfinite(self.lowpass_hz) else None,
            "standard_weighting": self.standard_weighting,
            "target_axes": self.target_axes.value,
        }


@dataclass(frozen=True)
class SpectrumPoint:
    frequency: float
    magnitude: float


@dataclass(frozen=True)
class Point:
    time: float
    value: float

    def to_json(self) -> dict[str, float]:
        return {"time": self.time, "value": self.value}


@dataclass(frozen=True)
class WindowStats:
    peak_val: float
    peak_time: float
    rms: float
    pk_pk: float
    zero_pk: float
    a95: float
    max_0pk_point: Point | None = None
    max_pkpk_pair: tuple[Point, Point] | None = None

    @classmethod
    def empty(cls) -> WindowStats:
        return cls(peak_val=0.0, peak_time=0.0, rms=0.0, pk_pk=0.0, zero_pk=0.0, a95=0.0)

    def to_json(self) -> dict[str, object]:
        return {
            "peak_val": self.peak_val,
            "peak_time": self.peak_time,
            "rms": self.rms,
            "pk_pk": self.pk_pk,
            "zero_pk": self.zero_pk,
            "a95": self.a95,
            "max_0pk_point": self.max_0pk_point.to_json() if self.max_0pk_point else None,
            "max_pkpk_pair": (
                [p.to_json() for p in self.max_pkpk_pair] if self.max_pkpk_pair else None
            ),
        }


@dataclass(frozen=True)
class AdvisoryInput:
    axis: Axis
    rms: float
    peak_val: float
    dominant_frequency: float
    dominant_magnitude: float

    def to_json(self) -> dict[str, float | str]:
        return {
            "axis": self.axis.value,
            "rms": self.rms,
            "peak_val": self.peak_val,
            "dominant_frequency": self.dominant_frequency,
            "dominant_magnitude": self.dominant_magnitude,
        }


def advisory_input(
    axis: Axis, stats: WindowStats, dominant: SpectrumPoint | None
) -> AdvisoryInput:
    """Flatten window stats and the FFT peak into the record the advisory service consumes."""

    return AdvisoryInput(
        axis=axis,
        rms=stats.rms,
        peak_val=stats.peak_val,
        dominant_frequency=dominant.frequency if dominant else 0.0,
        dominant_magnitude=dominant.magnitude if dominant else 0.0,
    )
