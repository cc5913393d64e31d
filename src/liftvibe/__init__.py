__version__ = "0.1.0"

from liftvibe.downsample import downsample  # noqa: E402
from liftvibe.filters import apply_filters, validate_filter_config  # noqa: E402
from liftvibe.integration import integrate  # noqa: E402
from liftvibe.models import (  # noqa: E402
    AdvisoryInput,
    Axis,
    ConfigurationError,
    FilterConfig,
    Point,
    SpectrumPoint,
    TargetAxes,
    WindowStats,
    advisory_input,
)
from liftvibe.pipeline import (  # noqa: E402
    AnalysisOptions,
    RideAnalysis,
    WindowAnalysis,
    analyze,
    analyze_window,
    process,
    slice_window,
)
from liftvibe.spectrum import compute_spectrum, dominant_frequency  # noqa: E402
from liftvibe.stats import compute_stats  # noqa: E402

__all__ = [
    "__version__",
    "AdvisoryInput",
    "AnalysisOptions",
    "Axis",
    "ConfigurationError",
    "FilterConfig",
    "Point",
    "RideAnalysis",
    "SpectrumPoint",
    "TargetAxes",
    "WindowAnalysis",
    "WindowStats",
    "advisory_input",
    "analyze",
    "analyze_window",
    "apply_filters",
    "compute_spectrum",
    "compute_stats",
    "downsample",
    "dominant_frequency",
    "integrate",
    "process",
    "slice_window",
    "validate_filter_config",
]
