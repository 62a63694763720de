"""
A Python package for analyzing bipolar transistor output characteristics.

Fits the active region of I_C(V_CE) curves measured at fixed base currents,
and derives the Early voltage, the output conductance and the current gain.

Modules:
    - data_processing: Loads four-column characteristic tables and selects fit domains.
    - stats: Weighted least-squares line fits and uncertainty propagation.
    - device: Early voltage, output conductance and current gain.
    - analysis: Per-curve pipeline, results table and text report.
    - plotting: Renderer interface and publication-style figures.
"""

__version__ = "1.0.0"

from .analysis import (
    analyze_characteristic,
    compute_gains,
    create_results_dataframe,
    print_report,
    process_all_files,
)
from .data_processing import Dataset, Sample, filter_range, load
from .device import (
    compute_gain_between_fits,
    derive_intercept_ratio,
    derive_inverse_slope,
    fit_swapped,
)
from .errors import (
    BJTAnalysisError,
    DivideByZeroError,
    InsufficientDataError,
    MalformedRecordError,
)
from .stats import DerivedQuantity, FitResult, fit_linear

__all__ = [
    # Data
    "Dataset",
    "Sample",
    "load",
    "filter_range",
    # Fitting and derived quantities
    "FitResult",
    "DerivedQuantity",
    "fit_linear",
    "fit_swapped",
    "derive_intercept_ratio",
    "derive_inverse_slope",
    "compute_gain_between_fits",
    # Pipeline
    "analyze_characteristic",
    "process_all_files",
    "compute_gains",
    "create_results_dataframe",
    "print_report",
    # Errors
    "BJTAnalysisError",
    "MalformedRecordError",
    "InsufficientDataError",
    "DivideByZeroError",
]
