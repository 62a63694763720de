"""
Transistor figures of merit extracted from fitted output characteristics.

Modules:
    early:
        Early voltage as the x-intercept ``-a/b`` of the active-region fit,
        and the axis-swapped fit giving the output conductance and the Early
        voltage directly.

    gain:
        Current gain (beta) from two output curves at different base
        currents, evaluated at a common V_CE.

Design Principle:
    This subpackage has no dependencies on plotting/ or matplotlib.
"""

from .early import (
    derive_intercept_ratio,
    derive_inverse_slope,
    early_voltage_from_swapped,
    fit_swapped,
    output_conductance,
)
from .gain import compute_gain_between_fits, gain_uncertainty

__all__ = [
    "derive_intercept_ratio",
    "derive_inverse_slope",
    "early_voltage_from_swapped",
    "fit_swapped",
    "output_conductance",
    "compute_gain_between_fits",
    "gain_uncertainty",
]
