"""
Statistical utilities for output-characteristic analysis.

This subpackage provides numerical routines for weighted straight-line fits
and first-order uncertainty propagation. All functions operate on arrays and
primitive types; no transistor-specific logic is included.

Modules:
    regression:
        Weighted least-squares line fit with residual-scaled or absolute
        parameter standard errors, and line evaluation with propagated error.

    uncertainty:
        Quadrature propagation for ratios and inverses, and rounding and
        formatting of value/uncertainty pairs for reports.

Design Principle:
    This subpackage has no dependencies on device/ or plotting/ modules.
"""

from .regression import FitResult, fit_linear, weighted_linear_regression
from .uncertainty import (
    DerivedQuantity,
    format_value_with_uncertainty,
    inverse,
    quadrature_sum,
    ratio,
    relative_quadrature,
    round_uncertainty,
    round_value_to_uncertainty,
)

__all__ = [
    "FitResult",
    "fit_linear",
    "weighted_linear_regression",
    "DerivedQuantity",
    "format_value_with_uncertainty",
    "inverse",
    "quadrature_sum",
    "ratio",
    "relative_quadrature",
    "round_uncertainty",
    "round_value_to_uncertainty",
]
