"""Provide the weighted straight-line fit used for output characteristics.

This module supports:
- weighted least-squares fits of ``y = a + b*x`` with weights ``1/ey**2``,
- residual-scaled or absolute parameter standard errors, and
- evaluation of the fitted line with its propagated uncertainty.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy.stats import chi2 as chi2_dist

from ..errors import InsufficientDataError

MIN_FIT_POINTS = 2


@dataclass(frozen=True)
class FitResult:
    """Straight-line fit ``y = a + b*x`` with parameter standard errors.

    Attributes:
        a: Intercept.
        sigma_a: Standard error of ``a``.
        b: Slope.
        sigma_b: Standard error of ``b``.
        cov_ab: Covariance between ``a`` and ``b``.
        chi2: Weighted sum of squared residuals.
        ndf: Degrees of freedom, ``n - 2``.
        n: Number of points used.
        domain: ``(low, high)`` x range the fit was restricted to, if any.
    """

    a: float
    sigma_a: float
    b: float
    sigma_b: float
    cov_ab: float = 0.0
    chi2: float = 0.0
    ndf: int = 0
    n: int = 0
    domain: Optional[Tuple[float, float]] = None

    @property
    def reduced_chi2(self) -> float:
        return self.chi2 / self.ndf if self.ndf > 0 else math.nan

    @property
    def probability(self) -> float:
        """Chi-square upper-tail probability of the fit."""
        if self.ndf <= 0:
            return math.nan
        return float(chi2_dist.sf(self.chi2, self.ndf))

    def evaluate(self, x):
        """Evaluate ``a + b*x`` for a scalar or array ``x``."""
        return self.a + self.b * np.asarray(x, dtype=float)

    def evaluate_uncertainty(self, x: float) -> float:
        """Standard error of the fitted line at ``x``."""
        x = float(x)
        var = self.sigma_a**2 + (x * self.sigma_b) ** 2 + 2.0 * x * self.cov_ab
        return float(math.sqrt(max(var, 0.0)))


def _fit_weights(ey: np.ndarray, label: str) -> np.ndarray:
    """Return per-point weights ``1/ey**2``.

    All-zero errors give an unweighted fit. Zero errors mixed with positive
    ones get weight zero so they drop out of the normal equations.
    """
    positive = ey > 0
    if not np.any(positive):
        logging.warning(
            "All y uncertainties are zero for '%s'; using an unweighted fit", label
        )
        return np.ones_like(ey)
    if not np.all(positive):
        logging.warning(
            "Excluding %d point(s) with zero y uncertainty from the fit of '%s'",
            int(np.sum(~positive)),
            label,
        )
    w = np.zeros_like(ey)
    w[positive] = 1.0 / ey[positive] ** 2
    return w


def weighted_linear_regression(
    x: np.ndarray,
    y: np.ndarray,
    ey: np.ndarray,
    absolute_sigma: bool = False,
    label: str = "",
    domain: Optional[Tuple[float, float]] = None,
) -> FitResult:
    """Fit a weighted least-squares straight line from the normal equations.

    Args:
        x (numpy.ndarray): Independent variable.
        y (numpy.ndarray): Dependent variable.
        ey (numpy.ndarray): One-sigma uncertainty of ``y``; weights are
            ``1/ey**2``.
        absolute_sigma (bool, optional): If ``False`` (default) the parameter
            covariance is scaled by ``chi2/ndf`` as in
            ``numpy.polyfit(..., w=1/ey, cov=True)``. If ``True`` the
            uncertainties are taken as absolute.
        label (str, optional): Name used in log messages.
        domain (tuple, optional): Fit domain recorded on the result.

    Returns:
        FitResult: Intercept, slope, standard errors and fit diagnostics.

    Raises:
        InsufficientDataError: If fewer than two weighted points remain or
            the x values have no spread.

    Note:
        With exactly two points ``ndf`` is zero and the residual scale is
        undefined, so the absolute covariance is reported.

    References:
        Weighted linear least squares; Bevington & Robinson, ch. 6.
    """
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    ey_arr = np.abs(np.asarray(ey, dtype=float))

    w = _fit_weights(ey_arr, label) if len(x_arr) else ey_arr
    used = w > 0
    n = int(np.sum(used))
    if n < MIN_FIT_POINTS:
        raise InsufficientDataError(
            f"Linear fit of '{label}' needs at least {MIN_FIT_POINTS} points, got {n}."
        )

    x_arr, y_arr, w = x_arr[used], y_arr[used], w[used]

    s = float(np.sum(w))
    sx = float(np.sum(w * x_arr))
    sy = float(np.sum(w * y_arr))
    # Centre x before forming the second moments to limit cancellation.
    xbar = sx / s
    dx = x_arr - xbar
    sdxx = float(np.sum(w * dx**2))
    if sdxx <= 0:
        raise InsufficientDataError(f"No spread in x for the fit of '{label}'.")

    b = float(np.sum(w * dx * y_arr)) / sdxx
    a = sy / s - b * xbar

    var_b = 1.0 / sdxx
    var_a = 1.0 / s + xbar**2 / sdxx
    cov_ab = -xbar / sdxx

    resid = y_arr - (a + b * x_arr)
    chi2 = float(np.sum(w * resid**2))
    ndf = n - 2

    if not absolute_sigma:
        if ndf > 0:
            scale = chi2 / ndf
            var_a *= scale
            var_b *= scale
            cov_ab *= scale
        else:
            logging.warning(
                "Fit of '%s' has no degrees of freedom; reporting absolute "
                "parameter errors",
                label,
            )

    return FitResult(
        a=float(a),
        sigma_a=float(math.sqrt(var_a)),
        b=float(b),
        sigma_b=float(math.sqrt(var_b)),
        cov_ab=float(cov_ab),
        chi2=chi2,
        ndf=int(ndf),
        n=n,
        domain=domain,
    )


def fit_linear(
    dataset,
    absolute_sigma: bool = False,
    domain: Optional[Tuple[float, float]] = None,
) -> FitResult:
    """Fit ``y = a + b*x`` to a dataset, weighting each point by ``1/ey**2``.

    x uncertainties are not used as weights. ``domain`` defaults to the x
    extent of the dataset.
    """
    if domain is None and len(dataset):
        domain = (float(np.min(dataset.x)), float(np.max(dataset.x)))
    return weighted_linear_regression(
        dataset.x,
        dataset.y,
        dataset.ey,
        absolute_sigma=absolute_sigma,
        label=getattr(dataset, "label", ""),
        domain=domain,
    )
