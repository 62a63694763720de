"""Current gain (beta) from two output characteristics.

beta = |I_C(high) - I_C(low)| / (I_B(high) - I_B(low)), with both collector
currents read from the fitted lines at a common V_CE.
"""

from __future__ import annotations

from ..errors import DivideByZeroError
from ..stats.regression import FitResult
from ..stats.uncertainty import quadrature_sum


def _delta_base(base_low: float, base_high: float) -> float:
    delta = float(base_high) - float(base_low)
    if delta == 0:
        raise DivideByZeroError(
            f"Base currents are equal ({base_low}); gain is undefined."
        )
    return delta


def compute_gain_between_fits(
    fit_low: FitResult,
    fit_high: FitResult,
    x_eval: float,
    base_low: float,
    base_high: float,
) -> float:
    """Return ``|y_high(x_eval) - y_low(x_eval)| / (base_high - base_low)``.

    Args:
        fit_low (FitResult): Fit of the curve at ``base_low``.
        fit_high (FitResult): Fit of the curve at ``base_high``.
        x_eval (float): Common x (V_CE) where both lines are evaluated.
        base_low (float): Base current of the first curve (same unit as y).
        base_high (float): Base current of the second curve.

    Returns:
        float: Gain value only; see :func:`gain_uncertainty` for its error.

    Raises:
        DivideByZeroError: If the base currents are equal.
    """
    delta_base = _delta_base(base_low, base_high)
    y_low = fit_low.a + fit_low.b * float(x_eval)
    y_high = fit_high.a + fit_high.b * float(x_eval)
    return float(abs(y_high - y_low) / delta_base)


def gain_uncertainty(
    fit_low: FitResult,
    fit_high: FitResult,
    x_eval: float,
    base_low: float,
    base_high: float,
) -> float:
    """Propagated standard error of :func:`compute_gain_between_fits`.

    The two fits are independent; each line's error at ``x_eval`` includes
    its a-b covariance. Base currents are treated as exact.
    """
    delta_base = _delta_base(base_low, base_high)
    sigma_dy = quadrature_sum(
        fit_low.evaluate_uncertainty(x_eval), fit_high.evaluate_uncertainty(x_eval)
    )
    return float(sigma_dy / abs(delta_base))
