"""Centralized unit conversion utilities."""

from __future__ import annotations

UA_PER_MA: float = 1000.0
US_PER_MS: float = 1000.0


def ua_to_ma(current_ua: float) -> float:
    """Convert a base current from microamps to milliamps.

    Args:
        current_ua (float): Current in microamperes (µA).

    Returns:
        float: Current in milliamperes (mA), the unit used for I_C tables.

    Note:
        Keep base and collector currents in mA so the current gain comes out
        dimensionless.
    """
    return float(current_ua) / UA_PER_MA


def ma_to_ua(current_ma: float) -> float:
    """Convert a current from milliamps to microamps."""
    return float(current_ma) * UA_PER_MA
