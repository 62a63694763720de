"""Write fit results and current-gain tables to CSV files.

This module is the boundary between in-memory analysis and the flat tables
kept with the lab report.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Tuple

import pandas as pd

from .reporting import add_formatted_reporting_columns, add_uncertainty_form_columns
from .schema import COLUMNS

REPORTED_PAIRS = [
    (COLUMNS.a, COLUMNS.sigma_a),
    (COLUMNS.b, COLUMNS.sigma_b),
    (COLUMNS.early_voltage, COLUMNS.early_voltage_unc),
    (COLUMNS.early_voltage_swapped, COLUMNS.early_voltage_swapped_unc),
    (COLUMNS.conductance, COLUMNS.conductance_unc),
]

GAIN_COLUMNS = {
    "low": "Curve (low Ib)",
    "high": "Curve (high Ib)",
    "v_eval": "Vce (V)",
    "base_low_ma": "Ib low (mA)",
    "base_high_ma": "Ib high (mA)",
    "ic_low_ma": "Ic low (mA)",
    "ic_high_ma": "Ic high (mA)",
    "delta_ic_ma": "Delta Ic (mA)",
    "delta_ib_ma": "Delta Ib (mA)",
    "beta": "Beta",
    "beta_uncertainty": "Uncertainty in Beta",
}


def create_gain_dataframe(gains: List[Dict]) -> pd.DataFrame:
    if not gains:
        return pd.DataFrame(columns=list(GAIN_COLUMNS.values()))
    return pd.DataFrame.from_records(gains).rename(columns=GAIN_COLUMNS)[
        list(GAIN_COLUMNS.values())
    ]


def save_data_to_csv(
    results_df: pd.DataFrame, gains: List[Dict], output_dir: str = "output"
) -> Tuple[str, str]:
    """Save per-curve fit results and the current-gain table.

    Args:
        results_df (pandas.DataFrame): Output from
            ``bjt.analysis.create_results_dataframe``.
        gains (list[dict]): Output from ``bjt.analysis.compute_gains``.
        output_dir (str): Directory where CSV outputs are written.

    Returns:
        tuple[str, str]: Paths to ``fit_results.csv`` and ``current_gain.csv``.

    Raises:
        ValueError: If a reported value has no valid uncertainty.
    """
    os.makedirs(output_dir, exist_ok=True)

    results_path = os.path.join(output_dir, "fit_results.csv")
    gain_path = os.path.join(output_dir, "current_gain.csv")

    results_report = add_formatted_reporting_columns(results_df, REPORTED_PAIRS)
    results_report = add_uncertainty_form_columns(
        results_report, [(COLUMNS.early_voltage, COLUMNS.early_voltage_unc)]
    )

    results_report.to_csv(results_path, index=False)
    create_gain_dataframe(gains).to_csv(gain_path, index=False)

    logging.info("Saved fit results to %s", results_path)
    logging.info("Saved current gain table to %s", gain_path)

    return results_path, gain_path
