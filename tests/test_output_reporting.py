"""Tests for export-layer uncertainty formatting behavior."""

import numpy as np
import pandas as pd
import pytest

from bjt.output import GAIN_COLUMNS, create_gain_dataframe, save_data_to_csv
from bjt.schema import COLUMNS


def _results_df(early_unc):
    return pd.DataFrame(
        {
            COLUMNS.curve: ["Ib=50 µA", "Ib=100 µA"],
            COLUMNS.a: [5.0, 10.0],
            COLUMNS.sigma_a: [0.02, 0.03],
            COLUMNS.b: [0.1, 0.2],
            COLUMNS.sigma_b: [0.004, 0.005],
            COLUMNS.early_voltage: [-50.0, -50.0],
            COLUMNS.early_voltage_unc: early_unc,
            COLUMNS.early_voltage_swapped: [-49.8, -50.1],
            COLUMNS.early_voltage_swapped_unc: [0.6, 0.5],
            COLUMNS.conductance: [100.0, 200.0],
            COLUMNS.conductance_unc: [3.0, 4.0],
        }
    )


def _gains():
    return [
        {
            "low": "Ib=50 µA",
            "high": "Ib=100 µA",
            "v_eval": 3.0,
            "base_low_ma": 0.05,
            "base_high_ma": 0.1,
            "ic_low_ma": 5.3,
            "ic_high_ma": 10.6,
            "delta_ic_ma": 5.3,
            "delta_ib_ma": 0.05,
            "beta": 106.0,
            "beta_uncertainty": 0.8,
        }
    ]


def test_save_data_to_csv_writes_both_tables(tmp_path):
    results_path, gain_path = save_data_to_csv(
        _results_df([2.1, 1.4]), _gains(), output_dir=str(tmp_path / "out")
    )

    saved = pd.read_csv(results_path)
    assert f"{COLUMNS.early_voltage} (reported)" in saved.columns
    assert saved.loc[0, f"{COLUMNS.early_voltage_unc} (reported)"] == 2
    assert saved.loc[1, f"{COLUMNS.early_voltage_unc} (reported)"] == pytest.approx(1.4)
    assert f"{COLUMNS.early_voltage} percentage uncertainty (%)" in saved.columns

    gain_table = pd.read_csv(gain_path)
    assert list(gain_table.columns) == list(GAIN_COLUMNS.values())
    assert gain_table.loc[0, "Beta"] == pytest.approx(106.0)


def test_save_data_to_csv_fails_when_uncertainty_missing(tmp_path):
    with pytest.raises(ValueError, match="Uncertainty metadata missing/invalid"):
        save_data_to_csv(_results_df([2.1, None]), [], output_dir=str(tmp_path))


def test_missing_values_do_not_need_uncertainty(tmp_path):
    df = _results_df([2.1, np.nan])
    df.loc[1, COLUMNS.early_voltage] = np.nan
    results_path, _ = save_data_to_csv(df, [], output_dir=str(tmp_path))
    assert pd.read_csv(results_path).shape[0] == 2


def test_empty_gain_table_keeps_header():
    df = create_gain_dataframe([])
    assert df.empty
    assert list(df.columns) == list(GAIN_COLUMNS.values())
