"""Run configuration for the output-characteristic analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .units import US_PER_MS, ma_to_ua, ua_to_ma


@dataclass(frozen=True)
class DatasetSpec:
    """One measured output curve.

    Attributes:
        path: Four-column table ``V_CE I_C sigma_V sigma_I`` (V, mA).
        base_current_ma: Base current I_B of the curve in mA.
        label: Legend/report label; defaults to ``"Ib=<value> µA"``.
    """

    path: str
    base_current_ma: float
    label: str = ""

    @property
    def display_label(self) -> str:
        if self.label:
            return self.label
        return f"Ib={ma_to_ua(self.base_current_ma):g} µA"


@dataclass(frozen=True)
class AnalysisConfig:
    """Fit domain and processing options.

    Attributes:
        fit_min: Lower V_CE bound of the active-region fit (V).
        fit_max: Upper V_CE bound of the active-region fit (V).
        v_eval: V_CE where the current gain is evaluated (V).
        on_malformed: ``"raise"`` or ``"skip"`` for unparseable table rows.
        absolute_sigma: Report absolute (unscaled) parameter errors.
        conductance_scale: Factor from mA/V to the reported conductance unit.
        conductance_unit: Unit label for the output conductance.
        output_dir: Directory for the results table and figures.
    """

    fit_min: float = 1.0
    fit_max: float = 3.5
    v_eval: float = 3.0
    on_malformed: str = "raise"
    absolute_sigma: bool = False
    conductance_scale: float = US_PER_MS
    conductance_unit: str = "µS"
    output_dir: str = "output"

    def __post_init__(self):
        if self.fit_min > self.fit_max:
            raise ValueError(
                f"Fit domain is inverted: fit_min={self.fit_min} > fit_max={self.fit_max}"
            )
        if self.on_malformed not in ("raise", "skip"):
            raise ValueError(f"Unknown malformed-row policy {self.on_malformed!r}")

    @property
    def fit_range(self) -> Tuple[float, float]:
        return (self.fit_min, self.fit_max)


DEFAULT_DATASETS: Tuple[DatasetSpec, ...] = (
    DatasetSpec("data/50.txt", ua_to_ma(50.0)),
    DatasetSpec("data/100.txt", ua_to_ma(100.0)),
)


def parse_dataset_option(text: str) -> DatasetSpec:
    """Parse a ``<base current µA>:<path>`` command-line value.

    Raises:
        ValueError: If the value has no ``:`` separator or the current is not
            a number.
    """
    current, sep, path = text.partition(":")
    if not sep or not path:
        raise ValueError(f"Expected '<base current uA>:<path>', got {text!r}")
    return DatasetSpec(path=path, base_current_ma=ua_to_ma(float(current)))
