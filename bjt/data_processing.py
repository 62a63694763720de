"""
Handles loading of characteristic tables and domain selection.
"""

# Table format: one sample per line, whitespace separated, columns
# ``x y ex ey`` (V_CE, I_C and their one-sigma uncertainties). Blank lines
# and ``#`` comments are ignored; columns beyond the fourth are ignored.

from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass, field
from typing import IO, Iterator, Union

import numpy as np
import pandas as pd

from .errors import MalformedRecordError

COLUMNS = ("x", "y", "ex", "ey")
MALFORMED_POLICIES = ("raise", "skip")
# ASCII unit separator; never present in a numeric table.
_FIELD_SEP = "\x1f"

Source = Union[str, os.PathLike, IO[str]]


@dataclass(frozen=True)
class Sample:
    x: float
    y: float
    ex: float = 0.0
    ey: float = 0.0


def _readonly(values) -> np.ndarray:
    arr = np.array(values, dtype=float).reshape(-1)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Dataset:
    """Immutable, column-wise collection of measured samples.

    Attributes:
        x: Independent variable (V_CE in V for output curves).
        y: Dependent variable (I_C in mA).
        ex: One-sigma uncertainty on ``x``.
        ey: One-sigma uncertainty on ``y``.
        label: Free-form name used in logs, legends and reports.
    """

    x: np.ndarray
    y: np.ndarray
    ex: np.ndarray
    ey: np.ndarray
    label: str = field(default="")

    def __post_init__(self):
        cols = {name: _readonly(getattr(self, name)) for name in COLUMNS}
        lengths = {len(v) for v in cols.values()}
        if len(lengths) > 1:
            raise ValueError(
                f"Dataset columns must have equal length, got {sorted(lengths)}"
            )
        if not (np.isfinite(cols["x"]).all() and np.isfinite(cols["y"]).all()):
            raise ValueError(f"Dataset '{self.label}' has non-finite x or y values")
        for name in ("ex", "ey"):
            if not (np.isfinite(cols[name]) & (cols[name] >= 0)).all():
                raise ValueError(
                    f"Dataset '{self.label}' has negative or non-finite {name} values"
                )
        for name, arr in cols.items():
            object.__setattr__(self, name, arr)

    def __len__(self) -> int:
        return int(len(self.x))

    def __iter__(self) -> Iterator[Sample]:
        for x, y, ex, ey in zip(self.x, self.y, self.ex, self.ey):
            yield Sample(float(x), float(y), float(ex), float(ey))

    @classmethod
    def from_samples(cls, samples, label: str = "") -> "Dataset":
        samples = list(samples)
        return cls(
            x=[s.x for s in samples],
            y=[s.y for s in samples],
            ex=[s.ex for s in samples],
            ey=[s.ey for s in samples],
            label=label,
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame, label: str = "") -> "Dataset":
        if df.empty:
            return cls(x=[], y=[], ex=[], ey=[], label=label)
        return cls(*(df[c].to_numpy(dtype=float) for c in COLUMNS), label=label)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({c: np.array(getattr(self, c)) for c in COLUMNS})

    def swapped(self) -> "Dataset":
        """Return the dataset with x and y (and their errors) exchanged."""
        return Dataset(x=self.y, y=self.x, ex=self.ey, ey=self.ex, label=self.label)

    def _take(self, mask: np.ndarray) -> "Dataset":
        return Dataset(
            x=self.x[mask],
            y=self.y[mask],
            ex=self.ex[mask],
            ey=self.ey[mask],
            label=self.label,
        )


def _read_lines(source: Source) -> pd.Series:
    """Read the raw table as one string per line, indexed from line 1."""
    try:
        # One field per line; the whitespace split happens in pandas below.
        raw = pd.read_csv(
            source,
            sep=_FIELD_SEP,
            header=None,
            names=["line"],
            dtype=str,
            na_filter=False,
            skip_blank_lines=False,
            quoting=csv.QUOTE_NONE,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError:
        return pd.Series([], dtype=object)
    lines = raw["line"].fillna("").astype(str).str.strip()
    lines.index = lines.index + 1
    return lines


def _tokenize(lines: pd.Series) -> pd.DataFrame:
    """Coerce the first four whitespace-separated fields of each line."""
    tokens = lines.str.split(expand=True).reindex(columns=range(len(COLUMNS)))
    tokens.columns = list(COLUMNS)
    return tokens.apply(pd.to_numeric, errors="coerce")


def _valid_rows(values: pd.DataFrame) -> pd.Series:
    arr = values.to_numpy(dtype=float)
    ok = np.isfinite(arr).all(axis=1) & (arr[:, 2] >= 0) & (arr[:, 3] >= 0)
    return pd.Series(ok, index=values.index)


def load(source: Source, on_malformed: str = "raise", label: str | None = None) -> Dataset:
    """Load a four-column characteristic table.

    Args:
        source: Path to the table, or an open text stream.
        on_malformed: ``"raise"`` to fail on the first malformed row, or
            ``"skip"`` to drop it with a logged warning.
        label: Dataset label. Defaults to the file stem for path sources.

    Returns:
        Dataset: Parsed samples in file order. An empty source (or one whose
        rows were all skipped) gives a dataset of length zero.

    Raises:
        MalformedRecordError: On a row with fewer than four finite numbers
            (or a negative uncertainty) when ``on_malformed="raise"``.
        ValueError: If ``on_malformed`` is not a known policy.
    """
    if on_malformed not in MALFORMED_POLICIES:
        raise ValueError(
            f"on_malformed must be one of {MALFORMED_POLICIES}, got {on_malformed!r}"
        )
    if label is None:
        if isinstance(source, (str, os.PathLike)):
            label = os.path.splitext(os.path.basename(os.fspath(source)))[0]
        else:
            label = ""

    lines = _read_lines(source)
    if lines.empty:
        return Dataset.from_frame(pd.DataFrame(columns=list(COLUMNS)), label=label)

    ignored = lines.eq("") | lines.str.startswith("#")
    values = _tokenize(lines)
    malformed = ~ignored & ~_valid_rows(values)

    bad_lines = lines[malformed]
    if not bad_lines.empty and on_malformed == "raise":
        line_number = int(bad_lines.index[0])
        line = bad_lines.iloc[0]
        raise MalformedRecordError(
            f"Line {line_number} of '{label}' is not four finite numbers "
            f"with non-negative errors: {line!r}",
            line_number=line_number,
            line=line,
        )
    for line_number, line in bad_lines.items():
        logging.warning(
            "Skipping malformed line %d in '%s': %r", int(line_number), label, line
        )
    if not bad_lines.empty:
        logging.warning("Skipped %d malformed line(s) in '%s'", len(bad_lines), label)

    df = values[~ignored & ~malformed].reset_index(drop=True)
    return Dataset.from_frame(df, label=label)


def filter_range(dataset: Dataset, low_x: float, high_x: float) -> Dataset:
    """Keep samples with ``low_x <= x <= high_x``, preserving order."""
    if low_x > high_x:
        raise ValueError(f"Invalid domain: low_x={low_x} > high_x={high_x}")
    mask = (dataset.x >= low_x) & (dataset.x <= high_x)
    return dataset._take(mask)
