from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from ..errors import DimensionMismatch


@dataclass(frozen=True, slots=True)
class Dataset:
    """A lightweight container for multivariate time series data.

    The library represents a dataset as a matrix ``values`` with shape
    ``(T, N)``, where:

    - ``T`` is the number of time points (observations)
    - ``N`` is the number of variables (series)

    A ``Dataset`` can be passed to :func:`bvarniw.update` wherever a plain
    ``(T, N)`` array is accepted.

    Parameters
    ----------
    time_index:
        Time index for the observations. Can be a :class:`pandas.Index` (e.g. a
        :class:`pandas.DatetimeIndex`) or anything coercible to one.
    variables:
        Variable names of length ``N``.
    values:
        Numeric array of shape ``(T, N)``.
    """
    time_index: pd.Index
    variables: list[str]
    values: np.ndarray

    @staticmethod
    def from_arrays(
        *,
        values: np.ndarray,
        variables: Sequence[str],
        time_index: Iterable[object] | pd.Index | None = None,
    ) -> "Dataset":
        """Construct a :class:`~bvarniw.data.dataset.Dataset` from array-like inputs.

        If ``time_index`` is omitted, a :class:`pandas.RangeIndex` starting at 0
        is used.

        Raises
        ------
        DimensionMismatch
            If ``values`` is not two-dimensional or lengths are inconsistent.
        """
        x = np.asarray(values, dtype=float)
        if x.ndim != 2:
            raise DimensionMismatch("values must be a 2D array of shape (T, N)")

        vars_list = list(variables)
        if len(vars_list) != x.shape[1]:
            raise DimensionMismatch("len(variables) must equal values.shape[1]")

        if time_index is None:
            idx = pd.RangeIndex(start=0, stop=x.shape[0], step=1)
        else:
            idx = time_index if isinstance(time_index, pd.Index) else pd.Index(list(time_index))
            if len(idx) != x.shape[0]:
                raise DimensionMismatch("len(time_index) must equal values.shape[0]")

        return Dataset(time_index=idx, variables=vars_list, values=x)

    @staticmethod
    def from_frame(df: pd.DataFrame, *, variables: Sequence[str] | None = None) -> "Dataset":
        """Construct a dataset from the columns of a DataFrame.

        The frame's index becomes ``time_index``. Rows are kept in their
        existing order; missing values are not dropped.
        """
        cols = list(df.columns) if variables is None else list(variables)
        missing = [c for c in cols if c not in df.columns]
        if missing:
            raise DimensionMismatch(f"variables missing from DataFrame columns: {missing}")
        values = df.loc[:, cols].to_numpy(dtype=float, copy=True)
        return Dataset.from_arrays(values=values, variables=[str(c) for c in cols], time_index=df.index)

    def __post_init__(self) -> None:
        x = np.array(self.values, dtype=float, copy=True)
        if x.ndim != 2:
            raise DimensionMismatch("values must be a 2D array of shape (T, N)")

        if len(self.variables) != x.shape[1]:
            raise DimensionMismatch("len(variables) must equal values.shape[1]")

        if len(self.time_index) != x.shape[0]:
            raise DimensionMismatch("len(time_index) must equal values.shape[0]")

        x.setflags(write=False)
        object.__setattr__(self, "values", x)
        object.__setattr__(self, "variables", list(self.variables))
        if not isinstance(self.time_index, pd.Index):
            object.__setattr__(self, "time_index", pd.Index(self.time_index))

    @property
    def T(self) -> int:
        """Number of time points (rows) in the dataset."""
        return int(self.values.shape[0])

    @property
    def N(self) -> int:
        """Number of variables (columns) in the dataset."""
        return int(self.values.shape[1])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(np.array(self.values), index=self.time_index, columns=list(self.variables))
