from __future__ import annotations

import numpy as np

from .errors import DimensionMismatch


def infer_lag_order(k: int, n: int) -> int:
    """Recover ``p`` from ``k = n * p + 1``.

    Raises
    ------
    DimensionMismatch
        If ``k`` does not decompose as ``n * p + 1`` for an integer ``p >= 1``.
    """
    k = int(k)
    n = int(n)
    if n < 1:
        raise DimensionMismatch("n must be >= 1")
    p = int(round((k - 1) / n))
    if p < 1 or n * p + 1 != k:
        raise DimensionMismatch(f"k={k} rows cannot be written as n * p + 1 with n={n} and integer p >= 1")
    return p


def lag_matrix(y: np.ndarray, p: int) -> np.ndarray:
    v = np.asarray(y, dtype=float)
    if v.ndim != 2:
        raise DimensionMismatch("y must be a 2D array of shape (T, N)")
    if p < 1:
        raise ValueError("p must be >= 1")

    t, n = v.shape
    if t <= p:
        raise DimensionMismatch(f"T must be > p (got T={t}, p={p})")

    xlags = [v[p - lag : t - lag, :] for lag in range(1, p + 1)]
    return np.concatenate(xlags, axis=1)


def design_matrix(y: np.ndarray, p: int) -> tuple[np.ndarray, np.ndarray]:
    """Build the VAR(p) regressor matrix and the aligned targets.

    Row ``t`` of ``x`` is ``[1, y'_{t-1}, ..., y'_{t-p}]`` for ``t = p..T-1``.

    Returns
    -------
    tuple
        ``x`` with shape ``(T - p, 1 + N * p)`` and ``y_trimmed`` with shape
        ``(T - p, N)``.
    """
    v = np.asarray(y, dtype=float)
    if v.ndim != 2:
        raise DimensionMismatch("y must be a 2D array of shape (T, N)")

    t, _n = v.shape
    xl = lag_matrix(v, p)
    yt = v[p:t, :]

    x = np.concatenate([np.ones((xl.shape[0], 1), dtype=float), xl], axis=1)
    return x, yt


def vec(b: np.ndarray) -> np.ndarray:
    """Column-major flattening: stack the columns of ``b`` end to end."""
    m = np.asarray(b, dtype=float)
    if m.ndim != 2:
        raise DimensionMismatch("b must be a 2D array")
    return m.reshape(-1, order="F")


def unvec(v: np.ndarray, k: int, n: int) -> np.ndarray:
    """Inverse of :func:`vec`."""
    x = np.asarray(v, dtype=float)
    if x.ndim != 1 or x.shape[0] != int(k) * int(n):
        raise DimensionMismatch(f"v must be a 1D array of length k * n = {int(k) * int(n)}")
    return x.reshape((int(k), int(n)), order="F")

