from __future__ import annotations

import numpy as np
import scipy.stats

from .linalg import symmetrize


def make_rng(
    seed: int | None = None,
    *,
    rng: np.random.Generator | None = None,
) -> np.random.Generator:
    if seed is not None and rng is not None:
        raise ValueError("pass at most one of seed and rng")
    if rng is not None:
        if not isinstance(rng, np.random.Generator):
            raise ValueError("rng must be a numpy.random.Generator")
        return rng
    if seed is not None:
        if not isinstance(seed, (int, np.integer)) or isinstance(seed, bool):
            raise ValueError("seed must be an integer")
        if int(seed) < 0:
            raise ValueError("seed must be >= 0")
        return np.random.default_rng(int(seed))
    return np.random.default_rng()


def invwishart_dist(*, scale: np.ndarray, df: float):
    """Frozen ``scipy.stats.invwishart`` for ``InvWishart(scale, df)``.

    Uses the SciPy parameterization, under which ``E[Sigma] = scale / (df - N - 1)``
    for ``df > N + 1``. Build it once and pass it to :func:`inverse_wishart` for
    every draw.
    """
    s = np.asarray(scale, dtype=float)
    return scipy.stats.invwishart(df=float(df), scale=s)


def inverse_wishart(iw, *, rng: np.random.Generator) -> np.ndarray:
    """Draw one ``(N, N)`` matrix from a frozen inverse-Wishart ``iw``.

    The result is symmetrized to remove round-off asymmetry.
    """
    sigma = iw.rvs(random_state=rng)
    sigma = np.atleast_2d(np.asarray(sigma, dtype=float))
    return symmetrize(sigma)


def matrix_normal(
    *,
    mean: np.ndarray,
    row_chol: np.ndarray,
    col_chol: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    """Draw ``B ~ MN(mean, U, V)`` given lower Cholesky factors of ``U`` and ``V``.

    Equivalent to ``vec(B) ~ N(vec(mean), kron(V, U))`` with column-major ``vec``.
    The Kronecker covariance is never formed.
    """
    m = np.asarray(mean, dtype=float)
    k, n = m.shape
    z = rng.standard_normal((k, n))
    return m + row_chol @ z @ col_chol.T
