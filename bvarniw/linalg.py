from __future__ import annotations

import numpy as np
import scipy.linalg

from .errors import NumericalInstability

RCOND_TOL = 1e-15


def symmetrize(a: np.ndarray) -> np.ndarray:
    x = np.asarray(a, dtype=float)
    if x.ndim != 2 or x.shape[0] != x.shape[1]:
        raise ValueError("a must be a square 2D array")
    return 0.5 * (x + x.T)


def cho_factor_spd(a: np.ndarray, *, name: str = "matrix", rcond_tol: float = RCOND_TOL) -> tuple[np.ndarray, bool]:
    """Cholesky-factor a symmetric positive-definite matrix.

    The input is symmetrized and then equilibrated to unit diagonal,
    ``D^{-1/2} A D^{-1/2}`` with ``D = diag(A)``, so that rescaling a variable
    does not change the verdict. The equilibrated matrix is factored and its
    reciprocal condition number (1-norm) is estimated with LAPACK ``pocon``;
    matrices below ``rcond_tol`` are rejected.

    Returns
    -------
    tuple
        ``(c, lower)`` as accepted by :func:`scipy.linalg.cho_solve`, where
        ``c`` is the lower Cholesky factor of ``a`` itself.

    Raises
    ------
    NumericalInstability
        If ``a`` is not positive-definite or is too ill-conditioned.
    """
    x = symmetrize(a)
    if not np.all(np.isfinite(x)):
        raise NumericalInstability(f"{name} contains non-finite entries")

    diag = np.diag(x)
    if np.any(diag <= 0.0):
        raise NumericalInstability(f"{name} is not positive-definite")

    s = np.sqrt(diag)
    xs = x / np.outer(s, s)
    try:
        cs, _lower = scipy.linalg.cho_factor(xs, lower=True, check_finite=False)
    except np.linalg.LinAlgError as e:
        raise NumericalInstability(f"{name} is not positive-definite") from e

    cs = np.tril(cs)
    if cs.size:
        anorm = float(np.linalg.norm(xs, 1))
        rcond, _info = scipy.linalg.lapack.dpocon(cs, anorm, uplo="L")
        if not np.isfinite(rcond) or rcond < rcond_tol:
            raise NumericalInstability(
                f"{name} is ill-conditioned (reciprocal condition estimate {rcond:.3g} below {rcond_tol:g})"
            )

    # L = D^{1/2} L_s
    c = s[:, None] * cs
    return c, True


def cholesky_lower(a: np.ndarray, *, name: str = "matrix", rcond_tol: float = RCOND_TOL) -> np.ndarray:
    c, _lower = cho_factor_spd(a, name=name, rcond_tol=rcond_tol)
    return np.tril(c)


def cho_solve_spd(factor: tuple[np.ndarray, bool], b: np.ndarray) -> np.ndarray:
    return scipy.linalg.cho_solve(factor, np.asarray(b, dtype=float), check_finite=False)


def solve_spd(a: np.ndarray, b: np.ndarray, *, name: str = "matrix", rcond_tol: float = RCOND_TOL) -> np.ndarray:
    factor = cho_factor_spd(a, name=name, rcond_tol=rcond_tol)
    return cho_solve_spd(factor, b)

