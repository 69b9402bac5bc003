from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import DimensionMismatch, InvalidHyperparameter
from .var import infer_lag_order


def _readonly(a: np.ndarray) -> np.ndarray:
    x = np.array(a, dtype=float, copy=True)
    x.setflags(write=False)
    return x


@dataclass(frozen=True, slots=True)
class PosteriorNIW:
    """NIW posterior hyperparameters of a BVAR.

    Produced once by :func:`bvarniw.update` and consumed by
    :func:`bvarniw.sample`. All arrays are read-only copies.

    Attributes
    ----------
    b_post:
        Posterior mean of the coefficient matrix ``B`` with shape ``(K, N)``.
    omega_post:
        Posterior row covariance of ``B`` with shape ``(K, K)``.
    psi_post:
        Posterior inverse-Wishart scale with shape ``(N, N)``.
    df_post:
        Posterior inverse-Wishart degrees of freedom.
    b_mle, sigma_mle:
        OLS coefficient estimate ``(K, N)`` and residual sum of squares
        ``(N, N)`` on the trimmed sample, when available.
    """
    b_post: np.ndarray  # (K, N)
    omega_post: np.ndarray  # (K, K)
    psi_post: np.ndarray  # (N, N)
    df_post: float
    b_mle: np.ndarray | None = None  # (K, N)
    sigma_mle: np.ndarray | None = None  # (N, N)

    def __post_init__(self) -> None:
        b = _readonly(self.b_post)
        if b.ndim != 2:
            raise DimensionMismatch("b_post must be a 2D array of shape (K, N)")
        k, n = b.shape
        infer_lag_order(k, n)

        omega = _readonly(self.omega_post)
        if omega.shape != (k, k):
            raise DimensionMismatch(f"omega_post must have shape ({k}, {k}), got {omega.shape}")
        psi = _readonly(self.psi_post)
        if psi.shape != (n, n):
            raise DimensionMismatch(f"psi_post must have shape ({n}, {n}), got {psi.shape}")

        object.__setattr__(self, "b_post", b)
        object.__setattr__(self, "omega_post", omega)
        object.__setattr__(self, "psi_post", psi)
        object.__setattr__(self, "df_post", float(self.df_post))

        if self.b_mle is not None:
            b_mle = _readonly(self.b_mle)
            if b_mle.shape != (k, n):
                raise DimensionMismatch(f"b_mle must have shape ({k}, {n}), got {b_mle.shape}")
            object.__setattr__(self, "b_mle", b_mle)
        if self.sigma_mle is not None:
            sigma_mle = _readonly(self.sigma_mle)
            if sigma_mle.shape != (n, n):
                raise DimensionMismatch(f"sigma_mle must have shape ({n}, {n}), got {sigma_mle.shape}")
            object.__setattr__(self, "sigma_mle", sigma_mle)

    @property
    def k(self) -> int:
        return int(self.b_post.shape[0])

    @property
    def n(self) -> int:
        return int(self.b_post.shape[1])

    @property
    def p(self) -> int:
        return infer_lag_order(self.k, self.n)

    @property
    def sigma_mean(self) -> np.ndarray:
        """Posterior mean of ``Sigma``, ``psi_post / (df_post - N - 1)``."""
        denom = self.df_post - self.n - 1
        if denom <= 0:
            raise InvalidHyperparameter(
                f"posterior mean of Sigma requires df_post > N + 1 (df_post={self.df_post}, N={self.n})"
            )
        return self.psi_post / denom


@dataclass(frozen=True, slots=True)
class PosteriorDraws:
    """Index-aligned posterior draws of ``(B, Sigma)``.

    ``b_draws[i]`` was drawn conditionally on ``sigma_draws[i]``. With zero draws
    the arrays have shapes ``(0, K, N)`` and ``(0, N, N)``.
    """
    b_draws: np.ndarray  # (D, K, N)
    sigma_draws: np.ndarray  # (D, N, N)

    def __post_init__(self) -> None:
        b = _readonly(self.b_draws)
        s = _readonly(self.sigma_draws)
        if b.ndim != 3 or s.ndim != 3:
            raise DimensionMismatch("b_draws and sigma_draws must be 3D arrays")
        if b.shape[0] != s.shape[0]:
            raise DimensionMismatch("b_draws and sigma_draws must hold the same number of draws")
        if s.shape[1:] != (b.shape[2], b.shape[2]):
            raise DimensionMismatch("sigma_draws must have shape (D, N, N) matching b_draws (D, K, N)")
        object.__setattr__(self, "b_draws", b)
        object.__setattr__(self, "sigma_draws", s)

    @property
    def num_draws(self) -> int:
        return int(self.b_draws.shape[0])

    def __len__(self) -> int:
        return self.num_draws


PosteriorDrawSet = PosteriorDraws
