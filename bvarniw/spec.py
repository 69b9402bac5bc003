from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import DimensionMismatch, InvalidHyperparameter
from .results import _readonly
from .var import design_matrix, infer_lag_order


@dataclass(frozen=True, slots=True)
class NIWPrior:
    """Normal-Inverse-Wishart (NIW) prior for a VAR(p) with intercept.

    The prior is

        Sigma          ~ InvWishart(psi_prior, df_prior)
        vec(B) | Sigma ~ N(vec(b_prior), kron(Sigma, omega_prior))

    Shapes:

    - ``b_prior`` has shape ``(K, N)`` where ``K = 1 + N * p``
    - ``omega_prior`` has shape ``(K, K)``
    - ``psi_prior`` has shape ``(N, N)``

    ``df_prior`` must exceed ``N - 1`` for the prior to be proper, and
    ``N + 1`` for the prior mean of ``Sigma`` to exist.

    Construction validates shapes and degrees of freedom and stores read-only
    copies of the arrays.
    """
    b_prior: np.ndarray  # (K, N)
    omega_prior: np.ndarray  # (K, K)
    psi_prior: np.ndarray  # (N, N)
    df_prior: float

    def __post_init__(self) -> None:
        b = _readonly(self.b_prior)
        if b.ndim != 2:
            raise DimensionMismatch("b_prior must be a 2D array of shape (K, N)")
        k, n = b.shape
        infer_lag_order(k, n)

        omega = _readonly(self.omega_prior)
        if omega.shape != (k, k):
            raise DimensionMismatch(f"omega_prior must have shape ({k}, {k}), got {omega.shape}")
        psi = _readonly(self.psi_prior)
        if psi.shape != (n, n):
            raise DimensionMismatch(f"psi_prior must have shape ({n}, {n}), got {psi.shape}")

        for name, arr in (("b_prior", b), ("omega_prior", omega), ("psi_prior", psi)):
            if not np.all(np.isfinite(arr)):
                raise InvalidHyperparameter(f"{name} must be finite")

        if isinstance(self.df_prior, bool):
            raise InvalidHyperparameter("df_prior must be a number")
        df = float(self.df_prior)
        if not np.isfinite(df) or df <= n - 1:
            raise InvalidHyperparameter(f"df_prior must be > n - 1 = {n - 1} (got {df})")

        object.__setattr__(self, "b_prior", b)
        object.__setattr__(self, "omega_prior", omega)
        object.__setattr__(self, "psi_prior", psi)
        object.__setattr__(self, "df_prior", df)

    @property
    def k(self) -> int:
        return int(self.b_prior.shape[0])

    @property
    def n(self) -> int:
        return int(self.b_prior.shape[1])

    @property
    def p(self) -> int:
        return infer_lag_order(self.k, self.n)

    @staticmethod
    def default(*, n: int, p: int) -> "NIWPrior":
        """Zero prior mean with relatively weak regularization.

        ``omega_prior = 10 I``, ``psi_prior = I`` and ``df_prior = N + 2``.
        """
        if n < 1:
            raise ValueError("n must be >= 1")
        if p < 1:
            raise ValueError("p must be >= 1")
        k = 1 + n * p
        return NIWPrior(
            b_prior=np.zeros((k, n), dtype=float),
            omega_prior=10.0 * np.eye(k, dtype=float),
            psi_prior=np.eye(n, dtype=float),
            df_prior=float(n + 2),
        )

    @staticmethod
    def diffuse(*, n: int, p: int, scale: float = 1e6, df_prior: float | None = None) -> "NIWPrior":
        """Nearly flat prior on ``B``: ``omega_prior = scale * I``.

        As ``scale`` grows the posterior mean of ``B`` approaches the OLS
        estimate.
        """
        if n < 1:
            raise ValueError("n must be >= 1")
        if p < 1:
            raise ValueError("p must be >= 1")
        if not np.isfinite(scale) or scale <= 0:
            raise InvalidHyperparameter("scale must be finite and > 0")
        k = 1 + n * p
        return NIWPrior(
            b_prior=np.zeros((k, n), dtype=float),
            omega_prior=float(scale) * np.eye(k, dtype=float),
            psi_prior=np.eye(n, dtype=float),
            df_prior=float(n + 2) if df_prior is None else float(df_prior),
        )

    @staticmethod
    def minnesota(
        *,
        y: np.ndarray,
        p: int,
        lambda1: float = 0.1,
        lambda2: float = 0.5,
        lambda3: float = 1.0,
        lambda4: float = 100.0,
        own_lag_means: np.ndarray | list[float] | None = None,
        own_lag_mean: float = 0.0,
        min_sigma2: float = 1e-12,
        df_prior: float | None = None,
    ) -> "NIWPrior":
        """Construct an NIW prior with Minnesota-style shrinkage.

        The prior mean shrinks each equation toward ``own_lag_mean`` on its own
        first lag (1 for a random walk, 0 for white noise) and zero elsewhere.
        ``omega_prior`` is diagonal with lag decay and cross-variable shrinkage
        controlled by ``lambda1..lambda4``; ``psi_prior`` is the diagonal of
        univariate AR(p) residual variances.

        Parameters
        ----------
        y:
            Data used to estimate the scaling variances, shape ``(T, N)``.
        p:
            VAR lag order.
        lambda1:
            Overall tightness.
        lambda2:
            Cross-variable tightness.
        lambda3:
            Lag decay exponent.
        lambda4:
            Intercept looseness relative to ``lambda1``.
        own_lag_means / own_lag_mean:
            Optional prior mean(s) for the own first lag.
        min_sigma2:
            Floor for the estimated variances.
        df_prior:
            Degrees of freedom; defaults to ``N + 2``.
        """
        v = np.asarray(y, dtype=float)
        if v.ndim != 2:
            raise DimensionMismatch("y must be a 2D array of shape (T, N)")
        t, n = v.shape

        if p < 1:
            raise ValueError("p must be >= 1")
        if t <= p:
            raise DimensionMismatch(f"T must be > p (got T={t}, p={p})")

        if lambda1 <= 0:
            raise InvalidHyperparameter("lambda1 must be > 0")
        if lambda2 <= 0:
            raise InvalidHyperparameter("lambda2 must be > 0")
        if lambda3 < 0:
            raise InvalidHyperparameter("lambda3 must be >= 0")
        if lambda4 <= 0:
            raise InvalidHyperparameter("lambda4 must be > 0")

        if own_lag_means is not None and own_lag_mean != 0.0:
            raise ValueError("specify at most one of own_lag_means and own_lag_mean")

        sigma2 = np.empty(n, dtype=float)
        for i in range(n):
            xi, yi = design_matrix(v[:, [i]], p)
            b, *_ = np.linalg.lstsq(xi, yi, rcond=None)
            resid = yi - xi @ b
            denom = max(int(resid.shape[0] - xi.shape[1]), 1)
            s2 = float((resid.T @ resid)[0, 0] / denom)
            sigma2[i] = max(s2, float(min_sigma2))

        k = 1 + n * p
        b0 = np.zeros((k, n), dtype=float)

        if own_lag_means is not None:
            olm = np.asarray(own_lag_means, dtype=float).reshape(-1)
            if olm.shape != (n,):
                raise DimensionMismatch("own_lag_means must have shape (N,)")
            for j in range(n):
                b0[1 + j, j] = float(olm[j])
        elif own_lag_mean != 0.0:
            for j in range(n):
                b0[1 + j, j] = float(own_lag_mean)

        omega0 = np.zeros((k, k), dtype=float)
        omega0[0, 0] = float((lambda1 * lambda4) ** 2)

        if n == 1:
            cross_weight = 1.0
        else:
            cross_weight = float((1.0 + (n - 1) * (lambda2**2)) / n)

        for lag in range(1, p + 1):
            lag_scale = float((lambda1**2) / (lag ** (2.0 * lambda3)))
            for i in range(n):
                idx = 1 + (lag - 1) * n + i
                omega0[idx, idx] = float(lag_scale * cross_weight / sigma2[i])

        return NIWPrior(
            b_prior=b0,
            omega_prior=omega0,
            psi_prior=np.diag(sigma2),
            df_prior=float(n + 2) if df_prior is None else float(df_prior),
        )


@dataclass(frozen=True, slots=True)
class SamplerConfig:
    """Settings for direct Monte Carlo sampling from the NIW posterior.

    Parameters
    ----------
    draws:
        Number of independent ``(B, Sigma)`` draws. Zero is allowed.
    seed:
        Optional seed for :func:`numpy.random.default_rng`.
    """
    draws: int = 1000
    seed: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.draws, (int, np.integer)) or isinstance(self.draws, bool):
            raise ValueError("draws must be an integer")
        if self.draws < 0:
            raise ValueError("draws must be >= 0")
        if self.seed is not None:
            if not isinstance(self.seed, (int, np.integer)) or isinstance(self.seed, bool):
                raise ValueError("seed must be an integer")
            if self.seed < 0:
                raise ValueError("seed must be >= 0")
