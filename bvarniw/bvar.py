from __future__ import annotations

import numpy as np

from .errors import DimensionMismatch, InvalidHyperparameter, NumericalInstability
from .linalg import cho_factor_spd, cho_solve_spd, cholesky_lower, solve_spd, symmetrize
from .results import PosteriorDraws, PosteriorNIW
from .rng import inverse_wishart, invwishart_dist, matrix_normal
from .spec import NIWPrior
from .var import design_matrix


def _check_data(y: np.ndarray, prior: NIWPrior) -> np.ndarray:
    v = np.asarray(y, dtype=float)
    if v.ndim != 2:
        raise DimensionMismatch("y must be a 2D array of shape (T, N)")

    t, n = v.shape
    if n != prior.n:
        raise DimensionMismatch(f"b_prior must have N={n} columns to match y, got {prior.n}")
    if t <= prior.p:
        raise DimensionMismatch(f"T must be > p (got T={t}, p={prior.p})")
    return v


def ols_estimate(y: np.ndarray, p: int) -> tuple[np.ndarray, np.ndarray]:
    """Least-squares VAR(p) estimate on the trimmed sample.

    Returns:
        b_mle: (K, N) coefficient estimate
        sigma_mle: (N, N) residual sum of squares (not divided by T)
    """
    x, yt = design_matrix(y, p)
    xtx_f = cho_factor_spd(x.T @ x, name="X'X")
    b_mle = cho_solve_spd(xtx_f, x.T @ yt)
    resid = yt - x @ b_mle
    return b_mle, symmetrize(resid.T @ resid)


def posterior_niw(y: np.ndarray, prior: NIWPrior) -> PosteriorNIW:
    """Compute NIW posterior hyperparameters for a VAR(p) with intercept.

    Model:
        Y = X B + E,  rows of E ~ N(0, Sigma)
        vec(B) | Sigma ~ N(vec(B0), kron(Sigma, Omega0))
        Sigma ~ InvWishart(Psi0, d0)

    Posterior:
        Omega_n = (X'X + Omega0^-1)^-1
        B_n     = Omega_n (X'Y + Omega0^-1 B0)
        Psi_n   = Psi0 + S + (B0 - B_hat)' (Omega0 + (X'X)^-1)^-1 (B0 - B_hat)
        d_n     = d0 + T

    where ``B_hat`` is the OLS estimate and ``S`` its residual sum of squares.
    ``T`` is the length of the untrimmed sample.

    Every inverse goes through a Cholesky factorization; each SPD matrix is
    factored once and the factor reused.

    Raises
    ------
    DimensionMismatch
        If ``y`` does not match the prior shapes or ``T <= p``.
    NumericalInstability
        If ``X'X``, ``omega_prior`` or a derived matrix is singular or
        ill-conditioned.
    """
    v = _check_data(y, prior)
    t = v.shape[0]
    k = prior.k
    eye_k = np.eye(k, dtype=float)

    x, yt = design_matrix(v, prior.p)

    xtx = symmetrize(x.T @ x)
    xty = x.T @ yt
    xtx_f = cho_factor_spd(xtx, name="X'X")
    inv_xtx = symmetrize(cho_solve_spd(xtx_f, eye_k))

    b_mle = cho_solve_spd(xtx_f, xty)
    resid = yt - x @ b_mle
    sigma_mle = symmetrize(resid.T @ resid)

    omega0_f = cho_factor_spd(prior.omega_prior, name="omega_prior")
    inv_omega0 = symmetrize(cho_solve_spd(omega0_f, eye_k))

    prec_f = cho_factor_spd(xtx + inv_omega0, name="X'X + inv(omega_prior)")
    omega_post = symmetrize(cho_solve_spd(prec_f, eye_k))
    b_post = cho_solve_spd(prec_f, xty + cho_solve_spd(omega0_f, prior.b_prior))

    d = prior.b_prior - b_mle
    psi_post = prior.psi_prior + sigma_mle + d.T @ solve_spd(
        prior.omega_prior + inv_xtx, d, name="omega_prior + inv(X'X)"
    )
    psi_post = symmetrize(psi_post)

    return PosteriorNIW(
        b_post=b_post,
        omega_post=omega_post,
        psi_post=psi_post,
        df_post=prior.df_prior + t,
        b_mle=b_mle,
        sigma_mle=sigma_mle,
    )


def _check_posterior(posterior: PosteriorNIW) -> np.ndarray:
    n = posterior.n
    df = posterior.df_post
    if not np.isfinite(df) or df <= n - 1:
        raise InvalidHyperparameter(f"df_post must be > n - 1 = {n - 1} for inverse-Wishart sampling (got {df})")

    try:
        cho_factor_spd(posterior.psi_post, name="psi_post")
        l_omega = cholesky_lower(posterior.omega_post, name="omega_post")
    except NumericalInstability as e:
        raise InvalidHyperparameter(f"posterior scale matrices unusable for sampling: {e}") from e
    return l_omega


def sample_posterior_niw(
    posterior: PosteriorNIW,
    draws: int,
    *,
    rng: np.random.Generator,
) -> PosteriorDraws:
    """Sample ``(B, Sigma)`` from a matrix-normal inverse-Wishart posterior.

    Each draw takes ``Sigma ~ InvWishart(psi_post, df_post)`` and then
    ``B | Sigma ~ MN(b_post, omega_post, Sigma)``, i.e.
    ``vec(B) ~ N(vec(b_post), kron(Sigma, omega_post))``. Both variates come
    from ``rng`` in that order, so a fixed seed reproduces the draws.

    Returns:
        PosteriorDraws with b_draws (D, K, N) and sigma_draws (D, N, N)
    """
    if not isinstance(draws, (int, np.integer)) or isinstance(draws, bool):
        raise ValueError("draws must be an integer")
    if draws < 0:
        raise ValueError("draws must be >= 0")
    draws = int(draws)

    l_omega = _check_posterior(posterior)
    k, n = posterior.k, posterior.n

    b_draws = np.empty((draws, k, n), dtype=float)
    sigma_draws = np.empty((draws, n, n), dtype=float)

    iw = invwishart_dist(scale=posterior.psi_post, df=posterior.df_post)
    for d in range(draws):
        sigma = inverse_wishart(iw, rng=rng)
        l_sigma = cholesky_lower(sigma, name="Sigma draw")
        b_draws[d] = matrix_normal(mean=posterior.b_post, row_chol=l_omega, col_chol=l_sigma, rng=rng)
        sigma_draws[d] = sigma

    return PosteriorDraws(b_draws=b_draws, sigma_draws=sigma_draws)
