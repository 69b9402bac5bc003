from __future__ import annotations

import numpy as np

from .bvar import posterior_niw, sample_posterior_niw
from .data.dataset import Dataset
from .errors import DimensionMismatch
from .results import PosteriorDraws, PosteriorNIW
from .rng import make_rng
from .spec import NIWPrior


def _values(y: np.ndarray | Dataset) -> np.ndarray:
    if isinstance(y, Dataset):
        return y.values
    v = np.asarray(y, dtype=float)
    if v.ndim != 2:
        raise DimensionMismatch("y must be a 2D array of shape (T, N)")
    return v


def update(
    y: np.ndarray | Dataset,
    b_prior: np.ndarray | None = None,
    omega_prior: np.ndarray | None = None,
    psi_prior: np.ndarray | None = None,
    df_prior: float | None = None,
    *,
    prior: NIWPrior | None = None,
) -> PosteriorNIW:
    """Update an NIW prior with data and return the posterior hyperparameters.

    The VAR has ``N`` variables and ``p`` lags,

        y_t = C + B_1 y_{t-1} + ... + B_p y_{t-p} + e_t,   e_t ~ N(0, Sigma),

    with coefficients collected in ``B = [C, B_1, ..., B_p]'`` of shape
    ``(K, N)``, ``K = N * p + 1``. The lag order is inferred from ``K``.

    Parameters
    ----------
    y:
        Data with shape ``(T, N)``, or a :class:`~bvarniw.data.dataset.Dataset`.
    b_prior, omega_prior, psi_prior, df_prior:
        Prior blocks: prior mean of ``B`` ``(K, N)``, row covariance ``(K, K)``,
        inverse-Wishart scale ``(N, N)`` and degrees of freedom (``> N - 1``).
    prior:
        Alternatively, a ready-made :class:`~bvarniw.spec.NIWPrior`. Mutually
        exclusive with the individual blocks.

    Returns
    -------
    PosteriorNIW
        Posterior hyperparameters. ``df_post`` equals ``df_prior + T`` with the
        untrimmed ``T``.

    Raises
    ------
    DimensionMismatch
        If the shapes of ``y`` and the prior blocks are inconsistent.
    InvalidHyperparameter
        If ``df_prior <= N - 1`` or a prior block is not finite.
    NumericalInstability
        If a matrix that must be positive-definite cannot be factored.
    """
    v = _values(y)
    blocks = (b_prior, omega_prior, psi_prior, df_prior)

    if prior is None:
        if any(b is None for b in blocks):
            raise ValueError("pass either prior=NIWPrior(...) or all of b_prior, omega_prior, psi_prior, df_prior")
        b0 = np.asarray(b_prior, dtype=float)
        if b0.ndim != 2 or b0.shape[1] != v.shape[1]:
            raise DimensionMismatch(f"b_prior must have shape (K, {v.shape[1]}), got {b0.shape}")
        prior = NIWPrior(b_prior=b0, omega_prior=omega_prior, psi_prior=psi_prior, df_prior=df_prior)
    elif any(b is not None for b in blocks):
        raise ValueError("pass either prior=NIWPrior(...) or the individual prior blocks, not both")

    return posterior_niw(v, prior)


def sample(
    posterior: PosteriorNIW,
    num_draws: int,
    rng_seed: int | None = None,
    *,
    rng: np.random.Generator | None = None,
) -> PosteriorDraws:
    """Draw ``(B, Sigma)`` pairs from the NIW posterior.

    Parameters
    ----------
    posterior:
        Result of :func:`update`.
    num_draws:
        Number of draws, ``>= 0``. Zero returns empty arrays with shapes
        ``(0, K, N)`` and ``(0, N, N)``.
    rng_seed:
        Optional seed. Equal seeds give identical draws.
    rng:
        Optional NumPy generator, used instead of ``rng_seed``.

    Raises
    ------
    InvalidHyperparameter
        If ``df_post <= N - 1`` or the posterior scale matrices are not
        positive-definite.
    """
    gen = make_rng(rng_seed, rng=rng)
    return sample_posterior_niw(posterior, num_draws, rng=gen)
