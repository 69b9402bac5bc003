import numpy as np
import pytest
import scipy.stats

from bvarniw import NIWPrior, PosteriorNIW, sample, update
from bvarniw.errors import InvalidHyperparameter
from bvarniw.var import vec


def _posterior() -> PosteriorNIW:
    return PosteriorNIW(
        b_post=np.array([[0.1, -0.2], [0.5, 0.1], [0.0, 0.4]]),
        omega_post=np.array([[0.20, 0.02, 0.00], [0.02, 0.10, 0.01], [0.00, 0.01, 0.05]]),
        psi_post=np.array([[2.0, 0.5], [0.5, 1.0]]),
        df_post=10.0,
    )


def _simulate_var1(*, t: int, beta: np.ndarray, sigma: np.ndarray, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    n = sigma.shape[0]
    y = np.zeros((t, n), dtype=float)
    for i in range(1, t):
        x = np.concatenate([np.array([1.0]), y[i - 1]])
        y[i] = x @ beta + rng.multivariate_normal(mean=np.zeros(n), cov=sigma)
    return y


def test_zero_draws_returns_empty_arrays_with_shapes() -> None:
    draws = sample(_posterior(), 0, rng_seed=1)
    assert draws.b_draws.shape == (0, 3, 2)
    assert draws.sigma_draws.shape == (0, 2, 2)
    assert draws.num_draws == 0
    assert len(draws) == 0


def test_draw_shapes_and_covariance_draws_are_positive_definite() -> None:
    draws = sample(_posterior(), 50, rng_seed=2)
    assert draws.b_draws.shape == (50, 3, 2)
    assert draws.sigma_draws.shape == (50, 2, 2)
    for s in draws.sigma_draws:
        assert np.array_equal(s, s.T)
        assert np.all(np.linalg.eigvalsh(s) > 0)


def test_same_seed_reproduces_draws() -> None:
    post = _posterior()
    a = sample(post, 20, rng_seed=123)
    b = sample(post, 20, rng_seed=123)
    c = sample(post, 20, rng_seed=124)

    assert np.array_equal(a.b_draws, b.b_draws)
    assert np.array_equal(a.sigma_draws, b.sigma_draws)
    assert not np.allclose(a.sigma_draws, c.sigma_draws)


def test_generator_argument_matches_seed() -> None:
    post = _posterior()
    a = sample(post, 10, rng_seed=7)
    b = sample(post, 10, rng=np.random.default_rng(7))
    assert np.array_equal(a.b_draws, b.b_draws)

    with pytest.raises(ValueError):
        sample(post, 10, rng_seed=7, rng=np.random.default_rng(7))


def test_inverse_wishart_is_built_once_per_call(monkeypatch: pytest.MonkeyPatch) -> None:
    built: list[float] = []
    invwishart = scipy.stats.invwishart

    def counting_invwishart(*args, **kwargs):
        built.append(kwargs.get("df", float("nan")))
        return invwishart(*args, **kwargs)

    monkeypatch.setattr(scipy.stats, "invwishart", counting_invwishart)

    post = _posterior()
    draws = sample(post, 25, rng_seed=4)

    assert built == [post.df_post]

    rng = np.random.default_rng(4)
    iw = invwishart(df=post.df_post, scale=post.psi_post)
    l_omega = np.linalg.cholesky(post.omega_post)
    for d in range(25):
        sigma = iw.rvs(random_state=rng)
        sigma = 0.5 * (sigma + sigma.T)
        z = rng.standard_normal((3, 2))
        b = post.b_post + l_omega @ z @ np.linalg.cholesky(sigma).T
        assert np.allclose(draws.sigma_draws[d], sigma)
        assert np.allclose(draws.b_draws[d], b)


@pytest.mark.parametrize("num_draws", [-1, 2.5, True])
def test_invalid_draw_count_raises(num_draws: object) -> None:
    with pytest.raises(ValueError):
        sample(_posterior(), num_draws, rng_seed=1)  # type: ignore[arg-type]


def test_insufficient_df_post_raises_even_for_zero_draws() -> None:
    base = _posterior()
    post = PosteriorNIW(b_post=base.b_post, omega_post=base.omega_post, psi_post=base.psi_post, df_post=1.0)
    with pytest.raises(InvalidHyperparameter):
        sample(post, 0)


def test_indefinite_psi_post_raises_invalid_hyperparameter() -> None:
    base = _posterior()
    post = PosteriorNIW(
        b_post=base.b_post,
        omega_post=base.omega_post,
        psi_post=np.array([[1.0, 2.0], [2.0, 1.0]]),
        df_post=base.df_post,
    )
    with pytest.raises(InvalidHyperparameter):
        sample(post, 5, rng_seed=0)


def test_sigma_draws_mean_converges_to_inverse_wishart_mean() -> None:
    post = _posterior()
    draws = sample(post, 5000, rng_seed=2024)

    expected = post.psi_post / (post.df_post - 2 - 1)
    assert np.allclose(draws.sigma_draws.mean(axis=0), expected, atol=0.02)
    assert np.allclose(post.sigma_mean, expected)


def test_coefficient_draws_have_kronecker_covariance() -> None:
    post = _posterior()
    draws = sample(post, 5000, rng_seed=99)

    betas = np.stack([vec(b) for b in draws.b_draws])
    assert np.allclose(betas.mean(axis=0), vec(post.b_post), atol=0.03)

    expected_cov = np.kron(post.sigma_mean, post.omega_post)
    assert np.allclose(np.cov(betas, rowvar=False), expected_cov, atol=0.01)


def test_diffuse_prior_recovers_data_generating_coefficients() -> None:
    beta = np.array(
        [
            [0.1, -0.1],
            [0.5, 0.0],
            [0.1, 0.4],
        ],
        dtype=float,
    )
    sigma = np.array([[0.05, 0.01], [0.01, 0.05]])
    y = _simulate_var1(t=50, beta=beta, sigma=sigma, seed=123)

    prior = NIWPrior(
        b_prior=np.zeros((3, 2)),
        omega_prior=1e6 * np.eye(3),
        psi_prior=np.eye(2),
        df_prior=4.0,
    )
    post = update(y, prior=prior)

    assert post.df_post == 54.0
    assert np.allclose(post.b_post, beta, atol=0.5)

    draws = sample(post, 5000, rng_seed=999)
    assert np.allclose(draws.b_draws.mean(axis=0), post.b_post, atol=0.02)
    assert np.allclose(draws.sigma_draws.mean(axis=0), post.sigma_mean, atol=0.02)
