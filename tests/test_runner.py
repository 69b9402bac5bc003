from pathlib import Path
from typing import Any

import numpy as np
import pytest

from bvarniw import Dataset
from bvarniw.runner import ConfigError, build_prior, build_sampler, load_config, run_from_config, validate_config


def _toy_dataset(*, t: int = 60, n: int = 2, seed: int = 123) -> Dataset:
    rng = np.random.default_rng(seed)
    y = rng.standard_normal((t, n))
    return Dataset.from_arrays(values=y, variables=[f"y{i+1}" for i in range(n)])


def test_run_from_yaml_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yml"
    cfg_path.write_text(
        "\n".join(
            [
                "model:",
                "  p: 2",
                "prior:",
                "  family: minnesota",
                "  hyper:",
                "    lambda1: 0.2",
                "    own_lag_mean: 1.0",
                "sampler:",
                "  draws: 40",
                "  seed: 7",
            ]
        ),
        encoding="utf-8",
    )
    ds = _toy_dataset()

    events: list[tuple[str, dict[str, Any]]] = []
    res = run_from_config(cfg_path, ds, progress=lambda e, p: events.append((e, p)))

    assert res.posterior.b_post.shape == (5, 2)
    assert res.draws is not None
    assert res.draws.b_draws.shape == (40, 5, 2)
    assert res.posterior.df_post == 4.0 + ds.T

    names = [p["name"] for e, p in events if e == "stage_end"]
    assert names == ["load_config", "validate_config", "update", "sample"]
    kinds = [p["kind"] for e, p in events if e == "summary"]
    assert kinds == ["dataset", "model", "prior", "sampler"]
    assert events[-1][0] == "run_end"

    again = run_from_config(cfg_path, ds)
    assert again.draws is not None
    assert np.array_equal(res.draws.b_draws, again.draws.b_draws)


def test_run_from_mapping_with_zero_draws_returns_empty_draws() -> None:
    cfg = {"model": {"p": 1}, "prior": {"family": "diffuse", "scale": 1e5}, "sampler": {"draws": 0}}
    events: list[tuple[str, dict]] = []
    res = run_from_config(cfg, _toy_dataset(), progress=lambda e, p: events.append((e, p)))
    assert res.draws.num_draws == 0
    assert res.draws.b_draws.shape == (0, 3, 2)
    assert res.draws.sigma_draws.shape == (0, 2, 2)
    assert [p["name"] for e, p in events if e == "stage_end"][-1] == "sample"
    assert np.allclose(res.posterior.b_post, res.posterior.b_mle, atol=1e-3)


def test_default_prior_df_override() -> None:
    cfg = {"model": {"p": 1}, "prior": {"family": "default", "df_prior": 9}}
    prior = build_prior(cfg, dataset=_toy_dataset())
    assert prior.df_prior == 9.0
    assert np.allclose(prior.omega_prior, 10.0 * np.eye(3))


def test_build_sampler_defaults() -> None:
    sampler = build_sampler({})
    assert sampler.draws == 1000
    assert sampler.seed is None


@pytest.mark.parametrize(
    "cfg",
    [
        {},
        {"model": {"p": 0}},
        {"model": {"p": "2"}},
        {"model": {"p": 1}, "prior": {"family": "horseshoe"}},
        {"model": {"p": 1}, "prior": {"family": "default", "df_prior": 0.5}},
        {"model": {"p": 1}, "prior": {"family": "minnesota", "hyper": {"lambda9": 1.0}}},
        {"model": {"p": 1}, "sampler": {"draws": -5}},
        {"model": {"p": 1}, "sampler": {"seed": True}},
        {"model": {"p": 80}},
    ],
)
def test_invalid_config_raises_config_error(cfg: dict[str, Any]) -> None:
    with pytest.raises(ConfigError):
        validate_config(cfg, dataset=_toy_dataset())


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yml")


def test_load_config_requires_mapping(tmp_path: Path) -> None:
    p = tmp_path / "list.yml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(p)
