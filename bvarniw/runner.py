from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import time

import numpy as np

from .api import sample, update
from .data.dataset import Dataset
from .results import PosteriorDraws, PosteriorNIW
from .spec import NIWPrior, SamplerConfig


class ConfigError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class RunArtifacts:
    posterior: PosteriorNIW
    draws: PosteriorDraws


def _require_pyyaml() -> Any:
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError(
            "PyYAML is required for config files. Install with 'bvar-niw[config]'."
        ) from e
    return yaml


def load_config(path: str | Path) -> dict[str, Any]:
    yaml = _require_pyyaml()
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"config file not found: {p}")
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ConfigError("config root must be a mapping")
    return raw


def _get(cfg: dict[str, Any], key: str, *, default: Any = None, required: bool = False) -> Any:
    if key in cfg:
        return cfg[key]
    if required:
        raise ConfigError(f"missing required key: {key}")
    return default


def _as_mapping(x: Any, *, key: str) -> dict[str, Any]:
    if not isinstance(x, dict):
        raise ConfigError(f"{key} must be a mapping")
    return x


def _as_int(x: Any, *, key: str, min_value: int | None = None) -> int:
    if not isinstance(x, (int, np.integer)) or isinstance(x, bool):
        raise ConfigError(f"{key} must be an integer")
    v = int(x)
    if min_value is not None and v < min_value:
        raise ConfigError(f"{key} must be >= {min_value}")
    return v


def _as_float(x: Any, *, key: str) -> float:
    if not isinstance(x, (float, int, np.floating, np.integer)) or isinstance(x, bool):
        raise ConfigError(f"{key} must be a number")
    return float(x)


def _optional_float(cfg: dict[str, Any], key: str, *, prefix: str) -> float | None:
    x = _get(cfg, key, default=None)
    if x is None:
        return None
    return _as_float(x, key=f"{prefix}.{key}")


def build_lag_order(cfg: dict[str, Any]) -> int:
    model_cfg = _as_mapping(_get(cfg, "model", required=True), key="model")
    return _as_int(_get(model_cfg, "p", required=True), key="model.p", min_value=1)


def build_prior(cfg: dict[str, Any], *, dataset: Dataset) -> NIWPrior:
    p = build_lag_order(cfg)
    if dataset.T <= p:
        raise ConfigError(f"dataset has T={dataset.T} observations, need T > model.p={p}")

    prior_cfg = _as_mapping(_get(cfg, "prior", default={"family": "default"}), key="prior")
    family = str(_get(prior_cfg, "family", default="default")).lower()
    df_prior = _optional_float(prior_cfg, "df_prior", prefix="prior")

    try:
        if family == "default":
            prior = NIWPrior.default(n=dataset.N, p=p)
            if df_prior is None:
                return prior
            return NIWPrior(
                b_prior=prior.b_prior,
                omega_prior=prior.omega_prior,
                psi_prior=prior.psi_prior,
                df_prior=df_prior,
            )

        if family == "diffuse":
            scale = _optional_float(prior_cfg, "scale", prefix="prior")
            return NIWPrior.diffuse(
                n=dataset.N,
                p=p,
                scale=1e6 if scale is None else scale,
                df_prior=df_prior,
            )

        if family == "minnesota":
            hyp = _as_mapping(_get(prior_cfg, "hyper", default={}), key="prior.hyper")
            allowed = {"lambda1", "lambda2", "lambda3", "lambda4", "own_lag_mean", "own_lag_means", "min_sigma2"}
            unknown = sorted(set(hyp) - allowed)
            if unknown:
                raise ConfigError(f"prior.hyper has unknown keys: {unknown}")

            kwargs: dict[str, Any] = {}
            for name, value in hyp.items():
                if name == "own_lag_means":
                    if not isinstance(value, list):
                        raise ConfigError("prior.hyper.own_lag_means must be a list[float]")
                    kwargs[name] = [_as_float(v, key="prior.hyper.own_lag_means") for v in value]
                else:
                    kwargs[name] = _as_float(value, key=f"prior.hyper.{name}")
            return NIWPrior.minnesota(y=dataset.values, p=p, df_prior=df_prior, **kwargs)
    except ValueError as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"invalid prior configuration: {e}") from e

    raise ConfigError("prior.family must be one of: default, diffuse, minnesota")


def build_sampler(cfg: dict[str, Any]) -> SamplerConfig:
    sampler_cfg = _as_mapping(_get(cfg, "sampler", default={}), key="sampler")

    draws = _as_int(_get(sampler_cfg, "draws", default=1000), key="sampler.draws", min_value=0)

    seed = _get(sampler_cfg, "seed", default=None)
    if seed is not None:
        seed = _as_int(seed, key="sampler.seed", min_value=0)

    return SamplerConfig(draws=draws, seed=seed)


def validate_config(cfg: dict[str, Any], *, dataset: Dataset) -> None:
    build_prior(cfg, dataset=dataset)
    build_sampler(cfg)


def run_from_config(
    config: str | Path | dict[str, Any],
    dataset: Dataset,
    *,
    progress: Callable[[str, dict[str, Any]], None] | None = None,
) -> RunArtifacts:
    """Build the prior and sampler from a config, then update and sample.

    ``config`` is a path to a YAML file or an already-parsed mapping. The
    caller supplies the data. ``progress`` receives ``(event, payload)`` pairs
    for ``stage_start``, ``stage_end``, ``summary`` and ``run_end`` events.
    """
    t0_total = time.perf_counter()

    def emit(event: str, payload: dict[str, Any]) -> None:
        if progress is not None:
            progress(event, payload)

    emit("stage_start", {"name": "load_config"})
    t0 = time.perf_counter()
    cfg = config if isinstance(config, dict) else load_config(config)
    emit("stage_end", {"name": "load_config", "elapsed_s": time.perf_counter() - t0})

    emit("stage_start", {"name": "validate_config"})
    t0 = time.perf_counter()
    emit(
        "summary",
        {"kind": "dataset", "T": dataset.T, "N": dataset.N, "variables": list(dataset.variables)},
    )
    prior = build_prior(cfg, dataset=dataset)
    emit("summary", {"kind": "model", "p": prior.p, "k": prior.k})
    prior_cfg = cfg.get("prior", {})
    family = prior_cfg.get("family", "default") if isinstance(prior_cfg, dict) else None
    emit("summary", {"kind": "prior", "family": str(family), "df_prior": prior.df_prior})
    sampler = build_sampler(cfg)
    emit("summary", {"kind": "sampler", "draws": sampler.draws, "seed": sampler.seed})
    emit("stage_end", {"name": "validate_config", "elapsed_s": time.perf_counter() - t0})

    emit("stage_start", {"name": "update"})
    t0 = time.perf_counter()
    posterior = update(dataset, prior=prior)
    emit("stage_end", {"name": "update", "elapsed_s": time.perf_counter() - t0})

    emit("stage_start", {"name": "sample"})
    t0 = time.perf_counter()
    draws = sample(posterior, sampler.draws, rng_seed=sampler.seed)
    emit("stage_end", {"name": "sample", "elapsed_s": time.perf_counter() - t0})

    emit("run_end", {"elapsed_s": time.perf_counter() - t0_total})
    return RunArtifacts(posterior=posterior, draws=draws)
