from .api import sample, update
from .bvar import ols_estimate, posterior_niw, sample_posterior_niw
from .data.dataset import Dataset
from .errors import BVARError, DimensionMismatch, InvalidHyperparameter, NumericalInstability
from .results import PosteriorDraws, PosteriorDrawSet, PosteriorNIW
from .spec import NIWPrior, SamplerConfig

__all__ = [
    # Core API
    "update",
    "sample",
    "posterior_niw",
    "sample_posterior_niw",
    "ols_estimate",
    # Value types
    "Dataset",
    "NIWPrior",
    "SamplerConfig",
    "PosteriorNIW",
    "PosteriorDraws",
    "PosteriorDrawSet",
    # Errors
    "BVARError",
    "DimensionMismatch",
    "InvalidHyperparameter",
    "NumericalInstability",
    # Metadata
    "__version__",
]

__version__ = "0.1.0"
