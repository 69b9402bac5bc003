from __future__ import annotations

import numpy as np


class BVARError(Exception):
    """Base class for errors raised by :mod:`bvarniw`."""


class DimensionMismatch(BVARError, ValueError):
    """Shapes of the data and prior blocks are inconsistent."""


class InvalidHyperparameter(BVARError, ValueError):
    """A hyperparameter value makes the prior or posterior improper.

    Raised for degrees of freedom ``<= n - 1``, non-finite entries, or a scale
    matrix that cannot be used for inverse-Wishart sampling.
    """


class NumericalInstability(BVARError, np.linalg.LinAlgError):
    """A matrix expected to be symmetric positive-definite could not be factored.

    The matrix is either not positive-definite or too ill-conditioned to be
    inverted reliably. Callers can only recover by supplying better-conditioned
    inputs; nothing is retried internally.
    """
