"""Exceptions raised by the :mod:`sklkmodes` estimators.

:class:`ConfigurationError` derives from scikit-learn's own parameter
error, so code catching ``ValueError`` (or ``InvalidParameterError``)
around ``fit`` keeps working. ``NotFittedError`` is re-exported from
:mod:`sklearn.exceptions`.
"""

from sklearn.exceptions import NotFittedError
from sklearn.utils._param_validation import InvalidParameterError

__all__ = [
    "ConfigurationError",
    "DimensionError",
    "ComputationError",
    "NotFittedError",
]


class ConfigurationError(InvalidParameterError):
    """Estimator parameters are missing or out of their valid range.

    Raised by ``fit`` before any fitted attribute is written.
    """


class DimensionError(ValueError):
    """Two vectors, or a vector and the weight vector, differ in length."""


class ComputationError(RuntimeError):
    """An initialisation strategy produced unusable centroids."""
