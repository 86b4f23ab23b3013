"""Public API for the :mod:`sklkmodes` package.

The package exposes clustering estimators for categorical and mixed data:

* :class:`~sklkmodes.KModes` – k-modes for purely categorical data.
* :class:`~sklkmodes.KPrototypes` – k-prototypes for mixed categorical
    and numerical data.

Both follow the scikit-learn estimator API (``fit``, ``predict``,
``transform``, ``fit_predict``). The dissimilarity functions and
initialisation strategies they use are public as well, so custom
callables can be composed from them.
"""

from ._dissim import (
    compute_weights,
    euclidean_dissim,
    hamming_dissim,
    weighted_hamming_dissim,
)
from ._init_methods import (
    frequency_table,
    init_cao,
    init_huang,
    init_random,
    init_random_num,
)
from ._kmodes import KModes
from ._kprototypes import KPrototypes
from .exceptions import (
    ComputationError,
    ConfigurationError,
    DimensionError,
    NotFittedError,
)

__all__ = [
    "KModes",
    "KPrototypes",
    "hamming_dissim",
    "weighted_hamming_dissim",
    "euclidean_dissim",
    "compute_weights",
    "frequency_table",
    "init_huang",
    "init_cao",
    "init_random",
    "init_random_num",
    "ConfigurationError",
    "DimensionError",
    "ComputationError",
    "NotFittedError",
]

__version__ = "0.1.0"
