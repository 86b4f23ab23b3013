"""Dissimilarity functions for categorical and numerical vectors.

All functions take two 1-D vectors of equal length and return a
non-negative float. Categorical values are compared for equality only,
so any float encoding of the categories works.
"""

from __future__ import annotations

import numpy as np

from .exceptions import DimensionError


def _check_lengths(a, b, name):
    a = np.asarray(a, dtype=float).ravel()
    b = np.asarray(b, dtype=float).ravel()
    if a.shape[0] != b.shape[0]:
        raise DimensionError(
            f"{name} distance: vectors lengths do not match "
            f"({a.shape[0]} != {b.shape[0]})"
        )
    return a, b


def hamming_dissim(a, b):
    """Number of positions at which ``a`` and ``b`` differ.

    Examples
    --------
    >>> hamming_dissim([1, 2, 3, 4], [1, 1, 3, 3])
    2.0
    """
    a, b = _check_lengths(a, b, "hamming")
    return float(np.count_nonzero(a != b))


def weighted_hamming_dissim(a, b, weights):
    """Hamming dissimilarity where each mismatch costs ``weights[i]``.

    Parameters
    ----------
    a, b : array-like of shape (n_features,)
        Vectors to compare.
    weights : array-like of shape (n_features,)
        Per-attribute importance.

    Returns
    -------
    dissim : float

    Raises
    ------
    DimensionError
        If ``a`` and ``b`` differ in length, or if ``weights`` does not
        have one entry per attribute.
    """
    a, b = _check_lengths(a, b, "hamming")
    weights = np.asarray(weights, dtype=float).ravel()
    if weights.shape[0] != a.shape[0]:
        raise DimensionError(
            "weighted hamming distance: wrong weight vector length: "
            f"{weights.shape[0]}"
        )
    return float(np.sum(weights[a != b]))


def euclidean_dissim(a, b):
    """Euclidean (L2) distance between ``a`` and ``b``."""
    a, b = _check_lengths(a, b, "euclidean")
    return float(np.sqrt(np.sum((a - b) ** 2)))


DISSIMILARITIES = {
    "hamming": hamming_dissim,
    "weighted_hamming": weighted_hamming_dissim,
    "euclidean": euclidean_dissim,
}


def compute_weights(X, importance=1.0):
    """Derive attribute weights from the number of distinct values.

    Each column gets ``1 / n_distinct``. A column holding a single value
    carries no information and gets ``0``. The weights are then rescaled
    so the largest one equals ``importance``; columns with few distinct
    values are favoured.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Categorical data.
    importance : float, default=1.0
        Value of the largest weight after rescaling.

    Returns
    -------
    weights : ndarray of shape (n_features,)
        All zeros when every column is constant.

    Examples
    --------
    >>> import numpy as np
    >>> compute_weights(np.array([[1, 2], [1, 1], [1, 2]]))
    array([0., 1.])
    """
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    weights = np.zeros(X.shape[1], dtype=float)
    for i in range(X.shape[1]):
        n_distinct = np.unique(X[:, i]).shape[0]
        if n_distinct > 1:
            weights[i] = 1.0 / n_distinct
    top = weights.max() if weights.size else 0.0
    if top > 0:
        weights *= importance / top
    return weights
