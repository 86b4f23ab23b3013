"""Centroid initialisation strategies for k-modes and k-prototypes.

Every strategy shares the signature
``init(X, n_clusters, dissim, random_state) -> centroids`` where
``centroids`` has shape ``(n_clusters, n_features)``. Deterministic
strategies ignore ``random_state``; ``dissim`` is only used by Cao.

References
----------

.. [1] Z. Huang. *Extensions to the k-modes algorithm for clustering
   large data sets with categorical values*, Data Mining and Knowledge
   Discovery 2(3), 1998.
.. [2] F. Cao, J. Liang, L. Bai. *A new initialization method for
   categorical data clustering*, Expert Systems with Applications 36(7),
   2009.
"""

from __future__ import annotations

import numpy as np
from sklearn.utils import check_random_state


def frequency_table(X):
    """Count the values of every column, most frequent first.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)

    Returns
    -------
    table : list of list of (float, int)
        ``table[i]`` holds ``(value, count)`` pairs for column ``i`` sorted
        by descending count. Equal counts are ordered by ascending value.

    Examples
    --------
    >>> frequency_table([[1, 1], [1, 2], [1, 2]])
    [[(1.0, 3)], [(2.0, 2), (1.0, 1)]]
    """
    X = np.asarray(X, dtype=float)
    table = []
    for i in range(X.shape[1]):
        values, counts = np.unique(X[:, i], return_counts=True)
        # np.unique sorts values ascending; a stable sort keeps that order on ties
        order = np.argsort(-counts, kind="stable")
        table.append([(float(values[j]), int(counts[j])) for j in order])
    return table


def init_huang(X, n_clusters, dissim=None, random_state=None):
    """Frequency-based initialisation (Huang, 1998).

    Centroid ``j`` takes the ``j``-th most frequent value of each column.
    Columns with fewer than ``n_clusters`` distinct values fall back to
    their most frequent value, which can yield duplicate centroids.
    """
    X = np.asarray(X, dtype=float)
    table = frequency_table(X)
    centroids = np.empty((n_clusters, X.shape[1]), dtype=float)
    for i, column in enumerate(table):
        for j in range(n_clusters):
            if j < len(column):
                centroids[j, i] = column[j][0]
            else:
                centroids[j, i] = column[0][0]
    return centroids


def _density(X):
    n_samples, n_features = X.shape
    density = np.zeros(n_samples, dtype=float)
    for i in range(n_features):
        _, inverse, counts = np.unique(
            X[:, i], return_inverse=True, return_counts=True
        )
        density += counts[inverse.ravel()] / n_features
    return density / n_samples


def init_cao(X, n_clusters, dissim, random_state=None):
    """Density-based initialisation (Cao et al., 2009).

    The first centroid is the row with the highest average attribute
    frequency. Each following centroid is the row maximising the smallest
    density-weighted dissimilarity to the centroids chosen so far. Ties go
    to the lowest row index.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
        Categorical data.
    n_clusters : int
        Number of centroids.
    dissim : callable
        ``dissim(a, b) -> float``.
    random_state : ignored

    Returns
    -------
    centroids : ndarray of shape (n_clusters, n_features)
    """
    X = np.asarray(X, dtype=float)
    n_samples, n_features = X.shape
    density = _density(X)
    centroids = np.empty((n_clusters, n_features), dtype=float)
    centroids[0] = X[np.argmax(density)]

    # min over chosen centroids of density-weighted dissimilarity
    closest = np.full(n_samples, np.inf)
    for i in range(1, n_clusters):
        for k in range(n_samples):
            d = density[k] * dissim(X[k], centroids[i - 1])
            if d < closest[k]:
                closest[k] = d
        centroids[i] = X[np.argmax(closest)]
    return centroids


def init_random(X, n_clusters, dissim=None, random_state=None):
    """Pick each centroid as a uniformly drawn row of ``X``.

    Rows are drawn with replacement, so two centroids may coincide.
    """
    X = np.asarray(X, dtype=float)
    rng = check_random_state(random_state)
    idx = rng.randint(X.shape[0], size=n_clusters)
    return X[idx].copy()


def init_random_num(X, n_clusters, dissim=None, random_state=None):
    """Random initialisation of the numerical centroids of k-prototypes.

    Works on the normalised numerical part of the data; every row,
    including the last one, can be drawn.
    """
    return init_random(X, n_clusters, dissim, random_state)


INIT_METHODS = {
    "huang": init_huang,
    "cao": init_cao,
    "random": init_random,
}
