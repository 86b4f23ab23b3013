"""K-Modes clustering for categorical data.

This module implements the k-modes algorithm (:class:`KModes`). Centroids
are attribute-wise modes, read from a per-cluster frequency table that is
updated incrementally whenever a sample changes cluster. The helpers in
this module also drive :class:`~sklkmodes.KPrototypes`, which adds a
numerical part to every sample and centroid.

References
----------

.. [1] Z. Huang. *Extensions to the k-modes algorithm for clustering
   large data sets with categorical values*, Data Mining and Knowledge
   Discovery 2(3), 1998.
"""

from __future__ import annotations

import warnings
from collections import defaultdict
from functools import partial
from numbers import Integral, Real

import numpy as np
from sklearn.base import BaseEstimator, ClusterMixin, TransformerMixin, _fit_context
from sklearn.exceptions import ConvergenceWarning
from sklearn.utils import check_random_state
from sklearn.utils._param_validation import (
    Interval,
    InvalidParameterError,
    StrOptions,
)
from sklearn.utils.validation import check_array, check_is_fitted, validate_data

from ._dissim import (
    DISSIMILARITIES,
    compute_weights,
    euclidean_dissim,
    weighted_hamming_dissim,
)
from ._init_methods import INIT_METHODS
from .exceptions import ComputationError, ConfigurationError, DimensionError

###############################################################################
# Helper utilities


def _point_dissims(index, x_cat, x_num, centroids_cat, centroids_num, dissim, gamma):
    """Dissimilarity of one sample to every centroid.

    The numerical term ``gamma * euclidean`` is only evaluated when the
    sample or the centroids carry numerical attributes.
    """
    n_clusters = centroids_cat.shape[0]
    with_num = x_num.shape[0] > 0 or centroids_num.shape[1] > 0
    dists = np.empty(n_clusters, dtype=float)
    try:
        for k in range(n_clusters):
            d = dissim(x_cat, centroids_cat[k])
            if with_num:
                d += gamma * euclidean_dissim(x_num, centroids_num[k])
            dists[k] = d
    except DimensionError as exc:
        raise DimensionError(
            f"cannot compute nearest cluster for sample {index}: {exc}"
        ) from exc
    return dists


def _dissim_matrix(Xcat, Xnum, centroids_cat, centroids_num, dissim, gamma):
    n_samples = Xcat.shape[0]
    D = np.empty((n_samples, centroids_cat.shape[0]), dtype=float)
    for i in range(n_samples):
        D[i] = _point_dissims(
            i, Xcat[i], Xnum[i], centroids_cat, centroids_num, dissim, gamma
        )
    return D


def _get_max_value_key(freq):
    """Most frequent key of ``freq``; the lowest key wins ties.

    Returns ``None`` when no key has a positive count.
    """
    best_key = None
    best_count = 0
    for key, count in freq.items():
        if count > best_count or (
            count == best_count and best_key is not None and key < best_key
        ):
            best_key = key
            best_count = count
    return best_key


def _move_point_cat(point, from_label, to_label, cl_attr_freq, labels_counter):
    """Move one sample between clusters in the frequency table and counter."""
    for j, value in enumerate(point):
        cl_attr_freq[to_label][j][value] += 1
        cl_attr_freq[from_label][j][value] -= 1
    labels_counter[to_label] += 1
    labels_counter[from_label] -= 1


def _update_centroid(k, Xnum, cl_attr_freq, membership, centroids_cat, centroids_num):
    """Recompute centroid ``k`` from the bookkeeping tables.

    Categorical attributes take the cluster mode; attributes without
    observations keep their previous value. Numerical attributes take the
    mean of the member rows when the cluster has any.
    """
    for j, freq in enumerate(cl_attr_freq[k]):
        mode = _get_max_value_key(freq)
        if mode is not None:
            centroids_cat[k, j] = mode
    if Xnum.shape[1] and membership[k].size:
        centroids_num[k] = Xnum[membership[k]].mean(axis=0)


def _membership(labels, n_clusters):
    return [np.flatnonzero(labels == k) for k in range(n_clusters)]


def _k_modes_iter(
    Xcat, Xnum, centroids_cat, centroids_num, labels, labels_counter,
    cl_attr_freq, dissim, gamma, rng,
):
    """Run one reassignment round.

    Returns
    -------
    moves : int
        Number of samples that changed cluster.
    cost : float
        Sum of the dissimilarities of every sample to its nearest centroid.
    changed : bool
        Whether another round is needed.
    membership : list of ndarray
        Rebuilt numerical membership table (empty when there are no
        numerical attributes).
    """
    n_samples = Xcat.shape[0]
    n_clusters = centroids_cat.shape[0]
    dirty = np.zeros(n_clusters, dtype=bool)
    moves = 0
    cost = 0.0
    for i in range(n_samples):
        dists = _point_dissims(
            i, Xcat[i], Xnum[i], centroids_cat, centroids_num, dissim, gamma
        )
        label = int(np.argmin(dists))
        cost += dists[label]
        old_label = labels[i]
        if label != old_label:
            _move_point_cat(
                Xcat[i].tolist(), old_label, label, cl_attr_freq, labels_counter
            )
            labels[i] = label
            dirty[label] = dirty[old_label] = True
            moves += 1

    membership = _membership(labels, n_clusters) if Xnum.shape[1] else []

    empty = np.flatnonzero(labels_counter == 0)
    if empty.size:
        for k in empty:
            idx = rng.randint(n_samples)
            centroids_cat[k] = Xcat[idx]
            centroids_num[k] = Xnum[idx]
        # a reseed round recomputes no centroid; clusters whose members
        # changed keep their previous centroid until a later round moves a point
        return moves, cost, True, membership

    for k in np.flatnonzero(dirty):
        _update_centroid(k, Xnum, cl_attr_freq, membership, centroids_cat, centroids_num)
    return moves, cost, moves > 0, membership


def _k_modes_single(
    Xcat, Xnum, centroids_cat, centroids_num, dissim, gamma, max_iter, rng, verbose
):
    """A single k-modes (or k-prototypes) run from the given centroids.

    ``Xnum`` and ``centroids_num`` have zero columns for plain k-modes.
    The centroid arrays are updated in place.
    """
    n_samples, n_cat = Xcat.shape
    n_clusters = centroids_cat.shape[0]

    # initial assignment fills the frequency table
    labels = np.empty(n_samples, dtype=np.intp)
    labels_counter = np.zeros(n_clusters, dtype=np.intp)
    cl_attr_freq = [
        [defaultdict(int) for _ in range(n_cat)] for _ in range(n_clusters)
    ]
    cost = 0.0
    for i in range(n_samples):
        dists = _point_dissims(
            i, Xcat[i], Xnum[i], centroids_cat, centroids_num, dissim, gamma
        )
        label = int(np.argmin(dists))
        cost += dists[label]
        labels[i] = label
        labels_counter[label] += 1
        for j, value in enumerate(Xcat[i].tolist()):
            cl_attr_freq[label][j][value] += 1

    membership = _membership(labels, n_clusters) if Xnum.shape[1] else []
    for k in range(n_clusters):
        _update_centroid(k, Xnum, cl_attr_freq, membership, centroids_cat, centroids_num)
    if verbose:
        print(f"Initial assignment complete, cost {cost:<.3e}.")

    converged = False
    n_iter = 0
    for it in range(max_iter):
        n_iter = it + 1
        moves, cost, changed, membership = _k_modes_iter(
            Xcat, Xnum, centroids_cat, centroids_num, labels, labels_counter,
            cl_attr_freq, dissim, gamma, rng,
        )
        if verbose:
            print(f"Iteration {it}, moves {moves}, cost {cost:<.3e}.")
        if not changed:
            converged = True
            if verbose:
                print(f"Converged at iteration {it} (no sample moved).")
            break

    return labels, labels_counter, cl_attr_freq, membership, cost, n_iter, converged


def _freeze_freq(cl_attr_freq):
    """Plain-dict copy of the frequency table without zero counts."""
    return [
        [{value: count for value, count in freq.items() if count} for freq in row]
        for row in cl_attr_freq
    ]


###############################################################################
# Core estimator: K-Modes


class KModes(TransformerMixin, ClusterMixin, BaseEstimator):
    """K-Modes clustering for categorical data.

    Every column of ``X`` is treated as categorical: values are float
    codes compared for equality only. Centroids are attribute-wise modes.

    Parameters
    ----------
    n_clusters : int, default=8
        The number of clusters to form as well as the number of centroids
        to generate.
    max_iter : int, default=100
        Maximum number of reassignment rounds after the initial
        assignment.
    n_init : int, default=1
        Number of runs requested. It is validated but a single run is
        always performed; values above 1 emit a warning.
    metric : {'hamming', 'weighted_hamming', 'euclidean'} or callable, default='hamming'
        Dissimilarity between a sample and a centroid. A callable must
        have the signature ``metric(a, b) -> float``.
        ``'weighted_hamming'`` requires ``weights``.
    init : {'huang', 'cao', 'random'}, callable or ndarray of shape (n_clusters, n_features), default='cao'
        Method for initialization.

        * 'huang' : j-th most frequent value of every attribute.
        * 'cao' : density-based farthest point seeding.
        * 'random' : ``n_clusters`` observations drawn with replacement.
        * callable : ``init(X, n_clusters, dissim, random_state)``
          returning the initial centroids.
        * ndarray : user provided initial centroids.
    weights : {'auto'}, array-like of shape (n_features,) or (n_vectors, n_features), default=None
        Attribute weights for the weighted Hamming dissimilarity. For a
        2-D array the first vector is used. ``'auto'`` derives them from
        the data with :func:`~sklkmodes.compute_weights`.
    importance : float, default=1.0
        Largest weight produced by ``weights='auto'``.
    random_state : int, RandomState instance or None, default=None
        Controls random initialisation and the reseeding of empty
        clusters. Pass an int for reproducible results.
    verbose : int, default=0
        Verbosity level. ``0`` is silent; higher values print progress
        each iteration.

    Attributes
    ----------
    cluster_centroids_ : ndarray of shape (n_clusters, n_features)
        Final cluster modes.
    labels_ : ndarray of shape (n_samples,)
        Cluster index of every training sample.
    labels_counter_ : ndarray of shape (n_clusters,)
        Number of training samples in every cluster.
    cluster_attr_freq_ : list of list of dict
        ``cluster_attr_freq_[k][j]`` maps each value of attribute ``j``
        to its count among the members of cluster ``k``.
    weights_ : ndarray of shape (n_features,) or None
        Weight vector bound to the dissimilarity.
    cost_ : float
        Sum of the dissimilarities of the samples to their centroid in the
        last round.
    n_iter_ : int
        Number of reassignment rounds run.
    n_features_in_ : int
        Number of features seen during :meth:`fit`.

    Examples
    --------

    >>> from sklkmodes import KModes
    >>> import numpy as np
    >>> X = np.array([[1, 1], [1, 1], [1, 1],
    ...               [1, 2], [1, 2], [1, 2]])
    >>> km = KModes(n_clusters=2, init="cao").fit(X)
    >>> km.labels_
    array([0, 0, 0, 1, 1, 1])
    >>> km.cluster_centroids_
    array([[1., 1.],
           [1., 2.]])
    """

    _parameter_constraints = {
        "n_clusters": [Interval(Integral, 1, None, closed="left")],
        "max_iter": [Interval(Integral, 1, None, closed="left")],
        "n_init": [Interval(Integral, 1, None, closed="left")],
        "metric": [StrOptions(set(DISSIMILARITIES)), callable],
        "init": [StrOptions(set(INIT_METHODS)), callable, np.ndarray],
        "weights": [None, StrOptions({"auto"}), "array-like"],
        "importance": [Interval(Real, 0, None, closed="neither")],
        "random_state": ["random_state"],
        "verbose": ["verbose"],
    }

    def __init__(
        self,
        n_clusters=8,
        *,
        max_iter=100,
        n_init=1,
        metric="hamming",
        init="cao",
        weights=None,
        importance=1.0,
        random_state=None,
        verbose=0,
    ):
        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.n_init = n_init
        self.metric = metric
        self.init = init
        self.weights = weights
        self.importance = importance
        self.random_state = random_state
        self.verbose = verbose

    # ------------------------------------------------------------------
    def _validate_params(self):
        try:
            super()._validate_params()
        except InvalidParameterError as exc:
            raise ConfigurationError(str(exc)) from exc
        if self._is_weighted() and self.weights is None:
            raise ConfigurationError(
                "The weighted hamming dissimilarity requires the 'weights' "
                "parameter to be set."
            )
        if self.weights is not None and not isinstance(self.weights, str):
            w = np.asarray(self.weights, dtype=float)
            if w.ndim not in (1, 2) or w.size == 0:
                raise ConfigurationError(
                    "weights should be a non-empty vector or a 2-D array of "
                    f"weight vectors, got shape {w.shape}."
                )

    def _is_weighted(self):
        return (
            self.metric == "weighted_hamming"
            if isinstance(self.metric, str)
            else self.metric is weighted_hamming_dissim
        )

    def _resolve_weights(self, Xcat):
        """Weight vector bound to the dissimilarity, or ``None``."""
        if self.weights is None:
            return None
        if isinstance(self.weights, str):
            return compute_weights(Xcat, self.importance)
        w = np.asarray(self.weights, dtype=float)
        if w.ndim == 2:
            w = w[0]
        return w.copy()

    def _resolve_dissim(self, weights):
        """Dissimilarity callable ``f(a, b)`` with the weights bound."""
        metric = self.metric
        func = DISSIMILARITIES[metric] if isinstance(metric, str) else metric
        if func is weighted_hamming_dissim:
            func = partial(weighted_hamming_dissim, weights=weights)
        return func

    def _check_init_array(self, n_features):
        centroids = np.array(self.init, dtype=float)
        if centroids.shape != (self.n_clusters, n_features):
            raise ConfigurationError(
                "init array should have shape (n_clusters, n_features) = "
                f"{(self.n_clusters, n_features)}, got {centroids.shape}."
            )
        return centroids

    def _init_centroids(self, X, dissim, rng):
        """Initialise the categorical centroids.

        Parameters
        ----------
        X : ndarray of shape (n_samples, n_features)
            Categorical data.
        dissim : callable
            Bound dissimilarity.
        rng : RandomState
            Random generator instance.

        Returns
        -------
        centroids : ndarray of shape (n_clusters, n_features)
        """
        if isinstance(self.init, np.ndarray):
            return self._check_init_array(X.shape[1])
        init = INIT_METHODS[self.init] if isinstance(self.init, str) else self.init
        centroids = np.array(init(X, self.n_clusters, dissim, rng), dtype=float)
        if centroids.shape != (self.n_clusters, X.shape[1]):
            raise ComputationError(
                f"initialization returned centroids of shape {centroids.shape}, "
                f"expected {(self.n_clusters, X.shape[1])}."
            )
        return centroids

    def _warn_n_init(self):
        if self.n_init > 1:
            warnings.warn(
                f"n_init={self.n_init} was requested but {type(self).__name__} "
                "performs a single run.",
                UserWarning,
                stacklevel=3,
            )

    def _check_result(self, labels, converged):
        if not converged:
            warnings.warn(
                f"Maximum number of iterations {self.max_iter} reached before "
                "convergence. Consider increasing max_iter.",
                ConvergenceWarning,
                stacklevel=3,
            )
        distinct_clusters = len(set(labels.tolist()))
        if distinct_clusters < self.n_clusters:
            warnings.warn(
                "Number of distinct clusters ({}) found smaller than "
                "n_clusters ({}). Possibly due to duplicate points "
                "in X.".format(distinct_clusters, self.n_clusters),
                ConvergenceWarning,
                stacklevel=3,
            )

    def _check_train_data(self, X):
        # n_features_in_ is recorded only once the fit has succeeded
        return check_array(
            X,
            accept_sparse=False,
            dtype=np.float64,
            order="C",
            accept_large_sparse=False,
        )

    def _check_test_data(self, X):
        X = check_array(X, accept_sparse=False, dtype=np.float64, order="C")
        if X.shape[1] != self.n_features_in_:
            raise DimensionError(
                f"X has {X.shape[1]} features, but {type(self).__name__} is "
                f"expecting {self.n_features_in_} features as input."
            )
        return X

    # ------------------------------------------------------------------
    @_fit_context(prefer_skip_nested_validation=True)
    def fit(self, X, y=None):
        """Compute k-modes clustering.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Categorical training instances encoded as numbers.
        y : Ignored
            Present for API consistency.

        Returns
        -------
        self : object
            Fitted estimator.
        """
        X_in, X = X, self._check_train_data(X)
        self._warn_n_init()
        rng = check_random_state(self.random_state)
        weights = self._resolve_weights(X)
        dissim = self._resolve_dissim(weights)

        centroids = self._init_centroids(X, dissim, rng)
        if self.verbose:
            print("Initialization complete")

        Xnum = np.empty((X.shape[0], 0), dtype=float)
        centroids_num = np.empty((self.n_clusters, 0), dtype=float)
        labels, counter, freq, _, cost, n_iter, converged = _k_modes_single(
            X, Xnum, centroids, centroids_num, dissim, 0.0,
            self.max_iter, rng, self.verbose,
        )
        self._check_result(labels, converged)

        validate_data(self, X_in, reset=True, skip_check_array=True)
        self.cluster_centroids_ = centroids
        self.labels_ = labels
        self.labels_counter_ = counter
        self.cluster_attr_freq_ = _freeze_freq(freq)
        self.weights_ = weights
        self.cost_ = float(cost)
        self.n_iter_ = n_iter
        return self

    def _test_dissims(self, X):
        X = self._check_test_data(X)
        Xnum = np.empty((X.shape[0], 0), dtype=float)
        return _dissim_matrix(
            X,
            Xnum,
            self.cluster_centroids_,
            np.empty((self.n_clusters, 0), dtype=float),
            self._resolve_dissim(self.weights_),
            0.0,
        )

    def predict(self, X):
        """Predict the closest cluster index for each sample in ``X``.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            New samples.

        Returns
        -------
        labels : ndarray of shape (n_samples,)
            Index of the closest learned centroid for each sample.
        """
        check_is_fitted(self, "cluster_centroids_")
        return np.argmin(self._test_dissims(X), axis=1)

    def transform(self, X):
        """Compute the dissimilarity of every sample to every centroid.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Samples to transform.

        Returns
        -------
        dissims : ndarray of shape (n_samples, n_clusters)
        """
        check_is_fitted(self, "cluster_centroids_")
        return self._test_dissims(X)

    def fit_predict(self, X, y=None):
        """Fit the model to ``X`` and return cluster indices."""
        return self.fit(X, y).labels_
