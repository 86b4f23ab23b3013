"""K-Prototypes clustering for mixed categorical and numerical data.

:class:`KPrototypes` extends :class:`~sklkmodes.KModes`. The columns
listed in ``categorical`` are clustered with modes and the configured
dissimilarity; the remaining columns are scaled by their maximum and
clustered with means and the Euclidean distance. The two parts are
blended as ``cat_dissim + gamma * euclidean``.

References
----------

.. [1] Z. Huang. *Clustering large data sets with mixed numeric and
   categorical values*, Proceedings of the First Pacific Asia Knowledge
   Discovery and Data Mining Conference, 1997.
"""

from __future__ import annotations

from numbers import Integral, Real

import numpy as np
from sklearn.base import _fit_context
from sklearn.utils import check_random_state
from sklearn.utils._param_validation import Interval
from sklearn.utils.validation import check_is_fitted, validate_data

from ._dissim import euclidean_dissim
from ._init_methods import init_random_num
from ._kmodes import KModes, _dissim_matrix, _freeze_freq, _k_modes_single
from .exceptions import ConfigurationError


def _normalize_num(Xnum):
    """Divide every column by its maximum.

    Columns whose maximum is zero are left unchanged. Returns the scaled
    copy and the per-column divisors.
    """
    if Xnum.shape[1] == 0:
        return Xnum.copy(), np.ones(0, dtype=float)
    scale = Xnum.max(axis=0)
    scale = np.where(scale == 0, 1.0, scale)
    return Xnum / scale, scale


class KPrototypes(KModes):
    """K-Prototypes clustering for mixed categorical and numerical data.

    Parameters
    ----------
    n_clusters : int, default=8
        The number of clusters to form.
    categorical : int or array-like of int, default=None
        Indices of the categorical columns of ``X``. All other columns are
        numerical. ``None`` means every column is numerical.
    gamma : float, default=None
        Weight of the numerical distance relative to the categorical
        dissimilarity. If ``None`` it is set to half the standard
        deviation of the normalised numerical data.
    max_iter : int, default=100
        Maximum number of reassignment rounds.
    n_init : int, default=1
        Validated but a single run is always performed.
    metric : {'hamming', 'weighted_hamming', 'euclidean'} or callable, default='hamming'
        Dissimilarity used on the categorical columns.
    init : {'huang', 'cao', 'random'}, callable or ndarray of shape (n_clusters, n_features), default='cao'
        Initialisation of the categorical centroids. Numerical centroids
        are random rows of the normalised numerical data. An ndarray
        seeds both parts, its numerical columns given in the scale of
        ``X``.
    weights : {'auto'}, array-like of shape (n_categorical,) or (n_vectors, n_categorical), default=None
        Attribute weights of the categorical columns for
        ``metric='weighted_hamming'``.
    importance : float, default=1.0
        Largest weight produced by ``weights='auto'``.
    random_state : int, RandomState instance or None, default=None
        Controls random initialisation and empty-cluster reseeding.
    verbose : int, default=0
        Verbosity level.

    Attributes
    ----------
    cluster_centroids_ : ndarray of shape (n_clusters, n_features)
        Centroids in the column order of ``X``; numerical columns are in
        normalised scale.
    cluster_centroids_cat_ : ndarray of shape (n_clusters, n_categorical)
        Categorical modes.
    cluster_centroids_num_ : ndarray of shape (n_clusters, n_numerical)
        Means of the normalised numerical columns.
    labels_ : ndarray of shape (n_samples,)
        Cluster index of every training sample.
    labels_counter_ : ndarray of shape (n_clusters,)
        Number of training samples in every cluster.
    cluster_attr_freq_ : list of list of dict
        Per-cluster value counts of every categorical column.
    membership_num_ : list of ndarray
        Row indices of the members of every cluster.
    categorical_indices_, numerical_indices_ : ndarray of int
        Resolved column partition.
    gamma_ : float
        Blend factor used.
    weights_ : ndarray of shape (n_categorical,) or None
        Weight vector bound to the categorical dissimilarity.
    cost_ : float
        Total blended dissimilarity in the last round.
    n_iter_ : int
        Number of reassignment rounds run.
    n_features_in_ : int
        Number of features seen during :meth:`fit`.

    Examples
    --------

    >>> from sklkmodes import KPrototypes
    >>> import numpy as np
    >>> X = np.array([[1., 1.], [1., 1.], [1., 1.],
    ...               [1., 2.], [1., 2.], [1., 2.]])
    >>> kp = KPrototypes(n_clusters=2, categorical=[1], gamma=1.0).fit(X)
    >>> kp.cluster_centroids_cat_
    array([[1.],
           [2.]])
    >>> kp.cluster_centroids_num_
    array([[1.],
           [1.]])
    """

    _parameter_constraints = {
        **KModes._parameter_constraints,
        "categorical": [None, Integral, "array-like"],
        "gamma": [None, Interval(Real, 0, None, closed="left")],
    }

    def __init__(
        self,
        n_clusters=8,
        *,
        categorical=None,
        gamma=None,
        max_iter=100,
        n_init=1,
        metric="hamming",
        init="cao",
        weights=None,
        importance=1.0,
        random_state=None,
        verbose=0,
    ):
        super().__init__(
            n_clusters,
            max_iter=max_iter,
            n_init=n_init,
            metric=metric,
            init=init,
            weights=weights,
            importance=importance,
            random_state=random_state,
            verbose=verbose,
        )
        self.categorical = categorical
        self.gamma = gamma

    # ------------------------------------------------------------------
    def _partition_indices(self, n_features):
        if self.categorical is None:
            cat = np.empty(0, dtype=np.intp)
        else:
            cat = np.unique(np.atleast_1d(np.asarray(self.categorical)))
            if cat.size and not np.issubdtype(cat.dtype, np.integer):
                raise ConfigurationError(
                    f"categorical should hold column indices, got {cat!r}."
                )
            cat = cat.astype(np.intp)
            if cat.size and (cat[0] < 0 or cat[-1] >= n_features):
                raise ConfigurationError(
                    f"categorical index out of range for {n_features} columns: "
                    f"{cat.tolist()}."
                )
        num = np.setdiff1d(np.arange(n_features), cat).astype(np.intp)
        return cat, num

    def _split(self, X):
        Xcat = X[:, self.categorical_indices_]
        Xnum, _ = _normalize_num(X[:, self.numerical_indices_])
        return Xcat, Xnum

    def _resolve_gamma(self, Xnum):
        if self.gamma is not None:
            return float(self.gamma)
        if Xnum.size == 0:
            return 0.0
        return 0.5 * float(Xnum.std(axis=0).mean())

    # ------------------------------------------------------------------
    @_fit_context(prefer_skip_nested_validation=True)
    def fit(self, X, y=None):
        """Compute k-prototypes clustering.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training instances; categorical columns hold numeric codes.
        y : Ignored
            Present for API consistency.

        Returns
        -------
        self : object
            Fitted estimator.
        """
        X_in, X = X, self._check_train_data(X)
        cat_idx, num_idx = self._partition_indices(X.shape[1])
        seeds = None
        if isinstance(self.init, np.ndarray):
            seeds = self._check_init_array(X.shape[1])
        self._warn_n_init()
        rng = check_random_state(self.random_state)

        Xcat = X[:, cat_idx]
        Xnum, scale = _normalize_num(X[:, num_idx])
        gamma = self._resolve_gamma(Xnum)
        weights = self._resolve_weights(Xcat)
        dissim = self._resolve_dissim(weights)

        if seeds is not None:
            centroids_cat = seeds[:, cat_idx].copy()
            centroids_num = seeds[:, num_idx] / scale
        else:
            centroids_cat = self._init_centroids(Xcat, dissim, rng)
            centroids_num = init_random_num(
                Xnum, self.n_clusters, euclidean_dissim, rng
            )
        if self.verbose:
            print("Initialization complete")

        labels, counter, freq, membership, cost, n_iter, converged = _k_modes_single(
            Xcat, Xnum, centroids_cat, centroids_num, dissim, gamma,
            self.max_iter, rng, self.verbose,
        )
        self._check_result(labels, converged)

        centroids = np.empty((self.n_clusters, X.shape[1]), dtype=float)
        centroids[:, cat_idx] = centroids_cat
        centroids[:, num_idx] = centroids_num

        validate_data(self, X_in, reset=True, skip_check_array=True)
        self.categorical_indices_ = cat_idx
        self.numerical_indices_ = num_idx
        self.gamma_ = gamma
        self.cluster_centroids_cat_ = centroids_cat
        self.cluster_centroids_num_ = centroids_num
        self.cluster_centroids_ = centroids
        self.labels_ = labels
        self.labels_counter_ = counter
        self.cluster_attr_freq_ = _freeze_freq(freq)
        self.membership_num_ = membership
        self.weights_ = weights
        self.cost_ = float(cost)
        self.n_iter_ = n_iter
        return self

    def _test_dissims(self, X):
        X = self._check_test_data(X)
        # new data is scaled by its own column maxima
        Xcat, Xnum = self._split(X)
        return _dissim_matrix(
            Xcat,
            Xnum,
            self.cluster_centroids_cat_,
            self.cluster_centroids_num_,
            self._resolve_dissim(self.weights_),
            self.gamma_,
        )

    def predict(self, X):
        """Predict the closest cluster index for each sample in ``X``.

        The partition and max-scaling applied during :meth:`fit` are
        repeated on ``X`` before the nearest-centroid lookup.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            New samples.

        Returns
        -------
        labels : ndarray of shape (n_samples,)
        """
        check_is_fitted(self, "cluster_centroids_cat_")
        return np.argmin(self._test_dissims(X), axis=1)
