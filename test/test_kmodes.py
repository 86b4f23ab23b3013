import pickle
from collections import Counter

import numpy as np
import pytest
from sklearn.exceptions import ConvergenceWarning

from sklkmodes import (
    ComputationError,
    ConfigurationError,
    DimensionError,
    KModes,
    NotFittedError,
    hamming_dissim,
    init_huang,
)


def _toy_data():
    # 3 x [1, 1] followed by 3 x [1, 2]
    return np.array([[1, 1]] * 3 + [[1, 2]] * 3, dtype=float)


def _random_data():
    rng = np.random.RandomState(0)
    return rng.randint(0, 4, size=(60, 4)).astype(float)


def _sort_rows(C):
    return C[np.lexsort(C.T[::-1])]


def _check_bookkeeping(km, X):
    n_clusters = km.n_clusters
    assert km.labels_.min() >= 0 and km.labels_.max() < n_clusters
    assert km.labels_counter_.sum() == X.shape[0]
    np.testing.assert_array_equal(
        km.labels_counter_, np.bincount(km.labels_, minlength=n_clusters)
    )
    for k in range(n_clusters):
        for j in range(X.shape[1]):
            freq = km.cluster_attr_freq_[k][j]
            assert sum(freq.values()) == km.labels_counter_[k]
            assert freq == dict(Counter(X[km.labels_ == k, j].tolist()))


@pytest.mark.parametrize("init", ["huang", "cao", "random"])
def test_kmodes_separable_data(init):
    X = _toy_data()
    km = KModes(n_clusters=2, init=init, max_iter=100, random_state=0).fit(X)
    np.testing.assert_array_equal(
        _sort_rows(km.cluster_centroids_), [[1, 1], [1, 2]]
    )
    assert len(set(km.labels_[:3])) == 1
    assert len(set(km.labels_[3:])) == 1
    assert km.labels_[0] != km.labels_[3]
    np.testing.assert_array_equal(km.predict(X), km.labels_)
    _check_bookkeeping(km, X)


def test_kmodes_cao_labels():
    X = np.array([[1, 1]] * 3 + [[1, 2]] * 4, dtype=float)
    km = KModes(n_clusters=2, init="cao").fit(X)
    np.testing.assert_array_equal(km.cluster_centroids_, [[1, 2], [1, 1]])
    np.testing.assert_array_equal(km.labels_, [1, 1, 1, 0, 0, 0, 0])
    assert km.cost_ == 0
    assert km.n_iter_ == 1


def test_kmodes_predict():
    km = KModes(n_clusters=2, init="cao").fit(_toy_data())
    np.testing.assert_array_equal(km.predict([[1, 1]]), [0])
    np.testing.assert_array_equal(km.predict([[1, 2], [2, 1]]), [1, 0])


def test_kmodes_predict_wrong_width():
    km = KModes(n_clusters=2, init="cao").fit(_toy_data())
    with pytest.raises(DimensionError):
        km.predict([[1, 1, 1]])


def test_kmodes_not_fitted():
    with pytest.raises(NotFittedError):
        KModes(n_clusters=2).predict(_toy_data())


@pytest.mark.parametrize(
    "params",
    [
        {"n_clusters": 0},
        {"max_iter": 0},
        {"n_init": 0},
        {"metric": None},
        {"init": None},
        {"metric": "cosine"},
        {"init": "k-means++"},
        {"metric": "weighted_hamming"},
        {"weights": [[[1.0]]]},
    ],
)
def test_kmodes_configuration_errors(params):
    km = KModes(**{"n_clusters": 2, **params})
    with pytest.raises(ConfigurationError):
        km.fit(_toy_data())
    assert not hasattr(km, "cluster_centroids_")
    with pytest.raises(NotFittedError):
        km.predict(_toy_data())


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        KModes(n_clusters=0).fit(_toy_data())


def test_kmodes_bookkeeping_random_data():
    X = _random_data()
    for init in ("huang", "cao", "random"):
        km = KModes(n_clusters=3, init=init, random_state=0).fit(X)
        _check_bookkeeping(km, X)


def test_kmodes_weighted_hamming():
    X = _toy_data()
    km = KModes(
        n_clusters=2, metric="weighted_hamming", weights=[1.0, 2.0], init="cao"
    ).fit(X)
    np.testing.assert_array_equal(km.weights_, [1.0, 2.0])
    np.testing.assert_array_equal(km.cluster_centroids_, [[1, 1], [1, 2]])
    np.testing.assert_array_equal(km.predict(X), km.labels_)


def test_kmodes_weight_vectors_first_is_used():
    km = KModes(
        n_clusters=2,
        metric="weighted_hamming",
        weights=[[1.0, 2.0], [5.0, 5.0]],
    ).fit(_toy_data())
    np.testing.assert_array_equal(km.weights_, [1.0, 2.0])


def test_kmodes_auto_weights():
    km = KModes(
        n_clusters=2, metric="weighted_hamming", weights="auto", importance=2.0
    ).fit(_toy_data())
    np.testing.assert_array_equal(km.weights_, [0.0, 2.0])


def test_kmodes_weight_length_mismatch():
    km = KModes(n_clusters=2, metric="weighted_hamming", weights=[1.0, 1.0, 1.0])
    with pytest.raises(DimensionError):
        km.fit(_toy_data())


def test_kmodes_callable_metric_and_init():
    X = _toy_data()
    km = KModes(
        n_clusters=2,
        metric=lambda a, b: float(np.sum(a != b)),
        init=init_huang,
    ).fit(X)
    np.testing.assert_array_equal(km.cluster_centroids_, [[1, 1], [1, 2]])


def test_kmodes_init_array():
    X = _toy_data()
    km = KModes(n_clusters=2, init=np.array([[1.0, 2.0], [1.0, 1.0]])).fit(X)
    np.testing.assert_array_equal(km.labels_, [1, 1, 1, 0, 0, 0])
    with pytest.raises(ConfigurationError):
        KModes(n_clusters=3, init=np.array([[1.0, 2.0], [1.0, 1.0]])).fit(X)


def test_kmodes_init_callable_wrong_shape():
    def bad_init(X, n_clusters, dissim, random_state):
        return X[:1]

    with pytest.raises(ComputationError):
        KModes(n_clusters=2, init=bad_init).fit(_toy_data())


def test_kmodes_empty_cluster_is_reseeded():
    X = _toy_data()
    init = np.array([[1.0, 1.0], [1.0, 1.0]])
    km = KModes(n_clusters=2, init=init, max_iter=100, random_state=0).fit(X)
    np.testing.assert_array_equal(
        _sort_rows(km.cluster_centroids_), [[1, 1], [1, 2]]
    )
    _check_bookkeeping(km, X)


def test_kmodes_max_iter_warning():
    X = _toy_data()
    init = np.array([[1.0, 1.0], [1.0, 1.0]])
    km = KModes(n_clusters=2, init=init, max_iter=1, random_state=0)
    with pytest.warns(ConvergenceWarning):
        km.fit(X)
    # still usable after hitting the iteration cap
    assert km.predict(X).shape == (X.shape[0],)
    assert km.n_iter_ == 1


def test_kmodes_duplicate_centroids():
    X = _toy_data()
    km = KModes(n_clusters=3, init="huang", max_iter=5, random_state=0)
    with pytest.warns(ConvergenceWarning):
        km.fit(X)
    _check_bookkeeping(km, X)


def test_kmodes_n_init_warning():
    with pytest.warns(UserWarning, match="single run"):
        KModes(n_clusters=2, n_init=3).fit(_toy_data())


def test_kmodes_transform_and_fit_predict():
    X = _random_data()
    km = KModes(n_clusters=3, random_state=0)
    labels = km.fit_predict(X)
    np.testing.assert_array_equal(labels, km.labels_)
    D = km.transform(X)
    assert D.shape == (X.shape[0], 3)
    assert D[0, 0] == hamming_dissim(X[0], km.cluster_centroids_[0])
    np.testing.assert_array_equal(np.argmin(D, axis=1), km.predict(X))


def test_kmodes_verbose(capsys):
    KModes(n_clusters=2, verbose=1).fit(_toy_data())
    out = capsys.readouterr().out
    assert "Initialization complete" in out
    assert "Converged at iteration" in out


def test_kmodes_pickle():
    X = _random_data()
    km = KModes(n_clusters=3, random_state=0).fit(X)
    restored = pickle.loads(pickle.dumps(km))
    np.testing.assert_array_equal(restored.predict(X), km.predict(X))
    assert restored.cluster_attr_freq_ == km.cluster_attr_freq_
    np.testing.assert_array_equal(restored.labels_counter_, km.labels_counter_)


def test_kmodes_failed_refit_keeps_fitted_state():
    X = _toy_data()
    km = KModes(n_clusters=2, init="cao").fit(X)
    centroids = km.cluster_centroids_.copy()
    labels = km.labels_.copy()

    km.set_params(init=np.array([[1.0, 1.0, 1.0]]))
    with pytest.raises(ConfigurationError):
        km.fit(np.ones((6, 3)))
    assert km.n_features_in_ == 2
    np.testing.assert_array_equal(km.cluster_centroids_, centroids)
    np.testing.assert_array_equal(km.predict(X), labels)


def test_kmodes_predict_does_not_mutate():
    X = _random_data()
    km = KModes(n_clusters=3, random_state=0).fit(X)
    centroids = km.cluster_centroids_.copy()
    labels = km.labels_.copy()
    counter = km.labels_counter_.copy()
    freq = [[dict(f) for f in row] for row in km.cluster_attr_freq_]

    km.predict(X[::-1])
    km.transform(X[:5])
    np.testing.assert_array_equal(km.cluster_centroids_, centroids)
    np.testing.assert_array_equal(km.labels_, labels)
    np.testing.assert_array_equal(km.labels_counter_, counter)
    assert km.cluster_attr_freq_ == freq


if __name__ == "__main__":
    test_kmodes_cao_labels()
    test_kmodes_predict()
    test_kmodes_not_fitted()
    test_kmodes_bookkeeping_random_data()
    test_kmodes_weighted_hamming()
    test_kmodes_pickle()
