import numpy as np
import pytest

from sklkmodes import (
    DimensionError,
    compute_weights,
    euclidean_dissim,
    hamming_dissim,
    weighted_hamming_dissim,
)

A = np.array([1.0, 1.0, 1.0])
C = np.array([1.0, 2.0, 3.0, 4.0])
D = np.array([1.0, 1.0, 3.0, 3.0])


def test_hamming():
    assert hamming_dissim(A, A.copy()) == 0
    assert hamming_dissim(C, D) == 2
    with pytest.raises(DimensionError):
        hamming_dissim(A, C)


def test_weighted_hamming():
    assert weighted_hamming_dissim(C, D, [1, 1, 1, 2]) == 3
    assert weighted_hamming_dissim(C, C, [1, 1, 1, 2]) == 0
    with pytest.raises(DimensionError, match="do not match"):
        weighted_hamming_dissim(A, D, [1, 1, 1, 2])
    with pytest.raises(DimensionError, match="weight vector length"):
        weighted_hamming_dissim(C, D, [1])


def test_euclidean():
    assert euclidean_dissim(A, A.copy()) == 0
    assert euclidean_dissim(C, D) == pytest.approx(1.41421, abs=1e-5)
    with pytest.raises(DimensionError):
        euclidean_dissim(A, C)


def test_dimension_error_is_value_error():
    with pytest.raises(ValueError):
        hamming_dissim([1, 2], [1, 2, 3])


def test_compute_weights_constant_column():
    X = np.array([[1.0], [1.0], [1.0]])
    np.testing.assert_array_equal(compute_weights(X), [0.0])


@pytest.mark.parametrize(
    "X, importance, expected",
    [
        ([[1, 2], [2, 1], [1, 2]], 1.0, [1.0, 1.0]),
        ([[1, 2], [1, 1], [1, 2]], 1.0, [0.0, 1.0]),
        ([[1], [2], [1], [2]], 3.0, [3.0]),
        ([[1, 1], [2, 2], [3, 1]], 1.0, [2.0 / 3.0, 1.0]),
    ],
)
def test_compute_weights(X, importance, expected):
    weights = compute_weights(np.asarray(X, dtype=float), importance)
    np.testing.assert_allclose(weights, expected)
    assert weights.max() == pytest.approx(importance)
