"""
Kernel-margin SVM tests.

Tests for:
- Heuristic coefficient assignment
- Decision function, prediction and highlight rules
- Decision surface layout
- SVM dataset generation
"""

import numpy as np
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ml_engines import KernelMarginClassifier, InvalidParameter
from src.dataset import svm_points


@pytest.fixture
def data():
    return svm_points(0.1, 'rbf', np.random.default_rng(0))


@pytest.mark.parametrize("kernel", ["linear", "rbf"])
@pytest.mark.parametrize("C", [0.1, 1.0, 2.0])
def test_coefficients_follow_margin_cutoff(data, kernel, C):
    X, y = data
    model = KernelMarginClassifier(C=C, kernel=kernel, gamma=0.5).fit(X, y)

    nonzero = model.alpha_ != 0
    assert np.all(np.abs(model.base_decision_[nonzero]) < 1.0 / C)
    assert np.all(np.abs(model.base_decision_[~nonzero]) >= 1.0 / C)
    np.testing.assert_allclose(np.abs(model.alpha_[nonzero]), C)
    assert np.all(np.sign(model.alpha_[nonzero]) == model.signs_[nonzero])
    assert model.n_support_ == int(nonzero.sum())


def test_decision_function_is_kernel_expansion(data):
    print("=" * 60)
    print("TEST: SVM decision function")
    print("=" * 60)

    X, y = data
    model = KernelMarginClassifier(C=1.0, kernel='rbf', gamma=0.5).fit(X, y)

    query = np.array([[0.3, -0.7], [1.5, 1.5]])
    d2 = np.sum((query[:, None, :] - X[None, :, :]) ** 2, axis=2)
    expected = np.exp(-0.5 * d2) @ model.alpha_
    np.testing.assert_allclose(model.decision_function(query), expected)

    K = np.exp(-0.5 * np.sum((X[:, None, :] - X[None, :, :]) ** 2, axis=2))
    np.testing.assert_allclose(model.base_decision_, K @ model.signs_)

    highlight = np.abs(model.decision_function(X)) <= 1.05
    assert np.array_equal(model.highlight_mask(), highlight)
    print(f"  support={model.n_support_} highlighted={int(highlight.sum())} errors={model.error_count()}")


def test_linear_kernel_and_zero_decision():
    X = np.array([[2.0, 2.0], [-2.0, -2.0]])
    y = np.array([1, 0])
    model = KernelMarginClassifier(C=2.0, kernel='linear').fit(X, y)

    # K = [[8, -8], [-8, 8]]: both bases lie far outside 1/C
    np.testing.assert_allclose(model.base_decision_, [16.0, -16.0])
    assert model.n_support_ == 0
    # f == 0 everywhere and 0 is not > 0
    assert model.predict(X).tolist() == [0, 0]
    assert model.error_count() == 1
    assert model.highlight_mask().tolist() == [True, True]


def test_decision_surface_grid(data):
    X, y = data
    model = KernelMarginClassifier(C=0.5, kernel='rbf', gamma=1.0).fit(X, y)
    xs, ys, values = model.decision_surface(resolution=10, extent=(-5.0, 5.0))

    assert len(xs) == len(ys) == 10
    np.testing.assert_allclose(xs, np.arange(-5.0, 5.0))
    assert values.shape == (10, 10)
    assert values[3, 7] == pytest.approx(model.decision_function([[xs[3], ys[7]]])[0])

    band = model.margin_band(values)
    assert band.dtype == bool
    assert np.array_equal(band, np.abs(values) < 1.0)


def test_svm_points_rules():
    X, y = svm_points(0.0, 'linear', np.random.default_rng(1))
    assert X.shape == (15, 2)
    assert np.all((X >= -2) & (X <= 2))
    assert np.array_equal(y, (X[:, 1] > 0.5 * X[:, 0]).astype(int))

    X, y = svm_points(0.0, 'rbf', np.random.default_rng(2))
    assert np.array_equal(y, (np.sqrt(np.sum(X ** 2, axis=1)) < 1.2).astype(int))


def test_validation():
    with pytest.raises(InvalidParameter):
        KernelMarginClassifier(kernel='poly')
    with pytest.raises(InvalidParameter):
        KernelMarginClassifier().fit(np.zeros((2, 2)), np.array([0, 2]))
    with pytest.raises(ValueError):
        KernelMarginClassifier().decision_function([[0.0, 0.0]])


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
