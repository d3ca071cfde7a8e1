"""
Regression engine tests.

Tests for:
- Frame -> iteration mapping
- Linear regression gradient steps, convergence, resume and rewind
- Logistic regression labels, decision boundary and error rate
- Synthetic regression data
"""

import numpy as np
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ml_engines import (
    LinearRegressionGD, LogisticRegressionGD, iterations_for_frame, sigmoid, InvalidParameter,
)
from src.dataset import linear_regression_data, logistic_regression_data


X_LINE = np.linspace(-1, 1, 50)
Y_LINE = 2 * X_LINE + 1


def test_iterations_for_frame():
    assert iterations_for_frame(0, 100) == 1
    assert iterations_for_frame(50, 100) == 51
    assert iterations_for_frame(100, 100) == 100
    assert iterations_for_frame(99, 10) == 10
    assert iterations_for_frame(500, 40) == 40
    assert iterations_for_frame(10, 0) == 0
    with pytest.raises(InvalidParameter):
        iterations_for_frame(-1, 10)


def test_first_step_matches_closed_form():
    model = LinearRegressionGD(X_LINE, Y_LINE, learning_rate=0.3)
    model.step()
    assert model.weight == pytest.approx(0.3 * np.mean(X_LINE * Y_LINE))
    assert model.bias == pytest.approx(0.3 * np.mean(Y_LINE))
    assert model.history == [(model.weight, model.bias)]


def test_linear_regression_recovers_noiseless_line():
    print("=" * 60)
    print("TEST: Linear regression convergence")
    print("=" * 60)

    model = LinearRegressionGD(X_LINE, Y_LINE, learning_rate=0.5).fit(3000)
    assert abs(model.weight - 2.0) < 0.1
    assert abs(model.bias - 1.0) < 0.1
    assert model.mse() < 1e-3
    print(f"  w={model.weight:.4f} b={model.bias:.4f} mse={model.mse():.2e}")


def test_mse_decreases_every_step():
    model = LinearRegressionGD(X_LINE, Y_LINE + 0.1 * np.sin(7 * X_LINE), learning_rate=0.1)
    previous = model.mse()
    for _ in range(50):
        model.step()
        assert model.mse() <= previous + 1e-12
        previous = model.mse()


def test_advance_resumes_and_rewinds():
    x, y = linear_regression_data(0.3, np.random.default_rng(0))

    fresh = LinearRegressionGD(x, y, 0.1).advance(40)
    stepped = LinearRegressionGD(x, y, 0.1).advance(15).advance(40)
    assert stepped.weight == fresh.weight
    assert stepped.bias == fresh.bias

    at_20 = LinearRegressionGD(x, y, 0.1).advance(20)
    w20, b20 = at_20.weight, at_20.bias
    at_20.advance(70).advance(20)
    assert at_20.steps_completed == 20
    assert (at_20.weight, at_20.bias) == (w20, b20)
    assert len(at_20.history) == 20

    at_20.advance(0)
    assert (at_20.weight, at_20.bias) == (0.0, 0.0)


def test_linear_validation():
    with pytest.raises(InvalidParameter):
        LinearRegressionGD([1.0, 2.0], [1.0], 0.1)
    with pytest.raises(InvalidParameter):
        LinearRegressionGD([], [], 0.1)
    with pytest.raises(InvalidParameter):
        LinearRegressionGD([1.0], [1.0], 0.0)


# =============================================================================
# LOGISTIC
# =============================================================================

X_SEP = np.linspace(-1, 1, 50)
Y_SEP = (X_SEP > 0).astype(int)


def test_sigmoid():
    assert sigmoid(0.0) == 0.5
    assert sigmoid(1000.0) == pytest.approx(1.0)
    assert sigmoid(-1000.0) == pytest.approx(0.0)
    np.testing.assert_allclose(sigmoid(np.array([-2.0, 2.0])).sum(), 1.0)


def test_logistic_initial_state():
    model = LogisticRegressionGD(X_SEP, Y_SEP, 0.1)
    np.testing.assert_allclose(model.predict_proba(X_SEP), 0.5)
    assert model.log_loss() == pytest.approx(np.log(2))
    # p == boundary is not class 1
    assert model.predict_classes(X_SEP).sum() == 0

    model.decision_boundary = 0.4
    assert model.predict_classes(X_SEP).sum() == 50


def test_logistic_learns_separable_data():
    print("\n" + "=" * 60)
    print("TEST: Logistic regression")
    print("=" * 60)

    model = LogisticRegressionGD(X_SEP, Y_SEP, learning_rate=0.5).fit(500)
    assert model.weight > 0
    assert model.error_rate() == 0.0
    assert model.log_loss() < np.log(2)

    first_step = LogisticRegressionGD(X_SEP, Y_SEP, learning_rate=0.5).advance(1)
    assert first_step.weight == pytest.approx(0.5 * np.mean(X_SEP * (Y_SEP - 0.5)))
    print(f"  w={model.weight:.3f} b={model.bias:.3f} error={model.error_rate():.2f}")


def test_logistic_validation():
    with pytest.raises(InvalidParameter):
        LogisticRegressionGD([0.0, 1.0], [0, 2])
    with pytest.raises(InvalidParameter):
        LogisticRegressionGD([0.0, 1.0], [0, 1], decision_boundary=1.0)


# =============================================================================
# DATA
# =============================================================================

def test_regression_data_generators():
    x, y = linear_regression_data(0.0, np.random.default_rng(1))
    assert x.shape == y.shape == (100,)
    assert np.all((x >= -1) & (x <= 1))
    np.testing.assert_allclose(y, 2 * x + 1)

    x, y = linear_regression_data(0.5, np.random.default_rng(1))
    assert np.all(np.abs(y - (2 * x + 1)) <= 0.5)

    x, labels = logistic_regression_data(0.0, np.random.default_rng(2))
    assert set(np.unique(labels)) <= {0, 1}
    assert np.array_equal(labels, (x > 0).astype(int))


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
