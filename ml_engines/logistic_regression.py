"""
Logistic Regression from scratch using batch gradient descent.

Same single weight + bias model as the linear engine, passed through a
sigmoid link:

    p = sigmoid(w * x + b)
    dw = mean(x * (p - y)),  db = mean(p - y)

A decision boundary on p turns probabilities into classes for the error
rate shown alongside the curve.
"""

import numpy as np

from .errors import InvalidParameter
from .linear_regression import GradientDescentRegressor


def sigmoid(z: np.ndarray) -> np.ndarray:
    """Logistic function 1 / (1 + e^-z)."""
    # Clip to prevent overflow
    z = np.clip(z, -500, 500)
    return 1 / (1 + np.exp(-z))


class LogisticRegressionGD(GradientDescentRegressor):
    """
    Binary logistic regression on one feature.

    Labels must be 0 or 1.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray,
                 learning_rate: float = 0.1,
                 decision_boundary: float = 0.5):
        """
        Initialize Logistic Regression.

        Args:
            x: Inputs (n_samples,)
            y: Binary labels (n_samples,)
            learning_rate: Step size
            decision_boundary: Probability above which a point is class 1
        """
        super().__init__(x, y, learning_rate)
        if not np.all(np.isin(self.y, (0.0, 1.0))):
            raise InvalidParameter('y', np.unique(self.y).tolist(), "labels must be 0 or 1")
        if not 0 < decision_boundary < 1:
            raise InvalidParameter('decision_boundary', decision_boundary, "must be in (0, 1)")
        self.decision_boundary = decision_boundary

    def _link(self, z: np.ndarray) -> np.ndarray:
        return sigmoid(z)

    def predict_proba(self, x: np.ndarray) -> np.ndarray:
        """Probability of class 1."""
        return self.predict(x)

    def predict_classes(self, x: np.ndarray) -> np.ndarray:
        """Class labels: 1 where probability > decision boundary."""
        return (self.predict_proba(x) > self.decision_boundary).astype(int)

    def error_rate(self) -> float:
        """Fraction of training points on the wrong side of the boundary."""
        return float(np.mean(self.predict_classes(self.x) != self.y))

    def log_loss(self) -> float:
        """Binary cross-entropy on the training points."""
        eps = 1e-15
        p = np.clip(self.predict_proba(self.x), eps, 1 - eps)
        return float(-np.mean(self.y * np.log(p) + (1 - self.y) * np.log(1 - p)))
