"""
Linear Regression from scratch using batch gradient descent.

Implements:
- Single weight + bias model: y_hat = w * x + b
- Batch gradient of the mean squared error
- Resumable training state: advance(target_step) continues from the steps
  already completed, and rewinds to (0, 0) when asked to go backwards

Gradient (MSE, up to a constant factor):
    dw = mean(x * (w*x + b - y))
    db = mean(w*x + b - y)
"""

import logging
import numpy as np
from typing import List, Tuple

from .errors import check_at_least, check_positive, InvalidParameter

logger = logging.getLogger(__name__)


def iterations_for_frame(frame: int, iterations: int, frames_per_run: int = 100) -> int:
    """
    Number of completed training steps to show at an animation frame.

    min(iterations, floor(frame / frames_per_run * iterations) + 1)
    """
    frame = check_at_least('frame', frame, 0)
    iterations = check_at_least('iterations', iterations, 0)
    return min(iterations, int(np.floor(frame / frames_per_run * iterations)) + 1)


class GradientDescentRegressor:
    """
    Shared state and stepping for the one-feature gradient descent models.

    Subclasses define the link function via :meth:`_link`.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray, learning_rate: float = 0.1):
        self.x = np.array(x, dtype=np.float64).ravel()
        self.y = np.array(y, dtype=np.float64).ravel()
        if len(self.x) != len(self.y):
            raise InvalidParameter('y', len(self.y), f"expected {len(self.x)} targets")
        if len(self.x) == 0:
            raise InvalidParameter('x', 0, "training set must not be empty")
        self.learning_rate = check_positive('learning_rate', learning_rate)

        self.weight = 0.0
        self.bias = 0.0
        self.steps_completed = 0
        self.history: List[Tuple[float, float]] = []

    def _link(self, z: np.ndarray) -> np.ndarray:
        return z

    def predict(self, x: np.ndarray) -> np.ndarray:
        """Model output for inputs x."""
        x = np.asarray(x, dtype=np.float64)
        return self._link(self.weight * x + self.bias)

    def gradients(self) -> Tuple[float, float]:
        """Batch gradients (dw, db) at the current parameters."""
        error = self.predict(self.x) - self.y
        dw = float(np.mean(self.x * error))
        db = float(np.mean(error))
        return dw, db

    def step(self):
        """Perform one gradient descent update."""
        dw, db = self.gradients()
        self.weight -= self.learning_rate * dw
        self.bias -= self.learning_rate * db
        self.steps_completed += 1
        self.history.append((self.weight, self.bias))
        return self

    def reset(self):
        """Return to the initial parameters (0, 0)."""
        self.weight = 0.0
        self.bias = 0.0
        self.steps_completed = 0
        self.history = []
        return self

    def advance(self, target_step: int):
        """
        Bring the model to exactly ``target_step`` completed steps.

        Moving forward performs only the missing steps; moving backward
        replays from the initial parameters.
        """
        target_step = check_at_least('target_step', target_step, 0)
        if target_step < self.steps_completed:
            logger.debug("Rewinding %s from step %d to %d",
                         type(self).__name__, self.steps_completed, target_step)
            self.reset()
        while self.steps_completed < target_step:
            self.step()
        return self

    def fit(self, iterations: int):
        """Train from scratch for ``iterations`` steps."""
        return self.reset().advance(iterations)


class LinearRegressionGD(GradientDescentRegressor):
    """
    Linear regression y_hat = w * x + b trained by batch gradient descent.

    Starts at w = 0, b = 0 and reports the mean squared error of the
    current line for display.
    """

    def mse(self) -> float:
        """Mean squared error on the training points."""
        residuals = self.y - self.predict(self.x)
        return float(np.mean(residuals ** 2))
