"""
Kernel-margin classifier (simplified Support Vector Machine).

This is a visual approximation of an SVM, not a quadratic-program solver:

1. Every training point gets a unit sign s_i = +1 (label 1) or -1 (label 0)
2. Base decision value per point through the kernel:
       base_i = sum_j s_j * K(x_i, x_j)
3. Points with |base_i| < 1/C are treated as support vectors and receive
   coefficient alpha_i = s_i * C; every other point gets alpha_i = 0
4. Decision surface:
       f(x) = sum_j alpha_j * K(x, x_j),   class = 1 if f(x) > 0 else 0

Points with |f(x_i)| <= 1.05 are highlighted as lying on the margin.

Kernels:
    linear: K(x, y) = x . y
    rbf:    K(x, y) = exp(-gamma * ||x - y||^2)
"""

import numpy as np
from typing import Literal, Optional, Tuple

from .errors import check_choice, check_positive, InvalidParameter
from .utils import pairwise_squared_distances

KERNELS = ('linear', 'rbf')


class KernelMarginClassifier:
    """
    Heuristic kernel-margin classifier for binary labels 0/1.

    Coefficients are recomputed from scratch on every fit; nothing is
    optimized iteratively.
    """

    def __init__(self,
                 C: float = 1.0,
                 kernel: Literal['linear', 'rbf'] = 'rbf',
                 gamma: float = 0.5,
                 highlight_threshold: float = 1.05):
        """
        Initialize the classifier.

        Args:
            C: Coefficient magnitude of support vectors; the support vector
               cutoff on |base decision| is 1/C
            kernel: 'linear' or 'rbf' (Gaussian)
            gamma: RBF kernel coefficient (ignored for linear)
            highlight_threshold: |f(x_i)| at or below which a training point
                                 is highlighted as a margin point
        """
        self.C = check_positive('C', C)
        self.kernel = check_choice('kernel', kernel, KERNELS)
        self.gamma = check_positive('gamma', gamma)
        self.highlight_threshold = highlight_threshold

        self.X_train_: Optional[np.ndarray] = None
        self.y_train_: Optional[np.ndarray] = None
        self.signs_: Optional[np.ndarray] = None
        self.base_decision_: Optional[np.ndarray] = None
        self.alpha_: Optional[np.ndarray] = None

    def _compute_kernel(self, X1: np.ndarray, X2: np.ndarray) -> np.ndarray:
        """Compute kernel matrix K(X1, X2)."""
        if self.kernel == 'linear':
            return X1 @ X2.T
        return np.exp(-self.gamma * pairwise_squared_distances(X1, X2))

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'KernelMarginClassifier':
        """
        Assign heuristic coefficients to the training points.

        Args:
            X: Training points (n_samples, 2)
            y: Labels in {0, 1}

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        y = np.array(y)
        if X.ndim != 2 or len(X) != len(y):
            raise InvalidParameter('X', X.shape, "must be 2-D with one row per label")
        if not np.all(np.isin(y, (0, 1))):
            raise InvalidParameter('y', np.unique(y).tolist(), "labels must be 0 or 1")

        self.X_train_ = X
        self.y_train_ = y.astype(np.int64)
        self.signs_ = np.where(self.y_train_ == 1, 1.0, -1.0)

        K = self._compute_kernel(X, X)
        self.base_decision_ = K @ self.signs_

        margin_cutoff = 1.0 / self.C
        self.alpha_ = np.where(np.abs(self.base_decision_) < margin_cutoff,
                               self.signs_ * self.C, 0.0)
        return self

    def _check_fitted(self):
        if self.alpha_ is None:
            raise ValueError("Model not fitted. Call fit() first.")

    @property
    def support_mask_(self) -> np.ndarray:
        """Training points with a non-zero coefficient."""
        self._check_fitted()
        return self.alpha_ != 0

    @property
    def n_support_(self) -> int:
        return int(np.sum(self.support_mask_))

    def decision_function(self, X: np.ndarray) -> np.ndarray:
        """f(x) = sum_j alpha_j K(x, x_j)."""
        self._check_fitted()
        X = np.atleast_2d(np.array(X, dtype=np.float64))
        return self._compute_kernel(X, self.X_train_) @ self.alpha_

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Class 1 where the decision value is positive."""
        return (self.decision_function(X) > 0).astype(np.int64)

    def highlight_mask(self) -> np.ndarray:
        """Training points drawn as support vectors (|f(x_i)| <= threshold)."""
        return np.abs(self.decision_function(self.X_train_)) <= self.highlight_threshold

    def error_count(self, X: Optional[np.ndarray] = None, y: Optional[np.ndarray] = None) -> int:
        """Misclassified points (training set by default)."""
        self._check_fitted()
        if X is None:
            X, y = self.X_train_, self.y_train_
        return int(np.sum(self.predict(X) != np.asarray(y)))

    def decision_surface(self, resolution: int = 200,
                         extent: Tuple[float, float] = (-5.0, 5.0)):
        """
        Decision values on a regular grid for shading the plane.

        Grid cell (px, py) sits at (lo + px/resolution * span,
        lo + py/resolution * span).

        Returns:
            Tuple of (xs, ys, values) with values[px, py]
        """
        lo, hi = extent
        coords = lo + np.arange(resolution) / resolution * (hi - lo)
        gx, gy = np.meshgrid(coords, coords, indexing='ij')
        grid = np.column_stack([gx.ravel(), gy.ravel()])
        values = self.decision_function(grid).reshape(resolution, resolution)
        return coords, coords, values

    def margin_band(self, values: np.ndarray, width: float = 1.0) -> np.ndarray:
        """Cells of a decision surface inside |f| < width."""
        return np.abs(values) < width
