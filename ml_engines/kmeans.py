"""
K-Means clustering from scratch.

Implements:
- Lloyd iterations: assignment step + centroid update step
- Random re-seeding of centroids whose cluster became empty
- Step-composable state, so an animation can resume where it stopped

The run length is fixed by the caller: there is no convergence check, each
call performs exactly the number of steps requested.
"""

import logging
import numpy as np
from typing import Optional, Tuple

from .errors import check_at_least, InvalidParameter
from .utils import pairwise_squared_distances, resolve_rng

logger = logging.getLogger(__name__)


class KMeans:
    """
    K-Means clustering on 2-D points.

    Assignment:
        c_i = argmin_j ||x_i - mu_j||^2   (ties -> lowest j)
    Update:
        mu_j = mean({x_i : c_i = j})
    Empty cluster:
        mu_j ~ Uniform(domain)

    The points are fixed for the lifetime of the object. Centroids and
    assignments persist between calls to :meth:`step`, :meth:`run` and
    :meth:`advance`.
    """

    def __init__(self,
                 points: np.ndarray,
                 k: int,
                 domain: Tuple[Tuple[float, float], Tuple[float, float]] = ((0.0, 1.0), (0.0, 1.0)),
                 centroids: Optional[np.ndarray] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize K-Means.

        Args:
            points: Data of shape (n_points, 2)
            k: Number of clusters (>= 1)
            domain: ((x_min, x_max), (y_min, y_max)) used for random
                    initial centroids and for re-seeding empty clusters
            centroids: Optional initial centroids of shape (k, 2);
                       drawn uniformly from ``domain`` when omitted
            rng: Random generator for initialization and re-seeding
        """
        self.k = check_at_least('k', k, 1)
        self.points = np.array(points, dtype=np.float64)
        if self.points.ndim != 2 or self.points.shape[1] != 2:
            raise InvalidParameter('points', self.points.shape, "must have shape (n, 2)")
        self.domain = domain
        self.rng = resolve_rng(rng)

        if centroids is None:
            self.centroids_ = self._random_points(self.k)
        else:
            self.centroids_ = np.array(centroids, dtype=np.float64)
            if self.centroids_.shape != (self.k, 2):
                raise InvalidParameter('centroids', self.centroids_.shape,
                                       f"must have shape ({self.k}, 2)")

        self.labels_ = np.zeros(len(self.points), dtype=np.int64)
        self.steps_completed = 0
        self.reseeded_: list = []

    def _random_points(self, n: int) -> np.ndarray:
        """Draw n points uniformly from the domain."""
        (x_min, x_max), (y_min, y_max) = self.domain
        xs = self.rng.uniform(x_min, x_max, size=n)
        ys = self.rng.uniform(y_min, y_max, size=n)
        return np.column_stack([xs, ys])

    # =========================================================================
    # Sub-steps
    # =========================================================================

    def assign(self) -> np.ndarray:
        """Assign every point to its nearest centroid."""
        if len(self.points) == 0:
            return self.labels_
        distances = pairwise_squared_distances(self.points, self.centroids_)
        # argmin returns the first minimum, which is the lowest centroid index
        self.labels_ = np.argmin(distances, axis=1).astype(np.int64)
        return self.labels_

    def update_centroids(self) -> np.ndarray:
        """Move centroids to the mean of their points; re-seed empty ones."""
        self.reseeded_ = []
        new_centroids = np.empty_like(self.centroids_)

        for j in range(self.k):
            members = self.points[self.labels_ == j]
            if len(members) > 0:
                new_centroids[j] = members.mean(axis=0)
            else:
                new_centroids[j] = self._random_points(1)[0]
                self.reseeded_.append(j)

        if self.reseeded_:
            logger.debug("Re-seeded empty clusters %s", self.reseeded_)

        self.centroids_ = new_centroids
        return self.centroids_

    # =========================================================================
    # Stepping
    # =========================================================================

    def step(self) -> 'KMeans':
        """Perform one full iteration (assign + update)."""
        self.assign()
        self.update_centroids()
        self.steps_completed += 1
        logger.debug("K-Means step %d: inertia=%.4f", self.steps_completed, self.inertia())
        return self

    def run(self, iterations: int) -> 'KMeans':
        """Perform exactly ``iterations`` more steps."""
        iterations = check_at_least('iterations', iterations, 0)
        for _ in range(iterations):
            self.step()
        return self

    def advance(self, target_step: int) -> 'KMeans':
        """
        Continue until ``target_step`` steps have been completed in total.

        K-Means state only moves forward; targets at or below the steps
        already completed leave the state untouched.
        """
        target_step = check_at_least('target_step', target_step, 0)
        return self.run(max(0, target_step - self.steps_completed))

    # =========================================================================
    # Display statistics
    # =========================================================================

    def cluster_sizes(self) -> np.ndarray:
        """Number of points currently assigned to each centroid."""
        return np.bincount(self.labels_, minlength=self.k)

    def inertia(self, labels: Optional[np.ndarray] = None) -> float:
        """
        Sum of squared distances from points to their assigned centroid.

        Args:
            labels: Assignment to evaluate (defaults to the current one)
        """
        labels = self.labels_ if labels is None else labels
        if len(self.points) == 0:
            return 0.0
        diff = self.points - self.centroids_[labels]
        return float(np.sum(diff ** 2))

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Nearest-centroid index for new points."""
        X = np.array(X, dtype=np.float64)
        return np.argmin(pairwise_squared_distances(X, self.centroids_), axis=1)
