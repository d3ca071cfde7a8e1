"""
DBSCAN (Density-Based Spatial Clustering of Applications with Noise).

Implements:
- Epsilon-neighborhood queries (Euclidean, inclusive, self excluded)
- Core point detection with min_points
- Breadth-first cluster expansion with border-point inclusion

Label convention:
    -2 = unvisited, -1 = noise, 1..n = cluster ids in discovery order
"""

import logging
import numpy as np
from typing import List

from .errors import check_at_least, check_positive
from .utils import pairwise_squared_distances

logger = logging.getLogger(__name__)

UNVISITED = -2
NOISE = -1


class DBSCAN:
    """
    Density-based clustering.

    A point is a core point when at least ``min_points`` *other* points lie
    within ``epsilon`` of it. Clusters grow from core points; border points
    join the first cluster that reaches them and are never reassigned.
    """

    def __init__(self, epsilon: float = 0.2, min_points: int = 5):
        """
        Initialize DBSCAN.

        Args:
            epsilon: Neighborhood radius (> 0)
            min_points: Neighbors required for a core point (>= 1)
        """
        self.epsilon = check_positive('epsilon', epsilon)
        self.min_points = check_at_least('min_points', min_points, 1)

        self.labels_: np.ndarray = np.empty(0, dtype=np.int64)
        self.core_sample_mask_: np.ndarray = np.empty(0, dtype=bool)
        self.n_clusters_: int = 0
        self._neighborhoods: List[np.ndarray] = []

    def _region_query(self, X: np.ndarray) -> List[np.ndarray]:
        """Indices of all other points within epsilon, for every point."""
        within = pairwise_squared_distances(X, X) <= self.epsilon ** 2
        np.fill_diagonal(within, False)
        return [np.flatnonzero(row) for row in within]

    def fit(self, X: np.ndarray) -> 'DBSCAN':
        """
        Cluster the points.

        Args:
            X: Points of shape (n_points, 2)

        Returns:
            self
        """
        X = np.array(X, dtype=np.float64)
        n_points = len(X)

        labels = np.full(n_points, UNVISITED, dtype=np.int64)
        neighborhoods = self._region_query(X) if n_points else []
        is_core = np.array([len(nb) >= self.min_points for nb in neighborhoods], dtype=bool)

        cluster_id = 0
        for i in range(n_points):
            if labels[i] != UNVISITED:
                continue

            if not is_core[i]:
                labels[i] = NOISE
                continue

            cluster_id += 1
            labels[i] = cluster_id

            frontier = list(neighborhoods[i])
            queued = set(frontier)
            queued.add(i)

            idx = 0
            while idx < len(frontier):
                j = frontier[idx]
                idx += 1

                if labels[j] == NOISE:
                    # Border point: joins the cluster, does not expand it
                    labels[j] = cluster_id
                elif labels[j] == UNVISITED:
                    labels[j] = cluster_id
                    if is_core[j]:
                        for q in neighborhoods[j]:
                            if q not in queued:
                                queued.add(q)
                                frontier.append(q)

            logger.debug("DBSCAN cluster %d: %d points",
                         cluster_id, int(np.sum(labels == cluster_id)))

        self.labels_ = labels
        self.core_sample_mask_ = is_core
        self.n_clusters_ = cluster_id
        self._neighborhoods = neighborhoods
        return self

    def fit_predict(self, X: np.ndarray) -> np.ndarray:
        """Cluster the points and return their labels."""
        return self.fit(X).labels_

    def noise_count(self) -> int:
        """Number of points labelled as noise."""
        return int(np.sum(self.labels_ == NOISE))

    def neighbors(self, index: int) -> np.ndarray:
        """Epsilon-neighborhood of a point from the last fit."""
        return self._neighborhoods[index]


def dbscan(X: np.ndarray, epsilon: float, min_points: int) -> np.ndarray:
    """Functional form: labels for ``X`` under the given density settings."""
    return DBSCAN(epsilon=epsilon, min_points=min_points).fit_predict(X)
