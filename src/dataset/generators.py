"""
Synthetic dataset generators for the visual essays.

Every generator takes a numpy Generator so that a seeded run of an essay
reproduces the same points.

- K-Means: uniform points over the canvas domain
- DBSCAN: blobs around random centers, plus uniform noise
- Linear regression: y = 2x + 1 + noise * U(-1, 1)
- Logistic regression: labels from a noisy sigmoid(5x)
- SOM: points on a ring of radius 0.6-0.8
- SVM: 15 points labelled by a line or a circle, with label flips
"""

import numpy as np
from typing import Tuple

from config import (
    KMEANS_X_RANGE, KMEANS_Y_RANGE,
    DBSCAN_TOTAL_POINTS, DBSCAN_NOISE_RATIO, DBSCAN_CLUSTER_RADIUS,
    DBSCAN_CENTER_RANGE, DBSCAN_DOMAIN,
    REGRESSION_POINTS, REGRESSION_X_RANGE,
    LINEAR_TRUE_WEIGHT, LINEAR_TRUE_BIAS, LOGISTIC_STEEPNESS,
    SOM_RING_POINTS, SOM_RING_INNER_RADIUS, SOM_RING_WIDTH,
    SVM_POINTS, SVM_DATA_RANGE, SVM_LINEAR_SLOPE, SVM_RBF_RADIUS,
)
from ml_engines.logistic_regression import sigmoid


def uniform_points(n_points: int, rng: np.random.Generator,
                   x_range: Tuple[float, float] = KMEANS_X_RANGE,
                   y_range: Tuple[float, float] = KMEANS_Y_RANGE) -> np.ndarray:
    """Points drawn uniformly from a rectangle."""
    xs = rng.uniform(x_range[0], x_range[1], size=n_points)
    ys = rng.uniform(y_range[0], y_range[1], size=n_points)
    return np.column_stack([xs, ys])


def dbscan_cluster_points(num_clusters: int, rng: np.random.Generator,
                          total_points: int = DBSCAN_TOTAL_POINTS,
                          noise_ratio: float = DBSCAN_NOISE_RATIO) -> np.ndarray:
    """
    Dense blobs for the DBSCAN essay.

    Centers are uniform in [-0.8, 0.8]^2; each point sits at a uniform
    angle and a uniform distance up to 0.3 from its center, clipped to
    [-1, 1]^2. The blobs share floor(total * (1 - noise_ratio)) points
    equally.
    """
    cluster_point_count = int(np.floor(total_points * (1 - noise_ratio)))
    per_cluster = cluster_point_count // num_clusters

    lo, hi = DBSCAN_CENTER_RANGE
    centers = rng.uniform(lo, hi, size=(num_clusters, 2))

    blobs = []
    for center in centers:
        angles = rng.uniform(0, 2 * np.pi, size=per_cluster)
        distances = rng.uniform(0, DBSCAN_CLUSTER_RADIUS, size=per_cluster)
        offsets = np.column_stack([np.cos(angles), np.sin(angles)]) * distances[:, np.newaxis]
        blobs.append(np.clip(center + offsets, *DBSCAN_DOMAIN))

    if not blobs:
        return np.empty((0, 2))
    return np.vstack(blobs)


def dbscan_noise_points(rng: np.random.Generator,
                        total_points: int = DBSCAN_TOTAL_POINTS,
                        noise_ratio: float = DBSCAN_NOISE_RATIO) -> np.ndarray:
    """Uniform background noise over [-1, 1]^2."""
    noise_count = int(np.floor(total_points * noise_ratio))
    return uniform_points(noise_count, rng, DBSCAN_DOMAIN, DBSCAN_DOMAIN)


def linear_regression_data(noise: float, rng: np.random.Generator,
                           n_points: int = REGRESSION_POINTS) -> Tuple[np.ndarray, np.ndarray]:
    """x ~ U(-1, 1), y = 2x + 1 + noise * U(-1, 1)."""
    x = rng.uniform(*REGRESSION_X_RANGE, size=n_points)
    y = LINEAR_TRUE_WEIGHT * x + LINEAR_TRUE_BIAS + rng.uniform(-1, 1, size=n_points) * noise
    return x, y


def logistic_regression_data(noise: float, rng: np.random.Generator,
                             n_points: int = REGRESSION_POINTS) -> Tuple[np.ndarray, np.ndarray]:
    """
    x ~ U(-1, 1); label 1 where clip(sigmoid(5x) + noise * U(-1, 1), 0, 1) > 0.5.
    """
    x = rng.uniform(*REGRESSION_X_RANGE, size=n_points)
    true_prob = sigmoid(LOGISTIC_STEEPNESS * x)
    noisy_prob = np.clip(true_prob + rng.uniform(-1, 1, size=n_points) * noise, 0, 1)
    return x, (noisy_prob > 0.5).astype(np.int64)


def ring_points(rng: np.random.Generator, n_points: int = SOM_RING_POINTS) -> np.ndarray:
    """Points on a ring: uniform angle, radius in [0.6, 0.8)."""
    angles = rng.uniform(0, 2 * np.pi, size=n_points)
    radii = SOM_RING_INNER_RADIUS + rng.uniform(0, 1, size=n_points) * SOM_RING_WIDTH
    return np.column_stack([np.cos(angles) * radii, np.sin(angles) * radii])


def svm_points(noise: float, kernel: str, rng: np.random.Generator,
               n_points: int = SVM_POINTS) -> Tuple[np.ndarray, np.ndarray]:
    """
    Labelled points for the SVM essay.

    Linear: label 1 above the line y = 0.5x.
    RBF: label 1 inside the circle of radius 1.2.
    Each label is flipped with probability ``noise``.
    """
    X = uniform_points(n_points, rng, SVM_DATA_RANGE, SVM_DATA_RANGE)
    if kernel == 'linear':
        clean = X[:, 1] > SVM_LINEAR_SLOPE * X[:, 0]
    else:
        clean = np.sqrt(np.sum(X ** 2, axis=1)) < SVM_RBF_RADIUS

    flip = rng.random(n_points) < noise
    labels = np.where(flip, ~clean, clean).astype(np.int64)
    return X, labels
