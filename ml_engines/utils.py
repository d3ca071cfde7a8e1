"""
Distance and impurity utilities shared by the engines.

Implements:
- Squared and plain Euclidean distance (single pair and pairwise)
- Gini impurity: G(S) = 1 - sum(p_i^2)
- Shannon entropy: H(S) = -sum(p_i * log2(p_i)), with 0 * log2(0) := 0
- Random generator resolution for the injectable ``rng`` arguments
"""

import numpy as np
from typing import Optional, Sequence

from .errors import check_choice

CRITERIA = ('gini', 'entropy')


def squared_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Sum of squared coordinate differences."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.dot(diff, diff))


def euclidean(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance, the square root of :func:`squared_distance`."""
    return float(np.sqrt(squared_distance(a, b)))


def pairwise_squared_distances(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """
    Squared distances between every row of A and every row of B.

    Computed from explicit differences rather than the
    ||a||^2 + ||b||^2 - 2ab expansion so that identical points give
    exactly 0.

    Returns:
        Matrix of shape (len(A), len(B))
    """
    A = np.asarray(A, dtype=np.float64)
    B = np.asarray(B, dtype=np.float64)
    diff = A[:, np.newaxis, :] - B[np.newaxis, :, :]
    return np.sum(diff ** 2, axis=2)


def class_counts(labels: Sequence[int], n_classes: Optional[int] = None) -> np.ndarray:
    """Count occurrences of each non-negative integer class label."""
    labels = np.asarray(labels, dtype=np.int64)
    if n_classes is None:
        n_classes = int(labels.max()) + 1 if len(labels) else 0
    return np.bincount(labels, minlength=n_classes)


def gini(labels: Sequence[int]) -> float:
    """
    Calculate Gini impurity.

    G(S) = 1 - sum(p_i^2)
    """
    labels = np.asarray(labels)
    if len(labels) == 0:
        return 0.0

    _, counts = np.unique(labels, return_counts=True)
    probabilities = counts / len(labels)
    return float(1.0 - np.sum(probabilities ** 2))


def entropy(labels: Sequence[int]) -> float:
    """
    Calculate entropy of a set.

    H(S) = -sum(p_i * log2(p_i))
    """
    labels = np.asarray(labels)
    if len(labels) == 0:
        return 0.0

    _, counts = np.unique(labels, return_counts=True)
    probabilities = counts / len(labels)

    # Absent classes never reach log2; np.unique only reports observed ones
    probabilities = probabilities[probabilities > 0]
    value = -np.sum(probabilities * np.log2(probabilities))
    # -0.0 for pure sets
    return float(value) + 0.0


def impurity(labels: Sequence[int], criterion: str = 'gini') -> float:
    """Calculate impurity based on criterion."""
    check_choice('criterion', criterion, CRITERIA)
    if criterion == 'entropy':
        return entropy(labels)
    return gini(labels)


def majority_class(labels: Sequence[int]) -> int:
    """Most frequent label; ties go to the lowest class index."""
    counts = class_counts(labels)
    return int(np.argmax(counts))


def resolve_rng(rng: Optional[np.random.Generator] = None) -> np.random.Generator:
    """Return ``rng`` or a fresh, unseeded generator."""
    if rng is None:
        return np.random.default_rng()
    return rng
