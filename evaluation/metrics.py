"""
Evaluation Metrics - Implemented FROM SCRATCH.

Statistics shown next to each essay's visualization.

Classification Metrics:
- Confusion Matrix
- Accuracy and error rate

Regression Metrics:
- MSE

Clustering Metrics:
- Inertia (within-cluster sum of squares)
- Cluster size table
"""

import numpy as np
from typing import Dict, List, Optional


# =============================================================================
# CLASSIFICATION METRICS
# =============================================================================

def confusion_matrix(y_true: np.ndarray, y_pred: np.ndarray,
                     n_classes: Optional[int] = None) -> np.ndarray:
    """
    Compute confusion matrix from scratch.

    Parameters
    ----------
    y_true : np.ndarray
        Ground truth labels.
    y_pred : np.ndarray
        Predicted labels.
    n_classes : int, optional
        Number of classes. If None, inferred from data.

    Returns
    -------
    np.ndarray
        Confusion matrix of shape (n_classes, n_classes).
        Row i, column j is the count of samples with true label i
        predicted as label j.

    Example
    -------
    >>> confusion_matrix(np.array([0, 0, 1, 2]), np.array([0, 1, 1, 0]))
    array([[1, 1, 0],
           [0, 1, 0],
           [1, 0, 0]])
    """
    y_true = np.asarray(y_true, dtype=np.int64).ravel()
    y_pred = np.asarray(y_pred, dtype=np.int64).ravel()

    if n_classes is None:
        n_classes = int(max(np.max(y_true), np.max(y_pred))) + 1

    cm = np.zeros((n_classes, n_classes), dtype=np.int64)
    np.add.at(cm, (y_true, y_pred), 1)
    return cm


def accuracy_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Calculate classification accuracy.

    Accuracy = correct_predictions / total_predictions
    """
    y_true = np.asarray(y_true).ravel()
    y_pred = np.asarray(y_pred).ravel()

    if len(y_true) == 0:
        return 0.0

    return float(np.mean(y_true == y_pred))


def error_rate(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Fraction of misclassified samples (1 - accuracy)."""
    if len(np.asarray(y_true)) == 0:
        return 0.0
    return 1.0 - accuracy_score(y_true, y_pred)


# =============================================================================
# REGRESSION METRICS
# =============================================================================

def mean_squared_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Calculate Mean Squared Error (MSE).

    MSE = (1/n) * sum((y_true - y_pred)^2)
    """
    y_true = np.asarray(y_true, dtype=np.float64)
    y_pred = np.asarray(y_pred, dtype=np.float64)
    return float(np.mean((y_true - y_pred) ** 2))


# =============================================================================
# CLUSTERING METRICS
# =============================================================================

def inertia(points: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
    """
    Within-cluster sum of squared distances.

    inertia = sum_i ||x_i - mu_{c_i}||^2
    """
    points = np.asarray(points, dtype=np.float64)
    centroids = np.asarray(centroids, dtype=np.float64)
    if len(points) == 0:
        return 0.0
    diff = points - centroids[np.asarray(labels, dtype=np.int64)]
    return float(np.sum(diff ** 2))


def cluster_size_table(labels: np.ndarray) -> Dict[int, int]:
    """Map each distinct label to its member count."""
    unique, counts = np.unique(np.asarray(labels), return_counts=True)
    return {int(k): int(v) for k, v in zip(unique, counts)}


# =============================================================================
# TEXT OUTPUT
# =============================================================================

def print_confusion_matrix(cm: np.ndarray,
                           class_names: Optional[List[str]] = None,
                           title: str = "Confusion Matrix") -> str:
    """
    Create ASCII representation of confusion matrix.

    Parameters
    ----------
    cm : np.ndarray
        Confusion matrix.
    class_names : list, optional
        Names for each class.
    title : str
        Title for the matrix.

    Returns
    -------
    str
        Formatted string representation.
    """
    n_classes = cm.shape[0]

    if class_names is None:
        class_names = [f"C{i}" for i in range(n_classes)]

    val_width = max(len(str(int(np.max(cm)))), 4)
    label_width = max(len(name) for name in class_names)

    header = " " * (label_width + 1) + " ".join(f"{name[:val_width]:>{val_width}}"
                                                for name in class_names)
    lines = [title, "=" * len(header), header, "-" * len(header)]

    for i, row_name in enumerate(class_names):
        row_vals = " ".join(f"{int(cm[i, j]):>{val_width}}" for j in range(n_classes))
        lines.append(f"{row_name:>{label_width}} {row_vals}")

    lines.append("=" * len(header))

    correct = np.trace(cm)
    total = np.sum(cm)
    accuracy = correct / total if total > 0 else 0
    lines.append(f"Accuracy: {accuracy:.4f} ({int(correct)}/{int(total)})")

    return "\n".join(lines)
