"""
Evaluation module for the visual essays.

Provides the statistics displayed next to each visualization:
- Classification: confusion matrix, accuracy, error rate
- Regression: mean squared error
- Clustering: inertia, cluster sizes

All metrics are implemented from scratch using only NumPy.
"""

from .metrics import (
    confusion_matrix,
    accuracy_score,
    error_rate,
    mean_squared_error,
    inertia,
    cluster_size_table,
    print_confusion_matrix,
)

__all__ = [
    'confusion_matrix',
    'accuracy_score',
    'error_rate',
    'mean_squared_error',
    'inertia',
    'cluster_size_table',
    'print_confusion_matrix',
]
