"""
Dataset module for the visual essays.

Provides:
- The fixed Iris dataset (two sepal features, three species)
- Seeded synthetic generators for every essay
"""

from .iris import IrisSample, DatasetLoadError, load_iris, parse_iris, iris_to_arrays, LABEL_MAP
from .generators import (
    uniform_points,
    dbscan_cluster_points,
    dbscan_noise_points,
    linear_regression_data,
    logistic_regression_data,
    ring_points,
    svm_points,
)

__all__ = [
    'IrisSample',
    'DatasetLoadError',
    'load_iris',
    'parse_iris',
    'iris_to_arrays',
    'LABEL_MAP',
    'uniform_points',
    'dbscan_cluster_points',
    'dbscan_noise_points',
    'linear_regression_data',
    'logistic_regression_data',
    'ring_points',
    'svm_points',
]
