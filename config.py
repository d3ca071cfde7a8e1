"""
Visual ML Essays - Global Configuration

This module contains all configuration constants for the algorithm essays:
dataset domains and sizes, the allowed range of every essay control, and
the default parameter set each essay starts from.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

# =============================================================================
# PATHS
# =============================================================================
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
# Shipped inside the src.dataset package so installs carry it
DATA_DIR = os.path.join(PROJECT_ROOT, "src", "dataset")
IRIS_PATH = os.path.join(DATA_DIR, "iris.json")
RESULTS_DIR = os.path.join(PROJECT_ROOT, "results")

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# =============================================================================
# K-MEANS
# =============================================================================
# Points and centroids live directly in canvas space (800x600 minus a
# 10px border on each side).
KMEANS_X_RANGE = (10.0, 790.0)
KMEANS_Y_RANGE = (10.0, 590.0)
KMEANS_CANVAS_SIZE = (800, 600)

# =============================================================================
# DBSCAN
# =============================================================================
DBSCAN_TOTAL_POINTS = 200
DBSCAN_NOISE_RATIO = 0.1
DBSCAN_CLUSTER_RADIUS = 0.3
DBSCAN_CENTER_RANGE = (-0.8, 0.8)
DBSCAN_DOMAIN = (-1.0, 1.0)

# =============================================================================
# DECISION TREE / RANDOM FOREST
# =============================================================================
IRIS_SPECIES = ["setosa", "versicolor", "virginica"]
IRIS_FEATURE_NAMES = ["Sepal Length", "Sepal Width"]

# =============================================================================
# REGRESSION
# =============================================================================
REGRESSION_POINTS = 100
REGRESSION_X_RANGE = (-1.0, 1.0)
LINEAR_TRUE_WEIGHT = 2.0
LINEAR_TRUE_BIAS = 1.0
LOGISTIC_STEEPNESS = 5.0
# Training progress is expressed against a 100-frame animation
FRAMES_PER_RUN = 100

# =============================================================================
# SELF-ORGANIZING MAP
# =============================================================================
SOM_RING_POINTS = 200
SOM_RING_INNER_RADIUS = 0.6
SOM_RING_WIDTH = 0.2

# =============================================================================
# PERCEPTRON
# =============================================================================
PERCEPTRON_INPUT = (0.5, -0.3)
PERCEPTRON_HIDDEN_SIZE = 3
PERCEPTRON_INIT_SCALE = 0.5

# =============================================================================
# SVM
# =============================================================================
SVM_POINTS = 15
SVM_DATA_RANGE = (-2.0, 2.0)
SVM_SURFACE_RANGE = (-5.0, 5.0)
SVM_SURFACE_RESOLUTION = 200
SVM_LINEAR_SLOPE = 0.5
SVM_RBF_RADIUS = 1.2
SVM_SUPPORT_HIGHLIGHT = 1.05

# =============================================================================
# RENDERING
# =============================================================================
CANVAS_MARGIN = 40

# =============================================================================
# CONTROL RANGES
# =============================================================================
# (min, max) for numeric controls, tuple of choices for categorical ones.
CONTROL_RANGES: Dict[str, Dict[str, Tuple]] = {
    'kmeans': {
        'points': (10, 300),
        'clusters': (1, 6),
        'iterations': (1, 50),
    },
    'dbscan': {
        'epsilon': (0.05, 0.5),
        'min_points': (2, 10),
        'num_clusters': (1, 5),
    },
    'decision_tree': {
        'max_depth': (1, 6),
        'min_samples_split': (2, 10),
        'criterion': ('gini', 'entropy'),
    },
    'random_forest': {
        'max_depth': (1, 6),
        'min_samples_split': (2, 10),
        'criterion': ('gini', 'entropy'),
        'number_of_trees': (1, 9),
        'subsample_ratio': (0.5, 1.0),
        'feature_subset_ratio': (0.5, 1.0),
    },
    'linear_regression': {
        'learning_rate': (0.01, 0.5),
        'iterations': (10, 200),
        'noise': (0.0, 1.0),
    },
    'logistic_regression': {
        'learning_rate': (0.01, 0.5),
        'iterations': (10, 200),
        'decision_boundary': (0.1, 0.9),
        'noise': (0.0, 0.5),
    },
    'som': {
        'grid_size': (5, 20),
        'learning_rate': (0.01, 0.5),
        'iterations': (10, 200),
        'sigma': (0.5, 3.0),
    },
    'perceptron': {
        'hidden_layers': (1, 5),
        'iterations': (1, 20),
        'learning_rate': (0.01, 1.0),
        'output_nodes': (1, 5),
        'activation': ('sigmoid', 'relu', 'identity'),
    },
    'svm': {
        'c': (0.1, 2.0),
        'kernel': ('linear', 'rbf'),
        'gamma': (0.1, 10.0),
        'noise': (0.0, 0.3),
    },
}

# =============================================================================
# DEFAULT PARAMETERS
# =============================================================================
DEFAULTS: Dict[str, Dict[str, object]] = {
    'kmeans': {'points': 100, 'clusters': 1, 'iterations': 10},
    'dbscan': {'epsilon': 0.2, 'min_points': 5, 'num_clusters': 3},
    'decision_tree': {'max_depth': 3, 'min_samples_split': 2, 'criterion': 'gini'},
    'random_forest': {
        'max_depth': 3,
        'min_samples_split': 2,
        'criterion': 'gini',
        'number_of_trees': 3,
        'subsample_ratio': 0.8,
        'feature_subset_ratio': 0.8,
    },
    'linear_regression': {'learning_rate': 0.1, 'iterations': 100, 'noise': 0.2},
    'logistic_regression': {
        'learning_rate': 0.1,
        'iterations': 100,
        'decision_boundary': 0.5,
        'noise': 0.2,
    },
    'som': {'grid_size': 10, 'learning_rate': 0.1, 'iterations': 100, 'sigma': 1.0},
    'perceptron': {
        'hidden_layers': 2,
        'iterations': 10,
        'learning_rate': 0.1,
        'output_nodes': 1,
        'activation': 'sigmoid',
    },
    'svm': {'c': 1.0, 'kernel': 'rbf', 'gamma': 0.5, 'noise': 0.1},
}


# =============================================================================
# DATACLASSES FOR CONFIGURATION
# =============================================================================

@dataclass
class RunConfig:
    """Settings for a headless run of the essays."""
    seed: int = 42
    frame: int = FRAMES_PER_RUN
    results_dir: str = RESULTS_DIR
    log_level: str = LOG_LEVEL
    overrides: Dict[str, Dict[str, object]] = field(default_factory=dict)


def get_default_params(essay: str) -> Dict[str, object]:
    """Get a fresh copy of an essay's default parameters."""
    return dict(DEFAULTS[essay])
