"""
ML Engines - the algorithms behind the visual essays, implemented from scratch.

Each engine is independent and works on small 2-D datasets. Engines that
animate over time are resumable objects driven by a step counter; all
randomness comes from an injectable numpy Generator.

Clustering:
- KMeans: Lloyd iterations with random re-seeding of empty clusters
- DBSCAN: Density-based clustering with noise

Trees:
- DecisionTreeClassifier / build_tree: CART with gini/entropy
- RandomForestClassifier / majority_vote: subsampled trees + voting

Regression:
- LinearRegressionGD: batch gradient descent on w, b
- LogisticRegressionGD: same with a sigmoid link

Neural:
- SelfOrganizingMap: Kohonen map on a square grid
- MultilayerPerceptron: dense layers + backpropagation

Margin:
- KernelMarginClassifier: heuristic kernel SVM for visualization
"""

from .errors import InvalidParameter
from .utils import squared_distance, euclidean, gini, entropy, impurity

# Clustering
from .kmeans import KMeans
from .dbscan import DBSCAN, dbscan, NOISE, UNVISITED

# Trees
from .decision_tree import (
    DecisionTreeClassifier,
    LeafNode,
    InternalNode,
    build_tree,
    find_best_split,
    predict_tree,
)
from .random_forest import RandomForestClassifier, VoteResult, majority_vote

# Regression
from .linear_regression import LinearRegressionGD, iterations_for_frame
from .logistic_regression import LogisticRegressionGD, sigmoid

# Neural
from .som import SelfOrganizingMap, Neuron
from .neural_network import (
    MultilayerPerceptron,
    DenseLayer,
    ActivationFunction,
    ACTIVATIONS,
    get_activation,
)

# Margin
from .svm import KernelMarginClassifier

__all__ = [
    'InvalidParameter',
    'squared_distance',
    'euclidean',
    'gini',
    'entropy',
    'impurity',

    # Clustering
    'KMeans',
    'DBSCAN',
    'dbscan',
    'NOISE',
    'UNVISITED',

    # Trees
    'DecisionTreeClassifier',
    'LeafNode',
    'InternalNode',
    'build_tree',
    'find_best_split',
    'predict_tree',
    'RandomForestClassifier',
    'VoteResult',
    'majority_vote',

    # Regression
    'LinearRegressionGD',
    'iterations_for_frame',
    'LogisticRegressionGD',
    'sigmoid',

    # Neural
    'SelfOrganizingMap',
    'Neuron',
    'MultilayerPerceptron',
    'DenseLayer',
    'ActivationFunction',
    'ACTIVATIONS',
    'get_activation',

    # Margin
    'KernelMarginClassifier',
]

__version__ = '1.0.0'
