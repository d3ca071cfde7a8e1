"""
JSON-ready snapshots of engine state.

A snapshot is what a renderer needs to draw one frame of an essay: plain
dicts, lists, floats and ints only, so it can be dumped with ``json`` or
handed to the matplotlib renderer in ``integration.rendering``.
"""

import numpy as np
from typing import Dict, List

from config import IRIS_SPECIES, IRIS_FEATURE_NAMES, SVM_SURFACE_RANGE
from ml_engines import (
    KMeans, DBSCAN, NOISE,
    LeafNode, RandomForestClassifier, VoteResult,
    LinearRegressionGD, LogisticRegressionGD,
    SelfOrganizingMap, MultilayerPerceptron, KernelMarginClassifier,
)
from ml_engines.decision_tree import TreeNode, tree_depth, count_leaves
from src.dataset import IrisSample


def _points(X: np.ndarray) -> List[List[float]]:
    return [[float(a), float(b)] for a, b in np.asarray(X)]


def kmeans_snapshot(engine: KMeans) -> Dict:
    sizes = engine.cluster_sizes()
    return {
        'essay': 'kmeans',
        'step': engine.steps_completed,
        'points': [
            {'x': float(p[0]), 'y': float(p[1]), 'cluster': int(c)}
            for p, c in zip(engine.points, engine.labels_)
        ],
        'centroids': [
            {'x': float(c[0]), 'y': float(c[1]), 'size': int(s)}
            for c, s in zip(engine.centroids_, sizes)
        ],
        'inertia': engine.inertia(),
    }


def dbscan_snapshot(points: np.ndarray, engine: DBSCAN) -> Dict:
    labels = engine.labels_
    core = engine.core_sample_mask_
    return {
        'essay': 'dbscan',
        'epsilon': engine.epsilon,
        'min_points': engine.min_points,
        'points': [
            {'x': float(p[0]), 'y': float(p[1]), 'cluster': int(c), 'core': bool(k)}
            for p, c, k in zip(points, labels, core)
        ],
        'n_clusters': int(engine.n_clusters_),
        'noise': int(np.sum(labels == NOISE)),
    }


# =============================================================================
# TREES
# =============================================================================

def tree_to_dict(node: TreeNode) -> Dict:
    """Recursive dict form of a tree, with feature and class names attached."""
    common = {
        'impurity': float(node.impurity),
        'samples': int(node.n_samples),
        'counts': [int(c) for c in node.counts],
    }
    if isinstance(node, LeafNode):
        return {
            'type': 'leaf',
            'value': int(node.value),
            'class': IRIS_SPECIES[node.value],
            **common,
        }
    return {
        'type': 'internal',
        'feature': int(node.feature),
        'feature_name': IRIS_FEATURE_NAMES[node.feature],
        'threshold': float(node.threshold),
        'left': tree_to_dict(node.left),
        'right': tree_to_dict(node.right),
        **common,
    }


def tree_snapshot(root: TreeNode, accuracy: float) -> Dict:
    return {
        'essay': 'decision_tree',
        'tree': tree_to_dict(root),
        'depth': tree_depth(root),
        'leaves': count_leaves(root),
        'training_accuracy': float(accuracy),
    }


def forest_snapshot(forest: RandomForestClassifier, sample: IrisSample,
                    vote: VoteResult, accuracy: float) -> Dict:
    return {
        'essay': 'random_forest',
        'trees': [tree_to_dict(tree) for tree in forest.trees],
        'sample': {
            'sepal_length': sample.sepal_length,
            'sepal_width': sample.sepal_width,
            'species': sample.species,
        },
        'votes': [IRIS_SPECIES[v] for v in vote.votes],
        'prediction': IRIS_SPECIES[vote.final],
        'training_accuracy': float(accuracy),
    }


# =============================================================================
# REGRESSION
# =============================================================================

def _regression_common(engine, name: str) -> Dict:
    curve_x = np.linspace(-1.0, 1.0, 50)
    return {
        'essay': name,
        'step': engine.steps_completed,
        'weight': float(engine.weight),
        'bias': float(engine.bias),
        'points': _points(np.column_stack([engine.x, engine.y])),
        'curve': _points(np.column_stack([curve_x, engine.predict(curve_x)])),
    }


def linear_regression_snapshot(engine: LinearRegressionGD) -> Dict:
    snap = _regression_common(engine, 'linear_regression')
    snap['mse'] = engine.mse()
    return snap


def logistic_regression_snapshot(engine: LogisticRegressionGD) -> Dict:
    snap = _regression_common(engine, 'logistic_regression')
    snap['decision_boundary'] = float(engine.decision_boundary)
    snap['error_rate'] = engine.error_rate()
    snap['log_loss'] = engine.log_loss()
    return snap


# =============================================================================
# NEURAL
# =============================================================================

def som_snapshot(engine: SelfOrganizingMap) -> Dict:
    bmu = engine.bmu_neuron()
    return {
        'essay': 'som',
        'step': engine.steps_completed,
        'grid_size': engine.grid_size,
        'data': _points(engine.data),
        'neurons': [
            {'x': n.x, 'y': n.y, 'i': n.i, 'j': n.j} for n in engine.neurons()
        ],
        'bmu': None if bmu is None else {'i': bmu.i, 'j': bmu.j},
        'quantization_error': engine.quantization_error(),
    }


def perceptron_snapshot(network: MultilayerPerceptron, x: np.ndarray,
                        target: np.ndarray) -> Dict:
    activations = network.forward(x)
    return {
        'essay': 'perceptron',
        'step': network.steps_completed,
        'activation': network.activation.name,
        'formula': network.activation.formula,
        'layer_sizes': network.layer_sizes,
        'activations': [[float(v) for v in a] for a in activations],
        'weights': [layer.weights.tolist() for layer in network.layers],
        'biases': [layer.biases.tolist() for layer in network.layers],
        'loss': float(np.mean((activations[-1] - target) ** 2)),
    }


# =============================================================================
# MARGIN
# =============================================================================

def svm_snapshot(model: KernelMarginClassifier, resolution: int = 50) -> Dict:
    xs, ys, values = model.decision_surface(resolution, SVM_SURFACE_RANGE)
    highlight = model.highlight_mask()
    return {
        'essay': 'svm',
        'kernel': model.kernel,
        'points': [
            {'x': float(p[0]), 'y': float(p[1]), 'label': int(c), 'support': bool(s)}
            for p, c, s in zip(model.X_train_, model.y_train_, highlight)
        ],
        'surface': {
            'xs': xs.tolist(),
            'ys': ys.tolist(),
            'values': values.tolist(),
        },
        'errors': model.error_count(),
        'n_support': model.n_support_,
    }
