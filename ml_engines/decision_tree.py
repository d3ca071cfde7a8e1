"""
Decision Tree Classifier from scratch.

Implements:
- CART algorithm with binary splits on midpoints of adjacent distinct values
- Gini impurity and Entropy (Information Gain) split criteria
- Pre-pruning with max_depth and min_samples_split
- Optional per-node random feature subsets (used by the random forest)

For the Iris essay: features are (sepal length, sepal width),
classes are 0=setosa, 1=versicolor, 2=virginica.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .errors import check_at_least, check_choice, InvalidParameter
from .utils import CRITERIA, class_counts, impurity, majority_class

logger = logging.getLogger(__name__)

# Returns the feature indices a node may split on, given the feature count
FeatureSampler = Callable[[int], Sequence[int]]


@dataclass
class LeafNode:
    """Terminal node: predicts ``value``."""
    value: int
    impurity: float
    n_samples: int = 0
    counts: List[int] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return True


@dataclass
class InternalNode:
    """Split node: ``x[feature] <= threshold`` goes left, otherwise right."""
    feature: int
    threshold: float
    impurity: float
    left: 'TreeNode'
    right: 'TreeNode'
    n_samples: int = 0
    counts: List[int] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return False


TreeNode = Union[LeafNode, InternalNode]


@dataclass
class Split:
    """Best split found for a node."""
    feature: int
    threshold: float
    gain: float


def candidate_thresholds(values: np.ndarray) -> np.ndarray:
    """Midpoints between adjacent distinct values, ascending."""
    unique_values = np.unique(values)
    return (unique_values[:-1] + unique_values[1:]) / 2


def find_best_split(X: np.ndarray, y: np.ndarray, criterion: str,
                    features: Optional[Sequence[int]] = None) -> Optional[Split]:
    """
    Find the feature and threshold with the largest information gain.

    IG = I(parent) - (|left|/|parent| * I(left) + |right|/|parent| * I(right))

    Features are visited in ascending index order and thresholds ascending;
    a candidate replaces the current best only with strictly greater gain,
    and the best starts at a gain of 0.

    Returns:
        The best split, or None if no split has gain > 0
    """
    n_samples, n_features = X.shape
    if features is None:
        features = range(n_features)

    parent_impurity = impurity(y, criterion)
    best: Optional[Split] = None
    best_gain = 0.0

    for feature_idx in sorted(features):
        values = X[:, feature_idx]

        for threshold in candidate_thresholds(values):
            left_mask = values <= threshold
            n_left = int(np.sum(left_mask))
            n_right = n_samples - n_left
            if n_left == 0 or n_right == 0:
                continue

            weighted = (n_left / n_samples) * impurity(y[left_mask], criterion) + \
                       (n_right / n_samples) * impurity(y[~left_mask], criterion)
            gain = parent_impurity - weighted

            if gain > best_gain:
                best_gain = gain
                best = Split(feature=int(feature_idx), threshold=float(threshold), gain=float(gain))

    return best


def build_tree(X: np.ndarray, y: np.ndarray,
               depth: int = 0,
               max_depth: int = 3,
               min_samples_split: int = 2,
               criterion: str = 'gini',
               feature_sampler: Optional[FeatureSampler] = None,
               n_classes: Optional[int] = None) -> TreeNode:
    """
    Recursively build a decision tree.

    Args:
        X: Feature matrix (n_samples, n_features)
        y: Integer class labels (n_samples,)
        depth: Depth of the node being built
        max_depth: Nodes at this depth become leaves
        min_samples_split: Nodes with fewer samples become leaves
        criterion: 'gini' or 'entropy'
        feature_sampler: Chooses the candidate features of each node;
                         all features when omitted
        n_classes: Length of the per-node ``counts`` vectors

    Returns:
        Root of the (sub)tree
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.int64)
    if len(y) == 0:
        raise InvalidParameter('y', 0, "cannot grow a node from no samples")
    if n_classes is None:
        n_classes = int(y.max()) + 1

    n_samples = len(y)
    node_impurity = impurity(y, criterion)
    counts = class_counts(y, n_classes).tolist()

    if depth >= max_depth or n_samples < min_samples_split:
        return _create_leaf(y, node_impurity, counts)

    features = feature_sampler(X.shape[1]) if feature_sampler is not None else None
    split = find_best_split(X, y, criterion, features)
    if split is None:
        return _create_leaf(y, node_impurity, counts)

    left_mask = X[:, split.feature] <= split.threshold
    right_mask = ~left_mask

    kwargs = dict(max_depth=max_depth, min_samples_split=min_samples_split,
                  criterion=criterion, feature_sampler=feature_sampler, n_classes=n_classes)
    left_child = build_tree(X[left_mask], y[left_mask], depth + 1, **kwargs)
    right_child = build_tree(X[right_mask], y[right_mask], depth + 1, **kwargs)

    return InternalNode(
        feature=split.feature,
        threshold=split.threshold,
        impurity=node_impurity,
        left=left_child,
        right=right_child,
        n_samples=n_samples,
        counts=counts,
    )


def _create_leaf(y: np.ndarray, node_impurity: float, counts: List[int]) -> LeafNode:
    """Create a leaf predicting the majority class."""
    return LeafNode(value=majority_class(y), impurity=node_impurity,
                    n_samples=len(y), counts=counts)


def predict_tree(node: TreeNode, x: Sequence[float]) -> int:
    """Descend from ``node`` to a leaf and return its class."""
    while not node.is_leaf:
        node = node.left if x[node.feature] <= node.threshold else node.right
    return node.value


def tree_depth(node: TreeNode) -> int:
    """Number of split levels below ``node``."""
    if node.is_leaf:
        return 0
    return 1 + max(tree_depth(node.left), tree_depth(node.right))


def count_leaves(node: TreeNode) -> int:
    """Number of leaves below ``node``."""
    if node.is_leaf:
        return 1
    return count_leaves(node.left) + count_leaves(node.right)


def iter_nodes(node: TreeNode, depth: int = 0):
    """Pre-order traversal yielding (depth, node)."""
    yield depth, node
    if not node.is_leaf:
        yield from iter_nodes(node.left, depth + 1)
        yield from iter_nodes(node.right, depth + 1)


class DecisionTreeClassifier:
    """
    Decision Tree Classifier using CART algorithm.

    Uses Information Gain (entropy-based) or Gini impurity
    to select optimal splits.

    Entropy: H(S) = -sum(p_i * log2(p_i))
    Information Gain: IG(S, A) = H(S) - sum(|S_v|/|S| * H(S_v))
    Gini: G(S) = 1 - sum(p_i^2)
    """

    def __init__(self,
                 max_depth: int = 3,
                 min_samples_split: int = 2,
                 criterion: str = 'gini'):
        """
        Initialize Decision Tree.

        Args:
            max_depth: Maximum depth of tree (pre-pruning)
            min_samples_split: Minimum samples to split a node
            criterion: 'gini' or 'entropy' (Information Gain)
        """
        self.max_depth = check_at_least('max_depth', max_depth, 0)
        self.min_samples_split = check_at_least('min_samples_split', min_samples_split, 1)
        self.criterion = check_choice('criterion', criterion.lower(), CRITERIA)

        self.root: Optional[TreeNode] = None
        self.n_classes: int = 0
        self.n_features: int = 0

    def fit(self, X: np.ndarray, y: np.ndarray,
            feature_sampler: Optional[FeatureSampler] = None,
            n_classes: Optional[int] = None) -> 'DecisionTreeClassifier':
        """
        Build decision tree from training data.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Class labels 0..n_classes-1 (n_samples,)
            feature_sampler: Optional per-node feature subset chooser
            n_classes: Number of classes (inferred from y when omitted)

        Returns:
            self
        """
        X, y = _check_xy(X, y)

        self.n_features = X.shape[1]
        self.n_classes = n_classes if n_classes is not None else int(y.max()) + 1
        self.root = build_tree(X, y, 0, self.max_depth, self.min_samples_split,
                               self.criterion, feature_sampler, self.n_classes)

        logger.debug("Built tree: depth=%d leaves=%d", self.get_depth(), self.get_n_leaves())
        return self

    def _check_fitted(self):
        if self.root is None:
            raise ValueError("Model not fitted. Call fit() first.")

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Predict class labels.

        Args:
            X: Feature matrix

        Returns:
            Predicted class labels
        """
        self._check_fitted()
        X = np.array(X, dtype=np.float64)
        return np.array([predict_tree(self.root, x) for x in X], dtype=np.int64)

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        """Calculate accuracy."""
        y_pred = self.predict(X)
        return float(np.mean(y_pred == np.asarray(y)))

    def get_depth(self) -> int:
        """Get the actual depth of the tree."""
        self._check_fitted()
        return tree_depth(self.root)

    def get_n_leaves(self) -> int:
        """Get the number of leaf nodes."""
        self._check_fitted()
        return count_leaves(self.root)


def _check_xy(X, y) -> Tuple[np.ndarray, np.ndarray]:
    X = np.array(X, dtype=np.float64)
    y = np.array(y)
    if X.ndim != 2 or len(X) != len(y):
        raise InvalidParameter('X', X.shape, "must be 2-D with one row per label")
    if len(y) == 0:
        raise InvalidParameter('y', 0, "training set must not be empty")
    if not np.issubdtype(y.dtype, np.integer) or y.min() < 0:
        raise InvalidParameter('y', y.dtype, "labels must be non-negative integers")
    return X, y.astype(np.int64)
