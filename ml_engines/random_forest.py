"""
Random Forest Classifier from scratch.

Implements:
- Subsampling: each tree sees floor(n * subsample_ratio) distinct samples
- Random feature selection at each split
- Majority voting for predictions (ties -> lowest class index)

Random Forest = Subsampling + Random Feature Selection + Decision Trees
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .decision_tree import TreeNode, build_tree, predict_tree, _check_xy
from .errors import InvalidParameter, check_at_least, check_choice, check_fraction
from .utils import CRITERIA, resolve_rng

logger = logging.getLogger(__name__)


@dataclass
class VoteResult:
    """Forest prediction for one sample."""
    final: int
    votes: List[int]


def majority_vote(trees: Sequence[TreeNode], x: Sequence[float], n_classes: int = 3) -> VoteResult:
    """
    Predict ``x`` with every tree and take the majority.

    Args:
        trees: Forest roots
        x: Sample features
        n_classes: Number of classes that can receive votes

    Returns:
        VoteResult with the winning class and the per-tree predictions
    """
    individual = [predict_tree(tree, x) for tree in trees]
    tally = np.bincount(np.asarray(individual, dtype=np.int64), minlength=n_classes)
    # argmax keeps the first maximum, i.e. the lowest class index
    final = int(np.argmax(tally))
    return VoteResult(final=final, votes=individual)


class RandomForestClassifier:
    """
    Random Forest Classifier.

    Ensemble method combining multiple decision trees trained on:
    1. Random subsamples of the training set (without replacement)
    2. Random subsets of features at each split

    The forest is regrown from scratch on every :meth:`fit`; with no seed
    on the generator each fit gives a different forest.
    """

    def __init__(self,
                 n_estimators: int = 3,
                 max_depth: int = 3,
                 min_samples_split: int = 2,
                 criterion: str = 'gini',
                 subsample_ratio: float = 0.8,
                 feature_subset_ratio: float = 0.8,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize Random Forest.

        Args:
            n_estimators: Number of trees in the forest
            max_depth: Maximum depth of each tree
            min_samples_split: Minimum samples to split a node
            criterion: 'gini' or 'entropy'
            subsample_ratio: Fraction of the training set given to each tree
            feature_subset_ratio: Fraction of features considered per split
            rng: Random generator for subsamples and feature subsets
        """
        self.n_estimators = check_at_least('n_estimators', n_estimators, 1)
        self.max_depth = check_at_least('max_depth', max_depth, 0)
        self.min_samples_split = check_at_least('min_samples_split', min_samples_split, 1)
        self.criterion = check_choice('criterion', criterion.lower(), CRITERIA)
        self.subsample_ratio = check_fraction('subsample_ratio', subsample_ratio)
        self.feature_subset_ratio = check_fraction('feature_subset_ratio', feature_subset_ratio)
        self.rng = resolve_rng(rng)

        self.trees: List[TreeNode] = []
        self.sample_indices: List[np.ndarray] = []
        self.n_classes: int = 0
        self.n_features: int = 0

    def _get_max_features(self, n_features: int) -> int:
        """Calculate number of features to consider at each split."""
        return max(1, int(np.floor(n_features * self.feature_subset_ratio)))

    def _sample_features(self, n_features: int) -> np.ndarray:
        """Random feature subset for one node, in ascending order."""
        size = self._get_max_features(n_features)
        return np.sort(self.rng.choice(n_features, size=size, replace=False))

    def _subsample(self, n_samples: int) -> np.ndarray:
        """Indices of one tree's training subsample."""
        size = int(np.floor(n_samples * self.subsample_ratio))
        if size < 1:
            raise InvalidParameter('subsample_ratio', self.subsample_ratio,
                                   f"leaves no samples out of {n_samples}")
        return self.rng.permutation(n_samples)[:size]

    def fit(self, X: np.ndarray, y: np.ndarray,
            n_classes: Optional[int] = None) -> 'RandomForestClassifier':
        """
        Build a forest of trees from training data.

        Args:
            X: Feature matrix (n_samples, n_features)
            y: Class labels (n_samples,)
            n_classes: Number of classes (inferred from y when omitted)

        Returns:
            self
        """
        X, y = _check_xy(X, y)

        self.n_features = X.shape[1]
        self.n_classes = n_classes if n_classes is not None else int(y.max()) + 1

        self.trees = []
        self.sample_indices = []

        for i in range(self.n_estimators):
            indices = self._subsample(len(X))
            tree = build_tree(X[indices], y[indices], 0,
                              self.max_depth, self.min_samples_split, self.criterion,
                              feature_sampler=self._sample_features,
                              n_classes=self.n_classes)
            self.trees.append(tree)
            self.sample_indices.append(indices)

        logger.debug("Grew forest of %d trees on %d samples", len(self.trees), len(X))
        return self

    def vote(self, x: Sequence[float]) -> VoteResult:
        """Majority vote for a single sample."""
        if not self.trees:
            raise ValueError("Model not fitted. Call fit() first.")
        return majority_vote(self.trees, x, self.n_classes)

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Predict class labels using majority voting.

        Args:
            X: Feature matrix

        Returns:
            Predicted class labels
        """
        X = np.array(X, dtype=np.float64)
        return np.array([self.vote(x).final for x in X], dtype=np.int64)

    def score(self, X: np.ndarray, y: np.ndarray) -> float:
        """Calculate accuracy."""
        return float(np.mean(self.predict(X) == np.asarray(y)))
