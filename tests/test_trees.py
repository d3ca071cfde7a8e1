"""
Decision tree, random forest and Iris dataset tests.

Tests for:
- Best split search against brute force
- Tree growth stopping rules and leaf values
- Forest subsampling, voting and reproducibility
- Iris loading and error handling
"""

import json
import numpy as np
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ml_engines import (
    DecisionTreeClassifier, RandomForestClassifier, LeafNode, InternalNode,
    build_tree, find_best_split, predict_tree, majority_vote, impurity,
    InvalidParameter,
)
from ml_engines.decision_tree import tree_depth, count_leaves, iter_nodes
from config import IRIS_PATH
from src.dataset import load_iris, parse_iris, iris_to_arrays, DatasetLoadError


@pytest.fixture(scope="module")
def iris():
    return iris_to_arrays(load_iris())


def _random_problem(seed, n=40):
    rng = np.random.default_rng(seed)
    X = np.round(rng.uniform(0, 10, size=(n, 2)), 1)
    y = rng.integers(0, 3, size=n)
    return X, y


def _brute_force_gain(X, y, criterion):
    parent = impurity(y, criterion)
    best = 0.0
    for f in range(X.shape[1]):
        values = np.unique(X[:, f])
        for t in (values[:-1] + values[1:]) / 2:
            left = X[:, f] <= t
            if left.all() or not left.any():
                continue
            w = left.mean() * impurity(y[left], criterion) + \
                (1 - left.mean()) * impurity(y[~left], criterion)
            best = max(best, parent - w)
    return best


# =============================================================================
# SPLITS AND TREES
# =============================================================================

@pytest.mark.parametrize("criterion", ["gini", "entropy"])
def test_best_split_maximizes_gain(criterion):
    print("=" * 60)
    print(f"TEST: Best split ({criterion})")
    print("=" * 60)

    for seed in range(5):
        X, y = _random_problem(seed)
        split = find_best_split(X, y, criterion)
        expected = _brute_force_gain(X, y, criterion)
        assert split is not None
        assert split.gain == pytest.approx(expected)

        root = build_tree(X, y, max_depth=1, criterion=criterion)
        assert isinstance(root, InternalNode)
        assert (root.feature, root.threshold) == (split.feature, split.threshold)
        print(f"  seed {seed}: feature={split.feature} threshold={split.threshold:.2f} gain={split.gain:.4f}")


def test_no_split_for_pure_or_constant_data():
    X = np.array([[1.0, 2.0], [1.0, 2.0], [1.0, 2.0]])
    assert find_best_split(X, np.array([0, 1, 2]), 'gini') is None
    assert find_best_split(np.array([[1.0], [2.0]]), np.array([1, 1]), 'gini') is None

    leaf = build_tree(X, np.array([2, 2, 1]))
    assert isinstance(leaf, LeafNode)
    assert leaf.value == 2


def test_equal_gain_keeps_lowest_feature_then_lowest_threshold():
    # Both columns are identical, so both features reach the same gain
    X = np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 1.0], [1.0, 1.0]])
    split = find_best_split(X, np.array([0, 0, 1, 1]), 'gini')
    assert (split.feature, split.threshold) == (0, 0.5)
    assert split.gain == pytest.approx(0.5)

    # Only feature 1 offered: the same split is found there
    split = find_best_split(X, np.array([0, 0, 1, 1]), 'gini', features=[1])
    assert split.feature == 1

    # 0.5 and 2.5 tie on one feature (gain 1/6); 1.5 gains nothing
    X = np.array([[0.0], [1.0], [2.0], [3.0]])
    y = np.array([0, 1, 1, 0])
    split = find_best_split(X, y, 'gini')
    assert split.threshold == 0.5
    assert split.gain == pytest.approx(1 / 6)

    # Same tie on the second feature, behind a useless first feature
    X2 = np.column_stack([np.zeros(4), X[:, 0]])
    split = find_best_split(X2, y, 'entropy')
    assert (split.feature, split.threshold) == (1, 0.5)


def test_build_tree_rejects_empty_partition():
    with pytest.raises(InvalidParameter):
        build_tree(np.zeros((0, 2)), np.array([], dtype=np.int64), n_classes=3)


def test_stopping_rules():
    X, y = _random_problem(10)

    root = build_tree(X, y, max_depth=0)
    assert root.is_leaf
    assert root.n_samples == len(y)

    root = build_tree(X, y, max_depth=5, min_samples_split=len(y) + 1)
    assert root.is_leaf

    deep = build_tree(X, y, max_depth=3)
    assert tree_depth(deep) <= 3
    assert count_leaves(deep) <= 8


def test_tree_build_is_deterministic(iris):
    X, y = iris
    first = build_tree(X, y, max_depth=4, criterion='entropy')
    second = build_tree(X, y, max_depth=4, criterion='entropy')
    assert first == second


def test_leaf_values_come_from_their_partition(iris):
    X, y = iris

    def check(node, mask):
        labels = y[mask]
        assert node.n_samples == len(labels)
        if node.is_leaf:
            assert node.value in set(labels.tolist())
            assert node.impurity == pytest.approx(impurity(labels, 'gini'))
            return
        go_left = mask & (X[:, node.feature] <= node.threshold)
        check(node.left, go_left)
        check(node.right, mask & ~go_left)

    root = build_tree(X, y, max_depth=4)
    check(root, np.ones(len(y), dtype=bool))


def test_iris_root_statistics(iris):
    X, y = iris
    model = DecisionTreeClassifier(max_depth=3).fit(X, y)

    assert model.root.counts == [50, 50, 50]
    assert model.root.impurity == pytest.approx(2 / 3)
    assert model.get_depth() <= 3
    assert model.score(X, y) > 0.7

    depths = [depth for depth, _ in iter_nodes(model.root)]
    assert depths[0] == 0 and max(depths) == model.get_depth()
    print(f"  iris accuracy (depth 3): {model.score(X, y):.3f}")


def test_predict_descends_left_on_equal():
    tree = InternalNode(feature=0, threshold=1.0, impurity=0.5,
                        left=LeafNode(value=0, impurity=0.0),
                        right=LeafNode(value=1, impurity=0.0))
    assert predict_tree(tree, [1.0, 0.0]) == 0
    assert predict_tree(tree, [1.01, 0.0]) == 1


def test_classifier_validation():
    model = DecisionTreeClassifier()
    with pytest.raises(ValueError):
        model.predict([[0.0, 0.0]])
    with pytest.raises(InvalidParameter):
        DecisionTreeClassifier(criterion='variance')
    with pytest.raises(InvalidParameter):
        model.fit(np.zeros((3, 2)), np.array([0, 1]))


# =============================================================================
# RANDOM FOREST
# =============================================================================

def test_majority_vote_from_fixed_trees():
    print("\n" + "=" * 60)
    print("TEST: Majority vote")
    print("=" * 60)

    trees = [LeafNode(value=0, impurity=0.0),
             LeafNode(value=1, impurity=0.0),
             LeafNode(value=1, impurity=0.0)]
    result = majority_vote(trees, [5.0, 3.0])
    assert result.final == 1
    assert result.votes == [0, 1, 1]

    tie = majority_vote([LeafNode(2, 0.0), LeafNode(1, 0.0)], [0.0, 0.0])
    assert tie.final == 1
    print("  votes: OK")


def test_forest_subsamples_and_feature_subsets(iris):
    X, y = iris
    forest = RandomForestClassifier(n_estimators=4, subsample_ratio=0.8,
                                    feature_subset_ratio=0.5,
                                    rng=np.random.default_rng(0)).fit(X, y)

    assert len(forest.trees) == 4
    for indices in forest.sample_indices:
        assert len(indices) == 120
        assert len(np.unique(indices)) == 120

    assert forest._get_max_features(2) == 1
    subset = forest._sample_features(5)
    assert len(subset) == 2
    assert list(subset) == sorted(subset)


def test_forest_is_reproducible_with_seed(iris):
    X, y = iris
    a = RandomForestClassifier(n_estimators=3, rng=np.random.default_rng(11)).fit(X, y)
    b = RandomForestClassifier(n_estimators=3, rng=np.random.default_rng(11)).fit(X, y)
    assert a.trees == b.trees

    vote = a.vote(X[0])
    assert len(vote.votes) == 3
    assert vote.final == a.predict(X[:1])[0]
    assert a.score(X, y) > 0.6


def test_forest_validation():
    with pytest.raises(InvalidParameter):
        RandomForestClassifier(subsample_ratio=0.0)
    with pytest.raises(InvalidParameter):
        RandomForestClassifier(n_estimators=0)
    with pytest.raises(ValueError):
        RandomForestClassifier().vote([0.0, 0.0])

    # floor(1 * 0.5) == 0: a tree would get no samples at all
    forest = RandomForestClassifier(subsample_ratio=0.5, rng=np.random.default_rng(0))
    with pytest.raises(InvalidParameter) as exc:
        forest.fit(np.array([[5.0, 3.0]]), np.array([2]))
    assert exc.value.name == 'subsample_ratio'
    assert forest.trees == []


def test_forest_leaves_come_from_their_subsample():
    X = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 1.0], [3.0, 1.0]])
    y = np.array([2, 2, 1, 1])
    forest = RandomForestClassifier(n_estimators=5, subsample_ratio=0.5,
                                    rng=np.random.default_rng(3)).fit(X, y)
    for tree, indices in zip(forest.trees, forest.sample_indices):
        seen = set(y[indices].tolist())
        for _, node in iter_nodes(tree):
            if node.is_leaf:
                assert node.value in seen


# =============================================================================
# IRIS DATASET
# =============================================================================

def test_load_iris():
    samples = load_iris()
    assert len(samples) == 150
    species = [s.species for s in samples]
    assert species.count('setosa') == species.count('versicolor') == species.count('virginica') == 50

    X, y = iris_to_arrays(samples)
    assert X.shape == (150, 2)
    assert set(y.tolist()) == {0, 1, 2}
    assert samples[0].features == (samples[0].sepal_length, samples[0].sepal_width)


def test_iris_file_ships_inside_dataset_package():
    import src.dataset
    assert os.path.dirname(IRIS_PATH) == os.path.dirname(os.path.abspath(src.dataset.__file__))
    assert os.path.isfile(IRIS_PATH)

    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    with open(os.path.join(root, "pyproject.toml")) as f:
        pyproject = f.read()
    assert '"src.dataset" = ["iris.json"]' in pyproject


def test_load_iris_errors(tmp_path):
    missing = tmp_path / "missing.json"
    with pytest.raises(DatasetLoadError):
        load_iris(str(missing))

    broken = tmp_path / "broken.json"
    broken.write_text("[{\"sepalLength\": 5.1,")
    with pytest.raises(DatasetLoadError):
        load_iris(str(broken))

    incomplete = tmp_path / "incomplete.json"
    incomplete.write_text(json.dumps([{"sepalLength": 5.1, "species": "setosa"}]))
    with pytest.raises(DatasetLoadError):
        load_iris(str(incomplete))


def test_parse_iris_rejects_bad_records():
    with pytest.raises(DatasetLoadError):
        parse_iris({"sepalLength": 5.1})
    with pytest.raises(DatasetLoadError):
        parse_iris([])
    with pytest.raises(DatasetLoadError):
        parse_iris([{"sepalLength": 5.1, "sepalWidth": 3.5, "species": "rose"}])

    samples = parse_iris([{"sepalLength": "5.1", "sepalWidth": 3.5, "species": "virginica"}])
    assert samples[0].sepal_length == 5.1
    assert samples[0].label == 2


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
