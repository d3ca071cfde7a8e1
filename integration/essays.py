"""
Visual essay drivers.

Each essay owns one engine plus the data it runs on, validates its
parameters against the control ranges in ``config``, and decides what has
to be regenerated when a parameter changes:

    K-Means         points + centroids when `points` or `clusters` change
    DBSCAN          blobs when `num_clusters` changes, noise on every run
    Decision tree   rebuilt on any change (deterministic)
    Random forest   regrown on any change
    Regression      data regenerated on every render (see DESIGN.md)
    SOM             ring data fixed; map rebuilt on any change
    Perceptron      network rebuilt when `hidden_layers`/`output_nodes` change
    SVM             data regenerated when `noise` or `kernel` change

Drawing, widgets and frame scheduling live outside this module; an essay
only turns (parameters, frame) into engine state and a JSON-ready snapshot.
"""

import logging
import numpy as np
from typing import Dict, Iterator, List, Optional, Sequence

from config import (
    CONTROL_RANGES, DEFAULTS,
    KMEANS_X_RANGE, KMEANS_Y_RANGE,
    FRAMES_PER_RUN, PERCEPTRON_INPUT, PERCEPTRON_HIDDEN_SIZE, PERCEPTRON_INIT_SCALE,
    SVM_SUPPORT_HIGHLIGHT, IRIS_SPECIES,
)
from ml_engines import (
    InvalidParameter,
    KMeans, DBSCAN,
    DecisionTreeClassifier, RandomForestClassifier, VoteResult,
    LinearRegressionGD, LogisticRegressionGD, iterations_for_frame,
    SelfOrganizingMap, MultilayerPerceptron,
    KernelMarginClassifier,
)
from ml_engines.neural_network import TrainingStep
from src.dataset import (
    IrisSample, iris_to_arrays, load_iris,
    uniform_points, dbscan_cluster_points, dbscan_noise_points,
    linear_regression_data, logistic_regression_data, ring_points, svm_points,
)
from . import snapshots

logger = logging.getLogger(__name__)


def validate_params(essay: str, params: Dict[str, object]) -> Dict[str, object]:
    """
    Check every parameter against the essay's control ranges.

    Raises:
        InvalidParameter: unknown name, value out of range, fractional
            count or not a choice
    """
    ranges = CONTROL_RANGES[essay]
    for name, value in params.items():
        if name not in ranges:
            raise InvalidParameter(name, value, f"unknown parameter for essay '{essay}'")
        allowed = ranges[name]
        if all(isinstance(option, str) for option in allowed):
            if value not in allowed:
                raise InvalidParameter(name, value, f"must be one of {list(allowed)}")
        else:
            low, high = allowed
            if isinstance(value, (bool, str)) or not low <= value <= high:
                raise InvalidParameter(name, value, f"must be in [{low}, {high}]")
            # integer bounds mark a count-valued control
            if isinstance(low, int) and isinstance(high, int) and int(value) != value:
                raise InvalidParameter(name, value, "must be an integer")
    return params


class Essay:
    """Base class: parameter bookkeeping shared by every essay."""

    name: str = ''

    def __init__(self, params: Optional[Dict[str, object]] = None,
                 rng: Optional[np.random.Generator] = None):
        self.params = dict(DEFAULTS[self.name])
        if params:
            self.params.update(params)
        validate_params(self.name, self.params)
        self.rng = rng if rng is not None else np.random.default_rng()

    def set_params(self, **changes) -> List[str]:
        """
        Update parameters and apply the essay's regeneration policy.

        Returns:
            Names of the parameters whose value actually changed
        """
        merged = dict(self.params)
        merged.update(changes)
        validate_params(self.name, merged)

        changed = [k for k, v in changes.items() if self.params.get(k) != v]
        self.params = merged
        if changed:
            logger.debug("%s: parameters changed %s", self.name, changed)
            self._on_change(changed)
        return changed

    def _on_change(self, changed: List[str]):
        pass

    def snapshot(self) -> Dict:
        raise NotImplementedError


# =============================================================================
# CLUSTERING
# =============================================================================

class KMeansEssay(Essay):
    """Points and centroids persist; each run continues from the last state."""

    name = 'kmeans'

    def __init__(self, params=None, rng=None):
        super().__init__(params, rng)
        self._regenerate()

    def _regenerate(self):
        points = uniform_points(int(self.params['points']), self.rng)
        self.engine = KMeans(points, int(self.params['clusters']),
                             domain=(KMEANS_X_RANGE, KMEANS_Y_RANGE), rng=self.rng)

    def _on_change(self, changed):
        if 'points' in changed or 'clusters' in changed:
            self._regenerate()

    def run(self) -> KMeans:
        """Animate ``iterations`` more steps from the current state."""
        return self.engine.run(int(self.params['iterations']))

    def snapshot(self) -> Dict:
        return snapshots.kmeans_snapshot(self.engine)


class DBSCANEssay(Essay):
    """Cluster blobs are kept; background noise is redrawn on every run."""

    name = 'dbscan'

    def __init__(self, params=None, rng=None):
        super().__init__(params, rng)
        self.cluster_points = dbscan_cluster_points(int(self.params['num_clusters']), self.rng)
        self.run()

    def _on_change(self, changed):
        if 'num_clusters' in changed:
            self.cluster_points = dbscan_cluster_points(int(self.params['num_clusters']), self.rng)

    def run(self) -> DBSCAN:
        noise = dbscan_noise_points(self.rng)
        self.points = np.vstack([self.cluster_points, noise])
        self.engine = DBSCAN(self.params['epsilon'], int(self.params['min_points']))
        self.engine.fit(self.points)
        logger.debug("DBSCAN essay: %d clusters, %d noise points",
                     self.engine.n_clusters_, self.engine.noise_count())
        return self.engine

    def snapshot(self) -> Dict:
        return snapshots.dbscan_snapshot(self.points, self.engine)


# =============================================================================
# TREES
# =============================================================================

class DecisionTreeEssay(Essay):
    """A single tree on the Iris sepal measurements."""

    name = 'decision_tree'

    def __init__(self, params=None, rng=None, samples: Optional[Sequence[IrisSample]] = None):
        super().__init__(params, rng)
        self.samples = list(samples) if samples is not None else load_iris()
        self.X, self.y = iris_to_arrays(self.samples)
        self.run()

    def _on_change(self, changed):
        self.run()

    def run(self) -> DecisionTreeClassifier:
        self.model = DecisionTreeClassifier(
            max_depth=int(self.params['max_depth']),
            min_samples_split=int(self.params['min_samples_split']),
            criterion=str(self.params['criterion']),
        ).fit(self.X, self.y, n_classes=len(IRIS_SPECIES))
        return self.model

    def snapshot(self) -> Dict:
        return snapshots.tree_snapshot(self.model.root, self.model.score(self.X, self.y))


class RandomForestEssay(Essay):
    """Forest on Iris; any parameter change regrows every tree."""

    name = 'random_forest'

    def __init__(self, params=None, rng=None, samples: Optional[Sequence[IrisSample]] = None):
        super().__init__(params, rng)
        self.samples = list(samples) if samples is not None else load_iris()
        self.X, self.y = iris_to_arrays(self.samples)
        self.selected_index = 0
        self.run()

    def _on_change(self, changed):
        self.run()

    def run(self) -> RandomForestClassifier:
        self.model = RandomForestClassifier(
            n_estimators=int(self.params['number_of_trees']),
            max_depth=int(self.params['max_depth']),
            min_samples_split=int(self.params['min_samples_split']),
            criterion=str(self.params['criterion']),
            subsample_ratio=float(self.params['subsample_ratio']),
            feature_subset_ratio=float(self.params['feature_subset_ratio']),
            rng=self.rng,
        ).fit(self.X, self.y, n_classes=len(IRIS_SPECIES))
        return self.model

    def predict_sample(self, index: int) -> VoteResult:
        """Forest vote for one Iris sample."""
        if not 0 <= index < len(self.samples):
            raise InvalidParameter('index', index, f"must be in [0, {len(self.samples)})")
        self.selected_index = index
        return self.model.vote(self.X[index])

    def snapshot(self) -> Dict:
        vote = self.predict_sample(self.selected_index)
        return snapshots.forest_snapshot(self.model, self.samples[self.selected_index], vote,
                                         self.model.score(self.X, self.y))


# =============================================================================
# REGRESSION
# =============================================================================

class LinearRegressionEssay(Essay):
    """
    Gradient descent line fit driven by an animation frame.

    With ``regenerate_each_render`` (the default) every render draws fresh
    noisy data and trains from (0, 0), as the animation always has. With it
    off, data is kept and the engine resumes or rewinds between frames.
    """

    name = 'linear_regression'

    def __init__(self, params=None, rng=None, regenerate_each_render: bool = True):
        super().__init__(params, rng)
        self.regenerate_each_render = regenerate_each_render
        self.frame = 0
        self._new_engine()

    def _make_data(self):
        return linear_regression_data(float(self.params['noise']), self.rng)

    def _build_engine(self, x, y):
        return LinearRegressionGD(x, y, float(self.params['learning_rate']))

    def _new_engine(self):
        x, y = self._make_data()
        self.engine = self._build_engine(x, y)

    def _on_change(self, changed):
        if 'noise' in changed:
            self._new_engine()
        else:
            self.engine = self._build_engine(self.engine.x, self.engine.y)

    def current_iteration(self, frame: int) -> int:
        return iterations_for_frame(frame, int(self.params['iterations']), FRAMES_PER_RUN)

    def render(self, frame: int = 0):
        """Engine state to display at ``frame``."""
        self.frame = frame
        if self.regenerate_each_render:
            self._new_engine()
        return self.engine.advance(self.current_iteration(frame))

    def snapshot(self) -> Dict:
        return snapshots.linear_regression_snapshot(self.engine)


class LogisticRegressionEssay(LinearRegressionEssay):
    """Sigmoid fit; the decision boundary only affects the error rate."""

    name = 'logistic_regression'

    def _make_data(self):
        return logistic_regression_data(float(self.params['noise']), self.rng)

    def _build_engine(self, x, y):
        return LogisticRegressionGD(x, y, float(self.params['learning_rate']),
                                    float(self.params['decision_boundary']))

    def _on_change(self, changed):
        if changed == ['decision_boundary']:
            self.engine.decision_boundary = float(self.params['decision_boundary'])
            return
        super()._on_change(changed)

    def snapshot(self) -> Dict:
        return snapshots.logistic_regression_snapshot(self.engine)


# =============================================================================
# NEURAL
# =============================================================================

class SOMEssay(Essay):
    """Kohonen map on a fixed ring; frames map to training steps 1:1."""

    name = 'som'

    def __init__(self, params=None, rng=None):
        super().__init__(params, rng)
        self.data = ring_points(self.rng)
        self.frame = 0
        self._new_engine()

    def _new_engine(self):
        self.engine = SelfOrganizingMap(
            self.data,
            grid_size=int(self.params['grid_size']),
            learning_rate=float(self.params['learning_rate']),
            iterations=int(self.params['iterations']),
            sigma=float(self.params['sigma']),
            rng=np.random.default_rng(self.rng.integers(2 ** 32)),
        )

    def _on_change(self, changed):
        self._new_engine()

    def render(self, frame: int = 0) -> SelfOrganizingMap:
        self.frame = frame
        return self.engine.advance(min(int(self.params['iterations']), frame))

    def snapshot(self) -> Dict:
        return snapshots.som_snapshot(self.engine)


class PerceptronEssay(Essay):
    """
    Network trained on the fixed input (0.5, -0.3) towards all-ones.

    Changing the activation, learning rate or iteration count keeps the
    current weights and continues training from them.
    """

    name = 'perceptron'

    def __init__(self, params=None, rng=None):
        super().__init__(params, rng)
        self.input = np.array(PERCEPTRON_INPUT, dtype=np.float64)
        self.last_step: Optional[TrainingStep] = None
        self._new_network()

    @property
    def target(self) -> np.ndarray:
        return np.ones(int(self.params['output_nodes']))

    def _new_network(self, layers=None):
        self.network = MultilayerPerceptron(
            hidden_layers=int(self.params['hidden_layers']),
            hidden_size=PERCEPTRON_HIDDEN_SIZE,
            output_nodes=int(self.params['output_nodes']),
            activation=str(self.params['activation']),
            learning_rate=float(self.params['learning_rate']),
            init_scale=PERCEPTRON_INIT_SCALE,
            layers=layers,
            rng=self.rng,
        )

    def _on_change(self, changed):
        if 'hidden_layers' in changed or 'output_nodes' in changed:
            self._new_network()
        else:
            self._new_network(layers=self.network.layers)

    def steps(self) -> Iterator[TrainingStep]:
        """Training steps, one per redraw."""
        for step in self.network.iter_training(self.input, self.target,
                                               int(self.params['iterations'])):
            self.last_step = step
            yield step

    def run(self) -> MultilayerPerceptron:
        for _ in self.steps():
            pass
        return self.network

    def snapshot(self) -> Dict:
        return snapshots.perceptron_snapshot(self.network, self.input, self.target)


# =============================================================================
# MARGIN
# =============================================================================

class SVMEssay(Essay):
    """Up to 15 labelled points; refit on every render."""

    name = 'svm'

    def __init__(self, params=None, rng=None):
        super().__init__(params, rng)
        self._regenerate()
        self.run()

    def _regenerate(self):
        self.X, self.y = svm_points(float(self.params['noise']), str(self.params['kernel']), self.rng)

    def _on_change(self, changed):
        if 'noise' in changed or 'kernel' in changed:
            self._regenerate()
        self.run()

    def run(self) -> KernelMarginClassifier:
        self.model = KernelMarginClassifier(
            C=float(self.params['c']),
            kernel=str(self.params['kernel']),
            gamma=float(self.params['gamma']),
            highlight_threshold=SVM_SUPPORT_HIGHLIGHT,
        ).fit(self.X, self.y)
        return self.model

    def snapshot(self, resolution: int = 50) -> Dict:
        return snapshots.svm_snapshot(self.model, resolution)


ESSAYS = {
    essay.name: essay
    for essay in (KMeansEssay, DBSCANEssay, DecisionTreeEssay, RandomForestEssay,
                  LinearRegressionEssay, LogisticRegressionEssay, SOMEssay,
                  PerceptronEssay, SVMEssay)
}


def create_essay(name: str, params: Optional[Dict] = None,
                 rng: Optional[np.random.Generator] = None) -> Essay:
    """Instantiate an essay by name."""
    if name not in ESSAYS:
        raise InvalidParameter('essay', name, f"must be one of {sorted(ESSAYS)}")
    return ESSAYS[name](params, rng)


def advance_essay(essay: Essay, frame: int = FRAMES_PER_RUN) -> Essay:
    """Bring any essay to its displayed state for ``frame``."""
    if hasattr(essay, 'render'):
        essay.render(frame)
    else:
        essay.run()
    return essay
