"""
Self-Organizing Map (Kohonen network) from scratch.

Implements:
- Square grid of neurons with fixed topological coordinates (i, j)
- Online competitive learning: one random sample per step
- Best Matching Unit (BMU) search in weight space
- Gaussian neighborhood on *grid* distance to the BMU
- Exponential decay of learning rate and neighborhood radius

Update rule at step t:
    lr_t    = lr * exp(-t / iterations)
    sigma_t = sigma * exp(-t / iterations)
    h_k     = exp(-||g_k - g_bmu||^2 / (2 * sigma_t^2))
    w_k    += lr_t * h_k * (x - w_k)
"""

import copy
import logging
import numpy as np
from dataclasses import dataclass
from typing import List, Optional

from .errors import check_at_least, check_positive, InvalidParameter
from .utils import pairwise_squared_distances, resolve_rng

logger = logging.getLogger(__name__)


@dataclass
class Neuron:
    """One grid unit: weight vector (x, y) at grid position (i, j)."""
    x: float
    y: float
    i: int
    j: int


class SelfOrganizingMap:
    """
    2-D Self-Organizing Map trained on 2-D data.

    Neurons are stored row-major: neuron (i, j) is at index i * grid_size + j.
    Weights start on a regular lattice covering [-0.5, 0.5]^2. Only weights
    change during training; grid coordinates never do.
    """

    def __init__(self,
                 data: np.ndarray,
                 grid_size: int = 10,
                 learning_rate: float = 0.1,
                 iterations: int = 100,
                 sigma: float = 1.0,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize the SOM.

        Args:
            data: Training points of shape (n_points, 2)
            grid_size: Neurons per side (>= 2)
            learning_rate: Initial learning rate
            iterations: Decay horizon and maximum number of steps
            sigma: Initial neighborhood radius in grid units
            rng: Random generator used to draw training samples
        """
        self.data = np.array(data, dtype=np.float64)
        if self.data.ndim != 2 or self.data.shape[1] != 2 or len(self.data) == 0:
            raise InvalidParameter('data', self.data.shape, "must be a non-empty (n, 2) array")
        self.grid_size = check_at_least('grid_size', grid_size, 2)
        self.learning_rate = check_positive('learning_rate', learning_rate)
        self.iterations = check_at_least('iterations', iterations, 1)
        self.sigma = check_positive('sigma', sigma)
        self.rng = resolve_rng(rng)

        # Captured so a rewind replays the same sample draws
        self._initial_rng_state = copy.deepcopy(self.rng.bit_generator.state)

        ii, jj = np.meshgrid(np.arange(self.grid_size), np.arange(self.grid_size), indexing='ij')
        self.grid_coords = np.column_stack([ii.ravel(), jj.ravel()]).astype(np.int64)
        self.grid_coords.setflags(write=False)

        self.weights = np.empty((self.grid_size ** 2, 2))
        self.reset()

    def _initial_weights(self) -> np.ndarray:
        return self.grid_coords / (self.grid_size - 1) - 0.5

    def reset(self) -> 'SelfOrganizingMap':
        """Restore the initial lattice and sample sequence."""
        self.weights = self._initial_weights()
        self.rng.bit_generator.state = copy.deepcopy(self._initial_rng_state)
        self.steps_completed = 0
        self.last_bmu: Optional[int] = None
        self.last_sample: Optional[np.ndarray] = None
        return self

    # =========================================================================
    # Training
    # =========================================================================

    def best_matching_unit(self, point: np.ndarray) -> int:
        """Index of the neuron closest to ``point`` (first minimum wins)."""
        distances = np.sqrt(np.sum((self.weights - point) ** 2, axis=1))
        return int(np.argmin(distances))

    def decayed(self, step: int):
        """(learning_rate, sigma) after exponential decay at ``step``."""
        factor = np.exp(-step / self.iterations)
        return self.learning_rate * factor, self.sigma * factor

    def neighborhood(self, bmu: int, sigma_t: float) -> np.ndarray:
        """Gaussian influence of every neuron given the BMU's grid position."""
        grid_dist_sq = np.sum((self.grid_coords - self.grid_coords[bmu]) ** 2, axis=1)
        return np.exp(-grid_dist_sq / (2 * sigma_t ** 2))

    def step(self) -> 'SelfOrganizingMap':
        """Train on one randomly drawn sample."""
        point = self.data[self.rng.integers(len(self.data))]
        bmu = self.best_matching_unit(point)

        lr_t, sigma_t = self.decayed(self.steps_completed)
        influence = self.neighborhood(bmu, sigma_t)
        self.weights += lr_t * influence[:, np.newaxis] * (point - self.weights)

        self.last_bmu = bmu
        self.last_sample = point
        self.steps_completed += 1
        return self

    def advance(self, target_step: int) -> 'SelfOrganizingMap':
        """
        Bring the map to ``min(target_step, iterations)`` completed steps.

        Moving backward replays from the initial lattice with the same
        sample sequence, so any step count always shows the same map.
        """
        target_step = min(check_at_least('target_step', target_step, 0), self.iterations)
        if target_step < self.steps_completed:
            logger.debug("Rewinding SOM from step %d to %d", self.steps_completed, target_step)
            self.reset()
        while self.steps_completed < target_step:
            self.step()
        return self

    def fit(self) -> 'SelfOrganizingMap':
        """Train from scratch for the full number of iterations."""
        return self.reset().advance(self.iterations)

    # =========================================================================
    # Inspection
    # =========================================================================

    def neurons(self) -> List[Neuron]:
        """Neurons in row-major order."""
        return [Neuron(x=float(w[0]), y=float(w[1]), i=int(g[0]), j=int(g[1]))
                for w, g in zip(self.weights, self.grid_coords)]

    def neuron_at(self, i: int, j: int) -> Neuron:
        idx = i * self.grid_size + j
        w = self.weights[idx]
        return Neuron(x=float(w[0]), y=float(w[1]), i=i, j=j)

    def bmu_neuron(self) -> Optional[Neuron]:
        """The BMU of the most recent step, if any."""
        if self.last_bmu is None:
            return None
        i, j = self.grid_coords[self.last_bmu]
        return self.neuron_at(int(i), int(j))

    def quantization_error(self) -> float:
        """Mean distance from each data point to its BMU."""
        d2 = pairwise_squared_distances(self.data, self.weights)
        return float(np.mean(np.sqrt(d2.min(axis=1))))
