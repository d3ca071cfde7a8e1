"""
Neural Network (Multi-Layer Perceptron) from scratch.

Implements:
- Dense layers with weights[out][in] and biases[out]
- Activation functions as a closed set (sigmoid, ReLU, identity), each
  carrying its derivative expressed in terms of its own output
- Forward pass collecting every layer's activations (input included)
- Backpropagation with plain gradient descent on a single input/target pair
- Training as a generator that suspends after each step so the caller can
  redraw the network between updates

Perceptron essay: Input(2) -> Hidden(3) x hidden_layers -> Output(output_nodes)
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .errors import check_at_least, check_choice, check_positive, InvalidParameter
from .utils import resolve_rng

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivationFunction:
    """An activation with its derivative and display formula."""
    name: str
    label: str
    apply: Callable[[np.ndarray], np.ndarray]
    derivative: Callable[[np.ndarray], np.ndarray]  # of the output a = f(z)
    formula: str


def _sigmoid(z: np.ndarray) -> np.ndarray:
    # Clip to prevent overflow
    z = np.clip(z, -500, 500)
    return 1 / (1 + np.exp(-z))


ACTIVATIONS: Dict[str, ActivationFunction] = {
    'sigmoid': ActivationFunction(
        name='sigmoid',
        label='Sigmoid',
        apply=_sigmoid,
        derivative=lambda a: a * (1 - a),
        formula=r"\sigma(x) = \frac{1}{1 + e^{-x}}",
    ),
    'relu': ActivationFunction(
        name='relu',
        label='ReLU',
        apply=lambda z: np.maximum(0, z),
        derivative=lambda a: (a > 0).astype(float),
        formula=r"\text{ReLU}(x) = \max(0, x)",
    ),
    'identity': ActivationFunction(
        name='identity',
        label='Identity',
        apply=lambda z: np.asarray(z, dtype=np.float64),
        derivative=lambda a: np.ones_like(a, dtype=np.float64),
        formula=r"\phi(x) = x",
    ),
}


def get_activation(name: str) -> ActivationFunction:
    """Look up an activation by name."""
    check_choice('activation', name, ACTIVATIONS)
    return ACTIVATIONS[name]


@dataclass
class DenseLayer:
    """Fully connected layer: z = W a_prev + b."""
    weights: np.ndarray  # (n_out, n_in)
    biases: np.ndarray   # (n_out,)

    @property
    def n_inputs(self) -> int:
        return self.weights.shape[1]

    @property
    def n_outputs(self) -> int:
        return self.weights.shape[0]

    def copy(self) -> 'DenseLayer':
        return DenseLayer(self.weights.copy(), self.biases.copy())


@dataclass
class TrainingStep:
    """Snapshot yielded after each training step."""
    iteration: int
    activations: List[np.ndarray]  # forward pass used for the update
    deltas: List[np.ndarray]
    loss: float


class MultilayerPerceptron:
    """
    Multi-Layer Perceptron trained on one fixed example.

    The batch is a single (input, target) pair, so training shows weights
    converging towards the target rather than generalization.

    Backpropagation:
        delta_L = (a_L - t) * f'(a_L)
        delta_l = (W_{l+1}^T delta_{l+1}) * f'(a_l)
        W_l    -= lr * outer(delta_l, a_{l-1})
        b_l    -= lr * delta_l
    """

    def __init__(self,
                 hidden_layers: int = 2,
                 hidden_size: int = 3,
                 output_nodes: int = 1,
                 activation: str = 'sigmoid',
                 learning_rate: float = 0.1,
                 input_size: int = 2,
                 init_scale: float = 0.5,
                 layers: Optional[List[DenseLayer]] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize the network.

        Args:
            hidden_layers: Number of hidden layers (0 = output layer only)
            hidden_size: Neurons per hidden layer
            output_nodes: Neurons in the output layer
            activation: 'sigmoid', 'relu' or 'identity' (all layers)
            learning_rate: Gradient descent step size
            input_size: Input features
            init_scale: Weights and biases start in U(-init_scale, init_scale)
            layers: Explicit layers to use instead of random initialization
            rng: Random generator for weight initialization
        """
        self.hidden_layers = check_at_least('hidden_layers', hidden_layers, 0)
        self.hidden_size = check_at_least('hidden_size', hidden_size, 1)
        self.output_nodes = check_at_least('output_nodes', output_nodes, 1)
        self.input_size = check_at_least('input_size', input_size, 1)
        self.activation = get_activation(activation)
        self.learning_rate = check_positive('learning_rate', learning_rate)
        self.init_scale = init_scale
        self.rng = resolve_rng(rng)

        if layers is not None:
            self.layers = [layer.copy() for layer in layers]
            self._check_layers()
        else:
            self.layers = self._init_layers()

        self.steps_completed = 0

    def _init_layers(self) -> List[DenseLayer]:
        """Independent uniform weights and biases for every layer."""
        sizes = [self.input_size] + [self.hidden_size] * self.hidden_layers + [self.output_nodes]
        layers = []
        for n_in, n_out in zip(sizes[:-1], sizes[1:]):
            W = self.rng.uniform(-self.init_scale, self.init_scale, size=(n_out, n_in))
            b = self.rng.uniform(-self.init_scale, self.init_scale, size=n_out)
            layers.append(DenseLayer(W, b))
        return layers

    def _check_layers(self):
        prev = self.input_size
        for idx, layer in enumerate(self.layers):
            if layer.weights.shape != (len(layer.biases), prev):
                raise InvalidParameter(f'layers[{idx}]', layer.weights.shape,
                                       f"expected ({len(layer.biases)}, {prev})")
            prev = len(layer.biases)

    @property
    def layer_sizes(self) -> List[int]:
        return [self.input_size] + [layer.n_outputs for layer in self.layers]

    # =========================================================================
    # Forward / backward
    # =========================================================================

    def forward(self, x: Sequence[float]) -> List[np.ndarray]:
        """
        Forward propagation through the network.

        Returns:
            Activations of every layer, starting with the input itself
        """
        a = np.asarray(x, dtype=np.float64)
        if a.shape != (self.input_size,):
            raise InvalidParameter('x', a.shape, f"expected ({self.input_size},)")

        activations = [a]
        for layer in self.layers:
            a = self.activation.apply(layer.weights @ a + layer.biases)
            activations.append(a)
        return activations

    def predict(self, x: Sequence[float]) -> np.ndarray:
        """Output layer activations."""
        return self.forward(x)[-1]

    def backward(self, activations: List[np.ndarray], target: np.ndarray) -> List[np.ndarray]:
        """
        Deltas for every layer, from a forward pass and the target.

        Returns:
            deltas[l] aligned with self.layers[l]
        """
        derivative = self.activation.derivative
        deltas = [(activations[-1] - target) * derivative(activations[-1])]

        for l in range(len(self.layers) - 2, -1, -1):
            next_weights = self.layers[l + 1].weights
            propagated = next_weights.T @ deltas[0]
            deltas.insert(0, propagated * derivative(activations[l + 1]))

        return deltas

    def train_step(self, x: Sequence[float], target: Sequence[float]) -> TrainingStep:
        """Perform one forward pass, backpropagation and update."""
        target = self._check_target(target)
        activations = self.forward(x)
        deltas = self.backward(activations, target)

        for l, layer in enumerate(self.layers):
            layer.weights -= self.learning_rate * np.outer(deltas[l], activations[l])
            layer.biases -= self.learning_rate * deltas[l]

        self.steps_completed += 1
        loss = float(np.mean((activations[-1] - target) ** 2))
        return TrainingStep(self.steps_completed, activations, deltas, loss)

    def iter_training(self, x: Sequence[float], target: Sequence[float],
                      iterations: int) -> Iterator[TrainingStep]:
        """
        Train for ``iterations`` steps, suspending after each one.

        Stopping iteration early simply leaves the remaining steps undone.
        """
        iterations = check_at_least('iterations', iterations, 0)
        for _ in range(iterations):
            step = self.train_step(x, target)
            logger.debug("Perceptron step %d: loss=%.6f", step.iteration, step.loss)
            yield step

    def fit(self, x: Sequence[float], target: Sequence[float],
            iterations: int) -> 'MultilayerPerceptron':
        """Run all training steps without suspending."""
        for _ in self.iter_training(x, target, iterations):
            pass
        return self

    def loss(self, x: Sequence[float], target: Sequence[float]) -> float:
        """Mean squared error between the output and the target."""
        target = self._check_target(target)
        return float(np.mean((self.predict(x) - target) ** 2))

    def _check_target(self, target) -> np.ndarray:
        target = np.asarray(target, dtype=np.float64)
        if target.shape != (self.output_nodes,):
            raise InvalidParameter('target', target.shape, f"expected ({self.output_nodes},)")
        return target
