"""
Neural network building blocks for nngrad.

This module provides Neuron, Layer and MLP, each built from scalar Values so
that a loss computed from their outputs can be differentiated with backward().
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

from nngrad.engine import Value, coerce, relu, sigmoid, tanh

logger = logging.getLogger(__name__)


class ShapeMismatchError(ValueError):
    """Raised when an input vector does not match the expected width."""

    def __init__(self, expected, actual):
        super().__init__(f"Expected {expected} inputs, got {actual}")
        self.expected = expected
        self.actual = actual


class Activation(Enum):
    """Activation applied to a neuron's weighted sum."""

    RELU = 'relu'
    SIGMOID = 'sigmoid'
    TANH = 'tanh'
    LINEAR = 'linear'

    @classmethod
    def parse(cls, kind):
        """
        Turn an Activation, a name or None into an Activation.

        Unknown names fall back to LINEAR rather than failing.
        """
        if isinstance(kind, cls):
            return kind
        if kind is None:
            return cls.LINEAR
        try:
            return cls(str(kind).lower())
        except ValueError:
            logger.debug("unknown activation %r, using linear", kind)
            return cls.LINEAR

    def __call__(self, x):
        return _ACTIVATIONS[self](x)


_ACTIVATIONS = {
    Activation.RELU: relu,
    Activation.SIGMOID: sigmoid,
    Activation.TANH: tanh,
    Activation.LINEAR: lambda x: x,
}


class Module(ABC):
    """
    Interface shared by Neuron, Layer and MLP.

    Subclasses implement evaluate() and parameters(); gradient reset and the
    numeric-input entry points are built on those two.
    """

    @abstractmethod
    def evaluate(self, x):
        """Map a sequence of input Values to a list of output Values."""

    @abstractmethod
    def parameters(self):
        """Return a list of all trainable parameters (weights and biases)."""

    def evaluate_numbers(self, x):
        """Like evaluate(), but takes plain numbers and wraps each in a fresh leaf."""
        return self.evaluate([Value(xi) for xi in x])

    def __call__(self, x):
        """
        Forward pass on a sequence of numbers, Values, or a mix of both.

        Each element is coerced on its own, so ``net([0.5, Value(1.0)])`` works.
        """
        return self.evaluate([coerce(xi) for xi in x])

    def zero_grad(self):
        """
        Reset all gradients to zero.

        Call this before each backward pass to avoid accumulating gradients
        from multiple backward passes.
        """
        for p in self.parameters():
            p.grad = 0.0


class Neuron(Module):
    """
    A single neuron: activation(w1*x1 + w2*x2 + ... + wn*xn + b)

    Args:
        nin: Number of inputs
        nonlin: Whether this neuron sits in a hidden layer (informational,
            the activation alone decides the output)
        activation: Activation or its name; unknown names mean linear
        rng: numpy Generator used to draw the weights (default: unseeded)

    Weights are drawn from U[-1, 1], the bias starts at 0.
    """

    def __init__(self, nin, nonlin=True, activation=Activation.RELU, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        self.w = [Value(wi) for wi in rng.uniform(-1.0, 1.0, nin)]
        self.b = Value(0.0)
        self.nonlin = nonlin
        self.activation = Activation.parse(activation)

    def evaluate(self, x):
        """
        Compute the neuron's output for inputs ``x``.

        Returns:
            A one-element list holding the output Value

        Raises:
            ShapeMismatchError: if ``len(x)`` differs from the number of weights
        """
        if len(x) != len(self.w):
            raise ShapeMismatchError(len(self.w), len(x))

        act = Value(0.0)
        for wi, xi in zip(self.w, x):
            act = act + wi * xi
        act = act + self.b
        return [self.activation(act)]

    def parameters(self):
        return self.w + [self.b]

    def __repr__(self):
        return f"{self.activation.name.capitalize()} Neuron({len(self.w)})"


class Layer(Module):
    """A row of independent neurons that all see the same inputs."""

    def __init__(self, nin, nout, nonlin=True, activation=Activation.RELU, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        self.neurons = [Neuron(nin, nonlin, activation, rng) for _ in range(nout)]

    def evaluate(self, x):
        return [out for n in self.neurons for out in n.evaluate(x)]

    def parameters(self):
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self):
        return f"Layer of [{', '.join(str(n) for n in self.neurons)}]"


class MLP(Module):
    """
    Multi-Layer Perceptron: a sequence of fully-connected layers.

    Args:
        nin: Number of input features
        nouts: List of output sizes for each layer
               Example: [16, 16, 1] creates 3 layers: input→16→16→1
        activations: Optional activation per layer. Layers without an entry
               (or with None) use relu, except the last which uses sigmoid.
        rng: numpy Generator shared by all layers for weight initialization

    Example:
        >>> mlp = MLP(2, [4, 1], rng=np.random.default_rng(0))
        >>> out = mlp([0.5, -0.5])[0]
        >>> loss = (out - 1.0) ** 2
        >>> mlp.zero_grad()
        >>> loss.backward()
        >>> for p in mlp.parameters():
        ...     p.data -= 0.01 * p.grad
    """

    def __init__(self, nin, nouts, activations=None, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        sizes = [nin] + list(nouts)
        activations = list(activations) if activations is not None else []

        self.layers = []
        for i in range(len(nouts)):
            is_output_layer = (i == len(nouts) - 1)
            act = activations[i] if i < len(activations) else None
            if act is None:
                act = Activation.SIGMOID if is_output_layer else Activation.RELU
            self.layers.append(Layer(sizes[i], sizes[i + 1], not is_output_layer, act, rng))

        logger.debug("built %r", self)

    def evaluate(self, x):
        for layer in self.layers:
            x = layer.evaluate(x)
        return x

    def parameters(self):
        """Return all trainable parameters from all layers."""
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self):
        return f"MLP of [{', '.join(str(layer) for layer in self.layers)}]"
