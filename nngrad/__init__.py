"""
nngrad: a minimal scalar autograd engine.

This package provides reverse-mode automatic differentiation over scalar
values and the Neuron, Layer and MLP modules built on top of it.
"""

from nngrad.engine import (
    Op,
    Value,
    add,
    apply_local_backward,
    coerce,
    make_scalar,
    multiply,
    power,
    relu,
    sigmoid,
    tanh,
    topological_order,
)
from nngrad import nn
from nngrad.nn import MLP, Activation, Layer, Module, Neuron, ShapeMismatchError
from nngrad.utils import draw_dot, squared_error, trace

__version__ = "0.1.0"
__all__ = [
    "Value", "Op", "make_scalar", "coerce", "add", "multiply", "power",
    "relu", "tanh", "sigmoid", "apply_local_backward", "topological_order",
    "nn", "Module", "Neuron", "Layer", "MLP", "Activation", "ShapeMismatchError",
    "draw_dot", "trace", "squared_error",
]
