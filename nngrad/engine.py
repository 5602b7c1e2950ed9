import logging
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class Op(Enum):
    """Kind of operation that produced a Value. LEAF marks literals and parameters."""

    LEAF = 'leaf'
    ADD = '+'
    MUL = '*'
    POW = '**'
    RELU = 'ReLU'
    TANH = 'tanh'
    SIGMOID = 'sigmoid'


class Value:
    """
    Wraps a single float64 and tracks the operations applied to it.

    Every arithmetic operation on Values returns a new Value that remembers
    its operands and which operation produced it. Calling backward() on the
    final result fills in ``grad`` for every Value the result depends on.

    Example:
        >>> x = Value(2.0)
        >>> y = Value(3.0)
        >>> z = x * y + x
        >>> z.backward()  # Compute gradients
        >>> print(x.grad)  # dz/dx = y + 1 = 4.0
    """

    def __init__(self, data, _children=(), _op=Op.LEAF, op_tag='', name="", _arg=None):
        """
        Initialize a Value object.

        Args:
            data: The numerical value (anything float() accepts)
            _children: Operand Values, in order (internal use for autograd)
            _op: Op kind that created this Value (internal)
            op_tag: Diagnostic label of the operation, e.g. '+' or '**2'
            name: Optional name for debugging and visualization
            _arg: Non-Value argument of the operation, the exponent for POW (internal)
        """
        self.data = data

        # d(root)/d(self), filled in by backward()
        self.grad = 0.0

        self.name = name

        # Internal variables for building the computational graph
        self._prev = tuple(_children)  # Operands, in order; may repeat
        self._op = _op
        self._arg = _arg
        self.op_tag = op_tag

    @property
    def data(self):
        return self._data

    @data.setter
    def data(self, value):
        # numpy scalars turn 0 ** -1 and overflow into inf/nan instead of raising
        self._data = np.float64(value)

    @property
    def predecessors(self):
        """Operands that produced this Value (empty for leaves)."""
        return self._prev

    def __add__(self, other):
        return add(self, other)

    def __mul__(self, other):
        return multiply(self, other)

    def __pow__(self, other):
        return power(self, other)

    def relu(self):
        return relu(self)

    def tanh(self):
        return tanh(self)

    def sigmoid(self):
        return sigmoid(self)

    def backward(self):
        """
        Perform backpropagation: compute gradients for all Values in the graph.

        Walks every Value reachable from this one in reverse topological
        order and applies the chain rule. Gradients are accumulated, so a
        Value used by several operations receives the sum of all
        contributions. Gradients of leaves are not reset first; call
        ``Module.zero_grad()`` between training steps.

        The graph must be acyclic. Cycles are not detected.

        Example:
            >>> x = Value(2.0)
            >>> y = x * 3 + 1
            >>> y.backward()
            >>> print(x.grad)  # dy/dx = 3.0
        """
        topo = topological_order(self)
        logger.debug("backward pass over %d nodes", len(topo))

        # dL/dL = 1
        self.grad = 1.0

        for v in reversed(topo):
            apply_local_backward(v)

    # Reverse and derived operations (use the primitives above)

    def __neg__(self):
        """Negation: -x = x * -1"""
        return self * -1

    def __radd__(self, other):
        """Right addition: other + self (when other is not a Value)"""
        return add(coerce(other), self)

    def __sub__(self, other):
        """Subtraction: a - b = a + (-b)"""
        return self + (-coerce(other))

    def __rsub__(self, other):
        """Right subtraction: other - self"""
        return add(coerce(other), -self)

    def __rmul__(self, other):
        """Right multiplication: other * self (when other is not a Value)"""
        return multiply(coerce(other), self)

    def __truediv__(self, other):
        """Division: a / b = a * b^(-1)"""
        return self * coerce(other) ** -1

    def __rtruediv__(self, other):
        """Right division: other / self"""
        return multiply(coerce(other), self ** -1)

    def __repr__(self):
        """Return a readable string representation of the Value."""
        name_str = f"'{self.name}' " if self.name else ""
        op_str = f" from {self.op_tag}" if self._op is not Op.LEAF else ""
        return f"Value({name_str}data={self.data}, grad={self.grad}{op_str})"


def make_scalar(value, predecessors=(), operator_tag=""):
    """Create a Value with zero gradient and no local backward step."""
    return Value(value, predecessors, Op.LEAF, op_tag=operator_tag)


def coerce(x):
    """Return ``x`` unchanged if it is a Value, otherwise wrap it in a new leaf."""
    return x if isinstance(x, Value) else Value(x)


def add(a, b):
    """a + b"""
    a, b = coerce(a), coerce(b)
    return Value(a.data + b.data, (a, b), Op.ADD, '+')


def multiply(a, b):
    """a * b"""
    a, b = coerce(a), coerce(b)
    return Value(a.data * b.data, (a, b), Op.MUL, '*')


def power(a, k):
    """
    Raise ``a`` to a constant power.

    Args:
        a: Value or number
        k: Plain int or float exponent; the exponent is not part of the graph

    Raises:
        TypeError: if ``k`` is not an int or float
    """
    if isinstance(k, bool) or not isinstance(k, (int, float)):
        raise TypeError(f"Only supporting int/float powers, got {type(k).__name__}")
    a = coerce(a)
    return Value(a.data ** k, (a,), Op.POW, f'**{k}', _arg=k)


def relu(a):
    """ReLU activation: max(0, x)"""
    a = coerce(a)
    return Value(np.maximum(0.0, a.data), (a,), Op.RELU, 'ReLU')


def tanh(a):
    """Hyperbolic tangent activation."""
    a = coerce(a)
    return Value(np.tanh(a.data), (a,), Op.TANH, 'tanh')


def sigmoid(a):
    """
    Sigmoid activation: σ(x) = 1 / (1 + e^(-x))

    Squashes input to range (0, 1). Often used for binary classification.
    """
    a = coerce(a)
    x = a.data
    # For x >= 0: σ(x) = 1 / (1 + e^(-x))
    # For x < 0:  σ(x) = e^x / (1 + e^x)  [avoids overflow]
    if x >= 0:
        s = 1 / (1 + np.exp(-x))
    else:
        s = np.exp(x) / (1 + np.exp(x))
    return Value(s, (a,), Op.SIGMOID, 'sigmoid')


def apply_local_backward(node):
    """
    Add ``node``'s local derivative contribution into its operands' gradients.

    Each contribution is scaled by ``node.grad`` and added with ``+=`` so that
    an operand shared by several nodes collects the sum of all of them.

    Local derivatives:
        +        d(a+b)/da = 1, d(a+b)/db = 1
        *        d(a*b)/da = b, d(a*b)/db = a
        **k      d(x^k)/dx = k * x^(k-1)
        ReLU     1 if output > 0, else 0
        tanh     1 - tanh(x)^2
        sigmoid  σ(x) * (1 - σ(x))
    """
    op = node._op
    g = node.grad

    if op is Op.LEAF:
        return
    if op is Op.ADD:
        a, b = node._prev
        a.grad += g
        b.grad += g
    elif op is Op.MUL:
        a, b = node._prev
        a.grad += b.data * g
        b.grad += a.data * g
    elif op is Op.POW:
        (a,), k = node._prev, node._arg
        a.grad += (k * a.data ** (k - 1)) * g
    elif op is Op.RELU:
        (a,) = node._prev
        a.grad += (node.data > 0) * g
    elif op is Op.TANH:
        (a,) = node._prev
        a.grad += (1 - node.data ** 2) * g
    elif op is Op.SIGMOID:
        (a,) = node._prev
        a.grad += node.data * (1 - node.data) * g
    else:
        raise ValueError(f"Unknown op: {op!r}")


def topological_order(root):
    """
    Return every Value reachable from ``root``, operands before their results.

    Depth-first post-order over ``_prev`` with an identity-keyed visited set,
    run with an explicit stack so that long chains do not hit the recursion
    limit. ``root`` is always last.

    Example:
        >>> x = Value(2.0)
        >>> y = x * x
        >>> [v.op_tag for v in topological_order(y)]
        ['', '*']
    """
    topo = []
    visited = set()
    stack = [(root, False)]

    while stack:
        v, expanded = stack.pop()
        if expanded:
            # All operands of v are already in topo
            topo.append(v)
            continue
        if v in visited:
            continue
        visited.add(v)
        stack.append((v, True))
        for child in reversed(v._prev):
            if child not in visited:
                stack.append((child, False))

    return topo
