"""
Graph utilities for nngrad.

Tracing and Graphviz rendering of the graph behind a Value, plus a squared
error loss built from the engine's primitives.
"""

from graphviz import Digraph

from nngrad.engine import Op, Value, add, coerce, power
from nngrad.nn import ShapeMismatchError


def trace(root):
    """
    Collect the computational graph reachable from a root Value.

    Args:
        root: A Value object representing the output of a computation

    Returns:
        tuple: (nodes, edges) where:
            - nodes: set of all Value objects in the graph
            - edges: set of (operand, result) tuples

    Example:
        >>> x = Value(2.0)
        >>> y = Value(3.0)
        >>> z = x * y + x
        >>> nodes, edges = trace(z)
        >>> len(nodes)  # x, y, x*y and z
        4
    """
    nodes, edges = set(), set()
    stack = [root]

    while stack:
        v = stack.pop()
        if v in nodes:
            continue
        nodes.add(v)
        for child in v._prev:
            edges.add((child, v))
            stack.append(child)

    return nodes, edges


def draw_dot(root, format='svg', rankdir='LR'):
    """
    Visualize the computational graph of a Value object as a directed graph.

    Each Value becomes a record box showing its name, data and gradient;
    each operation gets its own small node feeding the Value it produced.

    Args:
        root: A Value object (typically the loss) to visualize from
        format: Output format ('svg', 'png', 'pdf', etc.)
        rankdir: Graph direction - 'LR' (left-right) or 'TB' (top-bottom)

    Returns:
        Digraph: A graphviz Digraph object that can be rendered or displayed

    Note:
        Rendering needs the Graphviz system binaries; building the Digraph
        does not.
    """
    assert rankdir in ['LR', 'TB'], "rankdir must be 'LR' (left-right) or 'TB' (top-bottom)"

    nodes, edges = trace(root)
    dot = Digraph(format=format, graph_attr={'rankdir': rankdir})

    for n in nodes:
        label = f'{{ {n.name} | data {n.data:.4f} | grad {n.grad:.4f} }}'
        dot.node(name=str(id(n)), label=label, shape='record')

        if n._op is not Op.LEAF:
            dot.node(name=str(id(n)) + n.op_tag, label=n.op_tag)
            dot.edge(str(id(n)) + n.op_tag, str(id(n)))

    for n1, n2 in edges:
        if n2._op is Op.LEAF:
            # Predecessors given to make_scalar have no op node to attach to
            dot.edge(str(id(n1)), str(id(n2)))
        else:
            dot.edge(str(id(n1)), str(id(n2)) + n2.op_tag)

    return dot


def squared_error(outputs, targets):
    """
    Sum of squared differences between outputs and targets, as one Value.

    Args:
        outputs: Sequence of Values (e.g. the result of ``mlp(x)``)
        targets: Sequence of numbers or Values of the same length

    Raises:
        ShapeMismatchError: if the sequences differ in length
    """
    if len(outputs) != len(targets):
        raise ShapeMismatchError(len(outputs), len(targets))

    loss = Value(0.0)
    for out, target in zip(outputs, targets):
        loss = add(loss, power(coerce(out) - target, 2))
    return loss
