import numpy as np
import pytest

from nngrad.engine import Value
from nngrad.nn import MLP, Activation, Layer, Module, Neuron, ShapeMismatchError
from nngrad.utils import squared_error


def test_neuron_shape_validation():
    n = Neuron(3, rng=np.random.default_rng(0))
    with pytest.raises(ShapeMismatchError) as exc_info:
        n([1, 2])
    assert exc_info.value.expected == 3
    assert exc_info.value.actual == 2
    assert isinstance(exc_info.value, ValueError)

    out = n([1, 2, 3])
    assert len(out) == 1
    assert isinstance(out[0], Value)


def test_neuron_initialization():
    n = Neuron(50, rng=np.random.default_rng(1))
    assert len(n.w) == 50
    assert all(-1.0 <= w.data <= 1.0 for w in n.w)
    assert n.b.data == 0.0
    assert n.parameters() == n.w + [n.b]


def test_linear_neuron_is_weighted_sum():
    n = Neuron(2, nonlin=False, activation='linear')
    n.w[0].data = 2.0
    n.w[1].data = -1.0
    n.b.data = 0.5
    out = n([3.0, 4.0])[0]
    assert out.data == 2.5


@pytest.mark.parametrize("activation, expected", [
    ('relu', 0.0),
    ('tanh', np.tanh(-1.0)),
    ('sigmoid', 1 / (1 + np.exp(1.0))),
    ('linear', -1.0),
    ('swish', -1.0),
])
def test_neuron_activations(activation, expected):
    n = Neuron(1, activation=activation)
    n.w[0].data = 1.0
    out = n([-1.0])[0]
    np.testing.assert_allclose(out.data, expected)


def test_activation_parse():
    assert Activation.parse('ReLU') is Activation.RELU
    assert Activation.parse(Activation.TANH) is Activation.TANH
    assert Activation.parse(None) is Activation.LINEAR
    assert Activation.parse('unknown') is Activation.LINEAR


def test_module_is_abstract():
    with pytest.raises(TypeError):
        Module()


def test_entry_points_agree():
    n = Neuron(2, rng=np.random.default_rng(3))
    x = [0.5, -0.25]
    a = n.evaluate([Value(v) for v in x])[0]
    b = n.evaluate_numbers(x)[0]
    c = n([Value(0.5), -0.25])[0]
    assert a.data == b.data == c.data


def test_layer_neurons_share_inputs():
    layer = Layer(3, 4, activation='linear', rng=np.random.default_rng(2))
    x = [Value(1.0), Value(2.0), Value(3.0)]
    outs = layer.evaluate(x)
    assert len(outs) == 4
    for neuron, out in zip(layer.neurons, outs):
        assert out.data == neuron.evaluate(x)[0].data
    assert len(layer.parameters()) == 4 * (3 + 1)
    assert layer.parameters()[:4] == layer.neurons[0].parameters()


def test_mlp_structure_and_default_activations():
    mlp = MLP(2, [4, 3, 1], rng=np.random.default_rng(0))
    assert [len(layer.neurons) for layer in mlp.layers] == [4, 3, 1]
    assert [len(layer.neurons[0].w) for layer in mlp.layers] == [2, 4, 3]
    assert [layer.neurons[0].activation for layer in mlp.layers] == [
        Activation.RELU, Activation.RELU, Activation.SIGMOID,
    ]
    assert len(mlp.parameters()) == 4 * 3 + 3 * 5 + 1 * 4
    assert len(mlp([0.1, 0.2])) == 1


def test_mlp_explicit_activations():
    mlp = MLP(2, [3, 1], ['tanh', 'linear'])
    assert [layer.neurons[0].activation for layer in mlp.layers] == [
        Activation.TANH, Activation.LINEAR,
    ]
    partial = MLP(2, [3, 1], ['tanh'])
    assert partial.layers[1].neurons[0].activation is Activation.SIGMOID


def test_seeded_initialization_is_reproducible():
    a = MLP(2, [4, 1], rng=np.random.default_rng(42))
    b = MLP(2, [4, 1], rng=np.random.default_rng(42))
    assert [p.data for p in a.parameters()] == [p.data for p in b.parameters()]


def test_zero_grad_resets_all_parameters():
    mlp = MLP(2, [4, 1], rng=np.random.default_rng(7))
    loss = squared_error(mlp([0.5, -0.5]), [1.0])
    loss.backward()
    loss = squared_error(mlp([0.5, -0.5]), [1.0])
    loss.backward()
    assert any(p.grad != 0 for p in mlp.parameters())

    mlp.zero_grad()
    assert all(p.grad == 0 for p in mlp.parameters())
    mlp.zero_grad()
    assert all(p.grad == 0 for p in mlp.parameters())


@pytest.mark.parametrize("seed", range(5))
def test_one_training_step_reduces_loss(seed):
    mlp = MLP(2, [4, 1], rng=np.random.default_rng(seed))
    x = [0.5, -0.5]

    loss = (mlp(x)[0] - 1.0) ** 2
    mlp.zero_grad()
    loss.backward()
    assert all(np.isfinite(p.grad) for p in mlp.parameters())

    for p in mlp.parameters():
        p.data -= 0.01 * p.grad

    new_loss = (mlp(x)[0] - 1.0) ** 2
    assert new_loss.data < loss.data


def test_training_loop_fits_small_dataset():
    mlp = MLP(2, [8, 1], rng=np.random.default_rng(0))
    xs = [[1.0, 1.0], [-1.0, -1.0], [1.0, -1.0], [-1.0, 1.0]]
    ys = [1.0, 0.0, 1.0, 0.0]

    def total_loss():
        loss = Value(0.0)
        for x, y in zip(xs, ys):
            loss = loss + squared_error(mlp(x), [y])
        return loss

    first = total_loss().data
    for _ in range(50):
        loss = total_loss()
        mlp.zero_grad()
        loss.backward()
        for p in mlp.parameters():
            p.data -= 0.1 * p.grad

    assert total_loss().data < first


def test_repr():
    mlp = MLP(2, [2, 1], rng=np.random.default_rng(0))
    assert repr(mlp.layers[1].neurons[0]) == "Sigmoid Neuron(2)"
    assert repr(mlp).startswith("MLP of [Layer of [Relu Neuron(2)")
