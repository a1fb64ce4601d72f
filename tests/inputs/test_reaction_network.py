from DeltaNotchTools.inputs.reaction_network import (ReactionNetwork,
                                                     DeltaNotchReactionNetwork)
from monty.json import MontyDecoder
import numpy as np
import pytest


@pytest.fixture
def network():
    return DeltaNotchReactionNetwork()


def test_names(network):
    assert network.n_variables == 6
    assert network.n_parameters == 2
    assert network.variable_names == [
        'cell surface notch', 'sudx dependent notch',
        'dx dependent early endosome notch',
        'dx dependent late endosome notch', 'notch intracellular domain',
        'delta'
    ]
    assert network.parameter_names == ['mean delta', 'x distance']
    assert network.get_variable_index('delta') == 5
    assert network.get_parameter_index('x distance') == 1

    with pytest.raises(ValueError):
        network.get_variable_index('notch')
    with pytest.raises(ValueError):
        network.get_parameter_index('delta')


def test_defaults(network):
    assert np.all(network.default_initial_conditions == 1.0)
    assert np.all(network.default_parameters == 1.0)


def test_uncoupled_derivatives(network):
    """
    With every species at 1 and no neighbour Delta or Delta production,
    the derivative follows directly from the rate constants.
    """
    dYdt = network.evaluate_y_derivatives(0, np.ones(6), [0.0, 0.0])

    assert dYdt.shape == (6, )
    assert dYdt[0] == pytest.approx(-72850 / 11)
    assert dYdt[1] == pytest.approx(25205 / 11)
    assert dYdt[2] == pytest.approx(679793 / 165)
    assert dYdt[3] == pytest.approx(-17428 / 15)
    assert dYdt[4] == pytest.approx(1108.94)
    assert dYdt[5] == pytest.approx(-1000.25)


def test_coupled_derivatives(network):
    dYdt = network.evaluate_y_derivatives(0, np.ones(6), [1.0, 1.0])

    # trans-activation moves 500 from surface Notch and Delta into NICD
    assert dYdt[0] == pytest.approx(-72850 / 11 - 500)
    assert dYdt[1] == pytest.approx(25205 / 11)
    assert dYdt[2] == pytest.approx(679793 / 165)
    assert dYdt[3] == pytest.approx(-17428 / 15)
    assert dYdt[4] == pytest.approx(1608.94)
    assert dYdt[5] == pytest.approx(175 / 33 - 1500.25)


def test_autonomous(network):
    y = np.array([0.3, 0.1, 0.2, 0.05, 0.7, 0.4])
    assert np.allclose(network.evaluate_y_derivatives(0, y, [0.5, 2.0]),
                       network.evaluate_y_derivatives(12.5, y, [0.5, 2.0]))


def test_mean_delta_only_acts_through_trans_activation(network):
    y = np.array([0.3, 0.1, 0.2, 0.05, 0.7, 0.4])
    low = network.evaluate_y_derivatives(0, y, [0.0, 1.0])
    high = network.evaluate_y_derivatives(0, y, [2.0, 1.0])

    r_6 = 500 * 2.0 * 0.3
    assert high[0] - low[0] == pytest.approx(-r_6)
    assert high[4] - low[4] == pytest.approx(r_6)
    assert high[5] - low[5] == pytest.approx(-r_6)
    assert np.allclose(high[1:4], low[1:4])


def test_invalid_lengths(network):
    with pytest.raises(ValueError):
        network.evaluate_y_derivatives(0, np.ones(5), [1.0, 1.0])
    with pytest.raises(ValueError):
        network.evaluate_y_derivatives(0, np.ones(6), [1.0])


def test_abstract():
    with pytest.raises(TypeError):
        ReactionNetwork()


def test_as_dict(network):
    _d = network.as_dict()
    assert _d['@class'] == 'DeltaNotchReactionNetwork'

    decoded = MontyDecoder().process_decoded(_d)
    assert isinstance(decoded, DeltaNotchReactionNetwork)
