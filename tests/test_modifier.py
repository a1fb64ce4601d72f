from DeltaNotchTools.modifier import DeltaNotchTrackingModifier
from DeltaNotchTools.population import Cell, NodeBasedCellPopulation
from DeltaNotchTools.srn_model import DeltaNotchSrnModel
from DeltaNotchTools.cell_data import PUBLISHED_KEYS, MissingCellDataKeyError
import numpy as np
import pytest


def make_cell(cell_id, location, state):
    model = DeltaNotchSrnModel(initial_conditions=state)
    model.initialise()
    return Cell(cell_id, location, model)


def make_population(locations, deltas, interaction_radius=1.5):
    cells = [
        make_cell(i, location, [0.1, 0.2, 0.3, 0.4, 0.5, delta])
        for i, (location, delta) in enumerate(zip(locations, deltas))
    ]
    return NodeBasedCellPopulation(cells,
                                   interaction_radius=interaction_radius)


@pytest.fixture
def modifier():
    return DeltaNotchTrackingModifier()


def test_setup_solve_publishes_all_keys(modifier):
    population = make_population([[0, 0], [1, 0], [5, 5]], [0.1, 0.2, 0.3])
    modifier.setup_solve(population)

    for cell in population:
        assert set(cell.cell_data.keys()) == set(PUBLISHED_KEYS)


def test_mean_delta(modifier):
    # a centre cell with three neighbours
    population = make_population([[0, 0], [1, 0], [-1, 0], [0, 1]],
                                 [0.9, 0.2, 0.4, 0.6],
                                 interaction_radius=1.2)
    modifier.update_cell_data(population)

    centre = population.get_cell(0)
    assert centre.cell_data.get_item('mean delta') == pytest.approx(0.4)

    # the cell at [-1, 0] only neighbours the centre
    assert population.get_cell(2).cell_data.get_item(
        'mean delta') == pytest.approx(0.9)


def test_isolated_cell(modifier):
    population = make_population([[0, 0], [1, 0], [10, 10]],
                                 [0.5, 0.7, 0.3])
    modifier.update_cell_data(population)
    assert population.get_cell(2).cell_data.get_item('mean delta') == 0.0

    # a cell that becomes isolated loses its previous mean delta
    population.move_cell(1, [-10, -10])
    modifier.update_cell_data(population)
    assert population.get_cell(0).cell_data.get_item('mean delta') == 0.0
    assert population.get_cell(1).cell_data.get_item('mean delta') == 0.0


def test_total_notch(modifier):
    rng = np.random.default_rng(0)
    states = rng.uniform(0, 3, (5, 6))
    cells = [make_cell(i, [i, 0], state) for i, state in enumerate(states)]
    population = NodeBasedCellPopulation(cells)
    modifier.update_cell_data(population)

    for cell, state in zip(population, states):
        assert cell.cell_data.get_item('total notch') == pytest.approx(
            np.sum(state[:5]))
        assert cell.cell_data.get_item('delta') == pytest.approx(state[5])
        assert cell.cell_data.get_item('cell surface notch') == pytest.approx(
            state[0])
        assert cell.cell_data.get_item(
            'notch intracellular domain') == pytest.approx(state[4])


def test_x_distance(modifier):
    population = make_population([[0, 0], [1, 3], [5, -2]], [0.1, 0.2, 0.3])
    modifier.update_cell_data(population)

    # centroid is at x = 2
    assert population.get_cell(0).cell_data.get_item(
        'x distance') == pytest.approx(2)
    assert population.get_cell(1).cell_data.get_item(
        'x distance') == pytest.approx(1)
    assert population.get_cell(2).cell_data.get_item(
        'x distance') == pytest.approx(3)

    # recomputed when the population changes
    population.move_cell(2, [8, -2])
    modifier.update_cell_data(population)
    assert population.get_cell(2).cell_data.get_item(
        'x distance') == pytest.approx(5)


def test_mean_delta_uses_current_publish(modifier):
    population = make_population([[0, 0], [1, 0], [2, 0]], [0.2, 0.4, 0.6])
    modifier.update_cell_data(population)
    assert population.get_cell(0).cell_data.get_item(
        'mean delta') == pytest.approx(0.4)

    # change the middle cell's Delta without publishing it
    middle = population.get_cell(1)
    state = middle.srn_model.state_variables
    state[5] = 1.0
    middle.srn_model.set_state_variables(state)

    modifier.compute_mean_delta(population)
    assert population.get_cell(0).cell_data.get_item(
        'mean delta') == pytest.approx(0.4)
    assert population.get_cell(2).cell_data.get_item(
        'mean delta') == pytest.approx(0.4)

    modifier.publish_cell_data(population)
    modifier.compute_mean_delta(population)
    assert population.get_cell(0).cell_data.get_item(
        'mean delta') == pytest.approx(1.0)
    assert population.get_cell(2).cell_data.get_item(
        'mean delta') == pytest.approx(1.0)
    assert middle.cell_data.get_item('mean delta') == pytest.approx(0.4)


def test_order_independent(modifier):
    locations = [[0, 0], [1, 0], [0.5, 0.8], [1.5, 0.8], [3, 3]]
    deltas = [0.1, 0.5, 0.9, 0.3, 0.7]
    forward = make_population(locations, deltas)

    cells = [
        make_cell(i, locations[i], [0.1, 0.2, 0.3, 0.4, 0.5, deltas[i]])
        for i in reversed(range(len(locations)))
    ]
    backward = NodeBasedCellPopulation(cells)

    modifier.update_cell_data(forward)
    modifier.update_cell_data(backward)
    for i in range(len(locations)):
        assert forward.get_cell(i).cell_data.get_item(
            'mean delta') == pytest.approx(
                backward.get_cell(i).cell_data.get_item('mean delta'))


def test_srn_model_reads_published_values(modifier):
    population = make_population([[0, 0], [1, 0]], [0.2, 0.6])
    cell = population.get_cell(0)
    with pytest.raises(MissingCellDataKeyError):
        cell.srn_model.simulate_to_time(0.01, cell.cell_data)

    modifier.setup_solve(population)
    cell.srn_model.simulate_to_time(0.01, cell.cell_data)
    assert cell.srn_model.get_mean_neighbouring_delta() == pytest.approx(0.6)
    assert cell.srn_model.get_parameter('x distance') == pytest.approx(0.5)
