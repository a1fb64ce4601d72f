from typing import Optional, Sequence, Union

import numpy as np
from monty.json import MSONable

from DeltaNotchTools.cell_data import CellData, MEAN_DELTA, X_DISTANCE
from DeltaNotchTools.inputs.integrators import OdeIntegrator, OdeintIntegrator
from DeltaNotchTools.inputs.reaction_network import (ReactionNetwork,
                                                     DeltaNotchReactionNetwork)


class UninitialisedStateError(RuntimeError):
    """
    Raised when the state of a subcellular reaction network model is used
    before initialise() has allocated it.
    """


class DeltaNotchSrnModel(MSONable):
    """
    Subcellular reaction network (SRN) model carried by a single cell. It
    owns the cell's Notch/Delta state vector and advances it in time with
    an injected integrator, using the reaction network as the right hand
    side.

    The model keeps no reference to its cell. Anything that needs the
    cell's stored values (the coupling refresh) receives the cell's
    CellData explicitly.

    Args:
        reaction_network (ReactionNetwork, None): The right hand side of the
            ODE system. Defaults to DeltaNotchReactionNetwork.
        integrator (OdeIntegrator, None): The integrator used to advance
            the state. Defaults to OdeintIntegrator.
        initial_conditions (Sequence[float], None): The state vector
            allocated by initialise(). Defaults to 1.0 for every variable.
        parameters (Sequence[float], None): The initial parameter values.
            Defaults to 1.0 for every parameter. These are overwritten from
            the cell's data before the first integration.
        simulated_to_time (float): The time the state corresponds to.
    """

    def __init__(self,
                 reaction_network: Optional[ReactionNetwork] = None,
                 integrator: Optional[OdeIntegrator] = None,
                 initial_conditions: Optional[Sequence[float]] = None,
                 parameters: Optional[Sequence[float]] = None,
                 simulated_to_time: float = 0.0):
        if reaction_network is None:
            reaction_network = DeltaNotchReactionNetwork()
        if integrator is None:
            integrator = OdeintIntegrator()
        if initial_conditions is None:
            initial_conditions = reaction_network.default_initial_conditions
        if parameters is None:
            parameters = reaction_network.default_parameters

        if len(initial_conditions) != reaction_network.n_variables:
            raise ValueError(
                'Supplied initial conditions are invalid. Expected length of '
                f'{reaction_network.n_variables}, received length of '
                f'{len(initial_conditions)}')
        if len(parameters) != reaction_network.n_parameters:
            raise ValueError(
                'Supplied parameters are invalid. Expected length of '
                f'{reaction_network.n_parameters}, received length of '
                f'{len(parameters)}')

        self.reaction_network = reaction_network
        self.integrator = integrator
        self.initial_conditions = np.array(initial_conditions, dtype=float)
        self.parameters = np.array(parameters, dtype=float)
        self.simulated_to_time = float(simulated_to_time)

        self._state_variables = None

    def initialise(self) -> None:
        """
        Allocates the state vector from the initial conditions.
        """
        self._state_variables = self.initial_conditions.copy()

    @property
    def is_initialised(self) -> bool:
        return self._state_variables is not None

    def _check_initialised(self) -> None:
        if self._state_variables is None:
            raise UninitialisedStateError(
                'SRN model has no state. Call initialise() first.')

    @property
    def state_variables(self) -> np.ndarray:
        self._check_initialised()
        return self._state_variables.copy()

    def set_state_variables(self, state_variables: Sequence[float]) -> None:
        self._check_initialised()
        if len(state_variables) != self.reaction_network.n_variables:
            raise ValueError(
                'Supplied state is invalid. Expected length of '
                f'{self.reaction_network.n_variables}, received length of '
                f'{len(state_variables)}')
        self._state_variables = np.array(state_variables, dtype=float)

    def get_state_variable(self, name_or_index: Union[str, int]) -> float:
        self._check_initialised()
        if isinstance(name_or_index, str):
            index = self.reaction_network.get_variable_index(name_or_index)
        else:
            index = int(name_or_index)
            if index < 0 or index >= self.reaction_network.n_variables:
                raise ValueError(
                    f'State variable index {index} out of range. Expected an '
                    f'index in [0, {self.reaction_network.n_variables - 1}]')
        return float(self._state_variables[index])

    def get_cell_surface_notch(self) -> float:
        return self.get_state_variable(0)

    def get_sudx_dependent_notch(self) -> float:
        return self.get_state_variable(1)

    def get_dx_dependent_early_endosome_notch(self) -> float:
        return self.get_state_variable(2)

    def get_dx_dependent_late_endosome_notch(self) -> float:
        return self.get_state_variable(3)

    def get_notch_intracellular_domain(self) -> float:
        return self.get_state_variable(4)

    def get_delta(self) -> float:
        return self.get_state_variable(5)

    def get_parameter(self, name: str) -> float:
        self._check_initialised()
        return float(
            self.parameters[self.reaction_network.get_parameter_index(name)])

    def set_parameter(self, name: str, value: float) -> None:
        self._check_initialised()
        self.parameters[self.reaction_network.get_parameter_index(
            name)] = value

    def get_mean_neighbouring_delta(self) -> float:
        return self.get_parameter(MEAN_DELTA)

    def update_delta_notch(self, cell_data: CellData) -> None:
        """
        Pulls the neighbour coupling inputs of this cell into the model
        parameters.

        Args:
            cell_data (CellData): The data of the cell carrying this model.
        """
        self._check_initialised()
        self.set_parameter(MEAN_DELTA, cell_data.get_item(MEAN_DELTA))
        self.set_parameter(X_DISTANCE, cell_data.get_item(X_DISTANCE))

    def simulate_to_time(self, end_time: float, cell_data: CellData) -> None:
        """
        Refreshes the coupling parameters from the cell's data, then
        advances the state from simulated_to_time to end_time.

        Args:
            end_time (float): The time to advance the state to.
            cell_data (CellData): The data of the cell carrying this model.
        """
        self.update_delta_notch(cell_data)

        if end_time < self.simulated_to_time:
            raise ValueError(
                f'Cannot simulate back to {end_time}, model is already at '
                f'{self.simulated_to_time}')
        if end_time == self.simulated_to_time:
            return

        self._state_variables = self.integrator.advance(
            self._state_variables, self.reaction_network.evaluate_y_derivatives,
            self.simulated_to_time, end_time, self.parameters)
        self.simulated_to_time = float(end_time)

    def clone(self) -> 'DeltaNotchSrnModel':
        """
        Creates the model for a daughter cell. The daughter starts from a
        copy of the current state and parameters, and evolves independently.
        """
        self._check_initialised()
        daughter = DeltaNotchSrnModel(
            reaction_network=self.reaction_network,
            integrator=self.integrator,
            initial_conditions=self._state_variables.copy(),
            parameters=self.parameters.copy(),
            simulated_to_time=self.simulated_to_time)
        daughter.initialise()
        return daughter

    def as_dict(self) -> dict:
        _d = super().as_dict()
        _d['initial_conditions'] = self.initial_conditions.tolist()
        _d['parameters'] = self.parameters.tolist()
        if self._state_variables is None:
            _d['state_variables'] = None
        else:
            _d['state_variables'] = self._state_variables.tolist()
        return _d

    @classmethod
    def from_dict(cls, d: dict) -> 'DeltaNotchSrnModel':
        d = d.copy()
        state_variables = d.pop('state_variables', None)
        model = super().from_dict(d)
        if state_variables is not None:
            model._state_variables = np.array(state_variables, dtype=float)
        return model

    def __str__(self) -> str:
        return (f'DeltaNotchSrnModel(simulated_to_time={self.simulated_to_time}, '
                f'state={self._state_variables})')

    def __repr__(self) -> str:
        return self.__str__()
