from typing import List, Sequence
from abc import ABC, abstractmethod

import numpy as np
from monty.json import MSONable

from DeltaNotchTools.util.constants import (k_1, k_2, k_3, k_4, k_5, k_6, k_7,
                                            k_8, k_9, k_10, k_11, k_12, k_13,
                                            c_3, c_4, c_8a, c_8b, c_9, c_10,
                                            beta_N, f, k_c, fb_D, fb_N, fb_5,
                                            fb_10, gamma, dx, sudx)


class ReactionNetwork(ABC, MSONable):
    """
    Template for an intracellular reaction network. This defines the right
    hand side of an autonomous ODE system that is owned and advanced by a
    subcellular reaction network model.

    A reaction network must name its state variables and parameters and
    implement evaluate_y_derivatives. Networks hold no mutable state, so a
    single instance may be shared by every cell in a population.
    """

    @property
    @abstractmethod
    def variable_names(self) -> List[str]:
        """
        Returns:
            List[str]: The names of the state variables, in state vector
                order.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def parameter_names(self) -> List[str]:
        """
        Returns:
            List[str]: The names of the parameters, in parameter vector
                order.
        """
        raise NotImplementedError

    @property
    def n_variables(self) -> int:
        return len(self.variable_names)

    @property
    def n_parameters(self) -> int:
        return len(self.parameter_names)

    @property
    def default_initial_conditions(self) -> np.ndarray:
        return np.ones(self.n_variables)

    @property
    def default_parameters(self) -> np.ndarray:
        return np.ones(self.n_parameters)

    def get_variable_index(self, name: str) -> int:
        try:
            return self.variable_names.index(name)
        except ValueError:
            raise ValueError(f'No state variable named "{name}"')

    def get_parameter_index(self, name: str) -> int:
        try:
            return self.parameter_names.index(name)
        except ValueError:
            raise ValueError(f'No parameter named "{name}"')

    @abstractmethod
    def evaluate_y_derivatives(self, t: float, y: Sequence[float],
                               parameters: Sequence[float]) -> np.ndarray:
        """
        Evaluates the time derivative of the state vector.

        Args:
            t (float): The simulation time.
            y (Sequence[float]): The state vector.
            parameters (Sequence[float]): The parameter vector.

        Returns:
            np.ndarray: The derivative of each state variable.
        """
        raise NotImplementedError

    def __str__(self) -> str:
        return f'{self.__class__.__name__}({", ".join(self.variable_names)})'

    def __repr__(self) -> str:
        return self.__str__()


class DeltaNotchReactionNetwork(ReactionNetwork):
    """
    Endocytic trafficking model of Notch signalling with Delta feedback.

    The state variables are:
        0 - Notch on the cell surface
        1 - Notch in the Su(dx) dependent sub-membrane compartment
        2 - Notch in the Deltex dependent early endosome
        3 - Notch in the Deltex dependent late endosome
        4 - the Notch intracellular domain (NICD)
        5 - Delta

    The parameters are the mean Delta of the neighbouring cells, which
    drives trans-activation of surface Notch, and the distance of the cell
    from the tissue centre along x, which scales Delta production.

    REFERENCE:
        Shimizu, H.; Woodcock, S. A.; Wilkin, M. B.; Trubenová, B.;
        Monk, N. A. M.; Baron, M. Compensatory Flux Changes within an
        Endocytic Trafficking Network Maintain Thermal Robustness of Notch
        Signaling. Cell 2014, 157, 1160–1174.
    """

    @property
    def variable_names(self) -> List[str]:
        return [
            'cell surface notch', 'sudx dependent notch',
            'dx dependent early endosome notch',
            'dx dependent late endosome notch', 'notch intracellular domain',
            'delta'
        ]

    @property
    def parameter_names(self) -> List[str]:
        # mean delta must stay at index 0 and x distance at index 1
        return ['mean delta', 'x distance']

    def evaluate_y_derivatives(self, t: float, y: Sequence[float],
                               parameters: Sequence[float]) -> np.ndarray:
        if len(y) != self.n_variables:
            raise ValueError(
                f'Expected a state vector of length {self.n_variables}, '
                f'received length {len(y)}')
        if len(parameters) != self.n_parameters:
            raise ValueError(
                f'Expected {self.n_parameters} parameters, '
                f'received {len(parameters)}')

        cell_surface_notch = y[0]
        sudx_dependent_notch = y[1]
        early_endosome_notch = y[2]
        late_endosome_notch = y[3]
        nicd = y[4]
        delta = y[5]
        mean_delta = parameters[0]
        x_distance = parameters[1]

        beta_D = beta_N * x_distance * (1 - f / 12) * (fb_D / (fb_D + nicd))

        r_1 = k_1 * (2 - fb_N / (fb_N + nicd))
        r_2 = k_2 * cell_surface_notch
        r_3 = (k_3 * sudx + c_3) * cell_surface_notch
        r_4 = (k_4 * dx + c_4) * cell_surface_notch
        r_5 = k_5 * sudx * (1 - fb_5 / (fb_5 + delta)) * early_endosome_notch
        # trans-activation by the neighbouring cells
        r_6 = k_6 * mean_delta * cell_surface_notch
        r_7 = k_7 * sudx_dependent_notch
        r_8 = (k_8 * early_endosome_notch + (c_8a * early_endosome_notch) /
               (c_8b + early_endosome_notch))
        r_9 = (k_9 * sudx + c_9) * late_endosome_notch
        r_10 = (k_10 * sudx + c_10) * (1 -
                                       fb_10 / (fb_10 + delta)) * sudx_dependent_notch
        r_11 = k_11 * early_endosome_notch
        r_12 = k_12 * late_endosome_notch
        r_13 = k_13 * nicd
        # cis-inhibition
        r_c = cell_surface_notch * delta / k_c

        dYdt = np.zeros(self.n_variables)
        dYdt[0] = r_1 - r_2 - r_3 - r_4 - r_6
        dYdt[1] = r_3 + r_5 + r_7 - r_10
        dYdt[2] = r_4 - r_5 - r_8 - r_11
        dYdt[3] = r_8 - r_9 - r_12
        dYdt[4] = r_6 + r_7 + r_9 - r_13
        dYdt[5] = beta_D - gamma * delta - r_6 - r_c
        return dYdt
