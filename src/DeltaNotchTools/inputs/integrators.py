from typing import Callable, Optional, Sequence
from abc import ABC, abstractmethod

import numpy as np
from monty.json import MSONable
from scipy.integrate import odeint, solve_ivp


class IntegratorError(RuntimeError):
    """
    Raised when an ODE integrator fails to reach the requested end time.
    """


class OdeIntegrator(ABC, MSONable):
    """
    Template for the ODE integrator used to advance a subcellular reaction
    network model. The integrator is chosen when the model is constructed.

    An integrator must implement _integrate, which advances the state from
    start_time to end_time. The derivative function is called as
    derivative_fn(t, y, parameters).
    """

    def advance(self, y: Sequence[float],
                derivative_fn: Callable[[float, np.ndarray, np.ndarray],
                                        np.ndarray], start_time: float,
                end_time: float, parameters: Sequence[float]) -> np.ndarray:
        """
        Advances the state vector y from start_time to end_time.

        Args:
            y (Sequence[float]): The state vector at start_time.
            derivative_fn (Callable): The right hand side of the ODE system.
            start_time (float): The time of y.
            end_time (float): The time to integrate to.
            parameters (Sequence[float]): The parameters held constant
                over the interval.

        Returns:
            np.ndarray: The state vector at end_time.
        """
        if end_time < start_time:
            raise ValueError(
                f'Cannot integrate backwards from {start_time} to {end_time}')

        y = np.array(y, dtype=float)
        if end_time == start_time:
            return y

        new_y = self._integrate(y, derivative_fn, start_time, end_time,
                                np.array(parameters, dtype=float))

        if not np.all(np.isfinite(new_y)):
            raise IntegratorError(
                f'Integration from {start_time} to {end_time} produced a '
                'non-finite state')
        return new_y

    @abstractmethod
    def _integrate(self, y: np.ndarray, derivative_fn: Callable,
                   start_time: float, end_time: float,
                   parameters: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def __str__(self) -> str:
        return f'{self.__class__.__name__}'

    def __repr__(self) -> str:
        return self.__str__()


class OdeintIntegrator(OdeIntegrator):
    """
    Adaptive integrator backed by LSODA through scipy.integrate.odeint.

    Args:
        max_steps (int): The maximum number of internal steps allowed for
            a single call to advance.
        rtol (float, None): Relative error tolerance. Uses the scipy
            default if not specified.
        atol (float, None): Absolute error tolerance. Uses the scipy
            default if not specified.
    """

    def __init__(self,
                 max_steps: int = 10000,
                 rtol: Optional[float] = None,
                 atol: Optional[float] = None):
        self.max_steps = max_steps
        self.rtol = rtol
        self.atol = atol

    def _integrate(self, y, derivative_fn, start_time, end_time, parameters):
        sol, info = odeint(derivative_fn,
                           y, [start_time, end_time],
                           args=(parameters, ),
                           tfirst=True,
                           full_output=True,
                           mxstep=self.max_steps,
                           rtol=self.rtol,
                           atol=self.atol)
        if info['message'] != 'Integration successful.':
            raise IntegratorError(
                f'odeint failed between {start_time} and {end_time}: '
                f'{info["message"]}')
        return sol[-1]

    def __str__(self) -> str:
        return f'OdeintIntegrator(max_steps={self.max_steps})'


class SolveIvpIntegrator(OdeIntegrator):
    """
    Integrator backed by scipy.integrate.solve_ivp.

    This is still an adaptive solver. The default only caps each internal
    step at 1e-3 time units, the step size of the fixed step RK4 scheme
    used by the Delta-Notch model, and does not reproduce that scheme.

    Args:
        method (str): Any method accepted by solve_ivp.
        max_step (float): The largest step the solver may take.
        rtol (float): Relative error tolerance.
        atol (float): Absolute error tolerance.
    """

    def __init__(self,
                 method: str = 'RK45',
                 max_step: float = 1e-3,
                 rtol: float = 1e-3,
                 atol: float = 1e-6):
        self.method = method
        self.max_step = max_step
        self.rtol = rtol
        self.atol = atol

    def _integrate(self, y, derivative_fn, start_time, end_time, parameters):
        sol = solve_ivp(derivative_fn, (start_time, end_time),
                        y,
                        method=self.method,
                        args=(parameters, ),
                        max_step=self.max_step,
                        rtol=self.rtol,
                        atol=self.atol)
        if not sol.success:
            raise IntegratorError(
                f'solve_ivp failed between {start_time} and {end_time}: '
                f'{sol.message}')
        return sol.y[:, -1]

    def __str__(self) -> str:
        return f'SolveIvpIntegrator(method={self.method}, max_step={self.max_step})'


INTEGRATORS = {'odeint': OdeintIntegrator, 'solve_ivp': SolveIvpIntegrator}


def get_integrator(name: str = 'odeint', **kwargs) -> OdeIntegrator:
    """
    Builds an integrator from its configuration name.

    Args:
        name (str): One of 'odeint' (adaptive) or 'solve_ivp' (bounded step).
        kwargs: Passed to the integrator constructor.
    """
    if name not in INTEGRATORS:
        raise ValueError(
            f'Unknown integrator "{name}". '
            f'Expected one of {list(INTEGRATORS.keys())}')
    return INTEGRATORS[name](**kwargs)
