from DeltaNotchTools.cell_data import PUBLISHED_KEYS
from DeltaNotchTools.inputs.integrators import INTEGRATORS, get_integrator
from DeltaNotchTools.modifier import DeltaNotchTrackingModifier
from DeltaNotchTools.population import (AbstractCellPopulation,
                                        generate_hexagonal_population)

import numpy as np
import pandas as pd

from datetime import datetime
from joblib import Parallel, delayed
from typing import List, Optional
import argparse
import json
import h5py

import logging


class CellDataRecorder():
    """
    Collects the published CellData of every cell at each sampled time.
    """

    def __init__(self, keys: Optional[List[str]] = None):
        if keys is None:
            keys = PUBLISHED_KEYS
        self.keys = keys
        self.samples = []

    def record(self, time: float, population: AbstractCellPopulation) -> None:
        cells = list(population)
        self.samples.append({
            'time': time,
            'cell_id': np.array([cell.cell_id for cell in cells], dtype=int),
            'location': np.array([cell.location for cell in cells]).reshape(-1, 2),
            'cell_data': np.array([[cell.cell_data.get_item(key)
                                    for key in self.keys] for cell in cells
                                   ]).reshape(-1, len(self.keys))
        })

    @property
    def times(self) -> np.ndarray:
        return np.array([sample['time'] for sample in self.samples])

    def to_arrays(self) -> dict:
        """
        Flattens all samples into one row per cell per sampled time.
        """
        return {
            'time':
            np.concatenate([
                np.full(len(sample['cell_id']), sample['time'])
                for sample in self.samples
            ]),
            'cell_id':
            np.concatenate([sample['cell_id'] for sample in self.samples]),
            'location':
            np.concatenate([sample['location'] for sample in self.samples]),
            'cell_data':
            np.concatenate([sample['cell_data'] for sample in self.samples])
        }

    def to_dataframe(self) -> pd.DataFrame:
        return arrays_to_dataframe(self.to_arrays(), self.keys)


def arrays_to_dataframe(arrays: dict,
                        keys: Optional[List[str]] = None) -> pd.DataFrame:
    if keys is None:
        keys = PUBLISHED_KEYS
    df = pd.DataFrame(arrays['cell_data'], columns=keys)
    df.insert(0, 'y', arrays['location'][:, 1])
    df.insert(0, 'x', arrays['location'][:, 0])
    df.insert(0, 'cell_id', arrays['cell_id'])
    df.insert(0, 'time', arrays['time'])
    return df


class DeltaNotchSimulation():
    """
    Drives a population of cells through time. Every step advances each
    cell's signalling model to the new time, then lets the modifiers update
    the cells' data.

    Args:
        population (AbstractCellPopulation): The cells to simulate.
        modifiers (List, None): Objects with setup_solve and
            update_at_end_of_time_step methods. Defaults to a single
            DeltaNotchTrackingModifier.
        dt (float): The time step.
        end_time (float): The time to simulate to.
        start_time (float): The time the cells' models start from.
        sampling_timestep_multiple (int): Record the cell data every this
            many steps.
        n_jobs (int): Number of threads used to advance the signalling
            models of different cells.
    """

    def __init__(self,
                 population: AbstractCellPopulation,
                 modifiers: Optional[List] = None,
                 dt: float = 0.01,
                 end_time: float = 1.0,
                 start_time: float = 0.0,
                 sampling_timestep_multiple: int = 1,
                 n_jobs: int = 1):
        if modifiers is None:
            modifiers = [DeltaNotchTrackingModifier()]
        if dt <= 0:
            raise ValueError('The time step must be positive')
        if end_time < start_time:
            raise ValueError('The end time must not be before the start time')

        self.population = population
        self.modifiers = modifiers
        self.dt = dt
        self.end_time = end_time
        self.start_time = start_time
        self.sampling_timestep_multiple = sampling_timestep_multiple
        self.n_jobs = n_jobs
        self.recorder = CellDataRecorder()

    @property
    def num_steps(self) -> int:
        return int(round((self.end_time - self.start_time) / self.dt))

    def simulate_srn_models(self, time: float) -> None:
        Parallel(n_jobs=self.n_jobs, prefer='threads')(
            delayed(cell.srn_model.simulate_to_time)(time, cell.cell_data)
            for cell in self.population)

    def solve(self) -> CellDataRecorder:
        logging.info(f'Simulating {len(self.population)} cells from '
                     f't={self.start_time} to t={self.end_time}')
        for modifier in self.modifiers:
            modifier.setup_solve(self.population)
        self.recorder.record(self.start_time, self.population)

        for step in range(1, self.num_steps + 1):
            time = self.start_time + step * self.dt
            self.simulate_srn_models(time)

            for modifier in self.modifiers:
                modifier.update_at_end_of_time_step(self.population)

            if step % self.sampling_timestep_multiple == 0:
                self.recorder.record(time, self.population)
                logging.info(f'Completed step {step} of {self.num_steps}')

        return self.recorder


def get_parser():
    parser = argparse.ArgumentParser()

    parser.add_argument('-x',
                        '--n_x',
                        help='The number of cells along x',
                        type=int,
                        default=10)
    parser.add_argument('-y',
                        '--n_y',
                        help='The number of rows of cells along y',
                        type=int,
                        default=10)
    parser.add_argument('-t',
                        '--end_time',
                        help='The time to simulate to',
                        type=float,
                        default=1.0)
    parser.add_argument('--dt',
                        help='The simulation time step',
                        type=float,
                        default=0.01)

    # add optional arguments
    parser.add_argument('-r',
                        '--interaction_radius',
                        help='The distance within which cells are neighbours',
                        type=float,
                        default=1.5)
    parser.add_argument('--spacing',
                        help='The distance between adjacent cell centres',
                        type=float,
                        default=1.0)
    parser.add_argument('-i',
                        '--integrator',
                        help='The ODE integrator used by every cell',
                        type=str,
                        choices=list(INTEGRATORS.keys()),
                        default='odeint')
    parser.add_argument('-s',
                        '--seed',
                        help='Seed for the random initial conditions',
                        type=int,
                        default=None)
    parser.add_argument(
        '-m',
        '--sampling_timestep_multiple',
        help='Record the cell data every this many time steps',
        type=int,
        default=1)
    parser.add_argument(
        '-o',
        '--output_file',
        help='The output file to save the data to',
        type=str,
        default=f'{datetime.now().strftime("%Y%m%d_%H_%M_%S_%f")}.h5')
    parser.add_argument('-j',
                        '--num_workers',
                        help='Number of threads advancing the cell models',
                        type=int,
                        default=1)
    parser.add_argument('--log_level',
                        help='The logging level',
                        type=str,
                        default='INFO')

    return parser


def run_one_simulation(n_x: int = 10,
                       n_y: int = 10,
                       end_time: float = 1.0,
                       dt: float = 0.01,
                       interaction_radius: float = 1.5,
                       spacing: float = 1.0,
                       integrator: str = 'odeint',
                       seed: Optional[int] = None,
                       sampling_timestep_multiple: int = 1,
                       num_workers: int = 1):

    population = generate_hexagonal_population(
        n_x,
        n_y,
        spacing=spacing,
        interaction_radius=interaction_radius,
        seed=seed,
        integrator=get_integrator(integrator))

    simulation = DeltaNotchSimulation(
        population,
        dt=dt,
        end_time=end_time,
        sampling_timestep_multiple=sampling_timestep_multiple,
        n_jobs=num_workers)
    recorder = simulation.solve()

    out_dict = {
        'metadata': {
            'simulation_time': end_time,
            'dt': dt,
            'n_cells': len(population),
            'interaction_radius': interaction_radius,
            'spacing': spacing,
            'integrator': integrator,
            'seed': seed,
            'keys': recorder.keys
        }
    }
    out_dict.update(recorder.to_arrays())

    return out_dict


def save_data_to_hdf5(file: h5py.File, group_id: int, data_i: int, data: dict):
    worker_group = file.require_group(f'group_{group_id}')
    data_group = worker_group.create_group(f'data_{data_i}')
    data_group.create_dataset('metadata', data=json.dumps(data['metadata']))
    for key in ['time', 'cell_id', 'location', 'cell_data']:
        data_group.create_dataset(key, data=data[key])


def load_data_from_hdf5(file: h5py.File, group_id: int, data_i: int):
    data = file[f'group_{group_id}/data_{data_i}']

    out_dict = {}
    out_dict['metadata'] = json.loads(data['metadata'][()])
    for key in ['time', 'cell_id', 'location', 'cell_data']:
        out_dict[key] = data[key][()]

    return out_dict


def main(args=None):
    args = get_parser().parse_args(args)
    logging.basicConfig(level=args.log_level.upper())

    out_dict = run_one_simulation(
        n_x=args.n_x,
        n_y=args.n_y,
        end_time=args.end_time,
        dt=args.dt,
        interaction_radius=args.interaction_radius,
        spacing=args.spacing,
        integrator=args.integrator,
        seed=args.seed,
        sampling_timestep_multiple=args.sampling_timestep_multiple,
        num_workers=args.num_workers)

    with h5py.File(args.output_file, 'a') as hf:
        group = hf.get('group_0')
        data_i = 0 if group is None else len(group)
        save_data_to_hdf5(hf, 0, data_i, out_dict)
    logging.info(f'Saved simulation to {args.output_file}')


if __name__ == "__main__":
    main()
