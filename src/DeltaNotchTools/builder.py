from DeltaNotchTools.simulation import run_one_simulation, save_data_to_hdf5
from maggma.core import Builder
from h5py import File

import numpy as np
from typing import Iterator

import logging


class DeltaNotchBuilder(Builder):
    """
    Builder that runs a batch of Delta-Notch tissue simulations, sampling
    the neighbour interaction radius and the random initial conditions of
    each, and writes every run to an HDF5 file.
    """

    def __init__(self,
                 num_samples: int,
                 interaction_radius: list[float] = None,
                 n_x: int = 10,
                 n_y: int = 10,
                 end_time: float = 1.0,
                 dt: float = 0.01,
                 integrator: str = 'odeint',
                 seed: int = None,
                 output_file: str = 'out.h5',
                 max_data_per_group: int = 100000,
                 **kwargs):
        if interaction_radius is None:
            interaction_radius = [1.1, 2.1]

        self.num_samples = num_samples
        self.interaction_radius = interaction_radius
        self.n_x = n_x
        self.n_y = n_y
        self.end_time = end_time
        self.dt = dt
        self.integrator = integrator
        self.seed = seed
        self.output_file = output_file
        self.max_data_per_group = max_data_per_group
        self.kwargs = kwargs
        self._file = None

        super().__init__(sources=[], targets=[], chunk_size=1000, **kwargs)

    def connect(self):
        # Since we aren't using stores, do nothing
        return

    @property
    def file(self):
        if self._file is None:
            self._file = File(self.output_file, 'w')
        return self._file

    def get_items(self) -> Iterator[tuple[int, dict]]:
        rng = np.random.default_rng(seed=self.seed)
        for sample_id in range(self.num_samples):
            yield (sample_id, {
                'interaction_radius':
                float(rng.uniform(*self.interaction_radius)),
                'seed': int(rng.integers(0, 2**31 - 1))
            })

    def process_item(self, item: tuple[int, dict]) -> tuple[int, int, dict]:
        sample_id, template = item
        logging.info(f'Running Sample {sample_id}')
        output = run_one_simulation(n_x=self.n_x,
                                    n_y=self.n_y,
                                    end_time=self.end_time,
                                    dt=self.dt,
                                    integrator=self.integrator,
                                    **template)

        group_id = int(sample_id // self.max_data_per_group)
        data_id = int(sample_id % self.max_data_per_group)
        return (group_id, data_id, output)

    def update_targets(self, items: list[tuple[int, int, dict]]) -> None:
        for item in items:
            group_id, data_id, output = item
            save_data_to_hdf5(self.file, group_id, data_id, output)

    def finalize(self):
        if self._file is not None:
            self._file.close()
            self._file = None
        super().finalize()
