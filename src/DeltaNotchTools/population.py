from typing import Dict, Iterator, List, Optional, Sequence, Set
from abc import ABC, abstractmethod

import numpy as np
from monty.json import MSONable
from scipy.spatial import cKDTree

from DeltaNotchTools.cell_data import CellData
from DeltaNotchTools.inputs.integrators import OdeIntegrator
from DeltaNotchTools.inputs.reaction_network import ReactionNetwork
from DeltaNotchTools.srn_model import DeltaNotchSrnModel


class Cell(MSONable):
    """
    A single cell of the tissue, carrying its own signalling model and its
    own CellData.

    Args:
        cell_id (int): Identifier of the cell, unique within a population.
        location (Sequence[float]): The 2D location of the cell centre.
        srn_model (DeltaNotchSrnModel): The cell's signalling model.
        cell_data (CellData, None): The cell's stored values. Defaults to an
            empty store.
    """

    def __init__(self,
                 cell_id: int,
                 location: Sequence[float],
                 srn_model: DeltaNotchSrnModel,
                 cell_data: Optional[CellData] = None):
        if cell_data is None:
            cell_data = CellData()
        self.cell_id = cell_id
        self.location = np.array(location, dtype=float)
        self.srn_model = srn_model
        self.cell_data = cell_data

    def divide(self, new_cell_id: int,
               location: Sequence[float]) -> 'Cell':
        """
        Symmetric division. The daughter starts from a copy of this cell's
        signalling state and stored values.
        """
        return Cell(new_cell_id, location, self.srn_model.clone(),
                    self.cell_data.copy())

    def as_dict(self) -> dict:
        _d = super().as_dict()
        _d['location'] = self.location.tolist()
        return _d

    def __str__(self) -> str:
        return f'Cell({self.cell_id}, location={self.location.tolist()})'

    def __repr__(self) -> str:
        return self.__str__()


class AbstractCellPopulation(ABC):
    """
    Template for a population of cells. This defines how cells are stored
    and which cells neighbour each other.

    A population must implement update, which brings the geometry (and
    with it the neighbour relation) in line with the current cells and
    their locations, and get_neighbouring_cell_ids.

    Args:
        cells (List[Cell]): The initial cells of the population.
    """

    def __init__(self, cells: List[Cell]):
        self._cells: Dict[int, Cell] = {}
        for cell in cells:
            self._add(cell)
        self._geometry_stale = True

    def _add(self, cell: Cell) -> None:
        if cell.cell_id in self._cells:
            raise ValueError(f'A cell with id {cell.cell_id} already exists')
        self._cells[cell.cell_id] = cell

    def __iter__(self) -> Iterator[Cell]:
        return iter(list(self._cells.values()))

    def __len__(self) -> int:
        return len(self._cells)

    @property
    def cell_ids(self) -> List[int]:
        return list(self._cells.keys())

    @property
    def geometry_stale(self) -> bool:
        return self._geometry_stale

    def get_cell(self, cell_id: int) -> Cell:
        try:
            return self._cells[cell_id]
        except KeyError:
            raise ValueError(f'No cell with id {cell_id} in the population')

    def get_next_cell_id(self) -> int:
        if len(self._cells) == 0:
            return 0
        return max(self._cells.keys()) + 1

    def add_cell(self, cell: Cell) -> None:
        self._add(cell)
        self._geometry_stale = True

    def remove_cell(self, cell_id: int) -> Cell:
        cell = self.get_cell(cell_id)
        del self._cells[cell_id]
        self._geometry_stale = True
        return cell

    def move_cell(self, cell_id: int, location: Sequence[float]) -> None:
        self.get_cell(cell_id).location = np.array(location, dtype=float)
        self._geometry_stale = True

    def divide_cell(self,
                    cell_id: int,
                    division_vector: Optional[Sequence[float]] = None) -> Cell:
        """
        Divides a cell. The parent is moved back by half the division
        vector and the daughter is placed forward by half the division
        vector.

        Args:
            cell_id (int): The cell to divide.
            division_vector (Sequence[float], None): The displacement
                between the daughter and parent after division.
                Defaults to [0.5, 0].

        Returns:
            Cell: The new daughter cell.
        """
        if division_vector is None:
            division_vector = [0.5, 0.0]
        division_vector = np.array(division_vector, dtype=float)

        parent = self.get_cell(cell_id)
        centre = parent.location.copy()
        daughter = parent.divide(self.get_next_cell_id(),
                                 centre + 0.5 * division_vector)
        self.move_cell(cell_id, centre - 0.5 * division_vector)
        self.add_cell(daughter)
        return daughter

    def get_location_of_cell_centre(self, cell: Cell) -> np.ndarray:
        return cell.location.copy()

    def get_centroid(self) -> np.ndarray:
        if len(self._cells) == 0:
            raise RuntimeError('Cannot compute the centroid of an empty population')
        return np.mean([cell.location for cell in self._cells.values()],
                       axis=0)

    @abstractmethod
    def update(self) -> None:
        """
        Brings the population geometry up to date. Must be called after
        cells are added, removed, divided or moved, and before neighbours
        are requested.
        """
        raise NotImplementedError

    @abstractmethod
    def get_neighbouring_cell_ids(self, cell: Cell) -> Set[int]:
        """
        Args:
            cell (Cell): A cell of the population.

        Returns:
            Set[int]: The ids of the cells neighbouring this cell, not
                including the cell itself.
        """
        raise NotImplementedError


class NodeBasedCellPopulation(AbstractCellPopulation):
    """
    Population of overlapping-sphere cells, in which two cells neighbour
    each other if their centres are within the interaction radius.

    Args:
        cells (List[Cell]): The initial cells of the population.
        interaction_radius (float): The largest centre to centre distance
            at which two cells are neighbours.
    """

    def __init__(self, cells: List[Cell], interaction_radius: float = 1.5):
        super().__init__(cells)
        self.interaction_radius = interaction_radius
        self._neighbours: Dict[int, Set[int]] = {}

    def update(self) -> None:
        ids = self.cell_ids
        self._neighbours = {cell_id: set() for cell_id in ids}
        if len(ids) > 1:
            points = np.array([self._cells[cell_id].location for cell_id in ids])
            tree = cKDTree(points)
            for i, j in tree.query_pairs(self.interaction_radius):
                self._neighbours[ids[i]].add(ids[j])
                self._neighbours[ids[j]].add(ids[i])
        self._geometry_stale = False

    def get_neighbouring_cell_ids(self, cell: Cell) -> Set[int]:
        if self._geometry_stale:
            raise RuntimeError('Population geometry is out of date. '
                               'Call update() before requesting neighbours.')
        return set(self._neighbours[cell.cell_id])


def generate_hexagonal_population(
        n_x: int,
        n_y: int,
        spacing: float = 1.0,
        interaction_radius: float = 1.5,
        seed: Optional[int] = None,
        reaction_network: Optional[ReactionNetwork] = None,
        integrator: Optional[OdeIntegrator] = None
) -> NodeBasedCellPopulation:
    """
    Builds a hexagonally packed sheet of n_x by n_y cells. Every cell starts
    from uniformly random initial conditions in [0, 1) and is initialised.

    Args:
        n_x (int): Number of cells along x.
        n_y (int): Number of rows along y.
        spacing (float): Distance between adjacent cell centres.
        interaction_radius (float): Neighbour cutoff of the population.
        seed (int, None): Seed of the random initial conditions.
        reaction_network (ReactionNetwork, None): Shared by every cell.
        integrator (OdeIntegrator, None): Shared by every cell.
    """
    rng = np.random.default_rng(seed=seed)

    cells = []
    for j in range(n_y):
        for i in range(n_x):
            # Offset every other row by half a spacing
            x = spacing * (i + 0.5 * (j % 2))
            y = spacing * j * np.sqrt(3) / 2
            srn_model = DeltaNotchSrnModel(reaction_network=reaction_network,
                                           integrator=integrator)
            srn_model.initial_conditions = rng.uniform(
                0, 1, srn_model.reaction_network.n_variables)
            srn_model.initialise()
            cells.append(Cell(len(cells), [x, y], srn_model))

    return NodeBasedCellPopulation(cells,
                                   interaction_radius=interaction_radius)
