import numpy as np
from monty.json import MSONable

from DeltaNotchTools.cell_data import (CELL_SURFACE_NOTCH, SUDX_DEPENDENT_NOTCH,
                                       EARLY_ENDOSOME_NOTCH, LATE_ENDOSOME_NOTCH,
                                       NOTCH_INTRACELLULAR_DOMAIN, TOTAL_NOTCH,
                                       DELTA, X_DISTANCE, MEAN_DELTA)
from DeltaNotchTools.population import AbstractCellPopulation


class DeltaNotchTrackingModifier(MSONable):
    """
    Simulation modifier that couples the signalling models of neighbouring
    cells. It is called once before the first time step and at the end of
    every time step.

    The update runs in two passes over the population. The first pass
    publishes every cell's Notch and Delta levels, and its distance from
    the tissue centre, into the cell's CellData. The second pass averages
    the published Delta of each cell's neighbours into "mean delta". All
    cells publish before any cell reads a neighbour, so the result does
    not depend on the order in which cells are visited.
    """

    def setup_solve(self, population: AbstractCellPopulation) -> None:
        # CellData must be filled before the first time step reads it
        self.update_cell_data(population)

    def update_at_end_of_time_step(self,
                                   population: AbstractCellPopulation) -> None:
        self.update_cell_data(population)

    def update_cell_data(self, population: AbstractCellPopulation) -> None:
        population.update()
        self.publish_cell_data(population)
        self.compute_mean_delta(population)

    def publish_cell_data(self, population: AbstractCellPopulation) -> None:
        """
        Stores each cell's state variables, total Notch and x distance from
        the population centroid in its CellData.
        """
        centroid = population.get_centroid()
        for cell in population:
            model = cell.srn_model
            cell_surface_notch = model.get_cell_surface_notch()
            sudx_dependent_notch = model.get_sudx_dependent_notch()
            early_endosome_notch = model.get_dx_dependent_early_endosome_notch()
            late_endosome_notch = model.get_dx_dependent_late_endosome_notch()
            nicd = model.get_notch_intracellular_domain()
            delta = model.get_delta()

            displacement = population.get_location_of_cell_centre(cell) - centroid
            x_distance = np.abs(displacement[0])

            total_notch = (cell_surface_notch + sudx_dependent_notch +
                           early_endosome_notch + late_endosome_notch + nicd)

            cell.cell_data.set_item(CELL_SURFACE_NOTCH, cell_surface_notch)
            cell.cell_data.set_item(SUDX_DEPENDENT_NOTCH, sudx_dependent_notch)
            cell.cell_data.set_item(EARLY_ENDOSOME_NOTCH, early_endosome_notch)
            cell.cell_data.set_item(LATE_ENDOSOME_NOTCH, late_endosome_notch)
            cell.cell_data.set_item(NOTCH_INTRACELLULAR_DOMAIN, nicd)
            cell.cell_data.set_item(TOTAL_NOTCH, total_notch)
            cell.cell_data.set_item(DELTA, delta)
            cell.cell_data.set_item(X_DISTANCE, x_distance)

    def compute_mean_delta(self, population: AbstractCellPopulation) -> None:
        """
        Stores the unweighted mean of the neighbours' published Delta in
        each cell's CellData. Cells without neighbours get 0.0.
        """
        for cell in population:
            neighbour_ids = population.get_neighbouring_cell_ids(cell)
            if len(neighbour_ids) > 0:
                mean_delta = np.mean([
                    population.get_cell(i).cell_data.get_item(DELTA)
                    for i in neighbour_ids
                ])
            else:
                # e.g. an isolated cell
                mean_delta = 0.0
            cell.cell_data.set_item(MEAN_DELTA, mean_delta)
