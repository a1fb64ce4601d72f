import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib import animation
from functools import partial
from typing import List

from DeltaNotchTools.cell_data import DELTA
from DeltaNotchTools.population import AbstractCellPopulation


def plot_cell_data(locations: np.ndarray,
                   values: np.ndarray,
                   key: str = DELTA,
                   dpi=150,
                   as_np_array=False,
                   ax: plt.Axes = None,
                   cell_size: float = 200,
                   vmin: float = None,
                   vmax: float = None):
    """
    Draws every cell at its location, coloured by one of its stored values.

    Args:
        locations (np.ndarray): (n_cells, 2) array of cell centres.
        values (np.ndarray): (n_cells, ) array of the value to colour by.
        key (str): Name of the value, used to label the colour bar.
        as_np_array (bool): Return the rendered figure as an RGB array.
        ax (plt.Axes, None): Draw onto this axis instead of a new figure.
    """
    locations = np.asarray(locations)
    values = np.asarray(values)
    if locations.ndim != 2 or locations.shape[1] != 2:
        raise TypeError('locations should be an (n_cells, 2) array')
    if len(values) != len(locations):
        raise RuntimeError('Must specify one value for every location')

    if ax is not None:
        ax.scatter(locations[:, 0], locations[:, 1], c=values, s=cell_size,
                   cmap='viridis', vmin=vmin, vmax=vmax, edgecolors='k')
        ax.set_aspect('equal')
        ax.set_title(key)
        return

    fig = plt.figure(figsize=(5, 5), dpi=dpi)
    ax = fig.subplots()
    sc = ax.scatter(locations[:, 0], locations[:, 1], c=values, s=cell_size,
                    cmap='viridis', vmin=vmin, vmax=vmax, edgecolors='k')
    ax.set_aspect('equal')
    fig.colorbar(sc, ax=ax, label=key)
    plt.tight_layout()
    if as_np_array:
        # Draw the figure before reading back its pixels
        fig.canvas.draw()
        data = np.asarray(fig.canvas.buffer_rgba())[..., :3].copy()

        # Close the figure to remove it from the buffer
        plt.close(fig)
        return data
    else:
        return fig


def plot_population(population: AbstractCellPopulation,
                    key: str = DELTA,
                    **kwargs):
    cells = list(population)
    locations = np.array([cell.location for cell in cells])
    values = np.array([cell.cell_data.get_item(key) for cell in cells])
    return plot_cell_data(locations, values, key=key, **kwargs)


def update(frame, ax, key, vmin, vmax):
    ax.clear()
    plot_cell_data(frame[['x', 'y']].to_numpy(),
                   frame[key].to_numpy(),
                   key=key,
                   ax=ax,
                   vmin=vmin,
                   vmax=vmax)


def make_animation(df: pd.DataFrame,
                   key: str = DELTA,
                   name: str = 'animation.mp4',
                   fps: int = 30,
                   dpi: int = 300) -> None:
    """
    Animates a recorded simulation, one frame per sampled time.

    Args:
        df (pd.DataFrame): Output of CellDataRecorder.to_dataframe.
        key (str): The stored value to colour the cells by.
    """
    frames: List[pd.DataFrame] = [frame for _, frame in df.groupby('time')]
    vmin, vmax = df[key].min(), df[key].max()

    fig = plt.figure(dpi=dpi)
    ax = fig.subplots()
    anim = animation.FuncAnimation(fig,
                                   partial(update, ax=ax, key=key,
                                           vmin=vmin, vmax=vmax),
                                   frames=frames)
    writer = 'pillow' if name.endswith('.gif') else None
    anim.save(name, writer=writer, fps=fps)
    fig.clear()
