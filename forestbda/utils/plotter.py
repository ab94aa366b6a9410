"""
Class for plotting the severity and vulnerability maps written by forestbda
"""

from typing import Optional, Any
import numpy as np
from pathlib import Path
from tqdm import tqdm
import xarray as xr
import matplotlib.pyplot as plt
from matplotlib.colors import Colormap, ListedColormap
from mpl_toolkits.axes_grid1 import make_axes_locatable

from forestbda.constants import MAP_CODE_UNDISTURBED, MAX_SEVERITY


class ModelPlotter:
    """
    Plot the maps of one agent for a series of simulation years.

    Parameters
    ----------
    model_dir : str or Path
        Output directory of the simulation.
    map_names : str
        File name template of the maps, as in
        :attr:`~forestbda.sim.simulation_data.SimulationParameters.map_names`.
    agent_name : str
        Agent whose maps are plotted.
    years : iterable of int
        Simulation years to plot; years without a map file are skipped.
    quantity : str
        ``'Severity'`` or ``'Vulnerability'``.
    """

    def __init__(self,
                 model_dir,
                 map_names,
                 agent_name,
                 years,
                 quantity="Severity",
                 plot_specs: Optional[dict[str, Any]] = None,
                 cmaps: Optional[dict[str, Colormap]] = None,
                 ):

        self.model_dir = Path(model_dir)
        self.map_names = map_names
        self.agent_name = agent_name
        self.years = list(years)
        self.quantity = quantity

        defaults = {
            'figsize'   : (6, 6),
            'fontsize'  : 12,
            'output_dpi': 100,
        }
        self.plot_specs = {**defaults, **(plot_specs or {})}  # merge provided custom values with default values

        defaults = {
            'Severity'     : ListedColormap(plt.colormaps["YlOrRd"](np.linspace(0.15, 1.0, MAX_SEVERITY))),
            'Vulnerability': ListedColormap(plt.colormaps["Oranges"](np.linspace(0.2, 1.0, 256))),
        }
        self.cmaps = {**defaults, **(cmaps or {})}  # merge provided custom values with default values

        self.cmap_lims = {'Severity': (0.5, MAX_SEVERITY + 0.5), 'Vulnerability': (0, 100)}
        self.varnames = {'Severity': 'severity', 'Vulnerability': 'vulnerability'}

        self.output_plot_dir = self.model_dir / 'figures' / self.agent_name / self.quantity
        self.plotted = []

    def run(self):
        for year in tqdm(self.years):
            path = self.model_dir / self.map_names.format(agent_name=self.agent_name, timestep=year)
            if not path.exists():
                continue
            grid = self.load_grid(path)
            self.plot_quantity(grid, year)
        return self.plotted

    def load_grid(self, path):
        with xr.open_dataset(path, engine="scipy") as ds:
            codes = ds[self.varnames[self.quantity]].values.astype(float)
        if self.quantity == 'Severity':
            # map codes -> severity classes, undisturbed and inactive sites masked
            return np.ma.masked_where(codes <= MAP_CODE_UNDISTURBED, codes - 1)
        return np.ma.masked_where(codes <= 0, codes)

    def plot_quantity(self, grid, year):
        fig, ax = plt.subplots(figsize=self.plot_specs['figsize'])
        main = ax.imshow(grid,
                         cmap=self.cmaps[self.quantity],
                         vmin=self.cmap_lims[self.quantity][0],
                         vmax=self.cmap_lims[self.quantity][1],
                         interpolation='nearest')

        ax.set_title(f"{self.agent_name} {self.quantity} -- year {year}", fontsize=self.plot_specs['fontsize'])
        ax.set_xticks([])
        ax.set_yticks([])
        ax.set_aspect('equal')

        divider = make_axes_locatable(ax)
        cax = divider.append_axes("right", size="3%", pad=0.12)
        colorbar = plt.colorbar(main, cax=cax)
        if self.quantity == 'Severity':
            colorbar.set_ticks(range(1, MAX_SEVERITY + 1))
        label = f"{self.quantity} {'[class]' if self.quantity == 'Severity' else '[%]'}"
        colorbar.set_label(label, rotation=270, labelpad=25, fontsize=self.plot_specs['fontsize'])
        colorbar.ax.tick_params(labelsize=self.plot_specs['fontsize'])

        fig.tight_layout()

        self.output_plot_dir.mkdir(parents=True, exist_ok=True)
        fig_path = self.output_plot_dir / f"{self.quantity}_{year}.png"
        plt.savefig(fig_path, dpi=self.plot_specs['output_dpi'], bbox_inches='tight')
        plt.close()
        self.plotted.append(fig_path)
