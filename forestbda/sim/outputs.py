###############################################################
#  outputs.py
###############################################################

from pathlib import Path
import csv
import numpy as np
import xarray as xr

from forestbda.constants import MAP_CODE_INACTIVE, MAP_CODE_UNDISTURBED
from forestbda.utils.log import Reporter

r = Reporter()


class OutputManager:
    """ For saving epidemic maps and the event log of :class:`~forestbda.sim.base.BDASimulation` runs. """
    def __init__(self, model_dir, parameters, landscape):
        self.model_dir  = Path(model_dir)
        self.parameters = parameters
        self.landscape  = landscape
        self.model_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = self.model_dir / parameters.log_file
        self._log_columns = None

    def save_epidemic(self, agent, outcome):
        """ Write all outputs of one epidemic: event log row, severity map and, if requested, vulnerability map. """
        self.log_event(outcome)
        self.save_severity_map(agent.name, outcome)
        if self.parameters.vulnerability_map_names is not None:
            self.save_vulnerability_map(agent.name, outcome)

    def severity_map_codes(self, agent_name) -> np.ndarray:
        """ 0 for inactive sites, 1 for undisturbed active sites, severity + 1 for disturbed sites. """
        ls = self.landscape
        codes = np.full(ls.shape, MAP_CODE_INACTIVE, dtype=np.int16)
        codes[ls.active] = MAP_CODE_UNDISTURBED
        hit = ls.active & ls.disturbed
        codes[hit] = ls.severity[agent_name][hit].astype(np.int16) + 1
        return codes

    def vulnerability_map_codes(self) -> np.ndarray:
        ls = self.landscape
        codes = np.zeros(ls.shape, dtype=np.int16)
        codes[ls.active] = np.round(ls.vulnerability[ls.active]*100.).astype(np.int16)
        return codes

    def save_severity_map(self, agent_name, outcome):
        path = self.model_dir / self.parameters.map_path(self.parameters.map_names, agent_name, outcome.time)
        r.report(f"Writing severity map to {path}")
        self.save_netcdf(path, "severity", self.severity_map_codes(agent_name),
                         agent_name=agent_name, time=outcome.time, ros=outcome.ros)

    def save_vulnerability_map(self, agent_name, outcome):
        path = self.model_dir / self.parameters.map_path(self.parameters.vulnerability_map_names,
                                                         agent_name, outcome.time)
        r.report(f"Writing vulnerability map to {path}")
        self.save_netcdf(path, "vulnerability", self.vulnerability_map_codes(),
                         agent_name=agent_name, time=outcome.time, ros=outcome.ros)

    def save_netcdf(self, path: Path, varname: str, grid: np.ndarray, **attrs):
        """ Save a 2-D grid as a NetCDF file using xarray """
        path.parent.mkdir(parents=True, exist_ok=True)
        ds = xr.Dataset(data_vars={varname: xr.DataArray(grid, dims=("row", "col"))})
        ds.attrs.update(attrs)
        ds.attrs.update(cell_length=self.landscape.cell_length)
        ds.to_netcdf(path, engine="scipy")

    def log_event(self, outcome):
        """ Append one row to the event log, writing the header with the first row. """
        row = outcome.as_log_row()
        write_header = self._log_columns is None
        if write_header:
            self._log_columns = list(row.keys())
        mode = "w" if write_header else "a"
        with open(self.log_path, mode, newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self._log_columns)
            if write_header:
                writer.writeheader()
            writer.writerow(row)
