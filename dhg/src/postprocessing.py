"""
Simulation results and grid-convergence analysis.

Grid convergence follows Roache's procedure: three solutions on grids refined
by a constant ratio r give the observed order of convergence p, a Richardson
extrapolated value and the grid convergence index (GCI) of the finer grids.
"""

import logging
import math
import numpy as np
import h5py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Sequence, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """
    State trajectory of a network simulation.

    Attributes:
        t: Output times (n_t,)
        u: States (n_t, n_states), one row per output time
        labels: Global state labels (n_states,), e.g. 'T_v0', 'm_e2', 'T_3_e0'
        attrs: Scalar metadata stored alongside the arrays on export
    """
    t: np.ndarray
    u: np.ndarray
    labels: Tuple[str, ...]
    attrs: Dict = field(default_factory=dict)

    def __post_init__(self):
        self.t = np.atleast_1d(np.asarray(self.t, dtype=float))
        self.u = np.atleast_2d(np.asarray(self.u, dtype=float))
        self.labels = tuple(self.labels)
        if self.u.shape != (len(self.t), len(self.labels)):
            raise ValueError(f"u has shape {self.u.shape}, expected ({len(self.t)}, {len(self.labels)})")
        self._index = {label: i for i, label in enumerate(self.labels)}

    @classmethod
    def steady_state(cls, u: np.ndarray, labels: Sequence[str], **attrs) -> 'SimulationResult':
        """Single-row result for a steady-state solution."""
        return cls(t=np.array([0.0]), u=np.asarray(u)[np.newaxis, :], labels=labels, attrs=attrs)

    @property
    def final(self) -> np.ndarray:
        """State vector at the last output time."""
        return self.u[-1]

    def state(self, label: str) -> np.ndarray:
        """Time series of one state."""
        try:
            return self.u[:, self._index[label]]
        except KeyError:
            raise KeyError(f"No state labelled {label!r}") from None

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Time series keyed by label, plus 't'."""
        dct = {'t': self.t.copy()}
        for i, label in enumerate(self.labels):
            dct[label] = self.u[:, i].copy()
        return dct

    def to_hdf5(self, path: Union[str, Path], group: str = 'results') -> None:
        """Write to `group` in an HDF5 file, replacing any existing group of that name."""
        with h5py.File(path, 'a') as f:
            if group in f:
                del f[group]
            g = f.create_group(group)
            g.create_dataset('t', data=self.t)
            g.create_dataset('u', data=self.u)
            g.create_dataset('labels', data=np.array(self.labels, dtype=object),
                             dtype=h5py.string_dtype())
            for key, value in self.attrs.items():
                g.attrs[key] = value
        logger.info(f"Wrote {len(self.t)} x {len(self.labels)} states to {path}:{group}")

    @classmethod
    def from_hdf5(cls, path: Union[str, Path], group: str = 'results') -> 'SimulationResult':
        with h5py.File(path, 'r') as f:
            g = f[group]
            return cls(t=g['t'][()], u=g['u'][()],
                       labels=tuple(g['labels'].asstr()[()]),
                       attrs=dict(g.attrs))


# --- Grid convergence ---

def relative_error(fine: float, coarse: float) -> float:
    """|(coarse - fine) / fine|"""
    return abs((coarse - fine) / fine)


def order_of_convergence(f_coarse: float, f_medium: float, f_fine: float, r: float) -> float:
    """
    Observed order of convergence from three grids refined by a constant ratio.

    p = ln(|(f_coarse - f_medium) / (f_medium - f_fine)|) / ln(r)
    """
    if r <= 1:
        raise ValueError(f"Refinement ratio must be greater than 1, got {r}")
    if f_medium == f_fine or f_coarse == f_medium:
        raise ValueError("Order of convergence undefined for identical solutions on consecutive grids")
    return math.log(abs((f_coarse - f_medium) / (f_medium - f_fine))) / math.log(r)


def richardson_extrapolation(f_medium: float, f_fine: float, r: float, p: float) -> float:
    """Estimate of the grid-independent value."""
    return f_fine + (f_fine - f_medium) / (r**p - 1.0)


def gci_fine(error: float, r: float, p: float, safety_factor: float = 1.25) -> float:
    """Grid convergence index of the finer of two grids with relative error `error`."""
    return safety_factor * error / (r**p - 1.0)


def asymptotic_ratio(gci_coarse: float, gci_fine: float, r: float, p: float) -> float:
    """GCI_coarse / (r^p * GCI_fine); close to 1 in the asymptotic range."""
    return gci_coarse / (r**p * gci_fine)


@dataclass
class GridConvergence:
    """Convergence report for one quantity over three grids (coarse, medium, fine)."""
    values: Tuple[float, float, float]
    refinement_ratio: float
    order: float
    extrapolated: float
    errors: Tuple[float, float]
    gci: Tuple[float, float]
    ratio: float

    @classmethod
    def from_values(cls, values: Sequence[float], refinement_ratio: float,
                    safety_factor: float = 1.25) -> 'GridConvergence':
        f_coarse, f_medium, f_fine = values
        r = refinement_ratio
        p = order_of_convergence(f_coarse, f_medium, f_fine, r)
        errors = (relative_error(f_medium, f_coarse), relative_error(f_fine, f_medium))
        gci = (gci_fine(errors[0], r, p, safety_factor), gci_fine(errors[1], r, p, safety_factor))
        return cls(values=(f_coarse, f_medium, f_fine),
                   refinement_ratio=r,
                   order=p,
                   extrapolated=richardson_extrapolation(f_medium, f_fine, r, p),
                   errors=errors,
                   gci=gci,
                   ratio=asymptotic_ratio(gci[0], gci[1], r, p))
