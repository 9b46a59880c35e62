"""
Simulation configuration: global parameters, solver settings and case files.

A case is a plain dataclass tree that round-trips through JSON:

    case = CaseConfig.from_json("case.json")
    network = case.build_network(nodes, edges)
"""

import dataclasses
import json
import numpy as np
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, Union

from .convection import get_scheme
from .discretisation import FVM
from .errors import NetworkConstructionError
from .fluids import Fluid, get_fluid
from .network import DHGNetwork
from .transport import TransportModels


class AdvancedJSONEncoder(json.JSONEncoder):
    """JSON encoder for dataclasses and numpy values."""

    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, np.generic):
            return o.item()
        return super().default(o)


def dataclass_from_dict(cls, dct):
    """Recursively build dataclass `cls` from a (nested) dict."""
    if dataclasses.is_dataclass(cls) and isinstance(dct, dict):
        fieldtypes = {f.name: f.type for f in dataclasses.fields(cls)}
        unknown = set(dct) - set(fieldtypes)
        if unknown:
            raise ValueError(f"Unknown fields for {cls.__name__}: {', '.join(sorted(unknown))}")
        return cls(**{name: dataclass_from_dict(fieldtypes[name], value) for name, value in dct.items()})
    return dct


@dataclass(frozen=True)
class GlobalParameters:
    """
    Parameters passed to every physics evaluation.

    Attributes:
        density: Fluid density used for velocities and dynamic pressure [kg/m³]
        T_ambient: Temperature of the pipe surroundings [K]
    """
    density: float = 1000.0
    T_ambient: float = 278.15

    def __post_init__(self):
        if not self.density > 0:
            raise ValueError(f"density must be positive, got {self.density}")
        if not self.T_ambient > 0:
            raise ValueError(f"T_ambient must be an absolute temperature, got {self.T_ambient}")


@dataclass
class SolverConfig:
    """Configuration for the steady-state and transient solver adapters."""
    method: str = 'hybr'  # scipy.optimize.root method
    tol: float = 1e-10
    max_iter: int = 2000
    time_method: str = 'BDF'  # scipy.integrate.solve_ivp method
    rtol: float = 1e-6
    atol: float = 1e-8
    max_step: float = np.inf
    algebraic_tol: float = 1e-10  # root tolerance for algebraic states during time integration


@dataclass
class CaseConfig:
    """
    Description of one simulation case.

    Correlations, convection scheme and fluid are given by registry name so
    that a case can be stored as JSON.
    """
    parameters: GlobalParameters = field(default_factory=GlobalParameters)
    dx: float = 10.0
    convection: str = 'upwind'
    friction: str = 'churchill'
    nusselt: str = 'chilton_colburn'
    fluid: str = 'water'
    solver: SolverConfig = field(default_factory=SolverConfig)

    def __post_init__(self):
        if isinstance(self.parameters, dict):
            self.parameters = GlobalParameters(**self.parameters)
        if isinstance(self.solver, dict):
            self.solver = SolverConfig(**self.solver)

        # Resolve names early so that a bad case file fails on load
        get_scheme(self.convection)
        TransportModels.from_names(self.friction, self.nusselt)
        get_fluid(self.fluid)

    def discretisation(self) -> FVM:
        return FVM(dx=self.dx, convection=self.convection)

    def transport(self) -> TransportModels:
        return TransportModels.from_names(self.friction, self.nusselt)

    def fluid_model(self) -> Fluid:
        return get_fluid(self.fluid)

    def build_network(self, nodes: Sequence, edges: Sequence) -> DHGNetwork:
        """Assemble a network from component records using this case's settings."""
        return DHGNetwork(nodes, edges, transport=self.transport(),
                          discretisation=self.discretisation(), fluid=self.fluid_model())

    def to_json(self, path: Union[str, Path]) -> None:
        with open(path, 'w') as f:
            json.dump(self, f, cls=AdvancedJSONEncoder, indent=2)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'CaseConfig':
        with open(path) as f:
            dct = json.load(f)
        try:
            return dataclass_from_dict(cls, dct)
        except NetworkConstructionError:
            raise
        except (TypeError, ValueError) as exc:
            raise NetworkConstructionError(f"Invalid case file {path}: {exc}") from exc
