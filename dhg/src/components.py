"""
Component records for nodes and edges of a district heating/cooling network.

Records are immutable and carry only construction parameters. Mutable state
lives in the solver-owned state vector; the physics functions read the
records (via precomputed constants) but never modify them.

Edge records carry their (src, dst) node indices. Massflow is positive when
flowing src -> dst; this sign convention is fixed for the lifetime of the
network.
"""

import math
from dataclasses import dataclass
from typing import Callable

from .errors import NetworkConstructionError


# --- Nodes ---

@dataclass(frozen=True)
class JunctionNode:
    """Pure mixing node. States: pressure, temperature."""


@dataclass(frozen=True)
class ReferenceNode:
    """Node with pressure fixed to a reference value. States: pressure, temperature."""
    pressure: float = 0.0


# --- Edges ---

@dataclass(frozen=True)
class Edge:
    """Base for directed edges between node indices src and dst."""
    src: int
    dst: int

    def __post_init__(self):
        if self.src < 0 or self.dst < 0:
            raise NetworkConstructionError(f"Node indices must be non-negative, got ({self.src}, {self.dst})")
        if self.src == self.dst:
            raise NetworkConstructionError(f"Edge connects node {self.src} to itself")


@dataclass(frozen=True)
class Pipe(Edge):
    """
    Pipe with wall friction and heat loss to the surroundings.

    Attributes:
        inner_diameter: Inner diameter [m]
        outer_diameter: Outer diameter [m]
        length: Pipe length [m]
        roughness: Absolute wall roughness [m]
        wall_conductivity: Thermal conductivity of the pipe wall [W/(m·K)]
    """
    inner_diameter: float
    outer_diameter: float
    length: float
    roughness: float
    wall_conductivity: float

    def __post_init__(self):
        super().__post_init__()
        for name in ('inner_diameter', 'length', 'wall_conductivity'):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise NetworkConstructionError(f"Pipe {name} must be finite and positive, got {value}")
        if not self.outer_diameter > self.inner_diameter:
            raise NetworkConstructionError(
                f"Pipe outer diameter ({self.outer_diameter}) must exceed inner diameter ({self.inner_diameter})")
        if self.roughness < 0:
            raise NetworkConstructionError(f"Pipe roughness must be non-negative, got {self.roughness}")

    @property
    def area(self) -> float:
        """Flow cross-section [m²]."""
        return 0.25 * math.pi * self.inner_diameter**2


@dataclass(frozen=True)
class Prosumer(Edge):
    """
    Producer/consumer edge imposing a pressure change or massflow and a thermal power.

    Attributes:
        hydraulic_control: t -> control input
        thermal_control: t -> thermal power [W] added to the fluid
        hydraulic_characteristic: (control input, massflow) -> imposed quantity
    """
    hydraulic_control: Callable[[float], float]
    thermal_control: Callable[[float], float]
    hydraulic_characteristic: Callable[[float, float], float]

    def __post_init__(self):
        super().__post_init__()
        if type(self) is Prosumer:
            raise NetworkConstructionError(
                "Prosumer is abstract; use PressureChange or Massflow")
        for name in ('hydraulic_control', 'thermal_control', 'hydraulic_characteristic'):
            if not callable(getattr(self, name)):
                raise NetworkConstructionError(f"{type(self).__name__}.{name} must be callable")


@dataclass(frozen=True)
class PressureChange(Prosumer):
    """Prosumer imposing a pressure rise dst - src; massflow is a DAE unknown."""


@dataclass(frozen=True)
class Massflow(Prosumer):
    """Prosumer forcing the massflow to the characteristic's value."""
