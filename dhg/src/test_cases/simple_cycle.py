"""
Four-node cycle with one producer and one consumer.

    node 1 --[producer]--> node 0 --[hot pipe]--> node 2
      ^                                              |
      |                                         [consumer]
      |                                              v
      +----------------[cold pipe]-------------- node 3 (reference)

Hirsch and Nicolai, "An efficient numerical solution method for detailed
modelling of large 5th generation district heating and cooling networks",
2022, Section 4.1, Case 1. The producer is a pump with the characteristic
of Licklederer et al (2021); the consumer forces the massflow. Pipes are
polyethylene (roughness from Rocha et al, 2017) and the fluid is a
propylene glycol mixture.
"""

import numpy as np
from typing import NamedTuple

from ..components import JunctionNode, Massflow, Pipe, PressureChange, ReferenceNode
from ..config import GlobalParameters
from ..controls import PumpModel, constant, passthrough
from ..discretisation import FVM
from ..fluids import Fluid, PropyleneGlycol
from ..network import DHGNetwork
from ..transport import TransportModels

# Hirsch and Nicolai
PIPE_INNER_DIAMETER = 40.8e-3  # [m]
PIPE_OUTER_DIAMETER = 50e-3  # [m]
PIPE_LENGTH = 100.0  # [m]
WALL_CONDUCTIVITY = 0.4  # [W/(m·K)]
WALL_ROUGHNESS = 8.116e-6  # [m], Rocha
MASSFLOW = 0.3  # [kg/s]
CONSUMER_HEATRATE = -2.7e3  # [W], temperature drop across consumer ~4 K
T_AMBIENT = 273.15 + 5.0  # [K]
DENSITY = 1064.4  # [kg/m³], propylene glycol at 0°C

# Licklederer et al: (massflow [kg/s], pressure rise [Pa], speed [rpm])
PUMP_NOMINAL_SPEED = 4100.0
PUMP_REFERENCE_1 = (0.0, 40221.0, PUMP_NOMINAL_SPEED)
PUMP_REFERENCE_2 = (0.922, 0.0, PUMP_NOMINAL_SPEED)

# Producer covers consumer demand plus pipe losses (5-20 % of transmitted energy)
PRODUCER_HEAT_FACTOR = 1.05

REFERENCE_PRESSURE = 0.0  # [Pa]


class SimpleCycle(NamedTuple):
    network: DHGNetwork
    params: GlobalParameters
    u0: np.ndarray


def simple_cycle_components(wall_conductivity: float = WALL_CONDUCTIVITY,
                            producer_heat_factor: float = PRODUCER_HEAT_FACTOR,
                            massflow: float = MASSFLOW,
                            consumer_heatrate: float = CONSUMER_HEATRATE,
                            density: float = DENSITY):
    """Node and edge components of the cycle."""
    pump = PumpModel(PUMP_REFERENCE_1, PUMP_REFERENCE_2, density, PUMP_NOMINAL_SPEED)
    pipe_geometry = dict(inner_diameter=PIPE_INNER_DIAMETER,
                         outer_diameter=PIPE_OUTER_DIAMETER,
                         length=PIPE_LENGTH,
                         roughness=WALL_ROUGHNESS,
                         wall_conductivity=wall_conductivity)

    nodes = (
        JunctionNode(),
        JunctionNode(),
        JunctionNode(),
        ReferenceNode(REFERENCE_PRESSURE),
    )
    edges = (
        Pipe(0, 2, **pipe_geometry),  # hot pipe
        PressureChange(1, 0,
                       hydraulic_control=constant(PUMP_NOMINAL_SPEED),
                       thermal_control=constant(-producer_heat_factor * consumer_heatrate),
                       hydraulic_characteristic=pump),  # producer
        Massflow(2, 3,
                 hydraulic_control=constant(massflow),
                 thermal_control=constant(consumer_heatrate),
                 hydraulic_characteristic=passthrough),  # consumer
        Pipe(3, 1, **pipe_geometry),  # cold pipe
    )
    return nodes, edges


def build_simple_cycle(dx: float = 20.0, convection='upwind',
                       fluid: Fluid = None,
                       transport: TransportModels = None,
                       T_ambient: float = T_AMBIENT,
                       **component_kwargs) -> SimpleCycle:
    """
    Assemble the cycle with the given cell width and convection scheme.

    The initial guess has the design massflow in every edge, the reference
    pressure at every node and ambient temperature everywhere.

    Returns:
        SimpleCycle(network, params, u0)
    """
    nodes, edges = simple_cycle_components(**component_kwargs)
    density = component_kwargs.get('density', DENSITY)

    network = DHGNetwork(nodes, edges,
                         transport=transport if transport is not None else TransportModels.from_names(
                             'churchill', 'chilton_colburn'),
                         discretisation=FVM(dx=dx, convection=convection),
                         fluid=fluid if fluid is not None else PropyleneGlycol())
    params = GlobalParameters(density=density, T_ambient=T_ambient)
    u0 = network.initialise(massflow=component_kwargs.get('massflow', MASSFLOW),
                            pressure=REFERENCE_PRESSURE,
                            temperature=T_ambient)
    return SimpleCycle(network, params, u0)
