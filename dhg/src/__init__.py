"""
District Heating Graph (DHG) Package
====================================

Thermal-hydraulic network model of district heating/cooling grids, assembled
into one semi-explicit differential-algebraic system.

Features:
- Pipes with wall friction and heat loss, discretised into finite volumes
- Upwind and flux-limited (TVD) convection schemes
- Prosumers imposing a pressure rise or a massflow plus a thermal power
- Junction and reference nodes with flow-weighted mixing
- Pluggable fluid properties and friction / Nusselt correlations
- Steady-state and transient solves through scipy

State representation, per component:
    node      [p, T]
    pipe      [m, T_1, ..., T_end]   cell temperatures differential
    prosumer  [m, T_src, T_dst]

Example:
    network = DHGNetwork(nodes, edges, discretisation=FVM(dx=10.0, convection='van_leer'))
    params = GlobalParameters(density=1000.0, T_ambient=278.15)
    u0 = network.initialise(massflow=0.3, pressure=0.0, temperature=params.T_ambient)
    u = solve_steady_state(network, u0, params)
    print(u[network.node_temperature_indices()])
"""

from .errors import DHGError, NetworkConstructionError, UndefinedTemperatureError, SolverError
from .fluids import Fluid, Water, PropyleneGlycol, ConstantPropertyFluid, FLUIDS, get_fluid
from .transport import TransportModels, FRICTION_MODELS, NUSSELT_MODELS
from .convection import upwind, linear_upwind, van_leer, van_albada, minmod, CONVECTION_SCHEMES
from .discretisation import FVM
from .controls import PumpModel, constant, interpolated, passthrough
from .components import JunctionNode, ReferenceNode, Pipe, Prosumer, PressureChange, Massflow
from .physics import PipeConstants, ProsumerConstants, NodeConstants, node_temperature, prosumer_outlet_T
from .network import DHGNetwork, StateLayout
from .config import GlobalParameters, SolverConfig, CaseConfig
from .postprocessing import SimulationResult, GridConvergence
from .solver import solve_steady_state, solve_transient
from .graph_parsing import parse_gml, components_from_graph

__all__ = [
    # Errors
    'DHGError',
    'NetworkConstructionError',
    'UndefinedTemperatureError',
    'SolverError',

    # Fluids and correlations
    'Fluid',
    'Water',
    'PropyleneGlycol',
    'ConstantPropertyFluid',
    'FLUIDS',
    'get_fluid',
    'TransportModels',
    'FRICTION_MODELS',
    'NUSSELT_MODELS',

    # Convection schemes
    'upwind',
    'linear_upwind',
    'van_leer',
    'van_albada',
    'minmod',
    'CONVECTION_SCHEMES',
    'FVM',

    # Controls
    'PumpModel',
    'constant',
    'interpolated',
    'passthrough',

    # Components
    'JunctionNode',
    'ReferenceNode',
    'Pipe',
    'Prosumer',
    'PressureChange',
    'Massflow',

    # Physics
    'PipeConstants',
    'ProsumerConstants',
    'NodeConstants',
    'node_temperature',
    'prosumer_outlet_T',

    # Assembly
    'DHGNetwork',
    'StateLayout',

    # Configuration
    'GlobalParameters',
    'SolverConfig',
    'CaseConfig',

    # Solving and results
    'solve_steady_state',
    'solve_transient',
    'SimulationResult',
    'GridConvergence',

    # Graph files
    'parse_gml',
    'components_from_graph',
]

__version__ = '1.0.0'
