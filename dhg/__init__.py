"""
DHG Package - District Heating Network Model
============================================

Re-exports all public components from dhg.src
"""

from dhg.src import (
    # Errors
    DHGError,
    NetworkConstructionError,
    UndefinedTemperatureError,
    SolverError,
    # Fluids and correlations
    Fluid,
    Water,
    PropyleneGlycol,
    ConstantPropertyFluid,
    TransportModels,
    # Discretisation
    FVM,
    # Controls
    PumpModel,
    # Components
    JunctionNode,
    ReferenceNode,
    Pipe,
    PressureChange,
    Massflow,
    # Assembly
    DHGNetwork,
    StateLayout,
    # Configuration
    GlobalParameters,
    SolverConfig,
    CaseConfig,
    # Solving and results
    solve_steady_state,
    solve_transient,
    SimulationResult,
    # Graph files
    parse_gml,
)
from dhg.src import __version__

__all__ = [
    'DHGError',
    'NetworkConstructionError',
    'UndefinedTemperatureError',
    'SolverError',
    'Fluid',
    'Water',
    'PropyleneGlycol',
    'ConstantPropertyFluid',
    'TransportModels',
    'FVM',
    'PumpModel',
    'JunctionNode',
    'ReferenceNode',
    'Pipe',
    'PressureChange',
    'Massflow',
    'DHGNetwork',
    'StateLayout',
    'GlobalParameters',
    'SolverConfig',
    'CaseConfig',
    'solve_steady_state',
    'solve_transient',
    'SimulationResult',
    'parse_gml',
]
