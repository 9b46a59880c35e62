"""
Local physics of network components.

Edge functions have the signature

    f(de, e, v_s, v_d, constants, params, t)

and node functions

    f(dv, v, edges_in, edges_out, constants, params, t)

where `de`/`dv` are output views into the global residual/rate vector, `e`/`v`
the component's own state, `v_s`/`v_d` the states of the edge's source and
destination nodes, and `edges_in`/`edges_out` the states of edges entering and
leaving the node. Inputs are read-only; each function writes only its own
output slots.

State layout:
    Pipe:     [m, T_1 ... T_N]     m algebraic, cell temperatures differential
    Prosumer: [m, T_src, T_dst]    all algebraic
    Node:     [p, T]               all algebraic

Notation:
    m  - massflow [kg/s], positive from src to dst
    p  - pressure [Pa]
    T  - temperature [K]
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .components import JunctionNode, Massflow, Pipe, PressureChange, Prosumer, ReferenceNode
from .discretisation import FVM
from .errors import UndefinedTemperatureError
from .fluids import Fluid
from .transport import RE_MIN, TransportModels, prandtl_number, reynolds_number


# --- Per-component constants, computed once at assembly ---

@dataclass(frozen=True)
class PipeConstants:
    """Geometry- and discretisation-derived constants of one pipe."""
    n_cells: int
    dx: float
    inner_diameter: float
    area: float
    rel_roughness: float
    aspect_ratio: float
    Adx_inv: float
    UA_wall_inv: float
    convection: Callable
    transport: TransportModels
    fluid: Fluid

    @classmethod
    def from_component(cls, pipe: Pipe, discretisation: FVM,
                       transport: TransportModels, fluid: Fluid) -> 'PipeConstants':
        dx = discretisation.dx
        area = pipe.area
        return cls(
            n_cells=discretisation.cell_count(pipe.length),
            dx=dx,
            inner_diameter=pipe.inner_diameter,
            area=area,
            rel_roughness=pipe.roughness / pipe.inner_diameter,
            aspect_ratio=pipe.length / pipe.inner_diameter,
            Adx_inv=1.0 / (area * dx),
            # 1/UA_wall = ln(Do/Di) / (2 * pi * k_wall * dx)
            UA_wall_inv=math.log(pipe.outer_diameter / pipe.inner_diameter)
            / (2.0 * math.pi * pipe.wall_conductivity * dx),
            convection=discretisation.convection,
            transport=transport,
            fluid=fluid,
        )


@dataclass(frozen=True)
class ProsumerConstants:
    """Control functions of one prosumer."""
    hydraulic_control: Callable[[float], float]
    thermal_control: Callable[[float], float]
    hydraulic_characteristic: Callable[[float, float], float]
    fluid: Fluid

    @classmethod
    def from_component(cls, prosumer: Prosumer, fluid: Fluid) -> 'ProsumerConstants':
        return cls(hydraulic_control=prosumer.hydraulic_control,
                   thermal_control=prosumer.thermal_control,
                   hydraulic_characteristic=prosumer.hydraulic_characteristic,
                   fluid=fluid)


@dataclass(frozen=True)
class NodeConstants:
    """Node constants; pressure is set only for reference nodes."""
    pressure: Optional[float] = None


# --- Edges ---

def pipe(de: np.ndarray, e: np.ndarray, v_s: np.ndarray, v_d: np.ndarray,
         constants: PipeConstants, params, t: float) -> None:
    """
    Pipe edge: friction pressure drop and convective transport with heat loss.

    Residuals:
        0 = dP_friction(m) - (p_dst - p_src)
        dT_i/dt = -(1/dx) * convection_i + UA / (rho * cp * A * dx) * (T_ambient - T_i)
    """
    density = params.density
    T_cells = e[1:]

    # Bulk mean temperature from the two cells at the pipe ends
    T_mean = 0.5 * (e[1] + e[-1])
    velocity = e[0] / (density * constants.area)
    dynamic_pressure = 0.5 * density * velocity**2

    fluid = constants.fluid
    dyn_visc = fluid.dynamic_viscosity(T_mean)
    conductivity = fluid.thermal_conductivity(T_mean)
    spec_heat = fluid.specific_heat(T_mean)

    Re = max(reynolds_number(velocity, density, constants.inner_diameter, dyn_visc), RE_MIN)
    friction_factor = constants.transport.friction_factor(Re, constants.rel_roughness)
    Pr = prandtl_number(dyn_visc, spec_heat, conductivity)
    Nu = constants.transport.nusselt_number(friction_factor, Re, Pr)

    # UA_fluid = (Nu * k / D) * (pi * D * dx)
    UA_fluid_inv = 1.0 / (Nu * conductivity * math.pi * constants.dx)
    UA_overall = 1.0 / (UA_fluid_inv + constants.UA_wall_inv)

    # Darcy-Weisbach; dP = p_dst - p_src, so positive flow gives a pressure drop
    deltaP = -np.sign(velocity) * friction_factor * constants.aspect_ratio * dynamic_pressure

    convection = -(1.0 / constants.dx) * constants.convection(T_cells, v_s[1], v_d[1], velocity)
    source = UA_overall * constants.Adx_inv / (density * spec_heat) * (params.T_ambient - T_cells)

    de[0] = deltaP - (v_d[0] - v_s[0])
    de[1:] = convection + source


def prosumer_outlet_T(thermal_power: float, massflow: float, temperature_in: float,
                      spec_heat: float) -> float:
    """
    Outlet temperature T_out = Q / (|m| * cp) + T_in.

    The sign of Q gives the direction of heat transfer; the massflow magnitude
    is used since inlet/outlet are defined with respect to the flow direction.

    Raises:
        UndefinedTemperatureError: Non-zero thermal power with zero massflow
    """
    if thermal_power == 0:
        return temperature_in
    if massflow == 0:
        raise UndefinedTemperatureError(
            f"Prosumer outlet temperature undefined: thermal power {thermal_power} W at zero massflow")
    return thermal_power / (abs(massflow) * spec_heat) + temperature_in


def prosumer_interface_temperatures(e: np.ndarray, v_s: np.ndarray, v_d: np.ndarray,
                                    constants: ProsumerConstants, t: float):
    """
    Temperatures at the src- and dst-node interfaces of a prosumer.

    The inlet is always upstream of the flow: the source node when m >= 0,
    the destination node otherwise.

    Returns:
        (T_src, T_dst)
    """
    T_mean = 0.5 * (e[1] + e[2])
    spec_heat = constants.fluid.specific_heat(T_mean)
    aligned = e[0] >= 0
    inlet_T = v_s[1] if aligned else v_d[1]
    outlet_T = prosumer_outlet_T(constants.thermal_control(t), e[0], inlet_T, spec_heat)
    if aligned:
        return inlet_T, outlet_T
    return outlet_T, inlet_T


def prosumer_pressure_change(de: np.ndarray, e: np.ndarray, v_s: np.ndarray, v_d: np.ndarray,
                             constants: ProsumerConstants, params, t: float) -> None:
    """Prosumer imposing a pressure rise; massflow follows from the network."""
    deltaP = constants.hydraulic_characteristic(constants.hydraulic_control(t), e[0])
    T_src, T_dst = prosumer_interface_temperatures(e, v_s, v_d, constants, t)

    de[0] = deltaP - (v_d[0] - v_s[0])
    de[1] = e[1] - T_src
    de[2] = e[2] - T_dst


def prosumer_massflow(de: np.ndarray, e: np.ndarray, v_s: np.ndarray, v_d: np.ndarray,
                      constants: ProsumerConstants, params, t: float) -> None:
    """Prosumer forcing its massflow to the controlled value."""
    massflow = constants.hydraulic_characteristic(constants.hydraulic_control(t), e[0])
    T_src, T_dst = prosumer_interface_temperatures(e, v_s, v_d, constants, t)

    de[0] = massflow - e[0]
    de[1] = e[1] - T_src
    de[2] = e[2] - T_dst


# --- Nodes ---

def node_temperature(edges_in: Sequence[np.ndarray], edges_out: Sequence[np.ndarray]) -> float:
    """
    Mixing temperature of the flows entering a node.

    Edge state 0 is the massflow; the last state of an incoming edge and the
    first temperature of an outgoing edge are the temperatures at the
    interface with this node. An edge whose massflow opposes its direction
    contributes from the other side, so flow reversal needs no reclassification.

    Raises:
        UndefinedTemperatureError: No massflow leaves the node
    """
    enthalpy_in = 0.0
    massflow_out = 0.0

    for e in edges_in:
        if e[0] > 0:
            enthalpy_in += e[0] * e[-1]
        elif e[0] < 0:
            massflow_out -= e[0]
    for e in edges_out:
        if e[0] < 0:
            enthalpy_in -= e[0] * e[1]
        elif e[0] > 0:
            massflow_out += e[0]

    if massflow_out == 0:
        raise UndefinedTemperatureError("Node temperature undefined: no massflow through node")
    return enthalpy_in / massflow_out


def junction(dv: np.ndarray, v: np.ndarray, edges_in: Sequence[np.ndarray],
             edges_out: Sequence[np.ndarray], constants: NodeConstants, params, t: float) -> None:
    """Mass conservation and mixing."""
    dv[0] = sum(e[0] for e in edges_in) - sum(e[0] for e in edges_out)
    dv[1] = v[1] - node_temperature(edges_in, edges_out)


def reference_node(dv: np.ndarray, v: np.ndarray, edges_in: Sequence[np.ndarray],
                   edges_out: Sequence[np.ndarray], constants: NodeConstants, params, t: float) -> None:
    """Fixed pressure and mixing."""
    dv[0] = v[0] - constants.pressure
    dv[1] = v[1] - node_temperature(edges_in, edges_out)


# Closed set of variants: component type -> physics function
EDGE_PHYSICS = {
    Pipe: pipe,
    PressureChange: prosumer_pressure_change,
    Massflow: prosumer_massflow,
}

NODE_PHYSICS = {
    JunctionNode: junction,
    ReferenceNode: reference_node,
}
