"""
Control inputs and hydraulic characteristics for prosumer edges.

A prosumer is driven by three functions:
    hydraulic_control(t) -> control input (pump speed, massflow set point, ...)
    hydraulic_characteristic(control_input, massflow) -> pressure rise [Pa] or massflow [kg/s]
    thermal_control(t) -> thermal power [W], positive when heat is added to the fluid
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Sequence

# Unit conversions used by the pump fit
KG_S_TO_L_MIN = 60.0 * 1e3
PA_TO_HPA = 1e-2


def constant(value: float) -> Callable[[float], float]:
    """Control input that does not change with time."""
    def control(t):
        return value
    return control


def interpolated(times: Sequence[float], values: Sequence[float]) -> Callable[[float], float]:
    """
    Piecewise-linear control input through (times, values), held constant outside.

    Args:
        times: Strictly increasing time points [s]
        values: Control values at those times
    """
    times = np.asarray(times, dtype=float)
    values = np.asarray(values, dtype=float)
    if times.shape != values.shape or times.ndim != 1 or len(times) < 1:
        raise ValueError("times and values must be 1D arrays of equal length")
    if np.any(np.diff(times) <= 0):
        raise ValueError("times must be strictly increasing")

    def control(t):
        return float(np.interp(t, times, values))
    return control


def passthrough(control_input: float, massflow: float) -> float:
    """Hydraulic characteristic returning the control input unchanged."""
    return control_input


@dataclass(frozen=True)
class PumpModel:
    """
    Quadratic pump characteristic dP = c1 * V² + c2 * n²

    Following Licklederer et al, "Thermohydraulic model of Smart Thermal Grids
    with bidirectional power flow between prosumers", 2021. The fit works in
    volume flow [l/min], pressure [hPa] and speed ratio n = speed / nominal_speed;
    the callable takes and returns SI units.

    Calibrated from two reference operating points, each given as
    (massflow [kg/s], pressure rise [Pa], speed [rpm]).
    """
    reference_1: tuple
    reference_2: tuple
    fluid_density: float
    nominal_speed: float
    c1: float = field(init=False)
    c2: float = field(init=False)

    def __post_init__(self):
        if self.fluid_density <= 0 or self.nominal_speed <= 0:
            raise ValueError("fluid_density and nominal_speed must be positive")
        m_1, dP_1, n_1 = self.reference_1
        m_2, dP_2, n_2 = self.reference_2

        u_1 = n_1 / self.nominal_speed
        u_2 = n_2 / self.nominal_speed
        V_1 = m_1 / self.fluid_density * KG_S_TO_L_MIN
        V_2 = m_2 / self.fluid_density * KG_S_TO_L_MIN
        dP_1 = dP_1 * PA_TO_HPA
        dP_2 = dP_2 * PA_TO_HPA

        speed_ratio_sq = (u_1 / u_2)**2
        denom = V_1**2 - speed_ratio_sq * V_2**2
        if denom == 0:
            raise ValueError("Reference points do not determine a unique pump curve")
        c1 = (dP_1 - speed_ratio_sq * dP_2) / denom
        c2 = (1.0 / u_2)**2 * (dP_2 - V_2**2 * c1)

        object.__setattr__(self, 'c1', c1)
        object.__setattr__(self, 'c2', c2)

    def __call__(self, pump_speed: float, massflow: float) -> float:
        """Pressure rise across the pump [Pa] at the given speed [rpm] and massflow [kg/s]."""
        speed_ratio = pump_speed / self.nominal_speed
        vol_rate = massflow / self.fluid_density * KG_S_TO_L_MIN
        return (self.c1 * vol_rate**2 + self.c2 * speed_ratio**2) / PA_TO_HPA
