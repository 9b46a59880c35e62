"""
Temperature-dependent properties of incompressible heat-transfer fluids.

All properties are pure functions of absolute temperature T [K] and accept
floats or numpy arrays. Correlations cover the liquid range used in district
heating and cooling (roughly 0-100 °C).
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .errors import NetworkConstructionError

T_ZERO_CELSIUS = 273.15


class Fluid(ABC):
    """Abstract base class for fluid property models."""

    name: str = 'fluid'

    @abstractmethod
    def density(self, T):
        """Density [kg/m³]."""
        pass

    @abstractmethod
    def dynamic_viscosity(self, T):
        """Dynamic viscosity [Pa·s]."""
        pass

    @abstractmethod
    def thermal_conductivity(self, T):
        """Thermal conductivity [W/(m·K)]."""
        pass

    @abstractmethod
    def specific_heat(self, T):
        """Specific heat capacity at constant pressure [J/(kg·K)]."""
        pass

    def kinematic_viscosity(self, T):
        """Kinematic viscosity [m²/s]."""
        return self.dynamic_viscosity(T) / self.density(T)


@dataclass(frozen=True)
class Water(Fluid):
    """Liquid water at atmospheric pressure."""
    name: str = 'water'

    def density(self, T):
        # Thiesen-type fit, T in °C
        T_c = np.asarray(T, dtype=float) - T_ZERO_CELSIUS
        rho = 1000.0 * (1.0 - (T_c + 288.9414) / (508929.2 * (T_c + 68.12963)) * (T_c - 3.9863)**2)
        return rho if rho.ndim else float(rho)

    def dynamic_viscosity(self, T):
        # Vogel equation: mu = A * 10^(B / (T - C))
        mu = 2.414e-5 * 10.0 ** (247.8 / (np.asarray(T, dtype=float) - 140.0))
        return mu if mu.ndim else float(mu)

    def thermal_conductivity(self, T):
        T = np.asarray(T, dtype=float)
        k = -0.5752 + 6.397e-3 * T - 8.151e-6 * T**2
        return k if k.ndim else float(k)

    def specific_heat(self, T):
        T_c = np.asarray(T, dtype=float) - T_ZERO_CELSIUS
        cp = 4217.4 - 3.720283 * T_c + 0.1412855 * T_c**2 - 2.654387e-3 * T_c**3 + 2.093236e-5 * T_c**4
        return cp if cp.ndim else float(cp)


@dataclass(frozen=True)
class PropyleneGlycol(Fluid):
    """
    Aqueous propylene glycol, 30 % by mass.

    Typical brine for low-temperature (5th generation) networks where the
    cold line may approach freezing.
    """
    name: str = 'propylene_glycol'

    def density(self, T):
        T_c = np.asarray(T, dtype=float) - T_ZERO_CELSIUS
        rho = 1033.0 - 0.30 * T_c - 2.5e-3 * T_c**2
        return rho if rho.ndim else float(rho)

    def dynamic_viscosity(self, T):
        # Vogel-Fulcher fit through 0, 40 and 80 °C
        mu = 3.73e-6 * np.exp(1535.0 / (np.asarray(T, dtype=float) - 60.0))
        return mu if mu.ndim else float(mu)

    def thermal_conductivity(self, T):
        T_c = np.asarray(T, dtype=float) - T_ZERO_CELSIUS
        k = 0.450 + 8.5e-4 * T_c - 2.5e-6 * T_c**2
        return k if k.ndim else float(k)

    def specific_heat(self, T):
        T_c = np.asarray(T, dtype=float) - T_ZERO_CELSIUS
        cp = 3780.0 + 1.9 * T_c
        return cp if cp.ndim else float(cp)


@dataclass(frozen=True)
class ConstantPropertyFluid(Fluid):
    """Fluid with temperature-independent properties, for analytic checks."""
    rho: float = 1000.0
    mu: float = 1.0e-3
    k: float = 0.6
    cp: float = 4184.0
    name: str = 'constant'

    def density(self, T):
        return self.rho * np.ones_like(T) if np.ndim(T) else self.rho

    def dynamic_viscosity(self, T):
        return self.mu * np.ones_like(T) if np.ndim(T) else self.mu

    def thermal_conductivity(self, T):
        return self.k * np.ones_like(T) if np.ndim(T) else self.k

    def specific_heat(self, T):
        return self.cp * np.ones_like(T) if np.ndim(T) else self.cp


FLUIDS = {
    'water': Water,
    'propylene_glycol': PropyleneGlycol,
    'constant': ConstantPropertyFluid,
}


def density(fluid: Fluid, T):
    """Density of `fluid` at temperature T [kg/m³]."""
    return fluid.density(T)


def dynamic_viscosity(fluid: Fluid, T):
    """Dynamic viscosity of `fluid` at temperature T [Pa·s]."""
    return fluid.dynamic_viscosity(T)


def thermal_conductivity(fluid: Fluid, T):
    """Thermal conductivity of `fluid` at temperature T [W/(m·K)]."""
    return fluid.thermal_conductivity(T)


def specific_heat(fluid: Fluid, T):
    """Specific heat of `fluid` at temperature T [J/(kg·K)]."""
    return fluid.specific_heat(T)


def get_fluid(name: str) -> Fluid:
    """Instantiate a fluid model from its registry name."""
    try:
        return FLUIDS[name]()
    except KeyError:
        raise NetworkConstructionError(
            f"Unknown fluid: {name}. Options: {', '.join(sorted(FLUIDS))}") from None
