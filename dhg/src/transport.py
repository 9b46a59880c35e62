"""
Dimensionless groups and pluggable friction-factor / Nusselt-number correlations.

Friction factors are Darcy factors with signature f(Re, rel_roughness).
Nusselt correlations have signature Nu(friction_factor, Re, Pr), so that
Reynolds-analogy correlations can reuse the friction factor already computed
for the momentum equation.
"""

import math
from dataclasses import dataclass
from typing import Callable

from .errors import NetworkConstructionError

# Floor for Re in correlations with Re in a denominator (zero flow)
RE_MIN = 1e-12


def reynolds_number(velocity: float, density: float, diameter: float,
                    dynamic_viscosity: float) -> float:
    """Re = rho * |v| * D / mu."""
    return density * abs(velocity) * diameter / dynamic_viscosity


def prandtl_number(dynamic_viscosity: float, specific_heat: float,
                   thermal_conductivity: float) -> float:
    """Pr = mu * cp / k."""
    return dynamic_viscosity * specific_heat / thermal_conductivity


# --- Friction factors ---

def friction_laminar(Re: float, rel_roughness: float = 0.0) -> float:
    """Hagen-Poiseuille, f = 64 / Re."""
    return 64.0 / max(Re, RE_MIN)


def friction_churchill(Re: float, rel_roughness: float) -> float:
    """
    Churchill (1977) correlation, valid for laminar, transitional and turbulent flow.

    Args:
        Re: Reynolds number
        rel_roughness: Wall roughness divided by inner diameter

    Returns:
        Darcy friction factor
    """
    Re = max(Re, RE_MIN)
    A = (2.457 * math.log(1.0 / ((7.0 / Re)**0.9 + 0.27 * rel_roughness)))**16
    B = (37530.0 / Re)**16
    return 8.0 * ((8.0 / Re)**12 + (A + B)**(-1.5))**(1.0 / 12.0)


def friction_swamee_jain(Re: float, rel_roughness: float) -> float:
    """Swamee-Jain explicit approximation of Colebrook (turbulent only)."""
    Re = max(Re, RE_MIN)
    return 0.25 / math.log10(rel_roughness / 3.7 + 5.74 / Re**0.9)**2


def friction_haaland(Re: float, rel_roughness: float) -> float:
    """Haaland explicit approximation of Colebrook (turbulent only)."""
    Re = max(Re, RE_MIN)
    return (-1.8 * math.log10((rel_roughness / 3.7)**1.11 + 6.9 / Re))**(-2)


# --- Nusselt numbers ---

def nusselt_laminar(friction_factor: float, Re: float, Pr: float) -> float:
    """Fully developed laminar flow, constant wall temperature."""
    return 3.66


def nusselt_chilton_colburn(friction_factor: float, Re: float, Pr: float) -> float:
    """Chilton-Colburn analogy: St * Pr^(2/3) = f / 8."""
    return 0.125 * friction_factor * Re * Pr**(1.0 / 3.0)


def nusselt_gnielinski(friction_factor: float, Re: float, Pr: float) -> float:
    """Gnielinski (1976), 3000 < Re < 5e6; floored at the laminar value below."""
    f8 = friction_factor / 8.0
    Nu = f8 * (Re - 1000.0) * Pr / (1.0 + 12.7 * math.sqrt(f8) * (Pr**(2.0 / 3.0) - 1.0))
    return max(Nu, 3.66)


def nusselt_dittus_boelter(friction_factor: float, Re: float, Pr: float) -> float:
    """Dittus-Boelter, fluid being cooled (n = 0.3)."""
    return 0.023 * Re**0.8 * Pr**0.3


FRICTION_MODELS = {
    'laminar': friction_laminar,
    'churchill': friction_churchill,
    'swamee_jain': friction_swamee_jain,
    'haaland': friction_haaland,
}

NUSSELT_MODELS = {
    'laminar': nusselt_laminar,
    'chilton_colburn': nusselt_chilton_colburn,
    'gnielinski': nusselt_gnielinski,
    'dittus_boelter': nusselt_dittus_boelter,
}


@dataclass(frozen=True)
class TransportModels:
    """Correlations selected once per simulation."""
    friction_factor: Callable[[float, float], float] = friction_churchill
    nusselt_number: Callable[[float, float, float], float] = nusselt_chilton_colburn

    @classmethod
    def from_names(cls, friction: str = 'churchill',
                   nusselt: str = 'chilton_colburn') -> 'TransportModels':
        """Look up correlations by registry name."""
        if friction not in FRICTION_MODELS:
            raise NetworkConstructionError(
                f"Unknown friction model: {friction}. Options: {', '.join(FRICTION_MODELS)}")
        if nusselt not in NUSSELT_MODELS:
            raise NetworkConstructionError(
                f"Unknown Nusselt model: {nusselt}. Options: {', '.join(NUSSELT_MODELS)}")
        return cls(friction_factor=FRICTION_MODELS[friction],
                   nusselt_number=NUSSELT_MODELS[nusselt])
