"""
Convection schemes for advection of a scalar along a 1D duct.

Every scheme has the signature

    scheme(phi, phi_W, phi_E, u) -> rate

and returns the closed surface integral of (u * phi) over each finite-volume
cell, divided by the face area, i.e. u * (phi_e - phi_w) per cell. Dividing by
the cell width gives the convective contribution to d(phi)/dt with a negative
sign. Positive u transports in the direction of increasing cell index; phi_W
and phi_E are the values at the west (index 0) and east (index -1) ends of the
duct, supplied by the adjacent nodes.

Fully vectorized over cells.
"""

import numpy as np
from typing import Callable

from .errors import NetworkConstructionError
from .limiters import (
    gradient_ratio,
    limiter_linear_upwind,
    limiter_minmod,
    limiter_van_albada,
    limiter_van_leer,
)


def upwind(phi: np.ndarray, phi_W: float, phi_E: float, u: float) -> np.ndarray:
    """
    First-order upwind (donor-cell) scheme.

    Each face takes the value of the cell upstream of it, with no
    interpolation; the inflow face takes the boundary value.

    Args:
        phi: Cell values (n_cells,)
        phi_W: Value at the west boundary
        phi_E: Value at the east boundary
        u: Velocity [m/s], sign gives the transport direction

    Returns:
        rate: |u| * (phi - neighbour) for each cell (n_cells,)
    """
    phi = np.asarray(phi, dtype=float)
    neighbour = np.empty_like(phi)
    if u > 0:
        neighbour[0] = phi_W
        neighbour[1:] = phi[:-1]
    elif u < 0:
        neighbour[:-1] = phi[1:]
        neighbour[-1] = phi_E
    else:
        return np.zeros_like(phi)
    return abs(u) * (phi - neighbour)


def tvd_flux(phi: np.ndarray, phi_W: float, phi_E: float, u: float,
             limiter: Callable[[np.ndarray], np.ndarray]) -> np.ndarray:
    """
    Flux-limited (TVD) scheme blending upwind and central interpolation.

    Face value: phi_f = phi_U + 0.5 * psi(r) * (phi_D - phi_U), with U, D the
    cells upstream and downstream of the face and r the gradient ratio.
    The inflow boundary face takes the boundary value; the boundary value
    also stands in for the missing far-upstream cell at the first interior
    face and for the missing downstream cell at the outflow face.

    Args:
        phi: Cell values (n_cells,)
        phi_W: Value at the west boundary
        phi_E: Value at the east boundary
        u: Velocity [m/s]
        limiter: Function psi(r)

    Returns:
        rate: u * (phi_e - phi_w) for each cell (n_cells,)
    """
    phi = np.asarray(phi, dtype=float)
    if u == 0:
        return np.zeros_like(phi)
    if u < 0:
        # Mirror so that the flow runs in +x, then mirror back
        return tvd_flux(phi[::-1], phi_E, phi_W, -u, limiter)[::-1].copy()

    n_cells = len(phi)
    ext = np.empty(n_cells + 2)
    ext[0] = phi_W
    ext[1:-1] = phi
    ext[-1] = phi_E

    # Faces 1..n_cells: upstream cell ext[f], downstream ext[f+1], far-upstream ext[f-1]
    phi_UU = ext[:-2]
    phi_U = ext[1:-1]
    phi_D = ext[2:]
    r = gradient_ratio(phi_UU, phi_U, phi_D)

    faces = np.empty(n_cells + 1)
    faces[0] = phi_W
    faces[1:] = phi_U + 0.5 * limiter(r) * (phi_D - phi_U)

    return u * (faces[1:] - faces[:-1])


def linear_upwind(phi: np.ndarray, phi_W: float, phi_E: float, u: float) -> np.ndarray:
    """Linear upwind differencing, limited to upwind for r <= 0."""
    return tvd_flux(phi, phi_W, phi_E, u, limiter_linear_upwind)


def van_leer(phi: np.ndarray, phi_W: float, phi_E: float, u: float) -> np.ndarray:
    """van Leer flux limiter."""
    return tvd_flux(phi, phi_W, phi_E, u, limiter_van_leer)


def van_albada(phi: np.ndarray, phi_W: float, phi_E: float, u: float) -> np.ndarray:
    """van Albada flux limiter."""
    return tvd_flux(phi, phi_W, phi_E, u, limiter_van_albada)


def minmod(phi: np.ndarray, phi_W: float, phi_E: float, u: float) -> np.ndarray:
    """MINMOD flux limiter."""
    return tvd_flux(phi, phi_W, phi_E, u, limiter_minmod)


CONVECTION_SCHEMES = {
    'upwind': upwind,
    'linear_upwind': linear_upwind,
    'van_leer': van_leer,
    'van_albada': van_albada,
    'minmod': minmod,
}


def get_scheme(name: str) -> Callable:
    """Look up a convection scheme by registry name."""
    try:
        return CONVECTION_SCHEMES[name]
    except KeyError:
        raise NetworkConstructionError(
            f"Unknown convection scheme: {name}. "
            f"Options: {', '.join(CONVECTION_SCHEMES)}") from None
