"""
Flux limiters for TVD interpolation of face values.

Each limiter psi(r) takes the ratio of upwind-side to downwind-side gradients
and returns the weight of the anti-diffusive (central) correction. All of them
vanish for r <= 0, where the scheme falls back to pure upwind.
"""

import numpy as np


def gradient_ratio(phi_UU: np.ndarray, phi_U: np.ndarray, phi_D: np.ndarray) -> np.ndarray:
    """
    Ratio of consecutive gradients r = (phi_U - phi_UU) / (phi_D - phi_U).

    Where the downwind gradient is zero the correction term vanishes anyway,
    so r is set to zero there.

    Args:
        phi_UU: Value two cells upstream of the face
        phi_U: Value in the upstream cell
        phi_D: Value in the downstream cell

    Returns:
        r at each face
    """
    upwind = np.asarray(phi_U - phi_UU, dtype=float)
    downwind = np.asarray(phi_D - phi_U, dtype=float)
    r = np.zeros_like(downwind)
    np.divide(upwind, downwind, out=r, where=downwind != 0.0)
    return r


def limiter_upwind(r: np.ndarray) -> np.ndarray:
    """No correction: first-order upwind."""
    return np.zeros_like(r, dtype=float)


def limiter_linear_upwind(r: np.ndarray) -> np.ndarray:
    """Linear upwind (second-order upwind), clipped to zero for r <= 0."""
    return np.maximum(0.0, r)


def limiter_van_leer(r: np.ndarray) -> np.ndarray:
    """van Leer (1974): psi = (r + |r|) / (1 + r)."""
    r = np.asarray(r, dtype=float)
    psi = np.zeros_like(r)
    positive = r > 0
    psi[positive] = 2.0 * r[positive] / (1.0 + r[positive])
    return psi


def limiter_van_albada(r: np.ndarray) -> np.ndarray:
    """van Albada (1982): psi = (r + r²) / (1 + r²) for r > 0."""
    r = np.asarray(r, dtype=float)
    psi = np.zeros_like(r)
    positive = r > 0
    psi[positive] = (r[positive] + r[positive]**2) / (1.0 + r[positive]**2)
    return psi


def limiter_minmod(r: np.ndarray) -> np.ndarray:
    """MINMOD (Roe 1986): psi = max(0, min(r, 1))."""
    return np.maximum(0.0, np.minimum(r, 1.0))
