"""
Adapters between an assembled network and scipy's nonlinear and ODE solvers.

The network is a semi-explicit index-1 DAE

    dy/dt = f_d(y, z, t)        differential states (pipe cell temperatures)
        0 = f_a(y, z, t)        algebraic states (everything else)

Steady state solves f(u) = 0 for all states at once. Transient runs integrate
y with an implicit method and recover z at every evaluation by a root solve,
warm-started from the previous solution.

Solver failures are never retried here; they are raised as SolverError with
the solver's own message.
"""

import logging
import numpy as np
from scipy.integrate import solve_ivp
from scipy.optimize import root
from typing import Sequence, Tuple

from .config import SolverConfig
from .errors import SolverError
from .postprocessing import SimulationResult

logger = logging.getLogger(__name__)


def _root_options(config: SolverConfig) -> dict:
    # 'hybr' counts function evaluations, the other methods iterations
    if config.method == 'hybr':
        return {'maxfev': config.max_iter}
    return {'maxiter': config.max_iter}


def solve_steady_state(system, u0: np.ndarray, params, config: SolverConfig = None,
                       t: float = 0.0) -> np.ndarray:
    """
    Steady state of an assembled network, f(u, p, t) = 0 for every state.

    Args:
        system: Assembled network providing rhs(u, p, t) and labels
        u0: Initial guess (n_states,); massflows must not all be zero
        params: Global parameters passed to the physics
        config: Solver configuration
        t: Time at which the controls are evaluated

    Returns:
        u: Steady-state vector (n_states,)

    Raises:
        SolverError: If the nonlinear solver does not report success
    """
    config = config if config is not None else SolverConfig()
    u0 = np.asarray(u0, dtype=float)

    logger.info(f"Steady-state solve: {len(u0)} states, method '{config.method}'")

    def residual(u):
        return system.rhs(u, params, t)

    sol = root(residual, u0, method=config.method, tol=config.tol, options=_root_options(config))
    if not sol.success:
        logger.error(f"Steady-state solve failed (status {sol.status}): {sol.message}")
        raise SolverError(f"Steady-state solve failed: {sol.message}", status=sol.status)

    residual_norm = float(np.linalg.norm(residual(sol.x)))
    logger.info(f"Steady state converged: {getattr(sol, 'nfev', '?')} evaluations, "
                f"residual norm {residual_norm:.3e}")
    return sol.x


class _AlgebraicSolver:
    """Solves the algebraic states for given differential states, warm-started."""

    def __init__(self, system, params, config: SolverConfig, u_template: np.ndarray):
        self.system = system
        self.params = params
        self.config = config
        self.diff = np.asarray(system.differential, dtype=bool)
        self.alg = ~self.diff
        self.z_guess = u_template[self.alg].copy()
        self.n_solves = 0

    def full_state(self, t: float, y: np.ndarray) -> np.ndarray:
        u = np.empty(self.system.n_states)
        u[self.diff] = y

        def residual(z):
            u[self.alg] = z
            return self.system.rhs(u, self.params, t)[self.alg]

        sol = root(residual, self.z_guess, method=self.config.method,
                   tol=self.config.algebraic_tol, options=_root_options(self.config))
        if not sol.success:
            logger.error(f"Algebraic solve failed at t = {t} (status {sol.status}): {sol.message}")
            raise SolverError(f"Algebraic solve failed at t = {t}: {sol.message}", status=sol.status)

        self.n_solves += 1
        self.z_guess = sol.x.copy()
        u[self.alg] = sol.x
        return u


def solve_transient(system, u0: np.ndarray, params, t_span: Tuple[float, float],
                    t_eval: Sequence[float] = None, config: SolverConfig = None) -> SimulationResult:
    """
    Integrate the network DAE over t_span.

    The algebraic part of u0 is only an initial guess; a consistent initial
    state is computed at t_span[0] from the differential part.

    Args:
        system: Assembled network providing rhs, differential, n_states and labels
        u0: Initial state (n_states,)
        params: Global parameters passed to the physics
        t_span: (t0, t_end) [s]
        t_eval: Output times, default the integrator's own steps
        config: Solver configuration

    Returns:
        SimulationResult with the full state at every output time

    Raises:
        SolverError: If the consistent initialisation, an algebraic solve or
            the integrator fails
    """
    config = config if config is not None else SolverConfig()
    u0 = np.asarray(u0, dtype=float)
    t0, t_end = t_span

    algebraic = _AlgebraicSolver(system, params, config, u0)
    diff = algebraic.diff
    if not diff.any():
        raise SolverError("System has no differential states; use solve_steady_state")

    # Consistent initialisation
    u_init = algebraic.full_state(t0, u0[diff])
    logger.info(f"Transient solve: {int(diff.sum())} differential, {int((~diff).sum())} algebraic states, "
                f"t = {t0} .. {t_end} s, method '{config.time_method}'")

    def ode_rhs(t, y):
        u = algebraic.full_state(t, y)
        return system.rhs(u, params, t)[diff]

    sol = solve_ivp(ode_rhs, (t0, t_end), u_init[diff], method=config.time_method,
                    t_eval=t_eval, rtol=config.rtol, atol=config.atol, max_step=config.max_step)
    if not sol.success:
        logger.error(f"Time integration failed (status {sol.status}): {sol.message}")
        raise SolverError(f"Time integration failed: {sol.message}", status=sol.status)

    # Recover algebraic states at the output times
    u = np.empty((len(sol.t), system.n_states))
    for i, (t, y) in enumerate(zip(sol.t, sol.y.T)):
        u[i] = algebraic.full_state(t, y)

    logger.info(f"Transient solve finished: {len(sol.t)} output times, {sol.nfev} rhs evaluations, "
                f"{algebraic.n_solves} algebraic solves")
    return SimulationResult(t=sol.t, u=u, labels=system.labels,
                            attrs={'t_start': float(t0), 't_end': float(t_end),
                                   'method': config.time_method})
