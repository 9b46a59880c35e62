"""
Steady state and warm-up transient of the four-node cycle.

The steady state is solved first. A transient run then starts from the
same pressures and massflows with every pipe cell at ambient temperature
and shows the network heating up towards the steady state.

Run from the project root:
    python dhg/scripts/run_simple_cycle.py -v --t-end 3600 -o cycle.h5
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import numpy as np
import matplotlib.pyplot as plt

from dhg import SimulationResult, SolverConfig, solve_steady_state, solve_transient
from dhg.src.test_cases import build_simple_cycle
from dhg.scripts._logging import add_verbosity_arguments, configure_logging


def print_steady_state(network, u):
    print(f"\n{'Node':<6} {'p [Pa]':>12} {'T [°C]':>10}")
    print("-" * 30)
    p = u[network.node_pressure_indices()]
    T = u[network.node_temperature_indices()]
    for i, (p_i, T_i) in enumerate(zip(p, T)):
        print(f"{i:<6} {p_i:>12.1f} {T_i - 273.15:>10.3f}")

    print(f"\n{'Edge':<6} {'type':<16} {'m [kg/s]':>10}")
    print("-" * 34)
    for i, (edge, m) in enumerate(zip(network.edges, u[network.massflow_indices()])):
        print(f"{i:<6} {type(edge).__name__:<16} {m:>10.4f}")


def plot_pipe_profiles(network, u, ax):
    """Cell temperatures along both pipes."""
    for i in network.pipe_indices():
        T = u[network.edge_indices(i)][1:]
        x = network.discretisation.dx * (np.arange(len(T)) + 1)
        ax.plot(x, T - 273.15, 'o-', linewidth=2, label=f'edge {i}')
    ax.set_xlabel('x [m]')
    ax.set_ylabel('Temperature [°C]')
    ax.set_title('Steady pipe temperatures')
    ax.legend()
    ax.grid(True, alpha=0.3)


def plot_warm_up(result: SimulationResult, steady, network, ax):
    for node, idx in enumerate(network.node_temperature_indices()):
        line, = ax.plot(result.t / 60, result.state(f'T_v{node}') - 273.15, linewidth=2, label=f'node {node}')
        ax.axhline(steady[idx] - 273.15, color=line.get_color(), linestyle=':', alpha=0.7)
    ax.set_xlabel('t [min]')
    ax.set_ylabel('Temperature [°C]')
    ax.set_title('Warm-up from ambient (dotted: steady state)')
    ax.legend()
    ax.grid(True, alpha=0.3)


def main(args):
    configure_logging(args.verbose, args.very_verbose)

    network, params, u0 = build_simple_cycle(dx=args.dx, convection=args.convection)
    config = SolverConfig(time_method=args.method)
    print(network)

    u_steady = solve_steady_state(network, u0, params, config)
    print_steady_state(network, u_steady)

    # Hydraulics from the steady state, all pipe cells at ambient temperature
    u_start = u_steady.copy()
    u_start[network.differential] = params.T_ambient
    t_eval = np.linspace(0.0, args.t_end, args.n_out)
    result = solve_transient(network, u_start, params, (0.0, args.t_end), t_eval=t_eval, config=config)

    if args.output:
        SimulationResult.steady_state(u_steady, network.labels, dx=args.dx).to_hdf5(args.output, 'steady')
        result.to_hdf5(args.output, 'transient')
        print(f"\nSaved results to: {args.output}")

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    fig.suptitle(f'Four-node cycle: dx = {args.dx} m, {args.convection}', fontsize=14, fontweight='bold')
    plot_pipe_profiles(network, u_steady, axes[0])
    plot_warm_up(result, u_steady, network, axes[1])
    plt.tight_layout()
    plt.savefig('simple_cycle.png', dpi=150, bbox_inches='tight')
    print("Saved plot to: simple_cycle.png")

    if not args.no_display:
        plt.show()


if __name__ == "__main__":
    parser = argparse.ArgumentParser("Solve the four-node district heating cycle.")
    parser.add_argument("--dx", type=float, default=10.0, help="pipe cell width [m]")
    parser.add_argument("--convection", default='upwind', help="convection scheme")
    parser.add_argument("--method", default='BDF', help="solve_ivp method for the transient")
    parser.add_argument("--t-end", type=float, default=3600.0, help="end time of the transient [s]")
    parser.add_argument("--n-out", type=int, default=121, help="number of output times")
    parser.add_argument("-o", "--output", type=Path, help="HDF5 file for the results")
    parser.add_argument("--no-display", action="store_true", help="do not show the plots in a window")
    add_verbosity_arguments(parser)

    main(parser.parse_args())
