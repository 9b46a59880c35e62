"""
Pytest tests for network assembly.

Tests verify:
1. State dimensions, mass-matrix markers, symbols and labels
2. Index helpers
3. Layout serialisation round trip
4. Construction errors
5. Right-hand side evaluation and junction mass conservation
6. Undefined temperatures are raised with the offending component
7. Conversion to and from networkx graphs
"""

import json
import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from dhg.src.components import Edge, JunctionNode, Massflow, Pipe, Prosumer, ReferenceNode
from dhg.src.controls import constant, passthrough
from dhg.src.discretisation import FVM
from dhg.src.errors import NetworkConstructionError, UndefinedTemperatureError
from dhg.src.network import DHGNetwork, StateLayout
from dhg.src.test_cases import build_simple_cycle, simple_cycle_components

# dx = 20 m gives 5 cells per 100 m pipe
N_CELLS = 5


@pytest.fixture
def cycle():
    return build_simple_cycle(dx=20.0)


@pytest.fixture
def network(cycle):
    return cycle.network


def short_pipe(src, dst, length=100.0):
    return Pipe(src, dst, inner_diameter=0.05, outer_diameter=0.06, length=length,
                roughness=1e-5, wall_conductivity=0.4)


class TestLayout:
    """Dimensions, markers and symbols."""

    def test_dims(self, network):
        np.testing.assert_array_equal(network.node_dims, [2, 2, 2, 2])
        np.testing.assert_array_equal(network.edge_dims, [N_CELLS + 1, 3, 3, N_CELLS + 1])
        assert network.n_states == 8 + 2 * (N_CELLS + 1) + 2 * 3

    def test_differential_markers(self, network):
        assert network.differential.sum() == 2 * N_CELLS, "Only pipe cell temperatures are differential"
        assert not network.differential[network.massflow_indices()].any()
        assert not network.differential[:8].any(), "Node states are algebraic"

    def test_mass_matrix(self, network):
        M = network.mass_matrix
        assert M.shape == (network.n_states, network.n_states)
        np.testing.assert_array_equal(np.diag(M), network.differential.astype(float))
        assert np.count_nonzero(M - np.diag(np.diag(M))) == 0

    def test_syms(self, network):
        syms = network.syms
        assert len(syms) == network.n_states
        assert syms[:8] == ('p', 'T') * 4
        assert syms[8:8 + N_CELLS + 1] == ('m', 'T_1', 'T_2', 'T_3', 'T_4', 'T_end')
        assert network.edge_syms[1] == ('m', 'T_src', 'T_dst')

    def test_labels(self, network):
        labels = network.labels
        assert len(labels) == network.n_states
        assert len(set(labels)) == len(labels), "Labels must be unique"
        assert labels[0] == 'p_v0'
        assert labels[1] == 'T_v0'
        assert labels[8] == 'm_e0'
        assert 'T_3_e0' in labels
        assert 'T_dst_e1' in labels
        assert 'T_end_e3' in labels

    def test_single_cell_pipe(self):
        network = DHGNetwork([JunctionNode(), ReferenceNode()], [short_pipe(0, 1, length=10.0)],
                             discretisation=FVM(dx=10.0))
        assert network.edge_syms[0] == ('m', 'T_end')

    def test_markers_consistent_with_syms(self, network):
        for label, differential in zip(network.labels, network.differential):
            is_cell = label.startswith('T_') and label.split('_')[-1] in ('e0', 'e3')
            assert differential == is_cell, f"Wrong marker for {label}"


class TestIndices:

    def test_massflow_indices(self, network):
        np.testing.assert_array_equal(network.massflow_indices(), [8, 8 + 6, 8 + 9, 8 + 12])
        assert all(network.labels[i].startswith('m_') for i in network.massflow_indices())

    def test_node_indices(self, network):
        np.testing.assert_array_equal(network.node_pressure_indices(), [0, 2, 4, 6])
        np.testing.assert_array_equal(network.node_temperature_indices(), [1, 3, 5, 7])
        np.testing.assert_array_equal(network.node_indices(2), [4, 5])

    def test_edge_indices(self, network):
        np.testing.assert_array_equal(network.edge_indices(1), [14, 15, 16])

    def test_pipe_indices(self, network):
        assert network.pipe_indices() == [0, 3]

    def test_idx_containing(self, network):
        np.testing.assert_array_equal(network.idx_containing('_e0'), np.arange(8, 8 + N_CELLS + 1))
        assert len(network.idx_containing('T_end')) == 2

    def test_adjacency(self, network):
        assert network.edges_out[0] == [0]
        assert network.edges_in[0] == [1]
        assert network.edges_in[3] == [2]
        assert network.edges_out[3] == [3]


class TestLayoutSerialisation:

    def test_round_trip(self, network):
        layout = network.layout()
        assert StateLayout.from_dict(layout.to_dict()) == layout

    def test_json_round_trip(self, network):
        layout = network.layout()
        restored = StateLayout.from_dict(json.loads(json.dumps(layout.to_dict())))
        assert restored == layout
        assert restored.n_states == network.n_states

    def test_rebuild_gives_same_layout(self, network):
        nodes, edges = simple_cycle_components()
        rebuilt = DHGNetwork(nodes, edges, discretisation=FVM(dx=20.0))
        assert rebuilt.layout() == network.layout()

    def test_refinement_changes_layout(self, network):
        assert build_simple_cycle(dx=10.0).network.layout() != network.layout()


class TestInitialise:

    def test_uniform(self, network):
        u0 = network.initialise(massflow=0.3, pressure=100.0, temperature=290.0)
        np.testing.assert_allclose(u0[network.massflow_indices()], 0.3)
        np.testing.assert_allclose(u0[network.node_temperature_indices()], 290.0)
        np.testing.assert_allclose(u0[network.idx_containing('T_end')], 290.0)
        # Reference node keeps its own pressure
        np.testing.assert_allclose(u0[network.node_pressure_indices()], [100.0, 100.0, 100.0, 0.0])

    def test_callable_massflow(self, network):
        u0 = network.initialise(massflow=lambda n: np.arange(1, n + 1) * 0.1)
        np.testing.assert_allclose(u0[network.massflow_indices()], [0.1, 0.2, 0.3, 0.4])

    def test_massflow_length_mismatch(self, network):
        with pytest.raises(ValueError):
            network.initialise(massflow=[0.1, 0.2])


class TestConstructionErrors:

    def test_pipe_too_short(self):
        with pytest.raises(NetworkConstructionError):
            DHGNetwork([JunctionNode(), ReferenceNode()], [short_pipe(0, 1, length=10.0)],
                       discretisation=FVM(dx=50.0))

    def test_missing_node(self):
        with pytest.raises(NetworkConstructionError):
            DHGNetwork([JunctionNode(), ReferenceNode()], [short_pipe(0, 5)], discretisation=FVM(dx=10.0))

    def test_unknown_edge_type(self):
        with pytest.raises(NetworkConstructionError):
            DHGNetwork([JunctionNode(), ReferenceNode()], [Edge(0, 1)])

    def test_unknown_node_type(self):
        with pytest.raises(NetworkConstructionError):
            DHGNetwork([JunctionNode(), object()], [])

    def test_pipes_need_discretisation(self):
        with pytest.raises(NetworkConstructionError):
            DHGNetwork([JunctionNode(), ReferenceNode()], [short_pipe(0, 1)])

    def test_no_nodes(self):
        with pytest.raises(NetworkConstructionError):
            DHGNetwork([], [])

    def test_self_loop(self):
        with pytest.raises(NetworkConstructionError):
            short_pipe(1, 1)

    def test_invalid_geometry(self):
        with pytest.raises(NetworkConstructionError):
            Pipe(0, 1, inner_diameter=0.05, outer_diameter=0.04, length=100.0,
                 roughness=0.0, wall_conductivity=0.4)

    def test_pipe_geometry_required(self):
        with pytest.raises(TypeError):
            Pipe(0, 1)
        with pytest.raises(TypeError):
            Pipe(0, 1, inner_diameter=0.05, outer_diameter=0.06, length=100.0, roughness=0.0)

    def test_prosumer_controls_required(self):
        with pytest.raises(TypeError):
            Massflow(0, 1)

    def test_prosumer_controls_callable(self):
        with pytest.raises(NetworkConstructionError, match="thermal_control"):
            Massflow(0, 1, hydraulic_control=constant(0.3), thermal_control=-2.7e3,
                     hydraulic_characteristic=passthrough)

    def test_prosumer_abstract(self):
        with pytest.raises(NetworkConstructionError):
            Prosumer(0, 1, hydraulic_control=constant(0.3), thermal_control=constant(0.0),
                     hydraulic_characteristic=passthrough)


class TestRHS:

    def test_shape_and_finite(self, cycle):
        du = cycle.network.rhs(cycle.u0, cycle.params, 0.0)
        assert du.shape == (cycle.network.n_states,)
        assert np.all(np.isfinite(du))

    def test_inplace_writes_every_slot(self, cycle):
        du = np.full(cycle.network.n_states, np.nan)
        cycle.network.rhs_inplace(du, cycle.u0, cycle.params, 0.0)
        assert np.all(np.isfinite(du)), "Every residual slot must be written"

    def test_call_matches_rhs(self, cycle):
        du = np.empty(cycle.network.n_states)
        cycle.network(du, cycle.u0, cycle.params, 0.0)
        np.testing.assert_array_equal(du, cycle.network.rhs(cycle.u0, cycle.params, 0.0))

    def test_junction_mass_conservation(self, cycle):
        """Equal massflow everywhere balances every junction."""
        network = cycle.network
        du = network.rhs(cycle.u0, cycle.params, 0.0)
        junction_pressure_slots = network.node_pressure_indices()[:3]
        np.testing.assert_array_equal(du[junction_pressure_slots], 0.0)

    def test_reference_pressure_residual(self, cycle):
        network = cycle.network
        u = cycle.u0.copy()
        u[network.node_pressure_indices()[3]] = 250.0
        du = network.rhs(u, cycle.params, 0.0)
        assert du[network.node_pressure_indices()[3]] == pytest.approx(250.0)

    def test_state_not_modified(self, cycle):
        u = cycle.u0.copy()
        cycle.network.rhs(u, cycle.params, 0.0)
        np.testing.assert_array_equal(u, cycle.u0)

    def test_wrong_shape(self, cycle):
        with pytest.raises(ValueError):
            cycle.network.rhs(cycle.u0[:-1], cycle.params, 0.0)

    def test_zero_flow_raises(self, cycle):
        u = cycle.network.initialise(massflow=0.0, temperature=cycle.params.T_ambient)
        with pytest.raises(UndefinedTemperatureError) as excinfo:
            cycle.network.rhs(u, cycle.params, 0.0)
        assert excinfo.value.kind in ('edge', 'node')
        assert excinfo.value.index is not None


class TestGraphConversion:

    def test_round_trip(self, network):
        graph = network.to_graph()
        assert graph.number_of_nodes() == 4
        assert graph.number_of_edges() == 4
        rebuilt = DHGNetwork.from_graph(graph, discretisation=FVM(dx=20.0))
        assert rebuilt.layout() == network.layout()
        assert rebuilt.edges == network.edges

    def test_mismatched_endpoints(self, network):
        graph = network.to_graph()
        graph.add_edge(1, 2, key=99, index=99, component=short_pipe(0, 3))
        with pytest.raises(NetworkConstructionError):
            DHGNetwork.from_graph(graph, discretisation=FVM(dx=20.0))

    def test_repr(self, network):
        assert 'n_states=26' in repr(network)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
