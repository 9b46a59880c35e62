"""
Assembly of the network DAE from graph topology and component records.

The global state vector holds all node states followed by all edge states,
each component occupying a contiguous block:

    u = [v_0 | v_1 | ... | v_{n-1} | e_0 | e_1 | ... | e_{k-1}]

The system is semi-explicit:  M du/dt = f(u, p, t)  with a diagonal mass
matrix M, 1 for differential (pipe cell temperatures) and 0 for algebraic
slots (everything else).
"""

import logging
import numpy as np
import networkx as nx
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple, Union

from .components import Pipe, ReferenceNode
from .discretisation import FVM
from .errors import NetworkConstructionError, UndefinedTemperatureError
from .fluids import Fluid, Water
from .physics import (
    EDGE_PHYSICS,
    NODE_PHYSICS,
    NodeConstants,
    PipeConstants,
    ProsumerConstants,
)
from .transport import TransportModels

logger = logging.getLogger(__name__)

NODE_SYMS = ('p', 'T')
PROSUMER_SYMS = ('m', 'T_src', 'T_dst')


def pipe_syms(n_cells: int) -> Tuple[str, ...]:
    """Local symbols of a pipe with n_cells cells: m, T_1 ... T_{N-1}, T_end."""
    return ('m',) + tuple(f"T_{i}" for i in range(1, n_cells)) + ('T_end',)


@dataclass(frozen=True)
class StateLayout:
    """
    Serialisable description of the global state vector.

    Two networks built from the same component records have equal layouts.
    """
    node_dims: Tuple[int, ...]
    edge_dims: Tuple[int, ...]
    differential: Tuple[bool, ...]
    node_syms: Tuple[Tuple[str, ...], ...]
    edge_syms: Tuple[Tuple[str, ...], ...]
    labels: Tuple[str, ...]

    @property
    def n_states(self) -> int:
        return len(self.labels)

    def to_dict(self) -> dict:
        return {
            'node_dims': list(self.node_dims),
            'edge_dims': list(self.edge_dims),
            'differential': [bool(d) for d in self.differential],
            'node_syms': [list(s) for s in self.node_syms],
            'edge_syms': [list(s) for s in self.edge_syms],
            'labels': list(self.labels),
        }

    @classmethod
    def from_dict(cls, dct: dict) -> 'StateLayout':
        return cls(
            node_dims=tuple(int(d) for d in dct['node_dims']),
            edge_dims=tuple(int(d) for d in dct['edge_dims']),
            differential=tuple(bool(d) for d in dct['differential']),
            node_syms=tuple(tuple(s) for s in dct['node_syms']),
            edge_syms=tuple(tuple(s) for s in dct['edge_syms']),
            labels=tuple(dct['labels']),
        )


class DHGNetwork:
    """
    District heating network assembled into one DAE right-hand side.

    Per-component constants and adjacency index lists are precomputed here;
    each evaluation then only slices the state vector and calls the pure
    physics functions, which write into disjoint slots of the output.

    Usage:
        network = DHGNetwork(nodes, edges, discretisation=FVM(dx=10.0))
        residual = network.rhs(u, params, t)
    """

    def __init__(self, nodes: Sequence, edges: Sequence,
                 transport: TransportModels = None,
                 discretisation: FVM = None,
                 fluid: Fluid = None):
        """
        Initialize the network.

        Args:
            nodes: Node components, indexed by position
            edges: Edge components carrying (src, dst) node indices
            transport: Friction and Nusselt correlations (default Churchill / Chilton-Colburn)
            discretisation: Finite-volume discretisation, required if there are pipes
            fluid: Fluid property model (default water)
        """
        self.nodes = tuple(nodes)
        self.edges = tuple(edges)
        self.transport = transport if transport is not None else TransportModels()
        self.discretisation = discretisation
        self.fluid = fluid if fluid is not None else Water()

        if len(self.nodes) == 0:
            raise NetworkConstructionError("Network has no nodes")

        self.n_nodes = len(self.nodes)
        self.n_edges = len(self.edges)

        # Per-component dims, symbols, mass-matrix markers and constants
        node_dims, node_syms, node_consts, node_fns = [], [], [], []
        for i, node in enumerate(self.nodes):
            node_fns.append(self._lookup(NODE_PHYSICS, node, f"node {i}"))
            node_dims.append(len(NODE_SYMS))
            node_syms.append(NODE_SYMS)
            pressure = node.pressure if isinstance(node, ReferenceNode) else None
            node_consts.append(NodeConstants(pressure=pressure))

        edge_dims, edge_syms, edge_consts, edge_fns = [], [], [], []
        edge_differential = []
        for i, edge in enumerate(self.edges):
            edge_fns.append(self._lookup(EDGE_PHYSICS, edge, f"edge {i}"))
            if edge.src >= self.n_nodes or edge.dst >= self.n_nodes:
                raise NetworkConstructionError(
                    f"Edge {i} ({edge.src} -> {edge.dst}) refers to a node outside 0..{self.n_nodes - 1}")

            if isinstance(edge, Pipe):
                if self.discretisation is None:
                    raise NetworkConstructionError("Network contains pipes but no discretisation was given")
                consts = PipeConstants.from_component(edge, self.discretisation, self.transport, self.fluid)
                syms = pipe_syms(consts.n_cells)
                differential = [False] + [True] * consts.n_cells
                logger.debug(f"Edge {i}: pipe of length {edge.length} m with {consts.n_cells} cells")
            else:
                consts = ProsumerConstants.from_component(edge, self.fluid)
                syms = PROSUMER_SYMS
                differential = [False] * len(PROSUMER_SYMS)

            edge_consts.append(consts)
            edge_dims.append(len(syms))
            edge_syms.append(syms)
            edge_differential.append(differential)

        self.node_dims = np.array(node_dims, dtype=int)
        self.edge_dims = np.array(edge_dims, dtype=int)
        self.node_syms = tuple(node_syms)
        self.edge_syms = tuple(edge_syms)

        # Offsets of each component block in the global vector
        dims = np.concatenate([self.node_dims, self.edge_dims])
        offsets = np.concatenate([[0], np.cumsum(dims)])
        self.n_states = int(offsets[-1])
        self._node_slices = [slice(int(offsets[i]), int(offsets[i + 1])) for i in range(self.n_nodes)]
        self._edge_slices = [slice(int(offsets[self.n_nodes + i]), int(offsets[self.n_nodes + i + 1]))
                             for i in range(self.n_edges)]

        # Mass-matrix diagonal: node states are always algebraic
        self.differential = np.array(
            [False] * int(self.node_dims.sum()) + [d for diff in edge_differential for d in diff], dtype=bool)

        # Adjacency index lists, computed once
        self.edges_in: List[List[int]] = [[] for _ in range(self.n_nodes)]
        self.edges_out: List[List[int]] = [[] for _ in range(self.n_nodes)]
        for i, edge in enumerate(self.edges):
            self.edges_out[edge.src].append(i)
            self.edges_in[edge.dst].append(i)

        self._edge_kernels = [
            (fn, self._edge_slices[i], self._node_slices[edge.src], self._node_slices[edge.dst], consts)
            for i, (fn, edge, consts) in enumerate(zip(edge_fns, self.edges, edge_consts))
        ]
        self._node_kernels = [
            (fn, self._node_slices[i],
             [self._edge_slices[j] for j in self.edges_in[i]],
             [self._edge_slices[j] for j in self.edges_out[i]],
             consts)
            for i, (fn, consts) in enumerate(zip(node_fns, node_consts))
        ]

        for i in range(self.n_nodes):
            if not self.edges_in[i] and not self.edges_out[i]:
                logger.warning(f"Node {i} has no incident edges; its temperature is undefined")

        self.labels = tuple(
            [f"{s}_v{i}" for i, syms in enumerate(self.node_syms) for s in syms]
            + [f"{s}_e{i}" for i, syms in enumerate(self.edge_syms) for s in syms])

        logger.info(f"Assembled network: {self.n_nodes} nodes, {self.n_edges} edges, "
                    f"{self.n_states} states ({int(self.differential.sum())} differential)")

    @staticmethod
    def _lookup(table: Dict, component, name: str) -> Callable:
        try:
            return table[type(component)]
        except KeyError:
            raise NetworkConstructionError(
                f"Unsupported component type for {name}: {type(component).__name__}") from None

    @classmethod
    def from_graph(cls, graph: nx.DiGraph, **kwargs) -> 'DHGNetwork':
        """
        Build from a networkx graph whose nodes and edges carry a `component` attribute.

        Nodes are indexed in the graph's node order. Each edge component's
        (src, dst) must match the positions of the graph edge's endpoints.
        Edges are ordered by their `index` attribute when present.
        """
        node_ids = list(graph.nodes)
        position = {node_id: i for i, node_id in enumerate(node_ids)}

        nodes = []
        for node_id in node_ids:
            component = graph.nodes[node_id].get('component')
            if component is None:
                raise NetworkConstructionError(f"Graph node {node_id!r} has no component")
            nodes.append(component)

        edge_items = list(graph.edges(data=True))
        if all('index' in data for _, _, data in edge_items):
            edge_items.sort(key=lambda item: item[2]['index'])

        edges = []
        for u, v, data in edge_items:
            component = data.get('component')
            if component is None:
                raise NetworkConstructionError(f"Graph edge ({u!r}, {v!r}) has no component")
            if (component.src, component.dst) != (position[u], position[v]):
                raise NetworkConstructionError(
                    f"Graph edge ({u!r}, {v!r}) does not match component endpoints "
                    f"({component.src}, {component.dst})")
            edges.append(component)

        return cls(nodes, edges, **kwargs)

    def to_graph(self) -> nx.MultiDiGraph:
        """Directed multigraph with `component` attributes on nodes and edges."""
        graph = nx.MultiDiGraph()
        for i, node in enumerate(self.nodes):
            graph.add_node(i, component=node)
        for i, edge in enumerate(self.edges):
            graph.add_edge(edge.src, edge.dst, key=i, index=i, component=edge)
        return graph

    # --- Layout ---

    @property
    def mass_matrix(self) -> np.ndarray:
        """Diagonal mass matrix, 1 for differential and 0 for algebraic states."""
        return np.diag(self.differential.astype(float))

    @property
    def syms(self) -> Tuple[str, ...]:
        """Local symbol of every slot in the global state vector."""
        return tuple(s for syms in self.node_syms + self.edge_syms for s in syms)

    def layout(self) -> StateLayout:
        return StateLayout(
            node_dims=tuple(int(d) for d in self.node_dims),
            edge_dims=tuple(int(d) for d in self.edge_dims),
            differential=tuple(bool(d) for d in self.differential),
            node_syms=self.node_syms,
            edge_syms=self.edge_syms,
            labels=self.labels,
        )

    def node_indices(self, i: int) -> np.ndarray:
        """Global indices of node i's states."""
        sl = self._node_slices[i]
        return np.arange(sl.start, sl.stop)

    def edge_indices(self, i: int) -> np.ndarray:
        """Global indices of edge i's states."""
        sl = self._edge_slices[i]
        return np.arange(sl.start, sl.stop)

    def node_pressure_indices(self) -> np.ndarray:
        return np.array([sl.start for sl in self._node_slices], dtype=int)

    def node_temperature_indices(self) -> np.ndarray:
        return np.array([sl.start + 1 for sl in self._node_slices], dtype=int)

    def massflow_indices(self) -> np.ndarray:
        return np.array([sl.start for sl in self._edge_slices], dtype=int)

    def pipe_indices(self) -> List[int]:
        """Edge indices of all pipes."""
        return [i for i, edge in enumerate(self.edges) if isinstance(edge, Pipe)]

    def idx_containing(self, label_part: str) -> np.ndarray:
        """Global indices of all states whose label contains `label_part`."""
        return np.array([i for i, label in enumerate(self.labels) if label_part in label], dtype=int)

    def initialise(self, massflow: Union[float, Sequence[float], Callable[[int], Sequence[float]]] = 0.0,
                   pressure: Union[float, Sequence[float]] = 0.0,
                   temperature: float = 293.15) -> np.ndarray:
        """
        Initial state vector.

        Args:
            massflow: Edge massflows; scalar, one value per edge, or a callable
                taking the number of edges and returning one value per edge
            pressure: Node pressures, scalar or one value per node; reference
                nodes always start at their reference pressure
            temperature: Uniform temperature of all nodes and edge cells

        Returns:
            u0: State vector (n_states,)
        """
        if callable(massflow):
            massflow = massflow(self.n_edges)
        massflow = np.broadcast_to(np.asarray(massflow, dtype=float), (self.n_edges,))
        pressure = np.broadcast_to(np.asarray(pressure, dtype=float), (self.n_nodes,))

        u0 = np.full(self.n_states, float(temperature))
        for i, sl in enumerate(self._node_slices):
            node = self.nodes[i]
            u0[sl.start] = node.pressure if isinstance(node, ReferenceNode) else pressure[i]
        for i, sl in enumerate(self._edge_slices):
            u0[sl.start] = massflow[i]
        return u0

    # --- Right-hand side ---

    def rhs_inplace(self, du: np.ndarray, u: np.ndarray, p, t: float) -> None:
        """
        Evaluate residuals/rates into du.

        Edges first, then nodes; both only read u, so either order gives the
        same result.

        Raises:
            UndefinedTemperatureError: Node or prosumer temperature undefined at zero flow
        """
        for i, (fn, sl, sl_src, sl_dst, consts) in enumerate(self._edge_kernels):
            try:
                fn(du[sl], u[sl], u[sl_src], u[sl_dst], consts, p, t)
            except UndefinedTemperatureError as exc:
                raise UndefinedTemperatureError(f"Edge {i}: {exc}", kind='edge', index=i) from exc

        for i, (fn, sl, sls_in, sls_out, consts) in enumerate(self._node_kernels):
            try:
                fn(du[sl], u[sl], [u[s] for s in sls_in], [u[s] for s in sls_out], consts, p, t)
            except UndefinedTemperatureError as exc:
                raise UndefinedTemperatureError(f"Node {i}: {exc}", kind='node', index=i) from exc

    def rhs(self, u: np.ndarray, p, t: float) -> np.ndarray:
        """Residual/rate vector f(u, p, t)."""
        u = np.asarray(u, dtype=float)
        if u.shape != (self.n_states,):
            raise ValueError(f"State vector has shape {u.shape}, expected ({self.n_states},)")
        du = np.empty(self.n_states)
        self.rhs_inplace(du, u, p, t)
        return du

    def __call__(self, du: np.ndarray, u: np.ndarray, p, t: float) -> None:
        self.rhs_inplace(du, u, p, t)

    def __repr__(self):
        return (f"DHGNetwork(n_nodes={self.n_nodes}, n_edges={self.n_edges}, "
                f"n_states={self.n_states})")
