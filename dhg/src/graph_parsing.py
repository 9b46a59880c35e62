"""
Reading network descriptions from GML graph files.

Node attributes:
    type      'junction' or 'reference'
    pressure  reference pressure [Pa] (reference nodes only, default 0)

Edge attributes:
    type      'pipe', 'pressure_change' or 'massflow'
    index     optional position of the edge in the state vector
    pipes:     inner_diameter, outer_diameter, length, roughness, wall_conductivity
    prosumers: control, the name of an entry in the `controls` mapping

Example:
    graph [
      directed 1
      node [ id 0 type "junction" ]
      node [ id 1 type "reference" pressure 0.0 ]
      edge [ source 0 target 1 type "massflow" control "consumer" ]
      ...
    ]

Control functions cannot be stored in GML; they are looked up by name in a
mapping {name: {'hydraulic_control': ..., 'thermal_control': ...,
'hydraulic_characteristic': ...}}.
"""

import logging
import networkx as nx
from pathlib import Path
from typing import Dict, Mapping, Tuple, Union

from .components import JunctionNode, Massflow, Pipe, PressureChange, ReferenceNode
from .errors import NetworkConstructionError

logger = logging.getLogger(__name__)

PIPE_ATTRIBUTES = ('inner_diameter', 'outer_diameter', 'length', 'roughness', 'wall_conductivity')
CONTROL_KEYS = ('hydraulic_control', 'thermal_control', 'hydraulic_characteristic')

PROSUMER_TYPES = {
    'pressure_change': PressureChange,
    'massflow': Massflow,
}


def _node_component(node_id, attrs: Dict):
    node_type = attrs.get('type')
    if node_type == 'junction':
        return JunctionNode()
    if node_type == 'reference':
        return ReferenceNode(pressure=float(attrs.get('pressure', 0.0)))
    raise NetworkConstructionError(f"Node {node_id!r}: unknown node type {node_type!r}")


def _edge_component(name: str, src: int, dst: int, attrs: Dict, controls: Mapping):
    edge_type = attrs.get('type')

    if edge_type == 'pipe':
        missing = [key for key in PIPE_ATTRIBUTES if key not in attrs]
        if missing:
            raise NetworkConstructionError(f"Edge {name}: pipe is missing {', '.join(missing)}")
        return Pipe(src, dst, **{key: float(attrs[key]) for key in PIPE_ATTRIBUTES})

    if edge_type in PROSUMER_TYPES:
        control_name = attrs.get('control')
        if control_name not in controls:
            raise NetworkConstructionError(f"Edge {name}: no controls named {control_name!r}")
        control = controls[control_name]
        missing = [key for key in CONTROL_KEYS if key not in control]
        if missing:
            raise NetworkConstructionError(
                f"Edge {name}: controls {control_name!r} are missing {', '.join(missing)}")
        return PROSUMER_TYPES[edge_type](src, dst, **{key: control[key] for key in CONTROL_KEYS})

    raise NetworkConstructionError(f"Edge {name}: unknown edge type {edge_type!r}")


def components_from_graph(graph: nx.DiGraph, controls: Mapping = None) -> Tuple[tuple, tuple]:
    """
    Build component records from an attributed directed graph.

    Nodes are numbered in the graph's node order. Edges keep the graph's edge
    order unless every edge has an `index` attribute.

    Returns:
        (nodes, edges): Tuples of node and edge components
    """
    if not graph.is_directed():
        raise NetworkConstructionError("Network graph must be directed")
    controls = controls if controls is not None else {}

    position = {node_id: i for i, node_id in enumerate(graph.nodes)}
    nodes = tuple(_node_component(node_id, attrs) for node_id, attrs in graph.nodes(data=True))

    edge_items = list(graph.edges(data=True))
    if edge_items and all('index' in attrs for _, _, attrs in edge_items):
        edge_items.sort(key=lambda item: item[2]['index'])

    edges = tuple(
        _edge_component(f"{u!r} -> {v!r}", position[u], position[v], attrs, controls)
        for u, v, attrs in edge_items
    )

    logger.info(f"Parsed {len(nodes)} nodes and {len(edges)} edges")
    return nodes, edges


def parse_gml(path: Union[str, Path], controls: Mapping = None) -> Tuple[tuple, tuple]:
    """Read a GML file and build its component records."""
    try:
        graph = nx.read_gml(path, label='id')
    except nx.NetworkXError as exc:
        raise NetworkConstructionError(f"Could not read {path}: {exc}") from exc
    return components_from_graph(graph, controls)
