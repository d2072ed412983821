from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Literal, Mapping, Optional, Tuple, get_args

import networkx as nx

NodeType = Literal["start", "information", "question", "if", "end"]
PortSide = Literal["NORTH", "SOUTH", "EAST", "WEST"]

NODE_TYPES: Tuple[str, ...] = get_args(NodeType)
PORT_SIDES: Tuple[str, ...] = get_args(PortSide)

# Canonical sides for left-to-right flow
OUTBOUND_SIDE: PortSide = "EAST"
INBOUND_SIDE: PortSide = "WEST"


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Port:
    """
    Directional attachment point on a node.
    """

    id: str
    side: Optional[PortSide] = None
    alignment: str = "CENTER"
    size: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "side": self.side,
            "alignment": self.alignment,
            "size": self.size,
        }

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Port":
        return Port(
            id=str(raw.get("id") or ""),
            side=raw.get("side"),
            alignment=str(raw.get("alignment") or "CENTER"),
            size=_as_float(raw.get("size")),
        )


@dataclass(frozen=True)
class Node:
    """
    Typed vertex of the canvas.

    `type` is None for nodes built from incomplete input; such nodes are
    structurally valid but carry no type-specific behaviour.
    """

    id: str
    type: Optional[NodeType] = None
    width: float = 0.0
    height: float = 0.0
    ports: Tuple[Port, ...] = ()
    data: Dict[str, Any] = field(default_factory=dict)
    parent: Optional[str] = None
    text: Optional[str] = None

    @property
    def port_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.ports)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "width": self.width,
            "height": self.height,
            "ports": [p.to_dict() for p in self.ports],
            "data": copy.deepcopy(self.data),
            "parent": self.parent,
            "text": self.text,
        }

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Node":
        ports = tuple(
            p if isinstance(p, Port) else Port.from_dict(p)
            for p in (raw.get("ports") or ())
            if isinstance(p, (Port, Mapping))
        )
        data = raw.get("data")
        return Node(
            id=str(raw.get("id") or ""),
            type=raw.get("type"),
            width=_as_float(raw.get("width")),
            height=_as_float(raw.get("height")),
            ports=ports,
            data=copy.deepcopy(dict(data)) if isinstance(data, Mapping) else {},
            parent=raw.get("parent"),
            text=raw.get("text"),
        )


@dataclass(frozen=True)
class Edge:
    """
    Directed connection between two nodes, optionally anchored on ports.

    Without ports, layout and connection checks degrade to node level.
    """

    id: str
    source: str
    target: str
    source_port: Optional[str] = None
    target_port: Optional[str] = None
    text: Optional[str] = None
    parent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "source_port": self.source_port,
            "target_port": self.target_port,
            "text": self.text,
            "parent": self.parent,
        }

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Edge":
        return Edge(
            id=str(raw.get("id") or ""),
            source=str(raw.get("source") or ""),
            target=str(raw.get("target") or ""),
            source_port=raw.get("source_port"),
            target_port=raw.get("target_port"),
            text=raw.get("text"),
            parent=raw.get("parent"),
        )


@dataclass(frozen=True)
class CanvasDataset:
    """
    Complete snapshot of the canvas: ordered nodes and ordered edges.
    """

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    @staticmethod
    def of(nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()) -> "CanvasDataset":
        return CanvasDataset(nodes=tuple(nodes), edges=tuple(edges))

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def get_edge(self, edge_id: Optional[str]) -> Optional[Edge]:
        return next((e for e in self.edges if e.id == edge_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "CanvasDataset":
        return CanvasDataset(
            nodes=tuple(Node.from_dict(n) for n in raw.get("nodes") or ()),
            edges=tuple(Edge.from_dict(e) for e in raw.get("edges") or ()),
        )

    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Directed multigraph view keyed by edge id.

        Edges pointing at unknown nodes create bare vertices without `data`.
        """
        g = nx.MultiDiGraph()
        for node in self.nodes:
            g.add_node(node.id, data=node)
        for edge in self.edges:
            g.add_edge(edge.source, edge.target, key=edge.id, data=edge)
        return g


@dataclass(frozen=True)
class NodeDefaults:
    """
    Default geometry, ports and data skeleton of a node type.
    """

    type: Optional[NodeType]
    base_width: float
    base_height: float
    ports: Tuple[Port, ...] = ()
    data: Dict[str, Any] = field(default_factory=dict)
