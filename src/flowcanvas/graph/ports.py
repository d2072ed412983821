from __future__ import annotations

from typing import Optional, Union

from flowcanvas.graph.graph_schema import (
    INBOUND_SIDE,
    OUTBOUND_SIDE,
    Node,
    Port,
    PortSide,
)

# A resolved port is either a real Port or a synthetic id string
PortRef = Union[Port, str]

SYNTHETIC_FROM_SUFFIX = "-from"
SYNTHETIC_TO_SUFFIX = "-to"


def find_port_by_side(node: Optional[Node], side: PortSide) -> Optional[Port]:
    """
    First port of `node` on `side`, in insertion order.
    """
    if node is None:
        return None
    return next((p for p in node.ports if p.side == side), None)


def port_id(port: Optional[PortRef]) -> Optional[str]:
    if port is None:
        return None
    if isinstance(port, Port):
        return port.id
    return str(port)


def synthetic_from_port_id(node_id: str) -> str:
    return f"{node_id}{SYNTHETIC_FROM_SUFFIX}"


def synthetic_to_port_id(node_id: str) -> str:
    return f"{node_id}{SYNTHETIC_TO_SUFFIX}"


def is_synthetic_port_id(node: Node, candidate: Optional[str]) -> bool:
    return candidate in (synthetic_from_port_id(node.id), synthetic_to_port_id(node.id))


def get_default_from_port(
    node: Optional[Node],
    explicit_port: Optional[PortRef] = None,
) -> Optional[PortRef]:
    """
    Port an outgoing edge should leave `node` through.

    Falls back to a synthetic "<node id>-from" id when the node has no
    EAST port, so edge construction never fails on a missing port.
    """
    if explicit_port is not None:
        return explicit_port
    if node is None:
        return None

    port = find_port_by_side(node, OUTBOUND_SIDE)
    if port is not None:
        return port
    return synthetic_from_port_id(node.id)


def get_default_to_port(
    node: Optional[Node],
    explicit_port: Optional[PortRef] = None,
) -> Optional[PortRef]:
    """
    Port an incoming edge should enter `node` through (WEST, else "<node id>-to").
    """
    if explicit_port is not None:
        return explicit_port
    if node is None:
        return None

    port = find_port_by_side(node, INBOUND_SIDE)
    if port is not None:
        return port
    return synthetic_to_port_id(node.id)
