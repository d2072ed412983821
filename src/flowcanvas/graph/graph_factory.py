from __future__ import annotations

import copy
import logging
from dataclasses import replace
from typing import Any, Iterable, List, Mapping, Optional

from flowcanvas.graph.graph_schema import Edge, Node, NodeDefaults, Port, PortSide
from flowcanvas.graph.ports import PortRef, port_id
from flowcanvas.utils.ids import new_id

logger = logging.getLogger("flowcanvas.factory")


def new_element_id() -> str:
    return new_id()


def make_edge_id(source_id: str, target_id: str) -> str:
    """
    Deterministic edge id derived from the node pair.

    Two edges between the same ordered pair share an id, which is why the
    connectivity gate refuses parallel edges.
    """
    return f"{source_id}-{target_id}"


def create_port(
    side: PortSide,
    *,
    alignment: str = "CENTER",
    size: float = 0.0,
    id: Optional[str] = None,
) -> Port:
    return Port(id=id or new_element_id(), side=side, alignment=alignment, size=size)


def create_node(partial: Optional[Mapping[str, Any]] = None, **fields: Any) -> Node:
    """
    Build a node from partial data, assigning a fresh id when none is given.

    Type-specific data is not validated: incomplete input yields a
    structurally valid node with empty defaults.
    """
    raw = {**(partial or {}), **fields}
    if not raw.get("id"):
        raw["id"] = new_element_id()

    node = Node.from_dict(raw)
    logger.debug("created node id=%s type=%s", node.id, node.type)
    return node


def create_node_from_default_props(defaults: NodeDefaults) -> Node:
    """
    Build a node from the default props of its type.
    """
    data = copy.deepcopy(defaults.data)
    data.update(
        {
            "type": defaults.type,
            "baseWidth": defaults.base_width,
            "baseHeight": defaults.base_height,
            "dynHeights": {"baseHeight": defaults.base_height},
            "dynWidths": {"baseWidth": defaults.base_width},
        }
    )

    return create_node(
        {
            "type": defaults.type,
            "width": defaults.base_width,
            "height": defaults.base_height,
            "ports": list(defaults.ports),
            "data": data,
        }
    )


def clone_node(node: Node) -> Node:
    """
    Deep copy of `node` with a new id for the node and for every port.

    Port ids must stay globally resolvable: a clone sharing port ids with
    its original would make edge endpoints ambiguous. Edges are not cloned.
    """
    cloned = copy.deepcopy(node)
    return replace(
        cloned,
        id=new_element_id(),
        ports=tuple(replace(p, id=new_element_id()) for p in cloned.ports),
    )


def create_edge(
    from_node: Node,
    to_node: Node,
    from_port: Optional[PortRef] = None,
    to_port: Optional[PortRef] = None,
    *,
    text: Optional[str] = None,
) -> Edge:
    return Edge(
        id=make_edge_id(from_node.id, to_node.id),
        source=from_node.id,
        target=to_node.id,
        source_port=port_id(from_port),
        target_port=port_id(to_port),
        text=text,
        parent=from_node.parent,
    )


def filter_node_in_array(nodes: Iterable[Node], node_to_filter: Node) -> List[Node]:
    return [n for n in nodes if n.id != node_to_filter.id]
