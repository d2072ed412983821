from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from flowcanvas.config.settings import PortConfig
from flowcanvas.errors import UnknownNodeTypeError
from flowcanvas.graph.graph_factory import create_port
from flowcanvas.graph.graph_schema import NODE_TYPES, NodeDefaults, NodeType, Port, PortSide

GetDefaultPorts = Callable[[], Tuple[Port, ...]]
GetDefaultNodeProps = Callable[[NodeType], NodeDefaults]

GENERIC_BASE_WIDTH = 200.0
GENERIC_BASE_HEIGHT = 100.0


@dataclass(frozen=True)
class NodeTypeProvider:
    """
    Capabilities a node type exposes to the entity factory.

    Either capability may be missing; the registry then falls back to the
    generic provider for that capability only.
    """

    get_default_ports: Optional[GetDefaultPorts] = None
    get_default_node_props: Optional[GetDefaultNodeProps] = None


class NodeRegistry:
    """
    Maps every node type to its provider.

    Lookups for a type outside the closed set fail loudly: it means the
    caller asked for a node kind the canvas cannot render.
    """

    def __init__(self, *, port_config: Optional[PortConfig] = None) -> None:
        self.port_config = port_config or PortConfig()
        self._providers: Dict[str, NodeTypeProvider] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, node_type: NodeType, provider: NodeTypeProvider) -> None:
        if node_type not in NODE_TYPES:
            raise UnknownNodeTypeError(f"Unsupported node type {node_type!r}")
        self._providers[node_type] = provider

    def get(self, node_type: str) -> NodeTypeProvider:
        if node_type not in NODE_TYPES:
            raise UnknownNodeTypeError(
                f"Couldn't find the provider to use, using node_type={node_type!r}"
            )
        return self._providers.get(node_type, NodeTypeProvider())

    def all(self) -> List[str]:
        return list(self._providers.keys())

    # ------------------------------------------------------------------
    # Defaults resolution
    # ------------------------------------------------------------------

    def port(self, side: PortSide) -> Port:
        return create_port(
            side,
            alignment=self.port_config.alignment,
            size=self.port_config.radius,
        )

    def generic_ports(self) -> Tuple[Port, ...]:
        return (self.port("WEST"), self.port("EAST"))

    def get_default_ports(self, node_type: NodeType) -> Tuple[Port, ...]:
        provider = self.get(node_type)
        if provider.get_default_ports is not None:
            return tuple(provider.get_default_ports())
        return self.generic_ports()

    def get_default_node_props_with_fallback(self, node_type: NodeType) -> NodeDefaults:
        """
        Default props of `node_type`, or the generic ones when the type
        does not provide its own.
        """
        provider = self.get(node_type)
        if provider.get_default_node_props is not None:
            return provider.get_default_node_props(node_type)

        return NodeDefaults(
            type=node_type,
            base_width=GENERIC_BASE_WIDTH,
            base_height=GENERIC_BASE_HEIGHT,
            ports=self.get_default_ports(node_type),
        )

    # ------------------------------------------------------------------
    # Built-in types
    # ------------------------------------------------------------------

    @classmethod
    def default(cls, port_config: Optional[PortConfig] = None) -> "NodeRegistry":
        registry = cls(port_config=port_config)

        def start_ports() -> Tuple[Port, ...]:
            # Entry point: outbound only
            return (registry.port("EAST"),)

        def end_ports() -> Tuple[Port, ...]:
            return (registry.port("WEST"),)

        def sized(width: float, height: float, ports: GetDefaultPorts, **data):
            def _props(node_type: NodeType) -> NodeDefaults:
                return NodeDefaults(
                    type=node_type,
                    base_width=width,
                    base_height=height,
                    ports=ports(),
                    data=copy.deepcopy(data),
                )
            return _props

        registry.register(
            "start",
            NodeTypeProvider(
                get_default_ports=start_ports,
                get_default_node_props=sized(100.0, 100.0, start_ports),
            ),
        )
        registry.register(
            "information",
            NodeTypeProvider(get_default_ports=registry.generic_ports),
        )
        registry.register(
            "question",
            NodeTypeProvider(
                get_default_node_props=sized(
                    450.0,
                    250.0,
                    registry.generic_ports,
                    questionText=None,
                    variableName=None,
                    questionChoiceType="single-quick-reply",
                    questionChoices=[],
                ),
            ),
        )
        registry.register(
            "if",
            NodeTypeProvider(
                get_default_node_props=sized(250.0, 150.0, registry.generic_ports),
            ),
        )
        registry.register(
            "end",
            NodeTypeProvider(
                get_default_ports=end_ports,
                get_default_node_props=sized(100.0, 100.0, end_ports),
            ),
        )

        return registry

