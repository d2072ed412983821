from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class PortConfig:
    """
    Geometry defaults applied to ports created by the node registry.
    """

    radius: float = 15.0
    alignment: str = "CENTER"


# ---------------------------------------------------------------------
# Connection policy
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ConnectionPolicyConfig:
    """
    Controls which prospective edges the connectivity gate accepts.

    Rules that are never configurable (missing endpoints, identical ports,
    duplicate node pairs, edges into the start node) are enforced
    regardless of these flags.
    """

    allow_multiple_inbound: bool = True
    allow_node_self_loop: bool = False


# ---------------------------------------------------------------------
# Mutation queue
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class MutationQueueConfig:
    """
    Controls when queued mutations become visible in the canvas store.
    """

    # Delay applied when the producer does not pass one
    default_delay_ms: float = 0.0

    # Delay used by interactions that emit several mutations at once
    coalesce_delay_ms: float = 0.0

    # Number of applied mutations kept in the store history
    history_limit: int = 1000


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class FlowCanvasConfig:
    """
    Root configuration object for flowcanvas.

    Constructed explicitly by the host and passed to the store, the queue
    and the connectivity gate. Never read from globals.
    """

    ports: PortConfig = field(default_factory=PortConfig)
    connections: ConnectionPolicyConfig = field(default_factory=ConnectionPolicyConfig)
    queue: MutationQueueConfig = field(default_factory=MutationQueueConfig)
    seed_start_node: bool = True
