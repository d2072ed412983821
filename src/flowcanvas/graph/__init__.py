"""
Graph subsystem for flowcanvas.

Defines the canvas model and the engine that keeps it consistent:
- entity factory and node-type registry
- port resolution
- reachability and connectivity checks
- pure edit algorithms producing mutations
- the canonical canvas store
"""

from flowcanvas.graph.graph_schema import Node, Port, Edge, CanvasDataset, NodeDefaults
from flowcanvas.graph.graph_store import CanvasStore
from flowcanvas.graph.node_registry import NodeRegistry, NodeTypeProvider
from flowcanvas.graph.graph_query import ValidationResult
from flowcanvas.graph.graph_mutator import AddNodeAndEdgeResult
from flowcanvas.graph.variables import Variable, VariablesView

__all__ = [
    "Node",
    "Port",
    "Edge",
    "CanvasDataset",
    "NodeDefaults",
    "CanvasStore",
    "NodeRegistry",
    "NodeTypeProvider",
    "ValidationResult",
    "AddNodeAndEdgeResult",
    "Variable",
    "VariablesView",
]
