"""
flowcanvas
==========

Graph mutation and consistency engine for a visual flow editor.

Core idea:
- Edits are described as mutations, never applied in place.

Public API:
- CanvasStore
- MutationQueue
- NodeRegistry
- FlowCanvasConfig
"""

from flowcanvas.config.settings import FlowCanvasConfig
from flowcanvas.graph.graph_store import CanvasStore
from flowcanvas.graph.node_registry import NodeRegistry
from flowcanvas.mutations.mutation_queue import MutationQueue

__all__ = [
    "CanvasStore",
    "MutationQueue",
    "NodeRegistry",
    "FlowCanvasConfig",
]

__version__ = "0.1.0"
