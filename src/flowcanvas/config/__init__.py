"""
Configuration layer for flowcanvas.

Configuration is:
- Explicit (passed, not global)
- Typed (frozen dataclasses)
- Layered by the host application (see backend/app/config.py)
"""

from flowcanvas.config.settings import (
    PortConfig,
    ConnectionPolicyConfig,
    MutationQueueConfig,
    FlowCanvasConfig,
)

__all__ = [
    "PortConfig",
    "ConnectionPolicyConfig",
    "MutationQueueConfig",
    "FlowCanvasConfig",
]
