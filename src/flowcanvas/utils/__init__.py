"""
Utility functions for flowcanvas.

This module contains low-level helpers used across the system.
No graph logic should live here.
"""

from flowcanvas.utils.helpers import deep_merge, deep_clone, utc_now
from flowcanvas.utils.ids import new_id

__all__ = [
    "deep_merge",
    "deep_clone",
    "utc_now",
    "new_id",
]
