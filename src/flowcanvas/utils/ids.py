from __future__ import annotations

from uuid import uuid1


def new_id() -> str:
    """
    Time-ordered unique identifier (UUID v1).

    Ids sort roughly by creation time, which keeps mutation logs readable.
    """
    return str(uuid1())
