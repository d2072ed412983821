"""
Errors raised by flowcanvas.

Only programmer errors are raised: lookup misses degrade silently and
policy rejections are returned as values.
"""


class FlowCanvasError(Exception):
    pass


class InvariantViolation(FlowCanvasError):
    """
    A caller tried to put the canvas into a state it must never reach.
    """


class DuplicateElementError(InvariantViolation):
    pass


class ReadOnlyViewError(InvariantViolation):
    pass


class UnknownNodeTypeError(FlowCanvasError):
    pass
