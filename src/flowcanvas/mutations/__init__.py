"""
Mutation subsystem for flowcanvas.

Edits are never applied to the canvas directly: producers describe them
as mutations, the queue orders and delays them, and the canvas store
folds them into its snapshot.
"""

from flowcanvas.mutations.mutation_schema import (
    Mutation,
    NewMutation,
    ElementType,
    OperationType,
    MutationStatus,
)
from flowcanvas.mutations.mutation_queue import MutationQueue

__all__ = [
    "Mutation",
    "NewMutation",
    "ElementType",
    "OperationType",
    "MutationStatus",
    "MutationQueue",
]
