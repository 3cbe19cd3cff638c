"""Owner propagation pipeline modules."""

from .propagation_stack import OwnerPropagationStack

__all__ = [
    "OwnerPropagationStack",
]
