"""Re-export the turn provider interface and the normalized model turn shared by all providers."""

from .base import TurnProvider, ModelTurn

__all__ = [
    "TurnProvider",
    "ModelTurn",
]
