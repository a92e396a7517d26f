"""Data models for the FitCheck studio."""

from .garment import Garment
from .outfit import OutfitLayer, SavedOutfit
from .session import SessionView

__all__ = [
    "Garment",
    "OutfitLayer",
    "SavedOutfit",
    "SessionView",
]
