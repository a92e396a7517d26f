"""FitCheck: layered virtual try-on sessions with pose caching and saved outfits."""

from .config import StudioConfig, load_config
from .errors import GenerationError
from .history import OutfitHistory
from .models import Garment, OutfitLayer, SavedOutfit, SessionView
from .poses import POSE_INSTRUCTIONS
from .session import SessionController
from .storage import SavedOutfitStore
from .wardrobe import WardrobeSet

__all__ = [
    "StudioConfig",
    "load_config",
    "GenerationError",
    "OutfitHistory",
    "Garment",
    "OutfitLayer",
    "SavedOutfit",
    "SessionView",
    "POSE_INSTRUCTIONS",
    "SessionController",
    "SavedOutfitStore",
    "WardrobeSet",
]
