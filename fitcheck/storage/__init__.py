"""Persistence for saved outfits."""

from .backends import KeyValueStorage, MemoryStorage, JsonFileStorage
from .saved_outfits import SavedOutfitStore, SAVED_OUTFITS_KEY

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "SavedOutfitStore",
    "SAVED_OUTFITS_KEY",
]
