"""Saved outfit snapshots, most recent first."""

import logging
import uuid

from pydantic import TypeAdapter, ValidationError

from ..history import OutfitHistory
from ..models import SavedOutfit
from .backends import KeyValueStorage

logger = logging.getLogger(__name__)

SAVED_OUTFITS_KEY = "fitcheck-saved-outfits"

_outfit_list = TypeAdapter(list[SavedOutfit])


class SavedOutfitStore:
    """Durable list of immutable outfit snapshots.

    Every mutation rewrites the whole list under a single key. Consumers must
    keep the most-recent-first order; the store never re-sorts.
    """

    def __init__(self, storage: KeyValueStorage, key: str = SAVED_OUTFITS_KEY):
        self.storage = storage
        self.key = key
        self._outfits: list[SavedOutfit] = self._read()

    def _read(self) -> list[SavedOutfit]:
        """Load the persisted list; anything unreadable counts as empty."""
        try:
            raw = self.storage.read_list(self.key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read saved outfits (%s), starting empty", e)
            return []
        if not raw:
            return []
        try:
            return _outfit_list.validate_json(raw)
        except ValidationError as e:
            logger.warning("Saved outfits under %r are malformed, starting empty: %s", self.key, e.error_count())
            return []

    def _write(self) -> None:
        payload = _outfit_list.dump_json(self._outfits).decode("utf-8")
        try:
            self.storage.write_list(self.key, payload)
        except OSError as e:
            logger.error("Failed to persist %d saved outfit(s): %s", len(self._outfits), e)

    @property
    def outfits(self) -> list[SavedOutfit]:
        """Detached copies; edits never reach the stored snapshots."""
        return [o.detached_copy() for o in self._outfits]

    def __len__(self) -> int:
        return len(self._outfits)

    def get(self, outfit_id: str) -> SavedOutfit | None:
        outfit = next((o for o in self._outfits if o.id == outfit_id), None)
        return outfit.detached_copy() if outfit is not None else None

    def save(self, display_image: str, history: OutfitHistory) -> SavedOutfit | None:
        """Snapshot the history and prepend it.

        Args:
            display_image: Image shown when saving, used as the preview
            history: Live history; its layers are value-copied

        Returns:
            The new snapshot, or None when there is nothing but the base layer
        """
        if len(history) <= 1:
            return None

        outfit = SavedOutfit(
            id=f"saved-{uuid.uuid4().hex[:12]}",
            preview_url=display_image,
            layers=history.copy_layers(),
            pose_index=history.pose_index,
            layer_index=history.layer_index,
        )
        self._outfits.insert(0, outfit)
        self._write()
        logger.info("Saved outfit %s (%d layers)", outfit.id, len(outfit.layers))
        return outfit.detached_copy()

    def delete(self, outfit_id: str) -> bool:
        """Remove a snapshot by id. Unknown ids are ignored."""
        remaining = [o for o in self._outfits if o.id != outfit_id]
        if len(remaining) == len(self._outfits):
            return False
        self._outfits = remaining
        self._write()
        return True
