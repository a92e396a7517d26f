"""Outfit history: an arena of layers addressed by a layer pointer.

Layers after ``layer_index`` are kept around so that putting the same garment
back on is a pointer move instead of a new generation call. Layer objects are
shared by reference between every pointer position that reaches them, so a
pose generated once is visible from every path back to that layer.
"""

import logging
from typing import Sequence

from .models import Garment, OutfitLayer
from .poses import POSE_INSTRUCTIONS, DEFAULT_POSE_INDEX

logger = logging.getLogger(__name__)


class OutfitHistory:
    """Ordered layers plus the layer and pose pointers."""

    def __init__(
        self,
        layers: Sequence[OutfitLayer],
        layer_index: int = 0,
        pose_index: int = DEFAULT_POSE_INDEX,
        poses: Sequence[str] = POSE_INSTRUCTIONS,
    ):
        if not layers:
            raise ValueError("An outfit history needs at least the base layer")
        if not layers[0].is_base:
            raise ValueError("The first layer must be the base model")
        if any(layer.is_base for layer in layers[1:]):
            raise ValueError("Only the first layer may be the base model")

        self.poses = tuple(poses)
        self._layers = list(layers)
        self._layer_index = 0
        self._pose_index = DEFAULT_POSE_INDEX
        self.layer_index = layer_index
        self.pose_index = pose_index

    @classmethod
    def start(cls, model_image: str, poses: Sequence[str] = POSE_INSTRUCTIONS) -> "OutfitHistory":
        """Create a history holding only the base model, cached under the first pose."""
        base = OutfitLayer(garment=None, pose_images={poses[DEFAULT_POSE_INDEX]: model_image})
        return cls([base], poses=poses)

    # -- pointers ---------------------------------------------------------

    @property
    def layer_index(self) -> int:
        return self._layer_index

    @layer_index.setter
    def layer_index(self, value: int) -> None:
        if not 0 <= value < len(self._layers):
            raise ValueError(f"Layer index {value} out of range [0, {len(self._layers) - 1}]")
        self._layer_index = value

    @property
    def pose_index(self) -> int:
        return self._pose_index

    @pose_index.setter
    def pose_index(self, value: int) -> None:
        if not 0 <= value < len(self.poses):
            raise ValueError(f"Pose index {value} out of range [0, {len(self.poses) - 1}]")
        self._pose_index = value

    @property
    def active_pose(self) -> str:
        return self.poses[self._pose_index]

    # -- layers -----------------------------------------------------------

    @property
    def layers(self) -> tuple[OutfitLayer, ...]:
        """Every layer in the arena, including the retained tail."""
        return tuple(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    @property
    def current_layer(self) -> OutfitLayer:
        return self._layers[self._layer_index]

    def next_layer(self) -> OutfitLayer | None:
        """The retained layer right after the pointer, if any."""
        index = self._layer_index + 1
        return self._layers[index] if index < len(self._layers) else None

    def visible_layers(self) -> list[OutfitLayer]:
        """Layers that make up the outfit currently on screen."""
        return self._layers[: self._layer_index + 1]

    def active_garment_ids(self) -> list[str]:
        return [layer.garment.id for layer in self.visible_layers() if layer.garment]

    @property
    def display_image(self) -> str:
        """Image for the active pose, else the layer's first cached pose."""
        layer = self.current_layer
        image = layer.image_for(self.active_pose)
        if image is None:
            image = layer.reference_image()
        return image  # type: ignore[return-value]

    @property
    def cached_pose_keys(self) -> list[str]:
        return self.current_layer.cached_poses

    def is_pose_cached(self, pose_index: int) -> bool:
        return self.current_layer.image_for(self.poses[pose_index]) is not None

    # -- timeline moves ---------------------------------------------------

    def can_reuse(self, garment: Garment) -> bool:
        """Whether the next retained layer already wears this garment."""
        nxt = self.next_layer()
        return nxt is not None and nxt.garment_id == garment.id

    def advance(self) -> tuple[int, int]:
        """Step onto the retained next layer (redo by reuse)."""
        if self.next_layer() is None:
            raise IndexError("No retained layer after the current pointer")
        self._layer_index += 1
        self._pose_index = DEFAULT_POSE_INDEX
        logger.debug("Reused layer %d (%s)", self._layer_index, self.current_layer.garment_id)
        return self.pointers

    def branch(
        self,
        garment: Garment,
        image: str,
        pose: str,
        parent_index: int | None = None,
    ) -> tuple[int, int]:
        """Drop the retained tail and append a freshly generated layer.

        Args:
            garment: The garment that was applied
            image: Generated image of the outfit with the garment
            pose: Pose instruction the image was generated under
            parent_index: Layer the image was generated from; defaults to
                the current pointer

        Returns:
            The new (layer_index, pose_index)
        """
        parent = self._layer_index if parent_index is None else parent_index
        if not 0 <= parent < len(self._layers):
            raise ValueError(f"Parent layer {parent} out of range")
        discarded = len(self._layers) - parent - 1
        del self._layers[parent + 1 :]
        self._layers.append(OutfitLayer(garment=garment, pose_images={pose: image}))
        self._layer_index = len(self._layers) - 1
        self._pose_index = DEFAULT_POSE_INDEX
        if discarded:
            logger.info("Branched at layer %d, discarded %d retained layer(s)", parent, discarded)
        return self.pointers

    def remove_last_garment(self) -> tuple[int, int]:
        """Step back one layer. The layer left behind stays in the arena."""
        if self._layer_index > 0:
            self._layer_index -= 1
            self._pose_index = DEFAULT_POSE_INDEX
        return self.pointers

    @property
    def pointers(self) -> tuple[int, int]:
        return self._layer_index, self._pose_index

    # -- snapshots --------------------------------------------------------

    def copy_layers(self) -> list[OutfitLayer]:
        """Value copy of every layer: new list, new pose maps, shared images."""
        return [layer.copy_layer() for layer in self._layers]
