"""Outfit layer and saved outfit models."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .garment import Garment


class OutfitLayer(BaseModel):
    """One step of the outfit timeline plus its pose-image cache.

    ``garment`` is ``None`` only for the base model layer. The garment never
    changes after creation; the only mutation a layer accepts is a new entry
    in ``pose_images``.
    """

    garment: Garment | None = Field(default=None, frozen=True)
    pose_images: dict[str, str] = Field(min_length=1)

    @property
    def is_base(self) -> bool:
        return self.garment is None

    @property
    def garment_id(self) -> str | None:
        return self.garment.id if self.garment else None

    @property
    def cached_poses(self) -> list[str]:
        """Pose instructions with a generated image, in insertion order."""
        return list(self.pose_images)

    def image_for(self, pose: str) -> str | None:
        return self.pose_images.get(pose)

    def reference_image(self) -> str | None:
        """First cached image, used as the base for new pose variations."""
        return next(iter(self.pose_images.values()), None)

    def add_pose(self, pose: str, image: str) -> None:
        """Cache a generated image for a pose on this layer."""
        self.pose_images[pose] = image

    def copy_layer(self) -> "OutfitLayer":
        """Value copy: a fresh pose map that shares garment and image refs."""
        return OutfitLayer(garment=self.garment, pose_images=dict(self.pose_images))


class SavedOutfit(BaseModel):
    """Immutable snapshot of a whole outfit history and its pointers."""

    model_config = ConfigDict(frozen=True)

    id: str
    preview_url: str
    layers: list[OutfitLayer] = Field(min_length=1)
    pose_index: int = Field(ge=0)
    layer_index: int = Field(ge=0)
    saved_at: datetime = Field(default_factory=datetime.now)

    def detached_copy(self) -> "SavedOutfit":
        """Copy whose layer list and pose maps can be edited without touching this one."""
        return self.model_copy(update={"layers": [layer.copy_layer() for layer in self.layers]})

    @computed_field
    @property
    def garment_names(self) -> list[str]:
        """Names of the garments worn in the saved look."""
        visible = self.layers[: self.layer_index + 1]
        return [layer.garment.name for layer in visible if layer.garment]
