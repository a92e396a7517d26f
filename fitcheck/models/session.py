"""Read-only session snapshot handed to UI collaborators."""

from pydantic import BaseModel, Field, computed_field

from .garment import Garment
from .outfit import OutfitLayer, SavedOutfit


class SessionView(BaseModel):
    """Everything a renderer needs, detached from the live session."""

    model_image: str | None = None
    display_image: str | None = None

    # Outfit
    visible_layers: list[OutfitLayer] = Field(default_factory=list)
    layer_index: int = 0
    history_length: int = 0

    # Poses
    pose_index: int = 0
    pose_instructions: list[str] = Field(default_factory=list)
    available_pose_keys: list[str] = Field(default_factory=list)

    # Collections
    wardrobe: list[Garment] = Field(default_factory=list)
    saved_outfits: list[SavedOutfit] = Field(default_factory=list)

    # Status
    is_loading: bool = False
    loading_message: str = ""
    error: str | None = None

    @computed_field
    @property
    def active_garment_ids(self) -> list[str]:
        """Ids of the garments currently worn."""
        return [layer.garment.id for layer in self.visible_layers if layer.garment]

    @computed_field
    @property
    def can_save(self) -> bool:
        return not self.is_loading and self.history_length > 1 and self.display_image is not None
