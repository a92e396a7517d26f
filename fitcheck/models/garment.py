"""Garment models."""

from pydantic import BaseModel, ConfigDict, Field


class Garment(BaseModel):
    """A wearable item the user can put on the model.

    Garments are referenced by the session, never owned: two garments with
    the same ``id`` are the same item as far as the outfit history cares.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Stable unique identifier")
    name: str = Field(description="e.g., 'Cream crewneck sweatshirt'")
    url: str = Field(description="Source image reference (data URL, path, or http URL)")
