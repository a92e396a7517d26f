"""Contract for the image generation collaborator."""

from typing import Protocol

from ..models import Garment


class ImageGenerator(Protocol):
    """Produces new outfit images. Implementations raise on failure."""

    async def generate_garment_application(self, base_image: str, garment: Garment) -> str:
        """Dress the person in ``base_image`` with ``garment``; return the new image reference."""
        ...

    async def generate_pose_variation(self, base_image: str, pose_instruction: str) -> str:
        """Re-render ``base_image`` under a new pose; return the new image reference."""
        ...
