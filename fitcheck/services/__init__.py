"""External services for the FitCheck studio."""

from .comfyui_client import ComfyUIClient
from .generator import ImageGenerator

__all__ = [
    "ComfyUIClient",
    "ImageGenerator",
]
