"""Configuration management for the FitCheck studio."""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ComfyUIConfig(BaseModel):
    """ComfyUI connection settings."""
    host: str = "127.0.0.1"
    port: int = 8188
    timeout: float = 300.0  # generation can take minutes on consumer GPUs
    poll_interval: float = 0.5

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class GenerationConfig(BaseModel):
    """Image generation settings."""
    steps: int = 4  # distilled model
    cfg: float = 1.0
    seed: int | None = None  # None = random
    megapixels: float = 1.0


class StudioConfig(BaseSettings):
    """Main studio configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FITCHECK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Saved outfits
    storage_dir: Path = Path("output/saved")
    saved_outfits_key: str = "fitcheck-saved-outfits"

    # Hosts the API may fetch garment and model images from (https only)
    allowed_image_hosts: list[str] = Field(default_factory=lambda: ["storage.googleapis.com"])

    # Sub-configs
    comfyui: ComfyUIConfig = Field(default_factory=ComfyUIConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    log_level: str = "INFO"


def load_config() -> StudioConfig:
    """Load configuration from environment and defaults."""
    return StudioConfig()
