"""ComfyUI API client for FLUX 2 Klein garment and pose generation."""

import asyncio
import logging
import random
import time
import uuid
from typing import Any

import httpx

from ..config import ComfyUIConfig, GenerationConfig
from ..errors import GenerationError
from ..models import Garment
from ..prompts import garment_prompt, pose_prompt
from ..utils.images import encode_data_url, load_image_bytes

logger = logging.getLogger(__name__)


class ComfyUIClient:
    """Client for ComfyUI's API using a reference-conditioned FLUX 2 Klein workflow.

    Garment application conditions on two references (person, garment); pose
    variation conditions on the person alone. Results come back as PNG data
    URLs so the session can cache them without touching the filesystem.
    """

    def __init__(
        self,
        config: ComfyUIConfig,
        generation: GenerationConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.generation = generation or GenerationConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)
        return self._client

    async def check_connection(self) -> bool:
        """Verify ComfyUI is running and accessible."""
        try:
            response = await self.client.get(f"{self.config.base_url}/system_stats")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def generate_garment_application(self, base_image: str, garment: Garment) -> str:
        """Put ``garment`` on the person shown in ``base_image``."""
        logger.info("Generating garment application: %s", garment.id)
        return await self._generate(
            references=[base_image, garment.url],
            prompt=garment_prompt(garment),
        )

    async def generate_pose_variation(self, base_image: str, pose_instruction: str) -> str:
        """Re-render ``base_image`` under ``pose_instruction``."""
        logger.info("Generating pose variation: %s", pose_instruction)
        return await self._generate(
            references=[base_image],
            prompt=pose_prompt(pose_instruction),
        )

    async def _generate(self, references: list[str], prompt: str) -> str:
        """Upload references, run the workflow, and return the first output image."""
        started = time.monotonic()
        try:
            filenames = [
                await self._upload_image(await load_image_bytes(ref, self.client))
                for ref in references
            ]

            seed = self.generation.seed if self.generation.seed is not None else self._random_seed()
            workflow = self._build_workflow(filenames, prompt, seed)

            prompt_id = await self._queue_prompt(workflow)
            output_images = await self._wait_for_completion(prompt_id)
            if not output_images:
                raise GenerationError("No images generated")

            image_data = await self._get_image(output_images[0])
        except httpx.HTTPError as e:
            raise GenerationError(f"ComfyUI request failed: {e}") from e
        except TimeoutError as e:
            raise GenerationError(str(e)) from e

        logger.info("Generation finished in %.1fs", time.monotonic() - started)
        return encode_data_url(image_data, "image/png")

    async def _upload_image(self, image_bytes: bytes) -> str:
        """Upload an image to ComfyUI's input folder.

        Returns the name to use in a LoadImage node.
        """
        name = f"fitcheck_{uuid.uuid4().hex[:8]}.png"
        response = await self.client.post(
            f"{self.config.base_url}/upload/image",
            files={"image": (name, image_bytes, "image/png")},
            data={"overwrite": "true"},
        )
        if response.status_code != 200:
            raise GenerationError(f"ComfyUI rejected upload: {response.text[:500]}")

        info = response.json()
        subfolder = info.get("subfolder") or ""
        return f"{subfolder}/{info['name']}" if subfolder else info["name"]

    def _build_workflow(
        self,
        reference_filenames: list[str],
        prompt: str,
        seed: int,
    ) -> dict[str, Any]:
        """Build the FLUX 2 Klein 9B workflow.

        Each reference image is loaded, scaled, VAE-encoded, and chained onto
        both the positive and the zeroed negative conditioning through
        ReferenceLatent nodes. Output size follows the first reference.
        """
        if not reference_filenames:
            raise ValueError("At least one reference image is required")

        workflow: dict[str, Any] = {
            # Models
            "110": {
                "class_type": "UNETLoader",
                "inputs": {
                    "unet_name": "flux-2-klein-9b-fp8.safetensors",
                    "weight_dtype": "default",
                },
            },
            "111": {
                "class_type": "CLIPLoader",
                "inputs": {
                    "clip_name": "qwen_3_8b_fp8mixed.safetensors",
                    "type": "flux2",
                    "device": "default",
                },
            },
            "113": {
                "class_type": "VAELoader",
                "inputs": {"vae_name": "flux2-vae.safetensors"},
            },
            # Text encode positive prompt
            "112": {
                "class_type": "CLIPTextEncode",
                "inputs": {"clip": ["111", 0], "text": prompt},
            },
            # Zero out conditioning for negative
            "118": {
                "class_type": "ConditioningZeroOut",
                "inputs": {"conditioning": ["112", 0]},
            },
        }

        positive: list[Any] = ["112", 0]
        negative: list[Any] = ["118", 0]
        for i, filename in enumerate(reference_filenames):
            load, scale, encode = f"ref{i}_load", f"ref{i}_scale", f"ref{i}_encode"
            workflow[load] = {
                "class_type": "LoadImage",
                "inputs": {"image": filename},
            }
            workflow[scale] = {
                "class_type": "ImageScaleToTotalPixels",
                "inputs": {
                    "image": [load, 0],
                    "upscale_method": "nearest-exact",
                    "megapixels": self.generation.megapixels,
                    "resolution_steps": 1,
                },
            }
            workflow[encode] = {
                "class_type": "VAEEncode",
                "inputs": {"pixels": [scale, 0], "vae": ["113", 0]},
            }
            workflow[f"ref{i}_positive"] = {
                "class_type": "ReferenceLatent",
                "inputs": {"conditioning": positive, "latent": [encode, 0]},
            }
            workflow[f"ref{i}_negative"] = {
                "class_type": "ReferenceLatent",
                "inputs": {"conditioning": negative, "latent": [encode, 0]},
            }
            positive = [f"ref{i}_positive", 0]
            negative = [f"ref{i}_negative", 0]

        workflow.update({
            # Output size from the person image
            "120": {
                "class_type": "GetImageSize",
                "inputs": {"image": ["ref0_scale", 0]},
            },
            "119": {
                "class_type": "EmptyFlux2LatentImage",
                "inputs": {"width": ["120", 0], "height": ["120", 1], "batch_size": 1},
            },
            "109": {
                "class_type": "RandomNoise",
                "inputs": {"noise_seed": seed},
            },
            "104": {
                "class_type": "KSamplerSelect",
                "inputs": {"sampler_name": "euler"},
            },
            "105": {
                "class_type": "Flux2Scheduler",
                "inputs": {
                    "steps": self.generation.steps,
                    "width": ["120", 0],
                    "height": ["120", 1],
                },
            },
            "106": {
                "class_type": "CFGGuider",
                "inputs": {
                    "model": ["110", 0],
                    "positive": positive,
                    "negative": negative,
                    "cfg": self.generation.cfg,
                },
            },
            "107": {
                "class_type": "SamplerCustomAdvanced",
                "inputs": {
                    "noise": ["109", 0],
                    "guider": ["106", 0],
                    "sampler": ["104", 0],
                    "sigmas": ["105", 0],
                    "latent_image": ["119", 0],
                },
            },
            "108": {
                "class_type": "VAEDecode",
                "inputs": {"samples": ["107", 0], "vae": ["113", 0]},
            },
            "save": {
                "class_type": "SaveImage",
                "inputs": {"images": ["108", 0], "filename_prefix": "fitcheck_output"},
            },
        })
        return workflow

    async def _queue_prompt(self, workflow: dict[str, Any]) -> str:
        """Queue a prompt and return the prompt ID."""
        payload = {
            "prompt": workflow,
            "client_id": str(uuid.uuid4()),
        }

        response = await self.client.post(
            f"{self.config.base_url}/prompt",
            json=payload,
        )

        if response.status_code != 200:
            raise GenerationError(f"ComfyUI rejected workflow: {response.text[:500]}")

        return response.json()["prompt_id"]

    async def _wait_for_completion(self, prompt_id: str) -> list[dict[str, Any]]:
        """Poll until the prompt completes, return output image info."""
        deadline = time.monotonic() + self.config.timeout

        while time.monotonic() < deadline:
            response = await self.client.get(f"{self.config.base_url}/history/{prompt_id}")

            if response.status_code == 200:
                history = response.json()
                if prompt_id in history:
                    entry = history[prompt_id]
                    status = entry.get("status") or {}
                    if status.get("status_str") == "error":
                        raise GenerationError(f"ComfyUI execution failed for prompt {prompt_id}")
                    # Find SaveImage node outputs
                    for node_output in entry.get("outputs", {}).values():
                        if "images" in node_output:
                            return node_output["images"]

            await asyncio.sleep(self.config.poll_interval)

        raise TimeoutError(f"Generation timed out after {self.config.timeout}s")

    async def _get_image(self, image_info: dict[str, Any]) -> bytes:
        """Retrieve a generated image from ComfyUI."""
        params = {
            "filename": image_info["filename"],
            "subfolder": image_info.get("subfolder", ""),
            "type": image_info.get("type", "output"),
        }

        response = await self.client.get(
            f"{self.config.base_url}/view",
            params=params,
        )
        response.raise_for_status()

        return response.content

    def _random_seed(self) -> int:
        """Generate a random seed."""
        return random.randint(0, 2**32 - 1)

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
