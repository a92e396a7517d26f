"""Helpers for moving images between references and bytes."""

import base64
import io
from pathlib import Path
from typing import Sequence
from urllib.parse import urlsplit

import httpx
from PIL import Image, UnidentifiedImageError

from ..errors import GenerationError

# Browser-like headers help with hotlink protection on garment URLs
_FETCH_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


def is_data_url(reference: str) -> bool:
    return reference.startswith("data:")


def decode_data_url(data: str) -> bytes:
    """Decode a base64 data URL (or bare base64) into raw bytes."""
    if is_data_url(data):
        # Remove data URL prefix (e.g., "data:image/png;base64,")
        _, encoded = data.split(",", 1)
        return base64.b64decode(encoded)
    return base64.b64decode(data)


def encode_data_url(image_bytes: bytes, mime_type: str = "image/png") -> str:
    b64 = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{b64}"


def check_image_reference(reference: str, allowed_hosts: Sequence[str]) -> None:
    """Reject references a remote caller may not point the server at.

    Data URLs always pass. Anything else must be an https URL on one of
    ``allowed_hosts``; local paths and other hosts raise ValueError.
    """
    if is_data_url(reference):
        return
    parsed = urlsplit(reference)
    hosts = {host.lower() for host in allowed_hosts}
    if parsed.scheme != "https" or parsed.hostname not in hosts:
        raise ValueError(f"Image reference not allowed: {reference[:80]}")


def to_png(raw_bytes: bytes) -> bytes:
    """Re-encode any Pillow-readable image as PNG."""
    try:
        img = Image.open(io.BytesIO(raw_bytes))
        # Convert to RGB if needed (e.g., RGBA, P mode)
        if img.mode in ("RGBA", "P", "LA", "CMYK"):
            img = img.convert("RGB")
        output = io.BytesIO()
        img.save(output, format="PNG")
        return output.getvalue()
    except UnidentifiedImageError as e:
        raise GenerationError(f"Unsupported image: {e}") from e


async def load_image_bytes(reference: str, client: httpx.AsyncClient) -> bytes:
    """Resolve an image reference to PNG bytes.

    Args:
        reference: data URL, http(s) URL, or local file path
        client: HTTP client used for remote references

    Returns:
        PNG-encoded image bytes
    """
    if is_data_url(reference):
        try:
            raw = decode_data_url(reference)
        except ValueError as e:
            raise GenerationError(f"Malformed data URL: {e}") from e
    elif reference.startswith(("http://", "https://")):
        try:
            response = await client.get(reference, headers=_FETCH_HEADERS, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise GenerationError(f"Could not download image {reference}: {e}") from e
        raw = response.content
    else:
        path = Path(reference)
        if not path.exists():
            raise GenerationError(f"Image not found: {reference}")
        raw = path.read_bytes()
    return to_png(raw)
