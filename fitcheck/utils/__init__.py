"""Utility helpers."""

from .images import check_image_reference, decode_data_url, encode_data_url, load_image_bytes, to_png

__all__ = [
    "check_image_reference",
    "decode_data_url",
    "encode_data_url",
    "load_image_bytes",
    "to_png",
]
