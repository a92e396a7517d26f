"""Prompt templates for the two generation calls."""

from .models import Garment

GARMENT_PROMPT = (
    "Keep the exact same person from reference image 1: same face, hair, body shape, "
    "skin tone, pose, background and lighting. Replace only the clothing they are "
    "wearing in the relevant area with the {garment_name} shown in reference image 2. "
    "Keep every other garment unchanged. The {garment_name} must match reference image 2 "
    "exactly in color, pattern, fabric texture and details, and fit naturally on the body "
    "with realistic folds and shadows. Photorealistic fashion photograph."
)

POSE_PROMPT = (
    "Keep the exact same person, outfit, hairstyle and background style from the reference "
    "image. Do not change any clothing. Regenerate the photograph from a new perspective: "
    "{pose_instruction}. Photorealistic fashion photograph, full body in frame."
)


def garment_prompt(garment: Garment) -> str:
    return GARMENT_PROMPT.format(garment_name=garment.name.strip() or "garment")


def pose_prompt(pose_instruction: str) -> str:
    return POSE_PROMPT.format(pose_instruction=pose_instruction.rstrip(". "))
