"""Error types and user-facing messages."""


class GenerationError(RuntimeError):
    """An image generation call was rejected or failed."""


_UNSUPPORTED_FORMAT_MARKERS = (
    "unsupported mime type",
    "cannot identify image file",
    "unsupported image",
)


def friendly_error_message(error: BaseException, context: str) -> str:
    """Turn an exception into a short message the UI can show.

    Args:
        error: The exception raised by a generation call
        context: What the user was trying to do, e.g. "Failed to change pose"

    Returns:
        "<context>. <detail>"
    """
    detail = str(error).strip() or type(error).__name__
    lowered = detail.lower()
    if any(marker in lowered for marker in _UNSUPPORTED_FORMAT_MARKERS):
        detail = "The image format is not supported. Please use a PNG, JPEG, or WEBP image."
    return f"{context}. {detail}"
