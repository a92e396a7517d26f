"""Pose instructions shared by the session core and the UI layer.

The order defines what a pose index means. Never reorder at runtime.
"""

POSE_INSTRUCTIONS: tuple[str, ...] = (
    "Full frontal view, hands on hips",
    "Slightly turned, 3/4 view",
    "Side profile view",
    "Jumping in the air, mid-action shot",
    "Walking towards camera",
    "Leaning against a wall",
)

DEFAULT_POSE_INDEX = 0
