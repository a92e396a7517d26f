"""Interactive try-on session: outfit history, pose cache, saved outfits."""

import logging

from .history import OutfitHistory
from .errors import friendly_error_message
from .models import Garment, SavedOutfit, SessionView
from .poses import POSE_INSTRUCTIONS, DEFAULT_POSE_INDEX
from .services.generator import ImageGenerator
from .storage import SavedOutfitStore
from .wardrobe import WardrobeSet

logger = logging.getLogger(__name__)


class SessionController:
    """Orchestrates one user's outfit session against the image generator.

    Only one generation call may be in flight at a time. Requests that arrive
    while it is pending are dropped, not queued. A failed call leaves the
    history exactly as it was (apart from undoing the optimistic pose move)
    and reports a message through ``error``.
    """

    def __init__(
        self,
        generator: ImageGenerator,
        saved_outfits: SavedOutfitStore,
        wardrobe: WardrobeSet | None = None,
    ):
        self.generator = generator
        self.saved_outfits = saved_outfits
        self.wardrobe = wardrobe if wardrobe is not None else WardrobeSet()

        self.model_image: str | None = None
        self.history: OutfitHistory | None = None

        self.is_loading = False
        self.loading_message = ""
        self.error: str | None = None

    # -- derived state ----------------------------------------------------

    @property
    def display_image(self) -> str | None:
        if self.history is None:
            return self.model_image
        return self.history.display_image

    @property
    def layer_index(self) -> int:
        return self.history.layer_index if self.history else 0

    @property
    def pose_index(self) -> int:
        return self.history.pose_index if self.history else DEFAULT_POSE_INDEX

    def view(self) -> SessionView:
        """Read-only snapshot for renderers."""
        history = self.history
        return SessionView(
            model_image=self.model_image,
            display_image=self.display_image,
            visible_layers=[layer.copy_layer() for layer in history.visible_layers()] if history else [],
            layer_index=self.layer_index,
            history_length=len(history) if history else 0,
            pose_index=self.pose_index,
            pose_instructions=list(POSE_INSTRUCTIONS),
            available_pose_keys=history.cached_pose_keys if history else [],
            wardrobe=self.wardrobe.items,
            saved_outfits=self.saved_outfits.outfits,
            is_loading=self.is_loading,
            loading_message=self.loading_message,
            error=self.error,
        )

    # -- lifecycle --------------------------------------------------------

    def finalize_model(self, model_image: str) -> None:
        """Start a fresh outfit on a finalized model image."""
        self.model_image = model_image
        self.history = OutfitHistory.start(model_image)
        self.error = None
        logger.info("Model finalized, outfit history started")

    def start_over(self) -> None:
        """Forget the model, the outfit, and session-only wardrobe items.

        A call still in flight keeps the gate until it settles; its result
        lands in the discarded history.
        """
        self.model_image = None
        self.history = None
        self.loading_message = ""
        self.error = None
        self.wardrobe.reset()

    # -- garments ---------------------------------------------------------

    async def apply_garment(self, garment: Garment) -> tuple[int, int]:
        """Put a garment on top of the current outfit.

        Reuses the retained next layer when it already wears this garment;
        otherwise generates a new layer and drops the retained tail.

        Args:
            garment: The garment to apply

        Returns:
            The resulting (layer_index, pose_index); unchanged when the
            request is ignored or the generation call fails
        """
        history = self.history
        base_image = self.display_image
        if history is None or base_image is None or self.is_loading:
            return self.layer_index, self.pose_index

        if history.can_reuse(garment):
            return history.advance()

        # Pending results commit into the history, layer and pose captured here
        parent_index = history.layer_index
        active_pose = history.active_pose
        self.error = None
        self.is_loading = True
        self.loading_message = f"Adding {garment.name}..."
        try:
            new_image = await self.generator.generate_garment_application(base_image, garment)
        except Exception as e:
            logger.warning("Garment application failed for %s: %s", garment.id, e)
            self.error = friendly_error_message(e, "Failed to apply garment")
            return history.pointers
        finally:
            self.is_loading = False
            self.loading_message = ""

        pointers = history.branch(garment, new_image, active_pose, parent_index=parent_index)
        if history is not self.history:
            # Session was reset or replaced while generating
            logger.debug("Dropping late result for %s from a discarded outfit", garment.id)
            return pointers
        if self.wardrobe.add(garment):
            logger.debug("Added %s to wardrobe", garment.id)
        return pointers

    def remove_last_garment(self) -> tuple[int, int]:
        """Step back to the previous layer, keeping the current one for reuse."""
        if self.history is None:
            return 0, DEFAULT_POSE_INDEX
        return self.history.remove_last_garment()

    # -- poses ------------------------------------------------------------

    async def select_pose(self, pose_index: int) -> int:
        """Show the current outfit in another pose.

        A cached pose is a pointer move. An uncached one moves the pointer
        optimistically, generates the image from the layer's first cached
        pose, and restores the previous pointer if generation fails.

        Returns:
            The resulting pose index
        """
        history = self.history
        if (
            self.is_loading
            or history is None
            or pose_index == history.pose_index
            or not 0 <= pose_index < len(history.poses)
        ):
            return self.pose_index

        if history.is_pose_cached(pose_index):
            history.pose_index = pose_index
            return pose_index

        layer = history.current_layer
        reference = layer.reference_image()
        if reference is None:
            return history.pose_index

        pose_instruction = history.poses[pose_index]
        previous_pose_index = history.pose_index

        self.error = None
        self.is_loading = True
        self.loading_message = "Changing pose..."
        history.pose_index = pose_index
        try:
            new_image = await self.generator.generate_pose_variation(reference, pose_instruction)
        except Exception as e:
            logger.warning("Pose variation failed for %r: %s", pose_instruction, e)
            self.error = friendly_error_message(e, "Failed to change pose")
            history.pose_index = previous_pose_index
            return previous_pose_index
        finally:
            self.is_loading = False
            self.loading_message = ""

        layer.add_pose(pose_instruction, new_image)
        return history.pose_index

    # -- saved outfits ----------------------------------------------------

    def save_outfit(self) -> SavedOutfit | None:
        """Snapshot the current outfit into the saved list."""
        display_image = self.display_image
        if self.history is None or display_image is None or self.is_loading:
            return None
        return self.saved_outfits.save(display_image, self.history)

    def load_outfit(self, outfit_id: str) -> bool:
        """Replace the live outfit with a saved one. Unknown ids are ignored."""
        outfit = self.saved_outfits.get(outfit_id)
        if outfit is None:
            return False

        layers = [layer.copy_layer() for layer in outfit.layers]
        layer_index = min(outfit.layer_index, len(layers) - 1)
        pose_index = min(outfit.pose_index, len(POSE_INSTRUCTIONS) - 1)
        try:
            history = OutfitHistory(layers, layer_index=layer_index, pose_index=pose_index)
        except ValueError as e:
            logger.warning("Saved outfit %s is malformed, ignoring: %s", outfit_id, e)
            return False

        self.history = history
        self.model_image = layers[0].image_for(POSE_INSTRUCTIONS[DEFAULT_POSE_INDEX]) or layers[0].reference_image()
        self.error = None
        logger.info("Loaded saved outfit %s", outfit_id)
        return True

    def delete_outfit(self, outfit_id: str) -> bool:
        return self.saved_outfits.delete(outfit_id)
