"""Edit and submission gating for content items.

The script body is editable only while nothing has been derived from it.
Once audio, images or a video exist, edits would silently desynchronize the
narration from the text, so the gate closes.
"""

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from clipforge.core.exceptions import SubmissionRejected
from clipforge.core.logging import get_logger
from clipforge.models.content_item import ProductionMode
from clipforge.services.pipeline.stages import ContentSubStage

if TYPE_CHECKING:
    from clipforge.models.content_item import ContentItem

logger = get_logger(__name__)


class EditBlockReason(str, enum.Enum):
    """Why the body of an item cannot be edited."""

    HAS_AUDIO = "has_audio"
    HAS_IMAGES = "has_images"
    WRONG_STAGE = "wrong_stage"
    HAS_VIDEO = "has_video"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES: dict[EditBlockReason, str] = {
    EditBlockReason.HAS_AUDIO: "Audio has already been generated for this script",
    EditBlockReason.HAS_IMAGES: "Images have already been generated for this script",
    EditBlockReason.WRONG_STAGE: "The script can only be edited right after it is generated",
    EditBlockReason.HAS_VIDEO: "A video has already been rendered from this script",
}


@dataclass(frozen=True)
class EditGate:
    """Result of evaluating the body edit gate."""

    editable: bool
    reasons: tuple[EditBlockReason, ...] = field(default_factory=tuple)

    @property
    def reason(self) -> str | None:
        """Combined human-readable reason, None when editable."""
        if self.editable:
            return None
        return "; ".join(reason.message for reason in self.reasons)


def evaluate_body_gate(item: "ContentItem") -> EditGate:
    """Decide whether the body of an item may be edited.

    Editable iff there is no audio asset, no image assets, no rendered video
    and the stored stage is exactly ``script_generated``. Every failing
    condition contributes its own reason.
    """
    reasons: list[EditBlockReason] = []
    if item.audio_asset:
        reasons.append(EditBlockReason.HAS_AUDIO)
    if item.image_assets:
        reasons.append(EditBlockReason.HAS_IMAGES)
    if item.stage != ContentSubStage.SCRIPT_GENERATED.value:
        reasons.append(EditBlockReason.WRONG_STAGE)
    if item.rendered_video:
        reasons.append(EditBlockReason.HAS_VIDEO)
    return EditGate(editable=not reasons, reasons=tuple(reasons))


def validate_render_submission(
    items: Iterable["ContentItem"],
    mode: ProductionMode | str,
) -> None:
    """Check that every item has source material before submitting renders.

    Args:
        items: Items about to be submitted
        mode: Production mode of the submission

    Raises:
        SubmissionRejected: If any item lacks images (images mode) or
            footage references (stock footage mode)
        ValueError: If mode is not a known production mode
    """
    mode = ProductionMode(mode)
    if mode == ProductionMode.IMAGES:
        requirement = "images"
        missing = [item.title for item in items if not (item.image_assets or [])]
    else:
        requirement = "footage"
        missing = [item.title for item in items if not (item.footage_refs or [])]

    if missing:
        logger.info("Render submission rejected", mode=mode.value, missing=len(missing))
        raise SubmissionRejected(missing, requirement)


__all__ = [
    "EditBlockReason",
    "EditGate",
    "evaluate_body_gate",
    "validate_render_submission",
]
