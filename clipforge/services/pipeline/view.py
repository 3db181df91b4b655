"""Presentation view of content items."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from clipforge.core.logging import get_logger
from clipforge.services.pipeline.gating import EditGate, evaluate_body_gate
from clipforge.services.pipeline.stages import (
    ContentSubStage,
    ItemAction,
    PipelineStage,
    StageClassification,
    classify_stage,
    stage_rank,
)

if TYPE_CHECKING:
    from clipforge.models.content_item import ContentItem

logger = get_logger(__name__)

# Stages by which the item must carry a rendered video
_VIDEO_STAGES = frozenset(
    {PipelineStage.VIDEO_COMPLETE, PipelineStage.VIDEO_SCHEDULED, PipelineStage.VIDEO_PUBLISHED}
)

# Earliest stage at which each asset can exist
_ASSET_PRODUCERS = (
    ("audio_asset", ContentSubStage.GENERATING_AUDIO),
    ("image_assets", ContentSubStage.GENERATING_IMAGES),
    ("rendered_video", PipelineStage.VIDEO_COMPLETE),
)


@dataclass(frozen=True)
class PipelineItemView:
    """Everything the operator view shows for one item."""

    item_id: int
    title: str
    stage: PipelineStage | None
    raw_stage: str | None
    is_processing: bool
    presentation_label: str
    sub_stage_label: str | None
    icon_hint: str
    allowed_actions: tuple[ItemAction, ...]
    progress: int | None
    gating: EditGate

    @property
    def can_edit_body(self) -> bool:
        return self.gating.editable


def _check_assets(item: "ContentItem", classification: StageClassification) -> None:
    # Stage/asset mismatches are logged, not corrected; the production
    # system owns both columns.
    if classification.stage in _VIDEO_STAGES and not item.rendered_video:
        logger.warning(
            "Item reports a finished video without a rendered asset",
            item_id=item.id,
            stage=classification.raw_value,
        )
    if classification.stage == PipelineStage.VIDEO_SCHEDULED and item.scheduled_publish_at is None:
        logger.warning("Scheduled item has no publish time", item_id=item.id)

    rank = stage_rank(item.stage)
    if rank is None:
        return
    for field, producer in _ASSET_PRODUCERS:
        # A bare generating_content value says nothing about sub-stage assets
        if rank < 0 and isinstance(producer, ContentSubStage):
            continue
        if getattr(item, field) and rank < stage_rank(producer):
            logger.warning(
                "Item has an asset before the stage that produces it",
                item_id=item.id,
                stage=classification.raw_value,
                asset=field,
                produced_at=producer.value,
            )


def build_item_view(item: "ContentItem") -> PipelineItemView:
    """Build the presentation view of an item.

    Never raises on unknown stage values.
    """
    classification = classify_stage(item.stage)
    _check_assets(item, classification)
    return PipelineItemView(
        item_id=item.id,
        title=item.title,
        stage=classification.stage,
        raw_stage=classification.raw_value,
        is_processing=classification.is_processing,
        presentation_label=classification.presentation_label,
        sub_stage_label=classification.sub_stage_label,
        icon_hint=classification.icon_hint,
        allowed_actions=classification.allowed_actions,
        progress=item.progress,
        gating=evaluate_body_gate(item),
    )


__all__ = [
    "PipelineItemView",
    "build_item_view",
]
