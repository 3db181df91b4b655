"""Pipeline stage classification.

Stages are asserted by the external production system; this module only
interprets them. Every place that needs to know what a stage value means
goes through classify_stage, which never raises: values it does not know
classify as Unknown so that stages added upstream cannot break older code.

Coarse stages (strictly ordered):
    generating_content -> animating_images -> concatenating_videos ->
    adding_audio -> adding_caption -> video_complete -> video_scheduled ->
    video_published

While content is being generated the stored value may instead be one of
the finer sub-stages (generating_script ... content_generated). Such a value
means coarse stage generating_content; the sub-stage only refines the label.
"""

import enum
from dataclasses import dataclass

from clipforge.core.state_machine import StateMachine, linear_transitions


class PipelineStage(str, enum.Enum):
    """Coarse production stage."""

    GENERATING_CONTENT = "generating_content"
    ANIMATING_IMAGES = "animating_images"
    CONCATENATING_VIDEOS = "concatenating_videos"
    ADDING_AUDIO = "adding_audio"
    ADDING_CAPTION = "adding_caption"
    VIDEO_COMPLETE = "video_complete"
    VIDEO_SCHEDULED = "video_scheduled"
    VIDEO_PUBLISHED = "video_published"


class ContentSubStage(str, enum.Enum):
    """Informational progress within GENERATING_CONTENT."""

    GENERATING_SCRIPT = "generating_script"
    SCRIPT_GENERATED = "script_generated"
    GENERATING_AUDIO = "generating_audio"
    AUDIO_GENERATED = "audio_generated"
    GENERATING_IMAGES = "generating_images"
    IMAGES_GENERATED = "images_generated"
    CONTENT_GENERATED = "content_generated"


class ItemAction(str, enum.Enum):
    """Actions the presentation layer may offer for an item."""

    REFRESH = "refresh"
    PLAY_VIDEO = "play_video"
    SCHEDULE = "schedule"
    RESCHEDULE = "reschedule"
    DELETE = "delete"


STAGE_ORDER: list[PipelineStage] = list(PipelineStage)
SUB_STAGE_ORDER: list[ContentSubStage] = list(ContentSubStage)

STAGE_TRANSITIONS = linear_transitions(STAGE_ORDER)
SUB_STAGE_TRANSITIONS = linear_transitions(SUB_STAGE_ORDER)

UNKNOWN_LABEL = "status unavailable"
UNKNOWN_ICON = "help-circle"

_TERMINAL_STAGES = frozenset(
    {PipelineStage.VIDEO_COMPLETE, PipelineStage.VIDEO_SCHEDULED, PipelineStage.VIDEO_PUBLISHED}
)

# label, icon hint, allowed actions
_STAGE_PRESENTATION: dict[PipelineStage, tuple[str, str, tuple[ItemAction, ...]]] = {
    PipelineStage.GENERATING_CONTENT: ("Generating content", "loader", (ItemAction.REFRESH,)),
    PipelineStage.ANIMATING_IMAGES: (
        "Animating images",
        "loader",
        (ItemAction.REFRESH, ItemAction.DELETE),
    ),
    PipelineStage.CONCATENATING_VIDEOS: (
        "Concatenating videos",
        "film",
        (ItemAction.REFRESH, ItemAction.DELETE),
    ),
    PipelineStage.ADDING_AUDIO: ("Adding audio", "music", (ItemAction.REFRESH, ItemAction.DELETE)),
    PipelineStage.ADDING_CAPTION: (
        "Adding caption",
        "message-square",
        (ItemAction.REFRESH, ItemAction.DELETE),
    ),
    PipelineStage.VIDEO_COMPLETE: (
        "Video complete",
        "check-circle",
        (ItemAction.PLAY_VIDEO, ItemAction.SCHEDULE, ItemAction.DELETE),
    ),
    PipelineStage.VIDEO_SCHEDULED: (
        "Video scheduled",
        "clock",
        (ItemAction.PLAY_VIDEO, ItemAction.RESCHEDULE, ItemAction.DELETE),
    ),
    PipelineStage.VIDEO_PUBLISHED: ("Video published", "send", (ItemAction.PLAY_VIDEO,)),
}

_SUB_STAGE_LABELS: dict[ContentSubStage, str] = {
    ContentSubStage.GENERATING_SCRIPT: "Generating script",
    ContentSubStage.SCRIPT_GENERATED: "Script generated",
    ContentSubStage.GENERATING_AUDIO: "Generating audio",
    ContentSubStage.AUDIO_GENERATED: "Audio generated",
    ContentSubStage.GENERATING_IMAGES: "Generating images",
    ContentSubStage.IMAGES_GENERATED: "Images generated",
    ContentSubStage.CONTENT_GENERATED: "Content generated",
}


@dataclass(frozen=True)
class StageClassification:
    """What a stored stage value means for the presentation layer.

    Attributes:
        raw_value: The stored value as read
        stage: Coarse stage, None when the value is unknown
        sub_stage: Generation sub-stage, when the value is one
        is_processing: Whether external work is still running
        presentation_label: Badge text
        icon_hint: Icon name for the badge
        allowed_actions: Actions that may be offered
    """

    raw_value: str | None
    stage: PipelineStage | None
    sub_stage: ContentSubStage | None
    is_processing: bool
    presentation_label: str
    icon_hint: str
    allowed_actions: tuple[ItemAction, ...]

    @property
    def is_unknown(self) -> bool:
        return self.stage is None

    @property
    def sub_stage_label(self) -> str | None:
        return _SUB_STAGE_LABELS[self.sub_stage] if self.sub_stage else None


def _parse(value: str | enum.Enum | None) -> tuple[PipelineStage | None, ContentSubStage | None]:
    if value is None:
        return None, None
    raw = value.value if isinstance(value, enum.Enum) else value
    try:
        return PipelineStage(raw), None
    except ValueError:
        pass
    try:
        return PipelineStage.GENERATING_CONTENT, ContentSubStage(raw)
    except ValueError:
        return None, None


def classify_stage(value: str | enum.Enum | None) -> StageClassification:
    """Classify a stored stage value.

    Args:
        value: Stage or sub-stage value, possibly unknown or missing

    Returns:
        Classification; unknown values yield a neutral "status unavailable"
        classification with is_processing False

    Example:
        >>> classify_stage("archived_legacy").presentation_label
        'status unavailable'
        >>> classify_stage("script_generated").stage
        <PipelineStage.GENERATING_CONTENT: 'generating_content'>
    """
    raw_value = value.value if isinstance(value, enum.Enum) else value
    stage, sub_stage = _parse(value)

    if stage is None:
        return StageClassification(
            raw_value=raw_value,
            stage=None,
            sub_stage=None,
            is_processing=False,
            presentation_label=UNKNOWN_LABEL,
            icon_hint=UNKNOWN_ICON,
            allowed_actions=(),
        )

    label, icon, actions = _STAGE_PRESENTATION[stage]
    return StageClassification(
        raw_value=raw_value,
        stage=stage,
        sub_stage=sub_stage,
        is_processing=stage not in _TERMINAL_STAGES,
        presentation_label=label,
        icon_hint=icon,
        allowed_actions=actions,
    )


def stage_rank(value: str | enum.Enum | None) -> int | None:
    """Position of a value in the combined forward order.

    Sub-stages rank inside generating_content, before animating_images.
    Unknown values have no rank.
    """
    stage, sub_stage = _parse(value)
    if stage is None:
        return None
    if sub_stage is not None:
        return SUB_STAGE_ORDER.index(sub_stage)
    if stage == PipelineStage.GENERATING_CONTENT:
        # A bare generating_content value sits before any sub-stage
        return -1
    return len(SUB_STAGE_ORDER) + STAGE_ORDER.index(stage)


def is_regression(previous: str | enum.Enum | None, current: str | enum.Enum | None) -> bool:
    """Whether moving from previous to current goes backwards.

    Unknown values never count as a regression.
    """
    before, after = stage_rank(previous), stage_rank(current)
    if before is None or after is None:
        return False
    return after < before


def is_adjacent_transition(
    previous: str | enum.Enum | None, current: str | enum.Enum | None
) -> bool:
    """Whether current is the immediate successor of previous.

    Polling may observe several transitions at once, so a forward change that
    is not adjacent means intermediate stages were skipped by the observer.
    """
    prev_stage, prev_sub = _parse(previous)
    cur_stage, cur_sub = _parse(current)
    if prev_stage is None or cur_stage is None:
        return False
    if prev_sub is not None and cur_sub is not None:
        return StateMachine(prev_sub, SUB_STAGE_TRANSITIONS).can_transition(cur_sub)
    if prev_sub is not None:
        # Leaving content generation is only adjacent from its last sub-stage
        return (
            prev_sub == ContentSubStage.CONTENT_GENERATED
            and cur_stage == PipelineStage.ANIMATING_IMAGES
        )
    return StateMachine(prev_stage, STAGE_TRANSITIONS).can_transition(cur_stage)


__all__ = [
    "ContentSubStage",
    "ItemAction",
    "PipelineStage",
    "STAGE_ORDER",
    "STAGE_TRANSITIONS",
    "SUB_STAGE_ORDER",
    "SUB_STAGE_TRANSITIONS",
    "StageClassification",
    "UNKNOWN_LABEL",
    "classify_stage",
    "is_adjacent_transition",
    "is_regression",
    "stage_rank",
]
