"""Content pipeline interpretation.

- stages: stage classification and ordering
- gating: body edit gate and render submission checks
- view: per-item presentation view
- reconciliation: polling loop that keeps views in sync with the store
"""

from clipforge.services.pipeline.gating import (
    EditBlockReason,
    EditGate,
    evaluate_body_gate,
    validate_render_submission,
)
from clipforge.services.pipeline.reconciliation import LoopState, ReconciliationLoop, channel_loop
from clipforge.services.pipeline.stages import (
    ContentSubStage,
    ItemAction,
    PipelineStage,
    StageClassification,
    classify_stage,
    is_regression,
    stage_rank,
)
from clipforge.services.pipeline.view import PipelineItemView, build_item_view

__all__ = [
    "ContentSubStage",
    "EditBlockReason",
    "EditGate",
    "ItemAction",
    "LoopState",
    "PipelineItemView",
    "PipelineStage",
    "ReconciliationLoop",
    "StageClassification",
    "build_item_view",
    "channel_loop",
    "classify_stage",
    "evaluate_body_gate",
    "is_regression",
    "stage_rank",
    "validate_render_submission",
]
