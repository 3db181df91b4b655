"""Tests for body edit gating and render submission checks."""

import pytest

from clipforge.core.exceptions import SubmissionRejected
from clipforge.models.content_item import ProductionMode
from clipforge.services.pipeline.gating import (
    EditBlockReason,
    evaluate_body_gate,
    validate_render_submission,
)


@pytest.mark.unit
class TestEvaluateBodyGate:
    """Tests for evaluate_body_gate."""

    def test_fresh_script_is_editable(self, make_item):
        """Test a freshly generated script can be edited."""
        gate = evaluate_body_gate(make_item())

        assert gate.editable is True
        assert gate.reasons == ()
        assert gate.reason is None

    def test_audio_blocks(self, make_item):
        """Test an audio asset blocks editing."""
        gate = evaluate_body_gate(make_item(audio_asset="audio/1.mp3"))

        assert gate.editable is False
        assert gate.reasons == (EditBlockReason.HAS_AUDIO,)

    def test_images_block(self, make_item):
        """Test image assets block editing."""
        gate = evaluate_body_gate(make_item(image_assets=["img/1.png"]))
        assert gate.reasons == (EditBlockReason.HAS_IMAGES,)

    def test_wrong_stage_blocks(self, make_item):
        """Test any stage other than script_generated blocks editing."""
        gate = evaluate_body_gate(make_item(stage="generating_audio"))
        assert gate.reasons == (EditBlockReason.WRONG_STAGE,)

    def test_unknown_stage_blocks(self, make_item):
        """Test unknown stages block editing."""
        gate = evaluate_body_gate(make_item(stage="archived_legacy"))
        assert gate.editable is False

    def test_video_blocks(self, make_item):
        """Test a rendered video blocks editing."""
        gate = evaluate_body_gate(make_item(rendered_video="video/1.mp4"))
        assert gate.reasons == (EditBlockReason.HAS_VIDEO,)

    def test_each_failing_condition_reported(self, make_item):
        """Test every failing condition contributes a reason."""
        item = make_item(
            audio_asset="audio/1.mp3",
            image_assets=["img/1.png"],
            stage="video_complete",
            rendered_video="video/1.mp4",
        )
        gate = evaluate_body_gate(item)

        assert gate.reasons == (
            EditBlockReason.HAS_AUDIO,
            EditBlockReason.HAS_IMAGES,
            EditBlockReason.WRONG_STAGE,
            EditBlockReason.HAS_VIDEO,
        )
        assert gate.reason.count(";") == 3

    def test_none_image_assets(self, make_item):
        """Test a missing image list counts as no images."""
        assert evaluate_body_gate(make_item(image_assets=None)).editable is True


@pytest.mark.unit
class TestValidateRenderSubmission:
    """Tests for validate_render_submission."""

    def test_images_mode_ok(self, make_item):
        """Test items with images pass."""
        items = [make_item(image_assets=["a.png"]), make_item(id=2, image_assets=["b.png"])]
        validate_render_submission(items, ProductionMode.IMAGES)

    def test_images_mode_missing(self, make_item):
        """Test items without images are listed by title."""
        items = [
            make_item(title="Has images", image_assets=["a.png"]),
            make_item(id=2, title="No images"),
        ]

        with pytest.raises(SubmissionRejected) as exc_info:
            validate_render_submission(items, "images")

        assert exc_info.value.missing == ["No images"]
        assert exc_info.value.requirement == "images"

    def test_footage_mode(self, make_item):
        """Test stock footage mode checks footage references."""
        items = [make_item(title="No footage", image_assets=["a.png"])]

        with pytest.raises(SubmissionRejected) as exc_info:
            validate_render_submission(items, ProductionMode.STOCK_FOOTAGE)

        assert exc_info.value.missing == ["No footage"]
        assert "Select footage for all items" in str(exc_info.value)

    def test_footage_mode_ok(self, make_item):
        """Test items with footage pass in stock footage mode."""
        validate_render_submission([make_item(footage_refs=["clip-1"])], "stock_footage")

    def test_unknown_mode(self, make_item):
        """Test unknown modes raise ValueError."""
        with pytest.raises(ValueError):
            validate_render_submission([make_item()], "slideshow")
