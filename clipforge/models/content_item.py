"""ContentItem ORM model.

A content item is one unit of production: a script that may later gain
narration audio, generated images and finally a rendered video. Its stage
column is written only by the external production jobs.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from clipforge.models.base import Base, IntegerIDMixin, TimestampMixin


class ProductionMode(str, enum.Enum):
    """How the final video is assembled."""

    IMAGES = "images"  # Video produced from generated still images
    STOCK_FOOTAGE = "stock_footage"  # Video produced from selected bank footage


class ContentItem(Base, IntegerIDMixin, TimestampMixin):
    """One script/video tracked through the production pipeline.

    The stage is kept as a plain string rather than an enum column so that
    stages introduced by the production system can be stored and read by
    older code.

    Attributes:
        channel_id: Owning channel
        title: Working title shown to the operator
        body: Free-text script body
        stage: Coarse stage or generation sub-stage value
        progress: Optional progress percentage (0-100)
        scheduled_publish_at: When the video is scheduled to go live
        audio_asset: Narration audio reference
        image_assets: Ordered image references
        rendered_video: Final rendered video reference
        has_captions: Whether a caption track was burned in
        production_mode: Images or stock footage
        footage_refs: Externally selected footage references
    """

    __tablename__ = "content_items"

    channel_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Pipeline state
    stage: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    progress: Mapped[int | None] = mapped_column(Integer)
    scheduled_publish_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Produced assets
    audio_asset: Mapped[str | None] = mapped_column(String(500))
    image_assets: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    rendered_video: Mapped[str | None] = mapped_column(String(500))
    has_captions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Rendering input
    production_mode: Mapped[ProductionMode] = mapped_column(
        String(20), nullable=False, default=ProductionMode.IMAGES
    )
    footage_refs: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)

    __table_args__ = (Index("idx_content_item_channel_stage", "channel_id", "stage"),)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ContentItem(id={self.id}, channel_id={self.channel_id}, stage={self.stage})>"


__all__ = [
    "ContentItem",
    "ProductionMode",
]
