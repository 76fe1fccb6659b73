from __future__ import annotations

import logging

from .client import StudioClient
from .mask import MaskPainterSession
from .models import EditMode, EditResult

logger = logging.getLogger(__name__)


class InpaintingPipeline:
    """Export a painted mask and submit it with its source image for inpainting."""

    def __init__(self, client: StudioClient) -> None:
        self.client = client

    def run(
        self,
        image_url: str,
        painter: MaskPainterSession,
        target_width: int,
        target_height: int,
        project_id: str,
        parent_id: str,
    ) -> EditResult:
        if not painter.has_mask:
            raise ValueError("paint over the area to edit before submitting")

        prompt = painter.effective_prompt()
        if painter.edit_mode is EditMode.EDIT and not prompt:
            raise ValueError("edit mode requires a non-empty prompt")

        # Export first: a failed export must not reach the network.
        mask_bytes = painter.export(target_width, target_height)
        image_bytes = self.client.fetch_image_bytes(image_url)

        result = self.client.submit_edit(
            image_bytes=image_bytes,
            mask_bytes=mask_bytes,
            mode=painter.edit_mode,
            prompt=prompt,
            project_id=project_id,
            parent_id=parent_id,
        )
        logger.info("submitted %s edit for %s -> %s", painter.edit_mode.value, parent_id, result.url)
        return result
