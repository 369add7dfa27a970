"""Text recognition through the Claude vision API."""

import logging
from typing import Optional

import numpy as np

from idscan.ai.vision import ask_vision_json, image_to_base64_jpeg
from idscan.errors import PrimitiveFailure
from idscan.ocr.base import OCRResult, TextBlock, TextRecognizer

logger = logging.getLogger(__name__)

_PROMPT = (
    "Transcribe all text visible in this image of an identity document.\n\n"
    "Group the text into blocks the way a printed layout groups it (one label "
    "and its value, one paragraph, one MRZ line). List blocks top to bottom, "
    "left to right. Copy characters exactly, including '<' filler characters "
    "in machine-readable zones.\n\n"
    "Reply with JSON only, no markdown, no explanation:\n"
    '{"blocks": [{"text": "<block text>", "bbox": [x, y, width, height]}, ...]}\n\n'
    "bbox is in pixels and may be null when unknown."
)


def _parse_bbox(value) -> Optional[tuple]:
    if not isinstance(value, (list, tuple)) or len(value) != 4:
        return None
    try:
        return tuple(int(v) for v in value)
    except (TypeError, ValueError):
        return None


class ClaudeTextRecognizer(TextRecognizer):
    """OCR backend that asks Claude for block-level transcription."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        jpeg_quality: int = 90,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.jpeg_quality = jpeg_quality

    def recognize(self, image: np.ndarray) -> OCRResult:
        """Recognize text in an image.

        Args:
            image: RGB image, float32 [0, 1] or uint8.

        Returns:
            OCRResult whose full text is the block texts joined by newlines.

        Raises:
            PrimitiveFailure: If the API call fails or the reply is malformed.
        """
        image_b64 = image_to_base64_jpeg(image, quality=self.jpeg_quality)
        data = ask_vision_json(image_b64, _PROMPT, api_key=self.api_key, model=self.model)

        if not isinstance(data, dict) or not isinstance(data.get("blocks"), list):
            raise PrimitiveFailure("Claude OCR reply is missing a 'blocks' list")

        blocks = []
        for entry in data["blocks"]:
            if not isinstance(entry, dict):
                continue
            text = str(entry.get("text", ""))
            if not text.strip():
                continue
            blocks.append(TextBlock(text=text, bbox=_parse_bbox(entry.get("bbox"))))

        result = OCRResult(text="\n".join(b.text for b in blocks), blocks=blocks)
        logger.info(f"OCR recognized {len(blocks)} text block(s)")
        return result
