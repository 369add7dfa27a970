"""OCR collaborator types and backends."""

from idscan.ocr.base import OCRResult, TextBlock, TextRecognizer
from idscan.ocr.claude_ocr import ClaudeTextRecognizer

__all__ = [
    "OCRResult",
    "TextBlock",
    "TextRecognizer",
    "ClaudeTextRecognizer",
]
