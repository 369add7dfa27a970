"""Object detection collaborator."""

from idscan.object_detection.detector import (
    ClaudeDetectionBackend,
    Detection,
    DetectionBackend,
    ObjectDetector,
    decode_base64_image,
)

__all__ = [
    "ClaudeDetectionBackend",
    "Detection",
    "DetectionBackend",
    "ObjectDetector",
    "decode_base64_image",
]
