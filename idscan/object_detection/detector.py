"""Object detection over base64-encoded images.

A single call returns the full detection list or raises DetectionError. The
model itself sits behind ``DetectionBackend``.
"""

import base64
import binascii
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from idscan.ai.vision import ask_vision_json, image_to_base64_jpeg
from idscan.errors import DetectionError, PrimitiveFailure

logger = logging.getLogger(__name__)

NO_TRACKING_ID = -1


@dataclass(frozen=True)
class Detection:
    """One detected object."""

    tracking_id: int
    labels: Tuple[str, ...]


class DetectionBackend(ABC):
    @abstractmethod
    def detect_image(self, image: np.ndarray) -> List[Detection]:
        """Detect objects in a uint8 RGB image."""
        raise NotImplementedError


def decode_base64_image(data: str) -> np.ndarray:
    """Decode a base64 string to a uint8 RGB array.

    Raises:
        DetectionError: If the payload is not base64 or not a readable image.
    """
    try:
        raw = base64.b64decode(data, validate=False)
        with Image.open(io.BytesIO(raw)) as img:
            return np.array(img.convert("RGB"))
    except (binascii.Error, UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise DetectionError(f"Could not decode base64 image: {e}") from e


class ObjectDetector:
    """Runs a detection backend on base64-encoded images."""

    def __init__(self, backend: DetectionBackend) -> None:
        self.backend = backend

    def detect(self, base64_image: str) -> List[Detection]:
        """Detect objects in a base64-encoded image.

        Args:
            base64_image: Base64-encoded JPEG or PNG bytes.

        Returns:
            Detections in backend order.

        Raises:
            DetectionError: If decoding or the backend fails.
        """
        image = decode_base64_image(base64_image)
        try:
            detections = self.backend.detect_image(image)
        except DetectionError:
            raise
        except Exception as e:
            raise DetectionError(f"Object detection failed: {e}") from e

        logger.info(f"Detected {len(detections)} object(s)")
        return detections


_PROMPT = (
    "List the distinct physical objects visible in this image.\n\n"
    "Reply with JSON only, no markdown, no explanation:\n"
    '{"objects": [{"id": <integer>, "labels": ["<label>", ...]}, ...]}\n\n'
    "Use short lowercase labels, most likely first. Number ids from 0."
)


class ClaudeDetectionBackend(DetectionBackend):
    """Detection backend that asks Claude to enumerate and label objects."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None) -> None:
        self.api_key = api_key
        self.model = model

    def detect_image(self, image: np.ndarray) -> List[Detection]:
        image_b64 = image_to_base64_jpeg(image)
        try:
            data = ask_vision_json(image_b64, _PROMPT, api_key=self.api_key, model=self.model)
        except PrimitiveFailure as e:
            raise DetectionError(str(e)) from e

        if not isinstance(data, dict) or not isinstance(data.get("objects"), list):
            raise DetectionError("Detection reply is missing an 'objects' list")

        detections = []
        for entry in data["objects"]:
            if not isinstance(entry, dict):
                continue
            tracking_id = entry.get("id")
            labels = entry.get("labels") or []
            if isinstance(labels, str):
                labels = [labels]
            detections.append(Detection(
                tracking_id=int(tracking_id) if isinstance(tracking_id, int) else NO_TRACKING_ID,
                labels=tuple(str(label) for label in labels),
            ))
        return detections
