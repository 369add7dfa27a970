"""Resize images to a bounded working resolution."""

import logging
from typing import Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def normalize(
    image: np.ndarray,
    max_working_resolution: int = 1280,
) -> Tuple[np.ndarray, float]:
    """Shrink an image so its longest side fits the working resolution.

    Kernel sizes and edge thresholds downstream are tuned for this size, so
    differently sized photos behave the same. Images are never upscaled.

    Args:
        image: Input image as float32 RGB [0,1] array
        max_working_resolution: Maximum dimension (width or height)

    Returns:
        (working image, scale factor applied)
    """
    height, width = image.shape[:2]
    original_max_dim = max(height, width)

    if original_max_dim <= max_working_resolution:
        logger.debug(f"Image {width}x{height} within working resolution, no resize needed")
        return image, 1.0

    scale_factor = max_working_resolution / original_max_dim
    new_width = max(1, int(width * scale_factor))
    new_height = max(1, int(height * scale_factor))

    img_uint8 = (image * 255).astype(np.uint8)
    resized_uint8 = cv2.resize(
        img_uint8,
        (new_width, new_height),
        interpolation=cv2.INTER_AREA
    )

    logger.info(
        f"Resized image from {width}x{height} to {new_width}x{new_height} "
        f"(scale: {scale_factor:.3f})"
    )
    return resized_uint8.astype(np.float32) / 255.0, scale_factor
