"""Image output and debug visualization utilities."""

import logging
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def save_image(
    image: np.ndarray,
    output_path: Union[str, Path],
    description: Optional[str] = None,
    quality: int = 95
) -> Path:
    """Save an image as JPEG or PNG, picked from the file suffix.

    Suffixes other than .png are written as JPEG with a .jpg suffix.

    Args:
        image: Image array as float32 RGB [0,1] or uint8 RGB [0,255], or grayscale
        output_path: Destination path
        description: Optional description to log
        quality: JPEG quality (0-100)

    Returns:
        The path actually written.

    Raises:
        OSError: If OpenCV could not write the file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if image.dtype == np.float32 or image.dtype == np.float64:
        img_uint8 = (np.clip(image, 0, 1) * 255).astype(np.uint8)
    else:
        img_uint8 = image

    if img_uint8.ndim == 2:
        img_bgr = cv2.cvtColor(img_uint8, cv2.COLOR_GRAY2BGR)
    elif img_uint8.shape[2] == 3:
        img_bgr = cv2.cvtColor(img_uint8, cv2.COLOR_RGB2BGR)
    elif img_uint8.shape[2] == 4:
        img_bgr = cv2.cvtColor(img_uint8, cv2.COLOR_RGBA2BGR)
    else:
        raise ValueError(f"Unsupported number of channels: {img_uint8.shape[2]}")

    if output_path.suffix.lower() == '.png':
        params = [cv2.IMWRITE_PNG_COMPRESSION, 3]
    else:
        if output_path.suffix.lower() not in ['.jpg', '.jpeg']:
            output_path = output_path.with_suffix('.jpg')
        params = [cv2.IMWRITE_JPEG_QUALITY, quality]

    if not cv2.imwrite(str(output_path), img_bgr, params):
        raise OSError(f"Failed to write image: {output_path}")

    if description:
        logger.debug(f"Saved image: {output_path} - {description}")
    else:
        logger.debug(f"Saved image: {output_path}")

    return output_path
