"""Flatten a detected document into an upright image.

The four ordered corners are mapped onto an axis-aligned rectangle sized from
the document's own edge lengths.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

from idscan.errors import NoDocumentDetectedError

logger = logging.getLogger(__name__)


def compute_output_dimensions(corners: np.ndarray) -> Tuple[int, int]:
    """Size of the rectified document.

    Width is the longer of the top and bottom edges, height the longer of the
    left and right edges. Both are truncated to whole pixels.

    Args:
        corners: Corner points (4, 2) in TL, TR, BR, BL order.

    Returns:
        (width, height) in pixels.
    """
    tl, tr, br, bl = np.asarray(corners, dtype=np.float32)

    width = int(max(np.linalg.norm(tr - tl), np.linalg.norm(br - bl)))
    height = int(max(np.linalg.norm(bl - tl), np.linalg.norm(br - tr)))

    return width, height


def warp_document(
    image: np.ndarray,
    corners: np.ndarray,
) -> np.ndarray:
    """Map the document at ``corners`` onto a ``(height, width)`` canvas.

    The top-left corner lands at (0, 0) and the bottom-right one at
    (width - 1, height - 1). Pixels outside the source repeat its border.

    Args:
        image: Photo as float32 RGB [0, 1], shape (H, W, 3).
        corners: Corner points (4, 2) in TL, TR, BR, BL order.

    Returns:
        Rectified document as float32 RGB [0, 1].

    Raises:
        NoDocumentDetectedError: If the corners span no area along an axis.
    """
    corners = np.asarray(corners, dtype=np.float32)
    width, height = compute_output_dimensions(corners)

    if width <= 0 or height <= 0:
        raise NoDocumentDetectedError(
            f"Degenerate document corners give a {width}x{height} output"
        )

    target = np.array(
        [[0, 0], [width - 1, 0], [width - 1, height - 1], [0, height - 1]],
        dtype=np.float32,
    )
    homography = cv2.getPerspectiveTransform(corners, target)

    # INTER_CUBIC overshoots on float input; uint8 saturates instead
    source = (image * 255).astype(np.uint8)
    rectified = cv2.warpPerspective(
        source,
        homography,
        (width, height),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_REPLICATE,
    )

    logger.info(f"Warped {image.shape[1]}x{image.shape[0]} photo to {width}x{height} document")

    return rectified.astype(np.float32) / 255.0
