"""Locate a document's four corners in a photograph.

The image is reduced to an edge map (grayscale, morphological open, Gaussian
blur, Canny). Every contour of the edge map is then approximated to a polygon;
the largest one that simplifies to exactly four vertices is the document.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from idscan.errors import NoDocumentDetectedError

logger = logging.getLogger(__name__)

# Contours at or below this many px² are noise (text strokes, dust, specks).
_MIN_CONTOUR_AREA = 100.0

# approxPolyDP tolerance as a fraction of contour perimeter. At this value
# rounded card corners and slight lens bending still collapse to 4 points.
_APPROX_EPSILON_FRACTION = 0.1


@dataclass
class DocumentDetection:
    """Result of document corner detection."""

    corners: np.ndarray  # shape (4, 2) float32, ordered TL, TR, BR, BL
    area: float          # contour area of the winning polygon, px²
    contours_scanned: int


def order_corners(pts: np.ndarray) -> np.ndarray:
    """Order four corner points as: top-left, top-right, bottom-right, bottom-left.

    Points are sorted by angle around their centroid, which fixes a clockwise
    winding (y points down). The sequence then starts at the point with the
    smallest x + y, with ties going to the smaller y, so a card turned 45
    degrees still yields four distinct corners. The result does not depend
    on the input order or winding, so ordering twice is a no-op.

    Args:
        pts: Array of shape (4, 2) with (x, y) coordinates.

    Returns:
        Ordered float32 array of shape (4, 2).
    """
    pts = np.asarray(pts, dtype=np.float32).reshape(4, 2)
    center = pts.mean(axis=0)
    angles = np.arctan2(pts[:, 1] - center[1], pts[:, 0] - center[0])
    clockwise = pts[np.argsort(angles, kind="stable")]

    # lexsort keys run last-to-first: primary x + y, then y
    start = np.lexsort((clockwise[:, 1], clockwise.sum(axis=1)))[0]
    return np.roll(clockwise, -start, axis=0)


def build_edge_map(
    image: np.ndarray,
    morph_kernel_size: int = 4,
    blur_kernel: int = 15,
    canny_low: int = 10,
    canny_high: int = 20,
    dilate_iterations: int = 1,
) -> np.ndarray:
    """Turn a photograph into a binary edge map.

    Args:
        image: Input image as float32 RGB [0, 1], shape (H, W, 3).
        morph_kernel_size: Elliptical opening kernel size; removes thin
            text strokes before edge detection.
        blur_kernel: Gaussian blur kernel size (odd).
        canny_low: Lower hysteresis threshold for Canny.
        canny_high: Upper hysteresis threshold for Canny.
        dilate_iterations: 3x3 dilation passes to close small gaps in the
            outline. 0 disables.

    Returns:
        uint8 edge map, 255 on edges.
    """
    img_uint8 = (image * 255).astype(np.uint8)
    gray = cv2.cvtColor(img_uint8, cv2.COLOR_RGB2GRAY)

    if morph_kernel_size > 0:
        element = cv2.getStructuringElement(
            cv2.MORPH_ELLIPSE, (morph_kernel_size, morph_kernel_size)
        )
        gray = cv2.morphologyEx(gray, cv2.MORPH_OPEN, element)

    blurred = cv2.GaussianBlur(gray, (blur_kernel, blur_kernel), 0)
    edges = cv2.Canny(blurred, canny_low, canny_high)

    if dilate_iterations > 0:
        kernel3 = cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3))
        edges = cv2.dilate(edges, kernel3, iterations=dilate_iterations)

    return edges


def find_document_quad(
    edges: np.ndarray,
    min_area: float = _MIN_CONTOUR_AREA,
    epsilon_fraction: float = _APPROX_EPSILON_FRACTION,
) -> Optional[DocumentDetection]:
    """Find the largest contour that simplifies to a quadrilateral.

    Scans contours in extraction order keeping a running best; there is no
    early exit.

    Args:
        edges: Binary edge map.
        min_area: Contours with area at or below this are skipped.
        epsilon_fraction: approxPolyDP tolerance as a fraction of perimeter.

    Returns:
        DocumentDetection with ordered corners, or None if no contour qualifies.
    """
    contours, _ = cv2.findContours(edges, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)

    best: Optional[np.ndarray] = None
    best_area = 0.0

    for contour in contours:
        area = cv2.contourArea(contour)
        if area <= min_area or area <= best_area:
            continue

        peri = cv2.arcLength(contour, True)
        approx = cv2.approxPolyDP(contour, epsilon_fraction * peri, True)

        if len(approx) == 4:
            best = approx
            best_area = area

    logger.debug(f"Scanned {len(contours)} contours, best quad area={best_area:.0f}")

    if best is None:
        return None

    return DocumentDetection(
        corners=order_corners(best.reshape(4, 2)),
        area=float(best_area),
        contours_scanned=len(contours),
    )


def detect_document(
    edges: np.ndarray,
    min_area: float = _MIN_CONTOUR_AREA,
    epsilon_fraction: float = _APPROX_EPSILON_FRACTION,
) -> DocumentDetection:
    """Detect the document outline in an edge map from ``build_edge_map``.

    Args:
        edges: Binary edge map.
        min_area: See ``find_document_quad``.
        epsilon_fraction: See ``find_document_quad``.

    Returns:
        DocumentDetection with ordered corners.

    Raises:
        NoDocumentDetectedError: If no contour simplifies to four vertices.
    """
    detection = find_document_quad(edges, min_area=min_area, epsilon_fraction=epsilon_fraction)

    if detection is None:
        raise NoDocumentDetectedError("No four-cornered document outline found")

    logger.info(
        f"Document detected: area={detection.area:.0f}px², "
        f"corners={detection.corners.round(1).tolist()}"
    )
    return detection


def draw_document_detection(
    image: np.ndarray,
    corners: np.ndarray,
) -> np.ndarray:
    """Draw the detected outline on a copy of the image for debugging.

    Args:
        image: Input image as float32 RGB [0, 1].
        corners: Ordered corner points (4, 2).

    Returns:
        Image with overlay as float32 RGB [0, 1].
    """
    img_uint8 = (image * 255).astype(np.uint8).copy()
    pts = corners.astype(np.int32).reshape(-1, 1, 2)

    cv2.polylines(img_uint8, [pts], True, (0, 255, 0), 3)
    for corner in corners.astype(np.int32):
        cv2.circle(img_uint8, (int(corner[0]), int(corner[1])), 8, (255, 0, 0), -1)

    return img_uint8.astype(np.float32) / 255.0
