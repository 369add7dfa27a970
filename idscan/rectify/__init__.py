"""Document corner detection and perspective correction."""

from idscan.rectify.detector import (
    DocumentDetection,
    build_edge_map,
    detect_document,
    draw_document_detection,
    find_document_quad,
    order_corners,
)
from idscan.rectify.perspective import compute_output_dimensions, warp_document

__all__ = [
    "DocumentDetection",
    "build_edge_map",
    "detect_document",
    "draw_document_detection",
    "find_document_quad",
    "order_corners",
    "compute_output_dimensions",
    "warp_document",
]
