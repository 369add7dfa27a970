"""Document rectification pipeline.

Loads a photograph, finds the document outline, warps it to an upright
rectangle and writes the result to the cache directory.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from idscan.preprocessing.loader import load_image, ImageMetadata
from idscan.preprocessing.normalizer import normalize
from idscan.rectify.detector import build_edge_map, detect_document, draw_document_detection
from idscan.rectify.perspective import warp_document
from idscan.utils.debug import save_image
from idscan.utils.settings import load_settings

logger = logging.getLogger(__name__)


@dataclass
class RectifierConfig:
    """All tunable parameters in one place."""

    # Preprocessing
    max_working_resolution: int = 1280  # px, longest edge

    # Edge map
    morph_kernel_size: int = 4
    blur_kernel: int = 15
    canny_low: int = 10
    canny_high: int = 20
    edge_dilate_iterations: int = 1

    # Corner search
    min_contour_area: float = 100.0  # px² at working resolution
    approx_epsilon_fraction: float = 0.1

    # Output
    output_format: str = "jpeg"  # "jpeg" or "png"
    jpeg_quality: int = 92
    cache_dir: Optional[Path] = None  # None: from settings


@dataclass
class RectificationResult:
    """Result of one rectification call."""

    output_path: Path
    corners: np.ndarray              # (4, 2) in working-resolution coordinates
    output_size: Tuple[int, int]     # (width, height)
    metadata: ImageMetadata
    processing_time: float
    steps_completed: List[str] = field(default_factory=list)


class DocumentRectifier:
    """Rectifies photographed documents. Calls are independent of each other."""

    def __init__(self, config: Optional[RectifierConfig] = None) -> None:
        """Initialize rectifier with configuration.

        Args:
            config: Rectifier configuration. If None, uses defaults.
        """
        self.config = config or RectifierConfig()

    def _output_dir(self) -> Path:
        if self.config.cache_dir is not None:
            return Path(self.config.cache_dir)
        return load_settings().cache_dir

    def rectify(
        self,
        input_path: str,
        output_dir: Optional[str] = None,
        debug_output_dir: Optional[str] = None,
    ) -> RectificationResult:
        """Rectify a single photograph.

        Args:
            input_path: Path to input image
            output_dir: Where to write the result. Defaults to the cache directory.
            debug_output_dir: Optional directory for step-by-step debug images

        Returns:
            RectificationResult with the output path and detected corners

        Raises:
            NoDocumentDetectedError: If no four-cornered outline is found.
        """
        start_time = time.time()
        steps_completed: List[str] = []
        debug_dir = Path(debug_output_dir) if debug_output_dir else None
        cfg = self.config

        logger.info(f"Rectifying: {input_path}")

        # Step 1: Load and bring to working resolution
        image, metadata = load_image(input_path)
        image, _ = normalize(image, cfg.max_working_resolution)
        steps_completed.append('load')

        if debug_dir:
            save_image(image, debug_dir / "01_loaded.jpg", "Working-resolution image")

        # Step 2: Edge map
        edges = build_edge_map(
            image,
            morph_kernel_size=cfg.morph_kernel_size,
            blur_kernel=cfg.blur_kernel,
            canny_low=cfg.canny_low,
            canny_high=cfg.canny_high,
            dilate_iterations=cfg.edge_dilate_iterations,
        )
        steps_completed.append('edges')

        if debug_dir:
            save_image(edges, debug_dir / "02_edges.jpg", "Canny edge map")

        # Step 3: Corner search
        detection = detect_document(
            edges,
            min_area=cfg.min_contour_area,
            epsilon_fraction=cfg.approx_epsilon_fraction,
        )
        del edges
        steps_completed.append('detect')

        if debug_dir:
            save_image(
                draw_document_detection(image, detection.corners),
                debug_dir / "03_document_detected.jpg",
                f"Document outline (area={detection.area:.0f})",
            )

        # Step 4: Warp
        warped = warp_document(image, detection.corners)
        del image
        steps_completed.append('warp')

        if debug_dir:
            save_image(warped, debug_dir / "04_rectified.jpg", "After perspective correction")

        # Step 5: Persist
        suffix = ".png" if cfg.output_format == "png" else ".jpg"
        out_dir = Path(output_dir) if output_dir else self._output_dir()
        out_name = f"{Path(input_path).stem}_rectified_{uuid.uuid4().hex[:8]}{suffix}"
        output_path = save_image(
            warped, out_dir / out_name, "Rectified document", quality=cfg.jpeg_quality
        )
        steps_completed.append('save')

        processing_time = time.time() - start_time
        logger.info(
            f"Rectified {Path(input_path).name} -> {output_path} "
            f"({warped.shape[1]}x{warped.shape[0]}) in {processing_time:.3f}s"
        )

        return RectificationResult(
            output_path=output_path,
            corners=detection.corners,
            output_size=(warped.shape[1], warped.shape[0]),
            metadata=metadata,
            processing_time=processing_time,
            steps_completed=steps_completed,
        )
