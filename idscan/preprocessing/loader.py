"""Image loading with support for HEIC, DNG, JPEG, PNG and WebP formats."""

import logging
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)


class ImageMetadata:
    """Metadata extracted from loaded image."""

    def __init__(
        self,
        original_size: Tuple[int, int],
        format: str,
        bit_depth: int,
    ) -> None:
        self.original_size = original_size  # (width, height)
        self.format = format
        self.bit_depth = bit_depth


def _pil_to_array(img: Image.Image) -> np.ndarray:
    # Phone photos carry their rotation in EXIF; apply it before any geometry
    img = ImageOps.exif_transpose(img)
    return np.asarray(img.convert("RGB"), dtype=np.float32) / 255.0


def load_heic(path: str) -> Tuple[np.ndarray, ImageMetadata]:
    """Load HEIC/HEIF image using pillow-heif.

    Args:
        path: Path to HEIC file

    Returns:
        Tuple of (RGB array as float32 [0,1], metadata)
    """
    try:
        from pillow_heif import register_heif_opener
        register_heif_opener()
    except ImportError as e:
        raise ImportError(
            "pillow-heif is required for HEIC support. "
            "Install with: pip install idscan[heic]"
        ) from e

    with Image.open(path) as img:
        original_size = img.size
        arr = _pil_to_array(img)

    logger.info(f"Loaded HEIC: {path} ({arr.shape[1]}x{arr.shape[0]})")
    return arr, ImageMetadata(original_size=original_size, format="HEIC", bit_depth=8)


def load_dng(path: str) -> Tuple[np.ndarray, ImageMetadata]:
    """Load DNG/RAW image using rawpy.

    Args:
        path: Path to DNG file

    Returns:
        Tuple of (RGB array as float32 [0,1], metadata)
    """
    try:
        import rawpy
    except ImportError as e:
        raise ImportError(
            "rawpy is required for DNG/RAW support. "
            "Install with: pip install idscan[raw]"
        ) from e

    with rawpy.imread(path) as raw:
        original_size = (raw.sizes.width, raw.sizes.height)
        rgb = raw.postprocess(
            use_camera_wb=True,
            output_color=rawpy.ColorSpace.sRGB,
            output_bps=16,
            no_auto_bright=False,
        )

    arr = rgb.astype(np.float32) / 65535.0

    logger.info(f"Loaded DNG: {path} ({arr.shape[1]}x{arr.shape[0]}, 16-bit)")
    return arr, ImageMetadata(original_size=original_size, format="DNG", bit_depth=16)


def load_standard(path: str) -> Tuple[np.ndarray, ImageMetadata]:
    """Load JPEG, PNG, WebP or TIFF using PIL.

    Args:
        path: Path to image file

    Returns:
        Tuple of (RGB array as float32 [0,1], metadata)
    """
    with Image.open(path) as img:
        original_size = img.size
        arr = _pil_to_array(img)

    format_name = Path(path).suffix.lower().lstrip('.').upper()

    logger.info(f"Loaded {format_name}: {path} ({arr.shape[1]}x{arr.shape[0]})")
    return arr, ImageMetadata(original_size=original_size, format=format_name, bit_depth=8)


def load_image(path: str) -> Tuple[np.ndarray, ImageMetadata]:
    """Load image from any supported format.

    Args:
        path: Path to image file

    Returns:
        Tuple of (RGB array as float32 [0,1] with shape (H, W, 3), metadata)

    Raises:
        ValueError: If file format is not supported
        FileNotFoundError: If file does not exist
    """
    path_obj = Path(path)

    if not path_obj.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    ext = path_obj.suffix.lower()

    if ext in ('.heic', '.heif'):
        return load_heic(str(path))
    elif ext in ('.dng', '.cr2', '.nef', '.arw'):
        return load_dng(str(path))
    elif ext in ('.jpg', '.jpeg', '.png', '.webp', '.tiff', '.tif', '.bmp'):
        return load_standard(str(path))
    else:
        raise ValueError(f"Unsupported image format: {ext}")
