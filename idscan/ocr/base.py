"""OCR collaborator interface.

The core only needs the full recognized text and the text of each block, in
reading order. Engines are wrapped behind ``TextRecognizer``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class TextBlock:
    """One recognized block of text."""

    text: str
    bbox: Optional[Tuple[int, int, int, int]] = None  # x, y, w, h


@dataclass(frozen=True)
class OCRResult:
    """Full text plus ordered blocks."""

    text: str
    blocks: List[TextBlock] = field(default_factory=list)


class TextRecognizer(ABC):
    @abstractmethod
    def recognize(self, image: np.ndarray) -> OCRResult:
        """Recognize text in a float32 RGB [0, 1] image."""
        raise NotImplementedError
