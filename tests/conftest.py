"""Shared fixtures."""

from pathlib import Path

import numpy as np
import pytest

from synthetic import create_document_photo, write_image


@pytest.fixture
def document_photo_path(tmp_path: Path) -> Path:
    return write_image(create_document_photo(), tmp_path / "card.png")


@pytest.fixture
def blank_photo_path(tmp_path: Path) -> Path:
    return write_image(np.full((300, 400, 3), 0.5, dtype=np.float32), tmp_path / "blank.png")
