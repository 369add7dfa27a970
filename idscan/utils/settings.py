"""Unified settings loader for API keys and runtime paths."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_SETTINGS_FILE = Path(__file__).parent.parent.parent / "idscan.json"


@dataclass
class Settings:
    """Loaded settings."""

    anthropic_api_key: Optional[str] = None
    ocr_model: Optional[str] = None
    cache_dir: Path = Path(tempfile.gettempdir()) / "idscan-cache"


def load_settings(settings_path: Optional[Path] = None) -> Settings:
    """Load settings from idscan.json, falling back to environment variables.

    Priority: idscan.json > environment variables > defaults.

    Args:
        settings_path: Path to idscan.json. Defaults to project root idscan.json.

    Returns:
        Settings dataclass (None for missing keys).
    """
    path = settings_path or _SETTINGS_FILE
    data: dict = {}

    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            logger.debug(f"Loaded settings from {path}")
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read idscan.json at {path}: {e}")

    def _get(data: dict, *keys: str, env_var: str = "") -> Optional[str]:
        for k in keys:
            v = data.get(k)
            if isinstance(v, str) and v.strip():
                return v.strip()
        if env_var:
            v = os.getenv(env_var, "")
            if v.strip():
                return v.strip()
        return None

    anthropic_key = _get(
        data,
        "ANTHROPIC_API_KEY", "anthropic_api_key",
        env_var="ANTHROPIC_API_KEY",
    )
    ocr_model = _get(data, "ocr_model", env_var="IDSCAN_OCR_MODEL")
    cache_dir = _get(data, "cache_dir", env_var="IDSCAN_CACHE_DIR")

    if not anthropic_key:
        logger.debug("ANTHROPIC_API_KEY not found in idscan.json or environment")

    settings = Settings(anthropic_api_key=anthropic_key, ocr_model=ocr_model)
    if cache_dir:
        settings.cache_dir = Path(cache_dir)
    return settings
