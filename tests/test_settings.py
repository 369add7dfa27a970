"""Tests for the settings loader."""

import json
import tempfile
from pathlib import Path

from idscan.utils.settings import Settings, load_settings


def _clear_env(monkeypatch) -> None:
    for var in ("ANTHROPIC_API_KEY", "IDSCAN_CACHE_DIR", "IDSCAN_OCR_MODEL"):
        monkeypatch.delenv(var, raising=False)


def test_defaults(tmp_path: Path, monkeypatch) -> None:
    _clear_env(monkeypatch)
    settings = load_settings(tmp_path / "missing.json")

    assert isinstance(settings, Settings)
    assert settings.anthropic_api_key is None
    assert settings.ocr_model is None
    assert settings.cache_dir == Path(tempfile.gettempdir()) / "idscan-cache"


def test_file_takes_priority(tmp_path: Path, monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
    path = tmp_path / "idscan.json"
    path.write_text(json.dumps({
        "anthropic_api_key": " file-key ",
        "ocr_model": "claude-test",
        "cache_dir": str(tmp_path / "cache"),
    }))

    settings = load_settings(path)
    assert settings.anthropic_api_key == "file-key"
    assert settings.ocr_model == "claude-test"
    assert settings.cache_dir == tmp_path / "cache"


def test_environment_fallback(tmp_path: Path, monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
    monkeypatch.setenv("IDSCAN_CACHE_DIR", str(tmp_path / "env-cache"))
    monkeypatch.setenv("IDSCAN_OCR_MODEL", "claude-env")

    settings = load_settings(tmp_path / "missing.json")
    assert settings.anthropic_api_key == "env-key"
    assert settings.cache_dir == tmp_path / "env-cache"
    assert settings.ocr_model == "claude-env"


def test_unreadable_file_falls_back(tmp_path: Path, monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
    path = tmp_path / "idscan.json"
    path.write_text("{not json")

    assert load_settings(path).anthropic_api_key == "env-key"
