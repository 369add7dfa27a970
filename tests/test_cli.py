"""Tests for the command-line interface."""

import json
from pathlib import Path

from click.testing import CliRunner

import idscan.ocr.claude_ocr as claude_ocr
from idscan.cli import main

LINES = [
    "I<UTOD231458907<<<<<<<<<<<<<<<",
    "7408122F1204159UTO<<<<<<<<<<<6",
    "ERIKSSON<<ANNA<MARIA<<<<<<<<<<",
]


class TestMrzCommand:
    """idscan mrz"""

    def test_decodes_lines(self) -> None:
        result = CliRunner().invoke(main, ["mrz", *LINES, "--today", "2026-10-19"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["document_number"] == "D23145890"
        assert data["birth_date"] == "1974-08-12"
        assert data["names"]["given_names"] == ["ANNA", "MARIA"]
        assert "check_digits" not in data

    def test_verify(self) -> None:
        result = CliRunner().invoke(main, ["mrz", *LINES, "--verify"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["check_digits"]["all_valid"] is True

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ocr.txt"
        path.write_text("RESIDENT IDENTITY CARD\n" + "\n".join(LINES) + "\n")

        result = CliRunner().invoke(main, ["mrz", "--file", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["names"]["surname"] == "ERIKSSON"

    def test_bad_input_exits_nonzero(self) -> None:
        result = CliRunner().invoke(main, ["mrz", LINES[0], LINES[1]])
        assert result.exit_code == 1

    def test_bad_today(self) -> None:
        result = CliRunner().invoke(main, ["mrz", *LINES, "--today", "yesterday"])
        assert result.exit_code == 2


class TestRectifyCommand:
    """idscan rectify"""

    def test_rectifies_file(self, document_photo_path: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(
            main, ["rectify", str(document_photo_path), "-o", str(out_dir), "--png"]
        )

        assert result.exit_code == 0, result.output
        written = Path(result.stdout.strip())
        assert written.parent == out_dir
        assert written.suffix == ".png"
        assert written.exists()

    def test_no_document_exits_nonzero(self, blank_photo_path: Path, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["rectify", str(blank_photo_path), "-o", str(tmp_path)])
        assert result.exit_code == 1

    def test_directory_requires_batch(self, document_photo_path: Path) -> None:
        result = CliRunner().invoke(main, ["rectify", str(document_photo_path.parent)])
        assert result.exit_code == 1

    def test_batch_continues_past_failures(
        self, document_photo_path: Path, blank_photo_path: Path, tmp_path: Path
    ) -> None:
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(
            main, ["rectify", str(tmp_path), "--batch", "--filter", "*.png", "-o", str(out_dir)]
        )

        # blank.png fails, card.png still gets written
        assert result.exit_code == 1
        assert len(list(out_dir.glob("card_rectified_*.jpg"))) == 1


class TestScanCommand:
    """idscan scan, with OCR replaced by a canned reply."""

    def test_prints_front_and_mrz(self, document_photo_path: Path, monkeypatch) -> None:
        monkeypatch.setattr(claude_ocr, "ask_vision_json", lambda *a, **k: {
            "blocks": [
                {"text": "United Arab Emirates"},
                {"text": "Name: Anna Eriksson"},
                {"text": "784-1974-1234567-2"},
                *({"text": line} for line in LINES),
            ]
        })

        result = CliRunner().invoke(main, ["scan", str(document_photo_path)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["emirates_front"]["name"] == "Anna Eriksson"
        assert data["emirates_front"]["id_number"] == "784-1974-1234567-2"
        assert data["mrz"]["document_number"] == "D23145890"

    def test_non_emirates_without_mrz(self, document_photo_path: Path, monkeypatch) -> None:
        monkeypatch.setattr(claude_ocr, "ask_vision_json", lambda *a, **k: {
            "blocks": [{"text": "Library card"}]
        })

        result = CliRunner().invoke(main, ["scan", str(document_photo_path)])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"emirates_front": None, "mrz": None}
