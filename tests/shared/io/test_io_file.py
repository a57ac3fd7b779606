"""
tests/shared/io/test_io_file.py - shared/io/file.py 테스트
"""

import json

import pytest

from core.exceptions import ReportError
from shared.io.file import ensure_dir, write_json, write_text


class TestEnsureDir:
    def test_creates_nested(self, tmp_path):
        path = ensure_dir(tmp_path / "a" / "b")
        assert path.is_dir()

    def test_existing(self, tmp_path):
        assert ensure_dir(tmp_path) == tmp_path

    def test_file_in_the_way(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(ReportError) as exc_info:
            ensure_dir(blocker / "sub", "markdown")
        assert exc_info.value.reporter == "markdown"


class TestWrite:
    def test_write_text(self, tmp_path):
        path = write_text(tmp_path / "out" / "report.md", "# 제목\n")
        assert path.read_text(encoding="utf-8") == "# 제목\n"

    def test_write_json(self, tmp_path):
        path = write_json(tmp_path / "data.json", {"name": "감사", "count": 3})

        content = path.read_text(encoding="utf-8")
        assert json.loads(content) == {"name": "감사", "count": 3}
        assert "감사" in content
        assert content.endswith("\n")

    def test_write_json_not_serializable(self, tmp_path):
        with pytest.raises(ReportError):
            write_json(tmp_path / "bad.json", {"value": object()}, "json")
        assert not (tmp_path / "bad.json").exists()
