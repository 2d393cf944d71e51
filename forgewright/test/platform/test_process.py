"""Tests for platform/process.py."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from forgewright.core.result import Err, Ok
from forgewright.platform.process import ProcessError, is_available, run

PY = sys.executable


class TestProcessError:
    def test_str(self) -> None:
        error = ProcessError(("git", "push"), 128, "", "rejected")
        assert str(error) == "git push failed (exit 128)"

    def test_str_truncates_long_commands(self) -> None:
        error = ProcessError(("gh", "release", "create", "v1.0.0", "--notes", "x"), 1, "", "")
        assert str(error) == "gh release create ... failed (exit 1)"

    def test_frozen(self) -> None:
        error = ProcessError(("git",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_stdout(self, tmp_path: Path) -> None:
        assert run([PY, "-c", "print('tagged')"], cwd=tmp_path) == Ok("tagged\n")

    def test_nonzero_exit(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('denied'); sys.exit(3)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.stderr == "denied"

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["forgewright-no-such-tool"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.stderr

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("x", encoding="utf-8")

        result = run([PY, "-c", "import os; print(sorted(os.listdir('.')))"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "marker.txt" in result.value

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr


class TestIsAvailable:
    def test_available(self, tmp_path: Path) -> None:
        assert is_available([PY, "--version"], cwd=tmp_path) is True

    def test_unavailable(self, tmp_path: Path) -> None:
        assert is_available(["forgewright-no-such-tool", "--version"], cwd=tmp_path) is False
