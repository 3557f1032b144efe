"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from htmldocs.cli import _setup_logging, app


runner = CliRunner()


@pytest.fixture
def docs(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    root.mkdir()
    (root / "README.md").write_text("# Hello\n\n[guide](guide.md)\n", encoding="utf-8")
    (root / "guide.md").write_text("# Guide\n", encoding="utf-8")
    return root


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("htmldocs.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("htmldocs.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestBuildCommand:
    """Tests for the build command."""

    def test_build(self, docs: Path) -> None:
        result = runner.invoke(app, ["build", "--source", str(docs)])

        assert result.exit_code == 0
        assert "Processed: 2" in result.stdout
        assert "created: 2" in result.stdout
        assert (docs / "html-docs" / "README.html").exists()

    def test_build_custom_output(self, docs: Path, tmp_path: Path) -> None:
        out = tmp_path / "site"

        result = runner.invoke(app, ["build", "-s", str(docs), "-o", str(out), "-v"])

        assert result.exit_code == 0
        assert (out / "guide.html").exists()

    def test_build_missing_source(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["build", "--source", str(tmp_path / "missing")])

        assert result.exit_code == 2

    def test_build_reports_orphans(self, docs: Path) -> None:
        out = docs / "html-docs"
        out.mkdir()
        (out / "extra.html").write_text("x", encoding="utf-8")

        result = runner.invoke(app, ["build", "--source", str(docs)])

        assert result.exit_code == 0
        assert "extra.html" in result.stdout

    def test_failures_do_not_change_exit_code(self, docs: Path) -> None:
        (docs / "broken.md").write_bytes(b"\xff\xfe")

        result = runner.invoke(app, ["build", "--source", str(docs)])

        assert result.exit_code == 0
        assert "failed: 1" in result.stdout

    def test_fail_on_error(self, docs: Path) -> None:
        (docs / "broken.md").write_bytes(b"\xff\xfe")

        result = runner.invoke(app, ["build", "--source", str(docs), "--fail-on-error"])

        assert result.exit_code == 1

    def test_strict_collision(self, docs: Path) -> None:
        (docs / "sub").mkdir()
        (docs / "sub" / "guide.md").write_text("# Other guide", encoding="utf-8")

        result = runner.invoke(app, ["build", "--source", str(docs), "--strict"])

        assert result.exit_code == 2

    def test_open_launches_primary_page(self, docs: Path) -> None:
        with patch("htmldocs.cli.typer.launch") as mock_launch:
            result = runner.invoke(app, ["build", "--source", str(docs), "--open"])

        assert result.exit_code == 0
        mock_launch.assert_called_once_with(str(docs / "html-docs" / "README.html"))


class TestOrphansCommand:
    """Tests for the orphans command."""

    def test_output_not_found(self, docs: Path) -> None:
        result = runner.invoke(app, ["orphans", "--source", str(docs)])

        assert result.exit_code == 0
        assert "Output directory not found" in result.stdout

    def test_lists_orphans(self, docs: Path) -> None:
        out = docs / "html-docs"
        out.mkdir()
        (out / "gone.html").write_text("x", encoding="utf-8")

        result = runner.invoke(app, ["orphans", "--source", str(docs)])

        assert result.exit_code == 0
        assert "gone.html" in result.stdout

    def test_no_orphans(self, docs: Path) -> None:
        runner.invoke(app, ["build", "--source", str(docs)])

        result = runner.invoke(app, ["orphans", "--source", str(docs)])

        assert "No orphaned pages" in result.stdout


class TestServeCommand:
    """Tests for the serve command."""

    def test_serve_starts_server(self, docs: Path) -> None:
        """Starts uvicorn server with correct parameters."""
        with patch("uvicorn.run") as mock_uvicorn_run:
            result = runner.invoke(
                app, ["serve", "--host", "0.0.0.0", "--port", "9000", "--source", str(docs)]
            )
            assert result.exit_code == 0
            mock_uvicorn_run.assert_called_once()
            call_kwargs = mock_uvicorn_run.call_args[1]
            assert call_kwargs["host"] == "0.0.0.0"
            assert call_kwargs["port"] == 9000

    def test_serve_warns_missing_output(self, docs: Path) -> None:
        with patch("uvicorn.run"):
            result = runner.invoke(app, ["serve", "--source", str(docs)])
            assert result.exit_code == 0
            assert "output directory not found" in result.stdout.lower()
