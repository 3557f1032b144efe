"""Utility helpers for working with files."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, Iterator

MARKDOWN_SUFFIX = ".md"
HTML_SUFFIX = ".html"


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True


def iter_markdown_paths(root: Path, exclude: Iterable[Path] = ()) -> Iterator[Path]:
    """Yield Markdown files under root, skipping anything inside excluded dirs."""
    excluded = [directory for directory in exclude if directory.exists()]
    for path in sorted(root.rglob(f"*{MARKDOWN_SUFFIX}")):
        if not path.is_file():
            continue
        if any(_is_within(path, directory) for directory in excluded):
            continue
        yield path


def iter_html_paths(directory: Path) -> Iterator[Path]:
    """Yield generated HTML files directly inside directory."""
    if not directory.is_dir():
        return
    for path in sorted(directory.glob(f"*{HTML_SUFFIX}")):
        if path.is_file():
            yield path


def output_path_for(source: Path, output_dir: Path) -> Path:
    """Map a source file onto the flat output directory."""
    return output_dir / f"{source.stem}{HTML_SUFFIX}"


def snapshot_directory(source: Path, destination: Path) -> Path:
    """Copy source to destination, replacing any previous copy."""
    if destination.exists():
        shutil.rmtree(destination)
    shutil.copytree(source, destination)
    return destination


PRIMARY_PAGES = ("index.html", "README.html")


def primary_page(output_dir: Path) -> Path | None:
    """Return the landing page of a generated site, if there is one."""
    for name in PRIMARY_PAGES:
        candidate = output_dir / name
        if candidate.is_file():
            return candidate
    return None
