"""Documentation build pipeline."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from htmldocs.config import DocsConfig
from htmldocs.convert.links import rewrite_file
from htmldocs.convert.markdown import render_markdown
from htmldocs.convert.template import bind_template, load_template
from htmldocs.models import GeneratedPage, SourceDocument
from htmldocs.utils.files import (
    iter_html_paths,
    iter_markdown_paths,
    output_path_for,
    snapshot_directory,
)

LOGGER = logging.getLogger(__name__)


class OutputCollisionError(ValueError):
    """Two sources would be written to the same flat output file."""


@dataclass(slots=True)
class BuildStats:
    created: int = 0
    updated: int = 0
    rewritten: int = 0
    failed: list[Path] = field(default_factory=list)
    rewrite_failed: list[Path] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)
    collisions: list[str] = field(default_factory=list)
    processed_files: list[Path] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.processed_files)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.rewrite_failed

    def increment(self, status: str, path: Path) -> None:
        if status == "created":
            self.created += 1
        elif status == "updated":
            self.updated += 1
        else:
            self.failed.append(path)
        self.processed_files.append(path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "created": self.created,
            "updated": self.updated,
            "rewritten": self.rewritten,
            "failed": [str(path) for path in self.failed],
            "rewrite_failed": [str(path) for path in self.rewrite_failed],
            "orphans": list(self.orphans),
            "collisions": list(self.collisions),
        }


def find_sources(config: DocsConfig) -> list[Path]:
    """Find Markdown sources, skipping generated output and backups."""
    if not config.source_dir.is_dir():
        raise FileNotFoundError(f"Source directory not found: {config.source_dir}")
    return list(iter_markdown_paths(config.source_dir, exclude=(config.output_dir, config.backup_dir)))


def find_collisions(sources: list[Path]) -> dict[str, list[Path]]:
    by_name: dict[str, list[Path]] = defaultdict(list)
    for path in sources:
        by_name[f"{path.stem}.html"].append(path)
    return {name: paths for name, paths in by_name.items() if len(paths) > 1}


def find_orphans(config: DocsConfig, sources: list[Path] | None = None) -> list[str]:
    """List output pages whose source no longer exists. Nothing is deleted."""
    if sources is None:
        sources = find_sources(config)
    stems = {path.stem for path in sources}
    return [path.name for path in iter_html_paths(config.output_dir) if path.stem not in stems]


class DocsBuilder:
    """Converts a Markdown tree into a flat directory of HTML pages."""

    def __init__(self, config: DocsConfig) -> None:
        self.config = config
        self._progress = LOGGER.info if config.verbose else LOGGER.debug

    def build(self) -> BuildStats:
        config = self.config
        sources = find_sources(config)

        stats = BuildStats()
        collisions = find_collisions(sources)
        if collisions:
            if config.strict_collisions:
                details = ", ".join(
                    f"{name} <- {', '.join(str(p) for p in paths)}"
                    for name, paths in sorted(collisions.items())
                )
                raise OutputCollisionError(f"Sources share an output file: {details}")
            for name, paths in sorted(collisions.items()):
                LOGGER.warning(
                    "%d sources write %s, the last one wins: %s",
                    len(paths),
                    name,
                    ", ".join(str(p) for p in paths),
                )
            stats.collisions = sorted(collisions)

        config.output_dir.mkdir(parents=True, exist_ok=True)
        if config.backup:
            LOGGER.info("Backing up %s to %s", config.output_dir, config.backup_dir)
            snapshot_directory(config.output_dir, config.backup_dir)

        if not sources:
            LOGGER.warning("No Markdown files found under %s", config.source_dir)

        template = load_template(config.template_path)
        if template is None:
            LOGGER.debug("No template at %s, using built-in page", config.template_path)

        for path in sources:
            try:
                self._progress(f"Processing: {path}")
                status = self._build_single(path, template)
                stats.increment(status, path)
            except Exception as e:
                LOGGER.error(f"Failed to process {path}: {e}")
                stats.increment("failed", path)

        # Only start rewriting once every page is on disk
        for page in iter_html_paths(config.output_dir):
            try:
                if rewrite_file(page, config.root_marker, flatten=config.flatten_links):
                    stats.rewritten += 1
                    self._progress(f"Rewrote links: {page.name}")
            except Exception as e:
                LOGGER.error(f"Failed to rewrite links in {page}: {e}")
                stats.rewrite_failed.append(page)

        stats.orphans = find_orphans(config, sources)
        for name in stats.orphans:
            LOGGER.warning("Orphaned page without source: %s", name)

        LOGGER.info(
            "Processed %d files: %d created, %d updated, %d failed, %d rewritten",
            stats.processed,
            stats.created,
            stats.updated,
            len(stats.failed),
            stats.rewritten,
        )
        return stats

    def _build_single(self, path: Path, template: str | None) -> str:
        """Render one source file and write its page."""
        document = SourceDocument.read(path)
        fragment = render_markdown(document.text)
        page = GeneratedPage(
            source=path,
            path=output_path_for(path, self.config.output_dir),
            html=bind_template(fragment, document.title, template),
        )

        status = "updated" if page.path.exists() else "created"
        page.path.write_text(page.html, encoding="utf-8")
        self._progress(f"Wrote {page.name} ({status})")
        return status
