"""Build configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

DEFAULT_SOURCE_DIR = Path("claude_docs")
DEFAULT_OUTPUT_NAME = "html-docs"
DEFAULT_TEMPLATE_NAME = "html-template.html"


@dataclass(slots=True)
class DocsConfig:
    source_dir: Path = DEFAULT_SOURCE_DIR
    output_dir: Path | None = None
    template_path: Path | None = None
    backup_dir: Path | None = None
    backup: bool = False
    verbose: bool = False
    root_marker: str | None = None
    flatten_links: bool = False
    strict_collisions: bool = False
    _explicit_marker: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.source_dir = Path(self.source_dir)
        if self.output_dir is None:
            self.output_dir = self.source_dir / DEFAULT_OUTPUT_NAME
        self.output_dir = Path(self.output_dir)
        if self.template_path is None:
            self.template_path = self.source_dir / DEFAULT_TEMPLATE_NAME
        self.template_path = Path(self.template_path)
        if self.backup_dir is None:
            self.backup_dir = self.output_dir.with_name(f"{self.output_dir.name}-backup")
        self.backup_dir = Path(self.backup_dir)
        self._explicit_marker = bool(self.root_marker)
        if not self.root_marker:
            # "@claude_docs/x.md" style references use the docs root's own name
            self.root_marker = self.source_dir.resolve().name

    def resolve(self, base_dir: Path | None = None) -> DocsConfig:
        """Return a copy with relative paths anchored at base_dir.

        A root marker derived from the source directory is derived again from
        the anchored path; an explicit one is kept.
        """
        marker = self.root_marker if self._explicit_marker else None
        if base_dir is None:
            return replace(self, root_marker=marker)

        def _anchor(path: Path) -> Path:
            return path if path.is_absolute() else base_dir / path

        return replace(
            self,
            source_dir=_anchor(self.source_dir),
            output_dir=_anchor(self.output_dir),
            template_path=_anchor(self.template_path),
            backup_dir=_anchor(self.backup_dir),
            root_marker=marker,
        )
