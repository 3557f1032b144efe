"""Core htmldocs data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from htmldocs.convert.markdown import extract_title


@dataclass(slots=True, frozen=True)
class SourceDocument:
    """Markdown source read once per run."""

    path: Path
    text: str
    title: str

    @classmethod
    def read(cls, path: Path) -> SourceDocument:
        """Load a source file, titled by its first H1 or its file name."""
        text = path.read_text(encoding="utf-8")
        return cls(path=path, text=text, title=extract_title(text, path.stem))


@dataclass(slots=True)
class GeneratedPage:
    """Rendered HTML page paired with the source it came from."""

    source: Path
    path: Path
    html: str

    @property
    def name(self) -> str:
        return self.path.name
