"""Bind rendered fragments into full HTML pages."""

from __future__ import annotations

import logging
import re
from importlib.resources import files
from pathlib import Path

LOGGER = logging.getLogger(__name__)

TITLE_PLACEHOLDER = "{{TITLE}}"
CONTENT_PLACEHOLDER = "{{CONTENT}}"
_PLACEHOLDER_RE = re.compile(f"{re.escape(TITLE_PLACEHOLDER)}|{re.escape(CONTENT_PLACEHOLDER)}")


def default_template() -> str:
    template = files("htmldocs").joinpath("templates/default.html")
    return template.read_text(encoding="utf-8")


def load_template(path: Path | None) -> str | None:
    """Read a page template, returning None when it is unset or unavailable."""
    if path is None or not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Unable to read template %s, using default: %s", path, exc)
        return None


def bind_template(content: str, title: str, template: str | None = None) -> str:
    """Substitute title and content into the template verbatim.

    Both placeholders are replaced in one pass, so placeholder text inside
    the title or content is never expanded.
    """
    page = template if template is not None else default_template()
    values = {TITLE_PLACEHOLDER: title, CONTENT_PLACEHOLDER: content}
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(0)], page)
