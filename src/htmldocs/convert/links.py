"""Rewrite links to Markdown sources so they point at generated pages."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path, PurePosixPath

# a reference must end the token; a trailing "." is allowed only as punctuation
_MD_END = r"\.md(?P<anchor>#[\w-]*)?(?![\w/-]|\.[\w./-])"

_HREF_RE = re.compile(r'href="(?P<target>[^"#]*?)\.md(?P<anchor>#[^"]*)?"')
_BARE_RE = re.compile(r"(?<![\w./#-])(?P<target>[\w.][\w./-]*?)" + _MD_END)


@lru_cache(maxsize=32)
def _project_ref_re(root_marker: str) -> re.Pattern[str]:
    return re.compile(
        "@" + re.escape(root_marker) + r"/(?P<target>[\w./-]+?)" + _MD_END
    )


def _html_target(target: str, anchor: str | None, flatten: bool) -> str:
    # external URLs keep their path
    if flatten and "://" not in target:
        target = PurePosixPath(target).name
    return f"{target}.html{anchor or ''}"


def rewrite_links(text: str, root_marker: str, *, flatten: bool = False) -> str:
    """Point ``.md`` references at their ``.html`` counterparts.

    Handles ``@<root>/path.md`` project references, ``href="...md"`` attributes
    and bare ``name.md`` tokens, keeping any ``#anchor``. With ``flatten`` every
    relative target is reduced to its base name. Idempotent: the
    output contains no token the patterns match again.
    """
    text = _project_ref_re(root_marker).sub(
        lambda m: _html_target(m.group("target"), m.group("anchor"), flatten), text
    )
    text = _HREF_RE.sub(
        lambda m: f'href="{_html_target(m.group("target"), m.group("anchor"), flatten)}"', text
    )
    return _BARE_RE.sub(
        lambda m: _html_target(m.group("target"), m.group("anchor"), flatten), text
    )


def rewrite_file(path: Path, root_marker: str, *, flatten: bool = False) -> bool:
    """Rewrite links in one file in place. Returns True when it changed."""
    original = path.read_text(encoding="utf-8")
    updated = rewrite_links(original, root_marker, flatten=flatten)
    if updated == original:
        return False
    path.write_text(updated, encoding="utf-8")
    return True
