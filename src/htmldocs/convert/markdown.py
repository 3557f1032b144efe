"""Minimal Markdown to HTML conversion.

This is a deliberately small subset of Markdown, matching how the
documentation corpus is written. It is not CommonMark. The conversion is a
fixed, ordered tuple of pure ``str -> str`` rules; the order is part of the
behaviour:

* fenced blocks are split out before any prose rule runs, so inline code,
  emphasis and headings never fire inside a fence;
* inline code runs first among the prose rules and encodes the characters
  later rules key on, so ``**kwargs`` or ``*.md`` stay literal;
* bold is converted before italic, so ``**a *b* c**`` nests correctly;
* paragraph wrapping runs last and only wraps text lines that sit outside
  block tags.

Malformed input (unbalanced markers, unterminated fences) is passed through
as literal text rather than raising.
"""

from __future__ import annotations

import html
import re
from typing import Callable, Iterator

Rule = Callable[[str], str]

_HEADING_RE = re.compile(r"^(#{1,3}) +(.+?)[ \t]*$", re.MULTILINE)
_TITLE_RE = re.compile(r"^# +(.+?)[ \t]*$", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(?=\S)([^\n]+?)\*\*")
_ITALIC_RE = re.compile(r"(?<![*\w])\*(?=[^\s*])([^*\n]+?)\*(?![*\w])")
_FENCE_RE = re.compile(
    r"^```[ \t]*(?P<lang>[\w+#.-]*)[^\n]*\n(?P<body>.*?)^```[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)\)")
_LIST_ITEM_RE = re.compile(r"^[ \t]*(?:-|\d+\.) +(.+?)[ \t]*$", re.MULTILINE)
_LIST_RUN_RE = re.compile(r"(?:^<li>.*</li>[ \t]*(?:\n|\Z))+", re.MULTILINE)
_BLOCK_SPLIT_RE = re.compile(r"\n[ \t]*\n+")
_BLOCK_LINE_RE = re.compile(r"^</?(?:h[1-6]|ul|ol|li|div|pre|p|table|blockquote|hr)\b", re.IGNORECASE)


def convert_headings(text: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        level = len(match.group(1))
        return f"<h{level}>{match.group(2).strip()}</h{level}>"

    return _HEADING_RE.sub(_replace, text)


def convert_bold(text: str) -> str:
    return _BOLD_RE.sub(r"<strong>\1</strong>", text)


def convert_italic(text: str) -> str:
    return _ITALIC_RE.sub(r"<em>\1</em>", text)


_CODE_ENTITIES = str.maketrans({"*": "&#42;", "[": "&#91;"})


def convert_inline_code(text: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        code = html.escape(match.group(1), quote=False).translate(_CODE_ENTITIES)
        return f"<code>{code}</code>"

    return _INLINE_CODE_RE.sub(_replace, text)


def convert_links(text: str) -> str:
    return _LINK_RE.sub(r'<a href="\2">\1</a>', text)


def convert_list_items(text: str) -> str:
    return _LIST_ITEM_RE.sub(r"<li>\1</li>", text)


def wrap_list_items(text: str) -> str:
    """Wrap each run of adjacent ``<li>`` lines in a single ``<ul>``.

    Best effort only: ordered items are wrapped in ``<ul>`` too and nesting
    is flattened.
    """
    return _LIST_RUN_RE.sub(lambda m: "<ul>\n" + m.group(0).rstrip("\n") + "\n</ul>\n", text)


def _wrap_block(block: str) -> str:
    pieces: list[str] = []
    run: list[str] = []

    def _flush() -> None:
        paragraph = "\n".join(run).strip()
        if paragraph:
            pieces.append(f"<p>{paragraph}</p>")
        run.clear()

    for line in block.split("\n"):
        if _BLOCK_LINE_RE.match(line.lstrip()):
            _flush()
            pieces.append(line)
        else:
            run.append(line)
    _flush()
    return "\n".join(pieces)


def wrap_paragraphs(text: str) -> str:
    """Wrap text lines in ``<p>``, leaving lines that hold block tags alone.

    A block that mixes text and block tags, e.g. ``Steps:`` followed by a
    list, gets one paragraph per text run.
    """
    blocks = []
    for block in _BLOCK_SPLIT_RE.split(text):
        block = block.strip("\n")
        if block.strip():
            blocks.append(_wrap_block(block))
    return "\n\n".join(blocks)


def render_code_block(body: str, lang: str = "") -> str:
    """Render a fenced block body as a ``<div>``-wrapped ``<pre><code>``."""
    code = html.escape(body.rstrip("\n"), quote=False)
    css = f' class="language-{lang}"' if lang else ""
    return f'<div class="code-block"><pre><code{css}>{code}</code></pre></div>'


RULES: tuple[Rule, ...] = (
    convert_inline_code,
    convert_headings,
    convert_bold,
    convert_italic,
    convert_links,
    convert_list_items,
    wrap_list_items,
    wrap_paragraphs,
)


def iter_segments(text: str) -> Iterator[tuple[bool, str, str]]:
    """Split text into ``(is_code, body, lang)`` segments around fenced blocks.

    An unterminated fence never matches, so it stays in the prose segment.
    """
    position = 0
    for match in _FENCE_RE.finditer(text):
        if match.start() > position:
            yield False, text[position : match.start()], ""
        yield True, match.group("body"), match.group("lang")
        position = match.end()
    if position < len(text):
        yield False, text[position:], ""


def apply_rules(text: str, rules: tuple[Rule, ...] = RULES) -> str:
    for rule in rules:
        text = rule(text)
    return text


def render_markdown(text: str) -> str:
    """Convert Markdown text to an HTML fragment."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    parts = []
    for is_code, body, lang in iter_segments(text):
        if is_code:
            parts.append(render_code_block(body, lang))
        else:
            rendered = apply_rules(body)
            if rendered:
                parts.append(rendered)
    return "\n\n".join(parts) + "\n" if parts else ""


def extract_title(text: str, fallback: str) -> str:
    """Return the first level-1 heading outside code fences, else fallback."""
    text = text.replace("\r\n", "\n")
    for is_code, body, _ in iter_segments(text):
        if is_code:
            continue
        match = _TITLE_RE.search(body)
        if match:
            return match.group(1).strip()
    return fallback
