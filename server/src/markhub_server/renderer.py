"""Markdown to GitHub-styled HTML.

Markdown is converted with Python-Markdown; fenced code blocks are
highlighted through Pygments by the ``codehilite`` extension. Highlighting
is best-effort: if it fails the document is rendered again with plain,
escaped code blocks.
"""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path

import markdown
from markdown.extensions import Extension
from markdown.extensions.codehilite import CodeHiliteExtension
from markdown.extensions.fenced_code import FencedCodeExtension
from markdown.extensions.tables import TableExtension
from pygments.formatters import HtmlFormatter

from .exceptions import RenderError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).with_name("templates")
CODEHILITE_CLASS = "codehilite"
PYGMENTS_STYLE = "default"

READY_SCRIPT = """<script>
  window.addEventListener('load', function() {
    if (window.parent && window.parent !== window) {
      window.parent.postMessage('markhub-ready', '*');
    }
  });
</script>"""


def _escape_text(value: object) -> str:
    return html.escape(str(value), quote=True)


def _load_template(name: str) -> str:
    return (TEMPLATES_DIR / name).read_text(encoding="utf-8")


_PLACEHOLDER = re.compile(r"__([A-Z_]+?)__")


def _render_template(template: str, replacements: dict[str, str]) -> str:
    # single pass, so substituted values are never scanned for placeholders
    return _PLACEHOLDER.sub(
        lambda match: replacements.get(match.group(1), match.group(0)), template
    )


def _convert(text: str, *, highlight: bool) -> str:
    extensions: list[Extension] = [FencedCodeExtension(), TableExtension()]
    if highlight:
        extensions.append(
            CodeHiliteExtension(
                css_class=CODEHILITE_CLASS,
                linenums=False,
                guess_lang=False,
            )
        )
    return markdown.Markdown(extensions=extensions).convert(text)


def render_markdown(text: str) -> str:
    """Convert Markdown text to an HTML fragment.

    Args:
        text: Raw Markdown.

    Returns:
        The HTML fragment for the document body.

    Raises:
        RenderError: If the text cannot be converted even without
            syntax highlighting.
    """
    if not text:
        return ""
    try:
        return _convert(text, highlight=True)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Syntax highlighting failed, using plain code blocks: %s", exc)
    try:
        return _convert(text, highlight=False)
    except Exception as exc:  # noqa: BLE001
        raise RenderError(str(exc)) from exc


def build_stylesheet() -> str:
    """GitHub Markdown CSS plus the Pygments rules for code blocks."""
    github_css = _load_template("github-markdown.css")
    pygments_css = HtmlFormatter(style=PYGMENTS_STYLE).get_style_defs(
        f".{CODEHILITE_CLASS}"
    )
    return f"{github_css}\n{pygments_css}"


class PageRenderer:
    """Wraps rendered Markdown in the full preview page.

    Templates and the stylesheet are read once, when the renderer is built.
    """

    def __init__(self) -> None:
        self.stylesheet = build_stylesheet()
        self._page_template = _load_template("page.html")
        self._actions_html = _load_template("actions.html")
        self._index_html = _load_template("index.html")
        self.favicon = _load_template("favicon.svg")

    def index_page(self) -> str:
        return self._index_html

    def page(self, content_html: str, *, title: str = "MarkHub View", embed: bool = False) -> str:
        """Build a complete HTML document around ``content_html``.

        Embedded pages drop the actions menu and notify the parent frame
        once loaded.
        """
        return _render_template(
            self._page_template,
            {
                "TITLE": _escape_text(title),
                "STYLES": self.stylesheet,
                "ACTIONS": "" if embed else self._actions_html,
                "READY_SCRIPT": READY_SCRIPT if embed else "",
                "CONTENT": content_html,
            },
        )

    def render(self, text: str, *, title: str = "MarkHub View", embed: bool = False) -> str:
        return self.page(render_markdown(text), title=title, embed=embed)
