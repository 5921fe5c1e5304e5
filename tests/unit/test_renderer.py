"""Tests for Markdown rendering and page assembly."""

from __future__ import annotations

import pytest

from markhub_server.exceptions import RenderError
from markhub_server.renderer import PageRenderer, build_stylesheet, render_markdown


def test_render_markdown_empty_text() -> None:
    assert render_markdown("") == ""


def test_render_markdown_basic_blocks() -> None:
    html = render_markdown("# Title\n\n- one\n- two\n\n**bold** and `code`")
    assert "<h1>Title</h1>" in html
    assert "<li>one</li>" in html
    assert "<strong>bold</strong>" in html
    assert "<code>code</code>" in html


def test_render_markdown_tables() -> None:
    html = render_markdown("| a | b |\n|---|---|\n| 1 | 2 |\n")
    assert "<table>" in html
    assert "<th>a</th>" in html
    assert "<td>2</td>" in html


def test_render_markdown_highlights_fenced_code() -> None:
    html = render_markdown("```python\nimport os\n```\n")
    assert 'class="codehilite"' in html
    assert '<span class="kn">import</span>' in html


def test_unknown_language_is_left_plain() -> None:
    html = render_markdown("```no-such-language\na < b\n```\n")
    assert "a &lt; b" in html


def test_highlighting_failure_falls_back_to_plain_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_extension(*args, **kwargs):
        raise RuntimeError("pygments unavailable")

    monkeypatch.setattr("markhub_server.renderer.CodeHiliteExtension", broken_extension)

    html = render_markdown("```python\nif a < b: pass\n```\n")
    assert "codehilite" not in html
    assert "<pre><code" in html
    assert "a &lt; b" in html


def test_conversion_failure_raises_render_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_markdown(*args, **kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr("markhub_server.renderer.markdown.Markdown", broken_markdown)

    with pytest.raises(RenderError, match="parser exploded"):
        render_markdown("# Hi")


def test_stylesheet_includes_github_and_pygments_rules() -> None:
    css = build_stylesheet()
    assert ".markdown-body" in css
    assert ".codehilite .k" in css


def test_page_escapes_title_and_keeps_content_verbatim() -> None:
    renderer = PageRenderer()
    page = renderer.page("<p>__TITLE__ __ACTIONS__</p>", title="<script>x</script>.md")
    assert "<title>&lt;script&gt;x&lt;/script&gt;.md</title>" in page
    assert "<p>__TITLE__ __ACTIONS__</p>" in page


def test_placeholders_in_title_are_not_expanded() -> None:
    renderer = PageRenderer()
    page = renderer.page("<h1>Hello</h1>", title="__CONTENT__.md - MarkHub")
    assert "<title>__CONTENT__.md - MarkHub</title>" in page
    assert page.count("<h1>Hello</h1>") == 1


def test_page_embed_mode() -> None:
    renderer = PageRenderer()
    standalone = renderer.page("<p>x</p>")
    embedded = renderer.page("<p>x</p>", embed=True)

    assert "Print / Save PDF" in standalone
    assert "markhub-ready" not in standalone
    assert "Print / Save PDF" not in embedded
    assert "postMessage('markhub-ready'" in embedded


def test_page_has_print_rules() -> None:
    page = PageRenderer().render("text")
    assert "@media print" in page
    assert "max-width: 980px" in page
