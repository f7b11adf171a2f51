"""Unit tests for article body rendering."""

import pytest

from wikimark_core.content import (
    CACHEABLE_LENGTH,
    SUPPORTED_SYNTAXES,
    _render_cached,
    render_content,
)


def test_wiki_is_the_default_syntax():
    assert render_content("# Title") == "<h1>Title</h1>"


def test_converts_markdown_heading():
    converted = render_content("# Title", "markdown")

    assert "<h1>Title</h1>" in converted


def test_markdown_leaves_html_untouched():
    html = "<p>Already formatted</p>"

    assert render_content(html, "markdown") == html


def test_wiki_does_not_special_case_html():
    assert render_content("<p>kept</p>\nplain") == "<p>kept</p>\n<p>plain</p>"


def test_markdown_plain_text():
    converted = render_content("Simple text", "markdown")

    assert converted.startswith("<p>")
    assert "Simple text" in converted


@pytest.mark.parametrize("syntax", SUPPORTED_SYNTAXES)
def test_empty_content_returns_empty_string(syntax):
    assert render_content("", syntax) == ""
    assert render_content("   \n ", syntax) == ""


def test_unsupported_syntax_is_rejected():
    with pytest.raises(ValueError):
        render_content("text", "rst")


def test_repeated_renders_are_identical():
    markup = "||A||\n|1|"

    assert render_content(markup) == render_content(markup)


def test_only_short_bodies_are_cached():
    _render_cached.cache_clear()
    short = "# Short"
    long_body = "x" * (CACHEABLE_LENGTH + 1)

    render_content(short)
    render_content(short)
    render_content(long_body)

    info = _render_cached.cache_info()
    assert info.hits == 1
    assert info.currsize == 1
    assert render_content(long_body) == f"<p>{long_body}</p>"
