"""Wiki markup to HTML conversion.

The converter understands a small wiki dialect used by article bodies::

    ||h1||h2||              table header row
    |c1|c2|                 table data row
    {code}...{/code}        fenced code, language "text"
    {code:lang}...{/code}   fenced code with an explicit language
    &code(expr);            inline code span
    # / ## / ### text       headings
    - text                  bullet line
    **text**                bold span

Conversion runs as four passes (tables, fenced code, inline code, then the
line based markdown pass) and never raises: unknown or unterminated markup
is passed through as text.  Only code is HTML escaped; prose and table cells
are inserted verbatim, so untrusted input must be sanitised by the caller.
"""

from __future__ import annotations

import re
from typing import Final, List

_CODE_BLOCK_RE: Final[re.Pattern[str]] = re.compile(
    r"\{code(?::(\w+))?\}(.*?)\{/code\}", re.DOTALL | re.ASCII
)
_INLINE_CODE_RE: Final[re.Pattern[str]] = re.compile(r"&code\(([^)]+)\);")
_BOLD_RE: Final[re.Pattern[str]] = re.compile(r"\*\*(.*?)\*\*")

_HEADINGS: Final = (("# ", "h1"), ("## ", "h2"), ("### ", "h3"))
_SPACER: Final[str] = '<div class="wiki-spacer"></div>'
_HTML_ENTITIES: Final = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
)


def escape_html(text: str) -> str:
    """Return ``text`` with ``&``, ``<``, ``>`` and quotes replaced by entities.

    Unlike serialising a DOM text node, ``"`` and ``'`` are escaped as well.
    """

    # "&" goes first so the entities produced below are not escaped twice.
    for char, entity in _HTML_ENTITIES:
        text = text.replace(char, entity)
    return text


def _row(cells: List[str], tag: str) -> List[str]:
    rendered = ["<tr>"]
    rendered.extend(f"<{tag}>{cell.strip()}</{tag}>" for cell in cells)
    rendered.append("</tr>")
    return rendered


def parse_table(text: str) -> str:
    """Turn runs of ``||header||`` and ``|cell|`` lines into ``<table>`` blocks.

    Every line is trimmed.  Each header row closes the ``<thead>`` and opens a
    ``<tbody>``, so a table with several header rows repeats those tags.  A
    table still open at the end of the input is closed there.
    """

    result: List[str] = []
    in_table = False

    for raw_line in text.split("\n"):
        line = raw_line.strip()

        if line.startswith("||") and line.endswith("||"):
            if not in_table:
                result.extend(["<table>", "<thead>"])
                in_table = True
            result.extend(_row(line[2:-2].split("||"), "th"))
            result.extend(["</thead>", "<tbody>"])
        elif line.startswith("|") and line.endswith("|"):
            if not in_table:
                result.extend(["<table>", "<tbody>"])
                in_table = True
            result.extend(_row(line[1:-1].split("|"), "td"))
        else:
            if in_table:
                result.extend(["</tbody>", "</table>"])
                in_table = False
            result.append(line)

    if in_table:
        result.extend(["</tbody>", "</table>"])

    return "\n".join(result)


def _replace_code_block(match: re.Match[str]) -> str:
    language = match.group(1) or "text"
    code = escape_html(match.group(2).strip())
    return (
        f'<pre class="wiki-code-block"><code class="language-{language}">'
        f"{code}</code></pre>"
    )


def parse_code_block(text: str) -> str:
    """Convert ``{code[:lang]}...{/code}`` spans into escaped ``<pre>`` blocks."""

    return _CODE_BLOCK_RE.sub(_replace_code_block, text)


def parse_inline_code(text: str) -> str:
    """Convert ``&code(expr);`` spans into escaped ``<code>`` elements."""

    return _INLINE_CODE_RE.sub(lambda match: f"<code>{escape_html(match.group(1))}</code>", text)


def _convert_line(line: str) -> str:
    processed = _BOLD_RE.sub(r"<strong>\1</strong>", line)

    # Prefixes are tested on the raw line, text is taken from the bold pass.
    for prefix, tag in _HEADINGS:
        if line.startswith(prefix):
            return f"<{tag}>{processed[len(prefix):]}</{tag}>"
    if line.startswith("- "):
        return f"<p>• {processed[2:]}</p>"
    if not processed.strip():
        return _SPACER
    if not line.startswith("<"):
        return f"<p>{processed}</p>"
    return processed


def parse_basic_markdown(text: str) -> str:
    """Apply bold spans and classify each line as heading, bullet or paragraph.

    Lines that already start with ``<`` (output of the earlier passes) are
    left alone; blank lines become spacer elements.
    """

    return "\n".join(_convert_line(line) for line in text.split("\n"))


def parse_wiki(text: str) -> str:
    """Convert wiki markup into an HTML fragment."""

    if not text:
        return ""

    html = parse_table(text)
    html = parse_code_block(html)
    html = parse_inline_code(html)
    return parse_basic_markdown(html)
