"""Boilerplate snippets offered by the article editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Final

_TEMPLATES: Final[Dict[str, str]] = {
    "table": (
        "||Item||Value||Description||\n"
        "|Item 1|Value 1|Description 1|\n"
        "|Item 2|Value 2|Description 2|\n"
        "|Item 3|Value 3|Description 3|"
    ),
    "code_block": (
        "{code:javascript}\n"
        "function hello() {\n"
        '  console.log("Hello, wiki!");\n'
        "}\n"
        "{/code}"
    ),
    "code_block_with_language": (
        "{code:java}\n"
        "public class HelloWorld {\n"
        "    public static void main(String[] args) {\n"
        '        System.out.println("Hello, World!");\n'
        "    }\n"
        "}\n"
        "{/code}"
    ),
    "inline_code": "This function reports progress through &code(console.log); before returning.",
    "combined": (
        "# API Specification\n"
        "\n"
        "## Endpoints\n"
        "\n"
        "||Method||Endpoint||Description||\n"
        "|GET|/api/users|List users|\n"
        "|POST|/api/users|Create a user|\n"
        "|PUT|/api/users/:id|Update a user|\n"
        "\n"
        "## Sample code\n"
        "\n"
        "{code:javascript}\n"
        "const response = await fetch('/api/users', {\n"
        "  method: 'GET',\n"
        "  headers: {\n"
        "    'Content-Type': 'application/json'\n"
        "  }\n"
        "});\n"
        "const users = await response.json();\n"
        "{/code}\n"
        "\n"
        "Wrap calls in &code(try-catch); to handle errors."
    ),
}

TEMPLATE_NAMES: Final = tuple(_TEMPLATES)

_BLOCK_SEPARATOR: Final[str] = "\n\n"


@dataclass(frozen=True)
class InsertResult:
    """Editor state after a template has been inserted."""

    content: str
    position: int


def get_wiki_templates() -> Dict[str, str]:
    """Return a fresh mapping of template name to markup snippet."""

    return dict(_TEMPLATES)


def insert_template(content: str, name: str, start: int, end: int) -> InsertResult:
    """Replace ``content[start:end]`` with the named template.

    The snippet is separated from neighbouring text by a blank line unless it
    already sits at a line boundary.  The returned position is the caret
    offset just after the inserted block.
    """

    template = _TEMPLATES[name]
    if not 0 <= start <= len(content) or not 0 <= end <= len(content):
        raise ValueError(f"Selection {start}:{end} is outside the content")
    if start > end:
        raise ValueError(f"Selection start {start} is after its end {end}")

    prefix = _BLOCK_SEPARATOR if start > 0 and content[start - 1] != "\n" else ""
    suffix = _BLOCK_SEPARATOR if end < len(content) and content[end] != "\n" else ""
    block = f"{prefix}{template}{suffix}"

    return InsertResult(
        content=content[:start] + block + content[end:],
        position=start + len(block),
    )
