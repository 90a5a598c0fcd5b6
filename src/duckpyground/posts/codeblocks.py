"""Extraction of code blocks from Markdown.

Posts show code in fenced blocks, delimited by three or more
backticks or tildes, where the opening fence declares
the language of the code::

    ```python
    import duckdb
    duckdb.sql("SELECT 42").show()
    ```

Jekyll also supports the Liquid ``highlight`` tag
for the same purpose::

    {% highlight sql %}
    SELECT 42;
    {% endhighlight %}

Both forms are recognised and reported as :class:`CodeBlock`:

>>> text = "Some text\\n\\n```sql\\nSELECT 42;\\n```\\n"
>>> extract_code_blocks(text)
[CodeBlock(language='sql', code='SELECT 42;\\n', line=3)]
"""

import re
from dataclasses import dataclass

from .errors import PostFormatError

FENCE_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})\s*(?P<info>.*?)\s*$")
HIGHLIGHT_RE = re.compile(r"^\s*{%-?\s*highlight\s+(?P<language>[\w+#-]+)[^%]*-?%}\s*$")
ENDHIGHLIGHT_RE = re.compile(r"^\s*{%-?\s*endhighlight\s*-?%}\s*$")


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block.

    ``line`` is the 1-based line of the opening fence,
    so the code itself starts at ``line + 1``.
    """

    language: str
    code: str
    line: int


def extract_code_blocks(text: str, first_line: int = 1) -> list[CodeBlock]:
    """Find all the code blocks in a Markdown text.

    :param text: The Markdown text.
    :param first_line: The line number of the first line of ``text``,
                       used when the text is only part of a file.
    :raises PostFormatError: if a block is never closed.
    """
    blocks = []
    lines = text.splitlines(keepends=True)
    idx = 0
    while idx < len(lines):
        line = lines[idx]
        fence = FENCE_RE.match(line)
        highlight = HIGHLIGHT_RE.match(line) if fence is None else None
        if fence is None and highlight is None:
            idx += 1
            continue

        if fence is not None:
            info = fence.group("info")
            if fence.group("fence")[0] == "`" and "`" in info:
                # Backticks in the info string make it inline code, not a fence.
                idx += 1
                continue
            language = _language_from_info(info)
            is_closing = _fence_closer(fence.group("fence"))
        else:
            language = highlight.group("language").lower()
            is_closing = ENDHIGHLIGHT_RE.match

        start = idx
        for end in range(start + 1, len(lines)):
            if is_closing(lines[end]):
                break
        else:
            raise PostFormatError(
                "Code block is never closed", line=first_line + start
            )

        code = _dedent(lines[start + 1 : end], len(fence.group("indent")) if fence else 0)
        blocks.append(CodeBlock(language, code, first_line + start))
        idx = end + 1
    return blocks


def _language_from_info(info: str) -> str:
    """The language declared by the info string of a fence.

    Kramdown style attributes like ``{.python}`` are supported too.
    """
    if not info:
        return ""
    word = info.split()[0]
    return word.strip("{}").lstrip(".").lower()


def _fence_closer(opening: str):
    closing_re = re.compile(r"^ {0,3}" + re.escape(opening[0]) + "{" + str(len(opening)) + r",}\s*$")
    return closing_re.match


def _dedent(lines: list[str], indent: int) -> str:
    if not indent:
        return "".join(lines)
    prefix = re.compile(r"^ {0,%d}" % indent)
    return "".join(prefix.sub("", line, count=1) for line in lines)
