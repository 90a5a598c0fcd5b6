import pytest

from duckpyground.posts.codeblocks import CodeBlock, extract_code_blocks
from duckpyground.posts.errors import PostFormatError


def test_backtick_fence():
    text = "Intro\n\n```python\nimport duckdb\n```\n"
    assert extract_code_blocks(text) == [CodeBlock("python", "import duckdb\n", 3)]


def test_tilde_fence_and_first_line():
    text = "~~~sql\nSELECT 1;\n~~~\n"
    assert extract_code_blocks(text, first_line=10) == [CodeBlock("sql", "SELECT 1;\n", 10)]


def test_multiple_blocks():
    text = "```python\na = 1\n```\n\ntext\n\n```\nplain\n```\n"
    blocks = extract_code_blocks(text)
    assert [(b.language, b.line) for b in blocks] == [("python", 1), ("", 7)]


@pytest.mark.parametrize(
    "info, expected",
    [
        ("Python", "python"),
        ("python title='example.py'", "python"),
        ("{.sql}", "sql"),
        ("", ""),
    ],
)
def test_info_string(info, expected):
    text = f"```{info}\ncode\n```\n"
    assert extract_code_blocks(text)[0].language == expected


def test_longer_fence_contains_shorter():
    text = "````markdown\n```python\nx = 1\n```\n````\n"
    blocks = extract_code_blocks(text)
    assert blocks == [CodeBlock("markdown", "```python\nx = 1\n```\n", 1)]


def test_fence_chars_must_match():
    text = "```python\n~~~\nx = 1\n```\n"
    assert extract_code_blocks(text) == [CodeBlock("python", "~~~\nx = 1\n", 1)]


def test_indented_fence():
    text = "  ```python\n  x = 1\n    y = 2\n  ```\n"
    assert extract_code_blocks(text) == [CodeBlock("python", "x = 1\n  y = 2\n", 1)]


def test_inline_backticks_are_not_fences():
    text = "```not a fence``` really\n"
    assert extract_code_blocks(text) == []


def test_highlight_tag():
    text = "{% highlight SQL linenos %}\nSELECT 1;\n{% endhighlight %}\n"
    assert extract_code_blocks(text) == [CodeBlock("sql", "SELECT 1;\n", 1)]


@pytest.mark.parametrize(
    "text, expected_line",
    [
        ("text\n```python\nx = 1\n", 2),
        ("{% highlight python %}\nx = 1\n", 1),
    ],
)
def test_unterminated_block(text, expected_line):
    with pytest.raises(PostFormatError) as excinfo:
        extract_code_blocks(text)
    assert excinfo.value.line == expected_line
