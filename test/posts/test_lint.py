import pytest

from duckpyground.engine import DatabaseError
from duckpyground.posts.lint import (
    CodeLanguageRule,
    DuplicateContentRule,
    FilenameRule,
    FrontMatterRule,
    Linter,
    LintIssue,
    PythonSyntaxRule,
    Severity,
    SQLSyntaxRule,
    _error_line,
    default_rules,
    lint_directory,
    python_source,
)
from duckpyground.posts.post import Post
from duckpyground.settings import Settings

FRONT_MATTER = """---
layout: post
title: "A post"
date: 2024-03-10
categories: [duckdb]
---
"""


def make_post(body, front_matter=FRONT_MATTER, path="_posts/2024-03-10-a-post.md"):
    return Post.from_text(front_matter + body, path=path)


def issues_for(rule, post):
    return [(i.line, i.message, i.severity) for i in rule.check(post)]


def test_valid_post_has_no_issues():
    post = make_post("```python\nx = 1\n```\n\n```sql\nSELECT 1;\n```\n")
    assert Linter().lint([post]) == []


def test_issue_str():
    issue = LintIssue("a.md", 3, "sql-syntax", "boom", Severity.WARNING)
    assert str(issue) == "a.md:3: [warning] sql-syntax: boom"


def test_missing_front_matter():
    post = make_post("Hello", front_matter="")
    assert issues_for(FrontMatterRule(), post) == [
        (1, "Missing front matter", Severity.ERROR)
    ]


def test_missing_required_keys():
    post = make_post("Hello", front_matter="---\ntitle: A post\n---\n")
    messages = [message for _, message, _ in issues_for(FrontMatterRule(), post)]
    assert messages == [
        "Missing required key: layout",
        "Missing required key: date",
        "Missing required key: categories",
    ]


def test_custom_required_keys():
    post = make_post("Hello", front_matter="---\ntitle: A post\n---\n")
    assert issues_for(FrontMatterRule(required=["title"]), post) == []


@pytest.mark.parametrize(
    "front_matter, expected_message",
    [
        (
            "---\nlayout: post\ntitle: ''\ndate: 2024-03-10\ncategories: [a]\n---\n",
            "Title is empty",
        ),
        (
            "---\nlayout: post\ntitle: T\ndate: someday\ncategories: [a]\n---\n",
            "Invalid date: 'someday'",
        ),
        (
            "---\nlayout: post\ntitle: T\ndate: 2024-03-10\ncategories: []\n---\n",
            "No categories provided",
        ),
        (
            "---\nlayout: [a, b]\ntitle: T\ndate: 2024-03-10\ncategories: [a]\n---\n",
            "Layout must be a name",
        ),
    ],
)
def test_invalid_front_matter_values(front_matter, expected_message):
    post = make_post("Hello", front_matter=front_matter)
    messages = [message for _, message, _ in issues_for(FrontMatterRule(), post)]
    assert messages == [expected_message]


@pytest.mark.parametrize(
    "path, expected",
    [
        ("_posts/2024-03-10-a-post.md", []),
        (
            "_posts/a-post.md",
            [(1, "File name a-post.md doesn't match YYYY-MM-DD-slug.md", Severity.ERROR)],
        ),
        (
            "_posts/2024-02-30-a-post.md",
            [(1, "Invalid date in file name 2024-02-30-a-post.md", Severity.ERROR)],
        ),
        (
            "_posts/2024-03-11-a-post.md",
            [
                (
                    1,
                    "Date 2024-03-10 differs from the file name date 2024-03-11",
                    Severity.WARNING,
                )
            ],
        ),
    ],
)
def test_filename(path, expected):
    assert issues_for(FilenameRule(), make_post("Hello", path=path)) == expected


def test_python_syntax_error_line():
    post = make_post("Text\n\n```python\nx = 1\ny = (\n```\n")
    issues = issues_for(PythonSyntaxRule(), post)
    assert len(issues) == 1
    line, _, severity = issues[0]
    # Front matter takes 6 lines, the fence is on line 9, "y = (" on line 11.
    assert line == 11
    assert severity == Severity.ERROR


def test_python_ignores_other_languages():
    post = make_post("```ruby\nputs 'hi'(\n```\n")
    assert issues_for(PythonSyntaxRule(), post) == []


def test_python_interactive_session():
    post = make_post("```python\n>>> x = 1\n>>> x\n1\n>>> for i in range(2):\n...     print(i)\n0\n1\n```\n")
    assert issues_for(PythonSyntaxRule(), post) == []


def test_python_magics_are_ignored():
    post = make_post("```python\n!pip install duckdb\n%timeit sum(range(10))\nimport duckdb\n```\n")
    assert issues_for(PythonSyntaxRule(), post) == []


def test_python_source_maps_lines():
    source, linemap = python_source(">>> a = 1\nout\n>>> if a:\n...     b = 2\n")
    assert source == "a = 1\nif a:\n    b = 2"
    assert linemap == [1, 3, 4]


def test_sql_syntax_error():
    rule = SQLSyntaxRule()
    try:
        post = make_post("```sql\nSELECT 1;\nSELEC * FORM users;\n```\n")
        issues = issues_for(rule, post)
    finally:
        rule.close()
    assert len(issues) == 1
    line, message, severity = issues[0]
    assert line == 9
    assert "syntax error" in message.lower()
    assert severity == Severity.ERROR


def test_sql_syntax_error_line_within_block():
    rule = SQLSyntaxRule()
    try:
        post = make_post("```sql\nSELECT 1;\n\nSELECT 2;\nSELEC 3;\n```\n")
        issues = issues_for(rule, post)
    finally:
        rule.close()
    assert [line for line, _, _ in issues] == [11]


def test_sql_error_line_defaults_to_first_line():
    assert _error_line(DatabaseError("Parser Error: boom")) == 1
    assert _error_line(DatabaseError("Parser Error: boom\n\nLINE 3: SELEC\n")) == 3


def test_sql_missing_tables_are_fine():
    rule = SQLSyntaxRule()
    try:
        post = make_post(
            "```sql\nSELECT * FROM read_parquet('missing.parquet') JOIN nowhere USING (id);\n```\n"
        )
        assert issues_for(rule, post) == []
    finally:
        rule.close()


def test_code_language():
    post = make_post("```\nsome code\n```\n")
    assert issues_for(CodeLanguageRule(), post) == [
        (7, "Code block without a language", Severity.WARNING)
    ]


DUCKDB_TEXT = (
    "DuckDB is an embedded analytical database. It runs inside the Python process "
    "and it is very fast at scanning and aggregating data stored by column. "
) * 5


def test_duplicate_content():
    first = make_post(DUCKDB_TEXT, path="_posts/2024-03-10-first.md")
    second = make_post(DUCKDB_TEXT + "One more line.", path="_posts/2024-03-10-second.md")
    other = make_post(
        "Window functions compute values over partitions of rows.",
        path="_posts/2024-03-10-other.md",
    )
    issues = list(DuplicateContentRule(0.9).check_all([first, second, other]))
    assert len(issues) == 1
    assert issues[0].path == "_posts/2024-03-10-second.md"
    assert issues[0].severity == Severity.WARNING
    assert "2024-03-10-first.md" in issues[0].message


def test_duplicate_threshold():
    first = make_post(DUCKDB_TEXT, path="_posts/2024-03-10-first.md")
    second = make_post(DUCKDB_TEXT + "One more line.", path="_posts/2024-03-10-second.md")
    assert list(DuplicateContentRule(1.0).check_all([first, second])) == []


def test_duplicate_invalid_threshold():
    with pytest.raises(ValueError):
        DuplicateContentRule(1.5)


def test_default_rules_from_settings():
    rules = default_rules(Settings(required_front_matter=["title"], similarity_threshold=0.5))
    front_matter_rule = next(r for r in rules if isinstance(r, FrontMatterRule))
    duplicate_rule = next(r for r in rules if isinstance(r, DuplicateContentRule))
    assert front_matter_rule.required == ("title",)
    assert duplicate_rule.threshold == 0.5


def test_lint_sorts_issues():
    post = make_post("```\nx\n```\n```python\n(\n```\n", front_matter="")
    issues = Linter([PythonSyntaxRule(), CodeLanguageRule(), FrontMatterRule()]).lint([post])
    assert [(i.line, i.rule) for i in issues] == [
        (1, "code-language"),
        (1, "front-matter"),
        (5, "python-syntax"),
    ]


def test_lint_directory(tmp_path):
    (tmp_path / "2024-03-10-good.md").write_text(FRONT_MATTER + "Fine.\n")
    (tmp_path / "2024-03-10-unclosed.md").write_text(FRONT_MATTER + "```python\nx = 1\n")
    (tmp_path / "README.txt").write_text("ignored")

    issues = lint_directory(tmp_path)
    assert [(i.path, i.line, i.rule) for i in issues] == [
        (str(tmp_path / "2024-03-10-unclosed.md"), 7, "parse"),
    ]


def test_lint_reports_unclosed_code_blocks():
    broken = make_post("```python\nprint(1)\n", path="_posts/2024-03-10-broken.md")
    other = make_post("```\nx\n```\n", path="_posts/2024-03-10-other.md")
    issues = Linter([CodeLanguageRule()]).lint([broken, other])
    assert [(i.path, i.line, i.rule, i.message) for i in issues] == [
        ("_posts/2024-03-10-broken.md", 7, "parse", "Code block is never closed"),
        ("_posts/2024-03-10-other.md", 7, "code-language", "Code block without a language"),
    ]


def test_lint_paths_missing_file(tmp_path):
    missing = tmp_path / "2024-03-10-missing.md"
    issues = Linter([FrontMatterRule()]).lint_paths([missing])
    assert [(i.path, i.line, i.rule) for i in issues] == [(str(missing), 1, "parse")]
    assert issues[0].message.startswith("Unable to read")


def test_lint_paths_with_files(tmp_path):
    path = tmp_path / "2024-03-10-no-front-matter.md"
    path.write_text("Hello\n")
    issues = Linter([FrontMatterRule()]).lint_paths([path])
    assert [(i.rule, i.message) for i in issues] == [("front-matter", "Missing front matter")]
