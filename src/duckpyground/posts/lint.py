"""Quality checks for posts.

Posts are only text, but a broken post can still break
the site build or, worse, teach readers code that doesn't work.
The linter verifies that posts are well formed and that
the code they show is at least syntactically valid.

Each check is implemented by a :class:`Rule`, the :class:`Linter`
runs all the rules over the posts and collects the :class:`LintIssue`
they report:

>>> from duckpyground.posts import Post
>>> post = Post.from_text(
...     "---\\nlayout: post\\ntitle: Broken\\ndate: 2024-03-10\\ncategories: [duckdb]\\n---\\n"
...     "```python\\nprint('hello'\\n```\\n",
...     path="_posts/2024-03-10-broken.md",
... )
>>> for issue in Linter().lint([post]):
...     print(issue)
_posts/2024-03-10-broken.md:8: [error] python-syntax: '(' was never closed

The available rules are:

* ``front-matter``: the front matter exists and provides the required keys.
* ``filename``: the file name follows the ``YYYY-MM-DD-slug.md`` convention.
* ``python-syntax``: Python code blocks can be parsed.
* ``sql-syntax``: SQL code blocks can be parsed by DuckDB.
* ``code-language``: code blocks declare their language.
* ``duplicate-content``: two posts are not almost the same text.
"""

import abc
import ast
import difflib
import enum
import itertools
import os
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..engine.connection import Database, DatabaseError
from ..settings import Settings, get_settings
from ..utils.logging import get_logger
from .errors import PostFormatError
from .post import POST_EXTENSIONS, Post, parse_date

log = get_logger(__name__)

PYTHON_LANGUAGES = ("python", "py", "python3", "pycon")
SQL_LANGUAGES = ("sql", "duckdb")
# DuckDB error context, like "LINE 2: SELEC * FROM users;"
SQL_ERROR_LINE_RE = re.compile(r"^LINE (\d+):", re.MULTILINE)


class Severity(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class LintIssue:
    """A problem found in a post."""

    path: str
    line: int
    rule: str
    message: str
    severity: Severity = Severity.ERROR

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: [{self.severity.value}] {self.rule}: {self.message}"


class Rule(abc.ABC):
    """A check to perform on posts.

    Rules usually look at one post at the time, implementing
    :meth:`check`. Rules that need to compare posts
    can override :meth:`check_all` instead.
    """

    name: str = ""

    @abc.abstractmethod
    def check(self, post: Post) -> Iterable[LintIssue]:
        """Report the issues found in the post."""
        ...

    def check_all(self, posts: Sequence[Post]) -> Iterable[LintIssue]:
        """Report the issues found in a set of posts."""
        for post in posts:
            yield from self.check(post)

    def issue(
        self, post: Post, line: int, message: str, severity: Severity = Severity.ERROR
    ) -> LintIssue:
        return LintIssue(post.path, line, self.name, message, severity)


class FrontMatterRule(Rule):
    """The front matter must exist and provide the keys Jekyll needs."""

    name = "front-matter"

    def __init__(self, required: Sequence[str] = ("layout", "title", "date", "categories")) -> None:
        """
        :param required: The keys every post must provide.
        """
        self.required = tuple(required)

    def check(self, post: Post) -> Iterable[LintIssue]:
        front_matter = post.front_matter
        if front_matter is None:
            yield self.issue(post, 1, "Missing front matter")
            return

        for key in self.required:
            if key not in front_matter or front_matter[key] is None:
                yield self.issue(post, 1, f"Missing required key: {key}")

        if "title" in front_matter and not (front_matter.title or "").strip():
            yield self.issue(post, 1, "Title is empty")
        if front_matter.get("date") is not None:
            try:
                parse_date(front_matter["date"])
            except ValueError as e:
                yield self.issue(post, 1, str(e))
        if "categories" in front_matter and not front_matter.categories:
            yield self.issue(post, 1, "No categories provided")
        if front_matter.get("layout") is not None and not isinstance(front_matter.layout, str):
            yield self.issue(post, 1, "Layout must be a name")


class FilenameRule(Rule):
    """Post files must be named ``YYYY-MM-DD-slug.md`` or Jekyll ignores them."""

    name = "filename"

    def check(self, post: Post) -> Iterable[LintIssue]:
        if post.slug is None:
            yield self.issue(
                post, 1, f"File name {post.filename} doesn't match YYYY-MM-DD-slug.md"
            )
            return
        if post.filename_date is None:
            yield self.issue(post, 1, f"Invalid date in file name {post.filename}")
            return

        date = post.front_matter.date if post.front_matter is not None else None
        if date is not None and date.date() != post.filename_date:
            yield self.issue(
                post,
                1,
                f"Date {date.date().isoformat()} differs from the file name date "
                f"{post.filename_date.isoformat()}",
                Severity.WARNING,
            )


class PythonSyntaxRule(Rule):
    """Python code blocks must be valid Python.

    Blocks showing an interactive session, with ``>>>`` prompts,
    are checked by looking at the statements only.
    Jupyter magics and shell escapes, lines starting with
    ``%`` or ``!``, are ignored.
    """

    name = "python-syntax"

    def check(self, post: Post) -> Iterable[LintIssue]:
        for block in post.code_blocks:
            if block.language not in PYTHON_LANGUAGES:
                continue
            source, linemap = python_source(block.code)
            try:
                ast.parse(source)
            except SyntaxError as e:
                lineno = linemap[e.lineno - 1] if e.lineno and e.lineno <= len(linemap) else 1
                yield self.issue(post, block.line + lineno, e.msg)


def python_source(code: str) -> tuple[str, list[int]]:
    """Get the Python source out of a code block.

    Returns the source and, for each line of the source,
    the line of the block it comes from.

    >>> python_source(">>> x = 1\\n>>> x\\n1\\n")
    ('x = 1\\nx', [1, 2])
    """
    lines = code.splitlines()
    if not any(line.startswith(">>>") for line in lines):
        return "\n".join(_strip_magic(line) for line in lines), list(range(1, len(lines) + 1))

    source, linemap = [], []
    for lineno, line in enumerate(lines, start=1):
        if line.startswith((">>> ", "... ")) or line in (">>>", "..."):
            source.append(_strip_magic(line[4:]))
            linemap.append(lineno)
    return "\n".join(source), linemap


def _strip_magic(line: str) -> str:
    stripped = line.lstrip()
    if stripped.startswith(("%", "!")):
        return ""
    return line


class SQLSyntaxRule(Rule):
    """SQL code blocks must be accepted by the DuckDB parser.

    Only the syntax is verified, the tables and files
    the queries refer to don't need to exist.
    """

    name = "sql-syntax"

    def __init__(self) -> None:
        self._db: Database | None = None

    def check(self, post: Post) -> Iterable[LintIssue]:
        for block in post.code_blocks:
            if block.language not in SQL_LANGUAGES or not block.code.strip():
                continue
            try:
                self.database.parse(block.code)
            except DatabaseError as e:
                yield self.issue(post, block.line + _error_line(e), _first_line(e))

    @property
    def database(self) -> Database:
        if self._db is None:
            self._db = Database()
        return self._db

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None


def _first_line(error: DatabaseError) -> str:
    message = str(error.__cause__ or error)
    return message.strip().splitlines()[0]


def _error_line(error: DatabaseError) -> int:
    """The line of the code block the error refers to, the first one when unknown."""
    match = SQL_ERROR_LINE_RE.search(str(error.__cause__ or error))
    return int(match.group(1)) if match else 1


class CodeLanguageRule(Rule):
    """Code blocks should declare their language, for highlighting and checks."""

    name = "code-language"

    def check(self, post: Post) -> Iterable[LintIssue]:
        for block in post.code_blocks:
            if not block.language:
                yield self.issue(
                    post, block.line, "Code block without a language", Severity.WARNING
                )


class DuplicateContentRule(Rule):
    """Posts should not repeat the content of another post."""

    name = "duplicate-content"

    def __init__(self, threshold: float = 0.9) -> None:
        """
        :param threshold: How similar, from 0 to 1, two posts
                          have to be to be reported.
        """
        if not 0 <= threshold <= 1:
            raise ValueError("threshold must be between 0 and 1")
        self.threshold = threshold

    def check(self, post: Post) -> Iterable[LintIssue]:
        return ()

    def check_all(self, posts: Sequence[Post]) -> Iterable[LintIssue]:
        texts = [_normalize_text(p.body) for p in posts]
        for (i, first), (j, second) in itertools.combinations(enumerate(posts), 2):
            if not texts[i] or not texts[j]:
                continue
            matcher = difflib.SequenceMatcher(None, texts[i], texts[j], autojunk=False)
            if matcher.real_quick_ratio() < self.threshold or matcher.quick_ratio() < self.threshold:
                continue
            ratio = matcher.ratio()
            if ratio >= self.threshold:
                yield self.issue(
                    second,
                    1,
                    f"Content is {ratio:.0%} similar to {first.filename}",
                    Severity.WARNING,
                )


def _normalize_text(text: str) -> list[str]:
    return re.sub(r"\s+", " ", text).strip().lower().split(" ") if text.strip() else []


def default_rules(settings: Settings | None = None) -> list[Rule]:
    """The rules enabled by default, configured from the settings."""
    settings = settings or get_settings()
    return [
        FrontMatterRule(settings.required_front_matter),
        FilenameRule(),
        PythonSyntaxRule(),
        SQLSyntaxRule(),
        CodeLanguageRule(),
        DuplicateContentRule(settings.similarity_threshold),
    ]


class Linter:
    """Run rules over posts and collect the issues."""

    def __init__(self, rules: Sequence[Rule] | None = None) -> None:
        """
        :param rules: The rules to apply, :func:`default_rules` when not provided.
        """
        self.rules = list(rules) if rules is not None else default_rules()

    def lint(self, posts: Sequence[Post]) -> list[LintIssue]:
        """Check the posts, returns the issues sorted by file and line.

        Posts whose code blocks can't be parsed are reported
        as ``parse`` errors and skipped by the rules.
        """
        issues: list[LintIssue] = []
        valid: list[Post] = []
        for post in posts:
            try:
                post.code_blocks
            except PostFormatError as e:
                issues.append(LintIssue(post.path, e.line, "parse", e.message))
            else:
                valid.append(post)
        try:
            for rule in self.rules:
                found = list(rule.check_all(valid))
                log.debug("rule checked", rule=rule.name, issues=len(found))
                issues.extend(found)
        finally:
            for rule in self.rules:
                if isinstance(rule, SQLSyntaxRule):
                    rule.close()
        issues.sort(key=lambda i: (i.path, i.line, i.rule))
        log.info("posts linted", posts=len(posts), issues=len(issues))
        return issues

    def lint_paths(self, paths: Iterable[str | os.PathLike]) -> list[LintIssue]:
        """Check post files and directories of posts.

        Files that can't be parsed are reported
        as ``parse`` errors and skipped by the rules.
        """
        posts: list[Post] = []
        errors: list[LintIssue] = []
        for path in _expand_paths(paths):
            try:
                posts.append(Post.load(path))
            except PostFormatError as e:
                errors.append(LintIssue(path, e.line, "parse", e.message))
            except UnicodeDecodeError as e:
                errors.append(LintIssue(path, 1, "parse", f"Not valid UTF-8: {e.reason}"))
            except OSError as e:
                errors.append(LintIssue(path, 1, "parse", f"Unable to read: {e.strerror}"))
        return sorted(
            errors + self.lint(posts), key=lambda i: (i.path, i.line, i.rule)
        )


def lint_directory(
    directory: str | os.PathLike, rules: Sequence[Rule] | None = None
) -> list[LintIssue]:
    """Check all the posts in a directory."""
    return Linter(rules).lint_paths([directory])


def _expand_paths(paths: Iterable[str | os.PathLike]) -> list[str]:
    files = []
    for path in paths:
        path = os.fspath(path)
        if os.path.isdir(path):
            files.extend(
                os.path.join(path, filename)
                for filename in sorted(os.listdir(path))
                if filename.lower().endswith(POST_EXTENSIONS)
            )
        else:
            files.append(path)
    return files

