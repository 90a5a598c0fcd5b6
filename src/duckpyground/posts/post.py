"""Posts and their front matter.

A post is a Markdown file that starts with a front matter,
a block of YAML metadata between two ``---`` lines that
tells Jekyll how to render the post::

    ---
    layout: post
    title: "Querying Parquet files with DuckDB"
    date: 2024-03-10 10:00:00 +0100
    categories: duckdb python
    ---

    The body of the post, in Markdown.

Jekyll expects posts to be named ``YYYY-MM-DD-slug.md``,
the slug becomes part of the URL of the rendered page.

>>> front_matter, body, body_line = parse_front_matter(
...     "---\\nlayout: post\\ntitle: Hello\\ncategories: duckdb python\\n---\\nHi!\\n"
... )
>>> front_matter.categories
['duckdb', 'python']
>>> body, body_line
('Hi!\\n', 6)
"""

import datetime
import os
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any

import yaml

from ..utils.logging import get_logger
from .codeblocks import CodeBlock, extract_code_blocks
from .errors import PostFormatError

log = get_logger(__name__)

FRONT_MATTER_DELIMITER = "---"
POST_EXTENSIONS = (".md", ".markdown")
FILENAME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})-(.+)\.(md|markdown)$")
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


class FrontMatter(dict):
    """The metadata of a post.

    Behaves like a dictionary of the YAML content,
    with accessors for the keys that Jekyll understands.
    """

    @property
    def layout(self) -> str | None:
        return self.get("layout")

    @property
    def title(self) -> str | None:
        title = self.get("title")
        return None if title is None else str(title)

    @property
    def date(self) -> datetime.datetime | None:
        """The publication date, if provided and valid."""
        value = self.get("date")
        if value is None:
            return None
        try:
            return parse_date(value)
        except ValueError:
            return None

    @property
    def categories(self) -> list[str]:
        """The categories of the post.

        Jekyll accepts both a YAML list and a space separated
        string, both are returned as a list.
        """
        value = self.get("categories")
        if value is None:
            return []
        elif isinstance(value, str):
            return value.split()
        elif isinstance(value, list):
            return [str(v) for v in value]
        return [str(value)]


def parse_date(value: Any) -> datetime.datetime:
    """Parse a front matter date in any of the formats Jekyll accepts.

    YAML might have already converted the value to
    a date or datetime, otherwise the string is parsed.

    >>> parse_date("2024-03-10 10:00:00 +0100").isoformat()
    '2024-03-10T10:00:00+01:00'
    >>> parse_date("2024-03-10").isoformat()
    '2024-03-10T00:00:00'
    """
    if isinstance(value, datetime.datetime):
        return value
    elif isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    elif not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")

    value = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt)
        except ValueError:
            continue
    try:
        return datetime.datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def parse_front_matter(text: str) -> tuple[FrontMatter | None, str, int]:
    """Split the front matter from the body of a post.

    Returns the front matter (or ``None`` when the text doesn't start with one),
    the body and the line number (1-based) where the body starts.

    :raises PostFormatError: if the front matter is not terminated,
                             is not valid YAML or is not a mapping.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FRONT_MATTER_DELIMITER:
        return None, text, 1

    for idx, line in enumerate(lines[1:], start=1):
        if line.rstrip() == FRONT_MATTER_DELIMITER:
            closing = idx
            break
    else:
        raise PostFormatError("Front matter is not terminated", line=1)

    try:
        data = yaml.safe_load("".join(lines[1:closing]))
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 2 if mark is not None else 1
        raise PostFormatError(f"Invalid front matter: {e}", line=line) from e

    if data is None:
        data = {}
    elif not isinstance(data, dict):
        raise PostFormatError("Front matter must be a mapping of keys to values", line=1)

    body = "".join(lines[closing + 1 :])
    return FrontMatter(data), body, closing + 2


@dataclass
class Post:
    """A Markdown post loaded from disk."""

    path: str
    front_matter: FrontMatter | None
    body: str
    body_line: int = 1
    _code_blocks: list[CodeBlock] | None = field(default=None, repr=False)

    @classmethod
    def load(cls, path: str | os.PathLike) -> "Post":
        """Read and parse a post file.

        :raises PostFormatError: when the post can't be parsed,
                                 the error refers to the file path.
        """
        path = os.fspath(path)
        with open(path, encoding="utf-8") as f:
            text = f.read()
        try:
            front_matter, body, body_line = parse_front_matter(text)
            post = cls(path, front_matter, body, body_line)
            post._code_blocks = extract_code_blocks(body, first_line=body_line)
        except PostFormatError as e:
            raise e.with_path(path) from e
        log.debug("post loaded", path=path, code_blocks=len(post._code_blocks))
        return post

    @classmethod
    def from_text(cls, text: str, path: str = "<string>") -> "Post":
        """Parse a post from its text."""
        front_matter, body, body_line = parse_front_matter(text)
        return cls(path, front_matter, body, body_line)

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def code_blocks(self) -> list[CodeBlock]:
        """The fenced code blocks in the body of the post."""
        if self._code_blocks is None:
            self._code_blocks = extract_code_blocks(self.body, first_line=self.body_line)
        return self._code_blocks

    @property
    def slug(self) -> str | None:
        """The slug encoded in the file name, if it follows the Jekyll convention."""
        match = FILENAME_RE.match(self.filename)
        return match.group(2) if match else None

    @property
    def filename_date(self) -> datetime.date | None:
        """The date encoded in the file name, if it follows the Jekyll convention."""
        match = FILENAME_RE.match(self.filename)
        if match is None:
            return None
        try:
            return datetime.date.fromisoformat(match.group(1))
        except ValueError:
            return None


def load_posts(directory: str | os.PathLike) -> list[Post]:
    """Load all the posts in a directory, sorted by file name."""
    directory = os.fspath(directory)
    return [
        Post.load(os.path.join(directory, filename))
        for filename in sorted(os.listdir(directory))
        if filename.lower().endswith(POST_EXTENSIONS)
    ]


def slugify(title: str) -> str:
    """Convert a title to the slug used in post file names.

    >>> slugify("Querying Parquet files with DuckDB & Python!")
    'querying-parquet-files-with-duckdb-python'
    """
    text = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode()
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def render_post(front_matter: dict[str, Any], body: str = "") -> str:
    """Render the text of a post file.

    >>> print(render_post({"layout": "post", "title": "Hello"}, "Hi!"))
    ---
    layout: post
    title: Hello
    ---
    Hi!
    """
    header = yaml.safe_dump(
        dict(front_matter), sort_keys=False, allow_unicode=True, default_flow_style=False
    )
    return f"{FRONT_MATTER_DELIMITER}\n{header}{FRONT_MATTER_DELIMITER}\n{body}"


def new_post(
    title: str,
    categories: list[str] | None = None,
    layout: str = "post",
    directory: str | os.PathLike = "_posts",
    date: datetime.datetime | None = None,
) -> str:
    """Create a new empty post and return its path.

    :param title: The title of the post, also used to generate the file name.
    :param categories: The categories of the post.
    :param layout: The Jekyll layout the post should be rendered with.
    :param directory: Where to create the post file.
    :param date: The publication date, defaults to now.
    :raises FileExistsError: if a post with the same name already exists.
    """
    slug = slugify(title)
    if not slug:
        raise ValueError(f"Unable to make a file name out of title {title!r}")

    date = date or datetime.datetime.now().astimezone()
    filename = f"{date:%Y-%m-%d}-{slug}.md"
    path = os.path.join(os.fspath(directory), filename)

    front_matter = {
        "layout": layout,
        "title": title,
        "date": date.strftime("%Y-%m-%d %H:%M:%S %z").strip(),
        "categories": list(categories or []),
    }
    os.makedirs(os.fspath(directory), exist_ok=True)
    with open(path, "x", encoding="utf-8") as f:
        f.write(render_post(front_matter, "\n"))
    log.info("post created", path=path)
    return path
