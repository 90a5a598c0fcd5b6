"""Posts of the DuckPyground site.

The tutorials are published as a static site built by Jekyll,
each tutorial being a Markdown post in the ``_posts`` directory.

This package knows how to read the posts (:mod:`duckpyground.posts.post`),
find the code they show (:mod:`duckpyground.posts.codeblocks`),
verify them (:mod:`duckpyground.posts.lint`) and scaffold new ones.

>>> post = Post.from_text("---\\ntitle: Hello\\n---\\n```sql\\nSELECT 42;\\n```\\n")
>>> post.front_matter.title
'Hello'
>>> [block.language for block in post.code_blocks]
['sql']
"""

from .codeblocks import CodeBlock, extract_code_blocks
from .errors import PostFormatError
from .lint import (
    LintIssue,
    Linter,
    Rule,
    Severity,
    default_rules,
    lint_directory,
)
from .post import (
    FrontMatter,
    Post,
    load_posts,
    new_post,
    parse_front_matter,
    render_post,
    slugify,
)

__all__ = (
    "CodeBlock",
    "extract_code_blocks",
    "PostFormatError",
    "FrontMatter",
    "Post",
    "load_posts",
    "new_post",
    "parse_front_matter",
    "render_post",
    "slugify",
    "LintIssue",
    "Linter",
    "Rule",
    "Severity",
    "default_rules",
    "lint_directory",
)
