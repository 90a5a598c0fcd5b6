"""Command line interface for checking the posts.

Prints one line for each issue found, in the
``path:line: [severity] rule: message`` format
understood by most editors, and exits with an error status
when errors are found, or warnings too in ``--strict`` mode.
"""

import argparse

from duckpyground.posts.lint import Linter, Severity, default_rules
from duckpyground.settings import get_settings
from duckpyground.utils.logging import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check posts for common problems.")
    parser.add_argument(
        "paths",
        nargs="*",
        help="Post files or directories of posts, the posts directory by default.",
    )
    parser.add_argument(
        "--min-similarity",
        type=float,
        help="How similar two posts have to be to be reported as duplicates.",
    )
    parser.add_argument(
        "--strict", action="store_true", help="Treat warnings as errors."
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Lint the posts and report the issues."""
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    if args.min_similarity is not None:
        if not 0 <= args.min_similarity <= 1:
            print("--min-similarity must be between 0 and 1")
            return 2
        settings = settings.model_copy(update={"similarity_threshold": args.min_similarity})

    linter = Linter(default_rules(settings))
    issues = linter.lint_paths(args.paths or [settings.posts_dir])
    for issue in issues:
        print(issue)

    errors = sum(1 for i in issues if i.severity == Severity.ERROR)
    warnings = len(issues) - errors
    print(f"{errors} errors, {warnings} warnings")
    if errors or (args.strict and warnings):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
