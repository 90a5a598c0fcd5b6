"""Command line interface for creating a new post."""

import argparse

from duckpyground.posts import new_post
from duckpyground.settings import get_settings
from duckpyground.utils.logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    """Create an empty post with its front matter and print its path."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Create a new post.")
    parser.add_argument("title", help="The title of the post.")
    parser.add_argument(
        "-c",
        "--category",
        action="append",
        help="A category of the post. Can be provided multiple times.",
    )
    parser.add_argument("--layout", default=settings.default_layout)
    parser.add_argument("--dir", default=settings.posts_dir, help="The posts directory.")
    args = parser.parse_args(argv)
    configure_logging(settings.log_level, json=settings.log_json)

    try:
        path = new_post(
            args.title, categories=args.category, layout=args.layout, directory=args.dir
        )
    except FileExistsError as e:
        print(f"Post already exists: {e.filename}")
        return 1
    except ValueError as e:
        print(str(e))
        return 2
    print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
