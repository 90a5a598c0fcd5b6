import os

from duckpyground.posts import Linter, load_posts

POSTS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "_posts")


def test_site_posts_are_clean():
    posts = load_posts(POSTS_DIR)
    assert posts
    assert Linter().lint(posts) == []
