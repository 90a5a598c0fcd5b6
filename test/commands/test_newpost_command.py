import os

from duckpyground.commands.newpost import main
from duckpyground.posts import Post


def test_new_post(tmp_path, capsys):
    posts_dir = tmp_path / "_posts"
    assert main(["Window functions", "-c", "duckdb", "-c", "sql", "--dir", str(posts_dir)]) == 0
    path = capsys.readouterr().out.strip()
    assert os.path.dirname(path) == str(posts_dir)
    assert path.endswith("-window-functions.md")

    post = Post.load(path)
    assert post.front_matter.title == "Window functions"
    assert post.front_matter.layout == "post"
    assert post.front_matter.categories == ["duckdb", "sql"]


def test_new_post_exists(tmp_path, capsys):
    assert main(["Hello", "--dir", str(tmp_path)]) == 0
    capsys.readouterr()
    assert main(["Hello", "--dir", str(tmp_path)]) == 1
    assert "Post already exists" in capsys.readouterr().out


def test_new_post_layout_from_settings(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DUCKPYGROUND_DEFAULT_LAYOUT", "tutorial")
    assert main(["Hello", "--dir", str(tmp_path)]) == 0
    post = Post.load(capsys.readouterr().out.strip())
    assert post.front_matter.layout == "tutorial"
