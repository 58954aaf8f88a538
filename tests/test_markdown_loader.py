from pathlib import Path

import pytest

from marksite.config import Settings
from marksite.errors import ContentLoadError
from marksite.services import markdown_loader


def write_post(directory: Path, name: str, title: str, date: str = "2024-01-01", body: str = "Body text.") -> Path:
    path = directory / name
    path.write_text(
        f"---\ntitle: {title}\ndate: {date}\ndescription: About {title}\ntags: [notes]\n---\n\n{body}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def posts_dir(tmp_path):
    directory = tmp_path / "posts"
    directory.mkdir()
    write_post(directory, "first.md", "First Post", "2024-01-01")
    write_post(directory, "second.md", "Second Post", "2024-02-01")
    (directory / "no-frontmatter.md").write_text("Just some text without metadata.", encoding="utf-8")
    (directory / "no-title.md").write_text("---\ndate: 2024-03-01\ndescription: x\n---\nbody", encoding="utf-8")
    (directory / "binary.md").write_bytes(b"\xff\xfe\x00---")
    (directory / "notes.txt").write_text("---\ntitle: Ignored\n---\n", encoding="utf-8")
    return directory


def test_malformed_files_are_skipped(posts_dir):
    collection = markdown_loader.load_posts([posts_dir])
    assert len(collection) == 2
    assert [post.title for post in collection] == ["Second Post", "First Post"]


def test_every_post_is_found_by_slug_and_path(posts_dir):
    collection = markdown_loader.load_posts([posts_dir])
    for post in collection:
        assert collection.find(post.slug) is post
        assert collection.find(post.path) is post
    assert collection.find("first").slug == "first-post"


def test_title_slug_does_not_take_over_another_filename(tmp_path):
    write_post(tmp_path, "hello-world.md", "Intro", "2024-01-01")
    write_post(tmp_path, "x.md", "Hello World", "2024-02-01")
    collection = markdown_loader.load_posts([tmp_path])

    assert collection.find("hello-world").title == "Intro"
    assert collection.find("x").slug == "hello-world-2"
    for post in collection:
        assert collection.find(post.slug) is post
        assert collection.find(post.path) is post


def test_body_is_rendered_to_html(tmp_path):
    write_post(tmp_path, "code.md", "Code", body="Intro **bold**.\n\n```python\nprint('hi')\n```\n")
    post = markdown_loader.load_posts([tmp_path]).find("code")
    assert "<strong>bold</strong>" in post.content_html
    assert '<pre><code class="language-python">' in post.content_html
    assert post.excerpt == "Intro bold."
    assert post.tags == ("notes",)


def test_missing_directory_is_a_load_failure(tmp_path):
    with pytest.raises(ContentLoadError) as info:
        markdown_loader.load_posts([tmp_path / "missing", tmp_path / "also-missing"])
    assert len(info.value.directories) == 2


def test_falls_back_to_next_directory(tmp_path, posts_dir):
    collection = markdown_loader.load_posts([tmp_path / "content" / "posts", posts_dir])
    assert len(collection) == 2


def test_refresh_replaces_snapshot(posts_dir):
    settings = Settings(content_dirs=(posts_dir,))
    before = markdown_loader.refresh_cache(settings)
    write_post(posts_dir, "third.md", "Third Post", "2024-03-01")

    after = markdown_loader.refresh_cache(settings)

    assert len(before) == 2
    assert len(after) == 3
    assert markdown_loader.current_posts() is after
    assert markdown_loader.get_post("third-post").title == "Third Post"
    assert markdown_loader.list_posts()[0].title == "Third Post"


def test_failed_refresh_keeps_previous_snapshot(tmp_path, posts_dir):
    loaded = markdown_loader.refresh_cache(Settings(content_dirs=(posts_dir,)))
    with pytest.raises(ContentLoadError):
        markdown_loader.refresh_cache(Settings(content_dirs=(tmp_path / "missing",)))
    assert markdown_loader.current_posts() is loaded


def test_bundled_content_loads():
    markdown_loader.refresh_cache(Settings())
    posts = markdown_loader.list_posts()
    assert posts, "Expected posts to be loaded"
    slugs = {post.slug for post in posts}
    assert "hello-world" in slugs
    assert markdown_loader.get_post("writing-posts") is not None
