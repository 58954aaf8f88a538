import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from marksite.config import CONFIG_ENV_VAR, get_settings
from marksite.main import app


TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def write_config(tmp_path: Path, **overrides) -> Path:
    data = {
        "site": {"title": "Test Site", "domain": "example.com", "description": "Testing", "author": "Ada"},
        "content_dirs": ["posts"],
        "template_dirs": ["templates", str(TEMPLATES_DIR)],
        "static_dir": "static",
    }
    data.update(overrides)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def start_client(tmp_path: Path, monkeypatch, **overrides):
    posts = tmp_path / "posts"
    posts.mkdir(exist_ok=True)
    (posts / "2024-01-15-hello.md").write_text(
        "---\ntitle: Hello, World!\ndate: 2024-01-15\ndescription: First post\ntags: [intro, news]\n---\n\n"
        "The **first** post.\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(write_config(tmp_path, **overrides)))
    get_settings.cache_clear()
    return TestClient(app)


@pytest.fixture()
def client(tmp_path, monkeypatch):
    with start_client(tmp_path, monkeypatch) as test_client:
        yield test_client
    get_settings.cache_clear()


def test_homepage_uses_site_values(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "<title>Test Site</title>" in response.text
    assert "<!-- ANALYTICS -->" not in response.text
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert response.headers["x-content-type-options"] == "nosniff"


def test_blog_index_lists_posts(client):
    response = client.get("/blog")
    assert response.status_code == 200
    assert '<a href="/blog/hello-world">Hello, World!</a>' in response.text
    assert '<span class="post-tag">intro</span>' in response.text


@pytest.mark.parametrize("key", ["hello-world", "2024-01-15-hello"])
def test_post_is_found_by_slug_or_filename(client, key):
    response = client.get(f"/blog/{key}")
    assert response.status_code == 200
    assert "<h1>Hello, World!</h1>" in response.text
    assert "<strong>first</strong>" in response.text
    assert "January 15, 2024" in response.text
    assert f"https://example.com/blog/{key}" in response.text
    assert 'content="intro, news"' in response.text


def test_unknown_post_returns_not_found_page(client):
    response = client.get("/blog/does-not-exist")
    assert response.status_code == 404
    assert "404 - Page Not Found" in response.text
    assert response.headers["cache-control"] == "no-cache"


def test_feed_and_sitemap_routes(client):
    feed = client.get("/feed.xml")
    assert feed.status_code == 200
    assert feed.headers["content-type"].startswith("application/rss+xml")
    assert feed.text.count("<item>") == 1

    sitemap = client.get("/sitemap.xml")
    assert sitemap.status_code == 200
    assert sitemap.headers["content-type"].startswith("application/xml")
    assert sitemap.text.count("<url>") == 4


def test_robots_and_manifest_fallbacks(client):
    robots = client.get("/robots.txt")
    assert robots.status_code == 200
    assert "Sitemap: https://example.com/sitemap.xml" in robots.text

    manifest = client.get("/manifest.json")
    assert manifest.status_code == 200
    assert manifest.json()["name"] == "Test Site"
    assert manifest.json()["short_name"] == "Test"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_missing_templates_return_server_error(tmp_path, monkeypatch):
    with start_client(tmp_path, monkeypatch, template_dirs=["nowhere"]) as test_client:
        response = test_client.get("/blog")
        assert response.status_code == 500
        assert response.text == "Internal Server Error"

        not_found = test_client.get("/blog/missing")
        assert not_found.status_code == 404
        assert "404 - Page Not Found" in not_found.text
    get_settings.cache_clear()


def test_missing_content_directory_serves_empty_blog(tmp_path, monkeypatch):
    with start_client(tmp_path, monkeypatch, content_dirs=["missing"]) as test_client:
        feed = test_client.get("/feed.xml")
        assert feed.status_code == 200
        assert "<item>" not in feed.text
    get_settings.cache_clear()


def test_html_responses_are_compressed(client):
    response = client.get("/blog", headers={"Accept-Encoding": "gzip"})
    assert response.status_code == 200
    assert response.headers["content-encoding"] == "gzip"
    assert "Hello, World!" in response.text
