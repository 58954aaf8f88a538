import json

import pytest

from marksite.config import Settings, load_settings
from marksite.errors import ConfigError


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "missing.yaml")
    assert settings == Settings()
    assert settings.site.base_url == "https://localhost:8080"


def test_yaml_file_is_loaded_and_paths_resolved(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "site:\n"
        "  title: Example\n"
        "  domain: example.com\n"
        "  unknown_key: ignored\n"
        "analytics:\n"
        "  google_analytics_id: G-1\n"
        "cache:\n"
        "  html_max_age: 60\n"
        "content_dirs: [posts, /srv/posts]\n"
        "log_level: debug\n",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.site.title == "Example"
    assert settings.site.post_url("hello") == "https://example.com/blog/hello"
    assert settings.analytics.google_analytics_id == "G-1"
    assert settings.cache.cache_control_html() == "public, max-age=60"
    assert settings.cache.cache_control_static() == "public, max-age=31536000, immutable"
    assert settings.content_dirs[0] == tmp_path.resolve() / "posts"
    assert str(settings.content_dirs[1]) == "/srv/posts"
    assert settings.template_dirs == Settings().template_dirs
    assert settings.log_level == "DEBUG"


def test_json_file_is_loaded(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"site": {"author": "Ada"}}), encoding="utf-8")
    assert load_settings(path).site.author == "Ada"


def test_environment_variable_selects_file(tmp_path, monkeypatch):
    path = tmp_path / "site.yaml"
    path.write_text("site:\n  title: From Env\n", encoding="utf-8")
    monkeypatch.setenv("MARKSITE_CONFIG", str(path))
    assert load_settings().site.title == "From Env"


def test_non_mapping_config_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path)


def test_invalid_yaml_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("site: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path)
