from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import yaml

from marksite.errors import ConfigError


logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "config.yaml"
CONFIG_ENV_VAR = "MARKSITE_CONFIG"


@dataclass(frozen=True, slots=True)
class SiteConfig:
    title: str = "Marksite"
    domain: str = "localhost:8080"
    description: str = "Personal website and blog"
    author: str = "Marksite Author"
    language: str = "en"
    email: Optional[str] = None
    copyright: Optional[str] = None

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}"

    def post_url(self, slug: str) -> str:
        return f"{self.base_url}/blog/{quote(slug)}"


@dataclass(frozen=True, slots=True)
class AnalyticsConfig:
    google_analytics_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CacheConfig:
    static_files_max_age: int = 31536000
    html_max_age: int = 3600

    def cache_control_static(self) -> str:
        return f"public, max-age={self.static_files_max_age}, immutable"

    def cache_control_html(self) -> str:
        return f"public, max-age={self.html_max_age}"


@dataclass(frozen=True, slots=True)
class Settings:
    site: SiteConfig = field(default_factory=SiteConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    content_dirs: Tuple[Path, ...] = (BASE_DIR / "content" / "posts", BASE_DIR / "assets" / "posts")
    template_dirs: Tuple[Path, ...] = (BASE_DIR / "templates", BASE_DIR / "assets")
    static_dir: Path = BASE_DIR / "static"
    log_level: str = "INFO"


def load_settings(path: Optional[Path] = None) -> Settings:
    """Read settings from a YAML or JSON file; a missing file gives the defaults."""
    if path is None:
        path = Path(os.getenv(CONFIG_ENV_VAR, str(DEFAULT_CONFIG_PATH))).expanduser()
    path = Path(path)
    if not path.exists():
        logger.info("No config file at %s, using defaults", path)
        return Settings()

    data = _read_config_file(path)
    root = path.resolve().parent
    return settings_from_mapping(data, root=root)


def settings_from_mapping(data: Dict[str, Any], *, root: Path = BASE_DIR) -> Settings:
    defaults = Settings()
    kwargs: Dict[str, Any] = {
        "site": _section(SiteConfig, data.get("site")),
        "analytics": _section(AnalyticsConfig, data.get("analytics")),
        "cache": _section(CacheConfig, data.get("cache")),
        "content_dirs": _paths(data.get("content_dirs"), root) or defaults.content_dirs,
        "template_dirs": _paths(data.get("template_dirs"), root) or defaults.template_dirs,
    }
    static_dir = data.get("static_dir")
    if static_dir:
        kwargs["static_dir"] = _resolve(static_dir, root)
    log_level = data.get("log_level")
    if isinstance(log_level, str) and log_level.strip():
        kwargs["log_level"] = log_level.strip().upper()
    return Settings(**kwargs)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _section(cls, value: Any):
    if value is None:
        return cls()
    if not isinstance(value, dict):
        raise ConfigError(f"Config section for {cls.__name__} must be a mapping")
    known = {f.name for f in fields(cls)}
    values = {key: val for key, val in value.items() if key in known}
    try:
        return cls(**values)
    except TypeError as exc:
        raise ConfigError(f"Invalid {cls.__name__}: {exc}") from exc


def _paths(value: Any, root: Path) -> Tuple[Path, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(_resolve(item, root) for item in value if isinstance(item, str) and item.strip())


def _resolve(value: str, root: Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path
