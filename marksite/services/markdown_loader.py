from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin

from marksite.config import Settings
from marksite.errors import ContentLoadError, PostParseError
from marksite.models.collection import PostCollection
from marksite.models.post import BlogPost, build_post
from marksite.services.frontmatter import parse_document


logger = logging.getLogger(__name__)

_markdown = MarkdownIt("commonmark", {"html": True}).enable("table").enable("strikethrough")
_markdown.use(tasklists_plugin)

# Replaced wholesale on refresh; readers holding the old snapshot keep it.
_collection = PostCollection()


def render_markdown(text: str) -> str:
    return _markdown.render(text)


def refresh_cache(settings: Settings) -> PostCollection:
    """Rebuild the post snapshot from the configured content directories."""
    global _collection

    collection = load_posts(settings.content_dirs)
    _collection = collection
    logger.info("Loaded %d posts", len(collection))
    return collection


def load_posts(directories: Iterable[Path]) -> PostCollection:
    candidates = [Path(d) for d in directories]
    directory = _first_directory(candidates)
    if directory is None:
        raise ContentLoadError(candidates)

    try:
        paths = sorted(path for path in directory.iterdir() if path.suffix == ".md" and path.is_file())
    except OSError as exc:
        raise ContentLoadError([directory], str(exc)) from exc

    posts: List[BlogPost] = []
    for path in paths:
        try:
            post = load_post(path)
        except PostParseError as exc:
            logger.warning("Skipping post %s: %s", path, exc.reason)
            continue
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read post %s: %s", path, exc)
            continue

        if post is not None:
            posts.append(post)

    return PostCollection(posts)


def load_post(path: Path) -> Optional[BlogPost]:
    text = path.read_text(encoding="utf-8")
    parsed = parse_document(text, path.name)
    if parsed is None:
        return None

    return build_post(
        title=parsed.title,
        raw_date=parsed.date,
        description=parsed.description,
        content_html=render_markdown(parsed.body),
        path=parsed.path,
        tags=parsed.tags,
    )


def clear_cache() -> None:
    global _collection
    _collection = PostCollection()


def current_posts() -> PostCollection:
    return _collection


def list_posts() -> List[BlogPost]:
    """Return posts newest first."""
    return list(_collection)


def get_post(key: str) -> Optional[BlogPost]:
    return _collection.find(key)


def _first_directory(candidates: List[Path]) -> Optional[Path]:
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
        logger.debug("Content directory %s not found", candidate)
    return None
