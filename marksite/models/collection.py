from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from marksite.models.post import BlogPost


logger = logging.getLogger(__name__)


def sort_posts(posts: Iterable[BlogPost]) -> List[BlogPost]:
    """Newest first; dated posts before undated ones, which fall back to the raw string."""
    dated: List[BlogPost] = []
    undated: List[BlogPost] = []
    for post in posts:
        (dated if post.parsed_date is not None else undated).append(post)
    dated.sort(key=lambda item: item.parsed_date, reverse=True)
    undated.sort(key=lambda item: item.raw_date, reverse=True)
    return dated + undated


def disambiguate_slugs(posts: Iterable[BlogPost]) -> List[BlogPost]:
    """Give every post a distinct slug, suffixing clashes with -2, -3, ...

    A slug clashes with an earlier post's slug or with another post's path
    token, so filename lookups keep reaching their own post.
    """
    posts = list(posts)
    paths = {post.path for post in posts}
    result: List[BlogPost] = []
    taken = set()

    def clashes(slug: str, path: str) -> bool:
        return slug in taken or (slug in paths and slug != path)

    for post in posts:
        slug = post.slug
        if clashes(slug, post.path):
            counter = 2
            while clashes(f"{post.slug}-{counter}", post.path):
                counter += 1
            slug = f"{post.slug}-{counter}"
            logger.warning(
                "Slug collision for '%s' (%s); using '%s' instead", post.slug, post.path, slug
            )
            post = replace(post, slug=slug)
        taken.add(slug)
        result.append(post)
    return result


class PostCollection:
    """Immutable, ordered snapshot of posts with slug and path lookups.

    Posts are stored once in a tuple; the two indices map a key to a position
    in that tuple. A rebuilt collection replaces the old one wholesale.
    """

    __slots__ = ("_posts", "_by_slug", "_by_path")

    def __init__(self, posts: Iterable[BlogPost] = ()) -> None:
        ordered = disambiguate_slugs(sort_posts(posts))
        self._posts: Tuple[BlogPost, ...] = tuple(ordered)
        self._by_slug: Dict[str, int] = {}
        self._by_path: Dict[str, int] = {}
        for position, post in enumerate(self._posts):
            self._by_slug.setdefault(post.slug, position)
            self._by_path.setdefault(post.path, position)

    @property
    def posts(self) -> Tuple[BlogPost, ...]:
        return self._posts

    def find(self, key: str) -> Optional[BlogPost]:
        position = self._by_slug.get(key)
        if position is None:
            position = self._by_path.get(key)
        return self._posts[position] if position is not None else None

    def latest(self, count: int) -> Tuple[BlogPost, ...]:
        return self._posts[: max(count, 0)]

    def __iter__(self) -> Iterator[BlogPost]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, index: int) -> BlogPost:
        return self._posts[index]

    def __bool__(self) -> bool:
        return bool(self._posts)

    def __repr__(self) -> str:
        return f"PostCollection({len(self._posts)} posts)"
