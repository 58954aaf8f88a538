"""RSS 2.0 feed and sitemap generation.

Both functions are pure projections of the settings and an ordered post
sequence; an empty sequence still yields a valid document.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from marksite.config import Settings
from marksite.models.post import BlogPost


TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

FEED_LIMIT = 20
GENERATOR = "Marksite Blog Engine v1.0"
RSS_DOCS = "https://www.rssboard.org/rss-specification"
FEED_TTL = 1440
FEED_ROUTE = "/feed.xml"
BLOG_ROUTE = "/blog"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["xml"]),
)


@dataclass(frozen=True, slots=True)
class FeedItem:
    title: str
    link: str
    description: str
    pub_date: str
    author: str
    categories: Sequence[str]


@dataclass(frozen=True, slots=True)
class SitemapEntry:
    loc: str
    changefreq: str
    priority: str
    lastmod: Optional[str] = None


def render_feed(settings: Settings, posts: Sequence[BlogPost]) -> str:
    site = settings.site
    author = f"{site.email} ({site.author})" if site.email else site.author
    items = [
        FeedItem(
            title=post.title,
            link=site.post_url(post.slug),
            description=post.description,
            pub_date=post.rfc822_date,
            author=author,
            categories=post.tags,
        )
        for post in list(posts)[:FEED_LIMIT]
    ]
    template = _env.get_template("feed.xml")
    return template.render(
        site=site,
        items=items,
        managing_editor=author if site.email else None,
        copyright=site.copyright or f"© {site.author}. All rights reserved.",
        generator=GENERATOR,
        docs=RSS_DOCS,
        ttl=FEED_TTL,
    )


def post_priority(rank: int) -> str:
    if rank < 5:
        return "0.8"
    if rank < 10:
        return "0.7"
    return "0.6"


def sitemap_entries(settings: Settings, posts: Sequence[BlogPost]) -> List[SitemapEntry]:
    base_url = settings.site.base_url
    entries = [
        SitemapEntry(loc=base_url, changefreq="weekly", priority="1.0"),
        SitemapEntry(loc=f"{base_url}{BLOG_ROUTE}", changefreq="weekly", priority="0.9"),
        SitemapEntry(loc=f"{base_url}{FEED_ROUTE}", changefreq="daily", priority="0.5"),
    ]
    for rank, post in enumerate(posts):
        entries.append(
            SitemapEntry(
                loc=settings.site.post_url(post.slug),
                changefreq="monthly",
                priority=post_priority(rank),
                lastmod=post.lastmod_date,
            )
        )
    return entries


def render_sitemap(settings: Settings, posts: Sequence[BlogPost]) -> str:
    template = _env.get_template("sitemap.xml")
    return template.render(entries=sitemap_entries(settings, posts))
