from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from markupsafe import Markup, escape

from marksite.config import Settings
from marksite.errors import TemplateError
from marksite.models.post import BlogPost


logger = logging.getLogger(__name__)

Value = Union[str, Markup]

PLACEHOLDER_PATTERN = re.compile(r"<!-- ([A-Za-z0-9_]+) -->")

ANALYTICS_SNIPPET = """<script async src="https://www.googletagmanager.com/gtag/js?id={ga_id}"></script>
<script>
  window.dataLayer = window.dataLayer || [];
  function gtag(){{dataLayer.push(arguments);}}
  gtag('js', new Date());
  gtag('config', '{ga_id}');
</script>"""


class TemplateRenderer:
    """Fills ``<!-- NAME -->`` markers in HTML templates.

    Context values are filled in one pass and never rescanned for other
    context markers. A second pass then fills the site-wide markers across
    the whole result, including inside inserted values. Markers without a
    value are left as they are. Values are
    inserted raw by default because post content is written by the site
    author. With ``autoescape=True`` plain strings are HTML-escaped and only
    :class:`markupsafe.Markup` values are inserted raw.
    """

    def __init__(self, settings: Settings, *, autoescape: bool = False) -> None:
        self.settings = settings
        self.autoescape = autoescape

    def site_values(self) -> Dict[str, Value]:
        site = self.settings.site
        ga_id = self.settings.analytics.google_analytics_id
        analytics = ANALYTICS_SNIPPET.format(ga_id=ga_id) if ga_id else ""
        return {
            "SITE_TITLE": site.title,
            "SITE_DESCRIPTION": site.description,
            "SITE_AUTHOR": site.author,
            "SITE_DOMAIN": site.domain,
            "ANALYTICS": Markup(analytics),
        }

    def render(self, template_path: Union[str, Path], context: Mapping[str, Value]) -> str:
        path = Path(template_path)
        try:
            template = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateError([path], str(exc)) from exc
        return self.substitute(template, context)

    def render_first(self, paths: Iterable[Union[str, Path]], context: Mapping[str, Value]) -> str:
        tried: List[Path] = []
        last_error: Optional[TemplateError] = None
        for candidate in paths:
            tried.append(Path(candidate))
            try:
                return self.render(candidate, context)
            except TemplateError as exc:
                logger.debug("Template %s unavailable: %s", candidate, exc)
                last_error = exc
        reason = str(last_error) if last_error else "no template paths given"
        raise TemplateError(tried, reason)

    def render_page(self, name: str, context: Mapping[str, Value]) -> str:
        return self.render_first((directory / name for directory in self.settings.template_dirs), context)

    def substitute(self, template: str, context: Mapping[str, Value]) -> str:
        rendered = self._fill(template, context)
        return self._fill(rendered, self.site_values())

    def _fill(self, text: str, values: Mapping[str, Value]) -> str:
        def replace(match: re.Match) -> str:
            key = match.group(1)
            if key in values:
                return self._format(values[key])
            return match.group(0)

        return PLACEHOLDER_PATTERN.sub(replace, text)

    def _format(self, value: Value) -> str:
        if self.autoescape:
            return str(escape(value))
        return str(value)

    def render_blog_list(self, posts: Sequence[BlogPost]) -> Markup:
        cards = []
        for post in posts:
            tags = self.render_post_tags(post.tags)
            tags_html = f'<div class="post-tags">{tags}</div>' if tags else ""
            cards.append(
                f"""<article class="blog-post-card">
                    <h2><a href="/blog/{post.slug}">{self._text(post.title)}</a></h2>
                    <div class="blog-post-meta">
                        <div class="meta-left">
                            <span class="post-reading-time">{post.reading_time} min read</span>
                            <time datetime="{self._text(post.iso_date)}">{self._text(post.formatted_date)}</time>
                        </div>
                        <div class="meta-right">
                            <a href="/blog/{post.slug}" class="read-more">Read more &rarr;</a>
                        </div>
                    </div>
                    {tags_html}
                </article>"""
            )
        return Markup("".join(cards))

    def render_post_tags(self, tags: Sequence[str]) -> Markup:
        return Markup("".join(f'<span class="post-tag">{self._text(tag)}</span>' for tag in tags))

    def render_post_tags_plain(self, tags: Sequence[str]) -> str:
        return ", ".join(tags)

    def post_context(self, post: BlogPost, requested_key: str) -> Dict[str, Value]:
        return {
            "BLOG_TITLE": post.title,
            "BLOG_DATE": post.formatted_date,
            "BLOG_SLUG": requested_key,
            "BLOG_EXCERPT": post.description or post.title,
            "BLOG_TAGS": self.render_post_tags(post.tags),
            "BLOG_TAGS_PLAIN": self.render_post_tags_plain(post.tags),
            "READING_TIME": str(post.reading_time),
            "BLOG_CONTENT": Markup(post.content_html),
        }

    def _text(self, value: str) -> str:
        return str(escape(value)) if self.autoescape else value
