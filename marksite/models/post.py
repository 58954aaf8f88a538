from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Iterable, Optional, Tuple


WORDS_PER_MINUTE = 200
EXCERPT_WORDS = 30
EXCERPT_SUFFIX = "..."
DATE_FORMAT = "%Y-%m-%d"

_date_pattern = re.compile(r"\d{4}-\d{2}-\d{2}")
_slug_pattern = re.compile(r"[\W_]+")
_code_block_pattern = re.compile(r"<pre><code.*?</code></pre>", re.DOTALL | re.IGNORECASE)
_block_tag_pattern = re.compile(
    r"</?(?:p|h[1-6]|li|ul|ol|blockquote|br|hr|div|table|thead|tbody|tr|td|th|pre)\b[^>]*>",
    re.IGNORECASE,
)
_any_tag_pattern = re.compile(r"<[^>]+>")


@dataclass(frozen=True, slots=True, eq=False)
class BlogPost:
    title: str
    raw_date: str
    parsed_date: Optional[datetime]
    description: str
    content_html: str
    path: str
    slug: str
    tags: Tuple[str, ...]
    reading_time: int
    excerpt: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlogPost):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    @property
    def formatted_date(self) -> str:
        if self.parsed_date is None:
            return self.raw_date
        return self.parsed_date.strftime("%B %d, %Y")

    @property
    def iso_date(self) -> str:
        if self.parsed_date is None:
            return self.raw_date
        return self.parsed_date.isoformat()

    @property
    def lastmod_date(self) -> str:
        return self.iso_date.split("T", 1)[0]

    @property
    def rfc822_date(self) -> str:
        if self.parsed_date is None:
            return self.raw_date
        return format_datetime(self.parsed_date)


def build_post(
    title: str,
    raw_date: str,
    description: str,
    content_html: str,
    path: str,
    tags: Iterable[str] = (),
) -> BlogPost:
    """Compute the derived fields of a post. Never raises on content."""
    parsed_date = parse_date(raw_date)
    slug = slugify(title) or slugify(path) or path
    return BlogPost(
        title=title,
        raw_date=raw_date,
        parsed_date=parsed_date,
        description=description,
        content_html=content_html,
        path=path,
        slug=slug,
        tags=tuple(tags),
        reading_time=reading_time(content_html),
        excerpt=make_excerpt(content_html),
    )


def parse_date(value: str) -> Optional[datetime]:
    text = value.strip()
    if not _date_pattern.fullmatch(text):
        return None
    try:
        parsed = datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def slugify(value: str) -> str:
    normalized = _slug_pattern.sub("-", value.lower())
    return normalized.strip("-")


def reading_time(content: str) -> int:
    word_count = len(content.split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def make_excerpt(content_html: str) -> str:
    text = _code_block_pattern.sub(" ", content_html)
    text = _block_tag_pattern.sub(" ", text)
    text = _any_tag_pattern.sub("", text)
    words = text.split()
    if len(words) <= EXCERPT_WORDS:
        return " ".join(words)
    return " ".join(words[:EXCERPT_WORDS]) + EXCERPT_SUFFIX
