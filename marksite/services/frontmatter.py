from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from marksite.errors import PostParseError


logger = logging.getLogger(__name__)

DELIMITER = "---"
REQUIRED_FIELDS = ("title", "date", "description")
QUOTE_CHARS = "\"'"


@dataclass(slots=True)
class ParsedDocument:
    title: str
    date: str
    description: str
    body: str
    path: str
    tags: List[str] = field(default_factory=list)


def parse_document(text: str, filename: str) -> Optional[ParsedDocument]:
    """Split a source document into metadata fields and a markdown body.

    Returns ``None`` when the document has no complete ``---`` block. Raises
    :class:`PostParseError` when a required field is missing.
    """
    parts = text.split(DELIMITER)
    if len(parts) < 3:
        logger.warning("Invalid blog post format in file: %s", filename)
        return None

    metadata = parts[1]
    body = DELIMITER.join(parts[2:])
    values = {name: extract_field(metadata, name) for name in REQUIRED_FIELDS}
    for name, value in values.items():
        if not value:
            raise PostParseError(filename, f"Missing {name} field in frontmatter")

    return ParsedDocument(
        title=values["title"],
        date=values["date"],
        description=values["description"],
        body=body,
        path=path_token(filename),
        tags=extract_list(metadata, "tags"),
    )


def extract_field(metadata: str, name: str) -> Optional[str]:
    match = re.search(rf"^{re.escape(name)}:(.*)$", metadata, re.MULTILINE)
    if match is None:
        return None
    return _clean(match.group(1))


def extract_list(metadata: str, name: str) -> List[str]:
    # Naive on purpose: no escaped commas or nested brackets.
    match = re.search(rf"^{re.escape(name)}:[ \t]*\[(.*?)\]", metadata, re.MULTILINE)
    if match is None:
        return []
    items = (_clean(item) for item in match.group(1).split(","))
    return [item for item in items if item]


def path_token(filename: str) -> str:
    return filename[: -len(".md")] if filename.endswith(".md") else filename


def _clean(value: str) -> str:
    return value.strip().strip(QUOTE_CHARS).strip()
