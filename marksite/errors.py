from __future__ import annotations

from pathlib import Path
from typing import Iterable, Tuple


class MarksiteError(Exception):
    """Base class for errors raised by the content pipeline."""


class ConfigError(MarksiteError):
    pass


class PostParseError(MarksiteError):
    """A single source document could not be turned into a post."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class ContentLoadError(MarksiteError):
    """None of the candidate content directories could be read."""

    def __init__(self, directories: Iterable[Path], reason: str = "no readable content directory") -> None:
        self.directories: Tuple[Path, ...] = tuple(Path(d) for d in directories)
        tried = ", ".join(str(d) for d in self.directories) or "<none>"
        super().__init__(f"{reason} (tried: {tried})")


class TemplateError(MarksiteError):
    def __init__(self, paths: Iterable[Path], reason: str) -> None:
        self.paths: Tuple[Path, ...] = tuple(Path(p) for p in paths)
        tried = ", ".join(str(p) for p in self.paths)
        super().__init__(f"Failed to read template {tried}: {reason}")
