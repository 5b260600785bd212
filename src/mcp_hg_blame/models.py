"""Blame metadata models for line-aligned attribution."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class BlameLine:
    """Attribution of a single source line."""

    revision: str  # Short changeset identifier, e.g. "d45dafac0d9a"
    date: datetime | None  # None when the tool's timestamp could not be parsed
    author: str  # Email address or bare user name, as printed by the tool

    def to_dict(self) -> dict:
        return {
            "revision": self.revision,
            "date": self.date.isoformat() if self.date is not None else None,
            "author": self.author,
        }


@dataclass(frozen=True)
class BlameRequest:
    """A file to blame, with the number of lines the platform counts for it."""

    path: str  # Relative to the repository root
    line_count: int


class FileState(enum.Enum):
    """Per-file lifecycle: NOT_STARTED -> RUNNING -> SUCCEEDED | FAILED."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class BlameResult:
    """Outcome of blaming one file."""

    path: str
    state: FileState = FileState.NOT_STARTED
    lines: list[BlameLine] = field(default_factory=list)
    diagnostic: str | None = None  # Populated on failure

    @property
    def succeeded(self) -> bool:
        return self.state is FileState.SUCCEEDED

    @classmethod
    def success(cls, path: str, lines: list[BlameLine]) -> BlameResult:
        return cls(path=path, state=FileState.SUCCEEDED, lines=list(lines))

    @classmethod
    def failure(cls, path: str, diagnostic: str) -> BlameResult:
        return cls(path=path, state=FileState.FAILED, diagnostic=diagnostic)
