# mcp-hg-blame - Mercurial blame extraction with MCP server
# Copyright (C) 2026 Michael Doyle
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing available. See COMMERCIAL-LICENSE.md for details.

"""Parser for the output of ``hg blame -v --user --date --changeset``.

Each output line looks like one of::

    Julien Henry <julien.henry@sonarsource.com> d45dafac0d9a Tue Nov 04 11:01:10 2014 +0100: foo
    julien.henry d45dafac0d9b Tue Nov 04 11:01:10 2014 +0100: baz

i.e. an author (display name with a bracketed email, or a bare user name),
a 12-digit short changeset id, a timestamp, a colon, then the line content.
The timestamp contains two colons itself, so the grammar reads it as three
colon-separated fields.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from mcp_hg_blame.errors import FormatError
from mcp_hg_blame.models import BlameLine

logger = logging.getLogger(__name__)

HG_TIMESTAMP_PATTERN = "%a %b %d %H:%M:%S %Y %z"

# author [<email> ]revision f1:f2:f3:rest
HG_BLAME_PATTERN = r"(.*?) (?:<(.*)> )?([0-9a-f]{12}) ([^:]+:[^:]+:[^:]+):(.*)"

_DEFAULT_GRAMMAR = re.compile(HG_BLAME_PATTERN)


@dataclass(frozen=True)
class BlameLineMatch:
    """Fields of a line that matched the blame grammar."""

    author: str  # Email when present, else the bare identifier
    revision: str
    location: str  # Timestamp text for the -v --date output variant
    rest: str  # Annotated source line content


@dataclass(frozen=True)
class ParsedLine:
    """Result of parsing one line: a record, plus a warning if degraded."""

    record: BlameLine
    warning: str | None = None


def match_blame_line(text: str, grammar: re.Pattern = _DEFAULT_GRAMMAR) -> BlameLineMatch | None:
    """Match a whole trimmed line against the blame grammar.

    Returns None when the line does not match; never raises.
    """
    m = grammar.fullmatch(text.strip())
    if m is None:
        return None
    name, email, revision, location, rest = m.groups()
    return BlameLineMatch(
        author=email if email is not None else name,
        revision=revision,
        location=location,
        rest=rest,
    )


class BlameLineParser:
    """Consumes blame output for one file, line by line, in order.

    A parser instance owns its grammar and date format and is meant to be
    used for a single file only.
    """

    def __init__(
        self,
        filename: str,
        grammar: str = HG_BLAME_PATTERN,
        date_format: str = HG_TIMESTAMP_PATTERN,
    ):
        self.filename = filename
        self._grammar = re.compile(grammar)
        self._date_format = date_format
        self._lines: list[BlameLine] = []
        self._warnings: list[str] = []

    @property
    def lines(self) -> list[BlameLine]:
        """Records parsed so far, in source-line order."""
        return list(self._lines)

    @property
    def warnings(self) -> list[str]:
        return list(self._warnings)

    def parse_line(self, text: str, line_number: int) -> ParsedLine:
        """Parse a single raw output line.

        Raises FormatError if the line does not match the grammar. An
        unparsable timestamp is not an error: the record gets no date and
        the result carries a warning instead.
        """
        match = match_blame_line(text, self._grammar)
        if match is None:
            raise FormatError(self.filename, line_number, text.strip())

        date_str = match.location.strip()
        warning = None
        try:
            date = datetime.strptime(date_str, self._date_format)
        except ValueError as e:
            date = None
            warning = (
                f"Skipping unparsable date in {self.filename} at line {line_number}: "
                f"{e} during parsing date {date_str!r} with pattern {self._date_format!r} "
                f"[{text}]"
            )

        record = BlameLine(revision=match.revision, date=date, author=match.author)
        return ParsedLine(record=record, warning=warning)

    def consume_line(self, text: str) -> BlameLine:
        """Parse the next output line and append its record."""
        parsed = self.parse_line(text, len(self._lines) + 1)
        if parsed.warning is not None:
            logger.warning("%s", parsed.warning)
            self._warnings.append(parsed.warning)
        self._lines.append(parsed.record)
        return parsed.record

    def consume_lines(self, lines: Iterable[str]) -> list[BlameLine]:
        """Consume every line of an output stream and return all records."""
        for text in lines:
            self.consume_line(text)
        return self.lines
