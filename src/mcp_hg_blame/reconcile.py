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

"""Align parsed blame records with the number of lines in the file."""

from __future__ import annotations

from mcp_hg_blame.errors import LineCountMismatchError
from mcp_hg_blame.models import BlameLine


def reconcile(filename: str, lines: list[BlameLine], expected_line_count: int) -> list[BlameLine]:
    """Return the attribution for every line of the file.

    Mercurial never annotates the empty line that follows a trailing newline,
    while the line count includes it. When exactly that one line is missing,
    it is attributed to the same changeset as the line above it. A file with
    no content at all still counts one line and gets no records.

    Any other difference raises LineCountMismatchError.
    """
    parsed = len(lines)

    if parsed == expected_line_count:
        return list(lines)

    if parsed == expected_line_count - 1:
        if not lines:
            return []
        return [*lines, lines[-1]]

    raise LineCountMismatchError(filename, parsed, expected_line_count)
