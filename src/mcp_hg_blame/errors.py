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

"""Exception types raised while blaming files."""


class BlameError(Exception):
    """Base class for per-file blame errors."""


class FormatError(BlameError, ValueError):
    """A line of blame output does not match the expected grammar.

    This means the installed tool prints an unsupported format, so the whole
    file is abandoned rather than patched up line by line.
    """

    def __init__(self, filename: str, line_number: int, text: str):
        self.filename = filename
        self.line_number = line_number
        self.text = text
        super().__init__(
            f"Unable to blame file {filename}. "
            f"Unrecognized blame info at line {line_number}: {text}"
        )


class ToolExecutionError(BlameError):
    """The blame command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"The mercurial blame command [{' '.join(command)}] failed "
            f"(exit code {returncode}): {stderr}"
        )


class LineCountMismatchError(BlameError, ValueError):
    """Blame output cannot be reconciled with the file's line count."""

    def __init__(self, filename: str, parsed: int, expected: int):
        self.filename = filename
        self.parsed = parsed
        self.expected = expected
        super().__init__(
            f"Blame of {filename} returned {parsed} lines "
            f"but the file has {expected} lines"
        )
