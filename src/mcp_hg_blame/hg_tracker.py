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

"""Mercurial repository detection and ``hg blame`` invocation."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field

from mcp_hg_blame.errors import ToolExecutionError

PROVIDER_KEY = "hg"
REPOSITORY_MARKER = ".hg"

BLAME_FLAGS = ["-w", "-v", "--user", "--date", "--changeset"]


@dataclass
class HgBlameOutput:
    """Raw result of one ``hg blame`` process."""

    command: list[str]
    returncode: int
    stdout_lines: list[str] = field(default_factory=list)
    stderr_lines: list[str] = field(default_factory=list)

    @property
    def stderr(self) -> str:
        return "\n".join(self.stderr_lines)

    def check(self) -> None:
        """Raise ToolExecutionError if the process exited with an error."""
        if self.returncode != 0:
            raise ToolExecutionError(self.command, self.returncode, self.stderr)


def is_hg_repo(root_path: str) -> bool:
    """Check if the given directory is the root of a Mercurial repository."""
    return os.path.isdir(os.path.join(root_path, REPOSITORY_MARKER))


def build_blame_command(path: str, executable: str = "hg") -> list[str]:
    """Build the blame command line for a file relative to the repository root.

    Whitespace changes are ignored; user, date and changeset are requested
    in verbose form so authors come out as ``Name <email>``.
    """
    return [executable, "blame", *BLAME_FLAGS, path]


def split_output_lines(data: bytes | None) -> list[str]:
    """Split process output on ``\\n`` only, one entry per printed line.

    Form feeds, U+2028 and other characters str.splitlines() treats as
    breaks stay inside their line. A single trailing ``\\r`` is dropped and
    undecodable bytes are replaced.
    """
    if not data:
        return []
    pieces = data.split(b"\n")
    if pieces[-1] == b"":
        pieces.pop()
    lines = []
    for piece in pieces:
        if piece.endswith(b"\r"):
            piece = piece[:-1]
        lines.append(piece.decode("utf-8", errors="replace"))
    return lines


def run_hg_blame(
    root_path: str,
    path: str,
    executable: str = "hg",
    timeout: float = 120,
) -> HgBlameOutput:
    """Run ``hg blame`` for one file and collect its output line by line.

    subprocess.TimeoutExpired and OSError (executable missing or not
    runnable, bad working directory) are left to the caller. On timeout the
    child process is killed before the exception is raised.
    """
    cmd = build_blame_command(path, executable)
    result = subprocess.run(
        cmd,
        cwd=root_path,
        capture_output=True,
        timeout=timeout,
    )
    return HgBlameOutput(
        command=cmd,
        returncode=result.returncode,
        stdout_lines=split_output_lines(result.stdout),
        stderr_lines=split_output_lines(result.stderr),
    )
