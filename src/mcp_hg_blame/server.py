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

"""MCP server for Mercurial blame extraction.

Exposes per-line blame of files in a Mercurial repository as MCP tools,
so an assistant can see who last changed each line, in which changeset
and when.

Usage:
    PROJECT_ROOT=/path/to/repo python -m mcp_hg_blame.server
"""

from __future__ import annotations

import json
import logging
import sys
import traceback

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent
import mcp.types as types

from mcp_hg_blame.blamer import HgBlamer
from mcp_hg_blame.hg_tracker import PROVIDER_KEY, is_hg_repo
from mcp_hg_blame.models import BlameRequest, BlameResult
from mcp_hg_blame.settings import BlameSettings

# ---------------------------------------------------------------------------
# Module-level state
# ---------------------------------------------------------------------------

server = Server("mcp-hg-blame")

_settings: BlameSettings | None = None
_blamer: HgBlamer | None = None
_is_hg: bool = False


def _format_result(value: object) -> str:
    """Format a tool result as readable text."""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2, default=str)
    return str(value)


def _format_blame(result: BlameResult) -> object:
    """Render one file's blame: line-numbered records, or why there are none."""
    if not result.succeeded:
        return f"No blame data available for {result.path}: {result.diagnostic}"
    return [
        {"line": number, **line.to_dict()}
        for number, line in enumerate(result.lines, start=1)
    ]


def _format_batch(results: list[BlameResult]) -> dict:
    """Summarize a batch: per-file line counts and failures."""
    summary: dict[str, object] = {}
    for result in results:
        if result.succeeded:
            authors = sorted({line.author for line in result.lines})
            summary[result.path] = {"lines": len(result.lines), "authors": authors}
        else:
            summary[result.path] = {"error": f"No blame data available: {result.diagnostic}"}
    return summary


def _setup(settings: BlameSettings | None = None) -> None:
    """Load settings and create the blamer for the project root."""
    global _settings, _blamer, _is_hg

    _settings = settings or BlameSettings.from_env()
    _blamer = HgBlamer(_settings.project_root, _settings)
    _is_hg = is_hg_repo(_settings.project_root)

    print(f"[mcp-hg-blame] Serving repository: {_settings.project_root}", file=sys.stderr)
    if not _is_hg:
        print(
            f"[mcp-hg-blame] Warning: no {PROVIDER_KEY} repository found at "
            f"{_settings.project_root}",
            file=sys.stderr,
        )


def _repository_info() -> dict:
    assert _settings is not None
    return {
        "project_root": _settings.project_root,
        "provider": PROVIDER_KEY,
        "is_mercurial_repository": _is_hg,
        "executable": _settings.executable,
        "timeout_seconds": _settings.timeout_seconds,
        "max_workers": _settings.max_workers,
    }


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

TOOLS = [
    Tool(
        name="blame_file",
        description="Per-line blame of a file: changeset, date and author of the last change to each line.",
        inputSchema={
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "Path to the file, relative to the repository root.",
                },
                "line_count": {
                    "type": "integer",
                    "description": "Number of lines in the file. Omit to count the file on disk.",
                },
            },
            "required": ["file_path"],
        },
    ),
    Tool(
        name="blame_files",
        description="Blame several files at once. Returns line counts and authors per file, or why a file could not be blamed.",
        inputSchema={
            "type": "object",
            "properties": {
                "file_paths": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Paths relative to the repository root.",
                },
            },
            "required": ["file_paths"],
        },
    ),
    Tool(
        name="get_repository_info",
        description="Repository root, whether it is a Mercurial repository, and the blame settings in effect.",
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
]


# ---------------------------------------------------------------------------
# MCP handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def list_tools() -> list[Tool]:
    return TOOLS


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
    try:
        if _blamer is None:
            return [TextContent(type="text", text="Error: server not initialized.")]

        if name == "get_repository_info":
            result = _repository_info()

        elif name == "blame_file":
            file_path = arguments["file_path"]
            line_count = arguments.get("line_count")
            if line_count is None:
                blamed = _blamer.blame_paths([file_path])[0]
            else:
                blamed = _blamer.blame_file(BlameRequest(path=file_path, line_count=int(line_count)))
            result = _format_blame(blamed)

        elif name == "blame_files":
            result = _format_batch(_blamer.blame_paths(arguments["file_paths"]))

        else:
            return [TextContent(type="text", text=f"Error: unknown tool '{name}'")]

        return [TextContent(type="text", text=_format_result(result))]

    except Exception as e:
        tb = traceback.format_exc()
        print(f"[mcp-hg-blame] Error in {name}: {tb}", file=sys.stderr)
        return [TextContent(type="text", text=f"Error: {e}")]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def main():
    _setup()
    # stdout carries the MCP protocol; logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=_settings.log_level,
        format="[mcp-hg-blame] %(levelname)s %(name)s: %(message)s",
    )
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main_sync():
    """Synchronous entry point for console_scripts."""
    import asyncio

    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
