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

"""Blame orchestration: one ``hg blame`` per file, parsed and reconciled.

Each file is an independent unit of work. A batch runs files on a bounded
thread pool and always returns exactly one BlameResult per request; any
failure is contained to its own file.
"""

from __future__ import annotations

import logging
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable

from mcp_hg_blame.blame_parser import BlameLineParser
from mcp_hg_blame.errors import FormatError, LineCountMismatchError, ToolExecutionError
from mcp_hg_blame.hg_tracker import build_blame_command, run_hg_blame
from mcp_hg_blame.models import BlameRequest, BlameResult, FileState
from mcp_hg_blame.reconcile import reconcile
from mcp_hg_blame.settings import BlameSettings

logger = logging.getLogger(__name__)


def count_lines(text: str) -> int:
    """Count lines the way the source viewer does.

    A trailing newline starts one more (empty) line, so an empty file has
    one line and ``"a\\nb\\n"`` has three.
    """
    return text.count("\n") + 1


class HgBlamer:
    """Blames files of a single Mercurial repository."""

    def __init__(self, root_path: str, settings: BlameSettings | None = None):
        self.root_path = os.path.abspath(root_path)
        self.settings = settings or BlameSettings(project_root=self.root_path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def blame_file(self, request: BlameRequest) -> BlameResult:
        """Blame one file. Never raises for per-file problems."""
        self._transition(request.path, FileState.NOT_STARTED, FileState.RUNNING)

        if request.line_count == 0:
            return self._succeed(request.path, [])

        try:
            output = run_hg_blame(
                self.root_path,
                request.path,
                executable=self.settings.executable,
                timeout=self.settings.timeout_seconds,
            )
            output.check()

            parser = BlameLineParser(request.path)
            parser.consume_lines(output.stdout_lines)
            lines = reconcile(request.path, parser.lines, request.line_count)

        except ToolExecutionError as e:
            logger.warning("%s", e)
            return self._fail(request.path, e.stderr or str(e))
        except subprocess.TimeoutExpired:
            cmd = " ".join(build_blame_command(request.path, self.settings.executable))
            logger.warning(
                "The mercurial blame command [%s] timed out after %ss",
                cmd,
                self.settings.timeout_seconds,
            )
            return self._fail(
                request.path, f"hg blame timed out after {self.settings.timeout_seconds}s"
            )
        except OSError as e:
            logger.warning("Cannot run %s for %s: %s", self.settings.executable, request.path, e)
            return self._fail(request.path, f"Cannot run {self.settings.executable}: {e}")
        except FormatError as e:
            logger.warning("%s", e)
            return self._fail(request.path, str(e))
        except LineCountMismatchError as e:
            logger.error("%s. No blame data recorded for this file.", e)
            return self._fail(request.path, str(e))

        return self._succeed(request.path, lines)

    def blame_files(
        self,
        requests: Iterable[BlameRequest],
        on_result: Callable[[BlameResult], None] | None = None,
    ) -> list[BlameResult]:
        """Blame several files concurrently.

        Results are returned in request order. ``on_result`` is called once
        per file, from the calling thread, as soon as that file completes.
        """
        requests = list(requests)
        if not requests:
            return []

        workers = min(self.settings.max_workers, len(requests))
        results: list[BlameResult | None] = [None] * len(requests)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.blame_file, req): i for i, req in enumerate(requests)}
            for future in as_completed(futures):
                result = future.result()
                results[futures[future]] = result
                if on_result is not None:
                    on_result(result)

        n_ok = sum(1 for r in results if r.succeeded)
        logger.info("Blamed %d files: %d succeeded, %d failed", len(results), n_ok, len(results) - n_ok)
        return results

    def blame_paths(self, paths: Iterable[str]) -> list[BlameResult]:
        """Blame files on disk, counting their lines first.

        Results are returned in the order of ``paths``.
        """
        paths = list(paths)
        requests: list[BlameRequest] = []
        unreadable: dict[str, BlameResult] = {}
        for path in paths:
            try:
                line_count = self.count_file_lines(path)
            except OSError as e:
                logger.warning("Cannot read %s: %s", path, e)
                unreadable[path] = BlameResult.failure(path, f"Cannot read file: {e}")
                continue
            requests.append(BlameRequest(path=path, line_count=line_count))

        blamed = {r.path: r for r in self.blame_files(requests)}
        return [blamed[p] if p in blamed else unreadable[p] for p in paths]

    def count_file_lines(self, path: str) -> int:
        """Number of lines of a file relative to the repository root."""
        abs_path = os.path.join(self.root_path, path)
        with open(abs_path, encoding="utf-8", errors="replace", newline="") as f:
            return count_lines(f.read())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _transition(self, path: str, old: FileState, new: FileState) -> None:
        logger.debug("%s: %s -> %s", path, old.value, new.value)

    def _succeed(self, path: str, lines: list) -> BlameResult:
        self._transition(path, FileState.RUNNING, FileState.SUCCEEDED)
        return BlameResult.success(path, lines)

    def _fail(self, path: str, diagnostic: str) -> BlameResult:
        self._transition(path, FileState.RUNNING, FileState.FAILED)
        return BlameResult.failure(path, diagnostic)
