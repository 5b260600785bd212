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

"""Environment-driven configuration."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass

DEFAULT_EXECUTABLE = "hg"
DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_MAX_WORKERS = 4
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class BlameSettings:
    """Settings shared by every blame of a session."""

    project_root: str
    executable: str = DEFAULT_EXECUTABLE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> BlameSettings:
        """Read settings from PROJECT_ROOT and the HG_BLAME_* variables."""
        env = os.environ if environ is None else environ

        timeout = _parse_number(env, "HG_BLAME_TIMEOUT", float, DEFAULT_TIMEOUT_SECONDS)
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError(f"HG_BLAME_TIMEOUT must be a positive finite number, got {timeout}")

        max_workers = _parse_number(env, "HG_BLAME_MAX_WORKERS", int, DEFAULT_MAX_WORKERS)
        if max_workers < 1:
            raise ValueError(f"HG_BLAME_MAX_WORKERS must be at least 1, got {max_workers}")

        log_level = env.get("HG_BLAME_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"HG_BLAME_LOG_LEVEL is not a logging level: {log_level!r}")

        return cls(
            project_root=os.path.abspath(env.get("PROJECT_ROOT") or os.getcwd()),
            executable=env.get("HG_BLAME_EXECUTABLE") or DEFAULT_EXECUTABLE,
            timeout_seconds=timeout,
            max_workers=max_workers,
            log_level=log_level,
        )


def _parse_number(env, name: str, kind, default):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
