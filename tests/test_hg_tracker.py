"""Unit tests for hg_tracker module."""

from unittest.mock import patch, MagicMock
import subprocess

import pytest

from mcp_hg_blame.errors import ToolExecutionError
from mcp_hg_blame.hg_tracker import (
    HgBlameOutput,
    PROVIDER_KEY,
    build_blame_command,
    is_hg_repo,
    run_hg_blame,
    split_output_lines,
)


class TestIsHgRepo:
    def test_returns_true_with_marker_directory(self, tmp_path):
        (tmp_path / ".hg").mkdir()
        assert is_hg_repo(str(tmp_path)) is True

    def test_returns_false_for_plain_directory(self, tmp_path):
        assert is_hg_repo(str(tmp_path)) is False

    def test_returns_false_when_marker_is_a_file(self, tmp_path):
        (tmp_path / ".hg").write_text("")
        assert is_hg_repo(str(tmp_path)) is False

    def test_provider_key(self):
        assert PROVIDER_KEY == "hg"


class TestBuildBlameCommand:
    def test_default_command(self):
        assert build_blame_command("src/foo.xoo") == [
            "hg", "blame", "-w", "-v", "--user", "--date", "--changeset", "src/foo.xoo",
        ]

    def test_custom_executable(self):
        assert build_blame_command("foo", "/opt/hg/bin/hg")[0] == "/opt/hg/bin/hg"


class TestRunHgBlame:
    def test_splits_output_into_lines(self):
        with patch("mcp_hg_blame.hg_tracker.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=b"a\nb\n", stderr=b"")
            output = run_hg_blame("/repo", "foo.txt")

        assert output.returncode == 0
        assert output.stdout_lines == ["a", "b"]
        assert output.stderr_lines == []

    def test_runs_in_repository_root_with_timeout(self):
        with patch("mcp_hg_blame.hg_tracker.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=b"", stderr=b"")
            run_hg_blame("/repo", "foo.txt", executable="hg", timeout=5)

        args, kwargs = mock_run.call_args
        assert args[0] == build_blame_command("foo.txt")
        assert kwargs["cwd"] == "/repo"
        assert kwargs["timeout"] == 5
        assert kwargs["capture_output"] is True

    def test_captures_stderr_on_failure(self):
        with patch("mcp_hg_blame.hg_tracker.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(
                returncode=255,
                stdout=b"",
                stderr=b"abandon : src/foo.xoo: no such file in rev 000000000000\n",
            )
            output = run_hg_blame("/repo", "src/foo.xoo")

        assert output.returncode == 255
        assert output.stderr == "abandon : src/foo.xoo: no such file in rev 000000000000"

    def test_timeout_propagates(self):
        with patch("mcp_hg_blame.hg_tracker.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="hg", timeout=5)
            with pytest.raises(subprocess.TimeoutExpired):
                run_hg_blame("/repo", "foo.txt", timeout=5)

    def test_missing_executable_propagates(self):
        with patch("mcp_hg_blame.hg_tracker.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError
            with pytest.raises(FileNotFoundError):
                run_hg_blame("/repo", "foo.txt")


class TestHgBlameOutput:
    def test_check_passes_on_success(self):
        HgBlameOutput(command=["hg"], returncode=0).check()

    def test_check_raises_on_failure(self):
        output = HgBlameOutput(
            command=["hg", "blame", "foo"],
            returncode=255,
            stderr_lines=["abort: no repository found"],
        )
        with pytest.raises(ToolExecutionError) as excinfo:
            output.check()

        assert excinfo.value.returncode == 255
        assert excinfo.value.stderr == "abort: no repository found"
        assert "hg blame foo" in str(excinfo.value)


class TestSplitOutputLines:
    def test_empty(self):
        assert split_output_lines(b"") == []
        assert split_output_lines(None) == []

    def test_drops_final_newline_only(self):
        assert split_output_lines(b"a\n\nb\n") == ["a", "", "b"]

    def test_no_trailing_newline(self):
        assert split_output_lines(b"a\nb") == ["a", "b"]

    def test_strips_carriage_return(self):
        assert split_output_lines(b"a\r\nb\r\n") == ["a", "b"]

    @pytest.mark.parametrize("sep", ["\f", "\v", "\x1c", "\x85", "\u2028", "\u2029"])
    def test_other_line_breaks_stay_inside_the_line(self, sep):
        data = f"x: a{sep}b\ny: c\n".encode()
        assert split_output_lines(data) == [f"x: a{sep}b", "y: c"]

    def test_undecodable_bytes_are_replaced(self):
        assert split_output_lines(b"caf\xe9\n") == ["caf\ufffd"]

    def test_form_feed_in_run_output(self):
        with patch("mcp_hg_blame.hg_tracker.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=b"a\fb\nc\n", stderr=b"")
            output = run_hg_blame("/repo", "foo.c")

        assert output.stdout_lines == ["a\fb", "c"]
