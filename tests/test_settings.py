"""Tests for environment-driven settings."""

import os

import pytest

from mcp_hg_blame.settings import BlameSettings


class TestFromEnv:
    def test_defaults(self):
        settings = BlameSettings.from_env({})
        assert settings.project_root == os.getcwd()
        assert settings.executable == "hg"
        assert settings.timeout_seconds == 120.0
        assert settings.max_workers == 4
        assert settings.log_level == "WARNING"

    def test_reads_all_variables(self, tmp_path):
        settings = BlameSettings.from_env({
            "PROJECT_ROOT": str(tmp_path),
            "HG_BLAME_EXECUTABLE": "/usr/local/bin/hg",
            "HG_BLAME_TIMEOUT": "30",
            "HG_BLAME_MAX_WORKERS": "8",
            "HG_BLAME_LOG_LEVEL": "debug",
        })
        assert settings.project_root == str(tmp_path)
        assert settings.executable == "/usr/local/bin/hg"
        assert settings.timeout_seconds == 30.0
        assert settings.max_workers == 8
        assert settings.log_level == "DEBUG"

    def test_blank_numbers_use_defaults(self):
        settings = BlameSettings.from_env({"HG_BLAME_TIMEOUT": " ", "HG_BLAME_MAX_WORKERS": ""})
        assert settings.timeout_seconds == 120.0
        assert settings.max_workers == 4

    @pytest.mark.parametrize(
        "name, value",
        [
            ("HG_BLAME_TIMEOUT", "soon"),
            ("HG_BLAME_TIMEOUT", "0"),
            ("HG_BLAME_TIMEOUT", "inf"),
            ("HG_BLAME_TIMEOUT", "nan"),
            ("HG_BLAME_MAX_WORKERS", "2.5"),
            ("HG_BLAME_MAX_WORKERS", "0"),
            ("HG_BLAME_LOG_LEVEL", "LOUD"),
        ],
    )
    def test_invalid_values_name_the_variable(self, name, value):
        with pytest.raises(ValueError, match=name):
            BlameSettings.from_env({name: value})
