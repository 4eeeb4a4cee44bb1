"""Tests for environment validation."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from supabase_storage_debug.core.config import (
    ENV_ANON_KEY,
    ENV_SERVICE_KEY,
    ENV_SUPABASE_URL,
    is_valid_url,
    load_env_file,
    validate_environment,
)
from supabase_storage_debug.core.models import KeyKind


class TestIsValidUrl:
    """Tests for URL syntax validation."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://abcd.supabase.co",
            "http://localhost:54321",
            "https://abcd.supabase.co/",
            "http://127.0.0.1:65535",
            "http://[::1]:54321",
        ],
    )
    def test_accepts_absolute_http_urls(self, url):
        assert is_valid_url(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "abcd.supabase.co",
            "not a url",
            "ftp://abcd.supabase.co",
            "https://",
            "//abcd.supabase.co",
            "http://abcd.supabase.co:abc",
            "http://abcd.supabase.co:99999",
            "https://exa mple.com",
            "https://abcd<supabase>.co",
            "https://[::1",
            "https://" + "a" * 64 + ".supabase.co",
        ],
    )
    def test_rejects_malformed_urls(self, url):
        assert is_valid_url(url) is False


class TestValidateEnvironment:
    """Tests for validate_environment."""

    def test_service_key_preferred(self, captured_console):
        env = {
            ENV_SUPABASE_URL: "https://abcd.supabase.co",
            ENV_SERVICE_KEY: "service-key",
            ENV_ANON_KEY: "anon-key",
        }

        config = validate_environment(captured_console, env)

        assert config is not None
        assert config.api_key == "service-key"
        assert config.key_kind == KeyKind.SERVICE
        assert config.service_key_set is True
        assert config.anon_key_set is True
        assert "Service Role (SET)" in captured_console.text
        assert "WARN" not in captured_console.text

    def test_anon_key_fallback_warns(self, captured_console):
        env = {
            ENV_SUPABASE_URL: "https://abcd.supabase.co",
            ENV_ANON_KEY: "anon-key",
        }

        config = validate_environment(captured_console, env)

        assert config is not None
        assert config.api_key == "anon-key"
        assert config.key_kind == KeyKind.ANON
        assert config.service_key_set is False
        assert "Anon (SET)" in captured_console.text
        assert "WARN" in captured_console.text
        assert "limited" in captured_console.text

    def test_missing_url_aborts(self, captured_console):
        config = validate_environment(captured_console, {ENV_SERVICE_KEY: "key"})

        assert config is None
        assert f"{ENV_SUPABASE_URL} is not set." in captured_console.text

    def test_invalid_url_aborts(self, captured_console):
        env = {ENV_SUPABASE_URL: "abcd.supabase.co", ENV_SERVICE_KEY: "key"}

        config = validate_environment(captured_console, env)

        assert config is None
        assert f"Invalid {ENV_SUPABASE_URL}: abcd.supabase.co" in captured_console.text

    def test_missing_keys_abort(self, captured_console):
        env = {ENV_SUPABASE_URL: "https://abcd.supabase.co"}

        config = validate_environment(captured_console, env)

        assert config is None
        assert "No Supabase key found" in captured_console.text

    def test_blank_values_treated_as_missing(self, captured_console):
        env = {ENV_SUPABASE_URL: "   ", ENV_SERVICE_KEY: "  "}

        assert validate_environment(captured_console, env) is None

    def test_reports_every_value(self, captured_console):
        """Both failures are reported, not just the first."""
        validate_environment(captured_console, {})

        assert f"{ENV_SUPABASE_URL} is not set." in captured_console.text
        assert "No Supabase key found" in captured_console.text

    def test_reads_os_environ_by_default(self, captured_console):
        env = {ENV_SUPABASE_URL: "https://abcd.supabase.co", ENV_SERVICE_KEY: "from-os"}

        with patch.dict("os.environ", env, clear=True):
            config = validate_environment(captured_console)

        assert config.api_key == "from-os"

    def test_config_is_immutable(self, captured_console):
        env = {ENV_SUPABASE_URL: "https://abcd.supabase.co", ENV_SERVICE_KEY: "key"}
        config = validate_environment(captured_console, env)

        with pytest.raises(Exception):
            config.api_key = "other"


class TestLoadEnvFile:
    """Tests for .env loading."""

    def test_loads_values_from_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text(f"{ENV_SUPABASE_URL}=https://fromfile.supabase.co\n")

        with patch.dict("os.environ", {}, clear=True):
            assert load_env_file(str(env_file)) is True
            assert os.environ[ENV_SUPABASE_URL] == "https://fromfile.supabase.co"

    def test_existing_environment_wins(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text(f"{ENV_SUPABASE_URL}=https://fromfile.supabase.co\n")

        with patch.dict("os.environ", {ENV_SUPABASE_URL: "https://fromenv.supabase.co"}, clear=True):
            load_env_file(str(env_file))
            assert os.environ[ENV_SUPABASE_URL] == "https://fromenv.supabase.co"

    def test_finds_dotenv_in_working_directory(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".env").write_text(f"{ENV_ANON_KEY}=anon-from-cwd\n")
        monkeypatch.chdir(tmp_path)

        with patch.dict("os.environ", {}, clear=True):
            assert load_env_file() is True
            assert os.environ[ENV_ANON_KEY] == "anon-from-cwd"
