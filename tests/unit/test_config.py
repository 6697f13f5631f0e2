"""
Unit tests for configuration resolution.

Key Concepts Demonstrated:
- Environment variable overrides via monkeypatch
- Negative testing of malformed values
- Parameterized testing across environments
"""

import logging
from pathlib import Path

import pytest

from hrm_bdd.config import (
    DEFAULT_BASE_URL,
    DEFAULT_PASSWORD,
    DEFAULT_USERNAME,
    BrowserEngine,
    ConfigError,
    ScreenshotMode,
    TraceMode,
    VideoMode,
    full_config,
    get_environment,
    is_strict,
    resolve_browser_config,
    resolve_environment,
    resolve_run_config,
    set_environment,
)


pytestmark = pytest.mark.unit


class TestActiveEnvironment:
    """Tests for the current-environment selection."""

    def test_defaults_to_dev(self):
        assert get_environment() == "dev"

    def test_reads_test_env(self, monkeypatch):
        monkeypatch.setenv("TEST_ENV", "QA")

        assert get_environment() == "qa"

    def test_override_wins_over_test_env(self, monkeypatch):
        monkeypatch.setenv("TEST_ENV", "qa")

        set_environment("prod")

        assert get_environment() == "prod"

    def test_clearing_override_returns_to_test_env(self, monkeypatch):
        monkeypatch.setenv("TEST_ENV", "qa")
        set_environment("prod")

        set_environment(None)

        assert get_environment() == "qa"


class TestResolveEnvironment:
    """Tests for prefixed target settings and their fallbacks."""

    def test_reads_prefixed_variables(self, monkeypatch):
        # Arrange
        monkeypatch.setenv("QA_BASE_URL", "https://qa.example.com/auth/login")
        monkeypatch.setenv("QA_USERNAME", "qa-admin")
        monkeypatch.setenv("QA_PASSWORD", "qa-secret")

        # Act
        environment = resolve_environment("qa")

        # Assert
        assert environment.base_url == "https://qa.example.com/auth/login"
        assert environment.username == "qa-admin"
        assert environment.password == "qa-secret"

    def test_uses_active_environment_when_name_omitted(self, monkeypatch):
        monkeypatch.setenv("TEST_ENV", "staging")
        monkeypatch.setenv("STAGING_BASE_URL", "https://staging.example.com")

        assert resolve_environment().base_url == "https://staging.example.com"

    def test_missing_variables_fall_back_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="hrm_bdd.config"):
            environment = resolve_environment("qa")

        assert environment.base_url == DEFAULT_BASE_URL
        assert environment.username == DEFAULT_USERNAME
        assert environment.password == DEFAULT_PASSWORD
        assert "QA_BASE_URL" in caplog.text

    def test_blank_value_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("DEV_BASE_URL", "   ")

        assert resolve_environment("dev").base_url == DEFAULT_BASE_URL

    @pytest.mark.parametrize("name", ["dev", "qa", "prod", "staging", "unknown"])
    def test_base_url_is_never_empty(self, name):
        assert resolve_environment(name).base_url

    def test_strict_mode_raises_for_missing_variables(self, monkeypatch):
        monkeypatch.setenv("STRICT_CONFIG", "true")
        monkeypatch.setenv("PROD_BASE_URL", "https://prod.example.com")

        with pytest.raises(ConfigError) as exc_info:
            resolve_environment("prod")

        assert "PROD_USERNAME" in str(exc_info.value)
        assert "PROD_PASSWORD" in str(exc_info.value)
        assert "PROD_BASE_URL" not in str(exc_info.value)

    def test_strict_mode_is_off_by_default(self):
        assert is_strict() is False

    def test_api_base_url_is_optional(self, monkeypatch):
        assert resolve_environment("dev").api_base_url is None

        monkeypatch.setenv("API_BASE_URL", "https://api.example.com")

        assert resolve_environment("dev").api_base_url == "https://api.example.com"


class TestBrowserConfig:
    """Tests for Playwright settings."""

    def test_defaults(self):
        browser = resolve_browser_config()

        assert browser.engine == BrowserEngine.CHROMIUM
        assert browser.headless is True
        assert browser.default_timeout_ms == 30000
        assert browser.navigation_timeout_ms == 30000
        assert browser.action_timeout_ms == 10000
        assert browser.video == VideoMode.OFF
        assert browser.screenshot == ScreenshotMode.ONLY_ON_FAILURE
        assert browser.trace == TraceMode.RETAIN_ON_FAILURE
        assert (browser.viewport_width, browser.viewport_height) == (1920, 1080)
        assert browser.reuse_browser is False

    @pytest.mark.parametrize(
        "raw,expected",
        [("false", False), ("FALSE", False), ("true", True), ("0", True), ("no", True)],
    )
    def test_only_literal_false_turns_headless_off(self, monkeypatch, raw, expected):
        monkeypatch.setenv("HEADLESS", raw)

        assert resolve_browser_config().headless is expected

    def test_modes_are_read_case_insensitively(self, monkeypatch):
        monkeypatch.setenv("BROWSER", "Firefox")
        monkeypatch.setenv("VIDEO", "on-first-retry")
        monkeypatch.setenv("TRACE", "OFF")

        browser = resolve_browser_config()

        assert browser.engine == BrowserEngine.FIREFOX
        assert browser.video == VideoMode.ON_FIRST_RETRY
        assert browser.trace == TraceMode.OFF

    def test_modes_compare_equal_to_raw_strings(self):
        assert ScreenshotMode.ONLY_ON_FAILURE == "only-on-failure"

    def test_unknown_browser_is_rejected(self, monkeypatch):
        monkeypatch.setenv("BROWSER", "opera")

        with pytest.raises(ConfigError, match="BROWSER"):
            resolve_browser_config()

    def test_non_integer_timeout_is_rejected(self, monkeypatch):
        monkeypatch.setenv("TIMEOUT", "thirty")

        with pytest.raises(ConfigError, match="TIMEOUT must be an integer"):
            resolve_browser_config()

    def test_config_error_is_a_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestRunConfig:
    """Tests for workers, retries and artifact paths."""

    def test_defaults(self):
        run = resolve_run_config()

        assert run.environment == "dev"
        assert run.workers == 2
        assert run.retry_count == 0
        assert run.retry_attempt == 0
        assert run.report_path == Path("reports")
        assert run.trace_path == Path("reports") / "traces"
        assert run.log_to_file is True

    def test_trace_path_follows_report_path(self, monkeypatch):
        monkeypatch.setenv("REPORT_PATH", "out/reports")

        assert resolve_run_config().trace_path == Path("out/reports") / "traces"

    def test_counts_are_clamped(self, monkeypatch):
        monkeypatch.setenv("WORKERS", "0")
        monkeypatch.setenv("RETRY_COUNT", "-3")

        run = resolve_run_config()

        assert run.workers == 1
        assert run.retry_count == 0

    def test_artifact_dirs_cover_every_output(self, run_config):
        assert run_config.report_path in run_config.artifact_dirs
        assert run_config.log_dir in run_config.artifact_dirs
        assert len(run_config.artifact_dirs) == 5


class TestFullConfig:
    """Tests for the loggable configuration snapshot."""

    def test_password_is_masked(self, monkeypatch):
        monkeypatch.setenv("DEV_PASSWORD", "super-secret")

        snapshot = full_config()

        assert snapshot["environment"]["password"] == "***"
        assert "super-secret" not in str(snapshot)

    def test_values_are_plain_json_types(self):
        snapshot = full_config()

        assert snapshot["browser"]["engine"] == "chromium"
        assert snapshot["run"]["report_path"] == "reports"
