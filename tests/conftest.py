"""
Shared pytest fixtures for the OrangeHRM BDD suite's own tests.

These tests cover the framework code under ``hrm_bdd`` (configuration,
session lifecycle, reporting, the runner) rather than the OrangeHRM
application itself; the application is exercised by the behave features.

Key Concepts Demonstrated:
- Environment isolation with ``monkeypatch``
- Fake Playwright driver trees built from ``MagicMock``
- Test data factories with Faker
"""

from unittest.mock import MagicMock

import pytest
from faker import Faker

from hrm_bdd import config
from hrm_bdd.config import BrowserConfig, RunConfig


fake = Faker()

# Variables the suite reads; cleared before every test.
CONFIG_VARIABLES = (
    "TEST_ENV",
    "STRICT_CONFIG",
    "API_BASE_URL",
    "BROWSER",
    "HEADLESS",
    "SLOW_MO",
    "TIMEOUT",
    "NAVIGATION_TIMEOUT",
    "ACTION_TIMEOUT",
    "VIDEO",
    "SCREENSHOT",
    "TRACE",
    "VIEWPORT_WIDTH",
    "VIEWPORT_HEIGHT",
    "REUSE_BROWSER",
    "WORKERS",
    "RETRY_COUNT",
    "RETRY_ATTEMPT",
    "REPORT_PATH",
    "SCREENSHOT_PATH",
    "VIDEO_PATH",
    "TRACE_PATH",
    "LOG_LEVEL",
    "LOG_TO_FILE",
    "LOG_DIR",
)

ENVIRONMENT_PREFIXES = ("DEV", "QA", "PROD", "STAGING")


# -----------------------------------------------------------------------------
# Environment Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """
    Give every test an empty configuration environment.

    Removes every variable the suite reads and resets the in-process
    environment override, so values set by a developer's shell or by a
    previous test never leak into assertions.
    """
    for name in CONFIG_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    for prefix in ENVIRONMENT_PREFIXES:
        for suffix in ("BASE_URL", "USERNAME", "PASSWORD"):
            monkeypatch.delenv(f"{prefix}_{suffix}", raising=False)
    config.set_environment(None)
    yield
    config.set_environment(None)


@pytest.fixture
def run_config(tmp_path):
    """
    Run settings whose artifact folders all live under ``tmp_path``.

    Returns:
        RunConfig: Settings safe to write into during a test.
    """
    return RunConfig(
        report_path=tmp_path / "reports",
        screenshot_path=tmp_path / "screenshots",
        video_path=tmp_path / "videos",
        trace_path=tmp_path / "reports" / "traces",
        log_dir=tmp_path / "logs",
        log_to_file=False,
    )


@pytest.fixture
def browser_config():
    """Default browser settings."""
    return BrowserConfig()


# -----------------------------------------------------------------------------
# Fake Playwright
# -----------------------------------------------------------------------------

class FakePlaywrightFactory:
    """
    Stand-in for ``sync_playwright`` that never starts a driver.

    ``factory().start()`` returns ``self.playwright``.  Every launcher
    returns the same browser mock, which returns the same context, which
    returns the same page, so tests can assert on any level of the tree.
    """

    def __init__(self):
        self.calls = 0
        self.playwright = MagicMock(name="playwright")
        self.browser = MagicMock(name="browser")
        self.browser.is_connected.return_value = True
        self.context = MagicMock(name="context")
        self.page = MagicMock(name="page")
        for launcher in (
            self.playwright.chromium,
            self.playwright.firefox,
            self.playwright.webkit,
        ):
            launcher.launch.return_value = self.browser
        self.browser.new_context.return_value = self.context
        self.context.new_page.return_value = self.page

    def __call__(self):
        self.calls += 1
        manager = MagicMock(name="sync_playwright")
        manager.start.return_value = self.playwright
        return manager


@pytest.fixture
def fake_playwright():
    """
    Fake Playwright driver tree.

    Returns:
        FakePlaywrightFactory: Pass it as ``playwright_factory``.
    """
    return FakePlaywrightFactory()


@pytest.fixture
def behave_report():
    """
    Build a minimal behave JSON report.

    Returns:
        Callable taking ``(feature_name, elements)`` and returning the
        list-of-features document behave writes.
    """
    def _build(feature_name=None, elements=()):
        return [
            {
                "keyword": "Feature",
                "name": feature_name or fake.catch_phrase(),
                "location": "features/sample.feature:1",
                "elements": list(elements),
            }
        ]

    return _build
