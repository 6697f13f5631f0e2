"""
Base Page class for the Page Object Model.

Every OrangeHRM screen object inherits from ``BasePage``, which centralises
the generic wait / click / fill / read logic so that page classes only
declare their elements and compose actions.

The class splits its methods into two families with different failure
rules:

- **Actions** (``click``, ``fill``, ``select_option``, ...) first wait for
  the element to become visible within the action timeout, then act, then
  log.  A timeout is logged and re-raised unchanged: an action that cannot
  happen must fail the step.
- **Queries** (``is_visible``, ``get_text``, ``count``, ...) never raise.
  They return a safe default (``False``, ``""``, ``0``) and log a warning;
  the step's assertion reports the failure.

Key Concepts Demonstrated:
- Base class pattern for code reuse
- Ordered fallback locators (``LocatorChain``) resolved lazily
- Bounded waits on every action
- Forgiving queries vs. strict actions
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Union

from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from hrm_bdd.config import (
    BrowserConfig,
    EnvironmentConfig,
    resolve_browser_config,
    resolve_environment,
    resolve_run_config,
)
from hrm_bdd.pages.locators import LocatorChain
from hrm_bdd.scenario import artifact_timestamp, sanitize_label

logger = logging.getLogger(__name__)

Target = Union[Locator, LocatorChain]

NETWORK_IDLE_TIMEOUT_MS = 10000


class BasePage:
    """
    Base class for all page objects.

    Attributes:
        page: Playwright page instance.
        environment: Target environment settings (base URL, credentials).
        browser_config: Timeouts used for waits and actions.
    """

    def __init__(
        self,
        page: Page,
        environment: EnvironmentConfig | None = None,
        browser_config: BrowserConfig | None = None,
    ):
        """
        Initialize the base page.

        Args:
            page: Playwright page instance.
            environment: Environment settings; resolved from env vars if None.
            browser_config: Browser settings; resolved from env vars if None.
        """
        self.page = page
        self.environment = environment or resolve_environment()
        self.browser_config = browser_config or resolve_browser_config()

    @property
    def action_timeout(self) -> int:
        return self.browser_config.action_timeout_ms

    # -------------------------------------------------------------------------
    # Locator resolution
    # -------------------------------------------------------------------------

    def locate(self, target: Target) -> Locator:
        """Turn a chain into a concrete locator; plain locators pass through."""
        if isinstance(target, LocatorChain):
            return target.resolve(self.page)
        return target

    @staticmethod
    def describe(target: Target) -> str:
        if isinstance(target, LocatorChain):
            return target.name
        return str(target)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def navigate_to(self, url: str) -> None:
        """
        Open a URL and wait for the DOM to be ready.

        Args:
            url: Absolute URL to open.
        """
        logger.info("Navigating to: %s", url)
        self.page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=self.browser_config.navigation_timeout_ms,
        )

    def refresh(self) -> None:
        self.page.reload()
        logger.info("Page refreshed")

    def current_url(self) -> str:
        return self.page.url

    def title(self) -> str:
        return self.page.title()

    # -------------------------------------------------------------------------
    # Wait Methods
    # -------------------------------------------------------------------------

    def wait_for_element(self, target: Target, timeout: int | None = None) -> Locator:
        """
        Wait for an element to be visible.

        Args:
            target: Locator or locator chain.
            timeout: Maximum wait in milliseconds (action timeout if None).

        Returns:
            The resolved locator.

        Raises:
            playwright.sync_api.TimeoutError: If the element never shows up.
        """
        locator = self.locate(target)
        locator.wait_for(state="visible", timeout=timeout or self.action_timeout)
        return locator

    def wait_for_page_load(self) -> None:
        """Wait for DOM content, then give the network a bounded chance to idle."""
        self.page.wait_for_load_state("domcontentloaded")
        try:
            self.page.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
        except PlaywrightTimeoutError:
            logger.warning("Network did not become idle within %dms", NETWORK_IDLE_TIMEOUT_MS)

    def wait_for_url(self, pattern: str | re.Pattern, timeout: int | None = None) -> None:
        """
        Wait until the page URL matches a glob or regex.

        Raises:
            playwright.sync_api.TimeoutError: If the URL never matches.
        """
        self.page.wait_for_url(pattern, timeout=timeout or self.browser_config.navigation_timeout_ms)

    # -------------------------------------------------------------------------
    # Actions (wait, act, log; errors propagate)
    # -------------------------------------------------------------------------

    def click(self, target: Target, *, force: bool = False, timeout: int | None = None) -> None:
        """Wait for an element and click it."""
        try:
            locator = self.wait_for_element(target, timeout)
            locator.click(force=force, timeout=timeout or self.action_timeout)
        except Exception as exc:
            logger.error("Failed to click on element %s: %s", self.describe(target), exc)
            raise
        logger.info("Clicked on element: %s", self.describe(target))

    def fill(
        self,
        target: Target,
        text: str,
        *,
        clear: bool = False,
        timeout: int | None = None,
    ) -> None:
        """Wait for an input and fill it (optionally clearing it first)."""
        try:
            locator = self.wait_for_element(target, timeout)
            if clear:
                locator.clear(timeout=timeout or self.action_timeout)
            locator.fill(text, timeout=timeout or self.action_timeout)
        except Exception as exc:
            logger.error("Failed to fill element %s: %s", self.describe(target), exc)
            raise
        logger.info("Filled element %s", self.describe(target))

    def type_text(self, target: Target, text: str, delay: int = 100) -> None:
        """Type text key by key, for inputs that react to keystrokes."""
        try:
            locator = self.wait_for_element(target)
            locator.press_sequentially(text, delay=delay)
        except Exception as exc:
            logger.error("Failed to type into element %s: %s", self.describe(target), exc)
            raise
        logger.info("Typed text into %s with delay %dms", self.describe(target), delay)

    def select_option(self, target: Target, value: Any) -> None:
        """Pick an option in a native ``<select>``."""
        try:
            locator = self.wait_for_element(target)
            locator.select_option(value, timeout=self.action_timeout)
        except Exception as exc:
            logger.error("Failed to select option on %s: %s", self.describe(target), exc)
            raise
        logger.info("Selected option %r on %s", value, self.describe(target))

    def hover(self, target: Target) -> None:
        try:
            locator = self.wait_for_element(target)
            locator.hover(timeout=self.action_timeout)
        except Exception as exc:
            logger.error("Failed to hover over %s: %s", self.describe(target), exc)
            raise

    def scroll_to(self, target: Target) -> None:
        self.locate(target).scroll_into_view_if_needed(timeout=self.action_timeout)
        logger.info("Scrolled to element: %s", self.describe(target))

    def press_key(self, key: str) -> None:
        self.page.keyboard.press(key)
        logger.info("Pressed key: %s", key)

    def accept_next_dialog(self, accept: bool = True, prompt_text: str | None = None) -> None:
        """Answer the next ``alert``/``confirm``/``prompt`` dialog."""

        def _handle(dialog):
            logger.info("Dialog appeared: %s", dialog.message)
            if not accept:
                dialog.dismiss()
            elif prompt_text is not None:
                dialog.accept(prompt_text)
            else:
                dialog.accept()

        self.page.once("dialog", _handle)

    # -------------------------------------------------------------------------
    # Queries (never raise; safe defaults)
    # -------------------------------------------------------------------------

    def is_visible(self, target: Target) -> bool:
        """Return whether the element is visible right now (False on error)."""
        try:
            return self.locate(target).is_visible()
        except Exception as exc:
            logger.warning("Visibility check failed for %s: %s", self.describe(target), exc)
            return False

    def appears_within(self, target: Target, timeout: int | None = None) -> bool:
        """Wait up to ``timeout`` for the element; False if it never shows or the page is gone."""
        try:
            self.wait_for_element(target, timeout)
        except PlaywrightTimeoutError:
            logger.info("%s did not appear within %dms", self.describe(target), timeout or self.action_timeout)
            return False
        except Exception as exc:
            logger.warning("Waiting for %s failed: %s", self.describe(target), exc)
            return False
        return True

    def is_enabled(self, target: Target) -> bool:
        """Return whether the element is enabled (False if missing or on error)."""
        try:
            locator = self.locate(target)
            if locator.count() == 0:
                return False
            return locator.is_enabled(timeout=self.action_timeout)
        except Exception as exc:
            logger.warning("Enabled check failed for %s: %s", self.describe(target), exc)
            return False

    def get_text(self, target: Target, timeout: int | None = None) -> str:
        """
        Wait for an element and return its stripped text content.

        Returns:
            The text, or ``""`` when the element never appeared.
        """
        try:
            locator = self.wait_for_element(target, timeout)
            text = (locator.text_content() or "").strip()
        except Exception as exc:
            logger.warning("Could not read text from %s: %s", self.describe(target), exc)
            return ""
        logger.info("Retrieved text: %r", text)
        return text

    def get_attribute(self, target: Target, name: str) -> str | None:
        """Return an attribute value, or ``None`` if missing or unreadable."""
        try:
            locator = self.locate(target)
            if locator.count() == 0:
                return None
            return locator.get_attribute(name, timeout=self.action_timeout)
        except Exception as exc:
            logger.warning("Could not read attribute %r from %s: %s", name, self.describe(target), exc)
            return None

    def input_value(self, target: Target) -> str:
        """Return an input's current value, or ``""`` if unavailable."""
        try:
            locator = self.locate(target)
            if locator.count() == 0:
                return ""
            return locator.input_value(timeout=self.action_timeout)
        except Exception as exc:
            logger.warning("Could not read value from %s: %s", self.describe(target), exc)
            return ""

    def count(self, target: Target) -> int:
        """Number of matching elements (0 on error)."""
        try:
            if isinstance(target, LocatorChain):
                return target.matching(self.page).count()
            return target.count()
        except Exception as exc:
            logger.warning("Could not count %s: %s", self.describe(target), exc)
            return 0

    def all_texts(self, target: Target) -> list[str]:
        """Stripped, non-empty text of every match ([] on error)."""
        try:
            locator = target.matching(self.page) if isinstance(target, LocatorChain) else target
            texts = [text.strip() for text in locator.all_text_contents()]
        except Exception as exc:
            logger.warning("Could not read texts from %s: %s", self.describe(target), exc)
            return []
        return [text for text in texts if text]

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def take_screenshot(self, name: str) -> Path:
        """
        Take a full-page screenshot of the current page.

        Args:
            name: Base name for the screenshot file.

        Returns:
            Path to the saved screenshot.
        """
        directory = Path(resolve_run_config().screenshot_path)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{sanitize_label(name)}-{artifact_timestamp()}.png"
        self.page.screenshot(path=str(path), full_page=True)
        logger.info("Screenshot taken: %s", path)
        return path
