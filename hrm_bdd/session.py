"""
Browser session lifecycle for one worker process.

``SessionManager`` owns the Playwright driver, at most one browser, at
most one browsing context and at most one page.  It is constructed
explicitly by the behave hooks (one per worker process) and handed to each
scenario's ``ScenarioContext``; nothing else creates or closes sessions.

Ownership follows the Playwright object tree::

    Playwright driver -> Browser -> BrowserContext -> Page

A child is never created without its parent, and teardown always runs
child-first.  Every ``close_*`` method is idempotent, so hooks can call
them unconditionally whether a scenario passed, failed or never got a
page at all.  A close that fails is logged and the outer levels are still
released, so a crashed page never leaves its browser bound.

Key Concepts Demonstrated:
- Lazy creation with idempotent start (browser launched once, reused)
- Reverse-order, idempotent teardown that survives a failing close
- Trace and video capture wired from configuration
- Injected driver factory so the lifecycle is testable without a browser
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from hrm_bdd.config import BrowserConfig, BrowserEngine, RunConfig, TraceMode, VideoMode

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
]


class SessionManager:
    """
    Owner of the browser, context and page for the current scenario.

    Attributes:
        browser_config: Launch, timeout and capture settings.
        run_config: Artifact paths and the current retry attempt.
    """

    def __init__(
        self,
        browser_config: BrowserConfig,
        run_config: RunConfig,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ):
        """
        Initialize the manager without launching anything.

        Args:
            browser_config: Resolved browser settings.
            run_config: Resolved run settings.
            playwright_factory: Callable returning a Playwright context
                manager; ``start()`` is called on its result.
        """
        self.browser_config = browser_config
        self.run_config = run_config
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._tracing = False

    # -------------------------------------------------------------------------
    # Handles
    # -------------------------------------------------------------------------

    @property
    def browser(self) -> Browser | None:
        return self._browser

    @property
    def context(self) -> BrowserContext | None:
        return self._context

    @property
    def page(self) -> Page | None:
        return self._page

    @property
    def tracing_active(self) -> bool:
        return self._tracing

    # -------------------------------------------------------------------------
    # Capture policy
    # -------------------------------------------------------------------------

    def should_trace(self) -> bool:
        """Return True when this attempt records a trace."""
        mode = self.browser_config.trace
        if mode == TraceMode.OFF:
            return False
        if mode == TraceMode.ON_FIRST_RETRY:
            return self.run_config.retry_attempt == 1
        return True

    def should_record_video(self) -> bool:
        """Return True when this attempt records a video."""
        mode = self.browser_config.video
        if mode == VideoMode.OFF:
            return False
        if mode == VideoMode.ON_FIRST_RETRY:
            return self.run_config.retry_attempt == 1
        return True

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def start_browser(self) -> Browser:
        """
        Launch the configured browser, or return the one already running.

        Returns:
            The live Playwright browser.

        Raises:
            playwright.sync_api.Error: If the driver or browser fails to
                start.  No retry happens here.
        """
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        if self._playwright is None:
            self._playwright = self._playwright_factory().start()

        engine = self.browser_config.engine
        launcher = {
            BrowserEngine.CHROMIUM: self._playwright.chromium,
            BrowserEngine.FIREFOX: self._playwright.firefox,
            BrowserEngine.WEBKIT: self._playwright.webkit,
        }[engine]

        launch_options: dict[str, Any] = {
            "headless": self.browser_config.headless,
            "slow_mo": self.browser_config.slow_mo_ms,
        }
        if engine == BrowserEngine.CHROMIUM:
            launch_options["args"] = list(CHROMIUM_ARGS)

        logger.info("Launching %s browser (headless=%s)", engine.value, self.browser_config.headless)
        self._browser = launcher.launch(**launch_options)
        return self._browser

    def new_context(self) -> BrowserContext:
        """
        Create an isolated browsing context on the live browser.

        Starts the browser first when needed and closes any context (and
        its page) still open.  Video recording and tracing are switched on
        according to the configured modes.

        Returns:
            The new browser context.
        """
        browser = self.start_browser()
        if self._context is not None:
            logger.info("Replacing the open browser context")
            self.close_context()

        options: dict[str, Any] = {
            "viewport": {
                "width": self.browser_config.viewport_width,
                "height": self.browser_config.viewport_height,
            },
            "ignore_https_errors": True,
        }
        if self.should_record_video():
            video_dir = Path(self.run_config.video_path)
            video_dir.mkdir(parents=True, exist_ok=True)
            options["record_video_dir"] = str(video_dir)

        self._context = browser.new_context(**options)

        if self.should_trace():
            self.start_tracing()

        logger.info("Browser context created")
        return self._context

    def new_page(self) -> Page:
        """
        Open a page in the current context, creating the context if absent.

        Returns:
            The new page with default and navigation timeouts applied.
        """
        if self._context is None:
            self.new_context()

        self._page = self._context.new_page()
        self._page.set_default_timeout(self.browser_config.default_timeout_ms)
        self._page.set_default_navigation_timeout(self.browser_config.navigation_timeout_ms)
        logger.info("New page created")
        return self._page

    # -------------------------------------------------------------------------
    # Tracing
    # -------------------------------------------------------------------------

    def start_tracing(self) -> None:
        """Start a trace with screenshots and DOM snapshots."""
        if self._context is None or self._tracing:
            return
        self._context.tracing.start(screenshots=True, snapshots=True)
        self._tracing = True

    def stop_tracing(self, path: Path | None = None) -> None:
        """
        Stop the active trace.

        Args:
            path: Where to write the trace archive; ``None`` discards it.
        """
        if self._context is None or not self._tracing:
            return
        self._tracing = False
        if path is None:
            self._context.tracing.stop()
        else:
            self._context.tracing.stop(path=str(path))

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    @staticmethod
    def _release(handle: Any, what: str, stop: bool = False) -> None:
        """Close (or stop) one handle; errors are logged so outer levels still close."""
        try:
            if stop:
                handle.stop()
            else:
                handle.close()
        except Exception as exc:
            logger.warning("Error closing %s: %s", what, exc)
        else:
            logger.info("%s closed", what.capitalize())

    def close_page(self) -> None:
        """Close the current page; no-op when there is none."""
        if self._page is None:
            return
        page, self._page = self._page, None
        self._release(page, "page")

    def close_context(self) -> None:
        """Close the page, then the context; no-op when there is none."""
        self.close_page()
        if self._context is None:
            return
        context, self._context = self._context, None
        self._tracing = False
        self._release(context, "browser context")

    def close_browser(self) -> None:
        """Close page, context and browser in that order; idempotent."""
        self.close_context()
        if self._browser is None:
            return
        browser, self._browser = self._browser, None
        self._release(browser, "browser")

    def shutdown(self) -> None:
        """Close everything and stop the Playwright driver; idempotent."""
        self.close_browser()
        if self._playwright is None:
            return
        playwright, self._playwright = self._playwright, None
        self._release(playwright, "Playwright driver", stop=True)
