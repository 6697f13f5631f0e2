"""
Per-scenario execution context.

A ``ScenarioContext`` binds one behave scenario to the worker's
``SessionManager``: it asks the manager for a browser, context and page at
scenario start, exposes them to step code, and hands them back at the end.
It also owns the artifact helpers (screenshots, traces, videos) that hooks
call when a step or scenario fails.

Artifact capture is best effort by contract.  A broken screenshot must never
mask or replace the real test failure, so every capture helper logs its own
errors and returns ``None`` instead of raising.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

from playwright.sync_api import Browser, BrowserContext, Page

from hrm_bdd.config import BrowserConfig, RunConfig, TraceMode, VideoMode
from hrm_bdd.session import SessionManager

logger = logging.getLogger(__name__)

# MIME type used to attach a saved trace's path to the scenario report.
TRACE_MIME_TYPE = "text/x-trace-path"

AttachFn = Callable[[str, bytes], None]


def sanitize_label(label: str) -> str:
    """Reduce a label to characters that are safe in file names."""
    cleaned = re.sub(r"[^A-Za-z0-9]", "-", label).strip("-")
    return cleaned or "artifact"


def artifact_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with ``:`` and ``.`` replaced by ``-``."""
    moment = moment or datetime.now(timezone.utc)
    iso = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z").replace(":", "-").replace(".", "-")


class ScenarioContext:
    """
    Handles and artifact helpers for the scenario being executed.

    Attributes:
        session: Worker-owned session manager (not owned by this object).
        scenario_name: Name of the running scenario.
        feature_name: Name of the feature the scenario belongs to.
        tags: Effective tags of the scenario, without ``@``.
        artifacts: ``(kind, path)`` pairs captured during the scenario.
    """

    def __init__(
        self,
        session: SessionManager,
        *,
        scenario_name: str = "",
        feature_name: str = "",
        tags: Iterable[str] = (),
        attach: AttachFn | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the context.  No browser work happens until ``initialize``.

        Args:
            session: The worker's session manager.
            scenario_name: Scenario name for logs and artifact labels.
            feature_name: Feature name for logs.
            tags: Scenario tags.
            attach: Optional ``(mime_type, data)`` callback that embeds an
                artifact into the runner's report.
            clock: Monotonic clock in seconds.
        """
        self.session = session
        self.scenario_name = scenario_name
        self.feature_name = feature_name
        self.tags = list(tags)
        self.artifacts: list[tuple[str, Path]] = []
        self._attach = attach
        self._clock = clock
        self._start: float | None = None
        self.started_at: datetime | None = None

    # -------------------------------------------------------------------------
    # Handles (always read through the session manager)
    # -------------------------------------------------------------------------

    @property
    def browser(self) -> Browser | None:
        return self.session.browser

    @property
    def context(self) -> BrowserContext | None:
        return self.session.context

    @property
    def page(self) -> Page | None:
        return self.session.page

    @property
    def browser_config(self) -> BrowserConfig:
        return self.session.browser_config

    @property
    def run_config(self) -> RunConfig:
        return self.session.run_config

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self) -> Page:
        """
        Start browser, context and page for this scenario.

        Returns:
            The page step code drives.
        """
        self.session.start_browser()
        self.session.new_context()
        page = self.session.new_page()
        self._start = self._clock()
        self.started_at = datetime.now(timezone.utc)
        logger.info("Browser, context and page ready for scenario: %s", self.scenario_name)
        return page

    def elapsed_ms(self) -> int:
        """Milliseconds since ``initialize`` (0 if never initialized)."""
        if self._start is None:
            return 0
        return int((self._clock() - self._start) * 1000)

    def teardown(self, passed: bool = True) -> None:
        """
        Release the scenario's session.

        Unsaved traces are discarded.  Videos of passing scenarios are
        deleted when the video mode is ``retain-on-failure``.  The browser
        itself stays up only when ``reuse_browser`` is configured.

        Args:
            passed: Whether the scenario passed.
        """
        logger.info("Scenario duration: %dms", self.elapsed_ms())

        video = None
        page = self.page
        if page is not None and self.session.should_record_video():
            try:
                video = page.video
            except Exception as exc:
                logger.warning("Could not read video handle: %s", exc)

        if self.session.tracing_active:
            try:
                self.session.stop_tracing(None)
            except Exception as exc:
                logger.warning("Could not discard trace: %s", exc)

        if self.browser_config.reuse_browser:
            self.session.close_context()
        else:
            self.session.close_browser()

        if video is not None:
            self._finalize_video(video, passed)

        logger.info("Scenario teardown completed: %s", self.scenario_name)

    def _finalize_video(self, video, passed: bool) -> None:
        try:
            if passed and self.browser_config.video == VideoMode.RETAIN_ON_FAILURE:
                video.delete()
                return
            path = Path(video.path())
            self.artifacts.append(("video", path))
            logger.info("Video saved: %s", path)
        except Exception as exc:
            logger.warning("Could not finalize video: %s", exc)

    # -------------------------------------------------------------------------
    # Artifacts
    # -------------------------------------------------------------------------

    def capture_screenshot(self, label: str) -> bytes | None:
        """
        Save a full-page screenshot as ``{label}-{timestamp}.png``.

        Args:
            label: Artifact label; unsafe characters become ``-``.

        Returns:
            The PNG bytes, or ``None`` when no page is live or capture failed.
        """
        page = self.page
        if page is None:
            logger.warning("Cannot take screenshot: no page is open")
            return None

        try:
            directory = Path(self.run_config.screenshot_path)
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / f"{sanitize_label(label)}-{artifact_timestamp()}.png"
            data = page.screenshot(path=str(path), full_page=True)
        except Exception as exc:
            logger.error("Failed to take screenshot '%s': %s", label, exc)
            return None

        self.artifacts.append(("screenshot", path))
        logger.info("Screenshot saved: %s", path)
        return data

    def attach_screenshot(self, label: str) -> None:
        """Capture a screenshot and embed it in the scenario report."""
        if self.page is None:
            logger.warning("Cannot attach screenshot: no page is open")
            return
        data = self.capture_screenshot(label)
        if data:
            self._embed("image/png", data)

    def attach_text(self, text: str) -> None:
        """Embed plain text (the failure message) in the scenario report."""
        self._embed("text/plain", text.encode("utf-8"))

    def save_trace(self, label: str) -> Path | None:
        """
        Stop tracing and write ``{label}-{timestamp}.zip``.

        When the trace mode is ``on`` tracing restarts right away so the
        rest of the session keeps being recorded.

        Args:
            label: Artifact label; unsafe characters become ``-``.

        Returns:
            Path of the trace archive, or ``None`` if nothing was saved.
        """
        if self.context is None:
            logger.warning("Cannot save trace: no browser context is open")
            return None
        if not self.session.tracing_active:
            logger.info("Tracing is not active; no trace saved for '%s'", label)
            return None

        try:
            directory = Path(self.run_config.trace_path)
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / f"{sanitize_label(label)}-{artifact_timestamp()}.zip"
            self.session.stop_tracing(path)
            logger.info("Trace saved: %s", path)
            if self.browser_config.trace == TraceMode.ON:
                self.session.start_tracing()
        except Exception as exc:
            logger.error("Failed to save trace '%s': %s", label, exc)
            return None

        self.artifacts.append(("trace", path))
        self._embed(TRACE_MIME_TYPE, str(path).encode("utf-8"))
        return path

    def _embed(self, mime_type: str, data: bytes) -> None:
        if self._attach is None:
            return
        try:
            self._attach(mime_type, data)
        except Exception as exc:
            logger.warning("Could not attach %s to report: %s", mime_type, exc)
