"""
behave lifecycle hooks.

``features/environment.py`` re-exports these functions, so behave calls
them around every feature, scenario and step.  They are the only code
that creates or closes browser sessions:

- ``before_all`` builds one ``SessionManager`` for the worker process
- ``before_scenario`` gates on tags, then opens a fresh context and page
- ``after_step`` / ``after_scenario`` capture failure artifacts
- ``after_scenario`` always tears the scenario down
- ``after_all`` stops the browser and the Playwright driver

Key Concepts Demonstrated:
- Tag-based skipping before any browser work
- Best-effort artifact capture that never masks the real failure
- Explicit session ownership passed through the behave context
"""

from __future__ import annotations

import json
import logging
from typing import TypeVar

import parse
from behave import register_type
from behave.model import Feature, Scenario, Step
from behave.runner import Context

from hrm_bdd.config import (
    ScreenshotMode,
    TraceMode,
    full_config,
    get_environment,
    resolve_browser_config,
    resolve_environment,
    resolve_run_config,
    set_environment,
)
from hrm_bdd.logger import configure_logging
from hrm_bdd.reporting import FAILED_STATUSES
from hrm_bdd.pages.base_page import BasePage
from hrm_bdd.scenario import ScenarioContext, sanitize_label
from hrm_bdd.session import SessionManager
from hrm_bdd.tags import skip_reason, suite_markers

logger = logging.getLogger(__name__)

STEP_SYMBOLS = {"passed": "✓", **{status: "✗" for status in FAILED_STATUSES}}
SAVE_TRACE_ON_FAILURE = (TraceMode.ON, TraceMode.RETAIN_ON_FAILURE, TraceMode.ON_FIRST_RETRY)
SCREENSHOT_ON_FAILURE = (ScreenshotMode.ON, ScreenshotMode.ONLY_ON_FAILURE)


def status_name(status) -> str:
    """behave statuses are enums in some versions and strings in others."""
    return str(getattr(status, "name", status)).lower()


def is_failure(status) -> bool:
    return status_name(status) in FAILED_STATUSES


def failure_message(scenario: Scenario) -> str | None:
    """Error text of the first failing step, else the one a failing hook left on the scenario."""
    for step in scenario.all_steps:
        if is_failure(step.status) and step.error_message:
            return str(step.error_message)
    message = getattr(scenario, "error_message", None)
    return str(message) if message else None


def _attach_fn(context: Context):
    def attach(mime_type: str, data: bytes) -> None:
        context.attach(mime_type, data)

    return attach


# -----------------------------------------------------------------------------
# Step support
# -----------------------------------------------------------------------------

@parse.with_pattern(r'[^"]*')
def parse_text(text: str) -> str:
    """Quoted step argument that may be empty (``"{value:Text}"``)."""
    return text


register_type(Text=parse_text)

PageT = TypeVar("PageT", bound=BasePage)


def page_object(context: Context, page_class: type[PageT]) -> PageT:
    """Build a page object bound to the scenario's page and resolved settings."""
    return page_class(context.page, context.environment_config, context.session.browser_config)


# -----------------------------------------------------------------------------
# Suite
# -----------------------------------------------------------------------------

def before_all(context: Context) -> None:
    """Configure environment, logging and artifact folders; build the session manager."""
    environment = context.config.userdata.get("environment")
    if environment:
        set_environment(environment)

    run_config = resolve_run_config()
    browser_config = resolve_browser_config()
    configure_logging(run_config)

    logger.info("=== Test Suite Starting ===")
    logger.info("Environment: %s", get_environment())
    logger.info("Configuration: %s", json.dumps(full_config(), indent=2))

    for directory in run_config.artifact_dirs:
        directory.mkdir(parents=True, exist_ok=True)

    context.environment_config = resolve_environment()
    context.session = SessionManager(browser_config, run_config)


def after_all(context: Context) -> None:
    session = getattr(context, "session", None)
    if session is not None:
        session.shutdown()
    logger.info("=== Test Suite Completed ===")


def before_feature(context: Context, feature: Feature) -> None:
    logger.info("Feature: %s", feature.name)


# -----------------------------------------------------------------------------
# Scenario
# -----------------------------------------------------------------------------

def before_scenario(context: Context, scenario: Scenario) -> None:
    """
    Skip by tag, or open a fresh browser context and page.

    Launch failures propagate so behave reports the scenario as errored.
    """
    context.scenario_ctx = None
    tags = list(scenario.effective_tags)

    reason = skip_reason(tags, get_environment())
    if reason:
        logger.warning("%s: %s", reason, scenario.name)
        scenario.skip(reason)
        return

    logger.info("=" * 80)
    logger.info("Starting Scenario: %s", scenario.name)
    logger.info("Feature: %s", scenario.feature.name)
    logger.info("Tags: %s", ", ".join(f"@{tag}" for tag in tags))
    logger.info("=" * 80)
    for marker in suite_markers(tags):
        logger.info("Running %s test", marker)

    scenario_ctx = ScenarioContext(
        context.session,
        scenario_name=scenario.name,
        feature_name=scenario.feature.name,
        tags=tags,
        attach=_attach_fn(context),
    )
    context.scenario_ctx = scenario_ctx
    context.page = scenario_ctx.initialize()


def after_step(context: Context, step: Step) -> None:
    status = status_name(step.status)
    scenario_ctx = getattr(context, "scenario_ctx", None)

    if is_failure(status):
        logger.error("Step %s: %s", status, step.name)
        if scenario_ctx is not None:
            scenario_ctx.attach_screenshot(f"failed-step-{sanitize_label(step.name)}")

    symbol = STEP_SYMBOLS.get(status, "⊘")
    logger.info("%s Step: %s %s [%s]", symbol, step.keyword, step.name, status)


def after_scenario(context: Context, scenario: Scenario) -> None:
    """Log the outcome, capture artifacts as configured, then tear down."""
    scenario_ctx: ScenarioContext | None = getattr(context, "scenario_ctx", None)
    status = status_name(scenario.status)
    passed = not is_failure(status)
    message = None if passed else failure_message(scenario)

    logger.info("-" * 80)
    logger.info("Scenario: %s", scenario.name)
    logger.info("Status: %s", status)
    if scenario_ctx is not None:
        logger.info("Duration: %dms", scenario_ctx.elapsed_ms())
    if not passed:
        logger.error(
            "Scenario failed: %s | feature: %s | tags: %s | error: %s",
            scenario.name,
            scenario.feature.name,
            ", ".join(f"@{tag}" for tag in scenario.effective_tags),
            message or status,
        )
    logger.info("-" * 80)

    if scenario_ctx is None:
        return

    label = sanitize_label(scenario.name)
    browser_config = scenario_ctx.browser_config
    try:
        if not passed:
            scenario_ctx.attach_text(message or status)
            if browser_config.screenshot in SCREENSHOT_ON_FAILURE:
                scenario_ctx.attach_screenshot(f"failed-{label}")
            if browser_config.trace in SAVE_TRACE_ON_FAILURE:
                scenario_ctx.save_trace(f"failed-{label}")
        else:
            if browser_config.screenshot == ScreenshotMode.ON:
                scenario_ctx.attach_screenshot(f"final-{label}")
            if browser_config.trace == TraceMode.ON:
                scenario_ctx.save_trace(label)
    finally:
        scenario_ctx.teardown(passed=passed)
        context.scenario_ctx = None
