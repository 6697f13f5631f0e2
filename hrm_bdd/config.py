"""
Configuration for the OrangeHRM BDD suite.

Every setting is read from environment variables with sensible defaults,
so the suite runs out of the box against the public OrangeHRM demo.  The
configuration is split into three immutable records:

- ``EnvironmentConfig`` -- where the application lives and who logs in
- ``BrowserConfig`` -- how Playwright launches and times out
- ``RunConfig`` -- workers, retries, artifact and log locations

Target-environment values are looked up through an upper-cased prefix
derived from the environment name (``dev`` -> ``DEV_BASE_URL``), which
lets one ``.env`` file carry settings for every environment at once.

Key Concepts Demonstrated:
- Environment variable overrides with documented defaults
- Immutable settings records (frozen dataclasses)
- ``str, Enum`` modes that compare equal to their raw strings
- Opt-in strict mode for environments that must never fall back
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "dev"
DEFAULT_BASE_URL = "https://opensource-demo.orangehrmlive.com/web/index.php/auth/login"
DEFAULT_USERNAME = "Admin"
DEFAULT_PASSWORD = "admin123"

# Cached "current environment"; None means "read TEST_ENV on demand".
_current_environment: str | None = None


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


class BrowserEngine(str, Enum):
    """Browser engines Playwright can launch."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class VideoMode(str, Enum):
    """When scenario videos are recorded and kept."""

    OFF = "off"
    ON = "on"
    RETAIN_ON_FAILURE = "retain-on-failure"
    ON_FIRST_RETRY = "on-first-retry"


class ScreenshotMode(str, Enum):
    """When end-of-scenario screenshots are captured."""

    OFF = "off"
    ON = "on"
    ONLY_ON_FAILURE = "only-on-failure"


class TraceMode(str, Enum):
    """When Playwright traces are recorded and saved."""

    OFF = "off"
    ON = "on"
    RETAIN_ON_FAILURE = "retain-on-failure"
    ON_FIRST_RETRY = "on-first-retry"


@dataclass(frozen=True)
class EnvironmentConfig:
    """
    Target application settings for one environment.

    Attributes:
        base_url: Login URL of the application under test (never empty).
        username: Default login username.
        password: Default login password.
        api_base_url: Optional REST API root for the same environment.
    """

    base_url: str
    username: str
    password: str
    api_base_url: str | None = None


@dataclass(frozen=True)
class BrowserConfig:
    """Playwright launch, context and timeout settings."""

    engine: BrowserEngine = BrowserEngine.CHROMIUM
    headless: bool = True
    slow_mo_ms: int = 0
    default_timeout_ms: int = 30000
    navigation_timeout_ms: int = 30000
    action_timeout_ms: int = 10000
    video: VideoMode = VideoMode.OFF
    screenshot: ScreenshotMode = ScreenshotMode.ONLY_ON_FAILURE
    trace: TraceMode = TraceMode.RETAIN_ON_FAILURE
    viewport_width: int = 1920
    viewport_height: int = 1080
    # Keep the browser process alive between scenarios; contexts are
    # still created fresh for every scenario.
    reuse_browser: bool = False


@dataclass(frozen=True)
class RunConfig:
    """Suite-level execution and artifact settings."""

    environment: str = DEFAULT_ENVIRONMENT
    workers: int = 2
    retry_count: int = 0
    retry_attempt: int = 0
    report_path: Path = Path("reports")
    screenshot_path: Path = Path("screenshots")
    video_path: Path = Path("videos")
    trace_path: Path = Path("reports") / "traces"
    log_level: str = "info"
    log_to_file: bool = True
    log_dir: Path = Path("logs")

    @property
    def artifact_dirs(self) -> list[Path]:
        """Directories the suite writes into."""
        return [
            self.report_path,
            self.screenshot_path,
            self.video_path,
            self.trace_path,
            self.log_dir,
        ]


# -----------------------------------------------------------------------------
# Environment variable helpers
# -----------------------------------------------------------------------------

def _env(name: str) -> str | None:
    """Return a stripped variable value, treating blank values as unset."""
    value = os.environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc


def _env_flag(name: str, default: bool) -> bool:
    """
    Read a boolean flag the way the suite always has.

    Only the literal ``false`` (any case) turns a default-on flag off, and
    only ``true``/``1``/``yes``/``on`` turn a default-off flag on.
    """
    raw = _env(name)
    if raw is None:
        return default
    if default:
        return raw.lower() != "false"
    return raw.lower() in {"true", "1", "yes", "on"}


def _env_enum(name: str, enum_type: type[Enum], default: Enum) -> Any:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return enum_type(raw.lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_type)
        raise ConfigError(f"{name}={raw!r} is not one of: {allowed}.") from exc


# -----------------------------------------------------------------------------
# Current environment
# -----------------------------------------------------------------------------

def get_environment() -> str:
    """Return the active environment name (``TEST_ENV`` or ``dev``)."""
    if _current_environment is not None:
        return _current_environment
    return (_env("TEST_ENV") or DEFAULT_ENVIRONMENT).lower()


def set_environment(name: str | None) -> None:
    """
    Override the active environment for this process.

    Args:
        name: Environment name, or ``None`` to go back to ``TEST_ENV``.
    """
    global _current_environment
    _current_environment = name.strip().lower() if name else None


def is_strict() -> bool:
    """Return True when missing target variables must fail fast."""
    return _env_flag("STRICT_CONFIG", False)


# -----------------------------------------------------------------------------
# Resolvers
# -----------------------------------------------------------------------------

def resolve_environment(name: str | None = None) -> EnvironmentConfig:
    """
    Resolve target application settings for an environment.

    Args:
        name: Environment name such as ``dev``, ``qa`` or ``prod``.  When
            ``None``, the active environment is used.

    Returns:
        An ``EnvironmentConfig`` whose ``base_url`` is never empty.

    Raises:
        ConfigError: In strict mode, when any of the prefixed variables
            is missing for the requested environment.
    """
    env_name = (name or get_environment()).strip().lower()
    prefix = env_name.upper()

    values = {}
    defaults = {
        "BASE_URL": DEFAULT_BASE_URL,
        "USERNAME": DEFAULT_USERNAME,
        "PASSWORD": DEFAULT_PASSWORD,
    }
    missing = []
    for suffix, default in defaults.items():
        variable = f"{prefix}_{suffix}"
        value = _env(variable)
        if value is None:
            missing.append(variable)
            value = default
        values[suffix] = value

    if missing:
        if is_strict():
            raise ConfigError(
                f"Environment '{env_name}' is missing: {', '.join(missing)}."
            )
        logger.warning(
            "Environment '%s' falls back to demo defaults for: %s",
            env_name,
            ", ".join(missing),
        )

    return EnvironmentConfig(
        base_url=values["BASE_URL"],
        username=values["USERNAME"],
        password=values["PASSWORD"],
        api_base_url=_env("API_BASE_URL"),
    )


def resolve_browser_config() -> BrowserConfig:
    """Resolve Playwright settings from environment variables."""
    return BrowserConfig(
        engine=_env_enum("BROWSER", BrowserEngine, BrowserEngine.CHROMIUM),
        headless=_env_flag("HEADLESS", True),
        slow_mo_ms=_env_int("SLOW_MO", 0),
        default_timeout_ms=_env_int("TIMEOUT", 30000),
        navigation_timeout_ms=_env_int("NAVIGATION_TIMEOUT", 30000),
        action_timeout_ms=_env_int("ACTION_TIMEOUT", 10000),
        video=_env_enum("VIDEO", VideoMode, VideoMode.OFF),
        screenshot=_env_enum("SCREENSHOT", ScreenshotMode, ScreenshotMode.ONLY_ON_FAILURE),
        trace=_env_enum("TRACE", TraceMode, TraceMode.RETAIN_ON_FAILURE),
        viewport_width=_env_int("VIEWPORT_WIDTH", 1920),
        viewport_height=_env_int("VIEWPORT_HEIGHT", 1080),
        reuse_browser=_env_flag("REUSE_BROWSER", False),
    )


def resolve_run_config() -> RunConfig:
    """Resolve workers, retries and artifact locations."""
    report_path = Path(_env("REPORT_PATH") or "reports")
    return RunConfig(
        environment=get_environment(),
        workers=max(1, _env_int("WORKERS", 2)),
        retry_count=max(0, _env_int("RETRY_COUNT", 0)),
        retry_attempt=max(0, _env_int("RETRY_ATTEMPT", 0)),
        report_path=report_path,
        screenshot_path=Path(_env("SCREENSHOT_PATH") or "screenshots"),
        video_path=Path(_env("VIDEO_PATH") or "videos"),
        trace_path=Path(_env("TRACE_PATH") or report_path / "traces"),
        log_level=(_env("LOG_LEVEL") or "info").lower(),
        log_to_file=_env_flag("LOG_TO_FILE", True),
        log_dir=Path(_env("LOG_DIR") or "logs"),
    )


def full_config() -> dict[str, Any]:
    """
    Snapshot every resolved setting for logging.

    The password is masked so the snapshot is safe to write to log files.
    """
    environment = asdict(resolve_environment())
    environment["password"] = "***"
    browser = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in asdict(resolve_browser_config()).items()
    }
    run = {
        key: str(value) if isinstance(value, Path) else value
        for key, value in asdict(resolve_run_config()).items()
    }
    return {"environment": environment, "browser": browser, "run": run}
