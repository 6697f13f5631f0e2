"""
Suite runner: profiles, parallel workers and scenario retries.

``hrm-bdd`` wraps behave.  It reads a named profile from
:file:`profiles.yml`, lets command-line flags override it, splits the
feature files over N worker processes and runs them concurrently.  Each
worker is its own ``behave`` process, so each one owns its own browser
session and nothing is shared between workers.

Failed scenarios can be re-run by ``file:line`` in fresh processes.  A
scenario that passes on a retry counts as passed in the summary; the
``RETRY_ATTEMPT`` environment variable tells the hooks which attempt is
running (used by the ``on-first-retry`` trace and video modes).

Exit codes follow a three-state convention so that CI can distinguish
"scenarios failed" from "runner crashed":

- ``0`` -- every scenario passed or was skipped
- ``1`` -- at least one scenario failed after retries
- ``2`` -- the runner itself failed (bad profile, unreachable target, ...)

Key Concepts Demonstrated:
- YAML-driven run profiles with CLI overrides
- Round-robin partitioning over a thread pool of subprocesses
- Retry of failed scenario locations only
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import requests
import yaml

from hrm_bdd import reporting
from hrm_bdd.config import resolve_environment, resolve_run_config, set_environment
from hrm_bdd.logger import configure_logging

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_FAILURES = 1
EXIT_RUNNER_ERROR = 2

DEFAULT_PROFILES_FILE = Path("profiles.yml")
MERGED_REPORT_NAME = "cucumber-report.json"
SUMMARY_NAME = "summary.json"


class RunnerError(RuntimeError):
    """Raised when the run cannot be set up or a worker crashes."""


@dataclass(frozen=True)
class Profile:
    """
    Resolved settings for one run.

    Attributes:
        name: Profile name from the profiles file.
        environment: Target environment (``dev``, ``qa``, ``prod``, ...).
        workers: Number of parallel behave processes.
        retry: How many times failed scenarios are re-run.
        tags: behave tag expression, or ``None`` for all scenarios.
        format: behave console formatter.
        headless: Whether browsers run headless.
        paths: Feature files or directories to run.
    """

    name: str = "default"
    environment: str = "dev"
    workers: int = 2
    retry: int = 0
    tags: str | None = None
    format: str = "progress"
    headless: bool = True
    paths: tuple[str, ...] = ("features",)
    extra_args: tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Profiles
# -----------------------------------------------------------------------------

def load_profiles(path: Path) -> dict[str, dict[str, Any]]:
    """
    Read the profiles file.

    Returns:
        Profile name -> raw settings.  A missing file yields ``{}`` so the
        built-in defaults apply.

    Raises:
        RunnerError: If the YAML is not a mapping of mappings.
    """
    if not path.exists():
        logger.warning("Profiles file not found: %s (using built-in defaults)", path)
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        raise RunnerError(f"{path} must map profile names to settings")
    return data


def resolve_profile(profiles: dict[str, dict[str, Any]], name: str) -> Profile:
    """
    Build a ``Profile`` from the ``default`` entry overlaid with ``name``.

    Raises:
        RunnerError: If ``name`` is not defined (``default`` always is).
    """
    if name != "default" and name not in profiles:
        known = ", ".join(sorted(profiles)) or "none"
        raise RunnerError(f"Unknown profile '{name}' (known: {known})")

    settings: dict[str, Any] = dict(profiles.get("default", {}))
    if name != "default":
        settings.update(profiles[name])

    base = resolve_run_config()
    paths = settings.get("paths", Profile.paths)
    if isinstance(paths, str):
        paths = [paths]
    try:
        return Profile(
            name=name,
            environment=str(settings.get("environment", base.environment)).lower(),
            workers=max(1, int(settings.get("workers", base.workers))),
            retry=max(0, int(settings.get("retry", base.retry_count))),
            tags=settings.get("tags"),
            format=str(settings.get("format", Profile.format)),
            headless=bool(settings.get("headless", True)),
            paths=tuple(str(p) for p in paths),
        )
    except (TypeError, ValueError) as exc:
        raise RunnerError(f"Invalid value in profile '{name}': {exc}") from exc


def apply_overrides(profile: Profile, args: argparse.Namespace) -> Profile:
    """CLI flags win over profile values."""
    overrides: dict[str, Any] = {}
    if args.env:
        overrides["environment"] = args.env.lower()
    if args.workers is not None:
        overrides["workers"] = max(1, args.workers)
    if args.retry is not None:
        overrides["retry"] = max(0, args.retry)
    if args.tags:
        overrides["tags"] = args.tags
    if args.format:
        overrides["format"] = args.format
    if args.headed:
        overrides["headless"] = False
    if args.paths:
        overrides["paths"] = tuple(args.paths)
    if args.behave_args:
        overrides["extra_args"] = tuple(args.behave_args)
    return replace(profile, **overrides)


# -----------------------------------------------------------------------------
# Planning
# -----------------------------------------------------------------------------

def discover_features(paths: Sequence[str]) -> list[str]:
    """
    Expand directories into their ``.feature`` files.

    Entries with a ``:line`` suffix or pointing at a file are kept as-is.

    Raises:
        RunnerError: If a path does not exist or nothing is found.
    """
    found: list[str] = []
    for entry in paths:
        file_part = entry.split(":", 1)[0]
        path = Path(file_part)
        if path.is_dir():
            found.extend(str(p) for p in sorted(path.rglob("*.feature")))
        elif path.exists():
            found.append(entry)
        else:
            raise RunnerError(f"Feature path does not exist: {entry}")
    if not found:
        raise RunnerError(f"No feature files found under: {', '.join(paths)}")
    return found


def partition(items: Sequence[str], workers: int) -> list[list[str]]:
    """Deal items round-robin over ``workers`` buckets; empty buckets are dropped."""
    buckets: list[list[str]] = [[] for _ in range(max(1, workers))]
    for index, item in enumerate(items):
        buckets[index % len(buckets)].append(item)
    return [bucket for bucket in buckets if bucket]


def behave_command(profile: Profile, targets: Sequence[str], report_file: Path) -> list[str]:
    """Build the argv for one behave worker."""
    command = [
        sys.executable,
        "-m",
        "behave",
        *targets,
        "--format",
        "json",
        "--outfile",
        str(report_file),
        "--format",
        profile.format,
        "-D",
        f"environment={profile.environment}",
    ]
    if profile.tags:
        command.extend(["--tags", profile.tags])
    command.extend(profile.extra_args)
    return command


def worker_env(profile: Profile, worker_id: int, attempt: int) -> dict[str, str]:
    env = dict(os.environ)
    env["TEST_ENV"] = profile.environment
    env["HEADLESS"] = "true" if profile.headless else "false"
    env["RETRY_ATTEMPT"] = str(attempt)
    env["WORKER_ID"] = str(worker_id)
    return env


# -----------------------------------------------------------------------------
# Execution
# -----------------------------------------------------------------------------

def check_target(url: str, timeout: int = 10) -> bool:
    """Return True when the target answers with anything below 500."""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Target %s is unreachable: %s", url, exc)
        return False
    if response.status_code >= 500:
        logger.error("Target %s answered %d", url, response.status_code)
        return False
    logger.info("Target %s is reachable (%d)", url, response.status_code)
    return True


def _run_worker(
    profile: Profile,
    worker_id: int,
    targets: list[str],
    report_dir: Path,
    attempt: int,
) -> Path:
    prefix = f"worker-{worker_id}" if attempt == 0 else f"retry-{attempt}-worker-{worker_id}"
    report_file = report_dir / f"{prefix}.json"
    log_file = report_dir / f"{prefix}.log"
    command = behave_command(profile, targets, report_file)
    logger.info("Starting %s with %d target(s)", prefix, len(targets))
    logger.debug("Command: %s", " ".join(command))

    with log_file.open("w", encoding="utf-8") as handle:
        completed = subprocess.run(
            command,
            env=worker_env(profile, worker_id, attempt),
            stdout=handle,
            stderr=subprocess.STDOUT,
            check=False,
        )

    # behave exits 1 when scenarios fail; anything else means it crashed
    if completed.returncode not in (0, 1):
        raise RunnerError(f"{prefix} exited with code {completed.returncode}; see {log_file}")
    logger.info("%s finished (exit code %d)", prefix, completed.returncode)
    return report_file


def run_attempt(profile: Profile, targets: list[str], report_dir: Path, attempt: int = 0) -> list[Path]:
    """
    Run ``targets`` over the worker pool and wait for every worker.

    Returns:
        The JSON report path of each worker.
    """
    buckets = partition(targets, profile.workers)
    with ThreadPoolExecutor(max_workers=len(buckets)) as pool:
        futures = [
            pool.submit(_run_worker, profile, worker_id, bucket, report_dir, attempt)
            for worker_id, bucket in enumerate(buckets, start=1)
        ]
        return [future.result() for future in futures]


def execute(profile: Profile, report_dir: Path) -> reporting.RunSummary:
    """
    Run the suite including retries and write the merged report and summary.

    Returns:
        The summary after retries have been applied.
    """
    report_dir.mkdir(parents=True, exist_ok=True)
    features = discover_features(profile.paths)
    logger.info(
        "Running %d feature file(s) on '%s' with %d worker(s), retry=%d, tags=%s",
        len(features),
        profile.environment,
        profile.workers,
        profile.retry,
        profile.tags or "<all>",
    )

    first_reports = run_attempt(profile, features, report_dir)
    merged = reporting.merge_reports(first_reports)
    reporting.write_report(merged, report_dir / MERGED_REPORT_NAME)
    first_results = reporting.collect_results(merged)

    retry_results: list[list[reporting.TestScenarioResult]] = []
    failing = reporting.failed_locations(first_results)
    for attempt in range(1, profile.retry + 1):
        if not failing:
            break
        logger.info("Retry %d/%d for %d failed scenario(s)", attempt, profile.retry, len(failing))
        reports = run_attempt(profile, failing, report_dir, attempt)
        results = reporting.collect_results(reporting.merge_reports(reports))
        retry_results.append(results)
        failing = reporting.failed_locations(results)

    final = reporting.apply_retries(first_results, retry_results)
    summary = reporting.summarise(final)
    reporting.write_summary(summary, report_dir / SUMMARY_NAME)
    reporting.log_summary(summary)
    return summary


# -----------------------------------------------------------------------------
# CLI
# -----------------------------------------------------------------------------

def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the suite runner."""
    parser = argparse.ArgumentParser(
        prog="hrm-bdd",
        description="Run the OrangeHRM behave suite with profiles, workers and retries.",
    )
    parser.add_argument("paths", nargs="*", help="Feature files or directories (default: profile paths)")
    parser.add_argument("--profile", default="default", help="Profile name from the profiles file")
    parser.add_argument(
        "--profiles-file",
        type=Path,
        default=DEFAULT_PROFILES_FILE,
        help="Path to the profiles YAML file",
    )
    parser.add_argument("--env", help="Target environment (overrides the profile)")
    parser.add_argument("--tags", help='Tag expression, e.g. "@smoke and not @wip"')
    parser.add_argument("--workers", type=int, help="Number of parallel behave processes")
    parser.add_argument("--retry", type=int, help="Re-run failed scenarios this many times")
    parser.add_argument("--format", help="behave console formatter")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument(
        "--check-target",
        action="store_true",
        help="Fail fast (exit 2) when the target URL is unreachable",
    )
    parser.add_argument("--archive", action="store_true", help="Archive JSON reports after the run")
    # unrecognised options (e.g. --dry-run, --stop) go to behave unchanged
    args, behave_args = parser.parse_known_args(argv)
    args.behave_args = behave_args
    return args


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point for the ``hrm-bdd`` console script.

    Returns:
        ``EXIT_PASS`` (0), ``EXIT_FAILURES`` (1) or ``EXIT_RUNNER_ERROR`` (2).
    """
    args = parse_args(argv)
    run_config = resolve_run_config()
    configure_logging(run_config)

    try:
        profile = apply_overrides(resolve_profile(load_profiles(args.profiles_file), args.profile), args)
        set_environment(profile.environment)

        if args.check_target:
            environment = resolve_environment(profile.environment)
            if not check_target(environment.base_url):
                return EXIT_RUNNER_ERROR

        report_dir = Path(run_config.report_path)
        summary = execute(profile, report_dir)
        if args.archive:
            reporting.archive_reports(report_dir)
        return EXIT_FAILURES if summary.failed else EXIT_PASS
    except Exception as exc:
        logger.error("Run failed: %s", exc)
        return EXIT_RUNNER_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
