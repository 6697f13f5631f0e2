"""
Post-run reporting over behave's JSON output.

behave writes one JSON document per process: a list of features, each with
``elements`` (scenarios and backgrounds) holding ``steps`` with a
``result`` and optional ``embeddings``.  This module turns those documents
into flat per-scenario results, folds retry attempts into the first
attempt, and produces the run summary.

Key Concepts Demonstrated:
- Frozen dataclasses as result records
- Status derivation from step results
- Summary persisted as JSON next to the raw reports
"""

from __future__ import annotations

import json
import logging
import shutil
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from hrm_bdd.scenario import TRACE_MIME_TYPE, artifact_timestamp

logger = logging.getLogger(__name__)

# behave 1.3 reports non-assertion exceptions as "error" and hook failures as
# "hook_error"/"cleanup_error"; all of them fail the scenario.
FAILED_STATUSES = frozenset({"failed", "error", "hook_error", "cleanup_error", "undefined"})
NOT_RUN_STATUSES = {"skipped", "untested"}

ARTIFACT_KINDS = {
    "image/png": "screenshot",
    TRACE_MIME_TYPE: "trace",
}


class ReportError(RuntimeError):
    """Raised when a report file exists but cannot be parsed."""


@dataclass(frozen=True)
class TestScenarioResult:
    """Outcome of one scenario (or one Scenario Outline example)."""

    __test__ = False

    scenario_name: str
    feature_name: str
    status: str
    duration_ms: int
    failure_message: str | None = None
    attached_artifacts: tuple[str, ...] = ()
    location: str = ""
    tags: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.status == "failed"


@dataclass(frozen=True)
class RunSummary:
    total: int
    passed: int
    failed: int
    skipped: int
    pass_rate: str
    duration: str
    failed_scenarios: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def load_report(path: Path | str) -> list[dict[str, Any]]:
    """
    Read a behave JSON report.

    Args:
        path: Report file.

    Returns:
        The list of feature documents; ``[]`` when the file is missing or
        empty (a worker that ran no scenarios writes nothing useful).

    Raises:
        ReportError: If the file holds invalid JSON or not a list.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Report not found: %s", path)
        return []
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        logger.warning("Report is empty: %s", path)
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ReportError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, list):
        raise ReportError(f"Expected a list of features in {path}, got {type(data).__name__}")
    return data


def merge_reports(paths: Iterable[Path | str]) -> list[dict[str, Any]]:
    """Concatenate the feature lists of several worker reports."""
    merged: list[dict[str, Any]] = []
    for path in paths:
        merged.extend(load_report(path))
    return merged


def write_report(report: list[dict[str, Any]], path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    return path


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

def _step_status(step: dict[str, Any]) -> str:
    result = step.get("result") or {}
    return str(result.get("status", "untested")).lower()


def _scenario_status(element: dict[str, Any]) -> str:
    steps = element.get("steps") or []
    statuses = [_step_status(step) for step in steps]
    element_status = str(element.get("status", "")).lower()

    if element_status in FAILED_STATUSES or any(s in FAILED_STATUSES for s in statuses):
        return "failed"
    if not statuses or all(s in NOT_RUN_STATUSES for s in statuses):
        return "skipped"
    return "passed"


def _failure_message(element: dict[str, Any]) -> str | None:
    """First step error, else the scenario-level error a failing hook leaves."""
    sources = [step.get("result") or {} for step in element.get("steps") or []]
    sources.append(element)
    for source in sources:
        message = source.get("error_message")
        if not message:
            continue
        if isinstance(message, list):
            message = "\n".join(str(line) for line in message)
        return str(message)
    return None


def _artifacts(steps: list[dict[str, Any]]) -> tuple[str, ...]:
    kinds = []
    for step in steps:
        for embedding in step.get("embeddings") or []:
            kind = ARTIFACT_KINDS.get(embedding.get("mime_type"))
            if kind:
                kinds.append(kind)
    return tuple(kinds)


def collect_results(report: list[dict[str, Any]]) -> list[TestScenarioResult]:
    """
    Flatten a behave report into one result per scenario.

    Background elements are skipped; their steps are repeated inside every
    scenario element anyway.
    """
    results = []
    for feature in report:
        feature_name = feature.get("name", "")
        for element in feature.get("elements") or []:
            if element.get("type", element.get("keyword", "")).lower() == "background":
                continue
            steps = element.get("steps") or []
            duration = sum(float((step.get("result") or {}).get("duration") or 0) for step in steps)
            results.append(
                TestScenarioResult(
                    scenario_name=element.get("name", ""),
                    feature_name=feature_name,
                    status=_scenario_status(element),
                    duration_ms=int(round(duration * 1000)),
                    failure_message=_failure_message(element),
                    attached_artifacts=_artifacts(steps),
                    location=element.get("location", ""),
                    tags=tuple(element.get("tags") or ()),
                )
            )
    return results


def failed_locations(results: Iterable[TestScenarioResult]) -> list[str]:
    """``file:line`` of each failed scenario, in report order, de-duplicated."""
    seen: dict[str, None] = {}
    for result in results:
        if result.failed and result.location:
            seen.setdefault(result.location, None)
    return list(seen)


def apply_retries(
    first: list[TestScenarioResult],
    retries: Iterable[list[TestScenarioResult]],
) -> list[TestScenarioResult]:
    """
    Fold retry attempts into the first attempt's results.

    A scenario that passes on any later attempt replaces its failed
    result, matched by location.  Order of ``first`` is kept.

    Args:
        first: Results of the initial run.
        retries: Results of each retry run, in attempt order.
    """
    by_location = {result.location: result for result in first if result.location}
    for attempt in retries:
        for result in attempt:
            current = by_location.get(result.location)
            if current is not None and current.failed and not result.failed:
                by_location[result.location] = result

    return [by_location.get(result.location, result) if result.location else result for result in first]


# -----------------------------------------------------------------------------
# Summary
# -----------------------------------------------------------------------------

def summarise(results: list[TestScenarioResult]) -> RunSummary:
    total = len(results)
    passed = sum(1 for result in results if result.status == "passed")
    failed = sum(1 for result in results if result.status == "failed")
    skipped = sum(1 for result in results if result.status == "skipped")
    duration_ms = sum(result.duration_ms for result in results)
    pass_rate = (passed / total * 100) if total else 0.0
    return RunSummary(
        total=total,
        passed=passed,
        failed=failed,
        skipped=skipped,
        pass_rate=f"{pass_rate:.2f}%",
        duration=f"{duration_ms / 1000:.2f}s",
        failed_scenarios=[
            f"{result.feature_name}: {result.scenario_name} ({result.location})"
            for result in results
            if result.failed
        ],
    )


def write_summary(summary: RunSummary, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(summary), indent=2), encoding="utf-8")
    logger.info("Summary saved: %s", path)
    return path


def log_summary(summary: RunSummary) -> None:
    logger.info("=== Test Execution Summary ===")
    logger.info("Total Scenarios: %d", summary.total)
    logger.info("Passed: %d", summary.passed)
    logger.info("Failed: %d", summary.failed)
    logger.info("Skipped: %d", summary.skipped)
    logger.info("Pass Rate: %s", summary.pass_rate)
    logger.info("Total Duration: %s", summary.duration)
    for line in summary.failed_scenarios:
        logger.error("FAILED %s", line)
    logger.info("==============================")


def archive_reports(report_dir: Path | str) -> Path:
    """
    Copy the JSON reports into ``archive/<timestamp>/``.

    Returns:
        The archive directory.
    """
    report_dir = Path(report_dir)
    archive_dir = report_dir / "archive" / artifact_timestamp()
    archive_dir.mkdir(parents=True, exist_ok=True)
    for report in sorted(report_dir.glob("*.json")):
        shutil.copy2(report, archive_dir / report.name)
    logger.info("Reports archived to: %s", archive_dir)
    return archive_dir
