"""
Unit tests for behave JSON reporting, retries and the run summary.

Key Concepts Demonstrated:
- Building realistic report documents with small factories
- Negative testing of malformed report files
- Using ``tmp_path`` for file output
"""

import json

import pytest

from hrm_bdd.reporting import (
    ReportError,
    TestScenarioResult,
    apply_retries,
    archive_reports,
    collect_results,
    failed_locations,
    load_report,
    merge_reports,
    summarise,
    write_report,
    write_summary,
)
from hrm_bdd.scenario import TRACE_MIME_TYPE


pytestmark = pytest.mark.unit


def step(status="passed", duration=0.5, error_message=None, embeddings=None):
    """One behave JSON step entry."""
    result = {"status": status, "duration": duration}
    if error_message is not None:
        result["error_message"] = error_message
    entry = {"keyword": "Given", "name": "a step", "result": result}
    if embeddings:
        entry["embeddings"] = embeddings
    return entry


def scenario(name, location, steps, status=None, element_type="scenario"):
    """One behave JSON scenario (or background) element."""
    element = {
        "type": element_type,
        "keyword": element_type.title(),
        "name": name,
        "location": location,
        "tags": ["smoke"],
        "steps": list(steps),
    }
    if status is not None:
        element["status"] = status
    return element


def result(location, status="passed", duration_ms=1000, name=None):
    return TestScenarioResult(
        scenario_name=name or location,
        feature_name="Login",
        status=status,
        duration_ms=duration_ms,
        location=location,
    )


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

class TestLoadReport:
    """Tests for reading report files."""

    def test_missing_file_is_empty(self, tmp_path):
        assert load_report(tmp_path / "worker-1.json") == []

    def test_blank_file_is_empty(self, tmp_path):
        path = tmp_path / "worker-1.json"
        path.write_text("  \n")

        assert load_report(path) == []

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "worker-1.json"
        path.write_text("[{")

        with pytest.raises(ReportError, match="Invalid JSON"):
            load_report(path)

    def test_non_list_raises(self, tmp_path):
        path = tmp_path / "worker-1.json"
        path.write_text('{"name": "Login"}')

        with pytest.raises(ReportError, match="list of features"):
            load_report(path)

    def test_merge_concatenates_workers(self, tmp_path, behave_report):
        first = write_report(behave_report("Login"), tmp_path / "worker-1.json")
        second = write_report(behave_report("Dashboard"), tmp_path / "worker-2.json")

        merged = merge_reports([first, second, tmp_path / "worker-3.json"])

        assert [feature["name"] for feature in merged] == ["Login", "Dashboard"]


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

class TestCollectResults:
    """Tests for flattening behave output into scenario results."""

    def test_passing_scenario(self, behave_report):
        report = behave_report(
            "Login",
            [scenario("Valid login", "features/login.feature:10", [step(duration=0.25), step(duration=1.0)])],
        )

        [outcome] = collect_results(report)

        assert outcome.scenario_name == "Valid login"
        assert outcome.feature_name == "Login"
        assert outcome.status == "passed"
        assert outcome.duration_ms == 1250
        assert outcome.location == "features/login.feature:10"
        assert outcome.tags == ("smoke",)
        assert outcome.failure_message is None

    def test_failed_step_fails_the_scenario(self, behave_report):
        report = behave_report(
            elements=[
                scenario(
                    "Bad login",
                    "features/login.feature:20",
                    [step(), step("failed", error_message=["AssertionError:", "No error shown"]), step("skipped")],
                )
            ]
        )

        [outcome] = collect_results(report)

        assert outcome.status == "failed"
        assert outcome.failed is True
        assert outcome.failure_message == "AssertionError:\nNo error shown"

    @pytest.mark.parametrize("bad_status", ["error", "undefined"])
    def test_errored_or_undefined_steps_count_as_failed(self, behave_report, bad_status):
        report = behave_report(elements=[scenario("s", "f:1", [step(bad_status)])])

        assert collect_results(report)[0].status == "failed"

    def test_element_status_failed_wins(self, behave_report):
        report = behave_report(elements=[scenario("s", "f:1", [step()], status="failed")])

        assert collect_results(report)[0].status == "failed"

    @pytest.mark.parametrize("hook_status", ["hook_error", "cleanup_error"])
    def test_hook_error_with_untested_steps_is_failed(self, behave_report, hook_status):
        # Arrange: the browser never launched, so no step ran
        element = scenario("launch failure", "f:9", [step("untested"), step("untested")], status=hook_status)
        element["error_message"] = "RuntimeError: chromium failed to launch"
        report = behave_report(elements=[element])

        # Act
        [outcome] = collect_results(report)

        # Assert
        assert outcome.status == "failed"
        assert outcome.failure_message == "RuntimeError: chromium failed to launch"
        assert summarise([outcome]).exit_code == 1

    def test_all_skipped_steps_is_skipped(self, behave_report):
        report = behave_report(elements=[scenario("s", "f:1", [step("skipped"), step("untested")])])

        assert collect_results(report)[0].status == "skipped"

    def test_scenario_without_steps_is_skipped(self, behave_report):
        report = behave_report(elements=[scenario("s", "f:1", [])])

        assert collect_results(report)[0].status == "skipped"

    def test_background_elements_are_ignored(self, behave_report):
        report = behave_report(
            elements=[
                scenario("", "features/login.feature:3", [step()], element_type="background"),
                scenario("s", "features/login.feature:8", [step()]),
            ]
        )

        assert [outcome.location for outcome in collect_results(report)] == ["features/login.feature:8"]

    def test_embeddings_become_artifact_kinds(self, behave_report):
        embeddings = [
            {"mime_type": "image/png", "data": "aGVsbG8="},
            {"mime_type": TRACE_MIME_TYPE, "data": "cmVwb3J0cy90cmFjZS56aXA="},
            {"mime_type": "text/plain", "data": "bm9pc2U="},
        ]
        report = behave_report(elements=[scenario("s", "f:1", [step("failed", embeddings=embeddings)])])

        assert collect_results(report)[0].attached_artifacts == ("screenshot", "trace")

    def test_failed_locations_are_unique_and_ordered(self):
        results = [
            result("a.feature:3", "failed"),
            result("a.feature:9"),
            result("b.feature:4", "failed"),
            result("a.feature:3", "failed"),
        ]

        assert failed_locations(results) == ["a.feature:3", "b.feature:4"]


# -----------------------------------------------------------------------------
# Retries
# -----------------------------------------------------------------------------

class TestApplyRetries:
    """Tests for folding retry attempts into the first run."""

    def test_pass_on_retry_replaces_failure(self):
        first = [result("a:1"), result("a:5", "failed")]
        retries = [[result("a:5", "passed", duration_ms=700)]]

        final = apply_retries(first, retries)

        assert [r.status for r in final] == ["passed", "passed"]
        assert final[1].duration_ms == 700

    def test_failure_on_every_retry_stays_failed(self):
        first = [result("a:5", "failed")]
        retries = [[result("a:5", "failed")], [result("a:5", "failed")]]

        assert apply_retries(first, retries)[0].failed

    def test_later_attempt_can_rescue(self):
        first = [result("a:5", "failed")]
        retries = [[result("a:5", "failed")], [result("a:5", "passed")]]

        assert apply_retries(first, retries)[0].status == "passed"

    def test_passed_result_is_never_replaced(self):
        original = result("a:1")

        final = apply_retries([original], [[result("a:1", "failed")]])

        assert final[0] is original


# -----------------------------------------------------------------------------
# Summary
# -----------------------------------------------------------------------------

class TestSummary:
    """Tests for the run summary."""

    def test_counts_rate_and_duration(self):
        results = [
            result("a:1", duration_ms=1500),
            result("a:2", "failed", duration_ms=2000, name="Bad login"),
            result("a:3", "skipped", duration_ms=0),
        ]

        summary = summarise(results)

        assert (summary.total, summary.passed, summary.failed, summary.skipped) == (3, 1, 1, 1)
        assert summary.pass_rate == "33.33%"
        assert summary.duration == "3.50s"
        assert summary.failed_scenarios == ["Login: Bad login (a:2)"]
        assert summary.exit_code == 1

    def test_empty_run(self):
        summary = summarise([])

        assert summary.total == 0
        assert summary.pass_rate == "0.00%"
        assert summary.exit_code == 0

    def test_write_summary(self, tmp_path):
        path = write_summary(summarise([result("a:1")]), tmp_path / "reports" / "summary.json")

        data = json.loads(path.read_text())
        assert data["total"] == 1
        assert data["pass_rate"] == "100.00%"

    def test_archive_copies_json_reports(self, tmp_path, behave_report):
        write_report(behave_report("Login"), tmp_path / "cucumber-report.json")
        (tmp_path / "worker-1.log").write_text("log")

        archive_dir = archive_reports(tmp_path)

        assert archive_dir.parent == tmp_path / "archive"
        assert [p.name for p in archive_dir.iterdir()] == ["cucumber-report.json"]
