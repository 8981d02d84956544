"""Tests for report.py — Markdown rendering and recommendation rules."""

from __future__ import annotations

from pathlib import Path

from gitpod_resource_report.metrics import derive_all
from gitpod_resource_report.report import build_report, recommendations, write_report
from gitpod_resource_report.types import Environment, RecommendationThresholds, RunnerMetrics


def _metrics(**kw) -> RunnerMetrics:
    base = dict(
        runner_id="r1",
        name="runner-1",
        kind="RUNNER_KIND_REMOTE",
        region="us-east-1",
        uptime=1,
        phase="RUNNER_PHASE_ACTIVE",
        system_details={},
        environments=[Environment("e", "u", "r1", "ENVIRONMENT_PHASE_RUNNING")],
        estimated_cost=0.0,
    )
    base.update(kw)
    return RunnerMetrics(**base)


def _section(report: str, heading: str) -> str:
    start = report.index(f"## {heading}\n")
    rest = report[start + 1:]
    end = rest.find("\n## ")
    return rest if end == -1 else rest[:end]


class TestScenario:
    def test_remote_and_local(self, remote_runner, local_runner, environments, now):
        metrics = derive_all([remote_runner, local_runner], environments, now)
        report = build_report(metrics, now)

        assert report.startswith("# Gitpod Resource Usage Report\nGenerated: 2025-01-10 12:00:00 UTC\n")
        summary = _section(report, "Summary")
        assert "- Total Runners: 2" in summary
        assert "  - Remote Runners: 1" in summary
        assert "  - Local Runners: 1" in summary
        assert "- Total Active Environments: 2" in summary
        assert "- Total Estimated Cost: $2.83" in summary

        costs = _section(report, "Cost Analysis")
        assert "- Remote Runner Costs: $2.83" in costs
        assert "- Environment Costs: $0.20/hour" in costs

    def test_section_order(self, remote_runner, environments, now):
        report = build_report(derive_all([remote_runner], environments, now), now)
        headings = [line for line in report.splitlines() if line.startswith("## ")]
        assert headings == [
            "## Summary",
            "## Cost Analysis",
            "## Runner Details",
            "## Environment Distribution",
            "## System Details",
            "## Recommendations",
        ]

    def test_idempotent(self, remote_runner, local_runner, environments, now):
        metrics = derive_all([remote_runner, local_runner], environments, now)
        assert build_report(metrics, now) == build_report(metrics, now)


class TestRunnerDetails:
    def test_rows_in_input_order(self, now):
        metrics = [_metrics(runner_id="b", name="beta"), _metrics(runner_id="a", name="alpha")]
        table = _section(build_report(metrics, now), "Runner Details")
        rows = [line for line in table.splitlines() if line.startswith("| ") and "Name" not in line]
        assert rows[0].startswith("| beta |")
        assert rows[1].startswith("| alpha |")

    def test_row_columns(self, now):
        m = _metrics(uptime=10, estimated_cost=2.832)
        table = _section(build_report([m], now), "Runner Details")
        assert "| runner-1 | RUNNER_KIND_REMOTE | us-east-1 | RUNNER_PHASE_ACTIVE | 1 | 10 | 2.83 |" in table

    def test_pipe_in_name_escaped(self, now):
        table = _section(build_report([_metrics(name="a|b")], now), "Runner Details")
        assert "| a\\|b |" in table


class TestEnvironmentDistribution:
    def test_runners_without_environments_omitted(self, now):
        metrics = [_metrics(), _metrics(runner_id="r2", name="empty", environments=[])]
        section = _section(build_report(metrics, now), "Environment Distribution")
        assert "### runner-1 (r1)" in section
        assert "empty" not in section

    def test_missing_fields_render_na(self, now):
        m = _metrics(environments=[Environment(None, None, "r1")])
        section = _section(build_report([m], now), "Environment Distribution")
        assert "| N/A | N/A | N/A |" in section


class TestSystemDetails:
    def test_every_runner_dumped(self, now):
        metrics = [
            _metrics(system_details={"instanceType": "t3.large"}),
            _metrics(runner_id="r2", name="bad", environments=[], system_details={"raw": "{not json"}),
        ]
        section = _section(build_report(metrics, now), "System Details")
        assert "### runner-1 (r1)" in section
        assert "### bad (r2)" in section
        assert '```json\n{\n  "instanceType": "t3.large"\n}\n```' in section
        assert '"raw": "{not json"' in section


class TestRecommendations:
    def test_none_fire(self):
        assert recommendations([_metrics()]) == []

    def test_all_fire_for_one_runner(self):
        m = _metrics(phase="RUNNER_PHASE_INACTIVE", uptime=200, environments=[], estimated_cost=150.0)
        recs = recommendations([m])
        assert len(recs) == 4
        assert "Clean up 1 inactive runners" in recs[0]
        assert "Review 1 runners with high uptime" in recs[1]
        assert "Consider removing 1 runners with no environments" in recs[2]
        assert "Investigate 1 high-cost runners" in recs[3]

    def test_counts_are_per_rule(self):
        metrics = [
            _metrics(uptime=200),
            _metrics(uptime=30, environments=[]),
            _metrics(uptime=300, environments=[]),
        ]
        recs = recommendations(metrics)
        assert recs == [
            "🟡 Review 2 runners with high uptime (>168h)",
            "🟡 Consider removing 2 runners with no environments (>24h uptime)",
        ]

    def test_thresholds_are_strict(self):
        m = _metrics(uptime=168, estimated_cost=100.0)
        assert recommendations([m]) == []

    def test_custom_thresholds(self):
        t = RecommendationThresholds(high_uptime_hours=5, idle_uptime_hours=1, high_cost=1.0)
        m = _metrics(uptime=6, estimated_cost=2.0)
        recs = recommendations([m], t)
        assert recs == [
            "🟡 Review 1 runners with high uptime (>5h)",
            "🔴 Investigate 1 high-cost runners (>$1)",
        ]

    def test_rendered_as_bullets(self, now):
        m = _metrics(phase="RUNNER_PHASE_INACTIVE")
        report = build_report([m], now)
        assert report.endswith("## Recommendations\n- 🔴 Clean up 1 inactive runners\n")


class TestWriteReport:
    def test_overwrites(self, tmp_path: Path):
        path = tmp_path / "out" / "report.md"
        write_report(path, "first run with more text\n")
        write_report(path, "second\n")
        assert path.read_text() == "second\n"


class TestGeneratedLine:
    def test_utc_marker(self, now):
        assert "\nGenerated: 2025-01-10 12:00:00 UTC\n" in build_report([], now)

    def test_naive_timestamp_has_no_trailing_space(self, now):
        report = build_report([], now.replace(tzinfo=None))
        assert "\nGenerated: 2025-01-10 12:00:00\n" in report
