"""Markdown report assembly — pure, apart from write_report()."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from .cost import environment_hourly_cost, remote_cost, total_cost
from .types import (
    RUNNER_KIND_LOCAL,
    RUNNER_KIND_REMOTE,
    RecommendationThresholds,
    RunnerMetrics,
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"
NOT_AVAILABLE = "N/A"

RUNNER_COLUMNS = (
    "Name",
    "Type",
    "Region",
    "Phase",
    "Environments",
    "Uptime (hrs)",
    "Est. Cost ($)",
)
ENVIRONMENT_COLUMNS = ("Environment ID", "Context URL", "Status")


def _cell(value) -> str:
    text = NOT_AVAILABLE if value is None or value == "" else str(value)
    return text.replace("|", "\\|").replace("\n", " ")


def _table(columns: tuple[str, ...], rows: list[list]) -> list[str]:
    lines = [
        "| " + " | ".join(columns) + " |",
        "|" + "|".join("-" * (len(c) + 2) for c in columns) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_cell(v) for v in row) + " |")
    return lines


def _heading(m: RunnerMetrics) -> str:
    return f"### {m.name} ({m.runner_id})"


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _summary(metrics: list[RunnerMetrics]) -> list[str]:
    remote = sum(1 for m in metrics if m.kind == RUNNER_KIND_REMOTE)
    local = sum(1 for m in metrics if m.kind == RUNNER_KIND_LOCAL)
    environments = sum(len(m.environments) for m in metrics)
    return [
        "## Summary",
        f"- Total Runners: {len(metrics)}",
        f"  - Remote Runners: {remote}",
        f"  - Local Runners: {local}",
        f"- Total Active Environments: {environments}",
        f"- Total Estimated Cost: ${total_cost(metrics):.2f}",
    ]


def _cost_analysis(metrics: list[RunnerMetrics]) -> list[str]:
    environments = sum(len(m.environments) for m in metrics)
    return [
        "## Cost Analysis",
        f"- Remote Runner Costs: ${remote_cost(metrics):.2f}",
        f"- Environment Costs: ${environment_hourly_cost(environments):.2f}/hour",
    ]


def _runner_details(metrics: list[RunnerMetrics]) -> list[str]:
    rows = [
        [
            m.name,
            m.kind,
            m.region,
            m.phase,
            len(m.environments),
            m.uptime,
            f"{m.estimated_cost:.2f}",
        ]
        for m in metrics
    ]
    return ["## Runner Details", "", *_table(RUNNER_COLUMNS, rows)]


def _environment_distribution(metrics: list[RunnerMetrics]) -> list[str]:
    lines = ["## Environment Distribution"]
    for m in metrics:
        if not m.environments:
            continue
        rows = [[env.environment_id, env.context_url, env.phase] for env in m.environments]
        lines += [
            "",
            _heading(m),
            f"Total Environments: {len(m.environments)}",
            "",
            *_table(ENVIRONMENT_COLUMNS, rows),
        ]
    return lines


def _system_details(metrics: list[RunnerMetrics]) -> list[str]:
    lines = ["## System Details"]
    for m in metrics:
        lines += [
            "",
            _heading(m),
            f"- **Type:** {m.kind}",
            f"- **Region:** {m.region}",
            f"- **Phase:** {m.phase}",
            f"- **Active Environments:** {len(m.environments)}",
            f"- **Uptime:** {m.uptime} hours",
            "- **System Details:**",
            "```json",
            json.dumps(m.system_details, indent=2, ensure_ascii=False),
            "```",
        ]
    return lines


def recommendations(
    metrics: list[RunnerMetrics], thresholds: RecommendationThresholds | None = None
) -> list[str]:
    """Independent rules; each contributes at most one bullet."""
    t = thresholds or RecommendationThresholds()
    inactive = [m for m in metrics if m.phase == t.inactive_phase]
    long_running = [m for m in metrics if m.uptime > t.high_uptime_hours]
    idle = [m for m in metrics if not m.environments and m.uptime > t.idle_uptime_hours]
    expensive = [m for m in metrics if m.estimated_cost > t.high_cost]

    out = []
    if inactive:
        out.append(f"🔴 Clean up {len(inactive)} inactive runners")
    if long_running:
        out.append(
            f"🟡 Review {len(long_running)} runners with high uptime "
            f"(>{t.high_uptime_hours}h)"
        )
    if idle:
        out.append(
            f"🟡 Consider removing {len(idle)} runners with no environments "
            f"(>{t.idle_uptime_hours}h uptime)"
        )
    if expensive:
        out.append(f"🔴 Investigate {len(expensive)} high-cost runners (>${t.high_cost:g})")
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_report(
    metrics: list[RunnerMetrics],
    generated_at: datetime,
    thresholds: RecommendationThresholds | None = None,
) -> str:
    """Render the full Markdown report. Runner order follows the input list."""
    lines = [
        "# Gitpod Resource Usage Report",
        f"Generated: {generated_at.strftime(TIMESTAMP_FORMAT).rstrip()}",
        "",
    ]
    for section in (
        _summary(metrics),
        _cost_analysis(metrics),
        _runner_details(metrics),
        _environment_distribution(metrics),
        _system_details(metrics),
    ):
        lines += section
        lines.append("")
    lines.append("## Recommendations")
    lines += [f"- {r}" for r in recommendations(metrics, thresholds)]
    return "\n".join(lines) + "\n"


def write_report(path: Path, text: str) -> None:
    """Overwrite path with the report text."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
