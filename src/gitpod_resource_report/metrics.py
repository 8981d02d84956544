"""Per-runner metrics derivation — no HTTP imports."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable

from .cost import estimate_cost
from .types import UNKNOWN, Environment, Runner, RunnerMetrics

SECONDS_PER_HOUR = 3600

# Tried in order; the first non-empty value wins. Status comes first because it
# reports where the runner actually landed, which can differ from the request.
REGION_RESOLUTION_ORDER: tuple[tuple[str, Callable[[Runner], str | None]], ...] = (
    ("status", lambda r: r.status_region),
    ("configuration", lambda r: r.configured_region),
)


def calculate_uptime(created_at: datetime | None, now: datetime) -> int:
    """Whole hours since creation, floor-rounded. Missing or future timestamps give 0."""
    if created_at is None:
        return 0
    seconds = (now - created_at).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // SECONDS_PER_HOUR)


def resolve_region(runner: Runner) -> str:
    for _source, getter in REGION_RESOLUTION_ORDER:
        region = getter(runner)
        if region:
            return region
    return UNKNOWN


def parse_system_details(details: str) -> Any:
    """Parse the runner's system details, keeping malformed input as {"raw": ...}."""
    if not details:
        return {}
    try:
        return json.loads(details)
    except (TypeError, ValueError):
        return {"raw": details}


def attached_environments(runner_id: str, environments: list[Environment]) -> list[Environment]:
    return [env for env in environments if env.runner_id == runner_id]


def derive_metrics(
    runner: Runner, environments: list[Environment], now: datetime
) -> RunnerMetrics:
    metrics = RunnerMetrics(
        runner_id=runner.runner_id,
        name=runner.name,
        kind=runner.kind,
        region=resolve_region(runner),
        uptime=calculate_uptime(runner.created_at, now),
        phase=runner.phase,
        system_details=parse_system_details(runner.system_details),
        environments=attached_environments(runner.runner_id, environments),
    )
    metrics.estimated_cost = estimate_cost(metrics)
    return metrics


def derive_all(
    runners: list[Runner], environments: list[Environment], now: datetime
) -> list[RunnerMetrics]:
    """Derive metrics for every runner against one shared `now`, in input order."""
    return [derive_metrics(r, environments, now) for r in runners]
