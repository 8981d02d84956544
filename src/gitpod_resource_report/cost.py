"""Pure cost math — no HTTP imports.

Figures are heuristic estimates based on AWS on-demand pricing, not billing data.
"""

from __future__ import annotations

import math

from .types import RUNNER_KIND_LOCAL, RUNNER_KIND_REMOTE, RunnerMetrics

DEFAULT_INSTANCE_TYPE = "default"

# USD per hour, keyed by EC2 instance type.
HOURLY_RATES: dict[str, float] = {
    "t3.medium": 0.0416,
    "t3.large": 0.0832,
    "t3.xlarge": 0.1664,
    DEFAULT_INSTANCE_TYPE: 0.0416,
}

# Flat USD per environment per hour.
ENVIRONMENT_HOURLY_RATE: float = 0.1


def hourly_rate(system_details) -> float:
    """Rate for the instance type named in parsed system details, or the default."""
    instance_type = None
    if isinstance(system_details, dict):
        instance_type = system_details.get("instanceType")
    if isinstance(instance_type, str) and instance_type in HOURLY_RATES:
        return HOURLY_RATES[instance_type]
    return HOURLY_RATES[DEFAULT_INSTANCE_TYPE]


def estimate_cost(metrics: RunnerMetrics) -> float:
    """Estimated spend since creation.

    Only local runners are free. Any other kind, including ones this module
    does not know about, is priced as metered remote compute.
    """
    if metrics.kind == RUNNER_KIND_LOCAL:
        return 0.0

    base = metrics.uptime * hourly_rate(metrics.system_details)
    surcharge = len(metrics.environments) * ENVIRONMENT_HOURLY_RATE * metrics.uptime
    total = round(base + surcharge, 2)
    if not math.isfinite(total) or total < 0:
        return 0.0
    return total


def total_cost(metrics: list[RunnerMetrics]) -> float:
    return sum(m.estimated_cost for m in metrics)


def remote_cost(metrics: list[RunnerMetrics]) -> float:
    """Cost attributable to runners explicitly marked remote."""
    return sum(m.estimated_cost for m in metrics if m.kind == RUNNER_KIND_REMOTE)


def environment_hourly_cost(environment_count: int) -> float:
    """Current environment burn rate in USD/hour (a rate, not an accrued total)."""
    return environment_count * ENVIRONMENT_HOURLY_RATE
