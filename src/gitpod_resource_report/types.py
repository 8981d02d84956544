"""API-independent data types for runners, environments and derived metrics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

RUNNER_KIND_LOCAL = "RUNNER_KIND_LOCAL"
RUNNER_KIND_REMOTE = "RUNNER_KIND_REMOTE"

RUNNER_PHASE_INACTIVE = "RUNNER_PHASE_INACTIVE"

UNKNOWN = "unknown"
UNNAMED_RUNNER = "Unnamed Runner"


# ---------------------------------------------------------------------------
# API records
# ---------------------------------------------------------------------------

@dataclass
class Environment:
    environment_id: str | None
    context_url: str | None
    runner_id: str | None
    phase: str | None = None
    instance_id: str | None = None


@dataclass
class Runner:
    """A runner as returned by ListRunners, with defaults already applied."""

    runner_id: str
    name: str
    kind: str
    created_at: datetime | None  # None when the API sent no usable seconds
    phase: str = UNKNOWN
    status_region: str | None = None  # where the runner actually landed
    configured_region: str | None = None  # spec.configuration.region
    system_details: str = ""  # opaque, usually JSON
    desired_phase: str | None = None
    version: str | None = None
    message: str | None = None
    release_channel: str | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Derived
# ---------------------------------------------------------------------------

@dataclass
class RunnerMetrics:
    runner_id: str
    name: str
    kind: str
    region: str
    uptime: int  # whole hours
    phase: str
    system_details: Any
    environments: list[Environment] = field(default_factory=list)
    estimated_cost: float = 0.0


@dataclass
class RecommendationThresholds:
    high_uptime_hours: int = 168
    idle_uptime_hours: int = 24
    high_cost: float = 100.0
    inactive_phase: str = RUNNER_PHASE_INACTIVE


@dataclass
class ReportResult:
    output_path: str
    runner_count: int
    environment_count: int
    total_estimated_cost: float
    recommendations: list[str] = field(default_factory=list)
