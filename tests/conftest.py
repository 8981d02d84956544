"""Shared fixtures for tests."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from gitpod_resource_report.types import Environment, Runner

NOW = datetime(2025, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def remote_runner() -> Runner:
    return Runner(
        runner_id="runner-remote",
        name="aws-runner",
        kind="RUNNER_KIND_REMOTE",
        created_at=NOW - timedelta(hours=10, minutes=30),
        phase="RUNNER_PHASE_ACTIVE",
        status_region="us-east-1",
        configured_region="eu-west-1",
        system_details=json.dumps({"instanceType": "t3.large"}),
    )


@pytest.fixture
def local_runner() -> Runner:
    return Runner(
        runner_id="runner-local",
        name="laptop",
        kind="RUNNER_KIND_LOCAL",
        created_at=NOW - timedelta(hours=5),
        phase="RUNNER_PHASE_ACTIVE",
    )


@pytest.fixture
def environments() -> list[Environment]:
    return [
        Environment("env-1", "https://github.com/acme/api", "runner-remote", "ENVIRONMENT_PHASE_RUNNING"),
        Environment("env-2", "https://github.com/acme/web", "runner-remote", "ENVIRONMENT_PHASE_STOPPED"),
        Environment("env-3", "https://github.com/acme/orphan", "runner-gone", "ENVIRONMENT_PHASE_RUNNING"),
    ]


@pytest.fixture
def raw_runner() -> dict:
    """A runner as ListRunners returns it."""
    return {
        "runner_id": "runner-remote",
        "name": "aws-runner",
        "kind": "RUNNER_KIND_REMOTE",
        "created_at": {"seconds": "1736330400", "nanos": 500000000},
        "updated_at": {"seconds": "1736503200", "nanos": 0},
        "spec": {
            "desired_phase": "RUNNER_PHASE_ACTIVE",
            "configuration": {
                "region": "eu-west-1",
                "release_channel": "RUNNER_RELEASE_CHANNEL_STABLE",
                "auto_update": True,
            },
        },
        "status": {
            "version": "20250101.1",
            "system_details": '{"instanceType": "t3.large"}',
            "phase": "RUNNER_PHASE_ACTIVE",
            "region": "us-east-1",
            "message": "",
            "additional_info": [],
        },
    }


@pytest.fixture
def raw_environment() -> dict:
    return {
        "environment_id": "env-1",
        "context_url": "https://github.com/acme/api",
        "runner_id": "runner-remote",
        "status": {"phase": "ENVIRONMENT_PHASE_RUNNING", "instance_id": "i-0abc"},
    }
