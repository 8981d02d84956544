"""All Gitpod API calls. This is the only module that talks HTTP.

Raw payloads are converted to typed records here, so the rest of the
package never sees a partially-filled dict.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone

import httpx

from .types import UNKNOWN, UNNAMED_RUNNER, Environment, Runner

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.gitpod.io/api"
DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT = 30.0

LIST_RUNNERS_PATH = "/gitpod.v1.RunnerService/ListRunners"
GET_RUNNER_PATH = "/gitpod.v1.RunnerService/GetRunner"
LIST_ENVIRONMENTS_PATH = "/gitpod.v1.EnvironmentService/ListEnvironments"


class GitpodApiError(Exception):
    """A single API call failed (transport, auth, server or undecodable body)."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


def _client(pat: str, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={
            "Authorization": f"Bearer {pat}",
            "Content-Type": "application/json",
        },
        timeout=timeout,
    )


async def _post(
    operation: str,
    path: str,
    body: dict,
    *,
    pat: str,
    base_url: str,
    timeout: float,
) -> dict:
    """POST once, no retry. Any failure is re-raised as GitpodApiError."""
    logger.info("Calling %s API...", operation)
    try:
        async with _client(pat, base_url, timeout) as client:
            resp = await client.post(path, json=body)
            resp.raise_for_status()
            data = resp.json()
    except httpx.HTTPError as e:
        raise GitpodApiError(operation, str(e)) from e
    except ValueError as e:
        raise GitpodApiError(operation, f"invalid JSON response: {e}") from e
    if not isinstance(data, dict):
        raise GitpodApiError(operation, f"unexpected response type {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Payload conversion
# ---------------------------------------------------------------------------


def _parse_timestamp(raw) -> datetime | None:
    """Convert a protobuf-JSON {seconds, nanos} timestamp.

    Missing, empty, zero or unparseable seconds all yield None.
    """
    if not isinstance(raw, dict):
        return None
    try:
        seconds = int(raw.get("seconds") or 0)
        nanos = int(raw.get("nanos") or 0)
    except (TypeError, ValueError):
        return None
    if seconds == 0:
        return None
    try:
        base = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return base + timedelta(microseconds=nanos // 1000)


def _str_or_none(value) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


def _system_details_text(value) -> str:
    """Keep the details opaque: strings pass through, structures are re-serialized."""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return ""


def _records(operation: str, raw) -> list[dict]:
    if not isinstance(raw, list):
        raise GitpodApiError(operation, f"expected a list, got {type(raw).__name__}")
    for item in raw:
        if not isinstance(item, dict):
            raise GitpodApiError(operation, f"unexpected record type {type(item).__name__}")
    return raw


def _runner_from_dict(d: dict) -> Runner:
    status = _mapping(d.get("status"))
    spec = _mapping(d.get("spec"))
    configuration = _mapping(spec.get("configuration"))
    return Runner(
        runner_id=_str_or_none(d.get("runner_id")) or UNKNOWN,
        name=_str_or_none(d.get("name")) or UNNAMED_RUNNER,
        kind=_str_or_none(d.get("kind")) or UNKNOWN,
        created_at=_parse_timestamp(d.get("created_at")),
        phase=_str_or_none(status.get("phase")) or UNKNOWN,
        status_region=_str_or_none(status.get("region")),
        configured_region=_str_or_none(configuration.get("region")),
        system_details=_system_details_text(status.get("system_details")),
        desired_phase=_str_or_none(spec.get("desired_phase")),
        version=_str_or_none(status.get("version")),
        message=_str_or_none(status.get("message")),
        release_channel=_str_or_none(configuration.get("release_channel")),
        updated_at=_parse_timestamp(d.get("updated_at")),
    )


def _environment_from_dict(d: dict) -> Environment:
    status = _mapping(d.get("status"))
    return Environment(
        environment_id=_str_or_none(d.get("environment_id")),
        context_url=_str_or_none(d.get("context_url")),
        runner_id=_str_or_none(d.get("runner_id")),
        phase=_str_or_none(status.get("phase")),
        instance_id=_str_or_none(status.get("instance_id")),
    )


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------


async def list_runners(
    pat: str,
    organization_id: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    page_size: int = DEFAULT_PAGE_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[Runner]:
    """Return the first page of runners for the organization."""
    data = await _post(
        "ListRunners",
        LIST_RUNNERS_PATH,
        {"organization_id": organization_id, "pagination": {"page_size": page_size}},
        pat=pat,
        base_url=base_url,
        timeout=timeout,
    )
    raw = _records("ListRunners", data.get("runners") or [])
    logger.debug("ListRunners returned %d runners", len(raw))
    return [_runner_from_dict(r) for r in raw]


async def get_runner(
    pat: str,
    organization_id: str,
    runner_id: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> Runner | None:
    data = await _post(
        "GetRunner",
        GET_RUNNER_PATH,
        {"organization_id": organization_id, "runner_id": runner_id},
        pat=pat,
        base_url=base_url,
        timeout=timeout,
    )
    raw = data.get("runner")
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise GitpodApiError("GetRunner", f"unexpected record type {type(raw).__name__}")
    return _runner_from_dict(raw)


# ---------------------------------------------------------------------------
# Environments
# ---------------------------------------------------------------------------


async def list_environments(
    pat: str,
    organization_id: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    page_size: int = DEFAULT_PAGE_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[Environment]:
    """Return the first page of environments for the organization."""
    data = await _post(
        "ListEnvironments",
        LIST_ENVIRONMENTS_PATH,
        {"organization_id": organization_id, "pagination": {"page_size": page_size}},
        pat=pat,
        base_url=base_url,
        timeout=timeout,
    )
    raw = _records("ListEnvironments", data.get("environments") or [])
    logger.debug("ListEnvironments returned %d environments", len(raw))
    return [_environment_from_dict(e) for e in raw]
