"""Report pipeline: credentials → fetch → derive → render → write."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

from . import gitpod_ops
from .config import Settings, require_credentials
from .cost import total_cost
from .metrics import derive_all, derive_metrics
from .report import build_report, recommendations, write_report
from .types import ReportResult, RunnerMetrics

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _fetch_both(first, second):
    """Await two independent calls; if one fails the other is cancelled and the error re-raised."""
    try:
        async with asyncio.TaskGroup() as tg:
            a = tg.create_task(first)
            b = tg.create_task(second)
    except BaseExceptionGroup as eg:
        raise eg.exceptions[0]
    return a.result(), b.result()


def _list_environments(s: Settings, pat: str, org_id: str):
    return gitpod_ops.list_environments(
        pat,
        org_id,
        base_url=s.api_base_url,
        page_size=s.page_size,
        timeout=s.request_timeout,
    )


async def collect_metrics(s: Settings, now: datetime | None = None) -> list[RunnerMetrics]:
    """Fetch runners and environments, then derive metrics against one `now`."""
    pat, org_id = require_credentials(s)
    now = now or _now()

    logger.info("Analyzing resources for organization: %s", org_id)
    logger.info("Fetching runners and environments...")
    runners, environments = await _fetch_both(
        gitpod_ops.list_runners(
            pat,
            org_id,
            base_url=s.api_base_url,
            page_size=s.page_size,
            timeout=s.request_timeout,
        ),
        _list_environments(s, pat, org_id),
    )

    logger.info("Analyzing %d runners, %d environments...", len(runners), len(environments))
    return derive_all(runners, environments, now)


async def collect_runner_metrics(
    s: Settings, runner_id: str, now: datetime | None = None
) -> RunnerMetrics | None:
    """Metrics for a single runner via GetRunner. None if the API does not return it."""
    pat, org_id = require_credentials(s)
    now = now or _now()

    logger.info("Fetching runner %s...", runner_id)
    runner, environments = await _fetch_both(
        gitpod_ops.get_runner(
            pat,
            org_id,
            runner_id,
            base_url=s.api_base_url,
            timeout=s.request_timeout,
        ),
        _list_environments(s, pat, org_id),
    )
    if runner is None:
        return None
    return derive_metrics(runner, environments, now)


async def generate_resource_report(
    s: Settings,
    output_path: Path | None = None,
    now: datetime | None = None,
) -> ReportResult:
    """Run the whole pipeline and write the report. Nothing is written on failure."""
    now = now or _now()
    metrics = await collect_metrics(s, now)

    logger.info("Generating report...")
    thresholds = s.thresholds()
    text = build_report(metrics, now, thresholds)

    path = (output_path or s.output_path).expanduser()
    write_report(path, text)
    logger.info("Report generated successfully at: %s", path)

    return ReportResult(
        output_path=str(path),
        runner_count=len(metrics),
        environment_count=sum(len(m.environments) for m in metrics),
        total_estimated_cost=round(total_cost(metrics), 2),
        recommendations=recommendations(metrics, thresholds),
    )
