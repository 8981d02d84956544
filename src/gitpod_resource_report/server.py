"""FastMCP server — report tools wired to the analyzer pipeline."""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path

from fastmcp import FastMCP

from . import analyzer
from .config import ConfigurationError, settings
from .gitpod_ops import GitpodApiError

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "gitpod-resource-report",
    instructions=(
        "Summarize Gitpod runner usage: uptime, region, attached environments "
        "and estimated cost. Use gitpod_runner_metrics to inspect runners and "
        "gitpod_generate_report to write the Markdown report."
    ),
)


# ---------------------------------------------------------------------------
# Tool handlers (plain async functions — testable without MCP)
# ---------------------------------------------------------------------------


async def _generate_report(output_path: str | None = None) -> dict:
    """Fetch runners and environments and write the Markdown report.

    Args:
        output_path: Where to write the report (default from config).
    """
    path = Path(output_path) if output_path else None
    try:
        result = await analyzer.generate_resource_report(settings, output_path=path)
    except (ConfigurationError, GitpodApiError, OSError) as e:
        logger.warning("Report generation failed: %s", e)
        return {"error": str(e)}
    return asdict(result)


async def _runner_metrics(runner_id: str | None = None) -> list[dict] | dict:
    """Per-runner metrics without writing a report.

    Args:
        runner_id: Only this runner (fetched with GetRunner). All runners when omitted.
    """
    try:
        if runner_id:
            m = await analyzer.collect_runner_metrics(settings, runner_id)
            if m is None:
                return {"error": f"Runner {runner_id} not found."}
            metrics = [m]
        else:
            metrics = await analyzer.collect_metrics(settings)
    except (ConfigurationError, GitpodApiError) as e:
        logger.warning("Metrics collection failed: %s", e)
        return {"error": str(e)}
    return [asdict(m) for m in metrics]


# ---------------------------------------------------------------------------
# Register tools on the MCP server (thin wrappers preserve docstrings)
# ---------------------------------------------------------------------------


@mcp.tool()
async def gitpod_generate_report(output_path: str | None = None) -> dict:
    """Fetch runners and environments and write the Markdown report.

    Args:
        output_path: Where to write the report (default from config).
    """
    return await _generate_report(output_path=output_path)


@mcp.tool()
async def gitpod_runner_metrics(runner_id: str | None = None) -> list[dict] | dict:
    """Per-runner uptime, region, environments and estimated cost.

    Args:
        runner_id: Only this runner (fetched with GetRunner). All runners when omitted.
    """
    return await _runner_metrics(runner_id=runner_id)


def main() -> None:
    mcp.run()
