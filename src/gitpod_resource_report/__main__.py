"""Entry point: python -m gitpod_resource_report"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .analyzer import generate_resource_report
from .config import ConfigurationError, require_credentials, settings

logger = logging.getLogger("gitpod_resource_report")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="gitpod-resource-report",
        description="Write a Markdown usage and cost report for Gitpod runners.",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help=f"Report path (default: {settings.output_path})",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        require_credentials(settings)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    try:
        asyncio.run(generate_resource_report(settings, output_path=args.output))
    except Exception as e:
        logger.error("Error generating report: %s", e)
        return 1

    logger.info("Report generation completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
