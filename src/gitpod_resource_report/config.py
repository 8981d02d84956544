"""Configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

from .types import RUNNER_PHASE_INACTIVE, RecommendationThresholds


class ConfigurationError(Exception):
    """Raised when a required setting is missing. Checked before any API call."""


class Settings(BaseSettings):
    """All GITPOD_* env vars are read automatically."""

    model_config = {"env_prefix": "GITPOD_"}

    # Credentials
    pat: str | None = None
    org_id: str | None = None

    # API
    api_base_url: str = "https://app.gitpod.io/api"
    page_size: int = 100
    request_timeout: float = 30.0

    # Output
    output_path: Path = Path("gitpod-resource-report.md")
    log_level: str = "INFO"

    # Recommendation thresholds
    high_uptime_hours: int = 168
    idle_uptime_hours: int = 24
    high_cost_threshold: float = 100.0
    inactive_phase: str = RUNNER_PHASE_INACTIVE

    def resolve_paths(self) -> None:
        """Expand ~ in all Path fields."""
        self.output_path = self.output_path.expanduser()

    def thresholds(self) -> RecommendationThresholds:
        return RecommendationThresholds(
            high_uptime_hours=self.high_uptime_hours,
            idle_uptime_hours=self.idle_uptime_hours,
            high_cost=self.high_cost_threshold,
            inactive_phase=self.inactive_phase,
        )


def require_credentials(s: Settings) -> tuple[str, str]:
    """Return (pat, org_id) or raise ConfigurationError naming the missing variable."""
    if not s.pat:
        raise ConfigurationError("Please set GITPOD_PAT environment variable")
    if not s.org_id:
        raise ConfigurationError("Please set GITPOD_ORG_ID environment variable")
    return s.pat, s.org_id


# Singleton — importable everywhere
settings = Settings()
settings.resolve_paths()
