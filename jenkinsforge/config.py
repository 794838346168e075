"""Process-wide configuration — env-driven via pydantic-settings.

Reads from a .env file and JENKINSFORGE_* environment variables. The
Jenkins server fields act as the last fallback after the per-goal
registration and the host configuration at ``sdm.jenkins``.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class JenkinsSettings(BaseSettings):
    """Process configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export JENKINSFORGE_JENKINS_URL=https://ci.example.com
        export JENKINSFORGE_JENKINS_USER=deploy
        export JENKINSFORGE_LOG_LEVEL=DEBUG

    Or via .env file::

        JENKINSFORGE_JENKINS_URL=https://ci.example.com
        JENKINSFORGE_WEBHOOK_ENABLED=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="JENKINSFORGE_",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "INFO"

    # Jenkins server defaults
    jenkins_url: str | None = None
    jenkins_user: str | None = None
    jenkins_password: str | None = None

    # Polling cadence (seconds)
    queue_poll_interval: float = 0.5
    log_poll_interval: float = 1.0
    request_timeout: float = 30.0

    # Build-status webhook
    webhook_base_url: str = "https://webhook.atomist.com/atomist"
    webhook_enabled: bool = True

    def server_defaults(self) -> dict[str, str | None]:
        """Return the server fields keyed like a registration ``server``."""
        return {
            "url": self.jenkins_url,
            "user": self.jenkins_user,
            "password": self.jenkins_password,
        }
