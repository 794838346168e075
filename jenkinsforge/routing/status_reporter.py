"""Build-status reporter — posts build lifecycle events to a webhook.

Every correlated build produces a ``started`` event and later exactly one
terminal event (``passed``, ``failed``, ``canceled`` or ``error``).
Delivery is best-effort: a failed POST is logged and never fails the
goal. Reporting a terminal status for a build that was never reported
as started raises ``StatusReportError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import TracebackType

import httpx
from pydantic import BaseModel, ConfigDict

from jenkinsforge.errors import StatusReportError
from jenkinsforge.models.builds import BuildReference, BuildStatus
from jenkinsforge.models.invocation import GoalInvocation

logger = logging.getLogger(__name__)


class RepositoryIdentity(BaseModel):
    """Repository section of a build-status event."""

    model_config = ConfigDict(frozen=True)

    owner_name: str
    name: str


class BuildStatusEvent(BaseModel):
    """Build-status document accepted by the ``build`` webhook."""

    model_config = ConfigDict(frozen=True)

    repository: RepositoryIdentity
    name: str
    number: int
    type: str = "push"
    build_url: str
    status: BuildStatus
    commit: str
    branch: str
    provider: str = "jenkins"
    started_at: str | None = None
    finished_at: str | None = None


def build_status_event(
    status: BuildStatus,
    build: BuildReference,
    invocation: GoalInvocation,
    *,
    now: datetime | None = None,
) -> BuildStatusEvent:
    """Build the event; ``started`` carries ``started_at``, others ``finished_at``."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    started = status == BuildStatus.STARTED
    return BuildStatusEvent(
        repository=RepositoryIdentity(
            owner_name=invocation.repo.owner,
            name=invocation.repo.name,
        ),
        name=f"Build #{build.number}",
        number=build.number,
        build_url=build.url,
        status=status,
        commit=invocation.sha,
        branch=invocation.branch,
        started_at=timestamp if started else None,
        finished_at=None if started else timestamp,
    )


class BuildStatusReporter:
    """Posts build-status events to ``{base_url}/build/teams/{workspace_id}``.

    Parameters
    ----------
    base_url:
        Webhook root, e.g. ``https://webhook.atomist.com/atomist``.
    enabled:
        When ``False`` events are built and ordering is checked, but
        nothing is sent.
    timeout:
        Request timeout in seconds.
    transport:
        Optional ``httpx`` transport for tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        enabled: bool = True,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._enabled = enabled
        self._client = httpx.Client(timeout=httpx.Timeout(timeout), transport=transport)
        self._started: set[str] = set()
        self.sent: list[BuildStatusEvent] = []

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BuildStatusReporter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def webhook_url(self, workspace_id: str) -> str:
        return f"{self._base_url}/build/teams/{workspace_id}"

    def report(
        self,
        status: BuildStatus,
        build: BuildReference,
        invocation: GoalInvocation,
    ) -> bool:
        """Send one build-status event. Returns ``True`` if delivered."""
        key = f"{build.url}#{build.number}"
        if status == BuildStatus.STARTED:
            self._started.add(key)
        elif key not in self._started:
            raise StatusReportError(
                f"Cannot report {status.value} for build #{build.number} "
                "before it was reported as started"
            )

        event = build_status_event(status, build, invocation)
        if not self._enabled:
            logger.debug("Status webhook disabled; not sending %s", status.value)
            return False

        url = self.webhook_url(invocation.workspace_id)
        try:
            response = self._client.post(
                url, json=event.model_dump(mode="json", exclude_none=True)
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Build status %s for #%d not delivered to %s: %s",
                status.value,
                build.number,
                url,
                exc,
            )
            return False

        self.sent.append(event)
        logger.info("Reported build #%d as %s", build.number, status.value)
        return True
