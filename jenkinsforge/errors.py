"""Exception hierarchy for Jenkins goal execution.

Everything raised on purpose by jenkinsforge derives from
``JenkinsGoalError`` so the host orchestrator can tell goal failures
apart from programming errors.
"""

from __future__ import annotations


class JenkinsGoalError(RuntimeError):
    """Base class for all jenkinsforge errors."""


class JenkinsConfigurationError(JenkinsGoalError):
    """Raised when the Jenkins server configuration is incomplete."""


class JenkinsRemoteError(JenkinsGoalError):
    """Raised when the Jenkins server rejects or fails a request.

    Parameters
    ----------
    message:
        Human-readable description of the failed call.
    status_code:
        HTTP status returned by the server, ``None`` for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QueueItemCancelledError(JenkinsGoalError):
    """Raised when a queue item is cancelled before a build is assigned."""


class JenkinsTimeoutError(JenkinsGoalError):
    """Raised when a queue or build wait exceeds its deadline."""


class StatusReportError(JenkinsGoalError):
    """Raised when a build-status report violates the started-first ordering."""
