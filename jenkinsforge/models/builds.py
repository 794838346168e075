"""Build lifecycle models — queue correlation through terminal outcome."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class BuildStatus(str, Enum):
    """Build-status phases reported to the status webhook."""

    STARTED = "started"
    PASSED = "passed"
    FAILED = "failed"
    CANCELED = "canceled"
    ERROR = "error"


class BuildResult(str, Enum):
    """Result codes Jenkins reports for a finished build."""

    SUCCESS = "SUCCESS"
    ABORTED = "ABORTED"
    FAILURE = "FAILURE"
    UNSTABLE = "UNSTABLE"
    NOT_BUILT = "NOT_BUILT"


class BuildReference(BaseModel):
    """A concrete, numbered Jenkins build correlated from a queue item.

    Created once the queue item is assigned an executable; the unit of
    correlation for log streaming, outcome mapping and status reporting.
    """

    model_config = ConfigDict(frozen=True)

    number: int
    url: str


class BuildOutcome(BaseModel):
    """Terminal detail of a finished build as reported by Jenkins."""

    model_config = ConfigDict(frozen=True)

    result: str | None = None  # SUCCESS, ABORTED, FAILURE, UNSTABLE, ...
    url: str = ""
