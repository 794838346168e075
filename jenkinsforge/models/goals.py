"""Goal models — definition, result and state vocabulary of the host."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class GoalState(str, Enum):
    """Terminal goal states understood by the host orchestrator."""

    SUCCESS = "success"
    FAILURE = "failure"
    STOPPED = "stopped"


class ExternalUrl(BaseModel):
    """A labelled link shown next to the goal in the host UI."""

    model_config = ConfigDict(frozen=True)

    label: str
    url: str


class ExecuteGoalResult(BaseModel):
    """Result returned by a goal executor for one invocation."""

    model_config = ConfigDict(frozen=True)

    state: GoalState
    description: str
    external_urls: list[ExternalUrl] = []


class GoalDetails(BaseModel):
    """User-facing goal details passed to the ``jenkins()`` factory."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    unique_name: str | None = None


class GoalDefinition(BaseModel):
    """Static definition of a goal as registered with the host."""

    model_config = ConfigDict(frozen=True)

    unique_name: str
    display_name: str
    environment: str = "independent"
    retry_feasible: bool = True
