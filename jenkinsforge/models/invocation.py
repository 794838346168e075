"""Invocation context — the per-execution, read-only view of a goal run."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from jenkinsforge.core.progress import ProgressLog


class RepoRef(BaseModel):
    """Identity of the repository whose push triggered the goal."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str


class GoalInvocation(BaseModel):
    """Everything one goal execution may read.

    Supplied by the host once per execution. ``configuration`` is the
    host's own configuration mapping; the Jenkins server defaults are
    looked up under ``sdm.jenkins``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    repo: RepoRef
    sha: str
    branch: str
    workspace_id: str
    progress_log: ProgressLog
    configuration: dict[str, Any] = {}
