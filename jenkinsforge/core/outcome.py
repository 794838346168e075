"""Outcome mapper — Jenkins build results onto goal states."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from jenkinsforge.bridge.jenkins_client import JenkinsClient
from jenkinsforge.core.progress import ProgressLog, write_block
from jenkinsforge.models.builds import (
    BuildOutcome,
    BuildReference,
    BuildResult,
    BuildStatus,
)
from jenkinsforge.models.goals import GoalState

logger = logging.getLogger(__name__)

# Remote result -> (reported status, goal state). Case-sensitive.
RESULT_MAPPING: dict[str, tuple[BuildStatus, GoalState]] = {
    BuildResult.SUCCESS: (BuildStatus.PASSED, GoalState.SUCCESS),
    BuildResult.ABORTED: (BuildStatus.CANCELED, GoalState.STOPPED),
    BuildResult.FAILURE: (BuildStatus.FAILED, GoalState.FAILURE),
}

# Anything else (UNSTABLE, NOT_BUILT, missing) is an error, never a success.
UNMAPPED_RESULT: tuple[BuildStatus, GoalState] = (BuildStatus.ERROR, GoalState.FAILURE)


class MappedOutcome(BaseModel):
    """A finished build expressed in the goal vocabulary."""

    model_config = ConfigDict(frozen=True)

    goal_state: GoalState
    status: BuildStatus
    result_url: str
    result: str | None = None


def classify_result(result: str | None) -> tuple[BuildStatus, GoalState]:
    """Return ``(status, goal_state)`` for a raw Jenkins result code."""
    return RESULT_MAPPING.get(result or "", UNMAPPED_RESULT)


def fetch_outcome(client: JenkinsClient, job_name: str, build: BuildReference) -> BuildOutcome:
    """Fetch the terminal detail record of *build*."""
    detail = client.get_build(job_name, build.number)
    return BuildOutcome(result=detail.get("result"), url=detail.get("url") or build.url)


def map_outcome(
    client: JenkinsClient,
    job_name: str,
    build: BuildReference,
    progress_log: ProgressLog,
) -> MappedOutcome:
    """Fetch the finished build's result and map it to the goal vocabulary."""
    outcome = fetch_outcome(client, job_name, build)
    status, state = classify_result(outcome.result)

    lines = [f"Jenkins job '{job_name}' completed with {state.value}"]
    if (outcome.result or "") not in RESULT_MAPPING:
        logger.warning(
            "Jenkins job %s build #%d finished with unmapped result %r",
            job_name,
            build.number,
            outcome.result,
        )
        lines.append(f"Unrecognized Jenkins result '{outcome.result}'")
    write_block(progress_log, *lines)

    return MappedOutcome(
        goal_state=state,
        status=status,
        result_url=outcome.url,
        result=outcome.result,
    )
