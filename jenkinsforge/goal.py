"""Jenkins goal — registers Jenkins job execution as a delivery goal.

``jenkins("deploy", registration)`` returns a ``JenkinsGoal`` whose
fulfillments carry the goal executor and the Jenkins progress reporter.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from jenkinsforge.core.executor import ExecuteGoal, code_line, execute_jenkins
from jenkinsforge.core.progress import report_progress
from jenkinsforge.models.goals import GoalDefinition, GoalDetails
from jenkinsforge.models.registration import JenkinsRegistration

JENKINS_GOAL_DEFINITION = GoalDefinition(
    unique_name="jenkins",
    display_name="jenkins",
    environment="independent",
    retry_feasible=True,
)


def generate_goal_name(prefix: str = "jenkins") -> str:
    """Return a unique goal name such as ``jenkins-3f9a1c2b``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


class Fulfillment(BaseModel):
    """One way of fulfilling a goal: an executor plus a progress reporter."""

    model_config = ConfigDict(frozen=True)

    name: str
    registration: JenkinsRegistration
    goal_executor: Callable[..., Any]
    progress_reporter: Callable[[str], str | None] = report_progress


class JenkinsGoal:
    """A delivery goal fulfilled by running Jenkins jobs.

    Parameters
    ----------
    definition:
        The goal definition registered with the host.
    executor_options:
        Keyword arguments forwarded to ``execute_jenkins`` for every
        fulfillment (settings, client and reporter factories).
    """

    def __init__(self, definition: GoalDefinition, **executor_options: Any) -> None:
        self.definition = definition
        self._executor_options = executor_options
        self._fulfillments: list[Fulfillment] = []

    @property
    def fulfillments(self) -> list[Fulfillment]:
        """Return a copy of the registered fulfillments."""
        return list(self._fulfillments)

    def with_registration(
        self, registration: JenkinsRegistration, name: str | None = None
    ) -> JenkinsGoal:
        """Add a fulfillment running *registration*; returns ``self``."""
        self._fulfillments.append(
            Fulfillment(
                name=name or generate_goal_name(),
                registration=registration,
                goal_executor=execute_jenkins(registration, **self._executor_options),
            )
        )
        return self

    def executor(self, index: int = 0) -> ExecuteGoal:
        """Return the executor of the fulfillment at *index*."""
        return self._fulfillments[index].goal_executor

    def __repr__(self) -> str:
        return (
            f"<JenkinsGoal unique_name={self.definition.unique_name!r} "
            f"fulfillments={len(self._fulfillments)}>"
        )


def jenkins(
    goal_details: str | GoalDetails,
    registration: JenkinsRegistration | None = None,
    **executor_options: Any,
) -> JenkinsGoal:
    """Create a goal that starts (or only converges) a Jenkins job."""
    if isinstance(goal_details, str):
        details = GoalDetails(display_name=goal_details)
    else:
        details = goal_details

    definition = JENKINS_GOAL_DEFINITION.model_copy(
        update={
            "unique_name": details.unique_name or generate_goal_name(),
            "display_name": f"Jenkins {code_line(details.display_name)}",
        }
    )
    goal = JenkinsGoal(definition, **executor_options)
    return goal.with_registration(registration or JenkinsRegistration())
