"""Job resolver — derives job name, parameters and definition per invocation."""

from __future__ import annotations

import inspect
from typing import Any

from jenkinsforge.models.invocation import GoalInvocation
from jenkinsforge.models.registration import JenkinsRegistration


def resolve_job_name(
    registration: JenkinsRegistration, invocation: GoalInvocation
) -> str:
    """Return the configured job name, or the repository name by default.

    Raises
    ------
    TypeError
        If the configured value or function yields something other than a
        string, e.g. a coroutine from an ``async def`` job function.
    """
    if registration.job is not None:
        name = registration.job.resolve(invocation)
        if inspect.iscoroutine(name):
            name.close()
        if name is not None and not isinstance(name, str):
            raise TypeError(
                f"Jenkins job name must be a string, got {type(name).__name__}"
            )
        if name:
            return name
    return invocation.repo.name


def resolve_parameters(
    registration: JenkinsRegistration, invocation: GoalInvocation
) -> dict[str, str] | None:
    """Return the build parameters, or ``None`` when none are configured.

    Exceptions raised by a parameters function propagate to the caller.
    """
    if registration.parameters is None:
        return None
    parameters: dict[str, Any] | None = registration.parameters.resolve(invocation)
    if parameters is None:
        return None
    return {str(key): str(value) for key, value in parameters.items()}


def resolve_definition(
    registration: JenkinsRegistration, invocation: GoalInvocation
) -> str | None:
    """Return the job ``config.xml``; ``None`` means the job is not managed."""
    if registration.definition is None:
        return None
    return registration.definition.resolve(invocation) or None
