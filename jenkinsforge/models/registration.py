"""Registration models — immutable per-goal configuration.

Job name, parameters and job definition may each be given either as a
plain value or as a function of the invocation. Both forms are wrapped
once, at registration time, into ``Static`` or ``Computed`` so callers
resolve them through a single ``resolve()`` accessor.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Static(BaseModel):
    """A configuration value fixed at registration time."""

    model_config = ConfigDict(frozen=True)

    value: Any

    def resolve(self, invocation: Any) -> Any:
        return self.value


class Computed(BaseModel):
    """A configuration value computed from each invocation."""

    model_config = ConfigDict(frozen=True)

    fn: Callable[[Any], Any]

    def resolve(self, invocation: Any) -> Any:
        return self.fn(invocation)


Resolvable = Static | Computed


def as_resolvable(value: Any) -> Resolvable | None:
    """Wrap a raw value or callable; ``None`` and resolvables pass through."""
    if value is None or isinstance(value, (Static, Computed)):
        return value
    if callable(value):
        return Computed(fn=value)
    return Static(value=value)


class ServerConfig(BaseModel):
    """Connection details of a Jenkins server; any field may be absent."""

    model_config = ConfigDict(frozen=True)

    url: str | None = None
    user: str | None = None
    password: str | None = None


class JenkinsRegistration(BaseModel):
    """Configuration of one Jenkins goal fulfillment.

    Attributes
    ----------
    job:
        Job name or function of the invocation. Defaults to the name of
        the triggering repository.
    converge_only:
        When ``True`` only the job definition is reconciled; no build is
        started.
    parameters:
        Build parameters or function of the invocation.
    definition:
        Job ``config.xml`` or function of the invocation. Absent means
        the job definition is not managed.
    server:
        Jenkins server connection; absent fields fall back to the host
        configuration and then to ``JenkinsSettings``.
    queue_timeout / build_timeout:
        Optional deadlines (seconds) for queue correlation and the log
        stream wait. ``None`` waits without bound.
    """

    model_config = ConfigDict(frozen=True)

    job: Resolvable | None = None
    converge_only: bool = False
    parameters: Resolvable | None = None
    definition: Resolvable | None = None
    server: ServerConfig = ServerConfig()
    queue_timeout: float | None = None
    build_timeout: float | None = None

    @field_validator("job", "parameters", "definition", mode="before")
    @classmethod
    def _wrap_resolvable(cls, value: Any) -> Any:
        return as_resolvable(value)
