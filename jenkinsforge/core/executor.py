"""Goal executor — runs one Jenkins goal invocation end to end.

Lifecycle:

    resolve job -> reconcile definition -> trigger + correlate
        -> report started -> stream log -> map outcome -> report terminal

Remote failures propagate to the host unchanged; retrying is the host's
decision (the goal definition is ``retry_feasible``).
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from contextlib import ExitStack
from typing import Any

import httpx

from jenkinsforge.bridge.jenkins_client import HttpJenkinsClient, JenkinsClient
from jenkinsforge.config import JenkinsSettings
from jenkinsforge.core.log_stream import stream_build_log
from jenkinsforge.core.outcome import map_outcome
from jenkinsforge.core.progress import write_block
from jenkinsforge.core.reconciler import reconcile_definition
from jenkinsforge.core.resolver import (
    resolve_definition,
    resolve_job_name,
    resolve_parameters,
)
from jenkinsforge.core.trigger import trigger_build
from jenkinsforge.errors import (
    JenkinsConfigurationError,
    JenkinsRemoteError,
    JenkinsTimeoutError,
)
from jenkinsforge.models.builds import BuildStatus
from jenkinsforge.models.goals import ExecuteGoalResult, ExternalUrl, GoalState
from jenkinsforge.models.invocation import GoalInvocation
from jenkinsforge.models.registration import JenkinsRegistration, ServerConfig
from jenkinsforge.routing.status_reporter import BuildStatusReporter

logger = logging.getLogger(__name__)

ExecuteGoal = Callable[[GoalInvocation], ExecuteGoalResult]
ClientFactory = Callable[[str, JenkinsSettings], JenkinsClient]
ReporterFactory = Callable[[JenkinsSettings], BuildStatusReporter]


def code_line(text: str) -> str:
    """Format *text* as inline code for goal descriptions."""
    return f"`{text}`"


# ---------------------------------------------------------------------------
# Server configuration
# ---------------------------------------------------------------------------


def resolve_server(
    registration: JenkinsRegistration,
    invocation: GoalInvocation,
    settings: JenkinsSettings,
) -> ServerConfig:
    """Merge server fields: registration, then ``sdm.jenkins``, then settings."""
    sdm: Mapping[str, Any] = invocation.configuration.get("sdm") or {}
    host: Mapping[str, Any] = sdm.get("jenkins") or {}
    defaults = settings.server_defaults()
    merged = {
        field: getattr(registration.server, field) or host.get(field) or defaults[field]
        for field in ("url", "user", "password")
    }
    return ServerConfig(**merged)


def server_url(server: ServerConfig) -> str:
    """Return the server URL with user and password embedded as userinfo."""
    if not server.url:
        raise JenkinsConfigurationError(
            "Jenkins server configuration incomplete. "
            "Please configure your server url at 'sdm.jenkins.url'"
        )
    credentials: dict[str, str] = {}
    if server.user:
        credentials["username"] = server.user
    if server.password:
        credentials["password"] = server.password
    if not credentials:
        return server.url
    return str(httpx.URL(server.url).copy_with(**credentials))


def default_client_factory(url: str, settings: JenkinsSettings) -> JenkinsClient:
    return HttpJenkinsClient(
        url,
        timeout=settings.request_timeout,
        log_poll_interval=settings.log_poll_interval,
    )


def default_reporter_factory(settings: JenkinsSettings) -> BuildStatusReporter:
    return BuildStatusReporter(
        settings.webhook_base_url,
        enabled=settings.webhook_enabled,
        timeout=settings.request_timeout,
    )


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


def execute_jenkins(
    registration: JenkinsRegistration,
    *,
    settings: JenkinsSettings | None = None,
    client_factory: ClientFactory | None = None,
    reporter_factory: ReporterFactory | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ExecuteGoal:
    """Return the goal executor for *registration*.

    Parameters
    ----------
    registration:
        Immutable goal configuration.
    settings:
        Process configuration; read from the environment if omitted.
    client_factory:
        Builds the Jenkins client from the credentialed server URL.
    reporter_factory:
        Builds the build-status reporter for one invocation.
    sleep:
        Delay function used between queue polls.
    """
    make_client = client_factory or default_client_factory
    make_reporter = reporter_factory or default_reporter_factory

    def _execute(invocation: GoalInvocation) -> ExecuteGoalResult:
        active = settings or JenkinsSettings()
        url = server_url(resolve_server(registration, invocation, active))

        with ExitStack() as resources:
            client = make_client(url, active)
            resources.callback(client.close)
            reporter = make_reporter(active)
            resources.callback(reporter.close)
            try:
                return _run(registration, invocation, active, client, reporter, sleep)
            except JenkinsRemoteError as exc:
                logger.error("Jenkins goal failed: %s", exc)
                raise

    return _execute


def _timed_out(job_name: str) -> ExecuteGoalResult:
    return ExecuteGoalResult(
        state=GoalState.FAILURE,
        description=f"Jenkins {code_line(job_name)} timed out",
    )


def _run(
    registration: JenkinsRegistration,
    invocation: GoalInvocation,
    settings: JenkinsSettings,
    client: JenkinsClient,
    reporter: BuildStatusReporter,
    sleep: Callable[[float], None],
) -> ExecuteGoalResult:
    log = invocation.progress_log

    job_name = resolve_job_name(registration, invocation)
    parameters = resolve_parameters(registration, invocation)
    definition = resolve_definition(registration, invocation)
    logger.info("Running Jenkins goal for job %s", job_name)

    reconcile_definition(client, job_name, definition, log)

    if registration.converge_only:
        write_block(log, f"Not starting Jenkins job '{job_name}'")
        return ExecuteGoalResult(
            state=GoalState.SUCCESS,
            description=f"Jenkins {code_line(job_name)} converged",
        )

    write_block(
        log,
        f"Starting Jenkins job '{job_name}' with parameters '{json.dumps(parameters or {})}'",
    )

    try:
        build = trigger_build(
            client,
            job_name,
            parameters,
            poll_interval=settings.queue_poll_interval,
            timeout=registration.queue_timeout,
            sleep=sleep,
        )
    except JenkinsTimeoutError as exc:
        logger.warning("%s", exc)
        write_block(log, f"Jenkins job '{job_name}' timed out waiting in the queue")
        return _timed_out(job_name)

    if build is None:
        return ExecuteGoalResult(
            state=GoalState.SUCCESS,
            description=f"Jenkins {code_line(job_name)} triggered",
        )

    write_block(log, f"Jenkins job '{job_name}' started with build id '{build.number}'")
    reporter.report(BuildStatus.STARTED, build, invocation)

    try:
        stream_build_log(
            client, job_name, build, log.write, timeout=registration.build_timeout
        )
    except JenkinsTimeoutError as exc:
        logger.warning("%s", exc)
        write_block(log, f"Jenkins job '{job_name}' timed out")
        reporter.report(BuildStatus.ERROR, build, invocation)
        return _timed_out(job_name)

    outcome = map_outcome(client, job_name, build, log)
    reporter.report(outcome.status, build, invocation)

    return ExecuteGoalResult(
        state=outcome.goal_state,
        description=f"Jenkins {code_line(job_name)} {outcome.status.value}",
        external_urls=[ExternalUrl(label="Log", url=outcome.result_url)],
    )
