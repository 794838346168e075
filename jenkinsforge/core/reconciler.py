"""Definition reconciler — create-or-update of a Jenkins job definition."""

from __future__ import annotations

import logging

from jenkinsforge.bridge.jenkins_client import JenkinsClient
from jenkinsforge.core.progress import ProgressLog, write_block

logger = logging.getLogger(__name__)


def reconcile_definition(
    client: JenkinsClient,
    job_name: str,
    definition: str | None,
    progress_log: ProgressLog,
) -> bool:
    """Ensure *job_name* exists on the server with *definition*.

    An existing job is overwritten in place; a missing one is created.
    No-op (apart from the progress block) when *definition* is ``None``.
    Remote errors propagate.

    Returns ``True`` when the definition was written.
    """
    if definition is None:
        write_block(
            progress_log,
            f"Not updating definition of Jenkins job '{job_name}' as no definition was provided.",
        )
        return False

    if client.job_exists(job_name):
        logger.info("Updating definition of existing Jenkins job %s", job_name)
        client.reconfigure_job(job_name, definition)
        action = "Updated"
    else:
        logger.info("Creating Jenkins job %s", job_name)
        client.create_job(job_name, definition)
        action = "Created"

    write_block(
        progress_log,
        f"Updating definition of Jenkins job '{job_name}'",
        f"{action} job definition",
    )
    return True
