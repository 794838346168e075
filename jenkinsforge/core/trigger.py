"""Trigger-correlator — turns a queued build request into a running build.

Jenkins accepts a build request into its queue long before the build
has a number. ``trigger_build`` submits the request and then polls the
queue item at a fixed interval until an executable with a number is
assigned.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from jenkinsforge.bridge.jenkins_client import JenkinsClient
from jenkinsforge.errors import JenkinsTimeoutError, QueueItemCancelledError
from jenkinsforge.models.builds import BuildReference

logger = logging.getLogger(__name__)

QUEUE_POLL_INTERVAL = 0.5


def trigger_build(
    client: JenkinsClient,
    job_name: str,
    parameters: dict[str, str] | None,
    *,
    poll_interval: float = QUEUE_POLL_INTERVAL,
    timeout: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> BuildReference | None:
    """Trigger *job_name* and wait until the build is running.

    Returns ``None`` when the server did not queue the request (no queue
    id), in which case the queue is never polled.

    Raises
    ------
    QueueItemCancelledError
        If the queue item is cancelled before a build is assigned.
    JenkinsTimeoutError
        If *timeout* seconds pass without a build being assigned.
    """
    queue_id = client.build_job(job_name, parameters)
    if queue_id is None:
        logger.info("Jenkins did not queue a build of %s", job_name)
        return None

    logger.info("Jenkins job %s queued as item %d", job_name, queue_id)
    deadline = None if timeout is None else clock() + timeout
    polls = 0

    while True:
        item = client.get_queue_item(queue_id)
        polls += 1

        if item and item.get("cancelled"):
            raise QueueItemCancelledError(
                f"Queue item {queue_id} for Jenkins job '{job_name}' was cancelled"
            )

        executable = (item or {}).get("executable") or {}
        number = executable.get("number")
        if number:
            logger.info(
                "Jenkins job %s queue item %d resolved to build #%s after %d polls",
                job_name,
                queue_id,
                number,
                polls,
            )
            return BuildReference(number=int(number), url=executable.get("url") or "")

        logger.debug("Queue item %d not yet running (poll %d)", queue_id, polls)
        if deadline is not None and clock() >= deadline:
            raise JenkinsTimeoutError(
                f"Timed out after {timeout}s waiting for queue item {queue_id} "
                f"of Jenkins job '{job_name}'"
            )
        sleep(poll_interval)
