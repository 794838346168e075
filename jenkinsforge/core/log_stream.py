"""Log streamer — forwards live console output until the build ends."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable

from jenkinsforge.bridge.jenkins_client import JenkinsClient
from jenkinsforge.errors import JenkinsTimeoutError
from jenkinsforge.models.builds import BuildReference

logger = logging.getLogger(__name__)


def serialize_error(exc: BaseException) -> str:
    """Render a stream error as a JSON diagnostic line."""
    return json.dumps({"type": type(exc).__name__, "message": str(exc)})


def stream_build_log(
    client: JenkinsClient,
    job_name: str,
    build: BuildReference,
    on_line: Callable[[str], None],
    *,
    timeout: float | None = None,
) -> None:
    """Forward the build's console output to *on_line* until end-of-stream.

    Chunks are forwarded verbatim in arrival order. Stream errors are
    forwarded as serialized diagnostics and do not end the wait; only
    the stream's ``end`` event does.

    Raises
    ------
    JenkinsTimeoutError
        If *timeout* seconds pass without an end-of-stream signal. The
        stream is stopped and its producer joined first.
    """
    finished = threading.Event()

    stream = client.log_stream(job_name, build.number)
    stream.on("data", on_line)
    stream.on("error", lambda exc: on_line(serialize_error(exc)))
    stream.on("end", finished.set)
    stream.start()
    logger.debug("Streaming log of %s #%d", job_name, build.number)

    ended = finished.wait(timeout)
    if not ended:
        stream.stop()
    # No chunk may reach the sink, or use the client, after this returns.
    stream.join()
    if not ended:
        raise JenkinsTimeoutError(
            f"Timed out after {timeout}s waiting for Jenkins job "
            f"'{job_name}' build #{build.number} to finish"
        )
    logger.debug("Log stream of %s #%d ended", job_name, build.number)
