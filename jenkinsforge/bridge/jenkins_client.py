"""Jenkins client bridge — the remote job server behind a narrow protocol.

Bridge boundary
---------------
Goal execution depends only on the ``JenkinsClient`` protocol: job
existence, create, reconfigure, trigger, queue lookup, build detail and
a live log stream. ``HttpJenkinsClient`` implements it against the
Jenkins REST API with ``httpx``; tests substitute an in-memory fake.

Log streaming
-------------
Jenkins exposes console output through ``logText/progressiveText``.
``ProgressiveLogStream`` polls it on a background thread and emits
``data`` for each new chunk, ``error`` for failed polls (the stream keeps
going) and ``end`` once Jenkins reports no more data. Remote failures are retried;
any other failure (a raising listener, a closed client) is emitted as
``error`` and ends the stream so a waiter is always released.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable
from types import TracebackType
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from jenkinsforge.errors import JenkinsRemoteError

logger = logging.getLogger(__name__)

_QUEUE_ID_RE = re.compile(r"/queue/item/(\d+)")

LOG_EVENTS = ("data", "error", "end")


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class LogStream(Protocol):
    """A subscription to a build's console output."""

    def on(self, event: str, callback: Callable[..., None]) -> LogStream:
        """Register *callback* for ``data``, ``error`` or ``end``."""
        ...

    def start(self) -> None:
        """Begin delivering events."""
        ...

    def stop(self) -> None:
        """Stop delivering events; no ``end`` is emitted afterwards."""
        ...

    def join(self, timeout: float | None = None) -> None:
        """Wait for the producer to finish after ``end`` or ``stop``."""
        ...


@runtime_checkable
class JenkinsClient(Protocol):
    """Capabilities of the remote job server used by goal execution."""

    def job_exists(self, name: str) -> bool: ...

    def create_job(self, name: str, config_xml: str) -> None: ...

    def reconfigure_job(self, name: str, config_xml: str) -> None: ...

    def build_job(
        self, name: str, parameters: dict[str, str] | None = None
    ) -> int | None:
        """Queue a build; return the queue id, or ``None`` if not queued."""
        ...

    def get_queue_item(self, queue_id: int) -> dict[str, Any] | None: ...

    def get_build(self, name: str, number: int) -> dict[str, Any]: ...

    def log_stream(self, name: str, number: int) -> LogStream: ...

    def close(self) -> None: ...


def job_path(name: str) -> str:
    """Return the URL path of a job; ``/`` in *name* separates folders.

    >>> job_path("tools/app")
    'job/tools/job/app'
    """
    return "/".join(f"job/{quote(part, safe='')}" for part in name.split("/") if part)


def queue_id_from_location(location: str | None) -> int | None:
    """Extract the queue id from a trigger response ``Location`` header."""
    if not location:
        return None
    found = _QUEUE_ID_RE.search(location)
    return int(found.group(1)) if found else None


# ---------------------------------------------------------------------------
# Log stream
# ---------------------------------------------------------------------------


class ProgressiveLogStream:
    """Polls ``logText/progressiveText`` and emits events on a thread.

    Parameters
    ----------
    client:
        The client used to fetch log chunks.
    name / number:
        The job and build whose console output is streamed.
    poll_interval:
        Seconds to wait between chunk requests while the build runs.
    """

    def __init__(
        self,
        client: HttpJenkinsClient,
        name: str,
        number: int,
        *,
        poll_interval: float = 1.0,
    ) -> None:
        self._client = client
        self._name = name
        self._number = number
        self._poll_interval = poll_interval
        self._listeners: dict[str, list[Callable[..., None]]] = {
            event: [] for event in LOG_EVENTS
        }
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def on(self, event: str, callback: Callable[..., None]) -> ProgressiveLogStream:
        if event not in self._listeners:
            raise ValueError(f"Unknown log stream event: {event!r}")
        self._listeners[event].append(callback)
        return self

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run,
            name=f"jenkins-log-{self._name}-{self._number}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners[event]):
            callback(*args)

    def _run(self) -> None:
        try:
            self._poll()
        except Exception as exc:
            logger.warning(
                "Log stream of %s #%d failed: %s",
                self._name,
                self._number,
                exc,
                exc_info=True,
            )
            try:
                self._emit("error", exc)
            except Exception:
                logger.exception("Log stream error listener failed")
            self._end()

    def _poll(self) -> None:
        offset = 0
        while not self._stopped.is_set():
            try:
                text, offset, more = self._client.fetch_log_chunk(
                    self._name, self._number, offset
                )
            except JenkinsRemoteError as exc:
                logger.debug(
                    "Log poll failed for %s #%d: %s", self._name, self._number, exc
                )
                self._emit("error", exc)
                self._stopped.wait(self._poll_interval)
                continue

            if text and not self._stopped.is_set():
                self._emit("data", text)
            if not more:
                self._end()
                return
            self._stopped.wait(self._poll_interval)

    def _end(self) -> None:
        if not self._stopped.is_set():
            self._emit("end")


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


class HttpJenkinsClient:
    """Jenkins REST client with connection pooling and CSRF crumb support.

    Parameters
    ----------
    base_url:
        Jenkins root URL. Credentials embedded as URL userinfo are used
        for HTTP basic auth.
    timeout:
        Per-request timeout in seconds.
    log_poll_interval:
        Delay between progressive log requests.
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        log_poll_interval: float = 1.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        url = httpx.URL(base_url)
        auth = httpx.BasicAuth(url.username, url.password) if url.username else None
        self._log_poll_interval = log_poll_interval
        self._crumb: dict[str, str] | None = None
        self._client = httpx.Client(
            base_url=base_url,
            auth=auth,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        logger.debug("HttpJenkinsClient created for %s", url.host)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpJenkinsClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        allow: tuple[int, ...] = (),
        **kwargs: Any,
    ) -> httpx.Response:
        if method == "POST":
            headers = dict(kwargs.pop("headers", None) or {})
            headers.update(self._crumb_header())
            kwargs["headers"] = headers
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise JenkinsRemoteError(f"{method} {path} failed: {exc}") from exc

        if response.status_code in allow or response.is_success:
            return response
        raise JenkinsRemoteError(
            f"{method} {path} returned HTTP {response.status_code}: "
            f"{response.text[:500]}",
            status_code=response.status_code,
        )

    def _crumb_header(self) -> dict[str, str]:
        if self._crumb is None:
            self._crumb = {}
            try:
                response = self._client.get("crumbIssuer/api/json")
            except httpx.HTTPError as exc:
                logger.debug("Crumb issuer unreachable: %s", exc)
                return self._crumb
            if response.is_success:
                data = response.json()
                field = data.get("crumbRequestField")
                crumb = data.get("crumb")
                if field and crumb:
                    self._crumb = {field: crumb}
                    logger.debug("CSRF crumb detected: %s", field)
        return self._crumb

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def job_exists(self, name: str) -> bool:
        response = self._request("GET", f"{job_path(name)}/api/json", allow=(404,))
        return response.status_code != 404

    def create_job(self, name: str, config_xml: str) -> None:
        parent, _, leaf = name.rstrip("/").rpartition("/")
        prefix = f"{job_path(parent)}/" if parent else ""
        self._request(
            "POST",
            f"{prefix}createItem",
            params={"name": leaf},
            content=config_xml.encode("utf-8"),
            headers={"Content-Type": "application/xml; charset=utf-8"},
        )

    def reconfigure_job(self, name: str, config_xml: str) -> None:
        self._request(
            "POST",
            f"{job_path(name)}/config.xml",
            content=config_xml.encode("utf-8"),
            headers={"Content-Type": "application/xml; charset=utf-8"},
        )

    def build_job(
        self, name: str, parameters: dict[str, str] | None = None
    ) -> int | None:
        if parameters:
            response = self._request(
                "POST", f"{job_path(name)}/buildWithParameters", data=parameters
            )
        else:
            response = self._request("POST", f"{job_path(name)}/build")
        return queue_id_from_location(response.headers.get("Location"))

    # ------------------------------------------------------------------
    # Queue and builds
    # ------------------------------------------------------------------

    def get_queue_item(self, queue_id: int) -> dict[str, Any] | None:
        response = self._request("GET", f"queue/item/{queue_id}/api/json", allow=(404,))
        if response.status_code == 404:
            return None
        return response.json()

    def get_build(self, name: str, number: int) -> dict[str, Any]:
        return self._request("GET", f"{job_path(name)}/{number}/api/json").json()

    def fetch_log_chunk(
        self, name: str, number: int, start: int
    ) -> tuple[str, int, bool]:
        """Return ``(text, next_start, more_data)`` from the progressive log."""
        response = self._request(
            "GET",
            f"{job_path(name)}/{number}/logText/progressiveText",
            params={"start": start},
        )
        next_start = start + len(response.content)
        text_size = response.headers.get("X-Text-Size")
        if text_size is not None:
            try:
                next_start = int(text_size)
            except ValueError:
                logger.warning(
                    "Ignoring malformed X-Text-Size %r for %s #%d", text_size, name, number
                )
        more = response.headers.get("X-More-Data", "").lower() == "true"
        return response.text, next_start, more

    def log_stream(self, name: str, number: int) -> ProgressiveLogStream:
        return ProgressiveLogStream(
            self, name, number, poll_interval=self._log_poll_interval
        )
