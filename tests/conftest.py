"""Shared test fixtures for jenkinsforge."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest

from jenkinsforge.config import JenkinsSettings
from jenkinsforge.core.progress import InMemoryProgressLog
from jenkinsforge.errors import JenkinsRemoteError
from jenkinsforge.models.builds import BuildReference, BuildStatus
from jenkinsforge.models.invocation import GoalInvocation, RepoRef
from jenkinsforge.routing.status_reporter import BuildStatusReporter


# ---------------------------------------------------------------------------
# In-memory Jenkins
# ---------------------------------------------------------------------------


class FakeLogStream:
    """Log stream that replays scripted events when started."""

    def __init__(
        self,
        chunks: list[str],
        errors: list[Exception],
        *,
        emit_end: bool = True,
        threaded: bool = False,
    ) -> None:
        self._chunks = chunks
        self._errors = errors
        self._emit_end = emit_end
        self._threaded = threaded
        self._listeners: dict[str, list[Callable[..., None]]] = {
            "data": [],
            "error": [],
            "end": [],
        }
        self.stopped = False
        self.joined = False
        self.thread: threading.Thread | None = None

    def on(self, event: str, callback: Callable[..., None]) -> FakeLogStream:
        self._listeners[event].append(callback)
        return self

    def start(self) -> None:
        if self._threaded:
            self.thread = threading.Thread(target=self._replay)
            self.thread.start()
        else:
            self._replay()

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        self.joined = True
        if self.thread is not None:
            self.thread.join(timeout)

    def _replay(self) -> None:
        for exc in self._errors:
            for callback in self._listeners["error"]:
                callback(exc)
        for chunk in self._chunks:
            for callback in self._listeners["data"]:
                callback(chunk)
        if self._emit_end:
            for callback in self._listeners["end"]:
                callback()


class FakeJenkinsClient:
    """Scripted stand-in for the Jenkins remote API.

    ``queue_items`` is consumed one entry per poll; the last entry repeats.
    Every call is recorded in ``calls`` as ``(method, *args)``.
    """

    def __init__(
        self,
        *,
        existing_jobs: dict[str, str] | None = None,
        queue_id: int | None = 42,
        queue_items: list[dict[str, Any] | None] | None = None,
        build_detail: dict[str, Any] | None = None,
        log_chunks: list[str] | None = None,
        log_errors: list[Exception] | None = None,
        emit_end: bool = True,
        threaded_log: bool = False,
        fail_on: str | None = None,
    ) -> None:
        self.jobs: dict[str, str] = dict(existing_jobs or {})
        self.queue_id = queue_id
        self.queue_items = list(
            queue_items
            if queue_items is not None
            else [{"executable": {"number": 7, "url": "https://ci.example.com/job/app/7/"}}]
        )
        self.build_detail = build_detail or {
            "result": "SUCCESS",
            "url": "https://ci.example.com/job/app/7/",
        }
        self.log_chunks = log_chunks if log_chunks is not None else ["Started\n", "Finished\n"]
        self.log_errors = log_errors or []
        self.emit_end = emit_end
        self.threaded_log = threaded_log
        self.fail_on = fail_on
        self.calls: list[tuple[Any, ...]] = []
        self.streams: list[FakeLogStream] = []
        self.closed = False

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        if self.fail_on == method:
            raise JenkinsRemoteError(f"{method} failed", status_code=500)

    def methods(self) -> list[str]:
        return [call[0] for call in self.calls]

    def job_exists(self, name: str) -> bool:
        self._record("job_exists", name)
        return name in self.jobs

    def create_job(self, name: str, config_xml: str) -> None:
        self._record("create_job", name, config_xml)
        self.jobs[name] = config_xml

    def reconfigure_job(self, name: str, config_xml: str) -> None:
        self._record("reconfigure_job", name, config_xml)
        self.jobs[name] = config_xml

    def build_job(self, name: str, parameters: dict[str, str] | None = None) -> int | None:
        self._record("build_job", name, parameters)
        return self.queue_id

    def get_queue_item(self, queue_id: int) -> dict[str, Any] | None:
        self._record("get_queue_item", queue_id)
        if len(self.queue_items) > 1:
            return self.queue_items.pop(0)
        return self.queue_items[0]

    def get_build(self, name: str, number: int) -> dict[str, Any]:
        self._record("get_build", name, number)
        return self.build_detail

    def log_stream(self, name: str, number: int) -> FakeLogStream:
        self._record("log_stream", name, number)
        stream = FakeLogStream(
            self.log_chunks,
            self.log_errors,
            emit_end=self.emit_end,
            threaded=self.threaded_log,
        )
        self.streams.append(stream)
        return stream

    def close(self) -> None:
        self.closed = True


class RecordingReporter(BuildStatusReporter):
    """Status reporter that records reports instead of posting them."""

    def __init__(self) -> None:
        super().__init__("https://status.example.com", enabled=False)
        self.reports: list[tuple[BuildStatus, BuildReference]] = []

    def report(
        self,
        status: BuildStatus,
        build: BuildReference,
        invocation: GoalInvocation,
    ) -> bool:
        self.reports.append((status, build))
        return super().report(status, build, invocation)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_client() -> Callable[..., FakeJenkinsClient]:
    """Factory fixture: build a FakeJenkinsClient with overrides."""

    def _factory(**overrides: Any) -> FakeJenkinsClient:
        return FakeJenkinsClient(**overrides)

    return _factory


@pytest.fixture
def client(make_client: Callable[..., FakeJenkinsClient]) -> FakeJenkinsClient:
    """Convenience: a FakeJenkinsClient with the default happy-path script."""
    return make_client()


@pytest.fixture
def reporter() -> RecordingReporter:
    """Provide a recording build-status reporter."""
    return RecordingReporter()


@pytest.fixture
def progress_log() -> InMemoryProgressLog:
    """Provide an empty in-memory progress log."""
    return InMemoryProgressLog()


@pytest.fixture
def make_invocation(progress_log: InMemoryProgressLog) -> Callable[..., GoalInvocation]:
    """Factory fixture: build a GoalInvocation with sensible defaults."""

    def _factory(**overrides: Any) -> GoalInvocation:
        defaults: dict[str, Any] = {
            "repo": RepoRef(owner="acme", name="app"),
            "sha": "0123456789abcdef",
            "branch": "main",
            "workspace_id": "T1234",
            "progress_log": progress_log,
        }
        defaults.update(overrides)
        return GoalInvocation(**defaults)

    return _factory


@pytest.fixture
def invocation(make_invocation: Callable[..., GoalInvocation]) -> GoalInvocation:
    """Convenience: a ready-made GoalInvocation for repository acme/app."""
    return make_invocation()


@pytest.fixture
def settings() -> JenkinsSettings:
    """Provide settings with a server url and no environment influence."""
    return JenkinsSettings(
        _env_file=None,
        jenkins_url="https://ci.example.com",
        jenkins_user="bot",
        jenkins_password="secret",
        queue_poll_interval=0.0,
        webhook_enabled=False,
    )


@pytest.fixture
def build_ref() -> BuildReference:
    """A running build of job ``app``."""
    return BuildReference(number=7, url="https://ci.example.com/job/app/7/")
