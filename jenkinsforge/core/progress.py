"""Progress sink protocol, phase framing and phase detection.

Every discrete phase announced to the user is framed by a ``/--`` line
and a ``\\--`` line. Downstream phase detection matches on the content
lines, so the framing and wording here are part of the contract.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

BLOCK_OPEN = "/--"
BLOCK_CLOSE = "\\--"


@runtime_checkable
class ProgressLog(Protocol):
    """Destination for human-readable execution narration."""

    def write(self, text: str) -> None:
        """Append *text* to the log."""
        ...


class InMemoryProgressLog:
    """Progress log that keeps every written chunk in order."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def write(self, text: str) -> None:
        self.lines.append(text)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def write_block(log: ProgressLog, *lines: str) -> None:
    """Write *lines* to *log* wrapped in the ``/--`` ... ``\\--`` frame."""
    log.write(BLOCK_OPEN)
    for line in lines:
        log.write(line)
    log.write(BLOCK_CLOSE)


# ---------------------------------------------------------------------------
# Phase detection
# ---------------------------------------------------------------------------


class ProgressTest(BaseModel):
    """Maps a log line pattern to a goal phase.

    ``phase`` may reference pattern groups (``\\1``), which are expanded
    from the match.
    """

    model_config = ConfigDict(frozen=True)

    pattern: re.Pattern[str]
    phase: str

    def match(self, line: str) -> str | None:
        found = self.pattern.search(line)
        if found is None:
            return None
        return found.expand(self.phase)


JENKINS_PROGRESS_TESTS: list[ProgressTest] = [
    ProgressTest(
        pattern=re.compile(r"Starting Jenkins job", re.IGNORECASE),
        phase="queued",
    ),
    ProgressTest(
        pattern=re.compile(r"Jenkins job '.*' started", re.IGNORECASE),
        phase="started",
    ),
    ProgressTest(
        pattern=re.compile(r"\[Pipeline\] \{ \((?:Declarative: )?(.*)\)", re.IGNORECASE),
        phase=r"\1",
    ),
    ProgressTest(
        pattern=re.compile(r"Jenkins job '.*' completed with", re.IGNORECASE),
        phase="completed",
    ),
]


def report_progress(
    line: str, tests: list[ProgressTest] | None = None
) -> str | None:
    """Return the phase of the first test matching *line*, if any."""
    for test in tests if tests is not None else JENKINS_PROGRESS_TESTS:
        phase = test.match(line)
        if phase is not None:
            return phase
    return None
