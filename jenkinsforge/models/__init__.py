"""jenkinsforge data models — all Pydantic v2, all frozen (immutable)."""

from jenkinsforge.models.builds import (
    BuildOutcome,
    BuildReference,
    BuildResult,
    BuildStatus,
)
from jenkinsforge.models.goals import (
    ExecuteGoalResult,
    ExternalUrl,
    GoalDefinition,
    GoalDetails,
    GoalState,
)
from jenkinsforge.models.invocation import GoalInvocation, RepoRef
from jenkinsforge.models.registration import (
    Computed,
    JenkinsRegistration,
    ServerConfig,
    Static,
)

__all__ = [
    # builds
    "BuildOutcome",
    "BuildReference",
    "BuildResult",
    "BuildStatus",
    # goals
    "ExecuteGoalResult",
    "ExternalUrl",
    "GoalDefinition",
    "GoalDetails",
    "GoalState",
    # invocation
    "GoalInvocation",
    "RepoRef",
    # registration
    "Computed",
    "JenkinsRegistration",
    "ServerConfig",
    "Static",
]
