"""Unit tests for the jenkins() goal factory."""

from __future__ import annotations

from jenkinsforge.core.progress import report_progress
from jenkinsforge.goal import JENKINS_GOAL_DEFINITION, JenkinsGoal, jenkins
from jenkinsforge.models.goals import GoalDetails, GoalState
from jenkinsforge.models.registration import JenkinsRegistration


class TestJenkinsFactory:
    """jenkins() builds a retryable goal with one fulfillment."""

    def test_string_details(self):
        goal = jenkins("deploy")

        assert isinstance(goal, JenkinsGoal)
        assert goal.definition.display_name == "Jenkins `deploy`"
        assert goal.definition.unique_name.startswith("jenkins-")
        assert goal.definition.retry_feasible is True
        assert goal.definition.environment == JENKINS_GOAL_DEFINITION.environment
        assert len(goal.fulfillments) == 1

    def test_goal_details_model(self):
        goal = jenkins(GoalDetails(display_name="release", unique_name="release-jenkins"))
        assert goal.definition.unique_name == "release-jenkins"
        assert goal.definition.display_name == "Jenkins `release`"

    def test_fulfillment_carries_progress_reporter(self):
        fulfillment = jenkins("deploy").fulfillments[0]
        assert fulfillment.progress_reporter is report_progress
        assert fulfillment.progress_reporter("[Pipeline] { (Test)") == "Test"

    def test_with_registration_adds_fulfillment(self):
        goal = jenkins("deploy").with_registration(
            JenkinsRegistration(job="other"), name="other-job"
        )
        assert [f.name for f in goal.fulfillments][1] == "other-job"
        assert goal.fulfillments[1].registration.job.resolve(None) == "other"

    def test_executor_runs_registration(self, client, reporter, settings, invocation):
        goal = jenkins(
            "deploy",
            JenkinsRegistration(converge_only=True),
            settings=settings,
            client_factory=lambda url, _s: client,
            reporter_factory=lambda _s: reporter,
        )

        result = goal.executor()(invocation)

        assert result.state == GoalState.SUCCESS
        assert result.description == "Jenkins `app` converged"

    def test_repr(self):
        assert "fulfillments=1" in repr(jenkins("deploy"))
