"""jenkinsforge: run and monitor Jenkins jobs as delivery-pipeline goals.

A Jenkins goal reconciles the job definition, triggers a build,
correlates the queued request to a numbered build, streams its console
output to the goal's progress log and maps the result onto the goal
state, while reporting build status to the status webhook.
"""

__version__ = "0.1.0"
__description__ = "Jenkins job execution goal for delivery pipelines"

from jenkinsforge.core.executor import execute_jenkins
from jenkinsforge.goal import JenkinsGoal, jenkins
from jenkinsforge.models.registration import JenkinsRegistration

__all__ = [
    "JenkinsGoal",
    "JenkinsRegistration",
    "execute_jenkins",
    "jenkins",
    "__version__",
]
