"""Unit tests for the job definition create-or-update reconciler."""

from __future__ import annotations

import pytest

from jenkinsforge.core.progress import BLOCK_CLOSE, BLOCK_OPEN
from jenkinsforge.core.reconciler import reconcile_definition
from jenkinsforge.errors import JenkinsRemoteError


class TestReconcileDefinition:
    """Exactly one of create or update is issued when a definition is given."""

    def test_creates_missing_job(self, make_client, progress_log):
        client = make_client()
        assert reconcile_definition(client, "app", "<project/>", progress_log) is True

        assert client.methods() == ["job_exists", "create_job"]
        assert client.jobs["app"] == "<project/>"

    def test_updates_existing_job(self, make_client, progress_log):
        client = make_client(existing_jobs={"app": "<old/>"})
        reconcile_definition(client, "app", "<new/>", progress_log)

        assert client.methods() == ["job_exists", "reconfigure_job"]
        assert client.jobs["app"] == "<new/>"

    def test_no_definition_is_noop(self, client, progress_log):
        assert reconcile_definition(client, "app", None, progress_log) is False
        assert client.calls == []
        assert progress_log.lines == [
            BLOCK_OPEN,
            "Not updating definition of Jenkins job 'app' as no definition was provided.",
            BLOCK_CLOSE,
        ]

    def test_writes_framed_block(self, client, progress_log):
        reconcile_definition(client, "app", "<project/>", progress_log)

        assert progress_log.lines[0] == BLOCK_OPEN
        assert progress_log.lines[1] == "Updating definition of Jenkins job 'app'"
        assert progress_log.lines[-1] == BLOCK_CLOSE

    def test_remote_error_propagates(self, make_client, progress_log):
        client = make_client(fail_on="create_job")
        with pytest.raises(JenkinsRemoteError):
            reconcile_definition(client, "app", "<project/>", progress_log)
        assert progress_log.lines == []
