"""
Tests for the adapter protocol, the mock adapter and the docker adapter.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from debian_bridge.adapters.base import ExecutionContext
from debian_bridge.adapters.containers.docker import DockerAdapter
from debian_bridge.adapters.mock import MockAdapter
from debian_bridge.core.models.action import Action, Receipt

_RUN = "debian_bridge.adapters.containers.docker.subprocess.run"


def _ctx(operation: str, timeout=None, **params) -> ExecutionContext:
    return ExecutionContext(
        action=Action(id=f"{operation}:test_hello", operation=operation, params=params),
        timeout=timeout,
    )


def _completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="test-mock")
        receipt = mock.execute(_ctx("build", context_dir="/tmp/x", tag="t"))
        assert receipt.ok
        assert receipt.adapter == "test-mock"
        assert mock.call_count == 1

    def test_version(self):
        assert MockAdapter().execute(_ctx("version")).output == "0.0.0-mock"

    def test_custom_response(self):
        mock = MockAdapter()
        mock.set_response("run", Receipt.success(adapter="mock", action_id="x", output="custom"))
        receipt = mock.execute(_ctx("run", image="i", name="n"))
        assert receipt.output == "custom"
        assert receipt.action_id == "run:test_hello"

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("build", error="Intentional failure")
        receipt = mock.execute(_ctx("build"))
        assert receipt.failed
        assert "Intentional failure" in receipt.error
        assert not receipt.not_found

    def test_set_not_found(self):
        mock = MockAdapter()
        mock.set_failure("delete", error="No such image", not_found=True)
        assert mock.execute(_ctx("delete", image="i")).not_found

    def test_operations_and_reset(self):
        mock = MockAdapter()
        mock.set_failure("run")
        for op in ("build", "run", "delete"):
            mock.execute(_ctx(op))
        assert mock.operations == ["build", "run", "delete"]
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(_ctx("run")).ok

    def test_is_available(self):
        assert MockAdapter().is_available()
        assert not MockAdapter(available=False).is_available()

    def test_repr(self):
        assert repr(MockAdapter()) == "<MockAdapter name='mock'>"


# ── Docker Adapter Tests ─────────────────────────────────────────────


class TestDockerAdapter:
    def test_is_available(self):
        with patch("debian_bridge.adapters.containers.docker.shutil.which", return_value=None):
            assert not DockerAdapter().is_available()
        with patch("debian_bridge.adapters.containers.docker.shutil.which", return_value="/usr/bin/docker"):
            assert DockerAdapter().is_available()

    def test_validate_unknown_operation(self):
        ok, error = DockerAdapter().validate(_ctx("push"))
        assert not ok
        assert "Unknown operation" in error

    def test_validate_missing_params(self):
        with patch(_RUN) as run:
            receipt = DockerAdapter().execute(_ctx("build", tag="t"))
        assert receipt.failed
        assert "context_dir" in receipt.error
        run.assert_not_called()

    def test_build_command(self):
        with patch(_RUN, return_value=_completed(stdout="built\n")) as run:
            receipt = DockerAdapter().execute(
                _ctx("build", timeout=600, context_dir="/cache/build_x", tag="test_hello"),
            )
        assert receipt.ok
        assert receipt.output == "built"
        assert receipt.return_code == 0
        args, kwargs = run.call_args
        assert args[0] == ["docker", "build", "--tag", "test_hello", "/cache/build_x"]
        assert kwargs["timeout"] == 600
        assert kwargs["capture_output"] is True
        assert receipt.command == args[0]

    def test_run_command(self):
        with patch(_RUN, return_value=_completed()) as run:
            DockerAdapter().execute(_ctx(
                "run",
                image="test_hello",
                name="test_hello",
                args=["--env", "DISPLAY"],
                detach=True,
            ))
        assert run.call_args[0][0] == [
            "docker", "run", "--rm", "--name", "test_hello", "--detach",
            "--env", "DISPLAY", "test_hello",
        ]

    def test_run_attached(self):
        with patch(_RUN, return_value=_completed()) as run:
            DockerAdapter().execute(_ctx("run", image="i", name="n", detach=False))
        assert "--detach" not in run.call_args[0][0]

    def test_delete_command(self):
        with patch(_RUN, return_value=_completed()) as run:
            assert DockerAdapter().execute(_ctx("delete", image="test_hello")).ok
        assert run.call_args[0][0] == ["docker", "image", "rm", "--force", "test_hello"]

    def test_delete_not_found(self):
        stderr = "Error response from daemon: No such image: test_hello:latest\n"
        with patch(_RUN, return_value=_completed(1, stderr=stderr)):
            receipt = DockerAdapter().execute(_ctx("delete", image="test_hello"))
        assert receipt.failed
        assert receipt.not_found
        assert receipt.return_code == 1

    def test_delete_other_failure(self):
        stderr = "Cannot connect to the Docker daemon at unix:///var/run/docker.sock"
        with patch(_RUN, return_value=_completed(1, stderr=stderr)):
            receipt = DockerAdapter().execute(_ctx("delete", image="test_hello"))
        assert receipt.failed
        assert not receipt.not_found

    @pytest.mark.parametrize("stderr", [
        "manifest for test_hello:latest not found: manifest unknown",
        "Error response from daemon: pull access denied, repository does not exist or may require 'docker login'",
        "exec: \"hello\": executable file not found in $PATH",
    ])
    def test_other_not_found_messages_are_failures(self, stderr):
        with patch(_RUN, return_value=_completed(1, stderr=stderr)):
            receipt = DockerAdapter().execute(_ctx("delete", image="test_hello"))
        assert receipt.failed
        assert not receipt.not_found

    def test_failure_without_stderr(self):
        with patch(_RUN, return_value=_completed(125)):
            receipt = DockerAdapter().execute(_ctx("run", image="i", name="n"))
        assert receipt.error == "docker run exited with 125"

    def test_timeout(self):
        with patch(_RUN, side_effect=subprocess.TimeoutExpired(cmd="docker", timeout=5)):
            receipt = DockerAdapter().execute(_ctx("build", timeout=5, context_dir="/c", tag="t"))
        assert receipt.failed
        assert "timed out" in receipt.error
        assert receipt.metadata["timeout"] is True

    def test_binary_missing(self):
        with patch(_RUN, side_effect=FileNotFoundError("docker")):
            receipt = DockerAdapter().execute(_ctx("version"))
        assert receipt.failed
        assert "Cannot execute docker" in receipt.error

    def test_version(self):
        with patch(_RUN, return_value=_completed(stdout="27.3.1\n")) as run:
            receipt = DockerAdapter().execute(_ctx("version"))
        assert receipt.output == "27.3.1"
        assert run.call_args[0][0] == ["docker", "version", "--format", "{{.Server.Version}}"]
