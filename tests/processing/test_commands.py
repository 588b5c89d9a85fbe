"""
Tests for the external command runner.
"""

import subprocess
from unittest.mock import patch

import pytest

from mediaboard.core.exceptions import EngineUnavailableError
from mediaboard.processing.commands import CommandResult, CommandRunner


@pytest.fixture
def resolved():
    with patch("mediaboard.processing.commands.shutil.which", return_value="/usr/bin/convert") as which:
        yield which


class TestCommandRunner:

    def test_default_timeout(self):
        assert CommandRunner().timeout == 60.0

    def test_missing_binary(self):
        with patch("mediaboard.processing.commands.shutil.which", return_value=None):
            with pytest.raises(EngineUnavailableError) as exc_info:
                CommandRunner().run("convert", ["a"])

        assert exc_info.value.binary == "convert"

    def test_runs_argument_list_without_shell(self, resolved, temp_dir):
        """Arguments are passed as a list, so spaces need no quoting."""
        src = temp_dir / "with space.png"
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="ok", stderr="")

        with patch("mediaboard.processing.commands.subprocess.run", return_value=completed) as run:
            result = CommandRunner(timeout=5).run("convert", [src, "-strip"])

        run.assert_called_once_with(
            ["/usr/bin/convert", str(src), "-strip"],
            capture_output=True,
            text=True,
            timeout=5
        )
        assert result == CommandResult(returncode=0, stdout="ok", stderr="")
        assert result.ok

    def test_unbounded_when_timeout_is_none(self, resolved):
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

        with patch("mediaboard.processing.commands.subprocess.run", return_value=completed) as run:
            CommandRunner(timeout=None).run("convert", [])

        assert run.call_args.kwargs['timeout'] is None

    def test_nonzero_exit(self, resolved):
        completed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="bad input")

        with patch("mediaboard.processing.commands.subprocess.run", return_value=completed):
            result = CommandRunner().run("convert", [])

        assert result.returncode == 1
        assert result.stderr == "bad input"
        assert not result.ok

    def test_timeout(self, resolved):
        expired = subprocess.TimeoutExpired(cmd="convert", timeout=1, output=b"partial", stderr=None)

        with patch("mediaboard.processing.commands.subprocess.run", side_effect=expired):
            result = CommandRunner(timeout=1).run("convert", [])

        assert result.timed_out is True
        assert result.stdout == "partial"
        assert not result.ok

    def test_binary_vanishes_before_start(self, resolved):
        with patch("mediaboard.processing.commands.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(EngineUnavailableError):
                CommandRunner().run("convert", [])

    def test_which(self):
        with patch("mediaboard.processing.commands.shutil.which", return_value="/bin/epeg") as which:
            assert CommandRunner.which("epeg") == "/bin/epeg"

        which.assert_called_once_with("epeg")
