"""Dispatcher that runs a job's shell command."""

import subprocess
from typing import Any, Mapping

from .errors import DispatchError
from .models import DispatchResult, Job

TIMEOUT_STATUS = "timeout"


class CommandDispatcher:
    """Runs ``payload["command"]`` in a shell.

    Exit code 0 is a success. A non-zero exit, a timeout or a failure to start
    the process raises :class:`DispatchError`.
    """

    def __init__(self, timeout: float = 300):
        self.timeout = timeout

    def attempt(self, job: Job[Any]) -> DispatchResult:
        command = job.payload.get("command") if isinstance(job.payload, Mapping) else None
        if not command:
            raise DispatchError(f"Job {job.id} has no command")

        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise DispatchError(
                f"Command timeout ({self.timeout:g}s)",
                result=DispatchResult(status=TIMEOUT_STATUS),
            )
        except OSError as e:
            raise DispatchError(f"Command could not start: {e}") from e

        if result.returncode != 0:
            error_msg = result.stderr.strip() or f"Exit code: {result.returncode}"
            raise DispatchError(error_msg)
        return DispatchResult()
