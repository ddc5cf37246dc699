"""Process execution used to ask the host toolchain for its version.

Mirrors the error handling of the HTTP helpers: callers get either the
command's stdout or a single exception type carrying the context.
"""
from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Any, Dict, Optional

from constants import Constants
from common.experiments import Experiments
from common.logging_utils import Timer, extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


class HelperSubprocessFailed(Exception):
    """A helper command could not be run or exited unsuccessfully."""

    def __init__(self, message: str, error_context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_context = error_context or {}


def _effective_timeout(timeout: Optional[float], experiments=None) -> Optional[float]:
    if timeout is not None:
        return timeout
    if (experiments or Experiments).enabled("enable_shared_helpers_command_timeout"):
        return Constants.SHELL_COMMAND_TIMEOUT_SEC
    return None


def run_shell_command(
    command: str,
    *,
    fingerprint: Optional[str] = None,
    timeout: Optional[float] = None,
    experiments=None,
) -> str:
    """Run a command without a shell and return its stdout.

    Args:
        command: Command line, split with shlex.
        fingerprint: Stable label for the call used in log records.
        timeout: Seconds before the command is abandoned. Defaults to
            Constants.SHELL_COMMAND_TIMEOUT_SEC when the
            ``enable_shared_helpers_command_timeout`` flag is on.
        experiments: Feature-flag provider with ``enabled(name)``. Defaults
            to the global ``Experiments``.

    Returns:
        Captured stdout.

    Raises:
        HelperSubprocessFailed: Missing executable, timeout or non-zero exit.
    """
    context = {"command": command, "fingerprint": fingerprint or command}
    args = shlex.split(command)
    effective_timeout = _effective_timeout(timeout, experiments)

    with Timer() as t:
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=effective_timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise HelperSubprocessFailed(f"Executable not found: {args[0] if args else command}", context) from exc
        except subprocess.TimeoutExpired as exc:
            raise HelperSubprocessFailed(
                f"Command timed out after {effective_timeout}s: {command}", context
            ) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Shell command finished",
            extra=extra_context(
                event="shell_command",
                component="shell",
                fingerprint=context["fingerprint"],
                return_code=result.returncode,
                duration_ms=t.duration_ms(),
            ),
        )

    if result.returncode != 0:
        message = (result.stderr or result.stdout or "").strip() or f"exit status {result.returncode}"
        raise HelperSubprocessFailed(message, {**context, "return_code": result.returncode})

    return result.stdout
