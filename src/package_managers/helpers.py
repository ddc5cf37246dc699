"""Version inference helpers for npm, yarn and pnpm.

Two collaborators of the resolver live here: the numeric major-version
inference derived from lockfile fingerprints, and the installed-version
lookup that asks corepack for the real tool version.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Optional, Tuple

from constants import Constants
from common.experiments import Experiments
from common.logging_utils import extra_context
from common.shell import HelperSubprocessFailed, run_shell_command
from package_managers.lockfile_fingerprint import (
    npm_lockfile_version,
    pnpm_lockfile_version,
    yarn_berry_metadata,
    yarn_lockfile_version,
)
from versioning.models import DependencyFile, PackageManagerName

logger = logging.getLogger(__name__)

NPM_V6 = 6
NPM_V8 = 8
NPM_DEFAULT_VERSION = NPM_V8

YARN_V1 = 1
YARN_V3 = 3
YARN_DEFAULT_VERSION = YARN_V3

PNPM_V7 = 7
PNPM_V8 = 8
PNPM_V9 = 9
PNPM_DEFAULT_VERSION = PNPM_V9
PNPM_FALLBACK_VERSION = 6


class ToolchainUnavailableError(RuntimeError):
    """Neither the installed toolchain nor any fallback produced a version."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unable to determine the installed version of {name}")


def _content(lockfile: Optional[DependencyFile]) -> Optional[str]:
    content = lockfile.content if lockfile is not None else None
    if content is None or not content.strip():
        return None
    return content


def npm_version_numeric(lockfile: Optional[DependencyFile], experiments=None) -> int:
    """Infer the npm major version from package-lock.json.

    Format 1 was written by npm 6; formats 2 and later by npm 7+, for which
    npm 8 is assumed. With ``npm_fallback_version_above_v6`` on in
    ``experiments`` (the global ``Experiments`` when omitted), npm 6 is never
    returned.
    """
    flags = experiments or Experiments
    content = _content(lockfile)
    if content is None:
        return NPM_DEFAULT_VERSION

    lockfile_version = npm_lockfile_version(content)
    if lockfile_version is None:
        return NPM_DEFAULT_VERSION

    if lockfile_version >= 2:
        detected = NPM_V8
    elif lockfile_version >= 1:
        detected = NPM_V6
    else:
        detected = NPM_DEFAULT_VERSION

    if detected == NPM_V6 and flags.enabled("npm_fallback_version_above_v6"):
        return NPM_DEFAULT_VERSION
    return detected


def yarn_version_numeric(lockfile: Optional[DependencyFile], experiments=None) -> int:  # pylint: disable=unused-argument
    """Infer the yarn major version from yarn.lock."""
    content = _content(lockfile)
    if content is None:
        return YARN_DEFAULT_VERSION
    if yarn_lockfile_version(content) is not None:
        return YARN_V1
    if yarn_berry_metadata(content) is not None:
        return YARN_DEFAULT_VERSION
    return YARN_V1


def _version_tuple(version: str) -> Tuple[int, ...]:
    parts = [int(part) for part in version.split(".") if part.isdigit()]
    # "9" compares as (9, 0)
    parts.extend([0] * (2 - len(parts)))
    return tuple(parts)


def pnpm_version_numeric(lockfile: Optional[DependencyFile], experiments=None) -> int:  # pylint: disable=unused-argument
    """Infer the pnpm major version from pnpm-lock.yaml's lockfileVersion."""
    content = _content(lockfile)
    if content is None:
        return PNPM_DEFAULT_VERSION

    raw = pnpm_lockfile_version(content)
    if raw is None:
        return PNPM_FALLBACK_VERSION

    version = _version_tuple(raw)
    if version >= (9, 0):
        return PNPM_V9
    if version >= (6, 0):
        return PNPM_V8
    if version >= (5, 4):
        return PNPM_V7
    return PNPM_FALLBACK_VERSION


_NUMERIC = {
    PackageManagerName.NPM: npm_version_numeric,
    PackageManagerName.YARN: yarn_version_numeric,
    PackageManagerName.PNPM: pnpm_version_numeric,
}


def version_numeric(name, lockfile: Optional[DependencyFile], experiments=None) -> int:
    """Dispatch to the numeric inference for ``name``.

    ``experiments`` is the feature-flag provider consulted by the inference;
    the global ``Experiments`` is used when it is omitted.

    Raises:
        ValueError: ``name`` is not a known package manager.
    """
    manager = PackageManagerName.parse(name)
    if manager is None:
        raise ValueError(f"Unknown package manager: {name}")
    return _NUMERIC[manager](lockfile, experiments=experiments)


def package_manager_version(
    name,
    run_command: Optional[Callable[..., str]] = None,
    experiments=None,
) -> Optional[str]:
    """Ask corepack for the installed version of ``name``.

    ``experiments`` is forwarded to ``run_shell_command`` when no
    ``run_command`` is given.

    Returns:
        The stripped command output, or None when the command failed.
    """
    manager = PackageManagerName.parse(name)
    if manager is None:
        raise ValueError(f"Unknown package manager: {name}")

    runner = run_command or functools.partial(run_shell_command, experiments=experiments)
    command = f"{Constants.COREPACK_COMMAND} {manager.value} -v"
    try:
        output = runner(command, fingerprint=command)
    except HelperSubprocessFailed as exc:
        logger.info(
            "Version lookup for %s failed: %s",
            manager.value,
            exc,
            extra=extra_context(event="version_lookup", outcome="failed", package_manager=manager.value),
        )
        return None
    stripped = output.strip() if output else ""
    return stripped or None
