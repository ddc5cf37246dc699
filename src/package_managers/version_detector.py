"""Version detection for a named package manager.

Signals are consulted in a fixed order and the first one that yields a
version wins:

1. the ``packageManager`` field, when it names this manager,
2. a pinned ``engines`` entry for this manager,
3. the major version implied by this manager's lockfile.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from common.logging_utils import extra_context
from package_managers.detector import split_package_manager_field
from package_managers.helpers import version_numeric
from versioning.models import (
    DependencyFile,
    DetectedVersion,
    LockfileSet,
    Manifest,
    PackageManagerName,
    VersionSource,
)
from versioning.requirement import VERSION_PATTERN, InvalidConstraint, parse_requirement

logger = logging.getLogger(__name__)

_PLAIN_VERSION_RE = re.compile(r"^" + VERSION_PATTERN + r"$")
_COREPACK_HASH_RE = re.compile(r"\+sha\d+\.[0-9A-Fa-f]+$")

_NOT_FOUND = object()


class VersionDetector:
    """Detects the version of one package manager from an input snapshot."""

    def __init__(
        self,
        manifest: Manifest,
        lockfiles: LockfileSet,
        numeric_inference: Optional[Callable[..., Optional[int]]] = None,
    ):
        self._manifest = manifest
        self._lockfiles = lockfiles
        self._version_numeric = numeric_inference or version_numeric

    def detect(self, name) -> Optional[DetectedVersion]:
        manager = PackageManagerName.parse(name)
        if manager is None:
            logger.debug("Not a known package manager: %r", name)
            return None

        from_field = self._from_package_manager_field(manager)
        if from_field is None:
            return None
        if from_field is not _NOT_FOUND:
            return self._found(manager, from_field, VersionSource.PACKAGE_MANAGER_FIELD)

        pinned = self._from_engines(manager)
        if pinned:
            return self._found(manager, pinned, VersionSource.ENGINES)

        guessed = self._from_lockfile(manager)
        if guessed:
            return self._found(manager, guessed, VersionSource.LOCKFILE)

        return None

    def _found(self, manager: PackageManagerName, version: str, source: VersionSource) -> DetectedVersion:
        logger.debug(
            "Detected %s version %s from %s",
            manager.value,
            version,
            source.value,
            extra=extra_context(event="version_detected", package_manager=manager.value, source=source.value),
        )
        return DetectedVersion(name=manager, version=version, source=source)

    def _from_package_manager_field(self, manager: PackageManagerName):
        """Version from ``packageManager``.

        Returns the version, ``_NOT_FOUND`` when the field has nothing to
        say about this manager, or None when it names this manager with a
        malformed version.
        """
        field_name, field_version = split_package_manager_field(self._manifest.package_manager)
        if field_name != manager.value or field_version is None:
            return _NOT_FOUND

        version = _COREPACK_HASH_RE.sub("", field_version)
        if not _PLAIN_VERSION_RE.match(version):
            logger.debug("Malformed packageManager version: %s", self._manifest.package_manager)
            return None
        return version

    def _from_engines(self, manager: PackageManagerName) -> Optional[str]:
        raw = self._manifest.engines.get(manager.value)
        if raw is None:
            return None
        try:
            requirement = parse_requirement(raw, manager.value)
        except InvalidConstraint as exc:
            logger.debug("Ignoring engines entry: %s", exc)
            return None
        return requirement.pinned_version

    def _from_lockfile(self, manager: PackageManagerName) -> Optional[str]:
        lockfile: Optional[DependencyFile] = self._lockfiles.get(manager.value)
        if lockfile is None:
            return None
        version = self._version_numeric(manager.value, lockfile)
        return str(version) if version is not None else None
