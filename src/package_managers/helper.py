"""Package manager resolution for a JavaScript project.

``PackageManagerHelper`` is built once per update job from a parsed
package.json and the project's lockfiles. It answers four questions, each
computed from the same read-only snapshot of those inputs:

* which package manager the project uses, with its version and support
  status (``package_manager``)
* which version of a named manager the project asks for (``detect_version``)
* which version of a named manager is installed on the host
  (``installed_version``, memoized per name)
* which engine constraint the manifest declares for a named manager
  (``find_engine_constraints_as_requirement``)

None of these write to state another one reads, so they may be called in any
order.
"""

from __future__ import annotations

import functools
import logging
import re
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from common.experiments import Experiments
from common.logging_utils import extra_context
from package_managers import helpers
from package_managers.detector import PackageManagerDetector
from package_managers.package_manager import PackageManager, build_package_manager
from package_managers.version_detector import VersionDetector
from versioning.models import (
    DependencyFile,
    Manifest,
    PackageManagerName,
    VersionSource,
    freeze_lockfiles,
)
from versioning.requirement import EmptyConstraint, InvalidConstraint, Requirement, parse_requirement

logger = logging.getLogger(__name__)

PACKAGE_MANAGER_VERSION_REGEX = re.compile(
    r"""
    ^(?P<major>\d+)                       # major
    \.(?P<minor>\d+)                      # minor
    \.(?P<patch>\d+)                      # patch
    (?:-(?P<pre_release>[a-zA-Z0-9.]+))?  # optional pre-release
    (?:\+(?P<build>[a-zA-Z0-9.]+))?       # optional build metadata
    $
    """,
    re.VERBOSE,
)


class PackageManagerHelper:
    """Resolves the package manager and its versions for one project."""

    def __init__(
        self,
        package_json: Optional[Mapping[str, Any]],
        lockfiles: Optional[Mapping[Any, Optional[DependencyFile]]] = None,
        *,
        run_command: Optional[Callable[..., str]] = None,
        version_numeric: Optional[Callable[..., Optional[int]]] = None,
        experiments=None,
    ):
        """Snapshot the inputs.

        Args:
            package_json: Parsed package.json (may be None).
            lockfiles: Lockfile per manager name; missing entries mean absent.
            run_command: Process execution used by the installed-version
                lookup. Defaults to ``common.shell.run_shell_command``.
            version_numeric: Major version inference ``(name, lockfile)``.
                Defaults to ``helpers.version_numeric`` bound to ``experiments``.
            experiments: Feature-flag provider with ``enabled(name)``.
        """
        self._manifest = Manifest.from_package_json(package_json)
        self._lockfiles = freeze_lockfiles(lockfiles)
        self._run_command = run_command
        self._experiments = experiments or Experiments
        self._version_numeric = version_numeric or functools.partial(
            helpers.version_numeric, experiments=self._experiments
        )

        self._name_detector = PackageManagerDetector(self._manifest, self._lockfiles)
        self._version_detector = VersionDetector(self._manifest, self._lockfiles, self._version_numeric)

        self._installed_versions: Dict[str, str] = {}
        self._installed_sources: Dict[str, VersionSource] = {}

    @property
    def manifest(self) -> Manifest:
        return self._manifest

    @property
    def installed_versions(self) -> Mapping[str, str]:
        """Read-only view of the installed-version cache."""
        return MappingProxyType(self._installed_versions)

    def package_manager(self) -> PackageManager:
        """Select the package manager in use and resolve its version."""
        name = self._name_detector.detect()
        return self.package_manager_by_name(name)

    def package_manager_by_name(self, name) -> PackageManager:
        manager = PackageManagerName.parse(name)
        if manager is None:
            raise ValueError(f"Unknown package manager: {name}")

        logger.info(
            "Resolving package manager for: %s",
            manager.value,
            extra=extra_context(event="resolve_package_manager", package_manager=manager.value),
        )

        installed = self.installed_version(manager.value)
        logger.info("Installed version for %s: %s", manager.value, installed)

        detected = self._version_detector.detect(manager)
        if detected is not None:
            detected_version, source = detected.version, detected.source
        else:
            detected_version = installed
            source = self._installed_sources.get(manager.value, VersionSource.DEFAULT)
        logger.info("Detected version for %s: %s (from %s)", manager.value, detected_version, source.value)

        requirement = None
        if self._experiments.enabled("enable_engine_version_detection"):
            requirement = self.find_engine_constraints_as_requirement(manager.value)
            if requirement:
                logger.info("Version requirement for %s: %s", manager.value, requirement)
            else:
                logger.info("No version requirement found for %s", manager.value)

        return build_package_manager(
            manager,
            detected_version,
            installed_version=installed,
            version_source=source,
            requirement=requirement,
            experiments=self._experiments,
        )

    def detect_version(self, name) -> Optional[str]:
        """Version of ``name`` requested by the project, or None.

        ``packageManager`` wins over a pinned ``engines`` entry, which wins
        over the version implied by the manager's lockfile.
        """
        detected = self._version_detector.detect(name)
        return detected.version if detected else None

    def installed_version(self, name) -> str:
        """Installed version of ``name``, looked up once per helper.

        Falls back to the lockfile-inferred major version when the lookup
        fails or does not print a full version.

        Raises:
            ToolchainUnavailableError: Neither lookup nor fallback gave a version.
        """
        manager = PackageManagerName.parse(name)
        if manager is None:
            raise ValueError(f"Unknown package manager: {name}")
        key = manager.value

        if key in self._installed_versions:
            return self._installed_versions[key]

        raw = helpers.package_manager_version(
            key, run_command=self._run_command, experiments=self._experiments
        )
        if raw and PACKAGE_MANAGER_VERSION_REGEX.match(raw):
            self._installed_versions[key] = raw
            self._installed_sources[key] = VersionSource.INSTALLED
            return raw

        logger.info("Could not get installed version for %s, falling back to lockfile version", key)
        inferred = self._version_numeric(key, self._lockfiles.get(key))
        if inferred is None:
            raise helpers.ToolchainUnavailableError(key)

        self._installed_versions[key] = str(inferred)
        self._installed_sources[key] = VersionSource.DEFAULT
        return self._installed_versions[key]

    def find_engine_constraints_as_requirement(self, name) -> Optional[Requirement]:
        """Parse ``engines[name]`` into a Requirement.

        Missing and blank entries give None. Unparseable entries are logged
        as a warning and also give None.
        """
        key = name.value if isinstance(name, PackageManagerName) else str(name)
        logger.info("Processing engine constraints for %s", key)
        raw = self._manifest.engines.get(key)
        if raw is None:
            return None

        try:
            return parse_requirement(raw, key)
        except EmptyConstraint:
            return None
        except InvalidConstraint as exc:
            logger.warning(
                "%s",
                exc,
                extra=extra_context(
                    event="invalid_engine_constraint",
                    package_manager=key,
                    constraint=raw,
                ),
            )
            return None
