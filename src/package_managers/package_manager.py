"""Typed package manager result and the per-manager support policy."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Optional, Tuple

import semantic_version

from common.experiments import Experiments
from versioning.models import PackageManagerName, VersionSource
from versioning.requirement import Requirement


@dataclass(frozen=True)
class SupportPolicy:
    """Major versions a package manager is supported or deprecated at."""
    supported_versions: Tuple[int, ...]
    deprecated_versions: Tuple[int, ...] = ()

    @property
    def minimum_supported(self) -> int:
        return min(self.supported_versions)


SUPPORT_POLICIES = MappingProxyType({
    PackageManagerName.NPM: SupportPolicy(supported_versions=(7, 8, 9, 10), deprecated_versions=(6,)),
    PackageManagerName.YARN: SupportPolicy(supported_versions=(1, 2, 3, 4)),
    PackageManagerName.PNPM: SupportPolicy(supported_versions=(7, 8, 9, 10), deprecated_versions=(6,)),
})


def major_of(version: Optional[str]) -> Optional[int]:
    """Major component of a possibly partial version ("6", "7.5", "8.1.0")."""
    if not version:
        return None
    try:
        return semantic_version.Version.coerce(str(version).strip()).major
    except ValueError:
        return None


@dataclass(frozen=True)
class PackageManager:
    """The package manager a project uses, as resolved for one job."""
    name: PackageManagerName
    detected_version: Optional[str]
    installed_version: Optional[str]
    version_source: Optional[VersionSource]
    requirement: Optional[Requirement]
    supported: bool
    deprecated: bool
    unsupported: bool

    @property
    def version(self) -> Optional[str]:
        return self.detected_version or self.installed_version

    @property
    def major_version(self) -> Optional[int]:
        return major_of(self.version)

    @property
    def policy(self) -> SupportPolicy:
        return SUPPORT_POLICIES[self.name]

    @property
    def version_mismatch(self) -> bool:
        """True when detected and installed majors are both known and differ."""
        detected = major_of(self.detected_version)
        installed = major_of(self.installed_version)
        if detected is None or installed is None:
            return False
        return detected != installed

    @property
    def requirement_satisfied(self) -> Optional[bool]:
        """Whether the engine requirement holds, preferring the installed version."""
        version = self.installed_version or self.detected_version
        if self.requirement is None or not version:
            return None
        return self.requirement.is_satisfied_by(version)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "detected_version": self.detected_version,
            "installed_version": self.installed_version,
            "version_source": self.version_source.value if self.version_source else None,
            "requirement": self.requirement.constraints if self.requirement else None,
            "supported": self.supported,
            "deprecated": self.deprecated,
            "unsupported": self.unsupported,
            "version_mismatch": self.version_mismatch,
            "requirement_satisfied": self.requirement_satisfied,
        }


def build_package_manager(
    name: PackageManagerName,
    detected_version: Optional[str],
    installed_version: Optional[str] = None,
    version_source: Optional[VersionSource] = None,
    requirement: Optional[Requirement] = None,
    experiments=None,
) -> PackageManager:
    """Create a PackageManager and apply the support policy table.

    Unsupported means below the minimum supported major, and is only
    reported while ``enable_unsupported_version_detection`` is on. A version
    that is unsupported is never also reported as deprecated.
    """
    flags = experiments or Experiments
    policy = SUPPORT_POLICIES[name]
    major = major_of(detected_version or installed_version)

    if major is None:
        supported = deprecated = unsupported = False
    else:
        unsupported = (
            flags.enabled("enable_unsupported_version_detection")
            and major < policy.minimum_supported
        )
        deprecated = not unsupported and major in policy.deprecated_versions
        supported = major in policy.supported_versions

    return PackageManager(
        name=name,
        detected_version=detected_version,
        installed_version=installed_version,
        version_source=version_source,
        requirement=requirement,
        supported=supported,
        deprecated=deprecated,
        unsupported=unsupported,
    )
