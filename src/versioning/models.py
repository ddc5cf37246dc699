"""Data models for package manager resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class PackageManagerName(Enum):
    """Enum for supported package managers, in selection priority order."""
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"

    @classmethod
    def parse(cls, value: Any) -> Optional["PackageManagerName"]:
        """Return the member for an exact name, or None."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return None


class VersionSource(Enum):
    """Where a detected version came from."""
    PACKAGE_MANAGER_FIELD = "package_manager_field"
    ENGINES = "engines"
    LOCKFILE = "lockfile"
    INSTALLED = "installed"
    DEFAULT = "default"


@dataclass(frozen=True)
class DependencyFile:
    """A dependency file handle: file name plus raw text content."""
    name: str
    content: Optional[str]


@dataclass(frozen=True)
class DetectedVersion:
    """A resolved version string and its provenance."""
    name: PackageManagerName
    version: str
    source: VersionSource


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Manifest:
    """Read-only view of the package.json fields the resolver consults."""
    package_manager: Optional[str] = None
    engines: Mapping[str, str] = field(default_factory=lambda: _frozen({}))

    @classmethod
    def from_package_json(cls, package_json: Optional[Mapping[str, Any]]) -> "Manifest":
        """Snapshot a parsed package.json.

        Non-string ``packageManager`` and non-mapping ``engines`` are treated
        as absent; engine values are kept as strings.
        """
        if not isinstance(package_json, Mapping):
            return cls()

        raw_pm = package_json.get("packageManager")
        package_manager = raw_pm.strip() if isinstance(raw_pm, str) and raw_pm.strip() else None

        raw_engines = package_json.get("engines")
        engines = {}
        if isinstance(raw_engines, Mapping):
            engines = {str(k): str(v) for k, v in raw_engines.items() if v is not None}

        return cls(package_manager=package_manager, engines=_frozen(engines))


# Lockfiles keyed by manager name ("npm", "yarn", "pnpm").
LockfileSet = Mapping[str, Optional[DependencyFile]]


def freeze_lockfiles(lockfiles: Optional[Mapping[Any, Optional[DependencyFile]]]) -> LockfileSet:
    """Copy a lockfile mapping into a read-only one keyed by name strings."""
    frozen = {}
    for key, lockfile in (lockfiles or {}).items():
        name = key.value if isinstance(key, PackageManagerName) else str(key)
        frozen[name] = lockfile
    return MappingProxyType(frozen)
