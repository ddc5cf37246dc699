"""Selection of which package manager a project uses."""

from __future__ import annotations

import logging
from typing import Optional

from versioning.models import LockfileSet, Manifest, PackageManagerName

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_MANAGER = PackageManagerName.NPM


def split_package_manager_field(value: Optional[str]):
    """Split ``"<name>@<version>"`` into (name, version or None).

    A field without "@" is a bare name. Scoped-looking values ("@x/y@1")
    keep their leading "@" in the name and so never match a manager.
    """
    if not value:
        return None, None
    name, sep, version = value.rpartition("@")
    if not sep:
        return value, None
    if not name:
        return value, None
    return name, version or None


class PackageManagerDetector:
    """Picks the package manager name from manifest fields and lockfiles.

    Order: ``packageManager`` field, a single manager named in ``engines``,
    the first lockfile present (npm, yarn, pnpm), then npm.
    """

    def __init__(self, manifest: Manifest, lockfiles: LockfileSet):
        self._manifest = manifest
        self._lockfiles = lockfiles

    def detect(self) -> PackageManagerName:
        name = (
            self.name_from_package_manager_attr()
            or self.name_from_engines()
            or self.name_from_lockfiles()
        )
        if name is None:
            logger.debug("No package manager signal found, defaulting to %s", DEFAULT_PACKAGE_MANAGER.value)
            return DEFAULT_PACKAGE_MANAGER
        return name

    def name_from_package_manager_attr(self) -> Optional[PackageManagerName]:
        name, _ = split_package_manager_field(self._manifest.package_manager)
        return PackageManagerName.parse(name)

    def name_from_engines(self) -> Optional[PackageManagerName]:
        found = [m for m in PackageManagerName if m.value in self._manifest.engines]
        if len(found) == 1:
            return found[0]
        return None

    def name_from_lockfiles(self) -> Optional[PackageManagerName]:
        for manager in PackageManagerName:
            if self._lockfiles.get(manager.value) is not None:
                return manager
        return None
