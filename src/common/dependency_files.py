"""Loading package.json and lockfiles from a project directory."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from constants import Constants
from versioning.models import DependencyFile, PackageManagerName

logger = logging.getLogger(__name__)

# Candidate file names per manager, most preferred first.
LOCKFILE_NAMES = {
    PackageManagerName.NPM: [Constants.PACKAGE_LOCK_FILE, Constants.NPM_SHRINKWRAP_FILE],
    PackageManagerName.YARN: [Constants.YARN_LOCK_FILE],
    PackageManagerName.PNPM: [Constants.PNPM_LOCK_FILE],
}


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return None


def load_package_json(dir_path: str) -> Optional[Dict[str, Any]]:
    """Parse package.json in ``dir_path``.

    Returns:
        The parsed object, or None when missing, unreadable or not a JSON object
    """
    path = os.path.join(dir_path, Constants.PACKAGE_JSON_FILE)
    if not os.path.isfile(path):
        logger.debug("No %s in %s", Constants.PACKAGE_JSON_FILE, dir_path)
        return None

    content = _read_text(path)
    if content is None:
        return None
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level is not an object", path)
        return None
    return data


def load_lockfiles(dir_path: str) -> Dict[str, DependencyFile]:
    """Discover lockfiles in ``dir_path``, one per package manager.

    Returns:
        Mapping of manager name to DependencyFile for lockfiles that exist
    """
    lockfiles: Dict[str, DependencyFile] = {}
    for manager, names in LOCKFILE_NAMES.items():
        for file_name in names:
            path = os.path.join(dir_path, file_name)
            if not os.path.isfile(path):
                continue
            lockfiles[manager.value] = DependencyFile(name=file_name, content=_read_text(path))
            break

    if len(lockfiles) > 1:
        logger.info("Multiple lockfiles found in %s: %s", dir_path, ", ".join(f.name for f in lockfiles.values()))
    return lockfiles
