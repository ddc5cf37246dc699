"""Lockfile format fingerprints for npm, yarn and pnpm.

Only the format/version markers are read; dependency entries are never
walked. Every function takes already-loaded text and returns None when the
marker is missing or the content cannot be read.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

_YARN_HEADER_RE = re.compile(r"^#\s*yarn lockfile v(?P<version>\d+)\s*$", re.MULTILINE)
_PNPM_VERSION_RE = re.compile(r"^lockfileVersion:\s*['\"]?(?P<version>[\d.]+)['\"]?\s*$", re.MULTILINE)


def npm_lockfile_version(content: Optional[str]) -> Optional[int]:
    """Return ``lockfileVersion`` from package-lock.json content.

    Args:
        content: Raw JSON text

    Returns:
        The integer format version, or None
    """
    if not content or not content.strip():
        return None
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.debug("Failed to parse package-lock.json: %s", e)
        return None
    if not isinstance(data, dict):
        return None

    raw = data.get("lockfileVersion")
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def yarn_lockfile_version(content: Optional[str]) -> Optional[int]:
    """Return N from the ``# yarn lockfile v<N>`` header of a classic yarn.lock."""
    if not content:
        return None
    match = _YARN_HEADER_RE.search(content)
    if not match:
        return None
    return int(match.group("version"))


def yarn_berry_metadata(content: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the ``__metadata`` block of a Yarn Berry lockfile.

    Berry lockfiles are YAML documents; classic ones are not, so a parse
    failure simply means "not Berry".
    """
    if not content or not content.strip():
        return None
    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError:
        return None
    if not isinstance(parsed, dict):
        return None
    metadata = parsed.get("__metadata")
    return metadata if isinstance(metadata, dict) else None


def pnpm_lockfile_version(content: Optional[str]) -> Optional[str]:
    """Return the top-level ``lockfileVersion`` of pnpm-lock.yaml as text.

    Quoted ('6.0') and bare (5.4) forms are both accepted. The value is kept
    as a string so "5.10" does not collapse into 5.1.

    Only this one top-level key is needed, so it is matched line by line
    instead of loading the whole (often very large) YAML document.
    """
    if not content:
        return None
    match = _PNPM_VERSION_RE.search(content)
    if not match:
        return None
    return match.group("version")
