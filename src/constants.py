"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

from versioning.models import PackageManagerName

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    TOOLCHAIN_ERROR = 2


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_PACKAGES = [manager.value for manager in PackageManagerName]
    QUERIES = ["package-manager", "detect-version", "installed-version", "engine-constraint"]
    PACKAGE_JSON_FILE = "package.json"
    PACKAGE_LOCK_FILE = "package-lock.json"
    NPM_SHRINKWRAP_FILE = "npm-shrinkwrap.json"
    YARN_LOCK_FILE = "yarn.lock"
    PNPM_LOCK_FILE = "pnpm-lock.yaml"
    LOG_FORMAT = "[%(levelname)s] %(message)s"

    # Installed toolchain lookup
    COREPACK_COMMAND = "corepack"
    SHELL_COMMAND_TIMEOUT_SEC = 120

    # Environment
    ENV_LOG_LEVEL = "PMRESOLVE_LOG_LEVEL"
    ENV_CONFIG = "PMRESOLVE_CONFIG"
    ENV_EXPERIMENT_PREFIX = "PMRESOLVE_EXPERIMENT_"
    CONFIG_FILE_NAMES = [
        "pmresolve.yml",
        os.path.join("~", ".config", "pmresolve", "pmresolve.yml"),
    ]

    # Feature flags and their values when nothing overrides them
    EXPERIMENT_DEFAULTS: Dict[str, bool] = {
        "enable_engine_version_detection": True,
        "enable_shared_helpers_command_timeout": True,
        "enable_unsupported_version_detection": True,
        "npm_fallback_version_above_v6": False,
    }
    TRUTHY_VALUES = ("1", "true", "yes", "on")


def _config_candidates(path: Optional[str]):
    if path:
        return [path]
    candidates = []
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        candidates.append(env_path)
    candidates.extend(os.path.expanduser(p) for p in Constants.CONFIG_FILE_NAMES)
    return candidates


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load YAML configuration and apply it onto Constants.

    Looks at the explicit path, then $PMRESOLVE_CONFIG, then the default
    locations; the first existing file wins. Never raises on a bad file.

    Args:
        path: Optional explicit config path.

    Returns:
        The loaded mapping, or an empty dict when nothing was applied.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    for candidate in _config_candidates(path):
        if not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                cfg = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to load config %s: %s", candidate, exc)
            return {}
        if not isinstance(cfg, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", candidate)
            return {}
        _apply_config(cfg)
        logger.debug("Loaded configuration from %s", candidate)
        return cfg
    return {}


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in Constants.TRUTHY_VALUES
    return bool(value)


def _apply_config(cfg: Dict[str, Any]) -> None:
    if cfg.get("corepack_command"):
        Constants.COREPACK_COMMAND = str(cfg["corepack_command"])
    timeout = cfg.get("shell_command_timeout_sec")
    if timeout is not None:
        try:
            Constants.SHELL_COMMAND_TIMEOUT_SEC = int(timeout)
        except (TypeError, ValueError):
            logger.warning(
                "Ignoring shell_command_timeout_sec=%r: not an integer, keeping %s",
                timeout,
                Constants.SHELL_COMMAND_TIMEOUT_SEC,
            )
    experiments = cfg.get("experiments")
    if isinstance(experiments, dict):
        merged = dict(Constants.EXPERIMENT_DEFAULTS)
        merged.update({str(k): _as_flag(v) for k, v in experiments.items()})
        Constants.EXPERIMENT_DEFAULTS = merged
