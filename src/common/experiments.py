"""Feature flags gating optional resolver behavior."""

from __future__ import annotations

import logging
import os
from typing import Dict

from constants import Constants

logger = logging.getLogger(__name__)


class Experiments:
    """Named boolean feature flags.

    Lookup order: explicit registration, then the
    ``PMRESOLVE_EXPERIMENT_<NAME>`` environment variable, then
    ``Constants.EXPERIMENT_DEFAULTS``. Unknown flags are off.
    """

    _overrides: Dict[str, bool] = {}

    @classmethod
    def enabled(cls, name: str) -> bool:
        if name in cls._overrides:
            return cls._overrides[name]

        env_value = os.environ.get(f"{Constants.ENV_EXPERIMENT_PREFIX}{name.upper()}")
        if env_value is not None:
            return env_value.strip().lower() in Constants.TRUTHY_VALUES

        return bool(Constants.EXPERIMENT_DEFAULTS.get(name, False))

    @classmethod
    def register(cls, name: str, value: bool) -> None:
        logger.debug("Experiment %s set to %s", name, value)
        cls._overrides = {**cls._overrides, name: bool(value)}

    @classmethod
    def reset(cls) -> None:
        cls._overrides = {}
