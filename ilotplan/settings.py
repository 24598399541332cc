"""Engine settings loaded from the environment."""

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

from .layout.types import LayoutConfiguration


def _int_or_none(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class EngineSettings:
    """Process-wide defaults applied to every analysis run."""

    # Used when a configuration does not pin its own seed
    seed: Optional[int] = None
    # Used when a configuration does not pin its own stall limit; 0 disables it
    max_consecutive_failures: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Load settings from environment variables."""
        max_failures = _int_or_none(os.getenv("ILOTPLAN_MAX_CONSECUTIVE_FAILURES"))
        if max_failures is not None:
            max_failures = max(0, max_failures)

        return cls(
            seed=_int_or_none(os.getenv("ILOTPLAN_SEED")),
            max_consecutive_failures=max_failures,
            log_level=os.getenv("ILOTPLAN_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)

    def apply(self, config: LayoutConfiguration) -> LayoutConfiguration:
        """Fill in the seed and stall limit a configuration leaves unset."""
        seed = config.seed if config.seed is not None else self.seed
        max_failures = config.max_consecutive_failures
        if max_failures is None:
            max_failures = self.max_consecutive_failures
        return replace(config, seed=seed, max_consecutive_failures=max_failures)
