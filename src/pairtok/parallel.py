"""Parallel processing mode helpers for batch encoding."""

from enum import Enum
from typing import Literal

from .errors import OptionError

ParallelStrategy = Literal["auto", "batch", "off"]


class ParallelMode(str, Enum):
    """Named parallelization modes for batch encoding and decoding."""

    AUTO = "auto"
    BATCH = "batch"
    OFF = "off"

    @classmethod
    def get(cls, name: "str | ParallelMode") -> "ParallelMode":
        """Get parallel mode by name (case-insensitive)."""
        if isinstance(name, ParallelMode):
            return name
        try:
            return cls[name.upper()]
        except (KeyError, AttributeError):
            raise OptionError(
                "unknown parallel mode",
                invalid_name=str(name),
                available=[mode.value for mode in cls],
            ) from None


def list_parallel_modes() -> list[str]:
    """Return available parallel mode names."""
    return [mode.value for mode in ParallelMode]


__all__ = [
    "ParallelStrategy",
    "ParallelMode",
    "list_parallel_modes",
]
