"""
Configuration module for the calendar engine.
Centralizes default values and environment-driven settings.
"""

import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Recurrence expansion limits
DEFAULT_MAX_OCCURRENCES = 1000  # Safety ceiling per expanded series
DEFAULT_OPEN_ENDED_YEARS = 2    # Cap for rules with neither endDate nor count

# Display configuration
DEFAULT_TIMEZONE = "America/Denver"

# Layout configuration
FULL_WIDTH = 100.0


@dataclass(frozen=True)
class EngineSettings:
    """Runtime settings for expansion and formatting."""

    max_occurrences: int = DEFAULT_MAX_OCCURRENCES
    open_ended_years: int = DEFAULT_OPEN_ENDED_YEARS
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """
        Build settings from environment variables.

        Reads:
            CALENDAR_MAX_OCCURRENCES: safety ceiling for one expansion
            CALENDAR_OPEN_ENDED_YEARS: horizon for open-ended rules
            CALENDAR_TIMEZONE: IANA timezone used by the formatter

        Invalid numbers fall back to the defaults with a warning.
        """
        return cls(
            max_occurrences=_int_from_env('CALENDAR_MAX_OCCURRENCES', DEFAULT_MAX_OCCURRENCES),
            open_ended_years=_int_from_env('CALENDAR_OPEN_ENDED_YEARS', DEFAULT_OPEN_ENDED_YEARS),
            timezone=os.getenv('CALENDAR_TIMEZONE', DEFAULT_TIMEZONE),
        )


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    if value < 1:
        logger.warning(f"Ignoring {name}={value} (must be >= 1), using {default}")
        return default
    return value
