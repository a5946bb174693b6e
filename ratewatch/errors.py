"""Exceptions raised by RateWatch."""


class RateWatchError(Exception):
    """Base class for RateWatch errors."""


class ConfigError(RateWatchError):
    """Configuration file could not be read or is invalid."""
