"""Exceptions raised by the configuration layer."""


class ConfigError(Exception):
    """Raised when configuration files, overrides, or values are invalid."""
