"""Exception hierarchy for ignorectl.

Expected filesystem conditions (permission denied, vanished files) are
never raised from a scan or a deletion; they are recorded as path-scoped
messages on the result. The exceptions below cover the remaining cases.
"""


class IgnorectlError(Exception):
    """Base exception for all ignorectl errors."""


class ScanError(IgnorectlError):
    """Raised when a scan cannot start (e.g. the root is not a directory)."""


class ScanCancelledError(IgnorectlError):
    """Raised inside the scan engine when cancellation is requested.

    The scanner catches it and turns it into a cancelled ScanResult.
    """


class ConfigError(IgnorectlError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""
