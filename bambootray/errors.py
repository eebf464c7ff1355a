"""Exception taxonomy for bambootray.

None of these terminate the polling loop.  ``FetchError`` marks the server
offline until the next successful fetch; ``ConfigError`` disables the
feature it concerns.
"""

from __future__ import annotations


class BambooTrayError(RuntimeError):
    """Base class for all bambootray errors."""


class FetchError(BambooTrayError):
    """Raised when plan data cannot be fetched (network, auth, bad response)."""


class ConfigError(BambooTrayError):
    """Raised for invalid configuration values (interval, voice, frame count)."""
