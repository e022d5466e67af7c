"""Nonprofit directory factory.

Provides get_directory() / set_directory() to swap implementations:
- InMemoryNonprofitDirectory for development and testing
- an adapter over the nonprofit administration service in production
"""

from giving.nonprofit.fake_adapter import InMemoryNonprofitDirectory
from giving.nonprofit.port import NonprofitDirectory

_current_directory: NonprofitDirectory | None = None


def get_directory() -> NonprofitDirectory:
    """Return the current nonprofit directory. Defaults to an empty in-memory one."""
    global _current_directory
    if _current_directory is None:
        _current_directory = InMemoryNonprofitDirectory()
    return _current_directory


def set_directory(directory: NonprofitDirectory) -> None:
    """Override the active nonprofit directory (useful for tests)."""
    global _current_directory
    _current_directory = directory


def reset_directory() -> None:
    """Reset to the default directory."""
    global _current_directory
    _current_directory = None
