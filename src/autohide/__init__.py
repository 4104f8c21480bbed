"""autohide: hide files and folders by pattern, once or continuously."""

__version__ = "0.1.0"


class AutohideError(Exception):
    """User-facing CLI error.

    Raised for invalid arguments, inaccessible roots, and other
    recoverable input errors. The message is printed to stderr
    and the process exits with code 1.
    """


class RootAccessError(AutohideError):
    """A root path does not exist or cannot be read at start."""


class WatchError(AutohideError):
    """Filesystem notifications could not be subscribed to."""
