class SchedulerError(Exception):
    """Base class for server selection errors."""


class InvalidPoolError(SchedulerError, ValueError):
    """Raised when a scheduler is built over an empty server list."""


class EmptyPoolError(SchedulerError, ValueError):
    """Raised when the server list is empty at selection time."""


class MissingKeyError(SchedulerError, ValueError):
    """Raised by key-based schedulers when no request key is given."""
