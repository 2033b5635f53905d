"""Exceptions raised by the offline sync runtime."""


class OfflineError(Exception):
    """Base class for offline runtime failures."""


class QueueError(OfflineError):
    """Durable queue storage failed."""


class QueueWriteError(QueueError):
    """An action could not be persisted; it is lost."""
