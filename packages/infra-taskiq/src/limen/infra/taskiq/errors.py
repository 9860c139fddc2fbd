"""TaskIQ error hierarchy.

Separates transient failures (retry the task) from permanent ones (the
message can never succeed and belongs in the dead-letter queue).
"""

from __future__ import annotations


class TaskIQError(Exception):
    """Base exception for all TaskIQ infrastructure errors."""

    #: Whether this error type is considered transient (retryable).
    transient: bool = False


class TaskIQBrokerError(TaskIQError):
    """Raised when broker startup/shutdown or connection fails.

    Typically transient: Redis may come back.
    """

    transient: bool = True


class TaskIQSerializationError(TaskIQError):
    """Raised when task arguments cannot be decoded or are invalid.

    Permanent: retrying won't fix a malformed message.
    """

    transient: bool = False
