# -*- coding: utf-8 -*-
"""Location: ./mcpui/common/errors.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Transport error taxonomy.
Client-input errors (missing or unknown session id) and delivery errors are
raised on the inbound call that caused them; none of them tears down a
session on its own.
"""

# Standard
from typing import Optional


class TransportError(Exception):
    """Base class for session transport errors."""


class MissingSessionIdError(TransportError):
    """An inbound message arrived without a session id.

    Examples:
        >>> str(MissingSessionIdError())
        'Missing sessionId parameter'
    """

    def __init__(self, message: str = "Missing sessionId parameter"):
        """Initialize the error.

        Args:
            message: Error message.
        """
        super().__init__(message)


class SessionNotFoundError(TransportError):
    """The session id is unknown or the session has already been torn down.

    Examples:
        >>> err = SessionNotFoundError("abc")
        >>> (err.session_id, str(err))
        ('abc', 'Session not found: abc')
    """

    def __init__(self, session_id: str):
        """Initialize the error.

        Args:
            session_id: The id that could not be resolved.
        """
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class DeliveryFailedError(TransportError):
    """Delivering an inbound payload to the session's engine failed.

    Examples:
        >>> err = DeliveryFailedError("abc", ValueError("bad"))
        >>> str(err)
        'Delivery to session abc failed: bad'
        >>> isinstance(err.cause, ValueError)
        True
    """

    def __init__(self, session_id: str, cause: Optional[BaseException] = None):
        """Initialize the error.

        Args:
            session_id: Target session.
            cause: Underlying exception, if any.
        """
        self.session_id = session_id
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Delivery to session {session_id} failed{detail}")


class StreamClosedError(TransportError):
    """A write was attempted on a stream that is no longer writable."""

    def __init__(self, session_id: Optional[str] = None):
        """Initialize the error.

        Args:
            session_id: Session owning the stream, if already bound.
        """
        self.session_id = session_id
        super().__init__(f"Stream closed for session {session_id}" if session_id else "Stream not open")


class EngineStartupError(TransportError):
    """The protocol engine could not be bound to a new transport."""


class InvalidMessageError(TransportError, ValueError):
    """An inbound payload is not a valid protocol message.

    Examples:
        >>> isinstance(InvalidMessageError("bad"), ValueError)
        True
    """
