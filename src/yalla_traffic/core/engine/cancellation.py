"""Cooperative cancellation for conversation sessions."""

import asyncio

from ..exceptions import ConversationCancelledError


class CancellationToken:
    """Signals that the caller abandoned a session.

    The engine checks the token between operations, so an in-flight model
    turn or tool call completes before the session stops.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason = ""

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ConversationCancelledError(self.reason)
