# Area: Match
"""
ranked_turbo._match.signal_router — Engine Signal Router
========================================================

Routes validated inbound signals to the handlers registered for
their event name.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

from ..signals import Signal

logger = logging.getLogger("ranked_turbo.router")


class SignalHandler(Protocol):
    """Protocol for signal handlers."""

    def handle(self, signal: Signal) -> Optional[Any]:
        """Handle a signal and optionally return a result."""
        ...


class SignalRouter:
    """
    Routes engine signals to handlers.

    A handler may be registered for several events, but each event has
    exactly one handler; registering again replaces it.

    Usage:
        router = SignalRouter()
        router.register_handler("entity_killed", detector)
        router.route(signal)
    """

    def __init__(self):
        """Initialize router with empty handler registry."""
        self._handlers: Dict[str, SignalHandler] = {}

    def register_handler(self, event: str, handler: SignalHandler) -> None:
        """
        Register a handler for an event name.

        Args:
            event: The event name to handle
            handler: The handler instance
        """
        self._handlers[event] = handler
        logger.debug(f"Registered handler for {event}")

    def get_handler(self, event: str) -> Optional[SignalHandler]:
        return self._handlers.get(event)

    def events(self) -> List[str]:
        """Event names with a registered handler."""
        return sorted(self._handlers)

    def route(self, signal: Signal) -> Optional[Any]:
        """
        Route a signal to its handler.

        Returns:
            The handler's result, or None if no handler is registered
        """
        handler = self._handlers.get(signal.event)

        if handler is None:
            logger.warning(f"No handler for signal: {signal.event}")
            return None

        logger.debug(f"Routing {signal.event} to handler")
        return handler.handle(signal)
