"""Typed, synchronous signals.

A Signal is the registration list for a single event kind. Connecting a
handler returns a Connection token; disconnecting consumes that token.
Emission is synchronous and reentrant: handlers may connect, disconnect or
mutate the item tree while an emission is in progress.
"""

from typing import Any, Callable, List, Optional


class Connection:
    """Token returned by Signal.connect."""

    __slots__ = ("signal", "handler", "connected")

    def __init__(self, signal: "Signal", handler: Callable[..., Any]):
        self.signal = signal
        self.handler = handler
        self.connected = True

    def __repr__(self) -> str:
        state = "connected" if self.connected else "disconnected"
        return f"<Connection {self.signal.name} -> {self.handler!r} ({state})>"


class Signal:
    """Ordered list of handlers for one event kind."""

    def __init__(self, name: Optional[str] = None):
        self.name = name or "signal"
        self._connections: List[Connection] = []

    def connect(self, handler: Callable[..., Any]) -> Connection:
        """Register a handler.

        Args:
            handler: Callable invoked with the emitted arguments

        Returns:
            Connection token to pass to disconnect()
        """
        if not callable(handler):
            raise ValueError(f"Handler for '{self.name}' must be callable")

        connection = Connection(self, handler)
        self._connections.append(connection)
        return connection

    def disconnect(self, connection: Connection) -> None:
        """Unregister the handler behind a token.

        Raises:
            ValueError: If the token is not live on this signal
        """
        if connection.signal is not self or not connection.connected:
            raise ValueError(f"Connection is not registered on '{self.name}'")

        connection.connected = False
        self._connections.remove(connection)

    def emit(self, *args: Any) -> None:
        # Handlers connected during this emission are not called.
        for connection in list(self._connections):
            if connection.connected:
                connection.handler(*args)

    def receivers(self) -> int:
        return len(self._connections)

    def __repr__(self) -> str:
        return f"<Signal {self.name} receivers={len(self._connections)}>"
