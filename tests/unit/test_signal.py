"""Unit tests for the Signal primitive."""

import pytest

from feed_aggregator.events import Signal


class TestSignal:
    """Tests for connect/disconnect/emit."""

    def test_emit_calls_handlers_in_connection_order(self):
        """Test that handlers run in the order they were connected."""
        signal = Signal("test")
        calls = []

        signal.connect(lambda value: calls.append(("first", value)))
        signal.connect(lambda value: calls.append(("second", value)))
        signal.emit(42)

        assert calls == [("first", 42), ("second", 42)]

    def test_disconnect_consumes_token(self):
        """Test that a disconnected handler is no longer called."""
        signal = Signal("test")
        calls = []

        connection = signal.connect(calls.append)
        signal.disconnect(connection)
        signal.emit("ignored")

        assert calls == []
        assert signal.receivers() == 0
        assert connection.connected is False

    def test_disconnect_twice_raises(self):
        """Test that a token cannot be used twice."""
        signal = Signal("test")
        connection = signal.connect(lambda: None)
        signal.disconnect(connection)

        with pytest.raises(ValueError):
            signal.disconnect(connection)

    def test_disconnect_foreign_token_raises(self):
        """Test that a token only disconnects from its own signal."""
        first = Signal("first")
        second = Signal("second")
        connection = first.connect(lambda: None)

        with pytest.raises(ValueError):
            second.disconnect(connection)

        assert first.receivers() == 1

    def test_connect_requires_callable(self):
        """Test that only callables can be connected."""
        with pytest.raises(ValueError):
            Signal("test").connect("not callable")

    def test_handler_disconnected_during_emit_is_not_called(self):
        """Test that a handler disconnected mid-emit is skipped."""
        signal = Signal("test")
        calls = []
        later = None

        def first():
            calls.append("first")
            signal.disconnect(later)

        signal.connect(first)
        later = signal.connect(lambda: calls.append("later"))
        signal.emit()

        assert calls == ["first"]

    def test_handler_connected_during_emit_waits_for_next_emit(self):
        """Test that a handler connected mid-emit waits for the next emission."""
        signal = Signal("test")
        calls = []

        def first():
            calls.append("first")
            if len(calls) == 1:
                signal.connect(lambda: calls.append("added"))

        signal.connect(first)
        signal.emit()
        assert calls == ["first"]

        signal.emit()
        assert calls == ["first", "first", "added"]

    def test_handler_exception_propagates(self):
        """Test that handler errors reach the emitter."""
        signal = Signal("test")

        def broken():
            raise RuntimeError("boom")

        signal.connect(broken)

        with pytest.raises(RuntimeError):
            signal.emit()
