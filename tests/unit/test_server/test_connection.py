"""Tests for the per-client connection and the HTTP session registry."""

from __future__ import annotations

from mwosp.core.dispatcher import Dispatcher
from mwosp.server.connection import Connection, SessionRegistry


class TestConnection:
    def test_connect_creates_fresh_session(self, dispatcher: Dispatcher) -> None:
        conn = Connection(dispatcher)
        session = conn.on_connect()
        assert session.view_state == "home"
        assert conn.session is session
        assert not conn.closed

    def test_replies_in_order(self, dispatcher: Dispatcher) -> None:
        conn = Connection(dispatcher)
        conn.on_connect()
        assert conn.on_message("MWOSP-v1 tok 320 240") == ["MWOSP-v1 OK"]
        out = conn.on_message("NeedRender")
        assert out[0].startswith("ClearScreen ")
        assert out[1].startswith("FillRect 0 0 320 20 ")

    def test_sessions_are_not_shared(self, dispatcher: Dispatcher) -> None:
        first = Connection(dispatcher)
        second = Connection(dispatcher)
        first.on_connect()
        second.on_connect()
        first.on_message("SetStorage a 1")
        first.on_message("SetThemeColor bg 0")
        assert second.on_message("GetStorage a") == ["GetBackStorage a "]
        assert second.session.theme["bg"] != 0

    def test_exit_closes_and_drops_later_messages(self, dispatcher: Dispatcher) -> None:
        conn = Connection(dispatcher)
        conn.on_connect()
        assert conn.on_message("Exit") == []
        assert conn.closed
        assert conn.on_message("GetState 1") == []

    def test_message_before_connect_is_dropped(self, dispatcher: Dispatcher) -> None:
        conn = Connection(dispatcher)
        assert conn.on_message("NeedRender") == []

    def test_disconnect_discards_session(self, dispatcher: Dispatcher) -> None:
        conn = Connection(dispatcher)
        conn.on_connect()
        conn.on_disconnect()
        assert conn.session is None
        assert conn.closed
        assert conn.on_message("NeedRender") == []


class TestSessionRegistry:
    def test_get_or_create_reuses(self, dispatcher: Dispatcher) -> None:
        registry = SessionRegistry(dispatcher)
        first = registry.get_or_create("abc")
        assert registry.get_or_create("abc") is first
        assert len(registry) == 1
        assert "abc" in registry

    def test_drop(self, dispatcher: Dispatcher) -> None:
        registry = SessionRegistry(dispatcher)
        conn = registry.get_or_create("abc")
        assert registry.drop("abc") is True
        assert conn.closed
        assert registry.drop("abc") is False

    def test_clear(self, dispatcher: Dispatcher) -> None:
        registry = SessionRegistry(dispatcher)
        registry.get_or_create("a")
        registry.get_or_create("b")
        registry.clear()
        assert len(registry) == 0

    def test_evicts_least_recently_used(self, dispatcher: Dispatcher) -> None:
        registry = SessionRegistry(dispatcher, max_sessions=2)
        first = registry.get_or_create("a")
        registry.get_or_create("b")
        registry.get_or_create("a")
        registry.get_or_create("c")
        assert len(registry) == 2
        assert "a" in registry
        assert "b" not in registry
        assert registry.get_or_create("a") is first

    def test_idle_sessions_expire(self, dispatcher: Dispatcher) -> None:
        now = [0.0]
        registry = SessionRegistry(dispatcher, idle_timeout=10.0, clock=lambda: now[0])
        stale = registry.get_or_create("stale")
        now[0] = 5.0
        registry.get_or_create("fresh")
        now[0] = 12.0
        registry.get_or_create("fresh")
        assert "stale" not in registry
        assert stale.closed
        assert "fresh" in registry
