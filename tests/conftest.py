"""Shared test fixtures for the mwosp test suite.

Provides sessions in common states, a dispatcher with a fixed clock and
small helpers for feeding protocol lines through the dispatcher.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from mwosp.core.dispatcher import Dispatcher
from mwosp.domain.models import Session
from mwosp.protocol.codec import decode, encode_command

FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0)


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session() -> Session:
    """A freshly connected 320x240 session on the home screen."""
    return Session()


@pytest.fixture
def visited_session() -> Session:
    """A home-screen session with exactly two visited sites."""
    return Session(storage={"alpha.example": "1", "beta.example": "2"})


@pytest.fixture
def site_session() -> Session:
    """A session showing the start page of a remote site."""
    return Session(
        view_state="startpage",
        current_domain="example.com",
        current_port=443,
        storage={"example.com": "2025-01-01T12:00:00"},
    )


# ---------------------------------------------------------------------------
# Dispatcher Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def dispatcher() -> Dispatcher:
    """A dispatcher whose visit timestamps are always FIXED_NOW."""
    return Dispatcher(clock=lambda: FIXED_NOW)


@pytest.fixture
def send(dispatcher: Dispatcher):
    """Dispatch a raw line against a session and return the encoded replies."""

    def _send(session: Session, line: str) -> list[str]:
        result = dispatcher.dispatch(decode(line), session)
        return [encode_command(cmd) for cmd in result.commands]

    return _send
