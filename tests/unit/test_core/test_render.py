"""Tests for the render engine."""

from __future__ import annotations

from mwosp.core.render import effective_view, render
from mwosp.core.theme import THEME_DEFAULTS
from mwosp.domain.models import Session
from mwosp.protocol.codec import encode_command


def _lines(session: Session) -> list[str]:
    return [encode_command(cmd) for cmd in render(session)]


def _texts(session: Session) -> list[str]:
    """The display text of every DrawText command."""
    return [str(cmd.args[-1]) for cmd in render(session) if cmd.verb == "DrawText"]


class TestDeterminism:
    def test_same_session_same_output(self, visited_session: Session) -> None:
        assert _lines(visited_session) == _lines(visited_session)

    def test_equal_sessions_same_output(self) -> None:
        a = Session(username="ada", storage={"x.example": "1"})
        b = Session(username="ada", storage={"x.example": "1"})
        assert _lines(a) == _lines(b)


class TestFrame:
    def test_starts_with_background_and_top_bar(self, session: Session) -> None:
        lines = _lines(session)
        assert lines[0] == f"ClearScreen {THEME_DEFAULTS['bg']}"
        assert lines[1] == f"FillRect 0 0 320 20 {THEME_DEFAULTS['primary']}"
        assert lines[3] == f"DrawText 298 3 2 {THEME_DEFAULTS['danger']} X"

    def test_uses_session_theme(self, session: Session) -> None:
        session.theme["bg"] = 0x1234
        assert _lines(session)[0] == f"ClearScreen {0x1234}"

    def test_adapts_to_resolution(self) -> None:
        session = Session(screen_width=480, screen_height=320)
        assert _lines(session)[1].startswith("FillRect 0 0 480 20 ")


class TestHome:
    def test_buttons_and_header(self, session: Session) -> None:
        texts = _texts(session)
        assert "Search" in texts
        assert "Open URL" in texts
        assert "Settings" in texts
        assert "Visited Sites" in texts
        assert "No sites visited yet" in texts

    def test_placeholder_greeting(self, session: Session) -> None:
        assert "Tap here to set your name" in _texts(session)

    def test_personal_greeting(self) -> None:
        assert "Hello, Ada!" in _texts(Session(username="Ada"))

    def test_one_row_per_entry(self, visited_session: Session) -> None:
        texts = _texts(visited_session)
        assert "alpha.example" in texts
        assert "beta.example" in texts
        assert texts.count("Delete") == 2
        assert texts.count("Clear") == 2
        assert texts.count("Open") == 2

    def test_rows_alternate_background(self, visited_session: Session) -> None:
        lines = _lines(visited_session)
        assert f"FillRect 0 101 320 28 {THEME_DEFAULTS['primary']}" in lines
        assert f"FillRect 0 131 320 28 {THEME_DEFAULTS['bg']}" in lines

    def test_rows_limited_to_screen(self) -> None:
        session = Session(storage={f"site{i}.example": "" for i in range(10)})
        texts = _texts(session)
        assert "site3.example" in texts
        assert "site4.example" not in texts

    def test_long_domain_truncated(self) -> None:
        domain = "a-very-long-domain-name-for-testing.example"
        texts = _texts(Session(storage={domain: ""}))
        assert domain not in texts
        assert any(t.endswith("...") and domain.startswith(t[:-3]) for t in texts)


class TestSettings:
    def test_lists_key_values(self) -> None:
        session = Session(view_state="settings", storage={"a": "1", "b": "two words"})
        texts = _texts(session)
        assert "Visited Sites & Storage" in texts
        assert "a: 1" in texts
        assert "b: two words" in texts
        assert "Tap Home to go back" in texts

    def test_overflow_is_summarised(self) -> None:
        session = Session(view_state="settings", storage={f"k{i}": str(i) for i in range(40)})
        texts = _texts(session)
        assert any(t.startswith("... ") and t.endswith(" more") for t in texts)
        assert "k39: 39" not in texts

    def test_empty_storage(self) -> None:
        assert "No stored data" in _texts(Session(view_state="settings"))


class TestPages:
    def test_start_page_uses_domain(self, site_session: Session) -> None:
        texts = _texts(site_session)
        assert "example.com" in texts
        assert "Welcome to example.com" in texts
        assert any(cmd.verb == "DrawSVG" for cmd in render(site_session))

    def test_search_without_domain(self) -> None:
        texts = _texts(Session(view_state="search"))
        assert "No site loaded" in texts

    def test_input_page(self) -> None:
        assert "Enter domain[:port]@state" in _texts(Session(view_state="input"))


class TestFallback:
    def test_unknown_label_without_domain_renders_home(self) -> None:
        session = Session(view_state="lists|1234|edit")
        assert _lines(session) == _lines(Session())

    def test_fallback_does_not_mutate(self) -> None:
        session = Session(view_state="lists|1234|edit")
        render(session)
        assert session.view_state == "lists|1234|edit"

    def test_unknown_label_with_domain_renders_page(self, site_session: Session) -> None:
        site_session.view_state = "lists|1234|edit"
        assert effective_view(site_session) == "website"
        assert "Welcome to example.com" in _texts(site_session)

    def test_clicked_falls_back(self) -> None:
        assert effective_view(Session(view_state="clicked")) == "home"
