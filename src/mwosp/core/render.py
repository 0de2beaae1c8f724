"""Render engine: session state in, draw commands out.

:func:`render` always describes the full screen. It is a pure function of
the session, so the same session yields the same command sequence, and
it never writes back into the session (an unknown view label is drawn
through a fallback branch, not by resetting ``view_state``).

Draw command vocabulary (all colors RGB565)::

    ClearScreen <color>
    FillRect <x> <y> <w> <h> <color>
    DrawLine <x0> <y0> <x1> <y1> <color>
    DrawCircle <x> <y> <r> <color>
    DrawText <x> <y> <size> <color> <text...>
    DrawSVG <x> <y> <w> <h> <color> <svg-markup...>
"""

from __future__ import annotations

from mwosp.core.layout import CHAR_W, CLOSE_HIT_W, TOPBAR_H, Layout, truncate
from mwosp.core.theme import FALLBACK_COLOR, THEME_DEFAULTS
from mwosp.domain.models import PAGE_VIEWS, Session, ViewState
from mwosp.protocol.commands import OutboundCommand, command

TITLE_MAX_CHARS = 20
SETTINGS_LIST_Y = 72
SETTINGS_LINE_H = 12
FOOTER_OFFSET = 14

BUTTON_LABELS = ("Search", "Open URL", "Settings")
BUTTON_COLORS = ("accent", "accent2", "accent3")

DEMO_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    '<circle cx="12" cy="12" r="10"/><path d="M2 12h20M12 2v20"/></svg>'
)

_DIRECT_VIEWS = frozenset({
    ViewState.HOME.value,
    ViewState.SETTINGS.value,
    ViewState.INPUT.value,
}) | PAGE_VIEWS


def color(session: Session, slot: str) -> int:
    """Session color for ``slot``, falling back to the default palette."""
    return session.theme.get(slot, THEME_DEFAULTS.get(slot, FALLBACK_COLOR))


def effective_view(session: Session) -> str:
    """The view actually drawn for the session's ``view_state``.

    Labels without a body of their own (``clicked`` or a site-specific
    state such as ``lists|1234|edit``) show the page view when a site is
    loaded and the home screen otherwise.
    """
    if session.view_state in _DIRECT_VIEWS:
        return session.view_state
    if session.current_domain:
        return ViewState.WEBSITE.value
    return ViewState.HOME.value


def text(x: int, y: int, size: int, fg: int, value: str) -> OutboundCommand:
    return command("DrawText", x, y, size, fg, value)


def render(session: Session) -> list[OutboundCommand]:
    """Full redraw of the current screen."""
    layout = Layout.for_session(session)
    view = effective_view(session)

    commands = [command("ClearScreen", color(session, "bg"))]
    commands.extend(_top_bar(session, layout, view))

    if view == ViewState.HOME.value:
        commands.extend(_home(session, layout))
    elif view == ViewState.SETTINGS.value:
        commands.extend(_settings(session, layout))
    elif view == ViewState.INPUT.value:
        commands.extend(_input(session, layout))
    else:
        commands.extend(_page(session, layout))
    return commands


def _top_bar(session: Session, layout: Layout, view: str) -> list[OutboundCommand]:
    if view == ViewState.HOME.value:
        title = "Home"
    elif view == ViewState.SETTINGS.value:
        title = "Settings"
    elif view == ViewState.INPUT.value:
        title = "Open URL"
    else:
        title = session.current_domain or "Page"
    title_w = min(TITLE_MAX_CHARS * CHAR_W * 2, layout.width - CLOSE_HIT_W - 6)
    return [
        command("FillRect", 0, 0, layout.width, TOPBAR_H, color(session, "primary")),
        text(6, 3, 2, color(session, "text"), truncate(title, title_w, 2)),
        text(layout.width - 22, 3, 2, color(session, "danger"), "X"),
    ]


def _home(session: Session, layout: Layout) -> list[OutboundCommand]:
    card = layout.card
    out = [
        command("FillRect", card.x, card.y, card.w, card.h, color(session, "primary")),
        command("FillRect", card.x + 2, card.y + 2, card.w - 4, card.h - 4, color(session, "bg")),
    ]
    label_fg = color(session, "accentText")
    for rect, label, slot in zip(layout.buttons, BUTTON_LABELS, BUTTON_COLORS):
        out.append(command("FillRect", rect.x, rect.y, rect.w, rect.h, color(session, slot)))
        out.append(text(rect.x + 6, rect.y + (rect.h - 8) // 2, 1, label_fg, truncate(label, rect.w - 8)))

    greeting_y = layout.greeting.y + 2
    if session.username:
        out.append(text(10, greeting_y, 1, color(session, "text"),
                        truncate(f"Hello, {session.username}!", layout.width - 20)))
    else:
        out.append(text(10, greeting_y, 1, color(session, "placeholder"),
                        truncate("Tap here to set your name", layout.width - 20)))

    out.append(text(10, layout.list_header_y, 1, color(session, "text"), "Visited Sites"))

    domains = session.visited_domains()
    if not domains:
        out.append(text(10, layout.list_top + 6, 1, color(session, "placeholder"), "No sites visited yet"))
        return out

    for index, domain in enumerate(domains[:layout.visible_rows]):
        out.extend(_visited_row(session, layout, index, domain))
    return out


def _visited_row(session: Session, layout: Layout, index: int, domain: str) -> list[OutboundCommand]:
    top = layout.row_top(index)
    row_bg = color(session, "primary") if index % 2 == 0 else color(session, "bg")
    btn_y = top + 4
    btn_h = layout.row_h - 10
    label_y = btn_y + (btn_h - 8) // 2
    btn_fg = color(session, "accentText")
    w = layout.item_button_w
    return [
        command("FillRect", 0, top, layout.width, layout.row_h - 2, row_bg),
        text(10, label_y, 1, color(session, "text"), truncate(domain, layout.label_w - 10)),
        command("FillRect", layout.delete_x, btn_y, w, btn_h, color(session, "danger")),
        text(layout.delete_x + 4, label_y, 1, btn_fg, truncate("Delete", w - 4)),
        command("FillRect", layout.clear_x, btn_y, w, btn_h, color(session, "pressed")),
        text(layout.clear_x + 4, label_y, 1, btn_fg, truncate("Clear", w - 4)),
        command("FillRect", layout.open_x, btn_y, w, btn_h, color(session, "accent")),
        text(layout.open_x + 4, label_y, 1, btn_fg, truncate("Open", w - 4)),
    ]


def _settings(session: Session, layout: Layout) -> list[OutboundCommand]:
    fg = color(session, "text")
    muted = color(session, "placeholder")
    line_w = layout.width - 20
    out = [
        text(10, 30, 2, fg, truncate("Visited Sites & Storage", line_w, 2)),
        text(10, 56, 1, muted, truncate("Values stored for each site:", line_w)),
    ]

    footer_y = layout.height - FOOTER_OFFSET
    capacity = max(0, (footer_y - SETTINGS_LIST_Y) // SETTINGS_LINE_H)
    entries = list(session.storage.items())
    if not entries:
        out.append(text(10, SETTINGS_LIST_Y, 1, muted, "No stored data"))
    else:
        shown = entries if len(entries) <= capacity else entries[:max(0, capacity - 1)]
        for i, (key, value) in enumerate(shown):
            out.append(text(10, SETTINGS_LIST_Y + i * SETTINGS_LINE_H, 1, fg,
                            truncate(f"{key}: {value}", line_w)))
        hidden = len(entries) - len(shown)
        if hidden and capacity:
            out.append(text(10, SETTINGS_LIST_Y + len(shown) * SETTINGS_LINE_H, 1, muted,
                            f"... {hidden} more"))

    out.append(text(10, footer_y, 1, muted, truncate("Tap Home to go back", line_w)))
    return out


def _input(session: Session, layout: Layout) -> list[OutboundCommand]:
    muted = color(session, "placeholder")
    line_w = layout.width - 20
    return [
        text(10, 30, 2, color(session, "text"), truncate("Open URL", line_w, 2)),
        text(10, 56, 1, muted, truncate("Enter domain[:port]@state", line_w)),
        text(10, 70, 1, muted, truncate("e.g. example.com@startpage", line_w)),
    ]


def _page(session: Session, layout: Layout) -> list[OutboundCommand]:
    fg = color(session, "text")
    muted = color(session, "placeholder")
    line_w = layout.width - 20
    domain = session.current_domain

    if domain:
        welcome = f"Welcome to {domain}"
    else:
        welcome = "Open a site from the home screen"

    block_y = 84
    block_h = max(0, min(60, layout.height - block_y - 10))
    return [
        text(10, 30, 2, fg, truncate(domain or "No site loaded", line_w, 2)),
        command("DrawLine", 10, 48, layout.width - 10, 48, color(session, "primary")),
        text(10, 54, 1, muted, truncate(welcome, line_w)),
        text(10, 66, 1, muted, truncate(f"Page: {session.view_state}", line_w)),
        command("FillRect", 10, block_y, line_w, block_h, color(session, "accent2")),
        command("DrawSVG", 18, block_y + 8, 24, 24, color(session, "accent"), DEMO_SVG),
        text(50, block_y + 16, 1, fg, truncate("Rendered by the server", line_w - 40)),
    ]


# ---------------------------------------------------------------------------
# Partial updates sent outside a full render
# ---------------------------------------------------------------------------


def click_feedback(session: Session, x: int, y: int) -> list[OutboundCommand]:
    """Small highlight where the user tapped."""
    return [command("DrawCircle", x, y, 4, color(session, "pressed"))]


def input_echo(session: Session, value: str) -> list[OutboundCommand]:
    return [text(10, 60, 1, color(session, "text"), f"Input: {value}")]


def loading_placeholder(session: Session, domain: str) -> list[OutboundCommand]:
    """Shown between ``Title`` and the full page render after a navigation."""
    return [
        command("Title", domain),
        text(10, TOPBAR_H + 10, 1, color(session, "placeholder"), f"Loading {domain}..."),
    ]
