"""Screen layout shared by the render engine and the hit-tester.

All geometry is derived from the resolution the client reported during
the handshake, so drawing and hit-testing can never disagree about where
a button is.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from mwosp.domain.models import Session

TOPBAR_H = 20
MARGIN = 6
CARD_Y = TOPBAR_H + 5
CARD_H = 48
BUTTON_H = 36
BUTTON_PADDING = 10
ITEM_GAP = 4
HOME_LABEL_W = 120
CLOSE_HIT_W = 60
GREETING_H = 12
SETTINGS_BACK_H = 30

# Built-in font: 6px wide glyphs at text size 1
CHAR_W = 6


def clamp(low: int, high: int, value: int) -> int:
    return max(low, min(high, value))


class Rect(NamedTuple):
    x: int
    y: int
    w: int
    h: int

    def contains(self, px: int, py: int) -> bool:
        return self.x <= px < self.x + self.w and self.y <= py < self.y + self.h

    @property
    def bottom(self) -> int:
        return self.y + self.h


class Layout(BaseModel):
    """Resolved coordinates for one screen size."""

    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    card: Rect
    buttons: tuple[Rect, Rect, Rect]
    greeting: Rect
    list_header_y: int
    list_top: int
    row_h: int
    item_button_w: int
    delete_x: int
    clear_x: int
    open_x: int
    settings_back: Rect

    @classmethod
    def for_size(cls, width: int, height: int) -> Layout:
        card = Rect(MARGIN, CARD_Y, max(40, width - 2 * MARGIN), CARD_H)

        button_w = clamp(60, 100, width * 30 // 100)
        gap = max(2, (card.w - 3 * button_w) // 4)
        button_y = card.y + 6
        buttons = tuple(
            Rect(card.x + gap + i * (button_w + gap), button_y, button_w, BUTTON_H)
            for i in range(3)
        )

        item_button_w = clamp(36, 56, width * 7 // 40)
        open_x = width - BUTTON_PADDING - item_button_w
        clear_x = open_x - ITEM_GAP - item_button_w
        delete_x = clear_x - ITEM_GAP - item_button_w

        return cls(
            width=width,
            height=height,
            card=card,
            buttons=buttons,
            greeting=Rect(0, card.bottom + 4, width, GREETING_H),
            list_header_y=card.bottom + 16,
            list_top=card.bottom + 28,
            row_h=clamp(24, 36, height // 8),
            item_button_w=item_button_w,
            delete_x=delete_x,
            clear_x=clear_x,
            open_x=open_x,
            settings_back=Rect(0, TOPBAR_H + 1, HOME_LABEL_W, SETTINGS_BACK_H - 1),
        )

    @classmethod
    def for_session(cls, session: Session) -> Layout:
        return cls.for_size(session.screen_width, session.screen_height)

    # -- top bar ------------------------------------------------------------

    def in_close_glyph(self, x: int, y: int) -> bool:
        return 0 <= y < TOPBAR_H and self.width - CLOSE_HIT_W < x < self.width

    def in_home_label(self, x: int, y: int) -> bool:
        return 0 <= y < TOPBAR_H and 0 <= x < HOME_LABEL_W

    # -- visited-sites list -------------------------------------------------

    @property
    def visible_rows(self) -> int:
        return max(0, (self.height - self.list_top) // self.row_h)

    def row_top(self, index: int) -> int:
        return self.list_top + index * self.row_h

    def row_index(self, y: int) -> int | None:
        """Row under ``y``, or None above the list. Not bounds-checked."""
        if y < self.list_top:
            return None
        return (y - self.list_top) // self.row_h

    def item_button(self, x: int) -> str | None:
        """Which row sub-button ``x`` falls on, if any."""
        w = self.item_button_w
        if self.delete_x <= x < self.delete_x + w:
            return "delete"
        if self.clear_x <= x < self.clear_x + w:
            return "clearValue"
        if self.open_x <= x < self.open_x + w:
            return "open"
        return None

    @property
    def label_w(self) -> int:
        """Width of the domain label area left of the row buttons."""
        return max(0, self.delete_x - ITEM_GAP)


def truncate(text: str, max_width: int, size: int = 1) -> str:
    """Shorten ``text`` with a trailing ``...`` so it fits ``max_width`` pixels."""
    max_chars = max_width // (CHAR_W * size)
    if len(text) <= max_chars:
        return text
    if max_chars <= 3:
        return ""
    return text[:max_chars - 3] + "..."
