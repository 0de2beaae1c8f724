"""Map a tap coordinate to the UI action under it."""

from __future__ import annotations

from mwosp.core.layout import Layout
from mwosp.core.render import effective_view
from mwosp.domain.models import (
    Action,
    AskUsername,
    CloseConnection,
    GoHome,
    NoAction,
    PressButton,
    Session,
    ViewState,
    VisitedItemAction,
)


def hit_test(x: int, y: int, session: Session) -> Action:
    """Resolve ``(x, y)`` against the screen currently shown for ``session``.

    Pure: reads the session but never changes it. Coordinates outside
    every target, including rows past the end of the visited-sites list,
    resolve to :class:`NoAction`.
    """
    layout = Layout.for_session(session)

    if layout.in_close_glyph(x, y):
        return CloseConnection()
    if layout.in_home_label(x, y):
        return GoHome()

    view = effective_view(session)
    if view == ViewState.HOME.value:
        return _hit_home(x, y, session, layout)
    if view == ViewState.SETTINGS.value and layout.settings_back.contains(x, y):
        return GoHome()
    return NoAction()


def _hit_home(x: int, y: int, session: Session, layout: Layout) -> Action:
    for index, rect in enumerate(layout.buttons):
        if rect.contains(x, y):
            return PressButton(index=index)

    if layout.greeting.contains(x, y):
        return AskUsername()

    index = layout.row_index(y)
    if index is None or index >= layout.visible_rows or not 0 <= x < layout.width:
        return NoAction()
    domains = session.visited_domains()
    if index >= len(domains):
        return NoAction()

    domain = domains[index]
    item = layout.item_button(x)
    if item is not None:
        return VisitedItemAction(domain=domain, item=item)
    if x < layout.label_w:
        return VisitedItemAction(domain=domain, item="visit")
    return NoAction()
