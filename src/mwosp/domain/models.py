"""Core domain models for the mwosp server.

These models represent the per-connection session record the server
keeps for each display client, and the logical UI actions a pointer
event resolves to.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from mwosp.core.theme import default_theme

DEFAULT_SCREEN_WIDTH = 320
DEFAULT_SCREEN_HEIGHT = 240


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ViewState(str, enum.Enum):
    """Logical screens the render engine knows how to draw."""

    HOME = "home"
    SETTINGS = "settings"
    SEARCH = "search"
    STARTPAGE = "startpage"
    WEBSITE = "website"
    INPUT = "input"
    CLICKED = "clicked"


# Bare Navigate targets that switch the screen without leaving the current site
NAVIGATE_KEYWORDS = frozenset({
    ViewState.HOME.value,
    ViewState.SETTINGS.value,
    ViewState.SEARCH.value,
    ViewState.INPUT.value,
})

# Views that show a remote page for the current domain
PAGE_VIEWS = frozenset({
    ViewState.SEARCH.value,
    ViewState.STARTPAGE.value,
    ViewState.WEBSITE.value,
})


class PromptId(str, enum.Enum):
    """Request ids the server uses for ``PromptText`` round-trips."""

    USERNAME = "username"
    URL = "url"
    OPEN_SITE_URL = "open_site_url"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class Session(BaseModel):
    """Server-side state of one display client.

    Owned by exactly one connection; created on connect and dropped on
    disconnect. ``view_state`` holds a :class:`ViewState` value or, for
    pages addressed by a remote site, an opaque label stored verbatim.
    """

    session_token: str = Field(default="", description="Opaque id set by handshake or SetSession")
    screen_width: int = Field(default=DEFAULT_SCREEN_WIDTH)
    screen_height: int = Field(default=DEFAULT_SCREEN_HEIGHT)
    view_state: str = Field(default=ViewState.HOME.value)
    username: str = Field(default="")
    current_domain: str | None = Field(default=None)
    current_port: int | None = Field(default=None)
    storage: dict[str, str] = Field(
        default_factory=dict, description="Per-domain values; doubles as the visited-site record"
    )
    theme: dict[str, int] = Field(default_factory=default_theme)

    def visited_domains(self) -> list[str]:
        """Storage keys in the order they are listed on screen."""
        return list(self.storage)

    def reset(self) -> None:
        """Forget everything the user stored; keeps resolution and location."""
        self.session_token = ""
        self.username = ""
        self.storage = {}
        self.view_state = ViewState.HOME.value
        self.theme = default_theme()


# ---------------------------------------------------------------------------
# Hit-test actions (discriminated union)
# ---------------------------------------------------------------------------


class CloseConnection(BaseModel):
    """The close glyph in the top bar was tapped."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["close"] = "close"


class GoHome(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["home"] = "home"


class PressButton(BaseModel):
    """One of the home card buttons: 0 search, 1 open url, 2 settings."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["button"] = "button"
    index: int = Field(ge=0, le=2)


class VisitedItemAction(BaseModel):
    """A tap on a row of the visited-sites list."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["visited"] = "visited"
    domain: str
    item: Literal["delete", "clearValue", "open", "visit"]


class AskUsername(BaseModel):
    """The greeting line was tapped."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ask_username"] = "ask_username"


class NoAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


Action = Annotated[
    Union[CloseConnection, GoHome, PressButton, VisitedItemAction, AskUsername, NoAction],
    Field(discriminator="kind"),
]

HOME_BUTTON_SEARCH = 0
HOME_BUTTON_OPEN_URL = 1
HOME_BUTTON_SETTINGS = 2
