"""Inbound and outbound MWOSP-v1 command models.

Every inbound verb decodes into its own frozen model, discriminated by
``verb``, so the dispatcher handles a closed set of variants. Outbound
commands are kept as a verb plus positional arguments and only turned
into wire text by the codec.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

HANDSHAKE_VERB = "MWOSP-v1"


class _Inbound(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Handshake & rendering
# ---------------------------------------------------------------------------


class Handshake(_Inbound):
    """``MWOSP-v1 <token> <width> <height>``.

    Width and height are None when the client sent something that is not
    an integer; the dispatcher substitutes the configured defaults.
    """

    verb: Literal["MWOSP-v1"] = "MWOSP-v1"
    token: str = ""
    width: int | None = None
    height: int | None = None


class RenderRequest(_Inbound):
    verb: Literal["NeedRender", "Refresh"] = "NeedRender"


# ---------------------------------------------------------------------------
# User input
# ---------------------------------------------------------------------------


class Click(_Inbound):
    verb: Literal["Click"] = "Click"
    x: int = -1
    y: int = -1


class Input(_Inbound):
    verb: Literal["Input"] = "Input"
    text: str = ""


class Navigate(_Inbound):
    """``Navigate <keyword>`` or ``Navigate domain[:port][@state]``."""

    verb: Literal["Navigate"] = "Navigate"
    target: str = ""


class GetBackText(_Inbound):
    """Reply to a ``PromptText`` the server sent earlier."""

    verb: Literal["GetBackText"] = "GetBackText"
    rid: str = ""
    text: str = ""


# ---------------------------------------------------------------------------
# Session / state / storage
# ---------------------------------------------------------------------------


class SetSession(_Inbound):
    verb: Literal["SetSession"] = "SetSession"
    token: str = ""


class GetSession(_Inbound):
    verb: Literal["GetSession"] = "GetSession"
    rid: str = ""


class SetState(_Inbound):
    verb: Literal["SetState"] = "SetState"
    state: str = ""


class GetState(_Inbound):
    verb: Literal["GetState"] = "GetState"
    rid: str = ""


class ClearSettings(_Inbound):
    verb: Literal["ClearSettings"] = "ClearSettings"


class SetStorage(_Inbound):
    verb: Literal["SetStorage"] = "SetStorage"
    key: str = ""
    value: str = ""


class GetStorage(_Inbound):
    verb: Literal["GetStorage"] = "GetStorage"
    key: str = ""


class GetBackStorage(_Inbound):
    verb: Literal["GetBackStorage"] = "GetBackStorage"
    key: str = ""
    value: str = ""


class ClientReply(_Inbound):
    """``GetBackSession``/``GetBackState`` echoes; informational only."""

    verb: Literal["GetBackSession", "GetBackState"] = "GetBackSession"
    rid: str = ""
    value: str = ""


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------


class ThemeColors(_Inbound):
    """``ThemeColors slot:hex slot:hex ...`` as sent right after connecting."""

    verb: Literal["ThemeColors"] = "ThemeColors"
    pairs: tuple[tuple[str, str], ...] = ()


class GetThemeColor(_Inbound):
    verb: Literal["GetThemeColor"] = "GetThemeColor"
    slot: str = ""


class SetThemeColor(_Inbound):
    verb: Literal["SetThemeColor"] = "SetThemeColor"
    slot: str = ""
    value: str = ""


# ---------------------------------------------------------------------------
# Connection control & fallbacks
# ---------------------------------------------------------------------------


class Exit(_Inbound):
    verb: Literal["Exit", "ClientDisconnect"] = "Exit"


class Unknown(_Inbound):
    """A verb this server does not implement. Logged and ignored."""

    verb: Literal["?"] = "?"
    name: str = ""
    rest: str = ""


class Empty(_Inbound):
    verb: Literal[""] = ""


InboundCommand = Annotated[
    Union[
        Handshake,
        RenderRequest,
        Click,
        Input,
        Navigate,
        GetBackText,
        SetSession,
        GetSession,
        SetState,
        GetState,
        ClearSettings,
        SetStorage,
        GetStorage,
        GetBackStorage,
        ClientReply,
        ThemeColors,
        GetThemeColor,
        SetThemeColor,
        Exit,
        Unknown,
        Empty,
    ],
    Field(discriminator="verb"),
]


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


class OutboundCommand(BaseModel):
    """A command for the client, e.g. ``FillRect 0 0 320 20 65535``."""

    model_config = ConfigDict(frozen=True)

    verb: str = Field(description="Wire verb, e.g. 'FillRect' or 'PromptText'")
    args: tuple[int | str, ...] = Field(default=(), description="Positional arguments in wire order")


def command(verb: str, *args: int | str) -> OutboundCommand:
    """Shorthand constructor used by the render engine and dispatcher."""
    return OutboundCommand(verb=verb, args=args)
