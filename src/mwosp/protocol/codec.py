"""Line codec for the MWOSP-v1 wire format.

Inbound lines are ``<verb> <rest>``; each verb declares how many
space-delimited fields it takes and whether the remainder of the line is
a free-text tail (which may itself contain spaces). Decoding never fails
on content: malformed numbers fall back to a default and unknown verbs
decode to :class:`Unknown`.

Outbound lines are the verb and its arguments joined by single spaces.
The format is deliberately loose text; display strings are embedded as
they are, without quoting or escaping.
"""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple

from mwosp.protocol.commands import (
    HANDSHAKE_VERB,
    Click,
    ClearSettings,
    ClientReply,
    Empty,
    Exit,
    GetBackStorage,
    GetBackText,
    GetSession,
    GetState,
    GetStorage,
    GetThemeColor,
    Handshake,
    InboundCommand,
    Input,
    Navigate,
    OutboundCommand,
    RenderRequest,
    SetSession,
    SetState,
    SetStorage,
    SetThemeColor,
    ThemeColors,
    Unknown,
)

logger = logging.getLogger(__name__)


class ProtocolError(Exception):
    """Raised when the server tries to encode an invalid command."""


def parse_int(text: str | None, default: int | None) -> int | None:
    """Parse a decimal integer, returning ``default`` on absence or garbage."""
    if text is None:
        return default
    try:
        return int(text.strip())
    except (ValueError, TypeError):
        return default


class _Grammar(NamedTuple):
    fields: int  # leading space-delimited fields
    tail: bool  # whether the rest of the line is kept as free text
    build: Callable[[str, list[str], str], InboundCommand]


def _field(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def _theme_pairs(fields: list[str]) -> tuple[tuple[str, str], ...]:
    pairs = []
    for token in fields:
        slot, _, value = token.partition(":")
        pairs.append((slot, value))
    return tuple(pairs)


_GRAMMAR: dict[str, _Grammar] = {
    HANDSHAKE_VERB: _Grammar(3, False, lambda v, f, t: Handshake(
        token=_field(f, 0),
        width=parse_int(_field(f, 1), None),
        height=parse_int(_field(f, 2), None),
    )),
    "NeedRender": _Grammar(0, False, lambda v, f, t: RenderRequest(verb=v)),
    "Refresh": _Grammar(0, False, lambda v, f, t: RenderRequest(verb=v)),
    "Click": _Grammar(2, False, lambda v, f, t: Click(
        x=parse_int(_field(f, 0), -1),
        y=parse_int(_field(f, 1), -1),
    )),
    "Input": _Grammar(0, True, lambda v, f, t: Input(text=t)),
    "Navigate": _Grammar(0, True, lambda v, f, t: Navigate(target=t.strip())),
    "GetBackText": _Grammar(1, True, lambda v, f, t: GetBackText(rid=_field(f, 0), text=t)),
    "SetSession": _Grammar(0, True, lambda v, f, t: SetSession(token=t)),
    "GetSession": _Grammar(1, False, lambda v, f, t: GetSession(rid=_field(f, 0))),
    "SetState": _Grammar(0, True, lambda v, f, t: SetState(state=t.strip())),
    "GetState": _Grammar(1, False, lambda v, f, t: GetState(rid=_field(f, 0))),
    "ClearSettings": _Grammar(0, False, lambda v, f, t: ClearSettings()),
    "SetStorage": _Grammar(1, True, lambda v, f, t: SetStorage(key=_field(f, 0), value=t)),
    "GetStorage": _Grammar(1, False, lambda v, f, t: GetStorage(key=_field(f, 0))),
    "GetBackStorage": _Grammar(1, True, lambda v, f, t: GetBackStorage(key=_field(f, 0), value=t)),
    "GetBackSession": _Grammar(1, True, lambda v, f, t: ClientReply(verb=v, rid=_field(f, 0), value=t)),
    "GetBackState": _Grammar(1, True, lambda v, f, t: ClientReply(verb=v, rid=_field(f, 0), value=t)),
    # -1: every field, no tail
    "ThemeColors": _Grammar(-1, False, lambda v, f, t: ThemeColors(pairs=_theme_pairs(f))),
    "GetThemeColor": _Grammar(1, False, lambda v, f, t: GetThemeColor(slot=_field(f, 0))),
    "SetThemeColor": _Grammar(2, False, lambda v, f, t: SetThemeColor(
        slot=_field(f, 0), value=_field(f, 1),
    )),
    "Exit": _Grammar(0, False, lambda v, f, t: Exit(verb=v)),
    "ClientDisconnect": _Grammar(0, False, lambda v, f, t: Exit(verb=v)),
}


def decode(line: str) -> InboundCommand:
    """Decode one inbound wire line into its command model."""
    line = line.strip("\r\n")
    if not line.strip():
        return Empty()

    parts = line.lstrip().split(None, 1)
    verb = parts[0]
    rest = parts[1] if len(parts) > 1 else ""

    grammar = _GRAMMAR.get(verb)
    if grammar is None:
        return Unknown(name=verb, rest=rest)

    if grammar.fields < 0:
        return grammar.build(verb, rest.split(), "")

    if grammar.tail:
        if not grammar.fields:
            return grammar.build(verb, [], rest)
        pieces = rest.split(None, grammar.fields)
        tail = pieces[grammar.fields] if len(pieces) > grammar.fields else ""
        return grammar.build(verb, pieces[:grammar.fields], tail)

    return grammar.build(verb, rest.split()[:grammar.fields], "")


def encode(verb: str, *args: int | str) -> str:
    """Join a verb and its arguments into a wire line.

    Raises:
        ProtocolError: If the verb is empty or contains whitespace.
    """
    if not verb or any(ch.isspace() for ch in verb):
        raise ProtocolError(f"Invalid verb: {verb!r}")
    return " ".join([verb, *(str(arg) for arg in args)])


def encode_command(cmd: OutboundCommand) -> str:
    """Serialize a structured outbound command."""
    return encode(cmd.verb, *cmd.args)


def encode_all(commands: list[OutboundCommand]) -> list[str]:
    return [encode_command(cmd) for cmd in commands]
