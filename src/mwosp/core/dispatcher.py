"""Command dispatcher: the MWOSP-v1 session state machine.

Applies one decoded inbound command to a session and returns what has
to be sent back, in order. Every transition that changes what is on
screen ends with a full :func:`~mwosp.core.render.render` instead of an
incremental update. Nothing here raises on bad client input: malformed
values fall back to defaults and unknown verbs are only logged.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from pydantic import BaseModel, Field

from mwosp.core.hittest import hit_test
from mwosp.core.render import click_feedback, color, input_echo, loading_placeholder, render
from mwosp.core.theme import THEME_DEFAULTS, format_hex, parse_hex
from mwosp.domain.models import (
    DEFAULT_SCREEN_HEIGHT,
    DEFAULT_SCREEN_WIDTH,
    HOME_BUTTON_OPEN_URL,
    HOME_BUTTON_SEARCH,
    HOME_BUTTON_SETTINGS,
    NAVIGATE_KEYWORDS,
    Action,
    AskUsername,
    CloseConnection,
    GoHome,
    PressButton,
    PromptId,
    Session,
    ViewState,
    VisitedItemAction,
)
from mwosp.protocol.codec import parse_int
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
    command,
)

logger = logging.getLogger(__name__)

DEFAULT_SITE_PORT = 443
DEFAULT_SITE_STATE = ViewState.STARTPAGE.value
DEFAULT_SEARCH_TARGET = "mw-search-server.onrender.app@search"
VISIT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

URL_PROMPT = "Which page do you want to visit?"
USERNAME_PROMPT = "What is your name?"


class DispatchResult(BaseModel):
    """Outcome of one inbound command."""

    commands: list[OutboundCommand] = Field(default_factory=list)
    close: bool = Field(default=False, description="Whether the connection must be closed")


class NavigateTarget(BaseModel):
    domain: str
    port: int
    state: str


def parse_navigate_target(target: str, default_port: int = DEFAULT_SITE_PORT) -> NavigateTarget | None:
    """Parse ``domain[:port][@state]``.

    The colon only separates a port when it comes before ``@``; a
    malformed port falls back to ``default_port`` and a missing or empty
    state means ``startpage``. Returns None when no domain is present.
    """
    location, at, state = target.partition("@")
    domain, colon, port_text = location.partition(":")
    domain = domain.strip()
    if not domain:
        return None
    port = parse_int(port_text, default_port) if colon else default_port
    return NavigateTarget(domain=domain, port=port, state=state.strip() or DEFAULT_SITE_STATE)


class Dispatcher:
    """Applies inbound commands to a session.

    One dispatcher may serve many connections; it holds configuration
    only; the per-connection state lives in the :class:`Session` passed
    to :meth:`dispatch`.

    Args:
        default_width: Screen width assumed when the handshake value is unusable.
        default_height: Screen height assumed when the handshake value is unusable.
        default_port: Port used by ``Navigate`` when none (or garbage) is given.
        search_target: Navigate target opened by the home screen's search button.
        clock: Source of visit timestamps (injectable for tests).
    """

    def __init__(
        self,
        default_width: int = DEFAULT_SCREEN_WIDTH,
        default_height: int = DEFAULT_SCREEN_HEIGHT,
        default_port: int = DEFAULT_SITE_PORT,
        search_target: str = DEFAULT_SEARCH_TARGET,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._default_width = default_width
        self._default_height = default_height
        self._default_port = default_port
        self._search_target = search_target
        self._clock = clock

    def dispatch(self, cmd: InboundCommand, session: Session) -> DispatchResult:
        """Apply ``cmd`` to ``session`` and return the replies to send."""
        if isinstance(cmd, Handshake):
            return self._handshake(cmd, session)
        if isinstance(cmd, RenderRequest):
            return DispatchResult(commands=render(session))
        if isinstance(cmd, Click):
            return self._click(cmd, session)
        if isinstance(cmd, Input):
            return DispatchResult(commands=input_echo(session, cmd.text))
        if isinstance(cmd, Navigate):
            return self._navigate(cmd.target, session)
        if isinstance(cmd, SetSession):
            session.session_token = cmd.token
            return DispatchResult()
        if isinstance(cmd, GetSession):
            return _reply("GetBackSession", cmd.rid, session.session_token)
        if isinstance(cmd, SetState):
            session.view_state = cmd.state
            return DispatchResult(commands=render(session))
        if isinstance(cmd, GetState):
            return _reply("GetBackState", cmd.rid, session.view_state)
        if isinstance(cmd, ClearSettings):
            session.reset()
            logger.info("Session settings cleared")
            return DispatchResult(commands=render(session))
        if isinstance(cmd, GetBackText):
            return self._prompt_reply(cmd, session)
        if isinstance(cmd, (SetStorage, GetBackStorage)):
            if not cmd.key:
                logger.debug("Ignoring %s without a key", cmd.verb)
                return DispatchResult()
            session.storage[cmd.key] = cmd.value
            return DispatchResult()
        if isinstance(cmd, GetStorage):
            return _reply("GetBackStorage", cmd.key, session.storage.get(cmd.key, ""))
        if isinstance(cmd, ThemeColors):
            for slot, value in cmd.pairs:
                _set_theme_color(session, slot, value)
            return DispatchResult(commands=render(session))
        if isinstance(cmd, GetThemeColor):
            return _reply("ThemeColor", cmd.slot, format_hex(color(session, cmd.slot)))
        if isinstance(cmd, SetThemeColor):
            _set_theme_color(session, cmd.slot, cmd.value)
            if session.view_state in (ViewState.HOME.value, ViewState.SETTINGS.value):
                return DispatchResult(commands=render(session))
            return DispatchResult()
        if isinstance(cmd, Exit):
            logger.info("Client requested close (%s)", cmd.verb)
            return DispatchResult(close=True)
        if isinstance(cmd, ClientReply):
            logger.debug("%s %s: %s", cmd.verb, cmd.rid, cmd.value)
            return DispatchResult()
        if isinstance(cmd, Unknown):
            logger.info("Ignoring unknown verb: %s", cmd.name)
            return DispatchResult()
        if isinstance(cmd, Empty):
            return DispatchResult()

        logger.warning("Unhandled command type: %s", type(cmd).__name__)
        return DispatchResult()

    # -- handshake ----------------------------------------------------------

    def _handshake(self, cmd: Handshake, session: Session) -> DispatchResult:
        session.session_token = cmd.token
        session.screen_width = cmd.width if cmd.width and cmd.width > 0 else self._default_width
        session.screen_height = cmd.height if cmd.height and cmd.height > 0 else self._default_height
        logger.info(
            "Handshake OK (session=%s, %dx%d)",
            session.session_token or "-", session.screen_width, session.screen_height,
        )
        return DispatchResult(commands=[command(HANDSHAKE_VERB, "OK")])

    # -- navigation ---------------------------------------------------------

    def _navigate(self, target: str, session: Session) -> DispatchResult:
        target = target.strip()
        if target in NAVIGATE_KEYWORDS:
            session.view_state = target
            commands = render(session)
            if target == ViewState.INPUT.value:
                commands.append(_prompt(PromptId.URL, URL_PROMPT))
            return DispatchResult(commands=commands)

        parsed = parse_navigate_target(target, self._default_port)
        if parsed is None:
            logger.info("Ignoring Navigate without a domain: %r", target)
            return DispatchResult()

        session.current_domain = parsed.domain
        session.current_port = parsed.port
        session.view_state = parsed.state
        session.storage[parsed.domain] = self._clock().strftime(VISIT_TIMESTAMP_FORMAT)
        logger.info("Navigate to %s:%d@%s", parsed.domain, parsed.port, parsed.state)

        commands = loading_placeholder(session, parsed.domain)
        commands.extend(render(session))
        return DispatchResult(commands=commands)

    def _prompt_reply(self, cmd: GetBackText, session: Session) -> DispatchResult:
        if cmd.rid == PromptId.USERNAME.value:
            session.username = cmd.text.strip()
            return DispatchResult(commands=render(session))
        if cmd.rid in (PromptId.URL.value, PromptId.OPEN_SITE_URL.value):
            if not cmd.text.strip():
                logger.debug("Empty %s prompt reply, staying put", cmd.rid)
                return DispatchResult()
            return self._navigate(cmd.text, session)
        logger.info("Ignoring text reply for unknown prompt id: %s", cmd.rid)
        return DispatchResult()

    # -- pointer ------------------------------------------------------------

    def _click(self, cmd: Click, session: Session) -> DispatchResult:
        commands = click_feedback(session, cmd.x, cmd.y)
        action = hit_test(cmd.x, cmd.y, session)
        logger.debug("Click %d,%d -> %s", cmd.x, cmd.y, action.kind)
        result = self._apply_action(action, session)
        commands.extend(result.commands)
        return DispatchResult(commands=commands, close=result.close)

    def _apply_action(self, action: Action, session: Session) -> DispatchResult:
        if isinstance(action, CloseConnection):
            return DispatchResult(close=True)
        if isinstance(action, GoHome):
            session.view_state = ViewState.HOME.value
            return DispatchResult(commands=render(session))
        if isinstance(action, PressButton):
            if action.index == HOME_BUTTON_SEARCH:
                return self._navigate(self._search_target, session)
            if action.index == HOME_BUTTON_OPEN_URL:
                return DispatchResult(commands=[_prompt(PromptId.URL, URL_PROMPT)])
            if action.index == HOME_BUTTON_SETTINGS:
                session.view_state = ViewState.SETTINGS.value
                return DispatchResult(commands=render(session))
        if isinstance(action, VisitedItemAction):
            return self._visited_item(action, session)
        if isinstance(action, AskUsername):
            return DispatchResult(commands=[_prompt(PromptId.USERNAME, USERNAME_PROMPT)])
        return DispatchResult()

    def _visited_item(self, action: VisitedItemAction, session: Session) -> DispatchResult:
        if action.item == "delete":
            session.storage.pop(action.domain, None)
            return DispatchResult(commands=render(session))
        if action.item == "clearValue":
            session.storage[action.domain] = ""
            return DispatchResult(commands=render(session))
        if action.item == "open":
            question = f"{URL_PROMPT} ({action.domain})"
            return DispatchResult(commands=[_prompt(PromptId.OPEN_SITE_URL, question)])
        return self._navigate(f"{action.domain}:{self._default_port}@{DEFAULT_SITE_STATE}", session)


def _reply(verb: str, key: str, value: str) -> DispatchResult:
    return DispatchResult(commands=[command(verb, key, value)])


def _prompt(rid: PromptId, question: str) -> OutboundCommand:
    return command("PromptText", rid.value, question)


def _set_theme_color(session: Session, slot: str, value: str) -> None:
    if slot not in THEME_DEFAULTS:
        logger.debug("Ignoring unknown theme slot %r", slot)
        return
    parsed = parse_hex(value)
    if parsed is None:
        logger.debug("Ignoring invalid color %r for slot %s", value, slot)
        return
    session.theme[slot] = parsed
