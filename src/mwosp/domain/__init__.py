"""Domain models for mwosp.

This package contains the session record, view states and hit-test
actions shared by the dispatcher, hit-tester and render engine. All
models use Pydantic v2 for validation.
"""

from mwosp.domain.models import (
    Action,
    AskUsername,
    CloseConnection,
    GoHome,
    NoAction,
    PressButton,
    PromptId,
    Session,
    ViewState,
    VisitedItemAction,
)

__all__ = [
    "Action",
    "AskUsername",
    "CloseConnection",
    "GoHome",
    "NoAction",
    "PressButton",
    "PromptId",
    "Session",
    "ViewState",
    "VisitedItemAction",
]
