"""
Full-screen prompt_toolkit front end for the branch selector.

Every key binding forwards to BranchSelectorSession.handle_key; the
application then invalidates and redraws the whole list from
BranchSelectorSession.render. Cancelling ends the process.
"""

from __future__ import annotations

import sys
from typing import Optional

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style

from . import git_adapter
from .config import UIConfig
from .errors import NoBaseBranchError
from .selector import (
    KEY_BACKSPACE,
    KEY_CANCEL,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_QUIT,
    KEY_UP,
    BranchSelectorSession,
    SelectorAction,
)

STYLE = Style.from_dict(
    {
        "title": "bold",
        "search": "fg:#00afff",
        "selected": "bg:#0000aa fg:white bold",
        "match": "fg:#ffaf00 bold",
        "label": "fg:#888888 italic",
        "scroll": "fg:#888888",
        "empty": "fg:#ff5f5f",
        "help": "fg:#666666",
    }
)


def build_key_bindings(session: BranchSelectorSession) -> KeyBindings:
    kb = KeyBindings()

    def dispatch(event: KeyPressEvent, key: str) -> None:
        action = session.handle_key(key)
        if action is SelectorAction.SELECT and session.selected is not None:
            event.app.exit(result=session.selected.ref)
        elif action is SelectorAction.CANCEL:
            event.app.exit(result=None)

    @kb.add("up")
    def _up(event: KeyPressEvent) -> None:
        dispatch(event, KEY_UP)

    @kb.add("down")
    def _down(event: KeyPressEvent) -> None:
        dispatch(event, KEY_DOWN)

    @kb.add("enter")
    def _enter(event: KeyPressEvent) -> None:
        dispatch(event, KEY_ENTER)

    @kb.add("escape", eager=True)
    def _escape(event: KeyPressEvent) -> None:
        dispatch(event, KEY_ESCAPE)

    @kb.add("backspace")
    def _backspace(event: KeyPressEvent) -> None:
        dispatch(event, KEY_BACKSPACE)

    @kb.add("c-c")
    def _cancel(event: KeyPressEvent) -> None:
        dispatch(event, KEY_CANCEL)

    @kb.add(KEY_QUIT)
    def _quit(event: KeyPressEvent) -> None:
        dispatch(event, KEY_QUIT)

    @kb.add(Keys.Any)
    def _typed(event: KeyPressEvent) -> None:
        dispatch(event, event.data)

    return kb


def build_application(session: BranchSelectorSession) -> Application:
    control = FormattedTextControl(session.render, focusable=True, show_cursor=False)
    return Application(
        layout=Layout(Window(control, wrap_lines=False)),
        key_bindings=build_key_bindings(session),
        style=STYLE,
        full_screen=True,
    )


def select_branch(config: UIConfig, cwd: Optional[str] = None, git=git_adapter) -> str:
    """
    Let the user pick a base branch and return its full reference.

    Local branches resolve to their name, remote-only branches to
    ``<remote>/<name>``. Cancelling prints a message and exits the
    process with status 0.
    """

    session = BranchSelectorSession(config, git=git, cwd=cwd)
    if not session.all_branches:
        raise NoBaseBranchError("no branches found to compare against; pass --base or --range")

    result: Optional[str] = build_application(session).run()
    if result is None:
        print("Branch selection cancelled.")
        sys.exit(0)
    return result
