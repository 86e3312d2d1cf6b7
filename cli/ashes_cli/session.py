"""UI state for one terminal session, passed into the REPL explicitly."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Tab = Literal["records", "locations"]
ModalMode = Literal["create", "edit", "details"]


@dataclass
class SessionState:
    """Which tab is active and what the user is in the middle of."""

    authenticated: bool = False
    username: str | None = None
    tab: Tab = "records"
    modal_mode: ModalMode | None = None
    selected_id: str | None = None

    def open_modal(self, mode: ModalMode, selected_id: str | None = None) -> None:
        self.modal_mode = mode
        self.selected_id = selected_id

    def close_modal(self) -> None:
        self.modal_mode = None
        self.selected_id = None

    def switch_tab(self, tab: Tab) -> None:
        self.tab = tab
        self.close_modal()

    def login(self, username: str) -> None:
        self.authenticated = True
        self.username = username

    def logout(self) -> None:
        self.authenticated = False
        self.username = None
        self.tab = "records"
        self.close_modal()
