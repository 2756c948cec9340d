"""Delete confirmation modal — asks before removing a conversation.

Returns True when the user confirms, False otherwise. Keys pressed in
the first moments after the modal opens are ignored so a held Delete
key does not confirm by accident.
"""
from __future__ import annotations

import time

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static


class DeleteConfirmScreen(ModalScreen[bool]):
    """Yes/no dialog shown before a conversation is deleted."""

    CSS_PATH = "../styles/modal.tcss"

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("n", "cancel", "No"),
        ("y", "confirm", "Confirm"),
    ]

    _MOUNT_GUARD_SECONDS = 0.3
    _BUTTON_ORDER = ["btn-delete-confirm", "btn-delete-cancel"]

    def __init__(self, heading: str, text: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.heading_text = heading
        self.body_text = text
        self._mount_time = 0.0

    def compose(self) -> ComposeResult:
        with Vertical(id="delete-confirm-dialog"):
            yield Label(self.heading_text, id="delete-confirm-heading")
            yield Static(
                self.body_text.replace("[", "\\["),
                id="delete-confirm-details",
            )
            yield Button(
                "\\[y] Sí, eliminar",
                id="btn-delete-confirm",
                variant="error",
            )
            yield Button("\\[Esc] Cancelar", id="btn-delete-cancel")

    def on_mount(self) -> None:
        self._mount_time = time.monotonic()
        self.query_one("#btn-delete-cancel", Button).focus()

    def _is_guarded(self) -> bool:
        return time.monotonic() - self._mount_time < self._MOUNT_GUARD_SECONDS

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if self._is_guarded():
            return
        self.dismiss(event.button.id == "btn-delete-confirm")

    def key_up(self) -> None:
        self._move_focus(-1)

    def key_down(self) -> None:
        self._move_focus(1)

    def _move_focus(self, direction: int) -> None:
        focused = self.focused
        current = getattr(focused, "id", None)
        if current not in self._BUTTON_ORDER:
            self.query_one("#btn-delete-cancel", Button).focus()
            return
        new_idx = (self._BUTTON_ORDER.index(current) + direction) % len(self._BUTTON_ORDER)
        self.query_one(f"#{self._BUTTON_ORDER[new_idx]}", Button).focus()

    def action_cancel(self) -> None:
        if self._is_guarded():
            return
        self.dismiss(False)

    def action_confirm(self) -> None:
        if self._is_guarded():
            return
        self.dismiss(True)
