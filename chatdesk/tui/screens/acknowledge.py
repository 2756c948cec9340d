"""Acknowledgment modal — a message the user dismisses with OK."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class AcknowledgeScreen(ModalScreen[None]):
    """Show a short notice until the user closes it."""

    CSS_PATH = "../styles/modal.tcss"
    BINDINGS = [
        ("escape", "close", "Close"),
        ("enter", "close", "OK"),
    ]

    def __init__(self, heading: str, text: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.heading_text = heading
        self.body_text = text

    def compose(self) -> ComposeResult:
        safe_heading = self.heading_text.replace("[", "\\[")
        with Vertical(id="acknowledge-dialog"):
            yield Static(
                f"[bold $success]{safe_heading}[/bold $success]",
                id="acknowledge-title",
                markup=True,
            )
            yield Static(self.body_text.replace("[", "\\["), id="acknowledge-body")
            yield Button("OK", id="acknowledge-ok", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#acknowledge-ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "acknowledge-ok":
            self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)
