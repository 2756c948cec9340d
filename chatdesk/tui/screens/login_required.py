"""Login-required screen — shown when no stored identity is usable."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Button, Static


class LoginRequiredScreen(Screen):
    """Tells the user how to store an identity, then lets them quit."""

    CSS_PATH = "../styles/modal.tcss"
    BINDINGS = [
        ("q", "app.quit", "Quit"),
        ("escape", "app.quit", "Quit"),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="login-dialog"):
            yield Static(
                "[bold $warning]Sesión requerida[/bold $warning]",
                id="login-title",
                markup=True,
            )
            yield Static(
                "No hay una identidad guardada en este equipo.\n\n"
                "Inicia sesión desde la terminal y vuelve a abrir chatdesk:\n\n"
                "  chatdesk --login USUARIO --person-id ID \\\n"
                "      --first-name NOMBRES --paternal-surname APELLIDO",
                id="login-body",
                markup=False,
            )
            yield Button("Salir", id="login-quit", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#login-quit", Button).focus()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login-quit":
            await self.app.action_quit()
