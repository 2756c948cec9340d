"""Welcome panel shown for the ``bienvenida`` option."""

from __future__ import annotations

from textual.widgets import Static


class WelcomePanel(Static):
    """Greets the signed-in user by full name."""

    DEFAULT_CSS = """
    WelcomePanel {
        height: 1fr;
        content-align: center middle;
        text-align: center;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", markup=True, **kwargs)
        self.full_name = ""

    def set_name(self, full_name: str) -> None:
        self.full_name = full_name
        safe_name = full_name.replace("[", "\\[") or "usuario"
        self.update(
            f"[bold]¡Bienvenido, {safe_name}![/bold]\n\n"
            "[dim]Elige una conversación a la izquierda o pulsa "
            "Ctrl+N para empezar una nueva.[/dim]"
        )
