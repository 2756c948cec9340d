"""Status bar — bottom bar showing user, conversation and sync state."""

from __future__ import annotations

import time
from typing import Optional

from rich.text import Text
from textual.reactive import reactive
from textual.timer import Timer
from textual.widget import Widget


def _format_age(seconds: float) -> str:
    """Format seconds since the last sync into a short string."""
    secs = int(seconds)
    if secs < 60:
        return f"{secs}s"
    if secs < 3600:
        m, s = divmod(secs, 60)
        return f"{m}m {s}s"
    h, remainder = divmod(secs, 3600)
    return f"{h}h {remainder // 60}m"


class StatusBar(Widget):
    """Single-line status bar with user info and sync state."""

    username: reactive[str] = reactive("—")
    active_title: reactive[str] = reactive("")
    conversation_count: reactive[int] = reactive(0)
    status: reactive[str] = reactive("connecting")
    detail: reactive[str] = reactive("")

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $panel;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._last_sync_at: Optional[float] = None
        self._age_timer: Timer | None = None

    def on_mount(self) -> None:
        self._age_timer = self.set_interval(1.0, self.refresh)

    def mark_synced(self) -> None:
        self._last_sync_at = time.monotonic()
        self.status = "connected"
        self.detail = ""

    def mark_error(self, detail: str) -> None:
        self.status = "error"
        self.detail = detail

    def render(self) -> Text:
        status_colors = {
            "connected": "green",
            "connecting": "yellow",
            "error": "red bold",
        }
        color = status_colors.get(self.status, "white")

        bar = Text()
        bar.append(f" {self.username} ", style="bold")
        bar.append(" │ ", style="dim")
        bar.append(self.active_title or "sin conversación", style="cyan")
        bar.append(" │ ", style="dim")
        bar.append(f"{self.conversation_count} conversaciones", style="dim")
        bar.append(" │ ", style="dim")

        status_display = f"● {self.status}"
        if self._last_sync_at is not None and self.status == "connected":
            status_display += f" ({_format_age(time.monotonic() - self._last_sync_at)})"
        bar.append(status_display, style=color)
        if self.detail:
            bar.append(f"  {self.detail}", style="dim italic red")
        return bar
