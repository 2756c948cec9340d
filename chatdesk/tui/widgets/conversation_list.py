"""Conversation list — sidebar of conversation titles."""

from __future__ import annotations

from rich.text import Text
from textual.message import Message
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from chatdesk.shared.models.conversation import ConversationSummary


class ConversationList(OptionList):
    """Titles of the user's conversations; Enter opens, Delete removes."""

    BINDINGS = [
        ("delete", "request_delete", "Delete"),
        ("ctrl+d", "request_delete", "Delete"),
    ]

    class Selected(Message):
        def __init__(self, title: str) -> None:
            self.title = title
            super().__init__()

    class DeleteRequested(Message):
        def __init__(self, title: str) -> None:
            self.title = title
            super().__init__()

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._titles: list[str] = []
        self._active: str | None = None

    @property
    def titles(self) -> list[str]:
        return list(self._titles)

    def set_conversations(
        self,
        summaries: list[ConversationSummary],
        active: str | None,
    ) -> None:
        """Redraw the list, keeping the highlight on the same title."""
        titles = [s.title for s in summaries]
        if titles == self._titles and active == self._active:
            return

        highlighted_title = self._highlighted_title()
        self._titles = titles
        self._active = active

        self.clear_options()
        self.add_options([self._render_option(t, t == active) for t in titles])

        if highlighted_title in titles:
            self.highlighted = titles.index(highlighted_title)
        elif active in titles:
            self.highlighted = titles.index(active)

    @staticmethod
    def _render_option(title: str, is_active: bool) -> Option:
        label = Text()
        if is_active:
            label.append("● ", style="bold green")
            label.append(title, style="bold")
        else:
            label.append("  ")
            label.append(title)
        return Option(label)

    def _highlighted_title(self) -> str | None:
        index = self.highlighted
        if index is None or not 0 <= index < len(self._titles):
            return None
        return self._titles[index]

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        index = event.option_index
        if 0 <= index < len(self._titles):
            self.post_message(self.Selected(self._titles[index]))

    def action_request_delete(self) -> None:
        title = self._highlighted_title()
        if title is not None:
            self.post_message(self.DeleteRequested(title))
