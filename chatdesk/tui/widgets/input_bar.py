"""Input bar — question editor, send button and image attachment controls."""

from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Button, Input, Static, TextArea

from chatdesk.shared.models.conversation import Attachment


class PromptInput(TextArea):
    """TextArea that fires SubmitRequested on Enter (Shift+Enter for newlines)."""

    class SubmitRequested(Message):
        """Fired when bare Enter is pressed."""

    async def _on_key(self, event: events.Key) -> None:
        if event.key == "enter":
            event.stop()
            event.prevent_default()
            self.post_message(self.SubmitRequested())
            return
        if event.key == "shift+enter":
            event.stop()
            event.prevent_default()
            self.insert("\n")
            return
        await super()._on_key(event)


class InputBar(Widget):
    """Bottom bar where the user writes a question and picks an image.

    The bar never clears itself on submit: the pending-input buffer in
    the view state is the source of truth and the screen mirrors it
    back here with ``sync_text``/``show_attachment``.
    """

    class Submitted(Message):
        """User asked to send the current question."""

    class TextChanged(Message):
        def __init__(self, text: str) -> None:
            self.text = text
            super().__init__()

    class AttachRequested(Message):
        def __init__(self, path: str) -> None:
            self.path = path
            super().__init__()

    class AttachmentRemoved(Message):
        """User dropped the pending attachment."""

    class NewConversationRequested(Message):
        """User pressed the new-conversation button."""

    DEFAULT_CSS = """
    InputBar {
        height: auto;
        dock: bottom;
        padding: 0 1;
    }

    InputBar #prompt-row, InputBar #attach-row {
        height: auto;
    }

    InputBar #prompt-input {
        height: 5;
        width: 1fr;
    }

    InputBar #attach-path {
        width: 1fr;
    }

    InputBar #attachment-label {
        width: auto;
        padding: 1 1 0 1;
        color: $text-muted;
    }
    """

    def compose(self) -> ComposeResult:
        with Horizontal(id="prompt-row"):
            yield Button("+", id="new-conversation-btn", classes="quick-action-btn")
            yield PromptInput(id="prompt-input")
            yield Button("Enviar", id="send-btn", variant="primary")
        with Horizontal(id="attach-row"):
            yield Input(placeholder="Ruta de imagen (opcional)", id="attach-path")
            yield Button("Adjuntar", id="attach-btn")
            yield Button("Quitar", id="remove-attachment-btn", disabled=True)
            yield Static("", id="attachment-label")

    @property
    def text(self) -> str:
        return self.query_one("#prompt-input", PromptInput).text

    def on_prompt_input_submit_requested(self) -> None:
        self.post_message(self.Submitted())

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        event.stop()
        self.post_message(self.TextChanged(event.text_area.text))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "attach-path":
            event.stop()
            self._request_attach()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "send-btn":
            self.post_message(self.Submitted())
        elif button_id == "attach-btn":
            self._request_attach()
        elif button_id == "remove-attachment-btn":
            self.post_message(self.AttachmentRemoved())
        elif button_id == "new-conversation-btn":
            self.post_message(self.NewConversationRequested())

    def _request_attach(self) -> None:
        path = self.query_one("#attach-path", Input).value.strip()
        if path:
            self.post_message(self.AttachRequested(path))

    def sync_text(self, text: str) -> None:
        """Mirror the pending text buffer into the editor."""
        editor = self.query_one("#prompt-input", PromptInput)
        if editor.text != text:
            editor.text = text

    def show_attachment(self, attachment: Attachment | None) -> None:
        label = self.query_one("#attachment-label", Static)
        remove_btn = self.query_one("#remove-attachment-btn", Button)
        if attachment is None:
            label.update("")
            remove_btn.disabled = True
            self.query_one("#attach-path", Input).value = ""
            return
        safe_name = attachment.filename.replace("[", "\\[")
        label.update(f"📎 {safe_name} ({attachment.size:,} bytes)")
        remove_btn.disabled = False

    def focus_input(self) -> None:
        self.query_one("#prompt-input", PromptInput).focus()
