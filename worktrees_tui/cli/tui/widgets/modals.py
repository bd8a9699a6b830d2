"""Modal dialogs for worktree add/remove."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

_MODAL_CSS = """
#modal-box {
    width: 60;
    height: auto;
    border: solid $accent;
    padding: 0 1;
    background: $surface;
}
#modal-actions {
    height: auto;
}
"""


class ConfirmModal(ModalScreen[bool]):
    """Yes/no confirmation with the title on the border line."""

    DEFAULT_CSS = "ConfirmModal { align: center middle; }" + _MODAL_CSS

    BINDINGS = [
        ("escape", "dismiss_modal", "Cancel"),
        ("n", "dismiss_no", "No"),
        ("y", "dismiss_yes", "Yes"),
    ]

    def __init__(self, title: str, message: str, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._title = title
        self._message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-box") as box:
            box.border_title = self._title
            yield Label(self._message, id="confirm-message")
            with Horizontal(id="modal-actions"):
                yield Button("[Y] Yes", variant="primary", id="confirm-yes")
                yield Button("[N] No", id="confirm-no")

    def action_dismiss_modal(self) -> None:
        self.dismiss(False)

    def action_dismiss_no(self) -> None:
        self.dismiss(False)

    def action_dismiss_yes(self) -> None:
        self.dismiss(True)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")


class BranchInputModal(ModalScreen[str | None]):
    """Ask for the branch of a new working tree."""

    DEFAULT_CSS = "BranchInputModal { align: center middle; }" + _MODAL_CSS

    BINDINGS = [
        ("escape", "dismiss_modal", "Cancel"),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-box") as box:
            box.border_title = "New working tree"
            yield Label("Branch (created when it does not exist):")
            yield Input(placeholder="feature/my-change", id="branch-input")
            yield Label("", id="branch-error")

    def on_mount(self) -> None:
        self.query_one("#branch-input", Input).focus()

    def action_dismiss_modal(self) -> None:
        self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        branch = event.value.strip()
        if not branch:
            self.query_one("#branch-error", Label).update("Branch name is required")
            return
        self.dismiss(branch)
