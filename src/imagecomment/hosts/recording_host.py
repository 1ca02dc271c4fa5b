"""Editor host that records actions for a remote editor to replay."""

from imagecomment.paste.host import EditorContext, EditorHost
from imagecomment.paste.models import ActionKind, HostAction


class RecordingHost(EditorHost):
    """Collects editor actions instead of performing them.

    The HTTP API returns ``actions`` to the editor plugin, which
    applies them in order.
    """

    def __init__(self, context: EditorContext | None) -> None:
        self._context = context
        self.actions: list[HostAction] = []

    def active_editor(self) -> EditorContext | None:
        return self._context

    async def insert_text(self, text: str) -> None:
        self.actions.append(HostAction(kind=ActionKind.INSERT, text=text))

    async def default_paste(self) -> None:
        self.actions.append(HostAction(kind=ActionKind.DEFAULT_PASTE))

    def show_info(self, message: str) -> None:
        self.actions.append(HostAction(kind=ActionKind.INFO, text=message))

    def show_warning(self, message: str) -> None:
        self.actions.append(HostAction(kind=ActionKind.WARNING, text=message))

    def show_error(self, message: str) -> None:
        self.actions.append(HostAction(kind=ActionKind.ERROR, text=message))

    def set_status(self, message: str, timeout_ms: int) -> None:
        self.actions.append(
            HostAction(kind=ActionKind.STATUS, text=message, timeout_ms=timeout_ms)
        )
