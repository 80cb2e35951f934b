"""
Host stand-ins for requests coming over HTTP.

The browser side shows notifications and asks for confirmation itself, so
a request handler collects notifications into its response and treats
the request as already confirmed.
"""

from __future__ import annotations


class CollectingNotifier:
    def __init__(self) -> None:
        self.messages: list[dict[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append({"level": "success", "message": message})

    def warning(self, message: str) -> None:
        self.messages.append({"level": "warning", "message": message})

    def error(self, message: str) -> None:
        self.messages.append({"level": "error", "message": message})


class PreconfirmedDialogs:
    """Dialogs for a request the user has already confirmed in the browser."""

    async def confirm(
        self,
        title: str,
        message: str,
        confirm_label: str,
        cancel_label: str | None = None,
    ) -> bool:
        return True

    async def alert(self, title: str, message: str, confirm_label: str) -> None:
        return None
