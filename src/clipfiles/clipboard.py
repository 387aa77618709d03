"""
Clipboard output.
"""

from __future__ import annotations

from typing import Protocol

import pyperclip

from .errors import ClipboardUnavailableError


class ClipboardSink(Protocol):
    def set_text(self, text: str) -> None: ...


class PyperclipSink:
    """Write to the system clipboard through pyperclip.

    Raises :class:`ClipboardUnavailableError` on construction when pyperclip
    finds no copy mechanism (no display, no xclip/xsel/wl-copy, ...).
    """

    def __init__(self) -> None:
        copy, _paste = pyperclip.determine_clipboard()
        # the no-clipboard stub is falsy
        if not copy:
            raise ClipboardUnavailableError(
                "No clipboard mechanism found (on Linux install xclip, xsel or wl-clipboard)"
            )
        self._copy = copy

    def set_text(self, text: str) -> None:
        try:
            self._copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardUnavailableError(f"Could not copy to clipboard: {e}")
