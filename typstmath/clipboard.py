from __future__ import annotations

import logging

import pyperclip

from typstmath.errors import ClipboardUnavailable, ClipboardWriteError

log = logging.getLogger(__name__)


class ClipboardBridge:
    """Copies text to the system clipboard. Failures are logged, never raised."""

    def __init__(self) -> None:
        self.error: ClipboardUnavailable | None = None
        try:
            # pyperclip picks its backend lazily; reading once forces the choice
            pyperclip.paste()
        except pyperclip.PyperclipException as e:
            self.error = ClipboardUnavailable(str(e))
            log.warning("Failed to initialize clipboard support: %s", e)

    @property
    def available(self) -> bool:
        return self.error is None

    def copy(self, text: str) -> bool:
        if not self.available:
            log.error("Failed to initialize clipboard support")
            return False
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            log.error("%s", ClipboardWriteError(f"Failed to copy to clipboard: {e}"))
            return False
        return True
