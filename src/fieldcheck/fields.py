"""Minimal field handles.

UI toolkits supply their own handles; these cover scripts, the CLI and
tests where the text lives in memory.
"""

from dataclasses import dataclass
from typing import Callable


@dataclass
class TextField:
    """A field whose text is held in memory and may be changed."""

    text: str = ""
    label: str | None = None

    def get_text(self) -> str:
        return self.text


class CallbackField:
    """A field that reads its text from a callable on every access."""

    def __init__(self, read: Callable[[], str], label: str | None = None):
        self._read = read
        self.label = label

    def get_text(self) -> str:
        return self._read()
