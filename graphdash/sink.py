from __future__ import annotations

from typing import Protocol


class DisplaySink(Protocol):
    """Somewhere formatted text ends up, usually one of the UI panels.

    Text is Rich console markup; every ``write`` appends one or more lines.
    """

    def write(self, text: str) -> None:
        ...

    def clear(self) -> None:
        ...
