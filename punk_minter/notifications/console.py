"""Console notices — the terminal's stand-in for a browser alert."""
import sys
from typing import TextIO


class ConsoleNotifier:
    """Print notices to a stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def send_notice(self, message: str, subject: str = "") -> bool:
        stream = self._stream or sys.stdout
        prefix = f"[{subject}] " if subject else ""
        print(f"{prefix}{message}", file=stream, flush=True)
        return True
