"""
Exceptions of the live nudge core.

Lower layers raise these. The nudge session catches them at its boundary
and turns them into state transitions; only ChannelStartFailure reaches
the application layer.
"""

from __future__ import annotations


class NudgeError(Exception):
    """Base exception for the nudge core."""

    pass


class BufferRangeError(NudgeError):
    """A text range does not exist in the buffer."""

    pass


class ScanFailure(NudgeError):
    """Tokenizing or parsing a line failed."""

    pass


class StageFailure(NudgeError):
    """Buffer changed between scan and stage, or the stage edit failed."""

    pass


class CommitFailure(NudgeError):
    """Writing the committed value into the buffer failed."""

    pass


class CancelFailure(NudgeError):
    """Restoring the original literal text failed."""

    pass


class PersistenceFailure(NudgeError):
    """Saving the buffer to disk failed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class ChannelStartFailure(NudgeError):
    """Live value channel could not bind or did not start in time."""

    def __init__(self, host: str, port: int, message: str) -> None:
        self.host = host
        self.port = port
        self.message = message
        super().__init__(f"ws://{host}:{port}: {message}")
