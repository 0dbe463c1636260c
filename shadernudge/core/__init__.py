"""
Live nudge core: literal scanning, placeholder staging and the session
state machine. Free of Qt and networking; collaborators are injected.
"""

from shadernudge.core.errors import (
    BufferRangeError,
    CancelFailure,
    ChannelStartFailure,
    CommitFailure,
    NudgeError,
    PersistenceFailure,
    ScanFailure,
    StageFailure,
)
from shadernudge.core.literal_scanner import scan, scan_all, scan_at_position_or_selection
from shadernudge.core.nudge_session import (
    AffordanceCallbacks,
    EditSession,
    NudgeAffordance,
    NudgeSession,
    SessionState,
)
from shadernudge.core.persistence import DiskPersistence, FilePersistence, SaveResult
from shadernudge.core.placeholder import PLACEHOLDER_NAME, PlaceholderProtocol, StagingMode
from shadernudge.core.text_buffer import StringBuffer, TextBuffer
from shadernudge.core.text_range import LiteralMatch, Position, TextRange

__all__ = [
    "AffordanceCallbacks",
    "BufferRangeError",
    "CancelFailure",
    "ChannelStartFailure",
    "CommitFailure",
    "DiskPersistence",
    "EditSession",
    "FilePersistence",
    "LiteralMatch",
    "NudgeAffordance",
    "NudgeError",
    "NudgeSession",
    "PLACEHOLDER_NAME",
    "PersistenceFailure",
    "PlaceholderProtocol",
    "Position",
    "SaveResult",
    "ScanFailure",
    "SessionState",
    "StageFailure",
    "StagingMode",
    "StringBuffer",
    "TextBuffer",
    "TextRange",
    "scan",
    "scan_all",
    "scan_at_position_or_selection",
]
