"""
Replay, commit log files and per-stream serialization.
"""

from .runner import ReplayContext, ReplayResult, assert_event_links_to_log, replay_stream
from .locks import StreamLocks, StreamProcessor
from .commit_log import FileCommitLog, decode_log_line, encode_log_line

__all__ = [
    "ReplayContext",
    "ReplayResult",
    "assert_event_links_to_log",
    "replay_stream",
    "StreamLocks",
    "StreamProcessor",
    "FileCommitLog",
    "decode_log_line",
    "encode_log_line",
]
