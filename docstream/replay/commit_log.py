"""
File-based commit log using an append-only line format.

Each line is the base64url encoding of one commit's canonical DAG-CBOR bytes
(signed envelope or unsigned payload). Blank lines are ignored.
"""

import os
from typing import Iterable, Iterator, List

from ..errors import EncodingError
from ..events import Event, decode_event, encode_event
from ..events.envelope import b64url_decode, b64url_encode


def encode_log_line(event: Event) -> str:
    return b64url_encode(encode_event(event))


def decode_log_line(line: str) -> Event:
    return decode_event(b64url_decode(line.strip()))


class FileCommitLog:
    """
    Append-only commit log for one stream.

    Guarantees:
    - Append-only (no mutations)
    - Fsync after each append
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def append(self, event: Event) -> None:
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "a", encoding="ascii") as f:
            f.write(encode_log_line(event) + "\n")
            f.flush()
            os.fsync(f.fileno())

    def extend(self, events: Iterable[Event]) -> None:
        for event in events:
            self.append(event)

    def read(self) -> Iterator[Event]:
        """
        Read commits in log order.

        Raises:
            FileNotFoundError: If the log doesn't exist
            EncodingError: If a line is not a valid commit
        """
        with open(self.path, "r", encoding="ascii") as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield decode_log_line(line)
                except EncodingError as e:
                    raise EncodingError(f"{self.path}:{lineno}: {e}") from e

    def read_all(self) -> List[Event]:
        return list(self.read())
