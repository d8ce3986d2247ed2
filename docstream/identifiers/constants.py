"""
Identifier constants.
"""

from typing import Dict

from ..errors import EncodingError

# Multicodec code identifying the stream identifier format.
STREAMID_CODEC = 206

STREAM_TYPES: Dict[str, int] = {
    "tile": 0,
    "caip10-link": 1,
    "model": 2,
    "MID": 3,
    "UNLOADABLE": 4,
}

URL_SCHEME = "ceramic://"
PATH_PREFIX = "/ceramic/"

# Commit pointer used in CommitID bytes when the commit is the genesis commit.
GENESIS_COMMIT_MARKER = b"\x00"


def get_code_by_name(name: str) -> int:
    code = STREAM_TYPES.get(name)
    if code is None:
        raise EncodingError(f"No stream type registered for name {name}")
    return code


def get_name_by_code(code: int) -> str:
    for name, value in STREAM_TYPES.items():
        if value == code:
            return name
    raise EncodingError(f"No stream type registered for index {code}")
