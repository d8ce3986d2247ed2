"""
JSON Patch engine for document content.

diff() produces RFC 6902 operations, apply() folds them into a new value.
Neither mutates its inputs.
"""

import copy
from typing import Any, Dict, Iterable, List, Optional

import jsonpatch
import jsonpointer

from .errors import EncodingError, PatchError

PatchOperation = Dict[str, Any]

OPERATIONS = ("add", "remove", "replace", "move", "copy", "test")
_NEEDS_VALUE = ("add", "replace", "test")
_NEEDS_FROM = ("move", "copy")


def diff(from_content: Optional[Any], to_content: Optional[Any]) -> List[PatchOperation]:
    """
    Compute the patch turning from_content into to_content.

    None is treated as an empty object, so the first data commit on a
    deterministic document patches `{}`.
    """
    src = {} if from_content is None else from_content
    dst = {} if to_content is None else to_content
    patch = jsonpatch.make_patch(src, dst)
    return copy.deepcopy(list(patch.patch))


def apply(content: Optional[Any], operations: Iterable[PatchOperation]) -> Any:
    """
    Apply operations in order and return the new content.

    Raises:
        PatchError: If an operation's path does not resolve or a test fails
    """
    ops = list(operations)
    validate_operations(ops, error=PatchError)
    doc = {} if content is None else content
    try:
        return jsonpatch.apply_patch(doc, ops, in_place=False)
    except jsonpatch.JsonPatchTestFailed as e:
        raise PatchError(f"Patch test failed: {e}") from e
    except (jsonpatch.JsonPatchException, jsonpointer.JsonPointerException) as e:
        raise PatchError(f"Cannot apply patch: {e}") from e


def validate_operations(operations: Iterable[Any], error: type = EncodingError) -> None:
    """
    Check the structure of each patch operation.

    Raises:
        error: On the first malformed operation
    """
    for index, op in enumerate(operations):
        if not isinstance(op, dict):
            raise error(f"Patch operation {index} must be a map")
        name = op.get("op")
        if name not in OPERATIONS:
            raise error(f"Patch operation {index} has unsupported op {name!r}")
        if not isinstance(op.get("path"), str):
            raise error(f"Patch operation {index} must have a string path")
        if name in _NEEDS_VALUE and "value" not in op:
            raise error(f"Patch operation {index} ({name}) must have a value")
        if name in _NEEDS_FROM and not isinstance(op.get("from"), str):
            raise error(f"Patch operation {index} ({name}) must have a string from")


def top_level_field(pointer: str) -> Optional[str]:
    """
    First segment of a JSON pointer, unescaped.

    Returns None for the root pointer "".
    """
    if pointer == "":
        return None
    segment = pointer[1:].split("/", 1)[0]
    return segment.replace("~1", "/").replace("~0", "~")
