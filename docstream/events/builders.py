"""
Helpers creating init and data commits for model instance documents.
"""

import os
from typing import Any, Dict, List, Optional

from ..identifiers import CommitID, StreamID
from ..patch import PatchOperation, diff
from .envelope import SignedEvent, sign_event
from .payloads import DataEventPayload, InitEventHeader, InitEventPayload
from .signer import Signer

RANDOM_UNIQUE_SIZE = 12


def create_init_header(
    controller: str,
    model: StreamID,
    unique: Optional[bytes] = None,
    context: Optional[StreamID] = None,
    should_index: Optional[bool] = None,
) -> InitEventHeader:
    """
    Header for a signed init commit.

    A random unique value is generated when none is given, so that two
    documents with identical content get distinct stream ids.
    """
    return InitEventHeader(
        controllers=[controller],
        model=model,
        unique=unique if unique is not None else os.urandom(RANDOM_UNIQUE_SIZE),
        context=context,
        should_index=should_index,
    )


def get_deterministic_init_payload(
    model: StreamID,
    controller: str,
    unique: Optional[bytes] = None,
) -> InitEventPayload:
    """Unsigned init payload: same inputs always address the same stream."""
    header = InitEventHeader(controllers=[controller], model=model, unique=unique)
    return InitEventPayload(content=None, header=header)


def create_init_event(
    signer: Signer,
    content: Dict[str, Any],
    model: StreamID,
    unique: Optional[bytes] = None,
    context: Optional[StreamID] = None,
    should_index: Optional[bool] = None,
) -> SignedEvent:
    header = create_init_header(signer.did, model, unique, context, should_index)
    return sign_event(signer, InitEventPayload(content=content, header=header))


def create_data_payload(
    current: CommitID,
    patch: List[PatchOperation],
    header: Optional[Dict[str, Any]] = None,
) -> DataEventPayload:
    return DataEventPayload(id=current.base_id.cid, prev=current.commit, patch=list(patch), header=header)


def create_data_event(
    signer: Signer,
    current_id: CommitID,
    current_content: Optional[Dict[str, Any]] = None,
    new_content: Optional[Dict[str, Any]] = None,
    should_index: Optional[bool] = None,
) -> SignedEvent:
    """
    Sign a data commit patching current_content into new_content.

    The header is only written when should_index is given.
    """
    header = None if should_index is None else {"shouldIndex": should_index}
    payload = create_data_payload(current_id, diff(current_content, new_content), header)
    return sign_event(signer, payload)
