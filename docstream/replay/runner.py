"""
Replay runner: reconstruct one stream's state from its commit log.

Replay is deterministic: the same commits against the same models always
produce the same DocumentState, whoever produced them.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from multiformats import CID

from ..core.context import Context
from ..core.reducer import DocumentReducer
from ..core.state import DocumentState
from ..errors import ChainIntegrityError
from ..events import Event, EventContainer, event_cid, event_to_container
from ..identifiers import StreamID, get_stream_id
from ..logging_config import get_logger


@dataclass(frozen=True)
class ReplayResult:
    """
    Result of replay operation.

    Fields:
        stream_id: Stream derived from the init commit
        state: Final state after applying commits
        applied: Number of commits applied
        log: Commit CIDs in order, init first
    """
    stream_id: StreamID
    state: DocumentState
    applied: int
    log: Tuple[CID, ...]


class ReplayContext(Context):
    """
    Context overlay serving the replayed stream's current state.

    Every other lookup goes to the wrapped Context.
    """

    def __init__(self, base: Context, stream_id: StreamID, state: DocumentState) -> None:
        self.base = base
        self.verifier = base.verifier
        self.stream_id = str(stream_id)
        self.state = state

    def get_model_definition(self, model_id: str):
        return self.base.get_model_definition(model_id)

    def get_document_state(self, stream_id: str) -> DocumentState:
        if stream_id == self.stream_id:
            return self.state
        return self.base.get_document_state(stream_id)

    def get_document_model(self, stream_id: str) -> str:
        if stream_id == self.stream_id:
            return str(self.state.metadata.model)
        return self.base.get_document_model(stream_id)


def assert_event_links_to_log(container: EventContainer, log: List[CID]) -> None:
    """
    Check that a data or time commit points at the stream's init and tip.

    Raises:
        ChainIntegrityError: On a wrong init id or a stale/unknown prev
    """
    payload = container.payload
    init_cid = log[0]
    if bytes(payload.id) != bytes(init_cid):
        raise ChainIntegrityError(
            f"Invalid init CID in event payload for document, expected {init_cid} but got {payload.id}"
        )
    expected_prev = log[-1]
    if bytes(payload.prev) != bytes(expected_prev):
        raise ChainIntegrityError(
            f"Commit doesn't properly point to previous event payload in log for document {init_cid}. "
            f"Expected {expected_prev}, found 'prev' {payload.prev}"
        )


def replay_stream(
    events: Iterable[Event],
    reducer: DocumentReducer,
    context: Context,
    to_index: Optional[int] = None,
) -> ReplayResult:
    """
    Replay a stream's commits in order.

    Args:
        events: Commits, init first
        reducer: Reducer to fold commits with
        context: Models, other documents and the verifier
        to_index: Stop after this commit index (inclusive, None = all)

    Returns:
        ReplayResult with final state and commit log

    Raises:
        ChainIntegrityError: If the log is empty, doesn't start with an init or
            a commit does not link to its predecessor
        DocumentProtocolError: If any commit is rejected by the reducer
    """
    replay_context: Optional[ReplayContext] = None
    log: List[CID] = []
    stream_id: Optional[StreamID] = None
    logger = get_logger(__name__)

    for index, event in enumerate(events):
        if to_index is not None and index > to_index:
            break
        container = event_to_container(context.verifier, event)
        cid = event_cid(event)

        if replay_context is None:
            if not container.kind.is_init:
                raise ChainIntegrityError(f"First commit must be an init commit, got {container.kind.value}")
            state = reducer.reduce(container, context)
            stream_id = get_stream_id(cid)
            replay_context = ReplayContext(context, stream_id, state)
            logger = get_logger(__name__, trace_id=str(stream_id))
        else:
            if container.kind.is_init:
                raise ChainIntegrityError(f"Unexpected init commit {cid} in log of {stream_id}")
            assert_event_links_to_log(container, log)
            replay_context.state = reducer.reduce(container, replay_context)
        log.append(cid)

    if replay_context is None or stream_id is None:
        raise ChainIntegrityError("Cannot replay an empty commit log")

    logger.info("Replayed %d commits", len(log))
    return ReplayResult(stream_id=stream_id, state=replay_context.state, applied=len(log), log=tuple(log))
