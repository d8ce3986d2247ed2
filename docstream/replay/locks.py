"""
Per-stream serialization.

Commits of one stream form a strict dependency chain, so they must be reduced
one at a time; commits of different streams can be reduced in parallel.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from ..core.context import MemoryContext
from ..core.reducer import DocumentReducer
from ..core.state import DocumentState
from ..events import Event, event_cid, event_to_container
from ..identifiers import get_stream_id


class StreamLocks:
    """One lock per stream id, created on first use."""

    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, stream_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(stream_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[stream_id] = lock
            return lock

    @contextmanager
    def hold(self, stream_id: str) -> Iterator[None]:
        with self.lock_for(str(stream_id)):
            yield


class StreamProcessor:
    """
    Applies commits for many streams against a MemoryContext.

    Each commit is reduced while holding its stream's lock and the resulting
    state is stored back into the context, so the next commit of the stream
    sees it.

    Usage:
        processor = StreamProcessor(DocumentReducer(), context)
        stream_id, state = processor.process(init_event)
    """

    def __init__(self, reducer: DocumentReducer, context: MemoryContext) -> None:
        self.reducer = reducer
        self.context = context
        self.locks = StreamLocks()

    def process(self, event: Event):
        container = event_to_container(self.context.verifier, event)
        if container.kind.is_init:
            stream_id = str(get_stream_id(event_cid(event)))
        else:
            stream_id = str(get_stream_id(container.payload.id))

        with self.locks.hold(stream_id):
            state: DocumentState = self.reducer.reduce(container, self.context)
            self.context.set_document_state(stream_id, state)
        return stream_id, state
