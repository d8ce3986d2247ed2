"""
Tests for replay, commit log files and per-stream serialization.

Critical tests:
1. Replay reproduces the state built commit by commit
2. Broken chain links are rejected
3. Commit log survives a write/read cycle
4. Concurrent commits on many streams stay consistent
"""

import os
import tempfile
import threading

import pytest

from docstream.core import DocumentReducer
from docstream.errors import ChainIntegrityError, EncodingError, SchemaValidationError
from docstream.events import (
    TimeEventPayload,
    create_data_event,
    create_init_event,
    event_cid,
    get_deterministic_init_payload,
)
from docstream.identifiers import CommitID, get_stream_id, random_cid
from docstream.replay import FileCommitLog, StreamLocks, StreamProcessor, replay_stream


def build_log(signer, model, contents):
    """Init commit with contents[0] followed by one data commit per later entry."""
    init = create_init_event(signer, contents[0], model)
    stream_id = get_stream_id(event_cid(init))
    events = [init]
    previous = contents[0]
    for content in contents[1:]:
        current = CommitID.from_stream(stream_id, event_cid(events[-1]))
        events.append(create_data_event(signer, current, previous, content))
        previous = content
    return stream_id, events


def test_replay_reaches_final_state(signer, context, post_model):
    stream_id, events = build_log(
        signer, post_model, [{"title": "a"}, {"title": "b"}, {"title": "b", "tags": ["x"]}]
    )

    result = replay_stream(events, DocumentReducer(), context)

    assert result.stream_id == stream_id
    assert result.applied == 3
    assert result.state.content == {"title": "b", "tags": ["x"]}
    assert list(result.log) == [event_cid(e) for e in events]


def test_replay_is_deterministic(signer, context, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}, {"title": "c"}])

    states = [replay_stream(events, DocumentReducer(), context).state.canonical() for _ in range(10)]

    assert len(set(states)) == 1


def test_replay_until_index(signer, context, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}, {"title": "c"}])

    result = replay_stream(events, DocumentReducer(), context, to_index=1)

    assert result.applied == 2
    assert result.state.content == {"title": "b"}


def test_replay_does_not_write_to_context(signer, context, post_model):
    stream_id, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}])

    replay_stream(events, DocumentReducer(), context)

    assert str(stream_id) not in context.states


def test_replay_with_time_commit(signer, context, post_model):
    stream_id, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}])
    time = TimeEventPayload(id=stream_id.cid, prev=event_cid(events[-1]), proof=random_cid(), path="")
    current = CommitID.from_stream(stream_id, event_cid(time))
    events += [time, create_data_event(signer, current, {"title": "b"}, {"title": "c"})]

    result = replay_stream(events, DocumentReducer(), context)

    assert result.applied == 4
    assert result.state.content == {"title": "c"}


def test_replay_deterministic_document(signer, context, profile_model):
    init = get_deterministic_init_payload(profile_model, signer.did)
    stream_id = get_stream_id(event_cid(init))
    data = create_data_event(signer, CommitID.from_stream(stream_id, event_cid(init)), None, {"name": "alice"})

    result = replay_stream([init, data], DocumentReducer(), context)

    assert result.stream_id == stream_id
    assert result.state.content == {"name": "alice"}


def test_empty_log_rejected(context):
    with pytest.raises(ChainIntegrityError, match="empty"):
        replay_stream([], DocumentReducer(), context)


def test_log_must_start_with_init(signer, context, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}])

    with pytest.raises(ChainIntegrityError, match="First commit must be an init commit"):
        replay_stream(events[1:], DocumentReducer(), context)


def test_second_init_rejected(signer, context, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}])
    other = create_init_event(signer, {"title": "b"}, post_model)

    with pytest.raises(ChainIntegrityError, match="Unexpected init commit"):
        replay_stream(events + [other], DocumentReducer(), context)


def test_stale_prev_rejected(signer, context, post_model):
    stream_id, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}])
    # Points at the init commit instead of the latest data commit
    init_commit = CommitID.from_stream(stream_id, event_cid(events[0]))
    stale = create_data_event(signer, init_commit, {"title": "b"}, {"title": "c"})

    with pytest.raises(ChainIntegrityError, match="doesn't properly point to previous event"):
        replay_stream(events + [stale], DocumentReducer(), context)


def test_foreign_stream_commit_rejected(signer, context, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}])
    _, other_events = build_log(signer, post_model, [{"title": "x"}, {"title": "y"}])

    with pytest.raises(ChainIntegrityError, match="Invalid init CID"):
        replay_stream(events + other_events[1:], DocumentReducer(), context)


def test_rejected_commit_stops_replay(signer, context, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}, {"title": 1}])

    with pytest.raises(SchemaValidationError):
        replay_stream(events, DocumentReducer(), context)


def test_commit_log_round_trip(signer, context, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}])

    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "logs", "commits.jsonl")
        log = FileCommitLog(path)
        log.extend(events)

        with open(path, "r") as f:
            lines = [line for line in f.read().splitlines() if line]
        loaded = log.read_all()

    assert len(lines) == 2
    assert loaded == events
    assert replay_stream(loaded, DocumentReducer(), context).state.content == {"title": "b"}


def test_commit_log_reports_bad_line(signer, post_model):
    _, events = build_log(signer, post_model, [{"title": "a"}])

    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "commits.jsonl")
        log = FileCommitLog(path)
        log.append(events[0])
        with open(path, "a") as f:
            f.write("\n!!!notbase64!!!\n")

        with pytest.raises(EncodingError, match=r"commits.jsonl:3"):
            log.read_all()


def test_commit_log_missing_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        log = FileCommitLog(os.path.join(tmpdir, "missing.jsonl"))

        with pytest.raises(FileNotFoundError):
            log.read_all()


def test_stream_locks_are_per_stream():
    locks = StreamLocks()

    assert locks.lock_for("a") is locks.lock_for("a")
    assert locks.lock_for("a") is not locks.lock_for("b")

    with locks.hold("a"):
        assert locks.lock_for("a").locked()
        assert not locks.lock_for("b").locked()
    assert not locks.lock_for("a").locked()


def test_processor_stores_state(signer, context, post_model):
    processor = StreamProcessor(DocumentReducer(), context)
    stream_id, events = build_log(signer, post_model, [{"title": "a"}, {"title": "b"}])

    for event in events:
        sid, state = processor.process(event)

    assert sid == str(stream_id)
    assert state.content == {"title": "b"}
    assert context.get_document_state(str(stream_id)).content == {"title": "b"}


def test_processor_concurrent_streams(signer, context, post_model):
    processor = StreamProcessor(DocumentReducer(), context)
    logs = [
        build_log(signer, post_model, [{"title": f"s{i}-{n}"} for n in range(5)])
        for i in range(8)
    ]
    errors = []

    def worker(events):
        try:
            for event in events:
                processor.process(event)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(events,)) for _, events in logs]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    for i, (stream_id, _) in enumerate(logs):
        assert context.get_document_state(str(stream_id)).content == {"title": f"s{i}-4"}
