import json
import math

import pytest

from pushtalk.transcription.protocol import (
    AsrEventName,
    iter_frames,
    new_id,
    parse_event,
    start_message,
    stop_message,
)


@pytest.mark.parametrize("size", [1, 3199, 3200, 3201, 6400, 10_000])
def test_iter_frames_count_and_last_frame_size(size):
    frames = list(iter_frames(b"\x01" * size, 3200))

    assert len(frames) == math.ceil(size / 3200)
    assert len(frames[-1]) == (size % 3200 or 3200)
    assert all(len(f) == 3200 for f in frames[:-1])


def test_iter_frames_empty_audio_yields_nothing():
    assert list(iter_frames(b"")) == []


def test_new_id_is_unique_hex():
    ids = {new_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(len(i) == 32 and int(i, 16) >= 0 for i in ids)


def test_start_message_shape():
    message = json.loads(start_message("task-1", "appkey-1"))

    assert message["header"]["task_id"] == "task-1"
    assert message["header"]["appkey"] == "appkey-1"
    assert message["header"]["name"] == "StartTranscription"
    assert message["payload"]["enable_intermediate_result"] is True


def test_each_control_message_gets_fresh_message_id():
    first = json.loads(stop_message("task-1", "k"))
    second = json.loads(stop_message("task-1", "k"))
    assert first["header"]["message_id"] != second["header"]["message_id"]


def test_parse_event_reads_result_and_confidence():
    raw = json.dumps({
        "header": {"name": "TranscriptionResultChanged"},
        "payload": {"result": "hello", "confidence": 0.87},
    })
    event = parse_event(raw)

    assert event.name == AsrEventName.RESULT_CHANGED
    assert event.text == "hello"
    assert event.confidence == pytest.approx(0.87)


def test_parse_event_failure_message_falls_back_to_status_text():
    raw = json.dumps({"header": {"name": "TaskFailed", "status_text": "Gateway:ACCESS_DENIED"}})
    event = parse_event(raw)

    assert event.name == AsrEventName.TASK_FAILED
    assert event.error_message == "Gateway:ACCESS_DENIED"
    assert event.payload == {}


@pytest.mark.parametrize("raw", [
    "not json",
    "[]",
    json.dumps({"payload": {"result": "x"}}),
    json.dumps({"header": {"name": 42}}),
    b"\x00\x01",
])
def test_parse_event_rejects_malformed_frames(raw):
    with pytest.raises(ValueError):
        parse_event(raw)
