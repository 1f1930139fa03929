"""Wire framing for the AliCloud NLS realtime transcription socket."""
import json
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pushtalk.constants import (
    ASR_AUDIO_FORMAT,
    ASR_COMPLETED,
    ASR_NAMESPACE,
    ASR_RESULT_CHANGED,
    ASR_SAMPLE_RATE,
    ASR_START,
    ASR_STOP,
    ASR_TASK_FAILED,
    AUDIO_FRAME_SIZE,
)


class AsrEventName(str, Enum):
    RESULT_CHANGED = ASR_RESULT_CHANGED
    COMPLETED = ASR_COMPLETED
    TASK_FAILED = ASR_TASK_FAILED


def new_id() -> str:
    """32-char hex id, the format the gateway expects for message and task ids."""
    return uuid.uuid4().hex


def _header(name: str, task_id: str, app_key: str) -> dict[str, str]:
    return {
        "message_id": new_id(),
        "task_id": task_id,
        "namespace": ASR_NAMESPACE,
        "name": name,
        "appkey": app_key,
    }


def start_message(task_id: str, app_key: str) -> str:
    return json.dumps({
        "header": _header(ASR_START, task_id, app_key),
        "payload": {
            "format": ASR_AUDIO_FORMAT,
            "sample_rate": ASR_SAMPLE_RATE,
            "enable_intermediate_result": True,
            "enable_punctuation_prediction": True,
            "enable_inverse_text_normalization": True,
        },
    })


def stop_message(task_id: str, app_key: str) -> str:
    return json.dumps({"header": _header(ASR_STOP, task_id, app_key)})


def iter_frames(audio: bytes, size: int = AUDIO_FRAME_SIZE) -> Iterator[bytes]:
    """Yield ceil(len(audio) / size) frames; only the last may be short."""
    view = memoryview(audio)
    for offset in range(0, len(audio), size):
        yield bytes(view[offset:offset + size])


@dataclass(frozen=True)
class AsrEvent:
    name: str
    header: dict[str, Any] = field(default_factory=dict)
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        match self.payload.get("result"):
            case str() as text:
                return text
            case _:
                return ""

    @property
    def confidence(self) -> Optional[float]:
        match self.payload.get("confidence"):
            case bool():
                return None
            case int() | float() as value:
                return float(value)
            case _:
                return None

    @property
    def error_message(self) -> str:
        return str(
            self.payload.get("error_message")
            or self.header.get("status_text")
            or ""
        )


def parse_event(raw: str | bytes) -> AsrEvent:
    """Decode one inbound frame. Raises ValueError when it is not a control message."""
    match raw:
        case bytes():
            raise ValueError(f"unexpected binary frame ({len(raw)} bytes)")
        case _:
            pass
    message = json.loads(raw)
    match message:
        case {"header": {"name": str() as name} as header, **rest}:
            payload = rest.get("payload")
            return AsrEvent(
                name=name,
                header=header,
                payload=payload if isinstance(payload, dict) else {},
            )
        case _:
            raise ValueError(f"missing header.name in {raw[:200]!r}")
