"""AliCloudStreamingClient: realtime transcription over the NLS WebSocket gateway.

One call to ``transcribe`` owns one ``StreamingSession``:

    IDLE → CONNECTING → ACTIVE → COMPLETING → SUCCEEDED
                           └──────────┴─────→ FAILED

Audio is paced out by a sender task while the caller's coroutine reads
inbound control messages. Whichever side reaches a terminal outcome first
resolves the session; later outcomes are dropped.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from pushtalk.constants import (
    ALICLOUD_TOKEN_HEADER,
    ALICLOUD_WS_PATH,
    AUDIO_FIRST_FRAME_DELAY,
    AUDIO_FRAME_INTERVAL,
    AUDIO_FRAME_SIZE,
    MSG_ALICLOUD_NOT_CONFIGURED,
    MSG_ERR_DISCONNECTED,
    MSG_ERR_PROBE_TIMEOUT,
    MSG_ERR_TASK_FAILED,
    MSG_ERR_UNKNOWN,
    MSG_ERR_WS_CLOSED,
    MSG_ERR_WS_CONNECT,
    MSG_LOG_BAD_FRAME,
    MSG_LOG_SESSION_PHASE,
    MSG_LOG_UNKNOWN_EVENT,
    PROBE_TIMEOUT,
)
from pushtalk.transcription.client import OnResult, TranscriptionClient
from pushtalk.transcription.models import (
    ErrorKind,
    PartialResult,
    ProviderConfig,
    StreamingConfig,
    TranscriptionResult,
)
from pushtalk.transcription.protocol import (
    AsrEventName,
    iter_frames,
    new_id,
    parse_event,
    start_message,
    stop_message,
)

logger = logging.getLogger(__name__)

NOT_CONFIGURED = TranscriptionResult.failure(ErrorKind.NOT_CONFIGURED, MSG_ALICLOUD_NOT_CONFIGURED)

# asyncio.TimeoutError is only an OSError on 3.11+
_TRANSPORT_ERRORS = (OSError, WebSocketException, asyncio.TimeoutError)


class Phase(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    COMPLETING = "completing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.SUCCEEDED, Phase.FAILED)


OnPhase = Callable[[Phase], None]


@dataclass
class StreamingSession:
    """State of one streaming attempt. Never reused across calls."""

    session_id: str = field(default_factory=lambda: new_id()[:8])
    task_id: str = field(default_factory=new_id)
    connection: Optional[ClientConnection] = None
    connected: bool = False
    accumulated_text: str = ""
    phase: Phase = Phase.IDLE
    phases: list[Phase] = field(default_factory=lambda: [Phase.IDLE])
    result: Optional[TranscriptionResult] = None
    on_phase: Optional[OnPhase] = None

    @property
    def resolved(self) -> bool:
        return self.result is not None

    def advance(self, phase: Phase) -> bool:
        match self.phase.is_terminal:
            case True:
                return False
            case False:
                pass
        logger.debug(MSG_LOG_SESSION_PHASE, self.session_id, self.phase.value, phase.value)
        self.phase = phase
        self.phases.append(phase)
        if self.on_phase is not None:
            self.on_phase(phase)
        return True

    def resolve(self, result: TranscriptionResult) -> bool:
        """Record the single outcome of this session. Returns False if one was already set."""
        match self.resolved:
            case True:
                return False
            case False:
                pass
        self.result = result
        self.connected = False
        self.advance(Phase.SUCCEEDED if result.success else Phase.FAILED)
        return True


class AliCloudStreamingClient(TranscriptionClient):

    def __init__(
        self,
        config: Optional[StreamingConfig] = None,
        *,
        frame_size: int = AUDIO_FRAME_SIZE,
        frame_interval: float = AUDIO_FRAME_INTERVAL,
        first_frame_delay: float = AUDIO_FIRST_FRAME_DELAY,
        probe_timeout: float = PROBE_TIMEOUT,
        on_phase: Optional[OnPhase] = None,
    ) -> None:
        self._config = config or StreamingConfig(app_key="", access_token="", gateway_url="")
        self._frame_size = frame_size
        self._frame_interval = frame_interval
        self._first_frame_delay = first_frame_delay
        self._probe_timeout = probe_timeout
        self._on_phase = on_phase
        self._session: Optional[StreamingSession] = None
        self._closing: set[asyncio.Task] = set()

    # ── TranscriptionClient interface ─────────────────────────────────────────

    def configure(self, config: ProviderConfig) -> None:
        match config:
            case StreamingConfig():
                self._config = config
            case _:
                raise ValueError(f"AliCloud ASR expects StreamingConfig, got {type(config).__name__}")

    def is_configured(self) -> bool:
        return self._config.is_complete

    @property
    def ws_url(self) -> str:
        match self._config.gateway_url:
            case str() as gateway if gateway.startswith("http"):
                gateway = "ws" + gateway[len("http"):]
            case gateway:
                pass
        return f"{gateway}{ALICLOUD_WS_PATH}"

    @property
    def session(self) -> Optional[StreamingSession]:
        return self._session

    async def test_connection(self) -> TranscriptionResult:
        match self.is_configured():
            case False:
                return NOT_CONFIGURED
            case True:
                pass
        try:
            ws = await asyncio.wait_for(self._connect(), timeout=self._probe_timeout)
        except asyncio.TimeoutError:
            return TranscriptionResult.failure(
                ErrorKind.TIMEOUT, MSG_ERR_PROBE_TIMEOUT % self._probe_timeout
            )
        except _TRANSPORT_ERRORS as exc:
            return TranscriptionResult.failure(ErrorKind.TRANSPORT, MSG_ERR_WS_CONNECT % exc)
        await ws.close()
        return TranscriptionResult.ok("")

    async def transcribe(
        self, audio: bytes, on_result: Optional[OnResult] = None
    ) -> TranscriptionResult:
        match self.is_configured():
            case False:
                return NOT_CONFIGURED
            case True:
                pass

        session = StreamingSession(on_phase=self._on_phase)
        self._session = session
        session.advance(Phase.CONNECTING)
        try:
            ws = await self._connect()
        except _TRANSPORT_ERRORS as exc:
            session.resolve(TranscriptionResult.failure(ErrorKind.TRANSPORT, MSG_ERR_WS_CONNECT % exc))
            self._release(session)
            return session.result

        match session.resolved:
            case True:
                # disconnect() raced the handshake
                await ws.close()
                self._release(session)
                return session.result
            case False:
                pass

        session.connection = ws
        session.connected = True
        session.advance(Phase.ACTIVE)
        sender: Optional[asyncio.Task] = None
        try:
            await ws.send(start_message(session.task_id, self._config.app_key))
            sender = asyncio.create_task(self._send_audio(session, audio))
            await self._receive(session, on_result)
        except _TRANSPORT_ERRORS as exc:
            session.resolve(TranscriptionResult.failure(ErrorKind.TRANSPORT, MSG_ERR_WS_CONNECT % exc))
        finally:
            session.connected = False
            match sender:
                case None:
                    pass
                case task:
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass
            await ws.close()
            self._release(session)
        return session.result

    def disconnect(self) -> None:
        match self._session:
            case None:
                return
            case session:
                pass
        session.resolve(TranscriptionResult.failure(ErrorKind.TRANSPORT, MSG_ERR_DISCONNECTED))
        match session.connection:
            case None:
                pass
            case ws:
                task = asyncio.get_running_loop().create_task(ws.close())
                self._closing.add(task)
                task.add_done_callback(self._closing.discard)

    # ── session internals ─────────────────────────────────────────────────────

    async def _connect(self) -> ClientConnection:
        return await connect(
            self.ws_url,
            additional_headers={ALICLOUD_TOKEN_HEADER: self._config.access_token},
        )

    def _release(self, session: StreamingSession) -> None:
        if self._session is session:
            self._session = None

    async def _send_audio(self, session: StreamingSession, audio: bytes) -> None:
        ws = session.connection
        try:
            await asyncio.sleep(self._first_frame_delay)
            for frame in iter_frames(audio, self._frame_size):
                match session.connected:
                    case False:
                        return
                    case True:
                        pass
                await ws.send(frame)
                await asyncio.sleep(self._frame_interval)
            match session.connected:
                case False:
                    return
                case True:
                    pass
            session.advance(Phase.COMPLETING)
            await ws.send(stop_message(session.task_id, self._config.app_key))
        except _TRANSPORT_ERRORS as exc:
            session.resolve(TranscriptionResult.failure(ErrorKind.TRANSPORT, MSG_ERR_WS_CONNECT % exc))
            # unblocks the receiver
            await ws.close()

    async def _receive(self, session: StreamingSession, on_result: Optional[OnResult]) -> None:
        ws = session.connection
        while not session.resolved:
            try:
                raw = await ws.recv()
            except ConnectionClosed as exc:
                session.resolve(TranscriptionResult.failure(
                    ErrorKind.TRANSPORT, f"{MSG_ERR_WS_CLOSED} ({exc})"
                ))
                return
            self._handle(session, raw, on_result)

    def _handle(
        self,
        session: StreamingSession,
        raw: str | bytes,
        on_result: Optional[OnResult],
    ) -> None:
        try:
            event = parse_event(raw)
        except ValueError as exc:
            logger.warning(MSG_LOG_BAD_FRAME, exc)
            return

        match event.name:
            case AsrEventName.RESULT_CHANGED:
                match (session.resolved, session.connected):
                    case (False, True):
                        pass
                    case _:
                        return
                session.accumulated_text = event.text
                if on_result is not None:
                    partial = PartialResult(
                        text=event.text,
                        confidence=event.confidence,
                        timestamp=time.time(),
                    )
                    try:
                        on_result(partial)
                    except Exception:
                        logger.exception("Partial result callback failed")
            case AsrEventName.COMPLETED:
                session.resolve(TranscriptionResult.ok(session.accumulated_text))
            case AsrEventName.TASK_FAILED:
                session.resolve(TranscriptionResult.failure(
                    ErrorKind.BACKEND,
                    MSG_ERR_TASK_FAILED % (event.error_message or MSG_ERR_UNKNOWN),
                ))
            case name:
                logger.debug(MSG_LOG_UNKNOWN_EVENT, name)
