"""OpenAITranscriptionClient: batch upload to an OpenAI-compatible Whisper endpoint."""
import io
import logging
from typing import Optional

from openai import APIConnectionError, APIResponseValidationError, APIStatusError, AsyncOpenAI

from pushtalk.constants import (
    MSG_ERR_API_STATUS,
    MSG_ERR_BAD_RESPONSE,
    MSG_ERR_CONNECTION,
    MSG_OPENAI_NOT_CONFIGURED,
    OPENAI_API_PREFIX,
    OPENAI_MODELS_PATH,
    OPENAI_TRANSCRIPTIONS_PATH,
    VOICE_FILENAME,
    WHISPER_MODEL,
)
from pushtalk.transcription.client import OnResult, TranscriptionClient
from pushtalk.transcription.models import (
    ErrorKind,
    OpenAIConfig,
    ProviderConfig,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)

NOT_CONFIGURED = TranscriptionResult.failure(ErrorKind.NOT_CONFIGURED, MSG_OPENAI_NOT_CONFIGURED)


def _status_failure(exc: APIStatusError) -> TranscriptionResult:
    reason = exc.response.reason_phrase or exc.message
    return TranscriptionResult.failure(
        ErrorKind.BACKEND,
        MSG_ERR_API_STATUS % (exc.status_code, reason),
        http_status=exc.status_code,
    )


def _connection_failure(exc: APIConnectionError) -> TranscriptionResult:
    return TranscriptionResult.failure(ErrorKind.TRANSPORT, MSG_ERR_CONNECTION % exc.message)


def _bad_response(status: int) -> TranscriptionResult:
    return TranscriptionResult.failure(
        ErrorKind.BACKEND, MSG_ERR_BAD_RESPONSE % status, http_status=status
    )


class OpenAITranscriptionClient(TranscriptionClient):

    def __init__(self, config: Optional[OpenAIConfig] = None, model: str = WHISPER_MODEL) -> None:
        self._config = config or OpenAIConfig(base_url="", api_key="")
        self._model = model

    def configure(self, config: ProviderConfig) -> None:
        match config:
            case OpenAIConfig():
                self._config = config
            case _:
                raise ValueError(f"OpenAI expects OpenAIConfig, got {type(config).__name__}")

    def is_configured(self) -> bool:
        return self._config.is_complete

    @property
    def transcriptions_url(self) -> str:
        return f"{self._config.base_url}{OPENAI_TRANSCRIPTIONS_PATH}"

    @property
    def models_url(self) -> str:
        return f"{self._config.base_url}{OPENAI_MODELS_PATH}"

    def _client(self) -> AsyncOpenAI:
        # retries belong to the caller
        return AsyncOpenAI(
            api_key=self._config.api_key,
            base_url=f"{self._config.base_url}{OPENAI_API_PREFIX}",
            max_retries=0,
        )

    async def test_connection(self) -> TranscriptionResult:
        match self.is_configured():
            case False:
                return NOT_CONFIGURED
            case True:
                pass
        try:
            raw = await self._client().models.with_raw_response.list()
        except APIStatusError as exc:
            return _status_failure(exc)
        except APIConnectionError as exc:
            return _connection_failure(exc)
        return TranscriptionResult.ok("", http_status=raw.status_code)

    async def transcribe(
        self, audio: bytes, on_result: Optional[OnResult] = None
    ) -> TranscriptionResult:
        match self.is_configured():
            case False:
                return NOT_CONFIGURED
            case True:
                pass
        audio_file = io.BytesIO(audio)
        audio_file.name = VOICE_FILENAME
        try:
            raw = await self._client().audio.transcriptions.with_raw_response.create(
                model=self._model,
                file=audio_file,
            )
        except APIStatusError as exc:
            logger.debug("Transcription rejected by %s", self.transcriptions_url)
            return _status_failure(exc)
        except APIConnectionError as exc:
            return _connection_failure(exc)
        try:
            transcription = raw.parse()
        except (APIResponseValidationError, ValueError) as exc:
            logger.warning("Unparseable transcription response: %s", exc)
            return _bad_response(raw.status_code)
        # non-JSON bodies parse to a plain str
        match getattr(transcription, "text", None):
            case str() as text:
                return TranscriptionResult.ok(text, http_status=raw.status_code)
            case _:
                return _bad_response(raw.status_code)
