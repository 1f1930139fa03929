"""Dictation: finished recording in, clipboard text out."""
import logging
from typing import Callable, Optional

import pyperclip

from pushtalk.constants import (
    MSG_LOG_CLIPBOARD_FAIL,
    MSG_LOG_CLIPBOARD_OK,
    MSG_LOG_TRANSCRIPTION_FAILED,
    PREVIEW_LENGTH,
)
from pushtalk.health import HealthTracker
from pushtalk.speech_service import SpeechRecognitionService
from pushtalk.transcription.client import OnResult
from pushtalk.transcription.models import TranscriptionResult

logger = logging.getLogger(__name__)


def preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class Dictation:

    def __init__(
        self,
        service: SpeechRecognitionService,
        tracker: HealthTracker,
        copy: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._service = service
        self._tracker = tracker
        self._copy = copy or pyperclip.copy

    async def handle_recording(
        self,
        audio: bytes,
        on_result: Optional[OnResult] = None,
        to_clipboard: bool = True,
    ) -> TranscriptionResult:
        result = await self._service.transcribe(audio, on_result)
        self._tracker.record_transcription(result)

        match (result.success, (result.text or "").strip()):
            case (False, _):
                logger.error(MSG_LOG_TRANSCRIPTION_FAILED, result.error)
                return result
            case (True, ""):
                return result
            case (True, text):
                pass

        match to_clipboard:
            case False:
                return result
            case True:
                try:
                    self._copy(text)
                    logger.info(MSG_LOG_CLIPBOARD_OK, preview(text))
                except pyperclip.PyperclipException as exc:
                    logger.warning(MSG_LOG_CLIPBOARD_FAIL, exc)
        return result
