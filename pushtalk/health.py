"""HealthTracker: is the active provider configured and reachable right now?"""
import logging
from enum import Enum
from typing import Callable, Optional

from pushtalk.constants import MSG_LOG_HEALTH
from pushtalk.speech_service import SpeechRecognitionService
from pushtalk.transcription.models import ErrorKind, TranscriptionResult

logger = logging.getLogger(__name__)


class HealthState(str, Enum):
    UNCONFIGURED = "unconfigured"
    TESTING = "testing"
    READY = "ready"
    FAILED = "failed"


class Trigger(str, Enum):
    STARTUP = "startup"
    PROVIDER_CHANGED = "provider_changed"
    CREDENTIALS_CHANGED = "credentials_changed"
    STORAGE_REFRESH = "storage_refresh"
    TRANSCRIPTION = "transcription"


Listener = Callable[[HealthState, Optional[str]], None]


class HealthTracker:
    """Readiness gate for the UI.

    Concurrent re-evaluations are allowed; whichever finishes last wins.
    """

    def __init__(self, service: SpeechRecognitionService) -> None:
        self._service = service
        self._state = HealthState.UNCONFIGURED
        self._last_error: Optional[str] = None
        self._listeners: list[Listener] = []

    @property
    def state(self) -> HealthState:
        return self._state

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def is_ready(self) -> bool:
        return self._state is HealthState.READY

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def reevaluate(self, trigger: Trigger = Trigger.STORAGE_REFRESH) -> HealthState:
        match self._service.is_ready():
            case False:
                self._set(HealthState.UNCONFIGURED, None, trigger)
                return self._state
            case True:
                pass
        self._set(HealthState.TESTING, None, trigger)
        result = await self._service.test_connection()
        match result.success:
            case True:
                self._set(HealthState.READY, None, trigger)
            case False:
                self._set(HealthState.FAILED, result.error, trigger)
        return self._state

    def record_transcription(self, result: TranscriptionResult) -> HealthState:
        """Fold the outcome of a real transcription into the tracked state."""
        match (result.success, result.error_kind):
            case (True, _):
                self._set(HealthState.READY, None, Trigger.TRANSCRIPTION)
            case (False, ErrorKind.NOT_CONFIGURED):
                self._set(HealthState.UNCONFIGURED, None, Trigger.TRANSCRIPTION)
            case (False, ErrorKind.TRANSPORT | ErrorKind.BACKEND | ErrorKind.TIMEOUT):
                self._set(HealthState.FAILED, result.error, Trigger.TRANSCRIPTION)
            case _:
                pass
        return self._state

    def _set(self, state: HealthState, error: Optional[str], trigger: Trigger) -> None:
        previous = self._state
        self._state = state
        self._last_error = error
        if previous is not state:
            logger.info(MSG_LOG_HEALTH, previous.value, state.value, trigger.value)
        for listener in list(self._listeners):
            try:
                listener(state, error)
            except Exception:
                logger.exception("Health listener failed")
