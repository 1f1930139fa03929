"""TranscriptionClient: abstract base for speech-to-text backends."""
from abc import ABC, abstractmethod
from typing import Callable, Optional

from pushtalk.transcription.models import PartialResult, ProviderConfig, TranscriptionResult

OnResult = Callable[[PartialResult], None]


class TranscriptionClient(ABC):
    @abstractmethod
    def configure(self, config: ProviderConfig) -> None: ...

    @abstractmethod
    def is_configured(self) -> bool: ...

    @abstractmethod
    async def test_connection(self) -> TranscriptionResult:
        """Probe the backend without sending audio. Never raises."""
        ...

    @abstractmethod
    async def transcribe(
        self, audio: bytes, on_result: Optional[OnResult] = None
    ) -> TranscriptionResult:
        """Convert raw audio bytes to text. Failures come back as a result, not an exception."""
        ...

    def disconnect(self) -> None:
        """Abort in-flight work, if the backend holds any."""
