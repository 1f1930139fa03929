"""SpeechRecognitionService: routing, credentials and error prefixing."""
from typing import Optional

import pytest
from unittest.mock import patch

from pushtalk.config import Config
from pushtalk.speech_service import SpeechRecognitionService
from pushtalk.transcription.client import OnResult, TranscriptionClient
from pushtalk.transcription.models import (
    ErrorKind,
    OpenAIConfig,
    ProviderConfig,
    ProviderId,
    StreamingConfig,
    TranscriptionResult,
)

OPENAI = OpenAIConfig(base_url="https://api.openai.com", api_key="sk-test")
ALICLOUD = StreamingConfig(app_key="app", access_token="tok", gateway_url="wss://gw.example.com")


class StubClient(TranscriptionClient):

    def __init__(self, result: Optional[TranscriptionResult] = None, exc: Exception | None = None):
        self.config: Optional[ProviderConfig] = None
        self.result = result or TranscriptionResult.ok("stub text")
        self.exc = exc
        self.transcribed: list[bytes] = []
        self.probes = 0
        self.disconnects = 0

    def configure(self, config: ProviderConfig) -> None:
        self.config = config

    def is_configured(self) -> bool:
        return self.config is not None and self.config.is_complete

    async def test_connection(self) -> TranscriptionResult:
        self.probes += 1
        if self.exc:
            raise self.exc
        return self.result

    async def transcribe(self, audio: bytes, on_result: Optional[OnResult] = None) -> TranscriptionResult:
        self.transcribed.append(audio)
        if self.exc:
            raise self.exc
        return self.result

    def disconnect(self) -> None:
        self.disconnects += 1


def make_service(openai_client=None, alicloud_client=None, provider=ProviderId.OPENAI):
    clients = {
        ProviderId.OPENAI: openai_client or StubClient(),
        ProviderId.ALICLOUD: alicloud_client or StubClient(),
    }
    return SpeechRecognitionService(provider, clients=clients), clients


def test_defaults_to_openai_and_not_ready():
    service, _ = make_service()

    assert service.provider is ProviderId.OPENAI
    assert service.display_name == "OpenAI Whisper"
    assert not service.is_ready()


def test_configure_validates_against_active_provider():
    service, clients = make_service()

    with pytest.raises(ValueError, match="OpenAIConfig"):
        service.configure(ALICLOUD)

    service.configure(OPENAI)
    assert clients[ProviderId.OPENAI].config == OPENAI
    assert service.is_ready()


def test_switching_provider_keeps_each_providers_credentials():
    service, _ = make_service()
    service.configure(OPENAI)

    service.set_provider("alicloud")
    assert not service.is_ready()

    service.configure(ALICLOUD)
    service.set_provider(ProviderId.OPENAI)
    assert service.is_ready()
    assert service.config_for("alicloud") == ALICLOUD


def test_switching_provider_disconnects_previous_client():
    service, clients = make_service()

    service.set_provider(ProviderId.ALICLOUD)
    service.set_provider(ProviderId.ALICLOUD)

    assert clients[ProviderId.OPENAI].disconnects == 1
    assert clients[ProviderId.ALICLOUD].disconnects == 0


def test_set_provider_rejects_unknown_id():
    service, _ = make_service()
    with pytest.raises(ValueError):
        service.set_provider("azure")


def test_configure_fields_targets_named_provider_only():
    service, clients = make_service()

    service.configure_fields("alicloud", {
        "app_key": "app",
        "access_token": "tok",
        "gateway_url": "wss://gw.example.com",
    })

    assert service.provider is ProviderId.OPENAI
    assert clients[ProviderId.ALICLOUD].config == ALICLOUD


def test_configure_fields_rejects_non_string_values():
    service, _ = make_service()
    with pytest.raises(ValueError, match="api_key"):
        service.configure_fields("openai", {"base_url": "https://x", "api_key": 123})


def test_reset_config_clears_every_provider():
    service, _ = make_service()
    service.configure(OPENAI)
    service.configure_fields("alicloud", {"app_key": "a", "access_token": "t", "gateway_url": "wss://g"})

    service.reset_config()

    assert not service.is_ready()
    assert not service.config_for("alicloud").is_complete


def test_load_applies_settings_record():
    service, _ = make_service()
    config = Config(
        provider="alicloud",
        log_level="INFO",
        openai_base_url="https://api.openai.com",
        openai_api_key=None,
        alicloud_app_key="app",
        alicloud_access_token="tok",
        alicloud_gateway_url="wss://gw.example.com",
    )

    service.load(config)

    assert service.provider is ProviderId.ALICLOUD
    assert service.is_ready()
    assert not service.config_for("openai").is_complete


@pytest.mark.asyncio
async def test_transcribe_routes_to_active_client():
    service, clients = make_service()
    service.set_provider("alicloud")

    result = await service.transcribe(b"pcm")

    assert result.text == "stub text"
    assert clients[ProviderId.ALICLOUD].transcribed == [b"pcm"]
    assert clients[ProviderId.OPENAI].transcribed == []


@pytest.mark.asyncio
async def test_transcribe_prefixes_errors_with_provider_name():
    failing = StubClient(TranscriptionResult.failure(ErrorKind.BACKEND, "API error: 500", http_status=500))
    service, _ = make_service(openai_client=failing)

    result = await service.transcribe(b"audio")

    assert result.error == "OpenAI Whisper: API error: 500"
    assert result.error_kind is ErrorKind.BACKEND
    assert result.http_status == 500


@pytest.mark.asyncio
async def test_transcribe_turns_client_crash_into_failure():
    service, _ = make_service(alicloud_client=StubClient(exc=RuntimeError("kaboom")), provider="alicloud")

    result = await service.transcribe(b"audio")

    assert not result.success
    assert result.error.startswith("AliCloud ASR: ")
    assert "kaboom" in result.error


@pytest.mark.asyncio
async def test_test_connection_is_not_prefixed():
    failing = StubClient(TranscriptionResult.failure(ErrorKind.TIMEOUT, "Connection timed out after 5.0s"))
    service, _ = make_service(alicloud_client=failing, provider="alicloud")

    result = await service.test_connection()

    assert result.error == "Connection timed out after 5.0s"


@pytest.mark.asyncio
async def test_batch_provider_without_api_key_makes_no_http_call():
    service = SpeechRecognitionService()
    service.configure(OpenAIConfig(base_url="https://api.openai.com", api_key=""))

    with patch("pushtalk.transcription.whisper.AsyncOpenAI") as mock_cls:
        result = await service.transcribe(b"any buffer")

    assert not result.success
    assert "not configured" in result.error
    mock_cls.assert_not_called()


def test_provider_catalogue():
    service, _ = make_service()

    assert [p.provider for p in service.supported_providers()] == [ProviderId.OPENAI, ProviderId.ALICLOUD]
    assert [f.key for f in service.provider_fields("alicloud")] == ["app_key", "access_token", "gateway_url"]
    assert [f.secret for f in service.provider_fields("openai")] == [False, True]
