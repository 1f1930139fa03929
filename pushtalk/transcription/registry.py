"""Provider registry: one entry per supported speech-to-text backend."""
from dataclasses import dataclass
from typing import Callable

from pushtalk.constants import DESC_ALICLOUD, DESC_OPENAI, NAME_ALICLOUD, NAME_OPENAI
from pushtalk.transcription.alicloud import AliCloudStreamingClient
from pushtalk.transcription.client import TranscriptionClient
from pushtalk.transcription.models import OpenAIConfig, ProviderId, StreamingConfig
from pushtalk.transcription.whisper import OpenAITranscriptionClient


@dataclass(frozen=True)
class ConfigField:
    key: str
    label: str
    secret: bool = False


@dataclass(frozen=True)
class ProviderSpec:
    provider: ProviderId
    display_name: str
    description: str
    config_type: type
    fields: tuple[ConfigField, ...]
    factory: Callable[[], TranscriptionClient]

    def empty_config(self):
        return self.config_type.from_fields({})


PROVIDERS: dict[ProviderId, ProviderSpec] = {
    ProviderId.OPENAI: ProviderSpec(
        provider=ProviderId.OPENAI,
        display_name=NAME_OPENAI,
        description=DESC_OPENAI,
        config_type=OpenAIConfig,
        fields=(
            ConfigField("base_url", "Base URL"),
            ConfigField("api_key", "API Key", secret=True),
        ),
        factory=OpenAITranscriptionClient,
    ),
    ProviderId.ALICLOUD: ProviderSpec(
        provider=ProviderId.ALICLOUD,
        display_name=NAME_ALICLOUD,
        description=DESC_ALICLOUD,
        config_type=StreamingConfig,
        fields=(
            ConfigField("app_key", "App Key"),
            ConfigField("access_token", "Access Token", secret=True),
            ConfigField("gateway_url", "Gateway URL"),
        ),
        factory=AliCloudStreamingClient,
    ),
}
