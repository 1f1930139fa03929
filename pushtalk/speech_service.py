"""SpeechRecognitionService: provider-agnostic facade over the registered clients."""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from pushtalk.config import Config
from pushtalk.constants import MSG_ERR_UNEXPECTED, MSG_LOG_PROVIDER, MSG_LOG_TRANSCRIBING
from pushtalk.transcription.client import OnResult, TranscriptionClient
from pushtalk.transcription.models import (
    ErrorKind,
    ProviderConfig,
    ProviderId,
    TranscriptionResult,
)
from pushtalk.transcription.registry import PROVIDERS, ConfigField, ProviderSpec

logger = logging.getLogger(__name__)


@dataclass
class ProviderRegistration:
    """Which provider is active and the credentials held for each one."""

    active: ProviderId
    configs: dict[ProviderId, ProviderConfig] = field(default_factory=dict)


class SpeechRecognitionService:
    """Dispatches every call to the client of the active provider.

    Credentials are kept per provider: switching providers never clears or
    copies them, each one has to be configured on its own.
    """

    def __init__(
        self,
        provider: ProviderId | str = ProviderId.OPENAI,
        clients: Optional[Mapping[ProviderId, TranscriptionClient]] = None,
        registry: Mapping[ProviderId, ProviderSpec] = PROVIDERS,
    ) -> None:
        overrides = clients or {}
        self._registry = registry
        self._clients: dict[ProviderId, TranscriptionClient] = {
            pid: overrides.get(pid) or spec.factory() for pid, spec in registry.items()
        }
        self._registration = ProviderRegistration(active=ProviderId(provider))
        for pid, spec in registry.items():
            self._apply(pid, spec.empty_config())

    # ── selection state ───────────────────────────────────────────────────────

    @property
    def provider(self) -> ProviderId:
        return self._registration.active

    @property
    def display_name(self) -> str:
        return self._spec().display_name

    def config_for(self, provider: ProviderId | str) -> ProviderConfig:
        return self._registration.configs[ProviderId(provider)]

    def set_provider(self, provider: ProviderId | str) -> None:
        target = ProviderId(provider)
        match target == self._registration.active:
            case True:
                return
            case False:
                pass
        self._client().disconnect()
        self._registration.active = target
        logger.info(MSG_LOG_PROVIDER, self.display_name)

    def configure(self, config: ProviderConfig) -> None:
        """Set credentials for the active provider. Raises ValueError on a schema mismatch."""
        spec = self._spec()
        match isinstance(config, spec.config_type):
            case False:
                raise ValueError(
                    f"{spec.display_name} expects {spec.config_type.__name__}, "
                    f"got {type(config).__name__}"
                )
            case True:
                self._apply(spec.provider, config)

    def configure_fields(self, provider: ProviderId | str, fields: Mapping[str, object]) -> None:
        """Set credentials for any provider from a raw settings record."""
        pid = ProviderId(provider)
        self._apply(pid, self._registry[pid].config_type.from_fields(fields))

    def reset_config(self) -> None:
        for pid, spec in self._registry.items():
            self._apply(pid, spec.empty_config())

    def load(self, config: Config) -> None:
        for provider, fields in config.provider_fields().items():
            self.configure_fields(provider, fields)
        self.set_provider(config.provider)

    # ── delegated operations ──────────────────────────────────────────────────

    def is_ready(self) -> bool:
        return self._client().is_configured()

    async def test_connection(self) -> TranscriptionResult:
        try:
            return await self._client().test_connection()
        except Exception as exc:
            logger.exception("Connection test crashed")
            return TranscriptionResult.failure(ErrorKind.BACKEND, MSG_ERR_UNEXPECTED % exc)

    async def transcribe(
        self, audio: bytes, on_result: Optional[OnResult] = None
    ) -> TranscriptionResult:
        name = self.display_name
        logger.info(MSG_LOG_TRANSCRIBING, name, len(audio))
        try:
            result = await self._client().transcribe(audio, on_result)
        except Exception as exc:
            logger.exception("Transcription crashed")
            result = TranscriptionResult.failure(ErrorKind.BACKEND, MSG_ERR_UNEXPECTED % exc)
        return result.with_error_prefix(name)

    # ── provider catalogue ────────────────────────────────────────────────────

    def supported_providers(self) -> list[ProviderSpec]:
        return list(self._registry.values())

    def provider_fields(self, provider: ProviderId | str) -> tuple[ConfigField, ...]:
        return self._registry[ProviderId(provider)].fields

    # ── internals ─────────────────────────────────────────────────────────────

    def _spec(self) -> ProviderSpec:
        return self._registry[self._registration.active]

    def _client(self) -> TranscriptionClient:
        return self._clients[self._registration.active]

    def _apply(self, provider: ProviderId, config: ProviderConfig) -> None:
        self._registration.configs[provider] = config
        self._clients[provider].configure(config)
