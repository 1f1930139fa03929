"""Provider configs and transcription results shared by every backend."""
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Union

from pushtalk.constants import PROVIDER_ALICLOUD, PROVIDER_OPENAI


class ProviderId(str, Enum):
    OPENAI = PROVIDER_OPENAI
    ALICLOUD = PROVIDER_ALICLOUD


class ErrorKind(str, Enum):
    NOT_CONFIGURED = "not_configured"
    TRANSPORT = "transport"
    BACKEND = "backend"
    TIMEOUT = "timeout"
    PARSE = "parse"


def normalize_url(url: str) -> str:
    """Strip whitespace and force exactly one trailing slash. Empty stays empty."""
    match url.strip().rstrip("/"):
        case "":
            return ""
        case base:
            return base + "/"


def _read_fields(cls: type, raw: Mapping[str, object]) -> dict[str, str]:
    values: dict[str, str] = {}
    for field in fields(cls):
        match raw.get(field.name, ""):
            case str() as value:
                values[field.name] = value
            case None:
                values[field.name] = ""
            case other:
                raise ValueError(
                    f"{cls.__name__}.{field.name} must be a string, got {type(other).__name__}"
                )
    return values


@dataclass(frozen=True)
class OpenAIConfig:
    base_url: str
    api_key: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", normalize_url(self.base_url))
        object.__setattr__(self, "api_key", self.api_key.strip())

    @property
    def is_complete(self) -> bool:
        return bool(self.base_url and self.api_key)

    @classmethod
    def from_fields(cls, raw: Mapping[str, object]) -> "OpenAIConfig":
        return cls(**_read_fields(cls, raw))


@dataclass(frozen=True)
class StreamingConfig:
    app_key: str
    access_token: str
    gateway_url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "app_key", self.app_key.strip())
        object.__setattr__(self, "access_token", self.access_token.strip())
        object.__setattr__(self, "gateway_url", normalize_url(self.gateway_url))

    @property
    def is_complete(self) -> bool:
        return bool(self.app_key and self.access_token and self.gateway_url)

    @classmethod
    def from_fields(cls, raw: Mapping[str, object]) -> "StreamingConfig":
        return cls(**_read_fields(cls, raw))


ProviderConfig = Union[OpenAIConfig, StreamingConfig]


@dataclass(frozen=True)
class PartialResult:
    """Incremental text delivered while a streaming session is running."""

    text: str
    confidence: Optional[float]
    timestamp: float


@dataclass(frozen=True)
class TranscriptionResult:
    success: bool
    text: Optional[str] = None
    confidence: Optional[float] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    http_status: Optional[int] = None

    @classmethod
    def ok(
        cls,
        text: str,
        confidence: Optional[float] = None,
        http_status: Optional[int] = None,
    ) -> "TranscriptionResult":
        if not isinstance(text, str):
            raise TypeError(f"Successful result needs str text, got {type(text).__name__}")
        return cls(success=True, text=text, confidence=confidence, http_status=http_status)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        http_status: Optional[int] = None,
    ) -> "TranscriptionResult":
        return cls(
            success=False,
            error=message or kind.value,
            error_kind=kind,
            http_status=http_status,
        )

    def with_error_prefix(self, prefix: str) -> "TranscriptionResult":
        match self.success:
            case True:
                return self
            case False:
                return TranscriptionResult.failure(
                    self.error_kind or ErrorKind.BACKEND,
                    f"{prefix}: {self.error}",
                    self.http_status,
                )
