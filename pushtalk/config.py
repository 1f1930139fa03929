from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from pushtalk.constants import (
    DEFAULT_ALICLOUD_GATEWAY_URL,
    DEFAULT_OPENAI_BASE_URL,
    DEFAULT_PROVIDER,
    PROVIDER_ALICLOUD,
    PROVIDER_OPENAI,
)


@dataclass(frozen=True)
class Config:
    provider: str
    log_level: str
    openai_base_url: str
    openai_api_key: Optional[str]
    alicloud_app_key: Optional[str]
    alicloud_access_token: Optional[str]
    alicloud_gateway_url: str

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        provider = os.getenv("PUSHTALK_PROVIDER", DEFAULT_PROVIDER)
        log_level = os.getenv("LOG_LEVEL", "INFO")
        openai_base_url = os.getenv("OPENAI_BASE_URL") or DEFAULT_OPENAI_BASE_URL
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        app_key = os.getenv("ALICLOUD_APP_KEY") or None
        access_token = os.getenv("ALICLOUD_ACCESS_TOKEN") or None
        gateway_url = os.getenv("ALICLOUD_GATEWAY_URL") or DEFAULT_ALICLOUD_GATEWAY_URL

        return cls._validate(
            provider=provider.strip().lower(),
            log_level=log_level,
            openai_base_url=openai_base_url,
            openai_api_key=openai_api_key,
            alicloud_app_key=app_key,
            alicloud_access_token=access_token,
            alicloud_gateway_url=gateway_url,
        )

    @staticmethod
    def _validate(
        provider: str,
        log_level: str,
        openai_base_url: str,
        openai_api_key: Optional[str],
        alicloud_app_key: Optional[str],
        alicloud_access_token: Optional[str],
        alicloud_gateway_url: str,
    ) -> "Config":
        match provider:
            case "":
                raise ValueError("PUSHTALK_PROVIDER must not be empty")
            case p if p not in (PROVIDER_OPENAI, PROVIDER_ALICLOUD):
                raise ValueError(
                    f"PUSHTALK_PROVIDER must be '{PROVIDER_OPENAI}' or '{PROVIDER_ALICLOUD}', got '{p}'"
                )
            case _:
                pass

        return Config(
            provider=provider,
            log_level=log_level,
            openai_base_url=openai_base_url,
            openai_api_key=openai_api_key,
            alicloud_app_key=alicloud_app_key,
            alicloud_access_token=alicloud_access_token,
            alicloud_gateway_url=alicloud_gateway_url,
        )

    def provider_fields(self) -> dict[str, dict[str, str]]:
        """Per-provider settings record, keyed by provider id."""
        return {
            PROVIDER_OPENAI: {
                "base_url": self.openai_base_url,
                "api_key": self.openai_api_key or "",
            },
            PROVIDER_ALICLOUD: {
                "app_key": self.alicloud_app_key or "",
                "access_token": self.alicloud_access_token or "",
                "gateway_url": self.alicloud_gateway_url,
            },
        }
