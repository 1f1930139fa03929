import pytest

from pushtalk.transcription.models import (
    ErrorKind,
    OpenAIConfig,
    StreamingConfig,
    TranscriptionResult,
    normalize_url,
)


@pytest.mark.parametrize("raw, expected", [
    ("https://api.openai.com", "https://api.openai.com/"),
    ("https://api.openai.com/", "https://api.openai.com/"),
    ("https://api.openai.com//", "https://api.openai.com/"),
    (" https://proxy/v2 ", "https://proxy/v2/"),
    ("", ""),
    ("/", ""),
])
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_streaming_config_completeness():
    assert StreamingConfig(app_key="a", access_token="t", gateway_url="wss://g").is_complete
    assert not StreamingConfig(app_key="a", access_token=" ", gateway_url="wss://g").is_complete
    assert not StreamingConfig(app_key="a", access_token="t", gateway_url="").is_complete


def test_from_fields_treats_missing_and_none_as_empty():
    config = OpenAIConfig.from_fields({"base_url": "https://x", "api_key": None})

    assert config.base_url == "https://x/"
    assert config.api_key == ""
    assert not config.is_complete


def test_from_fields_ignores_unknown_keys():
    config = StreamingConfig.from_fields({
        "app_key": "a",
        "access_token": "t",
        "gateway_url": "wss://g",
        "theme": "dark",
    })
    assert config.is_complete


def test_failure_always_carries_error_text():
    result = TranscriptionResult.failure(ErrorKind.TIMEOUT, "")

    assert not result.success
    assert result.error == "timeout"
    assert result.text is None


def test_error_prefix_leaves_success_untouched():
    ok = TranscriptionResult.ok("hello")
    assert ok.with_error_prefix("OpenAI Whisper") is ok


def test_ok_refuses_missing_text():
    with pytest.raises(TypeError):
        TranscriptionResult.ok(None)
