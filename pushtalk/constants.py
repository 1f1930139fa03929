"""All magic values live here, no inline literals anywhere else."""

# Providers
PROVIDER_OPENAI = "openai"
PROVIDER_ALICLOUD = "alicloud"
DEFAULT_PROVIDER = PROVIDER_OPENAI

# Batch (OpenAI-compatible) transcription
WHISPER_MODEL = "whisper-1"
VOICE_FILENAME = "recording.wav"
OPENAI_API_PREFIX = "v1"
OPENAI_TRANSCRIPTIONS_PATH = "v1/audio/transcriptions"
OPENAI_MODELS_PATH = "v1/models"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com"

# Streaming (AliCloud NLS) transcription
DEFAULT_ALICLOUD_GATEWAY_URL = "wss://nls-gateway-cn-shanghai.aliyuncs.com"
ALICLOUD_WS_PATH = "ws/v1"
ALICLOUD_TOKEN_HEADER = "X-NLS-Token"
ASR_NAMESPACE = "SpeechTranscriber"
ASR_START = "StartTranscription"
ASR_STOP = "StopTranscription"
ASR_RESULT_CHANGED = "TranscriptionResultChanged"
ASR_COMPLETED = "TranscriptionCompleted"
ASR_TASK_FAILED = "TaskFailed"
ASR_AUDIO_FORMAT = "pcm"
ASR_SAMPLE_RATE = 16000

# Audio pacing (bytes / seconds).
# 3200 bytes is 100 ms of 16 kHz 16-bit mono PCM.
AUDIO_FRAME_SIZE = 3200
AUDIO_FRAME_INTERVAL: float = 0.02
AUDIO_FIRST_FRAME_DELAY: float = 0.1

PROBE_TIMEOUT: float = 5.0

# Clipboard preview length for log lines
PREVIEW_LENGTH = 50

# Provider display names
NAME_OPENAI = "OpenAI Whisper"
NAME_ALICLOUD = "AliCloud ASR"
DESC_OPENAI = "Upload the finished recording to an OpenAI-compatible Whisper endpoint"
DESC_ALICLOUD = "Stream the recording to AliCloud realtime speech recognition, lower latency"

# Result errors
MSG_OPENAI_NOT_CONFIGURED = "OpenAI is not configured: set the base URL and API key"
MSG_ALICLOUD_NOT_CONFIGURED = (
    "AliCloud ASR is not configured: set the app key, access token and gateway URL"
)
MSG_ERR_API_STATUS = "API error: %s %s"
MSG_ERR_CONNECTION = "Connection error: %s"
MSG_ERR_WS_CONNECT = "WebSocket connection error: %s"
MSG_ERR_WS_CLOSED = "Connection closed before transcription completed"
MSG_ERR_TASK_FAILED = "Speech recognition failed: %s"
MSG_ERR_UNKNOWN = "unknown error"
MSG_ERR_PROBE_TIMEOUT = "Connection timed out after %ss"
MSG_ERR_UNEXPECTED = "Unexpected error: %s"
MSG_ERR_BAD_RESPONSE = "Unexpected response from server (HTTP %s)"
MSG_ERR_DISCONNECTED = "Transcription cancelled: connection closed by client"

# Log messages
MSG_LOG_TRANSCRIBING = "→ %s (%d bytes)"
MSG_LOG_SESSION_PHASE = "ASR session %s: %s → %s"
MSG_LOG_BAD_FRAME = "Ignoring malformed ASR message: %s"
MSG_LOG_UNKNOWN_EVENT = "Ignoring ASR event %s"
MSG_LOG_PROVIDER = "Provider set to %s"
MSG_LOG_HEALTH = "Health %s → %s (%s)"
MSG_LOG_CLIPBOARD_OK = "✓ Copied to clipboard: %r"
MSG_LOG_CLIPBOARD_FAIL = "Clipboard copy failed: %s"
MSG_LOG_TRANSCRIPTION_FAILED = "✗ Transcription failed: %s"
