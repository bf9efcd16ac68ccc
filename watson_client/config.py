"""Configuration constants, service endpoints and .env loading.

WHY: Every service needs a base URL and credentials, and the CLI needs to
know which audio formats Speech-to-Text accepts. Keeping these as plain
module-level data makes them easy to find and override.

HOW: python-dotenv loads the .env file on import. Service defaults are
module-level strings overridable through environment variables.
load_credentials() reads the username/password pair for one service and
fails loudly when it is missing.

RULES:
- Credentials are read from the environment (via .env), never hardcoded
- Each service uses its own prefix: CONVERSATION, DISCOVERY, SPEECH_TO_TEXT
- <PREFIX>_URL overrides the default base URL of that service
- Unknown audio extensions raise ValueError in content_type_for()
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Service endpoints
# ---------------------------------------------------------------------------

CONVERSATION_PREFIX = "CONVERSATION"
DISCOVERY_PREFIX = "DISCOVERY"
SPEECH_TO_TEXT_PREFIX = "SPEECH_TO_TEXT"

DEFAULT_URLS: dict[str, str] = {
    CONVERSATION_PREFIX: "https://gateway.watsonplatform.net/conversation/api",
    DISCOVERY_PREFIX: "https://gateway.watsonplatform.net/discovery/api",
    SPEECH_TO_TEXT_PREFIX: "https://stream.watsonplatform.net/speech-to-text/api",
}

WATSON_TIMEOUT_S = float(os.getenv("WATSON_TIMEOUT_S", "300"))
WATSON_CONNECT_TIMEOUT_S = 30.0


def service_url(prefix: str) -> str:
    """Return the base URL for a service, honouring <PREFIX>_URL."""
    return os.getenv("{}_URL".format(prefix), "").strip() or DEFAULT_URLS[prefix]


def load_credentials(prefix: str) -> tuple[str, str]:
    """Load the basic-auth username and password of one service.

    WHY: Watson services authenticate with per-service credentials. Reading
    them from the environment keeps them out of source code.

    HOW: Reads <PREFIX>_USERNAME and <PREFIX>_PASSWORD from os.environ
    (populated by python-dotenv).

    RULES:
    - Raises ValueError naming the missing variable
    - Never returns a default/placeholder value
    """
    username = os.getenv("{}_USERNAME".format(prefix), "").strip()
    password = os.getenv("{}_PASSWORD".format(prefix), "").strip()
    for name, value in (("USERNAME", username), ("PASSWORD", password)):
        if not value:
            raise ValueError(
                "Watson credentials not configured. "
                "Add {}_{} to the environment or the .env file.".format(prefix, name)
            )
    return username, password


# ---------------------------------------------------------------------------
# Audio formats accepted by Speech-to-Text
# ---------------------------------------------------------------------------

AUDIO_CONTENT_TYPES: dict[str, str] = {
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg;codecs=opus",
    ".opus": "audio/ogg;codecs=opus",
    ".mp3": "audio/mp3",
    ".mpeg": "audio/mpeg",
    ".webm": "audio/webm",
    ".l16": "audio/l16;rate=16000",
    ".pcm": "audio/l16;rate=16000",
    ".mulaw": "audio/mulaw;rate=8000",
    ".basic": "audio/basic",
}
"""Audio file extensions (lowercase, with dot) → Speech-to-Text content type."""

STREAM_CHUNK_BYTES = 8192


def content_type_for(path: str | Path) -> str:
    """Map an audio file path to its Speech-to-Text content type.

    RULES:
    - Lookup is by lowercase extension
    - Unsupported extensions raise ValueError listing the supported ones
    """
    suffix = Path(path).suffix.lower()
    try:
        return AUDIO_CONTENT_TYPES[suffix]
    except KeyError:
        raise ValueError(
            "Unsupported audio file type '{}'. Supported: {}".format(
                suffix or Path(path).name,
                ", ".join(sorted(AUDIO_CONTENT_TYPES)),
            )
        ) from None
