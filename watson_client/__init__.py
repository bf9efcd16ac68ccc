"""Watson client: async Python bindings for IBM Watson REST services.

WHY: Conversation, Discovery and Speech-to-Text are plain REST (and
websocket) APIs. Callers should not need to know paths, query encoding,
session cookies or the streaming recognize protocol to use them.

HOW: One service class per API and version, all built on a shared
WatsonService that owns the httpx client, authentication, query encoding
and error mapping. Responses are passed back as decoded JSON.

RULES:
- Every service is an async context manager (async with ... as svc:)
- Request construction lives in the service classes, transport in httpx
- The remote service owns the API semantics; nothing here validates them
"""

__version__ = "0.1.0"

from watson_client.api.service import MissingParameterError, WatsonAPIError
from watson_client.conversation import ConversationV1
from watson_client.discovery import DiscoveryV1
from watson_client.speech_to_text import RecognizeStream, SpeechToTextV1

__all__ = [
    "ConversationV1",
    "DiscoveryV1",
    "MissingParameterError",
    "RecognizeStream",
    "SpeechToTextV1",
    "WatsonAPIError",
]
