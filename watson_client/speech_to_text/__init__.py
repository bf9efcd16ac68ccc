"""Watson Speech-to-Text bindings: REST recognition, sessions, async jobs
and the real-time websocket stream.
"""

from watson_client.speech_to_text.models import (
    RecognitionJob,
    RecognitionStatus,
    RecognizeEvent,
)
from watson_client.speech_to_text.recognize_stream import RecognizeStream, RecognizeStreamError
from watson_client.speech_to_text.v1 import (
    RecognitionJobError,
    RecognitionJobTimeoutError,
    SpeechToTextV1,
)

__all__ = [
    "RecognitionJob",
    "RecognitionJobError",
    "RecognitionJobTimeoutError",
    "RecognitionStatus",
    "RecognizeEvent",
    "RecognizeStream",
    "RecognizeStreamError",
    "SpeechToTextV1",
]
