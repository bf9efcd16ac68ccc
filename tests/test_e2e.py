"""End-to-end check against the real Speech-to-Text service.

WHY: The unit tests run against a fake transport. Only a live call shows
that authentication, URLs and response decoding line up with the real
service.

HOW: Lists the recognition models and fetches one of them. Skipped
automatically if SPEECH_TO_TEXT_USERNAME / SPEECH_TO_TEXT_PASSWORD are not
set in the environment.
"""

import asyncio
import os

import pytest

_HAS_CREDENTIALS = bool(
    os.getenv("SPEECH_TO_TEXT_USERNAME", "").strip()
    and os.getenv("SPEECH_TO_TEXT_PASSWORD", "").strip()
)


@pytest.mark.skipif(
    not _HAS_CREDENTIALS,
    reason="Speech-to-Text credentials not set in environment, skipping real API test",
)
class TestRealSpeechToText:
    def test_models_roundtrip(self):
        from watson_client.speech_to_text import SpeechToTextV1

        async def _run():
            async with SpeechToTextV1() as stt:
                models = await stt.get_models()
                assert models["models"], "service should list at least one model"
                name = models["models"][0]["name"]
                model = await stt.get_model(name)
                assert model["name"] == name

        asyncio.run(_run())
