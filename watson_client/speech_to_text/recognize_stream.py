"""Duplex websocket stream for real-time Speech-to-Text recognition.

WHY: The /v1/recognize websocket is the only way to get results while audio
is still being sent. The protocol is small but stateful: a JSON start
frame, binary audio frames, a JSON stop frame, and a stream of JSON result
messages bracketed by two "listening" states.

HOW: RecognizeStream opens the socket with the websockets library, sends
the start frame on open, frames outgoing audio as binary messages, and
demultiplexes incoming JSON into RecognizeEvent objects. recognize() runs
the audio sender as a background task while the caller iterates results.

Protocol:
  1. Connect to ws(s)://<service>/v1/recognize?model=...&watson-token=...
  2. Send {"action": "start", "content-type": ..., <options>}
  3. Service replies {"state": "listening"}
  4. Send raw audio bytes, then {"action": "stop"}
  5. Receive {"results": [...], "result_index": n} / {"speaker_labels": [...]}
  6. Service replies {"state": "listening"} again, recognition is done

RULES:
- Use as: async with stream: ... or call open()/close() explicitly
- An {"error": ...} message raises RecognizeStreamError from events()
- {"warnings": ...} messages are logged, never raised
- The second "listening" state ends iteration and closes the socket
- Audio cannot be sent after stop()
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import re
from collections.abc import AsyncIterator, Iterable
from typing import Any, AsyncIterable, Union
from urllib.parse import urlencode

from websockets.asyncio.client import connect

from watson_client.api.service import build_query
from watson_client.speech_to_text.models import RecognizeEvent

logger = logging.getLogger(__name__)

AudioChunks = Union[Iterable[bytes], AsyncIterable[bytes]]


class RecognizeStreamError(Exception):
    """Raised when the service sends an error message on the socket.

    RULES:
    - message is the service's "error" field verbatim
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Speech-to-Text stream error: {message}")


class RecognizeStream:
    """One recognition over the Speech-to-Text websocket.

    WHY: Wraps the socket protocol so callers only deal with audio chunks
    in and RecognizeEvent objects out.

    HOW: Built by SpeechToTextV1.create_recognize_stream(), which supplies
    the service URL and credentials. Recognition options are copied into
    the start frame unchanged (None values omitted).

    RULES:
    - http URLs become ws, https URLs become wss
    - Without a token the handshake carries the basic auth header
    - model, customization_id, the token and the learning opt-out go in
      the query string; everything else goes in the start frame
    """

    def __init__(
        self,
        url: str,
        content_type: str,
        authorization: str | None = None,
        token: str | None = None,
        model: str | None = None,
        customization_id: str | None = None,
        learning_opt_out: bool = False,
        headers: dict[str, str] | None = None,
        **options: Any,
    ) -> None:
        self.content_type = content_type
        self.options = options
        self._base_url = url.rstrip("/")
        self._query = build_query(
            {
                "model": model,
                "customization_id": customization_id,
                "watson-token": token,
                "x-watson-learning-opt-out": "1" if learning_opt_out else None,
            }
        )
        self._headers = dict(headers or {})
        if authorization and not token:
            self._headers["Authorization"] = authorization

        self._ws = None
        self._listening = False
        self._stopped = False
        self._finished = False

    @property
    def uri(self) -> str:
        """Websocket URI of the recognize endpoint."""
        uri = re.sub(r"^http", "ws", self._base_url) + "/v1/recognize"
        if self._query:
            uri += "?" + urlencode(self._query)
        return uri

    def start_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"action": "start", "content-type": self.content_type}
        message.update({key: value for key, value in self.options.items() if value is not None})
        return message

    async def __aenter__(self) -> RecognizeStream:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.close()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Connect and send the start frame. Calling twice is a no-op."""
        if self._ws is not None:
            return
        logger.debug("Opening recognize stream to %s/v1/recognize", self._base_url)
        self._ws = await connect(self.uri, additional_headers=self._headers, max_size=None)
        await self._ws.send(json.dumps(self.start_message()))

    async def close(self) -> None:
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()
            logger.debug("Recognize stream closed")

    def _ensure_open(self):
        if self._ws is None:
            raise RuntimeError("RecognizeStream is not open; call open() or use 'async with'")
        return self._ws

    # ------------------------------------------------------------------
    # Outgoing
    # ------------------------------------------------------------------

    async def send_audio(self, chunk: bytes) -> None:
        ws = self._ensure_open()
        if self._stopped:
            raise RuntimeError("Cannot send audio after stop()")
        await ws.send(bytes(chunk))

    async def stop(self) -> None:
        """Signal the end of the audio. Calling twice is a no-op."""
        ws = self._ensure_open()
        if self._stopped:
            return
        self._stopped = True
        await ws.send(json.dumps({"action": "stop"}))

    # ------------------------------------------------------------------
    # Incoming
    # ------------------------------------------------------------------

    async def events(self) -> AsyncIterator[RecognizeEvent]:
        """Yield results until the service reports it is done.

        Iteration also ends when the service closes the socket.
        """
        ws = self._ensure_open()
        async for message in ws:
            event = self._handle_message(message)
            if self._finished:
                break
            if event is not None:
                yield event
        await self.close()

    def _handle_message(self, message: str | bytes) -> RecognizeEvent | None:
        if isinstance(message, bytes):
            message = message.decode("utf-8")
        data = json.loads(message)

        if "error" in data:
            raise RecognizeStreamError(data["error"])

        if "warnings" in data:
            logger.warning("Speech-to-Text warnings: %s", data["warnings"])

        if data.get("state") == "listening":
            if self._listening:
                self._finished = True
            else:
                self._listening = True
                logger.debug("Recognize stream listening")
            return None

        if "results" in data or "speaker_labels" in data:
            return RecognizeEvent.from_dict(data)
        return None

    # ------------------------------------------------------------------
    # Full duplex helpers
    # ------------------------------------------------------------------

    async def recognize(self, chunks: AudioChunks) -> AsyncIterator[RecognizeEvent]:
        """Send chunks (then stop) in the background and yield events.

        HOW: Each receive runs as a task raced against the sender. The
        service only finishes after the stop frame, so a sender that
        fails before stop() would otherwise leave the receive waiting
        until the service's inactivity timeout.

        RULES:
        - Opens the stream if needed
        - Errors raised while sending audio stop the receive, close the
          socket and propagate immediately
        """
        await self.open()
        sender = asyncio.create_task(self._send_all(chunks))
        events = self.events()
        try:
            while True:
                receive = asyncio.create_task(_next_event(events))
                waiting = {receive} if sender.done() else {receive, sender}
                done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

                if sender in done and sender.exception() is not None:
                    if not receive.done():
                        receive.cancel()
                        with contextlib.suppress(asyncio.CancelledError):
                            await receive
                    await self.close()
                    sender.result()

                event = await receive
                if event is None:
                    break
                yield event
        finally:
            if not sender.done():
                sender.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sender
            await events.aclose()

    async def transcripts(self, chunks: AudioChunks) -> AsyncIterator[str]:
        """Yield the final transcript text of each final result message."""
        async for event in self.recognize(chunks):
            if event.is_final:
                yield event.transcript

    async def _send_all(self, chunks: AudioChunks) -> None:
        if hasattr(chunks, "__aiter__"):
            async for chunk in chunks:
                await self.send_audio(chunk)
        else:
            for chunk in chunks:
                await self.send_audio(chunk)
        await self.stop()


async def _next_event(events: AsyncIterator[RecognizeEvent]) -> RecognizeEvent | None:
    """Next event from the iterator, or None when it is exhausted."""
    try:
        return await events.__anext__()
    except StopAsyncIteration:
        return None
