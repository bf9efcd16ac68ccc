"""Speech-to-Text v1 bindings: models, sessions, recognition and async jobs.

WHY: Speech-to-Text transcribes audio through a one-shot POST, a
session-based chunked upload, or asynchronous recognition jobs that report
back through a registered callback. A websocket adds real-time results.
This module exposes all of them behind one class.

HOW: SpeechToTextV1 builds on WatsonService. Session-bound calls carry the
SESSIONID cookie captured by create_session(). Audio bodies are read into
memory for one-shot calls and streamed with chunked transfer encoding for
recognize_live(). create_recognize_stream() hands the websocket work to
RecognizeStream.

RULES:
- observe_result and recognize_live need both session_id and cookie_session;
  the other session calls send the cookie only when it is given
- Recognition options become query parameters (keywords joined with ",")
- Job events may be a string or a list (joined with ",")
- wait_for_recognition_job polls with exponential backoff: 2s initial,
  1.5x factor, 15s max, 60min timeout
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Callable, Iterable
from http.cookies import SimpleCookie
from pathlib import Path
from typing import Any, BinaryIO, Union

import httpx

from watson_client.api.service import WatsonService
from watson_client.config import SPEECH_TO_TEXT_PREFIX, STREAM_CHUNK_BYTES
from watson_client.speech_to_text.models import RecognitionJob, RecognitionStatus
from watson_client.speech_to_text.recognize_stream import AudioChunks, RecognizeStream

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SESSION_COOKIE = "SESSIONID"

_POLL_INITIAL_INTERVAL_S = 2.0
_POLL_BACKOFF_FACTOR = 1.5
_POLL_MAX_INTERVAL_S = 15.0
_POLL_TIMEOUT_S = 60 * 60  # 60 minutes

Audio = Union[bytes, bytearray, str, Path, BinaryIO]


class RecognitionJobError(Exception):
    """Raised when a polled recognition job ends in the "failed" status.

    RULES:
    - job holds the final RecognitionJob as reported by the service
    """

    def __init__(self, job: RecognitionJob) -> None:
        self.job = job
        detail = "; ".join(job.warnings) if job.warnings else "no details"
        super().__init__(f"Recognition job {job.id} failed: {detail}")


class RecognitionJobTimeoutError(TimeoutError):
    """Raised when polling a recognition job exceeds the maximum timeout."""


class SpeechToTextV1(WatsonService):
    """Async client for the Watson Speech-to-Text v1 API."""

    CREDENTIALS_PREFIX = SPEECH_TO_TEXT_PREFIX

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    async def get_models(self) -> dict:
        return await self._request("GET", "/v1/models")

    async def get_model(self, model_id: str) -> dict:
        self._require(model_id=model_id)
        return await self._request("GET", self._path("v1", "models", model_id))

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def create_session(self, model: str | None = None) -> dict:
        """Create a recognition session.

        WHY: Session-based recognition keeps the model loaded between
        requests and lets observe_result() follow an upload in progress.

        HOW: POSTs /v1/sessions and copies the SESSIONID cookie from the
        response into the returned document as "cookie_session". Every
        later call for this session must send that value back.

        RULES:
        - Returns the service's JSON plus "cookie_session"
        - cookie_session is None when the service set no SESSIONID cookie
        - A body that is not a JSON object is replaced by an empty document
        """
        resp = await self._send("POST", "/v1/sessions", params={"model": model})
        session = self._decode(resp)
        if not isinstance(session, dict):
            session = {}
        session["cookie_session"] = _session_cookie(resp)
        return session

    async def delete_session(self, session_id: str, cookie_session: str | None = None) -> Any:
        """Delete a session. The cookie is sent back when it is given."""
        self._require(session_id=session_id)
        return await self._request(
            "DELETE",
            self._path("v1", "sessions", session_id),
            headers=_cookie_header(cookie_session),
        )

    async def get_recognize_status(
        self, session_id: str, cookie_session: str | None = None
    ) -> dict:
        """Return the session state (initialized, listening, processing, ...)."""
        self._require(session_id=session_id)
        return await self._request(
            "GET",
            self._path("v1", "sessions", session_id, "recognize"),
            headers=_cookie_header(cookie_session),
        )

    async def observe_result(
        self,
        session_id: str,
        cookie_session: str,
        interim_results: bool | None = None,
    ) -> Any:
        """Wait for the results of the recognition running in a session."""
        self._require(session_id=session_id, cookie_session=cookie_session)
        return await self._request(
            "GET",
            self._path("v1", "sessions", session_id, "observe_result"),
            params={"interim_results": interim_results},
            headers=_cookie_header(cookie_session),
        )

    # ------------------------------------------------------------------
    # Recognition
    # ------------------------------------------------------------------

    async def recognize(
        self,
        audio: Audio,
        content_type: str,
        session_id: str | None = None,
        cookie_session: str | None = None,
        **options: Any,
    ) -> dict:
        """Transcribe a complete audio file in one request.

        RULES:
        - audio and content_type are required
        - With session_id the request goes to the session's recognize URL
          and carries its cookie
        - options (model, continuous, keywords, timestamps, ...) become
          query parameters
        """
        self._require(audio=audio, content_type=content_type)

        headers = {"Content-Type": content_type}
        if session_id:
            path = self._path("v1", "sessions", session_id, "recognize")
            headers.update(_cookie_header(cookie_session))
        else:
            path = "/v1/recognize"

        return await self._request(
            "POST", path, params=options, content=_read_audio(audio), headers=headers
        )

    async def recognize_live(
        self,
        session_id: str,
        cookie_session: str,
        content_type: str,
        audio_chunks: AudioChunks | Audio,
        **options: Any,
    ) -> dict:
        """Stream audio into a session with chunked transfer encoding.

        WHY: Live sources (microphones, network feeds) do not know their
        length up front. Chunked upload lets the service start recognizing
        while audio is still arriving, and observe_result() can follow it.

        HOW: The body is an async iterator over the given chunks, which
        makes httpx send Transfer-Encoding: chunked.

        RULES:
        - session_id, cookie_session and content_type are required
        - audio_chunks may be bytes, a path, a binary file, or a sync or
          async iterable of byte chunks
        """
        self._require(
            session_id=session_id,
            cookie_session=cookie_session,
            content_type=content_type,
        )
        headers = {"Content-Type": content_type}
        headers.update(_cookie_header(cookie_session))
        return await self._request(
            "POST",
            self._path("v1", "sessions", session_id, "recognize"),
            params=options,
            content=_stream_audio(audio_chunks),
            headers=headers,
        )

    def create_recognize_stream(
        self,
        content_type: str,
        model: str | None = None,
        customization_id: str | None = None,
        token: str | None = None,
        **options: Any,
    ) -> RecognizeStream:
        """Build a RecognizeStream bound to this service's URL and credentials.

        The stream is not connected yet; open it with `async with`.
        """
        self._require(content_type=content_type)
        return RecognizeStream(
            self.url,
            content_type,
            authorization=self.authorization_header,
            token=token,
            model=model,
            customization_id=customization_id,
            learning_opt_out=self.learning_opt_out,
            **options,
        )

    # ------------------------------------------------------------------
    # Asynchronous recognition jobs
    # ------------------------------------------------------------------

    async def register_callback(self, callback_url: str, user_secret: str | None = None) -> dict:
        """Allowlist a callback URL for recognition job notifications.

        The service verifies the URL with a challenge request before
        accepting it; user_secret signs that challenge and later callbacks.
        """
        self._require(callback_url=callback_url)
        return await self._request(
            "POST",
            "/v1/register_callback",
            params={"callback_url": callback_url, "user_secret": user_secret},
        )

    async def unregister_callback(self, callback_url: str) -> Any:
        self._require(callback_url=callback_url)
        return await self._request(
            "POST", "/v1/unregister_callback", params={"callback_url": callback_url}
        )

    async def create_recognition_job(
        self,
        audio: Audio,
        content_type: str,
        callback_url: str | None = None,
        events: str | list[str] | None = None,
        user_token: str | None = None,
        results_ttl: int | None = None,
        **options: Any,
    ) -> dict:
        """Submit audio for asynchronous recognition and return the job.

        RULES:
        - audio and content_type are required
        - Query order: callback_url, events, user_token, results_ttl,
          then recognition options
        """
        self._require(audio=audio, content_type=content_type)
        params = {
            "callback_url": callback_url,
            "events": events,
            "user_token": user_token,
            "results_ttl": results_ttl,
        }
        params.update(options)
        return await self._request(
            "POST",
            "/v1/recognitions",
            params=params,
            content=_read_audio(audio),
            headers={"Content-Type": content_type},
        )

    async def get_recognition_jobs(self) -> dict:
        return await self._request("GET", "/v1/recognitions")

    async def get_recognition_job(self, id: str) -> dict:  # noqa: A002
        self._require(id=id)
        return await self._request("GET", self._path("v1", "recognitions", id))

    async def delete_recognition_job(self, id: str) -> Any:  # noqa: A002
        self._require(id=id)
        return await self._request("DELETE", self._path("v1", "recognitions", id))

    async def wait_for_recognition_job(
        self,
        id: str,  # noqa: A002
        on_status: Callable[[str], None] | None = None,
    ) -> RecognitionJob:
        """Poll a recognition job until it completes or fails.

        WHY: Without a callback URL the only way to learn that a job is
        done is to ask. Polling with backoff keeps the request count low
        for long audio.

        HOW: Exponential backoff polling. Starts at 2s intervals, grows
        by 1.5x per poll, capped at 15s. Total timeout is 60 minutes.

        RULES:
        - Returns the RecognitionJob when status is "completed"
        - Raises RecognitionJobError when status is "failed"
        - Raises RecognitionJobTimeoutError after 60 minutes
        - Calls on_status with human-readable status at each poll
        """
        interval = _POLL_INITIAL_INTERVAL_S
        start_time = time.monotonic()

        while True:
            elapsed = time.monotonic() - start_time
            if elapsed > _POLL_TIMEOUT_S:
                raise RecognitionJobTimeoutError(
                    f"Recognition job {id} timed out after "
                    f"{elapsed:.0f}s (limit: {_POLL_TIMEOUT_S}s)"
                )

            job = RecognitionJob.from_dict(await self.get_recognition_job(id))

            if on_status:
                elapsed_min = int(elapsed) // 60
                elapsed_sec = int(elapsed) % 60
                if job.status == RecognitionStatus.WAITING:
                    on_status("Recognition job waiting...")
                elif job.status == RecognitionStatus.PROCESSING:
                    on_status(
                        f"Recognizing... (elapsed: {elapsed_min}m {elapsed_sec:02d}s)"
                    )
                elif job.status == RecognitionStatus.COMPLETED:
                    on_status("Recognition complete.")
                elif job.status == RecognitionStatus.FAILED:
                    on_status("Recognition job failed.")

            if job.status == RecognitionStatus.COMPLETED:
                return job

            if job.status == RecognitionStatus.FAILED:
                raise RecognitionJobError(job)

            await asyncio.sleep(interval)
            interval = min(interval * _POLL_BACKOFF_FACTOR, _POLL_MAX_INTERVAL_S)


# ---------------------------------------------------------------------------
# Session and audio helpers (module-private)
# ---------------------------------------------------------------------------


def _cookie_header(cookie_session: str | None) -> dict[str, str]:
    if not cookie_session:
        return {}
    return {"Cookie": f"{SESSION_COOKIE}={cookie_session}"}


def _session_cookie(resp: httpx.Response) -> str | None:
    """Extract the SESSIONID value from the response's Set-Cookie headers."""
    for header in resp.headers.get_list("set-cookie"):
        cookie = SimpleCookie()
        cookie.load(header)
        if SESSION_COOKIE in cookie:
            return cookie[SESSION_COOKIE].value
    return None


def _read_audio(audio: Audio) -> bytes:
    """Load a one-shot audio body into memory."""
    if isinstance(audio, (bytes, bytearray)):
        return bytes(audio)
    if isinstance(audio, (str, Path)):
        return Path(audio).read_bytes()
    if hasattr(audio, "read"):
        return audio.read()
    raise TypeError(
        "audio must be bytes, a file path or a binary file, not {}".format(type(audio).__name__)
    )


def _stream_audio(audio: AudioChunks | Audio) -> AsyncIterator[bytes]:
    """Turn any supported audio source into an async iterator of chunks."""
    if hasattr(audio, "__aiter__"):
        return audio.__aiter__()
    if isinstance(audio, (bytes, bytearray)):
        return _iterate([bytes(audio)])
    if isinstance(audio, (str, Path)):
        return _iterate_file(Path(audio))
    if hasattr(audio, "read"):
        return _iterate(iter(lambda: audio.read(STREAM_CHUNK_BYTES), b""))
    if isinstance(audio, Iterable):
        return _iterate(audio)
    raise TypeError(
        "audio_chunks must be bytes, a file or an iterable of chunks, not {}".format(
            type(audio).__name__
        )
    )


async def _iterate(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield bytes(chunk)


async def _iterate_file(path: Path) -> AsyncIterator[bytes]:
    with open(path, "rb") as f:
        while True:
            chunk = f.read(STREAM_CHUNK_BYTES)
            if not chunk:
                break
            yield chunk
