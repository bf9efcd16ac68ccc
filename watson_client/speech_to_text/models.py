"""Speech-to-Text result and job dataclasses.

WHY: Most bindings pass JSON straight through, but the streaming recognizer
and the job poller need to make decisions on what comes back (is this
result final? has the job finished?). Typed dataclasses make those
decisions explicit.

HOW: Each dataclass maps one JSON object from the service and keeps the
raw payload alongside. from_dict() factories handle the parsing.

RULES:
- RecognizeEvent.transcript only joins final results
- RecognitionJob.status is one of the RecognitionStatus values
- Unknown fields are kept in raw, never dropped silently
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class RecognitionStatus(str, enum.Enum):
    """Lifecycle of an asynchronous recognition job on the service."""

    WAITING = "waiting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RecognitionJob:
    """An asynchronous recognition job as returned by /v1/recognitions/{id}.

    RULES:
    - results is only populated once the job is completed (and when the
      job was created without a callback, or with results events)
    - user_token echoes the token given at creation
    """

    id: str
    status: str
    created: Optional[str] = None
    updated: Optional[str] = None
    url: Optional[str] = None
    user_token: Optional[str] = None
    results: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RecognitionJob:
        return cls(
            id=data["id"],
            status=data["status"],
            created=data.get("created"),
            updated=data.get("updated"),
            url=data.get("url"),
            user_token=data.get("user_token"),
            results=data.get("results") or [],
            warnings=data.get("warnings") or [],
        )

    @property
    def is_finished(self) -> bool:
        return self.status in (RecognitionStatus.COMPLETED, RecognitionStatus.FAILED)

    def transcripts(self) -> List[str]:
        """Top-alternative transcript of every final result, in order."""
        texts: List[str] = []
        for batch in self.results:
            texts.extend(_final_transcripts(batch.get("results") or []))
        return texts


@dataclass
class RecognizeEvent:
    """One results or speaker_labels message from the recognize websocket.

    WHY: The websocket interleaves interim results, final results and
    speaker labels. Callers mostly want "the final text so far", so the
    event exposes that directly while keeping everything else available.

    RULES:
    - result_index is the index of the first result in results
    - is_final is True when any result in the message is final
    - transcript joins the top alternative of each final result
    """

    result_index: int = 0
    results: List[Dict[str, Any]] = field(default_factory=list)
    speaker_labels: List[Dict[str, Any]] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RecognizeEvent:
        return cls(
            result_index=data.get("result_index", 0),
            results=data.get("results") or [],
            speaker_labels=data.get("speaker_labels") or [],
            raw=data,
        )

    @property
    def is_final(self) -> bool:
        return any(result.get("final") for result in self.results)

    def final_transcripts(self) -> List[str]:
        """Top-alternative transcript of each final result, in order."""
        return _final_transcripts(self.results)

    @property
    def transcript(self) -> str:
        return "".join(self.final_transcripts())


def _final_transcripts(results: List[Dict[str, Any]]) -> List[str]:
    texts = []
    for result in results:
        if not result.get("final"):
            continue
        alternatives = result.get("alternatives") or []
        if alternatives:
            texts.append(alternatives[0].get("transcript", ""))
    return texts
