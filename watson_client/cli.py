"""Command-line interface for Watson Speech-to-Text.

WHY: Trying the service, transcribing a file, or checking on recognition
jobs should not require writing a script. The CLI wires the
SpeechToTextV1 bindings behind a few subcommands.

HOW: Uses argparse subcommands and runs each one via asyncio.run().
Credentials come from the environment (.env) through config. Results go
to stdout; status messages go to stderr so the output can be piped.

Commands:
  models                     list available recognition models (JSON)
  recognize FILE [--stream]  transcribe a file in one request, or over the
                             websocket with --stream
  job FILE [--wait]          create an asynchronous recognition job
  jobs                       list recognition jobs (JSON)

RULES:
- Audio content type is derived from the file extension unless
  --content-type is given
- Any error (API, connection, job, configuration) prints "Error: ..." and
  exits with status 1
- --verbose switches logging to DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional

from watson_client.config import STREAM_CHUNK_BYTES, content_type_for
from watson_client.speech_to_text import RecognitionJob, RecognizeEvent, SpeechToTextV1


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _read_chunks(path: Path, chunk_size: int = STREAM_CHUNK_BYTES) -> Iterator[bytes]:
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            yield chunk


def _resolve_audio(args: argparse.Namespace) -> tuple:
    """Validate the input file and work out its content type.

    RULES:
    - Missing files and unsupported extensions exit with status 1
    - --content-type wins over the extension lookup
    """
    audio_path = Path(args.audio_file).resolve()
    if not audio_path.is_file():
        _status("Error: File not found: {}".format(audio_path))
        sys.exit(1)

    content_type = args.content_type
    if not content_type:
        try:
            content_type = content_type_for(audio_path)
        except ValueError as e:
            _status("Error: {}".format(e))
            sys.exit(1)
    return audio_path, content_type


def _recognize_options(args: argparse.Namespace) -> dict:
    keywords = [k.strip() for k in args.keywords.split(",")] if args.keywords else None
    return {
        "model": args.model,
        "keywords": keywords,
        "keywords_threshold": args.keywords_threshold if keywords else None,
        "timestamps": args.timestamps or None,
        "speaker_labels": args.speaker_labels or None,
    }


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _cmd_models(args: argparse.Namespace) -> None:
    async with SpeechToTextV1() as stt:
        _print_json(await stt.get_models())


async def _cmd_jobs(args: argparse.Namespace) -> None:
    async with SpeechToTextV1() as stt:
        _print_json(await stt.get_recognition_jobs())


async def _cmd_recognize(args: argparse.Namespace) -> None:
    audio_path, content_type = _resolve_audio(args)
    options = _recognize_options(args)

    if args.stream:
        stt = SpeechToTextV1()
        model = options.pop("model")
        options["interim_results"] = False
        _status("Streaming {} ({})...".format(audio_path.name, content_type))
        async with stt.create_recognize_stream(content_type, model=model, **options) as stream:
            async for text in stream.transcripts(_read_chunks(audio_path)):
                print(text.strip(), flush=True)
        return

    _status("Recognizing {} ({})...".format(audio_path.name, content_type))
    async with SpeechToTextV1() as stt:
        response = await stt.recognize(audio_path, content_type, continuous=True, **options)
    for text in RecognizeEvent.from_dict(response).final_transcripts():
        print(text.strip())


async def _cmd_job(args: argparse.Namespace) -> None:
    audio_path, content_type = _resolve_audio(args)
    options = _recognize_options(args)

    async with SpeechToTextV1() as stt:
        _status("Creating recognition job for {}...".format(audio_path.name))
        created = await stt.create_recognition_job(
            audio_path,
            content_type,
            callback_url=args.callback_url,
            user_token=args.user_token,
            **options,
        )
        _status("  Job {} is {}".format(created["id"], created["status"]))

        if not args.wait:
            _print_json(created)
            return

        job: RecognitionJob = await stt.wait_for_recognition_job(created["id"], on_status=_status)
        for text in job.transcripts():
            print(text.strip())


_COMMANDS = {
    "models": _cmd_models,
    "jobs": _cmd_jobs,
    "recognize": _cmd_recognize,
    "job": _cmd_job,
}


async def _run(args: argparse.Namespace) -> None:
    try:
        await _COMMANDS[args.command](args)
    except ValueError as e:
        # Config errors (missing credentials, bad parameters)
        _status("Error: {}".format(e))
        sys.exit(1)
    except Exception as e:
        # API, stream, job, timeout and connection errors
        _status("Error: {}".format(e))
        sys.exit(1)


def _add_audio_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("audio_file", help="Path to the audio file to transcribe.")
    parser.add_argument(
        "--content-type",
        default=None,
        help="Audio content type (default: derived from the file extension).",
    )
    parser.add_argument("--model", default=None, help="Recognition model, e.g. en-US_BroadbandModel.")
    parser.add_argument(
        "--keywords",
        default=None,
        help="Comma-separated keywords to spot in the audio.",
    )
    parser.add_argument(
        "--keywords-threshold",
        type=float,
        default=0.5,
        help="Minimum keyword confidence (default: %(default)s).",
    )
    parser.add_argument("--timestamps", action="store_true", help="Request word timestamps.")
    parser.add_argument("--speaker-labels", action="store_true", help="Request speaker labels.")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without calling the service.
    """
    parser = argparse.ArgumentParser(
        prog="watson_client",
        description="Transcribe audio with IBM Watson Speech-to-Text.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("models", help="List recognition models.")
    subparsers.add_parser("jobs", help="List asynchronous recognition jobs.")

    recognize = subparsers.add_parser("recognize", help="Transcribe an audio file.")
    _add_audio_arguments(recognize)
    recognize.add_argument(
        "--stream",
        action="store_true",
        help="Stream the file over the websocket interface.",
    )

    job = subparsers.add_parser("job", help="Create an asynchronous recognition job.")
    _add_audio_arguments(job)
    job.add_argument("--callback-url", default=None, help="Registered callback URL to notify.")
    job.add_argument("--user-token", default=None, help="Token echoed back in job notifications.")
    job.add_argument(
        "--wait",
        action="store_true",
        help="Poll until the job finishes and print its transcripts.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m watson_client``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
