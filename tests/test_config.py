"""Tests for config: service URLs, credentials and audio content types."""

from __future__ import annotations

from pathlib import Path

import pytest

from watson_client.config import (
    AUDIO_CONTENT_TYPES,
    DEFAULT_URLS,
    DISCOVERY_PREFIX,
    content_type_for,
    load_credentials,
    service_url,
)


class TestServiceUrl:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("DISCOVERY_URL", raising=False)
        assert service_url(DISCOVERY_PREFIX) == DEFAULT_URLS[DISCOVERY_PREFIX]

    def test_override(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_URL", "https://gateway-fra.watsonplatform.net/discovery/api")
        assert service_url(DISCOVERY_PREFIX) == "https://gateway-fra.watsonplatform.net/discovery/api"

    def test_blank_override_uses_default(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_URL", "  ")
        assert service_url(DISCOVERY_PREFIX) == DEFAULT_URLS[DISCOVERY_PREFIX]


class TestLoadCredentials:
    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_USERNAME", " user ")
        monkeypatch.setenv("DISCOVERY_PASSWORD", "secret")
        assert load_credentials(DISCOVERY_PREFIX) == ("user", "secret")

    def test_missing_password(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_USERNAME", "user")
        monkeypatch.delenv("DISCOVERY_PASSWORD", raising=False)
        with pytest.raises(ValueError, match="DISCOVERY_PASSWORD"):
            load_credentials(DISCOVERY_PREFIX)


class TestContentTypeFor:
    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("speech.wav", "audio/wav"),
            ("SPEECH.FLAC", "audio/flac"),
            ("clip.ogg", "audio/ogg;codecs=opus"),
            ("raw.l16", "audio/l16;rate=16000"),
        ],
    )
    def test_known_extensions(self, filename, expected):
        assert content_type_for(filename) == expected

    def test_accepts_path(self):
        assert content_type_for(Path("/tmp/a.mp3")) == "audio/mp3"

    def test_unsupported_extension(self):
        with pytest.raises(ValueError, match="Unsupported audio file type '.txt'"):
            content_type_for("notes.txt")

    def test_extensions_are_lowercase(self):
        assert all(ext == ext.lower() and ext.startswith(".") for ext in AUDIO_CONTENT_TYPES)
