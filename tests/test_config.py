import asyncio
import gzip
from pathlib import Path
import sys

import orjson
import pytest
from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tasknotify.config import DecodePolicy, ExtractMode, Settings
from tasknotify.errors import BodyTooLargeError, DecodeError
from tasknotify.logging_config import _orjson_dumps
from tasknotify.transport import read_body


def test_defaults():
    settings = Settings()

    assert settings.listen_host == "0.0.0.0"
    assert settings.listen_port == 3000
    assert settings.decode_policy is DecodePolicy.ABORT
    assert settings.extract_mode is ExtractMode.TYPED


def test_from_env(monkeypatch):
    monkeypatch.setenv("PUSHOVER_USER", "uk")
    monkeypatch.setenv("PUSHOVER_TOKEN", "tk")
    monkeypatch.setenv("LISTEN_PORT", "8080")
    monkeypatch.setenv("DECODE_POLICY", "SKIP")
    monkeypatch.setenv("EXTRACT_MODE", "generic")
    monkeypatch.setenv("SINGLE_EVENT", "yes")
    monkeypatch.setenv("WEBHOOK_TOKEN", "")

    settings = Settings.from_env()

    assert (settings.pushover_user, settings.pushover_token) == ("uk", "tk")
    assert settings.listen_port == 8080
    assert settings.decode_policy is DecodePolicy.SKIP
    assert settings.extract_mode is ExtractMode.GENERIC
    assert settings.single_event is True
    assert settings.reject_mixed_batches is False
    assert settings.webhook_token is None


def test_settings_are_read_only():
    settings = Settings()

    with pytest.raises(ValidationError):
        settings.pushover_user = "someone"


def test_unknown_policy_is_rejected():
    with pytest.raises(ValidationError):
        Settings(decode_policy="retry")


def test_json_log_serializer():
    assert orjson.loads(_orjson_dumps({"event": "batch_empty", "n": 1})) == {"event": "batch_empty", "n": 1}


async def _chunks(*parts):
    for part in parts:
        yield part


def test_read_body_passes_plain_chunks_through():
    out = asyncio.run(read_body(_chunks(b"ab", b"", b"cd"), gzip_encoded=False, max_bytes=10))

    assert b"".join(out) == b"abcd"


def test_read_body_limits_received_bytes():
    with pytest.raises(BodyTooLargeError):
        asyncio.run(read_body(_chunks(b"abc", b"def"), gzip_encoded=False, max_bytes=5))


def test_read_body_inflates_every_gzip_member():
    payload = gzip.compress(b"first\n") + gzip.compress(b"second\n")
    pieces = [payload[i:i + 5] for i in range(0, len(payload), 5)]

    out = asyncio.run(read_body(_chunks(*pieces), gzip_encoded=True, max_bytes=1024))

    assert b"".join(out) == b"first\nsecond\n"


def test_read_body_member_ending_on_chunk_boundary():
    first = gzip.compress(b"first\n")

    out = asyncio.run(read_body(_chunks(first, gzip.compress(b"second\n")), gzip_encoded=True, max_bytes=1024))

    assert b"".join(out) == b"first\nsecond\n"


def test_read_body_limit_spans_gzip_members():
    payload = gzip.compress(b"x" * 600) + gzip.compress(b"y" * 600)

    with pytest.raises(BodyTooLargeError):
        asyncio.run(read_body(_chunks(payload), gzip_encoded=True, max_bytes=1000))


@pytest.mark.parametrize("trailer", [b"garbage", b"x"])
def test_read_body_rejects_bytes_after_last_member(trailer):
    with pytest.raises(DecodeError):
        asyncio.run(read_body(_chunks(gzip.compress(b"first\n") + trailer), gzip_encoded=True, max_bytes=1024))
