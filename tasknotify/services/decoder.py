"""Streaming decoder for concatenated JSON task records.

The body of one webhook call is a run of JSON objects separated by
whitespace (usually one per line). Records are produced lazily; only the
part of the text that has not been decoded yet is held in memory.
"""

from __future__ import annotations

import codecs
import json
from datetime import timedelta
from typing import Any, Iterable, Iterator, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from ..config import DecodePolicy, ExtractMode
from ..errors import DecodeError
from ..logging_config import get_logger
from ..models import StatusRecord, TaskDetail, TaskError

logger = get_logger(__name__)

DecodeResult = Union[StatusRecord, DecodeError]

_duration_adapter = TypeAdapter(timedelta)

# whitespace allowed between JSON values
_JSON_WS = " \t\n\r"


class RecordDecoder:
    def __init__(
        self,
        policy: DecodePolicy = DecodePolicy.ABORT,
        mode: ExtractMode = ExtractMode.TYPED,
        single_event: bool = False,
    ):
        self.policy = DecodePolicy(policy)
        self.mode = ExtractMode(mode)
        self.single_event = single_event
        self._json = json.JSONDecoder()

    def decode(self, chunks: Iterable[bytes]) -> Iterator[DecodeResult]:
        """Yield one result per JSON value found in ``chunks``.

        Under ``DecodePolicy.ABORT`` the first error is the last item yielded.
        Under ``DecodePolicy.SKIP`` a syntax error drops the text up to the
        next newline and decoding resumes there.
        """
        utf8 = codecs.getincrementaldecoder("utf-8")()
        source = iter(chunks)
        buf = ""
        offset = 0  # characters consumed before buf[0]
        ended = False
        attempted = 0  # buffer length at the last failed parse

        while True:
            stripped = buf.lstrip(_JSON_WS)
            offset += len(buf) - len(stripped)
            buf = stripped

            if not buf:
                if ended:
                    return
                try:
                    buf, ended = self._pull(source, utf8, buf)
                except DecodeError as err:
                    yield err
                    return
                continue

            if not ended and len(buf) < 2 * attempted:
                # re-parse only once the buffer has doubled, keeping the work linear
                try:
                    buf, ended = self._pull(source, utf8, buf)
                except DecodeError as err:
                    yield err
                    return
                continue

            try:
                value, end = self._json.raw_decode(buf)
            except json.JSONDecodeError as exc:
                if not ended:
                    # the value may simply be cut at a chunk boundary
                    attempted = len(buf)
                    try:
                        buf, ended = self._pull(source, utf8, buf)
                    except DecodeError as err:
                        yield err
                        return
                    continue
                yield DecodeError(f"Malformed JSON: {exc.msg}", offset + exc.pos)
                if self.policy is DecodePolicy.ABORT:
                    return
                skip = buf.find("\n", 1)
                if skip < 0:
                    return
                offset += skip + 1
                buf = buf[skip + 1:]
                attempted = 0
                continue

            attempted = 0
            start = offset
            offset += end
            buf = buf[end:]

            try:
                record = self._extract(value, start)
            except DecodeError as err:
                yield err
                if self.policy is DecodePolicy.ABORT:
                    return
                continue

            yield record
            if self.single_event:
                return

    @staticmethod
    def _pull(source, utf8, buf: str):
        """Append the next chunk to ``buf``; returns ``(buf, ended)``."""
        try:
            chunk = next(source)
        except StopIteration:
            try:
                return buf + utf8.decode(b"", final=True), True
            except UnicodeDecodeError as exc:
                raise DecodeError(f"Invalid UTF-8: {exc.reason}") from exc
        try:
            return buf + utf8.decode(chunk), False
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Invalid UTF-8: {exc.reason}") from exc

    def _extract(self, value: Any, position: int) -> StatusRecord:
        if not isinstance(value, dict):
            raise DecodeError(f"Expected a JSON object, got {type(value).__name__}", position)
        if self.mode is ExtractMode.GENERIC:
            return extract_generic(value, position)
        return extract_typed(value, position)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def extract_typed(value: dict, position: Optional[int] = None) -> StatusRecord:
    """Validate the whole object against the record schema."""
    try:
        return StatusRecord.model_validate(value)
    except ValidationError as exc:
        raise DecodeError(f"Invalid status record: {_describe(exc)}", position) from exc


def _path(value: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def extract_generic(value: dict, position: Optional[int] = None) -> StatusRecord:
    """Pick the known fields out of an arbitrary JSON object.

    Only ``status`` and ``type`` are required. Optional fields of the wrong
    type read as absent and a missing ``duration`` reads as zero.
    """
    status = _path(value, "status")
    kind = _path(value, "type")
    for name, field in (("status", status), ("type", kind)):
        if not isinstance(field, str):
            raise DecodeError(f"Missing or non-string field '{name}'", position)

    target_id = _path(value, "indexUid")
    if not isinstance(target_id, str):
        target_id = None

    error = None
    raw_error = _path(value, "error")
    if isinstance(raw_error, dict):
        message = raw_error.get("message")
        if not isinstance(message, str):
            message = str(raw_error.get("code") or "unknown error")
        error = TaskError(message=message)

    produced = _count(_path(value, "details", "indexedDocuments"))
    consumed = _count(_path(value, "details", "receivedDocuments"))
    detail = None
    if produced is not None or consumed is not None:
        detail = TaskDetail(produced_count=produced, consumed_count=consumed)

    raw_duration = _path(value, "duration")
    if raw_duration is None:
        elapsed = timedelta(0)
    else:
        try:
            elapsed = _duration_adapter.validate_python(raw_duration)
        except ValidationError as exc:
            raise DecodeError(f"Invalid duration {raw_duration!r}", position) from exc

    return StatusRecord(
        target_id=target_id,
        status=status,
        kind=kind,
        error=error,
        detail=detail,
        elapsed=elapsed,
    )


def collect_records(results: Iterable[DecodeResult], policy: DecodePolicy) -> List[StatusRecord]:
    """Drain decoder output into a list of records.

    ``DecodePolicy.ABORT`` raises the first error; ``DecodePolicy.SKIP``
    logs it and moves on.
    """
    records: List[StatusRecord] = []
    for item in results:
        if isinstance(item, DecodeError):
            if policy is DecodePolicy.ABORT:
                raise item
            logger.warning("record_skipped", error=item.message, position=item.position)
            continue
        records.append(item)
    return records
