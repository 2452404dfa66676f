"""Pick a message template from the shape of a consolidated record and render it."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Tuple

from ..models import Notification, StatusRecord
from .durations import DisplayDuration, format_throughput, normalize, per_second


class Template(str, Enum):
    FAILURE_WITH_PROGRESS = "failure_with_progress"
    SUCCESS_WITH_COUNT = "success_with_count"
    TASK_ONLY = "task_only"
    TARGET_ONLY = "target_only"


class Presence(NamedTuple):
    target: bool
    error: bool
    consumed: bool
    produced: bool

    @classmethod
    def of(cls, record: StatusRecord) -> "Presence":
        return cls(
            target=record.target_id is not None,
            error=record.error is not None,
            consumed=record.consumed_count is not None,
            produced=record.produced_count is not None,
        )


ANY = None

# (target, error, consumed, produced) -> template; first match wins.
# A record with a target that matches no row renders as target-only.
RULES: Tuple[Tuple[Tuple[Optional[bool], ...], Template], ...] = (
    ((True, True, True, ANY), Template.FAILURE_WITH_PROGRESS),
    ((True, False, ANY, True), Template.SUCCESS_WITH_COUNT),
    ((False, ANY, ANY, ANY), Template.TASK_ONLY),
)


def select_template(presence: Presence) -> Template:
    for pattern, template in RULES:
        if all(want is ANY or want == have for want, have in zip(pattern, presence)):
            return template
    return Template.TARGET_ONLY


def _label(kind: str) -> str:
    return kind[:1].upper() + kind[1:]


def _failure_with_progress(record: StatusRecord, elapsed: DisplayDuration) -> Notification:
    return Notification(
        title=f"Index {record.target_id} {record.status}",
        body=(
            f"{record.kind} {record.status} indexing {record.consumed_count} documents "
            f"in {elapsed.text}: {record.error.message}"
        ),
    )


def _success_with_count(record: StatusRecord, elapsed: DisplayDuration) -> Notification:
    body = (
        f"{_label(record.kind)} {record.status}: {record.produced_count} documents "
        f"indexed in {elapsed.text}"
    )
    rate = per_second(record.produced_count, elapsed.milliseconds)
    if rate is not None:
        body += f" ({format_throughput(rate)} documents/s)"
    return Notification(title=f"Index {record.target_id} {record.status}", body=body)


def _task_only(record: StatusRecord, elapsed: DisplayDuration) -> Notification:
    return Notification(
        title=f"{_label(record.kind)} {record.status}",
        body=f"{_label(record.kind)} {record.status} in {elapsed.text}",
    )


def _target_only(record: StatusRecord, elapsed: DisplayDuration) -> Notification:
    return Notification(
        title=f"Index {record.target_id} {record.status}",
        body=f"{_label(record.kind)} on index {record.target_id} {record.status} in {elapsed.text}",
    )


RENDERERS: Dict[Template, Callable[[StatusRecord, DisplayDuration], Notification]] = {
    Template.FAILURE_WITH_PROGRESS: _failure_with_progress,
    Template.SUCCESS_WITH_COUNT: _success_with_count,
    Template.TASK_ONLY: _task_only,
    Template.TARGET_ONLY: _target_only,
}


def classify(record: StatusRecord) -> Notification:
    template = select_template(Presence.of(record))
    return RENDERERS[template](record, normalize(record.elapsed))
