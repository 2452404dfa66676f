"""Folding a batch of status records into one consolidated record.

Combine rules, accumulator on the left:

* ``status``, ``kind``, ``elapsed``: always the accumulator's, so the first
  record of the batch decides them.
* ``target_id``, ``error``: the accumulator's when present, else the
  incoming record's.
* ``detail.produced_count``, ``detail.consumed_count``: summed when both
  sides have a value, otherwise whichever side has one.

A batch is expected to describe a single task. Batches mixing tasks are
not supported; ``check_single_task`` rejects them when asked to.
"""

from typing import Iterable, List, Optional, Sequence

from ..errors import EmptyBatchError, MixedBatchError
from ..models import StatusRecord, TaskDetail


def _add_counts(left: Optional[int], right: Optional[int]) -> Optional[int]:
    if left is None:
        return right
    if right is None:
        return left
    return left + right


def _merge_detail(left: Optional[TaskDetail], right: Optional[TaskDetail]) -> Optional[TaskDetail]:
    if left is None and right is None:
        return None
    produced = _add_counts(
        left.produced_count if left else None,
        right.produced_count if right else None,
    )
    consumed = _add_counts(
        left.consumed_count if left else None,
        right.consumed_count if right else None,
    )
    return TaskDetail(produced_count=produced, consumed_count=consumed)


def merge(acc: StatusRecord, record: StatusRecord) -> StatusRecord:
    return StatusRecord(
        target_id=acc.target_id if acc.target_id is not None else record.target_id,
        status=acc.status,
        kind=acc.kind,
        error=acc.error if acc.error is not None else record.error,
        detail=_merge_detail(acc.detail, record.detail),
        elapsed=acc.elapsed,
    )


def consolidate(records: Iterable[StatusRecord]) -> StatusRecord:
    it = iter(records)
    try:
        acc = next(it)
    except StopIteration:
        raise EmptyBatchError("Batch contains no status records") from None
    for record in it:
        acc = merge(acc, record)
    return acc


def mixed_task_reason(records: Sequence[StatusRecord]) -> Optional[str]:
    """Explain why ``records`` span more than one task, or return None."""
    if not records:
        return None
    kind = records[0].kind
    target: Optional[str] = None
    for i, record in enumerate(records):
        if record.kind != kind:
            return f"record {i} has type {record.kind!r}, batch started with {kind!r}"
        if record.target_id is None:
            continue
        if target is None:
            target = record.target_id
        elif record.target_id != target:
            return f"record {i} targets {record.target_id!r}, batch targets {target!r}"
    return None


def check_single_task(records: List[StatusRecord]) -> None:
    reason = mixed_task_reason(records)
    if reason is not None:
        raise MixedBatchError(f"Mixed batch: {reason}")
