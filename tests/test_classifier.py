from datetime import timedelta
from itertools import product
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tasknotify.models import StatusRecord, TaskDetail, TaskError
from tasknotify.services.classifier import RENDERERS, Presence, Template, classify, select_template
from tasknotify.services.durations import DisplayDuration

T, F = True, False

EXPECTED = {
    (T, T, T, T): Template.FAILURE_WITH_PROGRESS,
    (T, T, T, F): Template.FAILURE_WITH_PROGRESS,
    (T, T, F, T): Template.TARGET_ONLY,
    (T, T, F, F): Template.TARGET_ONLY,
    (T, F, T, T): Template.SUCCESS_WITH_COUNT,
    (T, F, T, F): Template.TARGET_ONLY,
    (T, F, F, T): Template.SUCCESS_WITH_COUNT,
    (T, F, F, F): Template.TARGET_ONLY,
    **{(F, e, c, p): Template.TASK_ONLY for e, c, p in product((T, F), repeat=3)},
}


def record_for(target, error, consumed, produced, seconds=10, kind="indexing", status="succeeded"):
    detail = None
    if consumed or produced:
        detail = TaskDetail(
            consumed_count=1000 if consumed else None,
            produced_count=100 if produced else None,
        )
    return StatusRecord(
        target_id="movies" if target else None,
        status=status,
        kind=kind,
        error=TaskError(message="disk full") if error else None,
        detail=detail,
        elapsed=timedelta(seconds=seconds),
    )


def test_table_covers_all_sixteen_combinations():
    assert len(EXPECTED) == 16


@pytest.mark.parametrize("flags", sorted(EXPECTED))
def test_select_template(flags):
    assert select_template(Presence(*flags)) is EXPECTED[flags]


@pytest.mark.parametrize("flags", sorted(EXPECTED))
def test_presence_of_record(flags):
    assert Presence.of(record_for(*flags)) == Presence(*flags)


@pytest.mark.parametrize("flags", sorted(EXPECTED))
def test_every_combination_renders(flags):
    notification = classify(record_for(*flags))

    assert notification.title
    assert notification.body


def test_failure_with_progress_text():
    record = record_for(T, T, T, F, seconds=180, status="failed")

    notification = classify(record)

    assert notification.title == "Index movies failed"
    assert notification.body == "indexing failed indexing 1000 documents in 3m: disk full"


def test_success_with_count_includes_throughput():
    record = record_for(T, F, F, T, seconds=40, kind="documentAdditionOrUpdate")

    notification = classify(record)

    assert notification.title == "Index movies succeeded"
    assert notification.body == (
        "DocumentAdditionOrUpdate succeeded: 100 documents indexed in 40s (2.50 documents/s)"
    )


def test_success_with_zero_duration_omits_throughput():
    notification = classify(record_for(T, F, F, T, seconds=0))

    assert notification.body == "Indexing succeeded: 100 documents indexed in 0s"
    assert "/s" not in notification.body


def test_task_only_ignores_counts():
    notification = classify(record_for(F, F, F, T, kind="import"))

    assert notification.title == "Import succeeded"
    assert notification.body == "Import succeeded in 10s"
    assert "100" not in notification.body


def test_target_only_has_no_counts_or_error():
    notification = classify(record_for(T, T, F, T, status="failed"))

    assert notification.title == "Index movies failed"
    assert notification.body == "Indexing on index movies failed in 10s"


def test_elapsed_is_rounded_for_display():
    record = record_for(F, F, F, F).model_copy(update={"elapsed": timedelta(seconds=221, milliseconds=500)})

    assert classify(record).body == "Indexing succeeded in 3m42s"


def test_success_throughput_uses_display_milliseconds():
    render = RENDERERS[Template.SUCCESS_WITH_COUNT]

    notification = render(record_for(T, F, F, T, seconds=0), DisplayDuration(text="4s", milliseconds=4000))

    assert notification.body.endswith("in 4s (25.00 documents/s)")


def test_record_with_target_and_no_matching_row_is_target_only():
    assert select_template(Presence(T, T, F, T)) is Template.TARGET_ONLY
    assert select_template(Presence(T, F, F, F)) is Template.TARGET_ONLY
