from typing import Iterable, Optional

from fastapi.concurrency import run_in_threadpool

from ..config import Settings
from ..errors import DecodeError, EmptyBatchError, NotifyError
from ..logging_config import get_logger
from ..models import Notification, StatusRecord
from .classifier import classify
from .decoder import RecordDecoder, collect_records
from .merger import check_single_task, consolidate, mixed_task_reason
from .notifier import Notifier

logger = get_logger(__name__)


class BatchProcessor:
    """Turns one decompressed webhook body into at most one notification.

    Holds no per-batch state, so one instance serves concurrent requests.
    """

    def __init__(self, settings: Settings, notifier: Notifier):
        self.settings = settings
        self.notifier = notifier
        self.decoder = RecordDecoder(
            policy=settings.decode_policy,
            mode=settings.extract_mode,
            single_event=settings.single_event,
        )

    def consolidate_batch(self, chunks: Iterable[bytes]) -> StatusRecord:
        records = collect_records(self.decoder.decode(chunks), self.settings.decode_policy)
        if self.settings.reject_mixed_batches:
            check_single_task(records)
        else:
            reason = mixed_task_reason(records)
            if reason:
                logger.warning("mixed_batch_merged", reason=reason, records=len(records))
        return consolidate(records)

    async def process(self, chunks: Iterable[bytes]) -> Optional[Notification]:
        try:
            record = await run_in_threadpool(self.consolidate_batch, chunks)
        except EmptyBatchError:
            logger.info("batch_empty")
            return None
        except DecodeError as exc:
            logger.warning("batch_decode_failed", error=exc.message, position=exc.position)
            raise

        notification = classify(record)
        logger.info(
            "batch_consolidated",
            target_id=record.target_id,
            status=record.status,
            kind=record.kind,
            title=notification.title,
        )

        try:
            await self.notifier.notify(notification)
        except NotifyError as exc:
            logger.error("notification_failed", error=exc.message, status_code=exc.status_code)
            raise
        return notification
