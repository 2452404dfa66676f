from fastapi import APIRouter, Depends, HTTPException, Request, Response

from ..auth import require_webhook_token
from ..errors import BodyTooLargeError, DecodeError, NotifyError
from ..logging_config import get_logger
from ..models import Notification, NotificationOut
from ..transport import read_body

logger = get_logger(__name__)

router = APIRouter()

TEST_NOTIFICATION = Notification(
    title="Test notification",
    body="The task notifier is running and can reach Pushover.",
    url="https://pushover.net/",
    url_title="Pushover",
)


@router.post("/", response_model=NotificationOut, responses={204: {"description": "Empty batch"}})
async def receive_tasks(request: Request, _=Depends(require_webhook_token)):
    settings = request.app.state.settings
    processor = request.app.state.processor
    gzip_encoded = "gzip" in request.headers.get("content-encoding", "").lower()

    try:
        chunks = await read_body(request.stream(), gzip_encoded=gzip_encoded, max_bytes=settings.max_body_bytes)
    except BodyTooLargeError as exc:
        logger.warning("batch_body_too_large", limit=exc.limit)
        raise HTTPException(status_code=413, detail=str(exc))
    except DecodeError as exc:
        logger.warning("batch_decode_failed", error=exc.message)
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        notification = await processor.process(chunks)
    except DecodeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NotifyError as exc:
        raise HTTPException(status_code=502, detail=exc.message)

    if notification is None:
        return Response(status_code=204)
    return NotificationOut(title=notification.title, body=notification.body)


@router.get("/", response_model=NotificationOut)
async def send_test_notification(request: Request, _=Depends(require_webhook_token)):
    try:
        await request.app.state.processor.notifier.notify(TEST_NOTIFICATION)
    except NotifyError as exc:
        raise HTTPException(status_code=502, detail=exc.message)
    return NotificationOut(title=TEST_NOTIFICATION.title, body=TEST_NOTIFICATION.body)


@router.get("/health")
async def health():
    return {"status": "ok"}
