from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskError(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class TaskDetail(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    produced_count: Optional[int] = Field(default=None, ge=0, alias="indexedDocuments")
    consumed_count: Optional[int] = Field(default=None, ge=0, alias="receivedDocuments")


class StatusRecord(BaseModel):
    """One task object as posted by the task queue's webhook.

    Field names follow the service; aliases follow the wire format.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target_id: Optional[str] = Field(default=None, alias="indexUid")
    status: str
    kind: str = Field(alias="type")
    error: Optional[TaskError] = None
    detail: Optional[TaskDetail] = Field(default=None, alias="details")
    elapsed: timedelta = Field(alias="duration")

    @property
    def produced_count(self) -> Optional[int]:
        return self.detail.produced_count if self.detail else None

    @property
    def consumed_count(self) -> Optional[int]:
        return self.detail.consumed_count if self.detail else None


class Notification(BaseModel):
    title: str
    body: str
    url: Optional[str] = None
    url_title: Optional[str] = None


class NotificationOut(BaseModel):
    title: str
    body: str
