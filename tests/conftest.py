from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tasknotify.config import Settings
from tasknotify.errors import NotifyError


class RecordingNotifier:
    def __init__(self, fail_with: str | None = None):
        self.sent = []
        self.fail_with = fail_with

    async def notify(self, notification):
        if self.fail_with:
            raise NotifyError(self.fail_with, status_code=500)
        self.sent.append(notification)


@pytest.fixture
def settings():
    return Settings(pushover_user="user-key", pushover_token="app-token")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(fail_with="pushover unavailable")
