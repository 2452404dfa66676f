from enum import Enum
from functools import lru_cache
import os

from pydantic import BaseModel, ConfigDict


class DecodePolicy(str, Enum):
    ABORT = "abort"  # stop at the first malformed record
    SKIP = "skip"    # report the record and keep going


class ExtractMode(str, Enum):
    TYPED = "typed"
    GENERIC = "generic"


def _env_flag(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    pushover_user: str = ""
    pushover_token: str = ""
    pushover_api_url: str = "https://api.pushover.net/1/messages.json"
    webhook_token: str | None = None
    listen_host: str = "0.0.0.0"
    listen_port: int = 3000
    max_body_bytes: int = 10 * 1024 * 1024
    decode_policy: DecodePolicy = DecodePolicy.ABORT
    extract_mode: ExtractMode = ExtractMode.TYPED
    single_event: bool = False
    reject_mixed_batches: bool = False
    notify_timeout_seconds: float = 10.0
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            pushover_user=os.getenv("PUSHOVER_USER", ""),
            pushover_token=os.getenv("PUSHOVER_TOKEN", ""),
            pushover_api_url=os.getenv("PUSHOVER_API_URL", "https://api.pushover.net/1/messages.json"),
            webhook_token=os.getenv("WEBHOOK_TOKEN") or None,
            listen_host=os.getenv("LISTEN_HOST", "0.0.0.0"),
            listen_port=int(os.getenv("LISTEN_PORT", 3000)),
            max_body_bytes=int(os.getenv("MAX_BODY_BYTES", 10 * 1024 * 1024)),
            decode_policy=os.getenv("DECODE_POLICY", "abort").lower(),
            extract_mode=os.getenv("EXTRACT_MODE", "typed").lower(),
            single_event=_env_flag("SINGLE_EVENT"),
            reject_mixed_batches=_env_flag("REJECT_MIXED_BATCHES"),
            notify_timeout_seconds=float(os.getenv("NOTIFY_TIMEOUT_SECONDS", 10)),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "console"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read the environment once; the result is frozen for the process lifetime."""
    return Settings.from_env()
