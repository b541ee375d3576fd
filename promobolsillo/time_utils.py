import time
import uuid
from datetime import datetime
from zoneinfo import ZoneInfo

from promobolsillo.config import TIMEZONE

TZ = ZoneInfo(TIMEZONE)


def now() -> datetime:
    return datetime.now(TZ)


def now_iso() -> str:
    """2025-03-10T09:15:02-06:00: fecha en [0:10], hora HH:MM en [11:16]"""
    return now().isoformat(timespec="seconds")


def today() -> str:
    return now().strftime("%Y-%m-%d")


def parse_iso(value: str):
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def hhmm(value: str, default: str = "") -> str:
    return value[11:16] if value and len(value) >= 16 else default


def new_id(prefix: str) -> str:
    """J-1741619702123-9f3a; el sufijo evita colisiones dentro del mismo milisegundo."""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:4]}"
