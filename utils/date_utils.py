"""
Date and time utilities for the quotes API.
"""

from datetime import datetime, timezone


def get_utc_now() -> datetime:
    """获取当前UTC时间"""
    return datetime.now(timezone.utc)


def get_iso_timestamp(dt: datetime = None) -> str:
    """ISO 8601 时间戳，精确到毫秒，以Z结尾"""
    if dt is None:
        dt = get_utc_now()
    return dt.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
