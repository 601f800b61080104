import threading
from datetime import datetime, timedelta, timezone

_lock = threading.Lock()
_last: datetime = datetime.min.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Current UTC time, never earlier than the previous value handed out.

    Two calls inside the same clock tick get distinct values one microsecond
    apart, so rows created back to back keep their insertion order when
    sorted by timestamp.
    """
    global _last
    with _lock:
        now = datetime.now(timezone.utc)
        if now <= _last:
            now = _last + timedelta(microseconds=1)
        _last = now
        return now
