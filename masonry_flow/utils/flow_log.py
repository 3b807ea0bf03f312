import os
import time

from masonry_flow.utils.settings import settings

_flow_log_last: dict[str, float] = {}

# Kept even when minimal tracing is on.
_ALWAYS_SHOWN_LEVELS = {"INFO", "WARNING", "ERROR"}


def _minimal_trace() -> bool:
    # Development runs trace everything without touching the saved setting.
    if os.getenv("MASONRY_FLOW_ENVIRONMENT") == "development":
        return False
    try:
        return bool(settings.value("minimal_trace_logs", True, type=bool))
    except Exception:
        return True


def log_flow(component: str, message: str, *, level: str = "DEBUG",
             throttle_key: str | None = None, every_s: float | None = None):
    """Timestamped, optionally throttled flow logging for masonry diagnostics."""
    if _minimal_trace() and level not in _ALWAYS_SHOWN_LEVELS:
        return

    now = time.time()
    if throttle_key and every_s is not None:
        last = _flow_log_last.get(throttle_key, 0.0)
        if (now - last) < every_s:
            return
        _flow_log_last[throttle_key] = now
    ts = time.strftime("%H:%M:%S", time.localtime(now)) + f".{int((now % 1) * 1000):03d}"
    print(f"[{ts}][TRACE][{component}][{level}] {message}")
