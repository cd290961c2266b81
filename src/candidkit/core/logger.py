import logging
import sys
import contextvars
from typing import Optional

# Context variable carrying the current trace id across a build/convert call chain
_TRACE_ID: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="-")


class _TraceFilter(logging.Filter):
    """Logging filter that injects the trace_id from contextvars into the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            record.trace_id = _TRACE_ID.get()
        except LookupError:
            record.trace_id = "-"
        return True


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | trace=%(trace_id)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_root_logger(level: str = "INFO") -> None:
    """
    Configure the candidkit logger namespace.

    Installs a single stdout handler on the ``candidkit`` logger and sets its
    level. Other libraries and the root logger are left untouched since
    candidkit is embedded in host applications.

    Args:
        level: Log level for candidkit logs (DEBUG, INFO, WARNING, ERROR).

    Safe to call multiple times; it will not duplicate handlers (idempotent).
    """
    package_logger = logging.getLogger("candidkit")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in package_logger.handlers:
        if isinstance(h, logging.StreamHandler) and any(isinstance(f, _TraceFilter) for f in h.filters):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    handler.addFilter(_TraceFilter())
    package_logger.addHandler(handler)
    package_logger.propagate = False


def get_logger(name: str = "candidkit") -> logging.Logger:
    """
    Get a module-specific logger under the candidkit namespace.

    Handlers are not configured here; call ``configure_root_logger`` once from
    the host application to get formatted output.
    """
    if name != "candidkit" and not name.startswith("candidkit."):
        name = f"candidkit.{name}"
    return logging.getLogger(name)


def push_trace_id(trace_id: Optional[str]) -> Optional[contextvars.Token]:
    """Set the current trace id in context and return a token for later reset."""
    if not trace_id:
        return None
    return _TRACE_ID.set(trace_id)


def reset_trace_id(token: Optional[contextvars.Token]) -> None:
    """Reset the trace id context using the provided token (if any)."""
    if token is None:
        return
    _TRACE_ID.reset(token)


def current_trace_id() -> str:
    return _TRACE_ID.get()
