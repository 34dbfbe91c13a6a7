"""Terminal error formatting for unhandled render failures.

Gives the development terminal readable diagnostics instead of a raw
``logger.exception()`` dump.

For kida template errors:
    Uses ``exc.format_compact()`` and adds the route that failed.

For everything else:
    Traceback verbosity is chosen by the ``CANOPY_TRACEBACK`` environment
    variable: ``compact`` (default, application frames only), ``full``,
    or ``minimal`` (one line).
"""

from __future__ import annotations

import logging
import os
import sysconfig
import traceback as _traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from canopy.http.request import Request

logger = logging.getLogger("canopy.server")

_BANNER_WIDTH = 65
_STDLIB_PREFIX = sysconfig.get_paths()["stdlib"]


def _is_kida_error(exc: BaseException) -> bool:
    """Check if an exception originates from the kida template engine."""
    module = type(exc).__module__ or ""
    return module.split(".")[0] == "kida"


def _is_app_frame(filename: str) -> bool:
    """True if the frame is application code (not stdlib or site-packages)."""
    if "site-packages" in filename or filename.startswith("<"):
        return False
    return not filename.startswith(_STDLIB_PREFIX)


def format_template_error(exc: BaseException, request: Request | None = None) -> str:
    """Format a kida template error inside a banner, with the failing route."""
    parts = [f"-- Template Error {'-' * (_BANNER_WIDTH - 18)}"]
    format_compact = getattr(exc, "format_compact", None)
    parts.append(format_compact() if callable(format_compact) else str(exc))
    if request is not None:
        parts.append("")
        parts.append(f"  Route: {request.method} {request.path}")
    parts.append("-" * _BANNER_WIDTH)
    return "\n".join(parts)


def format_compact_traceback(exc: BaseException) -> str:
    """Error summary plus at most five application frames.

    Falls back to the last three frames when none belong to the app.
    """
    frames = _traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    display_frames = app_frames or frames[-3:]

    parts = [f"{type(exc).__name__}: {exc}"]
    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-5:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")
    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary with the innermost location."""
    frames = _traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    location = f" at {frames[-1].filename}:{frames[-1].lineno}" if frames else ""
    return f"{type(exc).__name__}{location}: {exc}"


def log_error(exc: BaseException, request: Request | None = None) -> None:
    """Log an unhandled error with the configured verbosity."""
    prefix = f"500 {request.method} {request.path}" if request is not None else "Server error"

    if _is_kida_error(exc):
        logger.error("%s\n%s", prefix, format_template_error(exc, request))
        return

    style = os.environ.get("CANOPY_TRACEBACK", "compact").lower()
    if style == "full":
        logger.error(prefix, exc_info=exc)
    elif style == "minimal":
        logger.error("%s: %s", prefix, format_minimal_error(exc))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(exc))
