"""Report-delay helper for chat interviews."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from session_reports import InterviewReport

from .sessions import SessionController


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def maybe_generate_report(controller: SessionController, now: Optional[datetime] = None) -> Optional[InterviewReport]:
    """Return the session report, synthesising it once the post-completion delay has passed.

    ``now`` defaults to the session's own clock.
    """

    if controller.report is not None:
        return controller.report
    interview = controller.interview
    if interview is None:
        return None
    if not interview.is_report_due(_as_utc(now) if now else None):
        return None
    return controller.finish_interview()


__all__ = ["maybe_generate_report"]
