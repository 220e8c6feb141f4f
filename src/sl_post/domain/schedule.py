"""Derived schedule state of a post.

    no time_post        -> DRAFT
    time_post in future -> SCHEDULED
    otherwise           -> PUBLISHED
"""

from datetime import datetime

from src.sl_common.datetime_utils import ensure_utc, utc_now
from src.sl_common.enums import ScheduleState


def schedule_state(time_post: datetime | None, now: datetime | None = None) -> ScheduleState:
    if time_post is None:
        return ScheduleState.DRAFT
    current = ensure_utc(now) if now is not None else utc_now()
    if ensure_utc(time_post) > current:
        return ScheduleState.SCHEDULED
    return ScheduleState.PUBLISHED
