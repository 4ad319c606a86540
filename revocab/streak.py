"""
Daily practice streak bookkeeping.

A streak counts consecutive calendar days with at least one completed
session. It is evaluated against "today" when displayed and advanced when
a session is committed.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .models import StreakRecord


@dataclass
class StreakInfo:
    current: int
    best: int
    is_broken: bool
    days_missed: int


def evaluate_streak(
    record: StreakRecord, today: Optional[date] = None
) -> StreakInfo:
    """
    Describe the streak as of `today`.

    The streak is broken when more than one day has passed since the last
    activity; `days_missed` is the number of skipped days in between.
    """
    if record.last_activity_date is None:
        return StreakInfo(current=0, best=0, is_broken=False, days_missed=0)

    today = today or date.today()
    diff_days = (today - record.last_activity_date).days
    if diff_days <= 1:
        return StreakInfo(
            current=record.current,
            best=record.best,
            is_broken=False,
            days_missed=0,
        )
    return StreakInfo(
        current=record.current,
        best=record.best,
        is_broken=True,
        days_missed=diff_days - 1,
    )


def register_activity(
    record: StreakRecord, today: Optional[date] = None
) -> StreakRecord:
    """
    Return the streak record after an activity on `today`.

    First activity starts at 1, the next calendar day extends the streak,
    a longer gap restarts it at 1 and another activity on the same day
    leaves it unchanged.
    """
    today = today or date.today()
    current = record.current
    if record.last_activity_date is None:
        current = 1
    else:
        diff_days = (today - record.last_activity_date).days
        if diff_days == 1:
            current += 1
        elif diff_days > 1:
            current = 1

    return StreakRecord(
        current=current,
        best=max(record.best, current),
        last_activity_date=today,
    )
