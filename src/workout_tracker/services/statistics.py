"""Statistics derived from a user's completed-session history.

Streaks count consecutive UTC calendar days with at least one completed
workout. A current streak stays alive until a full day passes without one.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple


def _workout_days(completed_at: Iterable[datetime]) -> List[date]:
    days = set()
    for moment in completed_at:
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        days.add(moment.date())
    return sorted(days)


def calculate_streaks(
    completed_at: Iterable[datetime],
    today: Optional[date] = None,
) -> Tuple[int, int]:
    """
    Calculate the current and longest daily workout streaks.

    Args:
        completed_at: Completion timestamps of all completed sessions
        today: Reference day, defaults to the current UTC date

    Returns:
        (current_streak, longest_streak) in days
    """
    days = _workout_days(completed_at)
    if not days:
        return 0, 0

    longest = 1
    run = 1
    for previous, current in zip(days, days[1:]):
        if current - previous == timedelta(days=1):
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    today = today or datetime.now(timezone.utc).date()
    if today - days[-1] > timedelta(days=1):
        return 0, longest

    # run is the streak ending on the latest workout day
    return run, longest


def count_active_weeks(completed_at: Iterable[datetime]) -> int:
    """Number of distinct ISO weeks containing a completed workout."""
    weeks = {tuple(day.isocalendar())[:2] for day in _workout_days(completed_at)}
    return len(weeks)


def count_unique_exercises(exercise_keys: Iterable[str]) -> int:
    """Number of distinct exercise keys."""
    return len(set(exercise_keys))
