"""Streaks and progress statistics derived from completion and check-in history."""

from datetime import date, timedelta
from typing import Iterable, Sequence


def current_streak(days: Iterable[date], today: date) -> int:
    """Consecutive completed days ending today, or yesterday if today is still open."""
    completed = set(days)
    if today in completed:
        cursor = today
    elif today - timedelta(days=1) in completed:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in completed:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(days: Iterable[date]) -> int:
    ordered = sorted(set(days))
    best = 0
    run = 0
    previous = None
    for day in ordered:
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def average_or_none(values: list[float], digits: int = 1):
    if not values:
        return None
    return round(sum(values) / len(values), digits)


def build_progress_summary(habits: Sequence, completions: Sequence, checkins: Sequence, today: date, days: int = 7):
    start_day = today - timedelta(days=days - 1)
    habit_ids = {habit.id for habit in habits}
    window_completions = [
        c for c in completions if c.habit_id in habit_ids and start_day <= c.day <= today
    ]

    per_day = []
    for offset in range(days):
        day = start_day + timedelta(days=offset)
        done = len({c.habit_id for c in window_completions if c.day == day})
        percentage = round((done / len(habit_ids)) * 100, 1) if habit_ids else 0.0
        per_day.append({"date": day.isoformat(), "completed": done, "percentage": percentage})

    possible = len(habit_ids) * days
    completion_rate = round((len(window_completions) / possible) * 100, 1) if possible else 0.0

    by_habit = {}
    for completion in completions:
        by_habit.setdefault(completion.habit_id, []).append(completion.day)

    habit_stats = []
    for habit in habits:
        history = by_habit.get(habit.id, [])
        habit_stats.append(
            {
                "habitId": habit.id,
                "title": habit.title,
                "category": habit.category,
                "currentStreak": current_streak(history, today),
                "longestStreak": longest_streak(history),
            }
        )

    window_checkins = [c for c in checkins if start_day <= c.day <= today]
    checkin_days = {c.day for c in window_checkins}

    return {
        "startDate": start_day.isoformat(),
        "endDate": today.isoformat(),
        "days": per_day,
        "completionRate": completion_rate,
        "habits": habit_stats,
        "checkinCoverage": round((len(checkin_days) / days) * 100, 1),
        "averageEnergy": average_or_none([c.energy_level for c in window_checkins]),
    }
