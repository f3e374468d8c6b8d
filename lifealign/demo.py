from datetime import date, timedelta

from lifealign import db
from lifealign.models import Assessment, Habit, HabitCompletion, Recommendation, User

DEMO_EMAIL = "alex@example.com"

DEMO_HABITS = [
    {
        "title": "Morning Meditation",
        "description": "10 minutes of mindfulness",
        "category": "wellness",
        "time_of_day": "7:00 AM",
        "duration_minutes": 10,
        "streak": 23,
        "best_run": 45,
    },
    {
        "title": "Read 30 minutes",
        "description": "Non-fiction or personal development",
        "category": "learning",
        "time_of_day": "8:00 PM",
        "duration_minutes": 30,
        "streak": 12,
        "best_run": 28,
    },
    {
        "title": "Workout",
        "description": "45 minutes strength training",
        "category": "fitness",
        "time_of_day": "6:00 AM",
        "duration_minutes": 45,
        "streak": 8,
        "best_run": 15,
    },
]

DEMO_DIMENSIONS = {"fitness": 45, "career": 78, "relationships": 62, "learning": 34}

DEMO_RECOMMENDATIONS = [
    {
        "title": "Set bedtime alarm for 10:30 PM",
        "description": "Based on your progress, focus on a consistent sleep schedule.",
        "category": "wellness",
        "impact": "+15% sleep quality improvement",
        "priority": 1,
    },
    {
        "title": "Add protein shake post-workout",
        "description": "Increase protein intake for better recovery.",
        "category": "fitness",
        "impact": "+22% muscle recovery",
        "priority": 2,
    },
]


def _history(today: date, streak: int, best_run: int) -> list[date]:
    current = [today - timedelta(days=offset) for offset in range(streak)]
    # One missed day separates the current streak from the earlier best run.
    earlier_end = today - timedelta(days=streak + 1)
    earlier = [earlier_end - timedelta(days=offset) for offset in range(best_run)]
    return current + earlier


def seed_demo_data(today: date | None = None) -> User:
    """Create the demo account and its sample history; returns the existing one if present."""
    existing = User.query.filter_by(email=DEMO_EMAIL).first()
    if existing:
        return existing

    today = today or date.today()
    user = User(
        email=DEMO_EMAIL,
        username="alex_johnson",
        display_name="Alex Johnson",
        level=12,
        overall_progress=67,
    )
    db.session.add(user)
    db.session.flush()

    for entry in DEMO_HABITS:
        habit = Habit(
            user_id=user.id,
            title=entry["title"],
            description=entry["description"],
            category=entry["category"],
            time_of_day=entry["time_of_day"],
            duration_minutes=entry["duration_minutes"],
            target_frequency="daily",
        )
        db.session.add(habit)
        db.session.flush()
        for day in _history(today, entry["streak"], entry["best_run"]):
            db.session.add(HabitCompletion(habit_id=habit.id, user_id=user.id, day=day))

    db.session.add(
        Assessment(user_id=user.id, kind="current_self", dimensions=dict(DEMO_DIMENSIONS), responses={})
    )
    for rec in DEMO_RECOMMENDATIONS:
        db.session.add(Recommendation(user_id=user.id, is_active=True, **rec))

    db.session.commit()
    return user
