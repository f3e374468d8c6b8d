"""Per-entity persistence helpers over the Flask-SQLAlchemy session.

Reads return model instances (or ``None``/empty lists). Writes commit and
return the stored record. Updates and deletes on ids the caller does not own
raise ``NotFoundError``; unique-key collisions raise ``ConflictError``.
"""

from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from lifealign import db
from lifealign.errors import ConflictError, NotFoundError, ValidationError
from lifealign.models import (
    AccountabilityBuddy,
    Assessment,
    Blueprint,
    CommunityLike,
    CommunityUpdate,
    DailyCheckin,
    Habit,
    HabitCompletion,
    ProgressAssessment,
    Recommendation,
    User,
)

USER_FIELDS = {"email", "username", "display_name", "avatar_url", "level", "overall_progress"}
BLUEPRINT_FIELDS = {"identity_goal", "current_state", "focus_areas"}
HABIT_FIELDS = {
    "title",
    "description",
    "category",
    "focus_area",
    "duration_minutes",
    "target_frequency",
    "time_of_day",
    "is_active",
}
RECOMMENDATION_FIELDS = {"title", "description", "category", "impact", "priority", "is_active"}
MAX_COMMUNITY_FEED = 50


def _commit(conflict_message: str | None = None):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if conflict_message is None:
            raise
        raise ConflictError(conflict_message)


def _apply(record, changes: dict, allowed: set):
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}.")
    for key, value in changes.items():
        setattr(record, key, value)


# Users


def create_user(email: str, display_name=None, username=None, avatar_url=None) -> User:
    if User.query.filter_by(email=email).first():
        raise ConflictError("An account with that email already exists.")
    user = User(email=email, display_name=display_name, username=username, avatar_url=avatar_url)
    db.session.add(user)
    _commit("An account with that email or username already exists.")
    return user


def get_user(user_id) -> User | None:
    if user_id is None:
        return None
    return db.session.get(User, user_id)


def update_user(user_id: int, changes: dict) -> User:
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    _apply(user, changes, USER_FIELDS)
    _commit("An account with that email or username already exists.")
    return user


def delete_user(user_id: int) -> None:
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    db.session.delete(user)
    db.session.commit()


# Blueprints


def create_blueprint(user_id: int, identity_goal: str, current_state: str, focus_areas: list) -> Blueprint:
    blueprint = Blueprint(
        user_id=user_id,
        identity_goal=identity_goal,
        current_state=current_state,
        focus_areas=focus_areas,
    )
    db.session.add(blueprint)
    db.session.commit()
    return blueprint


def get_blueprint(user_id: int, blueprint_id: int) -> Blueprint | None:
    return Blueprint.query.filter_by(user_id=user_id, id=blueprint_id).first()


def get_current_blueprint(user_id: int) -> Blueprint | None:
    return (
        Blueprint.query.filter_by(user_id=user_id)
        .order_by(Blueprint.created_at.desc(), Blueprint.id.desc())
        .first()
    )


def list_blueprints(user_id: int) -> list[Blueprint]:
    return (
        Blueprint.query.filter_by(user_id=user_id)
        .order_by(Blueprint.created_at.desc(), Blueprint.id.desc())
        .all()
    )


def update_blueprint(user_id: int, blueprint_id: int, changes: dict) -> Blueprint:
    blueprint = get_blueprint(user_id, blueprint_id)
    if blueprint is None:
        raise NotFoundError("Blueprint not found.")
    _apply(blueprint, changes, BLUEPRINT_FIELDS)
    db.session.commit()
    return blueprint


# Habits


def create_habit(user_id: int, title: str, category: str, blueprint_id=None, **fields) -> Habit:
    habit = Habit(user_id=user_id, title=title, category=category, blueprint_id=blueprint_id)
    _apply(habit, fields, HABIT_FIELDS)
    db.session.add(habit)
    db.session.commit()
    return habit


def get_habit(user_id: int, habit_id: int) -> Habit | None:
    return Habit.query.filter_by(user_id=user_id, id=habit_id).first()


def list_active_habits(user_id: int) -> list[Habit]:
    return (
        Habit.query.options(selectinload(Habit.completions))
        .filter_by(user_id=user_id, is_active=True)
        .order_by(Habit.category.asc(), Habit.title.asc())
        .all()
    )


def list_blueprint_habits(user_id: int, blueprint_id: int) -> list[Habit]:
    return (
        Habit.query.filter_by(user_id=user_id, blueprint_id=blueprint_id, is_active=True)
        .order_by(Habit.category.asc(), Habit.title.asc())
        .all()
    )


def update_habit(user_id: int, habit_id: int, changes: dict) -> Habit:
    habit = get_habit(user_id, habit_id)
    if habit is None:
        raise NotFoundError("Habit not found.")
    _apply(habit, changes, HABIT_FIELDS)
    db.session.commit()
    return habit


def deactivate_habit(user_id: int, habit_id: int) -> Habit:
    return update_habit(user_id, habit_id, {"is_active": False})


# Habit completions


def complete_habit(user_id: int, habit_id: int, day: date) -> HabitCompletion:
    habit = get_habit(user_id, habit_id)
    if habit is None or not habit.is_active:
        raise NotFoundError("Habit not found.")

    message = "Habit already completed for this date."
    if get_completion(habit_id, day):
        raise ConflictError(message)

    completion = HabitCompletion(habit_id=habit_id, user_id=user_id, day=day)
    db.session.add(completion)
    _commit(message)
    return completion


def get_completion(habit_id: int, day: date) -> HabitCompletion | None:
    return HabitCompletion.query.filter_by(habit_id=habit_id, day=day).first()


def uncomplete_habit(user_id: int, habit_id: int, day: date) -> None:
    removed = HabitCompletion.query.filter_by(habit_id=habit_id, user_id=user_id, day=day).delete(
        synchronize_session="fetch"
    )
    if not removed:
        db.session.rollback()
        raise NotFoundError("No completion recorded for this habit and date.")
    db.session.commit()


def completions_on(user_id: int, day: date) -> list[HabitCompletion]:
    return (
        HabitCompletion.query.filter_by(user_id=user_id, day=day)
        .order_by(HabitCompletion.habit_id.asc())
        .all()
    )


def completions_between(user_id: int, start_day: date, end_day: date) -> list[HabitCompletion]:
    return (
        HabitCompletion.query.filter(
            HabitCompletion.user_id == user_id,
            HabitCompletion.day >= start_day,
            HabitCompletion.day <= end_day,
        )
        .order_by(HabitCompletion.day.asc(), HabitCompletion.habit_id.asc())
        .all()
    )


def list_completions(user_id: int) -> list[HabitCompletion]:
    return HabitCompletion.query.filter_by(user_id=user_id).order_by(HabitCompletion.day.asc()).all()


# Daily check-ins


def create_checkin(user_id: int, day: date, mood: str, energy_level: int, notes=None) -> DailyCheckin:
    message = "Check-in already completed for this date."
    if get_checkin(user_id, day):
        raise ConflictError(message)
    checkin = DailyCheckin(user_id=user_id, day=day, mood=mood, energy_level=energy_level, notes=notes)
    db.session.add(checkin)
    _commit(message)
    return checkin


def get_checkin(user_id: int, day: date) -> DailyCheckin | None:
    return DailyCheckin.query.filter_by(user_id=user_id, day=day).first()


def list_checkins(user_id: int) -> list[DailyCheckin]:
    return DailyCheckin.query.filter_by(user_id=user_id).order_by(DailyCheckin.day.asc()).all()


# Weekly progress assessments


def create_progress_assessment(
    user_id: int,
    week_of: date,
    focus_area_progress: dict,
    overall_rating: int,
    notes=None,
    blueprint_id=None,
) -> ProgressAssessment:
    message = "Progress assessment already recorded for this week."
    if ProgressAssessment.query.filter_by(user_id=user_id, week_of=week_of).first():
        raise ConflictError(message)
    assessment = ProgressAssessment(
        user_id=user_id,
        blueprint_id=blueprint_id,
        week_of=week_of,
        focus_area_progress=focus_area_progress,
        overall_rating=overall_rating,
        notes=notes,
    )
    db.session.add(assessment)
    _commit(message)
    return assessment


def list_progress_assessments(user_id: int) -> list[ProgressAssessment]:
    return (
        ProgressAssessment.query.filter_by(user_id=user_id)
        .order_by(ProgressAssessment.created_at.desc(), ProgressAssessment.id.desc())
        .all()
    )


def get_latest_progress_assessment(user_id: int) -> ProgressAssessment | None:
    return (
        ProgressAssessment.query.filter_by(user_id=user_id)
        .order_by(ProgressAssessment.created_at.desc(), ProgressAssessment.id.desc())
        .first()
    )


# Self-assessments


def create_assessment(user_id: int, kind: str, dimensions: dict, responses=None) -> Assessment:
    assessment = Assessment(user_id=user_id, kind=kind, dimensions=dimensions, responses=responses)
    db.session.add(assessment)
    db.session.commit()
    return assessment


def list_assessments(user_id: int) -> list[Assessment]:
    return (
        Assessment.query.filter_by(user_id=user_id)
        .order_by(Assessment.completed_at.desc(), Assessment.id.desc())
        .all()
    )


def get_latest_assessment(user_id: int, kind: str) -> Assessment | None:
    return (
        Assessment.query.filter_by(user_id=user_id, kind=kind)
        .order_by(Assessment.completed_at.desc(), Assessment.id.desc())
        .first()
    )


# Recommendations


def replace_recommendations(user_id: int, drafts: list[dict]) -> list[Recommendation]:
    Recommendation.query.filter_by(user_id=user_id, is_active=True).update(
        {"is_active": False}, synchronize_session="fetch"
    )
    stored = []
    for draft in drafts:
        recommendation = Recommendation(
            user_id=user_id,
            title=draft["title"],
            description=draft["description"],
            category=draft["category"],
            impact=draft["impact"],
            priority=draft["priority"],
            tier=draft.get("tier"),
            is_active=True,
        )
        db.session.add(recommendation)
        stored.append(recommendation)
    db.session.commit()
    return stored


def list_active_recommendations(user_id: int) -> list[Recommendation]:
    return (
        Recommendation.query.filter_by(user_id=user_id, is_active=True)
        .order_by(Recommendation.priority.asc(), Recommendation.id.asc())
        .all()
    )


def update_recommendation(user_id: int, recommendation_id: int, changes: dict) -> Recommendation:
    recommendation = Recommendation.query.filter_by(user_id=user_id, id=recommendation_id).first()
    if recommendation is None:
        raise NotFoundError("Recommendation not found.")
    _apply(recommendation, changes, RECOMMENDATION_FIELDS)
    db.session.commit()
    return recommendation


# Community


def create_community_update(user_id: int, content: str, kind: str = "general") -> CommunityUpdate:
    update = CommunityUpdate(user_id=user_id, content=content, kind=kind)
    db.session.add(update)
    db.session.commit()
    return update


def list_community_updates(limit: int = 10) -> list[CommunityUpdate]:
    limit = max(1, min(int(limit), MAX_COMMUNITY_FEED))
    return (
        CommunityUpdate.query.order_by(CommunityUpdate.created_at.desc(), CommunityUpdate.id.desc())
        .limit(limit)
        .all()
    )


def like_community_update(user_id: int, update_id: int) -> CommunityUpdate:
    update = db.session.get(CommunityUpdate, update_id)
    if update is None:
        raise NotFoundError("Community update not found.")

    message = "You already liked this update."
    if CommunityLike.query.filter_by(update_id=update_id, user_id=user_id).first():
        raise ConflictError(message)

    db.session.add(CommunityLike(update_id=update_id, user_id=user_id))
    _commit(message)
    return update


# Accountability buddies


def add_buddy(user_id: int, buddy_id: int) -> AccountabilityBuddy:
    if user_id == buddy_id:
        raise ValidationError("You cannot add yourself as a buddy.")
    if get_user(buddy_id) is None:
        raise NotFoundError("Buddy not found.")

    message = "This buddy is already connected."
    if AccountabilityBuddy.query.filter_by(user_id=user_id, buddy_id=buddy_id).first():
        raise ConflictError(message)

    pair = AccountabilityBuddy(user_id=user_id, buddy_id=buddy_id, status="active")
    db.session.add(pair)
    _commit(message)
    return pair


def list_buddies(user_id: int) -> list[AccountabilityBuddy]:
    return (
        AccountabilityBuddy.query.filter_by(user_id=user_id, status="active")
        .order_by(AccountabilityBuddy.created_at.asc(), AccountabilityBuddy.id.asc())
        .all()
    )
