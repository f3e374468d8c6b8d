from datetime import date, timedelta
from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from lifealign import ai, db, storage
from lifealign.errors import AuthenticationError, ConflictError, LifeAlignError, NotFoundError, ValidationError
from lifealign.progress import build_progress_summary
from lifealign.validation import (
    field,
    has_field,
    is_valid_id,
    normalize_email,
    optional_text,
    parse_bool,
    parse_day,
    parse_id,
    parse_int,
    parse_optional_int,
    parse_score_map,
    require_json_object,
    require_text,
)

bp = Blueprint("api", __name__, url_prefix="/api")

ASSESSMENT_KINDS = {"ideal_self", "current_self"}
COMMUNITY_KINDS = {"achievement", "milestone", "general"}
HABIT_FREQUENCIES = {"daily", "weekly"}
MAX_SUMMARY_DAYS = 90


def _error_response(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


@bp.app_errorhandler(LifeAlignError)
def handle_domain_error(exc: LifeAlignError):
    if isinstance(exc, ConflictError):
        current_app.logger.warning("Rejected duplicate write on %s: %s", request.path, exc.message)
    return _error_response(exc.message, exc.status_code)


@bp.app_errorhandler(HTTPException)
def handle_http_error(exc: HTTPException):
    if exc.code is not None and exc.code < 400:
        return exc
    return _error_response(exc.description or exc.name, exc.code or 500)


@bp.app_errorhandler(Exception)
def handle_unexpected_error(exc: Exception):
    db.session.rollback()
    current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
    return _error_response("Internal server error.", 500)


@bp.before_app_request
def load_caller():
    raw = request.headers.get(current_app.config["USER_ID_HEADER"])
    try:
        user_id = int(raw) if raw else None
    except ValueError:
        user_id = None
    if user_id is not None and not is_valid_id(user_id):
        user_id = None
    g.user = storage.get_user(user_id)


@bp.url_value_preprocessor
def reject_out_of_range_ids(endpoint, values):
    for name, value in (values or {}).items():
        if name.endswith("_id") and not is_valid_id(value):
            raise NotFoundError("Not found.")


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if g.get("user") is None:
            raise AuthenticationError("Authentication required.")
        return view(*args, **kwargs)

    return wrapped


def _json_body() -> dict:
    return require_json_object(request.get_json(silent=True))


def _dump(records):
    return [record.to_dict() for record in records]


# Users


@bp.post("/users")
def create_user():
    body = _json_body()
    email = normalize_email(field(body, "email"))
    if not email or "@" not in email:
        raise ValidationError("A valid email is required.")
    user = storage.create_user(
        email=email,
        display_name=optional_text(field(body, "displayName", "display_name"), "Display name", max_len=255),
        username=optional_text(field(body, "username"), "Username", max_len=80),
        avatar_url=optional_text(field(body, "avatarUrl", "avatar_url"), "Avatar URL", max_len=500),
    )
    current_app.logger.info("Created user_id=%s", user.id)
    return jsonify(user.to_dict()), 201


@bp.get("/auth/user")
@login_required
def current_user():
    return jsonify(g.user.to_dict())


@bp.patch("/users/me")
@login_required
def update_current_user():
    body = _json_body()
    changes = {}
    if has_field(body, "displayName", "display_name"):
        changes["display_name"] = optional_text(
            field(body, "displayName", "display_name"), "Display name", max_len=255
        )
    if has_field(body, "username"):
        changes["username"] = optional_text(field(body, "username"), "Username", max_len=80)
    if has_field(body, "avatarUrl", "avatar_url"):
        changes["avatar_url"] = optional_text(field(body, "avatarUrl", "avatar_url"), "Avatar URL", max_len=500)
    if has_field(body, "email"):
        email = normalize_email(field(body, "email"))
        if not email or "@" not in email:
            raise ValidationError("A valid email is required.")
        changes["email"] = email
    user = storage.update_user(g.user.id, changes)
    return jsonify(user.to_dict())


@bp.delete("/users/me")
@login_required
def delete_current_user():
    user_id = g.user.id
    storage.delete_user(user_id)
    current_app.logger.info("Deleted user_id=%s and owned records", user_id)
    return jsonify({"ok": True})


# Blueprints


def _create_habits_from_drafts(user_id: int, blueprint_id: int, drafts: list[dict]):
    habits = []
    for draft in drafts:
        habits.append(
            storage.create_habit(
                user_id,
                draft["title"],
                draft["category"],
                blueprint_id=blueprint_id,
                description=draft["description"],
                focus_area=draft["focus_area"],
                duration_minutes=draft["duration"],
                time_of_day=draft.get("time_of_day"),
            )
        )
    return habits


@bp.get("/blueprints/me")
@login_required
def current_blueprint():
    blueprint = storage.get_current_blueprint(g.user.id)
    return jsonify(blueprint.to_dict() if blueprint else None)


@bp.get("/blueprints")
@login_required
def blueprint_history():
    return jsonify(_dump(storage.list_blueprints(g.user.id)))


@bp.post("/blueprints/generate")
@login_required
def generate_blueprint():
    body = _json_body()
    selection = ai.selection_from_config(current_app.config)
    draft = ai.generate_blueprint(field(body, "responses"), selection=selection)

    blueprint = storage.create_blueprint(
        g.user.id,
        identity_goal=draft["identity_goal"],
        current_state=draft["current_state"],
        focus_areas=draft["focus_areas"],
    )
    # Independent writes: a failure below leaves the blueprint without habits.
    habits = _create_habits_from_drafts(g.user.id, blueprint.id, ai.generate_habits(draft, selection=selection))

    current_app.logger.info(
        "Generated blueprint_id=%s with %s habits for user_id=%s", blueprint.id, len(habits), g.user.id
    )
    return jsonify({"blueprint": blueprint.to_dict(), "habits": _dump(habits)}), 201


@bp.post("/blueprints/<int:blueprint_id>/refine")
@login_required
def refine_blueprint(blueprint_id: int):
    body = _json_body()
    updates = body.get("updates") if isinstance(body.get("updates"), dict) else body

    blueprint = storage.get_blueprint(g.user.id, blueprint_id)
    if blueprint is None:
        raise NotFoundError("Blueprint not found.")

    selection = ai.selection_from_config(current_app.config)
    refined = ai.refine_blueprint(
        blueprint,
        new_goals=optional_text(field(updates, "newGoals", "new_goals"), "New goals"),
        feedback=optional_text(field(updates, "feedback"), "Feedback"),
        selection=selection,
    )
    blueprint = storage.update_blueprint(
        g.user.id,
        blueprint_id,
        {
            "identity_goal": refined["identity_goal"],
            "current_state": refined["current_state"],
            "focus_areas": refined["focus_areas"],
        },
    )

    if parse_bool(field(updates, "regenerateHabits", "regenerate_habits")):
        for habit in storage.list_blueprint_habits(g.user.id, blueprint_id):
            storage.deactivate_habit(g.user.id, habit.id)
        _create_habits_from_drafts(g.user.id, blueprint_id, ai.generate_habits(refined, selection=selection))

    habits = storage.list_blueprint_habits(g.user.id, blueprint_id)
    return jsonify({"blueprint": blueprint.to_dict(), "habits": _dump(habits)})


# Habits


def _habit_changes_from_body(body: dict, creating: bool) -> dict:
    changes = {}
    if creating or has_field(body, "title"):
        changes["title"] = require_text(field(body, "title"), "Title", max_len=180)
    if creating or has_field(body, "category"):
        changes["category"] = require_text(field(body, "category"), "Category", max_len=80)
    if has_field(body, "description"):
        changes["description"] = optional_text(field(body, "description"), "Description")
    if has_field(body, "focusArea", "focus_area"):
        changes["focus_area"] = optional_text(field(body, "focusArea", "focus_area"), "Focus area", max_len=120)
    if has_field(body, "duration", "durationMinutes", "duration_minutes"):
        changes["duration_minutes"] = parse_optional_int(
            field(body, "duration", "durationMinutes", "duration_minutes"), "Duration", minimum=1, maximum=1440
        )
    if has_field(body, "targetFrequency", "target_frequency"):
        frequency = (optional_text(field(body, "targetFrequency", "target_frequency"), "Frequency") or "").lower()
        if frequency not in HABIT_FREQUENCIES:
            raise ValidationError("Target frequency must be daily or weekly.")
        changes["target_frequency"] = frequency
    if has_field(body, "timeOfDay", "time_of_day"):
        changes["time_of_day"] = optional_text(field(body, "timeOfDay", "time_of_day"), "Time of day", max_len=40)
    if not creating and has_field(body, "isActive", "is_active"):
        changes["is_active"] = parse_bool(field(body, "isActive", "is_active"))
    return changes


@bp.get("/habits")
@login_required
def list_habits():
    return jsonify(_dump(storage.list_active_habits(g.user.id)))


@bp.post("/habits")
@login_required
def create_habit():
    changes = _habit_changes_from_body(_json_body(), creating=True)
    blueprint = storage.get_current_blueprint(g.user.id)
    title = changes.pop("title")
    category = changes.pop("category")
    habit = storage.create_habit(
        g.user.id,
        title,
        category,
        blueprint_id=blueprint.id if blueprint else None,
        **changes,
    )
    return jsonify(habit.to_dict()), 201


@bp.patch("/habits/<int:habit_id>")
@login_required
def update_habit(habit_id: int):
    changes = _habit_changes_from_body(_json_body(), creating=False)
    habit = storage.update_habit(g.user.id, habit_id, changes)
    return jsonify(habit.to_dict())


@bp.delete("/habits/<int:habit_id>")
@login_required
def delete_habit(habit_id: int):
    storage.deactivate_habit(g.user.id, habit_id)
    return jsonify({"ok": True})


# Habit completions


@bp.get("/habit-completions")
@login_required
def list_habit_completions():
    start_raw = request.args.get("startDate") or request.args.get("start_date")
    end_raw = request.args.get("endDate") or request.args.get("end_date")

    if start_raw or end_raw:
        if not (start_raw and end_raw):
            raise ValidationError("Both startDate and endDate are required for a range.")
        start_day = parse_day(start_raw, "startDate")
        end_day = parse_day(end_raw, "endDate")
        if start_day > end_day:
            raise ValidationError("startDate must not be after endDate.")
        completions = storage.completions_between(g.user.id, start_day, end_day)
    else:
        day = parse_day(request.args.get("date"), default=date.today())
        completions = storage.completions_on(g.user.id, day)

    return jsonify(_dump(completions))


@bp.post("/habit-completions")
@login_required
def complete_habit():
    body = _json_body()
    habit_id = parse_id(field(body, "habitId", "habit_id"), "habitId")
    day = parse_day(field(body, "date"), default=date.today())
    completion = storage.complete_habit(g.user.id, habit_id, day)
    return jsonify(completion.to_dict()), 201


@bp.delete("/habit-completions/<int:habit_id>")
@login_required
def uncomplete_habit(habit_id: int):
    day = parse_day(request.args.get("date"), default=date.today())
    storage.uncomplete_habit(g.user.id, habit_id, day)
    return jsonify({"ok": True})


# Daily check-ins


@bp.get("/checkins")
@login_required
def list_checkins():
    return jsonify(_dump(storage.list_checkins(g.user.id)))


@bp.get("/checkins/today")
@login_required
def todays_checkin():
    checkin = storage.get_checkin(g.user.id, date.today())
    return jsonify(checkin.to_dict() if checkin else None)


@bp.post("/checkins")
@login_required
def create_checkin():
    body = _json_body()
    checkin = storage.create_checkin(
        g.user.id,
        day=parse_day(field(body, "date"), default=date.today()),
        mood=require_text(field(body, "mood"), "Mood", max_len=40),
        energy_level=parse_int(field(body, "energyLevel", "energy_level"), "Energy level", minimum=1, maximum=10),
        notes=optional_text(field(body, "notes"), "Notes"),
    )
    return jsonify(checkin.to_dict()), 201


# Weekly progress assessments


@bp.get("/progress-assessments")
@login_required
def list_progress_assessments():
    return jsonify(_dump(storage.list_progress_assessments(g.user.id)))


@bp.post("/progress-assessments")
@login_required
def create_progress_assessment():
    body = _json_body()
    today = date.today()
    blueprint = storage.get_current_blueprint(g.user.id)
    assessment = storage.create_progress_assessment(
        g.user.id,
        week_of=parse_day(field(body, "weekOf", "week_of"), "weekOf", default=today - timedelta(days=today.weekday())),
        focus_area_progress=parse_score_map(
            field(body, "focusAreaProgress", "focus_area_progress"), "focusAreaProgress"
        ),
        overall_rating=parse_int(
            field(body, "overallRating", "overall_rating"), "Overall rating", minimum=1, maximum=10
        ),
        notes=optional_text(field(body, "notes"), "Notes"),
        blueprint_id=blueprint.id if blueprint else None,
    )
    return jsonify(assessment.to_dict()), 201


# Self-assessments


def _assessment_kind(value) -> str:
    kind = (optional_text(value, "type") or "").lower()
    if kind not in ASSESSMENT_KINDS:
        raise ValidationError("Assessment type must be ideal_self or current_self.")
    return kind


@bp.get("/assessments")
@login_required
def list_assessments():
    return jsonify(_dump(storage.list_assessments(g.user.id)))


@bp.post("/assessments")
@login_required
def create_assessment():
    body = _json_body()
    responses = field(body, "responses")
    if responses is not None and not isinstance(responses, (dict, list)):
        raise ValidationError("Responses must be an object or a list.")
    assessment = storage.create_assessment(
        g.user.id,
        kind=_assessment_kind(field(body, "type", "kind")),
        dimensions=ai.normalize_dimensions(field(body, "dimensions")),
        responses=responses,
    )
    return jsonify(assessment.to_dict()), 201


@bp.get("/assessments/latest/<kind>")
@login_required
def latest_assessment(kind: str):
    assessment = storage.get_latest_assessment(g.user.id, _assessment_kind(kind))
    return jsonify(assessment.to_dict() if assessment else None)


@bp.get("/assessments/questions/<kind>")
def assessment_questions(kind: str):
    return jsonify(ai.assessment_questions(kind))


# Recommendations


@bp.get("/recommendations")
@login_required
def list_recommendations():
    return jsonify(_dump(storage.list_active_recommendations(g.user.id)))


@bp.post("/recommendations/generate")
@login_required
def generate_recommendations():
    config = current_app.config
    assessment = storage.get_latest_assessment(g.user.id, "current_self")
    if assessment is None:
        drafts = ai.starter_recommendations()
    else:
        drafts = ai.generate_recommendations(
            assessment.dimensions,
            storage.list_active_habits(g.user.id),
            storage.list_checkins(g.user.id),
            today=date.today(),
            limit=config["RECOMMENDATION_LIMIT"],
            low_energy_threshold=config["LOW_ENERGY_THRESHOLD"],
            stale_after_days=config["STALE_CHECKIN_DAYS"],
        )

    stored = storage.replace_recommendations(g.user.id, drafts)
    current_app.logger.info("Generated %s recommendations for user_id=%s", len(stored), g.user.id)
    return jsonify(_dump(stored)), 201


@bp.patch("/recommendations/<int:recommendation_id>")
@login_required
def update_recommendation(recommendation_id: int):
    body = _json_body()
    changes = {}
    if has_field(body, "isActive", "is_active"):
        changes["is_active"] = parse_bool(field(body, "isActive", "is_active"))
    if has_field(body, "priority"):
        changes["priority"] = parse_int(field(body, "priority"), "Priority", minimum=1, maximum=5)
    recommendation = storage.update_recommendation(g.user.id, recommendation_id, changes)
    return jsonify(recommendation.to_dict())


# Progress statistics


@bp.get("/progress/summary")
@login_required
def progress_summary():
    days = parse_int(request.args.get("days", 7), "days", minimum=1, maximum=MAX_SUMMARY_DAYS)
    summary = build_progress_summary(
        storage.list_active_habits(g.user.id),
        storage.list_completions(g.user.id),
        storage.list_checkins(g.user.id),
        today=date.today(),
        days=days,
    )
    return jsonify(summary)


# Community


@bp.get("/community/updates")
@login_required
def community_feed():
    default_limit = current_app.config["COMMUNITY_FEED_LIMIT"]
    limit = parse_int(
        request.args.get("limit", default_limit), "limit", minimum=1, maximum=storage.MAX_COMMUNITY_FEED
    )
    return jsonify(_dump(storage.list_community_updates(limit)))


@bp.post("/community/updates")
@login_required
def create_community_update():
    body = _json_body()
    kind = (optional_text(field(body, "type", "kind"), "type") or "general").lower()
    if kind not in COMMUNITY_KINDS:
        raise ValidationError("Update type must be achievement, milestone, or general.")
    update = storage.create_community_update(
        g.user.id,
        content=require_text(field(body, "content"), "Content", max_len=2000),
        kind=kind,
    )
    return jsonify(update.to_dict()), 201


@bp.post("/community/updates/<int:update_id>/like")
@login_required
def like_community_update(update_id: int):
    update = storage.like_community_update(g.user.id, update_id)
    return jsonify(update.to_dict())


# Accountability buddies


@bp.get("/buddies")
@login_required
def list_buddies():
    return jsonify(_dump(storage.list_buddies(g.user.id)))


@bp.post("/buddies")
@login_required
def add_buddy():
    body = _json_body()
    buddy_id = parse_id(field(body, "buddyId", "buddy_id"), "buddyId")
    pair = storage.add_buddy(g.user.id, buddy_id)
    return jsonify(pair.to_dict()), 201
