from datetime import date, datetime, timezone

from lifealign import db
from lifealign.progress import current_streak, longest_streak


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value is not None else None


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    username = db.Column(db.String(80), unique=True, nullable=True)
    display_name = db.Column(db.String(255), nullable=True)
    avatar_url = db.Column(db.String(500), nullable=True)
    level = db.Column(db.Integer, nullable=False, default=1)
    overall_progress = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    blueprints = db.relationship("Blueprint", backref="user", lazy=True, cascade="all, delete-orphan")
    habits = db.relationship("Habit", backref="user", lazy=True, cascade="all, delete-orphan")
    habit_completions = db.relationship(
        "HabitCompletion", backref="user", lazy=True, cascade="all, delete-orphan"
    )
    checkins = db.relationship("DailyCheckin", backref="user", lazy=True, cascade="all, delete-orphan")
    progress_assessments = db.relationship(
        "ProgressAssessment", backref="user", lazy=True, cascade="all, delete-orphan"
    )
    assessments = db.relationship("Assessment", backref="user", lazy=True, cascade="all, delete-orphan")
    recommendations = db.relationship(
        "Recommendation", backref="user", lazy=True, cascade="all, delete-orphan"
    )
    community_updates = db.relationship(
        "CommunityUpdate", backref="user", lazy=True, cascade="all, delete-orphan"
    )
    community_likes = db.relationship(
        "CommunityLike", backref="user", lazy=True, cascade="all, delete-orphan"
    )
    buddies = db.relationship(
        "AccountabilityBuddy",
        foreign_keys="AccountabilityBuddy.user_id",
        backref="user",
        lazy=True,
        cascade="all, delete-orphan",
    )
    buddy_of = db.relationship(
        "AccountabilityBuddy",
        foreign_keys="AccountabilityBuddy.buddy_id",
        backref="buddy",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "displayName": self.display_name,
            "avatarUrl": self.avatar_url,
            "level": self.level,
            "overallProgress": self.overall_progress,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Blueprint(db.Model):
    __tablename__ = "blueprints"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    identity_goal = db.Column(db.Text, nullable=False)
    current_state = db.Column(db.Text, nullable=False)
    focus_areas = db.Column(db.JSON, nullable=False)  # [{"name", "description", "priority"}]
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    habits = db.relationship("Habit", backref="blueprint", lazy=True, passive_deletes=True)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "identityGoal": self.identity_goal,
            "currentState": self.current_state,
            "focusAreas": list(self.focus_areas or []),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Habit(db.Model):
    __tablename__ = "habits"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    blueprint_id = db.Column(
        db.Integer, db.ForeignKey("blueprints.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title = db.Column(db.String(180), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(80), nullable=False, index=True)
    focus_area = db.Column(db.String(120), nullable=True)
    duration_minutes = db.Column(db.Integer, nullable=True)
    target_frequency = db.Column(db.String(20), nullable=False, default="daily")
    time_of_day = db.Column(db.String(40), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    completions = db.relationship(
        "HabitCompletion",
        backref="habit",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="HabitCompletion.day",
    )

    def completion_days(self):
        return [completion.day for completion in self.completions]

    def to_dict(self, today: date | None = None):
        days = self.completion_days()
        return {
            "id": self.id,
            "userId": self.user_id,
            "blueprintId": self.blueprint_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "focusArea": self.focus_area,
            "duration": self.duration_minutes,
            "targetFrequency": self.target_frequency,
            "timeOfDay": self.time_of_day,
            "isActive": self.is_active,
            "currentStreak": current_streak(days, today or date.today()),
            "longestStreak": longest_streak(days),
            "createdAt": _iso(self.created_at),
        }


class HabitCompletion(db.Model):
    __tablename__ = "habit_completions"

    id = db.Column(db.Integer, primary_key=True)
    habit_id = db.Column(db.Integer, db.ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day = db.Column(db.Date, nullable=False, index=True)
    completed_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (db.UniqueConstraint("habit_id", "day", name="uq_habit_completions_habit_day"),)

    def to_dict(self):
        return {
            "id": self.id,
            "habitId": self.habit_id,
            "userId": self.user_id,
            "date": _iso(self.day),
            "completedAt": _iso(self.completed_at),
        }


class DailyCheckin(db.Model):
    __tablename__ = "daily_checkins"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day = db.Column(db.Date, default=date.today, nullable=False, index=True)
    mood = db.Column(db.String(40), nullable=False)
    energy_level = db.Column(db.Integer, nullable=False)  # 1-10
    notes = db.Column(db.Text, nullable=True)
    completed_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (db.UniqueConstraint("user_id", "day", name="uq_daily_checkins_user_day"),)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "date": _iso(self.day),
            "mood": self.mood,
            "energyLevel": self.energy_level,
            "notes": self.notes,
            "completedAt": _iso(self.completed_at),
        }


class ProgressAssessment(db.Model):
    __tablename__ = "progress_assessments"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    blueprint_id = db.Column(
        db.Integer, db.ForeignKey("blueprints.id", ondelete="SET NULL"), nullable=True, index=True
    )
    week_of = db.Column(db.Date, nullable=False, index=True)
    focus_area_progress = db.Column(db.JSON, nullable=False)  # {"Physical Health": 60}
    overall_rating = db.Column(db.Integer, nullable=False)  # 1-10
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    __table_args__ = (db.UniqueConstraint("user_id", "week_of", name="uq_progress_assessments_user_week"),)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "blueprintId": self.blueprint_id,
            "weekOf": _iso(self.week_of),
            "focusAreaProgress": dict(self.focus_area_progress or {}),
            "overallRating": self.overall_rating,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
        }


class Assessment(db.Model):
    __tablename__ = "assessments"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = db.Column(db.String(20), nullable=False, index=True)  # ideal_self | current_self
    dimensions = db.Column(db.JSON, nullable=False)  # {"fitness": 45, "career": 78}
    responses = db.Column(db.JSON, nullable=True)
    completed_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.kind,
            "dimensions": dict(self.dimensions or {}),
            "responses": self.responses or {},
            "completedAt": _iso(self.completed_at),
        }


class Recommendation(db.Model):
    __tablename__ = "recommendations"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(180), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(40), nullable=False, index=True)
    impact = db.Column(db.String(120), nullable=False)
    priority = db.Column(db.Integer, nullable=False, default=1)
    tier = db.Column(db.String(20), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "impact": self.impact,
            "priority": self.priority,
            "tier": self.tier,
            "isActive": self.is_active,
            "createdAt": _iso(self.created_at),
        }


class CommunityUpdate(db.Model):
    __tablename__ = "community_updates"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    kind = db.Column(db.String(20), nullable=False, default="general", index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    like_records = db.relationship(
        "CommunityLike",
        backref="update",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "content": self.content,
            "type": self.kind,
            "likes": self.likes,
            "createdAt": _iso(self.created_at),
        }


class CommunityLike(db.Model):
    __tablename__ = "community_likes"

    id = db.Column(db.Integer, primary_key=True)
    update_id = db.Column(
        db.Integer, db.ForeignKey("community_updates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (db.UniqueConstraint("update_id", "user_id", name="uq_community_likes_update_user"),)


class AccountabilityBuddy(db.Model):
    __tablename__ = "accountability_buddies"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    buddy_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (db.UniqueConstraint("user_id", "buddy_id", name="uq_accountability_buddies_pair"),)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "buddyId": self.buddy_id,
            "status": self.status,
            "createdAt": _iso(self.created_at),
        }


# Like count is read from community_likes rows, never stored.
CommunityUpdate.likes = db.column_property(
    db.select(db.func.count(CommunityLike.id))
    .where(CommunityLike.update_id == CommunityUpdate.id)
    .correlate_except(CommunityLike)
    .scalar_subquery()
)
