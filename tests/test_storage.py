import unittest
from datetime import date
from unittest import mock

from lifealign import db, storage
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
    Recommendation,
)
from tests.support import AppTestCase

DAY = date(2025, 1, 30)


class StorageTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.user = storage.create_user("one@example.com", display_name="One")
        self.other = storage.create_user("two@example.com", display_name="Two")
        self.habit = storage.create_habit(self.user.id, "Meditate", "wellness", duration_minutes=10)

    def tearDown(self):
        db.session.remove()
        self.ctx.pop()
        super().tearDown()

    def test_duplicate_email_conflicts(self):
        with self.assertRaises(ConflictError):
            storage.create_user("one@example.com")

    def test_duplicate_completion_keeps_original(self):
        original = storage.complete_habit(self.user.id, self.habit.id, DAY)
        with self.assertRaises(ConflictError):
            storage.complete_habit(self.user.id, self.habit.id, DAY)

        rows = storage.completions_on(self.user.id, DAY)
        self.assertEqual([row.id for row in rows], [original.id])

    def test_unique_constraint_is_reported_as_conflict(self):
        storage.create_checkin(self.user.id, DAY, "good", 3)
        # Skip the pre-check so the insert reaches the database constraint.
        with mock.patch.object(storage, "get_checkin", return_value=None):
            with self.assertRaises(ConflictError):
                storage.create_checkin(self.user.id, DAY, "great", 9)

        checkins = storage.list_checkins(self.user.id)
        self.assertEqual(len(checkins), 1)
        self.assertEqual(checkins[0].energy_level, 3)

    def test_completion_unique_constraint_is_reported_as_conflict(self):
        original = storage.complete_habit(self.user.id, self.habit.id, DAY)
        # Skip the pre-check so the second insert reaches the database constraint.
        with mock.patch.object(storage, "get_completion", return_value=None):
            with self.assertRaises(ConflictError):
                storage.complete_habit(self.user.id, self.habit.id, DAY)

        rows = storage.completions_on(self.user.id, DAY)
        self.assertEqual([row.id for row in rows], [original.id])

    def test_duplicate_weekly_assessment_conflicts(self):
        storage.create_progress_assessment(self.user.id, date(2025, 1, 27), {"Health": 60}, 7)
        with self.assertRaises(ConflictError):
            storage.create_progress_assessment(self.user.id, date(2025, 1, 27), {"Health": 80}, 9)

    def test_completing_another_users_habit_is_not_found(self):
        with self.assertRaises(NotFoundError):
            storage.complete_habit(self.other.id, self.habit.id, DAY)

    def test_uncomplete_missing_completion_is_not_found(self):
        with self.assertRaises(NotFoundError):
            storage.uncomplete_habit(self.user.id, self.habit.id, DAY)

    def test_uncomplete_removes_completion(self):
        storage.complete_habit(self.user.id, self.habit.id, DAY)
        storage.uncomplete_habit(self.user.id, self.habit.id, DAY)
        self.assertEqual(storage.completions_on(self.user.id, DAY), [])

    def test_deactivated_habit_keeps_completions(self):
        storage.complete_habit(self.user.id, self.habit.id, DAY)
        storage.deactivate_habit(self.user.id, self.habit.id)

        self.assertEqual(storage.list_active_habits(self.user.id), [])
        self.assertEqual(len(storage.list_completions(self.user.id)), 1)

        with self.assertRaises(NotFoundError):
            storage.complete_habit(self.user.id, self.habit.id, date(2025, 1, 31))

    def test_update_is_scoped_to_owner(self):
        with self.assertRaises(NotFoundError):
            storage.update_habit(self.other.id, self.habit.id, {"title": "Hijacked"})
        self.assertEqual(storage.get_habit(self.user.id, self.habit.id).title, "Meditate")

    def test_unknown_update_fields_are_rejected(self):
        with self.assertRaises(ValidationError):
            storage.update_habit(self.user.id, self.habit.id, {"user_id": self.other.id})

    def test_current_blueprint_is_most_recent(self):
        storage.create_blueprint(self.user.id, "First", "Now", [{"name": "A", "description": "", "priority": 3}])
        second = storage.create_blueprint(self.user.id, "Second", "Now", [])
        self.assertEqual(storage.get_current_blueprint(self.user.id).id, second.id)
        self.assertEqual(len(storage.list_blueprints(self.user.id)), 2)
        self.assertIsNone(storage.get_current_blueprint(self.other.id))

    def test_replacing_recommendations_deactivates_previous_set(self):
        draft = {"title": "Walk", "description": "d", "category": "fitness", "impact": "+1%", "priority": 2}
        storage.replace_recommendations(self.user.id, [draft])
        storage.replace_recommendations(self.user.id, [dict(draft, title="Run"), dict(draft, title="Swim")])

        active = storage.list_active_recommendations(self.user.id)
        self.assertEqual(sorted(r.title for r in active), ["Run", "Swim"])
        self.assertEqual(Recommendation.query.filter_by(user_id=self.user.id).count(), 3)

    def test_like_once_per_user(self):
        update = storage.create_community_update(self.other.id, "Hit a 30 day streak", "milestone")
        liked = storage.like_community_update(self.user.id, update.id)
        self.assertEqual(liked.likes, 1)

        with self.assertRaises(ConflictError):
            storage.like_community_update(self.user.id, update.id)
        self.assertEqual(db.session.get(CommunityUpdate, update.id).likes, 1)

        with self.assertRaises(NotFoundError):
            storage.like_community_update(self.user.id, 9999)

    def test_like_count_follows_like_rows(self):
        update = storage.create_community_update(self.user.id, "Week one done")
        storage.like_community_update(self.other.id, update.id)
        third = storage.create_user("three@example.com")
        self.assertEqual(storage.like_community_update(third.id, update.id).likes, 2)

        storage.delete_user(third.id)
        self.assertEqual(db.session.get(CommunityUpdate, update.id).likes, 1)
        self.assertEqual([item.likes for item in storage.list_community_updates()], [1])

    def test_buddy_rules(self):
        with self.assertRaises(ValidationError):
            storage.add_buddy(self.user.id, self.user.id)
        with self.assertRaises(NotFoundError):
            storage.add_buddy(self.user.id, 9999)

        storage.add_buddy(self.user.id, self.other.id)
        with self.assertRaises(ConflictError):
            storage.add_buddy(self.user.id, self.other.id)
        self.assertEqual([pair.buddy_id for pair in storage.list_buddies(self.user.id)], [self.other.id])

    def test_delete_user_cascades_to_owned_records(self):
        user_id = self.user.id
        blueprint = storage.create_blueprint(user_id, "Goal", "Now", [])
        storage.create_habit(user_id, "Run", "fitness", blueprint_id=blueprint.id)
        storage.complete_habit(user_id, self.habit.id, DAY)
        storage.create_checkin(user_id, DAY, "good", 7)
        storage.create_assessment(user_id, "current_self", {"fitness": 40})
        storage.replace_recommendations(
            user_id,
            [{"title": "Walk", "description": "d", "category": "fitness", "impact": "+1%", "priority": 1}],
        )
        own_update = storage.create_community_update(user_id, "Started today")
        other_update = storage.create_community_update(self.other.id, "Day 10")
        storage.like_community_update(user_id, other_update.id)
        storage.like_community_update(self.other.id, own_update.id)
        storage.add_buddy(user_id, self.other.id)
        storage.add_buddy(self.other.id, user_id)

        storage.delete_user(user_id)

        for model in (Blueprint, Habit, HabitCompletion, DailyCheckin, Assessment, Recommendation, CommunityUpdate):
            self.assertEqual(model.query.filter_by(user_id=user_id).count(), 0, model.__name__)
        self.assertEqual(CommunityLike.query.count(), 0)
        self.assertEqual(AccountabilityBuddy.query.count(), 0)

        self.assertIsNotNone(storage.get_user(self.other.id))
        self.assertEqual(len(storage.list_community_updates()), 1)
        self.assertEqual(db.session.get(CommunityUpdate, other_update.id).likes, 0)

        with self.assertRaises(NotFoundError):
            storage.delete_user(user_id)


if __name__ == "__main__":
    unittest.main()
