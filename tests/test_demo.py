import unittest
from datetime import date

from lifealign import db
from lifealign.demo import DEMO_EMAIL, seed_demo_data
from lifealign.models import Habit, Recommendation, User
from tests.support import AppTestCase

ANCHOR = date(2025, 1, 30)


class DemoSeedTestCase(AppTestCase):
    def test_seed_is_idempotent_and_matches_demo_streaks(self):
        with self.app.app_context():
            first = seed_demo_data(today=ANCHOR)
            second = seed_demo_data(today=ANCHOR)
            self.assertEqual(first.id, second.id)
            self.assertEqual(User.query.filter_by(email=DEMO_EMAIL).count(), 1)

            streaks = {
                habit.title: (habit.to_dict(today=ANCHOR)["currentStreak"], habit.to_dict(today=ANCHOR)["longestStreak"])
                for habit in Habit.query.filter_by(user_id=first.id).all()
            }
            self.assertEqual(
                streaks,
                {"Morning Meditation": (23, 45), "Read 30 minutes": (12, 28), "Workout": (8, 15)},
            )
            self.assertEqual(Recommendation.query.filter_by(user_id=first.id, is_active=True).count(), 2)
            db.session.remove()

    def test_demo_user_can_generate_recommendations(self):
        with self.app.app_context():
            user_id = seed_demo_data(today=ANCHOR).id
        response = self.client.post("/api/recommendations/generate", headers=self.auth(user_id))
        self.assertEqual(response.status_code, 201)
        titles = [r["title"] for r in response.get_json()]
        self.assertIn("Read for 15 minutes daily", titles)


if __name__ == "__main__":
    unittest.main()
