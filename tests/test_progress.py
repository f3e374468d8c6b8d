import unittest
from datetime import date, timedelta
from types import SimpleNamespace

from lifealign.progress import average_or_none, build_progress_summary, current_streak, longest_streak

TODAY = date(2025, 1, 30)


def _days(*offsets):
    return [TODAY - timedelta(days=offset) for offset in offsets]


class StreakTestCase(unittest.TestCase):
    def test_current_streak_counts_back_from_today(self):
        self.assertEqual(current_streak(_days(0, 1, 2), TODAY), 3)

    def test_open_today_keeps_yesterdays_streak(self):
        self.assertEqual(current_streak(_days(1, 2), TODAY), 2)

    def test_gap_before_yesterday_breaks_streak(self):
        self.assertEqual(current_streak(_days(2, 3, 4), TODAY), 0)
        self.assertEqual(current_streak([], TODAY), 0)

    def test_retroactive_completion_fills_gap(self):
        history = _days(0, 1, 3, 4)
        self.assertEqual(current_streak(history, TODAY), 2)
        history.append(TODAY - timedelta(days=2))
        self.assertEqual(current_streak(history, TODAY), 5)
        self.assertEqual(longest_streak(history), 5)

    def test_uncompleting_a_day_shortens_streak(self):
        history = _days(0, 1, 2, 3)
        history.remove(TODAY - timedelta(days=1))
        self.assertEqual(current_streak(history, TODAY), 1)
        self.assertEqual(longest_streak(history), 2)

    def test_longest_streak(self):
        self.assertEqual(longest_streak(_days(0, 1, 2, 5, 6)), 3)
        self.assertEqual(longest_streak([]), 0)
        self.assertEqual(longest_streak(_days(3, 3, 4)), 2)


class SummaryTestCase(unittest.TestCase):
    def setUp(self):
        self.habits = [
            SimpleNamespace(id=1, title="Meditate", category="wellness"),
            SimpleNamespace(id=2, title="Run", category="fitness"),
        ]

    def test_summary_over_two_days(self):
        completions = [
            SimpleNamespace(habit_id=1, day=TODAY),
            SimpleNamespace(habit_id=1, day=TODAY - timedelta(days=1)),
            SimpleNamespace(habit_id=2, day=TODAY),
            SimpleNamespace(habit_id=2, day=TODAY - timedelta(days=9)),
        ]
        checkins = [SimpleNamespace(day=TODAY, energy_level=6)]

        summary = build_progress_summary(self.habits, completions, checkins, TODAY, days=2)

        self.assertEqual(summary["startDate"], "2025-01-29")
        self.assertEqual(summary["endDate"], "2025-01-30")
        self.assertEqual(
            summary["days"],
            [
                {"date": "2025-01-29", "completed": 1, "percentage": 50.0},
                {"date": "2025-01-30", "completed": 2, "percentage": 100.0},
            ],
        )
        self.assertEqual(summary["completionRate"], 75.0)
        self.assertEqual(summary["checkinCoverage"], 50.0)
        self.assertEqual(summary["averageEnergy"], 6.0)

        streaks = {row["habitId"]: (row["currentStreak"], row["longestStreak"]) for row in summary["habits"]}
        self.assertEqual(streaks, {1: (2, 2), 2: (1, 1)})

    def test_summary_without_habits(self):
        summary = build_progress_summary([], [], [], TODAY, days=7)
        self.assertEqual(len(summary["days"]), 7)
        self.assertEqual(summary["completionRate"], 0.0)
        self.assertIsNone(summary["averageEnergy"])
        self.assertEqual(summary["habits"], [])

    def test_completions_of_other_habits_are_ignored(self):
        completions = [SimpleNamespace(habit_id=99, day=TODAY)]
        summary = build_progress_summary(self.habits, completions, [], TODAY, days=1)
        self.assertEqual(summary["days"][0]["completed"], 0)

    def test_average_or_none(self):
        self.assertIsNone(average_or_none([]))
        self.assertEqual(average_or_none([3, 4]), 3.5)


if __name__ == "__main__":
    unittest.main()
