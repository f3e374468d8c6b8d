import unittest
from datetime import date, timedelta
from types import SimpleNamespace

from lifealign import ai
from lifealign.ai import Category, ModuloSelection, SeededSelection, Tier
from lifealign.errors import ValidationError

TODAY = date(2025, 1, 30)


def _habit(title, category, streak):
    return {"title": title, "category": category, "current_streak": streak}


def _checkin(days_ago, energy):
    return {"day": TODAY - timedelta(days=days_ago), "energy_level": energy}


class BlueprintGenerationTestCase(unittest.TestCase):
    def test_template_is_chosen_by_response_count(self):
        blueprint = ai.generate_blueprint(["a", "b"])
        self.assertEqual(blueprint["identity_goal"], ai.BLUEPRINT_TEMPLATES[2]["identity_goal"])

        blueprint = ai.generate_blueprint(["a"])
        self.assertEqual(blueprint["identity_goal"], ai.BLUEPRINT_TEMPLATES[1]["identity_goal"])

        blueprint = ai.generate_blueprint(["a", "b", "c"])
        self.assertEqual(blueprint["identity_goal"], ai.BLUEPRINT_TEMPLATES[0]["identity_goal"])

    def test_generated_focus_areas_are_copies(self):
        blueprint = ai.generate_blueprint(["a", "b"])
        blueprint["focus_areas"][0]["priority"] = 1
        self.assertEqual(ai.BLUEPRINT_TEMPLATES[2]["focus_areas"][0]["priority"], 5)

    def test_empty_responses_are_rejected(self):
        with self.assertRaises(ValidationError):
            ai.generate_blueprint([])
        with self.assertRaises(ValidationError):
            ai.generate_blueprint(None)

    def test_non_string_responses_are_rejected(self):
        with self.assertRaises(ValidationError):
            ai.generate_blueprint(["fine", 3])


class HabitGenerationTestCase(unittest.TestCase):
    def test_matching_focus_areas_come_first(self):
        habits = ai.generate_habits(ai.BLUEPRINT_TEMPLATES[2])
        self.assertEqual([h["title"] for h in habits[:2]], ["Exercise Session", "Read for Growth"])

    def test_count_follows_focus_area_count(self):
        # Five focus areas -> 5 + (5 % 2).
        self.assertEqual(len(ai.generate_habits(ai.BLUEPRINT_TEMPLATES[0])), 6)

        four_areas = {"focus_areas": [{"name": f"Area {n}"} for n in range(4)]}
        self.assertEqual(len(ai.generate_habits(four_areas)), 5)

    def test_count_stays_in_bounds_with_random_selection(self):
        for seed in range(20):
            habits = ai.generate_habits(ai.BLUEPRINT_TEMPLATES[1], selection=SeededSelection(seed))
            self.assertGreaterEqual(len(habits), ai.MIN_GENERATED_HABITS)
            self.assertLessEqual(len(habits), ai.MAX_GENERATED_HABITS)

    def test_habit_categories_are_known(self):
        for habit in ai.generate_habits(ai.BLUEPRINT_TEMPLATES[0]):
            self.assertIsNotNone(Category.parse(habit["category"]))

    def test_missing_blueprint_is_rejected(self):
        with self.assertRaises(ValidationError):
            ai.generate_habits(None)


class RefineBlueprintTestCase(unittest.TestCase):
    def test_priorities_are_nudged_and_clamped(self):
        blueprint = {
            "identity_goal": "Old goal",
            "current_state": "Now",
            "focus_areas": [
                {"name": "Low", "description": "", "priority": 1},
                {"name": "High", "description": "", "priority": 5},
                {"name": "Mid", "description": "", "priority": 3},
                {"name": "Mid 2", "description": "", "priority": 3},
            ],
        }
        refined = ai.refine_blueprint(blueprint)
        self.assertEqual([area["priority"] for area in refined["focus_areas"]], [1, 5, 2, 4])
        self.assertEqual(refined["identity_goal"], "Old goal")

    def test_new_goals_replace_identity_goal(self):
        blueprint = ai.generate_blueprint(["a"])
        refined = ai.refine_blueprint(blueprint, new_goals="  Be kinder  ")
        self.assertEqual(refined["identity_goal"], "Be kinder")
        self.assertEqual(refined["current_state"], blueprint["current_state"])

    def test_refine_does_not_mutate_input(self):
        blueprint = ai.generate_blueprint(["a"])
        before = [area["priority"] for area in blueprint["focus_areas"]]
        ai.refine_blueprint(blueprint)
        self.assertEqual([area["priority"] for area in blueprint["focus_areas"]], before)


class TierTestCase(unittest.TestCase):
    def test_tier_boundaries(self):
        self.assertEqual(ai.tier_for_score(0), Tier.FOUNDATION)
        self.assertEqual(ai.tier_for_score(39), Tier.FOUNDATION)
        self.assertEqual(ai.tier_for_score(40), Tier.OPTIMIZATION)
        self.assertEqual(ai.tier_for_score(69), Tier.OPTIMIZATION)
        self.assertEqual(ai.tier_for_score(70), Tier.ADVANCED)
        self.assertEqual(ai.tier_for_score(100), Tier.ADVANCED)

    def test_tier_priorities(self):
        self.assertEqual(Tier.FOUNDATION.priority, 1)
        self.assertEqual(Tier.OPTIMIZATION.priority, 2)
        self.assertEqual(Tier.ADVANCED.priority, 3)

    def test_template_table_is_exhaustive(self):
        ai.check_recommendation_templates(ai.RECOMMENDATION_TEMPLATES)

        partial = {category: dict(tiers) for category, tiers in ai.RECOMMENDATION_TEMPLATES.items()}
        del partial[Category.LEARNING][Tier.ADVANCED]
        with self.assertRaisesRegex(RuntimeError, "learning/advanced"):
            ai.check_recommendation_templates(partial)

        with self.assertRaises(RuntimeError):
            ai.check_recommendation_templates({})


class DimensionRecommendationTestCase(unittest.TestCase):
    def test_score_selects_tier_templates(self):
        low = ai.dimension_recommendations({"fitness": 39})
        self.assertEqual([r["title"] for r in low], ["Start with 10-minute daily walks", "Track your water intake"])
        self.assertTrue(all(r["priority"] == 1 and r["tier"] == "foundation" for r in low))

        mid = ai.dimension_recommendations({"fitness": 40})
        self.assertEqual([r["title"] for r in mid], ["Add strength training 2x/week"])
        self.assertEqual(mid[0]["priority"], 2)

        high = ai.dimension_recommendations({"fitness": 70})
        self.assertEqual(high[0]["tier"], "advanced")

    def test_out_of_range_scores_are_clamped(self):
        self.assertEqual(ai.normalize_dimensions({"career": 150, "learning": -5}), {"career": 100, "learning": 0})

    def test_dimension_keys_are_case_insensitive(self):
        self.assertEqual(ai.normalize_dimensions({"Fitness": "45"}), {"fitness": 45})

    def test_unknown_dimension_is_rejected(self):
        with self.assertRaises(ValidationError):
            ai.normalize_dimensions({"finance": 50})

    def test_non_numeric_scores_are_rejected(self):
        with self.assertRaises(ValidationError):
            ai.normalize_dimensions({"fitness": "high"})
        with self.assertRaises(ValidationError):
            ai.normalize_dimensions({"fitness": True})

    def test_non_mapping_is_rejected(self):
        with self.assertRaises(ValidationError):
            ai.normalize_dimensions(["fitness", 40])


class HabitRecommendationTestCase(unittest.TestCase):
    def test_weakest_habit_below_threshold_is_flagged(self):
        habits = [_habit("A", "wellness", 2), _habit("B", "fitness", 10)]
        titles = [r["title"] for r in ai.habit_recommendations(habits)]
        self.assertIn("Strengthen your A habit", titles)
        self.assertNotIn("Strengthen your B habit", titles)

    def test_no_strengthen_when_all_streaks_are_healthy(self):
        habits = [_habit("A", "wellness", 7), _habit("B", "fitness", 10)]
        titles = [r["title"] for r in ai.habit_recommendations(habits)]
        self.assertFalse(any(title.startswith("Strengthen") for title in titles))

    def test_first_missing_category_is_suggested(self):
        habits = [_habit("A", "fitness", 9), _habit("B", "wellness", 9)]
        recommendations = ai.habit_recommendations(habits)
        self.assertEqual(recommendations[-1]["title"], "Add a learning habit")
        self.assertEqual(recommendations[-1]["category"], "learning")
        self.assertEqual(recommendations[-1]["priority"], 2)

    def test_no_missing_category_suggestion_when_all_present(self):
        habits = [_habit(category.value, category.value, 9) for category in Category]
        self.assertEqual(ai.habit_recommendations(habits), [])

    def test_streaks_use_the_given_day(self):
        days = [TODAY - timedelta(days=offset) for offset in range(8)]
        habit = SimpleNamespace(title="Stretch", category="fitness", completion_days=lambda: days)

        on_the_day = [r["title"] for r in ai.habit_recommendations([habit], today=TODAY)]
        self.assertNotIn("Strengthen your Stretch habit", on_the_day)

        later = [r["title"] for r in ai.habit_recommendations([habit], today=TODAY + timedelta(days=5))]
        self.assertIn("Strengthen your Stretch habit", later)

        recommendations = ai.generate_recommendations({"career": 90}, [habit], [], today=TODAY)
        self.assertFalse(any(r["title"].startswith("Strengthen") for r in recommendations))

    def test_no_habits_suggests_fitness(self):
        recommendations = ai.habit_recommendations([])
        self.assertEqual([r["title"] for r in recommendations], ["Add a fitness habit"])


class CheckinRecommendationTestCase(unittest.TestCase):
    def test_no_checkins_suggests_starting(self):
        recommendations = ai.checkin_recommendations([], TODAY)
        self.assertEqual([r["title"] for r in recommendations], ["Start daily check-ins"])
        self.assertEqual(recommendations[0]["priority"], 1)

    def test_low_average_energy(self):
        recommendations = ai.checkin_recommendations([_checkin(0, 3), _checkin(1, 4)], TODAY)
        self.assertEqual([r["title"] for r in recommendations], ["Improve your energy management"])

    def test_average_at_threshold_is_not_low(self):
        recommendations = ai.checkin_recommendations([_checkin(0, 5), _checkin(1, 5)], TODAY)
        self.assertEqual(recommendations, [])

    def test_only_last_seven_checkins_count_toward_energy(self):
        checkins = [_checkin(days_ago, 1) for days_ago in range(7, 20)]
        checkins += [_checkin(days_ago, 9) for days_ago in range(7)]
        recommendations = ai.checkin_recommendations(checkins, TODAY)
        self.assertEqual(recommendations, [])

    def test_stale_checkins(self):
        recommendations = ai.checkin_recommendations([_checkin(3, 8)], TODAY)
        self.assertEqual([r["title"] for r in recommendations], ["Maintain consistent check-ins"])
        self.assertEqual(recommendations[0]["priority"], 2)

        self.assertEqual(ai.checkin_recommendations([_checkin(2, 8)], TODAY), [])

    def test_staleness_uses_most_recent_checkin(self):
        checkins = [_checkin(0, 8), _checkin(10, 8)]
        self.assertEqual(ai.checkin_recommendations(checkins, TODAY), [])

    def test_thresholds_are_configurable(self):
        recommendations = ai.checkin_recommendations(
            [_checkin(1, 6)], TODAY, low_energy_threshold=7, stale_after_days=0
        )
        self.assertEqual(
            [r["title"] for r in recommendations],
            ["Improve your energy management", "Maintain consistent check-ins"],
        )


class GenerateRecommendationsTestCase(unittest.TestCase):
    def test_sorted_by_priority_with_stable_ties(self):
        recommendations = ai.generate_recommendations({"fitness": 80, "learning": 10}, [], [], today=TODAY)
        self.assertEqual(
            [r["title"] for r in recommendations],
            [
                "Read for 15 minutes daily",
                "Start daily check-ins",
                "Add a fitness habit",
                "Train for a fitness challenge",
            ],
        )

    def test_limit_truncates_after_sorting(self):
        dimensions = {category.value: 10 for category in Category}
        recommendations = ai.generate_recommendations(dimensions, [], [], today=TODAY)
        self.assertEqual(len(recommendations), 8)
        priorities = [r["priority"] for r in recommendations]
        self.assertEqual(priorities, sorted(priorities))

        self.assertEqual(len(ai.generate_recommendations(dimensions, [], [], today=TODAY, limit=3)), 3)

    def test_missing_dimensions_are_rejected(self):
        with self.assertRaises(ValidationError):
            ai.generate_recommendations(None, [], [], today=TODAY)

    def test_uses_habits_and_checkins(self):
        recommendations = ai.generate_recommendations(
            {"career": 90},
            [_habit("Stretch", "fitness", 1)],
            [_checkin(0, 2)],
            today=TODAY,
        )
        titles = [r["title"] for r in recommendations]
        self.assertEqual(titles[:2], ["Strengthen your Stretch habit", "Improve your energy management"])
        self.assertIn("Add a wellness habit", titles)

    def test_starter_recommendation(self):
        starters = ai.starter_recommendations()
        self.assertEqual(len(starters), 1)
        self.assertEqual(starters[0]["title"], "Complete your self-assessment")
        self.assertEqual(starters[0]["category"], "general")


class SelectionTestCase(unittest.TestCase):
    def test_modulo_selection(self):
        self.assertEqual(ModuloSelection().choose(3, 2), 2)
        self.assertEqual(ModuloSelection().choose(3, 4), 1)

    def test_seeded_selection_is_reproducible(self):
        first = [SeededSelection(42).choose(3, 0) for _ in range(5)]
        second = [SeededSelection(42).choose(3, 0) for _ in range(5)]
        self.assertEqual(first, second)

    def test_selection_from_config(self):
        self.assertIsInstance(ai.selection_from_config({}), ModuloSelection)
        chosen = ai.selection_from_config({"TEMPLATE_SELECTION": "random", "TEMPLATE_SEED": 7})
        self.assertIsInstance(chosen, SeededSelection)


class AssessmentQuestionsTestCase(unittest.TestCase):
    def test_questions_per_kind(self):
        ideal = ai.assessment_questions("ideal_self")
        current = ai.assessment_questions("current_self")
        self.assertEqual(len(ideal), 5)
        self.assertEqual({q["type"] for q in current}, {"slider"})

    def test_unknown_kind(self):
        with self.assertRaises(ValidationError):
            ai.assessment_questions("future_self")


if __name__ == "__main__":
    unittest.main()
