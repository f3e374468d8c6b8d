"""Rule-based blueprint, habit and recommendation generation.

Everything here is a pure function over plain inputs. Variety in template
selection comes from a selection strategy object so callers can make the
output reproducible.
"""

import random
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Sequence

from lifealign.errors import ValidationError
from lifealign.progress import current_streak


class Category(str, Enum):
    FITNESS = "fitness"
    CAREER = "career"
    RELATIONSHIPS = "relationships"
    LEARNING = "learning"
    WELLNESS = "wellness"

    @classmethod
    def parse(cls, value):
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class Tier(str, Enum):
    FOUNDATION = "foundation"
    OPTIMIZATION = "optimization"
    ADVANCED = "advanced"

    @property
    def priority(self) -> int:
        return TIER_PRIORITY[self]


TIER_PRIORITY = {
    Tier.FOUNDATION: 1,
    Tier.OPTIMIZATION: 2,
    Tier.ADVANCED: 3,
}

# Order in which missing habit categories are reported.
HABIT_CATEGORY_ORDER = (
    Category.FITNESS,
    Category.WELLNESS,
    Category.LEARNING,
    Category.CAREER,
    Category.RELATIONSHIPS,
)

WEAK_STREAK_DAYS = 7
RECENT_CHECKIN_WINDOW = 7
MIN_GENERATED_HABITS = 5
MAX_GENERATED_HABITS = 6


def tier_for_score(score: int) -> Tier:
    if score < 40:
        return Tier.FOUNDATION
    if score < 70:
        return Tier.OPTIMIZATION
    return Tier.ADVANCED


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class ModuloSelection:
    """Pick ``key % options``; the same input always yields the same template."""

    def choose(self, options: int, key: int) -> int:
        return key % options


class SeededSelection:
    def __init__(self, seed=None):
        self._rng = random.Random(seed)

    def choose(self, options: int, key: int) -> int:
        return self._rng.randrange(options)


def selection_from_config(config: Mapping):
    strategy = str(config.get("TEMPLATE_SELECTION") or "modulo").strip().lower()
    if strategy == "random":
        return SeededSelection(config.get("TEMPLATE_SEED"))
    return ModuloSelection()


BLUEPRINT_TEMPLATES = [
    {
        "identity_goal": (
            "I want to become a more disciplined, creative, and mindful person who consistently "
            "works toward my goals and maintains meaningful relationships."
        ),
        "current_state": (
            "I'm currently struggling with consistency in my habits but have strong motivation "
            "to improve my personal and professional life."
        ),
        "focus_areas": [
            {"name": "Personal Development", "description": "Building self-discipline and consistent habits", "priority": 5},
            {"name": "Health & Fitness", "description": "Maintaining physical and mental well-being", "priority": 4},
            {"name": "Creative Expression", "description": "Exploring and developing creative talents", "priority": 3},
            {"name": "Mindfulness", "description": "Practicing presence and emotional awareness", "priority": 4},
            {"name": "Relationships", "description": "Nurturing meaningful connections", "priority": 3},
        ],
    },
    {
        "identity_goal": (
            "I aspire to be a confident leader who balances professional success with personal "
            "well-being and contributes positively to my community."
        ),
        "current_state": (
            "I have good skills but need to work on self-confidence and time management to "
            "reach my full potential."
        ),
        "focus_areas": [
            {"name": "Leadership Skills", "description": "Developing confidence and communication abilities", "priority": 5},
            {"name": "Work-Life Balance", "description": "Managing time effectively between work and personal life", "priority": 4},
            {"name": "Community Involvement", "description": "Contributing meaningfully to my community", "priority": 3},
            {"name": "Self-Care", "description": "Prioritizing mental and physical health", "priority": 4},
            {"name": "Professional Growth", "description": "Advancing career skills and opportunities", "priority": 4},
        ],
    },
    {
        "identity_goal": (
            "I want to become someone who lives authentically, maintains excellent physical and "
            "mental health, and pursues lifelong learning."
        ),
        "current_state": (
            "I'm in a transition phase where I'm discovering what truly matters to me and "
            "building better daily routines."
        ),
        "focus_areas": [
            {"name": "Authentic Living", "description": "Aligning actions with personal values", "priority": 5},
            {"name": "Physical Health", "description": "Maintaining fitness and energy levels", "priority": 4},
            {"name": "Mental Wellness", "description": "Cultivating emotional resilience and clarity", "priority": 4},
            {"name": "Continuous Learning", "description": "Pursuing new knowledge and skills", "priority": 3},
            {"name": "Routine Building", "description": "Establishing consistent daily practices", "priority": 3},
        ],
    },
]

HABIT_TEMPLATES = [
    {
        "title": "Morning Meditation",
        "description": "10-minute mindfulness meditation to start the day centered",
        "category": Category.WELLNESS.value,
        "focus_area": "Mindfulness",
        "duration": 10,
        "time_of_day": "7:00 AM",
    },
    {
        "title": "Daily Journaling",
        "description": "Reflect on goals, gratitude, and personal insights",
        "category": Category.WELLNESS.value,
        "focus_area": "Personal Development",
        "duration": 15,
        "time_of_day": "9:00 PM",
    },
    {
        "title": "Exercise Session",
        "description": "Physical activity to maintain health and energy",
        "category": Category.FITNESS.value,
        "focus_area": "Physical Health",
        "duration": 30,
        "time_of_day": "6:00 AM",
    },
    {
        "title": "Read for Growth",
        "description": "Read books or articles related to personal development",
        "category": Category.LEARNING.value,
        "focus_area": "Continuous Learning",
        "duration": 20,
        "time_of_day": "8:00 PM",
    },
    {
        "title": "Creative Practice",
        "description": "Engage in a creative activity (writing, art, music, etc.)",
        "category": Category.LEARNING.value,
        "focus_area": "Creative Expression",
        "duration": 25,
        "time_of_day": None,
    },
    {
        "title": "Connect with Others",
        "description": "Reach out to friends, family, or colleagues meaningfully",
        "category": Category.RELATIONSHIPS.value,
        "focus_area": "Relationships",
        "duration": 15,
        "time_of_day": None,
    },
    {
        "title": "Plan Tomorrow",
        "description": "Review goals and set priorities for the next day",
        "category": Category.CAREER.value,
        "focus_area": "Personal Development",
        "duration": 10,
        "time_of_day": "9:30 PM",
    },
]

RECOMMENDATION_TEMPLATES = {
    Category.FITNESS: {
        Tier.FOUNDATION: [
            {
                "title": "Start with 10-minute daily walks",
                "description": "Begin building fitness habits with low-impact, manageable daily movement.",
                "impact": "+25% fitness foundation",
            },
            {
                "title": "Track your water intake",
                "description": "Proper hydration is fundamental to physical health and energy levels.",
                "impact": "+15% energy levels",
            },
        ],
        Tier.OPTIMIZATION: [
            {
                "title": "Add strength training 2x/week",
                "description": "Build on your cardio foundation with resistance training for muscle development.",
                "impact": "+20% strength gains",
            },
        ],
        Tier.ADVANCED: [
            {
                "title": "Train for a fitness challenge",
                "description": "Set an ambitious fitness goal like a race or competition to push your limits.",
                "impact": "+15% performance optimization",
            },
        ],
    },
    Category.CAREER: {
        Tier.FOUNDATION: [
            {
                "title": "Define your career vision",
                "description": "Spend time clarifying what you want from your professional life.",
                "impact": "+30% career clarity",
            },
            {
                "title": "Update your professional profile",
                "description": "Make sure your professional presence reflects your current skills and goals.",
                "impact": "+20% networking opportunities",
            },
        ],
        Tier.OPTIMIZATION: [
            {
                "title": "Set quarterly professional goals",
                "description": "Create specific, measurable goals to advance your career systematically.",
                "impact": "+25% career progression",
            },
        ],
        Tier.ADVANCED: [
            {
                "title": "Mentor someone in your field",
                "description": "Share your expertise by mentoring others while deepening your own knowledge.",
                "impact": "+20% leadership skills",
            },
        ],
    },
    Category.RELATIONSHIPS: {
        Tier.FOUNDATION: [
            {
                "title": "Schedule weekly friend/family time",
                "description": "Block dedicated time for meaningful connections with people you care about.",
                "impact": "+35% relationship satisfaction",
            },
        ],
        Tier.OPTIMIZATION: [
            {
                "title": "Practice active listening",
                "description": "Improve relationship quality by focusing on truly understanding others.",
                "impact": "+20% relationship depth",
            },
        ],
        Tier.ADVANCED: [
            {
                "title": "Plan meaningful experiences",
                "description": "Create lasting memories by organizing special activities with loved ones.",
                "impact": "+15% relationship richness",
            },
        ],
    },
    Category.LEARNING: {
        Tier.FOUNDATION: [
            {
                "title": "Read for 15 minutes daily",
                "description": "Start a consistent learning habit with just 15 minutes of reading each day.",
                "impact": "+40% knowledge growth",
            },
        ],
        Tier.OPTIMIZATION: [
            {
                "title": "Take an online course",
                "description": "Deepen your knowledge in an area of interest with structured learning.",
                "impact": "+30% skill development",
            },
        ],
        Tier.ADVANCED: [
            {
                "title": "Teach others what you know",
                "description": "Solidify your knowledge by teaching or creating content in your areas of expertise.",
                "impact": "+25% knowledge retention",
            },
        ],
    },
    Category.WELLNESS: {
        Tier.FOUNDATION: [
            {
                "title": "Practice 5-minute meditation",
                "description": "Begin a mindfulness practice with short, manageable meditation sessions.",
                "impact": "+30% stress reduction",
            },
        ],
        Tier.OPTIMIZATION: [
            {
                "title": "Establish a wind-down routine",
                "description": "Create a consistent evening routine to improve sleep quality and mental wellness.",
                "impact": "+25% sleep quality",
            },
        ],
        Tier.ADVANCED: [
            {
                "title": "Explore advanced mindfulness",
                "description": "Deepen your practice with advanced meditation techniques or retreats.",
                "impact": "+20% mindfulness mastery",
            },
        ],
    },
}


def check_recommendation_templates(table: Mapping) -> None:
    missing = [
        f"{category.value}/{tier.value}"
        for category in Category
        for tier in Tier
        if not table.get(category, {}).get(tier)
    ]
    if missing:
        raise RuntimeError(f"Recommendation templates missing for: {', '.join(missing)}")


check_recommendation_templates(RECOMMENDATION_TEMPLATES)


ASSESSMENT_QUESTIONS = {
    "ideal_self": [
        {
            "id": "fitness_goal",
            "question": "Describe your ideal fitness level and physical health. What does being physically at your best look like to you?",
            "category": "fitness",
            "type": "text",
        },
        {
            "id": "career_goal",
            "question": "What does your ideal career look like? Describe your dream job, work environment, and professional achievements.",
            "category": "career",
            "type": "text",
        },
        {
            "id": "relationship_goal",
            "question": "How do you envision your ideal relationships? What kind of connections do you want with family, friends, and partners?",
            "category": "relationships",
            "type": "text",
        },
        {
            "id": "learning_goal",
            "question": "What knowledge and skills do you want to develop? What subjects fascinate you and how do you want to grow?",
            "category": "learning",
            "type": "text",
        },
        {
            "id": "wellness_goal",
            "question": "Describe your ideal state of mental and emotional wellness. How do you want to feel on a daily basis?",
            "category": "wellness",
            "type": "text",
        },
    ],
    "current_self": [
        {
            "id": "fitness_current",
            "question": "Rate your current fitness level and physical health (1-100)",
            "category": "fitness",
            "type": "slider",
            "min": 1,
            "max": 100,
        },
        {
            "id": "career_current",
            "question": "Rate your current career satisfaction and professional fulfillment (1-100)",
            "category": "career",
            "type": "slider",
            "min": 1,
            "max": 100,
        },
        {
            "id": "relationship_current",
            "question": "Rate your current relationship satisfaction and social connections (1-100)",
            "category": "relationships",
            "type": "slider",
            "min": 1,
            "max": 100,
        },
        {
            "id": "learning_current",
            "question": "Rate your current learning and personal growth (1-100)",
            "category": "learning",
            "type": "slider",
            "min": 1,
            "max": 100,
        },
        {
            "id": "wellness_current",
            "question": "Rate your current mental and emotional wellness (1-100)",
            "category": "wellness",
            "type": "slider",
            "min": 1,
            "max": 100,
        },
    ],
}


def assessment_questions(kind: str) -> list[dict]:
    questions = ASSESSMENT_QUESTIONS.get((kind or "").strip().lower())
    if questions is None:
        raise ValidationError("Assessment type must be ideal_self or current_self.")
    return [dict(question) for question in questions]


def _get(item, name, default=None):
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _focus_area_names(blueprint) -> list[str]:
    names = []
    for area in _get(blueprint, "focus_areas") or []:
        name = area if isinstance(area, str) else _get(area, "name")
        if name:
            names.append(str(name))
    return names


def _copy_focus_areas(areas) -> list[dict]:
    copied = []
    for area in areas or []:
        if isinstance(area, str):
            copied.append({"name": area, "description": "", "priority": 3})
            continue
        copied.append(
            {
                "name": _get(area, "name"),
                "description": _get(area, "description") or "",
                "priority": clamp(int(_get(area, "priority", 3)), 1, 5),
            }
        )
    return copied


def generate_blueprint(responses: Sequence[str], selection=None) -> dict:
    if not isinstance(responses, (list, tuple)) or not responses:
        raise ValidationError("Responses array is required.")
    if not all(isinstance(response, str) for response in responses):
        raise ValidationError("Responses must be strings.")

    selection = selection or ModuloSelection()
    template = BLUEPRINT_TEMPLATES[selection.choose(len(BLUEPRINT_TEMPLATES), len(responses))]
    return {
        "identity_goal": template["identity_goal"],
        "current_state": template["current_state"],
        "focus_areas": _copy_focus_areas(template["focus_areas"]),
    }


def generate_habits(blueprint, selection=None) -> list[dict]:
    if blueprint is None:
        raise ValidationError("A blueprint is required to generate habits.")

    selection = selection or ModuloSelection()
    focus_names = {name.lower() for name in _focus_area_names(blueprint)}

    # Matching focus areas first; sorted() keeps table order within each group.
    ordered = sorted(
        HABIT_TEMPLATES,
        key=lambda template: 0 if template["focus_area"].lower() in focus_names else 1,
    )
    span = MAX_GENERATED_HABITS - MIN_GENERATED_HABITS + 1
    count = MIN_GENERATED_HABITS + selection.choose(span, len(focus_names))
    return [dict(template) for template in ordered[:count]]


def refine_blueprint(blueprint, new_goals: str | None = None, feedback: str | None = None, selection=None) -> dict:
    selection = selection or ModuloSelection()
    identity_goal = (new_goals or "").strip() or _get(blueprint, "identity_goal")

    refined_areas = []
    for index, area in enumerate(_copy_focus_areas(_get(blueprint, "focus_areas"))):
        delta = 1 if selection.choose(2, index) else -1
        area["priority"] = clamp(area["priority"] + delta, 1, 5)
        refined_areas.append(area)

    return {
        "identity_goal": identity_goal,
        "current_state": _get(blueprint, "current_state"),
        "focus_areas": refined_areas,
    }


def _recommendation(title, description, category, impact, priority, tier=None):
    return {
        "title": title,
        "description": description,
        "category": category,
        "impact": impact,
        "priority": priority,
        "tier": tier,
    }


def starter_recommendations() -> list[dict]:
    return [
        _recommendation(
            "Complete your self-assessment",
            "Take the ideal self and current self assessments to get personalized recommendations.",
            "general",
            "+50% recommendation accuracy",
            1,
        )
    ]


def normalize_dimensions(dimensions) -> dict:
    if not isinstance(dimensions, Mapping):
        raise ValidationError("Dimension scores must be a mapping of category to score.")

    normalized = {}
    for key, raw_score in dimensions.items():
        category = Category.parse(key)
        if category is None:
            raise ValidationError(f"Unknown dimension: {key}.")
        if isinstance(raw_score, bool):
            raise ValidationError(f"Score for {key} must be a number.")
        try:
            score = int(round(float(raw_score)))
        except (TypeError, ValueError):
            raise ValidationError(f"Score for {key} must be a number.")
        normalized[category.value] = clamp(score, 0, 100)
    return normalized


def dimension_recommendations(dimensions) -> list[dict]:
    recommendations = []
    for key, score in normalize_dimensions(dimensions).items():
        category = Category(key)
        tier = tier_for_score(score)
        for template in RECOMMENDATION_TEMPLATES[category][tier]:
            recommendations.append(
                _recommendation(
                    template["title"],
                    template["description"],
                    category.value,
                    template["impact"],
                    tier.priority,
                    tier.value,
                )
            )
    return recommendations


def _habit_streak(habit, today: date) -> int:
    completion_days = _get(habit, "completion_days")
    if callable(completion_days):
        return current_streak(completion_days(), today)
    return _get(habit, "current_streak") or 0


def habit_recommendations(habits: Sequence, today: date | None = None) -> list[dict]:
    today = today or date.today()
    recommendations = []

    streaks = [(_habit_streak(habit, today), habit) for habit in habits]
    weakest_streak, weakest = min(streaks, key=lambda pair: pair[0], default=(None, None))
    if weakest is not None and weakest_streak < WEAK_STREAK_DAYS:
        title = _get(weakest, "title")
        recommendations.append(
            _recommendation(
                f"Strengthen your {title} habit",
                f"Your {title} habit needs attention. Try habit stacking by linking it to an existing strong routine.",
                _get(weakest, "category"),
                "+40% habit consistency",
                1,
            )
        )

    present = {Category.parse(_get(habit, "category")) for habit in habits}
    missing = [category for category in HABIT_CATEGORY_ORDER if category not in present]
    if missing:
        category = missing[0].value
        recommendations.append(
            _recommendation(
                f"Add a {category} habit",
                f"You don't have any {category} habits yet. Consider adding one to create a more balanced routine.",
                category,
                "+30% life balance",
                2,
            )
        )

    return recommendations


def _as_day(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid check-in date: {value}.")


def checkin_recommendations(
    checkins: Sequence,
    today: date,
    low_energy_threshold: int = 5,
    stale_after_days: int = 2,
) -> list[dict]:
    if not checkins:
        return [
            _recommendation(
                "Start daily check-ins",
                "Regular self-reflection through daily check-ins will help track your emotional patterns and progress.",
                Category.WELLNESS.value,
                "+50% self-awareness",
                1,
            )
        ]

    recommendations = []
    recent = sorted(checkins, key=lambda checkin: _as_day(_get(checkin, "day")))[-RECENT_CHECKIN_WINDOW:]
    energy_values = [_get(checkin, "energy_level") or 0 for checkin in recent]
    average_energy = sum(energy_values) / len(energy_values)

    if average_energy < low_energy_threshold:
        recommendations.append(
            _recommendation(
                "Improve your energy management",
                "Your recent energy levels are below average. Focus on sleep, nutrition, and stress management.",
                Category.WELLNESS.value,
                "+30% daily energy",
                1,
            )
        )

    days_since_last = (today - _as_day(_get(recent[-1], "day"))).days
    if days_since_last > stale_after_days:
        recommendations.append(
            _recommendation(
                "Maintain consistent check-ins",
                "Regular check-ins help you stay aware of your patterns and progress. Try setting a daily reminder.",
                Category.WELLNESS.value,
                "+25% self-awareness",
                2,
            )
        )

    return recommendations


def generate_recommendations(
    dimensions,
    habits: Sequence,
    checkins: Sequence,
    today: date | None = None,
    limit: int = 8,
    low_energy_threshold: int = 5,
    stale_after_days: int = 2,
) -> list[dict]:
    if dimensions is None:
        raise ValidationError("Dimension scores are required.")

    today = today or date.today()
    recommendations = dimension_recommendations(dimensions)
    recommendations.extend(habit_recommendations(list(habits or []), today))
    recommendations.extend(
        checkin_recommendations(
            list(checkins or []),
            today,
            low_energy_threshold=low_energy_threshold,
            stale_after_days=stale_after_days,
        )
    )

    # sorted() is stable, so equal priorities keep generation order.
    ranked = sorted(recommendations, key=lambda recommendation: recommendation["priority"])
    return ranked[: max(0, limit)]
