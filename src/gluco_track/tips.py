"""Consejos de salud estaticos elegidos segun las metricas actuales."""

from __future__ import annotations

from dataclasses import dataclass

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass(frozen=True)
class HealthTip:
    """Static health tip."""

    id: str
    category: str
    title: str
    description: str
    priority: str
    tags: tuple[str, ...]


_TIPS: tuple[HealthTip, ...] = (
    HealthTip(
        "g1",
        "glucose",
        "Lower Your Blood Sugar",
        "Regular physical activity helps lower blood glucose levels. Try to get "
        "at least 30 minutes of moderate exercise most days of the week.",
        "medium",
        ("exercise", "blood sugar", "activity"),
    ),
    HealthTip(
        "g2",
        "glucose",
        "Balanced Diet for Stable Glucose",
        "Include a variety of foods in your diet with a focus on vegetables, "
        "whole grains, lean protein, and healthy fats to maintain stable blood "
        "sugar levels.",
        "medium",
        ("diet", "nutrition", "blood sugar"),
    ),
    HealthTip(
        "g3",
        "glucose",
        "Stay Hydrated",
        "Proper hydration helps your kidneys flush out excess glucose. Aim to "
        "drink at least 8 glasses of water daily.",
        "low",
        ("hydration", "water", "kidney health"),
    ),
    HealthTip(
        "g4",
        "glucose",
        "High Glucose Alert!",
        "Your glucose levels are elevated. Consider reducing carbohydrate "
        "intake and increasing physical activity to help lower blood sugar "
        "levels.",
        "high",
        ("high glucose", "alert", "carbohydrates"),
    ),
    HealthTip(
        "g5",
        "glucose",
        "Low Glucose Warning",
        "Your glucose levels are low. Consider consuming a small amount of "
        "fast-acting carbohydrates, like fruit juice or glucose tablets.",
        "high",
        ("low glucose", "hypoglycemia", "warning"),
    ),
    HealthTip(
        "h1",
        "heartRate",
        "Cardio for Heart Health",
        "Regular cardiovascular exercise like walking, swimming, or cycling can "
        "improve heart efficiency and lower resting heart rate.",
        "medium",
        ("cardio", "exercise", "heart health"),
    ),
    HealthTip(
        "h2",
        "heartRate",
        "Stress Management",
        "High stress levels can increase heart rate. Practice relaxation "
        "techniques like deep breathing, meditation, or yoga.",
        "medium",
        ("stress", "relaxation", "meditation"),
    ),
    HealthTip(
        "h3",
        "heartRate",
        "Elevated Heart Rate",
        "Your heart rate is higher than normal. This could be due to stress, "
        "caffeine, or dehydration. Try to rest and stay hydrated.",
        "medium",
        ("tachycardia", "elevated heart rate", "rest"),
    ),
    HealthTip(
        "h4",
        "heartRate",
        "Caffeine and Heart Rate",
        "Consuming too much caffeine can increase heart rate. Consider limiting "
        "coffee, tea, and energy drinks, especially later in the day.",
        "low",
        ("caffeine", "stimulants", "heart rate"),
    ),
    HealthTip(
        "s1",
        "spo2",
        "Breathing Exercises",
        "Deep breathing exercises can help improve oxygen saturation. Try "
        "taking slow, deep breaths through your nose and exhaling through your "
        "mouth.",
        "medium",
        ("breathing", "oxygen", "lungs"),
    ),
    HealthTip(
        "s2",
        "spo2",
        "Low Oxygen Alert",
        "Your oxygen saturation is lower than optimal. This could be due to "
        "respiratory issues, anemia, or high altitude. Consider consulting a "
        "healthcare provider.",
        "high",
        ("hypoxemia", "low oxygen", "alert"),
    ),
    HealthTip(
        "s3",
        "spo2",
        "Improve Air Quality",
        "Poor air quality can affect oxygen saturation. Consider using an air "
        "purifier in your home and avoiding polluted environments.",
        "low",
        ("air quality", "pollution", "environment"),
    ),
    HealthTip(
        "s4",
        "spo2",
        "Breathing Issues and Sleep",
        "Low oxygen levels can be associated with sleep apnea or other sleep "
        "disorders. Consider discussing your sleep quality with a healthcare "
        "provider.",
        "medium",
        ("sleep", "apnea", "breathing"),
    ),
    HealthTip(
        "gen1",
        "general",
        "Quality Sleep",
        "Aim for 7-9 hours of quality sleep each night. Good sleep helps "
        "regulate glucose metabolism and supports overall health.",
        "medium",
        ("sleep", "rest", "recovery"),
    ),
    HealthTip(
        "gen2",
        "general",
        "Regular Health Check-ups",
        "Schedule regular check-ups with your healthcare provider to monitor "
        "your health metrics and adjust your care plan as needed.",
        "low",
        ("healthcare", "check-ups", "prevention"),
    ),
    HealthTip(
        "gen3",
        "general",
        "Mental Health Matters",
        "Stress and anxiety can affect physical health metrics. Prioritize "
        "mental health through relaxation techniques, social connections, and "
        "seeking support when needed.",
        "medium",
        ("mental health", "stress", "self-care"),
    ),
    HealthTip(
        "gen4",
        "general",
        "Consistent Meal Times",
        "Eating meals at regular times helps maintain stable blood sugar levels "
        "and supports metabolic health.",
        "low",
        ("meal timing", "routine", "metabolism"),
    ),
)

TIPS_BY_ID: dict[str, HealthTip] = {tip.id: tip for tip in _TIPS}


def select_tips(
    glucose: float | None,
    heart_rate: float | None,
    spo2: float | None,
    condition: str | None = None,
) -> list[HealthTip]:
    """Tips for the current readings, high priority first.

    Missing metrics (None) contribute no tips. Two general tips are always
    included, and ``condition == "diabetes"`` adds the glucose basics.
    """
    ids: list[str] = []
    if glucose is not None:
        if glucose > 180:
            ids += ["g4", "g1", "g2"]
        elif glucose < 70:
            ids += ["g5"]
        else:
            ids += ["g2", "g3"]

    if heart_rate is not None:
        if heart_rate > 100:
            ids += ["h3", "h2", "h4"]
        else:
            ids += ["h1"]

    if spo2 is not None:
        if spo2 < 95:
            ids += ["s2", "s1"]
        elif spo2 < 98:
            ids += ["s1", "s3"]

    ids += ["gen1", "gen3"]
    if condition == "diabetes":
        ids += ["g1", "g2"]

    unique = list(dict.fromkeys(ids))
    tips = [TIPS_BY_ID[tip_id] for tip_id in unique]
    return sorted(tips, key=lambda tip: _PRIORITY_ORDER[tip.priority])


def filter_tips(tips: list[HealthTip], category: str = "all") -> list[HealthTip]:
    """Tips of ``category`` plus general ones; ``"all"`` keeps every tip."""
    if category == "all":
        return list(tips)
    return [tip for tip in tips if tip.category in (category, "general")]
