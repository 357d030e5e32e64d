"""Recomendaciones estaticas de comida y ejercicio segun banda de glucosa."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Recommendation:
    """One suggested food or workout."""

    name: str
    description: str


@dataclass(frozen=True)
class Recommendations:
    """Food and workout bundle for a glucose band."""

    band: str
    foods: tuple[Recommendation, ...]
    workouts: tuple[Recommendation, ...]


LOW_GLUCOSE = Recommendations(
    band="low",
    foods=(
        Recommendation("Fast-acting Carbs", "Glucose tablets or juice"),
        Recommendation("Fruit", "Banana or apple"),
        Recommendation("Honey", "Natural sugar source"),
    ),
    workouts=(
        Recommendation("Rest", "Until glucose normalizes"),
        Recommendation("Light Walking", "5-10 minutes"),
        Recommendation("Gentle Stretching", "5 minutes"),
    ),
)

NORMAL_GLUCOSE = Recommendations(
    band="normal",
    foods=(
        Recommendation("Whole Grain Foods", "Low glycemic index"),
        Recommendation("Leafy Greens", "Rich in minerals"),
        Recommendation("Fatty Fish", "Omega-3 fatty acids"),
    ),
    workouts=(
        Recommendation("Brisk Walking", "30 minutes"),
        Recommendation("Cycling", "20 minutes"),
        Recommendation("Light Yoga", "15 minutes"),
    ),
)

HIGH_GLUCOSE = Recommendations(
    band="high",
    foods=(
        Recommendation("Leafy Greens", "Low carb vegetables"),
        Recommendation("Lean Protein", "Chicken or fish"),
        Recommendation("Water", "Stay hydrated"),
    ),
    workouts=(
        Recommendation("Brisk Walking", "30 minutes"),
        Recommendation("Swimming", "20 minutes"),
        Recommendation("Cycling", "15 minutes"),
    ),
)


def recommend_for(glucose: float) -> Recommendations:
    """Pick the bundle for ``glucose``: < 70 low, > 180 high, else normal."""
    if glucose < 70:
        return LOW_GLUCOSE
    if glucose > 180:
        return HIGH_GLUCOSE
    return NORMAL_GLUCOSE


@dataclass(frozen=True)
class CatalogItem:
    """Entry of the food or workout catalogue."""

    id: str
    name: str
    description: str
    tags: tuple[str, ...]
    duration: str | None = None
    intensity: str | None = None


FOOD_CATALOG: tuple[CatalogItem, ...] = (
    CatalogItem(
        "1",
        "Grilled Salmon",
        "Rich in omega-3 fatty acids that support heart health and may help "
        "regulate blood sugar.",
        ("protein-rich", "low-glycemic"),
    ),
    CatalogItem(
        "2",
        "Mixed Green Salad",
        "Leafy greens provide essential nutrients and fiber that help manage "
        "blood glucose levels.",
        ("high-fiber", "low-calorie"),
    ),
    CatalogItem(
        "3",
        "Overnight Oats",
        "Whole grain oats provide slow-releasing carbohydrates to maintain "
        "stable blood sugar levels.",
        ("high-fiber", "medium-glycemic"),
    ),
    CatalogItem(
        "4",
        "Greek Yogurt with Berries",
        "High in protein and probiotics with antioxidant-rich berries to "
        "support gut health.",
        ("protein-rich", "probiotic"),
    ),
    CatalogItem(
        "5",
        "Avocado Toast on Whole Grain",
        "Healthy fats and fiber to help maintain steady blood sugar levels "
        "throughout the day.",
        ("heart-healthy", "high-fiber"),
    ),
    CatalogItem(
        "6",
        "Quinoa Bowl with Vegetables",
        "Complete protein with complex carbs for sustained energy and stable "
        "glucose.",
        ("protein-rich", "high-fiber"),
    ),
)

WORKOUT_CATALOG: tuple[CatalogItem, ...] = (
    CatalogItem(
        "1",
        "Brisk Walking",
        "Low-impact exercise that's excellent for cardiovascular health and "
        "blood sugar management.",
        ("low-impact", "beginner-friendly", "cardio"),
        duration="30 minutes",
        intensity="Low",
    ),
    CatalogItem(
        "2",
        "Swimming",
        "Full-body workout that's gentle on joints while improving heart "
        "health and circulation.",
        ("low-impact", "full-body", "cardio"),
        duration="20-30 minutes",
        intensity="Low-Medium",
    ),
    CatalogItem(
        "3",
        "Yoga",
        "Combines gentle stretching with breathing techniques to reduce "
        "stress and improve flexibility.",
        ("low-impact", "flexibility", "stress-reducing"),
        duration="15-20 minutes",
        intensity="Low",
    ),
    CatalogItem(
        "4",
        "Stationary Cycling",
        "Low-impact cardio exercise that improves leg strength and "
        "cardiovascular health.",
        ("low-impact", "cardio", "leg-strengthening"),
        duration="20 minutes",
        intensity="Medium",
    ),
    CatalogItem(
        "5",
        "Resistance Band Training",
        "Gentle strength training that helps build muscle and improve "
        "metabolism.",
        ("strength-training", "beginner-friendly", "full-body"),
        duration="15-20 minutes",
        intensity="Low-Medium",
    ),
    CatalogItem(
        "6",
        "Tai Chi",
        "Gentle flowing movements that improve balance, reduce stress, and "
        "enhance circulation.",
        ("low-impact", "balance", "stress-reducing"),
        duration="15 minutes",
        intensity="Low",
    ),
)


def filter_catalog(
    catalog: tuple[CatalogItem, ...], tag: str = "all"
) -> list[CatalogItem]:
    """Catalogue entries carrying ``tag``; ``"all"`` returns everything."""
    if tag == "all":
        return list(catalog)
    return [item for item in catalog if tag in item.tags]
