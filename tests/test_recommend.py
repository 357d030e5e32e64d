from __future__ import annotations

from gluco_track.recommend import (
    FOOD_CATALOG,
    HIGH_GLUCOSE,
    LOW_GLUCOSE,
    NORMAL_GLUCOSE,
    WORKOUT_CATALOG,
    filter_catalog,
    recommend_for,
)


def test_recommend_for_bands() -> None:
    assert recommend_for(69) is LOW_GLUCOSE
    assert recommend_for(70) is NORMAL_GLUCOSE
    assert recommend_for(180) is NORMAL_GLUCOSE
    assert recommend_for(181) is HIGH_GLUCOSE


def test_bundles_have_three_foods_and_workouts() -> None:
    for bundle in (LOW_GLUCOSE, NORMAL_GLUCOSE, HIGH_GLUCOSE):
        assert len(bundle.foods) == 3
        assert len(bundle.workouts) == 3
    assert LOW_GLUCOSE.foods[0].name == "Fast-acting Carbs"
    assert HIGH_GLUCOSE.workouts[1].name == "Swimming"


def test_filter_catalog_by_tag() -> None:
    assert len(filter_catalog(FOOD_CATALOG)) == 6
    fiber = filter_catalog(FOOD_CATALOG, "high-fiber")
    assert [item.name for item in fiber] == [
        "Mixed Green Salad",
        "Overnight Oats",
        "Avocado Toast on Whole Grain",
        "Quinoa Bowl with Vegetables",
    ]
    stress = filter_catalog(WORKOUT_CATALOG, "stress-reducing")
    assert [item.name for item in stress] == ["Yoga", "Tai Chi"]
    assert filter_catalog(WORKOUT_CATALOG, "nope") == []
