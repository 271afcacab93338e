"""Tests for turning style suggestions into shopping queries."""

from stylesearch.models.contracts import StyleSuggestion
from stylesearch.services.query_composer import compose_shopping_queries
from tests.factories import make_style_item


def _suggestion(*item_queries: list[str]) -> StyleSuggestion:
    return StyleSuggestion(
        title="Look",
        description="desc",
        items=[make_style_item(q) for q in item_queries],
    )


class TestComposeShoppingQueries:
    def test_flattens_in_encounter_order(self):
        suggestion = _suggestion(["red saree", "silk saree"], ["gold jhumka"])
        assert compose_shopping_queries(suggestion, "red saree") == [
            "red saree",
            "silk saree",
            "gold jhumka",
        ]

    def test_duplicates_are_kept(self):
        suggestion = _suggestion(["kurta"], ["kurta"])
        assert compose_shopping_queries(suggestion, "kurta") == ["kurta", "kurta"]

    def test_all_items_empty_falls_back_to_query(self):
        suggestion = _suggestion([], [])
        assert compose_shopping_queries(suggestion, "lehenga sangeet") == [
            "lehenga sangeet fashion clothes India"
        ]

    def test_no_items_falls_back_to_query(self):
        assert compose_shopping_queries(_suggestion(), "blazer") == ["blazer fashion clothes India"]

    def test_none_suggestion_falls_back_to_query(self):
        assert compose_shopping_queries(None, "dupatta") == ["dupatta fashion clothes India"]

    def test_some_items_empty_only_uses_non_empty(self):
        suggestion = _suggestion([], ["mojari juttis"])
        assert compose_shopping_queries(suggestion, "sherwani") == ["mojari juttis"]
