"""Behaviour of the content filter routine."""

from __future__ import annotations

import itertools

from app.filtering import filter_items, matches_search, sort_by_title
from app.models import CatalogItem, ContentFilter


def make_item(item_id: int, title: str, **overrides: object) -> CatalogItem:
    data: dict[str, object] = {
        "id": item_id,
        "title": title,
        "year": "2020",
        "rating": "12",
        "genre": "Drama",
        "description": "No description available",
        "image_url": "https://example.com/poster.jpg",
        "type": "movie",
        "language": "English",
        "tmdb_id": 1000 + item_id,
    }
    data.update(overrides)
    return CatalogItem(**data)


ITEMS = [
    make_item(1, "Squid Game", rating="15", genre="Action & Adventure", language="Korean", type="series"),
    make_item(2, "Paddington", rating="PG", genre="Family", description="A bear from Peru visits London."),
    make_item(3, "alice in borderland", rating="15", genre="Mystery", language="Japanese", type="series"),
    make_item(4, "The Crown", rating="15", genre="Drama", type="series"),
    make_item(5, "Klaus", rating="PG", genre="Animation", language="Spanish"),
    make_item(6, "Money Heist", rating="15", genre="Crime", language="Spanish", type="series"),
    make_item(7, "Roma", rating="15", genre="Drama", language="Spanish"),
]


def titles(items: list[CatalogItem]) -> list[str]:
    return [item.title for item in items]


def test_empty_filter_returns_everything_sorted():
    result = filter_items(ITEMS, ContentFilter())

    assert len(result) == len(ITEMS)
    assert titles(result) == [
        "alice in borderland",
        "Klaus",
        "Money Heist",
        "Paddington",
        "Roma",
        "Squid Game",
        "The Crown",
    ]


def test_values_within_a_category_are_alternatives():
    result = filter_items(ITEMS, ContentFilter(ratings={"PG", "U"}))

    assert titles(result) == ["Klaus", "Paddington"]


def test_categories_are_combined():
    result = filter_items(
        ITEMS, ContentFilter(ratings={"15"}, languages={"Spanish"}, genres={"Drama", "Crime"})
    )

    assert titles(result) == ["Money Heist", "Roma"]


def test_search_matches_title_genre_and_description():
    assert titles(filter_items(ITEMS, ContentFilter(search="ALICE"))) == ["alice in borderland"]
    assert titles(filter_items(ITEMS, ContentFilter(search="animation"))) == ["Klaus"]
    assert titles(filter_items(ITEMS, ContentFilter(search=" peru "))) == ["Paddington"]


def test_unknown_values_return_nothing():
    assert filter_items(ITEMS, ContentFilter(genres={"Western"})) == []


def test_filter_is_idempotent():
    content_filter = ContentFilter(ratings={"15"}, languages={"Spanish", "Korean"})

    once = filter_items(ITEMS, content_filter)
    twice = filter_items(once, content_filter)

    assert once == twice


def test_filter_categories_commute():
    single_filters = [
        ContentFilter(ratings={"15"}),
        ContentFilter(languages={"Spanish"}),
        ContentFilter(genres={"Drama", "Crime"}),
        ContentFilter(search="o"),
    ]
    combined = filter_items(
        ITEMS,
        ContentFilter(
            ratings={"15"}, languages={"Spanish"}, genres={"Drama", "Crime"}, search="o"
        ),
    )

    for order in itertools.permutations(single_filters):
        result = list(ITEMS)
        for content_filter in order:
            result = filter_items(result, content_filter)
        assert result == combined


def test_results_are_always_sorted():
    for content_filter in (
        ContentFilter(),
        ContentFilter(ratings={"15"}),
        ContentFilter(search="a"),
    ):
        result = filter_items(reversed(ITEMS), content_filter)
        assert result == sort_by_title(result)


def test_sort_breaks_ties_by_id():
    first = make_item(9, "Dark")
    second = make_item(8, "Dark")

    assert [item.id for item in sort_by_title([first, second])] == [8, 9]


def test_matches_search_blank_query_accepts_item():
    assert matches_search(ITEMS[0], "   ") is True
