"""Tests for cross-source consolidation."""

from conftest import make_item

from feed_aggregator.core import Category, Consolidator, ScrapeResult, normalize_title

TECH = Category.TECHNOLOGY


def _result(source_id: str, items, success: bool = True) -> ScrapeResult:
    if not success:
        return ScrapeResult.failed("down", source_id, source_id, TECH)
    return ScrapeResult.ok(items, source_id, source_id, TECH)


def test_normalize_title() -> None:
    assert normalize_title("Fed Raises Rates") == "fed raises rates"
    assert normalize_title("  fed   raises rates!! ") == "fed raises rates"
    assert len(normalize_title("x" * 300)) == 100


def test_dedup_across_sources_keeps_first_seen() -> None:
    first = make_item("Fed Raises Rates", source="Wire A")
    second = make_item("fed raises rates!!", source="Wire B")

    merged = Consolidator().consolidate([_result("a", [first]), _result("b", [second])])

    assert merged == [first]


def test_sorted_newest_first() -> None:
    items = [
        make_item("One hour", hours_ago=1),
        make_item("Three hours", hours_ago=3),
        make_item("Two hours", hours_ago=2),
    ]

    merged = Consolidator().consolidate([_result("a", items)])

    assert [i.title for i in merged] == ["One hour", "Two hours", "Three hours"]


def test_equal_timestamps_keep_input_order() -> None:
    items = [make_item(f"Story {c}", hours_ago=1) for c in "abc"]

    merged = Consolidator().consolidate([_result("a", items[:2]), _result("b", items[2:])])

    assert [i.title for i in merged] == ["Story a", "Story b", "Story c"]


def test_truncates_to_max_items() -> None:
    items = [make_item(f"Story {i}", hours_ago=i) for i in range(10)]

    merged = Consolidator(max_items=3).consolidate([_result("a", items)])

    assert [i.title for i in merged] == ["Story 0", "Story 1", "Story 2"]


def test_failed_and_empty_results_are_ignored() -> None:
    items = [make_item("Only story")]

    assert Consolidator().consolidate([]) == []
    merged = Consolidator().consolidate([_result("x", [], success=False), _result("y", []), _result("a", items)])
    assert merged == items
