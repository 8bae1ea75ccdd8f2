"""Tests for the search ranker."""

import pytest

from dayplan.core.search import (
    CompletionFilter,
    MatchTier,
    SearchKind,
    filter_by_completion,
    match_tier,
    rank,
)
from dayplan.core.tasks import Label, TaskList


@pytest.fixture
def groceries(make_task):
    return [make_task("Buy milk"), make_task("Buy bread"), make_task("Call mom")]


def hit_names(hits):
    return [h.item.name for h in hits]


class TestRank:
    def test_exact_match_first(self, groceries):
        hits = rank("Buy milk", groceries)
        assert hit_names(hits) == ["Buy milk"]
        assert hits[0].tier == MatchTier.EXACT

    def test_substring_case_insensitive(self, groceries):
        hits = rank("buy", groceries)
        assert hit_names(hits) == ["Buy milk", "Buy bread"]
        assert all(h.tier == MatchTier.SUBSTRING for h in hits)

    def test_non_matches_excluded(self, groceries):
        assert "Call mom" not in hit_names(rank("buy", groceries))

    def test_exact_beats_earlier_substring(self, make_task):
        tasks = [make_task("Milk run"), make_task("milk"), make_task("Oat milk")]
        hits = rank("MILK", tasks)
        assert hit_names(hits) == ["milk", "Milk run", "Oat milk"]
        assert [h.score for h in hits] == [2, 1, 1]

    def test_description_substring(self, make_task):
        tasks = [make_task("Errands", description="pick up milk"), make_task("Gym")]
        hits = rank("milk", tasks)
        assert hit_names(hits) == ["Errands"]
        assert hits[0].tier == MatchTier.SUBSTRING

    def test_description_equal_is_not_exact(self, make_task):
        tasks = [make_task("Errands", description="milk")]
        assert rank("milk", tasks)[0].tier == MatchTier.SUBSTRING

    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    def test_blank_query_matches_nothing(self, groceries, query):
        assert rank(query, groceries) == []

    def test_query_whitespace_trimmed(self, groceries):
        assert hit_names(rank("  buy milk ", groceries)) == ["Buy milk"]

    def test_limit_applies_after_ranking(self, make_task):
        tasks = [make_task("tea bags"), make_task("green tea"), make_task("tea")]
        assert hit_names(rank("tea", tasks, limit=1)) == ["tea"]

    def test_limit_zero(self, groceries):
        assert rank("buy", groceries, limit=0) == []

    def test_stable_within_tier(self, make_task):
        tasks = [make_task(f"report {i}") for i in range(10)]
        assert hit_names(rank("report", tasks)) == [f"report {i}" for i in range(10)]

    def test_lists_and_labels(self):
        lists = [TaskList(id="1", name="Work"), TaskList(id="2", name="Homework")]
        labels = [Label(id="a", name="work"), Label(id="b", name="urgent")]
        assert hit_names(rank("work", lists)) == ["Work", "Homework"]
        assert hit_names(rank("work", labels)) == ["work"]

    def test_no_candidates(self):
        assert rank("anything", []) == []


class TestMatchTier:
    def test_none_for_miss(self, make_task):
        assert match_tier("zzz", make_task("Buy milk")) is None

    def test_missing_description(self, make_task):
        assert match_tier("milk", make_task("Bread", description=None)) is None


class TestFilterByCompletion:
    @pytest.fixture
    def tasks(self, make_task):
        return [make_task("open"), make_task("done", completed=True)]

    def test_all(self, tasks):
        assert [t.name for t in filter_by_completion(tasks, CompletionFilter.ALL)] == ["open", "done"]

    def test_active(self, tasks):
        assert [t.name for t in filter_by_completion(tasks, CompletionFilter.ACTIVE)] == ["open"]

    def test_completed(self, tasks):
        assert [t.name for t in filter_by_completion(tasks, CompletionFilter.COMPLETED)] == ["done"]


class TestSearchKind:
    def test_all_includes_everything(self):
        assert all(SearchKind.ALL.includes(k) for k in SearchKind)

    def test_single_kind(self):
        assert SearchKind.TASKS.includes(SearchKind.TASKS)
        assert not SearchKind.TASKS.includes(SearchKind.LABELS)
