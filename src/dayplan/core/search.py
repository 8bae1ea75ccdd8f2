"""Search ranking - two-tier, stable, no I/O dependencies."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterable, Protocol, TypeVar

from .tasks import Task

DEFAULT_LIMIT = 20


class Searchable(Protocol):
    name: str

    @property
    def description(self) -> str | None: ...


T = TypeVar("T", bound=Searchable)


class MatchTier(Enum):
    """Higher value ranks first."""

    EXACT = 2
    SUBSTRING = 1


class SearchKind(Enum):
    ALL = "all"
    TASKS = "tasks"
    LISTS = "lists"
    LABELS = "labels"

    def includes(self, kind: "SearchKind") -> bool:
        return self == SearchKind.ALL or self == kind


class CompletionFilter(Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SearchHit(Generic[T]):
    item: T
    tier: MatchTier

    @property
    def score(self) -> int:
        return self.tier.value


def match_tier(query: str, item: Searchable) -> MatchTier | None:
    """Tier for one candidate, or None if it doesn't match at all."""
    needle = query.strip().lower()
    if not needle:
        return None
    name = (item.name or "").lower()
    if name == needle:
        return MatchTier.EXACT
    description = (item.description or "").lower()
    if needle in name or needle in description:
        return MatchTier.SUBSTRING
    return None


def rank(query: str, candidates: Iterable[T], limit: int | None = None) -> list[SearchHit[T]]:
    """
    Score candidates against a free-text query.

    Exact name matches rank above substring matches; non-matches are dropped.
    Input order is kept within a tier. The limit applies after ranking.
    Blank queries match nothing.
    """
    if not query.strip():
        return []

    hits = []
    for item in candidates:
        tier = match_tier(query, item)
        if tier is not None:
            hits.append(SearchHit(item=item, tier=tier))

    # sorted() is stable, so equal tiers keep candidate order
    hits = sorted(hits, key=lambda h: -h.tier.value)
    if limit is not None:
        hits = hits[: max(limit, 0)]
    return hits


def filter_by_completion(tasks: Iterable[Task], completed: CompletionFilter) -> list[Task]:
    """Narrow task candidates before ranking."""
    if completed == CompletionFilter.ACTIVE:
        return [t for t in tasks if not t.is_completed]
    if completed == CompletionFilter.COMPLETED:
        return [t for t in tasks if t.is_completed]
    return list(tasks)
