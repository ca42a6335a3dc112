"""
Top-K aggregation over an append-only stream of (key, score) observations.

A key's score only ever matters at its maximum: observations pushed before a
later, higher one are stale. Rather than trusting raw heap pop order, each
query resolves the best score per key first and then selects the top K, so a
stale low entry can never shadow a fresher high one.
"""
from __future__ import annotations
import heapq
from typing import Any, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
S = TypeVar("S")


class _Ranked:
    """Sort key: higher score first, then lexicographically smaller key."""

    __slots__ = ("score", "key")

    def __init__(self, score: Any, key: Any) -> None:
        self.score = score
        self.key = key

    def __lt__(self, other: "_Ranked") -> bool:
        if self.score != other.score:
            return self.score > other.score
        return self.key < other.key


class TopKAggregator(Generic[K, S]):
    """
    Answers "highest-scoring K distinct keys" over every observation seen.

    Usage:
        recency = TopKAggregator("recency")
        recency.observe("a.txt", t1)
        recency.observe("a.txt", t3)
        recency.top_k(5)    # [("a.txt", t3)]
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._observations: list[tuple[S, K]] = []

    def observe(self, key: K, score: S) -> None:
        self._observations.append((score, key))

    def __len__(self) -> int:
        return len(self._observations)

    def best_scores(self) -> dict[K, S]:
        """Maximum observed score per distinct key."""
        best: dict[K, S] = {}
        for score, key in self._observations:
            current = best.get(key)
            if current is None or score > current:
                best[key] = score
        return best

    def top_k(self, k: int) -> list[tuple[K, S]]:
        """Up to ``k`` (key, score) pairs, best first; ties by key ascending."""
        if k <= 0:
            return []
        ranked = heapq.nsmallest(
            k,
            self.best_scores().items(),
            key=lambda item: _Ranked(item[1], item[0]),
        )
        return [(key, score) for key, score in ranked]
