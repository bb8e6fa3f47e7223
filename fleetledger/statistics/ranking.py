"""Mini README: Shared ranking and windowing helpers.

Structure:
    * RankingRow - one ranked entry or an ellipsis placeholder.
    * sort_descending - order entries by a value with an explicit tie-break.
    * rank_with_tail - number ranked entries, then append unranked ones.
    * window - keep the top N and bottom M of a long list around an ellipsis.

Long leaderboards show the first twenty entries, an ellipsis at rank 21, and
the last three entries with their true ranks (``n - 2`` to ``n``). Shorter
lists are shown in full.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

TOP_WINDOW = 20
BOTTOM_WINDOW = 3
SINGLE_TURN_WINDOW_THRESHOLD = 23
REWARD_PENALTY_WINDOW_THRESHOLD = 24


@dataclass(slots=True)
class RankingRow:
    """A leaderboard row; ``entry`` is ``None`` for the ellipsis marker."""

    rank: int
    entry: Optional[Any] = None
    is_ellipsis: bool = False

    def as_dict(self) -> Dict[str, object]:
        if self.is_ellipsis:
            return {"rank": self.rank, "is_ellipsis": True}
        payload = dict(self.entry.as_dict())
        payload["rank"] = self.rank
        payload["is_ellipsis"] = False
        return payload


def sort_descending(
    entries: Iterable[T],
    value: Callable[[T], Any],
    tie_break: Callable[[T], Any],
) -> List[T]:
    """Sort by ``value`` descending, then by ``tie_break`` ascending."""

    # Two stable passes avoid negating values that are not numeric.
    ordered = sorted(entries, key=tie_break)
    return sorted(ordered, key=value, reverse=True)


def rank_with_tail(ranked: Sequence[T], tail: Sequence[T] = ()) -> List[RankingRow]:
    """Rank ``ranked`` from 1 and continue the numbering through ``tail``."""

    rows = [RankingRow(rank=index, entry=entry) for index, entry in enumerate(ranked, start=1)]
    offset = len(rows)
    rows.extend(
        RankingRow(rank=offset + index, entry=entry) for index, entry in enumerate(tail, start=1)
    )
    return rows


def window(
    entries: Sequence[T],
    *,
    threshold: int,
    top: int = TOP_WINDOW,
    bottom: int = BOTTOM_WINDOW,
) -> List[RankingRow]:
    """Rank ``entries``; above ``threshold`` keep only the head and tail."""

    total = len(entries)
    if total <= threshold:
        return rank_with_tail(entries)
    rows = [RankingRow(rank=index, entry=entry) for index, entry in enumerate(entries[:top], start=1)]
    rows.append(RankingRow(rank=top + 1, is_ellipsis=True))
    first_bottom_rank = total - bottom + 1
    rows.extend(
        RankingRow(rank=first_bottom_rank + index, entry=entry)
        for index, entry in enumerate(entries[total - bottom:])
    )
    return rows
