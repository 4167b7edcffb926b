"""Coalesce fine-grained test filters into coarser prefixes.

When a filter budget is given, the cheapest group is repeatedly collapsed
into a single leaf named after the group, until the leaf count fits the
budget or nothing is left to collapse. Total duration is conserved; only
the granularity of the keys changes.

Selection uses a min-heap over ``(duration, key)`` with lazy invalidation:
an entry is live only while it still matches the current group map, so
ties are broken by lexicographic key order and never by dict iteration
order.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shardplan.log import TRACE_ALL
from shardplan.sharding.aggregator import ZERO, DurationIndex
from shardplan.sharding.keys import is_in_subtree, up_key

if TYPE_CHECKING:
    from datetime import timedelta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoalesceResult:
    """Outcome of a coalescing pass."""

    index: DurationIndex
    """Index after coalescing (the input index when nothing was merged)."""

    original_count: int
    """Leaf count before coalescing."""

    budget: int | None
    """Requested leaf ceiling, ``None`` when coalescing was skipped."""

    rounds: int = 0
    """Number of groups merged."""

    @property
    def final_count(self) -> int:
        """Leaf count after coalescing."""
        return len(self.index.leaves)

    @property
    def budget_reached(self) -> bool:
        """True when no budget applies or the leaf count fits within it."""
        return self.budget is None or self.final_count <= self.budget


def merge_group(index: DurationIndex, group_key: str) -> DurationIndex:
    """Collapse every leaf under *group_key* into one leaf named *group_key*.

    Group entries at or below *group_key* are dropped because their leaves
    no longer exist. The parent group is then recomputed from its direct
    children when it is already tracked, or when every leaf beneath it is
    now a direct child, which lets collapsing climb several levels.
    """
    merged = ZERO
    leaves: dict[str, timedelta] = {}
    for key, duration in index.leaves.items():
        if is_in_subtree(key, group_key):
            merged += duration
        else:
            leaves[key] = duration
    leaves[group_key] = merged

    groups = {
        key: duration
        for key, duration in index.groups.items()
        if not is_in_subtree(key, group_key)
    }

    parent = up_key(group_key)
    if parent != group_key:
        below_parent = [(key, d) for key, d in leaves.items() if is_in_subtree(key, parent)]
        flat = all(up_key(key) == parent for key, _ in below_parent)
        if flat or parent in groups:
            groups[parent] = sum(
                (d for key, d in below_parent if up_key(key) == parent),
                ZERO,
            )

    return DurationIndex(leaves=leaves, groups=groups)


def coalesce(index: DurationIndex, budget: int | None) -> CoalesceResult:
    """Merge the cheapest groups until at most *budget* leaves remain.

    Args:
        index: Aggregated durations.
        budget: Maximum number of leaves, or ``None`` to skip coalescing.

    Returns:
        A ``CoalesceResult``. When the budget cannot be reached (only
        top-level keys remain) the achieved count is reported as is.

    Raises:
        ValueError: If *budget* is less than 1.
    """
    original_count = len(index.leaves)
    if budget is None:
        return CoalesceResult(index=index, original_count=original_count, budget=None)
    if budget < 1:
        msg = f"budget must be >= 1, got {budget}"
        raise ValueError(msg)

    heap = [(duration, key) for key, duration in index.groups.items()]
    heapq.heapify(heap)

    current = index
    rounds = 0
    while len(current.leaves) > budget:
        group_key = _pop_cheapest(heap, current.groups)
        if group_key is None:
            break

        logger.log(TRACE_ALL, "Coalescing %s: %s", group_key, current.groups[group_key])
        current = merge_group(current, group_key)
        rounds += 1

        parent = up_key(group_key)
        if parent != group_key and parent in current.groups:
            heapq.heappush(heap, (current.groups[parent], parent))

    result = CoalesceResult(
        index=current,
        original_count=original_count,
        budget=budget,
        rounds=rounds,
    )
    if result.budget_reached:
        logger.debug(
            "Coalesced %d leaves into %d in %d rounds (budget %d)",
            original_count,
            result.final_count,
            rounds,
            budget,
        )
    else:
        logger.info(
            "Filter budget %d not reachable: %d top-level filters remain",
            budget,
            result.final_count,
        )
    return result


def _pop_cheapest(
    heap: list[tuple[timedelta, str]],
    groups: dict[str, timedelta],
) -> str | None:
    """Pop the cheapest live group key, skipping stale heap entries."""
    while heap:
        duration, key = heapq.heappop(heap)
        if groups.get(key) == duration:
            return key
    return None
