"""Longest-processing-time-first distribution of filters across partitions."""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from shardplan.log import TRACE, TRACE_ALL

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass
class Partition:
    """Filters assigned to one parallel executor."""

    index: int
    """Zero-based partition index."""

    keys: list[str] = field(default_factory=list)
    """Filter keys in assignment order."""

    duration: timedelta = field(default_factory=timedelta)
    """Cumulative duration of the assigned filters."""


def order_items(leaves: Mapping[str, timedelta]) -> list[tuple[str, timedelta]]:
    """Return items largest first; equal durations are ordered by key."""
    return sorted(leaves.items(), key=lambda item: (-item[1], item[0]))


def partition(leaves: Mapping[str, timedelta], k: int) -> list[Partition]:
    """Distribute *leaves* across *k* partitions, largest item first.

    Each item goes to the partition with the smallest running total, the
    lowest index winning ties. The resulting makespan is within
    ``4/3 - 1/(3k)`` of the optimum.

    Args:
        leaves: Filter key -> duration.
        k: Number of partitions.

    Returns:
        Exactly *k* partitions; empty ones when there are fewer items.

    Raises:
        ValueError: If *k* is less than 1.
    """
    if k < 1:
        msg = f"parallelization must be >= 1, got {k}"
        raise ValueError(msg)

    parts = [Partition(index=i) for i in range(k)]
    loads: list[tuple[timedelta, int]] = [(timedelta(0), i) for i in range(k)]

    for key, duration in order_items(leaves):
        load, smallest = heapq.heappop(loads)
        target = parts[smallest]
        logger.log(TRACE, "Assigning %s (%s) to partition %d at %s", key, duration, smallest, load)
        target.keys.append(key)
        target.duration = load + duration
        heapq.heappush(loads, (target.duration, smallest))
        logger.log(TRACE_ALL, "Partition %d now holds %s", smallest, target.keys)

    return parts


def makespan(partitions: Sequence[Partition]) -> timedelta:
    """Return the largest partition duration."""
    return max((p.duration for p in partitions), default=timedelta(0))
