"""Assemble per-factor split plans from decoded test records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shardplan.sharding.aggregator import DurationIndex, aggregate
from shardplan.sharding.coalescer import CoalesceResult, coalesce
from shardplan.sharding.partitioner import Partition, makespan, partition

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import timedelta

logger = logging.getLogger(__name__)

DEFAULT_PARALLELIZATION: tuple[int, ...] = (2,)


@dataclass
class SplitPlan:
    """Partitions for every requested parallelization factor."""

    index: DurationIndex
    """Leaf durations the partitions were built from (after coalescing)."""

    coalescing: CoalesceResult
    """Summary of the coalescing pass."""

    partitions: dict[int, list[Partition]] = field(default_factory=dict)
    """Factor -> partitions, in requested order."""

    @property
    def factors(self) -> list[int]:
        """Requested factors, de-duplicated, in order."""
        return list(self.partitions)

    def filters(self, factor: int) -> list[list[str]]:
        """Return the filter groups for *factor*."""
        return [list(p.keys) for p in self.partitions[factor]]

    def makespan(self, factor: int) -> timedelta:
        """Return the largest partition duration for *factor*."""
        return makespan(self.partitions[factor])


def normalize_factors(parallelization: Iterable[int]) -> list[int]:
    """De-duplicate factors keeping first-seen order; default to a single 2."""
    factors = list(dict.fromkeys(parallelization))
    if not factors:
        return list(DEFAULT_PARALLELIZATION)
    invalid = [f for f in factors if f < 1]
    if invalid:
        msg = f"parallelization must be >= 1, got {invalid[0]}"
        raise ValueError(msg)
    return factors


def compute_budget(factors: Sequence[int], max_filters: int | None) -> int | None:
    """Return the leaf ceiling ``min(factors) * max_filters``, or None."""
    if max_filters is None:
        return None
    if max_filters < 1:
        msg = f"max_filters must be >= 1, got {max_filters}"
        raise ValueError(msg)
    return min(factors) * max_filters


def build_split_plan(
    records: Iterable[tuple[str, timedelta]],
    parallelization: Iterable[int] = DEFAULT_PARALLELIZATION,
    max_filters: int | None = None,
) -> SplitPlan:
    """Aggregate, optionally coalesce, and partition once per factor.

    Args:
        records: ``(test name, duration)`` pairs from a decoded report.
        parallelization: Factors to split for; empty means a single 2.
        max_filters: Optional per-partition filter ceiling. The overall
            budget is ``min(factors) * max_filters``.

    Returns:
        A ``SplitPlan`` keyed by factor.

    Raises:
        ValueError: If a factor or *max_filters* is less than 1.
    """
    factors = normalize_factors(parallelization)
    budget = compute_budget(factors, max_filters)

    index = aggregate(records)
    logger.debug("Leaf count: %d, group count: %d", len(index.leaves), len(index.groups))

    coalescing = coalesce(index, budget)
    index = coalescing.index
    logger.debug("Leaf count: %d, group count: %d", len(index.leaves), len(index.groups))

    plan = SplitPlan(index=index, coalescing=coalescing)
    for factor in factors:
        parts = partition(index.leaves, factor)
        plan.partitions[factor] = parts
        logger.info(
            "Parallelization %d: %s",
            factor,
            ", ".join(str(p.duration) for p in parts),
        )
        for p in parts:
            logger.debug(
                "Partition %d/%d: %s",
                p.index,
                factor,
                ", ".join(f"{key} ({index.leaves[key]})" for key in p.keys),
            )
    return plan
