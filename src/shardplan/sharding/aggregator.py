"""Aggregate raw per-test durations into leaf and group totals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from shardplan.sharding.keys import deparameterize, up_key

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

ZERO = timedelta(0)


@dataclass(frozen=True)
class DurationIndex:
    """Leaf and group duration maps for one run.

    Functions in this package never mutate an index; each structural
    change produces a new one.
    """

    leaves: dict[str, timedelta] = field(default_factory=dict)
    """Deparameterized (or coalesced) key -> cumulative duration."""

    groups: dict[str, timedelta] = field(default_factory=dict)
    """Parent key -> cumulative duration of its current direct-child leaves."""

    @property
    def total(self) -> timedelta:
        """Sum of all leaf durations."""
        return sum(self.leaves.values(), ZERO)

    def __len__(self) -> int:
        return len(self.leaves)


def aggregate(records: Iterable[tuple[str, timedelta]]) -> DurationIndex:
    """Sum durations per deparameterized key and per parent key.

    Parameterizations of one method share a deparameterized key and are
    summed together, since a filter selects all of them at once.
    """
    leaves: dict[str, timedelta] = {}
    groups: dict[str, timedelta] = {}
    count = 0

    for name, duration in records:
        leaf = deparameterize(name)
        group = up_key(leaf)
        leaves[leaf] = leaves.get(leaf, ZERO) + duration
        groups[group] = groups.get(group, ZERO) + duration
        count += 1

    logger.debug(
        "Aggregated %d records into %d leaves and %d groups",
        count,
        len(leaves),
        len(groups),
    )
    return DurationIndex(leaves=leaves, groups=groups)
