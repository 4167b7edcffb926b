"""Duration-balanced test sharding."""

from shardplan.sharding.aggregator import DurationIndex, aggregate
from shardplan.sharding.coalescer import CoalesceResult, coalesce, merge_group
from shardplan.sharding.keys import deparameterize, is_in_subtree, up_key
from shardplan.sharding.partitioner import Partition, makespan, order_items, partition
from shardplan.sharding.plan import (
    DEFAULT_PARALLELIZATION,
    SplitPlan,
    build_split_plan,
    compute_budget,
    normalize_factors,
)

__all__ = [
    "DEFAULT_PARALLELIZATION",
    "CoalesceResult",
    "DurationIndex",
    "Partition",
    "SplitPlan",
    "aggregate",
    "build_split_plan",
    "coalesce",
    "compute_budget",
    "deparameterize",
    "is_in_subtree",
    "makespan",
    "merge_group",
    "normalize_factors",
    "order_items",
    "partition",
    "up_key",
]
