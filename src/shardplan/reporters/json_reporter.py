"""JSON reporter: serialises split plans for CI tooling.

The default document maps each factor (as a string) to its filter groups::

    {"2": [["A.B.C1"], ["A.B.C2", "A.D.C3"]]}

With durations enabled, each factor maps to partition objects and a
``coalescing`` summary is added.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from shardplan.sharding.plan import SplitPlan

logger = logging.getLogger(__name__)


class JSONReporter:
    """Generate JSON documents from a ``SplitPlan``."""

    def __init__(self, *, include_durations: bool = False) -> None:
        """Initialize the reporter.

        Args:
            include_durations: Emit per-partition durations (seconds) and the
                coalescing summary instead of bare filter lists.
        """
        self.include_durations = include_durations

    def generate(self, plan: SplitPlan, output_path: Path) -> Path:
        """Write the JSON document for *plan* to *output_path*."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.generate_string(plan) + "\n", encoding="utf-8")
        logger.info("JSON split plan written to %s", output_path)
        return output_path

    def generate_string(self, plan: SplitPlan) -> str:
        """Return the JSON document for *plan*."""
        return json.dumps(self.build(plan), indent=2, ensure_ascii=False)

    def build(self, plan: SplitPlan) -> dict[str, Any]:
        """Return the JSON-serialisable structure for *plan*."""
        if not self.include_durations:
            return {str(factor): plan.filters(factor) for factor in plan.factors}
        return _build_detailed(plan)


def _build_detailed(plan: SplitPlan) -> dict[str, Any]:
    coalescing = plan.coalescing
    return {
        "splits": {
            str(factor): [
                {
                    "index": p.index,
                    "duration_seconds": p.duration.total_seconds(),
                    "filters": list(p.keys),
                }
                for p in parts
            ]
            for factor, parts in plan.partitions.items()
        },
        "coalescing": {
            "budget": coalescing.budget,
            "original_count": coalescing.original_count,
            "final_count": coalescing.final_count,
            "rounds": coalescing.rounds,
            "budget_reached": coalescing.budget_reached,
        },
        "total_duration_seconds": plan.index.total.total_seconds(),
    }
