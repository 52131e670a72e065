"""
Aggregation strategies over the click-event log.

Each strategy builds a MongoDB aggregation pipeline for an already-scoped
match query and formats the raw rows into the response shape. Grouping is
always on stored fields (never on insertion order) and formatting re-sorts
explicitly, so results do not depend on how the server returns rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from shared.referrer import DIRECT_REFERRER, referrer_host

UNKNOWN_LABEL = "Unknown"

GroupedCounts = list[tuple[str, int]]


def rank_counts(counts: dict[str, int], top_n: Optional[int] = None) -> GroupedCounts:
    """Sort ``label -> count`` by count descending (label ascending on ties)."""
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked if top_n is None else ranked[:top_n]


class AggregationStrategy(ABC):
    """Abstract base class for aggregation strategies"""

    @abstractmethod
    def build_pipeline(self, base_query: dict[str, Any]) -> list[dict[str, Any]]:
        """Build aggregation pipeline for this strategy"""

    @abstractmethod
    def format_results(self, results: list[dict[str, Any]]) -> Any:
        """Format the aggregation results"""


class DailyAggregationStrategy(AggregationStrategy):
    """Click counts per UTC calendar day of ``created_at``.

    The result is sparse: days without events are absent.
    """

    date_format = "%Y-%m-%d"

    def build_pipeline(self, base_query: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            {"$match": base_query},
            {
                "$group": {
                    # $dateToString defaults to UTC
                    "_id": {
                        "$dateToString": {
                            "format": self.date_format,
                            "date": "$created_at",
                        }
                    },
                    "count": {"$sum": 1},
                }
            },
            {"$sort": {"_id": 1}},
        ]

    def format_results(self, results: list[dict[str, Any]]) -> dict[str, int]:
        daily: dict[str, int] = {}
        for row in sorted(
            (r for r in results if r.get("_id")), key=lambda r: r["_id"]
        ):
            daily[row["_id"]] = daily.get(row["_id"], 0) + int(row.get("count", 0))
        return daily


class DimensionAggregationStrategy(AggregationStrategy):
    """Top-N click counts grouped by one stored field.

    Missing/null/empty values are counted under *missing_label*.
    """

    def __init__(
        self,
        field: str,
        top_n: int = 10,
        missing_label: str = UNKNOWN_LABEL,
    ) -> None:
        self.field = field
        self.top_n = top_n
        self.missing_label = missing_label

    def _group_key(self) -> dict[str, Any]:
        # null, missing and "" share one bucket before $sort/$limit
        value = f"${self.field}"
        return {
            "$cond": {
                "if": {"$eq": [{"$ifNull": [value, ""]}, ""]},
                "then": self.missing_label,
                "else": value,
            }
        }

    def build_pipeline(self, base_query: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            {"$match": base_query},
            {
                "$group": {
                    "_id": self._group_key(),
                    "count": {"$sum": 1},
                }
            },
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": self.top_n},
        ]

    def label_for(self, raw: Any) -> str:
        if raw is None or raw == "":
            return self.missing_label
        return str(raw)

    def format_results(self, results: list[dict[str, Any]]) -> GroupedCounts:
        counts: dict[str, int] = {}
        for row in results:
            label = self.label_for(row.get("_id"))
            counts[label] = counts.get(label, 0) + int(row.get("count", 0))
        return rank_counts(counts, self.top_n)


class ReferrerAggregationStrategy(DimensionAggregationStrategy):
    """Top-N referrer hosts.

    Rows are grouped by the raw ``referer`` in the database and reduced to
    hostnames here, so the pipeline must not truncate before the merge.
    """

    def __init__(
        self,
        top_n: int = 10,
        host_of: Callable[[Optional[str]], str] = referrer_host,
    ) -> None:
        super().__init__("referer", top_n=top_n, missing_label=DIRECT_REFERRER)
        self._host_of = host_of

    def build_pipeline(self, base_query: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            {"$match": base_query},
            {"$group": {"_id": "$referer", "count": {"$sum": 1}}},
        ]

    def label_for(self, raw: Any) -> str:
        return self._host_of(raw if raw else None)


class UniqueClicksStrategy(AggregationStrategy):
    """Distinct non-null client IPs: a coarse unique-visitor approximation."""

    def build_pipeline(self, base_query: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            {"$match": {**base_query, "ip": {"$ne": None}}},
            {"$group": {"_id": "$ip"}},
            {"$group": {"_id": None, "unique": {"$sum": 1}}},
        ]

    def format_results(self, results: list[dict[str, Any]]) -> int:
        if not results:
            return 0
        return int(results[0].get("unique", 0))


class AggregationStrategyFactory:
    """Creates the strategy for a named dimension."""

    _fields = {
        "country": "country",
        "device": "device",
        "browser": "browser",
        "os": "os",
    }

    @classmethod
    def create(cls, dimension: str, top_n: int = 10) -> AggregationStrategy:
        if dimension == "day":
            return DailyAggregationStrategy()
        if dimension == "referrer":
            return ReferrerAggregationStrategy(top_n=top_n)
        if dimension == "unique":
            return UniqueClicksStrategy()
        field = cls._fields.get(dimension)
        if field is None:
            raise ValueError(f"Unsupported aggregation dimension: {dimension}")
        return DimensionAggregationStrategy(field, top_n=top_n)
