"""
Data access for the `clicks` time-series collection (the click-event log).

Writes are insert-only. Reads are scoped by a Mongo match query built by the
analytics layer and always order/group by the stored `created_at`, never by
insertion order.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from bson import ObjectId
from pymongo import DESCENDING

from schemas.models.click import ClickDoc


class ClickRepository:
    collection_name = "clicks"

    def __init__(self, db) -> None:
        self._col = db[self.collection_name]

    async def insert(self, click: ClickDoc) -> ObjectId:
        result = await self._col.insert_one(click.to_mongo())
        return result.inserted_id

    async def count(self, query: dict[str, Any]) -> int:
        return await self._col.count_documents(query)

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        cursor = await self._col.aggregate(pipeline)
        return await cursor.to_list(None)

    async def recent(
        self, query: dict[str, Any], limit: int
    ) -> list[ClickDoc]:
        cursor = (
            self._col.find(query)
            .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
            .limit(limit)
        )
        return [ClickDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def counts_by_link(
        self, link_ids: Iterable[ObjectId], since: Optional[Any] = None
    ) -> dict[ObjectId, int]:
        """Event counts per link id; links without events are absent."""
        ids = list(link_ids)
        if not ids:
            return {}
        match: dict[str, Any] = {"meta.link_id": {"$in": ids}}
        if since is not None:
            match["created_at"] = {"$gte": since}
        rows = await self.aggregate(
            [
                {"$match": match},
                {"$group": {"_id": "$meta.link_id", "count": {"$sum": 1}}},
            ]
        )
        return {row["_id"]: row["count"] for row in rows}
