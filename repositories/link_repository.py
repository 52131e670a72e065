"""
Data access for the `links` collection (the slug registry).

Lookups have no side effects. Slug uniqueness is guaranteed by the unique
index on `slug`; insert/update let `DuplicateKeyError` propagate so the
service layer can report the conflict.
"""

from __future__ import annotations

from typing import Any, Optional

from pymongo import DESCENDING, ReturnDocument

from schemas.models.base import parse_object_id
from schemas.models.link import LinkDoc


class LinkRepository:
    collection_name = "links"

    def __init__(self, db) -> None:
        self._col = db[self.collection_name]

    async def find_by_slug(self, slug: str) -> Optional[LinkDoc]:
        """Resolve an already-normalized slug."""
        doc = await self._col.find_one({"slug": slug})
        return LinkDoc.from_mongo(doc)

    async def find_by_id(self, link_id: Any) -> Optional[LinkDoc]:
        oid = parse_object_id(link_id)
        if oid is None:
            return None
        doc = await self._col.find_one({"_id": oid})
        return LinkDoc.from_mongo(doc)

    async def slug_exists(self, slug: str, exclude_id: Any = None) -> bool:
        query: dict[str, Any] = {"slug": slug}
        oid = parse_object_id(exclude_id)
        if oid is not None:
            query["_id"] = {"$ne": oid}
        return await self._col.find_one(query, {"_id": 1}) is not None

    async def insert(self, link: LinkDoc) -> LinkDoc:
        result = await self._col.insert_one(link.to_mongo())
        return link.model_copy(update={"id": result.inserted_id})

    async def update(self, link_id: Any, fields: dict[str, Any]) -> Optional[LinkDoc]:
        oid = parse_object_id(link_id)
        if oid is None:
            return None
        doc = await self._col.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return LinkDoc.from_mongo(doc)

    async def delete(self, link_id: Any) -> bool:
        oid = parse_object_id(link_id)
        if oid is None:
            return False
        result = await self._col.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def find_all(self, owner_id: Optional[str] = None) -> list[LinkDoc]:
        """All links, or those of one owner, newest first."""
        query = {} if owner_id is None else {"owner_id": owner_id}
        cursor = self._col.find(query).sort(
            [("created_at", DESCENDING), ("_id", DESCENDING)]
        )
        return [LinkDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def count(self, owner_id: Optional[str] = None) -> int:
        query = {} if owner_id is None else {"owner_id": owner_id}
        return await self._col.count_documents(query)
