"""
Collection and index bootstrap, run once at startup.
"""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import CollectionInvalid, PyMongoError

from repositories.click_repository import ClickRepository
from repositories.link_repository import LinkRepository
from shared.logging import get_logger

log = get_logger(__name__)


async def ensure_indexes(db) -> None:
    """Create the clicks time-series collection and all indexes.

    Failures are logged and never abort startup; the unique slug index is
    what makes concurrent creates with the same slug race safely, so a
    failure there is logged at error level.
    """
    links = db[LinkRepository.collection_name]
    clicks = db[ClickRepository.collection_name]

    try:
        await links.create_index([("slug", ASCENDING)], unique=True)
    except PyMongoError as e:
        log.error("index_creation_failed", collection="links", index="slug", error=str(e))

    try:
        await links.create_index([("owner_id", ASCENDING), ("created_at", DESCENDING)])
    except PyMongoError as e:
        log.warning("index_creation_failed", collection="links", error=str(e))

    try:
        await db.create_collection(
            ClickRepository.collection_name,
            timeseries={
                "timeField": "created_at",
                "metaField": "meta",
                "granularity": "seconds",
            },
        )
    except CollectionInvalid:
        pass  # already exists
    except PyMongoError as e:
        log.warning("timeseries_collection_creation_failed", error=str(e))

    try:
        await clicks.create_index([("meta.link_id", ASCENDING), ("created_at", DESCENDING)])
        await clicks.create_index([("meta.owner_id", ASCENDING), ("created_at", DESCENDING)])
        await clicks.create_index([("created_at", DESCENDING)])
    except PyMongoError as e:
        log.warning("index_creation_failed", collection="clicks", error=str(e))
