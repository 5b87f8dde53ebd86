"""
Tag service: deduplicated free-text tags for autocomplete and filtering
"""

import asyncio
import logging
from typing import Iterable, List

from app.models.tag import Tag, tag_key
from app.services.firebase_service import TAGS_COLLECTION, FirebaseService, firebase_service

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, firebase: FirebaseService = None):
        self.firebase = firebase or firebase_service

    async def list_all_tags(self) -> List[str]:
        """Return every known tag key"""
        try:
            return await self.firebase.list_document_ids(TAGS_COLLECTION)
        except Exception as e:
            logger.error("Error fetching tags: %s", e)
            return []

    async def sync_tags(self, tags: Iterable[str]) -> None:
        """
        Merge-write one record per tag, keyed by its lowercased text.

        usageCount is written as the literal 1 on every save, so the stored
        value does not count usages. Failures are logged and never raised.
        """
        records = {}
        for tag in tags or []:
            key = tag_key(tag)
            if key and key not in records:
                records[key] = Tag(key=key, name=tag.strip())
        if not records:
            return

        writes = [
            self.firebase.set_document(
                TAGS_COLLECTION,
                key,
                record.model_dump(by_alias=True, exclude={"key"}),
                merge=True,
            )
            for key, record in records.items()
        ]
        results = await asyncio.gather(*writes, return_exceptions=True)
        for key, result in zip(records, results):
            if isinstance(result, Exception):
                logger.error("Error syncing tag %r: %s", key, result)


tag_service = TagService()
