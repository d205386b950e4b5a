"""MongoDB TokenStore backed by pymongo's async client.

Collection layout (`access-tokens`):
    _id           token id (application generated)
    owner_id      opaque owner identifier
    name, scopes, secret_hash, created_at, last_used_at

Every PyMongoError is re-raised as StoreUnavailableError. Writes are never
retried here; read retries are left to the caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import DuplicateTokenIdError, StoreUnavailableError
from schemas.models.access_token import AccessTokenDoc
from shared.logging import get_logger

log = get_logger(__name__)

COLLECTION_NAME = "access-tokens"


def _to_doc(data: Optional[dict]) -> Optional[AccessTokenDoc]:
    return AccessTokenDoc.from_mongo(data)  # type: ignore[return-value]


class MongoTokenStore:
    def __init__(self, collection: Any, *, transactional: bool = False) -> None:
        self._col = collection
        self._transactional = transactional

    @classmethod
    def from_database(cls, db: Any, *, transactional: bool = False) -> "MongoTokenStore":
        return cls(db[COLLECTION_NAME], transactional=transactional)

    async def ensure_indexes(self) -> None:
        try:
            await self._col.create_index(
                [("owner_id", ASCENDING), ("created_at", ASCENDING)]
            )
        except PyMongoError as e:
            log.error("token_store_index_failed", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e

    async def create(self, token: AccessTokenDoc) -> None:
        try:
            await self._col.insert_one(token.to_mongo())
        except DuplicateKeyError as e:
            raise DuplicateTokenIdError("token id already exists") from e
        except PyMongoError as e:
            log.error("token_store_write_failed", op="create", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e

    async def find_by_id(self, token_id: str) -> Optional[AccessTokenDoc]:
        return await self._find_one({"_id": token_id})

    async def find_by_owner_and_id(
        self, owner_id: str, token_id: str
    ) -> Optional[AccessTokenDoc]:
        return await self._find_one({"_id": token_id, "owner_id": owner_id})

    async def list_by_owner(self, owner_id: str) -> list[AccessTokenDoc]:
        try:
            cursor = self._col.find({"owner_id": owner_id}).sort(
                [("created_at", ASCENDING), ("_id", ASCENDING)]
            )
            rows = await cursor.to_list(length=None)
        except PyMongoError as e:
            log.error("token_store_read_failed", op="list_by_owner", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e
        return [_to_doc(row) for row in rows]

    async def count_by_owner(self, owner_id: str) -> int:
        try:
            return await self._col.count_documents({"owner_id": owner_id})
        except PyMongoError as e:
            log.error("token_store_read_failed", op="count_by_owner", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e

    async def delete_by_id(self, token_id: str) -> bool:
        try:
            result = await self._col.delete_one({"_id": token_id})
        except PyMongoError as e:
            log.error("token_store_write_failed", op="delete_by_id", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e
        return result.deleted_count == 1

    async def delete_all_by_owner(self, owner_id: str) -> int:
        try:
            if self._transactional:
                result = await self._delete_all_in_transaction(owner_id)
            else:
                result = await self._col.delete_many({"owner_id": owner_id})
        except PyMongoError as e:
            log.error(
                "token_store_write_failed", op="delete_all_by_owner", error=str(e)
            )
            raise StoreUnavailableError("token store unavailable") from e
        return result.deleted_count

    async def _delete_all_in_transaction(self, owner_id: str):
        client = self._col.database.client
        async with client.start_session() as session:
            async with await session.start_transaction():
                return await self._col.delete_many(
                    {"owner_id": owner_id}, session=session
                )

    async def update_name(
        self, owner_id: str, token_id: str, name: str
    ) -> Optional[AccessTokenDoc]:
        try:
            row = await self._col.find_one_and_update(
                {"_id": token_id, "owner_id": owner_id},
                {"$set": {"name": name}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            log.error("token_store_write_failed", op="update_name", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e
        return _to_doc(row)

    async def touch_last_used(self, token_id: str, used_at: datetime) -> None:
        # update_one on a deleted id matches nothing, so revocation wins
        try:
            await self._col.update_one(
                {"_id": token_id}, {"$set": {"last_used_at": used_at}}
            )
        except PyMongoError as e:
            log.error("token_store_write_failed", op="touch_last_used", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e

    async def ping(self) -> bool:
        try:
            await self._col.database.client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    async def _find_one(self, query: dict) -> Optional[AccessTokenDoc]:
        try:
            row = await self._col.find_one(query)
        except PyMongoError as e:
            log.error("token_store_read_failed", op="find_one", error=str(e))
            raise StoreUnavailableError("token store unavailable") from e
        return _to_doc(row)
