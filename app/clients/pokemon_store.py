import json
import logging
import re
from typing import Any

import redis.asyncio as aioredis
from fastapi import HTTPException
from pydantic import ValidationError
from redis.exceptions import RedisError

from app.models import Pokemon, SortSpec

logger = logging.getLogger(__name__)


# Any failure talking to Redis (or reading back a corrupt document) surfaces as a 500
class StorageError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=f"Storage Error: {detail}")


class PokemonStore:
    """
    Document store for pokemon records, backed by Redis.

    Each record lives as a JSON string under `pokemon:record:<id>`; the sorted
    set `pokemon:ids` indexes the ids and `pokemon:next_id` is the id counter.
    Filters use the operators produced by `app.core.filters.build_filters`
    and are evaluated in-process.
    """
    RECORD_PREFIX = "pokemon:record:"
    IDS_KEY = "pokemon:ids"
    COUNTER_KEY = "pokemon:next_id"

    def __init__(self, redis_client: aioredis.Redis):
        self.redis = redis_client

    @classmethod
    def from_url(cls, redis_url: str) -> "PokemonStore":
        return cls(aioredis.from_url(redis_url, decode_responses=True))

    async def init(self) -> None:
        """Checks the connection and aligns the id counter with stored records (call on startup)."""
        try:
            await self.redis.ping()
        except RedisError as e:
            logger.error(f"Redis unavailable at startup: {e}")
            raise StorageError(f"Redis unavailable: {e}")
        await self.sync_id_counter()

    async def close(self) -> None:
        """Close Redis connection (call on app shutdown)."""
        await self.redis.aclose()

    # --- Storage contract ---

    async def count(self, filters: dict[str, dict[str, Any]]) -> int:
        records = await self._load_all()
        return sum(1 for record in records if matches(record, filters))

    async def find(
        self,
        filters: dict[str, dict[str, Any]],
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Pokemon]:
        _, page = await self.find_page(filters, sort, skip, limit)
        return page

    async def find_page(
        self,
        filters: dict[str, dict[str, Any]],
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> tuple[int, list[Pokemon]]:
        """Returns the match count and one page of matches from a single snapshot."""
        sort = sort or SortSpec()
        records = [record for record in await self._load_all() if matches(record, filters)]
        # Records arrive in ascending id order and sort() is stable, so ties keep that order
        records.sort(key=lambda record: _sort_key(record, sort.field), reverse=sort.descending)

        end = None if limit is None else skip + limit
        return len(records), [self._to_pokemon(record) for record in records[skip:end]]

    async def find_one(self, pokemon_id: int) -> Pokemon | None:
        try:
            raw = await self.redis.get(self._record_key(pokemon_id))
        except RedisError as e:
            logger.error(f"Redis error reading pokemon {pokemon_id}: {e}")
            raise StorageError(str(e))

        if raw is None:
            logger.info(f"Pokemon {pokemon_id} not in store")
            return None
        return self._to_pokemon(self._decode(raw))

    async def save(self, pokemon: Pokemon) -> Pokemon:
        """Upserts a record by id."""
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(self._record_key(pokemon.id), pokemon.model_dump_json())
                pipe.zadd(self.IDS_KEY, {str(pokemon.id): pokemon.id})
                await pipe.execute()
        except RedisError as e:
            logger.error(f"Redis error saving pokemon {pokemon.id}: {e}")
            raise StorageError(str(e))
        return pokemon

    async def delete_one(self, pokemon_id: int) -> None:
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.delete(self._record_key(pokemon_id))
                pipe.zrem(self.IDS_KEY, str(pokemon_id))
                await pipe.execute()
        except RedisError as e:
            logger.error(f"Redis error deleting pokemon {pokemon_id}: {e}")
            raise StorageError(str(e))

    # --- Id assignment ---

    async def next_id(self) -> int:
        """Atomically reserves the next id (INCR), so concurrent creates never share one."""
        try:
            return int(await self.redis.incr(self.COUNTER_KEY))
        except RedisError as e:
            raise StorageError(str(e))

    async def sync_id_counter(self) -> int:
        """
        Raises the id counter to the highest stored id.

        Only used at startup and after bulk imports, where there is a single writer.
        """
        try:
            highest = await self.redis.zrevrange(self.IDS_KEY, 0, 0, withscores=True)
            max_id = int(highest[0][1]) if highest else 0
            current = int(await self.redis.get(self.COUNTER_KEY) or 0)
            if max_id > current:
                await self.redis.set(self.COUNTER_KEY, max_id)
                current = max_id
        except RedisError as e:
            raise StorageError(str(e))
        logger.info(f"Id counter at {current}")
        return current

    async def stored_ids(self) -> set[int]:
        try:
            return {int(pokemon_id) for pokemon_id in await self.redis.zrange(self.IDS_KEY, 0, -1)}
        except RedisError as e:
            raise StorageError(str(e))

    async def clear(self) -> None:
        """Remove every pokemon key. Useful for testing."""
        keys = await self.redis.keys("pokemon:*")
        if keys:
            await self.redis.delete(*keys)

    # --- Internals ---

    def _record_key(self, pokemon_id: int) -> str:
        return f"{self.RECORD_PREFIX}{pokemon_id}"

    async def _load_all(self) -> list[dict]:
        try:
            ids = await self.redis.zrange(self.IDS_KEY, 0, -1)
            if not ids:
                return []
            raw_records = await self.redis.mget([self._record_key(pokemon_id) for pokemon_id in ids])
        except RedisError as e:
            logger.error(f"Redis error loading pokemon: {e}")
            raise StorageError(str(e))
        # A record can vanish between ZRANGE and MGET when deleted concurrently
        return [self._decode(raw) for raw in raw_records if raw is not None]

    @staticmethod
    def _decode(raw: str) -> dict:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt pokemon document: {e}")
            raise StorageError("Stored pokemon document is not valid JSON.")

    @staticmethod
    def _to_pokemon(record: dict) -> Pokemon:
        try:
            return Pokemon.model_validate(record)
        except ValidationError as e:
            logger.error(f"Stored pokemon {record.get('id')} does not match the schema: {e}")
            raise StorageError(f"Stored pokemon {record.get('id')} does not match the schema.")


def get_path(document: dict, path: str) -> Any:
    """Resolves a dotted path such as `base.HP`; missing segments give None."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def matches(document: dict, filters: dict[str, dict[str, Any]]) -> bool:
    return all(_matches_condition(get_path(document, path), condition) for path, condition in filters.items())


def _matches_condition(value: Any, condition: Any) -> bool:
    if not isinstance(condition, dict):
        return value == condition

    for operator, operand in condition.items():
        if operator == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or re.search(operand, value, flags) is None:
                return False
        elif operator == "$options":
            continue
        elif operator == "$in":
            # Array fields match when any element is in the operand list
            values = value if isinstance(value, list) else [value]
            if not any(item in operand for item in values):
                return False
        elif operator == "$gte":
            if value is None or value < operand:
                return False
        elif operator == "$lte":
            if value is None or value > operand:
                return False
        else:
            raise ValueError(f"Unsupported filter operator: {operator}")
    return True


def _sort_key(record: dict, field: str) -> tuple:
    value = get_path(record, field)
    # Missing values sort first, as in a document store
    return (value is not None, value if value is not None else 0)
