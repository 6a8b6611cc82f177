import logging

from fastapi import HTTPException

from app.clients.pokedex_source_client import PokedexSourceClient
from app.clients.pokemon_store import PokemonStore
from app.core.filters import build_filters, build_sort
from app.core.merge import apply_full_update, apply_partial_update
from app.core.pagination import build_pagination, format_response
from app.core.projection import project_pokemon
from app.models import (
    Pokemon,
    PokemonCreate,
    PokemonListQuery,
    PokemonListResponse,
    PokemonUpdate,
    PublicPokemon,
    default_image_url,
)

logger = logging.getLogger(__name__)


class PokemonNotFoundError(HTTPException):
    def __init__(self, pokemon_id: int):
        super().__init__(status_code=404, detail=f"Pokemon {pokemon_id} not found.")


class PokemonService:
    # Service receives the store (and the dataset client for imports) via Dependency Injection
    def __init__(
        self,
        store: PokemonStore,
        source_client: PokedexSourceClient | None = None,
        assets_base_url: str = "/assets",
    ):
        self._store = store
        self._source_client = source_client
        self._assets_base_url = assets_base_url

    async def list_pokemon(self, query: PokemonListQuery) -> PokemonListResponse:
        """
        List endpoint: filter, sort and paginate, then project every record
        into the requested language.
        """
        filters = build_filters(query.filter_params(), query.lang)
        sort = build_sort(query.sort_by, query.order, query.lang)

        # One snapshot, so totalItems always agrees with the returned page
        total, records = await self._store.find_page(filters, sort, skip=query.skip, limit=query.limit)

        data = [project_pokemon(record, query.lang) for record in records]
        pagination = build_pagination(query.page, total, query.limit)
        return format_response(data, query.lang, pagination)

    async def get_pokemon(self, pokemon_id: int, lang: str | None = None) -> PublicPokemon:
        return project_pokemon(await self._get_existing(pokemon_id), lang)

    async def create_pokemon(self, payload: PokemonCreate, lang: str | None = None) -> PublicPokemon:
        """Assigns the next id and fills the image/cry defaults before saving."""
        pokemon_id = await self._store.next_id()
        pokemon = Pokemon(
            id=pokemon_id,
            name=payload.name,
            type=payload.type,
            base=payload.base,
            image=payload.image or default_image_url(self._assets_base_url, pokemon_id),
            cry=payload.cry or "",
        )
        await self._store.save(pokemon)
        logger.info(f"Created pokemon {pokemon_id} ({pokemon.name.english})")
        return project_pokemon(pokemon, lang)

    async def replace_pokemon(self, pokemon_id: int, payload: PokemonUpdate, lang: str | None = None) -> PublicPokemon:
        existing = await self._get_existing(pokemon_id)
        updated = await self._store.save(apply_full_update(existing, payload))
        logger.info(f"Replaced pokemon {pokemon_id}")
        return project_pokemon(updated, lang)

    async def update_pokemon(self, pokemon_id: int, payload: PokemonUpdate, lang: str | None = None) -> PublicPokemon:
        existing = await self._get_existing(pokemon_id)
        updated = await self._store.save(apply_partial_update(existing, payload))
        logger.info(f"Updated pokemon {pokemon_id}")
        return project_pokemon(updated, lang)

    async def delete_pokemon(self, pokemon_id: int, lang: str | None = None) -> PublicPokemon:
        """Deletes the record and echoes it back, projected."""
        existing = await self._get_existing(pokemon_id)
        await self._store.delete_one(pokemon_id)
        logger.info(f"Deleted pokemon {pokemon_id}")
        return project_pokemon(existing, lang)

    async def import_pokedex(self) -> int:
        """
        Seeds the store from the dataset source.

        Dataset ids are kept as-is, so a record already stored under the same id
        (including one created through the API) is overwritten. Overwritten ids
        are logged at WARNING.
        """
        if self._source_client is None:
            raise HTTPException(status_code=503, detail="No pokedex source configured.")

        pokedex = await self._source_client.fetch_pokedex()
        overwritten = sorted(await self._store.stored_ids() & {pokemon.id for pokemon in pokedex})
        if overwritten:
            logger.warning(f"Import overwrites {len(overwritten)} stored pokemon: {overwritten}")

        for pokemon in pokedex:
            await self._store.save(pokemon)

        # Imported ids bypass the counter, so move it past them
        await self._store.sync_id_counter()
        logger.info(f"Imported {len(pokedex)} pokemon")
        return len(pokedex)

    async def _get_existing(self, pokemon_id: int) -> Pokemon:
        pokemon = await self._store.find_one(pokemon_id)
        if pokemon is None:
            raise PokemonNotFoundError(pokemon_id)
        return pokemon
