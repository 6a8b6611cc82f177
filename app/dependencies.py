from fastapi import Depends, Request

from app.clients import PokedexSourceClient, PokemonStore
from app.config import Settings, get_settings
from app.services import PokemonService


# Both handles are created once in the app lifespan and kept on app.state
def get_pokemon_store(request: Request) -> PokemonStore:
    return request.app.state.pokemon_store


def get_source_client(request: Request) -> PokedexSourceClient:
    return request.app.state.source_client


def get_pokemon_service(
    store: PokemonStore = Depends(get_pokemon_store),
    source_client: PokedexSourceClient = Depends(get_source_client),
    settings: Settings = Depends(get_settings),
) -> PokemonService:
    return PokemonService(store=store, source_client=source_client, assets_base_url=settings.assets_base_url)
