"""Client modules for storage and external API communication."""
from .pokemon_store import PokemonStore, StorageError
from .pokedex_source_client import PokedexSourceClient, APIClientError

__all__ = [
    'PokemonStore',
    'StorageError',
    'PokedexSourceClient',
    'APIClientError'
]
