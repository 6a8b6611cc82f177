from .pokemon_service import PokemonService, PokemonNotFoundError

__all__ = ['PokemonService', 'PokemonNotFoundError']
