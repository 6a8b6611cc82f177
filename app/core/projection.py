from app.core.language import resolve_language
from app.models import Pokemon, PublicPokemon


def project_pokemon(pokemon: Pokemon, lang: str | None) -> PublicPokemon:
    """Selects the name for the resolved language; every other field passes through."""
    selected_lang = resolve_language(lang)

    return PublicPokemon(
        id=pokemon.id,
        name=getattr(pokemon.name, selected_lang),
        type=list(pokemon.type),
        base=pokemon.base.model_copy(),
        image=pokemon.image,
        cry=pokemon.cry,
    )
