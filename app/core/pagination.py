import math

from app.core.language import resolve_language
from app.models import PaginationMeta, PokemonListResponse, PublicPokemon


def build_pagination(page: int, total: int, limit: int) -> PaginationMeta:
    """Derives page metadata. Pages past the end are valid and simply have no next page."""
    total_pages = math.ceil(total / limit) if limit > 0 else 0

    return PaginationMeta(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


def format_response(
    data: list[PublicPokemon],
    lang: str | None,
    pagination: PaginationMeta | None = None,
) -> PokemonListResponse:
    return PokemonListResponse(data=data, language=resolve_language(lang), pagination=pagination)
