from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.core.language import DEFAULT_LANGUAGE, resolve_language

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


# Multilingual name block stored on every record (all four languages required)
class PokemonName(BaseModel):
    english: str = Field(min_length=1)
    japanese: str = Field(min_length=1)
    chinese: str = Field(min_length=1)
    french: str = Field(min_length=1)


# Stat names keep the capitalised keys used by the pokedex dataset
class BaseStats(BaseModel):
    HP: int
    Attack: int
    Defense: int
    SpecialAttack: int
    SpecialDefense: int
    Speed: int


# Model for the stored record (Internal Contract)
class Pokemon(BaseModel):
    id: int
    name: PokemonName
    type: list[str] = Field(min_length=1)
    base: BaseStats
    image: str
    cry: str = ""


# Model for the creation body (Public Endpoint: POST /pokemon)
class PokemonCreate(BaseModel):
    name: PokemonName
    type: list[str] = Field(min_length=1)
    base: BaseStats
    image: str | None = None
    cry: str | None = None


# Model for PUT/PATCH bodies. name/base stay loose dicts so the merge
# strategies decide which keys are honoured.
class PokemonUpdate(BaseModel):
    name: dict[str, str | None] | None = None
    type: list[str] | None = Field(default=None, min_length=1)
    base: dict[str, int] | None = None
    image: str | None = None
    cry: str | None = None


# Model for the projected record returned to clients
class PublicPokemon(BaseModel):
    id: int
    name: str | None
    type: list[str]
    base: BaseStats
    image: str
    cry: str = ""


class SortSpec(BaseModel):
    field: str = "id"
    descending: bool = False


class PaginationMeta(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_previous: bool


class PokemonListResponse(BaseModel):
    data: list[PublicPokemon]
    language: str
    pagination: PaginationMeta | None = None


class PokemonListQuery(BaseModel):
    """
    Query-string parameters for the list endpoint.

    Pagination values are coerced leniently: anything that is not a positive
    integer falls back to the default. Filter values are kept raw and parsed
    by the filter builder.
    """
    model_config = ConfigDict(populate_by_name=True)

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    lang: str = DEFAULT_LANGUAGE
    name: str | None = None
    type: list[str] | None = None
    min_hp: str | None = Field(default=None, alias="minHP")
    max_hp: str | None = Field(default=None, alias="maxHP")
    min_attack: str | None = Field(default=None, alias="minAttack")
    sort_by: str | None = Field(default=None, alias="sortBy")
    order: str | None = None

    @field_validator("page", mode="before")
    @classmethod
    def _coerce_page(cls, value: Any) -> int:
        return _positive_int_or(value, DEFAULT_PAGE)

    @field_validator("limit", mode="before")
    @classmethod
    def _coerce_limit(cls, value: Any) -> int:
        return _positive_int_or(value, DEFAULT_LIMIT)

    @field_validator("lang", mode="before")
    @classmethod
    def _resolve_lang(cls, value: Any) -> str:
        return resolve_language(value)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def filter_params(self) -> dict[str, Any]:
        """Raw filter parameters keyed by their query-string names."""
        return self.model_dump(
            by_alias=True,
            include={"name", "type", "min_hp", "max_hp", "min_attack"},
            exclude_none=True,
        )


def _positive_int_or(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def default_image_url(assets_base_url: str, pokemon_id: int) -> str:
    return f"{assets_base_url}/images/{int(pokemon_id):03d}.png"
