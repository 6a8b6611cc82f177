import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.clients import PokedexSourceClient, PokemonStore
from app.config import get_settings
from app.dependencies import get_pokemon_service
from app.logging_config import configure_logging
from app.models import (
    PokemonCreate,
    PokemonListQuery,
    PokemonListResponse,
    PokemonUpdate,
    PublicPokemon,
)
from app.services.pokemon_service import PokemonService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pokemon", tags=["pokemon"])


# Endpoint 1: Paginated, filtered, sorted list
@router.get(
    "",
    response_model=PokemonListResponse,
    summary="Lists pokemon with filters, sorting and pagination",
)
async def list_pokemon(
    page: str | None = None,
    limit: str | None = None,
    lang: str | None = None,
    name: str | None = None,
    type: list[str] | None = Query(None),
    min_hp: str | None = Query(None, alias="minHP"),
    max_hp: str | None = Query(None, alias="maxHP"),
    min_attack: str | None = Query(None, alias="minAttack"),
    sort_by: str | None = Query(None, alias="sortBy"),
    order: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    """
    Name search only looks at the names of the requested language (`lang`).
    Unknown languages fall back to english; unusable numbers are ignored.
    """
    query = PokemonListQuery(
        page=page,
        limit=limit,
        lang=lang,
        name=name,
        type=type,
        min_hp=min_hp,
        max_hp=max_hp,
        min_attack=min_attack,
        sort_by=sort_by,
        order=order,
    )
    return await service.list_pokemon(query)


# Endpoint 2: Bulk import from the public pokedex dataset
@router.post(
    "/import",
    summary="Seeds the store from the configured pokedex dataset, overwriting stored records that share a dataset id",
)
async def import_pokedex(service: PokemonService = Depends(get_pokemon_service)):
    # Dataset failures surface as 503 through APIClientError
    return {"imported": await service.import_pokedex()}


# Endpoint 3: Single record
@router.get("/{pokemon_id}", response_model=PublicPokemon, summary="Returns one pokemon")
async def get_pokemon(
    pokemon_id: int,
    lang: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.get_pokemon(pokemon_id, lang)


# Endpoint 4: Create
@router.post(
    "",
    response_model=PublicPokemon,
    status_code=status.HTTP_201_CREATED,
    summary="Creates a pokemon with the next free id",
)
async def create_pokemon(
    payload: PokemonCreate,
    lang: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.create_pokemon(payload, lang)


# Endpoint 5: Full update (truthy names / present stats replace existing values)
@router.put("/{pokemon_id}", response_model=PublicPokemon, summary="Replaces a pokemon")
async def replace_pokemon(
    pokemon_id: int,
    payload: PokemonUpdate,
    lang: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.replace_pokemon(pokemon_id, payload, lang)


# Endpoint 6: Partial update (only known keys present in the body are written)
@router.patch("/{pokemon_id}", response_model=PublicPokemon, summary="Updates part of a pokemon")
async def update_pokemon(
    pokemon_id: int,
    payload: PokemonUpdate,
    lang: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.update_pokemon(pokemon_id, payload, lang)


# Endpoint 7: Delete, echoing the removed record
@router.delete("/{pokemon_id}", response_model=PublicPokemon, summary="Deletes a pokemon")
async def delete_pokemon(
    pokemon_id: int,
    lang: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.delete_pokemon(pokemon_id, lang)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Returns 400 with one human-readable message per invalid field."""
    errors = []
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        location = ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0])
        errors.append(f"{location}: {error['msg']}")

    logger.info(f"Rejected request to {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )


def create_app(
    store: PokemonStore | None = None,
    source_client: PokedexSourceClient | None = None,
) -> FastAPI:
    """Builds the API. Tests pass their own store/source client; otherwise both come from settings."""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        app.state.pokemon_store = store or PokemonStore.from_url(settings.redis_url)
        app.state.source_client = source_client or PokedexSourceClient(
            settings.pokedex_source_url, settings.assets_base_url
        )
        await app.state.pokemon_store.init()
        logger.info("Pokedex API started")
        yield
        await app.state.source_client.close()
        await app.state.pokemon_store.close()

    app = FastAPI(
        title="Pokedex API",
        description="CRUD over pokemon records with multilingual names, filtering, sorting and pagination.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)

    @app.get("/health", summary="Liveness probe")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
