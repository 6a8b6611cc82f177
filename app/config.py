import os
from functools import lru_cache

from pydantic import BaseModel

DEFAULT_POKEDEX_SOURCE_URL = (
    "https://raw.githubusercontent.com/Purukitto/pokemon-data.json/master/pokedex.json"
)


class Settings(BaseModel):
    redis_url: str = "redis://localhost:6379"
    pokedex_source_url: str = DEFAULT_POKEDEX_SOURCE_URL
    assets_base_url: str = "/assets"
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Reads settings from the environment once per process."""
    return Settings(
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
        pokedex_source_url=os.getenv("POKEDEX_SOURCE_URL", DEFAULT_POKEDEX_SOURCE_URL),
        assets_base_url=os.getenv("ASSETS_BASE_URL", "/assets").rstrip("/"),
        cors_origins=[
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
            if origin.strip()
        ],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
