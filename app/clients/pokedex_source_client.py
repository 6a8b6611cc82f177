import logging

import httpx
from fastapi import HTTPException
from pydantic import ValidationError

from app.models import Pokemon, default_image_url

logger = logging.getLogger(__name__)

# Dataset stat keys -> record stat keys
STAT_KEYS = {
    "HP": "HP",
    "Attack": "Attack",
    "Defense": "Defense",
    "Sp. Attack": "SpecialAttack",
    "Sp. Defense": "SpecialDefense",
    "Speed": "Speed",
}


# Define a custom exception for upstream dataset errors (Mapped to 503)
class APIClientError(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=f"External API Error: {detail}")


class PokedexSourceClient:
    """Downloads a public pokedex dataset used to seed the store."""

    def __init__(self, source_url: str, assets_base_url: str = "/assets"):
        self.source_url = source_url
        self.assets_base_url = assets_base_url
        self.client = httpx.AsyncClient(timeout=10.0)

    async def _fetch_dataset(self) -> list:
        """Internal method to fetch the raw dataset with error handling."""
        logger.info(f"Fetching pokedex dataset from {self.source_url}")
        try:
            response = await self.client.get(self.source_url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise APIClientError(status_code=503, detail=f"Pokedex source failed with status {e.response.status_code}")
        except httpx.RequestError as e:
            raise APIClientError(status_code=503, detail=f"Pokedex source network error: {str(e)}")
        except ValueError:
            logger.error("Pokedex source returned a non-JSON body.")
            raise APIClientError(status_code=503, detail="Pokedex source returned an unexpected response format.")

        if not isinstance(data, list):
            raise APIClientError(status_code=503, detail="Pokedex source returned an unexpected response format.")
        return data

    async def fetch_pokedex(self) -> list[Pokemon]:
        """Fetches the dataset and maps every usable entry onto a Pokemon record."""
        entries = await self._fetch_dataset()

        pokedex = []
        for entry in entries:
            pokemon = self._to_pokemon(entry)
            if pokemon is not None:
                pokedex.append(pokemon)

        logger.info(f"Mapped {len(pokedex)} of {len(entries)} dataset entries")
        return pokedex

    def _to_pokemon(self, entry: dict) -> Pokemon | None:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping malformed dataset entry: {entry!r}")
            return None

        raw_base = entry.get("base") or {}
        image = entry.get("image")
        if isinstance(image, dict):
            image = image.get("hires") or image.get("thumbnail")

        try:
            return Pokemon(
                id=entry["id"],
                name=entry.get("name"),
                type=entry.get("type") or [],
                base={record_key: raw_base.get(dataset_key) for dataset_key, record_key in STAT_KEYS.items()},
                image=image or default_image_url(self.assets_base_url, entry["id"]),
            )
        except (KeyError, TypeError, ValidationError) as e:
            # Recent dataset entries lack stats, so they cannot be stored yet
            logger.warning(f"Skipping dataset entry {entry.get('id')}: {e}")
            return None

    async def close(self):
        """Close the HTTP client (call on app shutdown)."""
        await self.client.aclose()
